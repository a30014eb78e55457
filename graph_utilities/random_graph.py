from __future__ import annotations

import random
from typing import Optional, Tuple

from graph_utilities.connect_normalize import connected_components, odd_degree_nodes
from graph_utilities.multigraph import Graph


def _draw_weight(rng: random.Random, weighted: bool, weight_range: Tuple[int, int]) -> Optional[int]:
    return rng.randint(*weight_range) if weighted else None


def random_graph(
    n: int,
    p: float = 0.2,
    seed: Optional[int] = None,
    weighted: bool = True,
    weight_range: Tuple[int, int] = (1, 10),
    ensure_connected: bool = True,
    directed: bool = False,
) -> Graph:
    """
    Return a Graph on nodes 1..n where each pair is joined with probability p.

    Weights are integers drawn from weight_range (inclusive); with
    weighted=False the edges are unweighted. With ensure_connected the
    components are bridged by one edge between random representatives of
    consecutive components.
    """
    rng = random.Random(seed)
    G = Graph(directed=directed, name=f"random_{n}")
    for i in range(1, n + 1):
        G.add_node(i)

    # Add random edges
    for i in range(1, n + 1):
        for j in range(i + 1, n + 1):
            if rng.random() < p:
                G.add_edge(i, j, _draw_weight(rng, weighted, weight_range))

    # Ensure connectivity
    if ensure_connected and n > 0:
        comps = connected_components(G)
        if len(comps) > 1:
            reps = [rng.choice(sorted(c)) for c in comps]
            for a, b in zip(reps, reps[1:]):
                G.add_edge(a, b, _draw_weight(rng, weighted, weight_range))

    return G


def random_eulerian(
    n: int,
    p: float = 0.2,
    seed: Optional[int] = None,
    weighted: bool = True,
    weight_range: Tuple[int, int] = (1, 10),
) -> Graph:
    """
    Generate a connected random graph and make every degree even by joining
    the odd vertices two by two with new edges.

    The store is a multigraph, so the new edge may run parallel to an
    existing one; no pivot search is needed.
    """
    rng = random.Random(seed)

    # 1) build base connected graph
    G = random_graph(n, p=p, seed=rng.randrange(2**32), weighted=weighted,
                     weight_range=weight_range, ensure_connected=True)

    # 2) make the graph Eulerian (all degrees even)
    odd = odd_degree_nodes(G)
    rng.shuffle(odd)
    for u, v in zip(odd[::2], odd[1::2]):
        G.add_edge(u, v, _draw_weight(rng, weighted, weight_range))

    # sanity check: all degrees even
    odd_after = odd_degree_nodes(G)
    if odd_after:
        # Shouldn't happen; raise if it does
        raise RuntimeError(f"Failed to make graph Eulerian; odd vertices remain: {odd_after}")

    G.name = f"eulerian_{n}"
    return G
