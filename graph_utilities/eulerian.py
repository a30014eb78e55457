from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from graph_utilities.connect_normalize import is_connected, odd_degree_nodes
from graph_utilities.errors import GraphDisconnectedError, GraphInvariantError, NotEulerianError
from graph_utilities.multigraph import Edge, Graph


logger = logging.getLogger(__name__)


def _trail_start(G: Graph, start: Optional[int]) -> int:
    """Validate the trail preconditions and pick the start node."""
    if G.directed:
        raise NotEulerianError("Eulerian trails are only built on undirected graphs")
    if not is_connected(G):
        raise GraphDisconnectedError("an Eulerian trail needs a connected graph")

    odd = odd_degree_nodes(G)
    if len(odd) % 2 != 0:
        raise GraphInvariantError(f"odd number of odd-degree nodes: {odd}")
    if len(odd) > 2:
        raise NotEulerianError(f"{len(odd)} odd-degree nodes, at most 2 allowed: {odd}")

    if start is None:
        return odd[0] if odd else G.smallest_node_id()
    if not G.has_node(start):
        raise ValueError(f"start node {start} is not in the graph")
    if odd and start not in odd:
        raise NotEulerianError(f"a semi-Eulerian trail must start at one of {odd}, not {start}")
    return start


def eulerian_trail_edges(G: Graph, start: Optional[int] = None) -> List[Edge]:
    """
    Return the edges of an Eulerian circuit (all degrees even) or trail
    (exactly two odd nodes), oriented in walking order.

    Hierholzer splicing on a private copy of G, with an explicit stack:
    walk from the node on top consuming any remaining edge; once the top
    node has nothing left it is complete and gets popped onto the result.
    Every node of the walk that still has edges starts a sub-trail which
    ends up spliced in its place. G is never modified.
    """
    if G.number_of_nodes() == 0:
        return []
    first = _trail_start(G, start)

    work = G.copy()
    stack: List[Tuple[int, Optional[Edge]]] = [(first, None)]
    trail: List[Edge] = []
    while stack:
        u, arrived_by = stack[-1]
        remaining = work.incident_edges(u)
        if remaining:
            e = remaining[0]
            if not work.discard(e):
                raise GraphInvariantError(f"could not consume edge {e}")
            stack.append((e.dst, e))
        else:
            stack.pop()
            if arrived_by is not None:
                trail.append(arrived_by)
    trail.reverse()

    if len(trail) != G.number_of_edges():
        raise GraphInvariantError(
            f"trail covers {len(trail)} of {G.number_of_edges()} edges"
        )
    logger.debug("eulerian trail from %d: %d edges", first, len(trail))
    return trail


def eulerian_trail(G: Graph, start: Optional[int] = None) -> List[int]:
    """Node sequence of ``eulerian_trail_edges``; length is edge count + 1."""
    if G.number_of_nodes() == 0:
        return []
    edges = eulerian_trail_edges(G, start)
    first = edges[0].src if edges else _trail_start(G, start)
    return [first] + [e.dst for e in edges]
