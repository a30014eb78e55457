from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from graph_utilities.cfg import CFG
from graph_utilities.connect_normalize import is_connected, odd_degree_nodes
from graph_utilities.dot_graph import graph_to_dot
from graph_utilities.errors import GraphInvariantError
from graph_utilities.eulerian import eulerian_trail_edges
from graph_utilities.matching import Matching, exhaustive_matching, random_matching
from graph_utilities.multigraph import Edge, Graph
from graph_utilities.shortest_paths import PairTable, floyd_warshall


logger = logging.getLogger(__name__)

Cost = Union[int, float]
PathWithEdges = Tuple[List[int], List[Edge], Cost]


class Classification(str, Enum):
    DISCONNECTED = "disconnected"
    EULERIAN = "eulerian"
    SEMI_EULERIAN = "semi-eulerian"
    NON_EULERIAN = "non-eulerian"


@dataclass
class PostmanRoute:
    """Result of one ``chinese_postman_route`` call."""

    classification: Classification
    walk: List[int] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    extra_cost: Cost = 0
    total_cost: Cost = 0
    matching: Optional[Matching] = None

    @property
    def has_route(self) -> bool:
        return self.classification is not Classification.DISCONNECTED

    @property
    def label(self) -> str:
        """Every traversed edge once with its weight, then total and extra cost."""
        if not self.has_route:
            return "graph is disconnected: no route"
        costs = f"total cost: {self.total_cost}; extra cost: {self.extra_cost}"
        if not self.edges:
            return costs
        traversed = ", ".join(e.circuit_string() for e in self.edges)
        return f"{traversed}; {costs}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "classification": self.classification.value,
            "walk": list(self.walk),
            "edges": [[e.src, e.dst, e.weight, e.tag] for e in self.edges],
            "total_cost": self.total_cost,
            "extra_cost": self.extra_cost,
            "matching": None if self.matching is None else {
                "pairs": [list(p) for p in self.matching.pairs],
                "cost": self.matching.cost,
            },
            "label": self.label,
        }


def classify(G: Graph) -> Classification:
    if not is_connected(G):
        return Classification.DISCONNECTED
    odd = odd_degree_nodes(G)
    if not odd:
        return Classification.EULERIAN
    if len(odd) == 2:
        return Classification.SEMI_EULERIAN
    return Classification.NON_EULERIAN


def get_eulerian_circuit(G: Graph, start: Optional[int] = None) -> PathWithEdges:
    """
    Return an Eulerian circuit/trail (vertex list), the edges in walking
    order and its total cost.
    """
    edges = eulerian_trail_edges(G, start)
    if edges:
        walk = [edges[0].src] + [e.dst for e in edges]
    else:
        walk = [G.smallest_node_id()] if G.number_of_nodes() else []
    total_cost = sum(e.cost for e in edges)
    return walk, edges, total_cost


def augment_graph(G: Graph, matching: Matching, table: PairTable, tag: str = CFG.AUGMENTED_TAG) -> List[Edge]:
    """
    Duplicate every hop of the shortest path between each matched pair.

    The hops follow ``PairTable.next_hop`` and each copy carries the weight
    of the cheapest direct edge of that hop, tagged ``tag``. G is modified in
    place; the added records are returned.
    """
    added: List[Edge] = []
    for u, v in matching.pairs:
        current = u
        while current != v:
            nxt = table.next_hop(current, v)
            hop = min(G.edges_between(current, nxt), key=lambda e: e.cost, default=None)
            if hop is None:
                raise GraphInvariantError(f"shortest path {u} -> {v} uses missing edge {current}-{nxt}")
            added.append(G.add_edge(current, nxt, hop.weight, tag))
            current = nxt
    return added


def chinese_postman_route(
    G: Graph,
    matching: Optional[str] = None,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
    cfg: Optional[CFG] = None,
) -> PostmanRoute:
    """
    Classify G and build its postman route.

    For a non-Eulerian graph this adds the augmenting edges to G itself;
    pass ``G.copy()`` to keep the caller's graph unchanged.
    """
    cfg = cfg if cfg is not None else CFG()
    method = matching if matching is not None else cfg.MATCHING
    if method not in ("exhaustive", "random"):
        raise ValueError(f"unknown matching method {method!r}")

    kind = classify(G)
    logger.info("graph with %d nodes and %d edges is %s",
                G.number_of_nodes(), G.number_of_edges(), kind.value)

    if kind is Classification.DISCONNECTED:
        return PostmanRoute(kind)

    # if graph is eulerian or semi-eulerian, the trail alone is optimal
    if kind in (Classification.EULERIAN, Classification.SEMI_EULERIAN):
        walk, edges, total = get_eulerian_circuit(G)
        return PostmanRoute(kind, walk, edges, extra_cost=0, total_cost=total)

    # 1. every pairwise shortest path
    table = floyd_warshall(G)

    # 2. get odd vertices
    odd_vertices = odd_degree_nodes(G)

    # 3. pair them up
    if method == "exhaustive":
        mate = exhaustive_matching(odd_vertices, table, max_nodes=cfg.MAX_EXHAUSTIVE_ODD_NODES)
    else:
        if rng is None:
            rng = random.Random(seed if seed is not None else cfg.SEED)
        mate = random_matching(odd_vertices, table, rng=rng)
    logger.info("%s matching of %d odd nodes: %s (extra cost %s)",
                method, len(odd_vertices), mate.pairs, mate.cost)

    # 4. duplicate edges along each matched shortest path
    added = augment_graph(G, mate, table, tag=cfg.AUGMENTED_TAG)
    logger.debug("added %d augmenting edges", len(added))

    odd_after = odd_degree_nodes(G)
    if odd_after:
        raise GraphInvariantError(f"augmentation left odd vertices: {odd_after}")

    # 5. eulerian circuit on the augmented graph
    walk, edges, total = get_eulerian_circuit(G)
    return PostmanRoute(kind, walk, edges, extra_cost=mate.cost, total_cost=total, matching=mate)


def route_to_dot(G: Graph, route: PostmanRoute) -> str:
    """Render G (augmented if the route added edges) with the route summary as its label."""
    return graph_to_dot(G, label=route.label)
