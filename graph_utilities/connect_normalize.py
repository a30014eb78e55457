from __future__ import annotations

from typing import List, Set

from graph_utilities.multigraph import Graph, NodeRef


def reachable_from(G: Graph, start: NodeRef) -> Set[int]:
    """
    Return the set of node ids reachable from ``start`` by depth-first search.
    Edge direction is ignored, so on a directed graph this is weak reachability.
    Unknown start -> empty set.
    """
    if not G.has_node(start):
        return set()
    root = start if isinstance(start, int) else start.id
    seen: Set[int] = set()
    stack = [root]
    while stack:
        u = stack.pop()
        if u in seen:
            continue
        seen.add(u)
        for e in G.incident_edges(u):
            v = e.other(u)
            if v not in seen:
                stack.append(v)
    return seen


def is_connected(G: Graph) -> bool:
    """
    True when every node is reachable from the smallest id.
    An isolated node disconnects the graph; an empty graph is connected.
    """
    if G.number_of_nodes() == 0:
        return True
    return len(reachable_from(G, G.smallest_node_id())) == G.number_of_nodes()


def connected_components(G: Graph) -> List[Set[int]]:
    """Components as sets of ids, ordered by their smallest id."""
    comps: List[Set[int]] = []
    seen: Set[int] = set()
    for node_id in G.node_ids():
        if node_id in seen:
            continue
        comp = reachable_from(G, node_id)
        seen |= comp
        comps.append(comp)
    return comps


def odd_degree_nodes(G: Graph) -> List[int]:
    return [n for n in G.node_ids() if G.degree(n) % 2 == 1]


def degree_sum(G: Graph) -> int:
    return sum(G.degree(n) for n in G.node_ids())


def _largest_connected_component_nodes(G: Graph) -> Set[int]:
    """
    Return the set of nodes in the largest connected component of G.
    If G is empty, returns an empty set. Ties go to the component with the
    smallest id.
    """
    if G.number_of_nodes() == 0:
        return set()
    return max(connected_components(G), key=len)


def connect_normalize(G: Graph) -> Graph:
    """
    Return a new Graph induced on the largest connected component of G.
    Node names, weights and tags are preserved; G itself is not modified.
    """
    nodes = _largest_connected_component_nodes(G)
    H = G.copy()
    for node_id in G.node_ids():
        if node_id not in nodes:
            H.remove_node(node_id)
    return H
