"""
Unit tests for the multigraph store.
"""

import random

import networkx as nx
import pytest

from graph_utilities.multigraph import Edge, EdgeVisitType, Graph, Node, NodeColour
from graph_utilities.connect_normalize import degree_sum, odd_degree_nodes

from conftest import build


def test_add_nodes_and_edges():
    g = Graph()
    assert g.add_node(1)
    assert not g.add_node(1)
    g.add_edge(1, 2, 5)
    g.add_edge(2, 3)

    assert g.node_ids() == [1, 2, 3]
    assert g.number_of_nodes() == 3
    assert g.number_of_edges() == 2
    assert g.successors(2) == [1, 3]
    assert g.edges_between(1, 2) == [Edge(1, 2, 5)]
    assert g.edges_between(1, 3) == []


def test_invalid_ids_and_weights():
    g = Graph()
    with pytest.raises(ValueError):
        g.add_node(0)
    with pytest.raises(ValueError):
        g.add_node(-3)
    with pytest.raises(ValueError):
        g.add_edge(1, 2, -1)
    assert g.number_of_nodes() == 0


def test_node_identity_is_id_only():
    assert Node(1, "a") == Node(1, "b")
    assert Node(1) < Node(2)
    g = Graph()
    g.add_node(Node(4, "depot"))
    assert g.get_node(4).name == "depot"
    assert 4 in g and Node(4) in g
    assert 5 not in g


def test_edge_equality_ignores_missing_weight():
    assert Edge(1, 2, 3) == Edge(1, 2)
    assert Edge(1, 2, 3) != Edge(1, 2, 4)
    assert Edge(1, 2) != Edge(2, 1)
    assert hash(Edge(1, 2, 3)) == hash(Edge(1, 2))
    assert sorted([Edge(2, 1), Edge(1, 3), Edge(1, 2)]) == [Edge(1, 2), Edge(1, 3), Edge(2, 1)]


def test_edge_strings_and_cost():
    assert Edge(1, 2, 3).circuit_string() == "1-(3)-2"
    assert Edge(1, 2).circuit_string() == "1--2"
    assert Edge(1, 2).cost == 1
    assert Edge(1, 2, 0).cost == 0
    assert Edge(1, 2, 7).other(2) == 1
    with pytest.raises(ValueError):
        Edge(1, 2).other(3)


def test_undirected_storage_is_symmetric(semi_eulerian):
    for u in semi_eulerian.node_ids():
        for e in semi_eulerian.out_edges(u):
            assert e.symmetric() in semi_eulerian.out_edges(e.dst)


def test_handshake_lemma(semi_eulerian, k4):
    for g in (semi_eulerian, k4):
        assert degree_sum(g) == 2 * g.number_of_edges()


def test_self_loop_counts_twice_and_is_listed_once():
    g = build([(1, 1, 2), (1, 2, 1)])
    assert g.degree(1) == 3
    assert g.number_of_edges() == 2
    assert g.edges() == [Edge(1, 1, 2), Edge(1, 2, 1)]
    assert [e for e in g.out_edges(1) if e.is_self_loop] == [Edge(1, 1, 2)]
    assert g.has_self_loops()
    assert not g.is_simple()


def test_parallel_edges():
    g = build([(1, 2, 3), (1, 2, 5), (2, 1)])
    assert g.is_multi_edge(1, 2)
    assert g.is_multigraph()
    assert g.number_of_edges() == 3
    assert g.successors(1) == [2]
    assert g.successors_multi(1) == [2, 2, 2]


def test_remove_edge_removes_both_records():
    g = build([(1, 2, 3), (1, 2, 5), (2, 3, 1)])
    assert g.remove_edge(2, 1, 5)
    assert g.edges_between(1, 2) == [Edge(1, 2, 3)]
    assert g.edges_between(2, 1) == [Edge(2, 1, 3)]
    assert g.number_of_edges() == 2
    assert not g.remove_edge(1, 3)
    assert not g.remove_edge(1, 9)


def test_remove_self_loop():
    g = build([(1, 1, 4), (1, 2, 1)])
    assert g.remove_edge(1, 1)
    assert g.degree(1) == 1
    assert not g.has_self_loops()


def test_half_edge_leaves_graph_untouched(caplog):
    g = build([(1, 2, 3)])
    # corrupt the store: drop the 2 -> 1 record behind the graph's back
    g._adj[2].clear()
    assert not g.remove_edge(1, 2)
    assert g.edges_between(1, 2) == [Edge(1, 2, 3)]
    assert "symmetric record missing" in caplog.text


def test_discard_matches_the_exact_record():
    g = build([(1, 2, 3), (1, 2, 3)])
    first, second = g.out_edges(1)
    assert g.discard(second)
    assert g.out_edges(1)[0] is first
    assert not g.discard(second)
    assert g.number_of_edges() == 1


def test_remove_node_drops_incident_edges(semi_eulerian):
    assert semi_eulerian.remove_node(1)
    assert not semi_eulerian.remove_node(1)
    assert semi_eulerian.number_of_edges() == 2
    assert all(e.dst != 1 for u in semi_eulerian.node_ids() for e in semi_eulerian.out_edges(u))


def test_directed_degrees():
    g = build([(1, 2), (2, 3), (3, 1), (1, 3)], directed=True)
    assert g.out_degree(1) == 2
    assert g.in_degree(1) == 1
    assert g.degree(1) == 3
    assert g.in_edges(3) == [Edge(1, 3), Edge(2, 3)]
    assert g.number_of_edges() == 4
    assert g.reverse().successors(1) == [3]


def test_copy_is_independent(triangle):
    h = triangle.copy()
    h.add_edge(1, 2, 9)
    h.remove_edge(2, 3)
    assert triangle.number_of_edges() == 3
    assert h.number_of_edges() == 3
    assert triangle.edges_between(2, 3) == [Edge(2, 3, 6)]


def test_to_simple_graph():
    g = build([(1, 1), (1, 2, 3), (1, 2, 8), (2, 3)])
    simple = g.to_simple_graph()
    assert simple.is_simple()
    assert simple.edges() == [Edge(1, 2, 3), Edge(2, 3)]
    assert simple.node_ids() == [1, 2, 3]


def test_transitive_closure():
    g = build([(1, 2), (2, 3)], nodes=[4], directed=True)
    closure = g.transitive_closure()
    assert closure.successors(1) == [2, 3]
    assert closure.successors(2) == [3]
    assert closure.successors(4) == []


def test_adjacency_matrix_and_successor_array():
    g = build([(1, 2), (1, 2), (2, 3), (3, 3)])
    assert g.to_adjacency_matrix() == [[0, 2, 0], [2, 0, 1], [0, 1, 1]]
    array = g.to_successor_array()
    assert array == [2, 2, 0, 1, 1, 3, 0, 2, 3, 0]
    rebuilt = Graph.from_successor_array(array)
    assert rebuilt.to_adjacency_matrix() == g.to_adjacency_matrix()


def test_traversals_cover_every_node():
    g = build([(1, 2), (1, 3), (2, 4), (5, 6)])
    assert g.dfs() == [1, 2, 4, 3, 5, 6]
    assert g.bfs() == [1, 2, 3, 4, 5, 6]
    assert g.dfs(5)[:2] == [5, 6]
    assert sorted(g.bfs(3)) == [1, 2, 3, 4, 5, 6]
    assert g.dfs(42) == []
    assert g.bfs(42) == []


def test_networkx_round_trip(semi_eulerian):
    semi_eulerian.add_edge(2, 2, tag="augmented")
    H = semi_eulerian.to_networkx()
    assert isinstance(H, nx.MultiGraph)
    assert H.number_of_edges() == semi_eulerian.number_of_edges()
    assert H[1][4][0]["weight"] == 7

    back = Graph.from_networkx(H)
    assert back.edges() == semi_eulerian.edges()
    assert [e.tag for e in back.edges()] == [e.tag for e in semi_eulerian.edges()]


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_degree_sum_holds_through_random_mutations(seed):
    rng = random.Random(seed)
    g = Graph()
    for step in range(400):
        op = rng.random()
        ids = g.node_ids()
        if op < 0.45 or not ids:
            u, v = rng.randint(1, 8), rng.randint(1, 8)
            if rng.random() < 0.15:
                v = u
            weight = rng.choice([None, 0, rng.randint(1, 9)])
            tag = rng.choice([None, "augmented"])
            g.add_edge(u, v, weight, tag)
        elif op < 0.7:
            g.remove_edge(rng.choice(ids), rng.choice(ids))
        elif op < 0.9:
            records = g.out_edges(rng.choice(ids))
            if records:
                assert g.discard(rng.choice(records))
        else:
            g.remove_node(rng.choice(ids))

        assert degree_sum(g) == 2 * g.number_of_edges(), f"step {step}"
        assert len(odd_degree_nodes(g)) % 2 == 0, f"step {step}"
        for u in g.node_ids():
            loops = sum(1 for e in g.out_edges(u) if e.is_self_loop)
            assert g.degree(u) == len(g.out_edges(u)) + loops


def test_dfs_visit_info_undirected():
    g = build([(1, 2), (2, 3), (3, 1), (3, 4), (4, 4)], nodes=[5])
    visit = g.dfs_with_visit_info()

    assert visit.order == g.dfs() == [1, 2, 3, 4, 5]
    assert [(e.src, e.dst, kind) for e, kind in visit.edges] == [
        (1, 2, EdgeVisitType.TREE),
        (2, 3, EdgeVisitType.TREE),
        (3, 1, EdgeVisitType.BACKWARD),
        (3, 4, EdgeVisitType.TREE),
        (4, 4, EdgeVisitType.BACKWARD),
    ]
    assert len(visit.edges) == g.number_of_edges()

    times = {n: (i.discovered, i.finished) for n, i in visit.nodes.items()}
    assert times == {1: (1, 8), 2: (2, 7), 3: (3, 6), 4: (4, 5), 5: (9, 10)}
    assert {n: i.parent for n, i in visit.nodes.items()} == {1: None, 2: 1, 3: 2, 4: 3, 5: None}
    assert all(i.colour is NodeColour.BLACK for i in visit.nodes.values())


def test_dfs_visit_info_parallel_edges_classified_once():
    g = build([(1, 2, 3), (1, 2, 5), (2, 3, 1)])
    kinds = [kind for _, kind in g.dfs_with_visit_info().edges]
    assert kinds == [EdgeVisitType.TREE, EdgeVisitType.BACKWARD, EdgeVisitType.TREE]


def test_dfs_visit_info_directed():
    # 1 -> 3 skips over 2 (forward), 4 -> 3 reaches a finished tree (cross)
    g = build([(1, 2), (2, 3), (1, 3), (3, 1), (4, 3)], directed=True)
    visit = g.dfs_with_visit_info()

    assert visit.order == [1, 2, 3, 4]
    assert [(e.src, e.dst, kind) for e, kind in visit.edges] == [
        (1, 2, EdgeVisitType.TREE),
        (2, 3, EdgeVisitType.TREE),
        (3, 1, EdgeVisitType.BACKWARD),
        (1, 3, EdgeVisitType.FORWARD),
        (4, 3, EdgeVisitType.CROSS),
    ]
    assert visit.nodes[3].parent == 2
    assert (visit.nodes[4].discovered, visit.nodes[4].finished) == (7, 8)


def test_dfs_visit_info_start():
    g = build([(1, 2), (3, 4)])
    visit = g.dfs_with_visit_info(3)
    assert visit.order == [3, 4, 1, 2]
    assert visit.nodes[3].discovered == 1
    assert g.dfs_with_visit_info(9) == ([], {}, [])
