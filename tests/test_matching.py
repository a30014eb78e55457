"""
Tests for odd-node pairing.
"""

import itertools
import random

import pytest

from graph_utilities.errors import GraphInvariantError, MatchingLimitExceededError
from graph_utilities.matching import (
    enumerate_pairings,
    exhaustive_matching,
    pairing_cost,
    random_matching,
)
from graph_utilities.random_graph import random_graph
from graph_utilities.connect_normalize import odd_degree_nodes
from graph_utilities.shortest_paths import floyd_warshall


def _brute_force_min(nodes, table):
    best = None
    for perm in itertools.permutations(nodes):
        cost = sum(table.distance(perm[i], perm[i + 1]) for i in range(0, len(perm), 2))
        if best is None or cost < best:
            best = cost
    return best


def test_enumerate_pairings_counts():
    assert list(enumerate_pairings([])) == [[]]
    assert list(enumerate_pairings([3, 1])) == [[(1, 3)]]
    assert len(list(enumerate_pairings(range(1, 7)))) == 15
    assert len(list(enumerate_pairings(range(1, 9)))) == 105


def test_every_pairing_is_perfect():
    nodes = [2, 4, 5, 8, 9, 11]
    for pairs in enumerate_pairings(nodes):
        flat = [n for pair in pairs for n in pair]
        assert sorted(flat) == nodes


def test_exhaustive_matches_brute_force(k4):
    table = floyd_warshall(k4)
    mate = exhaustive_matching([1, 2, 3, 4], table)
    assert mate.pairs == [(1, 2), (3, 4)]
    assert mate.cost == 4
    assert mate.cost == _brute_force_min([1, 2, 3, 4], table)


@pytest.mark.parametrize("seed", [3, 11, 12])
def test_exhaustive_on_random_graphs(seed):
    g = random_graph(8, p=0.4, seed=seed)
    odd = odd_degree_nodes(g)
    table = floyd_warshall(g)
    mate = exhaustive_matching(odd, table)
    assert mate.cost == _brute_force_min(odd, table)
    assert pairing_cost(mate.pairs, table) == mate.cost


def test_exhaustive_refuses_large_sets(k4):
    table = floyd_warshall(k4)
    with pytest.raises(MatchingLimitExceededError):
        exhaustive_matching([1, 2, 3, 4], table, max_nodes=2)


def test_odd_count_is_an_invariant_violation(k4):
    table = floyd_warshall(k4)
    with pytest.raises(GraphInvariantError):
        exhaustive_matching([1, 2, 3], table)
    with pytest.raises(GraphInvariantError):
        random_matching([1, 2, 3], table, seed=0)


def test_random_matching_is_complete_and_seeded(k4):
    table = floyd_warshall(k4)
    first = random_matching([1, 2, 3, 4], table, seed=42)
    again = random_matching([1, 2, 3, 4], table, rng=random.Random(42))
    assert first == again
    assert sorted(n for pair in first.pairs for n in pair) == [1, 2, 3, 4]
    assert first.cost == pairing_cost(first.pairs, table)


def test_empty_matching(k4):
    table = floyd_warshall(k4)
    assert exhaustive_matching([], table).cost == 0
    assert random_matching([], table, seed=1).pairs == []
