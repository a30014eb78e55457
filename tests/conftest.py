"""
Shared graphs for the postman tests.
"""

import pytest

from graph_utilities.multigraph import Graph


def build(edges, nodes=(), directed=False):
    g = Graph(directed=directed)
    for n in nodes:
        g.add_node(n)
    g.add_edges_from(edges)
    return g


@pytest.fixture
def triangle():
    # every degree is 2
    return build([(1, 2, 3), (1, 3, 4), (2, 3, 6)])


@pytest.fixture
def semi_eulerian():
    # degrees {1: 3, 2: 2, 3: 2, 4: 3}
    return build([(1, 2, 3), (1, 3, 4), (1, 4, 7), (4, 3, 5), (2, 4, 6)])


@pytest.fixture
def k4():
    # complete graph on four nodes, every degree is 3
    return build([(1, 2, 1), (1, 3, 5), (1, 4, 4), (2, 3, 2), (2, 4, 7), (3, 4, 3)])


@pytest.fixture
def two_components():
    return build([(1, 2, 1), (2, 3, 1), (3, 1, 1), (4, 5, 2)])
