"""
HTTP tests for the route service.
"""

import pytest
from fastapi.testclient import TestClient

from backend.server import app


@pytest.fixture
def client():
    return TestClient(app)


K4_EDGES = [[1, 2, 1], [1, 3, 5], [1, 4, 4], [2, 3, 2], [2, 4, 7], [3, 4, 3]]


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_route_from_edges(client):
    r = client.post("/route", json={"edges": K4_EDGES})
    assert r.status_code == 200
    data = r.json()
    assert data["classification"] == "non-eulerian"
    assert data["total_cost"] == 26
    assert data["extra_cost"] == 4
    assert data["n_edges"] == 8
    assert data["walk"][0] == data["walk"][-1]
    assert 'comment="augmented"' in data["dot"]


def test_route_from_dot(client):
    dot = "graph g {\n1 -- 2 [len=3]\n1 -- 3 [len=4]\n2 -- 3 [len=6]\n}"
    r = client.post("/route", json={"dot": dot})
    assert r.status_code == 200
    assert r.json()["classification"] == "eulerian"
    assert r.json()["total_cost"] == 13


def test_random_matching_is_seeded(client):
    body = {"edges": K4_EDGES, "matching": "random", "seed": 3}
    first = client.post("/route", json=body).json()
    second = client.post("/route", json=body).json()
    assert first["matching"] == second["matching"]
    assert first["extra_cost"] >= 4


def test_disconnected_graph(client):
    r = client.post("/route", json={"edges": [[1, 2], [3, 4]]})
    assert r.status_code == 200
    assert r.json()["classification"] == "disconnected"
    assert r.json()["walk"] == []

    r = client.post("/route", json={"edges": [[1, 2], [2, 3], [3, 1], [4, 5]], "keep_largest": True})
    assert r.json()["classification"] == "eulerian"
    assert r.json()["n_nodes"] == 3


@pytest.mark.parametrize("body", [
    {},
    {"edges": "1-2"},
    {"edges": [[1]]},
    {"edges": [[1, 2, -4]]},
    {"edges": [[1, 2, 2.7], [2, 3, 1], [3, 1, 1]]},
    {"edges": [[1, 2, "3"]]},
    {"edges": [[0, 2]]},
    {"dot": "graph g { 1 -- 2"},
    {"edges": [], "nodes": []},
    {"edges": K4_EDGES, "matching": "greedy"},
    {"dot": "digraph g {\n1 -> 2\n2 -> 3\n3 -> 1\n}"},
])
def test_bad_requests(client, body):
    r = client.post("/route", json=body)
    assert r.status_code == 400


def test_classify(client):
    r = client.post("/classify", json={"edges": [[1, 2, 3], [1, 3, 4], [1, 4, 7], [4, 3, 5], [2, 4, 6]]})
    assert r.status_code == 200
    data = r.json()
    assert data["classification"] == "semi-eulerian"
    assert data["odd_nodes"] == [1, 4]
    assert data["degrees"] == {"1": 3, "2": 2, "3": 2, "4": 3}
    assert data["components"] == [[1, 2, 3, 4]]


def test_whole_number_float_weights_are_accepted(client):
    r = client.post("/route", json={"edges": [[1, 2, 3.0], [1, 3, 4], [2, 3, 6]]})
    assert r.status_code == 200
    assert r.json()["total_cost"] == 13
    assert "1-(3)-2" in r.json()["label"]
