"""
All-pairs shortest paths (Floyd-Warshall) for the postman engine.

Witness convention
------------------
For every ordered pair (x, y) the table stores ``(distance, witness)``:

- ``witness(x, x) == x``;
- ``witness(x, y) == y`` when the cheapest x-y path is a direct edge;
- otherwise ``witness(x, y)`` is the *split point* z of the last successful
  relaxation d(x, z) + d(z, y) < d(x, y). It is not necessarily the first hop.

``next_hop`` descends the split points, next = witness(x, next), until it
reaches a fixed point witness(x, next) == next: that node is the first real
hop from x on a shortest path to y.
"""

from __future__ import annotations

import logging
import math
from typing import Dict, Iterator, List, Optional, Tuple, Union

from graph_utilities.connect_normalize import is_connected
from graph_utilities.errors import GraphDisconnectedError, GraphInvariantError
from graph_utilities.multigraph import Graph


logger = logging.getLogger(__name__)

Pair = Tuple[int, int]
Distance = Union[int, float]  # float only for math.inf
Entry = Tuple[Distance, Optional[int]]


class PairTable:
    """Mapping (x, y) -> (distance, witness) over both orderings of every pair."""

    def __init__(self, nodes: List[int]) -> None:
        self.nodes = list(nodes)
        self._entries: Dict[Pair, Entry] = {}

    def __getitem__(self, key: Pair) -> Entry:
        return self._entries[key]

    def __setitem__(self, key: Pair, value: Entry) -> None:
        self._entries[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __iter__(self) -> Iterator[Pair]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def distance(self, x: int, y: int) -> Distance:
        return self._entries[(x, y)][0]

    def witness(self, x: int, y: int) -> Optional[int]:
        return self._entries[(x, y)][1]

    def next_hop(self, x: int, y: int) -> int:
        """First node after x on a shortest path x -> y (descends split points)."""
        if x == y:
            return x
        nxt = self.witness(x, y)
        if nxt is None:
            raise GraphDisconnectedError(f"no path between {x} and {y}")
        steps = 0
        while self.witness(x, nxt) != nxt:
            nxt = self.witness(x, nxt)
            steps += 1
            if nxt is None or steps > len(self.nodes):
                raise GraphInvariantError(f"witness chain from {x} towards {y} does not settle")
        return nxt

    def path(self, x: int, y: int) -> List[int]:
        """Node sequence of a shortest path x -> y, both ends included."""
        path = [x]
        current = x
        while current != y:
            current = self.next_hop(current, y)
            path.append(current)
            if len(path) > len(self.nodes):
                raise GraphInvariantError(f"path {x} -> {y} revisits nodes: {path}")
        return path


def _direct_cost(G: Graph, x: int, y: int) -> Optional[int]:
    """Cheapest direct edge between x and y, checking both storage directions."""
    edges = G.edges_between(x, y)
    if not G.directed:
        edges = edges + G.edges_between(y, x)
    if not edges:
        return None
    return min(e.cost for e in edges)


def floyd_warshall(G: Graph) -> PairTable:
    """
    Compute all-pairs shortest distances and split-point witnesses.

    Raises GraphDisconnectedError on a disconnected graph instead of
    returning a table full of infinities.
    """
    if not is_connected(G):
        raise GraphDisconnectedError("floyd_warshall needs a connected graph")

    ids = G.node_ids()
    table = PairTable(ids)

    # 1. direct edges
    for x in ids:
        for y in ids:
            if x == y:
                table[x, y] = (0, x)
                continue
            w = _direct_cost(G, x, y)
            table[x, y] = (math.inf, None) if w is None else (w, y)

    # 2. relax through every intermediate node
    for z in ids:
        for x in ids:
            d_xz = table.distance(x, z)
            if d_xz == math.inf:
                continue
            for y in ids:
                alt = d_xz + table.distance(z, y)
                if alt < table.distance(x, y):
                    table[x, y] = (alt, z)

    logger.debug("floyd_warshall: %d nodes, %d pairs", len(ids), len(table))
    return table
