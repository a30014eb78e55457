"""
Pairing of odd-degree nodes for the postman augmentation.

``exhaustive_matching`` is exact: it enumerates every perfect pairing, which
is (k - 1)!! pairings for k odd nodes (15 for 6, 2 027 025 for 16). The
pairing count is the practical scaling limit of the whole route computation,
so the enumeration refuses sets above ``CFG.MAX_EXHAUSTIVE_ODD_NODES``.
``random_matching`` is the cheap alternative: complete but not optimal.
"""

from __future__ import annotations

import logging
import random
from typing import Iterator, List, NamedTuple, Optional, Sequence, Tuple, Union

from graph_utilities.cfg import CFG
from graph_utilities.errors import GraphInvariantError, MatchingLimitExceededError
from graph_utilities.shortest_paths import PairTable


logger = logging.getLogger(__name__)

Pair = Tuple[int, int]
Pairing = List[Pair]


class Matching(NamedTuple):
    pairs: Pairing
    cost: Union[int, float]


def _check_even(nodes: Sequence[int]) -> None:
    if len(nodes) % 2 != 0:
        # the handshake lemma makes this impossible on a consistent graph
        raise GraphInvariantError(f"odd number of odd-degree nodes: {sorted(nodes)}")


def enumerate_pairings(nodes: Sequence[int]) -> Iterator[Pairing]:
    """
    Yield every way to split ``nodes`` into disjoint pairs.

    The smallest remaining id is paired with each larger remaining id in
    turn and the rest is paired recursively. Recursion depth is len(nodes)/2.
    """
    remaining = sorted(nodes)
    if not remaining:
        yield []
        return
    first, rest = remaining[0], remaining[1:]
    for i, partner in enumerate(rest):
        others = rest[:i] + rest[i + 1:]
        for tail in enumerate_pairings(others):
            yield [(first, partner)] + tail


def pairing_cost(pairs: Pairing, table: PairTable) -> Union[int, float]:
    return sum(table.distance(u, v) for u, v in pairs)


def exhaustive_matching(
    odd_nodes: Sequence[int],
    table: PairTable,
    max_nodes: Optional[int] = None,
) -> Matching:
    """Minimum-cost perfect pairing of ``odd_nodes`` (first minimum wins on ties)."""
    _check_even(odd_nodes)
    limit = CFG.MAX_EXHAUSTIVE_ODD_NODES if max_nodes is None else max_nodes
    if len(odd_nodes) > limit:
        raise MatchingLimitExceededError(
            f"{len(odd_nodes)} odd nodes exceed the exhaustive matching limit of {limit}; "
            "use the random matching or raise the limit"
        )

    best: Optional[Matching] = None
    explored = 0
    for pairs in enumerate_pairings(odd_nodes):
        explored += 1
        cost = pairing_cost(pairs, table)
        if best is None or cost < best.cost:
            best = Matching(pairs, cost)

    assert best is not None  # enumerate_pairings always yields at least once
    logger.debug("exhaustive matching: %d pairings explored, best %s cost=%s",
                 explored, best.pairs, best.cost)
    return best


def random_matching(
    odd_nodes: Sequence[int],
    table: PairTable,
    rng: Optional[random.Random] = None,
    seed: Optional[int] = None,
) -> Matching:
    """
    Pair nodes by repeatedly removing two uniformly random remaining nodes.
    Pass ``rng`` (or ``seed``) for reproducible runs.
    """
    _check_even(odd_nodes)
    rng = rng if rng is not None else random.Random(seed)

    remaining = sorted(odd_nodes)
    pairs: Pairing = []
    cost: Union[int, float] = 0
    while remaining:
        u = remaining.pop(rng.randrange(len(remaining)))
        v = remaining.pop(rng.randrange(len(remaining)))
        pairs.append((u, v))
        cost += table.distance(u, v)

    logger.debug("random matching: %s cost=%s", pairs, cost)
    return Matching(pairs, cost)
