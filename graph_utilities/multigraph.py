"""multigraph.py

Adjacency-list multigraph used by the postman engine.

- Nodes are plain value records (id, name); the graph owns them.
- Edges are immutable records (src, dst, weight, tag). ``weight=None`` means
  "unweighted", which is not the same thing as a weight of 0.
- One ``Graph`` type with a directed/undirected mode. In undirected mode every
  logical edge {u, v} is stored as two records, u->v in u's list and v->u in
  v's list. A self-loop is two u->u records in u's list, so it counts 2 towards
  the degree and every enumeration lists it once.
"""

from __future__ import annotations

import logging
from collections import Counter, deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, NamedTuple, Optional, Sequence, Set, Tuple, Union

import networkx as nx

from graph_utilities.cfg import CFG


logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class Node:
    """Graph vertex. Identity and ordering come from ``id`` alone."""

    id: int
    name: Optional[str] = field(default=None, compare=False)

    def __str__(self) -> str:
        return str(self.id)


NodeRef = Union[int, Node]


@dataclass(frozen=True, eq=False)
class Edge:
    """
    Edge record src -> dst.

    Two edges are equal when their endpoints match and, if both carry a
    weight, the weights match. Edges sort by (src, dst).
    """

    src: int
    dst: int
    weight: Optional[int] = None
    tag: Optional[str] = None

    @property
    def is_weighted(self) -> bool:
        return self.weight is not None

    @property
    def is_self_loop(self) -> bool:
        return self.src == self.dst

    @property
    def cost(self) -> int:
        """Weight used by path costs; unweighted edges cost one unit."""
        return self.weight if self.weight is not None else CFG.UNWEIGHTED_COST

    def symmetric(self) -> Edge:
        return Edge(self.dst, self.src, self.weight, self.tag)

    def other(self, node_id: int) -> int:
        """Return the endpoint opposite to ``node_id``."""
        if node_id == self.src:
            return self.dst
        if node_id == self.dst:
            return self.src
        raise ValueError(f"node {node_id} is not an endpoint of {self}")

    def circuit_string(self) -> str:
        if self.weight is None:
            return f"{self.src}--{self.dst}"
        return f"{self.src}-({self.weight})-{self.dst}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Edge):
            return NotImplemented
        if self.is_weighted and other.is_weighted and self.weight != other.weight:
            return False
        return self.src == other.src and self.dst == other.dst

    def __hash__(self) -> int:
        # weight is left out so that hashing agrees with the loose equality above
        return hash((self.src, self.dst))

    def __lt__(self, other: Edge) -> bool:
        return (self.src, self.dst) < (other.src, other.dst)

    def __str__(self) -> str:
        return self.circuit_string()


def _as_id(node: NodeRef) -> int:
    return node.id if isinstance(node, Node) else node


class NodeColour(str, Enum):
    WHITE = "white"  # not discovered
    GREY = "grey"    # discovered, still on the stack
    BLACK = "black"  # finished


class EdgeVisitType(str, Enum):
    TREE = "tree"
    BACKWARD = "backward"
    FORWARD = "forward"
    CROSS = "cross"


@dataclass
class NodeVisitInfo:
    colour: NodeColour = NodeColour.WHITE
    discovered: Optional[int] = None
    finished: Optional[int] = None
    parent: Optional[int] = None


class DFSVisit(NamedTuple):
    """Result of ``Graph.dfs_with_visit_info``; ``edges`` are in exploration order."""

    order: List[int]
    nodes: Dict[int, NodeVisitInfo]
    edges: List[Tuple[Edge, EdgeVisitType]]


def _skip_loop_twins(edges: Iterable[Edge]) -> List[Edge]:
    """Keep one record out of every two self-loop records (undirected storage)."""
    res: List[Edge] = []
    one_on_two = True
    for e in edges:
        if e.is_self_loop:
            if one_on_two:
                res.append(e)
            one_on_two = not one_on_two
        else:
            res.append(e)
    return res


class Graph:
    """
    Weighted multigraph over positive integer node ids.

    ``directed=False`` (the default) gives the undirected form the postman
    route works on; every mutating edge operation then applies to both
    records of the pair in the same call.
    """

    def __init__(self, directed: bool = False, name: str = "") -> None:
        self.directed = directed
        self.name = name
        self.label: Optional[str] = None
        self._nodes: Dict[int, Node] = {}
        self._adj: Dict[int, List[Edge]] = {}

    # --- Nodes ----------------------------------------------------------------

    @staticmethod
    def _check_id(node_id: int) -> None:
        if isinstance(node_id, bool) or not isinstance(node_id, int) or node_id <= 0:
            raise ValueError(f"node ids must be positive integers, got {node_id!r}")

    def add_node(self, node: NodeRef, name: Optional[str] = None) -> bool:
        """Add a node; returns False if a node with that id already exists."""
        if isinstance(node, Node) and name is None:
            name = node.name
        node_id = _as_id(node)
        self._check_id(node_id)
        if node_id in self._nodes:
            return False
        self._nodes[node_id] = Node(node_id, name)
        self._adj[node_id] = []
        return True

    def remove_node(self, node: NodeRef) -> bool:
        """Remove a node and every edge touching it; False if absent."""
        node_id = _as_id(node)
        if node_id not in self._nodes:
            return False
        for other_id, edges in self._adj.items():
            if other_id != node_id:
                edges[:] = [e for e in edges if e.dst != node_id]
        del self._adj[node_id]
        del self._nodes[node_id]
        return True

    def has_node(self, node: NodeRef) -> bool:
        return _as_id(node) in self._nodes

    def get_node(self, node_id: int) -> Optional[Node]:
        return self._nodes.get(node_id)

    def nodes(self) -> List[Node]:
        return [self._nodes[i] for i in sorted(self._nodes)]

    def node_ids(self) -> List[int]:
        return sorted(self._nodes)

    def number_of_nodes(self) -> int:
        return len(self._nodes)

    def smallest_node_id(self) -> int:
        return min(self._nodes) if self._nodes else 0

    def largest_node_id(self) -> int:
        return max(self._nodes) if self._nodes else 0

    # --- Edges: mutation --------------------------------------------------------

    def add_edge(
        self,
        src: NodeRef,
        dst: NodeRef,
        weight: Optional[int] = None,
        tag: Optional[str] = None,
    ) -> Edge:
        """
        Add an edge src -> dst (both records in undirected mode).
        Unknown endpoints are created. Returns the src-side record.
        """
        u, v = _as_id(src), _as_id(dst)
        self._check_id(u)
        self._check_id(v)
        if weight is not None and weight < 0:
            raise ValueError(f"negative weights are not supported: {u}-{v} weight={weight}")
        self.add_node(u)
        self.add_node(v)
        edge = Edge(u, v, weight, tag)
        self._adj[u].append(edge)
        if not self.directed:
            self._adj[v].append(edge.symmetric())
        return edge

    def add_edges_from(self, edges: Iterable[Sequence[int]]) -> None:
        """Add ``(u, v)`` or ``(u, v, weight)`` tuples."""
        for item in edges:
            if len(item) == 2:
                self.add_edge(item[0], item[1])
            elif len(item) == 3:
                self.add_edge(item[0], item[1], item[2])
            else:
                raise ValueError(f"expected (u, v) or (u, v, weight), got {item!r}")

    def _find(self, u: int, v: int, weight: Optional[int] = None, skip: Optional[int] = None) -> Optional[int]:
        for i, e in enumerate(self._adj.get(u, [])):
            if i == skip or e.dst != v:
                continue
            if weight is None or e.weight == weight:
                return i
        return None

    def _find_twin(self, edge: Edge, index: int) -> Optional[int]:
        skip = index if edge.is_self_loop else None
        for i, e in enumerate(self._adj.get(edge.dst, [])):
            if i == skip:
                continue
            if e.dst == edge.src and e.weight == edge.weight and e.tag == edge.tag:
                return i
        return None

    def _remove_pair(self, u: int, index: int) -> bool:
        edge = self._adj[u][index]
        twin = self._find_twin(edge, index)
        if twin is None:
            logger.error("half edge %s: symmetric record missing, nothing removed", edge)
            return False
        if edge.is_self_loop:
            for i in sorted((index, twin), reverse=True):
                del self._adj[u][i]
        else:
            del self._adj[u][index]
            del self._adj[edge.dst][twin]
        return True

    def remove_edge(self, src: NodeRef, dst: NodeRef, weight: Optional[int] = None) -> bool:
        """
        Remove one edge src -> dst. ``weight=None`` matches any weight.

        In undirected mode both records are located before anything is
        deleted; if either is missing the graph is left untouched and False
        is returned.
        """
        u, v = _as_id(src), _as_id(dst)
        if u not in self._adj or v not in self._adj:
            return False
        index = self._find(u, v, weight)
        if index is None:
            return False
        if self.directed:
            del self._adj[u][index]
            return True
        return self._remove_pair(u, index)

    def discard(self, edge: Edge) -> bool:
        """Remove this exact record (and its twin in undirected mode)."""
        records = self._adj.get(edge.src, [])
        for index, e in enumerate(records):
            if e is edge:
                break
        else:
            return False
        if self.directed:
            del records[index]
            return True
        return self._remove_pair(edge.src, index)

    # --- Edges: queries ---------------------------------------------------------

    def out_edges(self, node: NodeRef) -> List[Edge]:
        records = self._adj.get(_as_id(node), [])
        if self.directed:
            return list(records)
        return _skip_loop_twins(records)

    def in_edges(self, node: NodeRef) -> List[Edge]:
        if not self.directed:
            return self.out_edges(node)
        node_id = _as_id(node)
        return [e for u in sorted(self._adj) for e in self._adj[u] if e.dst == node_id]

    def incident_edges(self, node: NodeRef) -> List[Edge]:
        if not self.directed:
            return self.out_edges(node)
        # a directed self-loop shows up in both lists
        return self.out_edges(node) + [e for e in self.in_edges(node) if not e.is_self_loop]

    def edges_between(self, u: NodeRef, v: NodeRef) -> List[Edge]:
        """Edges u -> v; an empty list means there is no edge (not weight 0)."""
        v_id = _as_id(v)
        return [e for e in self.out_edges(u) if e.dst == v_id]

    def has_edge(self, u: NodeRef, v: NodeRef) -> bool:
        return bool(self.edges_between(u, v))

    def is_multi_edge(self, u: NodeRef, v: NodeRef) -> bool:
        return len(self.edges_between(u, v)) > 1

    def successors(self, node: NodeRef) -> List[int]:
        return sorted({e.dst for e in self.out_edges(node)})

    def successors_multi(self, node: NodeRef) -> List[int]:
        return [e.dst for e in self.out_edges(node)]

    def descendants(self, node: NodeRef) -> Set[int]:
        """Nodes reachable from ``node`` following edge direction (``node`` excluded unless on a cycle)."""
        seen: Set[int] = set()
        queue = deque(self.successors(node))
        while queue:
            u = queue.popleft()
            if u in seen:
                continue
            seen.add(u)
            queue.extend(v for v in self.successors(u) if v not in seen)
        return seen

    def out_degree(self, node: NodeRef) -> int:
        if not self.directed:
            return self.degree(node)
        return len(self._adj.get(_as_id(node), []))

    def in_degree(self, node: NodeRef) -> int:
        if not self.directed:
            return self.degree(node)
        return len(self.in_edges(node))

    def degree(self, node: NodeRef) -> int:
        """Number of edge endpoints at ``node``; a self-loop counts 2."""
        if self.directed:
            return self.out_degree(node) + self.in_degree(node)
        return len(self._adj.get(_as_id(node), []))

    def edges(self) -> List[Edge]:
        """All edges sorted by (src, dst), one entry per logical edge."""
        if self.directed:
            return sorted(e for u in self._adj for e in self._adj[u])
        res: List[Edge] = []
        for u in sorted(self._adj):
            res.extend(e for e in self.out_edges(u) if e.src <= e.dst)
        return sorted(res)

    def number_of_edges(self) -> int:
        records = sum(len(edges) for edges in self._adj.values())
        return records if self.directed else records // 2

    # --- Shape -----------------------------------------------------------------

    def has_self_loops(self) -> bool:
        return any(e.is_self_loop for edges in self._adj.values() for e in edges)

    def is_multigraph(self) -> bool:
        for u in self._adj:
            targets = self.successors_multi(u)
            if len(targets) != len(set(targets)):
                return True
        return False

    def is_simple(self) -> bool:
        return not self.has_self_loops() and not self.is_multigraph()

    # --- Representation & transformation ----------------------------------------

    def copy(self) -> Graph:
        """Independent copy; edge records are immutable and can be shared."""
        g = Graph(directed=self.directed, name=self.name)
        g.label = self.label
        g._nodes = dict(self._nodes)
        g._adj = {u: list(edges) for u, edges in self._adj.items()}
        return g

    def to_simple_graph(self) -> Graph:
        """Drop self-loops and collapse parallel edges (first one wins)."""
        simple = Graph(directed=self.directed, name=self.name)
        for n in self.nodes():
            simple.add_node(n.id, n.name)
        for e in self.edges():
            if e.is_self_loop or simple.has_edge(e.src, e.dst):
                continue
            simple.add_edge(e.src, e.dst, e.weight, e.tag)
        return simple

    def reverse(self) -> Graph:
        if not self.directed:
            return self.copy()
        rev = Graph(directed=True, name=self.name)
        for n in self.nodes():
            rev.add_node(n.id, n.name)
        for e in self.edges():
            rev.add_edge(e.dst, e.src, e.weight, e.tag)
        return rev

    def transitive_closure(self) -> Graph:
        """Simple graph with an (unweighted) edge u -> v whenever v is reachable from u."""
        closure = self.to_simple_graph()
        for u in self.node_ids():
            for v in sorted(self.descendants(u)):
                if u != v and not closure.has_edge(u, v):
                    closure.add_edge(u, v)
        return closure

    def to_adjacency_matrix(self) -> List[List[int]]:
        """Edge counts, rows and columns in node id order."""
        ids = self.node_ids()
        index = {node_id: i for i, node_id in enumerate(ids)}
        matrix = [[0] * len(ids) for _ in ids]
        for e in self.edges():
            i, j = index[e.src], index[e.dst]
            matrix[i][j] += 1
            if not self.directed and not e.is_self_loop:
                matrix[j][i] += 1
        return matrix

    def to_successor_array(self) -> List[int]:
        """Successors of each node in id order, each block closed by a 0."""
        array: List[int] = []
        for u in self.node_ids():
            array.extend(self.successors_multi(u))
            array.append(0)
        return array

    @classmethod
    def from_successor_array(cls, array: Sequence[int], directed: bool = False) -> Graph:
        """Inverse of ``to_successor_array``; node ids are 1..number of blocks."""
        graph = cls(directed=directed)
        for node_id in range(1, array.count(0) + 1):
            graph.add_node(node_id)
        current = 1
        for value in array:
            if value == 0:
                current += 1
            elif directed or current <= value:
                # undirected blocks list every edge from both ends
                graph.add_edge(current, value)
        return graph

    # --- Traversal ---------------------------------------------------------------

    def _roots(self, start: Optional[int]) -> List[int]:
        ids = self.node_ids()
        return ids if start is None else [start] + ids

    def dfs(self, start: Optional[NodeRef] = None) -> List[int]:
        """
        Depth-first visitation order covering every node.
        Starts at ``start`` (smallest id by default) and restarts from the
        smallest unvisited id after each component. Unknown start -> [].
        """
        if start is not None and not self.has_node(start):
            return []
        order: List[int] = []
        visited: Set[int] = set()
        for root in self._roots(None if start is None else _as_id(start)):
            if root in visited:
                continue
            stack = [root]
            while stack:
                u = stack.pop()
                if u in visited:
                    continue
                visited.add(u)
                order.append(u)
                stack.extend(v for v in reversed(self.successors(u)) if v not in visited)
        return order

    def bfs(self, start: Optional[NodeRef] = None) -> List[int]:
        """Breadth-first counterpart of ``dfs``."""
        if start is not None and not self.has_node(start):
            return []
        order: List[int] = []
        visited: Set[int] = set()
        for root in self._roots(None if start is None else _as_id(start)):
            if root in visited:
                continue
            visited.add(root)
            queue = deque([root])
            while queue:
                u = queue.popleft()
                order.append(u)
                for v in self.successors(u):
                    if v not in visited:
                        visited.add(v)
                        queue.append(v)
        return order

    def dfs_with_visit_info(self, start: Optional[NodeRef] = None) -> DFSVisit:
        """
        Depth-first search recording colours, discovery/finish times, parents
        and the type of every edge.

        One clock runs across all the DFS trees, so [discovered, finished]
        intervals nest. Successors are explored in id order, giving the same
        order as ``dfs``. In undirected mode each logical edge is classified
        once, from the end that reaches it first: only TREE and BACKWARD
        occur there. Unknown start -> empty result.
        """
        if start is not None and not self.has_node(start):
            return DFSVisit([], {}, [])
        info = {node_id: NodeVisitInfo() for node_id in self.node_ids()}
        order: List[int] = []
        edges: List[Tuple[Edge, EdgeVisitType]] = []
        # undirected records already classified from the other end, keyed as (src, dst, weight, tag)
        pending: Counter = Counter()
        time = 0

        def out_sorted(u: int) -> Iterator[Edge]:
            return iter(sorted(self.out_edges(u), key=lambda e: e.dst))

        for root in self._roots(None if start is None else _as_id(start)):
            if info[root].colour is not NodeColour.WHITE:
                continue
            time += 1
            info[root].colour, info[root].discovered = NodeColour.GREY, time
            order.append(root)
            stack = [(root, out_sorted(root))]
            while stack:
                u, remaining = stack[-1]
                e = next(remaining, None)
                if e is None:
                    stack.pop()
                    time += 1
                    info[u].colour, info[u].finished = NodeColour.BLACK, time
                    continue

                if not self.directed and not e.is_self_loop:
                    twin_key = (e.dst, e.src, e.weight, e.tag)
                    if pending[twin_key]:
                        pending[twin_key] -= 1
                        continue
                    pending[(e.src, e.dst, e.weight, e.tag)] += 1

                v = info[e.dst]
                if v.colour is NodeColour.WHITE:
                    edges.append((e, EdgeVisitType.TREE))
                    time += 1
                    v.colour, v.discovered, v.parent = NodeColour.GREY, time, u
                    order.append(e.dst)
                    stack.append((e.dst, out_sorted(e.dst)))
                elif v.colour is NodeColour.GREY:
                    edges.append((e, EdgeVisitType.BACKWARD))
                elif info[u].discovered < v.discovered:
                    edges.append((e, EdgeVisitType.FORWARD))
                else:
                    edges.append((e, EdgeVisitType.CROSS))

        return DFSVisit(order, info, edges)

    # --- networkx interop ----------------------------------------------------------

    def to_networkx(self) -> nx.MultiGraph:
        """Return a networkx MultiGraph (MultiDiGraph when directed)."""
        G = nx.MultiDiGraph() if self.directed else nx.MultiGraph()
        G.graph["name"] = self.name
        if self.label is not None:
            G.graph["label"] = self.label
        for n in self.nodes():
            if n.name is None:
                G.add_node(n.id)
            else:
                G.add_node(n.id, name=n.name)
        for e in self.edges():
            attrs = {}
            if e.weight is not None:
                attrs["weight"] = e.weight
            if e.tag is not None:
                attrs["tag"] = e.tag
            G.add_edge(e.src, e.dst, **attrs)
        return G

    @classmethod
    def from_networkx(cls, G: nx.Graph) -> Graph:
        """Build a Graph from any networkx graph with positive integer nodes."""
        graph = cls(directed=G.is_directed(), name=str(G.graph.get("name", "")))
        graph.label = G.graph.get("label")
        for n, data in G.nodes(data=True):
            graph.add_node(int(n), data.get("name"))
        for u, v, data in G.edges(data=True):
            w = data.get("weight")
            graph.add_edge(int(u), int(v), None if w is None else int(w), data.get("tag"))
        return graph

    # --- Python protocol ------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node: object) -> bool:
        if isinstance(node, (int, Node)) and not isinstance(node, bool):
            return self.has_node(node)
        return False

    def __iter__(self) -> Iterator[int]:
        return iter(self.node_ids())

    def __repr__(self) -> str:
        kind = "directed" if self.directed else "undirected"
        return f"Graph({kind}, nodes={self.number_of_nodes()}, edges={self.number_of_edges()})"
