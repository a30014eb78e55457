"""dot_graph.py

Read and write the plain DOT subset the postman tools exchange:

    graph name {
        rankdir=LR
        1 -- 2 [label=3, len=3]
        2 -- 3
        4
        label="..."
    }

``digraph`` with ``->`` is accepted for directed graphs. Edge weights come
from ``len=`` (or ``label=`` when there is no ``len``); an edge without them
is unweighted. Edges added by the postman augmentation are written with
``color=red, comment="augmented"`` and the comment is read back as the tag.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, Optional, Union

from graph_utilities.errors import DotFormatError
from graph_utilities.multigraph import Edge, Graph


logger = logging.getLogger(__name__)

_HEADER = re.compile(r'^\s*(strict\s+)?(graph|digraph)\s*("[^"]*"|[\w.]*)\s*\{\s*$')
_NODE = re.compile(r"^\s*(\d+)\s*(?:\[(.*)\])?\s*$")
_EDGE = re.compile(r"^\s*(\d+)\s*(--|->)\s*(\d+)\s*(?:\[(.*)\])?\s*$")
_ATTR = re.compile(r'(\w+)\s*=\s*("(?:[^"\\]|\\.)*"|[^,\s\]]+)')
_GRAPH_ATTR = re.compile(r"^\s*(\w+)\s*=\s*(.*)$")

AUGMENTED_COLOR = "red"


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1].replace('\\"', '"')
    return value


def _quote(value: str) -> str:
    return '"' + value.replace('"', '\\"') + '"'


def _parse_attrs(text: Optional[str]) -> Dict[str, str]:
    if not text:
        return {}
    return {key: _unquote(value) for key, value in _ATTR.findall(text)}


def _weight(attrs: Dict[str, str], line_no: int) -> Optional[int]:
    if "len" in attrs:
        try:
            return int(attrs["len"])
        except ValueError:
            raise DotFormatError(f"line {line_no}: edge weight {attrs['len']!r} is not an integer") from None
    # a bare label only counts as a weight when it is a number
    label = attrs.get("label", "")
    return int(label) if label.isdigit() else None


def parse_dot(text: str) -> Graph:
    """Build a Graph from a DOT description (see module docstring)."""
    G: Optional[Graph] = None
    closed = False

    for line_no, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith("#") or line.startswith("//"):
            continue
        if line.endswith(";"):
            line = line[:-1].rstrip()

        if G is None:
            header = _HEADER.match(line)
            if header is None:
                raise DotFormatError(f"line {line_no}: expected 'graph name {{' or 'digraph name {{', got {raw!r}")
            G = Graph(directed=header.group(2) == "digraph", name=_unquote(header.group(3)))
            continue

        if line == "}":
            closed = True
            break

        edge = _EDGE.match(line)
        if edge:
            u, arrow, v = int(edge.group(1)), edge.group(2), int(edge.group(3))
            if (arrow == "->") != G.directed:
                raise DotFormatError(f"line {line_no}: '{arrow}' does not match the graph kind")
            attrs = _parse_attrs(edge.group(4))
            try:
                G.add_edge(u, v, _weight(attrs, line_no), attrs.get("comment"))
            except ValueError as e:
                raise DotFormatError(f"line {line_no}: {e}") from e
            continue

        node = _NODE.match(line)
        if node:
            attrs = _parse_attrs(node.group(2))
            try:
                G.add_node(int(node.group(1)), attrs.get("label"))
            except ValueError as e:
                raise DotFormatError(f"line {line_no}: {e}") from e
            continue

        graph_attr = _GRAPH_ATTR.match(line)
        if graph_attr:
            if graph_attr.group(1) == "label":
                G.label = _unquote(graph_attr.group(2).strip())
            continue

        logger.warning("line %d: skipping unsupported statement %r", line_no, raw)

    if G is None:
        raise DotFormatError("no graph header found")
    if not closed:
        raise DotFormatError("missing closing '}'")
    return G


def read_dot(path: Union[str, Path]) -> Graph:
    """
    Read a DOT file into a Graph.

    Args:
        path: path to a .gv / .dot file.
    """
    with open(path, "r", encoding="utf-8") as f:
        return parse_dot(f.read())


def _edge_line(G: Graph, e: Edge) -> str:
    arrow = "->" if G.directed else "--"
    attrs = []
    if e.weight is not None:
        attrs.append(f"label={e.weight}, len={e.weight}")
    if e.tag is not None:
        attrs.append(f"color={AUGMENTED_COLOR}, comment={_quote(e.tag)}")
    suffix = f" [{', '.join(attrs)}]" if attrs else ""
    return f"{e.src} {arrow} {e.dst}{suffix}"


def graph_to_dot(G: Graph, label: Optional[str] = None) -> str:
    """
    Render G as DOT: isolated nodes on their own line, edges in sorted order
    with one line per logical edge (self-loops once), then the label.
    ``label`` replaces G.label in the output; G itself is left alone.
    """
    kind = "digraph" if G.directed else "graph"
    name = G.name if re.fullmatch(r"[\w.]*", G.name) else _quote(G.name)
    header = f"{kind} {name} {{" if name else f"{kind} {{"
    lines = ["# DOT string generated by grafo-postman", header, "\trankdir=LR"]

    touched = {n for e in G.edges() for n in (e.src, e.dst)}
    for n in G.nodes():
        if n.name is not None:
            lines.append(f"\t{n.id} [label={_quote(n.name)}]")
        elif n.id not in touched:
            lines.append(f"\t{n.id}")
    for e in G.edges():
        lines.append("\t" + _edge_line(G, e))

    label = label if label is not None else G.label
    if label is not None:
        lines.append(f"\tlabel={_quote(label)}")
    lines.append("}")
    return "\n".join(lines)


def write_dot(G: Graph, path: Union[str, Path], label: Optional[str] = None) -> Path:
    path = Path(path)
    path.write_text(graph_to_dot(G, label) + "\n", encoding="utf-8")
    return path
