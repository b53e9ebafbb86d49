"""GEXF (Gephi) XML output for visualisation data."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import TextIO

from surfacemap.graph import Edge, Node

XML_NS = "http://www.gephi.org/gexf"
XML_NS_VIZ = "http://www.gephi.org/gexf/viz"
GEXF_VERSION = "1.3"
CREATOR = "Surfacemap"
DESCRIPTION = "Network Mapping"

NODE_COLORS = {
    "subdomain": (34, 153, 84),
    "domain": (242, 44, 13),
    "address": (243, 156, 18),
    "ptr": (237, 243, 26),
    "ns": (26, 243, 240),
    "mx": (142, 68, 173),
    "netblock": (243, 26, 188),
    "as": (26, 69, 243),
}

_HEADER = '<?xml version="1.0" encoding="UTF-8"?>\n'
_PREFIX = "  "
_INDENT = "    "

_NODE_ATTRIBUTES = (("0", "Title"), ("1", "Source"), ("2", "Type"))

_ESCAPES = {
    '"': "&#34;",
    "'": "&#39;",
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    "\t": "&#x9;",
    "\n": "&#xA;",
    "\r": "&#xD;",
}


def _valid_char(ch: str) -> bool:
    code = ord(ch)
    return (
        code in (0x09, 0x0A, 0x0D)
        or 0x20 <= code <= 0xD7FF
        or 0xE000 <= code <= 0xFFFD
        or 0x10000 <= code <= 0x10FFFF
    )


def _escape(text: str) -> str:
    return "".join(
        _ESCAPES.get(ch, ch) if _valid_char(ch) else "\ufffd" for ch in text
    )


def _attrs(pairs: Iterable[tuple[str, str]]) -> str:
    return "".join(f' {name}="{_escape(value)}"' for name, value in pairs)


class _Writer:
    """Collects indented XML lines."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def line(self, depth: int, text: str) -> None:
        self.lines.append(_PREFIX + _INDENT * depth + text)

    def empty(self, depth: int, tag: str, pairs: Iterable[tuple[str, str]] = ()) -> None:
        self.line(depth, f"<{tag}{_attrs(pairs)}></{tag}>")

    def text(self, depth: int, tag: str, value: str) -> None:
        self.line(depth, f"<{tag}>{_escape(value)}</{tag}>")

    def open(self, depth: int, tag: str, pairs: Iterable[tuple[str, str]] = ()) -> None:
        self.line(depth, f"<{tag}{_attrs(pairs)}>")

    def close(self, depth: int, tag: str) -> None:
        self.line(depth, f"</{tag}>")


def _write_node(w: _Writer, idx: int, node: Node) -> None:
    pairs = [("id", str(idx))]
    if node.label:
        pairs.append(("label", node.label))
    w.open(3, "node", pairs)
    w.open(4, "attvalues")
    for key, value in (("0", node.title), ("1", node.source), ("2", node.type)):
        w.empty(5, "attvalue", [("for", key), ("value", value)])
    w.close(4, "attvalues")
    w.empty(4, "parents")
    color = NODE_COLORS.get(node.type)
    if color is not None:
        r, g, b = color
        w.empty(4, "viz:color", [("r", str(r)), ("g", str(g)), ("b", str(b))])
    w.close(3, "node")


def _write_edge(w: _Writer, idx: int, edge: Edge) -> None:
    pairs = [("id", str(idx))]
    if edge.label:
        pairs.append(("label", edge.label))
    pairs += [("source", str(edge.from_node)), ("target", str(edge.to_node))]
    w.empty(3, "edge", pairs)


def write_gexf_data(output: TextIO, nodes: Sequence[Node], edges: Sequence[Edge]) -> None:
    """Write the graph to ``output`` as a GEXF document."""
    w = _Writer()
    w.open(0, "gexf", [("xmlns", XML_NS), ("version", GEXF_VERSION), ("xmlns:viz", XML_NS_VIZ)])

    w.open(1, "meta", [("lastmodifieddate", datetime.now(timezone.utc).strftime("%Y-%m-%d"))])
    w.text(2, "creator", CREATOR)
    w.text(2, "description", DESCRIPTION)
    w.close(1, "meta")

    w.open(1, "graph", [("mode", "static"), ("defaultedgetype", "directed")])
    w.open(2, "attributes", [("class", "node")])
    for attr_id, title in _NODE_ATTRIBUTES:
        w.empty(3, "attribute", [("id", attr_id), ("title", title), ("type", "string")])
    w.close(2, "attributes")

    if nodes:
        w.open(2, "nodes")
        for idx, node in enumerate(nodes):
            _write_node(w, idx, node)
        w.close(2, "nodes")

    if edges:
        w.open(2, "edges")
        for idx, edge in enumerate(edges):
            _write_edge(w, idx, edge)
        w.close(2, "edges")

    w.close(1, "graph")
    w.close(0, "gexf")

    output.write(_HEADER + "\n".join(w.lines))