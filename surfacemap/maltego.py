"""Maltego table (CSV) output for visualisation data."""

from __future__ import annotations

import ipaddress
from collections.abc import Iterator, Sequence
from typing import TextIO

from surfacemap.graph import Edge, Node

COLUMN_TYPES = (
    "maltego.Domain",
    "maltego.DNSName",
    "maltego.NSRecord",
    "maltego.MXRecord",
    "maltego.IPv4Address",
    "maltego.Netblock",
    "maltego.AS",
    "maltego.Company",
    "maltego.DNSName",
)

_TYPE_COLUMNS = {
    "domain": 0,
    "subdomain": 1,
    "ptr": 8,
    "cname": 8,
    "address": 4,
    "ns": 2,
    "mx": 3,
    "netblock": 5,
    "as": 6,
    "company": 7,
}


def write_maltego_data(output: TextIO, nodes: Sequence[Node], edges: Sequence[Edge]) -> None:
    """Write the graph as a Maltego table, traversing from autonomous systems."""
    output.write(",".join(COLUMN_TYPES) + "\n")
    visited: set[int] = set()
    for idx, node in enumerate(nodes):
        if node.type == "as":
            _traverse(output, idx, nodes, edges, visited)


def cidr_to_maltego_netblock(cidr: str) -> str:
    """Convert CIDR notation to a first-last address range, or '' if invalid."""
    _, sep, prefix = cidr.partition("/")
    if not sep or not prefix.isdigit():
        return ""
    try:
        network = ipaddress.ip_network(cidr, strict=False)
    except ValueError:
        return ""
    return f"{network.network_address}-{network.broadcast_address}"


def _write_row(output: TextIO, data1: str, type1: str, data2: str, type2: str) -> None:
    row = [""] * len(COLUMN_TYPES)
    for data, kind in ((data1, type1), (data2, type2)):
        row[_TYPE_COLUMNS.get(kind, 0)] = (
            cidr_to_maltego_netblock(data) if kind == "netblock" else data
        )
    output.write(",".join(row) + "\n")


def _next_node(node_id: int, outbound: bool, edge: Edge) -> int | None:
    if outbound:
        return edge.to_node if edge.from_node == node_id else None
    return edge.from_node if edge.to_node == node_id else None


def _company(title: str) -> str:
    parts = title.split(":")
    if len(parts) < 3:
        raise ValueError(f"malformed autonomous system title: {title!r}")
    return parts[2].strip().replace(",", "")


def _visit(
    output: TextIO,
    node_id: int,
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    visited: set[int],
) -> Iterator[int]:
    """Write the rows for one node, yielding each neighbour to descend into."""
    node = nodes[node_id]
    d1, t1 = node.label, node.type
    outbound = t1 in ("netblock", "as")

    if node_id in visited:
        return
    visited.add(node_id)

    if t1 == "as":
        _write_row(output, d1, t1, _company(node.title), "company")

    for edge in edges:
        sub_outbound = outbound
        nxt = _next_node(node_id, outbound, edge)
        if nxt is None and t1 in ("subdomain", "domain"):
            sub_outbound = True
            nxt = _next_node(node_id, sub_outbound, edge)
        if nxt is None:
            continue

        d2, t2 = nodes[nxt].label, nodes[nxt].type
        if "cname" in edge.title:
            if sub_outbound:
                _write_row(output, d1, "cname", d2, t2)
            else:
                _write_row(output, d1, t1, d2, "cname")
        else:
            _write_row(output, d1, t1, d2, t2)
        yield nxt


def _traverse(
    output: TextIO,
    start: int,
    nodes: Sequence[Node],
    edges: Sequence[Edge],
    visited: set[int],
) -> None:
    stack = [_visit(output, start, nodes, edges, visited)]
    while stack:
        try:
            nxt = next(stack[-1])
        except StopIteration:
            stack.pop()
            continue
        stack.append(_visit(output, nxt, nodes, edges, visited))