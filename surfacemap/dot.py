"""Graphviz DOT output for visualisation data."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TextIO

from surfacemap.graph import Edge, Node

GRAPH_NAME = "Network Mapping"

PAGE_SIZE = "7.5,10"
RANK_SEPARATION = "2.5 equally"
RATIO = "auto"

NODE_COLORS = {
    "subdomain": "green",
    "domain": "red",
    "address": "orange",
    "ptr": "yellow",
    "ns": "cyan",
    "mx": "purple",
    "netblock": "pink",
    "as": "blue",
}

_INDENT = " " * 8


def _attributes(**values: str) -> str:
    return ",".join(f'{key}="{value}"' for key, value in values.items())


def _node_statement(number: int, node: Node) -> str:
    attrs = _attributes(
        label=node.label,
        color=NODE_COLORS.get(node.type, ""),
        type=node.type,
        source=node.source,
    )
    return f"node [{attrs}]; n{number};"


def _edge_statement(edge: Edge) -> str:
    return f"n{edge.from_node + 1} -> n{edge.to_node + 1} [{_attributes(label=edge.title)}];"


def _block(statements) -> str:
    return "".join(f"\n{_INDENT}{statement}\n" for statement in statements)


def write_dot_data(output: TextIO, nodes: Sequence[Node], edges: Sequence[Edge]) -> None:
    """Write the graph to ``output`` as a DOT digraph."""
    settings = f'size = "{PAGE_SIZE}"; ranksep="{RANK_SEPARATION}"; ratio={RATIO};'
    header = f'\ndigraph "{GRAPH_NAME}" {{\n\t{settings}\n\n'
    node_block = _block(
        _node_statement(number, node) for number, node in enumerate(nodes, start=1)
    )
    edge_block = _block(_edge_statement(edge) for edge in edges)
    output.write(header + node_block + "\n\n" + edge_block + "\n}\n")