"""Graphistry JSON output for visualisation data."""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import datetime
from typing import TextIO

from surfacemap.graph import Edge, Node

NAME_PREFIX = "Surfacemap_"

NODE_COLORS = {
    "subdomain": 3,
    "domain": 5,
    "address": 7,
    "ptr": 10,
    "ns": 0,
    "mx": 9,
    "netblock": 4,
    "as": 1,
}

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_JSON_ESCAPES = str.maketrans(
    {
        "<": "\\u003c",
        ">": "\\u003e",
        "&": "\\u0026",
        "\u2028": "\\u2028",
        "\u2029": "\\u2029",
    }
)


def _graph_name(now: datetime) -> str:
    return (
        f"{NAME_PREFIX}{_MONTHS[now.month - 1]}_{now.day}_{now.year}"
        f"_{now:%H}_{now:%M}_{now:%S}"
    )


def write_graphistry_data(output: TextIO, nodes: Sequence[Node], edges: Sequence[Edge]) -> None:
    """Write the graph to ``output`` as a Graphistry edge-list document."""
    labels = [
        {
            "node": str(idx),
            "pointLabel": node.label,
            "pointTitle": node.title,
            "pointColor": NODE_COLORS.get(node.type, 0),
            "type": node.type,
            "source": node.source,
        }
        for idx, node in enumerate(nodes)
    ]
    graph = [
        {
            "src": str(edge.from_node),
            "dst": str(edge.to_node),
            "edgeTitle": edge.title,
        }
        for edge in edges
    ]
    document = {
        "name": _graph_name(datetime.now()),
        "type": "edgelist",
        "bindings": {
            "sourceField": "src",
            "destinationField": "dst",
            "idField": "node",
        },
        "graph": graph or None,
        "labels": labels or None,
    }
    text = json.dumps(document, indent=2, ensure_ascii=False)
    output.write(text.translate(_JSON_ESCAPES) + "\n")