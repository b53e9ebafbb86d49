"""Graph records and the conversion of stored quads into visualisation data."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

_SKIPPED_TYPES = frozenset({"", "source", "event", "response"})

_EDGE_PREDICATES = frozenset(
    {
        "root",
        "cname_record",
        "a_record",
        "aaaa_record",
        "ptr_record",
        "service",
        "srv_record",
        "ns_record",
        "mx_record",
        "contains",
        "prefix",
    }
)

_IN_EDGE_PREDICATES = frozenset({"root", "mx_record", "ns_record"})

_IN_EDGE_TYPES = {"root": "domain", "ns_record": "ns", "mx_record": "mx"}


class IRI(str):
    """An IRI value, possibly wrapped in angle brackets."""

    __slots__ = ()


@dataclass(frozen=True)
class Quad:
    """A subject-predicate-object statement read from the graph store."""

    subject: Any
    predicate: Any
    object: Any
    label: Any = ""


@dataclass
class Node:
    """A graph node prepared for visualisation."""

    id: int = 0
    type: str = ""
    label: str = ""
    title: str = ""
    source: str = ""
    actual_type: str = ""


@dataclass
class Edge:
    """A directed edge between two nodes, referenced by their indices."""

    from_node: int = 0
    to_node: int = 0
    label: str = ""
    title: str = ""


QuadIndex = Mapping[str, Sequence[Quad]]


def value_to_str(value: Any) -> str:
    """Return the plain text of a quad value, or an empty string."""
    if isinstance(value, IRI):
        return str(value).lstrip("<").rstrip(">")
    if isinstance(value, str):
        return value.strip('"')
    return ""


def viz_data(quads: Iterable[Quad], uuids: Sequence[str]) -> tuple[list[Node], list[Edge]]:
    """Build visualisation nodes and edges from the quads of the given events."""
    node_quads: dict[str, list[Quad]] = {}
    for q in quads:
        key = value_to_str(q.subject)
        if key:
            node_quads.setdefault(key, []).append(q)

    nodes: list[Node] = []
    node_to_idx: dict[str, int] = {}
    for subject, qs in node_quads.items():
        ntype = _first_object(qs, "type")
        if ntype in _SKIPPED_TYPES:
            continue
        if ntype == "fqdn" and _is_tld(subject, node_quads):
            continue

        src = _get_source(subject, uuids, node_quads)
        if not src:
            continue

        newtype = _convert_node_type(subject, ntype, node_quads)
        if not newtype:
            continue

        title = f"{newtype}: {subject}"
        if newtype == "as":
            title += ", Desc: " + _first_object(qs, "description")

        node = Node(
            id=len(nodes),
            type=newtype,
            label=subject,
            title=title,
            source=src,
            actual_type=ntype,
        )
        node_to_idx[subject] = node.id
        nodes.append(node)

    return nodes, _viz_edges(nodes, node_to_idx, node_quads)


def _first_object(quads: Iterable[Quad], predicate: str) -> str:
    for q in quads:
        if value_to_str(q.predicate) == predicate:
            return value_to_str(q.object)
    return ""


def _is_tld(subject: str, node_quads: QuadIndex) -> bool:
    return any(
        value_to_str(q.object) == subject and value_to_str(q.predicate) == "tld"
        for qs in node_quads.values()
        for q in qs
    )


def _get_source(subject: str, events: Sequence[str], node_quads: QuadIndex) -> str:
    for event in events:
        for q in node_quads.get(event, ()):
            if value_to_str(q.object) != subject:
                continue
            pred = value_to_str(q.predicate)
            if pred and pred != "domain":
                return pred
    return ""


def _out_edges(quads: Iterable[Quad], predicates: frozenset[str]) -> list[Quad]:
    return [q for q in quads if value_to_str(q.predicate) in predicates]


def _in_edge(subject: str, node_quads: QuadIndex, predicates: frozenset[str]) -> str:
    # The last subject holding a matching inbound edge decides the result.
    result = ""
    for qs in node_quads.values():
        for q in qs:
            if value_to_str(q.object) != subject:
                continue
            pred = value_to_str(q.predicate)
            if pred in predicates:
                result = pred
                break
    return result


def _convert_node_type(subject: str, ntype: str, node_quads: QuadIndex) -> str:
    if ntype == "fqdn":
        inbound = _in_edge(subject, node_quads, _IN_EDGE_PREDICATES)
        if inbound:
            return _IN_EDGE_TYPES[inbound]
        if _out_edges(node_quads.get(subject, ()), frozenset({"ptr_record"})):
            return "ptr"
        return "subdomain"
    if ntype == "ipaddr":
        return "address"
    return ntype


def _viz_edges(nodes: Iterable[Node], node_to_idx: Mapping[str, int], node_quads: QuadIndex) -> list[Edge]:
    edges: list[Edge] = []
    for node in nodes:
        for q in _out_edges(node_quads.get(node.label, ()), _EDGE_PREDICATES):
            pred = value_to_str(q.predicate)
            to_id = node_to_idx.get(value_to_str(q.object))
            if to_id is not None and pred:
                edges.append(Edge(from_node=node.id, to_node=to_id, title=pred))
    return edges