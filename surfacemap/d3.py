"""Interactive HTML page that draws visualisation data with D3."""

from __future__ import annotations

from collections.abc import Sequence
from string import Template
from typing import TextIO

from surfacemap.graph import Edge, Node

PAGE_TITLE = "Network Mapping"

D3_SCRIPT_URL = "https://d3js.org/d3.v4.min.js"

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

_STYLE = (
    "div#tooltip { position: absolute; display: inline-block; padding: 10px; "
    "font-family: 'Open Sans', sans-serif; color: #000; background: #fff; "
    "border: 1px solid #999; border-radius: 2px; pointer-events: none; "
    "opacity: 0; z-index: 1; }"
)

_SCRIPT = """
/* global d3 */
var graph = {
    nodes: [$nodes],
    edges: [$edges]
};

var r = 5, max = $max_num;
var width = window.innerWidth;
var height = window.innerHeight;
var view = d3.zoomIdentity;
var hovered = null;

var canvas = d3.select("#graphDiv").append("canvas")
    .attr("width", width + "px")
    .attr("height", height + "px")
    .node();
var pen = canvas.getContext("2d");

function share(n) {
    return max > 0 ? n.num / max : 0;
}

function radius(n) {
    return r * (1.5 + 3 * share(n));
}

function meanShare(link) {
    return (share(link.source) + share(link.target)) / 2;
}

var layout = d3.forceSimulation(graph.nodes)
    .force("link", d3.forceLink(graph.edges)
        .id(function (n) { return n.id; })
        .distance(function (link) { return 60 * meanShare(link); })
        .strength(function (link) { return 1 - meanShare(link); }))
    .force("charge", d3.forceManyBody()
        .strength(function (n) { return -100 - 300 * share(n); })
        .distanceMax(width * 2))
    .force("collide", d3.forceCollide()
        .radius(function (n) { return radius(n) + 1; }))
    .force("center", d3.forceCenter(width / 2, height / 2))
    .on("tick", paint);

function paintLink(link) {
    var sx = link.source.x, sy = link.source.y;
    var dx = link.target.x - sx, dy = link.target.y - sy;
    var angle = Math.atan2(dy, dx);

    pen.beginPath();
    pen.moveTo(sx, sy);
    pen.lineTo(link.target.x, link.target.y);
    pen.strokeStyle = "#aaa";
    pen.stroke();

    pen.save();
    pen.translate(sx + dx / 2, sy + dy / 2);
    pen.rotate(dx < 0 ? angle - Math.PI : angle);
    pen.textAlign = "center";
    pen.fillStyle = "#aaa";
    pen.fillText(link.label, 0, 0);
    pen.restore();
}

function paintNode(n) {
    pen.beginPath();
    pen.moveTo(n.x, n.y);
    pen.arc(n.x, n.y, radius(n), 0, 2 * Math.PI);
    pen.fillStyle = n.color;
    pen.strokeStyle = "#333333";
    pen.stroke();
    pen.fill();
}

function showTooltip() {
    var tip = d3.select("#tooltip");
    if (!hovered) {
        tip.style("opacity", 0);
        return;
    }
    tip.style("opacity", 0.8)
        .style("left", view.applyX(hovered.x) + 5 + "px")
        .style("top", view.applyY(hovered.y) + 5 + "px")
        .html(hovered.label);
}

function paint() {
    pen.save();
    pen.clearRect(0, 0, width, height);
    pen.translate(view.x, view.y);
    pen.scale(view.k, view.k);
    graph.edges.forEach(paintLink);
    graph.nodes.forEach(paintNode);
    pen.restore();
    showTooltip();
}

function nodeAt(x, y) {
    var px = view.invertX(x), py = view.invertY(y);
    for (var i = graph.nodes.length - 1; i >= 0; i--) {
        var n = graph.nodes[i];
        var dx = px - n.x, dy = py - n.y, reach = radius(n);
        if (dx * dx + dy * dy < reach * reach) {
            return n;
        }
    }
    return null;
}

d3.select(canvas)
    .call(d3.drag()
        .container(canvas)
        .subject(function () {
            var n = nodeAt(d3.event.x, d3.event.y);
            return n && {node: n, x: view.applyX(n.x), y: view.applyY(n.y)};
        })
        .on("start", function () {
            if (!d3.event.active) layout.alphaTarget(0.3).restart();
            var n = d3.event.subject.node;
            n.fx = n.x;
            n.fy = n.y;
        })
        .on("drag", function () {
            var n = d3.event.subject.node;
            n.fx = view.invertX(d3.event.x);
            n.fy = view.invertY(d3.event.y);
        })
        .on("end", function () {
            if (!d3.event.active) layout.alphaTarget(0);
            var n = d3.event.subject.node;
            n.fx = null;
            n.fy = null;
        }))
    .call(d3.zoom().scaleExtent([0.1, 8]).on("zoom", function () {
        view = d3.event.transform;
        paint();
    }))
    .on("mousemove", function () {
        var at = d3.mouse(this);
        hovered = nodeAt(at[0], at[1]);
        paint();
    });

paint();
"""

_PAGE = Template(
    "\n<!DOCTYPE html>\n"
    '<html lang="en">\n'
    "<head>\n"
    '<meta charset="utf-8">\n'
    "<title>$title</title>\n"
    '<script src="$script_url"></script>\n'
    f"<style>{_STYLE}</style>\n"
    "</head>\n"
    "<body>\n"
    '<div id="graphDiv"></div>\n'
    '<div id="tooltip"></div>\n'
    f"<script>{_SCRIPT}</script>\n"
    "</body>\n"
    "</html>\n"
)


def _node_degrees(node_count: int, edges: Sequence[Edge]) -> list[int]:
    degrees = [0] * node_count
    for edge in edges:
        for end in (edge.from_node, edge.to_node):
            if not 0 <= end < node_count:
                raise IndexError(f"edge refers to missing node {end}")
            degrees[end] += 1
    return degrees


def write_d3_data(output: TextIO, nodes: Sequence[Node], edges: Sequence[Edge]) -> None:
    """Write an HTML page that displays the graph with a D3 force layout."""
    degrees = _node_degrees(len(nodes), edges)
    labels = [
        node.title + (f", Source: {node.source}" if node.source else "")
        for node in nodes
    ]

    node_text = "".join(
        f'\n        {{id: {idx}, num: {degree}, label: "{label}", '
        f'color: "{NODE_COLORS.get(node.type, "")}" }},\n    '
        for idx, (node, degree, label) in enumerate(zip(nodes, degrees, labels))
    )
    edge_text = "".join(
        f"\n        {{source: {edge.from_node}, target: {edge.to_node}, "
        f'label: "{edge.title}" }},\n    '
        for edge in edges
    )
    output.write(
        _PAGE.substitute(
            title=PAGE_TITLE,
            script_url=D3_SCRIPT_URL,
            nodes=node_text,
            edges=edge_text,
            max_num=max(degrees, default=0),
        )
    )