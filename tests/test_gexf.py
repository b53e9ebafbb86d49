import io
import re
import xml.etree.ElementTree as ET
from datetime import datetime, timezone

import pytest

from surfacemap.gexf import write_gexf_data
from surfacemap.graph import Edge, Node

NS = "{http://www.gephi.org/gexf}"
VIZ = "{http://www.gephi.org/gexf/viz}"


def _render(nodes, edges):
    buf = io.StringIO()
    write_gexf_data(buf, nodes, edges)
    return buf.getvalue()


def _parse(text):
    return ET.fromstring(text.encode("utf-8"))


@pytest.fixture
def sample():
    nodes = [
        Node(id=0, type="subdomain", label="www.example.com",
             title="subdomain: www.example.com", source="dns"),
        Node(id=1, type="address", label="192.0.2.1",
             title="address: 192.0.2.1", source="dns"),
    ]
    edges = [Edge(from_node=0, to_node=1, title="a_record")]
    return nodes, edges


def test_header_and_root_line(sample):
    text = _render(*sample)
    assert text.startswith(
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '  <gexf xmlns="http://www.gephi.org/gexf" version="1.3" '
        'xmlns:viz="http://www.gephi.org/gexf/viz">\n'
    )
    assert text.endswith("\n  </gexf>")


def test_root_version_and_graph_mode(sample):
    root = _parse(_render(*sample))
    assert root.tag == NS + "gexf"
    assert root.get("version") == "1.3"
    graph = root.find(NS + "graph")
    assert graph.get("mode") == "static"
    assert graph.get("defaultedgetype") == "directed"


def test_meta_date_is_today_utc(sample):
    before = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    root = _parse(_render(*sample))
    after = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    date = root.find(NS + "meta").get("lastmodifieddate")
    assert re.fullmatch(r"\d{4}-\d{2}-\d{2}", date)
    assert date in {before, after}


def test_node_attribute_declarations(sample):
    root = _parse(_render(*sample))
    attributes = root.find(f"{NS}graph/{NS}attributes")
    assert attributes.get("class") == "node"
    declared = [(a.get("id"), a.get("title"), a.get("type")) for a in attributes]
    assert declared == [("0", "Title", "string"), ("1", "Source", "string"), ("2", "Type", "string")]


def test_nodes_round_trip(sample):
    nodes, edges = sample
    root = _parse(_render(nodes, edges))
    parsed = root.findall(f"{NS}graph/{NS}nodes/{NS}node")
    assert [n.get("id") for n in parsed] == ["0", "1"]
    assert [n.get("label") for n in parsed] == [n.label for n in nodes]
    values = {
        a.get("for"): a.get("value")
        for a in parsed[0].findall(f"{NS}attvalues/{NS}attvalue")
    }
    assert values == {"0": nodes[0].title, "1": nodes[0].source, "2": nodes[0].type}


def test_subdomain_color(sample):
    root = _parse(_render(*sample))
    node = root.find(f"{NS}graph/{NS}nodes/{NS}node")
    color = node.find(VIZ + "color")
    assert (color.get("r"), color.get("g"), color.get("b")) == ("34", "153", "84")


def test_every_node_has_empty_parents(sample):
    text = _render(*sample)
    assert text.count("<parents></parents>") == len(sample[0])


def test_unknown_type_has_no_color_and_empty_label_is_omitted():
    node = Node(id=0, type="other", label="", title="t", source="s")
    root = _parse(_render([node], []))
    parsed = root.find(f"{NS}graph/{NS}nodes/{NS}node")
    assert parsed.find(VIZ + "color") is None
    assert "label" not in parsed.attrib


def test_edges_round_trip(sample):
    nodes, edges = sample
    root = _parse(_render(nodes, edges))
    parsed = root.findall(f"{NS}graph/{NS}edges/{NS}edge")
    assert len(parsed) == len(edges)
    assert parsed[0].attrib == {"id": "0", "source": "0", "target": "1"}


def test_empty_graph_omits_nodes_and_edges():
    root = _parse(_render([], []))
    graph = root.find(NS + "graph")
    assert graph.find(NS + "nodes") is None
    assert graph.find(NS + "edges") is None


def test_special_characters_are_escaped():
    label = 'a<b>&"c\'\n'
    node = Node(id=0, type="domain", label=label, title=label, source="s")
    text = _render([node], [])
    assert "&lt;" in text and "&amp;" in text and "&#34;" in text
    parsed = _parse(text).find(f"{NS}graph/{NS}nodes/{NS}node")
    assert parsed.get("label") == label