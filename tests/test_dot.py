import io

from surfacemap.dot import write_dot_data
from surfacemap.graph import Edge, Node


def _render(nodes, edges):
    buf = io.StringIO()
    write_dot_data(buf, nodes, edges)
    return buf.getvalue()


def _sample():
    nodes = [
        Node(0, "subdomain", "www.example.com", "subdomain: www.example.com", "dns"),
        Node(1, "address", "192.0.2.1", "address: 192.0.2.1", "dns"),
    ]
    edges = [Edge(from_node=0, to_node=1, title="a_record")]
    return nodes, edges


def test_header_and_footer():
    out = _render([], [])
    assert out.startswith("\ndigraph ")
    assert 'size = "7.5,10"; ranksep="2.5 equally"; ratio=auto;' in out
    assert out.endswith("\n}\n")


def test_nodes_are_numbered_from_one():
    out = _render(*_sample())
    assert (
        'node [label="www.example.com",color="green",type="subdomain",source="dns"]; n1;'
        in out
    )
    assert 'node [label="192.0.2.1",color="orange",type="address",source="dns"]; n2;' in out


def test_edges_use_shifted_indices_and_title():
    out = _render(*_sample())
    assert 'n1 -> n2 [label="a_record"];' in out


def test_one_line_per_node_and_edge():
    nodes, edges = _sample()
    out = _render(nodes, edges)
    assert out.count("node [label=") == len(nodes)
    assert out.count(" -> ") == len(edges)


def test_unknown_type_gets_empty_color():
    out = _render([Node(0, "cname", "x.example.com", "", "dns")], [])
    assert 'color="",type="cname"' in out


def test_nodes_precede_edges():
    out = _render(*_sample())
    assert out.index("n2;") < out.index("n1 -> n2")