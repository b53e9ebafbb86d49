import io

import pytest

from surfacemap.graph import Edge, Node
from surfacemap.maltego import cidr_to_maltego_netblock, write_maltego_data

HEADER = (
    "maltego.Domain,maltego.DNSName,maltego.NSRecord,maltego.MXRecord,"
    "maltego.IPv4Address,maltego.Netblock,maltego.AS,maltego.Company,maltego.DNSName"
)


def _render(nodes, edges):
    buf = io.StringIO()
    write_maltego_data(buf, nodes, edges)
    return buf.getvalue().splitlines()


def _sample():
    nodes = [
        Node(0, "as", "13374", "as: 13374, Desc: Example, Inc", "asn"),
        Node(1, "netblock", "10.0.0.0/30", "netblock: 10.0.0.0/30", "asn"),
        Node(2, "address", "10.0.0.1", "address: 10.0.0.1", "dns"),
        Node(3, "subdomain", "www.example.com", "subdomain: www.example.com", "dns"),
    ]
    edges = [
        Edge(from_node=0, to_node=1, title="prefix"),
        Edge(from_node=1, to_node=2, title="contains"),
        Edge(from_node=3, to_node=2, title="a_record"),
    ]
    return nodes, edges


def test_header_only_without_autonomous_systems():
    lines = _render([Node(0, "subdomain", "www.example.com", "", "dns")], [])
    assert lines == [HEADER]


def test_every_row_has_nine_columns():
    lines = _render(*_sample())
    assert lines[0] == HEADER
    assert len(lines) > 1
    assert all(len(line.split(",")) == 9 for line in lines)


def test_company_row_follows_header():
    row = _render(*_sample())[1].split(",")
    assert row[6] == "13374"
    assert row[7] == "Example Inc"


def test_netblock_rows_use_ranges():
    rows = [line.split(",") for line in _render(*_sample())[1:]]
    netblocks = {row[5] for row in rows if row[5]}
    assert netblocks == {"10.0.0.0-10.0.0.3"}


def test_subdomain_reached_from_address():
    rows = [line.split(",") for line in _render(*_sample())[1:]]
    assert any(row[4] == "10.0.0.1" and row[1] == "www.example.com" for row in rows)


def test_cname_goes_to_last_column():
    nodes, edges = _sample()
    nodes.append(Node(4, "subdomain", "alias.example.com", "", "dns"))
    edges.append(Edge(from_node=4, to_node=3, title="cname_record"))
    rows = [line.split(",") for line in _render(nodes, edges)[1:]]
    assert any(row[1] == "www.example.com" and row[8] == "alias.example.com" for row in rows)


def test_malformed_as_title_raises():
    with pytest.raises(ValueError):
        _render([Node(0, "as", "13374", "as 13374", "asn")], [])


def test_cidr_to_netblock():
    assert cidr_to_maltego_netblock("10.0.0.0/30") == "10.0.0.0-10.0.0.3"


def test_cidr_host_bits_ignored():
    assert cidr_to_maltego_netblock("10.0.0.2/30") == cidr_to_maltego_netblock("10.0.0.0/30")


@pytest.mark.parametrize("bad", ["not-a-cidr", "10.0.0.0", "10.0.0.0/33", "10.0.0.0/255.0.0.0"])
def test_invalid_cidr_gives_empty(bad):
    assert cidr_to_maltego_netblock(bad) == ""