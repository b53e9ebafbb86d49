# surfacemap

`surfacemap` turns the quads of an attack-surface graph (subjects, predicates
and objects recorded during a DNS enumeration) into files that common graph
tools can open. It also has a small system layer that holds the resolver pool,
graph handles, ASN cache and data sources of one enumeration.

No third-party libraries are needed at run time.

## Building nodes and edges

`surfacemap.graph` defines the records:

- `Quad(subject, predicate, object, label="")` is one stored statement.
  Components may be plain strings, which can be wrapped in double quotes, or
  `IRI` values, which can be wrapped in angle brackets.
- `Node(id, type, label, title, source, actual_type)` is a node prepared for
  display.
- `Edge(from_node, to_node, label, title)` links two nodes by their indices in
  the node list.

`value_to_str(value)` removes the angle brackets around an `IRI` and the
double quotes around a string. It returns `""` for anything else.

`viz_data(quads, uuids)` takes an iterable of quads and the identifiers of
the enumeration events you care about. It returns `(nodes, edges)`:

- Nodes are grouped by subject. Subjects whose `type` is empty, `source`,
  `event` or `response` are skipped.
- FQDNs that are the object of a `tld` statement are skipped.
- A node is kept only when one of the listed events points at it with a
  predicate other than `domain`. That predicate becomes the node's `source`.
- An `fqdn` becomes `domain`, `ns` or `mx` when it has an inbound `root`,
  `ns_record` or `mx_record` edge. Otherwise it becomes `ptr` when it has an
  outbound `ptr_record`, and `subdomain` when it has neither. An `ipaddr`
  becomes `address`.
- A node's title is `"<type>: <subject>"`. For `as` nodes the title also
  gets `", Desc: <description>"`.
- Edges come from the `root`, `cname_record`, `a_record`, `aaaa_record`,
  `ptr_record`, `service`, `srv_record`, `ns_record`, `mx_record`, `contains`
  and `prefix` predicates, where both ends are kept nodes. The edge title is
  the predicate.

```python
from surfacemap.graph import IRI, Quad, viz_data

quads = [
    Quad(IRI("<example.com>"), "type", "fqdn"),
    Quad(IRI("<www.example.com>"), "type", "fqdn"),
    Quad(IRI("<ev1>"), "dns", IRI("<example.com>")),
    Quad(IRI("<ev1>"), "dns", IRI("<www.example.com>")),
    Quad(IRI("<example.com>"), "root", IRI("<example.com>")),
]
nodes, edges = viz_data(quads, ["ev1"])
```

## Writing output

Each writer takes a text stream, the nodes and the edges:

| Function | Module | Output |
| --- | --- | --- |
| `write_dot_data` | `surfacemap.dot` | Graphviz DOT digraph; nodes are numbered `n1`, `n2`, ... |
| `write_gexf_data` | `surfacemap.gexf` | GEXF 1.3 document for Gephi, dated today (UTC) |
| `write_d3_data` | `surfacemap.d3` | HTML page with a D3 force layout; node size follows its number of edges |
| `write_graphistry_data` | `surfacemap.graphistry` | Graphistry edge-list JSON named `Surfacemap_<Mon>_<day>_<year>_<HH>_<MM>_<SS>` |
| `write_maltego_data` | `surfacemap.maltego` | CSV table that Maltego can import |

```python
from surfacemap.dot import write_dot_data
from surfacemap.gexf import write_gexf_data

with open("network.dot", "w", encoding="utf-8") as out:
    write_dot_data(out, nodes, edges)

with open("network.gexf", "w", encoding="utf-8") as out:
    write_gexf_data(out, nodes, edges)
```

Every writer colours nodes by type: subdomain, domain, address, ptr, ns, mx,
netblock and as. Each module exposes its colour table as `NODE_COLORS`.

`write_d3_data` raises `IndexError` when an edge refers to a node that is not
in the list.

The Maltego table starts with a row of column types. It then walks the graph
from each `as` node, visiting each node once. An `as` node's title must hold
at least three `:`-separated parts, and the third part is taken as the
company name. Otherwise `ValueError` is raised. Netblocks are written as
address ranges: `cidr_to_maltego_netblock("10.0.0.0/30")` gives
`"10.0.0.0-10.0.0.3"`, and an invalid CIDR gives `""`.

## Systems

`surfacemap.systems` defines the `System` protocol: `config`, `pool`,
`cache`, `add_source`, `add_and_start`, `data_sources`, `set_data_sources`,
`graph_databases`, `get_memory_usage` and `shutdown`. Data sources only need
`start()` and `stop()`. Graphs only need `close()`, and resolvers only need
`stop()`.

- `SimpleSystem(config, resolver, graph, asn_cache, service)` holds a single
  data source. `set_data_sources` keeps the first source and raises
  `IndexError` when given none. `shutdown` stops the source, closes the graph,
  stops the resolver and drops the cache.
- `LocalSystem(config, pool, graphs=(), cache=None, output_dir=None)` holds
  any number of data sources, sorted by `str()`. It raises `ValueError` when
  `pool` is `None`. It creates `output_dir` if it does not exist and ignores
  any failure to do so. `set_data_sources` starts all sources at once and
  waits up to `start_timeout` seconds (5 by default). Sources whose `start()`
  raises are not added. `shutdown` runs once: it stops every source, closes
  every graph and stops the pool.

`add_and_start` lets any exception from `start()` propagate.
`get_memory_usage` returns the bytes traced by `tracemalloc` when it is
running. Otherwise it returns the peak resident size of the process, or 0
where that is not available.

`check_addresses(addrs)` cleans up a list of DNS resolver addresses. It adds
port 53 where no port is given and drops anything that is not an IP address:

```python
from surfacemap.systems import check_addresses

check_addresses(["1.1.1.1", "8.8.8.8:80", "NotAnIP"])
# ['1.1.1.1:53', '8.8.8.8:80']
```

## What it does not do

`surfacemap` does not send DNS queries, reach any graph database, or load
IP-to-ASN data. You supply the quads, the resolver pool, the graph handles and
the cache yourself. `LocalSystem` does not build a resolver pool or graph
stores from a configuration. The package has no command-line program.

## Running the tests

```
pip install "surfacemap[test]"
pytest
```