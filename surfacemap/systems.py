"""Systems that own the resolver pool, graph stores and data sources of an enumeration."""

from __future__ import annotations

import contextlib
import ipaddress
import sys
import threading
import tracemalloc
from collections.abc import Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

DEFAULT_DNS_PORT = "53"


class Service(Protocol):
    """A data source that can be started and stopped."""

    def start(self) -> None: ...

    def stop(self) -> None: ...


class Resolver(Protocol):
    """A DNS resolver or pool of resolvers."""

    def stop(self) -> None: ...


class Graph(Protocol):
    """A graph database handle."""

    def close(self) -> None: ...


@runtime_checkable
class System(Protocol):
    """Manages the services that perform reconnaissance activities."""

    config: Any

    @property
    def pool(self) -> Any: ...

    @property
    def cache(self) -> Any: ...

    def add_source(self, src: Service) -> None: ...

    def add_and_start(self, srv: Service) -> None: ...

    def data_sources(self) -> list[Service]: ...

    def set_data_sources(self, sources: Sequence[Service]) -> None: ...

    def graph_databases(self) -> list[Graph]: ...

    def get_memory_usage(self) -> int: ...

    def shutdown(self) -> None: ...


def _memory_usage() -> int:
    """Bytes traced by tracemalloc, or the peak resident size of the process."""
    if tracemalloc.is_tracing():
        return tracemalloc.get_traced_memory()[0]
    try:
        import resource
    except ImportError:
        return 0
    peak = resource.getrusage(resource.RUSAGE_SELF).ru_maxrss
    return peak if sys.platform == "darwin" else peak * 1024


def _stop_quietly(service: Service) -> None:
    with contextlib.suppress(Exception):
        service.stop()


@dataclass
class SimpleSystem:
    """A system holding a single resolver, graph, cache and data source."""

    config: Any = None
    resolver: Any = None
    graph: Any = None
    asn_cache: Any = None
    service: Any = None

    @property
    def pool(self) -> Any:
        return self.resolver

    @property
    def cache(self) -> Any:
        return self.asn_cache

    def add_source(self, src: Service) -> None:
        """Make ``src`` the data source of this system."""
        self.service = src

    def add_and_start(self, srv: Service) -> None:
        """Start ``srv`` and make it the data source; start errors propagate."""
        srv.start()
        self.add_source(srv)

    def data_sources(self) -> list[Service]:
        return [self.service]

    def set_data_sources(self, sources: Sequence[Service]) -> None:
        """Use the first of ``sources``; an empty sequence raises IndexError."""
        self.service = sources[0]

    def graph_databases(self) -> list[Graph]:
        return [self.graph]

    def get_memory_usage(self) -> int:
        return _memory_usage()

    def shutdown(self) -> None:
        """Stop the data source, close the graph and stop the resolver."""
        if self.service is not None:
            _stop_quietly(self.service)
        if self.graph is not None:
            self.graph.close()
        if self.resolver is not None:
            self.resolver.stop()
        self.asn_cache = None


class LocalSystem:
    """A system executed within a single process."""

    start_timeout = 5.0

    def __init__(
        self,
        config: Any,
        pool: Any,
        graphs: Iterable[Graph] = (),
        cache: Any = None,
        output_dir: str | Path | None = None,
    ) -> None:
        if pool is None:
            raise ValueError("the system was unable to build the pool of resolvers")
        self.config = config
        self._pool = pool
        self._graphs = list(graphs)
        self._cache = cache
        self._sources: list[Service] = []
        self._lock = threading.Lock()
        self._closed = False
        if output_dir:
            # A directory that cannot be created is not fatal.
            with contextlib.suppress(OSError):
                Path(output_dir).mkdir(mode=0o755, parents=True, exist_ok=True)

    @property
    def pool(self) -> Any:
        return self._pool

    @property
    def cache(self) -> Any:
        return self._cache

    def add_source(self, src: Service) -> None:
        """Add ``src`` to the data sources, kept sorted by name."""
        with self._lock:
            self._sources.append(src)
            self._sources.sort(key=str)

    def add_and_start(self, srv: Service) -> None:
        """Start ``srv`` and add it to the data sources; start errors propagate."""
        srv.start()
        self.add_source(srv)

    def data_sources(self) -> list[Service]:
        with self._lock:
            return list(self._sources)

    def set_data_sources(self, sources: Sequence[Service]) -> None:
        """Start all ``sources`` concurrently, keeping those that start in time."""
        sources = list(sources)
        if not sources:
            return
        executor = ThreadPoolExecutor(max_workers=len(sources))
        try:
            futures = [executor.submit(self.add_and_start, src) for src in sources]
            wait(futures, timeout=self.start_timeout)
        finally:
            executor.shutdown(wait=False)

    def graph_databases(self) -> list[Graph]:
        return list(self._graphs)

    def get_memory_usage(self) -> int:
        return _memory_usage()

    def shutdown(self) -> None:
        """Stop every data source, close the graphs and stop the resolver pool."""
        if self._closed:
            return
        self._closed = True

        sources = self.data_sources()
        if sources:
            with ThreadPoolExecutor(max_workers=len(sources)) as executor:
                list(executor.map(_stop_quietly, sources))

        for graph in self._graphs:
            graph.close()
        self._pool.stop()
        self._cache = None


def _split_host_port(addr: str) -> tuple[str, str]:
    if addr.startswith("["):
        end = addr.find("]")
        if end < 0:
            raise ValueError(f"missing ']' in address {addr!r}")
        host, rest = addr[1:end], addr[end + 1 :]
        if not rest.startswith(":"):
            raise ValueError(f"missing port in address {addr!r}")
        port = rest[1:]
        if ":" in port:
            raise ValueError(f"too many colons in address {addr!r}")
    else:
        host, sep, port = addr.rpartition(":")
        if not sep:
            raise ValueError(f"missing port in address {addr!r}")
        if ":" in host:
            raise ValueError(f"too many colons in address {addr!r}")
    if any(ch in host for ch in "[]") or any(ch in port for ch in "[]"):
        raise ValueError(f"unexpected bracket in address {addr!r}")
    return host, port


def _is_ip(text: str) -> bool:
    if "%" in text:
        return False
    try:
        ipaddress.ip_address(text)
    except ValueError:
        return False
    return True


def _join_host_port(host: str, port: str) -> str:
    return f"[{host}]:{port}" if ":" in host else f"{host}:{port}"


def check_addresses(addrs: Iterable[str]) -> list[str]:
    """Keep the addresses that hold a valid IP, adding port 53 where none is given."""
    result: list[str] = []
    for addr in addrs:
        try:
            host, port = _split_host_port(addr)
        except ValueError:
            host, port = addr, DEFAULT_DNS_PORT
        if _is_ip(host):
            result.append(_join_host_port(host, port))
    return result