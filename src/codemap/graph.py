"""
File dependency graph: construction and structural queries.

The graph is backed by a networkx DiGraph. It is built once, in two phases
(register every file, then resolve every import), and frozen afterwards so the
analyses can share it across threads.
"""

import logging
from collections.abc import Mapping
from types import MappingProxyType

import networkx as nx

from .models import Edge, Node, ParsedFile
from .resolve import Resolver

log = logging.getLogger(__name__)


class Graph:
    """
    Nodes keyed by absolute path, an ordered edge list, and forward/reverse adjacency.

    `nodes` and `edges` are read-only views; mutate through add_node/add_edge
    until freeze().
    """

    def __init__(self) -> None:
        self._g: nx.DiGraph = nx.DiGraph()
        self._nodes: dict[str, Node] = {}
        self._edges: list[Edge] | tuple[Edge, ...] = []

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, path: str) -> bool:
        return path in self._nodes

    @property
    def nodes(self) -> Mapping[str, Node]:
        return MappingProxyType(self._nodes)

    @property
    def edges(self) -> tuple[Edge, ...]:
        return tuple(self._edges)

    @property
    def frozen(self) -> bool:
        return nx.is_frozen(self._g)

    def freeze(self) -> "Graph":
        nx.freeze(self._g)
        self._edges = tuple(self._edges)
        return self

    def add_node(self, node: Node) -> None:
        if self.frozen:
            raise RuntimeError("graph is frozen")
        if node.id in self._nodes:
            return
        self._nodes[node.id] = node
        self._g.add_node(node.id)

    def add_edge(self, source: str, target: str, imports: list[str] | None = None) -> bool:
        """
        Add source → target. Returns False (and changes nothing) when either
        endpoint is unknown or the pair already exists.
        """
        if self.frozen:
            raise RuntimeError("graph is frozen")
        if source not in self._nodes or target not in self._nodes:
            return False
        if self._g.has_edge(source, target):
            return False
        edge = Edge(source=source, target=target, imports=tuple(imports or ()))
        self._edges.append(edge)
        self._g.add_edge(source, target)
        return True

    def imports_of(self, path: str) -> list[str]:
        """Files that *path* imports (forward adjacency)."""
        return list(self._g.successors(path)) if path in self._g else []

    def importers_of(self, path: str) -> list[str]:
        """Files that import *path* (reverse adjacency)."""
        return list(self._g.predecessors(path)) if path in self._g else []

    def in_degree(self, path: str) -> int:
        return self._g.in_degree(path) if path in self._g else 0

    def out_degree(self, path: str) -> int:
        return self._g.out_degree(path) if path in self._g else 0

    @property
    def adjacency(self) -> dict[str, list[str]]:
        return {n: list(self._g.successors(n)) for n in self.nodes}

    @property
    def reverse_adjacency(self) -> dict[str, list[str]]:
        return {n: list(self._g.predecessors(n)) for n in self.nodes}

    def to_networkx(self) -> nx.DiGraph:
        """An unfrozen copy for callers that want networkx algorithms."""
        return nx.DiGraph(self._g)


def graph_stats(graph: Graph) -> dict:
    node_count = len(graph.nodes)
    max_in = max((graph.in_degree(n) for n in graph.nodes), default=0)
    max_out = max((graph.out_degree(n) for n in graph.nodes), default=0)
    return {
        "nodes": node_count,
        "edges": len(graph.edges),
        "avg_degree": 2 * len(graph.edges) / node_count if node_count else 0.0,
        "max_in_degree": max_in,
        "max_out_degree": max_out,
    }


class GraphBuilder:
    def __init__(self, repo_root: str | None = None) -> None:
        self.graph = Graph()
        self.resolver = Resolver(repo_root)
        self.unresolved = 0

    def add_node(self, parsed: ParsedFile) -> None:
        self.graph.add_node(Node(
            id=parsed.file_path,
            file_path=parsed.file_path,
            language=parsed.language,
            definitions=len(parsed.definitions),
        ))
        self.resolver.index(parsed.file_path)

    def add_edge(self, source: str, target: str, imports: list[str] | None = None) -> bool:
        return self.graph.add_edge(source, target, imports)

    def resolve_import(self, specifier: str, from_file: str) -> str | None:
        return self.resolver.resolve(specifier, from_file)

    def process_imports(self, parsed: ParsedFile) -> None:
        for imp in parsed.imports:
            target = self.resolve_import(imp.source, parsed.file_path)
            if target is None:
                self.unresolved += 1
                log.debug("Unresolved import %r in %s", imp.source, parsed.file_path)
                continue
            self.add_edge(parsed.file_path, target, imp.names)

    def build(self) -> Graph:
        return self.graph.freeze()


def build_graph(parsed_files: list[ParsedFile], repo_root: str | None = None) -> Graph:
    """Build a frozen dependency graph. All nodes are registered before any import is resolved."""
    builder = GraphBuilder(repo_root)

    for parsed in parsed_files:
        builder.add_node(parsed)

    for parsed in parsed_files:
        builder.process_imports(parsed)

    graph = builder.build()
    log.info(
        "Graph: %d nodes, %d edges (%d unresolved imports)",
        len(graph.nodes), len(graph.edges), builder.unresolved,
    )
    return graph
