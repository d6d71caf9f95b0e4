"""Core data structures for codemap."""

from dataclasses import dataclass, field


@dataclass
class ImportDeclaration:
    source: str                 # raw specifier: "./utils", "Data.Maybe"
    names: list[str] = field(default_factory=list)
    is_default: bool = False    # import Foo from './foo'
    is_namespace: bool = False  # import * as Foo / import qualified Foo
    line: int = 0
    alias: str | None = None    # Haskell / PureScript "as" alias


@dataclass
class Definition:
    name: str
    kind: str                   # "function" | "class" | "type" | "interface" | "variable" | "const"
    line: int
    exported: bool = False


@dataclass(frozen=True)
class ParsedFile:
    file_path: str              # canonical absolute path
    language: str               # "typescript" | "javascript" | "haskell" | "purescript"
    imports: list[ImportDeclaration]
    exports: list[str]          # deduplicated, first-seen order
    definitions: list[Definition]


@dataclass(frozen=True)
class Node:
    id: str                     # canonical absolute path
    file_path: str
    language: str
    definitions: int = 0


@dataclass(frozen=True)
class Edge:
    source: str                 # importing file
    target: str                 # imported file
    kind: str = "import"
    imports: tuple[str, ...] = ()


@dataclass
class RankedFile:
    file: str
    score: float
    rank: int                   # 1 = most important
    in_degree: int              # files importing this one
    out_degree: int             # files this one imports


@dataclass
class Cluster:
    id: str                     # directory prefix, "root" or "other"
    name: str
    files: list[str]
    cohesion: float             # 0.0–1.0
    description: str


@dataclass
class Pattern:
    name: str
    confidence: float           # 0.0–1.0
    evidence: list[str]


@dataclass
class EntryPoint:
    file: str
    in_degree: int
    out_degree: int
    role: str                   # "entry" | "hub" | "aggregator" | "util" | "leaf"
    reason: str


@dataclass
class FileContext:
    file_path: str
    content: str
    summary: str | None
    imports: list[ImportDeclaration]
    imported_by: list[str]
    exports: list[str]
    definitions: list[Definition]
    cluster: str | None = None
    role: str | None = None
    pagerank_score: float | None = None
    related_files: list[str] = field(default_factory=list)


@dataclass
class AnalysisConfig:
    repo_root: str
    exclude_dirs: list[str] = field(default_factory=lambda: [
        "node_modules", ".git", "dist", "build", "coverage", ".next",
        ".nuxt", "out", "target", ".stack-work", ".cabal-sandbox",
    ])
    iterations: int = 20
    damping: float = 0.85
    max_depth: int = 2
    min_cluster_size: int = 3
    max_workers: int | None = None
