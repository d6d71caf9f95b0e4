"""
Heuristic architectural pattern and anti-pattern detection.

Each detector is a plain function (relative_paths, repo_root, graph) →
Pattern | None and is registered in DETECTORS. Detectors hold no state, so
adding one never touches the call sites.
"""

import logging
import os
import re
from collections.abc import Callable

from .errors import MissingRepoRootError
from .graph import Graph
from .models import Pattern

log = logging.getLogger(__name__)

Detector = Callable[[list[str], str, Graph], Pattern | None]

_CONFIG_RE = re.compile(
    r"package\.json|tsconfig\.json|eslint|prettier|biome|\.env|vite\.config|webpack\.config|rollup\.config"
)
_BARREL_NAMES = {"index.ts", "index.js", "index.tsx", "index.jsx"}


def _lower(files: list[str]) -> list[str]:
    return [f.lower() for f in files]


def _any(files: list[str], *needles: str) -> bool:
    return any(n in f for f in files for n in needles)


def _basename(path: str) -> str:
    return path.replace("\\", "/").rsplit("/", 1)[-1]


def _relative(path: str, repo_root: str) -> str:
    return os.path.relpath(path, repo_root).replace("\\", "/") if os.path.isabs(path) else path.replace("\\", "/")


# ── Structure ────────────────────────────────────────────────────────────────

def detect_mvc(files: list[str], repo_root: str, graph: Graph) -> Pattern | None:
    rel = _lower(files)
    if _any(rel, "model") and _any(rel, "view") and _any(rel, "controller"):
        return Pattern(
            name="MVC (Model-View-Controller)",
            confidence=0.9,
            evidence=[
                "Found model files/directories",
                "Found view files/directories",
                "Found controller files/directories",
            ],
        )
    return None


def detect_layered(files: list[str], repo_root: str, graph: Graph) -> Pattern | None:
    rel = _lower(files)
    layers = {
        "Found API/routing layer": _any(rel, "api", "route"),
        "Found service/business logic layer": _any(rel, "service", "business"),
        "Found data access layer": _any(rel, "data", "repository", "dao"),
    }
    present = [label for label, found in layers.items() if found]
    if len(present) < 2:
        return None
    return Pattern(
        name="Layered Architecture",
        confidence=0.9 if len(present) == 3 else 0.7,
        evidence=present,
    )


def detect_feature_based(files: list[str], repo_root: str, graph: Graph) -> Pattern | None:
    feature_dirs: list[str] = []
    for f in files:
        parts = f.replace("\\", "/").split("/")
        for i, part in enumerate(parts[:-2]):
            if part in ("features", "modules"):
                if parts[i + 1] not in feature_dirs:
                    feature_dirs.append(parts[i + 1])
                break

    if len(feature_dirs) < 2:
        return None
    more = "..." if len(feature_dirs) > 5 else ""
    return Pattern(
        name="Feature-based Organization",
        confidence=0.85,
        evidence=[
            f"Found {len(feature_dirs)} feature/module directories",
            f"Features: {', '.join(feature_dirs[:5])}{more}",
        ],
    )


def detect_monorepo(files: list[str], repo_root: str, graph: Graph) -> Pattern | None:
    has_packages = any(f.startswith("packages/") for f in files)
    has_apps = any(f.startswith("apps/") for f in files)
    if not (has_packages or has_apps):
        return None
    evidence = []
    if has_packages:
        evidence.append("Found packages/ directory")
    if has_apps:
        evidence.append("Found apps/ directory")
    return Pattern(
        name="Monorepo",
        confidence=0.95 if has_packages and has_apps else 0.75,
        evidence=evidence,
    )


def detect_barrel_exports(files: list[str], repo_root: str, graph: Graph) -> Pattern | None:
    if not files:
        return None
    index_files = [f for f in files if _basename(f) in _BARREL_NAMES]
    ratio = len(index_files) / len(files)
    if len(index_files) < 5 or ratio <= 0.05:
        return None
    return Pattern(
        name="Barrel Exports",
        confidence=0.9 if ratio > 0.15 else 0.7,
        evidence=[
            f"Found {len(index_files)} index files ({ratio * 100:.1f}% of all files)",
            "Index files used to re-export module contents",
        ],
    )


def detect_ddd(files: list[str], repo_root: str, graph: Graph) -> Pattern | None:
    rel = _lower(files)
    indicators = {
        "Found entity files": _any(rel, "entit"),
        "Found repository pattern": _any(rel, "repositor"),
        "Found domain services": _any(rel, "service"),
        "Found value objects": _any(rel, "value", "/vo/") or any(f.startswith("vo/") for f in rel),
        "Found aggregates": _any(rel, "aggregate"),
    }
    present = [label for label, found in indicators.items() if found]
    if len(present) < 3:
        return None
    return Pattern(
        name="Domain-Driven Design (DDD)",
        confidence=0.85 if len(present) >= 4 else 0.7,
        evidence=present,
    )


# ── Graph anti-patterns ──────────────────────────────────────────────────────

def _canonical(cycle: list[str]) -> list[str]:
    """Rotate a closed cycle [a, b, c, a] so it starts at its smallest node."""
    body = cycle[:-1]
    i = body.index(min(body))
    rotated = body[i:] + body[:i]
    return rotated + [rotated[0]]


def find_cycles(graph: Graph) -> list[list[str]]:
    """
    Closed import cycles found by depth-first search, each as [a, ..., a].

    A back-edge to a node on the current DFS stack yields the stack slice
    from that node. Rotations of the same cycle are reported once.
    """
    cycles: list[list[str]] = []
    seen: set[str] = set()
    explored: set[str] = set()

    for root in graph.nodes:
        if root in explored:
            continue
        explored.add(root)
        path = [root]
        on_stack = {root}
        pending = [iter(graph.imports_of(root))]

        while pending:
            nxt = next(pending[-1], None)
            if nxt is None:
                pending.pop()
                on_stack.discard(path.pop())
                continue
            if nxt in on_stack:
                cycle = _canonical(path[path.index(nxt):] + [nxt])
                key = " -> ".join(cycle)
                if key not in seen:
                    seen.add(key)
                    cycles.append(cycle)
            elif nxt not in explored:
                explored.add(nxt)
                path.append(nxt)
                on_stack.add(nxt)
                pending.append(iter(graph.imports_of(nxt)))

    return cycles


def detect_circular_dependencies(files: list[str], repo_root: str, graph: Graph) -> Pattern | None:
    cycles = find_cycles(graph)
    if not cycles:
        return None
    longest = max(len(c) for c in cycles)
    return Pattern(
        name="Circular Dependencies",
        confidence=min(1.0, len(cycles) / 5),
        evidence=[f"Detected {len(cycles)} cycles (longest length: {longest})"] + [
            "Cycle: " + " → ".join(_relative(p, repo_root) for p in c)
            for c in cycles[:3]
        ],
    )


def unreferenced_files(graph: Graph) -> list[str]:
    return [path for path in graph.nodes if graph.in_degree(path) == 0]


def detect_dead_code(files: list[str], repo_root: str, graph: Graph) -> Pattern | None:
    unreferenced = unreferenced_files(graph)
    if not unreferenced:
        return None
    return Pattern(
        name="Unreferenced Files (Potential Dead Code)",
        confidence=min(0.9, len(unreferenced) / max(3, len(graph.nodes))),
        evidence=[
            f"Found {len(unreferenced)} files with no importers",
            f"Examples: {', '.join(_basename(f) for f in unreferenced[:3])}",
        ],
    )


# ── Repository hygiene ───────────────────────────────────────────────────────

def detect_tests(files: list[str], repo_root: str, graph: Graph) -> Pattern | None:
    tests = [f for f in _lower(files) if "test" in f or "__tests__" in f]
    if not tests:
        return None
    return Pattern(
        name="Tests Present",
        confidence=min(1.0, len(tests) / len(files) + 0.2),
        evidence=[f"Found {len(tests)} test files", f"Examples: {', '.join(tests[:3])}"],
    )


def detect_config_heavy(files: list[str], repo_root: str, graph: Graph) -> Pattern | None:
    configs = [f for f in _lower(files) if _CONFIG_RE.search(f)]
    if not configs:
        return None
    return Pattern(
        name="Config Heavy",
        confidence=min(1.0, len(configs) / len(files) + 0.2),
        evidence=[f"Found {len(configs)} config files", f"Examples: {', '.join(configs[:3])}"],
    )


def detect_hotspots(files: list[str], repo_root: str, graph: Graph) -> Pattern | None:
    if not graph.nodes:
        return None
    scored = [
        (path, graph.in_degree(path), graph.out_degree(path))
        for path in graph.nodes
    ]
    scored.sort(key=lambda t: t[1] + t[2], reverse=True)
    top = scored[:3]
    return Pattern(
        name="Graph Hotspots",
        confidence=min(1.0, (top[0][1] + top[0][2]) / len(graph.nodes)),
        evidence=[f"{_basename(p)} (in:{i}, out:{o})" for p, i, o in top],
    )


DETECTORS: list[Detector] = [
    detect_mvc,
    detect_layered,
    detect_feature_based,
    detect_monorepo,
    detect_barrel_exports,
    detect_ddd,
    detect_circular_dependencies,
    detect_dead_code,
    detect_tests,
    detect_config_heavy,
    detect_hotspots,
]


def detect_patterns(
    graph: Graph,
    files: list[str],
    repo_root: str,
    detectors: list[Detector] | None = None,
) -> list[Pattern]:
    """
    Run every detector over *files* (absolute or repo-relative) and *graph*.
    Results are sorted by confidence, highest first.
    """
    if not repo_root:
        raise MissingRepoRootError("pattern detection")

    rel = [_relative(f, repo_root) for f in files]
    patterns = []
    for detector in detectors or DETECTORS:
        pattern = detector(rel, repo_root, graph)
        if pattern is not None:
            patterns.append(pattern)

    patterns.sort(key=lambda p: p.confidence, reverse=True)
    log.info("Detected %d patterns in %d files", len(patterns), len(files))
    for p in patterns:
        log.debug("  %s (confidence %.0f%%)", p.name, p.confidence * 100)
    return patterns
