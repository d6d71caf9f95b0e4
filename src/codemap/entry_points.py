"""Classify files by their role in the import graph."""

import logging
from collections import Counter

from .graph import Graph
from .models import EntryPoint

log = logging.getLogger(__name__)

DEGREE_THRESHOLD = 1.2      # "high" means above average × threshold


def classify(in_degree: int, out_degree: int, avg_in: float, avg_out: float) -> tuple[str, str]:
    high_in = in_degree > avg_in * DEGREE_THRESHOLD
    high_out = out_degree > avg_out * DEGREE_THRESHOLD

    if high_in and not high_out:
        return "entry", (
            f"Imported by {in_degree} files but only imports {out_degree} - "
            "likely an entry point or core utility"
        )
    if high_in and high_out:
        return "hub", f"Central connector: imported by {in_degree} files and imports {out_degree} files"
    if high_out:
        return "aggregator", (
            f"Aggregates many dependencies: imports {out_degree} files "
            f"but only imported by {in_degree}"
        )
    if in_degree or out_degree:
        return "util", "Regular file with moderate connectivity"
    return "leaf", "Isolated file with no connections"


def find_entry_points(graph: Graph) -> list[EntryPoint]:
    """Classify every file and return them most-depended-on first."""
    if not graph.nodes:
        return []

    n = len(graph.nodes)
    avg_in = sum(graph.in_degree(p) for p in graph.nodes) / n
    avg_out = sum(graph.out_degree(p) for p in graph.nodes) / n

    entries = []
    for path in graph.nodes:
        in_d, out_d = graph.in_degree(path), graph.out_degree(path)
        role, reason = classify(in_d, out_d, avg_in, avg_out)
        entries.append(EntryPoint(file=path, in_degree=in_d, out_degree=out_d, role=role, reason=reason))

    entries.sort(key=lambda e: e.in_degree, reverse=True)
    log.info(
        "Classified %d files: %s",
        n, ", ".join(f"{role}={count}" for role, count in Counter(e.role for e in entries).items()),
    )
    return entries
