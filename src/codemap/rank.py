"""
PageRank-style file importance.

Power iteration for a fixed number of rounds, no convergence check. Files
that import nothing keep their mass instead of spreading it over the graph,
so scores can sum to less than 1 when sinks exist.
"""

import logging

from .graph import Graph
from .models import RankedFile

log = logging.getLogger(__name__)

DEFAULT_ITERATIONS = 20
DEFAULT_DAMPING = 0.85


def pagerank(graph: Graph, iterations: int = DEFAULT_ITERATIONS, damping: float = DEFAULT_DAMPING) -> dict[str, float]:
    nodes = list(graph.nodes)
    n = len(nodes)
    if n == 0:
        return {}

    importers = graph.reverse_adjacency
    out_degree = {node: graph.out_degree(node) for node in nodes}
    base = (1.0 - damping) / n

    pr = {node: 1.0 / n for node in nodes}
    for _ in range(iterations):
        new_pr: dict[str, float] = {}
        for node in nodes:
            in_sum = sum(pr[m] / out_degree[m] for m in importers[node] if out_degree[m])
            new_pr[node] = base + damping * in_sum
        pr = new_pr
    return pr


def rank_importance(
    graph: Graph,
    iterations: int = DEFAULT_ITERATIONS,
    damping: float = DEFAULT_DAMPING,
) -> list[RankedFile]:
    """Score every file and return them best-first with 1-based ranks (ties keep node order)."""
    scores = pagerank(graph, iterations, damping)
    ranked = [
        RankedFile(
            file=node,
            score=scores[node],
            rank=0,
            in_degree=graph.in_degree(node),
            out_degree=graph.out_degree(node),
        )
        for node in graph.nodes
    ]
    ranked.sort(key=lambda rf: rf.score, reverse=True)
    for i, rf in enumerate(ranked, 1):
        rf.rank = i

    log.info("Ranked %d files (%d iterations, damping %.2f)", len(ranked), iterations, damping)
    return ranked


def top_files(ranked: list[RankedFile], n: int) -> list[RankedFile]:
    return ranked[:n]


def normalize_scores(ranked: list[RankedFile]) -> list[RankedFile]:
    """Min-max scale scores to 0..1. Returned unchanged when every score is equal."""
    if not ranked:
        return []
    lo = min(rf.score for rf in ranked)
    hi = max(rf.score for rf in ranked)
    if hi == lo:
        return ranked
    return [
        RankedFile(
            file=rf.file,
            score=(rf.score - lo) / (hi - lo),
            rank=rf.rank,
            in_degree=rf.in_degree,
            out_degree=rf.out_degree,
        )
        for rf in ranked
    ]
