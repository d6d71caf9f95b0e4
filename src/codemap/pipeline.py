"""
Main analysis pipeline: wires discover → parse → graph → {rank, cluster, patterns, entry points}.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace

from .cluster import detect_clusters
from .discover import discover_files, scan_stats, source_files
from .entry_points import find_entry_points
from .errors import MissingRepoRootError
from .extract import parse_files
from .graph import Graph, build_graph, graph_stats
from .models import AnalysisConfig, Cluster, EntryPoint, ParsedFile, Pattern, RankedFile
from .patterns import detect_patterns
from .rank import rank_importance

log = logging.getLogger(__name__)


@dataclass
class Analysis:
    repo_root: str
    files: list[str]                    # every discovered file, repo-relative
    parsed: list[ParsedFile]
    graph: Graph
    ranked: list[RankedFile] = field(default_factory=list)
    clusters: list[Cluster] = field(default_factory=list)
    patterns: list[Pattern] = field(default_factory=list)
    entry_points: list[EntryPoint] = field(default_factory=list)
    stats: dict = field(default_factory=dict)


def analyze_graph(graph: Graph, files: list[str], config: AnalysisConfig) -> dict:
    """Run the read-only analyses over a built graph concurrently."""
    with ThreadPoolExecutor(max_workers=4) as executor:
        ranked = executor.submit(rank_importance, graph, config.iterations, config.damping)
        clusters = executor.submit(
            detect_clusters, graph, config.repo_root, config.max_depth, config.min_cluster_size,
        )
        patterns = executor.submit(detect_patterns, graph, files, config.repo_root)
        entry_points = executor.submit(find_entry_points, graph)

        return {
            "ranked": ranked.result(),
            "clusters": clusters.result(),
            "patterns": patterns.result(),
            "entry_points": entry_points.result(),
        }


def run_analysis(config: AnalysisConfig) -> Analysis:
    """Analyze the repository at config.repo_root from scratch."""
    if not config.repo_root:
        raise MissingRepoRootError("analysis")
    config = replace(config, repo_root=os.path.abspath(config.repo_root))
    root = config.repo_root

    files = discover_files(config)
    sources = [os.path.join(root, f) for f in source_files(files)]
    parsed = parse_files(sources, config.max_workers)

    graph = build_graph(parsed, root)
    results = analyze_graph(graph, files, config)

    stats = scan_stats(root, files)
    stats.update(graph_stats(graph))
    stats["parsed"] = len(parsed)

    log.info(
        "Analysis of %s: %d files, %d parsed, %d edges, %d patterns",
        root, len(files), len(parsed), len(graph.edges), len(results["patterns"]),
    )
    return Analysis(repo_root=root, files=files, parsed=parsed, graph=graph, stats=stats, **results)
