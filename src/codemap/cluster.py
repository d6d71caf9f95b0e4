"""Directory-based module clustering."""

import logging
import os

from .errors import MissingRepoRootError
from .graph import Graph
from .models import Cluster

log = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 2
DEFAULT_MIN_SIZE = 3

CLUSTER_NAMES: dict[str, str] = {
    "src": "Source",
    "lib": "Library",
    "api": "API",
    "components": "Components",
    "utils": "Utilities",
    "helpers": "Helpers",
    "services": "Services",
    "models": "Models",
    "types": "Types",
    "interfaces": "Interfaces",
    "controllers": "Controllers",
    "routes": "Routes",
    "middleware": "Middleware",
    "config": "Configuration",
    "tests": "Tests",
    "test": "Tests",
    "__tests__": "Tests",
    "auth": "Authentication",
    "db": "Database",
    "data": "Data Layer",
}


def cluster_name(cluster_id: str) -> str:
    if not cluster_id or cluster_id == "root":
        return "Root"
    last = cluster_id.split("/")[-1]
    if last in CLUSTER_NAMES:
        return CLUSTER_NAMES[last]
    return last[:1].upper() + last[1:]


def cohesion(graph: Graph, files: list[str]) -> float:
    """Internal edges over the n·(n-1) possible ones. 1.0 for a single file, 0.0 for none."""
    if not files:
        return 0.0
    if len(files) == 1:
        return 1.0
    members = set(files)
    internal = sum(1 for e in graph.edges if e.source in members and e.target in members)
    return internal / (len(files) * (len(files) - 1))


def cluster_by_directory(graph: Graph, repo_root: str, max_depth: int = DEFAULT_MAX_DEPTH) -> list[Cluster]:
    """Group files by their first *max_depth* directory segments; files at the root go to "root"."""
    if not repo_root:
        raise MissingRepoRootError("clustering")

    groups: dict[str, list[str]] = {}
    for path in graph.nodes:
        parts = os.path.relpath(path, repo_root).replace("\\", "/").split("/")
        dir_parts = parts[:min(max_depth, len(parts) - 1)]
        cluster_id = "/".join(dir_parts) if dir_parts else "root"
        groups.setdefault(cluster_id, []).append(path)

    clusters = [
        Cluster(
            id=cluster_id,
            name=cluster_name(cluster_id),
            files=files,
            cohesion=cohesion(graph, files),
            description=f"{len(files)} files in {cluster_id}",
        )
        for cluster_id, files in groups.items()
    ]
    clusters.sort(key=lambda c: len(c.files), reverse=True)
    return clusters


def merge_small_clusters(clusters: list[Cluster], min_size: int = DEFAULT_MIN_SIZE) -> list[Cluster]:
    """Fold clusters with fewer than *min_size* files into one trailing "Other" cluster."""
    kept: list[Cluster] = []
    leftovers: list[str] = []
    for c in clusters:
        if len(c.files) >= min_size:
            kept.append(c)
        else:
            leftovers.extend(c.files)

    if leftovers:
        kept.append(Cluster(
            id="other",
            name="Other",
            files=leftovers,
            cohesion=0.0,
            description=f"{len(leftovers)} miscellaneous files",
        ))
    return kept


def detect_clusters(
    graph: Graph,
    repo_root: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
    min_size: int = DEFAULT_MIN_SIZE,
) -> list[Cluster]:
    clusters = merge_small_clusters(cluster_by_directory(graph, repo_root, max_depth), min_size)
    log.info("Detected %d clusters", len(clusters))
    return clusters
