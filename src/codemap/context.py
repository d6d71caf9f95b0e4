"""Per-file drill-down: everything the analyses know about one file."""

import logging
import re

from .errors import FileNotInGraphError
from .extract import parse_file
from .graph import Graph
from .models import Cluster, FileContext, RankedFile
from .parse import read_source

log = logging.getLogger(__name__)

_BLOCK_COMMENT_RE = re.compile(r"^\s*(?:/\*\*?(.*?)\*/|\{-\|?(.*?)-\})", re.DOTALL)
_LINE_COMMENT_PREFIXES = ("//", "--")


def extract_summary(content: str) -> str | None:
    """
    One-line summary of a file: its leading block comment, else its leading
    line comments, else its first non-import line.
    """
    m = _BLOCK_COMMENT_RE.match(content)
    if m:
        body = m.group(1) if m.group(1) is not None else m.group(2)
        lines = [re.sub(r"^\s*\*\s?", "", line).strip() for line in body.split("\n")]
        return " ".join(line for line in lines if line)[:200]

    comments: list[str] = []
    for line in content.split("\n"):
        stripped = line.strip()
        if stripped.startswith(_LINE_COMMENT_PREFIXES):
            comments.append(stripped[2:].lstrip("|/ ").strip())
        elif stripped:
            break
    if comments:
        return " ".join(c for c in comments if c)[:200]

    for line in content.split("\n"):
        stripped = line.strip()
        if stripped and not stripped.startswith(("import", "export")):
            return stripped[:100]
    return None


def _role_for_rank(rank: int) -> str:
    if rank <= 10:
        return "entry"
    if rank <= 50:
        return "hub"
    return "util"


def get_file_context(
    file_path: str,
    graph: Graph,
    clusters: list[Cluster] | None = None,
    ranked: list[RankedFile] | None = None,
) -> FileContext:
    if file_path not in graph.nodes:
        raise FileNotInGraphError(file_path)

    content = read_source(file_path)
    parsed = parse_file(file_path)

    cluster_name = None
    related: list[str] = []
    for c in clusters or []:
        if file_path in c.files:
            cluster_name = c.name
            related = [f for f in c.files if f != file_path]
            break

    score = role = None
    for rf in ranked or []:
        if rf.file == file_path:
            score = rf.score
            role = _role_for_rank(rf.rank)
            break

    log.debug("Context for %s: cluster=%s role=%s", file_path, cluster_name, role)
    return FileContext(
        file_path=file_path,
        content=content,
        summary=extract_summary(content),
        imports=parsed.imports,
        imported_by=graph.importers_of(file_path),
        exports=parsed.exports,
        definitions=parsed.definitions,
        cluster=cluster_name,
        role=role,
        pagerank_score=score,
        related_files=related,
    )
