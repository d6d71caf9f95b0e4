"""File discovery: walk a repository, respect .gitignore, return repo-relative paths."""

import logging
from pathlib import Path

import pathspec

from .models import AnalysisConfig
from .parse import EXTENSION_TO_LANGUAGE

log = logging.getLogger(__name__)

_MAX_LOC_FILES = 1000       # count lines for at most this many files, extrapolate the rest


def _load_gitignore_spec(root: Path) -> pathspec.PathSpec | None:
    gitignore = root / ".gitignore"
    if gitignore.exists():
        patterns = gitignore.read_text(encoding="utf-8", errors="replace").splitlines()
        return pathspec.PathSpec.from_lines("gitwildmatch", patterns)
    return None


def discover_files(config: AnalysisConfig) -> list[str]:
    """
    Return every file under config.repo_root as a relative POSIX path.

    Skips config.exclude_dirs, hidden directories and .gitignore matches.
    Non-source files are kept so pattern detection can see configs and
    manifests; use source_files() to narrow to parseable ones.
    """
    root = Path(config.repo_root).resolve()
    gitignore_spec = _load_gitignore_spec(root)
    exclude_dirs = set(config.exclude_dirs)

    results: list[str] = []
    for path in sorted(root.rglob("*")):
        if not path.is_file():
            continue

        rel = path.relative_to(root)
        rel_str = rel.as_posix()

        dirs = rel.parts[:-1]
        if any(part in exclude_dirs or part.startswith(".") for part in dirs):
            continue

        if gitignore_spec and gitignore_spec.match_file(rel_str):
            continue

        results.append(rel_str)

    log.info("Discovered %d files under %s", len(results), root)
    return results


def source_files(files: list[str]) -> list[str]:
    return [f for f in files if Path(f).suffix.lower() in EXTENSION_TO_LANGUAGE]


def _count_lines(path: Path) -> int:
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        log.warning("Cannot read %s: %s", path, e)
        return 0
    return sum(1 for line in text.splitlines() if line.strip())


def scan_stats(repo_root: str, files: list[str]) -> dict:
    """Languages present, per-language file counts and non-empty line total (sampled)."""
    root = Path(repo_root)
    by_language: dict[str, int] = {}
    for f in files:
        lang = EXTENSION_TO_LANGUAGE.get(Path(f).suffix.lower())
        if lang:
            by_language[lang] = by_language.get(lang, 0) + 1

    sample = source_files(files)[:_MAX_LOC_FILES]
    total_loc = sum(_count_lines(root / f) for f in sample)
    total_sources = sum(by_language.values())
    if total_sources > len(sample) and sample:
        total_loc = round(total_loc / len(sample) * total_sources)

    return {
        "files": len(files),
        "languages": sorted(by_language),
        "by_language": by_language,
        "total_loc": total_loc,
    }
