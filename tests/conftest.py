"""Shared fixtures: hand-built parse results and small on-disk repositories."""

import os
from pathlib import Path

import pytest

from codemap.graph import build_graph
from codemap.models import ImportDeclaration, ParsedFile

FIXTURES = Path(__file__).parent / "fixtures"
ROOT = "/repo"


def parsed(rel_path: str, *sources: str, root: str = ROOT, language: str = "typescript") -> ParsedFile:
    """A ParsedFile at root/rel_path importing each of *sources*."""
    return ParsedFile(
        file_path=os.path.join(root, rel_path),
        language=language,
        imports=[ImportDeclaration(source=s, line=i + 1) for i, s in enumerate(sources)],
        exports=[],
        definitions=[],
    )


def p(rel_path: str, root: str = ROOT) -> str:
    return os.path.join(root, rel_path)


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture
def chain_graph():
    """main → app → {utils, config}; utils → {log, strings}; config → log; orphan alone."""
    return build_graph([
        parsed("src/main.ts", "./app"),
        parsed("src/app.ts", "./utils", "./config"),
        parsed("src/utils.ts", "./log", "./strings"),
        parsed("src/config.ts", "./log"),
        parsed("src/log.ts"),
        parsed("src/strings.ts"),
        parsed("src/orphan.ts"),
    ], ROOT)


@pytest.fixture
def make_repo(tmp_path):
    """Write {relative path: content} into a temporary repository root."""
    def _make(files: dict[str, str]) -> Path:
        for rel, content in files.items():
            target = tmp_path / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
        return tmp_path
    return _make
