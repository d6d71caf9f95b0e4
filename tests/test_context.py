"""Tests for file summaries and the per-file context view."""

import pytest

from codemap.context import extract_summary, get_file_context
from codemap.errors import FileNotInGraphError
from codemap.models import AnalysisConfig
from codemap.pipeline import run_analysis


class TestExtractSummary:
    def test_block_comment(self):
        content = "/**\n * Order totals.\n * Second line.\n */\nimport x from './x';\n"
        assert extract_summary(content) == "Order totals. Second line."

    def test_line_comments(self):
        assert extract_summary("// Small numeric helpers.\nexport const a = 1;\n") == "Small numeric helpers."

    def test_haskell_haddock(self):
        assert extract_summary("{-| Parses things. -}\nmodule X where\n") == "Parses things."
        assert extract_summary("-- | Doc line\nmodule X where\n") == "Doc line"

    def test_first_code_line(self):
        assert extract_summary("import a from './a';\n\nconst x = 1;\n") == "const x = 1;"

    def test_truncates(self):
        assert len(extract_summary("// " + "a" * 500)) == 200
        assert len(extract_summary("x" * 500)) == 100

    def test_empty(self):
        assert extract_summary("") is None
        assert extract_summary("import a from './a';\n") is None


class TestGetFileContext:
    @pytest.fixture
    def analysis(self, make_repo):
        root = make_repo({
            "src/main.ts": "// Application entry.\nimport { helper } from './helper';\nhelper(1);\n",
            "src/helper.ts": "/** Doubles numbers. */\nexport function helper(n: number) { return n * 2; }\n",
        })
        return run_analysis(AnalysisConfig(repo_root=str(root)))

    def test_context(self, analysis):
        main = str(analysis.repo_root) + "/src/main.ts"
        helper = str(analysis.repo_root) + "/src/helper.ts"
        ctx = get_file_context(helper, analysis.graph, analysis.clusters, analysis.ranked)

        assert ctx.summary == "Doubles numbers."
        assert ctx.imported_by == [main]
        assert ctx.exports == ["helper"]
        assert [d.name for d in ctx.definitions] == ["helper"]
        assert ctx.cluster == "Other"
        assert ctx.related_files == [main]
        assert ctx.role == "entry"
        assert ctx.pagerank_score == analysis.ranked[0].score

    def test_without_analyses(self, analysis):
        main = str(analysis.repo_root) + "/src/main.ts"
        ctx = get_file_context(main, analysis.graph)
        assert [i.source for i in ctx.imports] == ["./helper"]
        assert ctx.cluster is None
        assert ctx.pagerank_score is None
        assert ctx.related_files == []

    def test_unknown_file(self, analysis):
        with pytest.raises(FileNotInGraphError):
            get_file_context("/nowhere/x.ts", analysis.graph)
