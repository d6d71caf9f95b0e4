"""Tests for language detection and the TypeScript/JavaScript, Haskell and PureScript parsers."""

import pytest

from codemap import haskell, typescript
from codemap.errors import UnreadableFileError, UnsupportedLanguageError
from codemap.extract import get_parser, parse_file, parse_files
from codemap.models import ImportDeclaration
from codemap.parse import detect_language, is_external_import, paren_group, split_top_level


def _names(defs):
    return [d.name for d in defs]


class TestHelpers:
    def test_detect_language(self):
        assert detect_language("a/b.ts") == "typescript"
        assert detect_language("a/b.TSX") == "typescript"
        assert detect_language("a/b.mjs") == "javascript"
        assert detect_language("Main.hs") == "haskell"
        assert detect_language("Main.purs") == "purescript"
        assert detect_language("README.md") is None

    def test_external_imports(self):
        assert is_external_import("react")
        assert is_external_import("@scope/pkg")
        assert not is_external_import("./helper")
        assert not is_external_import("../x")
        assert not is_external_import("/abs/x")

    def test_split_top_level_respects_parens(self):
        assert split_top_level("Maybe(..), fromMaybe, Either(Left, Right)") == [
            "Maybe(..)", "fromMaybe", "Either(Left, Right)",
        ]

    def test_paren_group(self):
        assert paren_group("x (a, (b)) y", 0) == "a, (b)"
        assert paren_group("x (a, b", 0) is None
        assert paren_group("no parens", 0) is None

    def test_unknown_language_has_no_parser(self):
        with pytest.raises(UnsupportedLanguageError):
            get_parser("cobol")


class TestTypeScript:
    def test_imports(self, fixtures_dir):
        result = parse_file(str(fixtures_dir / "typescript" / "simple.ts"))
        assert result.language == "typescript"
        sources = [i.source for i in result.imports]
        # 'path' is a bare specifier and is dropped
        assert sources == ["./helper", "../config", "./side-effect"]

        helper = result.imports[0]
        assert helper.names == ["helper", "format"]
        assert helper.line == 4
        assert not helper.is_default

        config = result.imports[1]
        assert config.is_default
        assert config.names == ["Config"]

    def test_exports(self, fixtures_dir):
        result = parse_file(str(fixtures_dir / "typescript" / "simple.ts"))
        assert result.exports == [
            "Order", "OrderId", "TAX_RATE", "computeTotal", "OrderService", "publicAlias",
        ]

    def test_definitions(self, fixtures_dir):
        result = parse_file(str(fixtures_dir / "typescript" / "simple.ts"))
        defs = {d.name: d for d in result.definitions}
        assert defs["Order"].kind == "interface"
        assert defs["OrderId"].kind == "type"
        assert defs["TAX_RATE"].kind == "const"
        assert defs["counter"].kind == "variable"
        assert defs["computeTotal"].kind == "function"
        assert defs["OrderService"].kind == "class"
        assert defs["computeTotal"].exported
        assert not defs["internalOnly"].exported
        assert not defs["counter"].exported

    def test_export_default(self, fixtures_dir):
        result = parse_file(str(fixtures_dir / "typescript" / "helper.ts"))
        assert result.exports == ["helper", "format", "default"]
        assert result.imports == []

    def test_reexports_become_imports(self, fixtures_dir):
        result = parse_file(str(fixtures_dir / "typescript" / "reexport.ts"))
        assert [i.source for i in result.imports] == ["./helper", "./simple"]
        assert result.imports[0].names == ["*"]
        assert result.imports[1].names == ["computeTotal", "OrderService"]
        assert result.exports == ["computeTotal", "Service"]

    def test_tsx(self, fixtures_dir):
        result = parse_file(str(fixtures_dir / "typescript" / "component.tsx"))
        assert result.language == "typescript"
        assert [i.source for i in result.imports] == ["./helper"]
        assert result.exports == ["Badge", "default"]
        assert "Badge" in _names(result.definitions)

    def test_commonjs(self, fixtures_dir):
        result = parse_file(str(fixtures_dir / "javascript" / "commonjs.js"))
        assert result.language == "javascript"
        # each require is reported once
        assert [i.source for i in result.imports] == ["./helper", "../typescript/helper"]
        assert result.exports == ["extra", "run", "format"]
        assert "run" in _names(result.definitions)

    def test_file_path_is_absolute(self, fixtures_dir, monkeypatch):
        monkeypatch.chdir(fixtures_dir)
        result = parse_file("typescript/helper.ts")
        assert result.file_path == str(fixtures_dir / "typescript" / "helper.ts")

    def test_fallback_when_tree_sitter_fails(self, fixtures_dir, monkeypatch):
        def broken(source, grammar):
            raise RuntimeError("grammar unavailable")

        monkeypatch.setattr(typescript, "parse_source", broken)
        result = parse_file(str(fixtures_dir / "typescript" / "simple.ts"))

        assert [i.source for i in result.imports] == ["./helper", "../config", "./side-effect"]
        assert result.imports[0].names == ["helper", "format"]
        assert result.imports[1].is_default
        assert result.exports == [
            "Order", "OrderId", "TAX_RATE", "computeTotal", "OrderService", "publicAlias",
        ]
        defs = {d.name: d for d in result.definitions}
        assert defs["computeTotal"].exported
        assert not defs["internalOnly"].exported

    def test_fallback_reexports_and_default(self):
        imports, exports, _ = typescript._extract_fallback(
            "export * from './a';\n"
            "export { x, y as z } from './b';\n"
            "export default function main() {}\n"
            "function a() {}\n"
            "export { a as b, main };\n"
        )
        assert [(i.source, i.names) for i in imports] == [("./a", ["*"]), ("./b", ["x", "y"])]
        assert exports == ["x", "z", "default", "b", "main"]

    def test_fallback_namespace_import(self):
        imports, _, _ = typescript._extract_fallback("import * as utils from './utils';\n")
        assert imports[0].is_namespace
        assert imports[0].names == ["utils"]

    def test_syntax_errors_do_not_raise(self, make_repo):
        root = make_repo({"broken.ts": "import { a } from './a';\nexport function (((\n"})
        result = parse_file(str(root / "broken.ts"))
        assert result.imports[0].source == "./a"

    def test_missing_file(self, tmp_path):
        with pytest.raises(UnreadableFileError):
            parse_file(str(tmp_path / "missing.ts"))


class TestHaskell:
    def test_header_exports(self, fixtures_dir):
        result = parse_file(str(fixtures_dir / "haskell" / "Simple.hs"))
        assert result.language == "haskell"
        assert result.exports == ["greet", "Shape(..)", "area"]

    def test_imports(self, fixtures_dir):
        result = parse_file(str(fixtures_dir / "haskell" / "Simple.hs"))
        by_source = {i.source: i for i in result.imports}
        assert list(by_source) == ["Data.Map", "Data.List", "Data.Maybe", "Control.Monad.State"]

        qualified = by_source["Data.Map"]
        assert qualified.is_namespace
        assert qualified.alias == "Map"
        assert qualified.line == 7

        assert by_source["Data.List"].names == ["sortBy", "groupBy"]
        assert by_source["Data.Maybe"].names == []
        assert not by_source["Control.Monad.State"].is_namespace

    def test_definitions(self, fixtures_dir):
        result = parse_file(str(fixtures_dir / "haskell" / "Simple.hs"))
        defs = {d.name: d for d in result.definitions}
        assert defs["greet"].kind == "function"
        assert defs["greet"].line == 14
        assert defs["greet"].exported
        assert defs["area"].exported
        assert not defs["helperValue"].exported
        assert _names(result.definitions).count("area") == 1

    def test_multiline_import_list(self, make_repo):
        root = make_repo({"M.hs": (
            "module M where\n"
            "import Data.Text\n"
            "  ( Text\n"
            "  , pack -- build one\n"
            "  )\n"
        )})
        result = haskell.HaskellParser().parse(str(root / "M.hs"))
        assert result.imports[0].source == "Data.Text"
        assert result.imports[0].names == ["Text", "pack"]
        assert result.exports == []

    def test_large_file_skips_tree_sitter(self, make_repo, monkeypatch):
        def fail(source, grammar):
            raise AssertionError("tree-sitter should not run")

        monkeypatch.setattr(haskell, "parse_source", fail)
        padding = "-- filler\n" * (haskell.HASKELL_AST_MAX_BYTES // 10 + 1)
        root = make_repo({"Big.hs": (
            "module Big (run) where\n"
            "import qualified Data.Set as S\n"
            + padding
            + "run :: IO ()\n"
        )})
        result = parse_file(str(root / "Big.hs"))
        assert [i.source for i in result.imports] == ["Data.Set"]
        assert result.imports[0].alias == "S"
        assert [(d.name, d.exported) for d in result.definitions] == [("run", True)]

    def test_regex_import_list_on_following_lines(self, make_repo, monkeypatch):
        def broken(source, grammar):
            raise RuntimeError("grammar unavailable")

        monkeypatch.setattr(haskell, "parse_source", broken)
        root = make_repo({"M.hs": (
            "module M where\n"
            "import Data.Maybe\n"
            "  ( Maybe(..)\n"
            "  , fromMaybe -- total\n"
            "  )\n"
            "import qualified Data.Map as Map\n"
            "\n"
            "x = 1\n"
        )})
        result = parse_file(str(root / "M.hs"))
        assert [(i.source, i.names, i.alias) for i in result.imports] == [
            ("Data.Maybe", ["Maybe(..)", "fromMaybe"], None),
            ("Data.Map", [], "Map"),
        ]
        assert [d.name for d in result.definitions] == ["x"]

    def test_empty_ast_imports_fall_back_to_regex(self, fixtures_dir, monkeypatch):
        monkeypatch.setattr(haskell, "_ast_imports", lambda root: [])
        result = parse_file(str(fixtures_dir / "haskell" / "Simple.hs"))
        assert [i.source for i in result.imports] == [
            "Data.Map", "Data.List", "Data.Maybe", "Control.Monad.State",
        ]
        assert result.imports[1].names == ["sortBy", "groupBy"]

    def test_non_empty_ast_imports_are_kept(self, fixtures_dir, monkeypatch):
        only = [ImportDeclaration(source="Only.This", line=1)]
        monkeypatch.setattr(haskell, "_ast_imports", lambda root: only)
        result = parse_file(str(fixtures_dir / "haskell" / "Simple.hs"))
        assert result.imports == only


class TestPureScript:
    def test_imports(self, fixtures_dir):
        result = parse_file(str(fixtures_dir / "purescript" / "Simple.purs"))
        assert result.language == "purescript"
        by_source = {i.source: i for i in result.imports}
        assert list(by_source) == ["Prelude", "Data.Maybe", "Data.Map", "Data.Array", "Data.String"]

        assert by_source["Prelude"].names == []
        assert by_source["Data.Maybe"].names == ["Maybe(..)", "fromMaybe"]

        aliased = by_source["Data.Map"]
        assert aliased.alias == "Map"
        assert aliased.is_namespace

        trailing_alias = by_source["Data.Array"]
        assert trailing_alias.names == ["filter"]
        assert trailing_alias.alias == "A"
        assert not trailing_alias.is_namespace

        assert by_source["Data.String"].names == []

    def test_exports_and_definitions(self, fixtures_dir):
        result = parse_file(str(fixtures_dir / "purescript" / "Simple.purs"))
        assert result.exports == ["greet", "Shape(..)"]
        defs = {d.name: d for d in result.definitions}
        assert defs["greet"].kind == "function"
        assert defs["greet"].exported
        assert defs["defaultName"].kind == "variable"
        assert not defs["defaultName"].exported

    def test_import_list_on_following_lines(self, make_repo):
        root = make_repo({"Main.purs": (
            "module Main where\n"
            "\n"
            "import Prelude\n"
            "import Data.Maybe\n"
            "  ( Maybe(..)\n"
            "  , fromMaybe\n"
            "  )\n"
            "import Data.Map\n"
            "  as Map\n"
            "\n"
            "main = unit\n"
        )})
        result = parse_file(str(root / "Main.purs"))
        assert [(i.source, i.names, i.alias) for i in result.imports] == [
            ("Prelude", [], None),
            ("Data.Maybe", ["Maybe(..)", "fromMaybe"], None),
            ("Data.Map", [], "Map"),
        ]
        assert result.imports[1].line == 4
        assert result.imports[2].is_namespace


class TestBatch:
    def test_skips_unsupported_and_unreadable(self, fixtures_dir, tmp_path):
        (tmp_path / "notes.txt").write_text("hello")
        paths = [
            str(tmp_path / "missing.ts"),
            str(tmp_path / "notes.txt"),
            str(fixtures_dir / "typescript" / "helper.ts"),
        ]
        results = parse_files(paths)
        assert [r.file_path for r in results] == [str(fixtures_dir / "typescript" / "helper.ts")]

    def test_preserves_order_with_threads(self, make_repo):
        files = {f"f{i:02}.ts": f"export const v{i} = {i};\n" for i in range(20)}
        root = make_repo(files)
        paths = [str(root / name) for name in sorted(files)]
        results = parse_files(paths, max_workers=4)
        assert [r.file_path for r in results] == paths
        assert results[7].exports == ["v7"]

    def test_empty(self):
        assert parse_files([]) == []
