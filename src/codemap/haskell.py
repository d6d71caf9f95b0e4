"""
Haskell extraction.

Tree-sitter when the file is small enough, otherwise (or on any parser
exception) a regex pass over the source lines. The module header export list
is always read from the source text since the grammar does not expose it
uniformly.
"""

import logging
import re
from pathlib import Path

from tree_sitter import Node

from .models import Definition, ImportDeclaration, ParsedFile
from .parse import (
    LanguageParser,
    dedupe,
    node_line,
    node_text,
    paren_group,
    parse_source,
    read_source,
    split_top_level,
    walk_tree,
)

log = logging.getLogger(__name__)

HASKELL_AST_MAX_BYTES = 200_000     # larger files skip tree-sitter entirely

_MODULE_HEADER_RE = re.compile(r"^module\s+[A-Za-z0-9_.']+", re.MULTILINE)
_LINE_COMMENT_RE = re.compile(r"--(?:[ \t].*)?$", re.MULTILINE)
_TYPE_SIG_RE = re.compile(r"^([a-zA-Z_][\w']*)\s*::")
_VALUE_RE = re.compile(r"^([a-zA-Z_][\w']*)\s*=")
_IMPORT_RE = re.compile(
    r"^\s*import\s+(?:\{-#\s*SOURCE\s*#-\}\s+)?(?:safe\s+)?(qualified\s+)?"
    r"(?:\"[^\"]*\"\s+)?([A-Za-z][\w.']*)(\s+qualified)?"
    r"(?:\s+as\s+([A-Za-z][\w.']*))?(\s+hiding)?"
)

# Top-level declaration node types in tree-sitter-haskell.
_AST_DEFINITION_KINDS: dict[str, str] = {
    "signature": "function",
    "function": "function",
    "bind": "variable",
}
_TOP_LEVEL_PARENTS = {"declarations", "haskell", "module"}


def header_exports(content: str) -> list[str]:
    """Names in the module header export list, e.g. `module Foo (bar, Baz(..)) where`."""
    m = _MODULE_HEADER_RE.search(content)
    if not m:
        return []
    rest = content[m.end():].lstrip()
    if not rest.startswith("("):
        return []
    group = paren_group(rest, 0)
    if group is None:
        return []
    group = _LINE_COMMENT_RE.sub("", group)
    return dedupe([re.sub(r"\s+as\s+.*", "", item).strip() for item in split_top_level(group)])


def binding_definitions(content: str, exports: list[str] | None = None) -> list[Definition]:
    """Type signatures and simple `name = ...` equations starting in column 0."""
    exported = set(exports or [])
    definitions: list[Definition] = []
    for idx, line in enumerate(content.split("\n"), start=1):
        m = _TYPE_SIG_RE.match(line)
        if m:
            definitions.append(Definition(
                name=m.group(1), kind="function", line=idx, exported=m.group(1) in exported,
            ))
            continue
        m = _VALUE_RE.match(line)
        if m:
            definitions.append(Definition(
                name=m.group(1), kind="variable", line=idx, exported=m.group(1) in exported,
            ))
    return definitions


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


def logical_lines(content: str, keyword: str) -> list[tuple[int, str]]:
    """
    Lines starting with *keyword*, joined with their continuation lines.

    A following line continues the declaration while parentheses are
    unbalanced or while it is indented deeper than the keyword line, so
    a name list may open on the next line:

        import Data.Maybe
          ( Maybe(..)
          , fromMaybe
          )

    Returns (1-based line, joined text) pairs.
    """
    lines = content.split("\n")
    out: list[tuple[int, str]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.lstrip().startswith(keyword + " "):
            start = i
            indent = _indent(line)
            text = _LINE_COMMENT_RE.sub("", line)
            while i + 1 < len(lines):
                nxt = lines[i + 1]
                unbalanced = text.count("(") > text.count(")")
                indented = bool(nxt.strip()) and _indent(nxt) > indent
                if not (unbalanced or indented):
                    break
                i += 1
                text += " " + _LINE_COMMENT_RE.sub("", nxt).strip()
            out.append((start + 1, text.rstrip()))
        i += 1
    return out


def import_names(text: str, start: int) -> list[str]:
    rest = text[start:].lstrip()
    if not rest.startswith("("):
        return []
    group = paren_group(rest, 0)
    return split_top_level(group) if group else []


def _parse_import(text: str, line: int) -> ImportDeclaration | None:
    m = _IMPORT_RE.match(text)
    if not m:
        return None
    qualified = bool(m.group(1) or m.group(3))
    names = [] if m.group(5) else import_names(text, m.end())
    return ImportDeclaration(
        source=m.group(2),
        names=names,
        is_namespace=qualified,
        line=line,
        alias=m.group(4),
    )


def _fallback_imports(content: str) -> list[ImportDeclaration]:
    imports = []
    for line, text in logical_lines(content, "import"):
        imp = _parse_import(text, line)
        if imp:
            imports.append(imp)
    return imports


def _ast_imports(root: Node) -> list[ImportDeclaration]:
    imports = []
    for node in walk_tree(root):
        if node.type == "import" and node.is_named:
            text = " ".join(_LINE_COMMENT_RE.sub("", node_text(node)).split())
            imp = _parse_import(text, node_line(node))
            if imp:
                imports.append(imp)
    return imports


def _ast_definitions(root: Node, exports: list[str]) -> list[Definition]:
    exported = set(exports)
    seen: set[str] = set()
    definitions: list[Definition] = []
    for node in walk_tree(root):
        kind = _AST_DEFINITION_KINDS.get(node.type)
        if kind is None or node.parent is None or node.parent.type not in _TOP_LEVEL_PARENTS:
            continue
        name_node = node.child_by_field_name("name") or (node.children[0] if node.children else None)
        name = node_text(name_node).strip()
        if not name or name in seen:
            continue
        seen.add(name)
        definitions.append(Definition(
            name=name, kind=kind, line=node_line(node), exported=name in exported,
        ))
    return definitions


class HaskellParser(LanguageParser):
    language = "haskell"

    def parse(self, file_path: str) -> ParsedFile:
        content = read_source(file_path)
        exports = header_exports(content)
        imports: list[ImportDeclaration] = []
        definitions: list[Definition] = []

        too_large = Path(file_path).stat().st_size > HASKELL_AST_MAX_BYTES
        if too_large:
            log.info("Skipping tree-sitter for large file %s", file_path)
            imports = _fallback_imports(content)
            definitions = binding_definitions(content, exports)
        else:
            try:
                root = parse_source(content, "haskell").root_node
                imports = _ast_imports(root)
                definitions = _ast_definitions(root, exports)
            except Exception as e:
                log.warning("Haskell parser fallback for %s: %s", file_path, e)
                imports = _fallback_imports(content)
                definitions = binding_definitions(content, exports)

        # The grammar misses some import forms; recover them without
        # overriding a non-empty AST result.
        if not imports:
            imports = _fallback_imports(content)
        if not definitions:
            definitions = binding_definitions(content, exports)

        return ParsedFile(
            file_path=file_path,
            language="haskell",
            imports=imports,
            exports=exports,
            definitions=definitions,
        )
