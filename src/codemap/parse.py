"""Tree-sitter grammar access and helpers shared by the language parsers."""

import logging
import threading
from pathlib import Path

from tree_sitter import Node, Parser, Tree
from tree_sitter_language_pack import get_language

from .errors import UnreadableFileError
from .models import ParsedFile

log = logging.getLogger(__name__)

EXTENSION_TO_LANGUAGE: dict[str, str] = {
    ".ts": "typescript",
    ".tsx": "typescript",
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".hs": "haskell",
    ".lhs": "haskell",
    ".purs": "purescript",
}

# Parser objects are not thread-safe; each worker thread gets its own set.
_local = threading.local()


def _get_parser(grammar: str) -> Parser:
    parsers: dict[str, Parser] | None = getattr(_local, "parsers", None)
    if parsers is None:
        parsers = _local.parsers = {}
    if grammar not in parsers:
        parsers[grammar] = Parser(get_language(grammar))
        log.debug("Loaded %s grammar in %s", grammar, threading.current_thread().name)
    return parsers[grammar]


def parse_source(source: str, grammar: str) -> Tree:
    """Parse source text with the named grammar. Raises on grammar or parser failure."""
    return _get_parser(grammar).parse(source.encode("utf-8"))


def detect_language(path: str) -> str | None:
    return EXTENSION_TO_LANGUAGE.get(Path(path).suffix.lower())


def read_source(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise UnreadableFileError(path, str(e)) from e


def is_external_import(specifier: str) -> bool:
    """Bare specifiers ('react', 'path') point outside the repository."""
    return not specifier.startswith(".") and not specifier.startswith("/")


def node_text(node: Node | None) -> str:
    if node is None or not node.text:
        return ""
    return node.text.decode("utf-8", errors="replace")


def node_line(node: Node) -> int:
    return node.start_point[0] + 1


def walk_tree(node: Node):
    """Depth-first generator over all nodes in a tree."""
    yield node
    for child in node.children:
        yield from walk_tree(child)


def find_nodes(node: Node, *types: str) -> list[Node]:
    return [n for n in walk_tree(node) if n.type in types]


def string_literal(node: Node | None) -> str | None:
    """Strip the quotes from a string or template literal node."""
    text = node_text(node)
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'`":
        return text[1:-1]
    return None


def split_top_level(text: str) -> list[str]:
    """
    Split a comma list, ignoring commas nested in parentheses.

    "Maybe(..), fromMaybe, Either(Left, Right)" → ["Maybe(..)", "fromMaybe", "Either(Left, Right)"]
    """
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in text:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append("".join(current))
            current = []
        else:
            current.append(ch)
    parts.append("".join(current))
    return [" ".join(p.split()) for p in parts if p.strip()]


def paren_group(text: str, start: int) -> str | None:
    """
    Return the contents of the balanced parenthesis group opening at or after
    *start*, or None when there is no complete group.
    """
    open_at = text.find("(", start)
    if open_at < 0:
        return None
    depth = 0
    for i in range(open_at, len(text)):
        if text[i] == "(":
            depth += 1
        elif text[i] == ")":
            depth -= 1
            if depth == 0:
                return text[open_at + 1:i]
    return None


def dedupe(names: list[str]) -> list[str]:
    return list(dict.fromkeys(names))


class LanguageParser:
    """Turns one source file into a ParsedFile. Subclasses own their AST/regex strategy."""

    language = ""

    def parse(self, file_path: str) -> ParsedFile:
        raise NotImplementedError
