"""PureScript extraction. Regex only; there is no maintained tree-sitter grammar to rely on."""

import logging
import re

from .haskell import binding_definitions, header_exports, import_names, logical_lines
from .models import ImportDeclaration, ParsedFile
from .parse import LanguageParser, read_source

log = logging.getLogger(__name__)

_IMPORT_RE = re.compile(r"^\s*import\s+([A-Z][\w.']*)")
_ALIAS_RE = re.compile(r"\s+as\s+([A-Z][\w.']*)")


def _parse_import(text: str, line: int) -> ImportDeclaration | None:
    """
    Parse one PureScript import. Both orders appear in the wild:

    "import Data.Maybe (fromMaybe) as M"
    "import Data.Map as Map"
    """
    m = _IMPORT_RE.match(text)
    if not m:
        return None
    rest = text[m.end():]
    hiding = rest.lstrip().startswith("hiding")
    if hiding:
        rest = rest.lstrip()[len("hiding"):]
    names = import_names(rest, 0)
    alias = _ALIAS_RE.search(rest)
    return ImportDeclaration(
        source=m.group(1),
        names=[] if hiding else names,
        is_namespace=alias is not None and not names,
        line=line,
        alias=alias.group(1) if alias else None,
    )


class PureScriptParser(LanguageParser):
    language = "purescript"

    def parse(self, file_path: str) -> ParsedFile:
        content = read_source(file_path)
        imports = []
        for line, text in logical_lines(content, "import"):
            imp = _parse_import(text, line)
            if imp:
                imports.append(imp)
        exports = header_exports(content)
        log.debug("%s: %d imports, %d exports", file_path, len(imports), len(exports))
        return ParsedFile(
            file_path=file_path,
            language="purescript",
            imports=imports,
            exports=exports,
            definitions=binding_definitions(content, exports),
        )
