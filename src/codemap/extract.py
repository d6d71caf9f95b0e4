"""
Parser registry and batch extraction.

parse_file() picks a LanguageParser by extension; parse_files() maps it over
a file list on a thread pool. A file that cannot be read or has an
unsupported extension is logged and left out of the result; it never aborts
the batch.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor

from .errors import UnreadableFileError, UnsupportedLanguageError
from .haskell import HaskellParser
from .models import ParsedFile
from .parse import LanguageParser, detect_language
from .purescript import PureScriptParser
from .typescript import TypeScriptParser

log = logging.getLogger(__name__)

_DEFAULT_WORKERS = min(os.cpu_count() or 4, 8)

_PARSERS: dict[str, type[LanguageParser]] = {
    "typescript": TypeScriptParser,
    "javascript": TypeScriptParser,
    "haskell": HaskellParser,
    "purescript": PureScriptParser,
}


def get_parser(language: str) -> LanguageParser:
    try:
        return _PARSERS[language]()
    except KeyError:
        raise UnsupportedLanguageError(language) from None


def parse_file(file_path: str) -> ParsedFile:
    """
    Parse one source file into a ParsedFile keyed by its absolute path.

    Raises UnsupportedLanguageError for unknown extensions and
    UnreadableFileError when the file cannot be read. Syntax errors never
    raise; each parser falls back to regex extraction.
    """
    path = os.path.abspath(file_path)
    language = detect_language(path)
    if language is None:
        raise UnsupportedLanguageError(path)
    return get_parser(language).parse(path)


def _parse_or_skip(file_path: str) -> ParsedFile | None:
    try:
        return parse_file(file_path)
    except UnsupportedLanguageError:
        log.debug("Skipping unsupported file %s", file_path)
    except UnreadableFileError as e:
        log.warning("%s", e)
    return None


def parse_files(file_paths: list[str], max_workers: int | None = None) -> list[ParsedFile]:
    """Parse every supported file in *file_paths*, preserving input order."""
    if not file_paths:
        return []

    workers = max_workers or _DEFAULT_WORKERS
    if workers <= 1 or len(file_paths) < 10:
        results = [_parse_or_skip(fp) for fp in file_paths]
    else:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            results = list(executor.map(_parse_or_skip, file_paths))

    parsed = [r for r in results if r is not None]
    log.info("Parsed %d/%d files", len(parsed), len(file_paths))
    return parsed
