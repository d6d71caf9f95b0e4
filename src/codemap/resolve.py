"""
Import specifier resolution.

Every parsed file is indexed under several lookup keys (absolute path,
repo-relative path, both without extension, and a dotted module name) so
that relative ES imports and dotted Haskell/PureScript module names can be
mapped back to a file in the same repository. This is not a
full module resolver: no path aliases, no package.json "exports" maps.
"""

import logging
import os

log = logging.getLogger(__name__)

RESOLVE_EXTENSIONS = (".ts", ".tsx", ".js", ".jsx", ".mjs", ".cjs", ".purs", ".hs", ".lhs")


def module_key(rel_path_without_ext: str) -> str:
    """"src/Data/Maybe" → "src.Data.Maybe"."""
    return rel_path_without_ext.replace("\\", "/").replace("/", ".")


class Resolver:
    def __init__(self, repo_root: str | None = None) -> None:
        self.repo_root = os.path.abspath(repo_root or os.getcwd())
        self._index: dict[str, str] = {}

    def __contains__(self, key: str) -> bool:
        return key in self._index

    def keys_for(self, file_path: str) -> list[str]:
        """All lookup keys a file is registered under."""
        rel_path = os.path.relpath(file_path, self.repo_root)
        keys = [file_path, rel_path]

        stem, ext = os.path.splitext(file_path)
        if ext:
            rel_stem = os.path.splitext(rel_path)[0]
            keys.extend([stem, rel_stem])
            mod = module_key(rel_stem)
            keys.append(mod)
            if mod.startswith("src."):
                keys.append(mod[len("src."):])
        return keys

    def index(self, file_path: str) -> None:
        # First registration wins when two files share a key (foo.ts / foo.js).
        for key in self.keys_for(file_path):
            self._index.setdefault(key, file_path)

    def _lookup_relative(self, specifier: str, from_file: str) -> str | None:
        if specifier.endswith(".js"):
            specifier = specifier[:-3]
        resolved = os.path.normpath(os.path.join(os.path.dirname(from_file), specifier))

        candidates = [resolved]
        candidates.extend(resolved + ext for ext in RESOLVE_EXTENSIONS)
        candidates.extend(os.path.join(resolved, "index" + ext) for ext in RESOLVE_EXTENSIONS)

        for candidate in candidates:
            if candidate in self._index:
                return self._index[candidate]

        # Last resort: the candidate exists on disk under another spelling
        # (symlinked directory, case-insensitive filesystem).
        for candidate in candidates:
            if os.path.isfile(candidate):
                real = os.path.realpath(candidate)
                if real in self._index:
                    return self._index[real]
        return None

    def resolve(self, specifier: str, from_file: str) -> str | None:
        """Map an import specifier to an indexed file path, or None when it is external/unknown."""
        if specifier in self._index:
            return self._index[specifier]

        if specifier.startswith("."):
            return self._lookup_relative(specifier, from_file)

        # Dotted module names ("Data.Map") are indexed as keys already.
        return None
