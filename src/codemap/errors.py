"""Exception types raised by codemap.

Per-file failures (UnreadableFileError, UnsupportedLanguageError) are caught
by the batch parser and only logged. MissingRepoRootError and
FileNotInGraphError reach the caller.
"""


class CodemapError(Exception):
    """Base exception for all codemap errors."""

    def __init__(self, message: str, details: dict[str, str] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


class UnreadableFileError(CodemapError):
    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot read {path}", {"reason": reason})
        self.path = path


class UnsupportedLanguageError(CodemapError):
    def __init__(self, path: str):
        super().__init__(f"Unsupported file type: {path}")
        self.path = path


class MissingRepoRootError(CodemapError):
    def __init__(self, operation: str):
        super().__init__(f"repo_root is required for {operation}")


class FileNotInGraphError(CodemapError):
    def __init__(self, path: str):
        super().__init__(f"File not found in graph: {path}")
        self.path = path
