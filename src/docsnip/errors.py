from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    PARSE_ERROR = "PARSE_ERROR"
    INVALID_PARAMETER = "INVALID_PARAMETER"
    FILE_READ_FAILED = "FILE_READ_FAILED"
    FETCH_FAILED = "FETCH_FAILED"
    SNIPPET_NOT_FOUND = "SNIPPET_NOT_FOUND"
    SNIPPET_TRUNCATED = "SNIPPET_TRUNCATED"
    SNIPPET_EMPTY = "SNIPPET_EMPTY"
    SNIPPET_DUPLICATE = "SNIPPET_DUPLICATE"


class DocsnipError(Exception):
    """Raised for every expected failure while resolving an include tag.

    Caught by includer.py and rendered inline into the page.
    Never catch this inside the parser, fetcher or transform steps; let it
    propagate to the tag boundary so the author sees the message in place.
    """

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def render(self, page_path: str) -> str:
        """Return the inline replacement for the failed tag."""
        return f"ERROR: {self.message} in {page_path}"
