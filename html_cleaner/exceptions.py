"""
Custom exceptions for the HTML Cleaner package.

Error philosophy:
  - ParseError               → FAIL HARD: no tree could be built; never retried here.
  - DetachedNodeError        → CONTRACT VIOLATION: a query ran against a node that
                               was removed from its Document.
  - UnsupportedSelectorError → REJECTED INPUT: the selector is malformed in a way
                               that cannot be degraded to a wildcard.

Everything else in the pipeline (sanitation, mutators, serialization) is
expected not to fail on a well-formed Document.
"""

from typing import Optional


class HTMLCleanerError(Exception):
    """Base exception for all HTML Cleaner errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- FAIL HARD: the loader could not produce any tree ---

class ParseError(HTMLCleanerError):
    """
    Raised when neither libxml2 nor html5lib can produce a tree.

    Malformed markup alone never raises this; only empty input, an
    undecodable byte string or a hard parser failure does.
    """

    def __init__(
        self,
        message: str,
        diagnostics: Optional[list[str]] = None,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        # Every diagnostic collected before giving up (sanitation notes, parser errors)
        self.diagnostics = list(diagnostics or [])

    def to_response(self) -> dict:
        return {
            "error": "ParseError",
            "message": self.message,
            "diagnostics": self.diagnostics,
            "details": self.details
        }


# --- CONTRACT VIOLATION: caller error, not recoverable ---

class DetachedNodeError(HTMLCleanerError):
    """Raised when an XPath/selector operation targets a node with no owning Document."""
    pass


# --- REJECTED INPUT: selector cannot be compiled ---

class UnsupportedSelectorError(HTMLCleanerError):
    """
    Raised for selector syntax that is rejected rather than degraded.

    Only malformed attribute brackets end up here; unknown pseudo-classes
    and combinators are dropped by the compiler instead.
    """

    def __init__(
        self,
        message: str,
        selector: str,
        position: int = -1,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.selector = selector
        self.position = position  # Offset in the selector where compilation stopped
