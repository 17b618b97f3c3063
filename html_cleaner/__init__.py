"""
HTML Cleaner

Loads loosely-formed HTML, queries it with XPath or CSS selectors, strips
noise and serializes the result compressed or beautified.
- DocumentParser: Sanitize and parse raw HTML into a Document
- SelectorCompiler: CSS selector → XPath translation
- dom / mutators: Read-only queries and in-place rewrites
- Cleaner: The fixed clean pipeline

Public API surface:
  Pipeline classes  — DocumentParser, Preprocessor, Cleaner, HtmlDocument
  Selectors         — SelectorCompiler, selector_to_xpath
  Data models       — Document, CleanOptions, NodeSnapshot
  Error types       — ParseError (fatal), DetachedNodeError, UnsupportedSelectorError
"""

# --- Pipeline stage classes ---
from .preprocessor import Preprocessor
from .parser import DocumentParser, parse
from .cleaner import Cleaner, clean
from .document import HtmlDocument

# --- Selector translation ---
from .selectors import SelectorCompiler, selector_to_xpath

# --- Query and mutation modules (functions take a Document or node) ---
from . import dom, mutators
from .serializer import to_html_string, reindent

# --- Data models ---
from .nodes import Document
from .schemas import CleanOptions, NodeSnapshot

# --- Exceptions (callers should catch these for error handling) ---
from .exceptions import HTMLCleanerError, ParseError, DetachedNodeError, UnsupportedSelectorError

__version__ = "0.1.0"
__all__ = [
    "Preprocessor",
    "DocumentParser",
    "parse",
    "Cleaner",
    "clean",
    "HtmlDocument",
    "SelectorCompiler",
    "selector_to_xpath",
    "dom",
    "mutators",
    "to_html_string",
    "reindent",
    "Document",
    "CleanOptions",
    "NodeSnapshot",
    "HTMLCleanerError",
    "ParseError",
    "DetachedNodeError",
    "UnsupportedSelectorError",
]
