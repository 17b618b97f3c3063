"""
DocumentParser: raw HTML → Document.

Loads loosely-formed HTML into an lxml tree. Malformed markup is tolerated
and corrected the way libxml2's HTML parser does it; only input that
yields no tree at all raises ParseError.

Pipeline position: Preprocessor → libxml2 (→ html5lib on hard failure) → Document.
"""

import re
from typing import Optional, Union

import html5lib
import lxml.html
from lxml import etree

from .exceptions import ParseError
from .logger import get_module_logger
from .nodes import FRAGMENT_TAG, Document, is_fragment_root, unwrap
from .preprocessor import Preprocessor

logger = get_module_logger("parser")

# Any of these means the caller supplied a whole document, wrapper included
DOCUMENT_MARKERS = re.compile(r"<(?:!doctype|html|head|body)\b", re.IGNORECASE)

# Wrapper elements the parsers insert on their own when the input lacks them
IMPLIED_WRAPPERS = ("head", "body")
_HTML_TAG = re.compile(r"<html\b", re.IGNORECASE)


class DocumentParser:
    """
    Permissive HTML loader.

    A new libxml2 parser is created for every call, so one DocumentParser
    can be shared; the Documents it returns must not be.
    """

    def __init__(self, encoding: str = "UTF-8", preprocessor: Optional[Preprocessor] = None):
        self.encoding = encoding
        self.preprocessor = preprocessor or Preprocessor()

    def _new_parser(self) -> lxml.html.HTMLParser:
        # remove_blank_text drops whitespace-only text nodes while parsing
        return lxml.html.HTMLParser(remove_blank_text=True, remove_comments=False)

    def parse(self, html: Union[str, bytes], encoding: Optional[str] = None) -> Document:
        """
        Parse ``html`` into a Document.

        Args:
            html: Raw HTML string, or bytes in ``encoding``
            encoding: Input/output encoding (default: the parser's)

        Returns:
            Document whose root is the ``<html>`` element, or a fragment
            container when the input had no ``<html>`` element

        Raises:
            ParseError: If the input is empty or no parser can build a tree
        """
        encoding = encoding or self.encoding

        # Stage 1: string-level fixes (never fails except on undecodable bytes)
        text, diagnostics = self.preprocessor.process(html, encoding)

        if not text.strip():
            raise ParseError("Empty HTML supplied", diagnostics=diagnostics)

        is_fragment = not DOCUMENT_MARKERS.search(text)

        # Stage 2: libxml2 first, html5lib when libxml2 gives up entirely
        try:
            root = self._parse_lxml(text, is_fragment, diagnostics)
        except (etree.LxmlError, ValueError) as e:
            logger.warning(f"libxml2 parsing failed, trying html5lib: {e}")
            diagnostics.append(f"libxml2 parsing failed: {e}")

            try:
                root = self._parse_html5lib(text, is_fragment)
            except Exception as e2:
                diagnostics.append(f"html5lib parsing failed: {e2}")
                raise ParseError("HTML load failed", diagnostics=diagnostics) from e2

        if not is_fragment:
            root = _drop_implied_wrappers(root, text)
            is_fragment = is_fragment_root(root)

        for diagnostic in diagnostics:
            logger.debug(diagnostic)

        return Document(root, encoding=encoding, diagnostics=diagnostics, is_fragment=is_fragment)

    def _parse_lxml(self, text: str, is_fragment: bool, diagnostics: list[str]) -> etree._Element:
        parser = self._new_parser()
        try:
            if not is_fragment:
                return lxml.html.document_fromstring(text, parser=parser)

            # fragments_fromstring gives [leading text?, node, node, ...]
            fragments = lxml.html.fragments_fromstring(text, parser=parser)
            container = parser.makeelement(FRAGMENT_TAG)
            if fragments and isinstance(fragments[0], str):
                container.text = fragments.pop(0)
            container.extend(fragments)
            return container
        finally:
            # libxml2 complains about every unknown tag; keep them as diagnostics only
            diagnostics.extend(
                f"{entry.line}:{entry.column}: {entry.message}" for entry in parser.error_log
            )

    def _parse_html5lib(self, text: str, is_fragment: bool) -> etree._Element:
        tree = html5lib.parse(text, treebuilder="lxml", namespaceHTMLElements=False)
        root = tree.getroot()

        if is_fragment:
            body = root.find("body")
            container = etree.Element(FRAGMENT_TAG)
            if body is not None:
                container.text = body.text
                container.extend(list(body))
            root = container

        _drop_blank_text(root)
        return root


def _drop_implied_wrappers(root: etree._Element, text: str) -> etree._Element:
    """
    Undo the <head>, <body> and <html> elements the input did not contain.

    Without an <html> tag in the input, the top-level nodes move into a
    fragment container so serialization starts at the input's own markup.
    """
    for tag in IMPLIED_WRAPPERS:
        if not re.search(rf"<{tag}\b", text, re.IGNORECASE):
            for element in root.findall(tag):
                unwrap(element)

    if _HTML_TAG.search(text):
        return root

    container = root.makeelement(FRAGMENT_TAG, {})
    container.text = root.text
    container.extend(list(root))
    return container


def _drop_blank_text(root: etree._Element) -> None:
    """Clear whitespace-only text and tails (html5lib keeps them, libxml2 does not)."""
    for node in root.iter():
        if node.text is not None and is_blank(node.text) and isinstance(node.tag, str):
            node.text = None
        if node is not root and node.tail is not None and is_blank(node.tail):
            node.tail = None


def is_blank(value: str) -> bool:
    return not value.strip()


def parse(html: Union[str, bytes], encoding: str = "UTF-8") -> Document:
    """
    Convenience function to parse HTML.

    Args:
        html: Raw HTML string or bytes
        encoding: Input/output encoding

    Returns:
        Parsed Document
    """
    return DocumentParser(encoding=encoding).parse(html)
