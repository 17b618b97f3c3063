"""
HtmlDocument: a parsed page plus a "main node" to work on.

Scrapers usually locate the content area once and then read from it, so
the reads and the subtree mutators act on the main node. ``remove_tags``
is the exception and always cleans the whole document.
"""

from typing import Any, Callable, Iterable, Optional, Union

from lxml import etree

from . import dom, mutators
from .exceptions import HTMLCleanerError
from .logger import get_module_logger
from .nodes import Document, NodeLike
from .parser import DocumentParser
from .serializer import to_html_string

logger = get_module_logger("document")


class HtmlDocument:
    """
    Facade over one parsed Document.

    Example:
        >>> page = HtmlDocument(html)
        >>> page.query_selector_try_set_main_node(["article", "#content", "body"])
        >>> page.remove_tags(["aside"]).remove_comments()
        >>> title = page.read_value(["h1", "//title"])
    """

    def __init__(self, html: Union[str, bytes, Document], encoding: str = "UTF-8"):
        if isinstance(html, Document):
            self.document = html
        else:
            self.document = DocumentParser(encoding=encoding).parse(html)
        self._main_node = None

    @property
    def main_node(self) -> NodeLike:
        """The node reads start from; the Document root until one is set."""
        if self._main_node is None:
            self._main_node = self.document.root
        return self._main_node

    def set_main_node(self, node: Optional[etree._Element]) -> "HtmlDocument":
        """Use ``node`` as the main node (None resets it to the Document root)."""
        self._main_node = node
        return self

    def _try_set_main_node(self, rules: Iterable[str], lookup: Callable):
        if isinstance(rules, str):
            rules = [rules]

        for rule in rules:
            node = lookup(self.document, rule)
            if node is not None:
                logger.debug(f"Main node set by {rule!r}")
                self._main_node = node
                return node
        return None

    def find_try_set_main_node(self, xpaths: Union[str, Iterable[str]]):
        """
        Set the main node to the first match of the first XPath that matches.

        Returns:
            The new main node, or None if no XPath matched (main node unchanged)
        """
        return self._try_set_main_node(xpaths, dom.find)

    def query_selector_try_set_main_node(self, selectors: Union[str, Iterable[str]]):
        """Same as ``find_try_set_main_node`` with CSS selectors."""
        return self._try_set_main_node(selectors, dom.query_selector)

    # --- Queries (relative to the main node) ---

    def find(self, xpath: str):
        return dom.find(self.main_node, xpath)

    def find_all(self, xpath: str) -> list:
        return dom.find_all(self.main_node, xpath)

    def query_selector(self, selector: str):
        return dom.query_selector(self.main_node, selector)

    def query_selector_all(self, selector: str) -> list:
        return dom.query_selector_all(self.main_node, selector)

    def read_value(self, rules: Union[str, Iterable[str]]) -> Optional[str]:
        return dom.read_value(self.main_node, rules)

    def read_values(
        self,
        rules: Union[str, Iterable[str]],
        transform: Optional[Callable[[Any], Any]] = None
    ) -> list:
        return dom.read_values(self.main_node, rules, transform)

    # --- Mutators (chainable) ---

    def remove_tags(self, tags: Iterable[str]) -> "HtmlDocument":
        mutators.remove_tags(self.document, tags)
        return self

    def remove_empty_nodes(self) -> "HtmlDocument":
        mutators.remove_empty_nodes(self.main_node)
        return self

    def remove_comments(self) -> "HtmlDocument":
        mutators.remove_comments(self.main_node)
        return self

    def remove_hidden_elements(self) -> "HtmlDocument":
        mutators.remove_hidden_elements(self.main_node)
        return self

    def remove_attributes(
        self,
        allow: Optional[Iterable[str]] = None,
        deny: Optional[Iterable[str]] = None
    ) -> "HtmlDocument":
        mutators.remove_attributes(self.main_node, allow, deny)
        return self

    # --- Output ---

    def to_string(self, node: NodeLike = None, compress: bool = True) -> str:
        """Serialize ``node`` (default: the main node)."""
        return to_html_string(self.main_node if node is None else node, compress=compress)

    def __str__(self) -> str:
        try:
            return self.to_string()
        except (HTMLCleanerError, etree.LxmlError, TypeError, ValueError) as e:
            logger.error(f"Serialization failed: {e}")
            return ""

    def __repr__(self) -> str:
        return f"<HtmlDocument {self.document!r} main={getattr(self.main_node, 'tag', None)!r}>"
