"""
Tree model shared by every stage.

Nodes are lxml nodes: elements and comments are ``lxml`` objects, text is
held in ``.text``/``.tail`` and surfaced by XPath as string results that
still know their parent. A ``Document`` owns the root of one parsed tree.

Fragment input is parsed under a synthetic container element
(``FRAGMENT_TAG``) which plays the part of the document node: it is never
returned by queries and never serialized itself.
"""

from typing import Optional, Union

from lxml import etree

from .exceptions import DetachedNodeError

# Synthetic root that holds the top-level nodes of a fragment
FRAGMENT_TAG = "document-fragment"

# Elements that are legitimately empty and survive empty-node pruning
VOID_TAGS = frozenset([
    "img", "br", "hr", "input", "meta", "link", "area", "base",
    "col", "embed", "param", "source", "track", "wbr",
])

# XPath string() is the text content of a node (comments excluded), and
# works for both lxml.html and html5lib-built element classes
_string_value = etree.XPath("string()")


class Document:
    """
    Root container of one parsed tree.

    Attributes:
        root: Fragment container or the ``<html>`` element
        encoding: Encoding declared for output
        diagnostics: Non-fatal notes collected while loading
        is_fragment: True if the root is a fragment container (no <html> in the input)
    """

    def __init__(
        self,
        root: etree._Element,
        encoding: str = "UTF-8",
        diagnostics: Optional[list[str]] = None,
        is_fragment: bool = False
    ):
        self.root = root
        self.encoding = encoding
        self.diagnostics = list(diagnostics or [])
        self.is_fragment = is_fragment

    @property
    def tree(self) -> etree._ElementTree:
        return self.root.getroottree()

    def __repr__(self) -> str:
        mode = "fragment" if self.is_fragment else "document"
        return f"<Document {mode} root={self.root.tag!r} encoding={self.encoding!r}>"


# Anything a query or mutator accepts as its starting point
NodeLike = Union[Document, etree._Element, str]


def is_element(node) -> bool:
    """True for element nodes (comments and processing instructions have non-string tags)."""
    return isinstance(node, etree._Element) and isinstance(node.tag, str)


def is_comment(node) -> bool:
    return isinstance(node, etree._Element) and node.tag is etree.Comment


def is_text(node) -> bool:
    """True for text results returned by XPath (``text()``, attribute values)."""
    return isinstance(node, str) and hasattr(node, "getparent")


def is_fragment_root(node) -> bool:
    return is_element(node) and node.tag == FRAGMENT_TAG and node.getparent() is None


def is_document_root(node) -> bool:
    """True for the root a Document was built around."""
    if not is_element(node) or node.getparent() is not None:
        return False
    return node.tag in (FRAGMENT_TAG, "html")


def resolve(node: NodeLike):
    """Return the lxml node a query should start from."""
    if isinstance(node, Document):
        return node.root
    return node


def owner_root(node: NodeLike) -> etree._Element:
    """
    Return the Document root that owns ``node``.

    Raises:
        DetachedNodeError: If the node was removed from its tree
    """
    node = resolve(node)
    current = node.getparent() if is_text(node) else node
    if current is None:
        raise DetachedNodeError("Text result is not attached to any element")

    while current.getparent() is not None:
        current = current.getparent()

    if not is_document_root(current):
        raise DetachedNodeError(
            f"Node <{getattr(node, 'tag', node)}> is detached from its document",
            details={"top": str(current.tag)}
        )
    return current


def text_content(node) -> str:
    """Text content of an element (comments excluded), or the value of any other node."""
    if is_element(node):
        return str(_string_value(node))
    if is_comment(node):
        return node.text or ""
    if isinstance(node, str):
        return str(node)
    return "" if node is None else str(node)


def detach(node: etree._Element) -> etree._Element:
    """
    Remove ``node`` (and its subtree) from its parent.

    The text that followed the node stays in the tree: it is joined onto
    the previous sibling's tail, or the parent's text.
    """
    parent = node.getparent()
    if parent is None:
        return node

    if node.tail:
        previous = node.getprevious()
        if previous is not None:
            previous.tail = (previous.tail or "") + node.tail
        else:
            parent.text = (parent.text or "") + node.tail
    node.tail = None

    parent.remove(node)
    return node


def unwrap(node: etree._Element) -> None:
    """
    Replace ``node`` with its children, keeping its text and tail in place.

    Works for lxml.html and html5lib-built elements alike (the latter
    have no ``drop_tag``).
    """
    parent = node.getparent()
    if parent is None:
        return

    previous = node.getprevious()
    if node.text:
        if previous is not None:
            previous.tail = (previous.tail or "") + node.text
        else:
            parent.text = (parent.text or "") + node.text

    index = parent.index(node)
    children = list(node)
    tail = node.tail
    parent.remove(node)

    for offset, child in enumerate(children):
        parent.insert(index + offset, child)

    if tail:
        last = children[-1] if children else previous
        if last is not None:
            last.tail = (last.tail or "") + tail
        else:
            parent.text = (parent.text or "") + tail
