"""
In-place structural rewrites.

Every mutator takes a Document or node, rewrites the tree under it and
returns what it was given, so calls can be chained. Matches are always
collected into a list before the first removal: deleting while walking a
live result would skip siblings.
"""

import re
from typing import Iterable, Optional
from urllib.parse import urljoin

from .dom import find_all
from .logger import get_module_logger
from .nodes import VOID_TAGS, NodeLike, detach, is_element, resolve, text_content
from .text import matches_glob

logger = get_module_logger("mutators")

# Inline styles that hide an element (literal substrings, no CSS parsing)
HIDDEN_STYLES = ["display:none", "display: none", "visibility:hidden", "visibility: hidden"]

# Class tokens that hide an element
HIDDEN_CLASSES = ["hidden", "hide"]

# Links that resolve without a base URL
ABSOLUTE_LINK = re.compile(r"^(?:[a-z][a-z0-9+.-]*:|//|#)", re.IGNORECASE)


def _class_token(token: str) -> str:
    return f"contains(concat(' ', normalize-space(@class), ' '), ' {token} ')"


# One query per signal, in the order they are checked
HIDDEN_ELEMENT_QUERIES = [
    ".//*[" + " or ".join(f"contains(@style, '{style}')" for style in HIDDEN_STYLES) + "]",
    ".//*[@hidden]",
    ".//*[@aria-hidden='true']",
    ".//*[" + " or ".join(_class_token(token) for token in HIDDEN_CLASSES) + "]",
]


def _remove_all(nodes: list) -> int:
    # Snapshot first; nested matches inside an already-removed subtree are harmless
    removed = 0
    for node in list(nodes):
        if node.getparent() is not None:
            detach(node)
            removed += 1
    return removed


def remove_tags(root: NodeLike, tags: Iterable[str]) -> NodeLike:
    """
    Remove every descendant element whose tag is in ``tags``, subtree included.

    Args:
        root: Document or node to clean
        tags: Tag names (lowercase, as parsed)

    Returns:
        ``root``
    """
    node = resolve(root)
    if not is_element(node):
        return root

    for tag in tags:
        # Tag names are matched literally, never evaluated as XPath
        matches = [element for element in node.iter(tag.lower()) if element is not node]
        removed = _remove_all(matches)
        if removed:
            logger.debug(f"Removed {removed} <{tag}> elements")
    return root


def remove_meta(root: NodeLike) -> NodeLike:
    """Remove <meta> and <link> elements."""
    return remove_tags(root, ["meta", "link"])


def remove_styles(root: NodeLike) -> NodeLike:
    """Remove <style> elements."""
    return remove_tags(root, ["style"])


def remove_scripts(root: NodeLike) -> NodeLike:
    """Remove <script> elements."""
    return remove_tags(root, ["script"])


def remove_hidden_elements(root: NodeLike) -> NodeLike:
    """
    Remove descendant elements that are hidden by markup alone.

    An element is hidden if any of these hold:
    - its inline style contains display:none or visibility:hidden
      (with or without the space after the colon)
    - it carries a ``hidden`` attribute
    - it has ``aria-hidden="true"``
    - its class list contains the token ``hidden`` or ``hide``
    """
    removed = 0
    for query in HIDDEN_ELEMENT_QUERIES:
        removed += _remove_all(find_all(root, query))

    if removed:
        logger.debug(f"Removed {removed} hidden elements")
    return root


def remove_comments(root: NodeLike) -> NodeLike:
    """Remove every comment under ``root``."""
    removed = _remove_all(find_all(root, ".//comment()"))
    if removed:
        logger.debug(f"Removed {removed} comments")
    return root


def remove_attributes(
    root: NodeLike,
    allow: Optional[Iterable[str]] = None,
    deny: Optional[Iterable[str]] = None
) -> NodeLike:
    """
    Filter attributes on ``root`` and every element below it.

    Patterns are globs (``data-*``). With ``allow``, attributes matching no
    allow pattern are removed; with ``deny``, attributes matching a deny
    pattern are removed as well. When both are given the allow-list is
    applied first.

    Args:
        root: Document or node to clean
        allow: Attribute patterns to keep, or None for no allow-list
        deny: Attribute patterns to drop, or None for no deny-list

    Returns:
        ``root``
    """
    allow = list(allow) if allow is not None else None
    deny = list(deny) if deny is not None else None

    node = resolve(root)
    if isinstance(node, str):
        return root

    # Only attributes change here, so walking the live tree is safe
    for element in node.iter():
        if not is_element(element):
            continue
        for name in list(element.attrib):
            if allow is not None and not matches_glob(allow, name):
                del element.attrib[name]
            elif deny is not None and matches_glob(deny, name):
                del element.attrib[name]

    return root


def remove_empty_nodes(root: NodeLike) -> NodeLike:
    """
    Prune whitespace-only text and empty elements, children before parents.

    An element is removed when, after its own children were pruned, it has
    no child nodes left, no text, and is not a void element (img, br, ...).
    """
    node = resolve(root)
    if not is_element(node):
        return root

    if node.text is not None and not node.text.strip():
        node.text = None

    for child in list(node):
        if child.tail is not None and not child.tail.strip():
            child.tail = None

        if not is_element(child):
            continue

        remove_empty_nodes(child)

        if child.tag.lower() not in VOID_TAGS and len(child) == 0 and not text_content(child).strip():
            detach(child)

    return root


def complete_relative_links(root: NodeLike, base_url: str) -> NodeLike:
    """
    Make relative ``href`` and ``src`` attributes absolute against ``base_url``.

    Absolute and protocol-relative URLs are left as they are.
    """
    node = resolve(root)
    rewritten = 0

    for element in node.iter():
        if not is_element(element):
            continue
        for name in ("href", "src"):
            link = element.get(name)
            if link is None or ABSOLUTE_LINK.match(link.strip()):
                continue
            element.set(name, urljoin(base_url, link.strip()))
            rewritten += 1

    if rewritten:
        logger.debug(f"Completed {rewritten} relative links against {base_url}")
    return root
