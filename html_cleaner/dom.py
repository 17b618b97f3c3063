"""
Read-only queries over a Document or node.

Every function here accepts a ``Document`` or an lxml node as its root.
XPath runs against the node's owning tree with the node as context, so
absolute expressions (``//p``) search the whole document and relative
ones (``.//p``) only the subtree.
"""

import re
from typing import Any, Callable, Iterable, Iterator, Optional, Union

from .nodes import (
    Document,
    NodeLike,
    is_comment,
    is_element,
    is_fragment_root,
    is_text,
    owner_root,
    resolve,
    text_content,
)
from .schemas import NodeSnapshot
from .selectors import selector_to_xpath

# Ancestors that depth/parents stop at when excluding the document wrapper
WRAPPER_TAGS = ("html", "body")

# A read rule is XPath if it looks like a path, a function call or an axis step;
# anything else (including ".class") is a CSS selector
_XPATH_RULE = re.compile(r"^\s*(?:/|\.(?:$|[./\[])|\(|@|[\w-]+\s*\()|::")

Rules = Union[str, Iterable[str]]


def attributes(node) -> dict[str, str]:
    """Attributes of an element in document order; empty for any other node."""
    node = resolve(node)
    if not is_element(node):
        return {}
    return dict(node.attrib)


def _parent(node):
    if is_text(node):
        owner = node.getparent()
        # Tail text belongs to the element it follows, not to that element
        return owner.getparent() if getattr(node, "is_tail", False) and owner is not None else owner
    return node.getparent()


def parents(node, exclude_html_body: bool = True) -> list:
    """
    Ancestors of ``node``, nearest first.

    Args:
        node: Element, comment or text result
        exclude_html_body: Stop once an ``<html>`` or ``<body>`` ancestor is reached

    Returns:
        List of ancestor elements (the document root container is never included)
    """
    result = []
    current = _parent(resolve(node))

    while current is not None and not is_fragment_root(current):
        if exclude_html_body and current.tag in WRAPPER_TAGS:
            break
        result.append(current)
        current = current.getparent()

    return result


def depth(node, exclude_html_body: bool = True) -> int:
    """Number of ancestor hops, with the same stopping rule as ``parents``."""
    return len(parents(node, exclude_html_body))


def sibling_position(node) -> int:
    """
    1-based position of ``node`` among its siblings with the same tag.

    This is the XPath-style ``tag[n]`` index, not the child index.
    """
    node = resolve(node)
    position = 1
    for sibling in node.itersiblings(preceding=True):
        if is_element(sibling) and sibling.tag == node.tag:
            position += 1
    return position


def parent_tags(node) -> list[str]:
    """``tag[position]`` for each ancestor, root first (html/body excluded)."""
    return [f"{parent.tag}[{sibling_position(parent)}]" for parent in reversed(parents(node))]


def tag_path(node, serialize: bool = False) -> Union[list[str], str]:
    """
    Structural fingerprint of ``node``: ancestor steps plus its own step.

    Args:
        node: Element to fingerprint
        serialize: Join the steps with ``/`` instead of returning a list

    Returns:
        e.g. ``['ul[1]', 'li[2]']`` or ``'ul[1]/li[2]'``
    """
    node = resolve(node)
    steps = parent_tags(node)
    steps.append(f"{node.tag}[{sibling_position(node)}]")
    return "/".join(steps) if serialize else steps


def find_all(root: NodeLike, xpath: str) -> list:
    """
    Evaluate ``xpath`` with ``root`` as the context node.

    Node-set results come back in document order. A scalar result
    (``count()``, ``string()``, ``boolean()``) is wrapped in a one-item list.

    Raises:
        DetachedNodeError: If ``root`` no longer belongs to a Document
    """
    context = resolve(root)
    owner_root(context)

    result = context.xpath(xpath)
    if not isinstance(result, list):
        return [result]

    # The fragment container stands in for the document node and is never a match
    return [item for item in result if not is_fragment_root(item)]


def find(root: NodeLike, xpath: str):
    """First match of ``xpath``, or None."""
    nodes = find_all(root, xpath)
    return nodes[0] if nodes else None


def query_selector_all(root: NodeLike, selector: str) -> list:
    """All nodes matching the CSS ``selector``."""
    return find_all(root, selector_to_xpath(selector))


def query_selector(root: NodeLike, selector: str):
    """First node matching the CSS ``selector``, or None."""
    return find(root, selector_to_xpath(selector))


def match(node, xpath: str) -> bool:
    """True if ``node`` itself is selected by ``xpath`` evaluated from its document."""
    node = resolve(node)
    if not is_element(node) or is_fragment_root(node):
        return False
    return any(candidate is node for candidate in find_all(node, xpath))


def closest(node, selector: str):
    """
    Nearest element, starting with ``node`` itself, that matches ``selector``.

    Returns:
        Matching element or None
    """
    xpath = selector_to_xpath(selector)
    current = resolve(node)

    while current is not None and not is_fragment_root(current):
        if match(current, xpath):
            return current
        current = current.getparent()

    return None


def contains(ancestor, candidate) -> bool:
    """True if ``candidate`` is a strict descendant of ``ancestor``."""
    ancestor = resolve(ancestor)
    candidate = resolve(candidate)
    if candidate is ancestor:
        return False

    current = _parent(candidate)
    while current is not None:
        if current is ancestor:
            return True
        current = current.getparent()

    return False


def is_xpath_rule(rule: str) -> bool:
    return bool(_XPATH_RULE.search(rule))


def _rule_to_xpath(rule: str) -> str:
    return rule if is_xpath_rule(rule) else selector_to_xpath(rule)


def _match_rules(root: NodeLike, rules: Rules) -> list:
    # First rule that matches anything wins
    if isinstance(rules, str):
        rules = [rules]

    for rule in rules:
        nodes = find_all(root, _rule_to_xpath(rule))
        if nodes:
            return nodes

    return []


def value(node) -> Any:
    """
    Raw value of a query result.

    Elements give their text content, comments and text results their
    value; scalars from XPath functions are returned unchanged.
    """
    if is_element(node) or is_comment(node) or is_text(node):
        return text_content(node)
    return node


def _trimmed_value(node) -> str:
    return text_content(node).strip()


def read_value(root: NodeLike, rules: Rules) -> Optional[str]:
    """
    Trimmed text of the first node matched by ``rules``.

    Args:
        root: Document or node to search from
        rules: CSS selector or XPath, or a list tried in order

    Returns:
        Trimmed text, or None if nothing matched
    """
    nodes = _match_rules(root, rules)
    if not nodes:
        return None
    return _trimmed_value(nodes[0])


def read_values(root: NodeLike, rules: Rules, transform: Optional[Callable[[Any], Any]] = None) -> list:
    """
    Apply ``transform`` (default: trimmed text) to every node matched by ``rules``.

    Document order is preserved.
    """
    nodes = _match_rules(root, rules)
    return [(transform or _trimmed_value)(node) for node in nodes]


def body(root: NodeLike):
    """The ``<body>`` element of a Document, or ``root`` itself when there is none."""
    node = resolve(root)
    if isinstance(root, Document) or node.getparent() is None:
        found = find(node, "//body")
        if found is not None:
            return found
    return node


# --- Tree walks ---

def _walk_roots(root: NodeLike) -> list:
    node = resolve(root)
    if is_fragment_root(node) or (is_element(node) and node.tag == "html" and node.getparent() is None):
        children = [child for child in node if is_element(child)]
        if children or is_fragment_root(node):
            return children
    return [node]


def _indexed_elements(nodes: Iterable) -> Iterator[tuple[Any, int, int]]:
    """Yield (element, index among elements, index among same-tag elements)."""
    seen_tags: dict[str, int] = {}
    index = 0
    for child in list(nodes):
        if not is_element(child):
            continue
        sibling_index = seen_tags.get(child.tag, 0)
        yield child, index, sibling_index
        seen_tags[child.tag] = sibling_index + 1
        index += 1


def each(root: NodeLike, callback: Callable) -> NodeLike:
    """
    Depth-first walk over elements.

    ``callback(node, depth, index, sibling_index, parent_info)`` is called
    for every element; returning a node makes the walk descend into that
    node instead. ``parent_info`` holds the parent's depth, index and
    sibling_index.

    Returns:
        ``root``, for chaining
    """
    def traverse(node, current_depth, index, sibling_index, parent_info):
        replacement = callback(node, current_depth, index, sibling_index, parent_info)
        if replacement is not None:
            node = replacement

        info = {"depth": current_depth, "index": index, "sibling_index": sibling_index}
        for child, child_index, child_sibling_index in _indexed_elements(node):
            traverse(child, current_depth + 1, child_index, child_sibling_index, info)

    top_info = {"depth": 0, "index": 0, "sibling_index": 0}
    for node, index, sibling_index in _indexed_elements(_walk_roots(root)):
        traverse(node, 0, index, sibling_index, top_info)

    return root


def _child_nodes(node) -> Iterator:
    # Text, elements and comments in document order
    if node.text and is_element(node):
        yield node.text
    for child in node:
        yield child
        if child.tail:
            yield child.tail


def map_tree(root: NodeLike, callback: Callable) -> list:
    """
    Build a nested structure by calling ``callback`` on every node.

    ``callback(node, depth, index, sibling_index, parent_info)`` returns a
    dict (or None to skip). Non-element nodes are passed with index and
    sibling_index of -1 and text is passed as a plain string. Non-empty
    child results are collected under the ``"children"`` key.

    Returns:
        One result per top-level element
    """
    def traverse(node, current_depth, index, sibling_index, parent_info):
        item = callback(node, current_depth, index, sibling_index, parent_info)
        if item is None or not is_element(node):
            return item

        info = {"depth": current_depth, "index": index, "sibling_index": sibling_index}
        seen_tags: dict[str, int] = {}
        element_index = 0
        for child in _child_nodes(node):
            if is_element(child):
                child_sibling_index = seen_tags.get(child.tag, 0)
                result = traverse(child, current_depth + 1, element_index, child_sibling_index, info)
                seen_tags[child.tag] = child_sibling_index + 1
                element_index += 1
            else:
                result = traverse(child, current_depth + 1, -1, -1, info)

            if result:
                item.setdefault("children", []).append(result)

        return item

    top_info = {"depth": 0, "index": 0, "sibling_index": 0}
    results = []
    for node, index, sibling_index in _indexed_elements(_walk_roots(root)):
        result = traverse(node, 0, index, sibling_index, top_info)
        if result:
            results.append(result)
    return results


def _snapshot_item(node, level, *_):
    if is_element(node):
        item = {"tag": node.tag, "level": level}
        if node.attrib:
            item["attrs"] = dict(node.attrib)
        return item
    if is_comment(node):
        return {"tag": "#comment", "level": level, "text": (node.text or "").strip()}
    text = str(node).strip()
    # Whitespace-only text carries no structure
    return {"tag": "#text", "level": level, "text": text} if text else None


def to_array(root: NodeLike) -> list[NodeSnapshot]:
    """Snapshot the tree as nested NodeSnapshot models (tag, level, attrs, text, children)."""
    return [NodeSnapshot.model_validate(item) for item in map_tree(root, _snapshot_item)]
