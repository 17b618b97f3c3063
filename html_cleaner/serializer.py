"""
Serializer: (sub)tree → HTML string.

Output is either whitespace-compressed (one line, minimal) or beautified
(one token per line, tab-indented). Entities written by the serializer
are decoded again so the result carries literal Unicode.
"""

import re
from html import escape, unescape

import lxml.html

from .nodes import NodeLike, is_fragment_root, resolve

# Some loaders prepend this to force UTF-8; it is never part of the content
XML_DECLARATION = '<?xml encoding="UTF-8">'

# Tags that stay on the current indentation level
INLINE_TAGS = [
    'a', 'abbr', 'acronym', 'b', 'bdo', 'big', 'br', 'button', 'cite', 'code', 'dfn', 'em', 'i', 'img',
    'kbd', 'label', 'map', 'object', 'q', 'samp', 'script', 'select', 'small', 'strong',
    'sub', 'sup', 'textarea', 'input', 'time', 'tt', 'var',
]

SELF_CLOSING_TAGS = [
    'area', 'base', 'br', 'col', 'embed', 'hr', 'img', 'input', 'link', 'meta',
    'param', 'source', 'track', 'wbr',
]

# Tokens: comments and tags are delimiters, everything between is text
_TOKEN_SPLIT = re.compile(r'(<!--.*?-->|<[^>]+>)', re.DOTALL)
_INLINE_TAG = re.compile(r'^</?(?:' + '|'.join(INLINE_TAGS) + r')\b', re.IGNORECASE)
_TAG_NAME = re.compile(r'^<([a-z0-9]+)\b', re.IGNORECASE)


# Named and numeric character references
_ENTITY = re.compile(r'&(?:#[0-9]+|#[xX][0-9a-fA-F]+|[A-Za-z][A-Za-z0-9]*);')

# Characters that must stay escaped for the markup to parse back the same
_MARKUP_CHARS = frozenset('<>&"\'')


def _decode_entity(m) -> str:
    char = unescape(m.group(0))
    if char == m.group(0) or char in _MARKUP_CHARS:
        return m.group(0)
    return char


def decode_entities(html: str) -> str:
    """
    Replace character references with literal Unicode.

    References to ``<``, ``>``, ``&`` and the quote characters are kept,
    in any spelling (``&lt;``, ``&#60;``, ``&#x3C;``).
    """
    return _ENTITY.sub(_decode_entity, html)


def _serialize(node) -> str:
    if is_fragment_root(node):
        # The container stands in for the document node: emit its content only
        parts = [escape(node.text, quote=False)] if node.text else []
        parts.extend(
            lxml.html.tostring(child, encoding="unicode", with_tail=True) for child in node
        )
        return "".join(parts)

    if isinstance(node, str):
        return str(node)

    return lxml.html.tostring(node, encoding="unicode", with_tail=False)


def to_html_string(node: NodeLike = None, compress: bool = True) -> str:
    """
    Serialize the subtree rooted at ``node``.

    Args:
        node: Document, element, comment or text result (None gives "")
        compress: Compress whitespace (default) or beautify

    Returns:
        HTML with literal Unicode instead of entities
    """
    if node is None:
        return ""

    html = _serialize(resolve(node))

    # Turn the entities the serializer produced back into real characters
    html = decode_entities(html)

    if html.startswith(XML_DECLARATION):
        html = html[len(XML_DECLARATION):]

    return compress_whitespace(html) if compress else beautify(html)


def compress_whitespace(html: str) -> str:
    """
    Collapse whitespace runs to one space, drop whitespace between tags, trim.

    Idempotent: compressing twice gives the same string.
    """
    # 1. Every whitespace run becomes a single space
    html = re.sub(r'\s+', ' ', html)

    # 2. Nothing between adjacent tags
    html = re.sub(r'>\s+<', '><', html)

    # 3. Trim both ends
    return html.strip()


def _is_inline_tag(token: str) -> bool:
    return bool(_INLINE_TAG.match(token))


def _is_self_closing(token: str) -> bool:
    # Known void element, or any tag written with a trailing "/>"
    m = _TAG_NAME.match(token)
    if m and m.group(1).lower() in SELF_CLOSING_TAGS:
        return True
    return token.endswith('/>')


def beautify(html: str) -> str:
    """
    Re-indent ``html``: one token per line, one tab per nesting level.

    Inline and self-closing tags do not open a level; unbalanced closing
    tags never push the depth below zero.
    """
    tokens = [token for token in _TOKEN_SPLIT.split(html) if token]

    indent = "\t"
    depth = 0
    lines = []

    for token in tokens:
        trimmed = token.strip()
        if not trimmed:
            continue

        # Comments keep their content as written
        if trimmed.startswith('<!--'):
            lines.append(indent * depth + token.rstrip())
            continue

        if trimmed.startswith('</'):
            if not _is_inline_tag(trimmed):
                depth = max(depth - 1, 0)
            lines.append(indent * depth + trimmed)
            continue

        if trimmed.startswith('<'):
            lines.append(indent * depth + trimmed)
            if not _is_self_closing(trimmed) and not _is_inline_tag(trimmed):
                depth += 1
            continue

        # Text: only collapse runs of whitespace
        lines.append(indent * depth + re.sub(r'\s+', ' ', token))

    return "\n".join(lines)


def reindent(html: str, indent_size: int, indent_char: str = " ") -> str:
    """
    Convert two-space indentation levels to ``indent_size`` × ``indent_char``.

    An ``indent_size`` below 1 removes the whitespace between tags instead.
    """
    if indent_size < 1:
        return re.sub(r'>\s+<', '><', html)

    unit = indent_char * indent_size

    def replace(m):
        level = len(m.group(1)) // 2
        return unit * level

    return re.sub(r'^([ \t]+)', replace, html, flags=re.MULTILINE)
