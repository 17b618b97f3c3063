"""
CSS selector → XPath 1.0 translation.

Supported subset:
    group, group          union (``|``)
    ancestor descendant   descendant combinator
    *  tag  #id  .class
    [attr] [attr=v] [attr~=v] [attr|=v] [attr^=v] [attr$=v] [attr*=v]

Simple selectors may be compounded (``a.ext[href^=http]``). Child/sibling
combinators fall back to the descendant combinator and pseudo-classes are
dropped, so an unsupported selector matches a superset instead of failing.
Only a malformed attribute bracket is rejected.
"""

import re
from collections import OrderedDict

from .exceptions import UnsupportedSelectorError
from .logger import get_module_logger

logger = get_module_logger("selectors")

_TOKEN_PATTERN = re.compile(r"""
      (?P<comma>\s*,\s*)
    | (?P<combinator>\s*[>+~]\s*|\s+)
    | (?P<tag>\*|[\w-]+)
    | \#(?P<id>[\w-]+)
    | \.(?P<cls>[\w-]+)
    | \[\s*(?P<attr>[\w-]+)\s*
        (?:(?P<op>[~|^$*]?=)\s*
            (?:"(?P<dq>[^"]*)"|'(?P<sq>[^']*)'|(?P<bare>[^\]\s"']*))
        \s*)?
      \]
    | (?P<pseudo>::?[\w-]+(?:\([^)]*\))?)
""", re.VERBOSE)


def xpath_literal(value: str) -> str:
    """Quote ``value`` as an XPath string literal."""
    if "'" not in value:
        return f"'{value}'"
    if '"' not in value:
        return f'"{value}"'
    # Both quote kinds: stitch the pieces back together with concat()
    parts = value.split("'")
    return "concat(" + ", \"'\", ".join(f"'{part}'" for part in parts) + ")"


def _token_predicate(attr: str, value: str) -> str:
    return (
        f"contains(concat(' ', normalize-space(@{attr}), ' '), "
        f"{xpath_literal(' ' + value + ' ')})"
    )


def attribute_predicate(attr: str, op: str, value: str) -> str:
    """Build the XPath predicate body for one attribute selector."""
    if not op:
        return f"@{attr}"

    literal = xpath_literal(value)

    if op == "=":
        return f"@{attr}={literal}"
    if op == "|=":
        return f"@{attr}={literal} or starts-with(@{attr}, {xpath_literal(value + '-')})"

    # Substring operators with an empty value never match
    if value == "":
        return "false()"
    if op == "~=":
        return _token_predicate(attr, value)
    if op == "^=":
        return f"starts-with(@{attr}, {literal})"
    if op == "$=":
        return f"substring(@{attr}, string-length(@{attr}) - {len(value) - 1})={literal}"
    # *=
    return f"contains(@{attr}, {literal})"


class _Step:
    """One compound selector: tag plus predicates."""

    def __init__(self):
        self.tag = None
        self.predicates = []
        self.touched = False

    def to_xpath(self) -> str:
        return "//" + (self.tag or "*") + "".join(f"[{p}]" for p in self.predicates)


def selector_to_xpath(selector: str) -> str:
    """
    Translate a CSS selector into an XPath expression.

    Args:
        selector: CSS selector (see module docstring for the subset)

    Returns:
        XPath 1.0 expression; ``.`` for an empty selector

    Raises:
        UnsupportedSelectorError: For a malformed attribute bracket
    """
    if not selector or not selector.strip():
        return "."

    selector = selector.strip()
    if selector == "*":
        return "//*"

    groups = []
    steps = []
    step = _Step()

    def flush_step():
        nonlocal step
        if step.touched:
            steps.append(step.to_xpath())
        step = _Step()

    def flush_group():
        flush_step()
        if steps:
            groups.append("".join(steps))
        steps.clear()

    pos = 0
    while pos < len(selector):
        m = _TOKEN_PATTERN.match(selector, pos)
        if m is None:
            if selector[pos] == "[":
                raise UnsupportedSelectorError(
                    f"Malformed attribute selector at offset {pos}: {selector!r}",
                    selector=selector,
                    position=pos
                )
            # Unknown character: skip it and let the step degrade to a wildcard
            logger.debug(f"Ignoring unsupported selector character {selector[pos]!r} in {selector!r}")
            step.touched = True
            pos += 1
            continue

        pos = m.end()
        kind = m.lastgroup

        if kind == "comma":
            flush_group()
        elif kind == "combinator":
            flush_step()
        elif kind == "tag":
            if step.tag is None:
                step.tag = m.group("tag")
            step.touched = True
        elif kind == "id":
            step.predicates.append(f"@id={xpath_literal(m.group('id'))}")
            step.touched = True
        elif kind == "cls":
            step.predicates.append(_token_predicate("class", m.group("cls")))
            step.touched = True
        elif kind == "pseudo":
            logger.debug(f"Dropping pseudo selector {m.group('pseudo')!r} in {selector!r}")
            step.touched = True
        else:
            value = next((v for v in (m.group("dq"), m.group("sq"), m.group("bare")) if v is not None), "")
            step.predicates.append(attribute_predicate(m.group("attr"), m.group("op") or "", value))
            step.touched = True

    flush_group()

    if not groups:
        return "."
    return " | ".join(groups)


class SelectorCompiler:
    """
    Selector translation with a bounded cache owned by the instance.

    Keep one compiler per long-lived service that evaluates the same
    selectors repeatedly; the module-level ``selector_to_xpath`` never caches.
    """

    def __init__(self, max_size: int = 256):
        self.max_size = max_size
        self._cache: "OrderedDict[str, str]" = OrderedDict()

    def compile(self, selector: str) -> str:
        """Translate ``selector``, reusing a previous translation when possible."""
        key = selector or ""
        if key in self._cache:
            self._cache.move_to_end(key)
            return self._cache[key]

        xpath = selector_to_xpath(selector)

        if self.max_size > 0:
            self._cache[key] = xpath
            if len(self._cache) > self.max_size:
                self._cache.popitem(last=False)

        return xpath

    def clear(self) -> None:
        self._cache.clear()

    def __len__(self) -> int:
        return len(self._cache)
