#!/usr/bin/env python3
"""
Tests for CSS selector → XPath translation.

Checks the exact XPath produced for each supported form, the permissive
fallbacks for unsupported syntax, and evaluation against parsed trees.
"""

from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent))

import pytest

from html_cleaner.dom import query_selector_all
from html_cleaner.exceptions import UnsupportedSelectorError
from html_cleaner.parser import parse
from html_cleaner.selectors import SelectorCompiler, selector_to_xpath, xpath_literal

CLASS_ITEM = "contains(concat(' ', normalize-space(@class), ' '), ' item ')"


def test_empty_and_wildcard():
    assert selector_to_xpath("") == "."
    assert selector_to_xpath("   ") == "."
    assert selector_to_xpath("*") == "//*"


def test_simple_selectors():
    assert selector_to_xpath("div") == "//div"
    assert selector_to_xpath("#main") == "//*[@id='main']"
    assert selector_to_xpath(".item") == f"//*[{CLASS_ITEM}]"


def test_descendant_and_group():
    assert selector_to_xpath("#main .item[data-x=1]") == (
        f"//*[@id='main']//*[{CLASS_ITEM}][@data-x='1']"
    )
    assert selector_to_xpath("h1, h2") == "//h1 | //h2"


def test_compound_selector():
    assert selector_to_xpath("a.item#top") == f"//a[{CLASS_ITEM}][@id='top']"


@pytest.mark.parametrize("selector,predicate", [
    ("[href]", "@href"),
    ("[href=x]", "@href='x'"),
    ('[title="a, b"]', "@title='a, b'"),
    ("[lang|=en]", "@lang='en' or starts-with(@lang, 'en-')"),
    ("[rel~=next]", "contains(concat(' ', normalize-space(@rel), ' '), ' next ')"),
    ("[href^=http]", "starts-with(@href, 'http')"),
    ("[href$=.pdf]", "substring(@href, string-length(@href) - 3)='.pdf'"),
    ("[href*=example]", "contains(@href, 'example')"),
    ("[href*='']", "false()"),
])
def test_attribute_operators(selector, predicate):
    assert selector_to_xpath(selector) == f"//*[{predicate}]"


def test_unsupported_syntax_degrades():
    # Child combinator becomes a descendant step
    assert selector_to_xpath("ul > li") == "//ul//li"
    assert selector_to_xpath("h1 + p") == "//h1//p"
    # Pseudo-classes are dropped
    assert selector_to_xpath("a:hover") == "//a"
    assert selector_to_xpath(":first-child") == "//*"


@pytest.mark.parametrize("selector,position", [
    ("a[=x]", 1),
    ("a[href", 1),
    ("div [", 4),
])
def test_malformed_bracket_raises(selector, position):
    with pytest.raises(UnsupportedSelectorError) as exc_info:
        selector_to_xpath(selector)

    assert exc_info.value.selector == selector
    assert exc_info.value.position == position


def test_xpath_literal_quoting():
    assert xpath_literal("plain") == "'plain'"
    assert xpath_literal("it's") == '"it\'s"'
    assert xpath_literal("a'b\"c") == "concat('a', \"'\", 'b\"c')"


def test_compiled_selector_matches_exactly_one_node():
    doc = parse(
        '<div id="main"><span class="item" data-x="1">ok</span>'
        '<span class="item" data-x="2">no</span></div>'
        '<span class="item" data-x="1">outside</span>'
    )
    nodes = query_selector_all(doc, "#main .item[data-x=1]")

    assert len(nodes) == 1
    assert nodes[0].text == "ok"


def test_class_token_does_not_match_prefix():
    doc = parse('<p class="items">a</p><p class="x item">b</p>')
    nodes = query_selector_all(doc, ".item")
    assert [n.text for n in nodes] == ["b"]


def test_compiler_cache():
    compiler = SelectorCompiler(max_size=2)

    assert compiler.compile("div") == "//div"
    compiler.compile("div")
    assert len(compiler) == 1

    compiler.compile("p")
    compiler.compile("span")
    assert len(compiler) == 2

    compiler.clear()
    assert len(compiler) == 0


def test_compiler_without_cache():
    compiler = SelectorCompiler(max_size=0)
    assert compiler.compile(".item") == f"//*[{CLASS_ITEM}]"
    assert len(compiler) == 0
