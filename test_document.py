#!/usr/bin/env python3
"""
Tests for the HtmlDocument facade: main-node selection, scoped reads
and chainable cleanup.
"""

from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent))

import pytest

from html_cleaner.document import HtmlDocument

PAGE = (
    '<html><body><div id="nav"><a href="/">home</a></div>'
    '<article class="post"><h1> Title </h1><p class="x">one</p><!-- c -->'
    '<p class="x" hidden>secret</p><p class="x">two</p><div></div></article></body></html>'
)


@pytest.fixture
def page():
    return HtmlDocument(PAGE)


def test_main_node_defaults_to_root(page):
    assert page.main_node.tag == "html"
    assert page.main_node is page.document.root


def test_query_selector_try_set_main_node(page):
    node = page.query_selector_try_set_main_node(["main", "article.post", "body"])

    assert node.tag == "article"
    assert page.main_node is node


def test_find_try_set_main_node_without_match(page):
    assert page.find_try_set_main_node(["//main", "//section"]) is None
    assert page.main_node.tag == "html"


def test_reads_from_main_node(page):
    page.find_try_set_main_node(["//article"])

    assert page.read_value("h1") == "Title"
    assert page.read_values(".//p") == ["one", "secret", "two"]
    assert len(page.query_selector_all("p")) == 3
    assert page.find(".//a") is None
    assert page.query_selector("h1").text == " Title "


def test_chained_cleanup_on_main_node(page):
    page.query_selector_try_set_main_node(["article"])
    result = page.remove_comments().remove_hidden_elements().remove_empty_nodes().remove_attributes(allow=["id"])

    assert result is page
    assert str(page) == "<article><h1> Title </h1><p>one</p><p>two</p></article>"
    # Nodes outside the main node are left alone
    assert page.to_string(page.document).startswith('<html><body><div id="nav">')


def test_remove_tags_is_document_wide(page):
    page.query_selector_try_set_main_node(["article"])
    page.remove_tags(["a"])

    assert "home" not in page.to_string(page.document)


def test_to_string_beautified(page):
    page.query_selector_try_set_main_node(["h1"])
    assert page.to_string(compress=False) == "<h1>\n\t Title \n</h1>"


def test_str_returns_empty_string_on_failure(page):
    page.set_main_node(object())
    assert str(page) == ""


def test_set_main_node_none_resets(page):
    page.query_selector_try_set_main_node(["article"])
    page.set_main_node(None)
    assert page.main_node.tag == "html"
