#!/usr/bin/env python3
"""
End-to-end tests for the clean pipeline.

Runs raw HTML through Cleaner/clean() with default and overridden options
and checks what survives in the output.
"""

from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent))

import logging

import pytest
from pydantic import ValidationError

from html_cleaner.cleaner import Cleaner, clean, resolve_options
from html_cleaner.dom import find
from html_cleaner.logger import resolve_level
from html_cleaner.nodes import Document
from html_cleaner.parser import parse
from html_cleaner.schemas import CleanOptions


def test_end_to_end_defaults():
    result = clean(
        '<html><body><script>x</script><!-- c --><div style="display:none">h</div>'
        '<p id="k" onclick="j">  Hello   World  </p></body></html>'
    )

    assert result == '<html><body><p id="k"> Hello World </p></body></html>'
    assert "<script" not in result
    assert "<!--" not in result
    assert "display" not in result
    assert "onclick" not in result


def test_fragment_defaults():
    result = clean('<div class="a"><nav>menu</nav><p>Text</p><span></span><footer>f</footer></div>')
    assert result == "<div><p>Text</p></div>"


def test_options_dict():
    result = clean('<p class="a" id="b">x</p>', {"allow_attributes": ["class"]})
    assert result == '<p class="a">x</p>'


def test_keyword_overrides():
    assert clean("<div><!-- keep --><p>x</p></div>", remove_comments=False) == (
        "<div><!-- keep --><p>x</p></div>"
    )
    assert clean('<p onclick="x">y</p>', allow_attributes=None) == '<p onclick="x">y</p>'
    assert clean('<nav><p>x</p></nav>', remove_tags=[]) == "<nav><p>x</p></nav>"


def test_allow_then_deny():
    result = clean('<p id="a" data-x="1" title="t">y</p>', deny_attributes=["data-*"])
    assert result == '<p id="a">y</p>'


def test_beautified_output():
    assert clean("<div><p>x</p></div>", compress_whitespace=False) == "<div>\n\t<p>\n\t\tx\n\t</p>\n</div>"


def test_unknown_option_is_rejected():
    with pytest.raises(ValidationError):
        clean("<p>x</p>", remove_everything=True)


def test_as_document():
    doc = clean("<div><script>x</script><p>y</p></div>", as_string=False)

    assert isinstance(doc, Document)
    assert find(doc, "//script") is None
    assert find(doc, "//p").text == "y"


def test_document_is_cleaned_in_place():
    doc = parse("<div><script>x</script><p>y</p></div>")
    assert Cleaner().clean(doc, as_string=False) is doc
    assert find(doc, "//script") is None


def test_node_is_cleaned_as_copy():
    doc = parse('<div><p onclick="x">a</p></div>')
    div = find(doc, "//div")

    assert Cleaner().clean(div) == "<div><p>a</p></div>"
    # The source tree is untouched
    assert find(doc, "//p").get("onclick") == "x"


def test_cleaner_default_options():
    cleaner = Cleaner(options={"remove_comments": False})

    assert cleaner.clean("<div><!-- c --><p>x</p></div>") == "<div><!-- c --><p>x</p></div>"
    # Per-call options replace the instance defaults
    assert cleaner.clean("<div><!-- c --><p>x</p></div>", {}) == "<div><p>x</p></div>"


def test_clean_file(tmp_path):
    page = tmp_path / "page.html"
    page.write_bytes(
        '<html><head><meta charset="iso-8859-1"></head><body><p>café</p></body></html>'.encode("cp1252")
    )

    result = Cleaner().clean_file(page)

    assert "<p>café</p>" in result
    assert "<meta" not in result


def test_resolve_options():
    options = resolve_options(CleanOptions(remove_meta=False), remove_styles=False)

    assert options.remove_meta is False
    assert options.remove_styles is False
    assert options.remove_scripts is True
    assert options.allow_attributes == ["id", "name", "src", "href", "alt", "data-*"]


def test_log_level_names():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level("WARNING") == logging.WARNING
    assert resolve_level(None) == logging.INFO
    assert resolve_level("nonsense", default=logging.ERROR) == logging.ERROR
