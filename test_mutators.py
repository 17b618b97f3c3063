#!/usr/bin/env python3
"""
Tests for the in-place tree mutators.

Every test parses a small fragment, applies one mutator and checks the
serialized result or the surviving nodes.
"""

from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent))

from html_cleaner import mutators
from html_cleaner.dom import find, find_all
from html_cleaner.parser import parse
from html_cleaner.serializer import to_html_string
from html_cleaner.text import matches_glob


def test_remove_tags_keeps_sibling_order():
    doc = parse(
        "<div><script>1</script><script>2</script><script>3</script>"
        "<p>a</p><span>b</span><em>c</em></div>"
    )
    result = mutators.remove_tags(doc, ["script"])

    assert result is doc
    assert find_all(doc, "//script") == []
    assert [child.tag for child in find(doc, "//div")] == ["p", "span", "em"]


def test_remove_tags_is_case_insensitive_on_names():
    doc = parse("<div><NAV>menu</NAV><p>x</p></div>")
    mutators.remove_tags(doc, ["NAV"])
    assert to_html_string(doc) == "<div><p>x</p></div>"


def test_remove_tags_keeps_following_text():
    doc = parse("<p>one <b>two</b> three</p>")
    mutators.remove_tags(doc, ["b"])
    assert to_html_string(doc) == "<p>one three</p>"


def test_remove_tags_matches_names_literally():
    doc = parse("<div><p>x</p><span>y</span></div>")
    mutators.remove_tags(doc, ["a b", "x[", "p"])
    assert to_html_string(doc) == "<div><span>y</span></div>"


def test_remove_tags_on_text_result_is_a_no_op():
    doc = parse("<p>x</p>")
    text = find(doc, "//p/text()")

    assert mutators.remove_tags(text, ["p"]) is text
    assert to_html_string(doc) == "<p>x</p>"


def test_remove_meta_styles_scripts():
    doc = parse(
        '<html><head><meta name="description" content="d"><link rel="stylesheet" href="s.css">'
        "<style>p {}</style><title>T</title></head>"
        "<body><script>x()</script><p>x</p></body></html>"
    )
    mutators.remove_meta(doc)
    mutators.remove_styles(doc)
    mutators.remove_scripts(doc)

    assert to_html_string(doc) == "<html><head><title>T</title></head><body><p>x</p></body></html>"


def test_remove_hidden_elements():
    doc = parse(
        '<div><p style="display:none">a</p><p style="color: red; visibility: hidden">b</p>'
        '<p hidden>c</p><p aria-hidden="true">d</p><p class="x hide">e</p>'
        '<p class="hidden-xs">f</p><p aria-hidden="false">g</p></div>'
    )
    mutators.remove_hidden_elements(doc)

    assert [p.text for p in find_all(doc, "//p")] == ["f", "g"]


def test_remove_comments():
    doc = parse("<div><!-- a --><p>x</p><!-- b --></div>")
    mutators.remove_comments(doc)
    assert to_html_string(doc) == "<div><p>x</p></div>"


def test_remove_attributes_allow_list():
    doc = parse('<a href="x" onclick="y" data-foo="z" id="i">t</a>')
    link = find(doc, "//a")

    mutators.remove_attributes(link, allow=["id", "href", "data-*"])

    assert set(link.attrib) == {"id", "href", "data-foo"}


def test_remove_attributes_deny_list():
    doc = parse('<div onload="a" class="c"><a href="x" onclick="y">t</a></div>')
    mutators.remove_attributes(doc, deny=["on*"])

    assert to_html_string(doc) == '<div class="c"><a href="x">t</a></div>'


def test_remove_attributes_allow_then_deny():
    doc = parse('<a href="x" onclick="y" id="i" title="t">t</a>')
    link = find(doc, "//a")

    mutators.remove_attributes(link, allow=["id", "href", "on*"], deny=["on*"])

    assert set(link.attrib) == {"id", "href"}


def test_remove_empty_nodes_bottom_up():
    doc = parse("<div><p></p><span>  </span><img></div>")
    mutators.remove_empty_nodes(doc)
    assert to_html_string(doc) == "<div><img></div>"


def test_remove_empty_nodes_cascades_to_parents():
    doc = parse("<section><div><p> </p></div></section><p>x</p>")
    mutators.remove_empty_nodes(doc)
    assert to_html_string(doc) == "<p>x</p>"


def test_remove_empty_nodes_on_text_result_is_a_no_op():
    doc = parse("<div><p>x</p><span></span></div>")
    text = find(doc, "//p/text()")

    assert mutators.remove_empty_nodes(text) is text
    assert to_html_string(doc) == "<div><p>x</p><span></span></div>"


def test_complete_relative_links():
    doc = parse(
        '<a href="/a">1</a><a href="b.html">2</a><a href="https://x.org/">3</a>'
        '<a href="//cdn.x/y">4</a><a href="#top">5</a><a href="mailto:me@x.org">6</a>'
        '<img src="i.png">'
    )
    mutators.complete_relative_links(doc, "https://example.com/dir/page.html")

    assert [a.get("href") for a in find_all(doc, "//a")] == [
        "https://example.com/a",
        "https://example.com/dir/b.html",
        "https://x.org/",
        "//cdn.x/y",
        "#top",
        "mailto:me@x.org",
    ]
    assert find(doc, "//img").get("src") == "https://example.com/dir/i.png"


def test_matches_glob():
    assert matches_glob(["data-*"], "data-foo")
    assert matches_glob("id", "id")
    assert not matches_glob(["data-*"], "id")
    assert not matches_glob(["ID"], "id")
    assert matches_glob(["*"], "anything")
