from __future__ import annotations

import pytest

from doc_scout.crawler.link_extractor import (
    Anchor,
    VariantAnchor,
    extract_anchors,
    filter_links,
    infer_variant,
    resolve_anchors,
)

ANCHOR = "https://x.test/docs/en/v2/intro"

VARIANT_HTML = """
<html><body>
  <a href="/docs/fr/v2/intro">Intro (fr)</a>
  <a href="/docs/en/v1/intro">Intro (v1)</a>
  <a href="/docs/en/v2/api/foo">foo</a>
</body></html>
"""


def test_single_variant_keeps_matching_locale_and_version():
    links = filter_links(VARIANT_HTML, ANCHOR, ANCHOR, "widgets", single_variant=True)
    assert links == ["https://x.test/docs/en/v2/api/foo"]


def test_multi_variant_keeps_other_locales_and_versions():
    links = filter_links(VARIANT_HTML, ANCHOR, ANCHOR, "widgets", single_variant=False)
    assert links == [
        "https://x.test/docs/fr/v2/intro",
        "https://x.test/docs/en/v1/intro",
        "https://x.test/docs/en/v2/api/foo",
    ]


def test_cross_origin_and_non_http_links_are_dropped():
    html = """
    <a href="https://other.test/docs/api">api elsewhere</a>
    <a href="mailto:team@x.test">docs mail</a>
    <a href="javascript:void(0)">guide</a>
    <a href="/guide/start">Start</a>
    """
    assert filter_links(html, ANCHOR, ANCHOR, "widgets", single_variant=False) == [
        "https://x.test/guide/start"
    ]


def test_relevance_by_anchor_text_and_library_name():
    html = """
    <a href="/blog/post">Read the Tutorial</a>
    <a href="/widgets/core">core</a>
    <a href="/pricing">Pricing</a>
    """
    assert filter_links(html, "https://x.test/", "https://x.test/", "Widgets") == [
        "https://x.test/blog/post",
        "https://x.test/widgets/core",
    ]


def test_links_resolve_relative_to_page_and_deduplicate():
    html = """
    <a href="api/b">b</a>
    <a href="./api/a">a</a>
    <a href="api/b#section">b again</a>
    <a href="http://[broken">api broken</a>
    """
    page_url = "https://x.test/docs/guide/"
    assert filter_links(html, page_url, "https://x.test/docs/", "lib") == [
        "https://x.test/docs/guide/api/b",
        "https://x.test/docs/guide/api/a",
    ]


def test_filter_is_deterministic():
    first = filter_links(VARIANT_HTML, ANCHOR, ANCHOR, "widgets", single_variant=False)
    for _ in range(5):
        assert filter_links(VARIANT_HTML, ANCHOR, ANCHOR, "widgets", single_variant=False) == first


def test_anchor_without_variant_admits_everything():
    html = '<a href="/docs/fr/v3/api">x</a>'
    assert filter_links(html, "https://x.test/docs/", "https://x.test/docs/", "lib") == [
        "https://x.test/docs/fr/v3/api"
    ]


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://x.test/docs/en/v2/intro", VariantAnchor("en", "v2")),
        ("https://x.test/de/3.1/guide", VariantAnchor("de", "3.1")),
        ("https://x.test/docs/2.x/", VariantAnchor(None, "2.x")),
        ("https://x.test/docs/intro", VariantAnchor(None, None)),
        ("https://x.test/docs/errors/404", VariantAnchor(None, None)),
        ("https://x.test/docs/v3.x/intro", VariantAnchor(None, "v3.x")),
    ],
)
def test_infer_variant(url, expected):
    assert infer_variant(url) == expected


def test_extract_anchors_reads_text_and_skips_empty_href():
    anchors = extract_anchors('<a href=" /a ">First <b>link</b></a><a href="">empty</a><a>none</a>')
    assert [(a.href, a.text) for a in anchors] == [("/a", "First link")]


def test_numeric_segments_are_not_versions():
    html = '<a href="/docs/en/v2/errors/404">Not found</a><a href="/docs/en/3.0/intro">old</a>'
    assert filter_links(html, ANCHOR, ANCHOR, "widgets") == ["https://x.test/docs/en/v2/errors/404"]


def test_resolve_anchors_keeps_duplicates_and_drops_broken():
    html = '<a href="api/b">b</a><a href="api/b">b</a><a href="http://[broken">x</a>'
    assert resolve_anchors(html, "https://x.test/docs/") == [
        Anchor("https://x.test/docs/api/b", "b"),
        Anchor("https://x.test/docs/api/b", "b"),
    ]


def test_stored_anchors_are_filtered_without_html():
    anchors = [Anchor("https://x.test/docs/fr/v2/intro", "intro"), Anchor("https://x.test/docs/en/v2/api", "api")]
    assert filter_links("", ANCHOR, ANCHOR, "widgets", anchors=anchors) == ["https://x.test/docs/en/v2/api"]
