"""Tests for image URL resolution and tracker filtering."""

from bs4 import BeautifulSoup

from article_content.extraction.images import ImageResolver, is_tracker, parse_dimension

BASE = "https://example.com/posts/1"


def _img(html):
    return BeautifulSoup(html, "html.parser").find("img")


def _resolve(html, caption=None, base_link=BASE):
    return ImageResolver(base_link).resolve(_img(html), caption)


def test_root_relative_source_uses_base_origin():
    image = _resolve('<img src="/logo.png">')
    assert image.url == "https://example.com/logo.png"


def test_protocol_relative_source_gets_https():
    image = _resolve('<img src="//cdn.example.com/photo.jpg">')
    assert image.url == "https://cdn.example.com/photo.jpg"


def test_absolute_source_is_kept():
    image = _resolve('<img src="http://example.org/a.png" width="640" height="480">')
    assert image.url == "http://example.org/a.png"


def test_missing_or_empty_source():
    assert _resolve("<img alt='nothing'>") is None
    assert _resolve('<img src="  ">') is None


def test_tiny_images_are_trackers():
    assert _resolve('<img src="//cdn.example.com/t.gif" width="1" height="1">') is None
    assert _resolve('<img src="https://example.com/a.gif" width="2" height="0">') is None


def test_one_small_dimension_is_not_a_tracker():
    image = _resolve('<img src="https://example.com/a.gif" width="1">')
    assert image is not None


def test_tracker_url_markers_are_case_sensitive():
    assert _resolve('<img src="https://example.com/pixel.gif">') is None
    assert _resolve('<img src="https://example.com/1x1.png">') is None
    assert _resolve('<img src="https://stats.example.com/tracking?id=3">') is None
    assert _resolve('<img src="https://example.com/PIXEL.gif">') is not None


def test_document_relative_source_is_rejected():
    assert _resolve('<img src="images/a.png">') is None


def test_root_relative_without_base_is_rejected():
    assert _resolve('<img src="/logo.png">', base_link="") is None


def test_caption_comes_only_from_argument():
    assert _resolve('<img src="https://example.com/a.png" alt="Alt text">').caption is None
    assert _resolve('<img src="https://example.com/a.png">', "  A cat  ").caption == "A cat"
    assert _resolve('<img src="https://example.com/a.png">', "   ").caption is None


def test_parse_dimension():
    assert parse_dimension("12") == 12
    assert parse_dimension(" 3 ") == 3
    assert parse_dimension("1px") == 999
    assert parse_dimension(None) == 999


def test_is_tracker():
    assert is_tracker("https://example.com/a.png", 1, 2)
    assert not is_tracker("https://example.com/a.png", 999, 999)


def test_unparseable_base_link_rejects_root_relative_source():
    assert ImageResolver("http://[bad/x").absolutize("/a.png") is None
    assert _resolve('<img src="/a.png">', base_link="http://[bad/x") is None


def test_unparseable_base_link_keeps_absolute_source():
    image = _resolve('<img src="https://example.com/a.png">', base_link="http://[bad/x")
    assert image.url == "https://example.com/a.png"
