"""Tests for junk removal and paragraph normalization."""

from bs4 import BeautifulSoup

from article_content.extraction.sanitizer import (
    FRAGMENT_JUNK_SELECTORS,
    PAGE_JUNK_SELECTORS,
    Sanitizer,
    strip_junk,
)


def _soup(html):
    return BeautifulSoup(html, "html.parser")


def test_strip_junk_removes_scripts_and_boilerplate():
    soup = _soup(
        '<p>Keep</p><script>alert(1)</script><div class="ad">Buy</div>'
        '<span aria-hidden="true">icon</span><div class="sr-only">skip</div>'
    )
    removed = strip_junk(soup, FRAGMENT_JUNK_SELECTORS)
    assert removed == 4
    assert soup.get_text() == "Keep"


def test_strip_junk_skips_descendants_of_removed_elements():
    soup = _soup('<div class="comments"><nav>links</nav><p>comment</p></div><p>Body</p>')
    assert strip_junk(soup, FRAGMENT_JUNK_SELECTORS) == 1
    assert soup.get_text() == "Body"


def test_strip_junk_without_matches_is_a_no_op():
    soup = _soup("<p>Plain</p>")
    assert strip_junk(soup, FRAGMENT_JUNK_SELECTORS) == 0
    assert str(soup) == "<p>Plain</p>"


def test_page_selectors_also_remove_sidebars_and_headers():
    html = '<header>Site</header><div class="sidebar">Side</div><aside>More</aside><p>Body</p>'
    fragment = _soup(html)
    strip_junk(fragment, FRAGMENT_JUNK_SELECTORS)
    assert "Side" in fragment.get_text()

    page = _soup(html)
    strip_junk(page, PAGE_JUNK_SELECTORS)
    assert page.get_text() == "Body"


def test_break_pairs_become_paragraphs():
    soup = _soup("First para<br><br>Second <b>bold</b><br/><br/>Third")
    Sanitizer().normalize(soup, soup)
    paragraphs = soup.find_all("p", recursive=False)
    assert [p.get_text() for p in paragraphs] == ["First para", "Second bold", "Third"]
    assert soup.find("br") is None


def test_single_break_stays_inside_paragraph():
    soup = _soup("one<br>two")
    Sanitizer().normalize(soup, soup)
    paragraph = soup.find("p")
    assert paragraph is not None
    assert paragraph.find("br") is not None


def test_loose_text_next_to_paragraphs_is_wrapped():
    soup = _soup("<p>One</p>loose <i>text</i>")
    Sanitizer().normalize(soup, soup)
    assert [p.get_text() for p in soup.find_all("p")] == ["One", "loose text"]


def test_break_pairs_inside_container_without_paragraphs():
    soup = _soup("<div>a<br><br>b</div>")
    Sanitizer().normalize(soup, soup)
    div = soup.find("div")
    assert [p.get_text() for p in div.find_all("p")] == ["a", "b"]


def test_clean_fragment_removes_then_normalizes():
    soup = _soup("<nav>menu</nav>Hello<br><br>World")
    Sanitizer().clean_fragment(soup, soup)
    assert [p.get_text() for p in soup.find_all("p")] == ["Hello", "World"]


def test_break_pairs_are_kept_when_paragraphs_exist():
    soup = _soup("<p>One</p>two<br><br>three")
    Sanitizer().normalize(soup, soup)
    paragraphs = soup.find_all("p")
    assert [p.get_text() for p in paragraphs] == ["One", "twothree"]
    assert len(paragraphs[1].find_all("br")) == 2
