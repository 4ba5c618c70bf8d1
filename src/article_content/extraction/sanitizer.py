"""Strip non-content markup and normalize break-separated feed HTML."""

import logging

from bs4 import BeautifulSoup, NavigableString, Tag

logger = logging.getLogger(__name__)

_COMMON_JUNK = [
    "script",
    "style",
    "nav",
    "footer",
    "form",
    "button",
    "input",
    "select",
    "textarea",
    "svg",
    "iframe",
    "object",
    "embed",
    "applet",
    "template",
    "noscript",
    "[role=navigation]",
    "[role=banner]",
    "[role=complementary]",
    "[aria-hidden=true]",
    ".ad",
    ".advertisement",
    ".social-share",
    ".related-posts",
    ".newsletter-signup",
    ".comments",
    ".breadcrumb",
    ".pagination",
    ".dropdown",
    ".dropdown-menu",
    ".flash",
    ".sr-only",
]

FRAGMENT_JUNK_SELECTORS = ", ".join(_COMMON_JUNK + [".linkback"])
PAGE_JUNK_SELECTORS = ", ".join(_COMMON_JUNK + ["header", "aside", ".sidebar"])

# Elements that start a new block; anything else at the top level is inline.
BLOCK_TAGS = {
    "address", "article", "aside", "blockquote", "details", "dialog", "div",
    "dl", "fieldset", "figure", "footer", "form", "h1", "h2", "h3", "h4",
    "h5", "h6", "header", "hr", "li", "main", "nav", "ol", "p", "pre",
    "section", "table", "ul",
}

PARAGRAPH_CONTAINERS = {"div", "section", "article", "main", "aside", "header", "body"}


def strip_junk(root: Tag, selectors: str) -> int:
    """Remove every element matching ``selectors``. Returns the number removed."""
    removed = 0
    for element in root.select(selectors):
        # Descendants of an element removed earlier in this loop are already gone
        if element.decomposed:
            continue
        element.decompose()
        removed += 1
    return removed


def _is_break(node) -> bool:
    return isinstance(node, Tag) and node.name == "br"


def _is_blank_text(node) -> bool:
    return isinstance(node, NavigableString) and not node.strip()


def _next_break(node):
    """Return the next sibling ``<br>`` if only whitespace separates it from ``node``."""
    sibling = node.next_sibling
    while sibling is not None and _is_blank_text(sibling):
        sibling = sibling.next_sibling
    return sibling if _is_break(sibling) else None


def has_break_pairs(element: Tag) -> bool:
    return any(
        _is_break(child) and _next_break(child) is not None for child in element.children
    )


def paragraphize(soup: BeautifulSoup, element: Tag, split_breaks: bool = True) -> None:
    """Group loose inline children of ``element`` into ``<p>`` elements.

    With ``split_breaks``, a pair of adjacent ``<br>`` tags ends the current
    paragraph and both are removed; otherwise breaks stay inline. Block-level
    children end it too and are left in place.
    """
    children = list(element.children)
    run: list = []

    def flush():
        if any(not _is_blank_text(node) for node in run):
            paragraph = soup.new_tag("p")
            run[0].insert_before(paragraph)
            for node in run:
                paragraph.append(node.extract())
        run.clear()

    skip = None
    for child in children:
        if child is skip:
            child.extract()
            skip = None
            continue
        if split_breaks and _is_break(child):
            pair = _next_break(child)
            if pair is not None:
                flush()
                child.extract()
                skip = pair
                continue
        if isinstance(child, Tag) and child.name in BLOCK_TAGS:
            flush()
            continue
        if skip is not None and _is_blank_text(child):
            child.extract()
            continue
        run.append(child)
    flush()


class Sanitizer:
    """Clean a parsed tree before block classification."""

    def clean_fragment(self, soup: BeautifulSoup, root: Tag) -> None:
        removed = strip_junk(root, FRAGMENT_JUNK_SELECTORS)
        if removed:
            logger.debug(f"Removed {removed} non-content elements from fragment")
        self.normalize(soup, root)

    def clean_page(self, root: Tag) -> None:
        removed = strip_junk(root, PAGE_JUNK_SELECTORS)
        if removed:
            logger.debug(f"Removed {removed} non-content elements from page")

    def normalize(self, soup: BeautifulSoup, root: Tag) -> None:
        """Give break-separated feed content paragraph structure.

        Break pairs are only rewritten when the fragment has no ``<p>`` of its
        own. Loose top-level inline content is always wrapped.
        """
        break_separated = root.find("p") is None
        if break_separated:
            for container in root.find_all(sorted(PARAGRAPH_CONTAINERS)):
                if has_break_pairs(container):
                    paragraphize(soup, container)
        paragraphize(soup, root, split_breaks=break_separated)
