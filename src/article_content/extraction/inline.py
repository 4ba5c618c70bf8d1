"""Compose styled inline text from an element's children."""

import re
from typing import Optional
from urllib.parse import urljoin, urlparse

from bs4 import NavigableString, Tag
from bs4.element import PreformattedString

from .models import DEFAULT_LIMITS, ExtractionLimits, Style, StyledText

WHITESPACE = re.compile(r"\s+")

TAG_STYLES = {
    "strong": Style.BOLD,
    "b": Style.BOLD,
    "em": Style.ITALIC,
    "i": Style.ITALIC,
    "code": Style.CODE,
    "del": Style.STRIKETHROUGH,
    "s": Style.STRIKETHROUGH,
    "mark": Style.HIGHLIGHT,
    "abbr": Style.UNDERLINE,
}

LINK_SCHEMES = {"http", "https", "mailto"}

# Media, script and interactive elements never contribute text.
SKIP_TAGS = {
    "script", "style", "nav", "footer", "form", "button", "input", "select",
    "textarea", "svg", "iframe", "object", "embed", "applet", "template",
    "noscript", "canvas", "video", "audio",
}


def collapse_whitespace(text: str) -> str:
    return WHITESPACE.sub(" ", text)


def is_text_node(node) -> bool:
    """True for character data; comments, doctypes and CDATA don't count."""
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def element_text(element: Tag) -> str:
    """Whitespace-normalized text of an element and all its descendants."""
    return collapse_whitespace(element.get_text()).strip()


def own_text(element: Tag) -> str:
    """Text of the element's direct text nodes only."""
    parts = [str(node) for node in element.children if is_text_node(node)]
    return collapse_whitespace("".join(parts)).strip()


def resolve_link(href: Optional[str], base_link: str) -> Optional[str]:
    """Absolute URL for ``href``, or None if it can't be followed safely."""
    if not href or not href.strip():
        return None
    try:
        url = urljoin(base_link, href.strip())
        parsed = urlparse(url)
    except ValueError:
        return None
    if parsed.scheme not in LINK_SCHEMES:
        return None
    if parsed.scheme != "mailto" and not parsed.netloc:
        return None
    return url


class InlineTextBuilder:
    """Build a StyledText from a content-bearing element."""

    def __init__(self, base_link: str = "", limits: ExtractionLimits = DEFAULT_LIMITS):
        self.base_link = base_link
        self.limits = limits

    def build(self, element: Tag, depth: int = 0) -> StyledText:
        result = StyledText()
        if depth > self.limits.max_inline_depth:
            return result

        for i, node in enumerate(element.children):
            # Cap fan-out so one huge element can't stall extraction
            if i >= self.limits.max_inline_nodes:
                break
            result = result + self.node_text(node, depth)
        return result

    def node_text(self, node, depth: int = 0) -> StyledText:
        """Styled text contributed by a single child node."""
        if is_text_node(node):
            return StyledText.from_string(collapse_whitespace(str(node)))
        if not isinstance(node, Tag) or node.name in SKIP_TAGS:
            return StyledText()
        if node.name == "br":
            return StyledText.from_string("\n")
        return self.style_child(node, depth)

    def style_child(self, child: Tag, depth: int = 0) -> StyledText:
        """Build ``child`` and apply the style its tag implies."""
        text = self.build(child, depth + 1)
        tag = child.name
        if tag == "a":
            url = resolve_link(child.get("href"), self.base_link)
            if url:
                return text.with_style(Style.LINK, link=url)
            return text
        style = TAG_STYLES.get(tag)
        if style is not None:
            return text.with_style(style)
        return text
