"""Locate the main article content in a full HTML page."""

import logging
import re
from dataclasses import dataclass

from bs4 import BeautifulSoup, Tag

from ..extraction.models import DEFAULT_LIMITS, ExtractionLimits
from ..extraction.sanitizer import FRAGMENT_JUNK_SELECTORS, Sanitizer, strip_junk

logger = logging.getLogger(__name__)

# Evaluated in priority order; the first container with enough text wins.
CONTENT_SELECTORS = [
    "article",
    "main",
    "[class*=post-content]",
    "[class*=entry-content]",
    "[class*=article-body]",
    "[class*=article-content]",
    "[class*=story-body]",
    "[class*=post-body]",
    "[role=main]",
]


@dataclass
class LocatedContent:
    """Inner HTML and plain text of the located content region."""

    html: str = ""
    text: str = ""

    @property
    def found(self) -> bool:
        return bool(self.text)


def _normalized_text(element: Tag) -> str:
    raw = element.get_text(separator=" ", strip=True)
    return re.sub(r"\s+", " ", raw)


class ContentExtractor:
    """Extract the main content region from a downloaded page."""

    def __init__(self, limits: ExtractionLimits = DEFAULT_LIMITS):
        self.limits = limits
        self.sanitizer = Sanitizer()

    def extract(self, html: str) -> LocatedContent:
        """Find the article body; empty result means nothing usable was found."""
        if len(html) > self.limits.max_page_length:
            logger.debug(f"Truncating page from {len(html)} characters")
            html = html[: self.limits.max_page_length]

        soup = BeautifulSoup(html, "html.parser")
        self.sanitizer.clean_page(soup)

        for selector in CONTENT_SELECTORS:
            for candidate in soup.select(selector):
                text = _normalized_text(candidate)
                if len(text) > self.limits.min_content_length:
                    logger.debug(f"Main content found with selector {selector!r}")
                    return LocatedContent(html=candidate.decode_contents(), text=text)

        body = soup.body or soup
        text = _normalized_text(body)
        if len(text) > self.limits.min_content_length:
            logger.debug("No content container matched, using page body")
            return LocatedContent(html=body.decode_contents(), text=text)

        return LocatedContent()


def extract_full_page(html: str, limits: ExtractionLimits = DEFAULT_LIMITS) -> tuple[str, str]:
    """Return ``(content_html, content_text)`` for a page. Never raises."""
    if not html:
        return "", ""
    try:
        located = ContentExtractor(limits).extract(html)
    except Exception as e:
        logger.warning(f"Could not locate main content: {e}")
        return "", ""
    return located.html, located.text


def html_to_text(html: str) -> str:
    """Plain text of an HTML snippet such as a feed description."""
    if not html or not html.strip():
        return ""
    soup = BeautifulSoup(html, "html.parser")
    strip_junk(soup, FRAGMENT_JUNK_SELECTORS)
    return _normalized_text(soup)
