"""Two-stage content loading for one viewed article."""

import asyncio
import logging
from enum import Enum
from typing import Optional, Protocol

from .extraction.blocks import extract_blocks
from .extraction.models import (
    DEFAULT_LIMITS,
    ContentBlock,
    ExtractionInput,
    ExtractionLimits,
    FeedItem,
)
from .fetching.content import ContentExtractor, LocatedContent, html_to_text
from .fetching.fetcher import FetchResult, is_web_url

logger = logging.getLogger(__name__)


class ExtractionState(Enum):
    IDLE = "idle"
    PARSING_FEED_CONTENT = "parsing_feed_content"
    HAS_BLOCKS = "has_blocks"
    NEEDS_FULL_FETCH = "needs_full_fetch"
    FETCHING = "fetching"
    PARSING_FULL_CONTENT = "parsing_full_content"
    FAILED = "failed"


class Fetcher(Protocol):
    async def fetch(self, url: str) -> FetchResult: ...


class ExtractionSession:
    """Load displayable blocks for a feed item, fetching the page only when needed.

    Parsing runs on a worker thread; the fetch is the only I/O. After
    ``cancel()`` the session's attributes are never touched again.
    """

    def __init__(
        self,
        item: FeedItem,
        fetcher: Fetcher,
        limits: ExtractionLimits = DEFAULT_LIMITS,
    ):
        self.item = item
        self.fetcher = fetcher
        self.limits = limits

        self.state = ExtractionState.IDLE
        self.blocks: tuple[ContentBlock, ...] = ()
        self.is_loading_full_content = False
        self.load_failed = False
        self.full_content_html: Optional[str] = None
        self.full_content_text: Optional[str] = None
        self.last_fetch: Optional[FetchResult] = None

        self._cancelled = False
        self._task: Optional[asyncio.Task] = None
        self._description_text: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def description_text(self) -> str:
        if self._description_text is None:
            self._description_text = html_to_text(self.item.description)
        return self._description_text

    @property
    def fallback_text(self) -> str:
        """Plain text to show when no blocks could be extracted."""
        return self.full_content_text or self.description_text

    @property
    def can_load_full_content(self) -> bool:
        """Whether a manual "load full article" action makes sense now."""
        return (
            not self.is_loading_full_content
            and bool(self.blocks)
            and self.full_content_html is None
            and is_web_url(self.item.link)
        )

    def start(self) -> asyncio.Task:
        """Schedule ``load()`` on the running loop and return its task."""
        if self._task is None or self._task.done():
            self._task = asyncio.ensure_future(self.load())
        return self._task

    def cancel(self) -> None:
        """Abort any in-flight work; no state changes happen afterwards."""
        self._cancelled = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    async def load(self) -> tuple[ContentBlock, ...]:
        """Run the full state machine and return the blocks to display."""
        html = self.item.content_html
        if html and html.strip():
            self._set_state(ExtractionState.PARSING_FEED_CONTENT)
            request = ExtractionInput(html, self.item.title, self.item.link)
            blocks = await asyncio.to_thread(extract_blocks, request, self.limits)
            if self._cancelled:
                return ()
            if blocks:
                self.blocks = blocks
                self._set_state(ExtractionState.HAS_BLOCKS)
                return self.blocks
            logger.debug(f"Feed content for {self.item.link} produced no blocks")

        await self.load_full_content()
        return self.blocks

    async def load_full_content(self) -> None:
        """Fetch the item's page and extract blocks from its main content."""
        if self._cancelled:
            return

        link = self.item.link.strip()
        if not is_web_url(link):
            self._fail_unless_fallback()
            return

        self._set_state(ExtractionState.NEEDS_FULL_FETCH)
        self.is_loading_full_content = True
        self.load_failed = False
        try:
            await self._fetch_and_parse(link)
        finally:
            if not self._cancelled:
                self.is_loading_full_content = False

    async def _fetch_and_parse(self, link: str) -> None:
        self._set_state(ExtractionState.FETCHING)
        result = await self.fetcher.fetch(link)
        if self._cancelled:
            return
        self.last_fetch = result

        if not result.ok:
            logger.info(f"[{result.status.value}] {link[:60]}: {result.error}")
            self._fail_unless_fallback()
            return

        self._set_state(ExtractionState.PARSING_FULL_CONTENT)
        located, blocks = await asyncio.to_thread(self._parse_page, result.content)
        if self._cancelled:
            return

        if located.found:
            self.full_content_html = located.html
            self.full_content_text = located.text
        if blocks:
            self.blocks = blocks
            self._set_state(ExtractionState.HAS_BLOCKS)
        elif self.blocks:
            self._set_state(ExtractionState.HAS_BLOCKS)
        else:
            self._fail_unless_fallback()

    def _parse_page(self, page_html: str) -> tuple[LocatedContent, tuple[ContentBlock, ...]]:
        try:
            located = ContentExtractor(self.limits).extract(page_html)
        except Exception as e:
            logger.warning(f"Could not locate main content: {e}")
            return LocatedContent(), ()
        if not located.found:
            return located, ()
        request = ExtractionInput(located.html, self.item.title, self.item.link)
        return located, extract_blocks(request, self.limits)

    def _fail_unless_fallback(self) -> None:
        if self.blocks:
            self._set_state(ExtractionState.HAS_BLOCKS)
            return
        self._set_state(ExtractionState.FAILED)
        if not self.fallback_text:
            self.load_failed = True

    def _set_state(self, state: ExtractionState) -> None:
        logger.debug(f"{self.item.link[:60]}: {self.state.value} -> {state.value}")
        self.state = state
