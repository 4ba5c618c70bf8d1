"""Async article page fetcher."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from urllib.parse import urlparse

import aiohttp

from ..extraction.models import FetchStatus

logger = logging.getLogger(__name__)

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/605.1.15 (KHTML, like Gecko)"
)


@dataclass
class FetchResult:
    """Result of a fetch operation."""

    status: FetchStatus
    content: str | None = None
    error: str | None = None
    content_type: str | None = None
    fetched_at: datetime = field(default_factory=datetime.now)

    @property
    def ok(self) -> bool:
        return self.status == FetchStatus.SUCCESS and self.content is not None


def is_web_url(url: str) -> bool:
    """True for absolute http(s) URLs with a host."""
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


class ArticleFetcher:
    """Download the HTML page behind a feed item's link."""

    SKIP_EXTENSIONS = {
        ".jpg", ".jpeg", ".png", ".gif", ".webp", ".mp4", ".mp3", ".wav", ".pdf",
    }

    def __init__(
        self,
        timeout_seconds: float = 10,
        user_agent: str = BROWSER_USER_AGENT,
        max_content_length: int = 1_000_000,
    ):
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self.user_agent = user_agent
        self.max_content_length = max_content_length

    def should_skip(self, url: str) -> bool:
        """Check if URL points at media rather than a page."""
        path = urlparse(url).path.lower()
        return any(path.endswith(ext) for ext in self.SKIP_EXTENSIONS)

    async def fetch(self, url: str) -> FetchResult:
        """GET ``url`` once. Cancellation propagates; other failures become a status."""
        if not is_web_url(url):
            return FetchResult(status=FetchStatus.SKIPPED, error="Not an http(s) URL")

        if self.should_skip(url):
            return FetchResult(
                status=FetchStatus.SKIPPED, error="Non-HTML content type (media file)"
            )

        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                headers = {"User-Agent": self.user_agent}
                async with session.get(
                    url, headers=headers, allow_redirects=True
                ) as response:
                    if response.status >= 400:
                        return FetchResult(
                            status=FetchStatus.FAILED, error=f"HTTP {response.status}"
                        )

                    content_type = response.headers.get("content-type", "")
                    data = await response.read()

        except asyncio.TimeoutError:
            return FetchResult(status=FetchStatus.TIMEOUT, error="Request timed out")
        except aiohttp.ClientError as e:
            return FetchResult(status=FetchStatus.FAILED, error=str(e))

        try:
            content = data.decode("utf-8")
        except UnicodeDecodeError as e:
            return FetchResult(
                status=FetchStatus.FAILED,
                error=f"Response is not valid UTF-8: {e.reason}",
                content_type=content_type,
            )

        if len(content) > self.max_content_length:
            content = content[: self.max_content_length]

        logger.debug(f"Fetched {len(data)} bytes from {url}")
        return FetchResult(
            status=FetchStatus.SUCCESS,
            content=content,
            content_type=content_type,
        )
