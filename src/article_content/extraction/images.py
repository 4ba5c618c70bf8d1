"""Resolve image sources and filter out tracking pixels."""

from typing import Optional
from urllib.parse import urljoin, urlparse

from bs4 import Tag

from .models import ImageBlock

# Substrings that mark an image URL as a tracker. Matched case-sensitively.
TRACKER_MARKERS = ("1x1", "pixel", "tracking")
UNKNOWN_DIMENSION = 999
MAX_TRACKER_SIZE = 2


def parse_dimension(value) -> int:
    """Integer width/height attribute, or UNKNOWN_DIMENSION if absent or not a number."""
    if value is None:
        return UNKNOWN_DIMENSION
    try:
        return int(str(value).strip())
    except ValueError:
        return UNKNOWN_DIMENSION


def is_tracker(src: str, width: int, height: int) -> bool:
    if width <= MAX_TRACKER_SIZE and height <= MAX_TRACKER_SIZE:
        return True
    return any(marker in src for marker in TRACKER_MARKERS)


class ImageResolver:
    """Turn ``<img>`` elements into image blocks with absolute URLs."""

    def __init__(self, base_link: str = ""):
        self.base_link = base_link

    def absolutize(self, src: str) -> Optional[str]:
        """Absolute form of ``src``, or None when the base link can't be joined."""
        if src.startswith("//"):
            return "https:" + src
        if src.startswith("/") and self.base_link:
            # A root-relative path replaces the base link's whole path
            try:
                return urljoin(self.base_link, src)
            except ValueError:
                return None
        return src

    def resolve(self, img: Tag, caption: Optional[str] = None) -> Optional[ImageBlock]:
        src = (img.get("src") or "").strip()
        if not src:
            return None

        src = self.absolutize(src)
        if src is None:
            return None
        width = parse_dimension(img.get("width"))
        height = parse_dimension(img.get("height"))
        if is_tracker(src, width, height):
            return None

        try:
            parsed = urlparse(src)
        except ValueError:
            return None
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            return None

        # Alt text is never used as a caption
        caption = caption.strip() if caption else None
        return ImageBlock(url=src, caption=caption or None)
