"""Data models for extracted article content."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

_LEADING_WS = re.compile(r"^\s+")
_TRAILING_WS = re.compile(r"\s+$")


class FetchStatus(Enum):
    SUCCESS = "success"
    FAILED = "failed"
    TIMEOUT = "timeout"
    SKIPPED = "skipped"


class Style(Enum):
    BOLD = "bold"
    ITALIC = "italic"
    CODE = "code"
    STRIKETHROUGH = "strikethrough"
    UNDERLINE = "underline"
    HIGHLIGHT = "highlight"
    LINK = "link"


@dataclass(frozen=True)
class StyledRun:
    """A contiguous span of text sharing one style combination."""

    text: str
    styles: frozenset[Style] = frozenset()
    link: Optional[str] = None

    def __post_init__(self):
        if not self.text:
            raise ValueError("StyledRun text must not be empty")

    def same_style(self, other: "StyledRun") -> bool:
        return self.styles == other.styles and self.link == other.link


@dataclass(frozen=True)
class StyledText:
    """Immutable rich text built from styled runs."""

    runs: tuple[StyledRun, ...] = ()

    @classmethod
    def from_string(cls, text: str) -> "StyledText":
        if not text:
            return cls()
        return cls((StyledRun(text),))

    @classmethod
    def join(cls, separator: str, parts: list["StyledText"]) -> "StyledText":
        result = cls()
        for i, part in enumerate(parts):
            if i:
                result = result + cls.from_string(separator)
            result = result + part
        return result

    @property
    def plain(self) -> str:
        return "".join(run.text for run in self.runs)

    @property
    def is_blank(self) -> bool:
        return not self.plain.strip()

    def __add__(self, other: "StyledText") -> "StyledText":
        if not other.runs:
            return self
        if not self.runs:
            return other
        head, tail = self.runs[-1], other.runs[0]
        if head.same_style(tail):
            merged = StyledRun(head.text + tail.text, head.styles, head.link)
            return StyledText(self.runs[:-1] + (merged,) + other.runs[1:])
        return StyledText(self.runs + other.runs)

    def with_style(self, style: Style, link: Optional[str] = None) -> "StyledText":
        """Return a copy with ``style`` added to every run."""
        return StyledText(
            tuple(
                StyledRun(
                    run.text,
                    run.styles | {style},
                    link if style is Style.LINK else run.link,
                )
                for run in self.runs
            )
        )

    def strip(self) -> "StyledText":
        """Trim leading and trailing whitespace, dropping runs that become empty."""
        runs = list(self.runs)
        while runs:
            text = _LEADING_WS.sub("", runs[0].text)
            if text:
                runs[0] = StyledRun(text, runs[0].styles, runs[0].link)
                break
            runs.pop(0)
        while runs:
            text = _TRAILING_WS.sub("", runs[-1].text)
            if text:
                runs[-1] = StyledRun(text, runs[-1].styles, runs[-1].link)
                break
            runs.pop()
        return StyledText(tuple(runs))


class BlockKind(Enum):
    TEXT = "text"
    HEADING = "heading"
    BLOCKQUOTE = "blockquote"
    IMAGE = "image"
    CODE = "code"
    DIVIDER = "divider"
    LIST = "list"
    TABLE = "table"
    DEFINITION_LIST = "definition_list"
    DETAILS = "details"


@dataclass(frozen=True)
class TextBlock:
    text: StyledText
    kind = BlockKind.TEXT


@dataclass(frozen=True)
class HeadingBlock:
    text: StyledText
    level: int
    kind = BlockKind.HEADING

    def __post_init__(self):
        if not 1 <= self.level <= 6:
            raise ValueError(f"Heading level out of range: {self.level}")


@dataclass(frozen=True)
class BlockquoteBlock:
    text: StyledText
    kind = BlockKind.BLOCKQUOTE


@dataclass(frozen=True)
class ImageBlock:
    url: str
    caption: Optional[str] = None
    kind = BlockKind.IMAGE


@dataclass(frozen=True)
class CodeBlock:
    code: str
    truncated: bool = False
    kind = BlockKind.CODE


@dataclass(frozen=True)
class DividerBlock:
    kind = BlockKind.DIVIDER


@dataclass(frozen=True)
class ListBlock:
    items: tuple[StyledText, ...]
    ordered: bool = False
    kind = BlockKind.LIST


@dataclass(frozen=True)
class TableBlock:
    rows: tuple[tuple[StyledText, ...], ...]
    kind = BlockKind.TABLE


@dataclass(frozen=True)
class DefinitionListBlock:
    pairs: tuple[tuple[StyledText, StyledText], ...]
    kind = BlockKind.DEFINITION_LIST


@dataclass(frozen=True)
class DetailsBlock:
    summary: str
    content: tuple["ContentBlock", ...]
    kind = BlockKind.DETAILS


ContentBlock = Union[
    TextBlock,
    HeadingBlock,
    BlockquoteBlock,
    ImageBlock,
    CodeBlock,
    DividerBlock,
    ListBlock,
    TableBlock,
    DefinitionListBlock,
    DetailsBlock,
]


@dataclass(frozen=True)
class ExtractionLimits:
    """Hard bounds applied while parsing untrusted HTML."""

    max_fragment_length: int = 500_000
    max_page_length: int = 1_000_000
    max_blocks: int = 100
    max_depth: int = 20
    max_code_length: int = 5000
    max_inline_nodes: int = 500
    max_inline_depth: int = 50
    min_content_length: int = 100


DEFAULT_LIMITS = ExtractionLimits()


@dataclass
class ExtractionInput:
    """Raw HTML plus the context needed to resolve and deduplicate it."""

    html: str
    article_title: str = ""
    base_link: str = ""


@dataclass
class FeedItem:
    """The parts of a feed entry needed to display its content."""

    title: str
    link: str
    description: str = ""
    content_html: Optional[str] = None
