"""Classify HTML elements into content blocks."""

import html as html_std
import logging
import re

from bs4 import BeautifulSoup, Tag

from .images import ImageResolver
from .inline import (
    SKIP_TAGS,
    InlineTextBuilder,
    collapse_whitespace,
    element_text,
    is_text_node,
    own_text,
)
from .models import (
    DEFAULT_LIMITS,
    BlockquoteBlock,
    CodeBlock,
    ContentBlock,
    DefinitionListBlock,
    DetailsBlock,
    DividerBlock,
    ExtractionInput,
    ExtractionLimits,
    HeadingBlock,
    ListBlock,
    StyledText,
    TableBlock,
    TextBlock,
)
from .sanitizer import Sanitizer

logger = logging.getLogger(__name__)

CONTAINER_TAGS = {"div", "section", "article", "main", "aside", "header"}
HEADING_LEVELS = {f"h{level}": level for level in range(1, 7)}
PARAGRAPH_BREAK = "\n\n"
TRUNCATION_MARKER = "\n…"

_BREAK_TAG = re.compile(r"<br\s*/?>", re.IGNORECASE)
_WORD_BREAK_TAG = re.compile(r"<wbr\s*/?>", re.IGNORECASE)
_BLOCK_END_TAG = re.compile(r"</(?:div|p)>", re.IGNORECASE)
_ANY_TAG = re.compile(r"<[^>]+>")


def _indent_width(line: str) -> int:
    return len(line) - len(line.lstrip(" \t"))


def dedent(text: str) -> str:
    """Remove the indentation shared by every non-empty line after the first."""
    lines = text.split("\n")
    non_empty = [line for line in lines if line.strip(" \t")]
    if len(non_empty) <= 1:
        return text

    # The first line usually follows the opening tag directly and has no indent
    min_indent = min(_indent_width(line) for line in non_empty[1:])
    if min_indent == 0:
        return text
    return "\n".join(line[min(min_indent, _indent_width(line)):] for line in lines)


def strip_preformatted(inner_html: str) -> str:
    """Plain text of preformatted markup with its whitespace intact."""
    text = _BREAK_TAG.sub("\n", inner_html)
    text = _BLOCK_END_TAG.sub("\n", text)
    text = _WORD_BREAK_TAG.sub("", text)
    text = _ANY_TAG.sub("", text)
    text = html_std.unescape(text).replace("\xa0", " ")
    return dedent(text)


class BlockClassifier:
    """Recursively walk an element tree, appending content blocks."""

    def __init__(self, base_link: str = "", limits: ExtractionLimits = DEFAULT_LIMITS):
        self.limits = limits
        self.inline = InlineTextBuilder(base_link, limits)
        self.images = ImageResolver(base_link)

    def _append(self, blocks: list[ContentBlock], block: ContentBlock) -> None:
        if len(blocks) < self.limits.max_blocks:
            blocks.append(block)

    def classify(self, element: Tag, blocks: list[ContentBlock], depth: int = 0) -> None:
        if depth >= self.limits.max_depth:
            logger.debug(f"Depth limit reached at <{element.name}>")
            return
        if len(blocks) >= self.limits.max_blocks:
            return

        tag = element.name
        if tag in SKIP_TAGS:
            return

        if tag == "img":
            image = self.images.resolve(element)
            if image:
                self._append(blocks, image)
            return

        if tag == "figure":
            self._classify_figure(element, blocks)
            return

        if tag == "pre":
            self._classify_code(element, blocks)
            return

        if tag in HEADING_LEVELS:
            text = self.inline.build(element).strip()
            if not text.is_blank:
                self._append(blocks, HeadingBlock(text, HEADING_LEVELS[tag]))
            return

        if tag == "blockquote":
            text = self._quote_text(element)
            if not text.is_blank:
                self._append(blocks, BlockquoteBlock(text))
            return

        if tag == "hr":
            self._append(blocks, DividerBlock())
            return

        if tag in ("ul", "ol"):
            self._classify_list(element, blocks)
            return

        if tag == "table":
            self._classify_table(element, blocks)
            return

        if tag == "dl":
            self._classify_definitions(element, blocks)
            return

        if tag == "details":
            self._classify_details(element, blocks, depth)
            return

        if tag in CONTAINER_TAGS and element.find(True, recursive=False) is not None:
            for child in element.find_all(True, recursive=False):
                self.classify(child, blocks, depth + 1)
            text = own_text(element)
            if text:
                self._append(blocks, TextBlock(StyledText.from_string(text)))
            return

        if element.find("img") is not None:
            self._classify_mixed(element, blocks)
            return

        text = self.inline.build(element).strip()
        if text.is_blank:
            return
        if blocks and isinstance(blocks[-1], TextBlock):
            merged = blocks[-1].text + StyledText.from_string(PARAGRAPH_BREAK) + text
            blocks[-1] = TextBlock(merged)
        else:
            self._append(blocks, TextBlock(text))

    def _classify_figure(self, element: Tag, blocks: list[ContentBlock]) -> None:
        img = element.find("img")
        if img is None:
            return
        figcaption = element.find("figcaption")
        caption = element_text(figcaption) if figcaption is not None else None
        image = self.images.resolve(img, caption)
        if image:
            self._append(blocks, image)

    def _classify_code(self, element: Tag, blocks: list[ContentBlock]) -> None:
        code = strip_preformatted(element.decode_contents())
        if not code.strip():
            return
        code = code.strip("\r\n")
        truncated = len(code) > self.limits.max_code_length
        if truncated:
            code = code[: self.limits.max_code_length] + TRUNCATION_MARKER
        self._append(blocks, CodeBlock(code, truncated=truncated))

    def _quote_text(self, element: Tag) -> StyledText:
        """Blockquote text, keeping paragraph breaks between quoted paragraphs."""
        if len(element.find_all("p", recursive=False)) < 2:
            return self.inline.build(element).strip()

        # Each <p> is its own paragraph; runs of other nodes between them form one too
        parts = []
        run = StyledText()
        for i, node in enumerate(element.children):
            if i >= self.limits.max_inline_nodes:
                break
            if isinstance(node, Tag) and node.name == "p":
                parts.extend([run.strip(), self.inline.build(node).strip()])
                run = StyledText()
            else:
                run = run + self.inline.node_text(node)
        parts.append(run.strip())
        return StyledText.join(PARAGRAPH_BREAK, [part for part in parts if not part.is_blank])

    def _classify_list(self, element: Tag, blocks: list[ContentBlock]) -> None:
        items = [self.inline.build(li).strip() for li in element.find_all("li", recursive=False)]
        items = [item for item in items if not item.is_blank]
        if items:
            self._append(blocks, ListBlock(tuple(items), ordered=element.name == "ol"))

    def _classify_table(self, element: Tag, blocks: list[ContentBlock]) -> None:
        rows = []
        for tr in element.find_all("tr"):
            cells = tuple(
                self.inline.build(cell).strip()
                for cell in tr.find_all(["th", "td"], recursive=False)
            )
            # Blank cells inside a row keep their column position
            if any(not cell.is_blank for cell in cells):
                rows.append(cells)
        if rows:
            self._append(blocks, TableBlock(tuple(rows)))

    def _classify_definitions(self, element: Tag, blocks: list[ContentBlock]) -> None:
        pairs = []
        term = None
        for child in element.find_all(["dt", "dd"], recursive=False):
            if child.name == "dt":
                term = self.inline.build(child).strip()
            elif term is not None:
                definition = self.inline.build(child).strip()
                if not term.is_blank:
                    pairs.append((term, definition))
                term = None
        if pairs:
            self._append(blocks, DefinitionListBlock(tuple(pairs)))

    def _classify_details(self, element: Tag, blocks: list[ContentBlock], depth: int) -> None:
        summary_element = element.find("summary")
        summary = element_text(summary_element) if summary_element is not None else ""
        inner: list[ContentBlock] = []
        for child in element.find_all(True, recursive=False):
            if child.name != "summary":
                self.classify(child, inner, depth + 1)
        if inner:
            self._append(blocks, DetailsBlock(summary or "Details", tuple(inner)))

    def _classify_mixed(self, element: Tag, blocks: list[ContentBlock]) -> None:
        """Split inline content around images into alternating text and image blocks."""
        run = StyledText()

        def flush():
            text = run.strip()
            if not text.is_blank:
                self._append(blocks, TextBlock(text))

        for node in element.children:
            if isinstance(node, Tag):
                if node.name == "img":
                    flush()
                    run = StyledText()
                    image = self.images.resolve(node)
                    if image:
                        self._append(blocks, image)
                elif node.name != "br" and node.name not in SKIP_TAGS:
                    run = run + self.inline.style_child(node)
            elif is_text_node(node):
                if node.strip():
                    run = run + StyledText.from_string(collapse_whitespace(str(node)))
                elif not run.is_blank:
                    # Keep the word gap between adjacent inline elements
                    run = run + StyledText.from_string(" ")
        flush()


def remove_title_heading(blocks: list[ContentBlock], article_title: str) -> list[ContentBlock]:
    """Drop the first heading when it repeats the article title."""
    title = article_title.strip().casefold()
    if not title:
        return blocks
    for i, block in enumerate(blocks):
        if isinstance(block, HeadingBlock):
            if block.text.plain.strip().casefold() == title:
                return blocks[:i] + blocks[i + 1 :]
            break
    return blocks


class FragmentExtractor:
    """Turn an HTML fragment into an ordered sequence of content blocks."""

    def __init__(self, base_link: str = "", limits: ExtractionLimits = DEFAULT_LIMITS):
        self.limits = limits
        self.sanitizer = Sanitizer()
        self.classifier = BlockClassifier(base_link, limits)

    def extract(self, html: str, article_title: str = "") -> tuple[ContentBlock, ...]:
        if len(html) > self.limits.max_fragment_length:
            logger.debug(f"Truncating fragment from {len(html)} characters")
            html = html[: self.limits.max_fragment_length]

        soup = BeautifulSoup(html, "html.parser")
        root = soup.body or soup
        self.sanitizer.clean_fragment(soup, root)

        blocks: list[ContentBlock] = []
        for child in root.find_all(True, recursive=False):
            self.classifier.classify(child, blocks)

        # Nothing block-shaped; fall back to the fragment's text as a whole
        if not blocks:
            text = element_text(root)
            if text:
                blocks.append(TextBlock(StyledText.from_string(text)))

        blocks = remove_title_heading(blocks, article_title)
        return tuple(blocks[: self.limits.max_blocks])


def extract_fragment(
    html: str,
    article_title: str = "",
    base_link: str = "",
    limits: ExtractionLimits = DEFAULT_LIMITS,
) -> tuple[ContentBlock, ...]:
    """Extract content blocks from feed-supplied HTML. Never raises."""
    if not html or not html.strip():
        return ()
    try:
        return FragmentExtractor(base_link, limits).extract(html, article_title)
    except Exception as e:
        logger.warning(f"Could not extract content blocks: {e}")
        return ()


def extract_blocks(
    request: ExtractionInput, limits: ExtractionLimits = DEFAULT_LIMITS
) -> tuple[ContentBlock, ...]:
    return extract_fragment(request.html, request.article_title, request.base_link, limits)
