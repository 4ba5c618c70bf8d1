"""Markdown and plain-text rendering of content blocks."""

from ..extraction.models import (
    BlockquoteBlock,
    CodeBlock,
    ContentBlock,
    DefinitionListBlock,
    DetailsBlock,
    DividerBlock,
    HeadingBlock,
    ImageBlock,
    ListBlock,
    Style,
    StyledRun,
    StyledText,
    TableBlock,
    TextBlock,
)

# Applied innermost first; underline has no Markdown form.
STYLE_MARKERS = [
    (Style.CODE, "`"),
    (Style.STRIKETHROUGH, "~~"),
    (Style.HIGHLIGHT, "=="),
    (Style.ITALIC, "*"),
    (Style.BOLD, "**"),
]


def _run_to_markdown(run: StyledRun) -> str:
    core = run.text.strip()
    if not core:
        return run.text
    lead = run.text[: len(run.text) - len(run.text.lstrip())]
    trail = run.text[len(run.text.rstrip()) :]

    for style, marker in STYLE_MARKERS:
        if style in run.styles:
            core = f"{marker}{core}{marker}"
    if Style.LINK in run.styles and run.link:
        core = f"[{core}]({run.link})"
    return lead + core + trail


def styled_to_markdown(text: StyledText) -> str:
    """Render inline styles as Markdown."""
    return "".join(_run_to_markdown(run) for run in text.runs)


def _quote(text: str) -> str:
    return "\n".join(f"> {line}" if line else ">" for line in text.split("\n"))


def _table_to_markdown(rows: tuple[tuple[StyledText, ...], ...]) -> str:
    width = max(len(row) for row in rows)
    lines = []
    for i, row in enumerate(rows):
        cells = [styled_to_markdown(cell).replace("|", "\\|") for cell in row]
        cells += [""] * (width - len(cells))
        lines.append("| " + " | ".join(cells) + " |")
        if i == 0:
            lines.append("|" + "---|" * width)
    return "\n".join(lines)


def block_to_markdown(block: ContentBlock) -> str:
    if isinstance(block, TextBlock):
        return styled_to_markdown(block.text)
    if isinstance(block, HeadingBlock):
        return "#" * block.level + " " + styled_to_markdown(block.text)
    if isinstance(block, BlockquoteBlock):
        return _quote(styled_to_markdown(block.text))
    if isinstance(block, ImageBlock):
        image = f"![{block.caption or ''}]({block.url})"
        return f"{image}\n*{block.caption}*" if block.caption else image
    if isinstance(block, CodeBlock):
        return f"```\n{block.code}\n```"
    if isinstance(block, DividerBlock):
        return "---"
    if isinstance(block, ListBlock):
        return "\n".join(
            f"{i}. " + styled_to_markdown(item) if block.ordered else "- " + styled_to_markdown(item)
            for i, item in enumerate(block.items, start=1)
        )
    if isinstance(block, TableBlock):
        return _table_to_markdown(block.rows)
    if isinstance(block, DefinitionListBlock):
        return "\n\n".join(
            f"**{term.plain}**\n: {styled_to_markdown(definition)}"
            for term, definition in block.pairs
        )
    if isinstance(block, DetailsBlock):
        inner = blocks_to_markdown(block.content)
        return f"<details>\n<summary>{block.summary}</summary>\n\n{inner}\n\n</details>"
    raise TypeError(f"Unknown block type: {type(block).__name__}")


def blocks_to_markdown(blocks: tuple[ContentBlock, ...] | list[ContentBlock]) -> str:
    """Render a block sequence as a Markdown document.

    Args:
        blocks: Blocks as returned by ``extract_fragment``

    Returns:
        Markdown with one blank line between blocks
    """
    return "\n\n".join(block_to_markdown(block) for block in blocks)


def block_to_text(block: ContentBlock) -> str:
    if isinstance(block, (TextBlock, HeadingBlock, BlockquoteBlock)):
        return block.text.plain
    if isinstance(block, ImageBlock):
        return f"[image: {block.caption or block.url}]"
    if isinstance(block, CodeBlock):
        return block.code
    if isinstance(block, DividerBlock):
        return "-" * 3
    if isinstance(block, ListBlock):
        return "\n".join(f"- {item.plain}" for item in block.items)
    if isinstance(block, TableBlock):
        return "\n".join("\t".join(cell.plain for cell in row) for row in block.rows)
    if isinstance(block, DefinitionListBlock):
        return "\n".join(f"{term.plain}: {definition.plain}" for term, definition in block.pairs)
    if isinstance(block, DetailsBlock):
        return block.summary + "\n" + blocks_to_text(block.content)
    raise TypeError(f"Unknown block type: {type(block).__name__}")


def blocks_to_text(blocks: tuple[ContentBlock, ...] | list[ContentBlock]) -> str:
    """Render a block sequence as plain text."""
    return "\n\n".join(block_to_text(block) for block in blocks)
