"""CLI entry point."""

import asyncio
import logging
from pathlib import Path

import click

from .config import Config
from .export.markdown import blocks_to_markdown, blocks_to_text
from .extraction.blocks import extract_fragment
from .extraction.models import FeedItem
from .fetching.content import ContentExtractor
from .fetching.fetcher import ArticleFetcher
from .session import ExtractionSession

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def _load_config(path: str, verbose: bool) -> Config:
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    try:
        return Config.from_yaml(path)
    except ValueError as e:
        raise click.UsageError(str(e))


def _render(blocks, output_format: str) -> str:
    if output_format == "text":
        return blocks_to_text(blocks)
    return blocks_to_markdown(blocks)


@click.group()
def cli() -> None:
    """Article content extraction - turn feed and web page HTML into content blocks."""
    pass


@cli.command()
@click.argument("html_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--title", "-t", default="", help="Article title, used to drop a repeated heading")
@click.option("--base-link", "-b", default="", help="Article link for resolving relative URLs")
@click.option(
    "--format", "output_format", type=click.Choice(["markdown", "text"]), default="markdown"
)
@click.option("--config", "-c", default="config.yaml", help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def fragment(
    html_file: Path,
    title: str,
    base_link: str,
    output_format: str,
    config: str,
    verbose: bool,
) -> None:
    """Extract content blocks from an HTML fragment file."""
    cfg = _load_config(config, verbose)
    html = html_file.read_text(encoding="utf-8", errors="replace")
    blocks = extract_fragment(html, title, base_link, cfg.limits())

    if not blocks:
        click.echo("No content found.")
        return

    logger.info(f"Extracted {len(blocks)} blocks from {html_file}")
    click.echo(_render(blocks, output_format))


@cli.command()
@click.argument("html_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--html", "show_html", is_flag=True, help="Print the located HTML instead of text")
@click.option("--config", "-c", default="config.yaml", help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def page(html_file: Path, show_html: bool, config: str, verbose: bool) -> None:
    """Locate the main content of a full HTML page."""
    cfg = _load_config(config, verbose)
    html = html_file.read_text(encoding="utf-8", errors="replace")
    located = ContentExtractor(cfg.limits()).extract(html)

    if not located.found:
        click.echo("No main content region found.")
        return

    click.echo(located.html if show_html else located.text)


@cli.command()
@click.argument("url")
@click.option("--title", "-t", default="", help="Article title")
@click.option(
    "--content-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Feed-supplied HTML for the article, tried before fetching",
)
@click.option("--description", "-d", default="", help="Feed description used as fallback text")
@click.option(
    "--format", "output_format", type=click.Choice(["markdown", "text"]), default="markdown"
)
@click.option("--config", "-c", default="config.yaml", help="Config file path")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def read(
    url: str,
    title: str,
    content_file: Path | None,
    description: str,
    output_format: str,
    config: str,
    verbose: bool,
) -> None:
    """Load an article the way the reader pane does and print it."""
    cfg = _load_config(config, verbose)
    item = FeedItem(
        title=title,
        link=url,
        description=description,
        content_html=content_file.read_text(encoding="utf-8") if content_file else None,
    )
    fetcher = ArticleFetcher(
        timeout_seconds=cfg.fetch_timeout_seconds,
        user_agent=cfg.user_agent,
        max_content_length=cfg.max_page_length,
    )
    session = ExtractionSession(item, fetcher, cfg.limits())
    blocks = asyncio.run(session.load())

    if blocks:
        logger.info(f"[{session.state.value}] {len(blocks)} blocks for {url[:60]}")
        click.echo(_render(blocks, output_format))
    elif session.fallback_text:
        click.echo(session.fallback_text)
    else:
        error = session.last_fetch.error if session.last_fetch else "nothing to show"
        click.echo(f"Couldn't load article: {error}", err=True)
        click.echo(f"Open it in a browser instead: {url}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    cli()
