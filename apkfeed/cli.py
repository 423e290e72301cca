"""
Command-line interface for apkfeed.

Uses Typer to expose the scrape and linking pipelines plus a few
single-step commands for inspecting discovery, extraction and link
stripping on their own.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console

from .config import AppConfig, load_config
from .core.errors import HarvestError
from .extract.assets import DirectoryAssetStore
from .fetch.fetcher import HttpFetcher
from .linking.inserter import LinkInserter
from .logging_utils import setup_logging
from .runner import build_asset_store, build_crawler, build_extractor, run_auto_link, run_scrape

app = typer.Typer(add_completion=False)
console = Console()


def _load(config: Path | None, log_level: str | None) -> AppConfig:
    cfg = load_config(str(config) if config else None)
    if log_level:
        cfg.logging.level = log_level
    return cfg


@app.command()
def scrape(
    seed: str = typer.Argument(..., help="Item page or category/tag listing URL."),
    output: Path = typer.Option(Path("out"), "--output", "-o"),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    max_pages: int | None = typer.Option(None, "--max-pages", help="Listing pages to paginate."),
    max_items: int | None = typer.Option(None, "--max-items", help="Cap on items scraped."),
    assets_dir: Path | None = typer.Option(None, "--assets-dir", help="Rehost images into this directory."),
    assets_url: str | None = typer.Option(None, "--assets-url", help="Public URL prefix of --assets-dir."),
    save_html: bool | None = typer.Option(None, "--save-html/--no-save-html", help="Keep fetched pages."),
    progress: bool = typer.Option(True, "--progress/--no-progress"),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Discover item pages from SEED and extract each one.

    Writes one folder per item under OUTPUT/items and a scrape_report.json
    summarizing created, updated and failed items.
    """
    cfg = _load(config, log_level)
    if max_pages is not None:
        cfg.crawl.max_pages = max_pages
    if max_items is not None:
        cfg.crawl.max_items = max_items
    if assets_dir is not None:
        cfg.assets.directory = str(assets_dir)
    if assets_url:
        cfg.assets.public_base_url = assets_url
    if save_html is not None:
        cfg.cache.save_html = save_html

    try:
        report_path = run_scrape(seed, output, cfg, show_progress=progress, console=console)
    except HarvestError as exc:
        console.print(f"[red]Scrape failed[/red]: {exc}")
        raise typer.Exit(code=1)
    console.print(f"Report generated: {report_path}")


@app.command()
def discover(
    seed: str = typer.Argument(..., help="Listing URL to paginate."),
    max_pages: int | None = typer.Option(None, "--max-pages"),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    log_level: str | None = typer.Option(None, "--log-level"),
):
    """Print the item URLs discovered from SEED, one per line."""
    cfg = _load(config, log_level)
    logger = setup_logging(cfg.logging, None)
    with HttpFetcher(cfg.fetch) as fetcher:
        crawler = build_crawler(cfg, fetcher, logger)
        try:
            urls = crawler.discover(seed, max_pages)
        except HarvestError as exc:
            console.print(f"[red]Discovery failed[/red]: {exc}")
            raise typer.Exit(code=1)
    for url in urls:
        typer.echo(url)


@app.command()
def extract(
    url: str = typer.Argument(..., help="Item page URL."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    assets_dir: Path | None = typer.Option(None, "--assets-dir"),
    assets_url: str = typer.Option("/assets", "--assets-url"),
    log_level: str | None = typer.Option(None, "--log-level"),
):
    """Extract a single item page and print it as JSON."""
    cfg = _load(config, log_level)
    logger = setup_logging(cfg.logging, None)
    store = DirectoryAssetStore(assets_dir, assets_url) if assets_dir else build_asset_store(cfg)
    with HttpFetcher(cfg.fetch) as fetcher:
        extractor = build_extractor(cfg, fetcher, store, logger)
        try:
            item = extractor.extract_url(url)
        except HarvestError as exc:
            console.print(f"[red]Extraction failed[/red]: {exc}")
            raise typer.Exit(code=1)
    typer.echo(json.dumps(item.to_dict(), indent=2, ensure_ascii=False))


@app.command()
def link(
    items: Path = typer.Argument(..., exists=True, readable=True, help="JSON export of stored items."),
    output: Path = typer.Option(Path("linked.json"), "--output", "-o"),
    item_id: str | None = typer.Option(None, "--item-id", help="Only link this item."),
    max_links: int | None = typer.Option(None, "--max-links"),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
    log_level: str | None = typer.Option(None, "--log-level"),
):
    """Insert internal links between related items of an export."""
    cfg = _load(config, log_level)
    try:
        run_auto_link(items, output, cfg, item_id=item_id, max_links=max_links, console=console)
    except ValueError as exc:
        console.print(f"[red]Link failed[/red]: {exc}")
        raise typer.Exit(code=1)
    console.print(f"Linked items written: {output}")


@app.command("strip-links")
def strip_links(
    file: Path = typer.Argument(..., exists=True, readable=True, help="HTML body file."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Defaults to overwriting FILE."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True),
):
    """Replace outbound links in an HTML body with their text."""
    cfg = _load(config, None)
    inserter = LinkInserter(path_prefix=cfg.linking.item_path_prefix)
    html = file.read_text(encoding="utf-8")
    target = output or file
    target.write_text(inserter.strip_external_links(html), encoding="utf-8")
    console.print(f"Written: {target}")


if __name__ == "__main__":
    app()
