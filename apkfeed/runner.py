"""
Pipeline orchestration for apkfeed.

Two pipelines are coordinated here:
1. Scrape: discover item URLs from a seed, extract each item, write one
   folder per item plus a scrape_report.json
2. Auto-link: read a content-repository export, insert internal links
   between related items, write the updated items back out

Both support progress bar and quiet modes.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime, timezone
import json
import logging
from pathlib import Path
from urllib.parse import urlparse

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)

from .config import AppConfig
from .core.entry import EntryManager
from .core.types import AutoLinkResult, ScrapeOutcome
from .crawl.discovery import LinkDiscoveryCrawler
from .extract.assets import AssetRehoster, AssetStore, DirectoryAssetStore
from .extract.item_extractor import ItemExtractor
from .fetch.fetcher import Fetcher, HttpFetcher
from .fetch.politeness import FixedIntervalGate
from .input.json_parser import parse_items_json, results_to_json
from .linking.auto_link import InternalLinker
from .logging_utils import log_event, setup_logging

REPORT_FILENAME = "scrape_report.json"


@dataclass
class ScrapeStats:
    """Statistics collected during a batch scrape.

    Attributes:
        discovered: URLs found by the crawler (before the max_items cap)
        total: URLs actually processed
        created: Items written to a new folder
        updated: Items that overwrote an existing folder
        failed: Items that could not be fetched or extracted
    """
    discovered: int = 0
    total: int = 0
    created: int = 0
    updated: int = 0
    failed: int = 0


def build_asset_store(cfg: AppConfig) -> AssetStore | None:
    """Return the configured asset store, or None when rehosting is disabled."""
    if not cfg.assets.directory:
        return None
    return DirectoryAssetStore(Path(cfg.assets.directory), cfg.assets.public_base_url)


def build_extractor(
    cfg: AppConfig,
    fetcher: Fetcher,
    store: AssetStore | None,
    logger: logging.Logger | None = None,
) -> ItemExtractor:
    rehoster = AssetRehoster(
        fetcher,
        store,
        politeness=FixedIntervalGate(cfg.assets.upload_delay_seconds),
        folder=cfg.assets.folder,
        default_alt=cfg.assets.default_alt,
        logger=logger.getChild("assets") if logger else None,
    )
    return ItemExtractor(
        fetcher=fetcher,
        rehoster=rehoster,
        cfg=cfg.extract,
        logger=logger.getChild("extractor") if logger else None,
    )


def build_crawler(cfg: AppConfig, fetcher: Fetcher, logger: logging.Logger | None = None) -> LinkDiscoveryCrawler:
    return LinkDiscoveryCrawler(
        fetcher,
        politeness=FixedIntervalGate(cfg.crawl.page_delay_seconds),
        max_pages=cfg.crawl.max_pages,
        logger=logger.getChild("crawler") if logger else None,
    )


def run_scrape(
    seed_url: str,
    output_dir: Path,
    cfg: AppConfig,
    show_progress: bool = True,
    console: Console | None = None,
    fetcher: Fetcher | None = None,
    store: AssetStore | None = None,
) -> Path:
    """Discover and extract every item reachable from `seed_url`.

    Each item is written to output_dir/items/{slug}-{hash}/item.json. A
    failed item is recorded in the report and the batch continues.

    Args:
        seed_url: Item page or listing page to start from
        output_dir: Directory for item folders and the report
        cfg: Application configuration
        show_progress: Whether to display a progress bar
        console: Rich console for output (creates default if None)
        fetcher: Fetcher override (an HttpFetcher is built from cfg if None)
        store: Asset store override (built from cfg.assets if None)

    Returns:
        Path to scrape_report.json

    Raises:
        FetchError: The seed listing page could not be fetched
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    items_dir = output_dir / "items"
    logger = setup_logging(cfg.logging, output_dir)
    console = console or Console()

    owns_fetcher = fetcher is None
    fetcher = fetcher or HttpFetcher(cfg.fetch)
    store = store if store is not None else build_asset_store(cfg)
    try:
        crawler = build_crawler(cfg, fetcher, logger)
        extractor = build_extractor(cfg, fetcher, store, logger)

        urls = crawler.discover(seed_url, cfg.crawl.max_pages)
        stats = ScrapeStats(discovered=len(urls))
        urls = urls[: cfg.crawl.max_items]
        stats.total = len(urls)
        log_event(logger, "Scrape start", event="scrape_start", url=seed_url, count=len(urls))

        item_gate = FixedIntervalGate(cfg.crawl.item_delay_seconds)
        outcomes: list[ScrapeOutcome] = []

        if show_progress:
            progress = Progress(
                SpinnerColumn(),
                TextColumn("{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                TimeRemainingColumn(),
                console=console,
            )
            with progress:
                task = progress.add_task("Extract", total=len(urls))
                for url in urls:
                    item_gate.wait(urlparse(url).netloc)
                    outcomes.append(_scrape_one(url, extractor, items_dir, cfg, stats, logger))
                    progress.advance(task, 1)
        else:
            for url in urls:
                item_gate.wait(urlparse(url).netloc)
                outcomes.append(_scrape_one(url, extractor, items_dir, cfg, stats, logger))
    finally:
        if owns_fetcher:
            fetcher.close()

    report_path = output_dir / REPORT_FILENAME
    report = {
        "seed_url": seed_url,
        "finished_at": datetime.now(timezone.utc).isoformat(),
        "stats": asdict(stats),
        "results": [o.to_dict() for o in outcomes],
    }
    with open(report_path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False)

    log_event(logger, "Scrape complete", event="scrape_complete", stats=asdict(stats))
    _render_scrape_stats(stats, console)
    return report_path


def _scrape_one(
    url: str,
    extractor: ItemExtractor,
    items_dir: Path,
    cfg: AppConfig,
    stats: ScrapeStats,
    logger: logging.Logger,
) -> ScrapeOutcome:
    try:
        doc = extractor.fetch(url)
        item = extractor.extract(doc.url, doc.raw_html)
    except Exception as exc:  # noqa: BLE001
        stats.failed += 1
        log_event(
            logger,
            "Item failed",
            level=logging.WARNING,
            event="item_failed",
            url=url,
            error=f"{type(exc).__name__}: {exc}",
        )
        return ScrapeOutcome(url=url, status="failed", error=str(exc))

    entry = EntryManager(items_dir, url, item.slug)
    status = "updated" if entry.exists() else "created"
    entry.write_item(item)
    if cfg.cache.save_html:
        entry.write_fetched_html(doc.raw_html)

    if status == "created":
        stats.created += 1
    else:
        stats.updated += 1
    return ScrapeOutcome(url=url, status=status, item=item)


def _render_scrape_stats(stats: ScrapeStats, console: Console) -> None:
    console.print(
        "[bold]Scrape summary[/bold]: "
        f"discovered={stats.discovered}, total={stats.total}, created={stats.created}, "
        f"updated={stats.updated}, failed={stats.failed}"
    )


def run_auto_link(
    items_path: Path,
    output_path: Path,
    cfg: AppConfig,
    item_id: str | None = None,
    max_links: int | None = None,
    console: Console | None = None,
) -> list[AutoLinkResult]:
    """Auto-link items from a content-repository export.

    Args:
        items_path: JSON export of stored items
        output_path: Where to write the linked items
        cfg: Application configuration
        item_id: Only link this item (all items remain link candidates)
        max_links: Override cfg.linking.max_links

    Returns:
        One result per item that gained links
    """
    logger = setup_logging(cfg.logging, output_path.parent)
    with open(items_path, encoding="utf-8") as f:
        data = json.load(f)
    candidates = parse_items_json(data)

    targets = candidates
    if item_id is not None:
        targets = [c for c in candidates if c.id == item_id]
        if not targets:
            raise ValueError(f"Item {item_id} not found in {items_path}")

    linker = InternalLinker.from_config(cfg.linking, logger=logger.getChild("linking"))
    results = linker.auto_link(targets, candidates=candidates, max_links=max_links)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(results_to_json(results), f, indent=2, ensure_ascii=False)

    log_event(
        logger,
        "Auto-link complete",
        event="auto_link_complete",
        items=len(targets),
        linked=len(results),
        links_inserted=sum(r.links_inserted for r in results),
    )
    (console or Console()).print(
        f"[bold]Auto-link summary[/bold]: items={len(targets)}, linked={len(results)}, "
        f"links={sum(r.links_inserted for r in results)}"
    )
    return results
