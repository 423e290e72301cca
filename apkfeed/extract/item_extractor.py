"""
Item extraction: one fetched page in, one structured ExtractedItem out.

ItemExtractor orchestrates the Sanitizer (body selection and chrome
stripping), the AssetRehoster (content and featured images) and the field
strategy cascades (title, metadata, download link, meta tags).
"""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup

from ..config import ExtractConfig
from ..core.errors import ExtractionError
from ..core.text import slug_from_url, slugify
from ..core.types import ExtractedItem, FetchedDocument
from ..fetch.fetcher import Fetcher
from ..logging_utils import log_event
from .assets import AssetRehoster, resolve_url
from .rules import ExtractionRules
from .sanitizer import Sanitizer
from .strategies import FieldStrategies, PageContext, meta_keywords, run_strategies


class ItemExtractor:
    """Turns item pages into ExtractedItem records.

    Args:
        fetcher: Used by extract_url to fetch the page itself
        rehoster: Image rehoster; None (or one without a store) keeps image URLs as-is
        rules: Sanitizer selector lists and thresholds
        strategies: Field strategy cascades
        cfg: Extraction settings (placeholder title, slug length)
    """

    def __init__(
        self,
        fetcher: Fetcher | None = None,
        rehoster: AssetRehoster | None = None,
        rules: ExtractionRules | None = None,
        strategies: FieldStrategies | None = None,
        cfg: ExtractConfig | None = None,
        logger: logging.Logger | None = None,
    ):
        self.cfg = cfg or ExtractConfig()
        self.fetcher = fetcher
        self.rehoster = rehoster
        self.logger = logger or logging.getLogger("apkfeed.extractor")
        self.sanitizer = Sanitizer(rules or ExtractionRules.from_config(self.cfg), logger=self.logger)
        self.strategies = strategies or FieldStrategies()

    def fetch(self, url: str) -> FetchedDocument:
        """Fetch a page, raising FetchError on network errors or non-2xx."""
        if self.fetcher is None:
            raise RuntimeError("ItemExtractor has no fetcher")
        result = self.fetcher.fetch(url).raise_for_error()
        return FetchedDocument(url=url, raw_html=result.text or "")

    def extract_url(self, url: str) -> ExtractedItem:
        doc = self.fetch(url)
        return self.extract(doc.url, doc.raw_html)

    def extract(self, url: str, raw_html: str) -> ExtractedItem:
        """Extract a structured item from one page.

        Only title and slug are required; every other field defaults to
        empty when the page layout does not expose it.

        Raises:
            ExtractionError: Title or slug came out empty
        """
        soup = BeautifulSoup(raw_html, "html.parser")
        ctx = PageContext(soup=soup, url=url)

        title_match = run_strategies(ctx, self.strategies.title)
        title = (title_match.value or self.cfg.placeholder_title).strip()
        ctx.title = title

        slug = slug_from_url(url) or slugify(title, max_length=self.cfg.max_slug_length)
        if not title or not slug:
            raise ExtractionError(f"{url}: page yielded no title or slug")

        body_html = self.sanitizer.select_body(soup, raw_html)
        ctx.body_html = body_html
        if self.rehoster is not None:
            body_html = self.rehoster.rehost_html(body_html, url)

        featured = run_strategies(ctx, self.strategies.featured_image).value
        if featured:
            if self.rehoster is not None:
                featured = self.rehoster.try_rehost_url(featured, url)
            else:
                featured = resolve_url(featured, url)

        item = ExtractedItem(
            title=title,
            slug=slug,
            body_html=body_html,
            meta_description=run_strategies(ctx, self.strategies.meta_description).value or "",
            keywords=meta_keywords(soup),
            featured_image_url=featured,
            app_version=run_strategies(ctx, self.strategies.version).value,
            app_size=run_strategies(ctx, self.strategies.size).value,
            requirements=run_strategies(ctx, self.strategies.requirements).value,
            downloads_count=run_strategies(ctx, self.strategies.downloads).value,
            developer=run_strategies(ctx, self.strategies.developer).value,
            download_link=run_strategies(ctx, self.strategies.download_link).value,
            source_url=url,
        )
        log_event(
            self.logger,
            "Item extracted",
            event="item_extracted",
            url=url,
            slug=slug,
            title_strategy=title_match.strategy or "placeholder",
            body_chars=len(body_html),
        )
        return item
