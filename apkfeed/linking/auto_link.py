"""
Internal-linking workflows built on the scorer and the inserter.

InternalLinker bundles three operations used by the CLI and runner:
- process_content: strip outbound links, then link to related items
- auto_link: the batch pass over a content-repository export
- link_to: manual linking to explicitly chosen targets
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from ..config import LinkingConfig
from ..core.keywords import KeywordExtractor
from ..core.types import (
    AutoLinkResult,
    ContentItem,
    LinkInsertionResult,
    LinkTarget,
    RelatedItemScore,
)
from ..logging_utils import log_event
from .inserter import LinkInserter
from .similarity import SimilarityScorer


def update_meta_description(
    current: str | None,
    linked_titles: Sequence[str],
    item_title: str,
    max_length: int = 160,
) -> str:
    """Refresh a meta description after links were added.

    Short descriptions (under 120 chars) get a "Related to A and B." suffix
    naming at most two linked items. The result never exceeds max_length.

    Examples:
        >>> update_meta_description("", ["Sky Jump"], "Turbo Racer")
        "Turbo Racer Related to Sky Jump."
    """
    description = current or item_title
    if len(description) >= 150:
        return description[:max_length]
    if linked_titles and len(description) < 120:
        suffix = f" Related to {' and '.join(linked_titles[:2])}."
        return (description + suffix)[:max_length]
    return description[:max_length]


class InternalLinker:
    """Finds related items and weaves links to them into item bodies.

    Args:
        scorer: Similarity scorer used to pick link targets
        inserter: Anchor inserter (carries the item path prefix)
        max_links: Default number of links per item
        strip_external: Strip outbound links before inserting internal ones
        meta_max: Maximum refreshed meta description length
    """

    def __init__(
        self,
        scorer: SimilarityScorer | None = None,
        inserter: LinkInserter | None = None,
        max_links: int = 3,
        strip_external: bool = True,
        meta_max: int = 160,
        logger: logging.Logger | None = None,
    ):
        self.scorer = scorer or SimilarityScorer()
        self.inserter = inserter or LinkInserter()
        self.max_links = max_links
        self.strip_external = strip_external
        self.meta_max = meta_max
        self.logger = logger or logging.getLogger("apkfeed.linking")

    @classmethod
    def from_config(cls, cfg: LinkingConfig, logger: logging.Logger | None = None) -> "InternalLinker":
        scorer = SimilarityScorer(
            KeywordExtractor(min_length=cfg.min_keyword_length),
            relevance_floor=cfg.relevance_floor,
        )
        return cls(
            scorer=scorer,
            inserter=LinkInserter(path_prefix=cfg.item_path_prefix),
            max_links=cfg.max_links,
            strip_external=cfg.strip_external,
            meta_max=cfg.meta_description_max,
            logger=logger,
        )

    def process_content(
        self,
        html: str,
        candidates: Sequence[ContentItem] = (),
        item_id: str | None = None,
        item_title: str | None = None,
        max_links: int | None = None,
    ) -> LinkInsertionResult:
        """Strip external links, then link to related candidates when the item is known."""
        processed = self.inserter.strip_external_links(html)
        if not item_id or not item_title or not candidates:
            return LinkInsertionResult(updated_html=processed, links_inserted=0)

        target = ContentItem(id=item_id, title=item_title, slug="", body_html=processed)
        related = self.scorer.find_related(target, candidates, max_links or self.max_links)
        if not related:
            return LinkInsertionResult(updated_html=processed, links_inserted=0)
        return self.inserter.insert_many(processed, _targets(related))

    def auto_link(
        self,
        items: Iterable[ContentItem],
        candidates: Sequence[ContentItem] | None = None,
        max_links: int | None = None,
    ) -> list[AutoLinkResult]:
        """Link every published item to its most related candidates.

        Args:
            items: Items to update
            candidates: Pool of link targets; defaults to `items` itself
            max_links: Links per item, defaults to the linker's setting

        Returns:
            One result per item that gained at least one link
        """
        items = list(items)
        pool = list(candidates) if candidates is not None else items
        limit = max_links or self.max_links
        results: list[AutoLinkResult] = []

        for item in items:
            if not item.is_published:
                continue
            body = item.body_html
            if self.strip_external:
                body = self.inserter.strip_external_links(body)
            related = self.scorer.find_related(item, pool, limit)
            if not related:
                continue
            inserted = self.inserter.insert_many(body, _targets(related))
            if inserted.links_inserted == 0:
                continue
            result = AutoLinkResult(
                item_id=item.id,
                title=item.title,
                updated_html=inserted.updated_html,
                links_inserted=inserted.links_inserted,
                linked=related,
                meta_description=update_meta_description(
                    item.meta_description,
                    [r.title for r in related],
                    item.title,
                    self.meta_max,
                ),
            )
            log_event(
                self.logger,
                "Item auto-linked",
                event="auto_link_item",
                item_id=item.id,
                links_inserted=inserted.links_inserted,
                targets=[r.slug for r in related],
            )
            results.append(result)
        return results

    def link_to(self, item: ContentItem, targets: Sequence[LinkTarget]) -> AutoLinkResult:
        """Insert links to explicitly chosen targets (with optional custom anchor text)."""
        inserted = self.inserter.insert_many(item.body_html, targets)
        return AutoLinkResult(
            item_id=item.id,
            title=item.title,
            updated_html=inserted.updated_html,
            links_inserted=inserted.links_inserted,
            linked=[
                RelatedItemScore(item_id="", title=t.title, slug=t.slug, score=1.0) for t in targets
            ],
            meta_description=update_meta_description(
                item.meta_description,
                [t.title for t in targets],
                item.title,
                self.meta_max,
            ),
        )


def _targets(related: Iterable[RelatedItemScore]) -> list[LinkTarget]:
    return [LinkTarget(slug=r.slug, title=r.title) for r in related]
