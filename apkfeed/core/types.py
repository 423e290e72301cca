"""
Core data types for apkfeed.

This module defines the values that flow through the harvester and the
linking engine:
- FetchedDocument: One fetched HTML page
- ExtractedItem: Structured app record pulled out of an item page
- ContentItem: Stored item as yielded by the content repository
- RelatedItemScore / LinkTarget / LinkInsertionResult: Linking engine values
- AutoLinkResult / ScrapeOutcome: Per-item outcomes of the two pipelines
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


@dataclass
class FetchedDocument:
    """A fetched page, discarded once processing finishes.

    Attributes:
        url: The URL the HTML was fetched from
        raw_html: Raw response body
        fetched_at: UTC timestamp of the fetch
    """
    url: str
    raw_html: str
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class ExtractedItem:
    """Structured app record extracted from one item page.

    Title and slug are always non-empty; every other field is optional and
    simply left empty when the page layout does not expose it.

    Attributes:
        title: Item headline
        slug: URL-safe identifier, taken from the source URL when possible
        body_html: Sanitized description HTML with images rehosted
        meta_description: Page meta description (may be empty)
        keywords: Page meta keywords
        featured_image_url: Rehosted (or original) featured image URL
        app_version: Version string, e.g. "1.2.3"
        app_size: Download size, e.g. "12 MB"
        requirements: Platform requirement, e.g. "Android 5.0+"
        downloads_count: Download/user count, e.g. "10K+"
        developer: Developer name
        download_link: Absolute URL of the first download link
        source_url: The page the item was extracted from
    """
    title: str
    slug: str
    body_html: str
    meta_description: str = ""
    keywords: list[str] = field(default_factory=list)
    featured_image_url: str | None = None
    app_version: str | None = None
    app_size: str | None = None
    requirements: str | None = None
    downloads_count: str | None = None
    developer: str | None = None
    download_link: str | None = None
    source_url: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "slug": self.slug,
            "body_html": self.body_html,
            "meta_description": self.meta_description,
            "keywords": list(self.keywords),
            "featured_image_url": self.featured_image_url,
            "app_version": self.app_version,
            "app_size": self.app_size,
            "requirements": self.requirements,
            "downloads_count": self.downloads_count,
            "developer": self.developer,
            "download_link": self.download_link,
            "source_url": self.source_url,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ExtractedItem":
        return cls(
            title=data["title"],
            slug=data["slug"],
            body_html=data.get("body_html", ""),
            meta_description=data.get("meta_description") or "",
            keywords=list(data.get("keywords") or []),
            featured_image_url=data.get("featured_image_url"),
            app_version=data.get("app_version"),
            app_size=data.get("app_size"),
            requirements=data.get("requirements"),
            downloads_count=data.get("downloads_count"),
            developer=data.get("developer"),
            download_link=data.get("download_link"),
            source_url=data.get("source_url"),
        )


@dataclass
class ContentItem:
    """A stored item as provided by the content repository.

    Attributes:
        id: Repository identifier
        title: Item title
        slug: Item slug, used to build internal link targets
        body_html: Current body HTML
        published: False marks an unpublished item; None means unknown
        meta_description: Current meta description, if any
    """
    id: str
    title: str
    slug: str
    body_html: str
    published: bool | None = None
    meta_description: str | None = None

    @property
    def is_published(self) -> bool:
        return self.published is not False


@dataclass
class RelatedItemScore:
    """Similarity of one candidate item against a target item."""
    item_id: str
    title: str
    slug: str
    score: float


@dataclass
class LinkTarget:
    """An item to link to from another item's body.

    Attributes:
        slug: Slug of the linked item
        title: Title of the linked item, used for keyword placement
        anchor_text: Visible link text; defaults to the title
    """
    slug: str
    title: str
    anchor_text: str | None = None


@dataclass
class LinkInsertionResult:
    """New body HTML and the number of anchors inserted into it."""
    updated_html: str
    links_inserted: int


@dataclass
class AutoLinkResult:
    """Outcome of auto-linking a single stored item.

    Attributes:
        item_id: Repository identifier of the linked item
        title: Item title
        updated_html: Body HTML with internal links inserted
        links_inserted: Number of anchors added
        linked: Related items the links point to
        meta_description: Refreshed meta description
    """
    item_id: str
    title: str
    updated_html: str
    links_inserted: int
    linked: list[RelatedItemScore] = field(default_factory=list)
    meta_description: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "item_id": self.item_id,
            "title": self.title,
            "links_inserted": self.links_inserted,
            "linked": [
                {"item_id": r.item_id, "title": r.title, "slug": r.slug, "score": r.score}
                for r in self.linked
            ],
            "meta_description": self.meta_description,
        }


@dataclass
class ScrapeOutcome:
    """Per-URL result of a batch scrape.

    Attributes:
        url: The item page URL
        status: "created", "updated" or "failed"
        item: The extracted item on success
        error: Error message on failure
    """
    url: str
    status: str
    item: ExtractedItem | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "url": self.url,
            "status": self.status,
            "title": self.item.title if self.item else None,
            "slug": self.item.slug if self.item else None,
            "error": self.error,
        }
