"""JSON parser for content-repository exports.

The linking commands read stored items from a JSON export. Two shapes are
accepted:
- A bare array of item objects
- An object with an "items" (or "posts") array, plus optional metadata

Each item object carries id, title, slug, content, published and
metaDescription. Snake-case keys (body_html, meta_description) are accepted
as well.
"""

from __future__ import annotations

import logging
from typing import Any

from ..core.types import AutoLinkResult, ContentItem

logger = logging.getLogger(__name__)


def parse_items_json(data: dict[str, Any] | list[Any]) -> list[ContentItem]:
    """Parse a content-repository export into ContentItem objects.

    Example item:
        {
            "id": "42",
            "title": "Turbo Racer 3D",
            "slug": "turbo-racer-3d",
            "content": "<p>Race through...</p>",
            "published": true,
            "metaDescription": "Arcade racing."
        }

    Args:
        data: The parsed JSON content

    Returns:
        A list of ContentItem objects. Items missing id, title or slug are
        skipped with a warning.

    Raises:
        ValueError: If the JSON holds no item array
    """
    raw_items = _item_array(data)
    items: list[ContentItem] = []

    for raw in raw_items:
        if not isinstance(raw, dict):
            logger.warning("Skipping non-object item entry")
            continue
        item_id = raw.get("id")
        title = raw.get("title")
        slug = raw.get("slug")
        if item_id is None or not title or not slug:
            logger.warning(f"Skipping item {item_id or 'unknown'}: missing required fields (id, title or slug)")
            continue

        body = raw.get("content")
        if body is None:
            body = raw.get("body_html", raw.get("bodyHtml", ""))

        published = raw.get("published")
        if published is not None:
            published = bool(published)

        items.append(
            ContentItem(
                id=str(item_id),
                title=title,
                slug=slug,
                body_html=body or "",
                published=published,
                meta_description=raw.get("metaDescription", raw.get("meta_description")),
            )
        )

    return items


def results_to_json(results: list[AutoLinkResult]) -> dict[str, Any]:
    """Serialize auto-link results back into an export-shaped document."""
    return {
        "total": len(results),
        "items": [
            {
                "id": r.item_id,
                "title": r.title,
                "content": r.updated_html,
                "metaDescription": r.meta_description,
                "linksInserted": r.links_inserted,
                "linked": [{"id": x.item_id, "slug": x.slug, "score": round(x.score, 4)} for x in r.linked],
            }
            for r in results
        ],
    }


def _item_array(data: dict[str, Any] | list[Any]) -> list[Any]:
    if isinstance(data, list):
        return data
    for key in ("items", "posts"):
        if isinstance(data.get(key), list):
            return data[key]
    raise ValueError("Invalid JSON format: missing 'items' array")
