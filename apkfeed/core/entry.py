"""Entry manager for per-item output storage.

Each scraped item gets its own folder named {slug}-{shortHash} holding the
extracted record and, when caching is enabled, the raw fetched page.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from .text import short_hash, slugify
from .types import ExtractedItem


class EntryManager:
    """Manages file paths and folder structure for a single scraped item."""

    def __init__(self, items_dir: Path, url: str, slug: str):
        """Initialize the EntryManager.

        Args:
            items_dir: The parent directory where all item folders are stored
            url: Source URL of the item, hashed for uniqueness
            slug: Item slug (re-slugified for filesystem safety)
        """
        self._items_dir = items_dir
        self._url = url
        self._slug = slug

    @property
    def folder(self) -> Path:
        name = f"{slugify(self._slug, max_length=50)}-{short_hash(self._url)}"
        return self._items_dir / name

    @property
    def fetched_html(self) -> Path:
        return self.folder / "fetched.html"

    @property
    def item_json(self) -> Path:
        return self.folder / "item.json"

    def exists(self) -> bool:
        return self.item_json.exists()

    def ensure_folder(self) -> None:
        """Create the entry folder if it doesn't exist."""
        self.folder.mkdir(parents=True, exist_ok=True)

    def write_item(self, item: ExtractedItem) -> None:
        """Write the extracted record to item.json."""
        self.ensure_folder()
        with open(self.item_json, "w", encoding="utf-8") as f:
            json.dump(item.to_dict(), f, indent=2, ensure_ascii=False)

    def read_item(self) -> ExtractedItem | None:
        """Read the stored record, or None if the entry has not been written."""
        if not self.item_json.exists():
            return None
        with open(self.item_json, "r", encoding="utf-8") as f:
            data: dict[str, Any] = json.load(f)
        return ExtractedItem.from_dict(data)

    def write_fetched_html(self, html: str) -> None:
        self.ensure_folder()
        self.fetched_html.write_text(html, encoding="utf-8")
