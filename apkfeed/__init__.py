"""
apkfeed - app listing harvester and internal-linking engine.

This package turns third-party app/game pages into clean structured items,
discovers item pages from category listings, and weaves internal links
between stored items based on lexical similarity.

Main entry point is the CLI via `apkfeed scrape` and `apkfeed link` commands.

Example:
    $ apkfeed scrape https://apps.example.com/category/games/ -o out/
"""

__all__ = [
    "__version__",
    "ExtractedItem",
    "ContentItem",
    "ItemExtractor",
    "LinkDiscoveryCrawler",
    "InternalLinker",
    "slugify",
]
__version__ = "0.1.0"

from .core.text import slugify
from .core.types import ContentItem, ExtractedItem
from .crawl.discovery import LinkDiscoveryCrawler
from .extract.item_extractor import ItemExtractor
from .linking.auto_link import InternalLinker
