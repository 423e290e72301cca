"""
Core domain models and helpers.

This package contains data types, errors and text utilities that are
independent of any specific pipeline stage.
"""

from .types import (
    AutoLinkResult,
    ContentItem,
    ExtractedItem,
    FetchedDocument,
    LinkInsertionResult,
    LinkTarget,
    RelatedItemScore,
    ScrapeOutcome,
)
from .entry import EntryManager
from .errors import ExtractionError, FetchError, HarvestError, UploadError
from .keywords import KeywordExtractor, title_keywords
from .text import short_hash, slug_from_url, slugify

__all__ = [
    "AutoLinkResult",
    "ContentItem",
    "ExtractedItem",
    "FetchedDocument",
    "LinkInsertionResult",
    "LinkTarget",
    "RelatedItemScore",
    "ScrapeOutcome",
    "EntryManager",
    "ExtractionError",
    "FetchError",
    "HarvestError",
    "UploadError",
    "KeywordExtractor",
    "title_keywords",
    "short_hash",
    "slug_from_url",
    "slugify",
]
