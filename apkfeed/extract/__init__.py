"""
Item page extraction.

This package turns one fetched item page into an ExtractedItem:
main-content selection and chrome stripping, image rehosting, and
field strategy cascades.
"""

from .assets import AssetRehoster, AssetStore, DirectoryAssetStore, resolve_url
from .item_extractor import ItemExtractor
from .rules import ExtractionRules
from .sanitizer import Sanitizer
from .strategies import FieldStrategies, Match, PageContext, run_strategies

__all__ = [
    "AssetRehoster",
    "AssetStore",
    "DirectoryAssetStore",
    "resolve_url",
    "ItemExtractor",
    "ExtractionRules",
    "Sanitizer",
    "FieldStrategies",
    "Match",
    "PageContext",
    "run_strategies",
]
