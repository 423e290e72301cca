"""
Page and image fetching.

This package handles HTTP fetching and request spacing for the
crawler, the item extractor and the asset rehoster.
"""

from .fetcher import FetchResult, Fetcher, HttpFetcher
from .politeness import FixedIntervalGate, NoDelay, PolitenessPolicy

__all__ = [
    "FetchResult",
    "Fetcher",
    "HttpFetcher",
    "FixedIntervalGate",
    "NoDelay",
    "PolitenessPolicy",
]
