"""
Listing-page link discovery.
"""

from .discovery import (
    LinkDiscoveryCrawler,
    extract_candidate_links,
    is_candidate_link,
    is_listing_url,
    normalize_url,
    page_url,
)

__all__ = [
    "LinkDiscoveryCrawler",
    "extract_candidate_links",
    "is_candidate_link",
    "is_listing_url",
    "normalize_url",
    "page_url",
]
