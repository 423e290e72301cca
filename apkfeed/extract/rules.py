"""
Selector and phrase lists used by the sanitizer and item extractor.

All lists are immutable module-level defaults bundled into ExtractionRules,
which is injected into the Sanitizer so tests can substitute smaller lists.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re

# Likely main-content containers, most specific first.
CONTENT_SELECTORS: tuple[str, ...] = (
    ".entry-content",
    ".post-content",
    "article .entry-content",
    "article .post-content",
    "main article",
    ".post .entry-content",
    ".article-content",
    "#content article",
    ".single-post .entry-content",
    "article",
    "main",
    ".content",
)

DESCRIPTION_SELECTORS: tuple[str, ...] = (
    'h2:-soup-contains("Description") ~ *',
    'h3:-soup-contains("Description") ~ *',
    "#description",
    ".description",
    '[id*="description"]',
    "section.description",
)

# Chrome groups, removed in this order.
CHROME_SELECTORS: tuple[tuple[str, ...], ...] = (
    # structural
    ("script", "style", "nav", "header", "footer", "aside", "iframe", "embed", "object", "form"),
    # sidebars and widgets
    (".sidebar", ".widget", ".widget-area", '[class*="sidebar"]', '[class*="widget"]'),
    # ads
    (".ads", ".advertisement", ".ad", ".adsbygoogle", '[class*="ad-"]', '[id*="ad-"]', '[class*="banner"]'),
    # share and social
    (
        ".social-share", ".sharedaddy", ".share-buttons", ".addtoany_share_save_container",
        ".social-links", ".share-links", '[class*="share"]', '[class*="social"]',
    ),
    # comments
    (
        "#comments", ".comments", ".comment-form", ".comment-respond", ".comment-list",
        "#respond", '[id*="comment"]', '[class*="comment"]',
    ),
    # related posts
    (
        ".related-posts", ".related-articles", ".related", '[class*="related"]',
        ".more-posts", ".similar-posts", '[id*="related"]',
    ),
    # author boxes
    (".author-box", ".author-bio", ".author-info", '[class*="author"]', ".about-author"),
    # prev/next navigation
    (".post-navigation", ".nav-links", ".pagination", ".post-nav", '[class*="navigation"]'),
    # app detail blocks
    (
        ".app-details", ".post-meta", ".entry-meta", "table.app-info", ".download-info",
        ".app-info-table", ".meta-info", ".app-sidebar", ".app-info-sidebar",
    ),
)

BREADCRUMB_SELECTORS: tuple[str, ...] = (".breadcrumbs", ".breadcrumb", '[class*="breadcrumb"]')

TAXONOMY_SELECTORS: tuple[str, ...] = (
    ".tags", ".tag-links", ".categories", ".cat-links", ".post-tags", ".post-categories",
)

WIDGET_SELECTORS: tuple[str, ...] = (
    # download buttons
    ".download-button", ".download-link", ".download-section", '[class*="download-btn"]',
    # report and vote forms
    ".report-form", ".vote-form", '[class*="report"]', '[class*="vote"]',
    # store badges
    '[class*="google-play"]', '[class*="play-store"]', ".store-badge",
)

METADATA_FINGERPRINTS: tuple[re.Pattern[str], ...] = (
    re.compile(r"version[:\s]*v?\d+\.\d+", re.I),
    re.compile(r"size[:\s]*\d+\.?\d*\s*(mb|gb|kb)", re.I),
    re.compile(r"requirements?[:\s]*android", re.I),
    re.compile(r"report this (app|application)", re.I),
    re.compile(r"get it on", re.I),
    re.compile(r"\d+/\d+\s*votes?", re.I),
    re.compile(r"updated[:\s]*just now", re.I),
)

NON_CONTENT_HEADINGS: tuple[str, ...] = (
    "app detail",
    "app information",
    "app info",
    "technical detail",
    "specification",
    "related post",
    "related app",
    "similar app",
    "you may also like",
    "comment",
    "leave a reply",
    "developer",
    "about the app",
)

# Term groups that mark a table as an app-info table when all terms co-occur.
INFO_TABLE_TERMS: tuple[tuple[str, ...], ...] = (
    ("version", "size"),
    ("developer", "requirement"),
    ("app name",),
    ("file size",),
)

INFO_LIST_TERMS: tuple[tuple[str, ...], ...] = (
    ("version", "size"),
    ("requirement", "android"),
    ("updated", "just now"),
)


@dataclass(frozen=True)
class ExtractionRules:
    """Bundle of selector lists and thresholds driving the sanitizer.

    Attributes:
        content_selectors: Ordered main-content container selectors
        description_selectors: Description-section fallbacks
        chrome_selectors: Groups of chrome selectors, removed in order
        fingerprints: Metadata fingerprint patterns
        fingerprint_threshold: Matches needed to treat a block as metadata
        fingerprint_max_chars: Only blocks with less text than this are removed
        fingerprint_max_html: Blocks with more HTML than this are never inspected
        min_content_chars: Minimum stripped length for a content candidate
    """

    content_selectors: tuple[str, ...] = CONTENT_SELECTORS
    description_selectors: tuple[str, ...] = DESCRIPTION_SELECTORS
    chrome_selectors: tuple[tuple[str, ...], ...] = CHROME_SELECTORS
    breadcrumb_selectors: tuple[str, ...] = BREADCRUMB_SELECTORS
    taxonomy_selectors: tuple[str, ...] = TAXONOMY_SELECTORS
    widget_selectors: tuple[str, ...] = WIDGET_SELECTORS
    fingerprints: tuple[re.Pattern[str], ...] = METADATA_FINGERPRINTS
    fingerprint_threshold: int = 3
    fingerprint_max_chars: int = 500
    fingerprint_max_html: int = 3000
    non_content_headings: tuple[str, ...] = NON_CONTENT_HEADINGS
    info_table_terms: tuple[tuple[str, ...], ...] = INFO_TABLE_TERMS
    info_list_terms: tuple[tuple[str, ...], ...] = INFO_LIST_TERMS
    min_content_chars: int = 200
    body_fallback: tuple[str, ...] = field(default=("description", "document"))

    @classmethod
    def from_config(cls, cfg) -> "ExtractionRules":
        """Build rules from an ExtractConfig, keeping default selector lists."""
        return cls(
            fingerprint_threshold=cfg.fingerprint_threshold,
            fingerprint_max_chars=cfg.fingerprint_max_chars,
            min_content_chars=cfg.min_content_chars,
            body_fallback=tuple(cfg.body_fallback),
        )
