"""
Link discovery over category, tag and paginated listing pages.

A seed URL without listing markers is treated as a single item page and
returned as-is. Otherwise the crawler walks /page/N/ (or &page=N) pages,
collecting same-host item links. Anchors inside article-like containers are
preferred; the whole page is scanned only when none of those yield a link.
"""

from __future__ import annotations

import logging
import re
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from ..fetch.fetcher import Fetcher
from ..fetch.politeness import NoDelay, PolitenessPolicy
from ..logging_utils import log_event

LISTING_MARKERS: tuple[str, ...] = ("/category/", "/tag/", "/page/")

ARTICLE_LINK_SELECTORS: tuple[str, ...] = (
    "article a",
    ".post a",
    ".entry a",
    ".post-title a",
    ".entry-title a",
    "h2 a",
    "h3 a",
    ".post-content a",
    "main article a",
)

EXCLUDED_SUBSTRINGS: tuple[str, ...] = (
    "?page=",
    "/category/",
    "/tag/",
    "/author/",
    "/page/",
    "/wp-",
    "/feed",
    ".xml",
    ".rss",
    "/search",
)

_TRAILING_NUMBER_RE = re.compile(r"/\d+/$")
_DATE_ARCHIVE_RE = re.compile(r"/\d{4}/\d{2}/?$")
_PAGE_SEGMENT_RE = re.compile(r"/page/\d+/?$")


def normalize_url(url: str) -> str:
    return url.rstrip("/")


def is_listing_url(url: str) -> bool:
    """True when the URL looks like a category, tag or paginated archive."""
    if any(marker in url for marker in LISTING_MARKERS):
        return True
    return bool(_TRAILING_NUMBER_RE.search(url))


def page_url(seed_url: str, page: int) -> str:
    """URL of listing page `page` (1-based) for a seed listing URL.

    Examples:
        >>> page_url("https://x.test/category/games/", 3)
        "https://x.test/category/games/page/3/"
        >>> page_url("https://x.test/list?cat=games", 2)
        "https://x.test/list?cat=games&page=2"
    """
    if page <= 1:
        return seed_url
    if "?" in seed_url:
        return f"{seed_url}&page={page}"
    base = _PAGE_SEGMENT_RE.sub("", seed_url).rstrip("/")
    return f"{base}/page/{page}/"


def is_candidate_link(url: str, seed_url: str) -> bool:
    """Decide whether an absolute URL looks like an item page for this seed."""
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        return False
    if parsed.hostname != urlparse(seed_url).hostname:
        return False
    if "#" in url:
        return False
    if any(part in url for part in EXCLUDED_SUBSTRINGS):
        return False
    if _DATE_ARCHIVE_RE.search(url):
        return False
    # scheme + host + at least one path segment
    if len([p for p in url.split("/") if p]) < 3:
        return False
    return normalize_url(url) != normalize_url(seed_url)


def extract_candidate_links(html: str, page_url_: str, seed_url: str) -> list[str]:
    """Collect normalized candidate item links from one listing page."""
    soup = BeautifulSoup(html, "html.parser")

    def collect(anchors) -> list[str]:
        found: list[str] = []
        for a in anchors:
            href = (a.get("href") or "").strip()
            if not href:
                continue
            try:
                absolute = urljoin(page_url_, href)
                if not is_candidate_link(absolute, seed_url):
                    continue
            except ValueError:
                # urllib rejects hrefs such as "http://[broken/x"
                continue
            normalized = normalize_url(absolute)
            if normalized not in found:
                found.append(normalized)
        return found

    for selector in ARTICLE_LINK_SELECTORS:
        links = collect(soup.select(selector))
        if links:
            return links
    return collect(soup.find_all("a"))


class LinkDiscoveryCrawler:
    """Paginates a listing page to discover item URLs.

    Args:
        fetcher: Fetches listing pages
        politeness: Gate consulted before each page fetch, keyed by the seed host
        max_pages: Default page bound for discover()
    """

    def __init__(
        self,
        fetcher: Fetcher,
        politeness: PolitenessPolicy | None = None,
        max_pages: int = 5,
        logger: logging.Logger | None = None,
    ):
        self.fetcher = fetcher
        self.politeness = politeness or NoDelay()
        self.max_pages = max_pages
        self.logger = logger or logging.getLogger("apkfeed.crawler")

    def discover(self, seed_url: str, max_pages: int | None = None) -> list[str]:
        """Return item URLs reachable from `seed_url`, first-discovered first.

        Raises:
            FetchError: The first listing page could not be fetched
        """
        if not is_listing_url(seed_url):
            return [normalize_url(seed_url)]

        max_pages = self.max_pages if max_pages is None else max_pages
        host = urlparse(seed_url).netloc
        links: list[str] = []
        seen: set[str] = set()
        log_event(
            self.logger,
            "Discovering item links",
            event="discover_start",
            url=seed_url,
            max_pages=max_pages,
        )

        for page in range(1, max_pages + 1):
            url = page_url(seed_url, page)
            self.politeness.wait(host)
            result = self.fetcher.fetch(url)
            if not result.ok:
                if page == 1:
                    result.raise_for_error()
                log_event(
                    self.logger,
                    "Listing page failed, stopping pagination",
                    event="discover_stop",
                    url=url,
                    page=page,
                    reason=result.error,
                )
                break

            new_links = [
                link for link in extract_candidate_links(result.text or "", url, seed_url)
                if link not in seen
            ]
            for link in new_links:
                seen.add(link)
                links.append(link)
            log_event(
                self.logger,
                "Listing page scanned",
                event="discover_page",
                url=url,
                page=page,
                new_links=len(new_links),
            )

            if page > 1 and not new_links:
                log_event(
                    self.logger,
                    "No new links, stopping pagination",
                    event="discover_stop",
                    url=url,
                    page=page,
                    reason="no_new_links",
                )
                break

        return links
