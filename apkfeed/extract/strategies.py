"""
Ordered extraction strategies for item fields.

Every field (title, version, size, ...) is resolved by a cascade of small
strategies. Each strategy looks at a PageContext and returns a Match; the
first matched value wins. Keeping the cascade as data lets each step be
tested on its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import cached_property
import re
from typing import Callable, Iterable
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

from ..core.text import normalize_whitespace, strip_html_tags


@dataclass
class Match:
    """Outcome of one strategy: the value found and which strategy found it."""
    value: str | None
    matched: bool
    strategy: str = ""

    @classmethod
    def miss(cls, strategy: str = "") -> "Match":
        return cls(value=None, matched=False, strategy=strategy)


@dataclass
class PageContext:
    """Everything a strategy may look at for one item page.

    Attributes:
        soup: The full parsed page
        url: Page URL, used to resolve relative links
        title: Resolved title, empty until the title cascade has run
        body_html: Sanitized body HTML, empty until body selection has run
    """
    soup: BeautifulSoup
    url: str
    title: str = ""
    body_html: str = ""

    @property
    def text(self) -> str:
        """Lowercased title + body text scanned by regex strategies."""
        return f"{self.title} {strip_html_tags(self.body_html)}".lower()

    @cached_property
    def rows(self) -> list[tuple[str, str]]:
        """(label, value) pairs from tables, definition lists and info grids."""
        pairs: list[tuple[str, str]] = []
        for tr in self.soup.select("table tr"):
            cells = tr.find_all(["th", "td"], recursive=False)
            if len(cells) >= 2:
                pairs.append((_text(cells[0]).lower(), _text(cells[1])))
        for dt in self.soup.select("dl dt"):
            dd = dt.find_next_sibling("dd")
            if dd is not None:
                pairs.append((_text(dt).lower(), _text(dd)))
        for div in self.soup.select(".app-info div"):
            nxt = div.find_next_sibling()
            if nxt is not None:
                pairs.append((_text(div).lower(), _text(nxt)))
        return pairs


Strategy = Callable[[PageContext], Match]


def run_strategies(ctx: PageContext, strategies: Iterable[Strategy]) -> Match:
    """Run strategies in order and return the first match (or a miss)."""
    for strategy in strategies:
        result = strategy(ctx)
        if result.matched and result.value:
            return result
    return Match.miss()


def _text(el: Tag) -> str:
    return normalize_whitespace(el.get_text(" ", strip=True))


# Title

_SITE_SUFFIX_RE = re.compile(r"\s+[-|–—]\s+[^-|–—]+$")


def title_from_h1(ctx: PageContext) -> Match:
    h1 = ctx.soup.find("h1")
    value = _text(h1) if h1 is not None else ""
    return Match(value, bool(value), "h1")


def title_from_title_tag(ctx: PageContext) -> Match:
    """Use <title>, trimmed of a trailing " - Site Name" suffix."""
    tag = ctx.soup.find("title")
    value = _text(tag) if tag is not None else ""
    value = _SITE_SUFFIX_RE.sub("", value).strip()
    return Match(value, bool(value), "title_tag")


def title_from_entry_title(ctx: PageContext) -> Match:
    el = ctx.soup.select_one(".entry-title")
    value = _text(el) if el is not None else ""
    return Match(value, bool(value), "entry_title")


TITLE_STRATEGIES: tuple[Strategy, ...] = (
    title_from_h1,
    title_from_title_tag,
    title_from_entry_title,
)


# Structured rows, then regex over text


def row_value(label: str, pattern: re.Pattern[str], fmt: Callable[[re.Match[str]], str]) -> Strategy:
    """Build a strategy reading the value next to a row label containing `label`."""

    def strategy(ctx: PageContext) -> Match:
        for row_label, value in ctx.rows:
            if label not in row_label:
                continue
            found = pattern.search(value)
            if found:
                return Match(fmt(found), True, f"row:{label}")
        return Match.miss(f"row:{label}")

    return strategy


def text_pattern(name: str, pattern: re.Pattern[str], fmt: Callable[[re.Match[str]], str]) -> Strategy:
    """Build a strategy matching `pattern` anywhere in the title + body text."""

    def strategy(ctx: PageContext) -> Match:
        found = pattern.search(ctx.text)
        if found:
            return Match(fmt(found), True, f"text:{name}")
        return Match.miss(f"text:{name}")

    return strategy


def _group(n: int = 1) -> Callable[[re.Match[str]], str]:
    return lambda m: m.group(n)


def _size(m: re.Match[str]) -> str:
    return f"{m.group(1)} {m.group(2).upper()}"


def _android(m: re.Match[str]) -> str:
    return f"Android {m.group(1)}"


_VERSION_VALUE = re.compile(r"v?(\d+(?:\.\d+)+)", re.I)
_SIZE_VALUE = re.compile(r"(\d+(?:\.\d+)?)\s*(mb|gb|kb)", re.I)
_ANDROID_VALUE = re.compile(r"android\s+(\d+(?:\.\d+)*\+?)", re.I)
_DOWNLOADS_VALUE = re.compile(r"(\d+(?:[.,]\d+)?[kmb]?\+?)", re.I)

VERSION_STRATEGIES: tuple[Strategy, ...] = (
    row_value("version", _VERSION_VALUE, _group()),
    text_pattern("v_prefix", re.compile(r"\bv(\d+(?:\.\d+)+)"), _group()),
    text_pattern("version_label", re.compile(r"version[:\s]+v?(\d+(?:\.\d+)+)"), _group()),
    text_pattern("bare_semver", re.compile(r"\b(\d+\.\d+\.\d+)\b"), _group()),
)

SIZE_STRATEGIES: tuple[Strategy, ...] = (
    row_value("size", _SIZE_VALUE, _size),
    text_pattern("size_label", re.compile(r"size[:\s]+(\d+(?:\.\d+)?)\s*(mb|gb|kb)\b"), _size),
    text_pattern("size", re.compile(r"(\d+(?:\.\d+)?)\s*(mb|gb|kb)\b"), _size),
)

REQUIREMENTS_STRATEGIES: tuple[Strategy, ...] = (
    row_value("requirement", _ANDROID_VALUE, _android),
    text_pattern("requires", re.compile(r"requires?\s+android\s+(\d+(?:\.\d+)*\+?)"), _android),
    text_pattern("or_higher", re.compile(r"android\s+(\d+(?:\.\d+)*)\s*or\s*higher"), lambda m: f"Android {m.group(1)}+"),
    text_pattern("android", _ANDROID_VALUE, _android),
)

DOWNLOADS_STRATEGIES: tuple[Strategy, ...] = (
    row_value("downloads", _DOWNLOADS_VALUE, lambda m: m.group(1).upper()),
    text_pattern(
        "downloads",
        re.compile(r"(\d+(?:[.,]\d+)?[kmb]?\+?)\s*(?:downloads?|users?)\b"),
        lambda m: m.group(1).upper(),
    ),
)


# Developer

DEVELOPER_SELECTORS: tuple[str, ...] = (
    ".developer a",
    ".author a",
    'a[rel="author"]',
    ".post-author a",
    ".entry-author a",
)


def developer_from_rows(ctx: PageContext) -> Match:
    for label, value in ctx.rows:
        if "developer" in label and value:
            return Match(value, True, "row:developer")
    return Match.miss("row:developer")


def developer_from_selectors(ctx: PageContext) -> Match:
    for selector in DEVELOPER_SELECTORS:
        el = ctx.soup.select_one(selector)
        if el is not None and _text(el):
            return Match(_text(el), True, f"selector:{selector}")
    return Match.miss("selector:developer")


DEVELOPER_STRATEGIES: tuple[Strategy, ...] = (developer_from_rows, developer_from_selectors)


# Download link

_SKIP_HREF_PREFIXES = ("#", "javascript:")


def download_link(ctx: PageContext) -> Match:
    """First anchor whose text or href mentions download/apk, made absolute."""
    for a in ctx.soup.find_all("a", href=True):
        href = a["href"].strip()
        if not href or href.lower().startswith(_SKIP_HREF_PREFIXES):
            continue
        text = a.get_text(" ", strip=True).lower()
        lowered = href.lower()
        if "download" in text or "apk" in text or ".apk" in lowered or "download" in lowered:
            try:
                return Match(urljoin(ctx.url, href), True, "anchor")
            except ValueError:
                continue
    return Match.miss("anchor")


# Meta tags


def _meta(soup: BeautifulSoup, **attrs: str) -> str:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return ""
    return (tag.get("content") or "").strip()


def meta_description(ctx: PageContext) -> Match:
    value = _meta(ctx.soup, name="description") or _meta(ctx.soup, property="og:description")
    return Match(value, bool(value), "meta")


def meta_keywords(soup: BeautifulSoup) -> list[str]:
    raw = _meta(soup, name="keywords")
    return [k.strip() for k in raw.split(",") if k.strip()]


# Featured image


def featured_from_meta(ctx: PageContext) -> Match:
    value = _meta(ctx.soup, property="og:image") or _meta(ctx.soup, name="twitter:image")
    return Match(value, bool(value), "meta_image")


def featured_from_selector(selector: str) -> Strategy:
    def strategy(ctx: PageContext) -> Match:
        img = ctx.soup.select_one(selector)
        if img is None:
            return Match.miss(selector)
        value = (img.get("src") or img.get("data-src") or "").strip()
        return Match(value, bool(value), selector)

    return strategy


FEATURED_IMAGE_STRATEGIES: tuple[Strategy, ...] = (
    featured_from_meta,
    featured_from_selector(".featured-image img"),
    featured_from_selector(".post-thumbnail img"),
    featured_from_selector("article img"),
    featured_from_selector(".entry-content img"),
)


@dataclass
class FieldStrategies:
    """The strategy cascades used by ItemExtractor, one per field."""
    title: tuple[Strategy, ...] = TITLE_STRATEGIES
    version: tuple[Strategy, ...] = VERSION_STRATEGIES
    size: tuple[Strategy, ...] = SIZE_STRATEGIES
    requirements: tuple[Strategy, ...] = REQUIREMENTS_STRATEGIES
    downloads: tuple[Strategy, ...] = DOWNLOADS_STRATEGIES
    developer: tuple[Strategy, ...] = DEVELOPER_STRATEGIES
    download_link: tuple[Strategy, ...] = (download_link,)
    meta_description: tuple[Strategy, ...] = (meta_description,)
    featured_image: tuple[Strategy, ...] = FEATURED_IMAGE_STRATEGIES
