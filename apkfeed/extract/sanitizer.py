"""
Main-content selection and chrome stripping.

The sanitizer works in two layers:
1. Body selection: try the ordered content-container selectors, accepting
   the first candidate whose chrome-stripped HTML is long enough, then walk
   the configured fallback chain ("description", "readability", "document").
2. Chrome stripping: remove page furniture (nav, ads, sidebars, comments,
   related posts, author boxes, metadata blocks, tables and lists) from the
   selected HTML.

All parsing uses BeautifulSoup's "html.parser", which tolerates broken
markup instead of raising.
"""

from __future__ import annotations

import logging
from typing import Callable

from bs4 import BeautifulSoup
from readability import Document

from .rules import ExtractionRules

_HEADINGS = ("h1", "h2", "h3", "h4", "h5", "h6")


class Sanitizer:
    """Selects the main content of a page and strips chrome from it."""

    def __init__(self, rules: ExtractionRules | None = None, logger: logging.Logger | None = None):
        self.rules = rules or ExtractionRules()
        self.logger = logger or logging.getLogger("apkfeed.sanitizer")

    def select_body(self, soup: BeautifulSoup, raw_html: str | None = None) -> str:
        """Return the sanitized main-content HTML of a parsed page.

        Args:
            soup: The parsed page (left unmodified)
            raw_html: The raw page, needed only for the "readability" step

        Returns:
            Chrome-stripped body HTML, or "" when the page has no content
        """
        for selector in self.rules.content_selectors:
            candidate = soup.select_one(selector)
            if candidate is None:
                continue
            cleaned = self.strip_chrome(candidate.decode_contents())
            if len(cleaned.strip()) > self.rules.min_content_chars:
                self.logger.debug("Body selected by %s", selector)
                return cleaned

        for step in self.rules.body_fallback:
            fallback = self._get_fallback(step)
            if fallback is None:
                self.logger.warning("Unknown body fallback step: %s", step)
                continue
            html = fallback(soup, raw_html)
            if html and html.strip():
                self.logger.debug("Body selected by fallback %s", step)
                return self.strip_chrome(html)
        return ""

    def strip_chrome(self, html: str) -> str:
        """Remove page furniture from an HTML fragment."""
        fragment = BeautifulSoup(html, "html.parser")
        self._strip(fragment)
        return fragment.decode().strip()

    def _strip(self, root: BeautifulSoup) -> None:
        rules = self.rules
        for group in rules.chrome_selectors:
            _remove_all(root, group)
        self._remove_metadata_blocks(root)
        _remove_all(root, rules.breadcrumb_selectors)
        _remove_all(root, rules.taxonomy_selectors)
        self._remove_non_content_sections(root)
        _remove_matching_text(root, ("table",), rules.info_table_terms)
        _remove_all(root, rules.widget_selectors)
        _remove_matching_text(root, ("ul", "ol", "dl"), rules.info_list_terms)
        _remove_empty_leaves(root)

    def _remove_metadata_blocks(self, root: BeautifulSoup) -> None:
        """Remove small blocks that match several metadata fingerprints."""
        rules = self.rules
        for el in root.find_all(["div", "section", "aside"]):
            if el.decomposed:
                continue
            if len(el.decode_contents()) > rules.fingerprint_max_html:
                continue
            text = el.get_text(" ", strip=True).lower()
            hits = sum(1 for pattern in rules.fingerprints if pattern.search(text))
            if hits >= rules.fingerprint_threshold and len(text) < rules.fingerprint_max_chars:
                el.decompose()

    def _remove_non_content_sections(self, root: BeautifulSoup) -> None:
        """Remove headings like "App Details" and everything up to the next heading."""
        for heading in root.find_all(["h2", "h3", "h4", "h5"]):
            if heading.decomposed:
                continue
            text = heading.get_text(" ", strip=True).lower()
            if not any(phrase in text for phrase in self.rules.non_content_headings):
                continue
            sibling = heading.find_next_sibling()
            while sibling is not None and sibling.name not in _HEADINGS:
                following = sibling.find_next_sibling()
                sibling.decompose()
                sibling = following
            heading.decompose()

    def _get_fallback(self, name: str) -> Callable[[BeautifulSoup, str | None], str | None] | None:
        if name == "description":
            return self._fallback_description
        if name == "readability":
            return self._fallback_readability
        if name == "document":
            return _fallback_document
        return None

    def _fallback_description(self, soup: BeautifulSoup, raw_html: str | None) -> str | None:
        for selector in self.rules.description_selectors:
            found = soup.select(selector)
            if not found:
                continue
            if "~" in selector:
                # Heading followed by content: keep every sibling after it
                html = "".join(str(el) for el in found)
            else:
                html = found[0].decode_contents()
            if len(html.strip()) > self.rules.min_content_chars:
                return html
        return None

    def _fallback_readability(self, soup: BeautifulSoup, raw_html: str | None) -> str | None:
        source = raw_html if raw_html is not None else str(soup)
        try:
            summary = Document(source).summary(html_partial=True)
        except Exception as exc:  # noqa: BLE001
            self.logger.debug("Readability failed: %s", exc)
            return None
        if len(summary.strip()) > self.rules.min_content_chars:
            return summary
        return None


def _fallback_document(soup: BeautifulSoup, raw_html: str | None) -> str | None:
    """Return <main>, else <body>, else the whole document."""
    for name in ("main", "body"):
        el = soup.find(name)
        if el is not None:
            return el.decode_contents()
    return soup.decode()


def _remove_all(root: BeautifulSoup, selectors: tuple[str, ...]) -> None:
    if not selectors:
        return
    for el in root.select(", ".join(selectors)):
        if not el.decomposed:
            el.decompose()


def _remove_matching_text(
    root: BeautifulSoup,
    names: tuple[str, ...],
    term_groups: tuple[tuple[str, ...], ...],
) -> None:
    """Remove elements whose text contains every term of any group."""
    for el in root.find_all(list(names)):
        if el.decomposed:
            continue
        text = el.get_text(" ", strip=True).lower()
        if any(all(term in text for term in group) for group in term_groups):
            el.decompose()


def _remove_empty_leaves(root: BeautifulSoup) -> None:
    # Reverse document order so emptied parents are caught after their children
    for el in reversed(root.find_all(["p", "div", "span"])):
        if el.decomposed:
            continue
        if el.find(True) is None and not el.get_text(strip=True):
            el.decompose()
