"""Text helpers: slugs, hashes and tag stripping."""

from __future__ import annotations

import hashlib
import re
from urllib.parse import unquote, urlparse

_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")


def slugify(text: str, max_length: int = 100) -> str:
    """Convert text to URL-safe slug.

    Args:
        text: The text to slugify
        max_length: Maximum slug length

    Returns:
        A lowercase, hyphenated slug, "untitled" when nothing survives
    """
    slug = text.lower()
    # Replace non-alphanumeric characters with hyphens
    slug = re.sub(r"[^a-z0-9]+", "-", slug)
    slug = slug.strip("-")
    if not slug:
        slug = "untitled"
    return slug[:max_length].rstrip("-")


def short_hash(url: str) -> str:
    """Return first 5 characters of MD5 hash of URL."""
    return hashlib.md5(url.encode()).hexdigest()[:5]


def slug_from_url(url: str) -> str | None:
    """Return the last non-empty path segment of a URL, if any.

    Examples:
        >>> slug_from_url("https://apps.example.com/games/turbo-racer-3d/")
        "turbo-racer-3d"
    """
    parts = [p for p in urlparse(url).path.split("/") if p]
    if not parts:
        return None
    return unquote(parts[-1]) or None


def strip_html_tags(html: str) -> str:
    """Replace tags with spaces and collapse whitespace."""
    return normalize_whitespace(_TAG_RE.sub(" ", html))


def normalize_whitespace(text: str) -> str:
    return _WS_RE.sub(" ", text).strip()
