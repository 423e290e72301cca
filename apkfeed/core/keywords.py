"""
Keyword extraction for similarity scoring and anchor placement.

Both the similarity scorer and the link inserter reduce text to a small set
of significant lowercase tokens. The stopword lists are immutable defaults
injected through KeywordExtractor so callers can swap in their own.
"""

from __future__ import annotations

from dataclasses import dataclass
import re

from .text import strip_html_tags

# Words that carry no topical signal on an app/game catalogue.
DEFAULT_STOPWORDS: frozenset[str] = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
        "with", "by", "is", "are", "was", "were", "been", "be", "have", "has", "had",
        "do", "does", "did", "will", "would", "should", "could", "may", "might",
        "must", "can", "this", "that", "these", "those", "i", "you", "he", "she",
        "it", "we", "they", "game", "app", "download", "android", "ios", "mobile",
        "free", "vip", "latest", "version", "apk", "mod", "premium",
    }
)

# Smaller list used when picking anchor keywords out of a target title.
TITLE_STOPWORDS: frozenset[str] = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for", "of",
        "with", "by", "is", "are", "was", "were", "game", "app", "download",
    }
)

_TOKEN_RE = re.compile(r"\w[\w'-]*", re.UNICODE)


def tokenize(text: str) -> list[str]:
    """Split text into lowercase word tokens, trimming edge punctuation."""
    return [tok.strip("'-") for tok in _TOKEN_RE.findall(text.lower()) if tok.strip("'-")]


@dataclass(frozen=True)
class KeywordExtractor:
    """Turns text into a deduplicated list of significant tokens.

    Attributes:
        stopwords: Tokens that are always dropped
        min_length: Minimum token length to keep
    """

    stopwords: frozenset[str] = DEFAULT_STOPWORDS
    min_length: int = 4

    def extract(self, text: str) -> list[str]:
        """Return keywords in first-seen order."""
        seen: set[str] = set()
        keywords: list[str] = []
        for token in tokenize(text):
            if len(token) < self.min_length or token in self.stopwords:
                continue
            if token in seen:
                continue
            seen.add(token)
            keywords.append(token)
        return keywords

    def keyword_set(self, text: str) -> frozenset[str]:
        return frozenset(self.extract(text))

    def keyword_set_from_html(self, html: str) -> frozenset[str]:
        return self.keyword_set(strip_html_tags(html))


def title_keywords(
    title: str,
    limit: int = 5,
    stopwords: frozenset[str] = TITLE_STOPWORDS,
) -> list[str]:
    """Pick up to `limit` anchor keywords from a title.

    Keeps words longer than 3 characters that are not stopwords. When none
    qualify, falls back to every word longer than 2 characters.

    Examples:
        >>> title_keywords("Turbo Racer 3D")
        ["turbo", "racer"]
    """
    words = tokenize(title)
    keywords = _dedupe([w for w in words if len(w) > 3 and w not in stopwords])[:limit]
    if not keywords:
        keywords = _dedupe([w for w in words if len(w) > 2])[:limit]
    return keywords


def _dedupe(words: list[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for word in words:
        if word not in seen:
            seen.add(word)
            out.append(word)
    return out
