"""
Lexical similarity between items.

Scores are a Dice coefficient over keyword sets: 2|A∩B| / (|A| + |B|). It
weights shared terms against the average set size rather than the union,
so short titles are not penalised as heavily as under Jaccard.
"""

from __future__ import annotations

from typing import Iterable

from ..core.keywords import KeywordExtractor
from ..core.text import strip_html_tags
from ..core.types import ContentItem, RelatedItemScore


def dice(a: frozenset[str], b: frozenset[str]) -> float:
    if not a or not b:
        return 0.0
    return 2 * len(a & b) / (len(a) + len(b))


def item_text(item: ContentItem) -> str:
    return f"{item.title} {strip_html_tags(item.body_html)}"


class SimilarityScorer:
    """Ranks candidate items against a target by keyword overlap.

    Args:
        extractor: Keyword extractor (stopwords, minimum length)
        relevance_floor: Only scores strictly above this are kept
    """

    def __init__(self, extractor: KeywordExtractor | None = None, relevance_floor: float = 0.1):
        self.extractor = extractor or KeywordExtractor()
        self.relevance_floor = relevance_floor

    def score(self, text_a: str, text_b: str) -> float:
        """Score two texts (HTML allowed) in [0, 1]."""
        return dice(
            self.extractor.keyword_set_from_html(text_a),
            self.extractor.keyword_set_from_html(text_b),
        )

    def find_related(
        self,
        target: ContentItem,
        candidates: Iterable[ContentItem],
        max_links: int = 3,
    ) -> list[RelatedItemScore]:
        """Return the best-matching published candidates, highest score first."""
        target_keywords = self.extractor.keyword_set(item_text(target))
        scored: list[RelatedItemScore] = []
        for candidate in candidates:
            if candidate.id == target.id or not candidate.is_published:
                continue
            value = dice(target_keywords, self.extractor.keyword_set(item_text(candidate)))
            if value > self.relevance_floor:
                scored.append(
                    RelatedItemScore(
                        item_id=candidate.id,
                        title=candidate.title,
                        slug=candidate.slug,
                        score=value,
                    )
                )
        # sorted() is stable, so equal scores keep candidate order
        scored = sorted(scored, key=lambda s: s.score, reverse=True)
        return scored[:max_links]
