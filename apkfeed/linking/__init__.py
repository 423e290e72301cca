"""
Internal linking between stored items.

Similarity scoring picks related items; the inserter places anchors to
them at safe positions in body HTML.
"""

from .auto_link import InternalLinker, update_meta_description
from .inserter import LinkInserter
from .similarity import SimilarityScorer, dice

__all__ = [
    "InternalLinker",
    "update_meta_description",
    "LinkInserter",
    "SimilarityScorer",
    "dice",
]
