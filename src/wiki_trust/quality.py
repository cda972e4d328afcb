"""Quality badge detection from page categories."""

from __future__ import annotations

from collections.abc import Iterable

from wiki_trust.models import QualityLabel

_FEATURED_MARKERS = (
    "article de qualité",
    "article de qualite",
    "article_de_qualite",
    "featured article",
)
_GOOD_MARKERS = (
    "bon article",
    "bon_article",
    "good article",
)

QUALITY_MESSAGE_KEYS: dict[QualityLabel, str] = {
    QualityLabel.FEATURED: "qualityFeatured",
    QualityLabel.GOOD: "qualityGood",
    QualityLabel.NONE: "qualityNone",
}


def detect_quality(categories: Iterable[str] | None) -> QualityLabel:
    """Featured beats good; anything else carries no badge."""
    normalized = [str(cat).lower() for cat in categories or ()]
    if any(marker in cat for cat in normalized for marker in _FEATURED_MARKERS):
        return QualityLabel.FEATURED
    if any(marker in cat for cat in normalized for marker in _GOOD_MARKERS):
        return QualityLabel.GOOD
    return QualityLabel.NONE
