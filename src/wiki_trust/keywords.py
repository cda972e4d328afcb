"""Edit-summary keyword policy.

Each keyword maps to the signal it raises. Matching is a case-insensitive
substring test; revert keywords also count as dispute signals.
"""

from __future__ import annotations

from enum import StrEnum


class KeywordCategory(StrEnum):
    REVERT = "revert"
    DISPUTE = "dispute"


KEYWORD_POLICY: dict[str, KeywordCategory] = {
    # Reverts (English / French)
    "revert": KeywordCategory.REVERT,
    "undid": KeywordCategory.REVERT,
    "undo": KeywordCategory.REVERT,
    "rv": KeywordCategory.REVERT,
    "rollback": KeywordCategory.REVERT,
    "annulation": KeywordCategory.REVERT,
    "révocation": KeywordCategory.REVERT,
    # Disputes
    "pov": KeywordCategory.DISPUTE,
    "neutral": KeywordCategory.DISPUTE,
    "bias": KeywordCategory.DISPUTE,
    "biais": KeywordCategory.DISPUTE,
    "propaganda": KeywordCategory.DISPUTE,
    "propagande": KeywordCategory.DISPUTE,
    "vandalism": KeywordCategory.DISPUTE,
    "vandalisme": KeywordCategory.DISPUTE,
    "controvers": KeywordCategory.DISPUTE,
}


def keywords_for(category: KeywordCategory) -> tuple[str, ...]:
    """Return every keyword that raises *category*."""
    if category == KeywordCategory.DISPUTE:
        return tuple(KEYWORD_POLICY)
    return tuple(word for word, cat in KEYWORD_POLICY.items() if cat == category)


REVERT_KEYWORDS = keywords_for(KeywordCategory.REVERT)
DISPUTE_KEYWORDS = keywords_for(KeywordCategory.DISPUTE)


def matches(comment: str | None, keywords: tuple[str, ...]) -> bool:
    """True if any keyword occurs in *comment*, ignoring case."""
    if not comment:
        return False
    text = comment.lower()
    return any(word in text for word in keywords)


def is_revert(comment: str | None) -> bool:
    return matches(comment, REVERT_KEYWORDS)


def is_dispute(comment: str | None) -> bool:
    return matches(comment, DISPUTE_KEYWORDS)
