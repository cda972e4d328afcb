"""Data models for Wiki Trust page scoring."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 wiki timestamp, returning ``None`` when unusable."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except (TypeError, ValueError):
        return None
    if parsed.tzinfo is None:
        return None
    return parsed


class ContributorLevel(StrEnum):
    """Contributor trust classification levels."""
    ANONYMOUS = "anonymous"
    NEW = "new"
    INTERMEDIATE = "intermediate"
    ESTABLISHED = "established"
    RECOGNIZED = "recognized"
    UNKNOWN = "unknown"

    @property
    def is_recognized(self) -> bool:
        return self in (ContributorLevel.ESTABLISHED, ContributorLevel.RECOGNIZED)


class RiskTier(StrEnum):
    """Risk tiers derived from the final score."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class QualityLabel(StrEnum):
    """Community quality badges detected from page categories."""
    FEATURED = "featured"
    GOOD = "good"
    NONE = "none"


class Revision(BaseModel):
    """A single page revision as returned by the revision query endpoint."""
    model_config = ConfigDict(frozen=True)

    timestamp: str | None = None
    user: str = ""
    user_id: int | None = None
    comment: str = ""
    size: int | None = None
    revision_id: int | None = None
    parent_id: int | None = None
    tags: tuple[str, ...] = ()

    @property
    def parsed_timestamp(self) -> datetime | None:
        return parse_timestamp(self.timestamp)


class UserProfile(BaseModel):
    """Account metadata for a registered contributor."""
    model_config = ConfigDict(frozen=True)

    name: str
    edit_count: int = 0
    registration: str | None = None
    groups: frozenset[str] = frozenset()
    missing: bool = False

    @property
    def registered_at(self) -> datetime | None:
        return parse_timestamp(self.registration)


class CountInfo(BaseModel):
    """Result of an aggregate count endpoint.

    ``capped`` means the count hit the endpoint's ceiling and is a lower bound.
    """
    model_config = ConfigDict(frozen=True)

    count: int | None = None
    capped: bool = False

    def format(self, fallback: int) -> str:
        if self.count is None:
            return str(fallback)
        if self.capped:
            return f"{self.count}+"
        return str(self.count)


class AuthorContribution(BaseModel):
    """Added-volume summary for one of the top contributors."""
    user: str
    added_words: int = 0
    share_pct: int = 0
    level: ContributorLevel = ContributorLevel.UNKNOWN
    level_label: str = ""
    recognized: bool = False


class RecentContributor(BaseModel):
    """One of the latest revisions, shown next to the analysis."""
    user: str
    revision_id: int | None = None
    parent_id: int | None = None
    timestamp: str | None = None


class AnalysisResult(BaseModel):
    """Complete analysis of a page's revision history."""
    title: str = ""
    score: int = 0
    risk: RiskTier = RiskTier.HIGH
    base_revision_count: int = 0
    summary: str = ""
    why_reasons: str = ""
    reason_codes: list[str] = []
    top_authors: list[AuthorContribution] = []
    recent_contributors: list[RecentContributor] = []
    quality: QualityLabel = QualityLabel.NONE
    quality_label: str = ""
    total_edits: CountInfo = CountInfo()
    total_editors: CountInfo = CountInfo()
    page_age_days: int | None = None
    signals: dict[str, Any] = {}


class AnalysisFailure(BaseModel):
    """Definitive "cannot analyze" outcome for a page."""
    title: str
    reason: str
    message: str = ""
