"""Builders shared by the Wiki Trust tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from wiki_trust.models import (
    AnalysisResult,
    AuthorContribution,
    ContributorLevel,
    QualityLabel,
    RecentContributor,
    Revision,
    RiskTier,
    UserProfile,
)

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def days_ago(days: float) -> str:
    return (NOW - timedelta(days=days)).isoformat()


def make_revision(
    user: str = "Alice",
    days: float = 400,
    user_id: int | None = 1,
    comment: str = "expand section",
    size: int | None = 1000,
    revision_id: int | None = None,
    parent_id: int | None = None,
) -> Revision:
    return Revision(
        timestamp=days_ago(days),
        user=user,
        user_id=user_id,
        comment=comment,
        size=size,
        revision_id=revision_id,
        parent_id=parent_id,
    )


def make_profile(
    name: str,
    edit_count: int = 1000,
    registered_days_ago: float | None = 2000,
    groups: tuple[str, ...] = (),
    missing: bool = False,
) -> UserProfile:
    return UserProfile(
        name=name,
        edit_count=edit_count,
        registration=days_ago(registered_days_ago) if registered_days_ago is not None else None,
        groups=frozenset(groups),
        missing=missing,
    )


def make_result(**overrides: object) -> AnalysisResult:
    defaults: dict[str, object] = {
        "title": "Alan Turing",
        "score": 72,
        "risk": RiskTier.LOW,
        "base_revision_count": 300,
        "summary": "1234 revisions | 321 contributors | 3% reverts | 12 edits in 90 days",
        "why_reasons": "main authors are recognized contributors",
        "reason_codes": ["top-authors-recognized"],
        "top_authors": [
            AuthorContribution(
                user="Alice",
                added_words=1200,
                share_pct=40,
                level=ContributorLevel.RECOGNIZED,
                level_label="recognized",
                recognized=True,
            ),
        ],
        "recent_contributors": [
            RecentContributor(user="Bob", revision_id=12, parent_id=11),
        ],
        "quality": QualityLabel.GOOD,
        "quality_label": "Good article",
        "signals": {"unique_editors": 120, "revert_ratio": 0.03},
    }
    defaults.update(overrides)
    return AnalysisResult(**defaults)  # type: ignore[arg-type]
