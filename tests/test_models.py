"""Tests for data models."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from wiki_trust.models import (
    AnalysisResult,
    ContributorLevel,
    CountInfo,
    Revision,
    RiskTier,
    UserProfile,
    parse_timestamp,
)


class TestParseTimestamp:
    def test_wiki_format(self) -> None:
        assert parse_timestamp("2024-06-15T10:20:30Z") == datetime(2024, 6, 15, 10, 20, 30, tzinfo=UTC)

    @pytest.mark.parametrize("value", [None, "", "yesterday", "2024-13-01T00:00:00Z"])
    def test_unusable_values(self, value: str | None) -> None:
        assert parse_timestamp(value) is None

    def test_naive_timestamp_is_unusable(self) -> None:
        assert parse_timestamp("2024-06-15T10:20:30") is None


class TestRevision:
    def test_defaults(self) -> None:
        rev = Revision()
        assert rev.user == ""
        assert rev.user_id is None
        assert rev.size is None
        assert rev.parsed_timestamp is None

    def test_is_immutable(self) -> None:
        rev = Revision(user="Alice", size=10)
        with pytest.raises(ValidationError):
            rev.size = 20  # type: ignore[misc]


class TestUserProfile:
    def test_registered_at(self) -> None:
        profile = UserProfile(name="Alice", registration="2020-01-01T00:00:00Z")
        assert profile.registered_at == datetime(2020, 1, 1, tzinfo=UTC)

    def test_missing_profile(self) -> None:
        profile = UserProfile(name="Ghost", missing=True)
        assert profile.missing
        assert profile.edit_count == 0
        assert profile.registered_at is None


class TestContributorLevel:
    @pytest.mark.parametrize(
        ("level", "expected"),
        [
            (ContributorLevel.RECOGNIZED, True),
            (ContributorLevel.ESTABLISHED, True),
            (ContributorLevel.INTERMEDIATE, False),
            (ContributorLevel.NEW, False),
            (ContributorLevel.ANONYMOUS, False),
            (ContributorLevel.UNKNOWN, False),
        ],
    )
    def test_is_recognized(self, level: ContributorLevel, expected: bool) -> None:
        assert level.is_recognized is expected


class TestCountInfo:
    def test_exact(self) -> None:
        assert CountInfo(count=1234).format(fallback=5) == "1234"

    def test_capped(self, capped_count: CountInfo) -> None:
        assert capped_count.format(fallback=5) == "30000+"

    def test_unknown_uses_fallback(self) -> None:
        assert CountInfo().format(fallback=300) == "300"


class TestAnalysisResult:
    def test_json_round_trip(self) -> None:
        result = AnalysisResult(title="Foo", score=72, risk=RiskTier.LOW, reason_codes=["x"])
        restored = AnalysisResult.model_validate_json(result.model_dump_json())
        assert restored == result
