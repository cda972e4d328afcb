"""Page trust scoring from revision history heuristics."""

from __future__ import annotations

import asyncio
import logging
import math
from collections import Counter
from collections.abc import Awaitable, Callable, Mapping, Sequence
from datetime import UTC, datetime, timedelta
from typing import Any

from wiki_trust.cache import Cache
from wiki_trust.classifier import classify_contributor, is_anonymous
from wiki_trust.config import WikiTrustConfig, load_config
from wiki_trust.exceptions import InsufficientDataError, PageMissingError, WikiTrustError
from wiki_trust.i18n import MessageCatalog, Translator
from wiki_trust.keywords import is_dispute, is_revert
from wiki_trust.models import (
    AnalysisFailure,
    AnalysisResult,
    AuthorContribution,
    ContributorLevel,
    CountInfo,
    RecentContributor,
    Revision,
    RiskTier,
    UserProfile,
)
from wiki_trust.quality import QUALITY_MESSAGE_KEYS, detect_quality

logger = logging.getLogger(__name__)

REASON_VERY_RECENT_LOW_HISTORY = "very-recent-low-history"
REASON_RECENT_LIMITED_HISTORY = "recent-limited-history"
REASON_YOUNG_PARTIAL_HISTORY = "young-partial-history"
REASON_HIGH_ACTIVITY_RECENT_WINDOW = "high-activity-recent-window"
REASON_SUDDEN_ACCELERATION = "sudden-acceleration"
REASON_EDIT_WAR_IN_WINDOW = "edit-war-in-window"
REASON_TOP_AUTHORS_RECOGNIZED = "top-authors-recognized"
REASON_TOP_AUTHORS_UNRECOGNIZED = "top-authors-unrecognized"
REASON_MANY_NEW_EDITORS_IN_WINDOW = "many-new-editors-in-window"

REASON_MESSAGE_KEYS: dict[str, str] = {
    REASON_VERY_RECENT_LOW_HISTORY: "reasonVeryRecentLowHistory",
    REASON_RECENT_LIMITED_HISTORY: "reasonRecentLimitedHistory",
    REASON_YOUNG_PARTIAL_HISTORY: "reasonYoungPartialHistory",
    REASON_HIGH_ACTIVITY_RECENT_WINDOW: "reasonHighActivity3Months",
    REASON_SUDDEN_ACCELERATION: "reasonSuddenAcceleration3Months",
    REASON_EDIT_WAR_IN_WINDOW: "reasonEditWar3Months",
    REASON_TOP_AUTHORS_RECOGNIZED: "reasonTopAuthorsRecognized",
    REASON_TOP_AUTHORS_UNRECOGNIZED: "reasonTopAuthorsUnrecognized",
    REASON_MANY_NEW_EDITORS_IN_WINDOW: "reasonManyNewEditorsInWindow",
}

RISK_MESSAGE_KEYS: dict[RiskTier, str] = {
    RiskTier.LOW: "riskLow",
    RiskTier.MEDIUM: "riskMedium",
    RiskTier.HIGH: "riskHigh",
}

FAILURE_NO_REVISIONS = "no-revisions"
FAILURE_PAGE_MISSING = "page-missing"
FAILURE_API_ERROR = "api-error"
FAILURE_INVALID_TITLE = "invalid-title"


def _ratio(value: float, total: float) -> float:
    return value / total if total else 0.0


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def level_message_key(level: ContributorLevel) -> str:
    return f"level{level.value.capitalize()}"


class RevisionAnalyzer:
    """Combine revision-history heuristics into a bounded trust score.

    The analyzer performs no I/O. Given the same inputs and the same *now*
    it always returns the same result.
    """

    def __init__(
        self,
        config: WikiTrustConfig | None = None,
        translate: Translator | None = None,
    ) -> None:
        self.config = config if config is not None else WikiTrustConfig()
        self._t: Translator = translate or MessageCatalog(self.config.language)

    def analyze(
        self,
        revisions: Sequence[Revision],
        first_revision: Revision | None = None,
        total_edits: CountInfo | None = None,
        total_editors: CountInfo | None = None,
        profiles: Mapping[str, UserProfile] | None = None,
        now: datetime | None = None,
    ) -> AnalysisResult:
        """Score a page from its most recent revisions."""
        scoring = self.config.scoring
        if now is None:
            now = datetime.now(UTC)
        profiles = profiles or {}
        total_edits = total_edits or CountInfo()
        total_editors = total_editors or CountInfo()
        masked_user = self._t("maskedUser")
        total = len(revisions)

        recent_span = timedelta(days=scoring.recent_days)
        window_span = timedelta(days=scoring.window_days)
        previous_span = window_span * 2

        levels: dict[tuple[str, int | None], ContributorLevel] = {}

        def level_for(user: str, user_id: int | None) -> ContributorLevel:
            memo_key = (user, user_id)
            if memo_key not in levels:
                levels[memo_key] = classify_contributor(
                    user, user_id, profiles, now=now, config=self.config.classifier
                )
            return levels[memo_key]

        # ---- Per-revision tally ----
        editor_counts: Counter[str] = Counter()
        editor_ids: dict[str, int | None] = {}
        anonymous_edits = 0
        revert_edits = 0
        dispute_edits = 0
        recent_edits = 0
        window_edits = 0
        window_reverts = 0
        window_newcomers = 0
        window_recognized = 0
        previous_window_edits = 0

        for rev in revisions:
            user = rev.user.strip() or masked_user
            editor_counts[user] += 1
            editor_ids.setdefault(user, rev.user_id)

            if is_anonymous(rev.user, rev.user_id):
                anonymous_edits += 1
            reverted = is_revert(rev.comment)
            if reverted:
                revert_edits += 1
            if is_dispute(rev.comment):
                dispute_edits += 1

            timestamp = rev.parsed_timestamp
            if timestamp is None:
                continue
            age = now - timestamp
            if age <= recent_span:
                recent_edits += 1
            if age <= window_span:
                window_edits += 1
                if reverted:
                    window_reverts += 1
                level = level_for(rev.user.strip(), rev.user_id)
                if level == ContributorLevel.NEW:
                    window_newcomers += 1
                elif level.is_recognized:
                    window_recognized += 1
            elif age <= previous_span:
                previous_window_edits += 1

        # ---- Chronological pass: positive size deltas per author ----
        dated: list[tuple[datetime, Revision]] = []
        for rev in revisions:
            timestamp = rev.parsed_timestamp
            if timestamp is not None:
                dated.append((timestamp, rev))
        dated.sort(key=lambda item: item[0])
        added_chars: dict[str, int] = {}
        previous_size: int | None = None
        for _, rev in dated:
            if rev.size is None:
                continue
            if previous_size is not None:
                delta = rev.size - previous_size
                if delta > 0:
                    user = rev.user.strip() or masked_user
                    added_chars[user] = added_chars.get(user, 0) + delta
            previous_size = rev.size

        # ---- Ratios ----
        unique_editors = len(editor_counts)
        top_editor_edits = max(editor_counts.values(), default=0)
        anon_ratio = _ratio(anonymous_edits, total)
        revert_ratio = _ratio(revert_edits, total)
        dispute_ratio = _ratio(dispute_edits, total)
        recent_ratio = _ratio(recent_edits, total)
        top_editor_share = _ratio(top_editor_edits, total)
        window_ratio = _ratio(window_edits, total)
        window_denominator = max(1, window_edits)
        window_revert_ratio = window_reverts / window_denominator
        window_newcomer_ratio = window_newcomers / window_denominator
        window_recognized_ratio = window_recognized / window_denominator

        # ---- Page age ----
        created_at = first_revision.parsed_timestamp if first_revision is not None else None
        page_age_days = (now - created_at).days if created_at is not None else None
        is_new_page = page_age_days is not None and page_age_days <= scoring.new_page_days

        # ---- Top authors by added volume ----
        top_authors, recognized_share = self._rank_authors(added_chars, editor_ids, level_for)

        # ---- Score ----
        score = scoring.base_score
        reasons: list[str] = []

        if unique_editors >= 40:
            score += 8
        if unique_editors >= 100:
            score += 4
        if top_editor_share > 0.22:
            score -= 14
        if top_editor_share > 0.35:
            score -= 8
        if anon_ratio > 0.3:
            score -= 8
        if revert_ratio > 0.18:
            score -= 14
        if revert_ratio > 0.3:
            score -= 8
        if dispute_ratio > 0.1:
            score -= 8
        if recent_ratio > 0.55:
            score -= 10
        if total >= 200 and unique_editors >= 80 and top_editor_share < 0.12:
            score += 8
        if recognized_share >= 0.55:
            score += 10
        if recognized_share < 0.25 and len(top_authors) >= 3:
            score -= 14
        if window_recognized_ratio >= 0.45 and window_edits >= 20:
            score += 6
        if window_newcomer_ratio >= 0.35 and window_edits >= 20:
            score -= 12
        if window_newcomer_ratio >= 0.55 and window_edits >= 35:
            score -= 8

        if is_new_page and page_age_days is not None:
            if total < 20 and page_age_days <= 30:
                score -= 40
                reasons.append(REASON_VERY_RECENT_LOW_HISTORY)
            elif total < 60 and page_age_days <= 90:
                score -= 28
                reasons.append(REASON_RECENT_LIMITED_HISTORY)
            elif total < 90:
                score -= 16
                reasons.append(REASON_YOUNG_PARTIAL_HISTORY)
        else:
            if window_edits >= 80 and window_ratio > 0.55:
                score -= 24
                reasons.append(REASON_HIGH_ACTIVITY_RECENT_WINDOW)
            if (
                window_edits >= 45
                and previous_window_edits > 0
                and window_edits / previous_window_edits >= 1.8
            ):
                score -= 14
                reasons.append(REASON_SUDDEN_ACCELERATION)
            if window_edits >= 25 and window_revert_ratio >= 0.22:
                score -= 14
                reasons.append(REASON_EDIT_WAR_IN_WINDOW)

        if recognized_share >= 0.55 and len(top_authors) >= 2:
            reasons.append(REASON_TOP_AUTHORS_RECOGNIZED)
        if recognized_share < 0.25 and len(top_authors) >= 3:
            reasons.append(REASON_TOP_AUTHORS_UNRECOGNIZED)
        if window_newcomer_ratio >= 0.35 and window_edits >= 20:
            reasons.append(REASON_MANY_NEW_EDITORS_IN_WINDOW)

        score = max(0, min(100, _round_half_up(score)))
        risk = self._risk_tier(score)

        # ---- Summary and evidence ----
        summary_parts = [
            self._t("summaryRevisions", [total_edits.format(total)]),
            self._t("summaryContributors", [total_editors.format(unique_editors)]),
            self._t("summaryReverts", [str(_round_half_up(revert_ratio * 100))]),
            self._t("summaryEdits90Days", [str(window_edits)]),
        ]
        if is_new_page:
            summary_parts.append(self._t("summaryPageAgeDays", [str(page_age_days)]))

        why = [
            self._t(REASON_MESSAGE_KEYS[code])
            for code in reasons[: scoring.max_why_reasons]
        ]

        signals: dict[str, Any] = {
            "unique_editors": unique_editors,
            "top_editor_share": round(top_editor_share, 4),
            "anonymous_ratio": round(anon_ratio, 4),
            "revert_ratio": round(revert_ratio, 4),
            "dispute_ratio": round(dispute_ratio, 4),
            "recent_ratio": round(recent_ratio, 4),
            "window_edits": window_edits,
            "previous_window_edits": previous_window_edits,
            "window_ratio": round(window_ratio, 4),
            "window_revert_ratio": round(window_revert_ratio, 4),
            "window_newcomer_ratio": round(window_newcomer_ratio, 4),
            "window_recognized_ratio": round(window_recognized_ratio, 4),
            "recognized_volume_share": round(recognized_share, 4),
            "is_new_page": is_new_page,
        }

        return AnalysisResult(
            score=score,
            risk=risk,
            base_revision_count=total,
            summary=" | ".join(summary_parts),
            why_reasons=" ; ".join(why),
            reason_codes=reasons,
            top_authors=top_authors,
            total_edits=total_edits,
            total_editors=total_editors,
            page_age_days=page_age_days,
            signals=signals,
        )

    def _rank_authors(
        self,
        added_chars: dict[str, int],
        editor_ids: dict[str, int | None],
        level_for: Callable[[str, int | None], ContributorLevel],
    ) -> tuple[list[AuthorContribution], float]:
        """Rank authors by added volume and measure the recognized share.

        Share percentages are taken over the volume added by all editors.
        """
        scoring = self.config.scoring
        total_added = sum(added_chars.values())
        ranked = sorted(added_chars.items(), key=lambda item: item[1], reverse=True)
        ranked = ranked[: scoring.top_authors]

        authors: list[AuthorContribution] = []
        top_volume = 0
        recognized_volume = 0
        for user, chars in ranked:
            level = level_for(user, editor_ids.get(user))
            top_volume += chars
            if level.is_recognized:
                recognized_volume += chars
            authors.append(
                AuthorContribution(
                    user=user,
                    added_words=self._estimate_words(chars),
                    share_pct=(
                        _round_half_up(chars / total_added * 100) if total_added > 0 else 0
                    ),
                    level=level,
                    level_label=self._t(level_message_key(level)),
                    recognized=level.is_recognized,
                )
            )
        return authors, _ratio(recognized_volume, top_volume)

    def _estimate_words(self, chars: int) -> int:
        if chars <= 0:
            return 0
        return _round_half_up(chars / self.config.scoring.chars_per_word)

    def _risk_tier(self, score: int) -> RiskTier:
        scoring = self.config.scoring
        if score >= scoring.low_risk_min:
            return RiskTier.LOW
        if score >= scoring.medium_risk_min:
            return RiskTier.MEDIUM
        return RiskTier.HIGH


def normalize_title(title: str) -> str:
    """Turn a URL-style title (``Foo_bar``) into its display form."""
    return " ".join(title.replace("_", " ").split())


async def _gather_or_cancel(*aws: Awaitable[Any]) -> list[Any]:
    """Run awaitables concurrently; on the first failure cancel the rest."""
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def _run_analysis(
    client: Any,
    title: str,
    config: WikiTrustConfig,
    translate: Translator,
    now: datetime | None,
) -> AnalysisResult:
    (
        revisions,
        first_revision,
        latest_revisions,
        total_edits,
        total_editors,
        categories,
    ) = await _gather_or_cancel(
        client.fetch_revision_meta(title),
        client.fetch_first_revision(title),
        client.fetch_latest_revisions(title),
        client.fetch_total_edit_count(title),
        client.fetch_total_editor_count(title),
        client.fetch_categories(title),
    )

    if not revisions:
        raise InsufficientDataError(f"No revisions for {title}")

    profiles = await client.fetch_user_profiles(rev.user for rev in revisions)

    analyzer = RevisionAnalyzer(config, translate)
    result = analyzer.analyze(
        revisions,
        first_revision,
        total_edits,
        total_editors,
        profiles,
        now=now,
    )

    quality = detect_quality(categories)
    recent = [
        RecentContributor(
            user=rev.user.strip() or translate("unknownUser"),
            revision_id=rev.revision_id,
            parent_id=rev.parent_id,
            timestamp=rev.timestamp,
        )
        for rev in latest_revisions
    ]
    return result.model_copy(update={
        "title": title,
        "quality": quality,
        "quality_label": translate(QUALITY_MESSAGE_KEYS[quality]),
        "recent_contributors": recent,
    })


async def produce_analysis(
    title: str,
    config: WikiTrustConfig | None = None,
    cache: Cache | None = None,
    translate: Translator | None = None,
    client: Any | None = None,
    now: datetime | None = None,
) -> AnalysisResult | AnalysisFailure:
    """Fetch everything needed for *title* and score it.

    Returns an :class:`AnalysisFailure` instead of raising when the page
    cannot be analyzed; partial results are never returned.

    Parameters
    ----------
    title:
        Page title, in display or URL form.
    config:
        Optional configuration; defaults are loaded when *None*.
    cache:
        Optional :class:`~wiki_trust.cache.Cache` shared across analyses.
    translate:
        Message lookup; defaults to the catalog for ``config.language``.
    client:
        Optional pre-built :class:`~wiki_trust.wiki_client.WikiClient`. It is
        not closed here.
    """
    from wiki_trust.wiki_client import WikiClient

    if config is None:
        config = load_config()
    if translate is None:
        translate = MessageCatalog(config.language)

    normalized = normalize_title(title)
    if not normalized:
        return AnalysisFailure(
            title=title,
            reason=FAILURE_INVALID_TITLE,
            message=translate("errorUnableScore"),
        )

    try:
        if client is not None:
            return await _run_analysis(client, normalized, config, translate, now)
        async with WikiClient(config=config, cache=cache) as owned_client:
            return await _run_analysis(owned_client, normalized, config, translate, now)
    except InsufficientDataError:
        logger.info("No revisions to score for %r", normalized)
        return AnalysisFailure(
            title=normalized,
            reason=FAILURE_NO_REVISIONS,
            message=translate("errorUnableScore"),
        )
    except PageMissingError:
        logger.warning("Page %r does not exist", normalized)
        return AnalysisFailure(
            title=normalized,
            reason=FAILURE_PAGE_MISSING,
            message=translate("errorPageMissing"),
        )
    except WikiTrustError as exc:
        logger.error("Analysis of %r failed: %s", normalized, exc)
        return AnalysisFailure(
            title=normalized,
            reason=FAILURE_API_ERROR,
            message=translate("errorAnalysisUnavailable"),
        )


async def classify_user(
    username: str,
    config: WikiTrustConfig | None = None,
    cache: Cache | None = None,
) -> tuple[ContributorLevel, UserProfile | None]:
    """Look up a single account and classify it.

    IP addresses are classified as anonymous without a lookup.
    """
    from wiki_trust.wiki_client import WikiClient

    if config is None:
        config = load_config()

    name = username.strip()
    async with WikiClient(config=config, cache=cache) as client:
        profiles = await client.fetch_user_profiles([name])

    level = classify_contributor(name, None, profiles, config=config.classifier)
    return level, profiles.get(name.lower())
