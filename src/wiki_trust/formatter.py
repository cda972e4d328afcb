"""Output formatting for Wiki Trust analyses."""

from __future__ import annotations

import click

from wiki_trust.i18n import MessageCatalog, Translator
from wiki_trust.models import AnalysisFailure, AnalysisResult, ContributorLevel, RiskTier
from wiki_trust.scorer import RISK_MESSAGE_KEYS, level_message_key

_RISK_COLORS: dict[RiskTier, str] = {
    RiskTier.LOW: "green",
    RiskTier.MEDIUM: "yellow",
    RiskTier.HIGH: "red",
}

_LEVEL_COLORS: dict[ContributorLevel, str] = {
    ContributorLevel.RECOGNIZED: "green",
    ContributorLevel.ESTABLISHED: "green",
    ContributorLevel.INTERMEDIATE: "white",
    ContributorLevel.NEW: "yellow",
    ContributorLevel.ANONYMOUS: "yellow",
    ContributorLevel.UNKNOWN: "white",
}


def format_cli_output(
    result: AnalysisResult,
    verbose: bool = False,
    translate: Translator | None = None,
) -> str:
    """Format an analysis for terminal display with color."""
    t = translate or MessageCatalog()
    color = _RISK_COLORS.get(result.risk, "white")
    score_styled = click.style(t("labelConfidence", [str(result.score)]), bold=True)
    risk_styled = click.style(t(RISK_MESSAGE_KEYS[result.risk]), fg=color, bold=True)

    lines: list[str] = [
        f"{result.title}: {score_styled} {risk_styled}",
        result.summary,
        t("labelQuality", [result.quality_label or t("qualityNone")]),
    ]

    if result.why_reasons:
        lines.append(t("whyPrefix", [result.why_reasons]))

    lines.append("")
    lines.append(t("labelTopContributors"))
    if result.top_authors:
        for author in result.top_authors:
            level = click.style(author.level_label, fg=_LEVEL_COLORS.get(author.level, "white"))
            lines.append(
                f"  {author.user}: {author.added_words} {t('wordsAddedUnit')}"
                f" ({author.share_pct}%) [{level}]"
            )
    else:
        lines.append(f"  {t('noContributorData')}")

    lines.append(t("labelRecentContributors"))
    if result.recent_contributors:
        for contributor in result.recent_contributors:
            revision = f" (r{contributor.revision_id})" if contributor.revision_id else ""
            lines.append(f"  {contributor.user}{revision}")
    else:
        lines.append(f"  {t('noContributorData')}")

    lines.append("")
    lines.append(t("noteBaseScore", [str(result.base_revision_count)]))

    if verbose:
        if result.reason_codes:
            lines.append("")
            lines.append("Reasons:")
            for code in result.reason_codes:
                lines.append(f"  - {code}")
        if result.signals:
            lines.append("")
            lines.append("Signals:")
            for key, value in result.signals.items():
                lines.append(f"  {key}: {value}")

    return "\n".join(lines)


def format_failure(failure: AnalysisFailure) -> str:
    """One-line failure message; the presentation never shows partial data."""
    return f"{failure.title}: {failure.message or failure.reason}"


def format_level(
    username: str,
    level: ContributorLevel,
    translate: Translator | None = None,
) -> str:
    t = translate or MessageCatalog()
    styled = click.style(t(level_message_key(level)), fg=_LEVEL_COLORS.get(level, "white"), bold=True)
    return f"{username}: {styled}"


def format_json(result: AnalysisResult | AnalysisFailure) -> str:
    """Format an analysis or a failure as JSON."""
    return result.model_dump_json(indent=2)
