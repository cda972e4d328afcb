"""Contributor trust classification from account metadata."""

from __future__ import annotations

import ipaddress
import re
from collections.abc import Mapping
from datetime import UTC, datetime

from wiki_trust.config import ClassifierConfig
from wiki_trust.models import ContributorLevel, UserProfile

_IPV4_RE = re.compile(r"^\d{1,3}(\.\d{1,3}){3}$")

_DEFAULT_CONFIG = ClassifierConfig()


def _normalize_group(group: str) -> str:
    return group.lower().replace("-", "").replace("_", "")


def is_ip_literal(name: str) -> bool:
    """True for IPv4 or IPv6 address literals."""
    try:
        ipaddress.ip_address(name.strip())
    except ValueError:
        return False
    return True


def is_anonymous(username: str | None, user_id: int | None) -> bool:
    """Anonymous edits carry user id 0, or no id and an IPv4 username."""
    if user_id == 0:
        return True
    return user_id is None and bool(_IPV4_RE.match((username or "").strip()))


def classify_contributor(
    username: str | None,
    user_id: int | None,
    profiles: Mapping[str, UserProfile],
    now: datetime | None = None,
    config: ClassifierConfig | None = None,
) -> ContributorLevel:
    """Map a contributor to a trust level.

    *profiles* is keyed by lower-cased username. Group membership wins over
    edit count at each tier.
    """
    if is_anonymous(username, user_id):
        return ContributorLevel.ANONYMOUS

    profile = profiles.get((username or "").strip().lower())
    if profile is None or profile.missing:
        return ContributorLevel.UNKNOWN

    cfg = config if config is not None else _DEFAULT_CONFIG
    groups = {_normalize_group(g) for g in profile.groups}
    high_trust = {_normalize_group(g) for g in cfg.high_trust_groups}
    trusted = {_normalize_group(g) for g in cfg.trusted_groups}

    if groups & high_trust or profile.edit_count >= cfg.recognized_edits:
        return ContributorLevel.RECOGNIZED
    if groups & trusted or profile.edit_count >= cfg.established_edits:
        return ContributorLevel.ESTABLISHED
    if profile.edit_count >= cfg.intermediate_edits:
        return ContributorLevel.INTERMEDIATE

    registered_at = profile.registered_at
    if now is None:
        now = datetime.now(UTC)
    account_is_young = (
        registered_at is not None
        and (now - registered_at).days <= cfg.new_account_days
    )
    if account_is_young or profile.edit_count < cfg.new_max_edits:
        return ContributorLevel.NEW
    return ContributorLevel.INTERMEDIATE
