"""Configuration models for Wiki Trust."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from wiki_trust.exceptions import ConfigError


class WikiConfig(BaseModel):
    """Target wiki and request identity."""
    base_url: str = "https://en.wikipedia.org"
    user_agent: str = "wiki-trust/0.1 (revision history trust heuristics)"
    maxlag: int = 5

    @property
    def api_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/w/api.php"

    @property
    def rest_url(self) -> str:
        return f"{self.base_url.rstrip('/')}/w/rest.php/v1"


class FetchConfig(BaseModel):
    """Wiki API fetch parameters."""
    max_revisions: int = 300
    latest_revisions: int = 3
    max_attempts: int = 3
    initial_backoff_seconds: float = 0.35
    user_batch_size: int = 50
    edit_count_cap: int = 30000
    editor_count_cap: int = 25000
    timeout_seconds: float = 30.0


class CacheConfig(BaseModel):
    """Cache freshness window."""
    ttl_seconds: int = 600


class ClassifierConfig(BaseModel):
    """Contributor trust tiers.

    Group membership is checked before edit counts at every tier.
    """
    recognized_edits: int = 5000
    established_edits: int = 2000
    intermediate_edits: int = 300
    new_max_edits: int = 50
    new_account_days: int = 180
    high_trust_groups: list[str] = Field(default_factory=lambda: [
        "sysop",
        "administrator",
        "bureaucrat",
        "checkuser",
        "oversight",
        "suppress",
        "interface-admin",
        "steward",
        "arbcom",
        "arbitration-committee",
    ])
    trusted_groups: list[str] = Field(default_factory=lambda: [
        "editor",
        "reviewer",
        "autoreview",
        "autoreviewer",
        "extendedconfirmed",
        "extended-confirmed",
        "patroller",
        "rollbacker",
        "templateeditor",
        "template-editor",
    ])


class ScoringConfig(BaseModel):
    """Revision analyzer parameters."""
    base_score: int = 80
    new_page_days: int = 120
    window_days: int = 90
    recent_days: int = 30
    low_risk_min: int = 70
    medium_risk_min: int = 50
    top_authors: int = 5
    chars_per_word: float = 5.5
    max_why_reasons: int = 2


class WikiTrustConfig(BaseModel):
    """Top-level configuration composing all sub-configs."""
    wiki: WikiConfig = Field(default_factory=WikiConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    classifier: ClassifierConfig = Field(default_factory=ClassifierConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    language: str = "en"


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def load_config(path: str | Path | None = None) -> WikiTrustConfig:
    """Load configuration from YAML file, environment variables, and defaults.

    Priority (highest to lowest):
    1. Environment variables (WIKI_TRUST_*)
    2. YAML config file
    3. Defaults
    """
    config_data: dict[str, Any] = {}

    if path is not None:
        config_path = Path(path)
        if config_path.exists():
            config_data = _read_yaml(config_path)
    else:
        for default_path in [".wiki-trust.yml", ".wiki-trust.yaml"]:
            p = Path(default_path)
            if p.exists():
                config_data = _read_yaml(p)
                break

    env_mapping = {
        "WIKI_TRUST_BASE_URL": ("wiki", "base_url", str),
        "WIKI_TRUST_MAX_REVISIONS": ("fetch", "max_revisions", int),
        "WIKI_TRUST_MAX_ATTEMPTS": ("fetch", "max_attempts", int),
        "WIKI_TRUST_CACHE_TTL": ("cache", "ttl_seconds", int),
    }

    for env_var, (section, key, type_fn) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            try:
                converted = type_fn(value)
            except ValueError as exc:
                raise ConfigError(f"Invalid value for {env_var}: {value!r}") from exc
            config_data.setdefault(section, {})[key] = converted

    language = os.environ.get("WIKI_TRUST_LANGUAGE")
    if language:
        config_data["language"] = language

    try:
        return WikiTrustConfig(**config_data)
    except ValidationError as exc:
        raise ConfigError(str(exc)) from exc
