"""Tests for configuration."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from wiki_trust.config import (
    ClassifierConfig,
    FetchConfig,
    ScoringConfig,
    WikiConfig,
    WikiTrustConfig,
    load_config,
)
from wiki_trust.exceptions import ConfigError


class TestFetchConfig:
    def test_defaults(self) -> None:
        config = FetchConfig()
        assert config.max_revisions == 300
        assert config.max_attempts == 3
        assert config.initial_backoff_seconds == 0.35
        assert config.user_batch_size == 50
        assert config.edit_count_cap == 30000
        assert config.editor_count_cap == 25000


class TestWikiConfig:
    def test_urls(self) -> None:
        config = WikiConfig(base_url="https://fr.wikipedia.org/")
        assert config.api_url == "https://fr.wikipedia.org/w/api.php"
        assert config.rest_url == "https://fr.wikipedia.org/w/rest.php/v1"


class TestClassifierConfig:
    def test_thresholds(self) -> None:
        config = ClassifierConfig()
        assert config.recognized_edits == 5000
        assert config.established_edits == 2000
        assert config.intermediate_edits == 300
        assert config.new_max_edits == 50
        assert config.new_account_days == 180
        assert "sysop" in config.high_trust_groups
        assert "extendedconfirmed" in config.trusted_groups


class TestScoringConfig:
    def test_defaults(self) -> None:
        config = ScoringConfig()
        assert config.base_score == 80
        assert config.new_page_days == 120
        assert config.window_days == 90
        assert config.low_risk_min == 70
        assert config.medium_risk_min == 50


class TestLoadConfig:
    def test_load_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        config = load_config()
        assert isinstance(config, WikiTrustConfig)
        assert config.wiki.base_url == "https://en.wikipedia.org"
        assert config.cache.ttl_seconds == 600

    def test_load_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / ".wiki-trust.yml"
        config_file.write_text(yaml.dump({
            "wiki": {"base_url": "https://fr.wikipedia.org"},
            "fetch": {"max_revisions": 100},
            "language": "fr",
        }))
        config = load_config(config_file)
        assert config.wiki.base_url == "https://fr.wikipedia.org"
        assert config.fetch.max_revisions == 100
        assert config.language == "fr"
        # Defaults preserved
        assert config.fetch.max_attempts == 3

    def test_default_location(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        (tmp_path / ".wiki-trust.yaml").write_text(yaml.dump({"cache": {"ttl_seconds": 60}}))
        monkeypatch.chdir(tmp_path)
        assert load_config().cache.ttl_seconds == 60

    def test_load_nonexistent_path(self, tmp_path: Path) -> None:
        config = load_config(tmp_path / "nonexistent.yml")
        assert config.fetch.max_revisions == 300

    def test_empty_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "empty.yml"
        config_file.write_text("")
        assert load_config(config_file).scoring.base_score == 80

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "bad.yml"
        config_file.write_text("wiki: [unclosed")
        with pytest.raises(ConfigError):
            load_config(config_file)

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "list.yml"
        config_file.write_text("- a\n- b\n")
        with pytest.raises(ConfigError):
            load_config(config_file)

    def test_invalid_value(self, tmp_path: Path) -> None:
        config_file = tmp_path / "bad_value.yml"
        config_file.write_text(yaml.dump({"fetch": {"max_revisions": "lots"}}))
        with pytest.raises(ConfigError):
            load_config(config_file)

    def test_env_overrides(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / ".wiki-trust.yml"
        config_file.write_text(yaml.dump({"fetch": {"max_revisions": 100}}))
        monkeypatch.setenv("WIKI_TRUST_MAX_REVISIONS", "50")
        monkeypatch.setenv("WIKI_TRUST_BASE_URL", "https://de.wikipedia.org")
        monkeypatch.setenv("WIKI_TRUST_CACHE_TTL", "120")
        monkeypatch.setenv("WIKI_TRUST_LANGUAGE", "fr")
        config = load_config(config_file)
        assert config.fetch.max_revisions == 50
        assert config.wiki.base_url == "https://de.wikipedia.org"
        assert config.cache.ttl_seconds == 120
        assert config.language == "fr"

    def test_bad_env_value(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("WIKI_TRUST_MAX_ATTEMPTS", "three")
        with pytest.raises(ConfigError, match="WIKI_TRUST_MAX_ATTEMPTS"):
            load_config(tmp_path / "nonexistent.yml")
