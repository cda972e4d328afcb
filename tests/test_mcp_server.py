"""Tests for the MCP server module."""

from __future__ import annotations

import json
from collections.abc import Iterator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from helpers import make_profile, make_result

import wiki_trust.mcp_server as mcp_server
from wiki_trust.cache import Cache
from wiki_trust.config import WikiTrustConfig
from wiki_trust.exceptions import ConfigError, RetryExhaustedError
from wiki_trust.mcp_server import (
    _error_json,
    _get_cache,
    _get_config,
    analyze_page,
    cache_stats,
    classify_contributor,
    clear_cache,
    main,
)
from wiki_trust.models import AnalysisFailure, ContributorLevel


@pytest.fixture(autouse=True)
def _reset_cache() -> Iterator[None]:
    mcp_server._cache = None
    yield
    mcp_server._cache = None


class TestErrorJson:
    def test_returns_json_with_error_key(self) -> None:
        assert json.loads(_error_json("something broke")) == {"error": "something broke"}


class TestHelpers:
    @patch("wiki_trust.mcp_server.load_config")
    def test_wiki_override(self, mock_load_config: MagicMock) -> None:
        mock_load_config.return_value = WikiTrustConfig()
        config = _get_config("https://fr.wikipedia.org")
        assert config.wiki.base_url == "https://fr.wikipedia.org"

    def test_cache_is_shared(self) -> None:
        config = WikiTrustConfig()
        assert _get_cache(config) is _get_cache(config)


class TestMain:
    @patch("wiki_trust.mcp_server.FastMCP")
    def test_main_calls_run(self, mock_fastmcp_cls: MagicMock) -> None:
        mock_server = MagicMock()
        mock_fastmcp_cls.return_value = mock_server
        main()
        mock_fastmcp_cls.assert_called_once_with("wiki-trust")
        registered = [
            call.args[0]
            for call in mock_server.tool.return_value.call_args_list
        ]
        assert registered == [analyze_page, classify_contributor, cache_stats, clear_cache]
        mock_server.run.assert_called_once_with(transport="stdio")


class TestMcpNotInstalled:
    @patch("wiki_trust.mcp_server.FastMCP", None)
    def test_exits_when_mcp_missing(self) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1


class TestAnalyzePage:
    @patch("wiki_trust.mcp_server._get_config")
    @patch("wiki_trust.mcp_server.produce_analysis", new_callable=AsyncMock)
    async def test_success(self, mock_analyze: AsyncMock, mock_config: MagicMock) -> None:
        mock_config.return_value = WikiTrustConfig()
        mock_analyze.return_value = make_result()

        parsed = json.loads(await analyze_page("Alan Turing"))

        assert parsed["title"] == "Alan Turing"
        assert parsed["score"] == 72
        assert parsed["risk"] == "low"
        assert mock_analyze.await_args.kwargs["cache"] is mcp_server._cache

    @patch("wiki_trust.mcp_server._get_config")
    @patch("wiki_trust.mcp_server.produce_analysis", new_callable=AsyncMock)
    async def test_failure(self, mock_analyze: AsyncMock, mock_config: MagicMock) -> None:
        mock_config.return_value = WikiTrustConfig()
        mock_analyze.return_value = AnalysisFailure(
            title="Nope", reason="page-missing", message="Page not found."
        )

        parsed = json.loads(await analyze_page("Nope"))

        assert parsed == {"error": "Page not found."}

    @patch("wiki_trust.mcp_server._get_config")
    async def test_config_error(self, mock_config: MagicMock) -> None:
        mock_config.side_effect = ConfigError("bad config")

        parsed = json.loads(await analyze_page("Foo"))

        assert parsed == {"error": "bad config"}


class TestClassifyContributor:
    @patch("wiki_trust.mcp_server._get_config")
    @patch("wiki_trust.mcp_server.classify_user", new_callable=AsyncMock)
    async def test_success(self, mock_classify: AsyncMock, mock_config: MagicMock) -> None:
        mock_config.return_value = WikiTrustConfig()
        mock_classify.return_value = (
            ContributorLevel.ESTABLISHED,
            make_profile("Alice", edit_count=2500),
        )

        parsed = json.loads(await classify_contributor("Alice"))

        assert parsed == {
            "user": "Alice",
            "level": "established",
            "recognized": True,
            "edit_count": 2500,
            "missing": False,
        }

    @patch("wiki_trust.mcp_server._get_config")
    @patch("wiki_trust.mcp_server.classify_user", new_callable=AsyncMock)
    async def test_api_error(self, mock_classify: AsyncMock, mock_config: MagicMock) -> None:
        mock_config.return_value = WikiTrustConfig()
        mock_classify.side_effect = RetryExhaustedError(attempts=3, status_code=429)

        parsed = json.loads(await classify_contributor("Alice"))

        assert "error" in parsed
        assert "3 attempts" in parsed["error"]


class TestCacheTools:
    @patch("wiki_trust.mcp_server._get_config")
    async def test_stats(self, mock_config: MagicMock) -> None:
        mock_config.return_value = WikiTrustConfig()
        _get_cache(WikiTrustConfig()).set("k", "v")

        parsed = json.loads(await cache_stats())

        assert parsed["total_entries"] == 1
        assert parsed["active_entries"] == 1
        assert parsed["ttl_seconds"] == 600

    @patch("wiki_trust.mcp_server._get_config")
    async def test_clear_expired(self, mock_config: MagicMock) -> None:
        mock_config.return_value = WikiTrustConfig()
        clock_now = [0.0]
        mcp_server._cache = Cache(ttl_seconds=10, clock=lambda: clock_now[0])
        mcp_server._cache.set("old", 1)
        clock_now[0] = 20.0
        mcp_server._cache.set("fresh", 2)

        parsed = json.loads(await clear_cache())

        assert parsed == {"expired_entries_removed": 1}
        assert mcp_server._cache.get("fresh") == 2

    @patch("wiki_trust.mcp_server._get_config")
    async def test_clear_all(self, mock_config: MagicMock) -> None:
        mock_config.return_value = WikiTrustConfig()
        _get_cache(WikiTrustConfig()).set("k", "v")

        parsed = json.loads(await clear_cache(all_entries=True))

        assert parsed == {"cleared": True}
        assert mcp_server._cache is not None
        assert mcp_server._cache.stats()["total_entries"] == 0

    @patch("wiki_trust.mcp_server._get_config")
    async def test_config_error(self, mock_config: MagicMock) -> None:
        mock_config.side_effect = ConfigError("bad config")
        assert json.loads(await cache_stats()) == {"error": "bad config"}
