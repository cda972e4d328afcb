"""MCP server for AI assistant integration."""

from __future__ import annotations

import json
import sys

try:
    from mcp.server.fastmcp import FastMCP
except ImportError:
    FastMCP = None  # type: ignore[assignment,misc]

from wiki_trust.cache import Cache
from wiki_trust.config import WikiTrustConfig, load_config
from wiki_trust.exceptions import WikiTrustError
from wiki_trust.models import AnalysisFailure
from wiki_trust.scorer import classify_user, produce_analysis

_cache: Cache | None = None


def _get_config(wiki: str | None = None) -> WikiTrustConfig:
    """Load the configuration, optionally pointing at another wiki."""
    config = load_config()
    if wiki:
        config = config.model_copy(
            update={"wiki": config.wiki.model_copy(update={"base_url": wiki})}
        )
    return config


def _get_cache(config: WikiTrustConfig) -> Cache:
    """Return the cache shared by every tool call in this server process."""
    global _cache
    if _cache is None:
        _cache = Cache(ttl_seconds=config.cache.ttl_seconds)
    return _cache


def _error_json(message: str) -> str:
    """Return a JSON error string."""
    return json.dumps({"error": message})


async def analyze_page(title: str, wiki: str | None = None) -> str:
    """Score the trustworthiness of a wiki page from its revision history.

    Returns the score, risk tier, reasons, and top contributors as JSON.

    Args:
        title: Page title, e.g. "Alan Turing".
        wiki: Optional wiki base URL (defaults to English Wikipedia).
    """
    try:
        config = _get_config(wiki)
        result = await produce_analysis(title, config=config, cache=_get_cache(config))
    except WikiTrustError as exc:
        return _error_json(str(exc))
    if isinstance(result, AnalysisFailure):
        return _error_json(result.message or result.reason)
    return result.model_dump_json()


async def classify_contributor(username: str, wiki: str | None = None) -> str:
    """Classify a wiki contributor's trust level from account metadata.

    Args:
        username: Account name or IP address.
        wiki: Optional wiki base URL (defaults to English Wikipedia).
    """
    try:
        config = _get_config(wiki)
        level, profile = await classify_user(username, config=config, cache=_get_cache(config))
    except WikiTrustError as exc:
        return _error_json(str(exc))
    return json.dumps({
        "user": username,
        "level": level.value,
        "recognized": level.is_recognized,
        "edit_count": profile.edit_count if profile else None,
        "missing": profile.missing if profile else None,
    })


async def cache_stats() -> str:
    """Show statistics for the response cache shared by this server."""
    try:
        return json.dumps(_get_cache(_get_config()).stats())
    except WikiTrustError as exc:
        return _error_json(str(exc))


async def clear_cache(all_entries: bool = False) -> str:
    """Clear the response cache.

    Without *all_entries*, only expired entries are removed.

    Args:
        all_entries: Drop every cached response, fresh or not.
    """
    try:
        cache = _get_cache(_get_config())
    except WikiTrustError as exc:
        return _error_json(str(exc))
    if all_entries:
        cache.clear()
        return json.dumps({"cleared": True})
    return json.dumps({"expired_entries_removed": cache.cleanup_expired()})


def main() -> None:
    """Run the Wiki Trust MCP server."""
    if FastMCP is None:
        print(
            "The MCP server requires the 'mcp' extra.\n"
            "Install it with: pip install wiki-trust[mcp]",
            file=sys.stderr,
        )
        sys.exit(1)
    server = FastMCP("wiki-trust")
    server.tool()(analyze_page)
    server.tool()(classify_contributor)
    server.tool()(cache_stats)
    server.tool()(clear_cache)
    server.run(transport="stdio")


if __name__ == "__main__":
    main()
