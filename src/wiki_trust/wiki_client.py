"""Async MediaWiki API client for fetching page history and contributor data."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any
from urllib.parse import quote

import httpx

from wiki_trust.cache import Cache, cache_key
from wiki_trust.classifier import is_ip_literal
from wiki_trust.config import WikiTrustConfig, load_config
from wiki_trust.exceptions import PageMissingError, RetryExhaustedError, WikiAPIError
from wiki_trust.models import CountInfo, Revision, UserProfile

logger = logging.getLogger(__name__)

_RETRIABLE_STATUSES = frozenset({429, 503})
_RETRIABLE_ERROR_CODES = frozenset({"maxlag", "ratelimited"})
_MAX_USERS_PER_QUERY = 50
_API_MAX_LIMIT = 500

META_REVISION_PROPS = "timestamp|user|comment|size|tags|userid|ids"
BRIEF_REVISION_PROPS = "timestamp|user|ids"


def _as_int(value: object) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


def _first_page(data: dict[str, Any]) -> dict[str, Any] | None:
    query = data.get("query")
    if not isinstance(query, dict):
        return None
    pages = query.get("pages")
    if not isinstance(pages, list) or not pages or not isinstance(pages[0], dict):
        return None
    return pages[0]


def _continue_token(data: dict[str, Any], name: str) -> str | None:
    cont = data.get("continue")
    if not isinstance(cont, dict):
        return None
    token = cont.get(name)
    return str(token) if token else None


def _parse_revision(raw: dict[str, Any]) -> Revision:
    tags = raw.get("tags")
    return Revision(
        timestamp=raw.get("timestamp") or None,
        user=str(raw.get("user") or ""),
        user_id=_as_int(raw.get("userid")),
        comment=str(raw.get("comment") or ""),
        size=_as_int(raw.get("size")),
        revision_id=_as_int(raw.get("revid")),
        parent_id=_as_int(raw.get("parentid")),
        tags=tuple(str(tag) for tag in tags) if isinstance(tags, list) else (),
    )


def _parse_user(raw: dict[str, Any]) -> UserProfile:
    name = str(raw.get("name") or "")
    if raw.get("missing") or raw.get("invalid"):
        return UserProfile(name=name, missing=True)
    groups = raw.get("groups")
    return UserProfile(
        name=name,
        edit_count=_as_int(raw.get("editcount")) or 0,
        registration=raw.get("registration") or None,
        groups=frozenset(str(g) for g in groups) if isinstance(groups, list) else frozenset(),
    )


class WikiClient:
    """Async MediaWiki client with retry/backoff and optional response caching."""

    def __init__(
        self,
        config: WikiTrustConfig | None = None,
        cache: Cache | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._config = config if config is not None else load_config()
        self._cache = cache
        self._client = http_client or httpx.AsyncClient(
            headers={
                "User-Agent": self._config.wiki.user_agent,
                "Accept": "application/json",
            },
            timeout=self._config.fetch.timeout_seconds,
        )

    async def __aenter__(self) -> WikiClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Fetcher
    # ------------------------------------------------------------------

    async def _get_json(
        self, url: str, params: dict[str, str] | None = None
    ) -> tuple[int, Any]:
        """Issue one GET. A body that is not JSON is returned as ``None``."""
        try:
            response = await self._client.get(url, params=params)
        except httpx.TransportError as exc:
            raise WikiAPIError(f"Request to {url} failed: {exc}") from exc
        try:
            data = response.json()
        except ValueError:
            data = None
        return response.status_code, data

    async def _query(self, params: dict[str, str]) -> dict[str, Any]:
        """Call the Action API, retrying on rate limiting and replica lag.

        Raises:
            RetryExhaustedError: If every attempt hit a retriable failure.
            WikiAPIError: For any other non-success response.
        """
        fetch_cfg = self._config.fetch
        full_params = {
            "action": "query",
            "format": "json",
            "formatversion": "2",
            "maxlag": str(self._config.wiki.maxlag),
            **params,
        }
        delay = fetch_cfg.initial_backoff_seconds

        for attempt in range(1, fetch_cfg.max_attempts + 1):
            status, data = await self._get_json(self._config.wiki.api_url, full_params)
            error = data.get("error") if isinstance(data, dict) else None
            error_code = str(error.get("code") or "") if isinstance(error, dict) else ""

            if 200 <= status < 300 and not error_code:
                return data if isinstance(data, dict) else {}

            retriable = status in _RETRIABLE_STATUSES or error_code in _RETRIABLE_ERROR_CODES
            if not retriable:
                detail = f" ({error_code})" if error_code else ""
                logger.error("Wiki API returned %s%s", status, detail)
                raise WikiAPIError(
                    f"Wiki API returned {status}{detail}",
                    status_code=status,
                    error_code=error_code or None,
                )
            if attempt == fetch_cfg.max_attempts:
                logger.error(
                    "Wiki API still failing after %d attempts (%s %s)",
                    attempt, status, error_code,
                )
                raise RetryExhaustedError(
                    attempts=attempt, status_code=status, error_code=error_code or None
                )

            logger.warning(
                "Wiki API returned %s %s, retrying in %.2fs (attempt %d/%d)",
                status, error_code, delay, attempt, fetch_cfg.max_attempts,
            )
            await asyncio.sleep(delay)
            delay *= 2

        raise RetryExhaustedError(attempts=fetch_cfg.max_attempts)

    async def fetch_count(self, url: str, cap: int) -> CountInfo:
        """Fetch a single-number aggregate.

        Counts are auxiliary: any failure yields an unknown count instead of
        an exception. Unknown counts are cached like known ones.
        """
        key = cache_key("count", url=url)
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                return cached  # type: ignore[no-any-return]

        result = await self._request_count(url, cap)
        if self._cache is not None:
            self._cache.set(key, result)
        return result

    async def _request_count(self, url: str, cap: int) -> CountInfo:
        fetch_cfg = self._config.fetch
        delay = fetch_cfg.initial_backoff_seconds

        for attempt in range(1, fetch_cfg.max_attempts + 1):
            try:
                status, data = await self._get_json(url)
            except WikiAPIError as exc:
                logger.warning("Count unavailable for %s: %s", url, exc)
                return CountInfo()

            count = _as_int(data.get("count")) if isinstance(data, dict) else None
            if 200 <= status < 300 and count is not None:
                return CountInfo(
                    count=count,
                    capped=count >= cap or data.get("limit") is True,
                )

            if status not in _RETRIABLE_STATUSES or attempt == fetch_cfg.max_attempts:
                logger.warning("Count unavailable for %s (status %s)", url, status)
                return CountInfo()

            await asyncio.sleep(delay)
            delay *= 2

        return CountInfo()

    # ------------------------------------------------------------------
    # Paginated collectors
    # ------------------------------------------------------------------

    async def fetch_revisions(
        self,
        title: str,
        max_revisions: int,
        revision_params: dict[str, str],
    ) -> list[Revision]:
        """Collect up to *max_revisions* revisions following ``rvcontinue``.

        Raises:
            PageMissingError: If the page does not exist.
        """
        key = cache_key(
            "revisions",
            wiki=self._config.wiki.api_url,
            title=title,
            max_revisions=max_revisions,
            params=revision_params,
        )
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                return list(cached)

        collected: list[Revision] = []
        rvcontinue: str | None = None
        limit = "max" if max_revisions >= _API_MAX_LIMIT else str(max(1, max_revisions))

        while len(collected) < max_revisions:
            params = {
                "prop": "revisions",
                "rvlimit": limit,
                "titles": title,
                **revision_params,
            }
            if rvcontinue:
                params["rvcontinue"] = rvcontinue

            data = await self._query(params)
            page = _first_page(data)
            if page is None or page.get("missing") or page.get("invalid"):
                raise PageMissingError(title)

            batch = page.get("revisions") or []
            collected.extend(_parse_revision(raw) for raw in batch if isinstance(raw, dict))

            rvcontinue = _continue_token(data, "rvcontinue")
            if not rvcontinue or not batch:
                break

        result = collected[:max_revisions]
        logger.debug("Fetched %d revisions for %r", len(result), title)
        if self._cache is not None:
            self._cache.set(key, tuple(result))
        return result

    async def fetch_revision_meta(self, title: str, max_revisions: int | None = None) -> list[Revision]:
        """Newest-first revisions with the properties the analyzer needs."""
        if max_revisions is None:
            max_revisions = self._config.fetch.max_revisions
        return await self.fetch_revisions(
            title, max_revisions, {"rvprop": META_REVISION_PROPS}
        )

    async def fetch_first_revision(self, title: str) -> Revision | None:
        revisions = await self.fetch_revisions(
            title, 1, {"rvprop": BRIEF_REVISION_PROPS, "rvdir": "newer"}
        )
        return revisions[0] if revisions else None

    async def fetch_latest_revisions(self, title: str, count: int | None = None) -> list[Revision]:
        if count is None:
            count = self._config.fetch.latest_revisions
        return await self.fetch_revisions(
            title, count, {"rvprop": BRIEF_REVISION_PROPS, "rvdir": "older"}
        )

    async def fetch_categories(self, title: str) -> list[str]:
        """Collect every category title attached to the page."""
        key = cache_key("categories", wiki=self._config.wiki.api_url, title=title)
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                return list(cached)

        categories: list[str] = []
        clcontinue: str | None = None

        while True:
            params = {"prop": "categories", "cllimit": "max", "titles": title}
            if clcontinue:
                params["clcontinue"] = clcontinue

            data = await self._query(params)
            page = _first_page(data)
            if page is None or page.get("missing") or page.get("invalid"):
                raise PageMissingError(title)

            categories.extend(
                str(cat.get("title") or "")
                for cat in page.get("categories") or []
                if isinstance(cat, dict)
            )
            next_token = _continue_token(data, "clcontinue")
            if not next_token or next_token == clcontinue:
                break
            clcontinue = next_token

        if self._cache is not None:
            self._cache.set(key, tuple(categories))
        return categories

    def _count_url(self, title: str, kind: str) -> str:
        page = quote(title.replace(" ", "_"), safe="")
        return f"{self._config.wiki.rest_url}/page/{page}/history/counts/{kind}"

    async def fetch_total_edit_count(self, title: str) -> CountInfo:
        return await self.fetch_count(
            self._count_url(title, "edits"), self._config.fetch.edit_count_cap
        )

    async def fetch_total_editor_count(self, title: str) -> CountInfo:
        return await self.fetch_count(
            self._count_url(title, "editors"), self._config.fetch.editor_count_cap
        )

    # ------------------------------------------------------------------
    # User profile resolver
    # ------------------------------------------------------------------

    async def fetch_user_profiles(self, usernames: Iterable[str]) -> dict[str, UserProfile]:
        """Batch-resolve account metadata, keyed by lower-cased username.

        IP literals and numeric names are anonymous editors and are never
        looked up. Names the API does not return are recorded as missing.
        """
        wanted: dict[str, str] = {}
        for name in usernames:
            stripped = (name or "").strip()
            if not stripped or stripped.isdigit() or is_ip_literal(stripped):
                continue
            wanted.setdefault(stripped.lower(), stripped)

        if not wanted:
            return {}

        key = cache_key("users", wiki=self._config.wiki.api_url, names=sorted(wanted))
        if self._cache is not None:
            cached = self._cache.get(key)
            if cached is not None:
                return dict(cached)

        batch_size = max(1, min(self._config.fetch.user_batch_size, _MAX_USERS_PER_QUERY))
        names = [wanted[lowered] for lowered in sorted(wanted)]
        profiles: dict[str, UserProfile] = {}

        for batch_start in range(0, len(names), batch_size):
            batch = names[batch_start : batch_start + batch_size]
            data = await self._query({
                "list": "users",
                "ususers": "|".join(batch),
                "usprop": "editcount|registration|groups",
            })
            query = data.get("query")
            users = query.get("users") if isinstance(query, dict) else None
            for raw in users or []:
                if not isinstance(raw, dict) or not raw.get("name"):
                    continue
                profile = _parse_user(raw)
                profiles[profile.name.lower()] = profile

            for requested in batch:
                profiles.setdefault(requested.lower(), UserProfile(name=requested, missing=True))

        logger.debug("Resolved %d user profiles", len(profiles))
        if self._cache is not None:
            self._cache.set(key, dict(profiles))
        return profiles
