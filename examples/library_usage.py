"""Example: Score a Wikipedia page with Wiki Trust."""

from __future__ import annotations

import asyncio

from wiki_trust import AnalysisFailure, Cache, WikiTrustConfig, produce_analysis


async def main() -> None:
    config = WikiTrustConfig()
    cache = Cache(ttl_seconds=config.cache.ttl_seconds)
    result = await produce_analysis("Alan Turing", config=config, cache=cache)

    if isinstance(result, AnalysisFailure):
        print(f"{result.title}: {result.message} ({result.reason})")
        return

    print(f"Page: {result.title}")
    print(f"Score: {result.score}/100 ({result.risk})")
    print(result.summary)
    if result.why_reasons:
        print(f"Why: {result.why_reasons}")
    for author in result.top_authors:
        print(f"  {author.user}: ~{author.added_words} words, {author.share_pct}% [{author.level}]")


if __name__ == "__main__":
    asyncio.run(main())
