"""Click-based CLI for Wiki Trust page scoring."""

from __future__ import annotations

import asyncio
import json
import logging
import sys

import click

from wiki_trust.cache import Cache
from wiki_trust.config import load_config
from wiki_trust.exceptions import ConfigError, WikiTrustError
from wiki_trust.formatter import format_cli_output, format_failure, format_json, format_level
from wiki_trust.i18n import SUPPORTED_LANGUAGES, MessageCatalog
from wiki_trust.models import AnalysisFailure
from wiki_trust.scorer import classify_user, produce_analysis


@click.group()
@click.version_option(package_name="wiki-trust")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool) -> None:
    """Wiki Trust - heuristic trust scoring for wiki pages."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(name)s: %(message)s",
    )


@main.command()
@click.argument("title")
@click.option("--wiki", "wiki_url", default=None, help="Wiki base URL (e.g. https://fr.wikipedia.org)")
@click.option("--config", "config_path", default=None, help="Config file path")
@click.option("--lang", type=click.Choice(SUPPORTED_LANGUAGES), default=None, help="Message language")
@click.option("--details", is_flag=True, help="Show reasons and raw signals")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def analyze(
    title: str,
    wiki_url: str | None,
    config_path: str | None,
    lang: str | None,
    details: bool,
    output_json: bool,
) -> None:
    """Score the trustworthiness of a page from its revision history."""
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if wiki_url is not None:
        config = config.model_copy(
            update={"wiki": config.wiki.model_copy(update={"base_url": wiki_url})}
        )
    if lang is not None:
        config = config.model_copy(update={"language": lang})

    translate = MessageCatalog(config.language)
    cache = Cache(ttl_seconds=config.cache.ttl_seconds)
    result = asyncio.run(
        produce_analysis(title, config=config, cache=cache, translate=translate)
    )

    if isinstance(result, AnalysisFailure):
        if output_json:
            click.echo(format_json(result))
        else:
            click.echo(format_failure(result), err=True)
        sys.exit(1)

    if output_json:
        click.echo(format_json(result))
    else:
        click.echo(format_cli_output(result, verbose=details, translate=translate))


@main.command()
@click.argument("username")
@click.option("--wiki", "wiki_url", default=None, help="Wiki base URL (e.g. https://fr.wikipedia.org)")
@click.option("--config", "config_path", default=None, help="Config file path")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def classify(
    username: str,
    wiki_url: str | None,
    config_path: str | None,
    output_json: bool,
) -> None:
    """Classify a contributor's trust level from account metadata."""
    try:
        config = load_config(config_path)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if wiki_url is not None:
        config = config.model_copy(
            update={"wiki": config.wiki.model_copy(update={"base_url": wiki_url})}
        )

    try:
        level, profile = asyncio.run(classify_user(username, config=config))
    except WikiTrustError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    if output_json:
        click.echo(json.dumps({
            "user": username,
            "level": level.value,
            "recognized": level.is_recognized,
            "edit_count": profile.edit_count if profile else None,
            "groups": sorted(profile.groups) if profile else [],
        }))
    else:
        click.echo(format_level(username, level, MessageCatalog(config.language)))
