"""
CLI to run the conservation feed once and inspect its output.
"""
from __future__ import annotations

import json
import logging
import os

import click
from dotenv import load_dotenv

from conservation_watch.models import FetchAllOptions
from conservation_watch.pipeline import ConservationPipeline
from conservation_watch.settings import load_settings
from conservation_watch.status import build_status


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log debug output.")
@click.option("--dotenv", "dotenv_path", default=None, help="Path to a .env file with API keys.")
def cli(verbose: bool, dotenv_path: str | None):
    load_dotenv(dotenv_path or os.getenv("CONSERVATION_DOTENV", ".env"))
    _configure_logging(verbose)


def _build_pipeline():
    settings = load_settings()
    pipeline = ConservationPipeline(user_agent=settings.user_agent, config_path=settings.sources_path)
    return settings, pipeline


@cli.command()
@click.option("--regulations-api-key", default=None, help="Defaults to REGULATIONS_GOV_API_KEY / REGULATIONS_API_KEY.")
@click.option("--openstates-api-key", default=None, help="Defaults to OPENSTATES_API_KEY / OPEN_STATES_API_KEY.")
@click.option("--limit", type=int, default=None, help="Print at most N items.")
def fetch(regulations_api_key: str | None, openstates_api_key: str | None, limit: int | None):
    """Print the aggregated feed as a JSON array."""
    settings, pipeline = _build_pipeline()
    options = settings.fetch_options()
    if regulations_api_key:
        options.regulations_api_key = regulations_api_key
    if openstates_api_key:
        options.open_states_api_key = openstates_api_key
    items = pipeline.run(options).items
    if limit is not None:
        items = items[:limit]
    click.echo(json.dumps([item.to_dict() for item in items], ensure_ascii=False, indent=2))


@cli.command()
def status():
    """Run the feed once and print per-source health."""
    settings, pipeline = _build_pipeline()
    pipeline.run(settings.fetch_options())
    click.echo(json.dumps(build_status(pipeline, settings), ensure_ascii=False, indent=2))


if __name__ == "__main__":  # pragma: no cover
    cli()
