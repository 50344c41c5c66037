"""
Public API for the Conservation Watch feed.
"""
from __future__ import annotations

from typing import List, Optional

from conservation_watch.models import ConservationNewsItem, FetchAllOptions, PipelineResult
from conservation_watch.pipeline import ConservationPipeline
from conservation_watch.settings import WatchSettings, load_settings
from conservation_watch.status import build_status

SETTINGS: WatchSettings = load_settings()
_pipeline = ConservationPipeline(user_agent=SETTINGS.user_agent, config_path=SETTINGS.sources_path)


def fetch_all_conservation_news(options: Optional[FetchAllOptions] = None) -> List[ConservationNewsItem]:
    """
    Fetch every enabled source and return one list, newest first.

    Regulations.gov and OpenStates are only queried when ``options`` carries
    their key. Source failures shrink the list; they never raise.
    """
    return _pipeline.run(options).items


def get_conservation_news() -> PipelineResult:
    """Run the feed with credentials taken from the server-side settings."""
    return _pipeline.run(SETTINGS.fetch_options())


def get_health_snapshot():
    return _pipeline.get_health()


def get_pipeline_status():
    """Expose a structured status payload for health dashboards."""
    return build_status(_pipeline, SETTINGS)


__all__ = [
    "ConservationNewsItem",
    "FetchAllOptions",
    "PipelineResult",
    "fetch_all_conservation_news",
    "get_conservation_news",
    "get_health_snapshot",
    "get_pipeline_status",
]
