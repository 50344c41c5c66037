"""
Status/health helpers for the conservation feed.

The payload lets the page show which sources answered, which failed and which
were skipped for lack of credentials. Errors are already redacted by the adapters.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict

from conservation_watch.models import HealthStatus
from conservation_watch.pipeline import ConservationPipeline
from conservation_watch.settings import WatchSettings


def _health_to_dict(status: HealthStatus) -> Dict[str, Any]:
    return {
        "name": status.name,
        "healthy": status.healthy,
        "skipped": status.extra.get("skipped"),
        "last_error": status.last_error,
        "last_success": status.last_success.isoformat() if status.last_success else None,
        "items_last_fetch": status.items_last_fetch,
        "latency_ms": status.latency_ms,
        "extra": status.extra,
    }


def build_status(pipeline: ConservationPipeline, settings: WatchSettings) -> Dict[str, Any]:
    health = [_health_to_dict(entry) for entry in pipeline.get_health()]
    return {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "pipeline": {
            "health": health,
            "source_count": len(health),
            "skipped_sources": [entry["name"] for entry in health if entry["skipped"]],
            "failed_sources": [entry["name"] for entry in health if not entry["healthy"]],
        },
        "config": {
            "sources_path": str(settings.sources_path),
            "regulations_gov_enabled": bool(settings.regulations_api_key),
            "open_states_enabled": bool(settings.open_states_api_key),
        },
    }
