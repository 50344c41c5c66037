"""
Core data structures shared by the conservation news pipeline.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class ConservationStatus(str, Enum):
    WATCH = "watch"
    ACTIVE = "active"
    RESOLVED = "resolved"


class SourceType(str, Enum):
    COURT = "court"
    RULEMAKING = "rulemaking"
    AGENCY = "agency"
    LEGISLATURE = "legislature"
    MEDIA = "media"


class SourceName(str, Enum):
    FEDERAL_REGISTER = "Federal Register"
    COURT_LISTENER = "CourtListener"
    REGULATIONS_GOV = "Regulations.gov"
    OPEN_STATES = "OpenStates"


@dataclass(frozen=True)
class ConservationNewsItem:
    """
    Normalized representation of a primary-source record across all upstream APIs.

    Items are built once per aggregation run and never mutated afterwards; the
    pipeline only filters and reorders them.
    """

    id: str
    title: str
    date: datetime
    category: str
    source: str
    status: ConservationStatus
    summary: str
    link: str
    source_type: Optional[SourceType] = None
    agency: Optional[str] = None
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize into the JSON payload the Conservation Watch page renders."""
        payload: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "date": format_iso(self.date),
            "category": self.category,
            "source": self.source,
            "status": self.status.value,
            "summary": self.summary,
            "link": self.link,
            "tags": list(self.tags),
        }
        if self.source_type is not None:
            payload["sourceType"] = self.source_type.value
        if self.agency:
            payload["agency"] = self.agency
        return payload


@dataclass
class FetchAllOptions:
    regulations_api_key: Optional[str] = None
    open_states_api_key: Optional[str] = None


@dataclass
class HealthStatus:
    name: str
    healthy: bool
    last_error: Optional[str] = None
    last_success: Optional[datetime] = None
    items_last_fetch: int = 0
    latency_ms: Optional[float] = None
    extra: Dict[str, str] = field(default_factory=dict)


@dataclass
class PipelineResult:
    items: List[ConservationNewsItem]
    generated_at: datetime
    health: List[HealthStatus]


def format_iso(value: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a trailing ``Z``."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"
