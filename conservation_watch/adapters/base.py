"""
Adapter protocol, shared fetch plumbing and registry for the upstream APIs.
"""
from __future__ import annotations

import abc
import logging
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Tuple, Type

from conservation_watch.http_client import DEFAULT_TIMEOUT_MS, HttpClient
from conservation_watch.models import ConservationNewsItem, HealthStatus
from conservation_watch.security import redact_secrets

logger = logging.getLogger(__name__)

RawRecord = Dict[str, Any]


class SourceAdapter(Protocol):
    name: str
    limit: int

    def fetch(self, *, now: datetime) -> Tuple[List[RawRecord], HealthStatus]:
        ...

    def normalize(self, record: Mapping[str, Any], index: int, now: datetime) -> ConservationNewsItem:
        ...


class JsonSourceAdapter(abc.ABC):
    """
    Base for adapters that issue one JSON GET and read a list out of the envelope.

    ``fetch`` never raises. Transport, HTTP status and JSON errors are logged and
    reported as an empty record list with an unhealthy status, so one failing
    source cannot take the aggregation down with it.
    """

    name: str = "source"
    endpoint: str = ""
    results_field: str = "results"

    def __init__(
        self,
        query: str,
        page_size: int = 20,
        limit: int = 8,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        user_agent: Optional[str] = None,
        http: Optional[HttpClient] = None,
    ) -> None:
        self.query = query
        self.page_size = page_size
        self.limit = limit
        self.timeout_ms = timeout_ms
        self.http = http or HttpClient(timeout_ms=timeout_ms, user_agent=user_agent)

    @abc.abstractmethod
    def build_params(self) -> Any:
        ...

    def build_headers(self) -> Dict[str, str]:
        return {}

    @abc.abstractmethod
    def normalize(self, record: Mapping[str, Any], index: int, now: datetime) -> ConservationNewsItem:
        ...

    def fetch(self, *, now: datetime) -> Tuple[List[RawRecord], HealthStatus]:
        start = time.time()
        try:
            payload = self.http.get_json(
                self.endpoint,
                params=self.build_params(),
                timeout_ms=self.timeout_ms,
                headers=self.build_headers(),
            )
            records = extract_records(payload, self.results_field)
        except Exception as exc:
            message = redact_secrets(str(exc))
            logger.error("Error fetching %s: %s", self.name, message)
            return [], HealthStatus(
                name=self.name,
                healthy=False,
                last_error=message,
                latency_ms=(time.time() - start) * 1000,
            )

        logger.debug("%s returned %d records", self.name, len(records))
        return records, HealthStatus(
            name=self.name,
            healthy=True,
            last_success=now,
            items_last_fetch=len(records),
            latency_ms=(time.time() - start) * 1000,
        )


def extract_records(payload: Any, field: str) -> List[RawRecord]:
    """The list stored under ``field``; anything that is not a list becomes ``[]``."""
    if not isinstance(payload, dict):
        return []
    records = payload.get(field)
    if not isinstance(records, list):
        return []
    return [record for record in records if isinstance(record, dict)]


@dataclass
class AdapterFactory:
    adapter_cls: Type[JsonSourceAdapter]
    config: Dict[str, object]

    def build(self) -> JsonSourceAdapter:
        return self.adapter_cls(**self.config)  # type: ignore[arg-type]


class AdapterRegistry:
    """
    Keeps track of the adapters enabled for one aggregation run.
    """

    def __init__(self) -> None:
        self._factories: Dict[str, AdapterFactory] = {}

    def register(self, key: str, factory: AdapterFactory) -> None:
        if key in self._factories:
            raise ValueError(f"Adapter '{key}' already registered")
        self._factories[key] = factory

    def build_all(self) -> List[JsonSourceAdapter]:
        return [factory.build() for factory in self._factories.values()]

    def keys(self) -> Iterable[str]:
        return self._factories.keys()
