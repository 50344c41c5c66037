"""
High-level orchestration: fan out to every enabled source, normalize, merge.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Tuple, TypeVar

from conservation_watch.adapters.base import AdapterFactory, AdapterRegistry, JsonSourceAdapter, SourceAdapter
from conservation_watch.adapters.court_listener import CourtListenerAdapter
from conservation_watch.adapters.federal_register import FederalRegisterAdapter
from conservation_watch.adapters.open_states import OpenStatesAdapter
from conservation_watch.adapters.regulations_gov import RegulationsGovAdapter
from conservation_watch.config_loader import load_sources_config
from conservation_watch.models import ConservationNewsItem, FetchAllOptions, HealthStatus, PipelineResult, SourceName
from conservation_watch.security import is_configured_key, redact_secrets

logger = logging.getLogger(__name__)

T = TypeVar("T")

SKIPPED_MISSING_KEY = "missing API key"

# YAML keys accepted in every source section, with the type they are coerced to.
_SECTION_FIELDS: Dict[str, Callable[[Any], Any]] = {
    "query": str,
    "page_size": int,
    "limit": int,
    "timeout_ms": int,
    "user_agent": str,
}

# Extra keys only some sources understand.
_SOURCE_ONLY_FIELDS: Dict[str, Dict[str, Callable[[Any], Any]]] = {
    "open_states": {"jurisdiction": str},
}


class ConservationPipeline:
    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        user_agent: Optional[str] = None,
        config_path: Optional[Path] = None,
    ) -> None:
        self.config = config if config is not None else load_sources_config(config_path)
        global_settings = self._section("global_settings")
        self.user_agent = user_agent or global_settings.get("user_agent")
        self.default_timeout_ms = global_settings.get("timeout_ms")
        self._health: Dict[str, HealthStatus] = {}

    def _section(self, key: str) -> Dict[str, Any]:
        section = self.config.get(key)
        return section if isinstance(section, dict) else {}

    def _adapter_config(self, key: str) -> Dict[str, Any]:
        """Constructor kwargs for one source: global defaults, then its YAML section."""
        config: Dict[str, Any] = {}
        if self.user_agent:
            config["user_agent"] = str(self.user_agent)
        # CourtListener keeps its own longer timeout unless its section sets one.
        if self.default_timeout_ms and key != "court_listener":
            config["timeout_ms"] = self.default_timeout_ms
        fields = dict(_SECTION_FIELDS, **_SOURCE_ONLY_FIELDS.get(key, {}))
        for name, value in self._section(key).items():
            coerce = fields.get(name)
            if coerce is None or value in (None, ""):
                continue
            try:
                config[name] = coerce(value)
            except (TypeError, ValueError):
                logger.warning("Ignoring invalid %s.%s=%r in sources config", key, name, value)
        if "timeout_ms" in config:
            try:
                config["timeout_ms"] = int(config["timeout_ms"])
            except (TypeError, ValueError):
                logger.warning("Ignoring invalid timeout_ms=%r for %s", config["timeout_ms"], key)
                config.pop("timeout_ms")
        return config

    def build_registry(self, options: FetchAllOptions) -> Tuple[AdapterRegistry, List[HealthStatus]]:
        """
        Register the always-on sources plus any credential-gated source whose key
        is present. Gated sources without a key are reported as skipped.
        """
        registry = AdapterRegistry()
        skipped: List[HealthStatus] = []

        registry.register(
            "federal_register",
            AdapterFactory(FederalRegisterAdapter, self._adapter_config("federal_register")),
        )
        registry.register(
            "court_listener",
            AdapterFactory(CourtListenerAdapter, self._adapter_config("court_listener")),
        )

        if is_configured_key(options.regulations_api_key):
            config = self._adapter_config("regulations_gov")
            config["api_key"] = options.regulations_api_key.strip()
            registry.register("regulations_gov", AdapterFactory(RegulationsGovAdapter, config))
        else:
            logger.info("Regulations.gov source disabled (missing API key).")
            skipped.append(_skipped_status(SourceName.REGULATIONS_GOV.value))

        if is_configured_key(options.open_states_api_key):
            config = self._adapter_config("open_states")
            config["api_key"] = options.open_states_api_key.strip()
            registry.register("open_states", AdapterFactory(OpenStatesAdapter, config))
        else:
            logger.info("OpenStates source disabled (missing API key).")
            skipped.append(_skipped_status(SourceName.OPEN_STATES.value))

        return registry, skipped

    def build_adapters(self, options: FetchAllOptions) -> Tuple[List[JsonSourceAdapter], List[HealthStatus]]:
        registry, skipped = self.build_registry(options)
        return registry.build_all(), skipped

    def run(self, options: Optional[FetchAllOptions] = None, *, now: Optional[datetime] = None) -> PipelineResult:
        options = options or FetchAllOptions()
        now = now or datetime.now(timezone.utc)
        adapters, health = self.build_adapters(options)

        collected: Dict[int, List[ConservationNewsItem]] = {}
        try:
            if adapters:
                with ThreadPoolExecutor(max_workers=len(adapters)) as executor:
                    future_map = {
                        executor.submit(self._collect, adapter, now): position
                        for position, adapter in enumerate(adapters)
                    }
                    for future in as_completed(future_map):
                        position = future_map[future]
                        adapter = adapters[position]
                        try:
                            items, status = future.result()
                        except Exception as exc:
                            # Normalization bugs stay contained to the source that triggered them.
                            message = redact_secrets(str(exc))
                            logger.error("Source %s failed: %s", getattr(adapter, "name", repr(adapter)), message)
                            items = []
                            status = HealthStatus(
                                name=getattr(adapter, "name", repr(adapter)),
                                healthy=False,
                                last_error=message,
                            )
                        collected[position] = items
                        health.append(status)
        finally:
            _close_adapters(adapters)

        for status in health:
            self._health[status.name] = status

        # Concatenate in adapter order so ties in date keep a deterministic order.
        merged: List[ConservationNewsItem] = []
        for position in range(len(adapters)):
            merged.extend(collected.get(position, []))

        items = self._post_process(merged)
        logger.info("Aggregated %d conservation items from %d sources", len(items), len(adapters))
        return PipelineResult(items=items, generated_at=now, health=health)

    def _collect(self, adapter: SourceAdapter, now: datetime) -> Tuple[List[ConservationNewsItem], HealthStatus]:
        records, status = adapter.fetch(now=now)
        taken = records[: adapter.limit]
        items = [adapter.normalize(record, index, now) for index, record in enumerate(taken)]
        unique = dedupe_by_key(items, key_fn=lambda item: item.id)
        if len(unique) != len(items):
            logger.debug("%s: dropped %d duplicate ids", adapter.name, len(items) - len(unique))
        status.extra["items_normalized"] = str(len(unique))
        return unique, status

    @staticmethod
    def _post_process(items: List[ConservationNewsItem]) -> List[ConservationNewsItem]:
        # Python's sort is stable with reverse=True, so equal dates keep merge order.
        ordered = sorted(items, key=lambda item: item.date.timestamp(), reverse=True)
        return [item for item in ordered if isinstance(item.link, str) and item.link]

    def get_health(self) -> List[HealthStatus]:
        return list(self._health.values())


def dedupe_by_key(items: Iterable[T], key_fn: Callable[[T], Hashable]) -> List[T]:
    seen = set()
    result: List[T] = []
    for item in items:
        key = key_fn(item)
        if key in seen:
            continue
        seen.add(key)
        result.append(item)
    return result


def _close_adapters(adapters: Iterable[Any]) -> None:
    """Release each adapter's HTTP session; adapters are rebuilt on every run."""
    for adapter in adapters:
        http = getattr(adapter, "http", None)
        if http is None:
            continue
        try:
            http.close()
        except Exception as exc:
            logger.debug("Closing HTTP session for %s failed: %s", getattr(adapter, "name", repr(adapter)), exc)


def _skipped_status(name: str) -> HealthStatus:
    return HealthStatus(name=name, healthy=True, extra={"skipped": SKIPPED_MISSING_KEY})
