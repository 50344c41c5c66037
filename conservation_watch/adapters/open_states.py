"""
OpenStates bill search scoped to one jurisdiction. The key travels in the
``X-API-KEY`` header.

Docs: https://docs.openstates.org/api-v3/
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Mapping

from conservation_watch.adapters.base import JsonSourceAdapter
from conservation_watch.models import ConservationNewsItem, SourceName
from conservation_watch.normalize import normalize_open_states

DEFAULT_QUERY = "wetlands OR waterfowl OR wildlife OR hunting OR conservation"
DEFAULT_JURISDICTION = "Texas"


class OpenStatesAdapter(JsonSourceAdapter):
    name = SourceName.OPEN_STATES.value
    endpoint = "https://v3.openstates.org/bills"
    results_field = "results"

    def __init__(
        self,
        api_key: str,
        query: str = DEFAULT_QUERY,
        jurisdiction: str = DEFAULT_JURISDICTION,
        page_size: int = 20,
        limit: int = 8,
        **kwargs,
    ) -> None:
        if not api_key:
            raise ValueError("OpenStatesAdapter requires an API key.")
        self.api_key = api_key
        self.jurisdiction = jurisdiction
        super().__init__(query=query, page_size=page_size, limit=limit, **kwargs)

    def build_params(self) -> Dict[str, str]:
        return {
            "jurisdiction": self.jurisdiction,
            "q": self.query,
            "per_page": str(self.page_size),
        }

    def build_headers(self) -> Dict[str, str]:
        return {"X-API-KEY": self.api_key}

    def normalize(self, record: Mapping[str, Any], index: int, now: datetime) -> ConservationNewsItem:
        return normalize_open_states(record, index, now)
