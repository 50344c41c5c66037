"""
CourtListener opinion search. Free but rate-limited, so requests identify the
caller through the User-Agent and get a longer timeout.

Docs: https://www.courtlistener.com/api/rest-info/
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Mapping

from conservation_watch.adapters.base import JsonSourceAdapter
from conservation_watch.models import ConservationNewsItem, SourceName
from conservation_watch.normalize import normalize_court_listener

DEFAULT_QUERY = 'Texas (wetlands OR waterfowl OR "Clean Water Act" OR "Endangered Species Act")'
DEFAULT_USER_AGENT = "BlueDuckFoundation/1.0 (contact: admin@theblueduck.org)"
DEFAULT_TIMEOUT_MS = 25000


class CourtListenerAdapter(JsonSourceAdapter):
    name = SourceName.COURT_LISTENER.value
    endpoint = "https://www.courtlistener.com/api/rest/v3/search/"
    results_field = "results"

    def __init__(
        self,
        query: str = DEFAULT_QUERY,
        page_size: int = 20,
        limit: int = 8,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        user_agent: str = DEFAULT_USER_AGENT,
        **kwargs,
    ) -> None:
        self.user_agent = user_agent
        super().__init__(
            query=query,
            page_size=page_size,
            limit=limit,
            timeout_ms=timeout_ms,
            user_agent=user_agent,
            **kwargs,
        )

    def build_params(self) -> Dict[str, str]:
        return {
            "q": self.query,
            "order_by": "dateFiled desc",
            "type": "o",
            "page_size": str(self.page_size),
        }

    def build_headers(self) -> Dict[str, str]:
        return {"User-Agent": self.user_agent}

    def normalize(self, record: Mapping[str, Any], index: int, now: datetime) -> ConservationNewsItem:
        return normalize_court_listener(record, index, now)
