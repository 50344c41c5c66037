"""
Regulations.gov document search. Needs an api.data.gov key, sent as a query param.

Docs: https://open.gsa.gov/api/regulationsgov/
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Mapping

from conservation_watch.adapters.base import JsonSourceAdapter
from conservation_watch.models import ConservationNewsItem, SourceName
from conservation_watch.normalize import normalize_regulations

DEFAULT_QUERY = "Texas wetlands OR waterfowl OR Endangered Species Act OR Clean Water Act"


class RegulationsGovAdapter(JsonSourceAdapter):
    name = SourceName.REGULATIONS_GOV.value
    endpoint = "https://api.regulations.gov/v4/documents"
    results_field = "data"

    def __init__(self, api_key: str, query: str = DEFAULT_QUERY, page_size: int = 20, limit: int = 8, **kwargs) -> None:
        if not api_key:
            raise ValueError("RegulationsGovAdapter requires an API key.")
        self.api_key = api_key
        super().__init__(query=query, page_size=page_size, limit=limit, **kwargs)

    def build_params(self) -> Dict[str, str]:
        return {
            "filter[searchTerm]": self.query,
            "page[size]": str(self.page_size),
            "api_key": self.api_key,
        }

    def normalize(self, record: Mapping[str, Any], index: int, now: datetime) -> ConservationNewsItem:
        return normalize_regulations(record, index, now)
