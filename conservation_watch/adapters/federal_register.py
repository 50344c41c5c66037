"""
Federal Register document search. No key required.

Docs: https://www.federalregister.gov/developers/documentation/api/v1
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, List, Mapping, Tuple

from conservation_watch.adapters.base import JsonSourceAdapter
from conservation_watch.models import ConservationNewsItem, SourceName
from conservation_watch.normalize import normalize_federal_register

DEFAULT_QUERY = "Texas wetlands OR waterfowl OR endangered species OR Clean Water Act"

# Keeps the payload small and the shape stable.
FIELDS = [
    "title",
    "publication_date",
    "html_url",
    "pdf_url",
    "agencies",
    "abstract",
    "document_number",
]


class FederalRegisterAdapter(JsonSourceAdapter):
    name = SourceName.FEDERAL_REGISTER.value
    endpoint = "https://www.federalregister.gov/api/v1/documents.json"
    results_field = "results"

    def __init__(self, query: str = DEFAULT_QUERY, page_size: int = 25, limit: int = 12, **kwargs) -> None:
        super().__init__(query=query, page_size=page_size, limit=limit, **kwargs)

    def build_params(self) -> List[Tuple[str, Any]]:
        params: List[Tuple[str, Any]] = [
            ("conditions[term]", self.query),
            ("order", "newest"),
            ("per_page", str(self.page_size)),
        ]
        params.extend(("fields[]", name) for name in FIELDS)
        return params

    def normalize(self, record: Mapping[str, Any], index: int, now: datetime) -> ConservationNewsItem:
        return normalize_federal_register(record, index, now)
