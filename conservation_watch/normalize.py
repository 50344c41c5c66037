"""
Pure mapping from each source's raw record shape into ``ConservationNewsItem``.

Nothing here performs I/O. Raw records are plain dicts decoded from JSON, so
every field access tolerates missing or wrongly typed values.
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote, urljoin

from conservation_watch.models import ConservationNewsItem, ConservationStatus, SourceName, SourceType

COURTLISTENER_BASE_URL = "https://www.courtlistener.com"
REGULATIONS_DOCUMENT_URL = "https://www.regulations.gov/document/"
OPENSTATES_HOME_URL = "https://openstates.org/"

DEFAULT_CATEGORY = "Policy"

# (tag, keywords) in the order tags are emitted.
KEYWORD_TAGS: List[Tuple[str, Tuple[str, ...]]] = [
    ("wetlands", ("wetland",)),
    ("waterfowl", ("waterfowl", "duck", "goose")),
    ("ESA", ("endangered species", "esa")),
    ("Clean Water Act", ("clean water act", "cwa")),
    ("public land", ("public land", "blm", "forest service")),
    ("hunting regs", ("hunting",)),
]

# First matching tag decides the category. "Clean Water Act" and
# "hunting regs" are tags only.
CATEGORY_PRIORITY: List[Tuple[str, str]] = [
    ("wetlands", "Wetlands"),
    ("waterfowl", "Waterfowl"),
    ("ESA", "Endangered Species"),
    ("public land", "Public Land"),
]

FEDERAL_REGISTER_SUMMARY = "Primary source document (rule/notice). Open the source for full details."
COURTLISTENER_SUMMARY = "Primary source: court docket/opinion search result. Open the source for context."
REGULATIONS_SUMMARY = "Rulemaking docket/document metadata. Open the source for full text and supporting materials."
OPENSTATES_SUMMARY = "Texas bill tracker metadata. Open the source for actions, sponsors, and status."


def safe_iso(value: Any) -> Optional[datetime]:
    """
    Parse an ISO-8601 date or timestamp into an aware UTC datetime.

    Returns ``None`` for missing, blank, non-string or unparsable input so the
    caller decides on the fallback instead of carrying an invalid date.
    """
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        # Offsets near year 1 or 9999 overflow once shifted to UTC.
        return parsed.astimezone(timezone.utc)
    except (ValueError, OverflowError):
        return None


def resolve_date(value: Any, now: datetime) -> datetime:
    """Parsed date, or ``now`` (the pipeline run time) when the value is unusable."""
    return safe_iso(value) or now


def make_id(prefix: str, *candidates: Any, fallback: Any = "") -> str:
    """``{prefix}:{native_id}`` using the first non-empty candidate, else ``fallback``."""
    for candidate in candidates:
        token = _native_id(candidate)
        if token:
            return f"{prefix}:{token}"
    return f"{prefix}:{fallback}"


def pick_field(record: Mapping[str, Any], *names: str) -> Any:
    """First non-empty value among ``names``, tried in the given order."""
    for name in names:
        value = record.get(name)
        if value not in (None, ""):
            return value
    return None


def categorize_from_text(text: Any) -> Tuple[str, List[str]]:
    """Keyword tags for ``text`` and the coarse category they imply."""
    lowered = text.lower() if isinstance(text, str) else ""
    tags = [tag for tag, keywords in KEYWORD_TAGS if any(kw in lowered for kw in keywords)]
    for tag, category in CATEGORY_PRIORITY:
        if tag in tags:
            return category, tags
    return DEFAULT_CATEGORY, tags


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _native_id(value: Any) -> str:
    if isinstance(value, bool):
        return ""
    if isinstance(value, (int, str)):
        return str(value).strip()
    return ""


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def normalize_federal_register(doc: Mapping[str, Any], index: int, now: datetime) -> ConservationNewsItem:
    title = _text(doc.get("title")) or "Federal Register document"
    category, tags = categorize_from_text(title)
    agencies = doc.get("agencies") if isinstance(doc.get("agencies"), list) else []
    agency_names = [_text(_as_dict(agency).get("name")) for agency in agencies]
    html_url = _text(doc.get("html_url"))
    return ConservationNewsItem(
        id=make_id("federalregister", doc.get("document_number"), html_url, fallback=index),
        title=title,
        date=resolve_date(doc.get("publication_date"), now),
        category=category,
        source=SourceName.FEDERAL_REGISTER.value,
        source_type=SourceType.RULEMAKING,
        status=ConservationStatus.WATCH,
        summary=_text(doc.get("abstract")) or FEDERAL_REGISTER_SUMMARY,
        link=html_url or _text(doc.get("pdf_url")),
        agency=", ".join(name for name in agency_names if name) or None,
        tags=["primary source", *tags],
    )


def normalize_court_listener(result: Mapping[str, Any], index: int, now: datetime) -> ConservationNewsItem:
    """
    CourtListener search results come back with camelCase or snake_case field
    names depending on the result type. Precedence per concept:
    name ``caseName`` > ``case_name``; date ``dateFiled`` > ``date_filed``;
    url ``absolute_url`` > ``absoluteUrl``; court ``court`` > ``court_id``.
    """
    title = _text(pick_field(result, "caseName", "case_name")) or "Court filing"
    absolute = _text(pick_field(result, "absolute_url", "absoluteUrl"))
    link = urljoin(COURTLISTENER_BASE_URL, absolute) if absolute else f"{COURTLISTENER_BASE_URL}/"
    category, tags = categorize_from_text(title)
    court = pick_field(result, "court", "court_id")
    return ConservationNewsItem(
        id=make_id("courtlistener", result.get("id"), absolute, fallback=index),
        title=title,
        date=resolve_date(pick_field(result, "dateFiled", "date_filed"), now),
        category="Courts" if category == DEFAULT_CATEGORY else category,
        source=SourceName.COURT_LISTENER.value,
        source_type=SourceType.COURT,
        status=ConservationStatus.ACTIVE,
        summary=_text(result.get("snippet")) or COURTLISTENER_SUMMARY,
        link=link,
        agency=str(court) if court is not None else None,
        tags=["primary source", "litigation", *tags],
    )


def normalize_regulations(doc: Mapping[str, Any], index: int, now: datetime) -> ConservationNewsItem:
    attributes = _as_dict(doc.get("attributes"))
    title = _text(attributes.get("title")) or "Regulations.gov document"
    category, tags = categorize_from_text(title)
    native_id = _native_id(doc.get("id"))
    return ConservationNewsItem(
        id=make_id("regulationsgov", native_id, fallback=index),
        title=title,
        date=resolve_date(attributes.get("postedDate"), now),
        category=category,
        source=SourceName.REGULATIONS_GOV.value,
        source_type=SourceType.RULEMAKING,
        status=ConservationStatus.WATCH,
        summary=REGULATIONS_SUMMARY,
        # The link is built from the document id; without one there is nothing to link to.
        link=f"{REGULATIONS_DOCUMENT_URL}{quote(native_id, safe='')}" if native_id else "",
        agency=_text(attributes.get("agencyId")) or None,
        tags=["primary source", "docket", *tags],
    )


def normalize_open_states(bill: Mapping[str, Any], index: int, now: datetime) -> ConservationNewsItem:
    bill_title = _text(bill.get("title"))
    identifier = _text(bill.get("identifier"))
    if identifier and bill_title:
        title = f"{identifier}: {bill_title}"
    else:
        title = identifier or bill_title or "OpenStates bill"
    category, tags = categorize_from_text(bill_title)
    openstates_url = _text(bill.get("openstates_url"))
    return ConservationNewsItem(
        id=make_id("openstates", bill.get("id"), openstates_url, fallback=index),
        title=title,
        date=resolve_date(pick_field(bill, "updated_at", "created_at"), now),
        category="Legislature" if category == DEFAULT_CATEGORY else category,
        source=SourceName.OPEN_STATES.value,
        source_type=SourceType.LEGISLATURE,
        status=ConservationStatus.WATCH,
        summary=OPENSTATES_SUMMARY,
        link=openstates_url or OPENSTATES_HOME_URL,
        agency="Texas Legislature",
        tags=["legislation", *tags],
    )
