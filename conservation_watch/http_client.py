"""
JSON GET helper with a bounded timeout and polite headers, shared by adapters.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union

import requests

from conservation_watch.security import redact_secrets

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 20000
BODY_EXCERPT_CHARS = 200

Params = Union[Mapping[str, Any], Iterable[Tuple[str, Any]]]


class HttpError(requests.HTTPError):
    """Non-2xx response. Carries enough context to diagnose the upstream failure."""

    def __init__(self, status_code: int, url: str, body_excerpt: str = "", response=None):
        self.status_code = status_code
        self.url = redact_secrets(url)
        self.body_excerpt = body_excerpt
        message = f"HTTP {status_code} for {self.url}"
        if body_excerpt:
            message += f" :: {body_excerpt}"
        super().__init__(message, response=response)


class HttpClient:
    """
    Single-attempt GET client. No retries: a failed request is reported to the
    caller, and the next aggregation run is the retry.
    """

    def __init__(self, timeout_ms: int = DEFAULT_TIMEOUT_MS, user_agent: str | None = None):
        self.timeout_ms = timeout_ms
        self.session = requests.Session()
        self.session.headers.update({"Accept": "application/json"})
        if user_agent:
            self.session.headers["User-Agent"] = user_agent

    def get_json(
        self,
        url: str,
        params: Optional[Params] = None,
        *,
        timeout_ms: Optional[int] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        """
        GET ``url`` and return the decoded JSON body.

        Raises ``requests.Timeout``/``requests.ConnectionError`` on transport
        failures, ``HttpError`` on a non-2xx status and ``ValueError`` when the
        body is not JSON. The payload shape is not validated.

        The timeout bounds the connect and each socket read, not the whole
        request: a server that keeps trickling bytes can hold a call past it.
        """
        timeout = (timeout_ms if timeout_ms is not None else self.timeout_ms) / 1000.0
        resp = self.session.get(url, params=params, headers=headers or None, timeout=timeout)
        if not 200 <= resp.status_code < 300:
            try:
                text = resp.text or ""
            except Exception:
                text = ""
            raise HttpError(resp.status_code, resp.url or url, redact_secrets(text[:BODY_EXCERPT_CHARS]), response=resp)
        return resp.json()

    def close(self) -> None:
        self.session.close()
