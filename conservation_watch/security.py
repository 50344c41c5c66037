import re

# Regulations.gov takes its key as ?api_key=...; OpenStates as an X-API-KEY header.
_QUERY_KEY = re.compile(r"(?i)(api[_-]?key=)([^&\s]+)")
_HEADER_KEY = re.compile(r"(?i)(x-api-key['\"]?\s*[:=]\s*['\"]?)([A-Za-z0-9._\-]+)")


def redact_secrets(text: str) -> str:
    """Redact upstream API keys from log lines and error strings."""
    if not isinstance(text, str):
        return text
    redacted = _QUERY_KEY.sub(r"\1***REDACTED***", text)
    return _HEADER_KEY.sub(r"\1***REDACTED***", redacted)


def is_configured_key(value) -> bool:
    """Return True if an env var-like key is configured (not empty or placeholder)."""
    if not value or not isinstance(value, str):
        return False
    s = value.strip()
    if not s:
        return False
    return ('YOUR_' not in s) and ('your_' not in s)
