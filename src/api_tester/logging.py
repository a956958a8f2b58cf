"""Logging setup and secret masking for request logs."""

import logging
import re
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

_SENSITIVE_KEYS = re.compile(
    r"(token|secret|api[_-]?key|password|authorization|cookie)", re.IGNORECASE
)

REDACTED = "***REDACTED***"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    # httpx logs every request line with its full query string.
    if logging.getLogger().getEffectiveLevel() > logging.DEBUG:
        logging.getLogger("httpx").setLevel(logging.WARNING)


def is_sensitive(key: Any) -> bool:
    return bool(_SENSITIVE_KEYS.search(str(key)))


def redact_payload(payload: Any) -> Any:
    """Mask values stored under credential-like keys, at any depth."""
    if isinstance(payload, dict):
        return {
            key: REDACTED if is_sensitive(key) else redact_payload(value)
            for key, value in payload.items()
        }
    if isinstance(payload, list):
        return [redact_payload(item) for item in payload]
    return payload


def redact_url(url: str) -> str:
    """Mask credential-like query parameters, e.g. an API key sent in the query."""
    parts = urlsplit(url)
    if not parts.query:
        return url
    pairs = parse_qsl(parts.query, keep_blank_values=True)
    if not any(is_sensitive(name) for name, _ in pairs):
        return url
    query = urlencode([(name, REDACTED if is_sensitive(name) else value) for name, value in pairs])
    return urlunsplit(parts._replace(query=query))
