"""
Logging for forgekit.

Three loggers are used:

* ``forgekit``: top-level progress (listing, downloads, provider setup)
* ``forgekit.http``: one DEBUG line per request and per response
* ``forgekit.submit``: the submission workflow

Forge credentials travel as an ``Authorization: Bearer`` header, a GitLab
``PRIVATE-TOKEN`` header or an ``access_token``/``private_token`` query
parameter. Every HTTP log line passes through the redaction below, so none of
them reaches a record.
"""

import logging
import re
from typing import Any

REDACTED = "[REDACTED]"

_root_logger = logging.getLogger("forgekit")
_http_logger = logging.getLogger("forgekit.http")
_submit_logger = logging.getLogger("forgekit.submit")

_REDACTIONS = [
    (re.compile(r"\b(Bearer|token)\s+[\w.=\-]+", re.IGNORECASE), rf"\1 {REDACTED}"),
    (re.compile(r"(PRIVATE-TOKEN\s*:\s*)\S+", re.IGNORECASE), rf"\1{REDACTED}"),
    (re.compile(r"\b((?:access|private)_token=)[^&\s]+", re.IGNORECASE), rf"\1{REDACTED}"),
    (
        re.compile(r"(password|secret|api_key)(['\"]?\s*[:=]\s*)['\"][^'\"]*['\"]", re.IGNORECASE),
        rf"\1\2{REDACTED}",
    ),
]

# Substrings of header, param and body keys whose values are never logged
_SECRET_KEYS = frozenset({"authorization", "token", "secret", "password", "api_key"})

# File bodies (base64 "content") longer than this are logged as a length only
_CONTENT_PREVIEW_LIMIT = 64

_TOKEN_SUFFIX = 4


def configure_logging(
    level: int = logging.INFO,
    http_level: int | None = None,
    submit_level: int | None = None,
    handler: logging.Handler | None = None,
    format_string: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
) -> None:
    """
    Attach a handler to the ``forgekit`` logger and set levels.

    Args:
        level: Level for every forgekit logger
        http_level: Override for ``forgekit.http``; DEBUG shows each request
        submit_level: Override for ``forgekit.submit``
        handler: Where records go (stderr when None)
        format_string: Record format

    Example:
        ```python
        import logging
        from forgekit import configure_logging

        # Show every API call made during a submission
        configure_logging(http_level=logging.DEBUG)
        ```
    """
    handler = handler or logging.StreamHandler()
    handler.setFormatter(logging.Formatter(format_string))

    _root_logger.setLevel(level)
    _root_logger.addHandler(handler)
    _http_logger.setLevel(level if http_level is None else http_level)
    _submit_logger.setLevel(level if submit_level is None else submit_level)


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``forgekit`` or the ``forgekit.<name>`` child logger."""
    if name is None:
        return _root_logger
    return logging.getLogger(f"forgekit.{name}")


def mask_sensitive_data(text: str) -> str:
    """Replace credentials found in a header line, URL or free text with [REDACTED]."""
    for pattern, replacement in _REDACTIONS:
        text = pattern.sub(replacement, text)
    return text


def mask_token(token: str) -> str:
    """
    Printable form of an access token, e.g. ``****9f2c``.

    Tokens too short to hide most of their characters are fully redacted.
    """
    if len(token) <= _TOKEN_SUFFIX * 2:
        return REDACTED
    return "****" + token[-_TOKEN_SUFFIX:]


def _is_secret_key(key: str, secret_keys: frozenset[str] | set[str]) -> bool:
    lowered = key.lower()
    return any(secret in lowered for secret in secret_keys)


def _safe_value(key: str, value: Any, secret_keys: frozenset[str] | set[str]) -> Any:
    if _is_secret_key(key, secret_keys):
        return REDACTED
    if key.lower() == "content" and isinstance(value, str) and len(value) > _CONTENT_PREVIEW_LIMIT:
        return f"<{len(value)} chars>"
    if isinstance(value, dict):
        return safe_log_dict(value, secret_keys)
    if isinstance(value, list):
        return [safe_log_dict(item, secret_keys) if isinstance(item, dict) else item for item in value]
    return value


def safe_log_dict(
    data: dict[str, Any],
    sensitive_keys: frozenset[str] | set[str] | None = None,
) -> dict[str, Any]:
    """
    Copy of a request payload that is safe to log.

    Values under keys containing a secret-looking name (``Authorization``,
    ``PRIVATE-TOKEN``, ``password``...) are redacted at any depth, and long
    ``content`` strings (encoded file bodies) are shortened to their length.
    The input is not modified.
    """
    secret_keys = _SECRET_KEYS if sensitive_keys is None else sensitive_keys
    return {key: _safe_value(key, value, secret_keys) for key, value in data.items()}


def log_http_request(
    method: str,
    url: str,
    params: dict[str, Any] | None = None,
    body: dict[str, Any] | None = None,
) -> None:
    """DEBUG line for an outgoing API call: ``PUT <url> | params=... | body=...``."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    parts = [f"{method} {mask_sensitive_data(url)}"]
    if params:
        parts.append(f"params={safe_log_dict(params)}")
    if body:
        parts.append(f"body={safe_log_dict(body)}")
    _http_logger.debug(" | ".join(parts))


def log_http_response(status_code: int, url: str, elapsed_ms: float | None = None) -> None:
    """DEBUG line for an API response: ``Response 201 from <url> | elapsed=12.50ms``."""
    if not _http_logger.isEnabledFor(logging.DEBUG):
        return

    line = f"Response {status_code} from {mask_sensitive_data(url)}"
    if elapsed_ms is not None:
        line += f" | elapsed={elapsed_ms:.2f}ms"
    _http_logger.debug(line)


__all__ = [
    "REDACTED",
    "configure_logging",
    "get_logger",
    "mask_sensitive_data",
    "mask_token",
    "safe_log_dict",
    "log_http_request",
    "log_http_response",
]
