"""
Error classification for forgekit.

Maps HTTP status codes, response bodies and transport failures onto the
closed ``ErrorKind`` taxonomy, and exposes the predicates that drive control
flow elsewhere (retry decisions, not-found fallbacks).
"""

import re
from collections.abc import Mapping

import httpx

from forgekit.exceptions import (
    ApiError,
    AuthenticationError,
    ConflictError,
    ForgeKitError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitedError,
)

# Maximum number of body characters carried into an error message
SNIPPET_LENGTH = 200

_RATE_LIMIT_PATTERN = re.compile(r"\brate[\s_-]?limit|\blimit(?:s|ed)?\b", re.IGNORECASE)
_ALREADY_EXISTS_PATTERN = re.compile(r"already\s+exist", re.IGNORECASE)

# Statuses that mean "this endpoint is not available on this forge"
UNSUPPORTED_STATUSES = frozenset({404, 405, 501})


def truncate(text: str, limit: int = SNIPPET_LENGTH) -> str:
    """Shorten text for inclusion in an error message."""
    if len(text) <= limit:
        return text
    return f"{text[:limit]}..."


def _retry_after(headers: Mapping[str, str]) -> int | None:
    value = headers.get("Retry-After")
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _looks_rate_limited(body_text: str, headers: Mapping[str, str]) -> bool:
    if headers.get("X-RateLimit-Remaining") == "0":
        return True
    return bool(_RATE_LIMIT_PATTERN.search(body_text))


def classify_response(
    status_code: int,
    body_text: str,
    headers: Mapping[str, str] | None = None,
) -> ForgeKitError:
    """
    Turn a non-2xx response into a typed exception.

    Args:
        status_code: HTTP status code
        body_text: Response body read as text
        headers: Response headers (optional)

    Returns:
        Appropriate ForgeKitError subclass
    """
    headers = headers or {}
    snippet = truncate(body_text)

    if status_code == 401:
        return AuthenticationError(
            f"Authentication failed: {snippet}", status_code, body_text
        )
    elif status_code == 403:
        if _looks_rate_limited(body_text, headers):
            return RateLimitedError(
                f"Rate limited: {snippet}",
                status_code,
                body_text,
                retry_after=_retry_after(headers),
            )
        return PermissionDeniedError(
            f"Permission denied: {snippet}", status_code, body_text
        )
    elif status_code == 404:
        return NotFoundError(f"Resource not found: {snippet}", status_code, body_text)
    elif status_code == 409:
        return ConflictError(f"Resource conflict: {snippet}", status_code, body_text)
    elif status_code in (400, 422) and _ALREADY_EXISTS_PATTERN.search(body_text):
        return ConflictError(f"Resource conflict: {snippet}", status_code, body_text)
    elif status_code == 429:
        return RateLimitedError(
            f"Rate limited: {snippet}",
            status_code,
            body_text,
            retry_after=_retry_after(headers),
        )
    return ApiError(f"API error (HTTP {status_code}): {snippet}", status_code, body_text)


def classify_transport_error(error: httpx.HTTPError) -> NetworkError:
    """Wrap a transport-level failure (connect, timeout, protocol) as a NetworkError."""
    return NetworkError(f"{type(error).__name__}: {error}")


def is_retryable(error: BaseException) -> bool:
    return isinstance(error, ForgeKitError) and error.is_retryable


def is_not_found(error: BaseException) -> bool:
    return isinstance(error, ForgeKitError) and error.is_not_found


def is_unsupported(error: BaseException) -> bool:
    """True when the remote endpoint does not exist on this forge."""
    return (
        isinstance(error, ForgeKitError)
        and error.status_code in UNSUPPORTED_STATUSES
    )
