"""
Async HTTP Transport for forgekit.

Handles async HTTP communication with forge REST APIs: authentication
headers, retry with backoff for idempotent requests, and classification of
failures into typed exceptions using an httpx async client.
"""

import asyncio
import random
import time
from collections.abc import Callable, Coroutine
from dataclasses import dataclass, field
from typing import Any

import httpx

from forgekit._version import __version__
from forgekit.classifier import classify_response, classify_transport_error, truncate
from forgekit.exceptions import ForgeKitError, ResponseParseError
from forgekit.logging import log_http_request, log_http_response


USER_AGENT = f"forgekit/{__version__}"
ACCEPT = "application/vnd.github+json"


@dataclass
class RetryConfig:
    """Configuration for automatic retry behavior."""

    max_retries: int = 2
    backoff_factor: float = 2.0
    retry_methods: frozenset[str] = field(default_factory=lambda: frozenset({"GET"}))
    retry_on: list[int] = field(default_factory=lambda: [502, 503, 504])
    respect_retry_after: bool = True
    max_backoff: float = 60.0  # Maximum backoff time in seconds
    jitter: float = 0.1  # Jitter factor (0.1 = ±10%)


class AsyncHTTPTransport:
    """
    Async HTTP transport layer for forge APIs.

    Handles:
    - Bearer authentication, Accept and User-Agent headers
    - Exponential backoff with jitter for idempotent retries
    - Retry-After header respect for rate limiting
    - Error response classification into typed exceptions
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        retry_config: RetryConfig | None = None,
        user_agent: str = USER_AGENT,
    ) -> None:
        """
        Initialize async HTTP transport.

        Args:
            base_url: Base URL for API requests (e.g., "https://api.github.com")
            token: Access token sent as a Bearer credential
            timeout: Request timeout in seconds
            retry_config: Configuration for retry behavior
            user_agent: User-Agent header value
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retry_config = retry_config or RetryConfig()

        self._client = httpx.AsyncClient(
            base_url=self.base_url + "/",
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": ACCEPT,
                "User-Agent": user_agent,
            },
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def request_json(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """
        Make a request and parse the JSON response.

        Args:
            method: HTTP method
            path: API path relative to the base URL (e.g., "repos/o/r/pulls")
            params: Query parameters
            body: JSON request body (for POST/PUT)

        Returns:
            Parsed JSON response, or None for an empty body

        Raises:
            ForgeKitError: On API errors
        """
        response = await self._send(method, path, params, body)
        if not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ResponseParseError(
                "response", "<json>", truncate(response.text)
            ) from e

    async def request_bytes(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> bytes:
        """
        Make a request and return the raw response body.

        ``path`` may also be an absolute URL, as handed out in download links.
        """
        response = await self._send(method, path, params, None)
        return response.content

    async def _send(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None,
        body: dict[str, Any] | None,
    ) -> httpx.Response:
        url = path if path.startswith(("http://", "https://")) else path.lstrip("/")

        async def make_request() -> httpx.Response:
            log_http_request(method, url, params, body)
            started = time.monotonic()
            response = await self._client.request(method, url, params=params, json=body)
            log_http_response(
                response.status_code, url, (time.monotonic() - started) * 1000
            )
            return response

        return await self._execute_with_retry(method, make_request)

    async def _execute_with_retry(
        self,
        method: str,
        request_fn: Callable[[], Coroutine[Any, Any, httpx.Response]],
    ) -> httpx.Response:
        """
        Execute a request, retrying idempotent methods on retryable errors.

        Args:
            method: HTTP method, used to decide whether retrying is safe
            request_fn: Async function that makes the HTTP request

        Returns:
            The successful response

        Raises:
            ForgeKitError: On non-retryable errors or after max retries
        """
        for attempt in range(self.retry_config.max_retries + 1):
            try:
                response = await request_fn()
            except httpx.HTTPError as e:
                error: ForgeKitError = classify_transport_error(e)
                if not self._should_retry(method, error, attempt):
                    raise error from e
                await asyncio.sleep(self._get_backoff_time(attempt, None))
                continue

            if response.status_code < 400:
                return response

            error = classify_response(
                response.status_code, response.text, response.headers
            )
            if not self._should_retry(method, error, attempt):
                raise error

            retry_after = response.headers.get("Retry-After")
            await asyncio.sleep(self._get_backoff_time(attempt, retry_after))

        # Only reachable with a negative max_retries
        raise ForgeKitError("Request failed with no error details")

    def _should_retry(self, method: str, error: ForgeKitError, attempt: int) -> bool:
        """
        Determine if a request should be retried.

        Args:
            method: HTTP method of the request
            error: Classified failure
            attempt: Current attempt number (0-indexed)

        Returns:
            True if the request should be retried
        """
        if attempt >= self.retry_config.max_retries:
            return False

        if method.upper() not in self.retry_config.retry_methods:
            return False

        return error.is_retryable or error.status_code in self.retry_config.retry_on

    def _get_backoff_time(self, attempt: int, retry_after: str | None) -> float:
        """
        Calculate backoff time for retry.

        Uses exponential backoff with jitter, respecting Retry-After header
        if present.

        Args:
            attempt: Current attempt number (0-indexed)
            retry_after: Value of Retry-After header (if present)

        Returns:
            Time to wait in seconds
        """
        if retry_after and self.retry_config.respect_retry_after:
            try:
                return min(float(retry_after), self.retry_config.max_backoff)
            except ValueError:
                pass  # Fall through to exponential backoff

        base_wait = self.retry_config.backoff_factor ** attempt

        jitter_range = base_wait * self.retry_config.jitter
        jitter = random.uniform(-jitter_range, jitter_range)
        wait_time = base_wait + jitter

        return min(wait_time, self.retry_config.max_backoff)
