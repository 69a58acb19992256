"""
Shared fixtures for the forgekit test suite.

HTTP is never touched: the transport's httpx client gets its ``request``
method replaced by an HttpStub that answers from canned routes.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx
import pytest

from forgekit.testing.fixtures import (  # noqa: F401
    empty_provider,
    fixed_clock,
    mock_provider,
    sample_branch,
    sample_identity,
    sample_pull_request,
    sample_remote_config,
    sample_settings,
    sample_template,
)
from forgekit.transport import AsyncHTTPTransport, RetryConfig

API_URL = "https://forge.test/api/v5"
TOKEN = "test-token-0123456789"


@dataclass
class RecordedRequest:
    """A request seen by the stub."""

    method: str
    url: str
    params: dict[str, Any] | None
    json: Any


@dataclass
class CannedResponse:
    status_code: int = 200
    json: Any = None
    content: bytes | None = None
    headers: dict[str, str] | None = None

    def build(self) -> httpx.Response:
        if self.content is not None:
            return httpx.Response(self.status_code, content=self.content, headers=self.headers)
        if self.json is None:
            return httpx.Response(self.status_code, content=b"", headers=self.headers)
        return httpx.Response(self.status_code, json=self.json, headers=self.headers)


class HttpStub:
    """
    Stand-in for ``httpx.AsyncClient.request``.

    Routes are keyed on (method, url) exactly as the transport passes them.
    Several responses for one route are served in order, the last one
    repeating. Unrouted requests get a 404.
    """

    def __init__(self, transport: AsyncHTTPTransport) -> None:
        self.transport = transport
        self.requests: list[RecordedRequest] = []
        self._routes: dict[tuple[str, str], list[CannedResponse]] = {}

    def add(
        self,
        method: str,
        url: str,
        status_code: int = 200,
        json: Any = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._routes.setdefault((method, url), []).append(
            CannedResponse(status_code, json, content, headers)
        )

    async def __call__(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        self.requests.append(RecordedRequest(method, str(url), params, json))
        queue = self._routes.get((method, str(url)))
        if not queue:
            return httpx.Response(404, json={"message": "404 Not Found"})
        canned = queue.pop(0) if len(queue) > 1 else queue[0]
        return canned.build()

    def calls(self, method: str | None = None, url: str | None = None) -> list[RecordedRequest]:
        return [
            r for r in self.requests
            if (method is None or r.method == method) and (url is None or r.url == url)
        ]

    @property
    def mutations(self) -> list[RecordedRequest]:
        return [r for r in self.requests if r.method != "GET"]


@pytest.fixture
def stub_factory(monkeypatch: pytest.MonkeyPatch) -> Callable[..., HttpStub]:
    """Build transports with a given retry configuration, each behind an HttpStub."""

    def make(retry_config: RetryConfig | None = None) -> HttpStub:
        transport = AsyncHTTPTransport(
            base_url=API_URL,
            token=TOKEN,
            retry_config=retry_config or RetryConfig(max_retries=0),
        )
        stub = HttpStub(transport)
        monkeypatch.setattr(transport._client, "request", stub)
        return stub

    return make


@pytest.fixture
def http_stub(stub_factory: Callable[..., HttpStub]) -> HttpStub:
    """A transport without retries whose HTTP client is replaced by an HttpStub."""
    return stub_factory()
