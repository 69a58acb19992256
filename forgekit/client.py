"""
forgekit client.

Ties settings, a provider, the submitter and the fetch helpers together.
"""

from pathlib import Path
from typing import Any

from forgekit.config import Settings
from forgekit.factory import create_provider
from forgekit.fetch import DEFAULT_MAX_CONCURRENCY, DownloadReport, fetch, list_remote
from forgekit.providers.base import ForgeProvider
from forgekit.submit import SubmitRequest, SubmitResult, Submitter
from forgekit.transport import RetryConfig
from forgekit.types import TreeEntry


class ForgeClient:
    """
    Client for listing, fetching and submitting files in one repository.

    Example:
        ```python
        import asyncio
        from forgekit import ForgeClient, SubmitRequest

        async def main():
            async with ForgeClient.from_file() as client:
                for entry in await client.list("docs"):
                    print(entry.name)
                result = await client.submit(
                    SubmitRequest("build.sh", "scripts", "feat: add build script")
                )
                print(result.pull_request.url)

        asyncio.run(main())
        ```
    """

    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        settings: Settings,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
        provider: ForgeProvider | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            settings: Validated settings
            timeout: Request timeout in seconds (default: 30.0)
            retry_config: Configuration for retry behavior (optional)
            provider: Provider to use instead of one built from settings.remote
        """
        self.settings = settings
        self.provider = provider or create_provider(
            settings.remote, timeout=timeout, retry_config=retry_config
        )
        self.submitter = Submitter(
            self.provider,
            settings.user,
            settings.remote.default_branch,
            settings.template,
        )

    @classmethod
    def from_env(
        cls,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
    ) -> "ForgeClient":
        """
        Create a client from ``FORGEKIT_*`` environment variables.

        Raises:
            ConfigurationError: If required variables are missing or invalid
        """
        return cls(Settings.from_env(), timeout=timeout, retry_config=retry_config)

    @classmethod
    def from_file(
        cls,
        path: str | Path | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        retry_config: RetryConfig | None = None,
    ) -> "ForgeClient":
        """
        Create a client from a TOML config file (default location if None).

        Raises:
            ConfigurationError: If the file is unreadable or invalid
        """
        return cls(Settings.from_toml(path), timeout=timeout, retry_config=retry_config)

    async def list(
        self,
        path: str | None = None,
        recursive: bool = False,
        ref: str | None = None,
    ) -> list[TreeEntry]:
        """List a remote path; see forgekit.fetch.list_remote."""
        return await list_remote(self.provider, path, recursive, ref)

    async def fetch(
        self,
        remote_path: str,
        output_dir: str | Path = ".",
        ref: str | None = None,
        force: bool = False,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
    ) -> DownloadReport:
        """Download a remote file or directory; see forgekit.fetch.fetch."""
        return await fetch(
            self.provider, remote_path, output_dir, ref, force, max_concurrency
        )

    async def submit(self, request: SubmitRequest) -> SubmitResult:
        """Submit a local file as a pull request."""
        return await self.submitter.submit(request)

    async def close(self) -> None:
        """Close the client and release resources."""
        await self.provider.close()

    async def __aenter__(self) -> "ForgeClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, *args: Any) -> None:
        """Async context manager exit - closes the client."""
        await self.close()
