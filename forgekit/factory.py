"""
Provider factory.

Maps the closed set of provider identifiers onto their implementations.
"""

from forgekit.config import ProviderType, RemoteConfig
from forgekit.exceptions import ConfigurationError
from forgekit.logging import get_logger, mask_token
from forgekit.providers import (
    ForgeProvider,
    GitCodeProvider,
    GitHubProvider,
    GitLabProvider,
)
from forgekit.transport import AsyncHTTPTransport, RetryConfig

logger = get_logger()

PROVIDERS: dict[ProviderType, type[ForgeProvider]] = {
    ProviderType.GITHUB: GitHubProvider,
    ProviderType.GITLAB: GitLabProvider,
    ProviderType.GITCODE: GitCodeProvider,
}


def create_provider(
    config: RemoteConfig,
    transport: AsyncHTTPTransport | None = None,
    timeout: float = 30.0,
    retry_config: RetryConfig | None = None,
) -> ForgeProvider:
    """
    Create the provider for a remote.

    Args:
        config: Validated remote configuration
        transport: Transport to use (default: a new one for config.api_url)
        timeout: Request timeout in seconds, for a new transport
        retry_config: Retry behavior, for a new transport

    Returns:
        Provider bound to config.owner/config.repo

    Raises:
        ConfigurationError: If the provider identifier is not supported
    """
    provider_type = config.provider
    if not isinstance(provider_type, ProviderType):
        provider_type = ProviderType.parse(str(provider_type))

    provider_cls = PROVIDERS.get(provider_type)
    if provider_cls is None:
        raise ConfigurationError(f"Unsupported provider: {provider_type.value}")

    if transport is None:
        transport = AsyncHTTPTransport(
            base_url=config.api_url,
            token=config.token,
            timeout=timeout,
            retry_config=retry_config,
        )

    logger.debug(
        "Using %s provider for %s at %s (token %s)",
        provider_type.value,
        config.project_id,
        config.api_url,
        mask_token(config.token),
    )
    return provider_cls(
        transport=transport,
        owner=config.owner,
        repo=config.repo,
        default_branch=config.default_branch,
    )


def detect_provider(api_url: str) -> ProviderType | None:
    """Guess the provider from an API URL; None when the host is not recognised."""
    url = api_url.lower()
    if "gitcode.com" in url:
        return ProviderType.GITCODE
    if "gitlab" in url or "git-lab" in url:
        return ProviderType.GITLAB
    if "github.com" in url:
        return ProviderType.GITHUB
    return None
