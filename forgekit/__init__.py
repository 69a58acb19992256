"""forgekit - list, fetch and submit files through a Git forge's REST API."""

from forgekit._version import __version__
from forgekit.client import ForgeClient
from forgekit.config import (
    ProviderType,
    RemoteConfig,
    Settings,
    TemplateConfig,
    UserIdentity,
)
from forgekit.exceptions import (
    ApiError,
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    ErrorKind,
    ForgeKitError,
    LocalIOError,
    NetworkError,
    NotFoundError,
    PermissionDeniedError,
    RateLimitedError,
    RepositoryNotInitializedError,
    ResponseParseError,
    ValidationError,
)
from forgekit.factory import create_provider, detect_provider
from forgekit.fetch import DownloadReport, DownloadResult, fetch, format_bytes, list_remote
from forgekit.logging import configure_logging, get_logger
from forgekit.providers import (
    ForgeProvider,
    GitCodeProvider,
    GitHubProvider,
    GitLabProvider,
)
from forgekit.submit import SubmissionStage, SubmitRequest, SubmitResult, Submitter
from forgekit.transport import AsyncHTTPTransport, RetryConfig
from forgekit.tree import materialize


__all__ = [
    "__version__",
    # Main Client
    "ForgeClient",
    # Providers
    "ForgeProvider",
    "GitHubProvider",
    "GitLabProvider",
    "GitCodeProvider",
    "create_provider",
    "detect_provider",
    # Submission
    "Submitter",
    "SubmitRequest",
    "SubmitResult",
    "SubmissionStage",
    # Fetch
    "list_remote",
    "fetch",
    "format_bytes",
    "DownloadResult",
    "DownloadReport",
    # Tree
    "materialize",
    # Configuration
    "Settings",
    "UserIdentity",
    "RemoteConfig",
    "TemplateConfig",
    "ProviderType",
    # Exceptions
    "ErrorKind",
    "ForgeKitError",
    "ConfigurationError",
    "ApiError",
    "ResponseParseError",
    "NetworkError",
    "LocalIOError",
    "ValidationError",
    "RepositoryNotInitializedError",
    "AuthenticationError",
    "PermissionDeniedError",
    "RateLimitedError",
    "NotFoundError",
    "ConflictError",
    # Transport
    "AsyncHTTPTransport",
    "RetryConfig",
    # Logging
    "configure_logging",
    "get_logger",
]
