"""forgekit exception classes."""

from enum import Enum


class ErrorKind(str, Enum):
    """Closed taxonomy of failure kinds used for control decisions."""

    CONFIG = "config"
    API = "api"
    NETWORK = "network"
    IO = "io"
    VALIDATION = "validation"
    AUTH_INVALID = "auth_invalid"
    PERMISSION_DENIED = "permission_denied"
    RATE_LIMITED = "rate_limited"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"


_RETRYABLE_KINDS = frozenset({ErrorKind.NETWORK, ErrorKind.RATE_LIMITED})
_AUTH_KINDS = frozenset({ErrorKind.AUTH_INVALID, ErrorKind.PERMISSION_DENIED})


class ForgeKitError(Exception):
    """Base exception for all forgekit errors."""

    kind: ErrorKind = ErrorKind.API

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        detail: str | None = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"[{self.code}] {message}")

    @property
    def code(self) -> str:
        return self.kind.value

    @property
    def is_retryable(self) -> bool:
        """True for temporary failures (network trouble, rate limiting)."""
        return self.kind in _RETRYABLE_KINDS

    @property
    def is_not_found(self) -> bool:
        return self.kind is ErrorKind.NOT_FOUND

    @property
    def is_auth_error(self) -> bool:
        return self.kind in _AUTH_KINDS


class ConfigurationError(ForgeKitError):
    """Raised when configuration is invalid, missing, or names an unknown provider."""

    kind = ErrorKind.CONFIG


class ApiError(ForgeKitError):
    """Raised on a generic remote failure."""

    kind = ErrorKind.API


class ResponseParseError(ApiError):
    """Raised when a response payload cannot be translated into the canonical model."""

    def __init__(self, entity: str, field: str, snippet: str = "") -> None:
        self.entity = entity
        self.field = field
        self.snippet = snippet
        message = f"Failed to parse {entity}: missing field '{field}'"
        if snippet:
            message = f"{message}. Body: {snippet}"
        super().__init__(message, detail=snippet or None)


class NetworkError(ForgeKitError):
    """Raised when the request never produced an HTTP response."""

    kind = ErrorKind.NETWORK


class LocalIOError(ForgeKitError):
    """Raised when a local file cannot be read or written."""

    kind = ErrorKind.IO


class ValidationError(ForgeKitError):
    """Raised when caller input is rejected before any remote call."""

    kind = ErrorKind.VALIDATION


class RepositoryNotInitializedError(ValidationError):
    """Raised when the target repository has no commits on its default branch."""

    pass


class AuthenticationError(ForgeKitError):
    """Raised when the access token is rejected (401)."""

    kind = ErrorKind.AUTH_INVALID


class PermissionDeniedError(ForgeKitError):
    """Raised when access is denied (403 without rate-limit indicators)."""

    kind = ErrorKind.PERMISSION_DENIED


class RateLimitedError(ForgeKitError):
    """Raised when rate limited."""

    kind = ErrorKind.RATE_LIMITED

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        detail: str | None = None,
        retry_after: int | None = None,
    ) -> None:
        super().__init__(message, status_code, detail)
        self.retry_after = retry_after


class NotFoundError(ForgeKitError):
    """Raised when a resource is not found (404)."""

    kind = ErrorKind.NOT_FOUND


class ConflictError(ForgeKitError):
    """Raised on conflicts (existing branch, existing remote file)."""

    kind = ErrorKind.CONFLICT


# Exception class for each kind, used by the classifier and the mock provider
ERROR_TYPES: dict[ErrorKind, type[ForgeKitError]] = {
    ErrorKind.CONFIG: ConfigurationError,
    ErrorKind.API: ApiError,
    ErrorKind.NETWORK: NetworkError,
    ErrorKind.IO: LocalIOError,
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.AUTH_INVALID: AuthenticationError,
    ErrorKind.PERMISSION_DENIED: PermissionDeniedError,
    ErrorKind.RATE_LIMITED: RateLimitedError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.CONFLICT: ConflictError,
}
