"""
Forge capability interface.

Every forge flavor implements ForgeProvider. Callers (the submitter, the
fetch helpers) only ever see this interface and the canonical types.
"""

import base64
import binascii
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar

from forgekit.config import DEFAULT_BRANCH, ProviderType
from forgekit.exceptions import ApiError, NotFoundError
from forgekit.logging import get_logger
from forgekit.types import (
    Branch,
    FileCommitResponse,
    FileInfo,
    PullRequest,
    RepositoryInfo,
    TreeEntry,
)

if TYPE_CHECKING:
    from forgekit.transport import AsyncHTTPTransport

logger = get_logger()


def encode_content(content: bytes) -> str:
    """Base64 text for a file body, as every content API expects it."""
    return base64.b64encode(content).decode("ascii")


def decode_content(encoded: str, path: str) -> bytes:
    """Decode a base64 file body; line breaks inserted by the forge are ignored."""
    try:
        return base64.b64decode("".join(encoded.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ApiError(f"Failed to decode file content for {path}: {e}") from e


def expect_file_payload(payload: Any, path: str) -> Any:
    """
    Contents endpoints answer a directory path with a JSON array of its
    entries. Asking for file metadata on a directory is a miss.
    """
    if isinstance(payload, list):
        raise NotFoundError(f"Not a file: {path}")
    return payload


class ForgeProvider(ABC):
    """
    Abstract interface over a forge's REST content API.

    Reads take an optional ``ref`` that defaults to the configured default
    branch. Failures are raised as ForgeKitError subclasses.
    """

    provider_type: ClassVar[ProviderType]

    def __init__(
        self,
        transport: "AsyncHTTPTransport",
        owner: str,
        repo: str,
        default_branch: str = DEFAULT_BRANCH,
    ) -> None:
        """
        Initialize the provider.

        Args:
            transport: Async HTTP transport bound to the forge's API URL
            owner: Repository owner (user, group or organization)
            repo: Repository name
            default_branch: Branch used when a read names no ref
        """
        self.transport = transport
        self.owner = owner
        self.repo = repo
        self.default_branch = default_branch

    @property
    def project_id(self) -> str:
        return f"{self.owner}/{self.repo}"

    def _ref(self, ref: str | None) -> str:
        return ref or self.default_branch

    @abstractmethod
    async def list_tree(
        self,
        path: str | None = None,
        recursive: bool = False,
        ref: str | None = None,
    ) -> list[TreeEntry]:
        """
        List repository contents.

        Args:
            path: Directory to list (root if None)
            recursive: List every descendant instead of immediate children
            ref: Branch, tag or commit (default branch if None)

        Returns:
            Tree entries under path
        """

    @abstractmethod
    async def get_file_content(self, path: str, ref: str | None = None) -> bytes:
        """Get the decoded bytes of a file."""

    @abstractmethod
    async def get_file_info(self, path: str, ref: str | None = None) -> FileInfo:
        """Get file metadata, including the SHA needed to update it."""

    @abstractmethod
    async def create_branch(self, name: str, source_branch: str) -> Branch:
        """
        Create a branch from the head of source_branch.

        Raises:
            ConflictError: If the branch already exists
        """

    @abstractmethod
    async def upsert_file(
        self,
        path: str,
        content: bytes,
        branch: str,
        message: str,
        author_name: str,
        author_email: str,
    ) -> FileCommitResponse:
        """
        Create a file, or update it when it already exists.

        Args:
            path: Repository path of the file
            content: Raw file bytes
            branch: Branch to commit on
            message: Commit message
            author_name: Commit author name
            author_email: Commit author email

        Returns:
            The written file and the commit that wrote it
        """

    @abstractmethod
    async def create_pull_request(
        self,
        title: str,
        head: str,
        base: str,
        body: str | None = None,
    ) -> PullRequest:
        """Open a pull request (merge request on GitLab) from head into base."""

    @abstractmethod
    async def assign_reviewers(self, number: int, reviewers: list[str]) -> bool:
        """
        Request reviews on a pull request, best effort.

        Returns:
            True when reviewers were assigned, False when this forge does not
            support the endpoint or no reviewer could be resolved
        """

    @abstractmethod
    async def get_repository_info(self) -> RepositoryInfo:
        """Get repository metadata."""

    async def file_exists(self, path: str, ref: str | None = None) -> bool:
        """
        Check whether a file exists.

        Only NotFoundError counts as "absent"; any other failure propagates.
        """
        try:
            await self.get_file_info(path, ref)
        except NotFoundError:
            return False
        return True

    async def _resolve_existing_sha(self, path: str, branch: str) -> str | None:
        """
        SHA of the file to overwrite: looked up on the target branch first,
        then on the default branch. None means the file is new.
        """
        for candidate in dict.fromkeys((branch, self.default_branch)):
            try:
                info = await self.get_file_info(path, candidate)
            except NotFoundError:
                continue
            if info.sha:
                logger.debug("Found %s on %s (sha %s)", path, candidate, info.sha)
                return info.sha
        logger.debug("%s does not exist on %s, creating it", path, branch)
        return None

    async def close(self) -> None:
        """Close the underlying transport."""
        await self.transport.close()

    async def __aenter__(self) -> "ForgeProvider":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()
