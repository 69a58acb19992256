"""File-related data models."""

from dataclasses import dataclass

from forgekit.types.commits import Commit


@dataclass(frozen=True)
class FileInfo:
    """
    Remote file metadata.

    ``sha`` is the concurrency token for updates; when it is None the file
    does not exist yet on the probed ref.
    """

    name: str | None = None
    path: str | None = None
    size: int | None = None
    content: str | None = None  # base64, when the forge returns it
    sha: str | None = None


@dataclass(frozen=True)
class FileContent:
    """File description returned after a create or update."""

    name: str
    path: str
    sha: str | None = None
    size: int | None = None
    download_url: str | None = None


@dataclass(frozen=True)
class FileCommitResponse:
    """Result of an upsert: the written file and the commit that wrote it."""

    content: FileContent
    commit: Commit
