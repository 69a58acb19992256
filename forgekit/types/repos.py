"""Repository data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RepositoryInfo:
    """Repository information."""

    id: int
    full_name: str  # "owner/repo"
    default_branch: str
    description: str | None = None
    private: bool | None = None
    html_url: str | None = None
    clone_url: str | None = None
    ssh_url: str | None = None
