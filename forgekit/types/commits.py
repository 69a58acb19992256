"""Commit and branch data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Author:
    """Commit author or committer."""

    name: str
    email: str
    date: str | None = None


@dataclass(frozen=True)
class Commit:
    """Commit metadata."""

    id: str
    message: str = ""
    author: Author | None = None
    timestamp: str | None = None


@dataclass(frozen=True)
class Branch:
    """Branch and the commit at its head."""

    name: str
    head_commit: Commit
