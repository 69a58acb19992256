"""forgekit type definitions.

This module exports the canonical data model every provider produces.
"""

from forgekit.types.commits import Author, Branch, Commit
from forgekit.types.files import FileCommitResponse, FileContent, FileInfo
from forgekit.types.pulls import PullRequest, PullRequestRef
from forgekit.types.repos import RepositoryInfo
from forgekit.types.tree import DIRECTORY_MODE, FILE_MODE, EntryKind, TreeEntry

__all__ = [
    # Tree types
    "TreeEntry",
    "EntryKind",
    "DIRECTORY_MODE",
    "FILE_MODE",
    # Commit types
    "Author",
    "Commit",
    "Branch",
    # File types
    "FileInfo",
    "FileContent",
    "FileCommitResponse",
    # Pull request types
    "PullRequest",
    "PullRequestRef",
    # Repository types
    "RepositoryInfo",
]
