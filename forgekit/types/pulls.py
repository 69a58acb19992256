"""Pull request data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class PullRequestRef:
    """Head or base of a pull request."""

    ref: str  # branch name, or "sha:<sha>" when the forge gave no name
    repo_full_name: str | None = None  # set for cross-repository pull requests


@dataclass(frozen=True)
class PullRequest:
    """Pull request (merge request on GitLab) information."""

    number: int
    title: str
    state: str  # "open", "opened", "closed", "merged"
    url: str | None = None
    head: PullRequestRef | None = None
    base: PullRequestRef | None = None
    body: str | None = None
