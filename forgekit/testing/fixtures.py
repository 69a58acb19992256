"""
Pytest fixtures for forgekit testing.

Provides common fixtures for testing code built on forgekit providers and
the submission workflow.
"""

from collections.abc import Callable, Generator
from datetime import datetime, timezone

import pytest

from forgekit.config import (
    ProviderType,
    RemoteConfig,
    Settings,
    TemplateConfig,
    UserIdentity,
)
from forgekit.testing.mock import MockForgeProvider
from forgekit.types import Branch, Commit, PullRequest, PullRequestRef

FIXED_TIME = datetime(2024, 5, 17, 9, 30, 0, tzinfo=timezone.utc)


# ============================================================================
# Mock Provider Fixtures
# ============================================================================


@pytest.fixture
def mock_provider() -> Generator[MockForgeProvider, None, None]:
    """
    Provide a MockForgeProvider whose default branch holds a README and a
    small source tree.

    Example:
        ```python
        async def test_my_feature(mock_provider):
            entries = await mock_provider.list_tree()
            assert mock_provider.was_called("list_tree")
        ```
    """
    provider = MockForgeProvider(
        files={
            "README.md": b"# demo\n",
            "src/main.py": b"print('hello')\n",
            "src/util/helpers.py": b"def helper():\n    return 1\n",
        },
        owner="test-owner",
        repo="test-repo",
    )
    yield provider
    provider.reset()


@pytest.fixture
def empty_provider() -> MockForgeProvider:
    """Provide a MockForgeProvider for a repository without commits."""
    return MockForgeProvider(owner="test-owner", repo="test-repo")


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def sample_identity() -> UserIdentity:
    """Provide a committer identity with sign-off enabled."""
    return UserIdentity(name="Test User", email="test@example.com", auto_signoff=True)


@pytest.fixture
def sample_template() -> TemplateConfig:
    """Provide a pull request template with a title prefix."""
    return TemplateConfig(pr_prefix="[TEST]")


@pytest.fixture
def sample_remote_config() -> RemoteConfig:
    """Provide a GitCode remote for test-owner/test-repo."""
    return RemoteConfig(
        provider=ProviderType.GITCODE,
        api_url="https://api.gitcode.com/api/v5",
        token="test-token-0123456789",
        owner="test-owner",
        repo="test-repo",
    )


@pytest.fixture
def sample_settings(
    sample_identity: UserIdentity,
    sample_remote_config: RemoteConfig,
    sample_template: TemplateConfig,
) -> Settings:
    """Provide complete settings built from the other configuration fixtures."""
    return Settings(
        user=sample_identity,
        remote=sample_remote_config,
        template=sample_template,
    )


@pytest.fixture
def fixed_clock() -> Callable[[], datetime]:
    """Provide a clock frozen at FIXED_TIME."""
    return lambda: FIXED_TIME


# ============================================================================
# Canonical Model Fixtures
# ============================================================================


@pytest.fixture
def sample_branch() -> Branch:
    """Provide a sample branch."""
    return create_mock_branch()


@pytest.fixture
def sample_pull_request() -> PullRequest:
    """Provide a sample open pull request."""
    return create_mock_pull_request()


# ============================================================================
# Helper Functions
# ============================================================================


def create_mock_branch(
    name: str = "feat/test-branch",
    commit_id: str = "a" * 40,
    message: str = "",
) -> Branch:
    """
    Create a Branch for testing.

    Args:
        name: Branch name
        commit_id: Head commit SHA
        message: Head commit message

    Returns:
        Branch instance
    """
    return Branch(name=name, head_commit=Commit(id=commit_id, message=message))


def create_mock_pull_request(
    number: int = 1,
    title: str = "Test PR",
    head: str = "feat/test-branch",
    base: str = "main",
    state: str = "open",
    body: str | None = None,
) -> PullRequest:
    """
    Create a PullRequest for testing.

    Args:
        number: Pull request number
        title: Title
        head: Source branch
        base: Target branch
        state: State
        body: Description

    Returns:
        PullRequest instance
    """
    return PullRequest(
        number=number,
        title=title,
        state=state,
        url=f"https://forge.example.com/test-owner/test-repo/pulls/{number}",
        head=PullRequestRef(ref=head),
        base=PullRequestRef(ref=base),
        body=body,
    )
