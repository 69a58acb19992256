"""
Tests for forgekit testing utilities.

Verifies that MockForgeProvider and fixtures work correctly.
"""

import base64

import pytest

from forgekit.exceptions import ConflictError, NotFoundError
from forgekit.testing import (
    MockForgeProvider,
    blob_sha,
    create_mock_branch,
    create_mock_pull_request,
)
from forgekit.types import Branch, PullRequest


class TestMockForgeProvider:
    """Tests for MockForgeProvider."""

    @pytest.mark.asyncio
    async def test_default_responses(self) -> None:
        """Test that the mock answers from its in-memory tree."""
        mock = MockForgeProvider(files={"a/b.txt": b"hello\n"})

        entries = await mock.list_tree()
        info = await mock.get_file_info("a/b.txt")
        repo = await mock.get_repository_info()

        assert [e.name for e in entries] == ["a"]
        assert info.sha == blob_sha(b"hello\n")
        assert base64.b64decode(info.content or "") == b"hello\n"
        assert repo.full_name == "mock-owner/mock-repo"
        assert repo.default_branch == "main"

    @pytest.mark.asyncio
    async def test_configured_responses(self) -> None:
        """Test that configured responses replace the in-memory result."""
        mock = MockForgeProvider()
        custom = create_mock_pull_request(number=77, title="custom")
        mock.configure_response("create_pull_request", custom)

        pull = await mock.create_pull_request("ignored", "feat/x", "main")

        assert pull.number == 77
        assert mock.pulls == []

    @pytest.mark.asyncio
    async def test_configured_errors(self) -> None:
        """Test that configured errors are raised."""
        mock = MockForgeProvider()
        mock.configure_error("get_repository_info", NotFoundError("gone", 404))

        with pytest.raises(NotFoundError):
            await mock.get_repository_info()

        assert mock.call_count("get_repository_info") == 1

    @pytest.mark.asyncio
    async def test_call_tracking(self) -> None:
        """Test that calls are recorded and can be filtered."""
        mock = MockForgeProvider(files={"x": b"1"})

        await mock.file_exists("x")
        await mock.file_exists("y")
        await mock.list_tree(recursive=True)

        assert mock.was_called("get_file_info")
        assert not mock.was_called("create_branch")
        assert mock.call_count("get_file_info") == 2
        assert [c.args for c in mock.get_calls("get_file_info")] == [("x",), ("y",)]
        assert len(mock.get_calls()) == 3
        assert mock.mutation_count == 0

    @pytest.mark.asyncio
    async def test_reset(self) -> None:
        mock = MockForgeProvider()
        mock.configure_error("list_tree", NotFoundError("gone", 404))
        with pytest.raises(NotFoundError):
            await mock.list_tree()

        mock.reset()

        assert mock.get_calls() == []
        assert await mock.list_tree() == []

    @pytest.mark.asyncio
    async def test_branches_are_isolated(self) -> None:
        mock = MockForgeProvider(files={"README.md": b"# x\n"})

        branch = await mock.create_branch("feat/x", "main")
        response = await mock.upsert_file("docs/a.md", b"a", "feat/x", "msg", "Jane", "j@example.com")

        assert branch.head_commit.id != response.commit.id
        assert mock.heads["feat/x"] == response.commit.id
        assert "docs/a.md" not in mock.branches["main"]
        assert await mock.get_file_content("docs/a.md", "feat/x") == b"a"
        with pytest.raises(NotFoundError):
            await mock.get_file_content("docs/a.md")
        assert mock.mutation_count == 2

    @pytest.mark.asyncio
    async def test_duplicate_branch(self) -> None:
        mock = MockForgeProvider()
        await mock.create_branch("feat/x", "main")

        with pytest.raises(ConflictError):
            await mock.create_branch("feat/x", "main")

    @pytest.mark.asyncio
    async def test_unknown_branch(self) -> None:
        mock = MockForgeProvider()

        with pytest.raises(NotFoundError):
            await mock.list_tree(ref="nope")
        with pytest.raises(NotFoundError):
            await mock.create_branch("feat/x", "nope")

    @pytest.mark.asyncio
    async def test_pull_requests_are_numbered(self) -> None:
        mock = MockForgeProvider()
        await mock.create_branch("a", "main")
        await mock.create_branch("b", "main")

        first = await mock.create_pull_request("A", "a", "main")
        second = await mock.create_pull_request("B", "b", "main", body="why")

        assert (first.number, second.number) == (1, 2)
        assert second.body == "why"
        assert second.url == "https://forge.example.com/mock-owner/mock-repo/pulls/2"

    @pytest.mark.asyncio
    async def test_reviewers(self) -> None:
        supported = MockForgeProvider()
        unsupported = MockForgeProvider(reviewers_supported=False)

        assert await supported.assign_reviewers(1, ["alice"]) is True
        assert await supported.assign_reviewers(1, []) is False
        assert supported.requested_reviewers == {1: ["alice"]}
        assert await unsupported.assign_reviewers(1, ["alice"]) is False


class TestFixtures:
    """Tests for the bundled fixtures."""

    @pytest.mark.asyncio
    async def test_mock_provider_fixture(self, mock_provider) -> None:
        entries = await mock_provider.list_tree("src", recursive=True)

        assert [e.path for e in entries] == ["src/main.py", "src/util/helpers.py"]
        assert mock_provider.project_id == "test-owner/test-repo"

    def test_sample_settings(self, sample_settings) -> None:
        assert sample_settings.user.auto_signoff is True
        assert sample_settings.remote.project_id == "test-owner/test-repo"

    def test_fixed_clock(self, fixed_clock) -> None:
        assert fixed_clock().isoformat() == "2024-05-17T09:30:00+00:00"

    def test_model_fixtures(self, sample_branch, sample_pull_request) -> None:
        assert isinstance(sample_branch, Branch)
        assert isinstance(sample_pull_request, PullRequest)
        assert sample_pull_request.state == "open"


def test_helpers() -> None:
    branch = create_mock_branch(name="topic", commit_id="c" * 40)
    pull = create_mock_pull_request(number=5, head="topic")

    assert branch.head_commit.id == "c" * 40
    assert pull.head is not None and pull.head.ref == "topic"


def test_blob_sha_matches_git() -> None:
    assert blob_sha(b"") == "e69de29bb2d1d6434b8b29ae775ad8c2e48c5391"
    assert blob_sha(b"hello\n") == "ce013625030ba8dba906f756967f9e9ca394464a"
