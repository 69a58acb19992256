"""
GitHub provider.

Uses the contents API for files and the git data API (trees and refs) for
listings and branch creation.
"""

from urllib.parse import quote

from forgekit.classifier import is_unsupported
from forgekit.config import ProviderType
from forgekit.exceptions import ConflictError, ForgeKitError, NotFoundError, ResponseParseError
from forgekit.logging import get_logger
from forgekit.providers.base import (
    ForgeProvider,
    decode_content,
    encode_content,
    expect_file_payload,
)
from forgekit.translate import (
    dig,
    expect_list,
    expect_object,
    require,
    to_branch,
    to_file_commit,
    to_file_info,
    to_pull_request,
    to_repository,
)
from forgekit.tree import flatten_entries, materialize, normalize_scope, scope_exists
from forgekit.types import (
    Branch,
    FileCommitResponse,
    FileInfo,
    PullRequest,
    RepositoryInfo,
    TreeEntry,
)

logger = get_logger()


class GitHubProvider(ForgeProvider):
    """Provider for the GitHub REST API (https://api.github.com or GHES /api/v3)."""

    provider_type = ProviderType.GITHUB

    @property
    def _repo_path(self) -> str:
        return f"repos/{quote(self.owner, safe='')}/{quote(self.repo, safe='')}"

    def _contents_path(self, path: str) -> str:
        return f"{self._repo_path}/contents/{quote(path.strip('/'), safe='/')}"

    async def list_tree(
        self,
        path: str | None = None,
        recursive: bool = False,
        ref: str | None = None,
    ) -> list[TreeEntry]:
        """
        List contents from the recursive git tree of the ref.

        The whole tree is fetched once and materialized locally, so listings
        of any depth cost one request. A repository without commits answers
        409 "Git Repository is empty", which is an empty tree.

        Raises:
            NotFoundError: If the ref or the path does not exist
        """
        try:
            payload = await self.transport.request_json(
                "GET",
                f"{self._repo_path}/git/trees/{quote(self._ref(ref), safe='')}",
                params={"recursive": "1"},
            )
        except ConflictError as e:
            if "empty" not in (e.detail or e.message).lower():
                raise
            payload = {"tree": []}

        data = expect_object(payload, "tree")
        if data.get("truncated"):
            logger.warning("Tree listing for %s was truncated by the server", self.project_id)
        items = expect_list(data.get("tree", []), "tree")
        paths = flatten_entries(
            (
                str(require(item, ("path",), "tree entry", "path")),
                item.get("type") == "tree",
            )
            for item in items
        )
        if not scope_exists(paths, path):
            raise NotFoundError(f"Path not found: {normalize_scope(path)}", 404)
        return materialize(paths, path, recursive)

    async def get_file_info(self, path: str, ref: str | None = None) -> FileInfo:
        payload = await self.transport.request_json(
            "GET", self._contents_path(path), params={"ref": self._ref(ref)}
        )
        return to_file_info(expect_file_payload(payload, path))

    async def get_file_content(self, path: str, ref: str | None = None) -> bytes:
        """
        Get file bytes. Files over 1 MB come back without inline content; those
        are read from their ``download_url``.
        """
        payload = expect_object(
            expect_file_payload(
                await self.transport.request_json(
                    "GET", self._contents_path(path), params={"ref": self._ref(ref)}
                ),
                path,
            ),
            "file content",
        )
        encoded = payload.get("content")
        if encoded and payload.get("encoding", "base64") == "base64":
            return decode_content(encoded, path)

        download_url = payload.get("download_url")
        if not download_url:
            raise ResponseParseError("file content", "content")
        return await self.transport.request_bytes("GET", download_url)

    async def create_branch(self, name: str, source_branch: str) -> Branch:
        source = await self.transport.request_json(
            "GET",
            f"{self._repo_path}/git/ref/heads/{quote(source_branch, safe='/')}",
        )
        sha = require(source, ("object.sha",), "ref", "object.sha")
        payload = await self.transport.request_json(
            "POST",
            f"{self._repo_path}/git/refs",
            body={"ref": f"refs/heads/{name}", "sha": sha},
        )
        return to_branch(payload)

    async def upsert_file(
        self,
        path: str,
        content: bytes,
        branch: str,
        message: str,
        author_name: str,
        author_email: str,
    ) -> FileCommitResponse:
        existing_sha = await self._resolve_existing_sha(path, branch)
        body = {
            "message": message,
            "content": encode_content(content),
            "branch": branch,
            "author": {"name": author_name, "email": author_email},
            "committer": {"name": author_name, "email": author_email},
        }
        if existing_sha:
            body["sha"] = existing_sha

        payload = await self.transport.request_json(
            "PUT", self._contents_path(path), body=body
        )
        return to_file_commit(payload, path.strip("/"))

    async def create_pull_request(
        self,
        title: str,
        head: str,
        base: str,
        body: str | None = None,
    ) -> PullRequest:
        request: dict[str, str] = {"title": title, "head": head, "base": base}
        if body is not None:
            request["body"] = body
        payload = await self.transport.request_json(
            "POST", f"{self._repo_path}/pulls", body=request
        )
        return to_pull_request(payload)

    async def assign_reviewers(self, number: int, reviewers: list[str]) -> bool:
        if not reviewers:
            return False
        try:
            payload = await self.transport.request_json(
                "POST",
                f"{self._repo_path}/pulls/{number}/requested_reviewers",
                body={"reviewers": list(reviewers)},
            )
        except ForgeKitError as e:
            if not is_unsupported(e):
                raise
            logger.warning("Reviewer assignment is not available (HTTP %s)", e.status_code)
            return False

        requested = dig(payload, "requested_reviewers")
        if isinstance(requested, list) and not requested:
            logger.warning("None of %s could be requested as reviewers", ", ".join(reviewers))
            return False
        return True

    async def get_repository_info(self) -> RepositoryInfo:
        payload = await self.transport.request_json("GET", self._repo_path)
        return to_repository(payload)
