"""
GitCode provider.

GitCode (and Gitee) speak a GitHub-like dialect under ``repos/{owner}/{repo}``
but list a repository as one flat ``file_list`` array of path strings, create
files with POST and update them with PUT, and name branch fields the way
GitLab does in some payloads.
"""

from urllib.parse import quote

from forgekit.classifier import is_unsupported
from forgekit.config import ProviderType
from forgekit.exceptions import ForgeKitError, NotFoundError, ResponseParseError
from forgekit.logging import get_logger
from forgekit.providers.base import (
    ForgeProvider,
    decode_content,
    encode_content,
    expect_file_payload,
)
from forgekit.translate import (
    to_branch,
    to_file_commit,
    to_file_info,
    to_path_list,
    to_pull_request,
    to_repository,
)
from forgekit.tree import materialize, normalize_scope, scope_exists
from forgekit.types import (
    Branch,
    FileCommitResponse,
    FileInfo,
    PullRequest,
    RepositoryInfo,
    TreeEntry,
)

logger = get_logger()


class GitCodeProvider(ForgeProvider):
    """Provider for GitCode's v5 API (e.g. https://api.gitcode.com/api/v5)."""

    provider_type = ProviderType.GITCODE

    @property
    def _repo_path(self) -> str:
        return f"repos/{quote(self.owner, safe='')}/{quote(self.repo, safe='')}"

    def _contents_path(self, path: str) -> str:
        return f"{self._repo_path}/contents/{quote(path.strip('/'), safe='')}"

    async def list_tree(
        self,
        path: str | None = None,
        recursive: bool = False,
        ref: str | None = None,
    ) -> list[TreeEntry]:
        """
        List contents by materializing the flat ``file_list`` of the ref.

        Raises:
            NotFoundError: If the ref or the path does not exist
        """
        payload = await self.transport.request_json(
            "GET",
            f"{self._repo_path}/file_list",
            params={"ref_name": self._ref(ref)},
        )
        paths = to_path_list(payload or [])
        if not scope_exists(paths, path):
            raise NotFoundError(f"Path not found: {normalize_scope(path)}", 404)
        return materialize(paths, path, recursive)

    async def get_file_info(self, path: str, ref: str | None = None) -> FileInfo:
        payload = await self.transport.request_json(
            "GET", self._contents_path(path), params={"ref": self._ref(ref)}
        )
        return to_file_info(expect_file_payload(payload, path))

    async def get_file_content(self, path: str, ref: str | None = None) -> bytes:
        info = await self.get_file_info(path, ref)
        if info.content is None:
            raise ResponseParseError("file content", "content")
        return decode_content(info.content, path)

    async def create_branch(self, name: str, source_branch: str) -> Branch:
        payload = await self.transport.request_json(
            "POST",
            f"{self._repo_path}/branches",
            body={"branch_name": name, "refs": source_branch},
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
            "author[name]": author_name,
            "author[email]": author_email,
        }
        if existing_sha:
            body["sha"] = existing_sha
            method = "PUT"
        else:
            method = "POST"

        payload = await self.transport.request_json(
            method, self._contents_path(path), body=body
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
            await self.transport.request_json(
                "POST",
                f"{self._repo_path}/pulls/{number}/requested_reviewers",
                body={"reviewers": list(reviewers)},
            )
        except ForgeKitError as e:
            if not is_unsupported(e):
                raise
            logger.warning(
                "Reviewer assignment is not supported by this GitCode instance (%s)",
                e.status_code,
            )
            return False
        return True

    async def get_repository_info(self) -> RepositoryInfo:
        payload = await self.transport.request_json("GET", self._repo_path)
        return to_repository(payload)
