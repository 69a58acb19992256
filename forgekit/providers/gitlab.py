"""
GitLab provider.

Everything lives under ``projects/{id}`` where the id is the URL-encoded
``owner/repo`` path. Merge requests stand in for pull requests and are
addressed by their project-local ``iid``.
"""

from urllib.parse import quote

from forgekit.classifier import is_unsupported
from forgekit.config import ProviderType
from forgekit.exceptions import ForgeKitError
from forgekit.logging import get_logger
from forgekit.providers.base import ForgeProvider, encode_content, expect_file_payload
from forgekit.translate import (
    expect_list,
    to_branch,
    to_file_info,
    to_pull_request,
    to_repository,
    to_tree_entry,
)
from forgekit.tree import normalize_scope
from forgekit.types import (
    Branch,
    FileCommitResponse,
    FileContent,
    FileInfo,
    PullRequest,
    RepositoryInfo,
    TreeEntry,
)

logger = get_logger()

PER_PAGE = 100


class GitLabProvider(ForgeProvider):
    """Provider for the GitLab v4 API (e.g. https://gitlab.com/api/v4)."""

    provider_type = ProviderType.GITLAB

    @property
    def _project_path(self) -> str:
        return f"projects/{quote(self.project_id, safe='')}"

    def _file_path(self, path: str) -> str:
        return f"{self._project_path}/repository/files/{quote(path.strip('/'), safe='')}"

    async def list_tree(
        self,
        path: str | None = None,
        recursive: bool = False,
        ref: str | None = None,
    ) -> list[TreeEntry]:
        """List contents, following pages until a short page is returned."""
        params: dict[str, str | int] = {
            "ref": self._ref(ref),
            "recursive": "true" if recursive else "false",
            "per_page": PER_PAGE,
        }
        scope = normalize_scope(path)
        if scope:
            params["path"] = scope

        entries: list[TreeEntry] = []
        page = 1
        while True:
            payload = await self.transport.request_json(
                "GET",
                f"{self._project_path}/repository/tree",
                params={**params, "page": page},
            )
            items = expect_list(payload or [], "tree")
            entries.extend(to_tree_entry(item) for item in items)
            if len(items) < PER_PAGE:
                return entries
            page += 1

    async def get_file_info(self, path: str, ref: str | None = None) -> FileInfo:
        payload = await self.transport.request_json(
            "GET", self._file_path(path), params={"ref": self._ref(ref)}
        )
        return to_file_info(expect_file_payload(payload, path))

    async def get_file_content(self, path: str, ref: str | None = None) -> bytes:
        return await self.transport.request_bytes(
            "GET", f"{self._file_path(path)}/raw", params={"ref": self._ref(ref)}
        )

    async def create_branch(self, name: str, source_branch: str) -> Branch:
        payload = await self.transport.request_json(
            "POST",
            f"{self._project_path}/repository/branches",
            params={"branch": name, "ref": source_branch},
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
        """
        Create or update a file.

        The files API answers with ``{file_path, branch}`` only, so the commit
        is read back from the branch head afterwards.
        """
        existing_sha = await self._resolve_existing_sha(path, branch)
        body = {
            "branch": branch,
            "content": encode_content(content),
            "encoding": "base64",
            "commit_message": message,
            "author_name": author_name,
            "author_email": author_email,
        }
        method = "PUT" if existing_sha else "POST"

        payload = await self.transport.request_json(method, self._file_path(path), body=body)
        written_path = (payload or {}).get("file_path") or path.strip("/")

        head = await self.transport.request_json(
            "GET",
            f"{self._project_path}/repository/branches/{quote(branch, safe='')}",
        )
        commit = to_branch(head).head_commit
        return FileCommitResponse(
            content=FileContent(
                name=written_path.rsplit("/", 1)[-1],
                path=written_path,
                size=len(content),
            ),
            commit=commit,
        )

    async def create_pull_request(
        self,
        title: str,
        head: str,
        base: str,
        body: str | None = None,
    ) -> PullRequest:
        request: dict[str, str] = {
            "source_branch": head,
            "target_branch": base,
            "title": title,
        }
        if body is not None:
            request["description"] = body
        payload = await self.transport.request_json(
            "POST", f"{self._project_path}/merge_requests", body=request
        )
        return to_pull_request(payload)

    async def assign_reviewers(self, number: int, reviewers: list[str]) -> bool:
        """Resolve usernames to user ids, then set them on the merge request."""
        reviewer_ids: list[int] = []
        for username in reviewers:
            user_id = await self._lookup_user_id(username)
            if user_id is None:
                logger.warning("Reviewer %s not found, skipping", username)
                continue
            reviewer_ids.append(user_id)

        if not reviewer_ids:
            return False

        try:
            await self.transport.request_json(
                "PUT",
                f"{self._project_path}/merge_requests/{number}",
                body={"reviewer_ids": reviewer_ids},
            )
        except ForgeKitError as e:
            if not is_unsupported(e):
                raise
            logger.warning("Reviewer assignment is not available (HTTP %s)", e.status_code)
            return False
        return True

    async def _lookup_user_id(self, username: str) -> int | None:
        try:
            payload = await self.transport.request_json(
                "GET", "users", params={"username": username}
            )
        except ForgeKitError as e:
            if not is_unsupported(e):
                raise
            return None
        if isinstance(payload, list) and payload and isinstance(payload[0], dict):
            user_id = payload[0].get("id")
            if isinstance(user_id, int):
                return user_id
        return None

    async def get_repository_info(self) -> RepositoryInfo:
        payload = await self.transport.request_json("GET", self._project_path)
        return to_repository(payload)
