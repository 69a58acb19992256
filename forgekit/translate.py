"""
Response translation.

Forges return the same logical value under different keys depending on the
flavor and even on the endpoint (a commit SHA may live under ``sha``, ``id``
or ``commit.sha``). Every logical field below is resolved through an ordered
fallback chain of dotted key paths; the first present value wins.

Required fields raise ResponseParseError when every candidate is missing.
Optional fields resolve to None.
"""

import json
from typing import Any

from forgekit.classifier import truncate
from forgekit.exceptions import ResponseParseError
from forgekit.tree import make_entry
from forgekit.types import (
    Author,
    Branch,
    Commit,
    FileCommitResponse,
    FileContent,
    FileInfo,
    PullRequest,
    PullRequestRef,
    RepositoryInfo,
    TreeEntry,
)

_BRANCH_REF_PREFIX = "refs/heads/"

# Fallback chains, most specific first
COMMIT_ID = ("sha", "id", "commit.sha", "commit.id")
COMMIT_MESSAGE = ("message", "commit.message", "title")
COMMIT_TIMESTAMP = (
    "committer.date",
    "commit.committer.date",
    "committed_date",
    "authored_date",
    "commit.authored_date",
    "author.date",
)
FILE_NAME = ("name", "file_name")
FILE_PATH = ("path", "file_path")
FILE_SHA = ("sha", "blob_id")
FILE_DOWNLOAD_URL = ("download_url", "html_url")
PR_NUMBER = ("number", "iid")
PR_URL = ("html_url", "web_url")
PR_BODY = ("body", "description")
PR_REF_NAME = ("ref", "name")
REPO_FULL_NAME = ("full_name", "path_with_namespace")
REPO_HTML_URL = ("html_url", "web_url")
REPO_CLONE_URL = ("clone_url", "http_url_to_repo")
REPO_SSH_URL = ("ssh_url", "ssh_url_to_repo")


def snippet(payload: Any) -> str:
    """Short JSON rendering of a payload for error messages."""
    try:
        text = json.dumps(payload, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        text = repr(payload)
    return truncate(text)


def dig(payload: Any, path: str) -> Any:
    """Follow a dotted key path through nested dicts; None when any step is missing."""
    current = payload
    for key in path.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(key)
        if current is None:
            return None
    return current


def first_present(payload: Any, chain: tuple[str, ...]) -> Any:
    """Return the value of the first key path in the chain that is present."""
    for path in chain:
        value = dig(payload, path)
        if value is not None:
            return value
    return None


def require(payload: Any, chain: tuple[str, ...], entity: str, field: str) -> Any:
    """Like first_present, but a fully missing chain is a parse error naming the field."""
    value = first_present(payload, chain)
    if value is None or value == "":
        raise ResponseParseError(entity, field, snippet(payload))
    return value


def expect_object(payload: Any, entity: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ResponseParseError(entity, "<object>", snippet(payload))
    return payload


def expect_list(payload: Any, entity: str) -> list[Any]:
    if not isinstance(payload, list):
        raise ResponseParseError(entity, "<list>", snippet(payload))
    return payload


def strip_branch_ref(ref: str) -> str:
    if ref.startswith(_BRANCH_REF_PREFIX):
        return ref[len(_BRANCH_REF_PREFIX):]
    return ref


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def to_author(payload: Any) -> Author | None:
    """Author from a nested ``{name, email, date}`` object."""
    if not isinstance(payload, dict):
        return None
    name = payload.get("name")
    email = payload.get("email")
    if name is None and email is None:
        return None
    return Author(name=name or "", email=email or "", date=payload.get("date"))


def _commit_author(data: dict[str, Any]) -> Author | None:
    author = to_author(data.get("author")) or to_author(dig(data, "commit.author"))
    if author is not None:
        return author
    # GitLab flattens the author into the commit
    if data.get("author_name") is not None or data.get("author_email") is not None:
        return Author(
            name=data.get("author_name") or "",
            email=data.get("author_email") or "",
            date=data.get("authored_date"),
        )
    return None


def to_commit(payload: Any) -> Commit:
    """Commit from a GitHub commit, a GitLab commit, or a ref ``object``."""
    data = expect_object(payload, "commit")
    return Commit(
        id=str(require(data, COMMIT_ID, "commit", "id")),
        message=first_present(data, COMMIT_MESSAGE) or "",
        author=_commit_author(data),
        timestamp=first_present(data, COMMIT_TIMESTAMP),
    )


def to_branch(payload: Any) -> Branch:
    """
    Branch from a branch payload (``{name, commit}``) or a git ref payload
    (``{ref: "refs/heads/x", object: {sha}}``).
    """
    data = expect_object(payload, "branch")
    name = require(data, ("name", "ref"), "branch", "name")
    head = data.get("commit")
    if not isinstance(head, dict):
        head = data.get("object")
    if not isinstance(head, dict):
        raise ResponseParseError("branch", "commit.id", snippet(data))
    return Branch(name=strip_branch_ref(str(name)), head_commit=to_commit(head))


def to_tree_entry(payload: Any) -> TreeEntry:
    """TreeEntry from a structured tree item (``{id, name, type, path, mode}``)."""
    data = expect_object(payload, "tree entry")
    path = str(require(data, ("path",), "tree entry", "path")).strip("/")
    mode = data.get("mode") or ""
    is_dir = data.get("type") == "tree" or str(mode).startswith("04")
    entry = make_entry(path, is_dir)
    item_id = first_present(data, ("id", "sha"))
    if item_id is None:
        return entry
    return TreeEntry(
        id=str(item_id),
        name=data.get("name") or entry.name,
        kind=entry.kind,
        path=entry.path,
        mode=entry.mode,
    )


def to_file_info(payload: Any) -> FileInfo:
    data = expect_object(payload, "file")
    return FileInfo(
        name=first_present(data, FILE_NAME),
        path=first_present(data, FILE_PATH),
        size=_optional_int(data.get("size")),
        content=data.get("content"),
        sha=first_present(data, FILE_SHA),
    )


def to_file_content(payload: Any, fallback_path: str = "") -> FileContent:
    data = expect_object(payload, "file content")
    path = first_present(data, FILE_PATH) or fallback_path
    return FileContent(
        name=first_present(data, FILE_NAME) or path.rsplit("/", 1)[-1],
        path=path,
        sha=first_present(data, FILE_SHA),
        size=_optional_int(data.get("size")),
        download_url=first_present(data, FILE_DOWNLOAD_URL),
    )


def to_file_commit(payload: Any, fallback_path: str = "") -> FileCommitResponse:
    """
    Upsert response. When the forge omits the ``content`` object the file
    description is synthesized from the requested path and the commit SHA.
    """
    data = expect_object(payload, "file commit")
    commit = to_commit(data.get("commit"))
    content_payload = data.get("content")
    if isinstance(content_payload, dict):
        content = to_file_content(content_payload, fallback_path)
    else:
        content = FileContent(
            name=fallback_path.rsplit("/", 1)[-1],
            path=fallback_path,
            sha=commit.id,
        )
    return FileCommitResponse(content=content, commit=commit)


def _to_pull_ref(payload: Any, side: str) -> PullRequestRef:
    name = first_present(payload, PR_REF_NAME)
    if name is None:
        sha = payload.get("sha")
        if not sha:
            raise ResponseParseError("pull request", f"{side}.ref", snippet(payload))
        name = f"sha:{sha}"
    return PullRequestRef(
        ref=strip_branch_ref(str(name)),
        repo_full_name=dig(payload, "repo.full_name"),
    )


def _pull_side(data: dict[str, Any], side: str, branch_key: str) -> PullRequestRef | None:
    nested = data.get(side)
    if isinstance(nested, dict):
        return _to_pull_ref(nested, side)
    branch = data.get(branch_key)
    if branch:
        return PullRequestRef(ref=strip_branch_ref(str(branch)))
    return None


def to_pull_request(payload: Any) -> PullRequest:
    """PullRequest from a GitHub-style pull or a GitLab-style merge request."""
    data = expect_object(payload, "pull request")
    return PullRequest(
        number=int(require(data, PR_NUMBER, "pull request", "number")),
        title=str(require(data, ("title",), "pull request", "title")),
        state=str(require(data, ("state",), "pull request", "state")),
        url=first_present(data, PR_URL),
        head=_pull_side(data, "head", "source_branch"),
        base=_pull_side(data, "base", "target_branch"),
        body=first_present(data, PR_BODY),
    )


def _private_flag(data: dict[str, Any]) -> bool | None:
    private = data.get("private")
    if private is not None:
        return bool(private)
    visibility = data.get("visibility")
    if visibility is None:
        return None
    return visibility != "public"


def to_repository(payload: Any) -> RepositoryInfo:
    data = expect_object(payload, "repository")
    return RepositoryInfo(
        id=int(require(data, ("id",), "repository", "id")),
        full_name=str(require(data, REPO_FULL_NAME, "repository", "full_name")),
        default_branch=str(
            require(data, ("default_branch",), "repository", "default_branch")
        ),
        description=data.get("description"),
        private=_private_flag(data),
        html_url=first_present(data, REPO_HTML_URL),
        clone_url=first_present(data, REPO_CLONE_URL),
        ssh_url=first_present(data, REPO_SSH_URL),
    )


def to_path_list(payload: Any) -> list[str]:
    """Flat ``file_list`` payload: a JSON array of path strings."""
    items = expect_list(payload, "file list")
    return [item for item in items if isinstance(item, str)]
