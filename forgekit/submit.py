"""
Submission workflow.

Turns one local file into a branch, a commit and a pull request:

    validate -> collision check -> readiness check -> name branch
      -> (dry run: stop) | create branch -> upload -> open PR -> reviewers

Each step is a single provider call made in order. Nothing is retried; the
first failure propagates unchanged and a re-run starts over from validation.
Reviewer assignment runs after the pull request exists and only ever
downgrades the result to "reviewers not assigned".
"""

import asyncio
import hashlib
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from forgekit.config import TemplateConfig, UserIdentity
from forgekit.exceptions import (
    ConflictError,
    ForgeKitError,
    LocalIOError,
    NotFoundError,
    RepositoryNotInitializedError,
    ValidationError,
)
from forgekit.logging import get_logger
from forgekit.providers.base import ForgeProvider
from forgekit.types import Commit, PullRequest

logger = get_logger("submit")

DEFAULT_TOOL_NAME = "forgekit"


class SubmissionStage(str, Enum):
    """Workflow states, in the order they are reached."""

    VALIDATED = "validated"
    COLLISION_CHECKED = "collision_checked"
    READINESS_CHECKED = "readiness_checked"
    BRANCH_NAMED = "branch_named"
    DRY_RUN_REPORTED = "dry_run_reported"
    BRANCH_CREATED = "branch_created"
    UPLOADED = "uploaded"
    PR_CREATED = "pr_created"
    REVIEWERS_ASSIGNED = "reviewers_assigned"


@dataclass(frozen=True)
class SubmitRequest:
    """What to submit and where."""

    local_path: str | Path
    target_dir: str
    message: str
    branch: str | None = None  # used verbatim when given
    force: bool = False  # overwrite a file that already exists remotely
    dry_run: bool = False
    reviewers: tuple[str, ...] = ()


@dataclass
class SubmitResult:
    """Outcome of a submission, or the plan when it was a dry run."""

    local_path: str
    target_path: str
    branch: str
    base_branch: str
    remote_exists: bool = False
    dry_run: bool = False
    content_hash: str | None = None
    commit: Commit | None = None
    pull_request: PullRequest | None = None
    reviewers_assigned: bool | None = None  # None when no reviewers were requested
    stages: list[SubmissionStage] = field(default_factory=list)

    @property
    def stage(self) -> SubmissionStage | None:
        """Last stage reached."""
        return self.stages[-1] if self.stages else None


def _local_now() -> datetime:
    return datetime.now().astimezone()


def target_path_for(target_dir: str, filename: str) -> str:
    """Remote path of the file: the target directory joined with the local file name."""
    directory = target_dir.strip("/")
    return f"{directory}/{filename}" if directory else filename


def derive_branch_name(
    message: str,
    timestamp: int,
    tool_name: str = DEFAULT_TOOL_NAME,
    explicit: str | None = None,
) -> str:
    """
    Branch for a submission.

    An explicit name is used verbatim. Otherwise the name is
    ``feat/<tool>-submit-<timestamp>-<word>`` where word is the first word of
    the message with ":" and "/" stripped, lower-cased ("submit" when the
    message has no words).
    """
    if explicit:
        return explicit
    words = message.split()
    word = words[0] if words else "submit"
    word = word.replace(":", "").replace("/", "").lower() or "submit"
    return f"feat/{tool_name}-submit-{timestamp}-{word}"


def content_digest(content: bytes) -> str:
    """Hex SHA-256 of the submitted bytes, recorded for provenance."""
    return hashlib.sha256(content).hexdigest()


def build_commit_message(
    message: str,
    local_path: str,
    file_hash: str,
    submitted_at: datetime,
    identity: UserIdentity,
) -> str:
    lines = [
        message,
        "",
        f"Original-File: {local_path}",
        f"Original-File-Hash: {file_hash}",
        f"Date: {submitted_at.isoformat()}",
    ]
    if identity.auto_signoff:
        lines.append(f"Signed-off-by: {identity.signature}")
    return "\n".join(lines) + "\n"


def build_pr_title(message: str, template: TemplateConfig) -> str:
    return f"{template.pr_prefix} {message}".strip()


def build_pr_body(
    message: str,
    local_path: str,
    file_hash: str,
    submitted_at: datetime,
    identity: UserIdentity,
) -> str:
    return (
        f"## Change Description\n{message}\n\n"
        "## Trace Information\n"
        f"- Original File: {local_path}\n"
        f"- File Hash: {file_hash}\n"
        f"- Submission Time: {submitted_at.isoformat()}\n"
        f"- Submitter: {identity.signature}"
    )


class Submitter:
    """
    Runs the submission workflow against one provider.

    Example:
        ```python
        submitter = Submitter(provider, settings.user, "main", settings.template)
        result = await submitter.submit(
            SubmitRequest("scripts/check.sh", "tools/", "feat: add check script")
        )
        print(result.pull_request.url)
        ```
    """

    def __init__(
        self,
        provider: ForgeProvider,
        identity: UserIdentity,
        default_branch: str,
        template: TemplateConfig | None = None,
        tool_name: str = DEFAULT_TOOL_NAME,
        clock: Callable[[], datetime] = _local_now,
    ) -> None:
        """
        Initialize the submitter.

        Args:
            provider: Forge to submit to
            identity: Commit author, and the sign-off when enabled
            default_branch: Branch that new branches start from and PRs target
            template: Pull request title prefix
            tool_name: Name embedded in generated branch names
            clock: Source of the submission time (local, timezone-aware)
        """
        self.provider = provider
        self.identity = identity
        self.default_branch = default_branch
        self.template = template or TemplateConfig()
        self.tool_name = tool_name
        self.clock = clock

    async def submit(self, request: SubmitRequest) -> SubmitResult:
        """
        Submit one file.

        Raises:
            ValidationError: If the local path is missing or is a directory
            ConflictError: If the remote file exists and force is off, or the
                branch already exists
            RepositoryNotInitializedError: If the default branch has no commits
            LocalIOError: If the local file cannot be read
            ForgeKitError: Any provider failure before the pull request exists,
                unchanged
        """
        submitted_at = self.clock()
        local = Path(request.local_path)
        local_display = str(request.local_path)

        # 1. Target validation
        if not local.exists():
            raise ValidationError(f"File does not exist: {local_display}")
        if local.is_dir():
            raise ValidationError(
                f"Directory submission is not supported, specify a single file: {local_display}"
            )
        target_path = target_path_for(request.target_dir, local.name)
        stages = [SubmissionStage.VALIDATED]

        # 2. Remote collision check
        logger.info("Checking if remote file exists: %s", target_path)
        remote_exists = await self._remote_exists(target_path)
        if remote_exists and not request.force:
            raise ConflictError(
                f"Remote file already exists: {target_path}. Use force to overwrite"
            )
        if remote_exists:
            logger.warning("Remote file %s exists, overwriting (force)", target_path)
        stages.append(SubmissionStage.COLLISION_CHECKED)

        # 3. Readiness
        await self._check_initialized()
        stages.append(SubmissionStage.READINESS_CHECKED)

        # 4. Branch derivation
        branch = derive_branch_name(
            request.message,
            int(submitted_at.timestamp()),
            self.tool_name,
            request.branch,
        )
        stages.append(SubmissionStage.BRANCH_NAMED)

        result = SubmitResult(
            local_path=local_display,
            target_path=target_path,
            branch=branch,
            base_branch=self.default_branch,
            remote_exists=remote_exists,
            stages=stages,
        )

        # 5. Dry run
        if request.dry_run:
            logger.info(
                "Dry run: would commit %s to %s as %s on %s (from %s)",
                local_display,
                target_path,
                request.message,
                branch,
                self.default_branch,
            )
            result.dry_run = True
            stages.append(SubmissionStage.DRY_RUN_REPORTED)
            return result

        # 6. Branch creation
        logger.info("Creating branch %s from %s", branch, self.default_branch)
        await self.provider.create_branch(branch, self.default_branch)
        stages.append(SubmissionStage.BRANCH_CREATED)

        # 7. Provenance hash
        content = await self._read_local(local)
        file_hash = content_digest(content)
        result.content_hash = file_hash
        logger.info("Read %d bytes from %s (sha256 %s)", len(content), local_display, file_hash)

        # 8. Upload
        commit_message = build_commit_message(
            request.message, local_display, file_hash, submitted_at, self.identity
        )
        written = await self.provider.upsert_file(
            target_path,
            content,
            branch,
            commit_message,
            self.identity.name,
            self.identity.email,
        )
        result.commit = written.commit
        stages.append(SubmissionStage.UPLOADED)
        logger.info("Uploaded %s in commit %s", target_path, written.commit.id)

        # 9. Pull request
        pull = await self.provider.create_pull_request(
            build_pr_title(request.message, self.template),
            branch,
            self.default_branch,
            build_pr_body(
                request.message, local_display, file_hash, submitted_at, self.identity
            ),
        )
        result.pull_request = pull
        stages.append(SubmissionStage.PR_CREATED)
        logger.info("Created pull request #%d: %s", pull.number, pull.url or pull.title)

        # 10. Reviewers, best effort
        if request.reviewers:
            try:
                assigned = await self.provider.assign_reviewers(
                    pull.number, list(request.reviewers)
                )
            except ForgeKitError as e:
                logger.warning("Reviewer assignment for #%d failed: %s", pull.number, e)
                assigned = False
            result.reviewers_assigned = assigned
            if assigned:
                stages.append(SubmissionStage.REVIEWERS_ASSIGNED)
            else:
                logger.warning(
                    "Could not assign reviewers to #%d, assign them manually", pull.number
                )

        return result

    async def _remote_exists(self, target_path: str) -> bool:
        try:
            await self.provider.get_file_info(target_path, self.default_branch)
        except NotFoundError:
            return False
        return True

    async def _check_initialized(self) -> None:
        try:
            entries = await self.provider.list_tree(None, False, self.default_branch)
        except NotFoundError:
            entries = []
        if not entries:
            raise RepositoryNotInitializedError(
                f"Repository {self.provider.project_id} has no commits on "
                f"'{self.default_branch}'. Initialize it first, for example by "
                "creating a README through the web interface"
            )

    @staticmethod
    async def _read_local(path: Path) -> bytes:
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as e:
            raise LocalIOError(f"Failed to read {path}: {e}") from e
