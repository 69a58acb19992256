"""
Listing and download operations.

Directory downloads fan out one task per file, bounded by a semaphore, and
all tasks share the provider's pooled HTTP client. A failed file never
cancels its siblings; each task reports its own outcome.
"""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path

from forgekit.exceptions import ApiError, ForgeKitError, LocalIOError, NotFoundError, ValidationError
from forgekit.logging import get_logger
from forgekit.providers.base import ForgeProvider
from forgekit.tree import make_entry, normalize_scope
from forgekit.types import TreeEntry

logger = get_logger()

DEFAULT_MAX_CONCURRENCY = 8


@dataclass(frozen=True)
class DownloadResult:
    """Outcome of one file download: a size on success, a reason on failure."""

    remote_path: str
    local_path: Path
    size: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class DownloadReport:
    """Per-file outcomes of a fetch."""

    remote_path: str
    output_path: Path
    results: list[DownloadResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[DownloadResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> list[DownloadResult]:
        return [r for r in self.results if not r.ok]

    @property
    def total_bytes(self) -> int:
        return sum(r.size for r in self.succeeded)


def format_bytes(size: int) -> str:
    """Human-readable size: 500B, 1.5KB, 1.0MB."""
    if size < 1024:
        return f"{size}B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f}KB"
    return f"{size / (1024 * 1024):.1f}MB"


def sort_entries(entries: list[TreeEntry]) -> list[TreeEntry]:
    """Directories first, then by name."""
    return sorted(entries, key=lambda e: (not e.is_dir, e.name))


def render_listing(entries: list[TreeEntry], recursive: bool = False) -> list[str]:
    """
    One line per entry as ``ls`` would print it: names for a one-level
    listing, full paths for a recursive one, directories with a trailing "/".
    """
    lines = []
    for entry in entries:
        label = entry.path if recursive else entry.name
        lines.append(f"{label}/" if entry.is_dir else label)
    return lines


async def list_remote(
    provider: ForgeProvider,
    path: str | None = None,
    recursive: bool = False,
    ref: str | None = None,
) -> list[TreeEntry]:
    """
    List a remote path.

    A path naming a file yields that file alone. Otherwise the directory
    listing is returned sorted, directories first.
    """
    scope = normalize_scope(path)
    if scope and await provider.file_exists(scope, ref):
        return [make_entry(scope, False)]

    entries = await provider.list_tree(scope or None, recursive, ref)
    return sort_entries(entries)


async def _write_file(local_path: Path, content: bytes) -> None:
    def write() -> None:
        local_path.parent.mkdir(parents=True, exist_ok=True)
        local_path.write_bytes(content)

    await asyncio.to_thread(write)


async def fetch_file(
    provider: ForgeProvider,
    remote_path: str,
    output_dir: str | Path = ".",
    ref: str | None = None,
    force: bool = False,
) -> DownloadResult:
    """
    Download one file into output_dir, keeping its base name.

    Raises:
        ValidationError: If the local file exists and force is off
        LocalIOError: If the file cannot be written
    """
    remote = normalize_scope(remote_path)
    local_path = Path(output_dir) / remote.rsplit("/", 1)[-1]
    if local_path.exists() and not force:
        raise ValidationError(
            f"File '{local_path}' already exists, use force to overwrite"
        )

    content = await provider.get_file_content(remote, ref)
    try:
        await _write_file(local_path, content)
    except OSError as e:
        raise LocalIOError(f"Failed to write {local_path}: {e}") from e

    logger.info("Downloaded %s to %s (%s)", remote, local_path, format_bytes(len(content)))
    return DownloadResult(remote_path=remote, local_path=local_path, size=len(content))


async def _download_one(
    provider: ForgeProvider,
    semaphore: asyncio.Semaphore,
    remote_path: str,
    local_path: Path,
    ref: str | None,
    force: bool,
) -> DownloadResult:
    if local_path.exists() and not force:
        return DownloadResult(
            remote_path,
            local_path,
            error=f"File '{local_path}' already exists, use force to overwrite",
        )

    async with semaphore:
        try:
            content = await provider.get_file_content(remote_path, ref)
            await _write_file(local_path, content)
        except ForgeKitError as e:
            return DownloadResult(remote_path, local_path, error=e.message)
        except OSError as e:
            return DownloadResult(remote_path, local_path, error=f"Failed to write file: {e}")

    return DownloadResult(remote_path, local_path, size=len(content))


async def download_directory(
    provider: ForgeProvider,
    remote_dir: str,
    output_dir: str | Path,
    ref: str | None = None,
    force: bool = False,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> DownloadReport:
    """
    Download every file under remote_dir into output_dir, keeping the
    relative layout.

    Args:
        provider: Forge to read from
        remote_dir: Remote directory
        output_dir: Local directory that mirrors remote_dir
        ref: Branch, tag or commit (default branch if None)
        force: Overwrite existing local files
        max_concurrency: Maximum simultaneous downloads

    Returns:
        One result per file, in listing order

    Raises:
        ApiError: If every file failed
    """
    if max_concurrency < 1:
        raise ValidationError("max_concurrency must be at least 1")

    scope = normalize_scope(remote_dir)
    output_path = Path(output_dir)
    entries = await provider.list_tree(scope or None, True, ref)
    files = [entry for entry in entries if entry.is_file]

    report = DownloadReport(remote_path=scope, output_path=output_path)
    if not files:
        logger.info("Directory is empty: %s", scope or "/")
        return report

    logger.info("Found %d files under %s, downloading", len(files), scope or "/")
    semaphore = asyncio.Semaphore(max_concurrency)
    prefix = f"{scope}/" if scope else ""
    tasks = [
        _download_one(
            provider,
            semaphore,
            entry.path,
            output_path / entry.path.removeprefix(prefix),
            ref,
            force,
        )
        for entry in files
    ]
    report.results = list(await asyncio.gather(*tasks))

    for result in report.failed:
        logger.warning("Failed to download %s: %s", result.remote_path, result.error)

    if not report.succeeded:
        raise ApiError(f"All {len(files)} files failed to download from {scope or '/'}")

    logger.info(
        "Downloaded %d of %d files (%s)",
        len(report.succeeded),
        len(files),
        format_bytes(report.total_bytes),
    )
    return report


async def fetch(
    provider: ForgeProvider,
    remote_path: str,
    output_dir: str | Path = ".",
    ref: str | None = None,
    force: bool = False,
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
) -> DownloadReport:
    """
    Download a file or a directory.

    A file lands in output_dir under its base name; a directory lands in
    ``output_dir/<directory name>``.

    Raises:
        NotFoundError: If the path is neither a file nor a non-empty directory
    """
    scope = normalize_scope(remote_path)
    output = Path(output_dir)

    if scope and await provider.file_exists(scope, ref):
        result = await fetch_file(provider, scope, output, ref, force)
        return DownloadReport(remote_path=scope, output_path=result.local_path, results=[result])

    try:
        children = await provider.list_tree(scope or None, False, ref)
    except NotFoundError:
        children = []
    if not children:
        raise NotFoundError(f"Path '{remote_path}' does not exist or cannot be accessed")

    target = output / scope.rsplit("/", 1)[-1] if scope else output
    return await download_directory(provider, scope, target, ref, force, max_concurrency)
