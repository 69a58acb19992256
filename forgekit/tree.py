"""
Tree materialization.

Some forges only expose a flat list of path strings for a whole repository
(``["src/main.rs", "src/cmd/", "README.md"]``). A directory shows up either
as its own entry with a trailing "/" or implicitly as the prefix of a deeper
path. The functions here rebuild a recursive or one-level listing from that
list.
"""

import hashlib
from collections.abc import Iterable

from forgekit.types.tree import DIRECTORY_MODE, FILE_MODE, EntryKind, TreeEntry

SEPARATOR = "/"
_ID_LENGTH = 16


def normalize_scope(scope: str | None) -> str:
    """Strip leading and trailing separators; None means the repository root."""
    if not scope:
        return ""
    return scope.strip(SEPARATOR)


def entry_id(path: str) -> str:
    """Stable identifier for a normalized path: the first 16 hex chars of its SHA-256."""
    return hashlib.sha256(path.encode("utf-8")).hexdigest()[:_ID_LENGTH]


def make_entry(path: str, is_dir: bool) -> TreeEntry:
    """Build a TreeEntry for a path, which must not carry a trailing separator."""
    return TreeEntry(
        id=entry_id(path),
        name=path.rsplit(SEPARATOR, 1)[-1],
        kind=EntryKind.DIRECTORY if is_dir else EntryKind.FILE,
        path=path,
        mode=DIRECTORY_MODE if is_dir else FILE_MODE,
    )


def _in_scope(path: str, scope: str) -> bool:
    if not scope:
        return True
    return path == scope or path.startswith(scope + SEPARATOR)


def scope_exists(paths: Iterable[str], scope: str | None) -> bool:
    """
    Whether a flat path list contains scope itself or anything below it.

    Git has no empty directories, so a scope that matches nothing does not
    exist. The root always exists.
    """
    prefix = normalize_scope(scope)
    if not prefix:
        return True
    return any(_in_scope(path.strip(SEPARATOR), prefix) for path in paths)


def materialize(
    paths: Iterable[str],
    scope: str | None = None,
    recursive: bool = False,
) -> list[TreeEntry]:
    """
    Turn a flat list of repository paths into tree entries.

    Args:
        paths: Path strings as returned by a "list all paths" endpoint
        scope: Directory to list (root if None); leading/trailing "/" ignored
        recursive: Return every path under scope instead of immediate children

    Returns:
        Entries in input order. Non-recursive listings hold one entry per
        immediate child name.
    """
    prefix = normalize_scope(scope)
    # (normalized path, marked as directory by a trailing separator)
    selected = [
        (path.strip(SEPARATOR), path.endswith(SEPARATOR))
        for path in paths
    ]
    selected = [
        (path, marked_dir) for path, marked_dir in selected
        if path and _in_scope(path, prefix)
    ]

    if recursive:
        return [make_entry(path, marked_dir) for path, marked_dir in selected]

    children: dict[str, TreeEntry] = {}
    for path, marked_dir in selected:
        if prefix:
            if path == prefix:
                # The scope itself, not one of its children
                continue
            relative = path[len(prefix) + 1:]
        else:
            relative = path

        name, sep, _ = relative.partition(SEPARATOR)
        if not name or name in children:
            continue

        is_dir = bool(sep) or marked_dir
        child_path = f"{prefix}{SEPARATOR}{name}" if prefix else name
        children[name] = make_entry(child_path, is_dir)

    return list(children.values())


def flatten_entries(entries: Iterable[tuple[str, bool]]) -> list[str]:
    """Render (path, is_dir) pairs as flat path strings, directories with a trailing "/"."""
    return [f"{path}{SEPARATOR}" if is_dir else path for path, is_dir in entries]
