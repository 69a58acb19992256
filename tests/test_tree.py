"""
Property-based tests for tree materialization.

Feature: flat path lists
"""

import hashlib

from hypothesis import given, settings
from hypothesis import strategies as st

from forgekit.tree import (
    entry_id,
    flatten_entries,
    make_entry,
    materialize,
    normalize_scope,
    scope_exists,
)
from forgekit.types import DIRECTORY_MODE, FILE_MODE, EntryKind

# Test strategies
segment_strategy = st.text(alphabet="abcx.", min_size=1, max_size=3)
path_strategy = st.builds(
    lambda segments, trailing: "/".join(segments) + ("/" if trailing else ""),
    st.lists(segment_strategy, min_size=1, max_size=4),
    st.booleans(),
)
path_list_strategy = st.lists(path_strategy, max_size=30)
scope_strategy = st.sampled_from([None, "", "a", "/a", "a/", "/a/b/", "x.a", "c/c"])


def _in_scope(path: str, scope: str) -> bool:
    return not scope or path == scope or path.startswith(scope + "/")


@given(paths=path_list_strategy, scope=scope_strategy)
@settings(max_examples=100)
def test_recursive_listing_is_the_subset_under_scope(paths: list[str], scope: str | None) -> None:
    """
    Recursive materialization yields exactly the paths nested under the
    scope, one entry per path, in input order, with the kind taken from
    the trailing separator.
    """
    prefix = normalize_scope(scope)
    expected = [
        (p.strip("/"), p.endswith("/"))
        for p in paths
        if _in_scope(p.strip("/"), prefix)
    ]

    entries = materialize(paths, scope, recursive=True)

    assert [(e.path, e.is_dir) for e in entries] == expected


@given(paths=path_list_strategy, scope=scope_strategy)
@settings(max_examples=100)
def test_one_level_listing_has_distinct_first_segments(paths: list[str], scope: str | None) -> None:
    """
    A one-level listing holds one entry per distinct first segment of the
    paths strictly below the scope.
    """
    prefix = normalize_scope(scope)
    expected_names = set()
    for p in paths:
        normalized = p.strip("/")
        if not _in_scope(normalized, prefix) or normalized == prefix:
            continue
        relative = normalized[len(prefix) + 1:] if prefix else normalized
        expected_names.add(relative.split("/")[0])

    entries = materialize(paths, scope)
    names = [e.name for e in entries]

    assert len(names) == len(set(names)), f"Duplicate names in {names}"
    assert set(names) == expected_names


@given(paths=path_list_strategy, scope=scope_strategy, recursive=st.booleans())
@settings(max_examples=100)
def test_identifiers_are_stable(paths: list[str], scope: str | None, recursive: bool) -> None:
    """Identifiers depend only on the normalized path."""
    first = materialize(paths, scope, recursive)
    second = materialize(list(paths), scope, recursive)

    assert [e.id for e in first] == [e.id for e in second]
    for entry in first:
        assert entry.id == hashlib.sha256(entry.path.encode("utf-8")).hexdigest()[:16]


@given(paths=path_list_strategy, recursive=st.booleans())
@settings(max_examples=100)
def test_leading_slash_scope_is_equivalent(paths: list[str], recursive: bool) -> None:
    """Scopes "/a", "a" and "a/" list the same entries."""
    plain = materialize(paths, "a", recursive)

    assert materialize(paths, "/a", recursive) == plain
    assert materialize(paths, "a/", recursive) == plain


@given(paths=path_list_strategy, scope=scope_strategy, recursive=st.booleans())
@settings(max_examples=100)
def test_kind_and_mode_agree(paths: list[str], scope: str | None, recursive: bool) -> None:
    """Directories carry mode 040000, files 100644, and no path ends with "/"."""
    for entry in materialize(paths, scope, recursive):
        assert entry.mode == (DIRECTORY_MODE if entry.is_dir else FILE_MODE)
        assert not entry.path.endswith("/")
        assert entry.name == entry.path.rsplit("/", 1)[-1]


@given(paths=path_list_strategy, scope=scope_strategy)
@settings(max_examples=100)
def test_scope_exists_exactly_when_it_has_a_recursive_listing(paths: list[str], scope: str | None) -> None:
    """
    A non-root scope exists exactly when the recursive listing under it is
    non-empty. The root always exists, even for an empty path list.
    """
    if normalize_scope(scope):
        assert scope_exists(paths, scope) == bool(materialize(paths, scope, recursive=True))
    else:
        assert scope_exists(paths, scope)


class TestMaterializeScenarios:
    """Concrete listings."""

    def test_root_listing_collapses_directories(self) -> None:
        paths = ["src/main.x", "src/lib.x", "src/cmd/mod.x", "Readme.md"]

        entries = materialize(paths)

        assert [(e.name, e.kind) for e in entries] == [
            ("src", EntryKind.DIRECTORY),
            ("Readme.md", EntryKind.FILE),
        ]
        assert entries[0].path == "src"

    def test_scoped_listing(self) -> None:
        paths = ["src/main.rs", "src/lib.rs", "src/commands/mod.rs", "Cargo.toml"]

        entries = materialize(paths, "/src")

        by_name = {e.name: e for e in entries}
        assert set(by_name) == {"main.rs", "lib.rs", "commands"}
        assert by_name["main.rs"].is_file
        assert by_name["main.rs"].path == "src/main.rs"
        assert by_name["commands"].is_dir
        assert by_name["commands"].path == "src/commands"

    def test_trailing_slash_marks_directory(self) -> None:
        entries = materialize(["docs/", "README.md"])

        assert entries[0].is_dir
        assert entries[0].path == "docs"
        assert entries[1].is_file

    def test_exact_scope_path_is_not_a_child(self) -> None:
        entries = materialize(["docs/", "docs/guide.md"], "docs")

        assert [e.path for e in entries] == ["docs/guide.md"]

    def test_exact_scope_path_is_kept_when_recursive(self) -> None:
        entries = materialize(["docs/", "docs/guide.md"], "docs", recursive=True)

        assert [(e.path, e.is_dir) for e in entries] == [
            ("docs", True),
            ("docs/guide.md", False),
        ]

    def test_scope_is_a_path_prefix_not_a_string_prefix(self) -> None:
        entries = materialize(["src/a.x", "srcfile.x", "src2/b.x"], "src")

        assert [e.name for e in entries] == ["a.x"]

    def test_first_occurrence_wins(self) -> None:
        entries = materialize(["lib/a.x", "lib/", "lib/b/c.x"])

        assert len(entries) == 1
        assert entries[0].is_dir

    def test_empty_input(self) -> None:
        assert materialize([]) == []
        assert materialize([], "src", recursive=True) == []
        assert materialize(["", "/"]) == []

    def test_recursive_root_listing(self) -> None:
        paths = ["src/main.rs", "src/lib.rs", "Cargo.toml"]

        entries = materialize(paths, None, recursive=True)

        assert [e.path for e in entries] == paths
        assert all(e.is_file for e in entries)


def test_flatten_entries_marks_directories() -> None:
    assert flatten_entries([("src", True), ("src/a.x", False)]) == ["src/", "src/a.x"]


def test_make_entry() -> None:
    entry = make_entry("a/b/c.txt", False)

    assert entry.name == "c.txt"
    assert entry.kind is EntryKind.FILE
    assert entry.id == entry_id("a/b/c.txt")
    assert len(entry.id) == 16

    def test_scope_exists(self) -> None:
        paths = ["docs/", "docs/guide.md", "README.md"]

        assert scope_exists(paths, "docs")
        assert scope_exists(paths, "/docs/guide.md")
        assert scope_exists(paths, "README.md")
        assert not scope_exists(paths, "doc")
        assert not scope_exists(paths, "no/such/dir")
        assert scope_exists([], None)
        assert not scope_exists([], "src")
