"""Tests for working tree add/remove operations."""

from __future__ import annotations

from pathlib import Path

import pytest

from gitreconcile.exceptions import EntryNotFoundError, WorkingTreeError
from gitreconcile.git.mutator import (
    apply_operation,
    apply_operations,
    apply_tolerant,
    prune_paths,
    resolve_in_tree,
)
from gitreconcile.models import AddFile, RemoveFile


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    root = tmp_path / "worktree"
    (root / ".git").mkdir(parents=True)
    (root / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
    (root / "README.md").write_bytes(b"# Test Repo\n")
    (root / "docs").mkdir()
    (root / "docs" / "a.md").write_bytes(b"a")
    (root / "docs" / "b.md").write_bytes(b"b")
    (root / "docs" / "keep.txt").write_bytes(b"keep")
    return root


class TestResolveInTree:
    def test_maps_relative_path(self, tree: Path) -> None:
        assert resolve_in_tree(tree, "./docs/a.md") == tree / "docs" / "a.md"

    @pytest.mark.parametrize("path", ["/etc/passwd", "../x", "docs/../../x", "."])
    def test_rejects_escaping_paths(self, tree: Path, path: str) -> None:
        with pytest.raises(WorkingTreeError, match="outside the working tree"):
            resolve_in_tree(tree, path)

    def test_rejects_git_dir(self, tree: Path) -> None:
        with pytest.raises(WorkingTreeError, match="inside .git"):
            resolve_in_tree(tree, ".git/config")


class TestAdd:
    def test_writes_exact_bytes_and_creates_parents(self, tree: Path) -> None:
        payload = b"\x00\xff\r\nline\r\n"
        apply_operation(tree, AddFile("deep/nested/dir/data.bin", payload))
        assert (tree / "deep" / "nested" / "dir" / "data.bin").read_bytes() == payload

    def test_overwrites_existing_file(self, tree: Path) -> None:
        apply_operation(tree, AddFile("README.md", b"Hello, World!"))
        assert (tree / "README.md").read_bytes() == b"Hello, World!"

    def test_replaces_directory_at_target(self, tree: Path) -> None:
        apply_operation(tree, AddFile("docs", b"now a file"))
        assert (tree / "docs").is_file()


class TestRemove:
    def test_removes_file(self, tree: Path) -> None:
        apply_operation(tree, RemoveFile("README.md"))
        assert not (tree / "README.md").exists()

    def test_missing_target_raises_entry_not_found(self, tree: Path) -> None:
        with pytest.raises(EntryNotFoundError) as exc_info:
            apply_operation(tree, RemoveFile("absent.txt"))
        assert exc_info.value.path == "absent.txt"

    def test_directory_requires_recursive(self, tree: Path) -> None:
        with pytest.raises(WorkingTreeError, match="recursive"):
            apply_operation(tree, RemoveFile("docs"))
        assert (tree / "docs" / "a.md").exists()

    def test_recursive_removes_directory(self, tree: Path) -> None:
        apply_operation(tree, RemoveFile("docs", recursive=True))
        assert not (tree / "docs").exists()

    def test_recursive_glob(self, tree: Path) -> None:
        apply_operation(tree, RemoveFile("docs/*.md", recursive=True))
        assert not (tree / "docs" / "a.md").exists()
        assert not (tree / "docs" / "b.md").exists()
        assert (tree / "docs" / "keep.txt").exists()

    def test_glob_never_touches_git_dir(self, tree: Path) -> None:
        apply_operation(tree, RemoveFile("*", recursive=True))
        assert (tree / ".git" / "HEAD").exists()
        assert not (tree / "README.md").exists()

    def test_glob_without_match_raises(self, tree: Path) -> None:
        with pytest.raises(EntryNotFoundError):
            apply_operation(tree, RemoveFile("docs/*.rst", recursive=True))

    def test_removes_symlink_not_its_target(self, tree: Path) -> None:
        (tree / "link").symlink_to(tree / "docs")
        apply_operation(tree, RemoveFile("link"))
        assert not (tree / "link").is_symlink()
        assert (tree / "docs" / "a.md").exists()


def test_apply_operations_in_order(tree: Path) -> None:
    apply_operations(
        tree,
        [
            AddFile("notes.txt", b"first"),
            RemoveFile("notes.txt"),
            AddFile("notes.txt", b"second"),
        ],
    )
    assert (tree / "notes.txt").read_bytes() == b"second"


def test_apply_operations_stops_at_first_failure(tree: Path) -> None:
    with pytest.raises(EntryNotFoundError):
        apply_operations(
            tree, [RemoveFile("absent.txt"), AddFile("never.txt", b"x")]
        )
    assert not (tree / "never.txt").exists()


def test_apply_tolerant_counts_absent_targets(tree: Path) -> None:
    absent = apply_tolerant(
        tree, [RemoveFile("absent.txt"), RemoveFile("README.md")]
    )
    assert absent == 1
    assert not (tree / "README.md").exists()


def test_apply_tolerant_still_raises_other_errors(tree: Path) -> None:
    with pytest.raises(WorkingTreeError):
        apply_tolerant(tree, [RemoveFile("docs")])


def test_prune_paths(tree: Path) -> None:
    assert prune_paths(tree, ["docs/a.md", "gone.txt", "docs/b.md"]) == 2
    assert sorted(p.name for p in (tree / "docs").iterdir()) == ["keep.txt"]


def test_prune_paths_removes_path_that_became_a_directory(tree: Path) -> None:
    (tree / "a" / "nested").mkdir(parents=True)
    (tree / "a" / "nested" / "x").write_bytes(b"x")
    assert prune_paths(tree, ["a", "docs/a.md"]) == 2
    assert not (tree / "a").exists()
    assert not (tree / "docs" / "a.md").exists()


def test_prune_paths_takes_paths_literally(tree: Path) -> None:
    assert prune_paths(tree, ["docs/*.md"]) == 0
    assert (tree / "docs" / "a.md").exists()
