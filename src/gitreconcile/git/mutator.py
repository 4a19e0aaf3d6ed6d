"""Add and remove operations on an ephemeral working tree.

Operations are applied in the order given. A missing remove target raises
:class:`~gitreconcile.exceptions.EntryNotFoundError`; the lifecycle code
decides where that absence is tolerated (:func:`apply_tolerant`,
:func:`prune_paths`).
"""

from __future__ import annotations

import shutil
from collections.abc import Iterable
from pathlib import Path, PurePosixPath

from gitreconcile.exceptions import EntryNotFoundError, Phase, WorkingTreeError
from gitreconcile.logging import get_logger
from gitreconcile.models import AddFile, FileOperation, RemoveFile

__all__ = [
    "apply_operation",
    "apply_operations",
    "apply_tolerant",
    "prune_paths",
    "resolve_in_tree",
]

logger = get_logger(__name__)

_GLOB_CHARS = frozenset("*?[")


def resolve_in_tree(root: Path, path: str) -> Path:
    """Map a repository-relative path onto the working tree.

    Symlinks are not followed, so removing a link removes the link itself.

    Raises:
        WorkingTreeError: If the path escapes *root* or enters ``.git``.
    """
    pure = PurePosixPath(path)
    parts = [part for part in pure.parts if part != "."]
    if pure.is_absolute() or not parts or ".." in parts:
        raise WorkingTreeError(
            f"path '{path}' is outside the working tree", Phase.MUTATE
        )
    if parts[0] == ".git":
        raise WorkingTreeError(f"path '{path}' is inside .git", Phase.MUTATE)
    return root.joinpath(*parts)


def _write(root: Path, op: AddFile) -> None:
    target = resolve_in_tree(root, op.path)
    try:
        if target.is_dir() and not target.is_symlink():
            shutil.rmtree(target)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(op.content)
    except OSError as e:
        raise WorkingTreeError(
            f"cannot write '{op.path}'", Phase.MUTATE, str(e)
        ) from e


def _remove_one(target: Path, path: str, recursive: bool) -> None:
    try:
        if target.is_dir() and not target.is_symlink():
            if not recursive:
                raise WorkingTreeError(
                    f"'{path}' is a directory; set recursive to remove it",
                    Phase.MUTATE,
                )
            shutil.rmtree(target)
        else:
            target.unlink()
    except FileNotFoundError as e:
        raise EntryNotFoundError(path) from e
    except OSError as e:
        raise WorkingTreeError(f"cannot remove '{path}'", Phase.MUTATE, str(e)) from e


def _remove(root: Path, op: RemoveFile) -> None:
    if op.recursive and _GLOB_CHARS.intersection(op.path):
        matches = [
            match
            for match in sorted(root.glob(op.path), reverse=True)
            if match.relative_to(root).parts[0] != ".git"
        ]
        if not matches:
            raise EntryNotFoundError(op.path)
        for match in matches:
            # an earlier match may have been a parent directory
            if match.exists() or match.is_symlink():
                _remove_one(match, match.relative_to(root).as_posix(), True)
        return

    target = resolve_in_tree(root, op.path)
    if not target.exists() and not target.is_symlink():
        raise EntryNotFoundError(op.path)
    _remove_one(target, op.path, op.recursive)


def apply_operation(root: Path, op: FileOperation) -> None:
    """Apply one operation to the working tree rooted at *root*.

    Raises:
        EntryNotFoundError: If a remove target does not exist.
        WorkingTreeError: If the filesystem operation fails.
    """
    match op:
        case AddFile():
            _write(root, op)
            logger.debug("file_written", path=op.path, size=len(op.content))
        case RemoveFile():
            _remove(root, op)
            logger.debug("file_removed", path=op.path, recursive=op.recursive)
        case _:
            raise TypeError(f"Unsupported file operation: {op!r}")


def apply_operations(root: Path, ops: Iterable[FileOperation]) -> None:
    """Apply *ops* in order; the first failure aborts."""
    for op in ops:
        apply_operation(root, op)


def apply_tolerant(root: Path, ops: Iterable[FileOperation]) -> int:
    """Apply *ops* in order, treating missing remove targets as done.

    Returns:
        Number of remove operations whose target was already absent.
    """
    absent = 0
    for op in ops:
        try:
            apply_operation(root, op)
        except EntryNotFoundError as e:
            logger.debug("remove_target_absent", path=e.path)
            absent += 1
    return absent


def prune_paths(root: Path, paths: Iterable[str]) -> int:
    """Remove each of *paths* if present.

    Paths are taken literally. A declared file that has since become a
    directory is removed with its contents.

    Returns:
        Number of paths that were actually removed.
    """
    removed = 0
    for path in paths:
        target = resolve_in_tree(root, path)
        if not target.exists() and not target.is_symlink():
            logger.debug("prune_target_absent", path=path)
            continue
        _remove_one(target, path, recursive=True)
        removed += 1
    return removed
