"""Desired state of one reconciliation unit.

:class:`CommitSpec` is what a front end (the manifest, or any other caller)
hands to the :class:`~gitreconcile.reconcile.engine.Reconciler`. Validation
here covers everything that can be checked without touching the network.
"""

from __future__ import annotations

import base64
import binascii
import re
from collections.abc import Sequence
from pathlib import PurePosixPath
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from gitreconcile.constants import DEFAULT_COMMIT_MESSAGE
from gitreconcile.models import AddFile, RemoveFile, RepositoryTarget

__all__ = [
    "AddEntry",
    "CommitSpec",
    "RemoveEntry",
    "normalize_repo_path",
    "validate_branch_name",
]

#: Characters git refuses in ref names
_INVALID_BRANCH_CHARS = re.compile(r"[~^: ?*\[\]\\\x00-\x1f\x7f]")


def validate_branch_name(name: str) -> str:
    """Validate a branch name according to git ref rules.

    Args:
        name: Branch name to validate.

    Returns:
        The name, unchanged.

    Raises:
        ValueError: If the name cannot be a git branch.
    """
    if not name or name.isspace():
        raise ValueError("Branch name cannot be empty")
    if name.startswith(("-", "/")) or name.endswith(("/", ".")):
        raise ValueError(f"Invalid branch name: {name}")
    if _INVALID_BRANCH_CHARS.search(name):
        raise ValueError(f"Branch name contains invalid characters: {name}")
    if ".." in name or "@{" in name or "//" in name or name.endswith(".lock"):
        raise ValueError(f"Invalid branch name: {name}")
    return name


def normalize_repo_path(path: str) -> str:
    """Normalize a repository-relative path and reject unsafe ones.

    Args:
        path: Path as declared by the user, POSIX separators.

    Returns:
        The path without redundant ``.`` components or slashes.

    Raises:
        ValueError: If the path is empty, absolute, escapes the repository
            or points into ``.git``.

    Example:
        >>> normalize_repo_path("./docs//README.md")
        'docs/README.md'
    """
    if not path or not path.strip():
        raise ValueError("Path cannot be empty")
    pure = PurePosixPath(path)
    if pure.is_absolute():
        raise ValueError(f"Path must be relative to the repository root: {path}")
    parts = [part for part in pure.parts if part != "."]
    if not parts:
        raise ValueError(f"Path does not name a file: {path}")
    if ".." in parts:
        raise ValueError(f"Path escapes the repository: {path}")
    if parts[0] == ".git":
        raise ValueError(f"Path points into the git directory: {path}")
    return "/".join(parts)


class AddEntry(BaseModel):
    """A file that must exist with exactly this content.

    Text content given from Python (or a parsed YAML manifest) is stored as
    its UTF-8 encoding. JSON, as written to the state file, carries content
    as base64.
    """

    model_config = ConfigDict(frozen=True, ser_json_bytes="base64")

    path: str
    content: bytes

    @field_validator("content", mode="before")
    @classmethod
    def _encode_content(cls, v: Any, info: ValidationInfo) -> Any:
        if not isinstance(v, str):
            return v
        if info.mode == "json":
            try:
                padded = v + "=" * (-len(v) % 4)
                return base64.b64decode(padded, altchars=b"-_", validate=True)
            except binascii.Error as e:
                raise ValueError(f"content is not valid base64: {e}") from e
        return v.encode("utf-8")

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, v: str) -> str:
        return normalize_repo_path(v)

    def to_operation(self) -> AddFile:
        return AddFile(path=self.path, content=self.content)


class RemoveEntry(BaseModel):
    """A path removed once, when the unit is created."""

    model_config = ConfigDict(frozen=True)

    path: str
    recursive: bool = False

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, v: str) -> str:
        return normalize_repo_path(v)

    def to_operation(self) -> RemoveFile:
        return RemoveFile(path=self.path, recursive=self.recursive)


class CommitSpec(BaseModel):
    """Desired state for one branch of one repository.

    Attributes:
        url: Repository URL. Changing it forces recreation of the unit.
        branch: Branch to reconcile. Changing it forces recreation.
        message: Commit message on create, and the fallback for the others.
        update_message: Commit message on update.
        delete_message: Commit message on delete.
        add: Files that must exist with the given content.
        remove: Paths removed when the unit is created.
        prune: On update and delete, remove files this unit no longer
            declares.

    Example:
        ```python
        spec = CommitSpec(
            url="https://example.com/org/repo.git",
            branch="main",
            add=[AddEntry(path="docs/README.md", content=b"Hello, World!")],
            prune=True,
        )
        ```
    """

    model_config = ConfigDict(frozen=True, extra="forbid", ser_json_bytes="base64")

    url: str = Field(min_length=1)
    branch: str
    message: str = DEFAULT_COMMIT_MESSAGE
    update_message: str | None = None
    delete_message: str | None = None
    add: tuple[AddEntry, ...] = ()
    remove: tuple[RemoveEntry, ...] = ()
    prune: bool = False

    @field_validator("url")
    @classmethod
    def _strip_url(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("URL cannot be empty")
        return v

    @field_validator("branch")
    @classmethod
    def _check_branch(cls, v: str) -> str:
        return validate_branch_name(v)

    @model_validator(mode="after")
    def _reject_duplicate_add_paths(self) -> CommitSpec:
        seen: set[str] = set()
        for entry in self.add:
            if entry.path in seen:
                raise ValueError(f"Duplicate add path: {entry.path}")
            seen.add(entry.path)
        return self

    @property
    def target(self) -> RepositoryTarget:
        return RepositoryTarget(url=self.url, branch=self.branch)

    @property
    def effective_update_message(self) -> str:
        return self.update_message or self.message

    @property
    def effective_delete_message(self) -> str:
        return self.delete_message or self.update_message or self.message

    def add_operations(self) -> tuple[AddFile, ...]:
        return tuple(entry.to_operation() for entry in self.add)

    def remove_operations(self) -> tuple[RemoveFile, ...]:
        return tuple(entry.to_operation() for entry in self.remove)

    def add_paths(self) -> tuple[str, ...]:
        return tuple(entry.path for entry in self.add)

    def add_set_differs(self, previous: Sequence[AddEntry]) -> bool:
        """Return True if the declared add set differs from *previous*.

        Order matters, as it does for the declared list.
        """
        return tuple(self.add) != tuple(previous)

    def requires_replacement(self, previous: CommitSpec) -> bool:
        """Return True if moving from *previous* to this spec forces new."""
        return self.target != previous.target
