"""Git capabilities used by reconciliation passes and lookups.

Example:
    ```python
    from gitreconcile.git import EphemeralRepository, PublishPipeline

    with EphemeralRepository(url, credential) as repo:
        base = repo.resolve("main")
        repo.checkout(base)
        apply_operations(repo.worktree, ops)
        result = PublishPipeline(repo, "main", base).publish("update files")
    ```
"""

from __future__ import annotations

from gitreconcile.git.mutator import (
    apply_operation,
    apply_operations,
    apply_tolerant,
    prune_paths,
)
from gitreconcile.git.publish import PublishPipeline
from gitreconcile.git.remote import (
    list_remote_refs,
    url_scheme,
    validate_repository_url,
)
from gitreconcile.git.repository import EphemeralRepository, convert_git_error
from gitreconcile.git.resolver import resolve_commit, resolve_revision

__all__ = [
    "EphemeralRepository",
    "PublishPipeline",
    "apply_operation",
    "apply_operations",
    "apply_tolerant",
    "convert_git_error",
    "list_remote_refs",
    "prune_paths",
    "resolve_commit",
    "resolve_revision",
    "url_scheme",
    "validate_repository_url",
]
