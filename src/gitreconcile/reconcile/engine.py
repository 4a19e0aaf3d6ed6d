"""Lifecycle of a commit unit: create, read, update and delete.

Each operation is one reconciliation pass: validate, clone, resolve the
branch, check it out, apply the operation's file changes and publish only if
the tree changed. The clone is discarded when the pass ends.

Passes are synchronous. :class:`AsyncReconciler` runs them in a worker thread
for asyncio callers.

Example:
    ```python
    from gitreconcile.config import load_config
    from gitreconcile.reconcile import Reconciler
    from gitreconcile.spec import AddEntry, CommitSpec

    reconciler = Reconciler(load_config())
    spec = CommitSpec(
        url="https://example.com/org/repo.git",
        branch="main",
        add=[AddEntry(path="docs/README.md", content=b"Hello, World!")],
    )
    result = reconciler.create(spec)
    print(result.sha, result.is_new)
    ```
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import TypeVar

from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from gitreconcile.config import ReconcileConfig
from gitreconcile.credentials import Credential, build_credential
from gitreconcile.exceptions import PushRejectedError
from gitreconcile.git.mutator import apply_operations, apply_tolerant, prune_paths
from gitreconcile.git.publish import PublishPipeline
from gitreconcile.git.remote import validate_repository_url
from gitreconcile.git.repository import EphemeralRepository
from gitreconcile.logging import get_logger, pass_context
from gitreconcile.models import ReconciliationResult
from gitreconcile.spec import AddEntry, CommitSpec
from gitreconcile.utils.security import redact_url

__all__ = [
    "AsyncReconciler",
    "Reconciler",
    "pass_retrying",
]

logger = get_logger(__name__)

T = TypeVar("T")


def _log_pass_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "pass_retrying",
        attempt=retry_state.attempt_number,
        error=str(exc) if exc else None,
    )


def pass_retrying(attempts: int) -> Retrying:
    """Return a tenacity controller that re-runs whole passes.

    Only :class:`~gitreconcile.exceptions.PushRejectedError` is retried; each
    retry starts a new pass from ref resolution, since the base revision of
    the failed pass is stale.

    Args:
        attempts: Total attempts, 1 disables retries.
    """
    return Retrying(
        retry=retry_if_exception_type(PushRejectedError),
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        before_sleep=_log_pass_retry,
        reraise=True,
    )


class Reconciler:
    """Runs reconciliation passes for commit units.

    Args:
        config: Resolved configuration, passed explicitly. Defaults to
            built-in settings.
        credential: Overrides the credential derived from ``config.auth``
            for every pass.
    """

    def __init__(
        self,
        config: ReconcileConfig | None = None,
        credential: Credential | None = None,
    ) -> None:
        self._config = config or ReconcileConfig()
        self._credential = credential

    @property
    def config(self) -> ReconcileConfig:
        return self._config

    # -------------------------------------------------------------------------
    # Lifecycle operations
    # -------------------------------------------------------------------------

    def create(self, spec: CommitSpec) -> ReconciliationResult:
        """Apply the add set, then the one-shot removals, and publish.

        Removals whose target is already absent are skipped.

        Returns:
            The pushed commit (``is_new=True``), or the branch head when the
            repository already matches (``is_new=False``).
        """
        return self._run(self._create_pass, spec)

    def read(self, spec: CommitSpec) -> ReconciliationResult | None:
        """Check that the branch still holds the declared files.

        Re-applies the add set to a fresh checkout without publishing.

        Returns:
            The branch head if the add set is already in place, or None if
            the files drifted and the unit must be reconciled again.
        """
        return self._run(self._read_pass, spec)

    def update(
        self,
        spec: CommitSpec,
        previous_add: Sequence[AddEntry] = (),
    ) -> ReconciliationResult:
        """Move the branch to the new add set.

        Args:
            spec: Desired state.
            previous_add: Add set of the last pass; with ``spec.prune`` and a
                changed add set, its paths are removed before the new set is
                applied.
        """
        return self._run(self._update_pass, spec, tuple(previous_add))

    def delete(self, spec: CommitSpec) -> ReconciliationResult | None:
        """Remove the declared files when pruning is enabled.

        The branch itself is never deleted.

        Returns:
            The pushed commit, or None when nothing had to be removed.
        """
        return self._run(self._delete_pass, spec)

    # -------------------------------------------------------------------------
    # Passes
    # -------------------------------------------------------------------------

    def _create_pass(self, spec: CommitSpec) -> ReconciliationResult:
        with self._checkout(spec, "create") as (repo, pipeline):
            apply_operations(repo.worktree, spec.add_operations())
            apply_tolerant(repo.worktree, spec.remove_operations())
            return pipeline.publish(spec.message)

    def _read_pass(self, spec: CommitSpec) -> ReconciliationResult | None:
        with self._checkout(spec, "read") as (repo, pipeline):
            apply_operations(repo.worktree, spec.add_operations())
            if repo.is_dirty():
                logger.info("drift_detected", branch=spec.branch)
                return None
            return ReconciliationResult(sha=pipeline.base_sha, is_new=False)

    def _update_pass(
        self, spec: CommitSpec, previous_add: tuple[AddEntry, ...]
    ) -> ReconciliationResult:
        with self._checkout(spec, "update") as (repo, pipeline):
            if spec.prune and spec.add_set_differs(previous_add):
                pruned = prune_paths(repo.worktree, [e.path for e in previous_add])
                logger.debug("previous_files_pruned", count=pruned)
            apply_operations(repo.worktree, spec.add_operations())
            return pipeline.publish(spec.effective_update_message)

    def _delete_pass(self, spec: CommitSpec) -> ReconciliationResult | None:
        with self._checkout(spec, "delete") as (repo, pipeline):
            if spec.prune:
                prune_paths(repo.worktree, spec.add_paths())
            if not repo.is_dirty():
                logger.info("nothing_to_delete", branch=spec.branch)
                return None
            sha = pipeline.commit_and_push(spec.effective_delete_message)
            return ReconciliationResult(sha=sha, is_new=True)

    # -------------------------------------------------------------------------
    # Plumbing
    # -------------------------------------------------------------------------

    def _run(self, pass_fn: Callable[..., T], spec: CommitSpec, *args: object) -> T:
        validate_repository_url(spec.url, self._config.network.allowed_schemes)
        retrying = pass_retrying(self._config.network.pass_attempts)
        return retrying(pass_fn, spec, *args)

    @contextmanager
    def _checkout(
        self, spec: CommitSpec, operation: str
    ) -> Iterator[tuple[EphemeralRepository, PublishPipeline]]:
        network = self._config.network
        credential = self._credential or build_credential(self._config.auth, spec.url)
        with (
            pass_context(
                operation=operation, url=redact_url(spec.url), branch=spec.branch
            ),
            EphemeralRepository(
                spec.url,
                credential,
                remote=network.remote_name,
                timeout=network.timeout_seconds,
                committer=self._config.committer,
            ) as repo,
        ):
            base_sha = repo.resolve(spec.branch)
            repo.checkout(base_sha)
            logger.debug("pass_started", base_sha=base_sha)
            yield repo, PublishPipeline(repo, spec.branch, base_sha)


class AsyncReconciler:
    """Async wrapper for :class:`Reconciler`.

    Each pass runs in a worker thread via ``asyncio.to_thread``. Cancelling
    the awaiting task abandons the result; the git subprocess of the pass is
    still bounded by ``network.timeout_seconds``.

    Example:
        ```python
        reconciler = AsyncReconciler(config)
        result = await reconciler.create(spec)
        ```
    """

    def __init__(
        self,
        config: ReconcileConfig | None = None,
        credential: Credential | None = None,
    ) -> None:
        self._sync = Reconciler(config, credential)

    @property
    def config(self) -> ReconcileConfig:
        return self._sync.config

    async def create(self, spec: CommitSpec) -> ReconciliationResult:
        """Run :meth:`Reconciler.create` in a worker thread."""
        return await asyncio.to_thread(self._sync.create, spec)

    async def read(self, spec: CommitSpec) -> ReconciliationResult | None:
        """Run :meth:`Reconciler.read` in a worker thread."""
        return await asyncio.to_thread(self._sync.read, spec)

    async def update(
        self,
        spec: CommitSpec,
        previous_add: Sequence[AddEntry] = (),
    ) -> ReconciliationResult:
        """Run :meth:`Reconciler.update` in a worker thread."""
        return await asyncio.to_thread(self._sync.update, spec, previous_add)

    async def delete(self, spec: CommitSpec) -> ReconciliationResult | None:
        """Run :meth:`Reconciler.delete` in a worker thread."""
        return await asyncio.to_thread(self._sync.delete, spec)
