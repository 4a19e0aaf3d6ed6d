"""Detect, stage, commit, advance and push.

The push is the only step with an effect outside the pass. Everything before
it happens in the ephemeral clone, so a failure at any step leaves the remote
exactly as it was.
"""

from __future__ import annotations

from dataclasses import dataclass

from gitreconcile.exceptions import GitError
from gitreconcile.git.repository import EphemeralRepository
from gitreconcile.logging import get_logger
from gitreconcile.models import ReconciliationResult

__all__ = ["PublishPipeline"]

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class PublishPipeline:
    """Publishes the working tree of *repo* to *branch*, when it changed.

    Attributes:
        repo: Open ephemeral clone, checked out at ``base_sha``.
        branch: Branch advanced and pushed.
        base_sha: Revision the tree was checked out from.

    Example:
        ```python
        pipeline = PublishPipeline(repo, "main", base_sha)
        result = pipeline.publish("docs: refresh")
        ```
    """

    repo: EphemeralRepository
    branch: str
    base_sha: str

    def publish(self, message: str) -> ReconciliationResult:
        """Commit and push if the tree is dirty.

        Args:
            message: Commit message.

        Returns:
            ``is_new=False`` with ``base_sha`` when the tree is clean,
            otherwise the pushed commit with ``is_new=True``.

        Raises:
            WorkingTreeError: If staging, committing or advancing fails.
            PushRejectedError: If the remote refuses the update.
            TransportError: If the push fails for another reason.
        """
        if not self.repo.is_dirty():
            logger.info("tree_clean", branch=self.branch, sha=self.base_sha)
            return ReconciliationResult(sha=self.base_sha, is_new=False)
        return ReconciliationResult(sha=self.commit_and_push(message), is_new=True)

    def commit_and_push(self, message: str) -> str:
        """Run stage, commit, advance and push unconditionally.

        Returns:
            SHA of the pushed commit.
        """
        self.repo.stage_all()
        sha = self.repo.commit(message)
        self.repo.set_branch(self.branch, sha)
        try:
            self.repo.push_branch(self.branch)
        except GitError:
            logger.warning(
                "commit_not_published",
                branch=self.branch,
                sha=sha,
                base_sha=self.base_sha,
            )
            raise
        return sha
