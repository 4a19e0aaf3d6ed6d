"""Ephemeral GitPython clones scoped to one reconciliation pass.

Every pass clones the remote into a private temporary directory, works there
and removes it on exit, successful or not. Nothing outlives the pass except
what was pushed.

Example:
    ```python
    from gitreconcile.credentials import AnonymousCredential
    from gitreconcile.git import EphemeralRepository

    with EphemeralRepository(url, AnonymousCredential()) as repo:
        sha = repo.resolve("main")
        repo.checkout(sha)
        (repo.worktree / "README.md").write_bytes(b"Hello, World!")
        if repo.is_dirty():
            repo.stage_all()
            new_sha = repo.commit("docs: update README")
            repo.set_branch("main", new_sha)
            repo.push_branch("main")
    ```
"""

from __future__ import annotations

import tempfile
from pathlib import Path
from types import TracebackType
from typing import Self

from git import Actor, Git, GitCommandError, Repo
from git.exc import GitCommandNotFound, InvalidGitRepositoryError
from git.objects import Blob

from gitreconcile.config import CommitterConfig
from gitreconcile.constants import (
    DEFAULT_NETWORK_TIMEOUT,
    DEFAULT_REMOTE_NAME,
    SCRATCH_PREFIX,
)
from gitreconcile.credentials import Credential, git_config_environment
from gitreconcile.exceptions import (
    AuthenticationError,
    EntryNotFoundError,
    GitError,
    Phase,
    PushRejectedError,
    TransportError,
    WorkingTreeError,
)
from gitreconcile.git.resolver import resolve_revision
from gitreconcile.logging import get_logger
from gitreconcile.utils.security import redact_url, scrub_secrets

__all__ = [
    "EphemeralRepository",
    "convert_git_error",
    "git_environment",
]

logger = get_logger(__name__)

# =============================================================================
# Constants
# =============================================================================

#: Phases that talk to the remote
NETWORK_PHASES: frozenset[Phase] = frozenset(
    {Phase.CLONE, Phase.LIST_REFS, Phase.PUSH}
)

#: Patterns indicating the remote refused a branch update
PUSH_REJECTED_PATTERNS: tuple[str, ...] = (
    "[rejected]",
    "[remote rejected]",
    "non-fast-forward",
    "fetch first",
    "hook declined",
    "stale info",
)

#: Patterns indicating the remote refused the credentials
AUTH_ERROR_PATTERNS: tuple[str, ...] = (
    "authentication failed",
    "permission denied",
    "could not read username",
    "could not read password",
    "invalid username or password",
    "host key verification failed",
    "http basic: access denied",
    "returned error: 403",
)

#: Configuration forced on every command of a pass
_BASE_GIT_CONFIG: dict[str, str] = {
    "core.autocrlf": "false",
    "core.safecrlf": "false",
    "advice.detachedHead": "false",
    "init.defaultBranch": "main",
}


# =============================================================================
# Helper Functions
# =============================================================================


def convert_git_error(
    exc: GitCommandError | GitCommandNotFound,
    phase: Phase,
    *,
    branch: str | None = None,
) -> GitError:
    """Convert a GitPython exception into a gitreconcile exception.

    Args:
        exc: GitPython exception.
        phase: Step of the pass that failed.
        branch: Branch being pushed, for push rejections.

    Returns:
        The matching exception; output from git is redacted before it is
        attached.
    """
    if isinstance(exc, GitCommandNotFound):
        return WorkingTreeError("git executable not found", phase=phase)

    streams = (str(exc.stderr or "").strip(), str(exc.stdout or "").strip())
    output = "\n".join(stream for stream in streams if stream)
    detail = scrub_secrets(output.strip()) or f"exit status {exc.status}"
    output_lower = output.lower()

    if phase is Phase.PUSH and any(p in output_lower for p in PUSH_REJECTED_PATTERNS):
        return PushRejectedError(branch or "", detail=detail)

    if any(p in output_lower for p in AUTH_ERROR_PATTERNS):
        return AuthenticationError("remote rejected credentials", phase, detail)

    if phase in NETWORK_PHASES:
        return TransportError(f"git {phase.value} did not complete", phase, detail)

    return WorkingTreeError(f"git {phase.value} did not complete", phase, detail)


def git_environment(credential: Credential, scratch: Path) -> dict[str, str]:
    """Build the process environment for git commands of a pass.

    Args:
        credential: Credential of the pass.
        scratch: Private directory the credential may write key material to.

    Returns:
        Variables to add to the environment of every git command.
    """
    entries = {**_BASE_GIT_CONFIG, **credential.git_config()}
    env = git_config_environment(entries)
    env.update(credential.environment(scratch))
    env["GIT_TERMINAL_PROMPT"] = "0"
    return env


# =============================================================================
# Main Class: EphemeralRepository
# =============================================================================


class EphemeralRepository:
    """Clone of a remote repository that lives for one pass.

    Use as a context manager; the scratch directory holding the clone and any
    key material is removed on every exit path.

    Args:
        url: Remote URL to clone.
        credential: Authentication for clone and push.
        remote: Name given to the remote in the clone.
        timeout: Bound on each network command, in seconds.
        committer: Identity recorded on commits.
    """

    def __init__(
        self,
        url: str,
        credential: Credential,
        *,
        remote: str = DEFAULT_REMOTE_NAME,
        timeout: float = DEFAULT_NETWORK_TIMEOUT,
        committer: CommitterConfig | None = None,
    ) -> None:
        self.url = url
        self.remote = remote
        self._credential = credential
        self._timeout = timeout
        committer = committer or CommitterConfig()
        self._actor = Actor(committer.name, committer.email)
        self._scratch: tempfile.TemporaryDirectory[str] | None = None
        self._repo: Repo | None = None
        self._worktree: Path | None = None

    def __enter__(self) -> Self:
        self.open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def open(self) -> None:
        """Clone the remote into a fresh scratch directory.

        Raises:
            TransportError: If the clone fails.
            AuthenticationError: If the remote rejects the credentials.
        """
        if self._scratch is not None:
            raise RuntimeError("EphemeralRepository is already open")

        self._scratch = tempfile.TemporaryDirectory(prefix=SCRATCH_PREFIX)
        try:
            scratch = Path(self._scratch.name)
            worktree = scratch / "worktree"
            env = git_environment(self._credential, scratch / "credentials")

            runner = Git(str(scratch))
            runner.update_environment(**env)
            logger.debug(
                "cloning_repository",
                url=redact_url(self.url),
                credential=self._credential.describe(),
            )
            try:
                runner.clone(
                    "--no-checkout",
                    "--origin",
                    self.remote,
                    "--",
                    self.url,
                    str(worktree),
                    kill_after_timeout=self._timeout,
                )
            except (GitCommandError, GitCommandNotFound) as e:
                raise convert_git_error(e, Phase.CLONE) from e

            try:
                repo = Repo(worktree)
            except InvalidGitRepositoryError as e:
                raise WorkingTreeError(
                    "clone produced no repository", Phase.CLONE, str(worktree)
                ) from e
            repo.git.update_environment(**env)
        except BaseException:
            self._scratch.cleanup()
            self._scratch = None
            raise

        self._repo = repo
        self._worktree = worktree
        logger.info("repository_cloned", url=redact_url(self.url))

    def close(self) -> None:
        """Release the clone and remove the scratch directory."""
        if self._repo is not None:
            self._repo.close()
            self._repo = None
        self._worktree = None
        if self._scratch is not None:
            self._scratch.cleanup()
            self._scratch = None

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def repo(self) -> Repo:
        """Underlying GitPython Repo instance."""
        if self._repo is None:
            raise RuntimeError("EphemeralRepository is not open")
        return self._repo

    @property
    def worktree(self) -> Path:
        """Root of the working tree."""
        if self._worktree is None:
            raise RuntimeError("EphemeralRepository is not open")
        return self._worktree

    # -------------------------------------------------------------------------
    # Resolution and checkout
    # -------------------------------------------------------------------------

    def resolve(self, name: str) -> str:
        """Resolve a branch, tag or hash to a commit SHA.

        Raises:
            RefNotFoundError: If *name* resolves under neither naming scheme.
        """
        return resolve_revision(self.repo, name, self.remote)

    def checkout(self, sha: str) -> None:
        """Force-checkout *sha* as a detached HEAD.

        Raises:
            WorkingTreeError: If the checkout fails.
        """
        try:
            self.repo.git.checkout("--force", "--detach", sha)
        except (GitCommandError, GitCommandNotFound) as e:
            raise convert_git_error(e, Phase.CHECKOUT) from e
        logger.debug("revision_checked_out", sha=sha)

    def head_sha(self) -> str:
        """SHA of the checked-out commit."""
        return self.repo.head.commit.hexsha

    # -------------------------------------------------------------------------
    # Change detection and publishing
    # -------------------------------------------------------------------------

    def is_dirty(self) -> bool:
        """Return True if the tree differs from the checked-out commit.

        Staged changes, unstaged modifications and untracked (non-ignored)
        files all count.

        Raises:
            WorkingTreeError: If status cannot be computed.
        """
        try:
            return self.repo.is_dirty(
                index=True, working_tree=True, untracked_files=True
            )
        except (GitCommandError, GitCommandNotFound) as e:
            raise convert_git_error(e, Phase.STATUS) from e

    def stage_all(self) -> None:
        """Stage additions, modifications and removals."""
        try:
            self.repo.git.add("-A")
        except (GitCommandError, GitCommandNotFound) as e:
            raise convert_git_error(e, Phase.STAGE) from e

    def commit(self, message: str) -> str:
        """Commit the index on top of HEAD.

        Returns:
            The new commit SHA.

        Raises:
            WorkingTreeError: If the commit cannot be written.
        """
        try:
            commit = self.repo.index.commit(
                message,
                author=self._actor,
                committer=self._actor,
                skip_hooks=True,
            )
        except (GitCommandError, GitCommandNotFound) as e:
            raise convert_git_error(e, Phase.COMMIT) from e
        except (OSError, ValueError) as e:
            raise WorkingTreeError(
                "cannot write commit", Phase.COMMIT, str(e)
            ) from e
        logger.info("commit_created", sha=commit.hexsha)
        return commit.hexsha

    def set_branch(self, branch: str, sha: str) -> None:
        """Point ``refs/heads/<branch>`` at *sha*, creating it if needed."""
        try:
            self.repo.create_head(branch, sha, force=True)
        except (GitCommandError, GitCommandNotFound) as e:
            raise convert_git_error(e, Phase.ADVANCE) from e
        except (OSError, ValueError) as e:
            raise WorkingTreeError(
                f"cannot move branch '{branch}'", Phase.ADVANCE, str(e)
            ) from e

    def push_branch(self, branch: str) -> None:
        """Push the local branch to the same name on the remote.

        Never forced: the remote's fast-forward check decides.

        Raises:
            PushRejectedError: If the remote refuses the update.
            AuthenticationError: If the remote rejects the credentials.
            TransportError: For any other push failure.
        """
        refspec = f"refs/heads/{branch}:refs/heads/{branch}"
        try:
            self.repo.git.push(
                "--porcelain",
                "--atomic",
                self.remote,
                refspec,
                kill_after_timeout=self._timeout,
            )
        except (GitCommandError, GitCommandNotFound) as e:
            raise convert_git_error(e, Phase.PUSH, branch=branch) from e
        logger.info("commit_pushed", url=redact_url(self.url), branch=branch)

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def read_blob(self, sha: str, path: str) -> bytes:
        """Read the file at *path* in commit *sha*.

        Raises:
            EntryNotFoundError: If the path does not exist in that commit.
            WorkingTreeError: If the path names a directory or submodule.
        """
        tree = self.repo.commit(sha).tree
        try:
            entry = tree / path
        except KeyError as e:
            raise EntryNotFoundError(path, phase=Phase.READ) from e
        if not isinstance(entry, Blob):
            raise WorkingTreeError(f"'{path}' is not a file", Phase.READ)
        data: bytes = entry.data_stream.read()
        return data
