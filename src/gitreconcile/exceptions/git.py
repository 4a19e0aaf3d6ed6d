from __future__ import annotations

from enum import Enum

from gitreconcile.exceptions.base import ErrorKind, GitReconcileError


class Phase(str, Enum):
    """Step of a reconciliation pass or lookup in which an error occurred."""

    CLONE = "clone"
    RESOLVE = "resolve"
    CHECKOUT = "checkout"
    MUTATE = "mutate"
    STATUS = "status"
    STAGE = "stage"
    COMMIT = "commit"
    ADVANCE = "advance"
    PUSH = "push"
    LIST_REFS = "list_refs"
    READ = "read"


class GitError(GitReconcileError):
    """Exception for git operation failures.

    Attributes:
        message: Human-readable error message, prefixed with the phase.
        phase: Step of the pass that failed.
        kind: Classification of the failure.
        detail: Redacted stderr or underlying cause, if any.
        recoverable: True if re-running the whole pass may succeed.
    """

    kind: ErrorKind = ErrorKind.LOCAL_IO

    def __init__(
        self,
        message: str,
        phase: Phase,
        detail: str = "",
        recoverable: bool = False,
    ) -> None:
        """Initialize the GitError.

        Args:
            message: Human-readable error message.
            phase: Step of the pass that failed.
            detail: Redacted stderr or underlying cause.
            recoverable: True if re-running the whole pass may succeed.
        """
        self.phase = phase
        self.detail = detail
        self.recoverable = recoverable
        text = f"{phase.value} failed: {message}"
        if detail:
            text = f"{text}: {detail}"
        super().__init__(text)


class RefNotFoundError(GitError):
    """Exception raised when a ref resolves under neither naming scheme.

    Attributes:
        ref: The name the caller asked for.
        attempted: Every revision expression that was tried, in order.
    """

    kind = ErrorKind.RESOLUTION

    def __init__(self, ref: str, attempted: tuple[str, ...] = ()) -> None:
        """Initialize the RefNotFoundError.

        Args:
            ref: The name the caller asked for.
            attempted: Revision expressions tried, in order.
        """
        self.ref = ref
        self.attempted = attempted
        tried = ", ".join(attempted) if attempted else ref
        super().__init__(
            f"reference '{ref}' not found (tried {tried})",
            phase=Phase.RESOLVE,
        )


class TransportError(GitError):
    """Exception for clone, ref listing and push failures."""

    kind = ErrorKind.TRANSPORT


class AuthenticationError(TransportError):
    """Exception raised when the remote rejects the supplied credentials."""


class PushRejectedError(TransportError):
    """Exception raised when the remote refuses the pushed branch update.

    Typically a non-fast-forward because the branch moved while the pass was
    running. Nothing was published; the caller may retry the whole pass.

    Attributes:
        branch: Branch whose update was refused.
    """

    def __init__(self, branch: str, detail: str = "") -> None:
        """Initialize the PushRejectedError.

        Args:
            branch: Branch whose update was refused.
            detail: Redacted rejection output from git.
        """
        self.branch = branch
        super().__init__(
            f"remote rejected update of branch '{branch}'",
            phase=Phase.PUSH,
            detail=detail,
            recoverable=True,
        )


class WorkingTreeError(GitError):
    """Exception for failures of the ephemeral working tree or local store."""

    kind = ErrorKind.LOCAL_IO


class EntryNotFoundError(GitError):
    """Exception raised when a path does not exist in the tree being edited.

    An expected absence: the mutator's callers and the file lookup catch it
    and treat it as a no-op or an empty result.

    Attributes:
        path: Repository-relative path that was not found.
    """

    kind = ErrorKind.NOT_FOUND

    def __init__(self, path: str, phase: Phase = Phase.MUTATE) -> None:
        """Initialize the EntryNotFoundError.

        Args:
            path: Repository-relative path that was not found.
            phase: Step in which the lookup happened.
        """
        self.path = path
        super().__init__(f"entry '{path}' not found", phase=phase)
