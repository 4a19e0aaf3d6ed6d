from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Closed classification of gitreconcile failures.

    Values:
        CONFIGURATION: Unusable input, detected before network activity.
        RESOLUTION: A ref could not be resolved under any naming scheme.
        TRANSPORT: Clone, ref listing or push failed (network, auth, remote).
        LOCAL_IO: The ephemeral working tree or local object store failed.
        NOT_FOUND: An expected absence (missing file or index entry).
    """

    CONFIGURATION = "configuration"
    RESOLUTION = "resolution"
    TRANSPORT = "transport"
    LOCAL_IO = "local_io"
    NOT_FOUND = "not_found"


class GitReconcileError(Exception):
    """Base exception class for all gitreconcile errors.

    Everything the engine raises on purpose derives from this class, so the
    CLI (or any other caller driving reconciliation passes) can catch it at
    its boundary while programming errors propagate untouched.

    Attributes:
        message: Human-readable error message describing what went wrong.

    Example:
        ```python
        try:
            result = reconciler.create(spec)
        except GitReconcileError as e:
            click.echo(format_error(e.message), err=True)
            raise SystemExit(ExitCode.FAILURE) from e
        ```
    """

    def __init__(self, message: str) -> None:
        """Initialize the GitReconcileError.

        Args:
            message: Human-readable error message.
        """
        self.message = message
        super().__init__(message)
