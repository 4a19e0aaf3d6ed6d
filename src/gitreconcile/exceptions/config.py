from __future__ import annotations

from typing import Any

from gitreconcile.exceptions.base import ErrorKind, GitReconcileError


class ConfigError(GitReconcileError):
    """Exception for invalid configuration or desired state.

    Raised before any network activity when settings, a manifest or a commit
    unit cannot be used: YAML syntax errors, pydantic validation failures,
    unsupported URL schemes, invalid branch names, unsafe or duplicate paths.

    Attributes:
        message: Human-readable error message describing the problem.
        field: Optional dotted field name that caused the error
            (e.g., "commits.docs.add.1.path").
        value: Optional offending value (never a secret).

    Examples:
        ```python
        raise ConfigError(
            "Unsupported URL scheme 'ftp'",
            field="url",
            value="ftp://example.com/repo.git",
        )
        ```
    """

    kind = ErrorKind.CONFIGURATION

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
    ) -> None:
        """Initialize the ConfigError.

        Args:
            message: Human-readable error message.
            field: Optional field name that caused the error.
            value: Optional value that failed validation.
        """
        self.field = field
        self.value = value
        super().__init__(message)
