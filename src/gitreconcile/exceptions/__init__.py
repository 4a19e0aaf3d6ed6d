"""gitreconcile exception hierarchy.

All exceptions can be imported from this package:
    from gitreconcile.exceptions import ConfigError, PushRejectedError
"""

from __future__ import annotations

# Base exception
from gitreconcile.exceptions.base import ErrorKind, GitReconcileError

# Configuration exceptions
from gitreconcile.exceptions.config import ConfigError

# Git-related exceptions
from gitreconcile.exceptions.git import (
    AuthenticationError,
    EntryNotFoundError,
    GitError,
    Phase,
    PushRejectedError,
    RefNotFoundError,
    TransportError,
    WorkingTreeError,
)

__all__ = [
    # Base
    "GitReconcileError",
    # Config
    "ConfigError",
    # Git
    "AuthenticationError",
    "EntryNotFoundError",
    "ErrorKind",
    "GitError",
    "Phase",
    "PushRejectedError",
    "RefNotFoundError",
    "TransportError",
    "WorkingTreeError",
]
