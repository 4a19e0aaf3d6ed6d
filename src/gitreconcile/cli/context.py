"""CLI context and exit codes for gitreconcile."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import Path

from gitreconcile.config import ReconcileConfig
from gitreconcile.reconcile.engine import Reconciler
from gitreconcile.state import StateStore

__all__ = [
    "CLIContext",
    "ExitCode",
]


class ExitCode(IntEnum):
    """Exit codes for the gitreconcile CLI.

    - 0 for success
    - 1 for failure
    - 2 for unusable input, or drift found by ``check``
    - 130 for keyboard interrupt (128 + SIGINT=2)

    ``DRIFT`` is an alias of ``USAGE``: both are 2 and compare equal, and
    ``ExitCode(2)`` is ``USAGE``.
    """

    SUCCESS = 0
    FAILURE = 1
    USAGE = 2
    DRIFT = 2
    INTERRUPTED = 130


@dataclass(frozen=True, slots=True)
class CLIContext:
    """Global options and resolved configuration for one invocation.

    Attributes:
        config: Loaded configuration.
        config_path: Path given with --config, if any.
        verbosity: Verbosity level (0=default, 1=INFO, 2+=DEBUG).
        quiet: Suppress non-essential output.
    """

    config: ReconcileConfig
    config_path: Path | None = None
    verbosity: int = 0
    quiet: bool = False

    def reconciler(self) -> Reconciler:
        return Reconciler(self.config)

    def open_state(self, override: Path | None = None) -> StateStore:
        """Load the state file named on the command line or in config."""
        return StateStore.load(override or self.config.state_file)
