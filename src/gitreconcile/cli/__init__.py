"""CLI support for gitreconcile: context, exit codes and output helpers."""

from __future__ import annotations

from gitreconcile.cli.context import CLIContext, ExitCode
from gitreconcile.cli.output import OutputFormat

__all__ = [
    "CLIContext",
    "ExitCode",
    "OutputFormat",
]
