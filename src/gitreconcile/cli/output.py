"""Output formatting helpers for the gitreconcile CLI."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

__all__ = [
    "OutputFormat",
    "format_error",
    "format_json",
    "format_success",
    "format_warning",
    "short_sha",
]


class OutputFormat(str, Enum):
    """Supported output formats for CLI commands.

    Values:
        TEXT: Human-readable tables and summaries (default).
        JSON: Machine-readable JSON output.
    """

    TEXT = "text"
    JSON = "json"


def format_error(
    message: str, details: list[str] | None = None, suggestion: str | None = None
) -> str:
    """Format an error message with optional details and suggestion.

    Example:
        >>> print(format_error(
        ...     "push failed: remote rejected update of branch 'main'",
        ...     details=["Phase: push"],
        ...     suggestion="Re-run apply; the branch moved during the pass",
        ... ))
        Error: push failed: remote rejected update of branch 'main'
          Phase: push
        Suggestion: Re-run apply; the branch moved during the pass
    """
    lines = [f"Error: {message}"]
    if details:
        lines.extend(f"  {detail}" for detail in details)
    if suggestion:
        lines.append(f"Suggestion: {suggestion}")
    return "\n".join(lines)


def format_success(message: str) -> str:
    """Format a success message.

    Example:
        >>> format_success("2 units reconciled")
        'Success: 2 units reconciled'
    """
    return f"Success: {message}"


def format_warning(message: str) -> str:
    """Format a warning message.

    Example:
        >>> format_warning("State file is empty")
        'Warning: State file is empty'
    """
    return f"Warning: {message}"


def format_json(data: Any) -> str:
    """Format data as indented JSON.

    Raises:
        TypeError: If data is not JSON-serializable.
    """
    return json.dumps(data, indent=2)


def short_sha(sha: str | None) -> str:
    return sha[:12] if sha else "-"
