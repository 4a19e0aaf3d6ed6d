"""Rich consoles shared by the CLI commands.

Command results go to ``console`` (stdout) so they can be piped; progress
and diagnostics go to ``err_console``.
"""

from __future__ import annotations

from rich.console import Console

__all__ = ["console", "err_console"]

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)
