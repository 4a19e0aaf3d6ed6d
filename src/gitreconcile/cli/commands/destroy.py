"""``gitreconcile destroy`` command."""

from __future__ import annotations

from pathlib import Path

import click

from gitreconcile.cli.common import (
    cli_error_handler,
    format_option,
    get_cli_context,
    progress_printer,
    render_report,
    state_option,
)
from gitreconcile.reconcile.apply import destroy_state


@click.command()
@state_option
@format_option
@click.option("--yes", is_flag=True, default=False, help="Do not ask for confirmation.")
@click.pass_context
def destroy(ctx: click.Context, state_path: str | None, fmt: str, yes: bool) -> None:
    """Delete the files of every recorded unit and empty the state.

    Files are only removed for units with prune enabled; branches are never
    deleted.

    Examples:
        gitreconcile destroy --yes
    """
    cli_ctx = get_cli_context(ctx)
    if not yes:
        click.confirm("Delete the declared files of every recorded unit?", abort=True)
    with cli_error_handler():
        store = cli_ctx.open_state(Path(state_path) if state_path else None)
        report = destroy_state(
            store,
            cli_ctx.reconciler(),
            on_outcome=progress_printer(cli_ctx.quiet, fmt),
        )
    render_report(report, fmt, title="Destroy")
