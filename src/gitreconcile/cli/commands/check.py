"""``gitreconcile check`` command."""

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
from gitreconcile.cli.context import ExitCode
from gitreconcile.cli.output import OutputFormat, format_warning
from gitreconcile.reconcile.apply import check_state


@click.command()
@state_option
@format_option
@click.pass_context
def check(ctx: click.Context, state_path: str | None, fmt: str) -> None:
    """Report units whose files no longer match the recorded state.

    Read-only: nothing is committed or pushed. Exits with status 2 when drift
    is found.

    Examples:
        gitreconcile check
        gitreconcile check --format json
    """
    cli_ctx = get_cli_context(ctx)
    with cli_error_handler():
        store = cli_ctx.open_state(Path(state_path) if state_path else None)
        report = check_state(
            store,
            cli_ctx.reconciler(),
            on_outcome=progress_printer(cli_ctx.quiet, fmt),
        )
    render_report(report, fmt, title="Check")

    if report.drifted:
        if fmt == OutputFormat.TEXT.value:
            click.echo(
                format_warning(f"Drift detected: {', '.join(report.drifted)}"),
                err=True,
            )
        raise SystemExit(ExitCode.DRIFT)
