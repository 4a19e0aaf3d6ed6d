"""``gitreconcile apply`` command."""

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
from gitreconcile.manifest import load_manifest
from gitreconcile.reconcile.apply import apply_manifest


@click.command()
@click.argument(
    "manifest_path",
    metavar="MANIFEST",
    type=click.Path(dir_okay=False, path_type=Path),
)
@state_option
@format_option
@click.pass_context
def apply(
    ctx: click.Context, manifest_path: Path, state_path: str | None, fmt: str
) -> None:
    """Reconcile every commit unit declared in MANIFEST.

    New units are created, changed units updated, units whose url or branch
    changed are replaced, and units no longer declared are deleted. Nothing
    is pushed for units already in the declared state.

    Examples:
        gitreconcile apply commits.yaml
        gitreconcile apply commits.yaml --state build/state.json --format json
    """
    cli_ctx = get_cli_context(ctx)
    with cli_error_handler():
        manifest = load_manifest(manifest_path)
        store = cli_ctx.open_state(Path(state_path) if state_path else None)
        report = apply_manifest(
            manifest,
            store,
            cli_ctx.reconciler(),
            on_outcome=progress_printer(cli_ctx.quiet, fmt),
        )
    render_report(report, fmt, title="Apply")
