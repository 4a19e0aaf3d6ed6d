"""``gitreconcile file`` command."""

from __future__ import annotations

from pathlib import Path

import click

from gitreconcile.cli.common import cli_error_handler, get_cli_context
from gitreconcile.cli.output import format_warning
from gitreconcile.lookups import read_file
from gitreconcile.utils.atomic import atomic_write_bytes


@click.command(name="file")
@click.argument("url")
@click.argument("path")
@click.option("--ref", default=None, help="Branch, tag or hash (default: HEAD).")
@click.option(
    "-o",
    "--output",
    "output_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the content here instead of stdout.",
)
@click.pass_context
def file_command(
    ctx: click.Context,
    url: str,
    path: str,
    ref: str | None,
    output_path: Path | None,
) -> None:
    """Print the content of PATH in the repository at URL.

    A missing file is reported as a warning, not an error.

    Examples:
        gitreconcile file https://github.com/org/repo.git README.md
        gitreconcile file https://github.com/org/repo.git docs/a.md --ref v1.0
    """
    cli_ctx = get_cli_context(ctx)
    with cli_error_handler():
        found = read_file(url, path, ref=ref, config=cli_ctx.config)
        if found is not None and output_path is not None:
            atomic_write_bytes(output_path, found.content)

    if found is None:
        click.echo(format_warning(f"{path} not found at {ref or 'HEAD'}"), err=True)
        return
    if output_path is None:
        click.echo(found.content, nl=False)
