"""``gitreconcile repository`` command."""

from __future__ import annotations

import click
from rich.table import Table

from gitreconcile.cli.common import cli_error_handler, format_option, get_cli_context
from gitreconcile.cli.console import console
from gitreconcile.cli.output import OutputFormat, format_json, format_warning
from gitreconcile.lookups import describe_repository
from gitreconcile.utils.security import redact_url


@click.command()
@click.argument("url")
@format_option
@click.pass_context
def repository(ctx: click.Context, url: str, fmt: str) -> None:
    """Show HEAD, branches and tags of the repository at URL.

    Examples:
        gitreconcile repository https://github.com/org/repo.git
        gitreconcile repository git@github.com:org/repo.git --format json
    """
    cli_ctx = get_cli_context(ctx)
    with cli_error_handler():
        info = describe_repository(url, cli_ctx.config)

    if fmt == OutputFormat.JSON.value:
        data = info.to_dict()
        data["url"] = redact_url(info.url)
        click.echo(format_json(data))
        return

    if info.head is None:
        console.print(format_warning("Repository is empty."))
    else:
        target = f" -> {info.head.ref}" if info.head.ref else ""
        console.print(f"[bold]HEAD[/bold] {info.head.sha}{target}")

    table = Table(show_header=True, header_style="bold", show_lines=False)
    table.add_column("Type", style="dim")
    table.add_column("Name")
    table.add_column("SHA")
    for branch in info.branches:
        table.add_row("branch", branch.name, branch.sha)
    for tag in info.tags:
        table.add_row("tag", tag.name, tag.sha)
    if info.branches or info.tags:
        console.print(table)
