"""CLI entry point for gitreconcile.

This module defines the Click-based command-line interface.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click
from dotenv import load_dotenv

from gitreconcile.logging import configure_logging

# Load environment variables from .env in the current directory before any
# configuration is resolved
load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)

from gitreconcile import __version__  # noqa: E402
from gitreconcile.cli.commands.apply import apply  # noqa: E402
from gitreconcile.cli.commands.check import check  # noqa: E402
from gitreconcile.cli.commands.destroy import destroy  # noqa: E402
from gitreconcile.cli.commands.file import file_command  # noqa: E402
from gitreconcile.cli.commands.repository import repository  # noqa: E402
from gitreconcile.cli.context import CLIContext, ExitCode  # noqa: E402
from gitreconcile.cli.output import format_error  # noqa: E402
from gitreconcile.config import load_config  # noqa: E402
from gitreconcile.exceptions import ConfigError  # noqa: E402

#: Configured verbosity names to logging levels
_VERBOSITY_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="gitreconcile")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=False, path_type=str),
    default=None,
    help="Path to config file (overrides ./gitreconcile.yaml).",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for INFO, -vv for DEBUG).",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    default=False,
    help="Suppress non-essential output (ERROR level only).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: str | None,
    verbose: int,
    quiet: bool,
) -> None:
    """gitreconcile - keep declared files committed at a branch head."""
    ctx.ensure_object(dict)

    config_path = Path(config_file) if config_file else None
    try:
        config = load_config(config_path)
    except ConfigError as e:
        # Logging is not configured yet
        details = []
        if e.field:
            details.append(f"Field: {e.field}")
        if e.value is not None:
            details.append(f"Value: {e.value}")
        click.echo(format_error(e.message, details=details or None), err=True)
        ctx.exit(ExitCode.USAGE)

    ctx.obj["cli_ctx"] = CLIContext(
        config=config,
        config_path=config_path,
        verbosity=verbose,
        quiet=quiet,
    )

    # Priority: quiet > verbose > config
    if quiet:
        level = logging.ERROR
    elif verbose > 0:
        level = logging.INFO if verbose == 1 else logging.DEBUG
    else:
        level = _VERBOSITY_LEVELS.get(config.verbosity, logging.WARNING)
    configure_logging(level=level)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(apply)
cli.add_command(check)
cli.add_command(destroy)
cli.add_command(repository)
cli.add_command(file_command)

if __name__ == "__main__":
    cli()
