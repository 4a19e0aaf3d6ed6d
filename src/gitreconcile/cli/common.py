from __future__ import annotations

import contextlib
from collections.abc import Generator

import click
from rich.table import Table

from gitreconcile.cli.console import console
from gitreconcile.cli.context import CLIContext, ExitCode
from gitreconcile.cli.output import (
    OutputFormat,
    format_error,
    format_json,
    format_success,
    short_sha,
)
from gitreconcile.exceptions import (
    AuthenticationError,
    ConfigError,
    GitError,
    GitReconcileError,
    PushRejectedError,
    RefNotFoundError,
)
from gitreconcile.logging import get_logger
from gitreconcile.reconcile.apply import (
    Action,
    ApplyReport,
    OutcomeCallback,
    UnitOutcome,
)

#: Rich style per action in text output
_ACTION_STYLES: dict[Action, str] = {
    Action.CREATED: "green",
    Action.UPDATED: "yellow",
    Action.REPLACED: "magenta",
    Action.RECREATED: "magenta",
    Action.UNCHANGED: "dim",
    Action.DELETED: "red",
    Action.IN_SYNC: "green",
    Action.DRIFTED: "bold red",
}

format_option = click.option(
    "-f",
    "--format",
    "fmt",
    type=click.Choice([f.value for f in OutputFormat]),
    default=OutputFormat.TEXT.value,
    help="Output format.",
)

state_option = click.option(
    "--state",
    "state_path",
    type=click.Path(dir_okay=False, path_type=str),
    default=None,
    help="State file (default: state_file from configuration).",
)


def get_cli_context(ctx: click.Context) -> CLIContext:
    cli_ctx: CLIContext = ctx.obj["cli_ctx"]
    return cli_ctx


def _suggestion_for(error: GitReconcileError) -> str | None:
    if isinstance(error, PushRejectedError):
        return "The branch moved during the pass; run the command again"
    if isinstance(error, AuthenticationError):
        return "Check the auth settings or the GITHUB_TOKEN variable"
    if isinstance(error, RefNotFoundError):
        return "The branch must already exist on the remote"
    return None


@contextlib.contextmanager
def cli_error_handler() -> Generator[None, None, None]:
    """Context manager for common CLI error handling.

    - KeyboardInterrupt: exit 130
    - ConfigError: field and value details, exit 2
    - GitError: failing phase and error kind, exit 1
    - other GitReconcileError: message, exit 1

    Example:
        >>> with cli_error_handler():
        >>>     report = apply_manifest(manifest, store, reconciler)
    """
    logger = get_logger(__name__)

    try:
        yield
    except KeyboardInterrupt:
        click.echo("\n\nInterrupted by user.", err=True)
        raise SystemExit(ExitCode.INTERRUPTED) from None
    except ConfigError as e:
        details = []
        if e.field:
            details.append(f"Field: {e.field}")
        if e.value is not None:
            details.append(f"Value: {e.value}")
        click.echo(format_error(e.message, details=details or None), err=True)
        raise SystemExit(ExitCode.USAGE) from e
    except GitError as e:
        logger.debug("command_failed", phase=e.phase.value, kind=e.kind.value)
        error_msg = format_error(
            e.message,
            details=[f"Phase: {e.phase.value}", f"Kind: {e.kind.value}"],
            suggestion=_suggestion_for(e),
        )
        click.echo(error_msg, err=True)
        raise SystemExit(ExitCode.FAILURE) from e
    except GitReconcileError as e:
        click.echo(format_error(e.message), err=True)
        raise SystemExit(ExitCode.FAILURE) from e
    except OSError as e:
        logger.debug("local_io_failed", error=str(e))
        click.echo(format_error(str(e)), err=True)
        raise SystemExit(ExitCode.FAILURE) from e


def _print_progress(outcome: UnitOutcome) -> None:
    style = _ACTION_STYLES[outcome.action]
    console.print(
        f"[{style}]{outcome.action.value:>9}[/{style}]  {outcome.name}"
        f"  {short_sha(outcome.sha)}"
    )


def progress_printer(quiet: bool, fmt: str) -> OutcomeCallback | None:
    """Return a per-unit progress callback, or None when it would be noise."""
    if quiet or fmt == OutputFormat.JSON.value:
        return None
    return _print_progress


def render_report(report: ApplyReport, fmt: str, *, title: str) -> None:
    """Print the outcome of apply, check or destroy."""
    if fmt == OutputFormat.JSON.value:
        click.echo(format_json(report.to_dict()))
        return

    if not report.outcomes:
        console.print("No commit units to process.")
        return

    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("Unit")
    table.add_column("Action")
    table.add_column("Commit", style="dim")
    table.add_column("Pushed", justify="center")
    for outcome in report.outcomes:
        style = _ACTION_STYLES[outcome.action]
        table.add_row(
            outcome.name,
            f"[{style}]{outcome.action.value}[/{style}]",
            short_sha(outcome.sha),
            "yes" if outcome.is_new else "",
        )
    console.print(table)
    console.print(
        format_success(
            f"{len(report.outcomes)} unit(s) processed, {report.pushed} pushed"
        )
    )
