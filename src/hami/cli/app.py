"""
Root Typer application for the hami CLI.

Every command bootstraps a fresh registry, seeds shared state with the
working and user directories, and runs one ``hami-cli:*`` flow.
"""

from __future__ import annotations

import typer
from typer import Typer

from hami import __version__
from hami.cli.utils import execute, verbose_from
from hami.core.logging import configure_logging
from hami.core.settings import get_settings

app = Typer(
    name="hami",
    help="hami — composable workflow runtime.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"hami {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output and debug logs."),
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """hami CLI — manage the .hami directory, config, flows and traces."""
    settings = get_settings()
    configure_logging(
        level="DEBUG" if verbose else settings.log_level,
        json_format=settings.json_logs,
    )
    ctx.obj = {"verbose": verbose}


@app.command("init")
def init(ctx: typer.Context) -> None:
    """Create the working and user .hami directories."""
    execute("hami-cli:init-flow", {}, verbose=verbose_from(ctx))


# ── Sub-command registration ─────────────────────────────────────────────

from hami.cli.config import app as config_app  # noqa: E402
from hami.cli.flow import app as flow_app  # noqa: E402
from hami.cli.trace import app as trace_app  # noqa: E402

app.add_typer(config_app, name="config", help="Local and global configuration.")
app.add_typer(flow_app, name="flow", help="Stored flow management.")
app.add_typer(trace_app, name="trace", help="Trace history.")
