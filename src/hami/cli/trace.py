"""
CLI: ``hami trace`` — inspect the trace index.
"""

from __future__ import annotations

import typer

from hami.cli.utils import execute, verbose_from

app = typer.Typer(no_args_is_help=True)


@app.command("list")
def list_traces(ctx: typer.Context) -> None:
    """List trace ids and timestamps."""
    execute("hami-cli:trace-list-flow", {"verbose": verbose_from(ctx)}, verbose=verbose_from(ctx))


@app.command("show")
def show_trace(
    ctx: typer.Context,
    trace_id: str = typer.Argument(..., help="Trace id"),
) -> None:
    """Show the data recorded for one trace."""
    execute(
        "hami-cli:trace-show-flow",
        {"verbose": verbose_from(ctx), "trace_id": trace_id},
        verbose=verbose_from(ctx),
    )


@app.command("grep")
def grep_traces(
    ctx: typer.Context,
    query: str = typer.Argument(..., help="Text to search for in trace data"),
) -> None:
    """Find traces whose data contains ``query``."""
    execute(
        "hami-cli:trace-grep-flow",
        {"verbose": verbose_from(ctx), "search_query": query},
        verbose=verbose_from(ctx),
    )
