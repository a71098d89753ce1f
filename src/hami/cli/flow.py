"""
CLI: ``hami flow`` — store, run, list and remove named flows.

A stored flow is a config entry ``flow:<name>`` holding ``{"kind": ...,
"config": ...}``; ``run`` builds it from the registry and executes it.
"""

from __future__ import annotations

import typer

from hami.cli.utils import execute, parse_json_option, verbose_from

app = typer.Typer(no_args_is_help=True)

GLOBAL_OPTION = typer.Option(False, "--global", "-g", help="Use the user-level configuration.")


def _target(use_global: bool) -> str:
    return "global" if use_global else "local"


@app.command("init")
def init_flow(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Flow name"),
    kind: str = typer.Argument(..., help="Node kind to run, e.g. core-fs:copy-flow"),
    config: str = typer.Option("{}", "--config", "-c", help="Node config as a JSON object"),
    use_global: bool = GLOBAL_OPTION,
) -> None:
    """Store a named flow definition."""
    execute(
        "hami-cli:flow-init-flow",
        {
            "target": _target(use_global),
            "name": name,
            "kind": kind,
            "config": parse_json_option(config, "--config"),
        },
        verbose=verbose_from(ctx),
    )


@app.command("run")
def run_flow(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Flow name"),
    payload: str | None = typer.Option(  # noqa: UP007
        None, "--payload", "-p", help="JSON object merged into shared state"
    ),
    use_global: bool = GLOBAL_OPTION,
) -> None:
    """Run a stored flow."""
    config = {"target": _target(use_global), "name": name, "verbose": verbose_from(ctx)}
    parsed = parse_json_option(payload, "--payload")
    if parsed is not None:
        config["payload"] = parsed
    execute("hami-cli:flow-run-flow", config, verbose=verbose_from(ctx))


@app.command("list")
def list_flows(ctx: typer.Context, use_global: bool = GLOBAL_OPTION) -> None:
    """List stored flows."""
    execute(
        "hami-cli:flow-list-flow",
        {"target": _target(use_global), "verbose": verbose_from(ctx)},
        verbose=verbose_from(ctx),
    )


@app.command("remove")
def remove_flow(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Flow name"),
    use_global: bool = GLOBAL_OPTION,
) -> None:
    """Remove a stored flow."""
    execute(
        "hami-cli:flow-remove-flow",
        {"target": _target(use_global), "name": name},
        verbose=verbose_from(ctx),
    )
