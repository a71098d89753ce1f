"""
CLI: ``hami config`` — read and write local or global configuration.
"""

from __future__ import annotations

import typer

from hami.cli.utils import execute, parse_value, verbose_from

app = typer.Typer(no_args_is_help=True)

GLOBAL_OPTION = typer.Option(False, "--global", "-g", help="Use the user-level configuration.")


def _target(use_global: bool) -> str:
    return "global" if use_global else "local"


@app.command("list")
def list_config(ctx: typer.Context, use_global: bool = GLOBAL_OPTION) -> None:
    """List configuration entries (global entries overlaid by local ones)."""
    execute(
        "hami-cli:config-list-flow",
        {"verbose": verbose_from(ctx), "target": _target(use_global)},
        verbose=verbose_from(ctx),
    )


@app.command("get")
def get_config(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Configuration key"),
    use_global: bool = GLOBAL_OPTION,
) -> None:
    """Show one configuration value."""
    execute(
        "hami-cli:config-get-flow",
        {"verbose": verbose_from(ctx), "target": _target(use_global), "config_key": key},
        verbose=verbose_from(ctx),
    )


@app.command("set")
def set_config(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Configuration key"),
    value: str = typer.Argument(..., help="Value (parsed as JSON when possible)"),
    use_global: bool = GLOBAL_OPTION,
) -> None:
    """Set a configuration value."""
    execute(
        "hami-cli:config-set-flow",
        {"target": _target(use_global), "config_key": key, "config_value": parse_value(value)},
        verbose=verbose_from(ctx),
    )


@app.command("remove")
def remove_config(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Configuration key"),
    use_global: bool = GLOBAL_OPTION,
) -> None:
    """Remove a configuration value."""
    execute(
        "hami-cli:config-remove-flow",
        {"target": _target(use_global), "config_key": key},
        verbose=verbose_from(ctx),
    )
