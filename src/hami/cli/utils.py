"""
CLI utility helpers — registry bootstrap, shared-state seeding and flow runs.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import typer
from rich.markup import escape

from hami.cli.flows import ERROR_KEYS, HamiCliPlugin
from hami.core.errors import HamiError
from hami.core.logging import LogContext, get_logger
from hami.core.node import SharedState
from hami.core.registry import RegistrationManager
from hami.core.settings import HamiSettings, get_settings
from hami.plugins import BUILTIN_PLUGINS
from hami.plugins.console import err_console

logger = get_logger(__name__)


# ── Registry ─────────────────────────────────────────────────────────────


async def bootstrap() -> RegistrationManager:
    """A fresh registry holding the bundled plugins and the CLI flows."""
    registry = RegistrationManager()
    for plugin in (*BUILTIN_PLUGINS, HamiCliPlugin):
        await registry.register_plugin(plugin)
    return registry


def start_context(
    registry: RegistrationManager,
    settings: HamiSettings,
    *,
    verbose: bool = False,
) -> SharedState:
    """Initial shared state for a command: directories, options and registry."""
    working_directory = Path.cwd()
    home = settings.resolved_home()
    return {
        "working_directory": str(working_directory),
        "hami_directory": str(working_directory / settings.directory_name),
        "user_home_directory": str(home),
        "user_hami_directory": str(home / settings.directory_name),
        "core_fs_strategy": settings.strategy,
        "opts": {"verbose": verbose},
        "registry": registry,
    }


# ── Running ──────────────────────────────────────────────────────────────


async def run_cli_flow(kind: str, config: dict[str, Any], *, verbose: bool = False) -> SharedState:
    """Bootstrap a registry, build ``kind`` from it and run it once."""
    settings = get_settings()
    registry = await bootstrap()
    shared = start_context(registry, settings, verbose=verbose)
    flow = registry.create_node(kind, {"core_fs_strategy": settings.strategy, **config})
    async with LogContext(flow=kind):
        action = await flow.run(shared)
    logger.debug("cli.flow_finished", flow=kind, action=action)
    return shared


def execute(kind: str, config: dict[str, Any], *, verbose: bool = False) -> SharedState:
    """
    Run a command flow and translate failures into exit code 1.

    Errors raised by the flow are printed to stderr. Flows that end on an
    error branch leave a message under one of ``ERROR_KEYS``; those are
    already printed by ``core:log-error`` and only set the exit code.
    """
    try:
        shared = asyncio.run(run_cli_flow(kind, config, verbose=verbose))
    except HamiError as exc:
        err_console.print(f"[bold red]Error[/bold red] ({exc.category.value}): {escape(exc.message)}", soft_wrap=True)
        raise typer.Exit(code=1) from exc
    except Exception as exc:
        err_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(code=1) from exc

    if any(shared.get(key) for key in ERROR_KEYS):
        raise typer.Exit(code=1)
    return shared


def parse_json_option(value: str | None, option: str) -> Any:
    """Parse a JSON command-line value, exiting with a message when malformed."""
    if value is None:
        return None
    try:
        return json.loads(value)
    except json.JSONDecodeError as exc:
        err_console.print(f"[bold red]Error:[/bold red] {option} is not valid JSON: {escape(exc.msg)}", soft_wrap=True)
        raise typer.Exit(code=1) from exc


def parse_value(value: str) -> Any:
    """Config values are JSON when they parse as JSON, else plain strings."""
    try:
        return json.loads(value)
    except json.JSONDecodeError:
        return value


def verbose_from(ctx: typer.Context) -> bool:
    """The global ``--verbose`` flag stored on the root context."""
    return bool((ctx.obj or {}).get("verbose"))
