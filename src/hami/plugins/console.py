"""Rich consoles shared by output nodes and the CLI."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from rich.console import Console

console = Console()
err_console = Console(stderr=True)


def to_json(data: Any) -> str:
    """Serialize shared-state values, falling back to ``str`` for objects."""
    return json.dumps(data, indent=2, default=str)


def is_verbose(shared: Mapping[str, Any]) -> bool:
    """``shared["opts"]["verbose"]``, the per-run verbosity switch set by the CLI."""
    opts = shared.get("opts") or {}
    return bool(opts.get("verbose")) if isinstance(opts, Mapping) else False


def say(verbose: bool, message: str) -> None:
    if verbose:
        console.print(message, markup=False, highlight=False, soft_wrap=True)
