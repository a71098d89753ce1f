"""Helpers shared by the filesystem nodes."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from hami.core.node import SharedState

HAMI_DIRECTORY_NAME = ".hami"

# shared keys written by core-fs:init-hami, in validation order
DIRECTORY_KEYS = (
    "working_directory",
    "hami_directory",
    "user_home_directory",
    "user_hami_directory",
)


def working_directory(shared: SharedState) -> Path:
    return Path(shared.get("working_directory") or Path.cwd())


def merged_options(config: Mapping[str, Any] | None, shared: SharedState, *keys: str) -> dict[str, Any]:
    """Pick ``keys`` from the node config, letting shared state override."""
    options = {key: (config or {}).get(key) for key in keys}
    for key in keys:
        if shared.get(key) is not None:
            options[key] = shared[key]
    return options
