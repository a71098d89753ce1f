"""
JSON config files for the local (working directory) and global (user) scopes.

Local config lives in ``<hami_directory>/wd.config.json`` and global config
in ``<user_hami_directory>/user.config.json``. A missing file reads as an
empty mapping; writes create the directory.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any

from hami.core.errors import ExecutionError, MissingSharedKeyError
from hami.core.node import SharedState

CONFIG_FILE_NAME = "wd.config.json"
USER_CONFIG_FILE_NAME = "user.config.json"


class ConfigTarget(str, Enum):
    LOCAL = "local"
    GLOBAL = "global"


def resolve_target(shared: SharedState, default: ConfigTarget | None = ConfigTarget.LOCAL) -> ConfigTarget:
    value = shared.get("target") or default
    if value is None:
        raise MissingSharedKeyError("target")
    try:
        return ConfigTarget(value)
    except ValueError:
        raise ExecutionError(f"Invalid config target: {value}") from None


def config_path(shared: SharedState, target: ConfigTarget) -> Path:
    """Path of the config file for ``target``, from the hami directories in shared state."""
    if target is ConfigTarget.GLOBAL:
        directory_key, file_name = "user_hami_directory", USER_CONFIG_FILE_NAME
    else:
        directory_key, file_name = "hami_directory", CONFIG_FILE_NAME
    directory = shared.get(directory_key)
    if not directory:
        raise MissingSharedKeyError(directory_key)
    return Path(directory) / file_name


def fetch_config(path: Path) -> dict[str, Any]:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}


def write_config(path: Path, config: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config, indent=2), encoding="utf-8")
