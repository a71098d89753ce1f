"""
Config nodes over the local/global JSON stores.

Shared inputs: ``hami_directory`` / ``user_hami_directory`` (from
``core-fs:init-hami``), ``target`` (``local`` or ``global``), ``config_key``,
``config_value`` and ``use_global_fallback``. Reads of the local scope fall
back to the global file unless ``use_global_fallback`` is false.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from hami.core.errors import MissingSharedKeyError
from hami.core.logging import get_logger
from hami.core.node import Node, SharedState
from hami.plugins.config_fs.store import (
    ConfigTarget,
    config_path,
    fetch_config,
    resolve_target,
    write_config,
)
from hami.plugins.console import is_verbose, say

logger = get_logger(__name__)

_MISSING = object()


@dataclass
class ConfigRequest:
    """Resolved inputs of one config operation."""

    paths: list[Path]
    key: str | None = None
    value: Any = None
    verbose: bool = False


def _read_paths(shared: SharedState) -> list[Path]:
    """Config files to read, highest precedence first."""
    target = resolve_target(shared)
    if target is ConfigTarget.GLOBAL:
        return [config_path(shared, ConfigTarget.GLOBAL)]
    paths = [config_path(shared, ConfigTarget.LOCAL)]
    if shared.get("use_global_fallback", True):
        paths.append(config_path(shared, ConfigTarget.GLOBAL))
    return paths


def _require_key(shared: SharedState, kind: str) -> str:
    key = shared.get("config_key")
    if not key:
        raise MissingSharedKeyError("config_key", kind=kind)
    return key


class ConfigGetNode(Node):
    def kind(self) -> str:
        return "core-config-fs:get"

    async def prepare(self, shared: SharedState) -> ConfigRequest:
        return ConfigRequest(
            paths=_read_paths(shared),
            key=_require_key(shared, self.kind()),
            verbose=is_verbose(shared),
        )

    async def execute(self, prep_res: ConfigRequest) -> Any:
        for path in prep_res.paths:
            config = await asyncio.to_thread(fetch_config, path)
            if prep_res.key in config:
                say(prep_res.verbose, f"Fetched config value for key '{prep_res.key}' from {path}")
                return config[prep_res.key]
        return None

    async def finalize(self, shared: SharedState, prep_res: ConfigRequest, exec_res: Any) -> str:
        shared["config_value"] = exec_res
        return "default"


class ConfigGetAllNode(Node):
    """Merged view of the config; local entries override global ones."""

    def kind(self) -> str:
        return "core-config-fs:get-all"

    async def prepare(self, shared: SharedState) -> ConfigRequest:
        return ConfigRequest(paths=_read_paths(shared), verbose=is_verbose(shared))

    async def execute(self, prep_res: ConfigRequest) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        for path in reversed(prep_res.paths):
            merged.update(await asyncio.to_thread(fetch_config, path))
        say(prep_res.verbose, f"Fetched {len(merged)} config entries")
        return merged

    async def finalize(self, shared: SharedState, prep_res: ConfigRequest, exec_res: dict[str, Any]) -> str:
        shared["config_values"] = exec_res
        return "default"


class _ConfigWriteNode(Node):
    """Read-modify-write of one key; publishes the previous value when there was one."""

    def _request(self, shared: SharedState) -> ConfigRequest:
        target = resolve_target(shared, default=None)
        return ConfigRequest(
            paths=[config_path(shared, target)],
            key=_require_key(shared, self.kind()),
            value=shared.get("config_value"),
            verbose=is_verbose(shared),
        )

    def _apply(self, config: dict[str, Any], request: ConfigRequest) -> None:
        raise NotImplementedError

    def _update(self, request: ConfigRequest) -> Any:
        path = request.paths[0]
        config = fetch_config(path)
        previous = config.get(request.key, _MISSING)
        self._apply(config, request)
        write_config(path, config)
        return previous

    async def prepare(self, shared: SharedState) -> ConfigRequest:
        return self._request(shared)

    async def execute(self, prep_res: ConfigRequest) -> Any:
        return await asyncio.to_thread(self._update, prep_res)

    async def finalize(self, shared: SharedState, prep_res: ConfigRequest, exec_res: Any) -> str:
        if exec_res is not _MISSING:
            shared["config_value_previous"] = exec_res
        logger.debug("core_config_fs.write", kind=self.kind(), key=prep_res.key, path=str(prep_res.paths[0]))
        return "default"


class ConfigSetNode(_ConfigWriteNode):
    def kind(self) -> str:
        return "core-config-fs:set"

    async def prepare(self, shared: SharedState) -> ConfigRequest:
        if shared.get("config_value") is None:
            raise MissingSharedKeyError("config_value", kind=self.kind())
        return self._request(shared)

    def _apply(self, config: dict[str, Any], request: ConfigRequest) -> None:
        config[request.key] = request.value
        say(request.verbose, f"Config key '{request.key}' set in {request.paths[0]}")


class ConfigRemoveNode(_ConfigWriteNode):
    def kind(self) -> str:
        return "core-config-fs:remove"

    def _apply(self, config: dict[str, Any], request: ConfigRequest) -> None:
        config.pop(request.key, None)
        say(request.verbose, f"Config key '{request.key}' removed from {request.paths[0]}")
