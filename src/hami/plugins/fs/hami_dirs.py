"""
Initialise and validate the hami directories.

``core-fs:init-hami`` resolves the working directory (only the ``CWD``
strategy exists), creates ``.hami`` there and under the user home, and
publishes all four paths to shared state. ``core-fs:validate-hami`` checks
that those paths are set and exist, routing to ``error`` otherwise.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from hami.core.errors import ExecutionError
from hami.core.logging import get_logger
from hami.core.node import Node, SharedState
from hami.plugins.console import is_verbose, say
from hami.plugins.fs.common import DIRECTORY_KEYS, HAMI_DIRECTORY_NAME

logger = get_logger(__name__)

STRATEGIES = ["CWD"]


@dataclass
class HamiDirectories:
    working_directory: Path
    hami_directory: Path
    user_home_directory: Path
    user_hami_directory: Path


def _ensure_directory(path: Path, verbose: bool) -> None:
    if path.is_dir():
        say(verbose, f".hami directory already exists at {path}")
        return
    path.mkdir(parents=True)
    say(verbose, f".hami directory created at {path}")


class InitHamiNode(Node):
    config_schema = {
        "type": "object",
        "properties": {"strategy": {"type": "string", "enum": STRATEGIES}},
    }

    def kind(self) -> str:
        return "core-fs:init-hami"

    async def prepare(self, shared: SharedState) -> dict[str, Any]:
        strategy = (self.config or {}).get("strategy") or shared.get("core_fs_strategy")
        if strategy == "CWD":
            target = Path.cwd()
        else:
            raise ExecutionError(f"Unknown core-fs strategy: {strategy}").with_context(
                kind=self.kind()
            )
        home = Path(shared.get("user_home_directory") or Path.home())
        return {"target": target, "home": home, "verbose": is_verbose(shared)}

    async def execute(self, prep_res: dict[str, Any]) -> HamiDirectories:
        dirs = HamiDirectories(
            working_directory=prep_res["target"],
            hami_directory=prep_res["target"] / HAMI_DIRECTORY_NAME,
            user_home_directory=prep_res["home"],
            user_hami_directory=prep_res["home"] / HAMI_DIRECTORY_NAME,
        )
        for path in (dirs.hami_directory, dirs.user_hami_directory):
            await asyncio.to_thread(_ensure_directory, path, prep_res["verbose"])
        return dirs

    async def finalize(
        self, shared: SharedState, prep_res: dict[str, Any], exec_res: HamiDirectories
    ) -> str:
        for key in DIRECTORY_KEYS:
            shared[key] = str(getattr(exec_res, key))
        logger.debug("core_fs.init_hami", hami_directory=shared["hami_directory"])
        return "default"


class ValidateHamiNode(Node):
    """
    Check the four hami directories.

    Each check can be disabled with a ``check_<key>`` shared flag (all
    default to true). Failures land in ``shared["directory_validation_errors"]``.
    """

    def kind(self) -> str:
        return "core-fs:validate-hami"

    async def prepare(self, shared: SharedState) -> dict[str, Any]:
        return {
            "checks": {key: shared.get(f"check_{key}", True) for key in DIRECTORY_KEYS},
            "paths": {key: shared.get(key) for key in DIRECTORY_KEYS},
            "verbose": is_verbose(shared),
        }

    async def execute(self, prep_res: dict[str, Any]) -> list[str]:
        verbose = prep_res["verbose"]
        errors = []
        for key in DIRECTORY_KEYS:
            if not prep_res["checks"][key]:
                continue
            say(verbose, f"checking {key}")
            value = prep_res["paths"][key]
            if not value:
                error = f"{key} is not set"
            elif not await asyncio.to_thread(Path(value).exists):
                error = f"{key} does not exist at {value}"
            else:
                say(verbose, f"{key} exists at {value}")
                continue
            say(verbose, error)
            errors.append(error)
        return errors

    async def finalize(self, shared: SharedState, prep_res: Any, exec_res: list[str]) -> str:
        if not exec_res:
            return "default"
        shared["directory_validation_errors"] = exec_res
        logger.debug("core_fs.validate_hami_failed", errors=exec_res)
        return "error"
