"""Glob-based file copy, as a node and as a flow that publishes ``results``."""

from __future__ import annotations

import asyncio
import shutil
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from hami.core.errors import MissingSharedKeyError
from hami.core.flow import Flow
from hami.core.logging import get_logger
from hami.core.node import Node, SharedState
from hami.plugins.console import is_verbose, say
from hami.plugins.fs.common import merged_options, working_directory

logger = get_logger(__name__)

COPY_CONFIG_SCHEMA = {
    "type": "object",
    "required": ["source_pattern", "target_directory"],
    "properties": {
        "source_pattern": {"type": "string", "minLength": 1},
        "target_directory": {"type": "string", "minLength": 1},
    },
}


def copy_matching(
    source_pattern: str, target_directory: Path, root: Path, verbose: bool = False
) -> list[str]:
    """Copy files under ``root`` matching ``source_pattern``, keeping relative paths."""
    copied = []
    for source in sorted(root.glob(source_pattern)):
        if not source.is_file():
            continue
        target = target_directory / source.relative_to(root)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)
        copied.append(str(target))
        say(verbose, f"Copied {source} to {target}")
    return copied


class CopyNode(Node):
    config_schema = COPY_CONFIG_SCHEMA

    def kind(self) -> str:
        return "core-fs:copy"

    async def prepare(self, shared: SharedState) -> dict[str, Any]:
        options = merged_options(self.config, shared, "source_pattern", "target_directory")
        for key, value in options.items():
            if not value:
                raise MissingSharedKeyError(key, kind=self.kind())
        root = working_directory(shared)
        return {
            "source_pattern": options["source_pattern"],
            "target_directory": root / options["target_directory"],
            "root": root,
            "verbose": is_verbose(shared),
        }

    async def execute(self, prep_res: dict[str, Any]) -> list[str]:
        return await asyncio.to_thread(
            copy_matching,
            prep_res["source_pattern"],
            prep_res["target_directory"],
            prep_res["root"],
            prep_res["verbose"],
        )

    async def finalize(self, shared: SharedState, prep_res: Any, exec_res: list[str]) -> str:
        shared["copy_results"] = exec_res
        logger.debug("core_fs.copy", copied=len(exec_res))
        return "default"


class CopyResultNode(Node):
    """Publish ``copy_results`` as the generic ``results`` key."""

    def kind(self) -> str:
        return "core-fs:copy-result"

    async def finalize(self, shared: SharedState, prep_res: Any, exec_res: Any) -> str:
        shared["results"] = shared.get("copy_results")
        return "default"


class CopyFlow(Flow):
    config_schema = COPY_CONFIG_SCHEMA

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        max_retries: int = 1,
        wait: float = 0,
    ):
        start = CopyNode(config)
        start.next(CopyResultNode())
        super().__init__(start, config, max_retries, wait)

    def kind(self) -> str:
        return "core-fs:copy-flow"
