"""Read, write and list files relative to the working directory."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from hami.core.errors import ExecutionError, MissingSharedKeyError
from hami.core.logging import get_logger
from hami.core.node import Node, SharedState
from hami.plugins.console import is_verbose, say
from hami.plugins.fs.common import merged_options, working_directory

logger = get_logger(__name__)


class ReadFileNode(Node):
    config_schema = {
        "type": "object",
        "required": ["path"],
        "properties": {
            "path": {"type": "string", "minLength": 1},
            "encoding": {"type": "string", "default": "utf-8"},
        },
    }

    def kind(self) -> str:
        return "core-fs:read-file"

    async def prepare(self, shared: SharedState) -> dict[str, Any]:
        options = merged_options(self.config, shared, "path", "encoding")
        if not options["path"]:
            raise MissingSharedKeyError("path", kind=self.kind())
        return {
            "path": working_directory(shared) / options["path"],
            "encoding": options["encoding"] or "utf-8",
            "verbose": is_verbose(shared),
        }

    async def execute(self, prep_res: dict[str, Any]) -> str:
        path: Path = prep_res["path"]
        content = await asyncio.to_thread(path.read_text, encoding=prep_res["encoding"])
        say(prep_res["verbose"], f"Read file: {path}")
        return content

    async def finalize(self, shared: SharedState, prep_res: Any, exec_res: str) -> str:
        shared["read_file_content"] = exec_res
        return "default"


def _write(path: Path, content: str, encoding: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding=encoding)


class WriteFileNode(Node):
    """Write ``shared["content"]`` (empty when unset) to ``path``."""

    config_schema = {
        "type": "object",
        "properties": {
            "path": {"type": "string", "minLength": 1},
            "encoding": {"type": "string", "default": "utf-8"},
        },
    }

    def kind(self) -> str:
        return "core-fs:write-file"

    async def prepare(self, shared: SharedState) -> dict[str, Any]:
        options = merged_options(self.config, shared, "path", "encoding")
        if not options["path"]:
            raise MissingSharedKeyError("path", kind=self.kind())
        return {
            "path": working_directory(shared) / options["path"],
            "content": shared.get("content") or "",
            "encoding": options["encoding"] or "utf-8",
            "verbose": is_verbose(shared),
        }

    async def execute(self, prep_res: dict[str, Any]) -> str:
        path: Path = prep_res["path"]
        await asyncio.to_thread(_write, path, prep_res["content"], prep_res["encoding"])
        say(prep_res["verbose"], f"Wrote file: {path}")
        return f"Wrote file: {path}"

    async def finalize(self, shared: SharedState, prep_res: Any, exec_res: str) -> str:
        shared["write_file_result"] = exec_res
        return "default"


def list_directory(path: Path, recursive: bool = False) -> list[dict[str, Any]]:
    """Describe the entries of ``path``; paths are relative to it."""
    if not path.is_dir():
        raise ExecutionError(f"Directory does not exist: {path}")

    items = []

    def walk(directory: Path, relative: Path) -> None:
        for entry in sorted(directory.iterdir()):
            stats = entry.stat()
            is_dir = entry.is_dir()
            items.append(
                {
                    "name": entry.name,
                    "path": str(relative / entry.name),
                    "type": "directory" if is_dir else "file",
                    "size": None if is_dir else stats.st_size,
                    "modified": datetime.fromtimestamp(stats.st_mtime, timezone.utc).isoformat(),
                }
            )
            if recursive and is_dir:
                walk(entry, relative / entry.name)

    walk(path, Path())
    return items


class ListDirectoryNode(Node):
    config_schema = {
        "type": "object",
        "properties": {
            "path": {"type": "string", "default": "."},
            "recursive": {"type": "boolean", "default": False},
        },
    }

    def kind(self) -> str:
        return "core-fs:list-directory"

    async def prepare(self, shared: SharedState) -> dict[str, Any]:
        options = merged_options(self.config, shared, "path", "recursive")
        return {
            "path": working_directory(shared) / (options["path"] or "."),
            "recursive": bool(options["recursive"]),
            "verbose": is_verbose(shared),
        }

    async def execute(self, prep_res: dict[str, Any]) -> list[dict[str, Any]]:
        items = await asyncio.to_thread(list_directory, prep_res["path"], prep_res["recursive"])
        say(prep_res["verbose"], f"Listed {len(items)} items in directory: {prep_res['path']}")
        return items

    async def finalize(self, shared: SharedState, prep_res: Any, exec_res: list[dict[str, Any]]) -> str:
        shared["list_directory_items"] = exec_res
        logger.debug("core_fs.list_directory", count=len(exec_res))
        return "default"
