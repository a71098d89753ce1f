"""
Trace nodes.

``inject`` seeds ``shared["trace_data"]`` from its own config; ``log``
appends that data to the trace index under ``hami_directory`` and publishes
``trace_id``. ``list``, ``show`` and ``grep`` read the index back.
"""

from __future__ import annotations

import asyncio
from typing import Any

from hami.core.errors import MissingSharedKeyError, TraceNotFoundError
from hami.core.logging import get_logger
from hami.core.node import Node, SharedState
from hami.plugins.console import is_verbose, say
from hami.plugins.trace_fs.store import append_trace, fetch_trace_index, matches

logger = get_logger(__name__)


def _require(shared: SharedState, key: str, kind: str) -> Any:
    value = shared.get(key)
    if value is None or value == "":
        raise MissingSharedKeyError(key, kind=kind)
    return value


class TraceInjectNode(Node):
    """The node's config is the trace payload; no schema applies."""

    def kind(self) -> str:
        return "core-trace-fs:inject"

    async def finalize(self, shared: SharedState, prep_res: Any, exec_res: Any) -> str:
        shared["trace_data"] = dict(self.config or {})
        return "default"


class TraceLogNode(Node):
    def kind(self) -> str:
        return "core-trace-fs:log"

    async def prepare(self, shared: SharedState) -> dict[str, Any]:
        if "trace_data" not in shared:
            raise MissingSharedKeyError("trace_data", kind=self.kind())
        return {
            "hami_directory": _require(shared, "hami_directory", self.kind()),
            "trace_data": shared["trace_data"],
            "verbose": is_verbose(shared),
        }

    async def execute(self, prep_res: dict[str, Any]) -> str:
        trace_id = await asyncio.to_thread(
            append_trace, prep_res["hami_directory"], prep_res["trace_data"]
        )
        say(prep_res["verbose"], f"Logged trace {trace_id} to {prep_res['hami_directory']}")
        return trace_id

    async def finalize(self, shared: SharedState, prep_res: Any, exec_res: str) -> str:
        shared["trace_id"] = exec_res
        logger.debug("core_trace_fs.logged", trace_id=exec_res)
        return "default"


class TraceListNode(Node):
    """Publish ``{id, timestamp}`` summaries of every trace as ``trace_results``."""

    def kind(self) -> str:
        return "core-trace-fs:list"

    async def prepare(self, shared: SharedState) -> str:
        return _require(shared, "hami_directory", self.kind())

    async def execute(self, prep_res: str) -> list[dict[str, Any]]:
        index = await asyncio.to_thread(fetch_trace_index, prep_res)
        return [{"id": entry.get("id"), "timestamp": entry.get("timestamp")} for entry in index]

    async def finalize(self, shared: SharedState, prep_res: Any, exec_res: list[dict[str, Any]]) -> str:
        shared["trace_results"] = exec_res
        return "default"


class TraceShowNode(Node):
    def kind(self) -> str:
        return "core-trace-fs:show"

    async def prepare(self, shared: SharedState) -> dict[str, Any]:
        return {
            "hami_directory": _require(shared, "hami_directory", self.kind()),
            "trace_id": _require(shared, "trace_id", self.kind()),
            "verbose": is_verbose(shared),
        }

    async def execute(self, prep_res: dict[str, Any]) -> dict[str, Any]:
        index = await asyncio.to_thread(fetch_trace_index, prep_res["hami_directory"])
        for entry in index:
            if entry.get("id") == prep_res["trace_id"]:
                say(prep_res["verbose"], f"Fetched trace {prep_res['trace_id']}")
                return entry
        raise TraceNotFoundError(prep_res["trace_id"])

    async def finalize(self, shared: SharedState, prep_res: Any, exec_res: dict[str, Any]) -> str:
        shared["trace_data"] = exec_res
        return "default"


class TraceGrepNode(Node):
    def kind(self) -> str:
        return "core-trace-fs:grep"

    async def prepare(self, shared: SharedState) -> dict[str, Any]:
        return {
            "hami_directory": _require(shared, "hami_directory", self.kind()),
            "search_query": _require(shared, "search_query", self.kind()),
            "verbose": is_verbose(shared),
        }

    async def execute(self, prep_res: dict[str, Any]) -> list[dict[str, Any]]:
        index = await asyncio.to_thread(fetch_trace_index, prep_res["hami_directory"])
        results = [entry for entry in index if matches(entry, prep_res["search_query"])]
        say(
            prep_res["verbose"],
            f"Found {len(results)} traces matching '{prep_res['search_query']}'",
        )
        return results

    async def finalize(self, shared: SharedState, prep_res: Any, exec_res: list[dict[str, Any]]) -> str:
        shared["trace_results"] = exec_res
        return "default"
