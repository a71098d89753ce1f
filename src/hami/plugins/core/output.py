"""
Output nodes: print shared state, results and errors to the console.

These are the terminal steps of most CLI flows. They read one shared key
and never write shared state.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from rich.table import Table

from hami.core.logging import get_logger
from hami.core.node import Node, SharedState
from hami.plugins.console import console, to_json

logger = get_logger(__name__)

LOG_FORMATS = ["generic", "table", "json"]


def _timestamp_prefix(enabled: bool, moment: datetime | None = None) -> str:
    if not enabled:
        return ""
    moment = moment or datetime.now(timezone.utc)
    return f"[{moment.isoformat()}] "


def build_table(data: Any) -> Table | None:
    """Build a rich table for a mapping, a list of mappings or a list of scalars."""
    table = Table(show_header=True, header_style="bold")

    if isinstance(data, Mapping):
        table.add_column("key")
        table.add_column("value")
        for key, value in data.items():
            table.add_row(str(key), _cell(value))
        return table

    if isinstance(data, (list, tuple)):
        if data and all(isinstance(row, Mapping) for row in data):
            columns: list[str] = []
            for row in data:
                columns.extend(str(k) for k in row if str(k) not in columns)
            table.add_column("(index)")
            for column in columns:
                table.add_column(column)
            for index, row in enumerate(data):
                table.add_row(str(index), *(_cell(row.get(column)) for column in columns))
            return table
        table.add_column("(index)")
        table.add_column("value")
        for index, value in enumerate(data):
            table.add_row(str(index), _cell(value))
        return table

    return None


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (Mapping, list, tuple)):
        return to_json(value)
    return str(value)


class DebugNode(Node):
    """Print the entire shared state as JSON."""

    def kind(self) -> str:
        return "core:debug"

    async def prepare(self, shared: SharedState) -> SharedState:
        return shared

    async def execute(self, prep_res: SharedState) -> None:
        console.print(to_json(prep_res), markup=False, soft_wrap=True, highlight=False)


class LogResultNode(Node):
    """
    Render ``shared[result_key]`` in one of three formats.

    Config:
        result_key: shared key holding the result (required)
        format: ``generic`` (prefix + value), ``table`` or ``json``
        prefix: label for generic output (default ``result(s):``)
        empty_message: printed for empty results when ``verbose``
        include_timestamp: prefix output with the node's creation time
        verbose: announce table output and report empty results
    """

    config_schema = {
        "type": "object",
        "required": ["result_key"],
        "properties": {
            "result_key": {"type": "string", "minLength": 1},
            "format": {"type": "string", "enum": LOG_FORMATS},
            "prefix": {"type": "string"},
            "empty_message": {"type": "string"},
            "include_timestamp": {"type": "boolean"},
            "verbose": {"type": "boolean"},
        },
    }

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        max_retries: int = 1,
        wait: float = 0,
    ):
        super().__init__(config, max_retries, wait)
        self.created_at = datetime.now(timezone.utc)

    def kind(self) -> str:
        return "core:log-result"

    def _option(self, name: str, default: Any = None) -> Any:
        return (self.config or {}).get(name, default)

    async def prepare(self, shared: SharedState) -> Any:
        return shared.get(self._option("result_key"))

    async def execute(self, prep_res: Any) -> None:
        verbose = self._option("verbose", False)
        if not prep_res:
            if verbose:
                console.print(self._option("empty_message") or "No results found.", markup=False, soft_wrap=True)
            return

        timestamp = _timestamp_prefix(self._option("include_timestamp", False), self.created_at)
        output_format = self._option("format", "generic")

        if output_format == "table":
            table = build_table(prep_res)
            if table is not None:
                console.print(table)
                if verbose:
                    console.print(f"{timestamp}Results displayed as table", markup=False, soft_wrap=True)
                return
        elif output_format == "json":
            console.print(f"{timestamp}{to_json(prep_res)}", markup=False, soft_wrap=True, highlight=False)
            return

        prefix = self._option("prefix") or "result(s):"
        console.print(f"{timestamp}{prefix} {prep_res}", markup=False, soft_wrap=True, highlight=False)


class LogErrorNode(Node):
    """Print ``shared[error_key]`` when it is set."""

    config_schema = {
        "type": "object",
        "required": ["error_key"],
        "properties": {
            "error_key": {"type": "string", "minLength": 1},
            "prefix": {"type": "string"},
            "include_timestamp": {"type": "boolean"},
        },
    }

    def kind(self) -> str:
        return "core:log-error"

    async def prepare(self, shared: SharedState) -> Any:
        return shared.get((self.config or {}).get("error_key"))

    async def execute(self, prep_res: Any) -> None:
        if not prep_res:
            return
        config = self.config or {}
        timestamp = _timestamp_prefix(config.get("include_timestamp", False))
        prefix = config.get("prefix") or "error(s):"
        if isinstance(prep_res, (list, tuple)):
            detail = "\n".join(f"  - {item}" for item in prep_res)
            message = f"{timestamp}{prefix}\n{detail}"
        else:
            message = f"{timestamp}{prefix} {prep_res}"
        console.print(message, style="red", markup=False, soft_wrap=True, highlight=False)
        logger.debug("core.log_error", error=prep_res)
