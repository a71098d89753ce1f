"""The trace index: a JSON list of ``{id, timestamp, data}`` in ``wf.index.json``."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from uuid6 import uuid7

TRACE_INDEX_FILE_NAME = "wf.index.json"


def index_path(hami_directory: str | Path) -> Path:
    return Path(hami_directory) / TRACE_INDEX_FILE_NAME


def fetch_trace_index(hami_directory: str | Path) -> list[dict[str, Any]]:
    try:
        index = json.loads(index_path(hami_directory).read_text(encoding="utf-8"))
    except FileNotFoundError:
        return []
    return index if isinstance(index, list) else []


def write_trace_index(hami_directory: str | Path, index: list[dict[str, Any]]) -> None:
    path = index_path(hami_directory)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(index, indent=2, default=str), encoding="utf-8")


def append_trace(hami_directory: str | Path, data: Any) -> str:
    """Append a trace entry with a fresh time-ordered id and return the id."""
    trace_id = str(uuid7())
    index = fetch_trace_index(hami_directory)
    index.append(
        {
            "id": trace_id,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "data": data,
        }
    )
    write_trace_index(hami_directory, index)
    return trace_id


def matches(entry: dict[str, Any], query: str) -> bool:
    """Substring match against the compact JSON form of ``entry``."""
    return query in json.dumps(entry, separators=(",", ":"), default=str)
