"""Copy values between shared-state keys by dotted path."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from hami.core.node import Node, SharedState


def get_nested(data: Any, path: str) -> Any:
    """Resolve ``"a.b.c"`` against nested mappings; ``None`` when any hop is missing."""
    if not isinstance(data, Mapping) or not isinstance(path, str) or not path:
        return None
    current: Any = data
    for key in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(key)
    return current


class MapNode(Node):
    """
    Publish ``shared[out_key] = <value at dotted in_path>`` for each config entry.

    The constructor config (``{out_key: in_path}``) is merged with
    ``shared["map_config"]``, the latter winning. Falsy values are skipped.
    """

    config_schema = {"type": "object"}

    def kind(self) -> str:
        return "core:map"

    async def prepare(self, shared: SharedState) -> dict[str, Any]:
        mapping = {**(self.config or {}), **(shared.get("map_config") or {})}
        output = {}
        for out_key, in_path in mapping.items():
            value = get_nested(shared, in_path)
            if value:
                output[out_key] = value
        return output

    async def finalize(self, shared: SharedState, prep_res: dict[str, Any], exec_res: Any) -> str:
        shared.update(prep_res)
        return "default"
