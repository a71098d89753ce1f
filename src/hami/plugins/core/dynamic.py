"""
Dynamic runner - build a node from shared-state data and splice it in.

``DynamicRunnerNode`` reads ``shared[node_config_key] = {"kind": ..., "config":
...}`` and ``shared["registry"]`` during ``prepare``, asks the registry for a
new node, and hands it to the flow walker as the ``default`` successor. Any
missing piece routes to ``error`` with a message in ``shared["runner_error"]``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from hami.core.flow import Flow
from hami.core.logging import get_logger
from hami.core.node import Node, SharedState, Transition

logger = get_logger(__name__)


class DynamicRunnerNode(Node):
    config_schema = {
        "type": "object",
        "required": ["node_config_key"],
        "properties": {"node_config_key": {"type": "string", "minLength": 1}},
    }

    def kind(self) -> str:
        return "core:dynamic-runner"

    async def prepare(self, shared: SharedState) -> Node | str:
        node_config_key = (self.config or {}).get("node_config_key")
        if not node_config_key:
            return "No node config key configured"
        node_config = shared.get(node_config_key)
        if not node_config:
            return f"No node config found in shared state under {node_config_key!r}"
        registry = shared.get("registry")
        if registry is None:
            return "No registry found in shared state"
        if not isinstance(node_config, Mapping):
            return "Invalid node config format - need both kind and config"
        kind = node_config.get("kind")
        config = node_config.get("config")
        if not kind or config is None:
            return "Invalid node config format - need both kind and config"
        return registry.create_node(kind, config)

    async def finalize(
        self, shared: SharedState, prep_res: Node | str, exec_res: Any
    ) -> Transition | str:
        if isinstance(prep_res, str):
            shared["runner_error"] = prep_res
            logger.debug("core.dynamic_runner_failed", reason=prep_res)
            return "error"
        logger.debug("core.dynamic_runner_splice", kind=prep_res.kind())
        return Transition("default", splice=prep_res)


class DynamicRunnerFlow(Flow):
    """Flow that starts at a dynamic runner reading ``shared[runner_config_value_key]``."""

    config_schema = {
        "type": "object",
        "required": ["runner_config_value_key"],
        "properties": {"runner_config_value_key": {"type": "string", "minLength": 1}},
    }

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        max_retries: int = 1,
        wait: float = 0,
    ):
        key = (config or {}).get("runner_config_value_key")
        start = DynamicRunnerNode({"node_config_key": key} if key else None)
        super().__init__(start, config, max_retries, wait)

    def kind(self) -> str:
        return "core:dynamic-runner-flow"
