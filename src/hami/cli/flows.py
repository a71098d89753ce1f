"""
CLI flows - one flow kind per ``hami`` command (``hami-cli:*``).

Each flow starts at a placeholder node and builds the rest of its graph in
``prepare`` from ``shared["registry"]``, so the same registry the command was
bootstrapped with supplies every step. Config values listed in
``shared_inputs`` are copied into shared state before the walk, which makes
each flow runnable on its own with nothing but a registry in shared state.

Most flows begin with ``core-fs:validate-hami`` whose ``error`` action is
routed to ``core:log-error``; the flow then ends there and the command reads
``directory_validation_errors`` to decide its exit code.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any, ClassVar

from hami.core.errors import MissingSharedKeyError
from hami.core.flow import Flow
from hami.core.node import Node, SharedState
from hami.core.plugin import create_plugin
from hami.core.registry import RegistrationManager

FLOW_KEY_PREFIX = "flow:"

# shared keys that carry a failure the command should exit non-zero on
ERROR_KEYS = ("directory_validation_errors", "runner_error")

_STRATEGY = {"core_fs_strategy": {"type": "string", "enum": ["CWD"]}}
_VERBOSE = {"verbose": {"type": "boolean"}}
_TARGET = {"target": {"type": "string", "enum": ["local", "global"]}}


def chain(first: Node, *rest: Node) -> Node:
    """Link nodes with ``default`` transitions and return the first."""
    current = first
    for node in rest:
        current = current.next(node)
    return first


class CliFlow(Flow):
    """Base for command flows built at run time from the registry."""

    shared_inputs: ClassVar[tuple[str, ...]] = ()

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        max_retries: int = 1,
        wait: float = 0,
    ):
        super().__init__(Node(), config, max_retries, wait)

    @property
    def options(self) -> Mapping[str, Any]:
        return self.config or {}

    async def prepare(self, shared: SharedState) -> None:
        registry = shared.get("registry")
        if registry is None:
            raise MissingSharedKeyError("registry", kind=self.kind())
        for key in self.shared_inputs:
            if key in self.options:
                shared[key] = self.options[key]
        self.start_node.next(self.build(registry))

    def build(self, registry: RegistrationManager) -> Node:
        raise NotImplementedError

    def validate_hami(self, registry: RegistrationManager) -> Node:
        validate = registry.create_node("core-fs:validate-hami", {})
        validate.on(
            "error",
            registry.create_node("core:log-error", {"error_key": "directory_validation_errors"}),
        )
        return validate

    def log_result(self, registry: RegistrationManager, result_key: str, **options: Any) -> Node:
        return registry.create_node(
            "core:log-result",
            {"result_key": result_key, "verbose": bool(self.options.get("verbose")), **options},
        )

    def trace_inject(self, registry: RegistrationManager, **data: Any) -> Node:
        return registry.create_node("core-trace-fs:inject", {"executor": "cli", **data})


# =============================================================================
# HELPER NODES
# =============================================================================


class FilterFlowsNode(Node):
    """Keep ``flow:<name>`` entries of ``config_values`` as ``flow_configs[name]``."""

    def kind(self) -> str:
        return "hami-cli:filter-flows"

    async def prepare(self, shared: SharedState) -> Mapping[str, Any]:
        return shared.get("config_values") or {}

    async def execute(self, prep_res: Mapping[str, Any]) -> dict[str, Any]:
        return {
            key[len(FLOW_KEY_PREFIX):]: value
            for key, value in prep_res.items()
            if key.startswith(FLOW_KEY_PREFIX)
        }

    async def finalize(self, shared: SharedState, prep_res: Any, exec_res: dict[str, Any]) -> str:
        shared["flow_configs"] = exec_res
        return "default"


class TransformTraceResultsNode(Node):
    """Flatten ``trace_results`` into table rows with the data as compact JSON."""

    def kind(self) -> str:
        return "hami-cli:transform-trace-results"

    async def prepare(self, shared: SharedState) -> list[dict[str, Any]]:
        return shared.get("trace_results") or []

    async def execute(self, prep_res: list[dict[str, Any]]) -> list[dict[str, Any]]:
        return [
            {
                "id": trace.get("id"),
                "timestamp": trace.get("timestamp"),
                "data": json.dumps(trace.get("data"), separators=(",", ":"), default=str),
            }
            for trace in prep_res
        ]

    async def finalize(self, shared: SharedState, prep_res: Any, exec_res: list[dict[str, Any]]) -> str:
        shared["transformed_trace_results"] = exec_res
        return "default"


# =============================================================================
# COMMAND FLOWS
# =============================================================================


class InitFlow(CliFlow):
    config_schema = {
        "type": "object",
        "required": ["core_fs_strategy"],
        "properties": {**_STRATEGY},
    }

    def kind(self) -> str:
        return "hami-cli:init-flow"

    def build(self, registry: RegistrationManager) -> Node:
        return chain(
            registry.create_node("core-fs:init-hami", {"strategy": self.options["core_fs_strategy"]}),
            self.trace_inject(registry, command="init"),
            registry.create_node("core-trace-fs:log", {}),
        )


class ConfigListFlow(CliFlow):
    config_schema = {
        "type": "object",
        "required": ["core_fs_strategy", "verbose"],
        "properties": {**_STRATEGY, **_VERBOSE, **_TARGET},
    }
    shared_inputs = ("target",)

    def kind(self) -> str:
        return "hami-cli:config-list-flow"

    def build(self, registry: RegistrationManager) -> Node:
        return chain(
            self.validate_hami(registry),
            registry.create_node("core-config-fs:get-all", {}),
            self.log_result(
                registry,
                "config_values",
                format="table",
                prefix="Configuration entries:",
                empty_message="No configuration entries found.",
            ),
        )


class ConfigGetFlow(CliFlow):
    config_schema = {
        "type": "object",
        "required": ["core_fs_strategy", "verbose", "config_key"],
        "properties": {**_STRATEGY, **_VERBOSE, **_TARGET, "config_key": {"type": "string"}},
    }
    shared_inputs = ("target", "config_key")

    def kind(self) -> str:
        return "hami-cli:config-get-flow"

    def build(self, registry: RegistrationManager) -> Node:
        return chain(
            self.validate_hami(registry),
            registry.create_node("core-config-fs:get", {}),
            self.log_result(
                registry,
                "config_value",
                format="generic",
                prefix="Configuration value:",
                empty_message="Configuration key not found.",
            ),
        )


class ConfigSetFlow(CliFlow):
    config_schema = {
        "type": "object",
        "required": ["core_fs_strategy", "target", "config_key", "config_value"],
        "properties": {
            **_STRATEGY,
            **_TARGET,
            "config_key": {"type": "string", "minLength": 1},
            "config_value": {"type": "any"},
        },
    }
    shared_inputs = ("target", "config_key", "config_value")

    def kind(self) -> str:
        return "hami-cli:config-set-flow"

    def build(self, registry: RegistrationManager) -> Node:
        return chain(
            self.validate_hami(registry),
            self.trace_inject(
                registry,
                command="config",
                operation="set",
                target=self.options["target"],
                key=self.options["config_key"],
                value=self.options["config_value"],
            ),
            registry.create_node("core-config-fs:set", {}),
            registry.create_node("core-trace-fs:log", {}),
        )


class ConfigRemoveFlow(CliFlow):
    config_schema = {
        "type": "object",
        "required": ["core_fs_strategy", "target", "config_key"],
        "properties": {**_STRATEGY, **_TARGET, "config_key": {"type": "string", "minLength": 1}},
    }
    shared_inputs = ("target", "config_key")

    def kind(self) -> str:
        return "hami-cli:config-remove-flow"

    def build(self, registry: RegistrationManager) -> Node:
        return chain(
            self.validate_hami(registry),
            self.trace_inject(
                registry,
                command="config",
                operation="remove",
                target=self.options["target"],
                key=self.options["config_key"],
            ),
            registry.create_node("core-config-fs:remove", {}),
            registry.create_node("core-trace-fs:log", {}),
        )


class TraceListFlow(CliFlow):
    config_schema = {
        "type": "object",
        "required": ["core_fs_strategy", "verbose"],
        "properties": {**_STRATEGY, **_VERBOSE},
    }

    def kind(self) -> str:
        return "hami-cli:trace-list-flow"

    def build(self, registry: RegistrationManager) -> Node:
        return chain(
            self.validate_hami(registry),
            registry.create_node("core-trace-fs:list", {}),
            self.log_result(
                registry,
                "trace_results",
                format="table",
                prefix="Trace entries:",
                empty_message="No trace entries found.",
            ),
        )


class TraceShowFlow(CliFlow):
    config_schema = {
        "type": "object",
        "required": ["core_fs_strategy", "verbose", "trace_id"],
        "properties": {**_STRATEGY, **_VERBOSE, "trace_id": {"type": "string", "minLength": 1}},
    }
    shared_inputs = ("trace_id",)

    def kind(self) -> str:
        return "hami-cli:trace-show-flow"

    def build(self, registry: RegistrationManager) -> Node:
        return chain(
            self.validate_hami(registry),
            registry.create_node("core-trace-fs:show", {}),
            self.log_result(
                registry,
                "trace_data",
                format="json",
                prefix="Trace data:",
                include_timestamp=True,
            ),
        )


class TraceGrepFlow(CliFlow):
    config_schema = {
        "type": "object",
        "required": ["core_fs_strategy", "verbose", "search_query"],
        "properties": {**_STRATEGY, **_VERBOSE, "search_query": {"type": "string", "minLength": 1}},
    }
    shared_inputs = ("search_query",)

    def kind(self) -> str:
        return "hami-cli:trace-grep-flow"

    def build(self, registry: RegistrationManager) -> Node:
        return chain(
            self.validate_hami(registry),
            registry.create_node("core-trace-fs:grep", {}),
            registry.create_node("hami-cli:transform-trace-results"),
            self.log_result(
                registry,
                "transformed_trace_results",
                format="table",
                prefix="Trace search results:",
                empty_message="No traces found matching the search query.",
            ),
        )


class FlowInitFlow(CliFlow):
    """Store ``{kind, config}`` under ``flow:<name>`` in the chosen config scope."""

    config_schema = {
        "type": "object",
        "required": ["core_fs_strategy", "target", "name", "kind", "config"],
        "properties": {
            **_STRATEGY,
            **_TARGET,
            "name": {"type": "string", "minLength": 1},
            "kind": {"type": "string", "minLength": 1},
            "config": {"type": "object"},
        },
    }
    shared_inputs = ("target",)

    def kind(self) -> str:
        return "hami-cli:flow-init-flow"

    @property
    def flow_key(self) -> str:
        return f"{FLOW_KEY_PREFIX}{self.options['name']}"

    async def prepare(self, shared: SharedState) -> None:
        await super().prepare(shared)
        shared["config_key"] = self.flow_key
        shared["config_value"] = {"kind": self.options["kind"], "config": self.options["config"]}

    def build(self, registry: RegistrationManager) -> Node:
        return chain(
            self.validate_hami(registry),
            self.trace_inject(
                registry,
                command="flow",
                operation="init",
                target=self.options["target"],
                key=self.flow_key,
                value={"kind": self.options["kind"], "config": self.options["config"]},
            ),
            registry.create_node("core-config-fs:set", {}),
            registry.create_node("core-trace-fs:log", {}),
        )


class FlowRunFlow(CliFlow):
    """
    Look up ``flow:<name>`` and run it through ``core:dynamic-runner-flow``.

    ``payload`` entries are merged into shared state first, so they can
    override inputs of the stored flow.
    """

    config_schema = {
        "type": "object",
        "required": ["core_fs_strategy", "target", "name", "verbose"],
        "properties": {
            **_STRATEGY,
            **_TARGET,
            **_VERBOSE,
            "name": {"type": "string", "minLength": 1},
            "payload": {"type": "object"},
        },
    }
    shared_inputs = ("target",)

    def kind(self) -> str:
        return "hami-cli:flow-run-flow"

    async def prepare(self, shared: SharedState) -> None:
        await super().prepare(shared)
        shared["config_key"] = f"{FLOW_KEY_PREFIX}{self.options['name']}"
        shared.update(self.options.get("payload") or {})

    def build(self, registry: RegistrationManager) -> Node:
        runner = registry.create_node(
            "core:dynamic-runner-flow", {"runner_config_value_key": "config_value"}
        )
        runner.on("error", registry.create_node("core:log-error", {"error_key": "runner_error"}))
        return chain(
            self.validate_hami(registry),
            registry.create_node("core-config-fs:get", {}),
            runner,
            self.trace_inject(
                registry,
                command="flow",
                operation="run",
                target=self.options["target"],
                name=f"{FLOW_KEY_PREFIX}{self.options['name']}",
            ),
            registry.create_node("core-trace-fs:log", {}),
            self.log_result(
                registry,
                "results",
                format="table",
                prefix="Flow execution results:",
                include_timestamp=True,
            ),
        )


class FlowListFlow(CliFlow):
    config_schema = {
        "type": "object",
        "required": ["core_fs_strategy", "target", "verbose"],
        "properties": {**_STRATEGY, **_TARGET, **_VERBOSE},
    }
    shared_inputs = ("target",)

    def kind(self) -> str:
        return "hami-cli:flow-list-flow"

    def build(self, registry: RegistrationManager) -> Node:
        return chain(
            self.validate_hami(registry),
            registry.create_node("core-config-fs:get-all", {}),
            registry.create_node("hami-cli:filter-flows"),
            self.log_result(
                registry,
                "flow_configs",
                format="table",
                prefix="Configured flows:",
                empty_message="No flows configured.",
            ),
        )


class FlowRemoveFlow(CliFlow):
    config_schema = {
        "type": "object",
        "required": ["core_fs_strategy", "target", "name"],
        "properties": {**_STRATEGY, **_TARGET, "name": {"type": "string", "minLength": 1}},
    }
    shared_inputs = ("target",)

    def kind(self) -> str:
        return "hami-cli:flow-remove-flow"

    async def prepare(self, shared: SharedState) -> None:
        await super().prepare(shared)
        shared["config_key"] = f"{FLOW_KEY_PREFIX}{self.options['name']}"

    def build(self, registry: RegistrationManager) -> Node:
        return chain(
            self.validate_hami(registry),
            self.trace_inject(
                registry,
                command="flow",
                operation="remove",
                target=self.options["target"],
                key=f"{FLOW_KEY_PREFIX}{self.options['name']}",
            ),
            registry.create_node("core-config-fs:remove", {}),
            registry.create_node("core-trace-fs:log", {}),
        )


HamiCliPlugin = create_plugin(
    "@hami/hami-cli",
    "0.1.0",
    [
        FilterFlowsNode,
        TransformTraceResultsNode,
        InitFlow,
        ConfigListFlow,
        ConfigGetFlow,
        ConfigSetFlow,
        ConfigRemoveFlow,
        TraceListFlow,
        TraceShowFlow,
        TraceGrepFlow,
        FlowInitFlow,
        FlowRunFlow,
        FlowListFlow,
        FlowRemoveFlow,
    ],
    "Command flows behind the hami CLI",
)
