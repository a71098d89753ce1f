"""Core plugin: output, mapping and dynamic runner nodes (``core:*``)."""

from hami.core.plugin import create_plugin
from hami.plugins.core.dynamic import DynamicRunnerFlow, DynamicRunnerNode
from hami.plugins.core.mapping import MapNode, get_nested
from hami.plugins.core.output import DebugNode, LogErrorNode, LogResultNode

CorePlugin = create_plugin(
    "@hami/core",
    "1.0.0",
    [
        LogResultNode,
        LogErrorNode,
        DynamicRunnerNode,
        DynamicRunnerFlow,
        MapNode,
        DebugNode,
    ],
    "Fundamental nodes for logging and dynamic execution",
)

__all__ = [
    "CorePlugin",
    "DebugNode",
    "DynamicRunnerFlow",
    "DynamicRunnerNode",
    "LogErrorNode",
    "LogResultNode",
    "MapNode",
    "get_nested",
]
