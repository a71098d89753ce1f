"""Trace plugin (``core-trace-fs:*``): a JSON trace index under the hami directory."""

from hami.core.plugin import create_plugin
from hami.plugins.trace_fs.nodes import (
    TraceGrepNode,
    TraceInjectNode,
    TraceListNode,
    TraceLogNode,
    TraceShowNode,
)
from hami.plugins.trace_fs.store import (
    TRACE_INDEX_FILE_NAME,
    append_trace,
    fetch_trace_index,
)

CoreTraceFSPlugin = create_plugin(
    "@hami/core-trace-fs",
    "0.1.0",
    [TraceInjectNode, TraceLogNode, TraceListNode, TraceShowNode, TraceGrepNode],
    "Trace logging to a JSON index",
)

__all__ = [
    "TRACE_INDEX_FILE_NAME",
    "CoreTraceFSPlugin",
    "TraceGrepNode",
    "TraceInjectNode",
    "TraceListNode",
    "TraceLogNode",
    "TraceShowNode",
    "append_trace",
    "fetch_trace_index",
]
