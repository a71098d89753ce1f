"""
Bundled plugins.

Each subpackage exposes one plugin built with ``create_plugin``:

- ``core``       (``core:*``)         logging, mapping and dynamic runner nodes
- ``fs``         (``core-fs:*``)      hami directories and file operations
- ``config_fs``  (``core-config-fs:*``) JSON backed local/global config
- ``trace_fs``   (``core-trace-fs:*``)  JSON backed trace index
"""

from hami.plugins.config_fs import CoreConfigFSPlugin
from hami.plugins.core import CorePlugin
from hami.plugins.fs import CoreFSPlugin
from hami.plugins.trace_fs import CoreTraceFSPlugin

BUILTIN_PLUGINS = (CorePlugin, CoreFSPlugin, CoreConfigFSPlugin, CoreTraceFSPlugin)

__all__ = [
    "BUILTIN_PLUGINS",
    "CoreConfigFSPlugin",
    "CoreFSPlugin",
    "CorePlugin",
    "CoreTraceFSPlugin",
]
