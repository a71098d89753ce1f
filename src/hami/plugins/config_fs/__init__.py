"""Config plugin (``core-config-fs:*``): JSON backed local and global config."""

from hami.core.plugin import create_plugin
from hami.plugins.config_fs.nodes import (
    ConfigGetAllNode,
    ConfigGetNode,
    ConfigRemoveNode,
    ConfigSetNode,
)
from hami.plugins.config_fs.store import (
    CONFIG_FILE_NAME,
    USER_CONFIG_FILE_NAME,
    ConfigTarget,
    fetch_config,
    write_config,
)

CoreConfigFSPlugin = create_plugin(
    "@hami/core-config-fs",
    "0.1.0",
    [ConfigGetNode, ConfigGetAllNode, ConfigSetNode, ConfigRemoveNode],
    "Local and global configuration stored as JSON",
)

__all__ = [
    "CONFIG_FILE_NAME",
    "USER_CONFIG_FILE_NAME",
    "ConfigGetAllNode",
    "ConfigGetNode",
    "ConfigRemoveNode",
    "ConfigSetNode",
    "ConfigTarget",
    "CoreConfigFSPlugin",
    "fetch_config",
    "write_config",
]
