"""Filesystem plugin (``core-fs:*``)."""

from hami.core.plugin import create_plugin
from hami.plugins.fs.copy import CopyFlow, CopyNode, CopyResultNode, copy_matching
from hami.plugins.fs.files import ListDirectoryNode, ReadFileNode, WriteFileNode, list_directory
from hami.plugins.fs.hami_dirs import InitHamiNode, ValidateHamiNode

CoreFSPlugin = create_plugin(
    "@hami/core-fs",
    "0.1.0",
    [
        InitHamiNode,
        ValidateHamiNode,
        CopyNode,
        CopyResultNode,
        CopyFlow,
        ReadFileNode,
        WriteFileNode,
        ListDirectoryNode,
    ],
    "hami directories and file operations",
)

__all__ = [
    "CoreFSPlugin",
    "CopyFlow",
    "CopyNode",
    "CopyResultNode",
    "InitHamiNode",
    "ListDirectoryNode",
    "ReadFileNode",
    "ValidateHamiNode",
    "WriteFileNode",
    "copy_matching",
    "list_directory",
]
