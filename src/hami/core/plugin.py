"""
Plugin contract: a named, versioned bundle of node classes.

A plugin is anything with ``name``, ``version``, an optional
``description`` and the ``initialize`` / ``get_node_classes`` / ``destroy``
hooks. Hooks may be plain functions or coroutines; the registration manager
awaits whatever they return when it is awaitable.

``create_plugin`` covers the common case of a plugin that only contributes
classes and needs no setup or teardown.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Protocol, Union, runtime_checkable

from hami.core.node import Node

NodeClass = type[Node]
NodeClassSource = Union[
    Sequence[NodeClass],
    Callable[[], Sequence[NodeClass]],
    Callable[[], Awaitable[Sequence[NodeClass]]],
]


@runtime_checkable
class Plugin(Protocol):
    name: str
    version: str
    description: str | None

    def initialize(self) -> Awaitable[None] | None: ...

    def get_node_classes(self) -> Awaitable[Sequence[NodeClass]] | Sequence[NodeClass]: ...

    def destroy(self) -> Awaitable[None] | None: ...


@dataclass
class SimplePlugin:
    """Plugin backed by a fixed list, or a factory, of node classes."""

    name: str
    version: str
    node_classes: NodeClassSource
    description: str | None = None

    async def initialize(self) -> None:
        pass

    async def get_node_classes(self) -> list[NodeClass]:
        source = self.node_classes
        if callable(source):
            source = source()
            if isinstance(source, Awaitable):
                source = await source
        return list(source)

    async def destroy(self) -> None:
        pass


def create_plugin(
    name: str,
    version: str,
    node_classes: NodeClassSource,
    description: str | None = None,
) -> SimplePlugin:
    return SimplePlugin(
        name=name,
        version=version,
        node_classes=node_classes,
        description=description,
    )


__all__ = [
    "NodeClass",
    "Plugin",
    "SimplePlugin",
    "create_plugin",
]
