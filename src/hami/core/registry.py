"""
Registration Manager - kind-to-class registry with plugin lifecycle.

The manager maps ``"<domain>:<operation>"`` kind strings to node classes,
registers plugins as units, notifies subscribers around every class
(un)registration, and builds nodes by kind at run time with
:meth:`RegistrationManager.create_node`. That factory is what lets a running
flow manufacture and splice in a subgraph whose kind is only known from
data in the shared state.

Manifesto:
    There is no module-level default registry. The application creates one
    manager at its composition root and threads it through (the CLI puts it
    in ``shared["registry"]``), so tests and embedders get isolated
    registries for free.

    - **One class per kind:** Re-registering a kind replaces the previous
      class and logs a warning
    - **Plugins are unique:** A second plugin with the same name is rejected
      and the first stays intact
    - **Failure leaves classes behind:** If a plugin fails part-way through
      registration its record is rolled back, but classes it already
      registered stay registered (logged as ``registry.plugin_partial``)

ARCHITECTURE
────────────
::

    plugin state:  (absent) → INITIALIZING → REGISTERED → UNREGISTERING → (absent)

    register_plugin(plugin)
        ├── name taken ───────────────► PluginAlreadyRegisteredError
        ├── initialize()
        ├── get_node_classes()
        ├── register_node_class(cls)   before_register / after_register
        └── on error: destroy() best-effort, re-raise

    unregister_plugin(name)
        ├── unregister_node_class(kind)  before_unregister / after_unregister
        ├── destroy()                    (errors propagate, no rollback)
        └── drop record

    create_node(kind, config, max_retries, wait) → Node
        └── unknown kind ─────────────► NodeKindNotFoundError

BEST PRACTICES
──────────────
- Registry maps are plain dicts with no locking; serialize concurrent
  registration of the same kind yourself.
- Node classes must be constructible with no arguments; the manager reads
  ``kind()`` from a config-less instance.

Tags:
    registry, plugins, lifecycle, factory, dependency-injection, hami

Doc-Types:
    api-reference
"""

from __future__ import annotations

import inspect
from collections.abc import Awaitable, Callable, Mapping
from enum import Enum
from typing import Any, Union

from hami.core.errors import NodeKindNotFoundError, PluginAlreadyRegisteredError
from hami.core.logging import get_logger
from hami.core.node import Node
from hami.core.plugin import NodeClass, Plugin

logger = get_logger(__name__)


class RegistrationEvent(str, Enum):
    BEFORE_REGISTER = "before_register"
    AFTER_REGISTER = "after_register"
    BEFORE_UNREGISTER = "before_unregister"
    AFTER_UNREGISTER = "after_unregister"


class PluginState(str, Enum):
    INITIALIZING = "initializing"
    REGISTERED = "registered"
    UNREGISTERING = "unregistering"


RegistrationEventHandler = Callable[
    [RegistrationEvent, NodeClass], Union[Awaitable[None], None]
]


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def kind_of(node_class: NodeClass) -> str:
    """Read the kind of ``node_class`` from a config-less instance."""
    return node_class().kind()


class RegistrationManager:
    """Registry of node classes and the plugins that contributed them."""

    def __init__(self) -> None:
        self._node_classes: dict[str, NodeClass] = {}
        self._plugins: dict[str, Plugin] = {}
        self._plugin_states: dict[str, PluginState] = {}
        self._handlers: dict[RegistrationEvent, list[RegistrationEventHandler]] = {}

    # ── Events ───────────────────────────────────────────────────

    def on(self, event: RegistrationEvent | str, handler: RegistrationEventHandler) -> None:
        self._handlers.setdefault(RegistrationEvent(event), []).append(handler)

    def off(self, event: RegistrationEvent | str, handler: RegistrationEventHandler) -> None:
        handlers = self._handlers.get(RegistrationEvent(event), [])
        if handler in handlers:
            handlers.remove(handler)

    async def _emit(self, event: RegistrationEvent, node_class: NodeClass) -> None:
        for handler in list(self._handlers.get(event, [])):
            await _maybe_await(handler(event, node_class))

    # ── Node classes ─────────────────────────────────────────────

    async def register_node_class(self, node_class: NodeClass) -> str:
        """Register ``node_class`` under its kind and return the kind."""
        kind = kind_of(node_class)

        await self._emit(RegistrationEvent.BEFORE_REGISTER, node_class)

        previous = self._node_classes.get(kind)
        if previous is not None and previous is not node_class:
            logger.warning(
                "registry.kind_overwritten",
                kind=kind,
                previous=previous.__qualname__,
                replacement=node_class.__qualname__,
            )
        self._node_classes[kind] = node_class

        await self._emit(RegistrationEvent.AFTER_REGISTER, node_class)
        logger.debug("registry.node_class_registered", kind=kind)
        return kind

    async def unregister_node_class(self, kind: str) -> None:
        node_class = self._node_classes.get(kind)
        if node_class is None:
            return

        await self._emit(RegistrationEvent.BEFORE_UNREGISTER, node_class)
        del self._node_classes[kind]
        await self._emit(RegistrationEvent.AFTER_UNREGISTER, node_class)
        logger.debug("registry.node_class_unregistered", kind=kind)

    def get_node_class(self, kind: str) -> NodeClass | None:
        return self._node_classes.get(kind)

    def has_node_class(self, kind: str) -> bool:
        return kind in self._node_classes

    def get_all_node_classes(self) -> list[NodeClass]:
        return list(self._node_classes.values())

    def list_kinds(self, category: str | None = None) -> list[str]:
        """Sorted registered kinds, optionally limited to one ``category``."""
        if category:
            return sorted(k for k in self._node_classes if k.startswith(f"{category}:"))
        return sorted(self._node_classes)

    def get_node_classes_by_category(self, category: str) -> list[NodeClass]:
        """Classes whose kind starts with ``"<category>:"``."""
        prefix = f"{category}:"
        return [cls for kind, cls in self._node_classes.items() if kind.startswith(prefix)]

    def create_node(
        self,
        kind: str,
        config: Mapping[str, Any] | None = None,
        max_retries: int | None = None,
        wait: float | None = None,
    ) -> Node:
        """
        Instantiate the class registered for ``kind``.

        The node's constructor validates ``config``, so a bad config raises
        ``ConfigurationError`` here.

        Raises:
            NodeKindNotFoundError: If nothing is registered for ``kind``
        """
        node_class = self._node_classes.get(kind)
        if node_class is None:
            raise NodeKindNotFoundError(kind)

        kwargs: dict[str, Any] = {}
        if max_retries is not None:
            kwargs["max_retries"] = max_retries
        if wait is not None:
            kwargs["wait"] = wait
        return node_class(config, **kwargs)

    # ── Plugins ──────────────────────────────────────────────────

    async def register_plugin(self, plugin: Plugin) -> None:
        """
        Initialize ``plugin`` and register every class it provides.

        Raises:
            PluginAlreadyRegisteredError: If a plugin with the same name is
                registered or currently initializing
        """
        name = plugin.name
        if name in self._plugins or name in self._plugin_states:
            raise PluginAlreadyRegisteredError(name)

        self._plugin_states[name] = PluginState.INITIALIZING
        registered: list[str] = []
        completed = False
        try:
            await _maybe_await(plugin.initialize())
            node_classes = await _maybe_await(plugin.get_node_classes())
            for node_class in node_classes:
                registered.append(await self.register_node_class(node_class))
            completed = True
        except Exception:
            logger.warning(
                "registry.plugin_partial",
                plugin=name,
                left_registered=registered,
                exc_info=True,
            )
            await self._destroy_quietly(plugin)
            raise
        finally:
            # runs on cancellation too
            if not completed:
                self._plugin_states.pop(name, None)

        self._plugins[name] = plugin
        self._plugin_states[name] = PluginState.REGISTERED
        logger.info(
            "registry.plugin_registered",
            plugin=name,
            version=plugin.version,
            kinds=registered,
        )

    async def _destroy_quietly(self, plugin: Plugin) -> None:
        destroy = getattr(plugin, "destroy", None)
        if destroy is None:
            return
        try:
            await _maybe_await(destroy())
        except Exception as exc:
            logger.debug("registry.plugin_destroy_failed", plugin=plugin.name, error=str(exc))

    async def unregister_plugin(self, name: str) -> None:
        """
        Remove every class ``name`` contributed, call its ``destroy`` hook,
        then drop the record. Unknown names are ignored.

        A failing ``destroy`` propagates with the classes already removed
        and the plugin left in ``UNREGISTERING``.
        """
        plugin = self._plugins.get(name)
        if plugin is None:
            return

        self._plugin_states[name] = PluginState.UNREGISTERING
        node_classes = await _maybe_await(plugin.get_node_classes())
        for node_class in node_classes:
            await self.unregister_node_class(kind_of(node_class))

        destroy = getattr(plugin, "destroy", None)
        if destroy is not None:
            await _maybe_await(destroy())

        del self._plugins[name]
        del self._plugin_states[name]
        logger.info("registry.plugin_unregistered", plugin=name)

    def get_plugins(self) -> list[Plugin]:
        return list(self._plugins.values())

    def get_plugin(self, name: str) -> Plugin | None:
        return self._plugins.get(name)

    def has_plugin(self, name: str) -> bool:
        return name in self._plugins

    def plugin_state(self, name: str) -> PluginState | None:
        """Lifecycle state of ``name``; ``None`` means unregistered."""
        return self._plugin_states.get(name)

    async def clear(self) -> None:
        """Unregister every plugin (best-effort), then drop all classes and handlers."""
        for name in list(self._plugins):
            try:
                await self.unregister_plugin(name)
            except Exception as exc:
                logger.warning("registry.clear_unregister_failed", plugin=name, error=str(exc))

        self._node_classes.clear()
        self._plugins.clear()
        self._plugin_states.clear()
        self._handlers.clear()

    def get_stats(self) -> dict[str, Any]:
        """Get statistics about the registry (for debugging)."""
        categories: dict[str, int] = {}
        for kind in self._node_classes:
            category = kind.split(":", 1)[0] if ":" in kind else "(none)"
            categories[category] = categories.get(category, 0) + 1
        return {
            "total_kinds": len(self._node_classes),
            "kinds_by_category": categories,
            "plugins": sorted(self._plugins),
        }


__all__ = [
    "RegistrationEvent",
    "PluginState",
    "RegistrationEventHandler",
    "RegistrationManager",
    "kind_of",
]
