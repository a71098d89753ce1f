"""
Node - the atomic unit of work in a hami flow.

A node runs a three-phase lifecycle over a mutable shared-state dict and
returns an *action* string that selects its successor:

    prepare(shared)                    -> prep_res   (read shared state)
    execute(prep_res)                  -> exec_res   (the work, retried)
    finalize(shared, prep_res, exec_res) -> action   (write shared state)

Manifesto:
    Nodes never talk to each other directly. The shared dict is the only
    channel between them, and the action string is the only thing a node
    says about what should happen next. That keeps every node testable in
    isolation: seed a dict, ``await node.run(shared)``, inspect the dict.

    - **Validated at construction:** A node built with a non-empty config
      that fails ``config_schema`` raises ``ConfigurationError`` and is
      never usable
    - **Attempt-counted retry:** ``execute`` runs up to ``max_retries``
      times with a flat ``wait`` between attempts
    - **Explicit fallback:** ``handle_error`` sees only the final failed
      attempt; the default re-raises
    - **Walker owns the graph:** ``finalize`` may return a
      :class:`Transition` carrying a node to splice in; the flow walker,
      not the node, attaches it

Architecture:
    ::

        Node(config, max_retries=1, wait=0)
            │  validate_config(config)  ──► ConfigurationError
            ▼
        _run(shared)
            ├── prepare(shared)
            ├── execute(prep_res)      attempt 1..max_retries
            │       └── on final failure: handle_error(error, attempt)
            └── finalize(...)  ──► str | None | Transition

        successors: {action: Node}     set with next(node, action)

Examples:
    >>> class Greet(Node):
    ...     def kind(self):
    ...         return "demo:greet"
    ...     async def finalize(self, shared, prep_res, exec_res):
    ...         shared["greeting"] = "hello"
    ...         return "default"

Tags:
    node, lifecycle, retry, workflow, hami

Doc-Types:
    - API Reference
    - Architecture Documentation
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, ClassVar

from hami.core.errors import ConfigurationError
from hami.core.logging import get_logger
from hami.core.validation import Schema, ValidationResult, validate

logger = get_logger(__name__)

DEFAULT_ACTION = "default"

SharedState = dict[str, Any]


@dataclass(frozen=True)
class Transition:
    """Result of a finalize phase.

    ``action`` selects the successor (``None`` behaves like ``"default"``
    for lookup but is reported as-is). ``splice`` is a node created at run
    time that the walker registers as the successor for ``action`` before
    looking it up.
    """

    action: str | None = None
    splice: Node | None = None

    @classmethod
    def coerce(cls, outcome: Transition | str | None) -> Transition:
        if isinstance(outcome, Transition):
            return outcome
        return cls(action=outcome)


class Node:
    """
    Base class for every node and flow.

    Subclasses override ``kind`` and any of the lifecycle coroutines, and
    may set ``config_schema`` (a :class:`Schema` or its dict form) to have
    their config validated at construction.
    """

    config_schema: ClassVar[Schema | Mapping[str, Any] | None] = None

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        max_retries: int = 1,
        wait: float = 0,
    ):
        if max_retries < 1:
            raise ValueError(f"max_retries must be at least 1, got {max_retries}")
        if wait < 0:
            raise ValueError(f"wait must not be negative, got {wait}")

        if config:
            result = self.validate_config(config)
            if not result.valid:
                raise ConfigurationError(result.errors, kind=self.kind())

        self.config = config
        self.max_retries = max_retries
        self.wait = wait
        self.successors: dict[str, Node] = {}

    def kind(self) -> str:
        return "hami-node"

    def validate_config(self, config: Mapping[str, Any]) -> ValidationResult:
        """Check ``config`` against ``config_schema``; no schema accepts anything."""
        if self.config_schema is None:
            return ValidationResult(valid=True)
        return validate(config, self.config_schema)

    # ── Graph wiring ─────────────────────────────────────────────

    def next(self, node: Node, action: str = DEFAULT_ACTION) -> Node:
        """Register ``node`` as the successor for ``action`` and return it for chaining."""
        if action in self.successors:
            logger.debug(
                "node.successor_overwritten",
                kind=self.kind(),
                action=action,
                previous=self.successors[action].kind(),
                successor=node.kind(),
            )
        self.successors[action] = node
        return node

    def on(self, action: str, node: Node) -> Node:
        return self.next(node, action)

    def get_successor(self, action: str | None) -> Node | None:
        return self.successors.get(action or DEFAULT_ACTION)

    # ── Lifecycle ────────────────────────────────────────────────

    async def prepare(self, shared: SharedState) -> Any:
        return None

    async def execute(self, prep_res: Any) -> Any:
        return None

    async def handle_error(self, error: Exception, attempt: int) -> Any:
        """Fallback for the final failed attempt. Return a value to use as ``exec_res``."""
        raise error

    async def finalize(
        self, shared: SharedState, prep_res: Any, exec_res: Any
    ) -> Transition | str | None:
        return DEFAULT_ACTION

    async def _execute_with_retry(self, prep_res: Any) -> Any:
        for attempt in range(1, self.max_retries + 1):
            try:
                return await self.execute(prep_res)
            except Exception as exc:
                if attempt == self.max_retries:
                    return await self.handle_error(exc, attempt)
                logger.warning(
                    "node.retry",
                    kind=self.kind(),
                    attempt=attempt,
                    max_retries=self.max_retries,
                    wait=self.wait,
                    error=str(exc),
                )
                if self.wait:
                    await asyncio.sleep(self.wait)

    async def _run(self, shared: SharedState) -> Transition:
        prep_res = await self.prepare(shared)
        exec_res = await self._execute_with_retry(prep_res)
        return Transition.coerce(await self.finalize(shared, prep_res, exec_res))

    async def run(self, shared: SharedState) -> str | None:
        """Run this node's lifecycle once and return its action.

        Successors are not followed; wrap the node in a ``Flow`` for that.
        """
        if self.successors:
            logger.warning("node.successors_ignored", kind=self.kind())
        transition = await self._run(shared)
        return transition.action

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(kind={self.kind()!r})"


__all__ = [
    "DEFAULT_ACTION",
    "SharedState",
    "Transition",
    "Node",
]
