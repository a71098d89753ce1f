"""
Flow - a node that walks a graph of nodes.

Running a flow runs its start node, looks up the successor registered for
the returned action, and repeats until an action has no successor. That
final action is the flow's own result, so a flow nested inside another flow
takes part in the outer transition table like any other node.

An action without a successor is normal termination, not an error. Errors
raised by a node abort the walk and propagate out of ``run()`` untouched.

Examples:
    >>> first = Greet()
    >>> first.next(Shout())
    >>> flow = Flow(start=first)
    >>> await flow.run({})
    'default'

Tags:
    flow, graph-walker, workflow, hami

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from hami.core.logging import get_logger
from hami.core.node import DEFAULT_ACTION, Node, SharedState, Transition

logger = get_logger(__name__)


class Flow(Node):
    """A node whose work is walking the graph that begins at ``start_node``."""

    def __init__(
        self,
        start: Node | None = None,
        config: Mapping[str, Any] | None = None,
        max_retries: int = 1,
        wait: float = 0,
    ):
        super().__init__(config, max_retries, wait)
        self.start_node = start

    def kind(self) -> str:
        return "hami-flow"

    def start(self, node: Node) -> Node:
        """Set the start node and return it for chaining."""
        self.start_node = node
        return node

    async def finalize(
        self, shared: SharedState, prep_res: Any, exec_res: Any
    ) -> Transition | str | None:
        # exec_res is the last action of the walk
        return exec_res

    async def _walk(self, shared: SharedState) -> str | None:
        current = self.start_node
        last_action: str | None = None
        steps = 0

        while current is not None:
            transition = await current._run(shared)
            last_action = transition.action
            steps += 1

            if transition.splice is not None:
                current.next(transition.splice, last_action or DEFAULT_ACTION)

            successor = current.get_successor(last_action)
            logger.debug(
                "flow.transition",
                flow=self.kind(),
                node=current.kind(),
                action=last_action,
                successor=successor.kind() if successor is not None else None,
            )
            current = successor

        logger.debug("flow.complete", flow=self.kind(), steps=steps, action=last_action)
        return last_action

    async def _run(self, shared: SharedState) -> Transition:
        prep_res = await self.prepare(shared)
        last_action = await self._walk(shared)
        return Transition.coerce(await self.finalize(shared, prep_res, last_action))


__all__ = ["Flow"]
