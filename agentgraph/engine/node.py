"""
Node Definition for the graph engine.

Nodes are the steps of a graph. Each node receives the current state and
asynchronously returns a new state. What a node does (I/O, LLM calls, pure
computation) is opaque to the engine.
"""

from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Optional, Union
from dataclasses import dataclass
import asyncio
import functools
import inspect


Handler = Callable[[Any], Union[Any, Awaitable[Any]]]


class Node(ABC):
    """
    A step in a graph.

    Subclasses implement ``execute``. Nodes are compared by identity: two
    distinct node objects are always two different nodes, whatever their
    fields. Failures raised from ``execute`` end the run unmodified.
    """

    name: str

    @abstractmethod
    async def execute(self, state: Any) -> Any:
        """Produce the next state from ``state``."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name='{self.name}')"


@dataclass(eq=False, repr=False)
class FunctionNode(Node):
    """
    A node backed by a plain function.

    Attributes:
        name: Name of the node, used for lookup and reporting
        handler: Function receiving the state and returning the new state
            (sync or async)
        description: Human-readable description
    """

    name: str
    handler: Handler
    description: str = ""

    def __post_init__(self):
        if not self.name:
            raise ValueError("Node name cannot be empty")
        if not callable(self.handler):
            raise ValueError(f"Handler for node '{self.name}' must be callable")

    @property
    def is_async(self) -> bool:
        """Check if the handler is an async function."""
        return asyncio.iscoroutinefunction(self.handler)

    async def execute(self, state: Any) -> Any:
        """
        Run the handler with the given state.

        Async handlers are awaited. Sync handlers run in the loop's default
        executor so they do not block other runs. An awaitable returned by a
        sync-looking handler (e.g. an object with ``async def __call__``) is
        awaited as well.
        """
        if self.is_async:
            return await self.handler(state)
        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, functools.partial(self.handler, state))
        if inspect.isawaitable(result):
            result = await result
        return result


def node(name: Optional[str] = None, description: str = "") -> Callable[[Handler], FunctionNode]:
    """
    Decorator turning a function into a ``FunctionNode``.

    Usage:
        @node(name="increment")
        async def increment(state: CounterState) -> CounterState:
            return state.evolve(value=state.value + 1)

    Args:
        name: Node name (defaults to function name)
        description: Human-readable description (defaults to the docstring)
    """
    def decorator(func: Handler) -> FunctionNode:
        return FunctionNode(
            name=name or func.__name__,
            handler=func,
            description=description or (func.__doc__ or "").strip(),
        )

    return decorator
