"""
The terminal marker that ends a run.
"""

from typing import Any

from agentgraph.engine.node import Node


# Reference accepted wherever a node is expected
END = "__END__"


class TerminalNode(Node):
    """
    Built-in node marking the end of a run.

    ``execute`` is the identity. The executor never calls it: on reaching
    the terminal it emits the incoming state once and stops. Every builder
    owns one instance; no edge may originate from it.
    """

    name = END

    async def execute(self, state: Any) -> Any:
        return state

    def __repr__(self) -> str:
        return "TerminalNode"


def is_terminal(candidate: Any) -> bool:
    """Check whether ``candidate`` is a terminal marker."""
    return isinstance(candidate, TerminalNode)
