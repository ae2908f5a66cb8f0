"""
Error types for the graph engine.

Structural errors are raised by ``GraphBuilder.build()`` and never reach the
executor. Routing errors end a run when no edge matches a node's output.
Errors raised by a node's ``execute`` are not wrapped.
"""

from typing import List, Optional


class GraphError(Exception):
    """Base exception for all engine errors."""

    pass


class StructuralError(GraphError):
    """Raised by ``build()`` when the graph definition is invalid."""

    def __init__(self, problems: List[str]):
        self.problems = list(problems)
        summary = "; ".join(self.problems)
        super().__init__(f"Invalid graph ({len(self.problems)} problem(s)): {summary}")


class RoutingError(GraphError):
    """Raised during a run when traversal cannot continue."""

    def __init__(self, node_id: int, node_name: str, message: Optional[str] = None):
        self.node_id = node_id
        self.node_name = node_name
        super().__init__(message or f"Routing failed at node '{node_name}' (id {node_id})")


class UnmatchedTransitionError(RoutingError):
    """No conditional edge matched and the node has no otherwise edge."""

    def __init__(self, node_id: int, node_name: str):
        super().__init__(
            node_id,
            node_name,
            f"No edge matched for node '{node_name}' (id {node_id}). "
            "Ensure it has either a matching conditional edge or an otherwise edge.",
        )
