"""
State base class for graph runs.

The engine treats state as an opaque value and only ever replaces it
wholesale. ``GraphState`` is a convenience base for application states:
a frozen pydantic model whose updates return new instances.
"""

from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class GraphState(BaseModel):
    """
    Immutable state that flows through a graph.

    Subclass it and declare the fields your nodes read and write:

        class CounterState(GraphState):
            value: int = 0

        new_state = state.evolve(value=state.value + 1)

    Assigning to a field raises a validation error; nodes produce a new
    state with ``evolve`` instead.
    """

    model_config = ConfigDict(frozen=True)

    def evolve(self, **changes: Any) -> "GraphState":
        """Return a copy with the given fields replaced."""
        return self.model_copy(update=changes)

    def to_dict(self) -> Dict[str, Any]:
        """Convert state to a JSON-compatible dictionary."""
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GraphState":
        """Create a state from a plain dictionary, validating its fields."""
        return cls.model_validate(data)
