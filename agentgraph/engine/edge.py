"""
Edges between nodes.

An edge is a tagged value: ``CONDITIONAL`` edges carry a predicate over the
state, ``OTHERWISE`` edges are the fallback of their source node. Edges are
keyed by source node id, and conditional edges of one source keep their
registration order, which decides ties.
"""

from typing import Any, Callable, Dict, Optional
from dataclasses import dataclass
from enum import Enum


NodeId = int
Predicate = Callable[[Any], bool]


def ALWAYS(state: Any) -> bool:
    """Predicate of a ``.to(target)`` edge registered without ``.when``."""
    return True


class EdgeKind(str, Enum):
    """Kinds of edges between nodes."""
    CONDITIONAL = "conditional"  # Taken when its predicate is true
    OTHERWISE = "otherwise"      # Taken when no conditional edge matched


@dataclass(frozen=True)
class Edge:
    """A directed transition rule from ``source`` to ``target``."""
    kind: EdgeKind
    source: NodeId
    target: NodeId
    predicate: Optional[Predicate] = None

    @classmethod
    def conditional(cls, source: NodeId, target: NodeId, predicate: Predicate) -> "Edge":
        return cls(EdgeKind.CONDITIONAL, source, target, predicate)

    @classmethod
    def otherwise(cls, source: NodeId, target: NodeId) -> "Edge":
        return cls(EdgeKind.OTHERWISE, source, target)

    @property
    def is_otherwise(self) -> bool:
        return self.kind is EdgeKind.OTHERWISE

    def matches(self, state: Any) -> bool:
        """
        Evaluate the edge against ``state``.

        Predicates are synchronous and must not have side effects.
        Otherwise edges always match; the executor only consults them after
        every conditional edge of the source has failed.
        """
        if self.kind is EdgeKind.OTHERWISE:
            return True
        return bool(self.predicate(state))

    @property
    def label(self) -> str:
        if self.kind is EdgeKind.OTHERWISE:
            return "otherwise"
        if self.predicate is ALWAYS:
            return "always"
        return getattr(self.predicate, "__name__", "condition")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "target": self.target,
            "type": self.kind.value,
            "condition": None if self.kind is EdgeKind.OTHERWISE else self.label,
        }
