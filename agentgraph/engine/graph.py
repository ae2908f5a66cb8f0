"""
Graph Definition for the graph engine.

A Graph is the validated, immutable result of ``GraphBuilder.build()``:
nodes with their ids, edges keyed by source, the entry point and the
terminal marker. It is read-only and can be shared by any number of
concurrent runs.
"""

from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, Union
from dataclasses import dataclass, field
from types import MappingProxyType
import uuid

from agentgraph.engine.edge import Edge, EdgeKind, NodeId
from agentgraph.engine.node import Node
from agentgraph.engine.terminal import END, TerminalNode


# Id of the terminal marker in every graph; user nodes are numbered from 1
TERMINAL_ID: NodeId = 0

NodeRef = Union[Node, str]


@dataclass(frozen=True)
class Graph:
    """
    An immutable workflow graph.

    Attributes:
        nodes: Registered nodes in registration order; ``nodes[i]`` has id ``i + 1``
        edges: All edges in registration order
        entry_point: Id of the node a run starts from
        terminal: The terminal marker of this graph (id ``TERMINAL_ID``)
        state_type: The state type bound to this graph
        name: Human-readable name
        graph_id: Unique identifier for this graph
    """

    nodes: Tuple[Node, ...]
    edges: Tuple[Edge, ...]
    entry_point: NodeId
    terminal: TerminalNode
    state_type: Type = object
    name: str = "Unnamed Workflow"
    description: str = ""
    graph_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    _edges_by_source: Mapping[NodeId, Tuple[Edge, ...]] = field(
        init=False, repr=False, compare=False
    )
    _ids_by_name: Mapping[str, Optional[NodeId]] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        grouped: Dict[NodeId, List[Edge]] = {}
        for edge in self.edges:
            grouped.setdefault(edge.source, []).append(edge)
        object.__setattr__(
            self,
            "_edges_by_source",
            MappingProxyType({source: tuple(edges) for source, edges in grouped.items()}),
        )
        names: Dict[str, Optional[NodeId]] = {}
        for index, n in enumerate(self.nodes):
            # A name carried by several nodes resolves to none of them
            names[n.name] = None if n.name in names else index + 1
        names[END] = TERMINAL_ID
        object.__setattr__(self, "_ids_by_name", MappingProxyType(names))

    @property
    def entry_node(self) -> Node:
        return self.node(self.entry_point)

    def node(self, node_id: NodeId) -> Node:
        """Get a node (or the terminal) by id."""
        if node_id == TERMINAL_ID:
            return self.terminal
        if 1 <= node_id <= len(self.nodes):
            return self.nodes[node_id - 1]
        raise KeyError(f"Node id {node_id} not found in graph '{self.name}'")

    def node_id(self, ref: NodeRef) -> Optional[NodeId]:
        """Get the id of a node given the node object or its (unshared) name."""
        if isinstance(ref, str):
            return self._ids_by_name.get(ref)
        if ref is self.terminal:
            return TERMINAL_ID
        for index, candidate in enumerate(self.nodes):
            if candidate is ref:
                return index + 1
        return None

    def is_terminal_id(self, node_id: NodeId) -> bool:
        return node_id == TERMINAL_ID

    def edges_from(self, node_id: NodeId) -> Tuple[Edge, ...]:
        """Outgoing edges of a node, in registration order."""
        return self._edges_by_source.get(node_id, ())

    def describe(self, node_id: NodeId) -> str:
        return self.node(node_id).name

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the graph structure to a dictionary."""
        return {
            "graph_id": self.graph_id,
            "name": self.name,
            "description": self.description,
            "state_type": getattr(self.state_type, "__name__", str(self.state_type)),
            "nodes": [
                {"id": index + 1, "name": n.name, "type": type(n).__name__}
                for index, n in enumerate(self.nodes)
            ],
            "edges": [
                {
                    **edge.to_dict(),
                    "source_name": self.describe(edge.source),
                    "target_name": self.describe(edge.target),
                }
                for edge in self.edges
            ],
            "entry_point": self.describe(self.entry_point),
        }

    def to_mermaid(self) -> str:
        """Generate a Mermaid diagram of the graph."""
        lines = ["graph TD"]

        for index, n in enumerate(self.nodes):
            label = n.name.replace("_", " ").title()
            lines.append(f'    n{index + 1}["{label}"]')

        has_end = self.entry_point == TERMINAL_ID or any(
            edge.target == TERMINAL_ID for edge in self.edges
        )
        if has_end:
            lines.append(f'    n{TERMINAL_ID}(("END"))')

        for edge in self.edges:
            arrow = "-.->" if edge.kind is EdgeKind.OTHERWISE else "-->"
            lines.append(f"    n{edge.source} {arrow}|{edge.label}| n{edge.target}")

        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"Graph(name='{self.name}', nodes={[n.name for n in self.nodes]}, "
            f"entry='{self.describe(self.entry_point)}')"
        )
