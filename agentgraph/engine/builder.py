"""
Fluent builder for graphs.

The builder is an immutable value: every call returns a new builder and
leaves the previous one untouched. ``build()`` validates the whole
definition at once and either returns a Graph or raises a
``StructuralError`` listing every problem found.

Usage:
    graph = (
        GraphBuilder(state_type=AgentState)
        .add_node(start)
        .add_node(chat)
        .add_node(tools)
        .connect(start).to(chat)
        .connect(chat).when(has_tool_calls).to(tools)
        .connect(chat).otherwise.to_terminal()
        .connect(tools).to(chat)
        .start_from(start)
        .build()
    )
"""

from typing import Any, Dict, List, Optional, Tuple, Type
from dataclasses import dataclass, field, replace
import asyncio
import logging

from agentgraph.engine.edge import ALWAYS, Edge, EdgeKind, NodeId, Predicate
from agentgraph.engine.errors import StructuralError
from agentgraph.engine.graph import TERMINAL_ID, Graph, NodeRef
from agentgraph.engine.node import Node
from agentgraph.engine.terminal import END, TerminalNode


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _PendingEdge:
    """An edge as registered, before node references are resolved."""
    kind: EdgeKind
    source: NodeRef
    target: NodeRef
    predicate: Optional[Predicate] = None


def _describe(ref: NodeRef) -> str:
    if isinstance(ref, str):
        return f"'{ref}'"
    return repr(ref)


@dataclass(frozen=True)
class GraphBuilder:
    """
    Accumulates nodes and edges for a Graph.

    Args:
        state_type: The state type every node of the graph works on
        name: Human-readable graph name
        description: Human-readable description
    """

    state_type: Type = object
    name: str = "Unnamed Workflow"
    description: str = ""
    terminal: TerminalNode = field(default_factory=TerminalNode)
    _nodes: Tuple[Node, ...] = ()
    _edges: Tuple[_PendingEdge, ...] = ()
    _entry: Optional[NodeRef] = None

    def add_node(self, node: Node) -> "GraphBuilder":
        """Register a node. Its id is its position in registration order."""
        if not isinstance(node, Node):
            raise TypeError(f"Expected a Node, got {type(node).__name__}")
        return replace(self, _nodes=self._nodes + (node,))

    def connect(self, source: NodeRef) -> "EdgeBuilder":
        """Start an edge from ``source`` (a node, a node name or END)."""
        return EdgeBuilder(self, source)

    def start_from(self, node: NodeRef) -> "GraphBuilder":
        """Set the entry point of the graph."""
        return replace(self, _entry=node)

    def _add_edge(self, edge: _PendingEdge) -> "GraphBuilder":
        return replace(self, _edges=self._edges + (edge,))

    def _resolve(self, ref: NodeRef) -> Optional[NodeId]:
        if ref is self.terminal or ref == END:
            return TERMINAL_ID
        for index, candidate in enumerate(self._nodes):
            if isinstance(ref, str):
                if candidate.name == ref:
                    return index + 1
            elif candidate is ref:
                return index + 1
        return None

    def _node_problems(self) -> List[str]:
        problems = []
        seen_ids = set()
        for candidate in self._nodes:
            if id(candidate) in seen_ids:
                problems.append(f"Node {_describe(candidate)} is registered more than once")
                continue
            seen_ids.add(id(candidate))
            if candidate.name == END:
                problems.append(f"Node name '{END}' is reserved for the terminal")
        return problems

    def _shared_names(self) -> Dict[str, int]:
        """Names carried by more than one distinct node, with their counts."""
        counts: Dict[str, int] = {}
        for candidate in {id(n): n for n in self._nodes}.values():
            counts[candidate.name] = counts.get(candidate.name, 0) + 1
        return {name: count for name, count in counts.items() if count > 1}

    def _lookup(
        self, ref: NodeRef, shared: Dict[str, int], problems: List[str], missing: str
    ) -> Optional[NodeId]:
        if isinstance(ref, str) and ref in shared:
            problems.append(
                f"Node name '{ref}' is shared by {shared[ref]} nodes; "
                "reference the node object instead"
            )
            return None
        node_id = self._resolve(ref)
        if node_id is None:
            problems.append(missing)
        return node_id

    def build(self) -> Graph:
        """
        Validate the definition and build an immutable Graph.

        Checks, all reported together:
        - the entry point is set and registered
        - every edge endpoint is registered
        - no edge originates from the terminal
        - at most one otherwise edge per source node
        - each node object is registered once
        - names used as references identify a single node

        Raises:
            StructuralError: if any check fails
        """
        problems = self._node_problems()
        shared = self._shared_names()

        entry_id = None
        if self._entry is None:
            problems.append("Graph must have an entry point. Use .start_from(node)")
        else:
            entry_id = self._lookup(
                self._entry,
                shared,
                problems,
                f"Entry point {_describe(self._entry)} must be a registered node",
            )

        edges: List[Edge] = []
        otherwise_counts: Dict[NodeId, int] = {}
        for pending in self._edges:
            source_id = self._lookup(
                pending.source,
                shared,
                problems,
                f"Edge source node not registered: {_describe(pending.source)}",
            )
            target_id = self._lookup(
                pending.target,
                shared,
                problems,
                f"Edge target node not registered: {_describe(pending.target)}",
            )
            if source_id == TERMINAL_ID:
                problems.append("Edges cannot originate from the terminal node")
            if source_id is None or target_id is None or source_id == TERMINAL_ID:
                continue

            if pending.kind is EdgeKind.OTHERWISE:
                otherwise_counts[source_id] = otherwise_counts.get(source_id, 0) + 1
                edges.append(Edge.otherwise(source_id, target_id))
            else:
                edges.append(Edge.conditional(source_id, target_id, pending.predicate))

        for source_id, count in otherwise_counts.items():
            if count > 1:
                problems.append(
                    f"Node '{self._nodes[source_id - 1].name}' has {count} 'otherwise' "
                    "edges. Only one is allowed."
                )

        if problems:
            raise StructuralError(problems)

        graph = Graph(
            nodes=self._nodes,
            edges=tuple(edges),
            entry_point=entry_id,
            terminal=self.terminal,
            state_type=self.state_type,
            name=self.name,
            description=self.description,
        )
        logger.debug(
            f"Built graph '{graph.name}' with {len(graph.nodes)} nodes "
            f"and {len(graph.edges)} edges"
        )
        return graph


def _check_predicate(predicate: Any) -> Predicate:
    if not callable(predicate):
        raise TypeError("Edge condition must be callable")
    if asyncio.iscoroutinefunction(predicate):
        raise TypeError("Edge conditions must be synchronous functions")
    return predicate


@dataclass(frozen=True)
class EdgeBuilder:
    """
    Intermediate value for fluent edge construction.

    Created by ``GraphBuilder.connect(node)``; ``to`` returns the parent
    builder with the edge added.
    """

    parent: GraphBuilder
    source: NodeRef
    predicate: Optional[Predicate] = None

    def when(self, predicate: Predicate) -> "EdgeBuilder":
        """Guard the edge with a synchronous predicate over the state."""
        return replace(self, predicate=_check_predicate(predicate))

    def to(self, target: NodeRef) -> GraphBuilder:
        """
        Add a conditional edge to ``target``.

        Without ``when`` the edge is always taken, but it still competes with
        the other conditional edges of the source in registration order.
        """
        return self.parent._add_edge(
            _PendingEdge(EdgeKind.CONDITIONAL, self.source, target, self.predicate or ALWAYS)
        )

    def to_terminal(self) -> GraphBuilder:
        return self.to(self.parent.terminal)

    @property
    def otherwise(self) -> "OtherwiseEdgeBuilder":
        """Mark this edge as the fallback of its source node."""
        if self.predicate is not None:
            raise ValueError("An otherwise edge cannot have a condition")
        return OtherwiseEdgeBuilder(self.parent, self.source)


@dataclass(frozen=True)
class OtherwiseEdgeBuilder:
    """Edge builder for the catch-all edge of a source node."""

    parent: GraphBuilder
    source: NodeRef

    def to(self, target: NodeRef) -> GraphBuilder:
        return self.parent._add_edge(_PendingEdge(EdgeKind.OTHERWISE, self.source, target))

    def to_terminal(self) -> GraphBuilder:
        return self.to(self.parent.terminal)
