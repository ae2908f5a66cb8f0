"""
Engine package - graph construction and execution.
"""

from agentgraph.engine.state import GraphState
from agentgraph.engine.node import Node, FunctionNode, node
from agentgraph.engine.edge import ALWAYS, Edge, EdgeKind, NodeId
from agentgraph.engine.terminal import END, TerminalNode, is_terminal
from agentgraph.engine.graph import TERMINAL_ID, Graph
from agentgraph.engine.builder import GraphBuilder, EdgeBuilder, OtherwiseEdgeBuilder
from agentgraph.engine.executor import Executor, ExecutionStep, execute_graph
from agentgraph.engine.errors import (
    GraphError,
    StructuralError,
    RoutingError,
    UnmatchedTransitionError,
)

__all__ = [
    "GraphState",
    "Node",
    "FunctionNode",
    "node",
    "ALWAYS",
    "Edge",
    "EdgeKind",
    "NodeId",
    "END",
    "TerminalNode",
    "is_terminal",
    "TERMINAL_ID",
    "Graph",
    "GraphBuilder",
    "EdgeBuilder",
    "OtherwiseEdgeBuilder",
    "Executor",
    "ExecutionStep",
    "execute_graph",
    "GraphError",
    "StructuralError",
    "RoutingError",
    "UnmatchedTransitionError",
]
