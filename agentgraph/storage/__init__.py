"""
Storage package - In-memory catalog of built graphs.
"""

from agentgraph.storage.memory import (
    GraphStorage,
    StoredGraph,
    graph_storage,
)

__all__ = [
    "GraphStorage",
    "StoredGraph",
    "graph_storage",
]
