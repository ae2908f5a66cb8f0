"""
In-Memory Graph Catalog.

Holds built graphs by id so the API can run them. Graphs are immutable, so
one stored instance serves every concurrent run. Run states are never
stored here.
"""

from typing import Dict, List, Optional
from datetime import datetime
import asyncio
from dataclasses import dataclass, field

from agentgraph.engine.graph import Graph


@dataclass
class StoredGraph:
    """A catalogued graph."""
    graph_id: str
    graph: Graph
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def name(self) -> str:
        return self.graph.name

    def to_dict(self) -> Dict[str, object]:
        return {
            "graph_id": self.graph_id,
            "name": self.name,
            "description": self.graph.description,
            "node_count": len(self.graph.nodes),
            "edge_count": len(self.graph.edges),
            "created_at": self.created_at.isoformat(),
        }


class GraphStorage:
    """
    Async-safe in-memory catalog of built graphs.

    Stores graphs by id, allowing registration, retrieval and removal.
    """

    def __init__(self):
        self._graphs: Dict[str, StoredGraph] = {}
        self._lock = asyncio.Lock()

    async def save(self, graph_id: str, graph: Graph) -> StoredGraph:
        """
        Save a graph under ``graph_id``, replacing any previous entry.

        Args:
            graph_id: Catalog key
            graph: A graph returned by ``GraphBuilder.build()``

        Returns:
            The stored entry
        """
        async with self._lock:
            stored = StoredGraph(graph_id=graph_id, graph=graph)
            self._graphs[graph_id] = stored
            return stored

    async def get(self, graph_id: str) -> Optional[StoredGraph]:
        """Get a graph by ID."""
        async with self._lock:
            return self._graphs.get(graph_id)

    async def delete(self, graph_id: str) -> bool:
        """Delete a graph."""
        async with self._lock:
            if graph_id in self._graphs:
                del self._graphs[graph_id]
                return True
            return False

    async def list_all(self) -> List[StoredGraph]:
        """List all stored graphs."""
        async with self._lock:
            return list(self._graphs.values())

    async def exists(self, graph_id: str) -> bool:
        """Check whether a graph is catalogued under ``graph_id``."""
        async with self._lock:
            return graph_id in self._graphs

    def __len__(self) -> int:
        return len(self._graphs)


# Global catalog instance
graph_storage = GraphStorage()
