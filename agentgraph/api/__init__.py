"""
API package - FastAPI routes and schemas.
"""

from agentgraph.api.routes import graph, websocket

__all__ = ["graph", "websocket"]
