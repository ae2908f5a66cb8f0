"""
AgentGraph - A small, async-first graph execution engine for agent workflows.

Build an immutable graph of nodes and conditional edges, then stream the
states of a run one node at a time.
"""

__version__ = "1.0.0"
