"""
Workflows package - Sample workflow implementations.
"""

from agentgraph.workflows.agent_loop import (
    AGENT_LOOP_GRAPH_ID,
    AgentState,
    Message,
    create_agent_loop_workflow,
    register_agent_loop_workflow,
)

__all__ = [
    "AGENT_LOOP_GRAPH_ID",
    "AgentState",
    "Message",
    "create_agent_loop_workflow",
    "register_agent_loop_workflow",
]
