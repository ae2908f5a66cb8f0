"""
Agent Loop Workflow.

The classic tool-calling agent loop:

```
start → chat ─┬─→ END (no tool call)
              │
              └─→ tools → chat (loop while the assistant asks for tools)
```

The chat step takes a ``respond`` function mapping the conversation to the
next assistant message. The default one is scripted and deterministic (it
asks for the ``add`` tool when the user mentions two numbers), so the demo
runs without any LLM provider; plug in a real completion call to get an
actual agent.
"""

from typing import Any, Callable, Dict, Optional, Tuple
import inspect
import logging
import re

from pydantic import BaseModel, ConfigDict

from agentgraph.engine.builder import GraphBuilder
from agentgraph.engine.graph import Graph
from agentgraph.engine.node import Node, node
from agentgraph.engine.state import GraphState
from agentgraph.storage.memory import GraphStorage, graph_storage


logger = logging.getLogger(__name__)

AGENT_LOOP_GRAPH_ID = "agent-loop-demo"


class ToolCall(BaseModel):
    """A request from the assistant to run a named tool."""
    model_config = ConfigDict(frozen=True)

    name: str
    arguments: Dict[str, float] = {}


class Message(BaseModel):
    """One conversation message."""
    model_config = ConfigDict(frozen=True)

    role: str
    content: str = ""
    tool_call: Optional[ToolCall] = None


class AgentState(GraphState):
    """Conversation so far, oldest message first."""

    messages: Tuple[Message, ...] = ()

    @property
    def last_message(self) -> Optional[Message]:
        return self.messages[-1] if self.messages else None

    @property
    def has_tool_calls(self) -> bool:
        last = self.last_message
        return last is not None and last.role == "assistant" and last.tool_call is not None

    def append(self, message: Message) -> "AgentState":
        return self.evolve(messages=self.messages + (message,))


# ============================================================
# Tools
# ============================================================

TOOLS: Dict[str, Callable[..., float]] = {
    "add": lambda a, b: a + b,
    "multiply": lambda a, b: a * b,
}


def _format_number(value: float) -> str:
    return f"{value:g}"


# ============================================================
# Nodes
# ============================================================

def scripted_reply(state: AgentState) -> Message:
    """
    Deterministic stand-in for an LLM completion.

    - after a tool result: answer with it
    - on a user message with two numbers: call ``add`` (or ``multiply``
      when the user asks for it)
    - anything else: a plain text answer
    """
    last = state.last_message
    if last is None:
        return Message(role="assistant", content="How can I help?")

    if last.role == "tool":
        return Message(role="assistant", content=f"The answer is {last.content}.")

    if last.role == "user":
        numbers = re.findall(r"-?\d+(?:\.\d+)?", last.content)
        if len(numbers) >= 2:
            tool = "multiply" if "multiply" in last.content.lower() else "add"
            return Message(
                role="assistant",
                tool_call=ToolCall(
                    name=tool,
                    arguments={"a": float(numbers[0]), "b": float(numbers[1])},
                ),
            )
        return Message(role="assistant", content="I can only do arithmetic on two numbers.")

    return Message(role="assistant", content="Nothing left to do.")


@node(name="start", description="Entry point, passes the conversation through")
def start_node(state: AgentState) -> AgentState:
    return state


class ChatNode(Node):
    """Asks the assistant for the next message and appends it."""

    name = "chat"

    def __init__(self, respond: Callable[[AgentState], Any] = scripted_reply):
        self.respond = respond

    async def execute(self, state: AgentState) -> AgentState:
        reply = self.respond(state)
        if inspect.isawaitable(reply):
            reply = await reply
        if reply.tool_call:
            logger.info(f"Assistant requested tool '{reply.tool_call.name}'")
        return state.append(reply)


@node(name="tools", description="Run the tool requested by the assistant")
async def tools_node(state: AgentState) -> AgentState:
    call = state.last_message.tool_call
    tool = TOOLS.get(call.name)
    if tool is None:
        # Unknown tools become an error message for the assistant
        content = f"Error: unknown tool '{call.name}'"
    else:
        try:
            content = _format_number(tool(**call.arguments))
        except TypeError as e:
            content = f"Error: {e}"
    logger.info(f"Tool {call.name}({call.arguments}) -> {content}")
    return state.append(Message(role="tool", content=content))


def has_tool_calls(state: AgentState) -> bool:
    return state.has_tool_calls


# ============================================================
# Workflow Factory
# ============================================================

def create_agent_loop_workflow(
    respond: Callable[[AgentState], Any] = scripted_reply,
) -> Graph:
    """
    Create the agent loop graph.

    Args:
        respond: Function producing the next assistant message (sync or async)

    Returns:
        The built Graph
    """
    chat = ChatNode(respond)
    return (
        GraphBuilder(
            state_type=AgentState,
            name="Agent Loop",
            description="Chat with tool calls until the assistant answers in text.",
        )
        .add_node(start_node)
        .add_node(chat)
        .add_node(tools_node)
        .connect(start_node).to(chat)
        .connect(chat).when(has_tool_calls).to(tools_node)
        .connect(chat).otherwise.to_terminal()
        .connect(tools_node).to(chat)
        .start_from(start_node)
        .build()
    )


async def register_agent_loop_workflow(storage: GraphStorage = graph_storage) -> Graph:
    """
    Register the agent loop in the graph catalog.

    This makes the workflow available immediately via the API.
    """
    workflow = create_agent_loop_workflow()
    await storage.save(AGENT_LOOP_GRAPH_ID, workflow)
    logger.info(f"Registered Agent Loop workflow with ID: {AGENT_LOOP_GRAPH_ID}")
    return workflow


# ============================================================
# Example Usage
# ============================================================

async def run_agent_loop_demo():
    """
    Demo function showing how to run the agent loop.

    Usage:
        import asyncio
        from agentgraph.workflows.agent_loop import run_agent_loop_demo
        asyncio.run(run_agent_loop_demo())
    """
    from agentgraph.engine.executor import Executor

    workflow = create_agent_loop_workflow()
    initial_state = AgentState(messages=(Message(role="user", content="What is 2 plus 40?"),))

    print("Starting Agent Loop...")
    async for step in Executor().steps(workflow, initial_state):
        last = step.state.last_message
        print(f"[{step.step}] {step.node}: {last.role} {last.content or last.tool_call}")


if __name__ == "__main__":
    import asyncio
    asyncio.run(run_agent_loop_demo())
