"""
Tests for the sample workflows.
"""

import pytest

from agentgraph.engine.builder import GraphBuilder
from agentgraph.engine.executor import Executor, execute_graph
from agentgraph.engine.terminal import END
from agentgraph.storage.memory import GraphStorage
from agentgraph.workflows.agent_loop import (
    AGENT_LOOP_GRAPH_ID,
    AgentState,
    ChatNode,
    Message,
    ToolCall,
    create_agent_loop_workflow,
    register_agent_loop_workflow,
    scripted_reply,
)


def user(content: str) -> AgentState:
    return AgentState(messages=(Message(role="user", content=content),))


class TestScriptedReply:
    """Tests for the scripted assistant."""

    def test_requests_add_tool(self):
        reply = scripted_reply(user("What is 2 plus 40?"))
        assert reply.tool_call == ToolCall(name="add", arguments={"a": 2.0, "b": 40.0})

    def test_requests_multiply_tool(self):
        reply = scripted_reply(user("Please multiply 6 by 7"))
        assert reply.tool_call.name == "multiply"

    def test_answers_after_tool_result(self):
        state = user("2 and 3").append(Message(role="tool", content="5"))
        reply = scripted_reply(state)
        assert reply.tool_call is None
        assert reply.content == "The answer is 5."

    def test_plain_answer_without_numbers(self):
        reply = scripted_reply(user("hello"))
        assert reply.tool_call is None


class TestAgentLoopWorkflow:
    """Integration tests for the agent loop."""

    def test_graph_structure(self):
        workflow = create_agent_loop_workflow()

        assert [n.name for n in workflow.nodes] == ["start", "chat", "tools"]
        assert workflow.entry_node.name == "start"
        assert len(workflow.edges) == 4
        assert "graph TD" in workflow.to_mermaid()

    @pytest.mark.asyncio
    async def test_tool_call_round_trip(self):
        """start -> chat -> tools -> chat -> END."""
        workflow = create_agent_loop_workflow()

        steps = [s async for s in Executor().steps(workflow, user("What is 2 plus 40?"))]

        assert [s.node for s in steps] == ["start", "chat", "tools", "chat", END]
        final = steps[-1].state
        assert [m.role for m in final.messages] == ["user", "assistant", "tool", "assistant"]
        assert final.messages[2].content == "42"
        assert final.last_message.content == "The answer is 42."

    @pytest.mark.asyncio
    async def test_direct_answer_skips_tools(self):
        workflow = create_agent_loop_workflow()

        states = await execute_graph(workflow, user("hello"))

        assert len(states) == 3  # start, chat, terminal
        assert not states[-1].has_tool_calls

    @pytest.mark.asyncio
    async def test_unknown_tool_is_reported_to_assistant(self):
        calls = []

        def respond(state):
            calls.append(state.last_message.role)
            if state.last_message.role == "user":
                return Message(role="assistant", tool_call=ToolCall(name="divide"))
            return Message(role="assistant", content=state.last_message.content)

        workflow = create_agent_loop_workflow(respond)
        states = await execute_graph(workflow, user("divide 1 by 0"))

        assert calls == ["user", "tool"]
        assert states[-1].last_message.content == "Error: unknown tool 'divide'"

    @pytest.mark.asyncio
    async def test_async_responder(self):
        async def respond(state):
            return Message(role="assistant", content="done")

        workflow = create_agent_loop_workflow(respond)
        states = await execute_graph(workflow, user("anything"))

        assert states[-1].last_message.content == "done"

    @pytest.mark.asyncio
    async def test_input_state_not_mutated(self):
        workflow = create_agent_loop_workflow()
        initial = user("What is 1 plus 1?")

        await execute_graph(workflow, initial)

        assert len(initial.messages) == 1

    @pytest.mark.asyncio
    async def test_register_in_storage(self):
        storage = GraphStorage()

        workflow = await register_agent_loop_workflow(storage)

        stored = await storage.get(AGENT_LOOP_GRAPH_ID)
        assert stored.graph is workflow
        assert len(storage) == 1

    @pytest.mark.asyncio
    async def test_two_chat_nodes_with_different_responders(self):
        """Nodes sharing a name are distinct when wired by object."""
        def draft(state):
            return Message(role="assistant", content="draft")

        def review(state):
            return Message(role="assistant", content=f"reviewed {state.last_message.content}")

        first, second = ChatNode(draft), ChatNode(review)
        workflow = (
            GraphBuilder(state_type=AgentState, name="Draft and Review")
            .add_node(first)
            .add_node(second)
            .connect(first).to(second)
            .connect(second).to_terminal()
            .start_from(first)
            .build()
        )

        states = await execute_graph(workflow, user("write something"))

        assert [m.content for m in states[-1].messages[1:]] == ["draft", "reviewed draft"]
