"""
Async Graph Executor.

The executor walks a graph from its entry point, executing one node at a
time and routing each new state through the node's outgoing edges, until the
terminal marker is reached.

States are produced lazily through an async generator: the next node runs
only when the consumer asks for the next element, and closing the generator
stops the run. A run is strictly sequential; awaiting a node's ``execute``
is its only suspension point. Edge predicates are evaluated synchronously
once that await has completed.

Edge evaluation semantics:
- conditional edges are evaluated in registration order
- the first edge whose predicate holds for the new state is taken
- if no conditional edge matches, the otherwise edge is taken
- if no edge matches at all, the run fails with ``UnmatchedTransitionError``
"""

from typing import Any, AsyncIterator, List, Optional
from dataclasses import dataclass
import logging
import time

from agentgraph.engine.edge import NodeId
from agentgraph.engine.errors import UnmatchedTransitionError
from agentgraph.engine.graph import TERMINAL_ID, Graph
from agentgraph.engine.terminal import END


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionStep:
    """One emitted element of a run."""
    step: int
    node: str
    node_id: NodeId
    state: Any
    next_node: Optional[str] = None
    duration_ms: float = 0.0


class Executor:
    """
    Runs graphs.

    The executor holds no per-run state, so one instance can drive any
    number of concurrent runs over the same graph.

    Usage:
        executor = Executor()
        async for state in executor.run(graph, CounterState(value=0)):
            print(state)
    """

    async def steps(self, graph: Graph, initial_state: Any) -> AsyncIterator[ExecutionStep]:
        """
        Run ``graph`` from ``initial_state``, yielding one step per emitted state.

        The final step is produced at the terminal and repeats the last
        state. Node errors propagate unchanged.

        Raises:
            TypeError: if ``initial_state`` is not an instance of the graph's state type
            UnmatchedTransitionError: if no edge routes a node's output
        """
        if not isinstance(initial_state, graph.state_type):
            raise TypeError(
                f"Graph '{graph.name}' runs on {graph.state_type.__name__}, "
                f"got {type(initial_state).__name__}"
            )

        current = graph.entry_point
        state = initial_state
        step = 0

        while True:
            step += 1

            if graph.is_terminal_id(current):
                logger.info(f"Reached terminal of graph '{graph.name}' after {step - 1} node(s)")
                yield ExecutionStep(step=step, node=END, node_id=TERMINAL_ID, state=state)
                return

            node = graph.node(current)
            logger.info(f"Executing node: {node.name} (step {step})")
            started = time.perf_counter()
            new_state = await node.execute(state)
            duration_ms = (time.perf_counter() - started) * 1000

            next_id = self.resolve_next(graph, current, new_state)
            if next_id is None:
                logger.warning(f"No edge matched for node '{node.name}' in graph '{graph.name}'")
                raise UnmatchedTransitionError(current, node.name)

            next_name = graph.describe(next_id)
            logger.debug(f"Route: {node.name} -> {next_name}")
            yield ExecutionStep(
                step=step,
                node=node.name,
                node_id=current,
                state=new_state,
                next_node=next_name,
                duration_ms=duration_ms,
            )
            current, state = next_id, new_state

    async def run(self, graph: Graph, initial_state: Any) -> AsyncIterator[Any]:
        """
        Run ``graph`` from ``initial_state``, yielding the state after each node.

        For a run that reaches the terminal, the last element is the state
        emitted at the terminal (equal to the previous one).
        """
        steps = self.steps(graph, initial_state)
        try:
            async for step in steps:
                yield step.state
        finally:
            await steps.aclose()

    @staticmethod
    def resolve_next(graph: Graph, node_id: NodeId, state: Any) -> Optional[NodeId]:
        """
        Pick the next node for ``state`` produced by ``node_id``.

        Returns:
            Id of the next node, or None if no edge matches
        """
        fallback = None
        for edge in graph.edges_from(node_id):
            if edge.is_otherwise:
                fallback = edge
                continue
            if edge.matches(state):
                return edge.target
        return fallback.target if fallback is not None else None


async def execute_graph(graph: Graph, initial_state: Any) -> List[Any]:
    """
    Convenience function collecting every state of a run.

    Args:
        graph: The graph to run
        initial_state: Initial state

    Returns:
        All emitted states, the terminal one included
    """
    return [state async for state in Executor().run(graph, initial_state)]
