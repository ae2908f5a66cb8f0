"""
WebSocket Routes for Real-time Execution Streaming.

States are sent as the run produces them: the next node only executes
after the previous step has been sent, and a client disconnect stops the run.
"""

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from uuid import uuid4
import logging

from agentgraph.api.routes.graph import load_initial_state, serialize_state
from agentgraph.engine.errors import RoutingError
from agentgraph.engine.executor import Executor
from agentgraph.storage.memory import graph_storage


logger = logging.getLogger(__name__)

router = APIRouter(tags=["WebSocket"])


@router.websocket("/ws/run/{graph_id}")
async def websocket_run(websocket: WebSocket, graph_id: str):
    """
    WebSocket endpoint for streaming a run.

    Message format (client -> server):
    ```json
    {"action": "start", "initial_state": {"messages": [...]}}
    ```

    Message format (server -> client):
    ```json
    {"type": "step", "step": 1, "node": "start", "next_node": "chat",
     "duration_ms": 0.4, "state": {...}}
    ```
    followed by ``{"type": "completed", ...}`` or ``{"type": "error", ...}``.
    """
    stored = await graph_storage.get(graph_id)
    if not stored:
        await websocket.close(code=4004, reason=f"Graph '{graph_id}' not found")
        return

    await websocket.accept()
    run_id = str(uuid4())

    try:
        data = await websocket.receive_json()
        if data.get("action") != "start":
            await websocket.send_json({"type": "error", "error": "Expected 'start' action"})
            return

        try:
            initial_state = load_initial_state(stored.graph, data.get("initial_state", {}))
        except ValueError as e:
            await websocket.send_json({"type": "error", "error": str(e)})
            return

        await websocket.send_json({"type": "started", "run_id": run_id, "graph_id": graph_id})

        step_count = 0
        try:
            async for step in Executor().steps(stored.graph, initial_state):
                step_count += 1
                await websocket.send_json({
                    "type": "step",
                    "step": step.step,
                    "node": step.node,
                    "next_node": step.next_node,
                    "duration_ms": step.duration_ms,
                    "state": serialize_state(step.state),
                })
        except RoutingError as e:
            await websocket.send_json({
                "type": "error",
                "run_id": run_id,
                "error": str(e),
                "failed_node": e.node_name,
            })
            return

        await websocket.send_json({
            "type": "completed",
            "run_id": run_id,
            "status": "completed",
            "steps": step_count,
        })

    except WebSocketDisconnect:
        logger.info(f"Client disconnected from run {run_id}")
    except Exception as e:
        logger.exception(f"WebSocket error: {e}")
        await websocket.send_json({"type": "error", "run_id": run_id, "error": str(e)})
    finally:
        logger.info(f"WebSocket closed for run: {run_id}")
