"""
Graph API Routes.

Endpoints for listing, inspecting and running catalogued graphs.
"""

from typing import Any, Dict
from fastapi import APIRouter, HTTPException
from fastapi.encoders import jsonable_encoder
from pydantic import ValidationError
from uuid import uuid4
import logging

from agentgraph.api.schemas import (
    ErrorResponse,
    ExecutionStatus,
    ExecutionStepModel,
    GraphInfoResponse,
    GraphListResponse,
    GraphRunRequest,
    GraphRunResponse,
    GraphSummary,
)
from agentgraph.engine.errors import RoutingError
from agentgraph.engine.executor import Executor
from agentgraph.engine.graph import Graph
from agentgraph.storage.memory import StoredGraph, graph_storage


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/graph", tags=["Graph"])


# ============================================================
# Helpers
# ============================================================

async def get_stored_graph(graph_id: str) -> StoredGraph:
    """Get a catalogued graph or raise 404."""
    stored = await graph_storage.get(graph_id)
    if stored is None:
        raise HTTPException(status_code=404, detail=f"Graph '{graph_id}' not found")
    return stored


def load_initial_state(graph: Graph, data: Dict[str, Any]) -> Any:
    """
    Turn request JSON into an instance of the graph's state type.

    Raises:
        ValueError: if the data does not fit the state type
    """
    state_type = graph.state_type
    if state_type is object:
        return data
    if hasattr(state_type, "model_validate"):
        try:
            return state_type.model_validate(data)
        except ValidationError as e:
            raise ValueError(str(e)) from e
    try:
        return state_type(**data)
    except TypeError as e:
        raise ValueError(f"Invalid initial state for {state_type.__name__}: {e}") from e


def serialize_state(state: Any) -> Any:
    """Convert a state to JSON-compatible data."""
    if hasattr(state, "to_dict"):
        return state.to_dict()
    return jsonable_encoder(state)


# ============================================================
# Catalog Endpoints
# ============================================================

@router.get("/", response_model=GraphListResponse)
async def list_graphs() -> GraphListResponse:
    """List all catalogued graphs."""
    graphs = await graph_storage.list_all()
    return GraphListResponse(
        graphs=[GraphSummary(**stored.to_dict()) for stored in graphs],
        total=len(graphs),
    )


@router.get(
    "/{graph_id}",
    response_model=GraphInfoResponse,
    responses={404: {"model": ErrorResponse, "description": "Graph not found"}},
)
async def get_graph(graph_id: str) -> GraphInfoResponse:
    """Get a graph's structure and its Mermaid diagram."""
    stored = await get_stored_graph(graph_id)
    info = stored.graph.to_dict()
    info["graph_id"] = stored.graph_id
    return GraphInfoResponse(**info, mermaid_diagram=stored.graph.to_mermaid())


# ============================================================
# Execution Endpoints
# ============================================================

@router.post(
    "/{graph_id}/run",
    response_model=GraphRunResponse,
    responses={
        404: {"model": ErrorResponse, "description": "Graph not found"},
        422: {"model": ErrorResponse, "description": "Invalid initial state"},
    },
)
async def run_graph(graph_id: str, request: GraphRunRequest) -> GraphRunResponse:
    """
    Run a graph to completion and return every emitted state.

    A run that stops on an unmatched transition or a node error is reported
    with status ``failed``; the states emitted before the failure are kept.
    """
    stored = await get_stored_graph(graph_id)
    try:
        initial_state = load_initial_state(stored.graph, request.initial_state)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    run_id = str(uuid4())
    steps = []
    status = ExecutionStatus.COMPLETED
    error = None
    failed_node = None

    logger.info(f"Starting run {run_id} of graph '{graph_id}'")
    try:
        async for step in Executor().steps(stored.graph, initial_state):
            steps.append(step)
    except RoutingError as e:
        status, error, failed_node = ExecutionStatus.FAILED, str(e), e.node_name
    except Exception as e:
        logger.exception(f"Run {run_id} failed: {e}")
        status, error = ExecutionStatus.FAILED, f"{type(e).__name__}: {e}"

    states = [serialize_state(step.state) for step in steps]
    return GraphRunResponse(
        run_id=run_id,
        graph_id=graph_id,
        status=status,
        states=states,
        steps=[
            ExecutionStepModel(
                step=step.step,
                node=step.node,
                next_node=step.next_node,
                duration_ms=step.duration_ms,
                state=state,
            )
            for step, state in zip(steps, states)
        ],
        error=error,
        failed_node=failed_node,
    )
