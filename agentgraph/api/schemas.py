"""
Pydantic Schemas for API Request/Response Models.

These schemas define the structure of data flowing through the API,
providing automatic validation and documentation.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from enum import Enum


# ============================================================
# Enums
# ============================================================

class ExecutionStatus(str, Enum):
    """Status of a finished run."""
    COMPLETED = "completed"
    FAILED = "failed"


# ============================================================
# Graph Schemas
# ============================================================

class GraphSummary(BaseModel):
    """Catalog entry of a graph."""
    graph_id: str
    name: str
    description: str = ""
    node_count: int
    edge_count: int
    created_at: str


class GraphListResponse(BaseModel):
    """Response listing all catalogued graphs."""
    graphs: List[GraphSummary]
    total: int


class GraphInfoResponse(BaseModel):
    """Detailed description of a graph."""
    graph_id: str
    name: str
    description: str = ""
    state_type: str
    nodes: List[Dict[str, Any]]
    edges: List[Dict[str, Any]]
    entry_point: str
    mermaid_diagram: str = Field(..., description="Mermaid flowchart of the graph")


# ============================================================
# Execution Schemas
# ============================================================

class GraphRunRequest(BaseModel):
    """Request to run a graph."""
    initial_state: Dict[str, Any] = Field(
        default_factory=dict,
        description="Initial state, validated against the graph's state type",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "initial_state": {
                    "messages": [{"role": "user", "content": "What is 2 plus 40?"}]
                }
            }
        }
    )


class ExecutionStepModel(BaseModel):
    """One emitted state of a run."""
    step: int
    node: str
    next_node: Optional[str] = None
    duration_ms: float
    state: Any = None


class GraphRunResponse(BaseModel):
    """Result of a run."""
    run_id: str
    graph_id: str
    status: ExecutionStatus
    states: List[Any] = Field(default_factory=list)
    steps: List[ExecutionStepModel] = Field(default_factory=list)
    error: Optional[str] = None
    failed_node: Optional[str] = None


class ErrorResponse(BaseModel):
    """Error response."""
    error: str
    detail: Optional[str] = None
