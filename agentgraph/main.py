"""
AgentGraph - FastAPI Application Entry Point.

Serves the graph catalog over HTTP and streams runs over WebSocket.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from agentgraph.config import settings
from agentgraph.api.routes import graph, websocket
from agentgraph.storage.memory import graph_storage
from agentgraph.workflows.agent_loop import AGENT_LOOP_GRAPH_ID, register_agent_loop_workflow


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    await register_agent_loop_workflow(graph_storage)

    yield

    logger.info("Shutting down...")


app = FastAPI(
    title=settings.APP_NAME,
    description="""
## Graph Execution API

Run prebuilt workflow graphs and watch their states.

### Features
- **Nodes**: async steps that turn a state into a new state
- **Edges**: conditional transitions evaluated in registration order, with an otherwise fallback
- **Looping**: graphs may cycle until a condition routes to the terminal
- **Streaming**: WebSocket runs send every state as soon as it is produced

### Quick Start
1. List graphs: `GET /graph`
2. Inspect a graph: `GET /graph/{graph_id}`
3. Run it: `POST /graph/{graph_id}/run`
4. Stream it: `WS /ws/run/{graph_id}`

### Demo Workflow
A pre-registered agent loop is available with ID: `agent-loop-demo`
    """,
    version=settings.APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


app.include_router(graph.router)
app.include_router(websocket.router)


# ============================================================
# Root Endpoints
# ============================================================

@app.get("/", tags=["Root"])
async def root():
    """API root - returns basic info and links."""
    return {
        "name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "description": "A small graph execution engine for agent workflows",
        "docs": "/docs",
        "redoc": "/redoc",
        "endpoints": {
            "graphs": "/graph",
            "run": "/graph/{graph_id}/run",
            "websocket_run": "/ws/run/{graph_id}",
        },
        "demo_workflow": AGENT_LOOP_GRAPH_ID,
    }


@app.get("/health", tags=["Root"])
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "graphs_count": len(graph_storage),
    }


# ============================================================
# Error Handlers
# ============================================================

@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler for unhandled errors."""
    logger.exception(f"Unhandled error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal Server Error",
            "detail": str(exc) if settings.DEBUG else "An unexpected error occurred",
        },
    )
