#!/usr/bin/env python3
"""
Simple run script for the AgentGraph API.

Usage:
    python run.py

Or with custom settings:
    HOST=127.0.0.1 PORT=8080 python run.py
"""

import uvicorn

from agentgraph.config import settings


def main():
    """Run the FastAPI application."""
    print(f"""
AgentGraph - graph execution engine for agent workflows

  Server:    http://{settings.HOST}:{settings.PORT}
  API Docs:  http://{settings.HOST}:{settings.PORT}/docs
  Demo workflow ID: agent-loop-demo
    """)

    uvicorn.run(
        "agentgraph.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.RELOAD,
        log_level=settings.LOG_LEVEL.lower(),
    )


if __name__ == "__main__":
    main()
