"""
HTTP Server
===========

Exposes the agent over HTTP (FastAPI app, served with uvicorn).
"""

import uvicorn

from ollama_agent.server.app import create_app
from ollama_agent.utils.config import ServerConfig
from ollama_agent.utils.logger import Logger

logger = Logger("Server")


async def serve(app, config: ServerConfig) -> None:
    """
    Serve an app until interrupted.

    Args:
        app: The FastAPI app from create_app()
        config: Bind address and access-log settings
    """
    server = uvicorn.Server(uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        access_log=config.access_log,
        log_level="warning",
    ))
    logger.info(f"MCP server is running on {config.host}:{config.port}")
    await server.serve()


__all__ = ["create_app", "serve"]
