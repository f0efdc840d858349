"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS),
and includes all API routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from toolchat_ai import __version__
from toolchat_ai.core.logging_config import get_logger, setup_logging
from toolchat_ai.core.monitoring import initialize_logfire

from .api.v1 import agent, health, threads, tool_servers
from .core import constant
from .core.config import settings
from .core.database import init_db
from .exception_handlers import setup_exception_handlers
from .services.chat import get_chat_service, reset_chat_service

setup_logging(log_level=settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates the database tables and the chat service on startup so the first
    request does not pay for it, and drops the service on shutdown.
    """
    try:
        logger.info("Starting up ToolChat-AI Server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    await get_chat_service()

    yield

    logger.info("Shutting down ToolChat-AI Server...")
    reset_chat_service()


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    ToolChat-AI Server API

    Chat with an LLM agent that can call tools, including tools from registered
    MCP servers. Tool calls wait for human approval and runs resume from
    durable checkpoints.
    """,
    version=__version__,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)

setup_exception_handlers(app)
initialize_logfire(app)

app.include_router(health.router, tags=["health"])
app.include_router(agent.router, prefix=f"{constant.API_V1_STR}/agent", tags=["agent"])
app.include_router(threads.router, prefix=f"{constant.API_V1_STR}/agent/threads")
app.include_router(tool_servers.router, prefix=f"{constant.API_V1_STR}/tool-servers")


def run() -> None:
    """Run the server with uvicorn using the configured host and port."""
    import uvicorn

    uvicorn.run(app, host=settings.server_host, port=settings.server_port)
