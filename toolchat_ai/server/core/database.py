"""
Database wiring for the HTTP server.

One async engine serves thread metadata, tool-server registrations and the
agent checkpoints, so a single ``DATABASE_URL`` configures all persistence.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from toolchat_ai.agent_core.repos.models import Base
from toolchat_ai.agent_core.repos.sql import create_engine, create_sessionmaker
from toolchat_ai.server.core.config import settings

# Register the server tables on SQLModel.metadata
from toolchat_ai.server.models import thread, tool_server  # noqa: F401

engine = create_engine(settings.database_url)
async_session_maker = create_sessionmaker(engine)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a request-scoped session."""
    async with async_session_maker() as session:
        yield session


async def init_db() -> None:
    """Create the thread, tool-server and checkpoint tables when missing."""
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
        await conn.run_sync(Base.metadata.create_all)
