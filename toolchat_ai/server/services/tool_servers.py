"""Tool server source backed by the ``tool_servers`` table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import select

from toolchat_ai.agent_core.tools import ToolServerConfig, ToolServerSource
from toolchat_ai.server.models.tool_server import ToolServer


@dataclass(frozen=True)
class SqlToolServerSource(ToolServerSource):
    """Reads every registration on each call, so changes apply to the next run."""

    session_factory: async_sessionmaker[AsyncSession]

    async def load(self) -> Dict[str, ToolServerConfig]:
        async with self.session_factory() as s:
            res = await s.execute(select(ToolServer).order_by(ToolServer.name))
            return {row.name: row.to_config() for row in res.scalars().all()}
