"""
Chat service bootstrap.

The server owns exactly one ``ChatAgentService``. It is created lazily on
first use behind an ``asyncio.Lock`` so concurrent first requests cannot build
two instances, and it can be created eagerly from the application lifespan.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from toolchat_ai.agent_core.factory import build_chat_service
from toolchat_ai.agent_core.repos import SqlCheckpointStore
from toolchat_ai.agent_core.service import ChatAgentService
from toolchat_ai.core.logging_config import get_logger
from toolchat_ai.server.core.config import settings
from toolchat_ai.server.core.database import async_session_maker
from toolchat_ai.server.services.tool_servers import SqlToolServerSource

logger = get_logger(__name__)

_chat_service: Optional[ChatAgentService] = None
_init_lock = asyncio.Lock()


def create_chat_service() -> ChatAgentService:
    """Wire the chat service from settings and the server database."""
    config = settings.runtime_config()
    logger.info(
        f"Creating chat service: default_model={config.default_model}, "
        f"tool_timeout={config.tool_timeout_seconds}s, max_steps={config.max_steps}"
    )
    return build_chat_service(
        config,
        checkpoints=SqlCheckpointStore(session_factory=async_session_maker),
        api_keys=settings.api_keys,
        server_source=SqlToolServerSource(session_factory=async_session_maker),
    )


async def get_chat_service() -> ChatAgentService:
    global _chat_service
    if _chat_service is None:
        async with _init_lock:
            if _chat_service is None:
                _chat_service = create_chat_service()
    return _chat_service


def reset_chat_service() -> None:
    """Drop the cached instance (application shutdown and tests)."""
    global _chat_service
    _chat_service = None
