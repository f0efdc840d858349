"""
Service Dependencies.

Provides the chat service and database session dependencies for API endpoints.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from toolchat_ai.agent_core.service import ChatAgentService
from toolchat_ai.server.core.database import get_session
from toolchat_ai.server.services.chat import get_chat_service

ChatServiceDep = Annotated[ChatAgentService, Depends(get_chat_service)]
SessionDep = Annotated[AsyncSession, Depends(get_session)]
