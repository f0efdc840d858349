"""
API endpoints for tool server registrations and discovered tools.

Registered servers are read by the agent at the start of every run; enabled
ones contribute their tools under the ``<server>__<tool>`` namespace.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException, Response, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from toolchat_ai.agent_core.tools import split_namespaced
from toolchat_ai.core.logging_config import get_logger
from toolchat_ai.server.models.tool_server import (
    ToolServer,
    ToolServerCreate,
    ToolServerRead,
    ToolServerType,
    ToolServerUpdate,
    kind_error,
)
from toolchat_ai.server.services.deps import ChatServiceDep, SessionDep

logger = get_logger(__name__)
router = APIRouter(tags=["tool-servers"])

DEFAULT_GROUP = "default"


class ToolInfo(BaseModel):
    name: str
    description: Optional[str] = None


class ServerTools(BaseModel):
    tools: List[ToolInfo] = Field(default_factory=list)
    count: int = 0


class ToolsData(BaseModel):
    """Discovered tools grouped by server name."""

    model_config = ConfigDict(populate_by_name=True)

    server_groups: Dict[str, ServerTools] = Field(default_factory=dict, alias="serverGroups")
    total_count: int = Field(default=0, alias="totalCount")
    errors: List[str] = Field(default_factory=list)


def _strip_fields_for_type(server: ToolServer) -> None:
    if server.type == ToolServerType.stdio:
        server.url = None
        server.headers = None
    else:
        server.command = None
        server.args = None
        server.env = None


@router.get(
    "/tools",
    response_model=ToolsData,
    response_model_by_alias=True,
    summary="List Discovered Tools",
    description="Resolve the tools of all enabled servers and group them by server.",
)
async def list_tools(chat: ChatServiceDep) -> ToolsData:
    """
    List tools as the agent would see them at the start of a run.

    Tool names are split on the ``__`` namespace separator; tools without a
    server prefix are listed under ``default``. Servers that could not be
    reached are reported in ``errors`` and contribute no tools.
    """
    registry = chat.deps.tools.registry()
    specs = await registry.resolve_tools()

    data = ToolsData(total_count=len(specs), errors=[str(w) for w in registry.warnings])
    for spec in specs:
        server_name, tool_name = split_namespaced(spec.name)
        group = data.server_groups.setdefault(server_name or DEFAULT_GROUP, ServerTools())
        group.tools.append(ToolInfo(name=tool_name, description=spec.description or None))
        group.count += 1
    return data


@router.get(
    "",
    response_model=list[ToolServerRead],
    summary="List Tool Servers",
    description="Retrieve all registered tool servers, newest first.",
)
async def list_tool_servers(session: SessionDep) -> list[ToolServerRead]:
    res = await session.execute(select(ToolServer).order_by(ToolServer.created_at.desc()))
    return [ToolServerRead.model_validate(s) for s in res.scalars().all()]


@router.post(
    "",
    response_model=ToolServerRead,
    status_code=status.HTTP_201_CREATED,
    summary="Register Tool Server",
    responses={
        400: {"description": "Missing command (stdio) or url (http)"},
        409: {"description": "Server name already exists"},
    },
)
async def create_tool_server(data: ToolServerCreate, session: SessionDep) -> ToolServerRead:
    """
    Register a tool server.

    - **stdio** servers need a ``command`` (plus optional ``args`` / ``env``).
    - **http** servers need a ``url`` (plus optional ``headers``).
    """
    problem = kind_error(data.type, data.command, data.url)
    if problem:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=problem)

    server = ToolServer.model_validate(data)
    _strip_fields_for_type(server)
    session.add(server)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Server name already exists")
    await session.refresh(server)
    logger.info(f"Registered tool server {server.name} ({server.type.value})")
    return ToolServerRead.model_validate(server)


@router.get(
    "/{server_id}",
    response_model=ToolServerRead,
    summary="Get Tool Server",
    responses={404: {"description": "Server not found"}},
)
async def get_tool_server(server_id: int, session: SessionDep) -> ToolServerRead:
    server = await session.get(ToolServer, server_id)
    if server is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Server not found")
    return ToolServerRead.model_validate(server)


@router.patch(
    "/{server_id}",
    response_model=ToolServerRead,
    summary="Update Tool Server",
    responses={
        400: {"description": "Update leaves the server without command (stdio) or url (http)"},
        404: {"description": "Server not found"},
        409: {"description": "Server name already exists"},
    },
)
async def update_tool_server(server_id: int, data: ToolServerUpdate, session: SessionDep) -> ToolServerRead:
    """
    Update a tool server; only supplied fields change.

    Changing ``type`` clears the fields that belong to the other type.
    """
    server = await session.get(ToolServer, server_id)
    if server is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Server not found")

    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(server, key, value)
    problem = kind_error(server.type, server.command, server.url)
    if problem:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=problem)
    _strip_fields_for_type(server)
    server.updated_at = datetime.now(timezone.utc)

    session.add(server)
    try:
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Server name already exists")
    await session.refresh(server)
    return ToolServerRead.model_validate(server)


@router.delete(
    "/{server_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Tool Server",
    responses={404: {"description": "Server not found"}},
)
async def delete_tool_server(server_id: int, session: SessionDep) -> Response:
    server = await session.get(ToolServer, server_id)
    if server is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Server not found")
    await session.delete(server)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
