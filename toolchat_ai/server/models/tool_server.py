"""
Database models for tool server registrations.

Users register tool servers of two kinds:

- ``stdio``: a local process started with ``command`` / ``args`` / ``env``.
- ``http``: a remote MCP endpoint at ``url`` with optional ``headers``.

``to_config`` converts a row into the agent core's ``ToolServerConfig``.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional

from sqlmodel import JSON, Column, DateTime, Field, SQLModel

from toolchat_ai.agent_core.tools import (
    LocalProcessServerConfig,
    RemoteHttpServerConfig,
    ToolServerConfig,
)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ToolServerType(str, Enum):
    """Transport kind of a registered tool server."""

    stdio = "stdio"
    http = "http"


class ToolServerBase(SQLModel):
    """Base fields for a tool server."""

    name: str = Field(min_length=1, max_length=128, description="Unique server name, used as tool namespace")
    type: ToolServerType = Field(description="stdio (local process) or http (remote)")
    command: Optional[str] = Field(default=None, description="Executable for stdio servers")
    args: Optional[List[str]] = Field(default=None, sa_column=Column(JSON), description="Arguments for stdio servers")
    env: Optional[Dict[str, str]] = Field(
        default=None, sa_column=Column(JSON), description="Environment for stdio servers"
    )
    url: Optional[str] = Field(default=None, description="Endpoint for http servers")
    headers: Optional[Dict[str, str]] = Field(
        default=None, sa_column=Column(JSON), description="Request headers for http servers"
    )
    enabled: bool = Field(default=True, description="Whether the server takes part in tool resolution")


class ToolServer(ToolServerBase, table=True):
    """Persistent tool server registration."""

    __tablename__ = "tool_servers"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(min_length=1, max_length=128, unique=True, index=True)
    created_at: datetime = Field(
        default_factory=_utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="Creation timestamp",
    )
    updated_at: datetime = Field(
        default_factory=_utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="Last update timestamp",
    )

    def to_config(self) -> ToolServerConfig:
        if self.type == ToolServerType.stdio:
            return LocalProcessServerConfig(
                command=self.command or "",
                args=list(self.args or []),
                env=dict(self.env or {}),
                enabled=self.enabled,
            )
        return RemoteHttpServerConfig(url=self.url or "", headers=dict(self.headers or {}), enabled=self.enabled)


def kind_error(type_: ToolServerType, command: Optional[str], url: Optional[str]) -> Optional[str]:
    """Return why a registration is incomplete for its type, or None."""
    if type_ == ToolServerType.stdio and not command:
        return "Command is required for stdio servers"
    if type_ == ToolServerType.http and not url:
        return "URL is required for http servers"
    return None


class ToolServerRead(ToolServerBase):
    """Schema for reading a tool server."""

    id: int
    created_at: datetime
    updated_at: datetime


class ToolServerCreate(ToolServerBase):
    """Schema for registering a tool server."""


class ToolServerUpdate(SQLModel):
    """Schema for updating a tool server."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=128)
    type: Optional[ToolServerType] = None
    command: Optional[str] = None
    args: Optional[List[str]] = None
    env: Optional[Dict[str, str]] = None
    url: Optional[str] = None
    headers: Optional[Dict[str, str]] = None
    enabled: Optional[bool] = None
