from __future__ import annotations

"""Convenience factories for wiring the agent core.

``build_chat_service`` assembles a ``ChatAgentService`` from an explicit
``AgentRuntimeConfig`` and the collaborators chosen by the process bootstrap.
Nothing here is global: the caller owns the returned service and its
lifecycle.
"""

from typing import Dict, Optional, Sequence

from ..mcp_client import McpToolServerClient
from .model import ChatModelFactory
from .repos import CheckpointStore, InMemoryCheckpointStore
from .service import AgentRuntimeConfig, ChatAgentService, ChatAgentServiceDeps
from .tools import StaticTool, StaticToolServerSource, ToolCatalog, ToolServerClient, ToolServerSource


def build_tool_catalog(
    *,
    config: AgentRuntimeConfig,
    static_tools: Sequence[StaticTool] = (),
    server_source: Optional[ToolServerSource] = None,
    client: Optional[ToolServerClient] = None,
) -> ToolCatalog:
    """Build a ``ToolCatalog`` that reaches tool servers through MCP by default."""
    return ToolCatalog(
        static_tools=list(static_tools),
        server_source=server_source or StaticToolServerSource(),
        client=client or McpToolServerClient(),
        timeout_seconds=config.tool_timeout_seconds,
        discovery_timeout_seconds=config.tool_discovery_timeout_seconds,
    )


def build_chat_service(
    config: AgentRuntimeConfig,
    *,
    checkpoints: Optional[CheckpointStore] = None,
    models: Optional[ChatModelFactory] = None,
    api_keys: Optional[Dict[str, str]] = None,
    static_tools: Sequence[StaticTool] = (),
    server_source: Optional[ToolServerSource] = None,
    tool_client: Optional[ToolServerClient] = None,
) -> ChatAgentService:
    """Construct a ``ChatAgentService`` from config and dependencies.

    Defaults: an in-memory checkpoint store, a pydantic-ai model factory for
    ``config.default_model``, and MCP for tool servers.
    """
    deps = ChatAgentServiceDeps(
        checkpoints=checkpoints or InMemoryCheckpointStore(),
        models=models or ChatModelFactory(default_model=config.default_model, api_keys=dict(api_keys or {})),
        tools=build_tool_catalog(
            config=config,
            static_tools=static_tools,
            server_source=server_source,
            client=tool_client,
        ),
        config=config,
    )
    return ChatAgentService(deps=deps)
