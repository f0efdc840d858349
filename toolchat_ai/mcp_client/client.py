"""MCP client used by the tool registry for discovery and execution.

A short-lived ``ClientSession`` is opened per call, which keeps the client
stateless and matches the per-run snapshot semantics of the registry: nothing
is held open across runs or across a suspended approval.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from mcp import types
from pydantic_core import to_json

from toolchat_ai.agent_core.schemas import ToolSpec
from toolchat_ai.agent_core.tools.servers import ToolServerConfig

from .errors import ToolInvocationError
from .transport import AsyncMCPTransport, KindRoutingMCPTransport

logger = logging.getLogger(__name__)


def content_to_text(blocks: List[Any]) -> str:
    """Join MCP content blocks into plain text.

    Text blocks contribute their text; other block types (images, resources)
    are serialized to JSON so the model still sees something meaningful.
    """
    parts: List[str] = []
    for block in blocks or []:
        if isinstance(block, types.TextContent):
            parts.append(block.text)
        elif hasattr(block, "model_dump_json"):
            parts.append(block.model_dump_json(exclude_none=True))
        else:
            parts.append(str(block))
    return "\n".join(parts)


class McpToolServerClient:
    """Lists and calls tools on local-process and remote-http MCP servers."""

    def __init__(self, transport: Optional[AsyncMCPTransport] = None) -> None:
        self._transport: AsyncMCPTransport = transport or KindRoutingMCPTransport()

    async def list_tools(self, server_name: str, config: ToolServerConfig) -> List[ToolSpec]:
        specs: List[ToolSpec] = []
        async with self._transport.session(server_name, config) as session:
            logger.debug(f"Listing tools on MCP server {server_name} ({config.kind})")
            resp = await session.list_tools()
            for tool in resp.tools or []:
                if not tool.name:
                    continue
                schema: Dict[str, Any] = tool.inputSchema if isinstance(tool.inputSchema, dict) else {}
                specs.append(
                    ToolSpec(
                        name=tool.name,
                        description=tool.description or "",
                        parameters=schema or {"type": "object", "properties": {}},
                    )
                )
        return specs

    async def call_tool(
        self,
        server_name: str,
        config: ToolServerConfig,
        tool_name: str,
        args: Dict[str, Any],
    ) -> str:
        async with self._transport.session(server_name, config) as session:
            logger.debug(
                f"Calling MCP tool {tool_name} on {server_name} with arg keys {list((args or {}).keys())}"
            )
            result = await session.call_tool(name=tool_name, arguments=args or {})

        text = content_to_text(result.content)
        if not text and result.structuredContent is not None:
            text = to_json(result.structuredContent).decode()
        if result.isError:
            raise ToolInvocationError(server_name, tool_name, text or "server reported an error")
        return text
