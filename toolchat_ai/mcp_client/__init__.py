"""MCP client for tool servers.

``McpToolServerClient`` discovers and calls tools on configured tool servers
using the official ``mcp`` SDK: ``stdio_client`` for local-process servers and
``streamablehttp_client`` for remote-http servers.
"""

from .client import McpToolServerClient, content_to_text
from .errors import McpClientError, ToolInvocationError, UnsupportedServerKindError
from .transport import (
    AsyncMCPTransport,
    KindRoutingMCPTransport,
    StdioMCPTransport,
    StreamableHttpMCPTransport,
)

__all__ = [
    "AsyncMCPTransport",
    "KindRoutingMCPTransport",
    "McpClientError",
    "McpToolServerClient",
    "StdioMCPTransport",
    "StreamableHttpMCPTransport",
    "ToolInvocationError",
    "UnsupportedServerKindError",
    "content_to_text",
]
