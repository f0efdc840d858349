"""Error types for the MCP client package."""

from __future__ import annotations


class McpClientError(Exception):
    """Base error for all MCP client exceptions."""


class UnsupportedServerKindError(McpClientError):
    """Raised when a tool server config has a kind no transport can open."""

    def __init__(self, server_name: str, kind: str) -> None:
        super().__init__(f"No MCP transport for server '{server_name}' of kind '{kind}'")


class ToolInvocationError(McpClientError):
    """Raised when a server reports a tool call as failed."""

    def __init__(self, server_name: str, tool_name: str, message: str) -> None:
        super().__init__(f"Tool invocation failed for '{tool_name}' on '{server_name}': {message}")
        self.server_name = server_name
        self.tool_name = tool_name
