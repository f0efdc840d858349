"""Tool registry adapter, static tools and tool server configuration."""

from .base import StaticTool, function_tool, result_to_text
from .registry import (
    NAMESPACE_SEPARATOR,
    SERVER_SOURCE_LABEL,
    ToolCatalog,
    ToolRegistry,
    ToolServerClient,
    namespaced,
    split_namespaced,
)
from .servers import (
    LocalProcessServerConfig,
    RemoteHttpServerConfig,
    StaticToolServerSource,
    ToolServerConfig,
    ToolServerSource,
    enabled_servers,
    parse_server_config,
)

__all__ = [
    "NAMESPACE_SEPARATOR",
    "SERVER_SOURCE_LABEL",
    "LocalProcessServerConfig",
    "RemoteHttpServerConfig",
    "StaticTool",
    "StaticToolServerSource",
    "ToolCatalog",
    "ToolRegistry",
    "ToolServerClient",
    "ToolServerConfig",
    "ToolServerSource",
    "enabled_servers",
    "function_tool",
    "namespaced",
    "parse_server_config",
    "result_to_text",
    "split_namespaced",
]
