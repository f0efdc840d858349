from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, Protocol

from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client
from mcp.client.streamable_http import streamablehttp_client

from toolchat_ai.agent_core.tools.servers import (
    LocalProcessServerConfig,
    RemoteHttpServerConfig,
    ToolServerConfig,
)

from .errors import UnsupportedServerKindError


class AsyncMCPTransport(Protocol):
    """Protocol for opening MCP ClientSession connections asynchronously.

    Implementations return an async context manager via ``session(name, config)``
    that yields an initialized ``ClientSession``.
    """

    def session(self, name: str, config: ToolServerConfig):  # -> AsyncContextManager[ClientSession]
        ...


class StdioMCPTransport:
    """Spawns a local-process server and talks MCP over its stdin/stdout."""

    def session(self, name: str, config: ToolServerConfig):
        if not isinstance(config, LocalProcessServerConfig):
            raise UnsupportedServerKindError(name, config.kind)

        params = StdioServerParameters(command=config.command, args=list(config.args), env=dict(config.env) or None)

        @asynccontextmanager
        async def _cm() -> AsyncIterator[ClientSession]:
            async with stdio_client(params) as (read_stream, write_stream):
                async with ClientSession(read_stream, write_stream) as session:
                    await session.initialize()
                    yield session

        return _cm()


class StreamableHttpMCPTransport:
    """MCP transport using the streamable HTTP client."""

    def session(self, name: str, config: ToolServerConfig):
        if not isinstance(config, RemoteHttpServerConfig):
            raise UnsupportedServerKindError(name, config.kind)

        @asynccontextmanager
        async def _cm() -> AsyncIterator[ClientSession]:
            async with streamablehttp_client(config.url, headers=dict(config.headers) or None) as (
                read_stream,
                write_stream,
                _get_session_id,
            ):
                async with ClientSession(read_stream, write_stream) as session:
                    await session.initialize()
                    yield session

        return _cm()


class KindRoutingMCPTransport:
    """Chooses the stdio or streamable HTTP transport from the config kind."""

    def __init__(
        self,
        stdio: AsyncMCPTransport | None = None,
        http: AsyncMCPTransport | None = None,
    ) -> None:
        self._stdio = stdio or StdioMCPTransport()
        self._http = http or StreamableHttpMCPTransport()

    def session(self, name: str, config: ToolServerConfig):
        if config.kind == "local-process":
            return self._stdio.session(name, config)
        if config.kind == "remote-http":
            return self._http.session(name, config)
        raise UnsupportedServerKindError(name, config.kind)
