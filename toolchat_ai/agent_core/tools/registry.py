"""Tool registry adapter: per-run tool resolution and bounded execution.

``ToolCatalog`` holds the long-lived ingredients (static tools, the tool
server source, the server client and the default timeout). Each run asks it
for a fresh ``ToolRegistry``, which resolves a snapshot of tools once and
executes calls against that snapshot.

Server tools are exposed to the model as ``<server>__<tool>``; execution maps
the namespaced name back to the server and the original tool name.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple, Union

from ..errors import ToolDiscoveryPartialFailure, ToolExecutionError, ToolExecutionTimeout
from ..schemas import ToolCall, ToolResult, ToolSpec
from .base import StaticTool
from .servers import StaticToolServerSource, ToolServerConfig, ToolServerSource, enabled_servers

logger = logging.getLogger(__name__)

NAMESPACE_SEPARATOR = "__"
SERVER_SOURCE_LABEL = "<tool-server-source>"


def namespaced(server_name: str, tool_name: str) -> str:
    return f"{server_name}{NAMESPACE_SEPARATOR}{tool_name}"


def split_namespaced(name: str) -> Tuple[Optional[str], str]:
    """Split ``server__tool`` into ``(server, tool)``; plain names give ``(None, name)``."""
    server, sep, tool = name.partition(NAMESPACE_SEPARATOR)
    if not sep or not server or not tool:
        return None, name
    return server, tool


class ToolServerClient(Protocol):
    """Discovery and execution against one tool server."""

    async def list_tools(self, server_name: str, config: ToolServerConfig) -> List[ToolSpec]: ...

    async def call_tool(
        self,
        server_name: str,
        config: ToolServerConfig,
        tool_name: str,
        args: Dict[str, Any],
    ) -> str: ...


@dataclass(frozen=True)
class _ServerBinding:
    server_name: str
    config: ToolServerConfig
    tool_name: str


_Binding = Union[StaticTool, _ServerBinding]


class ToolRegistry:
    """Per-run snapshot of callable tools."""

    def __init__(
        self,
        *,
        static_tools: Sequence[StaticTool] = (),
        server_source: Optional[ToolServerSource] = None,
        client: Optional[ToolServerClient] = None,
        timeout_seconds: float = 30.0,
        discovery_timeout_seconds: float = 10.0,
        allow: Optional[Sequence[str]] = None,
    ) -> None:
        self._static_tools = list(static_tools)
        self._server_source = server_source
        self._client = client
        self._timeout = timeout_seconds
        self._discovery_timeout = discovery_timeout_seconds
        self._allow = set(allow) if allow is not None else None
        self._bindings: Optional[Dict[str, _Binding]] = None
        self._specs: List[ToolSpec] = []
        self.warnings: List[ToolDiscoveryPartialFailure] = []

    @property
    def resolved(self) -> bool:
        return self._bindings is not None

    async def resolve_tools(self) -> List[ToolSpec]:
        """Merge static and server tools; unreachable servers contribute nothing.

        Servers are listed concurrently, each bounded by the discovery timeout.
        Resolution happens once per registry; later calls return the snapshot.
        """
        if self._bindings is not None:
            return list(self._specs)

        bindings: Dict[str, _Binding] = {}
        specs: Dict[str, ToolSpec] = {}

        for tool in self._static_tools:
            bindings[tool.name] = tool
            specs[tool.name] = tool.spec

        servers = await self._load_servers()
        if servers and self._client is None:
            logger.warning(f"{len(servers)} tool servers configured but no tool server client is available")
            servers = {}

        listings = await asyncio.gather(*(self._list_server_tools(name, config) for name, config in servers.items()))
        for (server_name, config), server_specs in zip(servers.items(), listings):
            for spec in server_specs:
                full_name = namespaced(server_name, spec.name)
                if full_name in bindings:
                    logger.warning(f"Duplicate tool name {full_name}; keeping the first definition")
                    continue
                bindings[full_name] = _ServerBinding(server_name=server_name, config=config, tool_name=spec.name)
                specs[full_name] = spec.model_copy(update={"name": full_name})

        if self._allow is not None:
            bindings = {name: b for name, b in bindings.items() if name in self._allow}
            specs = {name: s for name, s in specs.items() if name in self._allow}

        self._bindings = bindings
        self._specs = list(specs.values())
        logger.debug(f"Resolved {len(self._specs)} tools ({len(self.warnings)} discovery failures)")
        return list(self._specs)

    async def _load_servers(self) -> Dict[str, ToolServerConfig]:
        if self._server_source is None:
            return {}
        try:
            loaded = await asyncio.wait_for(self._server_source.load(), timeout=self._discovery_timeout)
        except Exception as e:
            self._record_failure(SERVER_SOURCE_LABEL, e)
            return {}
        return enabled_servers(loaded)

    async def _list_server_tools(self, server_name: str, config: ToolServerConfig) -> List[ToolSpec]:
        try:
            return await asyncio.wait_for(
                self._client.list_tools(server_name, config),  # type: ignore[union-attr]
                timeout=self._discovery_timeout,
            )
        except Exception as e:
            self._record_failure(server_name, e)
            return []

    def _record_failure(self, server_name: str, error: Exception) -> None:
        if isinstance(error, asyncio.TimeoutError):
            message = f"no answer within {self._discovery_timeout:g}s"
        else:
            message = str(error) or type(error).__name__
        failure = ToolDiscoveryPartialFailure(server_name, message)
        failure.__cause__ = error
        self.warnings.append(failure)
        logger.warning(str(failure))

    async def execute(self, call: ToolCall, timeout_seconds: Optional[float] = None) -> ToolResult:
        """Run one tool call; failures and timeouts come back as error results."""
        if self._bindings is None:
            await self.resolve_tools()
        timeout = timeout_seconds if timeout_seconds is not None else self._timeout

        try:
            content = await asyncio.wait_for(self._dispatch(call), timeout=timeout)
        except asyncio.TimeoutError:
            error: ToolExecutionError = ToolExecutionTimeout(call.name, timeout)
            logger.warning(str(error))
            return ToolResult(tool_call_id=call.id, name=call.name, content=f"Error: {error}", ok=False)
        except Exception as e:
            error = e if isinstance(e, ToolExecutionError) else ToolExecutionError(call.name, str(e))
            logger.warning(str(error))
            return ToolResult(tool_call_id=call.id, name=call.name, content=f"Error: {error}", ok=False)

        return ToolResult(tool_call_id=call.id, name=call.name, content=content)

    async def _dispatch(self, call: ToolCall) -> str:
        binding = (self._bindings or {}).get(call.name)
        if binding is None:
            raise ToolExecutionError(call.name, "tool is not available in this run")
        if isinstance(binding, StaticTool):
            return await binding.run(call.args)
        return await self._client.call_tool(  # type: ignore[union-attr]
            binding.server_name, binding.config, binding.tool_name, dict(call.args)
        )


@dataclass
class ToolCatalog:
    """Long-lived tool configuration from which per-run registries are made."""

    static_tools: List[StaticTool] = field(default_factory=list)
    server_source: ToolServerSource = field(default_factory=StaticToolServerSource)
    client: Optional[ToolServerClient] = None
    timeout_seconds: float = 30.0
    discovery_timeout_seconds: float = 10.0

    def registry(self, allow: Optional[Sequence[str]] = None) -> ToolRegistry:
        return ToolRegistry(
            static_tools=self.static_tools,
            server_source=self.server_source,
            client=self.client,
            timeout_seconds=self.timeout_seconds,
            discovery_timeout_seconds=self.discovery_timeout_seconds,
            allow=allow,
        )
