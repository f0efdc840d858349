"""Tool server configurations and the sources they are read from.

A tool server is either a local process speaking MCP over stdio or a remote
MCP endpoint over streamable HTTP. The registry reads the full mapping of
``server name -> config`` from a ``ToolServerSource`` at the start of every
run, so registrations changed between runs are picked up without restarts.
"""

from __future__ import annotations

from typing import Annotated, Dict, List, Literal, Mapping, Protocol, Union, runtime_checkable

from pydantic import Field, TypeAdapter

from ..schemas.base import BaseSchema


class LocalProcessServerConfig(BaseSchema):
    kind: Literal["local-process"] = "local-process"
    command: str
    args: List[str] = Field(default_factory=list)
    env: Dict[str, str] = Field(default_factory=dict)
    enabled: bool = True


class RemoteHttpServerConfig(BaseSchema):
    kind: Literal["remote-http"] = "remote-http"
    url: str
    headers: Dict[str, str] = Field(default_factory=dict)
    enabled: bool = True


ToolServerConfig = Annotated[
    Union[LocalProcessServerConfig, RemoteHttpServerConfig],
    Field(discriminator="kind"),
]

_CONFIG_ADAPTER: TypeAdapter[ToolServerConfig] = TypeAdapter(ToolServerConfig)


def parse_server_config(data: Mapping[str, object]) -> ToolServerConfig:
    """Validate a raw mapping (e.g. loaded from JSON) into a server config."""
    return _CONFIG_ADAPTER.validate_python(dict(data))


@runtime_checkable
class ToolServerSource(Protocol):
    """Read-only provider of tool server registrations."""

    async def load(self) -> Dict[str, ToolServerConfig]: ...


class StaticToolServerSource:
    """Serves a fixed mapping, used for configuration files and tests."""

    def __init__(self, servers: Mapping[str, Union[ToolServerConfig, Mapping[str, object]]] | None = None) -> None:
        self._servers: Dict[str, ToolServerConfig] = {
            name: cfg if isinstance(cfg, BaseSchema) else parse_server_config(cfg)
            for name, cfg in (servers or {}).items()
        }

    async def load(self) -> Dict[str, ToolServerConfig]:
        return dict(self._servers)


def enabled_servers(servers: Mapping[str, ToolServerConfig]) -> Dict[str, ToolServerConfig]:
    return {name: cfg for name, cfg in servers.items() if cfg.enabled}
