"""Liveness and version endpoints used by deployments and the chat frontend."""

from fastapi import APIRouter
from pydantic import BaseModel

from toolchat_ai import __version__
from toolchat_ai.server.core.constant import SCHEMA_VERSION

router = APIRouter()


class HealthStatus(BaseModel):
    status: str = "ok"


class VersionInfo(BaseModel):
    version: str
    schema_version: str


@router.get("/health", response_model=HealthStatus, summary="Liveness check")
async def health_check() -> HealthStatus:
    return HealthStatus()


@router.get("/version", response_model=VersionInfo, summary="Server and API schema version")
async def version() -> VersionInfo:
    """Report the package version and the REST schema version the routes follow."""
    return VersionInfo(version=__version__, schema_version=SCHEMA_VERSION)
