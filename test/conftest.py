from __future__ import annotations

import httpx
import pytest

_LOCAL_HOSTS = frozenset({"localhost", "127.0.0.1", "0.0.0.0", "mock"})


def _ensure_local(request: httpx.Request) -> None:
    if request.url.host not in _LOCAL_HOSTS:
        raise RuntimeError(f"Outbound HTTP is blocked in tests: {request.method} {request.url}")


@pytest.fixture(autouse=True)
def _global_offline_http_guard(monkeypatch: pytest.MonkeyPatch):
    """Refuse real network traffic from httpx; ASGI and mock transports are untouched."""
    sync_handle = httpx.HTTPTransport.handle_request
    async_handle = httpx.AsyncHTTPTransport.handle_async_request

    def guarded_sync(self, request: httpx.Request) -> httpx.Response:
        _ensure_local(request)
        return sync_handle(self, request)

    async def guarded_async(self, request: httpx.Request) -> httpx.Response:
        _ensure_local(request)
        return await async_handle(self, request)

    monkeypatch.setattr(httpx.HTTPTransport, "handle_request", guarded_sync)
    monkeypatch.setattr(httpx.AsyncHTTPTransport, "handle_async_request", guarded_async)
