from __future__ import annotations

import pytest
from httpx import AsyncClient

THREADS_URL = "/api/v1/agent/threads"


@pytest.mark.asyncio
async def test_create_thread_with_defaults(client: AsyncClient) -> None:
    response = await client.post(THREADS_URL)

    assert response.status_code == 201
    body = response.json()
    assert body["title"] == "New thread"
    assert body["id"]
    assert "created_at" in body and "updated_at" in body


@pytest.mark.asyncio
async def test_create_thread_with_client_id_rejects_duplicates(client: AsyncClient) -> None:
    first = await client.post(THREADS_URL, json={"id": "my-thread", "title": "Trip"})
    assert first.status_code == 201
    assert first.json()["id"] == "my-thread"
    assert first.json()["title"] == "Trip"

    duplicate = await client.post(THREADS_URL, json={"id": "my-thread"})
    assert duplicate.status_code == 409


@pytest.mark.asyncio
async def test_list_threads_newest_first(client: AsyncClient) -> None:
    await client.post(THREADS_URL, json={"id": "older", "title": "Older"})
    await client.post(THREADS_URL, json={"id": "newer", "title": "Newer"})
    await client.patch(f"{THREADS_URL}/older", json={"title": "Older, renamed"})

    response = await client.get(THREADS_URL)

    assert response.status_code == 200
    assert [t["id"] for t in response.json()] == ["older", "newer"]


@pytest.mark.asyncio
async def test_get_rename_and_delete_thread(client: AsyncClient) -> None:
    await client.post(THREADS_URL, json={"id": "t-1"})

    renamed = await client.patch(f"{THREADS_URL}/t-1", json={"title": "Renamed"})
    assert renamed.status_code == 200
    assert renamed.json()["title"] == "Renamed"
    assert (await client.get(f"{THREADS_URL}/t-1")).json()["title"] == "Renamed"

    deleted = await client.delete(f"{THREADS_URL}/t-1")
    assert deleted.status_code == 204
    assert (await client.get(f"{THREADS_URL}/t-1")).status_code == 404


@pytest.mark.asyncio
async def test_missing_thread_returns_404(client: AsyncClient) -> None:
    assert (await client.get(f"{THREADS_URL}/nope")).status_code == 404
    assert (await client.patch(f"{THREADS_URL}/nope", json={"title": "x"})).status_code == 404
    assert (await client.delete(f"{THREADS_URL}/nope")).status_code == 404


@pytest.mark.asyncio
async def test_rename_rejects_empty_title(client: AsyncClient) -> None:
    await client.post(THREADS_URL, json={"id": "t-1"})
    response = await client.patch(f"{THREADS_URL}/t-1", json={"title": ""})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_deleting_thread_keeps_history(client: AsyncClient) -> None:
    await client.get("/api/v1/agent/stream", params={"threadId": "t-1", "content": "hi"})

    await client.delete(f"{THREADS_URL}/t-1")

    history = await client.get("/api/v1/agent/history/t-1")
    assert [m["type"] for m in history.json()] == ["human", "ai"]
