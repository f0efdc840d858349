from __future__ import annotations

import json
import re
from typing import List, Optional, Tuple

import pytest
from httpx import AsyncClient
from starlette.requests import Request

from toolchat_ai.agent_core.service import DENIED_TOOL_CALL_TEXT, ChatAgentService
from toolchat_ai.server.api.v1.agent import stream_agent

STREAM_URL = "/api/v1/agent/stream"


def parse_sse(text: str) -> List[Tuple[Optional[str], dict]]:
    """Split an SSE body into ``(event, data)`` pairs, ignoring comments and pings."""
    events: List[Tuple[Optional[str], dict]] = []
    for block in re.split(r"\r?\n\r?\n", text):
        name: Optional[str] = None
        data: List[str] = []
        for line in block.splitlines():
            if line.startswith("event:"):
                name = line[len("event:") :].strip()
            elif line.startswith("data:"):
                data.append(line[len("data:") :].lstrip())
        if name == "ping" or not data:
            continue
        events.append((name, json.loads("\n".join(data))))
    return events


async def _stream(client: AsyncClient, **params) -> List[Tuple[Optional[str], dict]]:
    response = await client.get(STREAM_URL, params=params)
    assert response.status_code == 200, response.text
    assert response.headers["content-type"].startswith("text/event-stream")
    return parse_sse(response.text)


@pytest.mark.asyncio
async def test_simple_turn_streams_message_then_done(client: AsyncClient) -> None:
    events = await _stream(client, threadId="t-1", content="hi")

    assert [name for name, _ in events] == ["message", "done"]
    assert events[0][1]["type"] == "ai"
    assert events[0][1]["data"]["content"] == "Hello!"
    assert events[1][1] == {"threadId": "t-1", "status": "done"}


@pytest.mark.asyncio
async def test_tool_call_interrupts_then_allow_resumes(client: AsyncClient) -> None:
    events = await _stream(client, threadId="t-1", content="what's the weather?")

    assert [name for name, _ in events] == ["message", "interrupt", "done"]
    assert events[0][1]["data"]["tool_calls"][0]["name"] == "get_weather"
    interrupt = events[1][1]
    assert interrupt["question"] == "Is this correct?"
    assert interrupt["toolCall"]["id"] == "tc1"
    assert interrupt["toolCall"]["args"] == {"city": "Paris"}
    assert events[2][1]["status"] == "suspended"

    resumed = await _stream(client, threadId="t-1", allowTool="allow")

    assert [name for name, _ in resumed] == ["message", "message", "done"]
    assert resumed[0][1]["type"] == "tool"
    assert resumed[0][1]["data"]["content"] == "Sunny in Paris"
    assert resumed[1][1]["data"]["content"] == "Done: Sunny in Paris"
    assert resumed[2][1]["status"] == "done"


@pytest.mark.asyncio
async def test_deny_answers_call_with_refusal(client: AsyncClient) -> None:
    await _stream(client, threadId="t-1", content="weather please")

    events = await _stream(client, threadId="t-1", allowTool="deny")

    assert events[0][1]["type"] == "tool"
    assert events[0][1]["data"]["content"] == DENIED_TOOL_CALL_TEXT


@pytest.mark.asyncio
async def test_full_update_decision_with_json_data(client: AsyncClient) -> None:
    await _stream(client, threadId="t-1", content="weather please")

    events = await _stream(client, threadId="t-1", action="update", data='{"city": "Berlin"}')

    assert events[0][1]["data"]["content"] == "Sunny in Berlin"


@pytest.mark.asyncio
async def test_approve_all_tools_runs_without_interrupt(client: AsyncClient) -> None:
    events = await _stream(client, threadId="t-1", content="weather please", approveAllTools="true")

    assert [name for name, _ in events] == ["message", "message", "message", "done"]
    assert events[-1][1]["status"] == "done"


@pytest.mark.asyncio
async def test_missing_content_is_rejected(client: AsyncClient) -> None:
    response = await client.get(STREAM_URL, params={"threadId": "t-1"})
    assert response.status_code == 400
    assert response.json()["detail"] == "content is required"


@pytest.mark.asyncio
async def test_resume_without_pending_review_is_rejected(client: AsyncClient) -> None:
    response = await client.get(STREAM_URL, params={"threadId": "t-1", "allowTool": "allow"})

    assert response.status_code == 400
    assert response.json()["error_type"] == "RunNotSuspendedError"


@pytest.mark.asyncio
async def test_unknown_review_action_is_rejected(client: AsyncClient) -> None:
    await _stream(client, threadId="t-1", content="weather please")

    response = await client.get(STREAM_URL, params={"threadId": "t-1", "action": "approve"})

    assert response.status_code == 400
    assert response.json()["error_type"] == "InvalidReviewAction"


@pytest.mark.asyncio
async def test_update_without_arguments_is_rejected(client: AsyncClient) -> None:
    await _stream(client, threadId="t-1", content="weather please")

    response = await client.get(STREAM_URL, params={"threadId": "t-1", "action": "update"})

    assert response.status_code == 400
    assert "update data must be an object of tool arguments" in response.json()["detail"]
    events = await _stream(client, threadId="t-1", allowTool="allow")
    assert events[-1] == ("done", {"threadId": "t-1", "status": "done"})


@pytest.mark.asyncio
async def test_invalid_allow_tool_value_fails_validation(client: AsyncClient) -> None:
    response = await client.get(STREAM_URL, params={"threadId": "t-1", "allowTool": "maybe"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_concurrent_stream_for_thread_conflicts(client: AsyncClient, chat_service: ChatAgentService) -> None:
    in_flight = await chat_service.stream("t-1", "hi")
    try:
        response = await client.get(STREAM_URL, params={"threadId": "t-1", "content": "hello?"})
        assert response.status_code == 409
        assert response.json()["error_type"] == "ThreadStateConflict"
    finally:
        await in_flight.aclose()


@pytest.mark.asyncio
async def test_thread_is_released_when_client_leaves_before_first_event(
    session_factory, chat_service: ChatAgentService
) -> None:
    scope = {"type": "http", "method": "GET", "path": STREAM_URL, "query_string": b"threadId=t-1", "headers": []}
    sent: List[dict] = []

    async def receive() -> dict:
        return {"type": "http.disconnect"}

    async def send(message: dict) -> None:
        sent.append(message)

    async with session_factory() as session:
        response = await stream_agent(
            Request(scope, receive), chat_service, session, thread_id="t-1", content="weather please"
        )
    assert chat_service.is_active("t-1")

    await response(scope, receive, send)

    assert not chat_service.is_active("t-1")


@pytest.mark.asyncio
async def test_history_returns_messages_in_order(client: AsyncClient) -> None:
    await _stream(client, threadId="t-1", content="weather please")
    await _stream(client, threadId="t-1", allowTool="allow")

    response = await client.get("/api/v1/agent/history/t-1")

    assert response.status_code == 200
    assert [m["type"] for m in response.json()] == ["human", "ai", "tool", "ai"]
    assert response.json()[0]["data"]["content"] == "weather please"


@pytest.mark.asyncio
async def test_history_of_unknown_thread_is_empty(client: AsyncClient) -> None:
    response = await client.get("/api/v1/agent/history/nope")
    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_streaming_creates_thread_titled_from_first_message(client: AsyncClient) -> None:
    await _stream(client, threadId="t-1", content="Plan my   trip to Lisbon")

    response = await client.get("/api/v1/agent/threads/t-1")

    assert response.status_code == 200
    assert response.json()["title"] == "Plan my trip to Lisbon"
