from __future__ import annotations

import pytest
from pydantic import ValidationError

from toolchat_ai.agent_core.schemas import (
    AiMessage,
    ErrorMessage,
    HumanMessage,
    MessageResponse,
    MessageType,
    ReviewRequest,
    RunNode,
    RunState,
    ToolCall,
    ToolMessage,
    ToolMessageStatus,
    ToolResult,
)


def test_ai_message_response_includes_tool_calls_only_when_present() -> None:
    plain = MessageResponse.from_message(AiMessage(id="a1", content="hello"))
    assert plain.type == MessageType.ai
    assert plain.data == {"id": "a1", "content": "hello"}

    call = ToolCall(id="tc1", name="get_weather", args={"city": "Paris"})
    with_calls = MessageResponse.from_message(AiMessage(id="a2", content="", tool_calls=[call]))
    assert with_calls.data["tool_calls"] == [
        {"id": "tc1", "name": "get_weather", "args": {"city": "Paris"}, "type": "tool_call"}
    ]


def test_tool_message_response_carries_status_and_call_id() -> None:
    msg = ToolMessage(id="t1", tool_call_id="tc1", name="get_weather", content="Error: boom", status="error")
    resp = MessageResponse.from_message(msg)
    assert resp.type == MessageType.tool
    assert resp.data == {
        "id": "t1",
        "content": "Error: boom",
        "status": "error",
        "tool_call_id": "tc1",
        "name": "get_weather",
    }


def test_error_and_human_message_response() -> None:
    err = MessageResponse.from_message(ErrorMessage(id="e1", content="model down"))
    assert err.type == MessageType.error
    assert err.data == {"id": "e1", "content": "model down"}

    human = MessageResponse.from_message(HumanMessage(id="h1", content="hi"))
    assert human.type == MessageType.human


def test_run_state_json_round_trip_keeps_message_variants() -> None:
    call = ToolCall(id="tc1", name="get_weather", args={"city": "Paris"})
    state = RunState(
        thread_id="t-1",
        messages=[
            HumanMessage(content="weather?"),
            AiMessage(content="", tool_calls=[call], model="openai:gpt-4o"),
            ToolMessage(tool_call_id="tc1", name="get_weather", content="sunny"),
        ],
        node=RunNode.agent,
        version=3,
        model="openai:gpt-4o",
    )

    restored = RunState.model_validate_json(state.model_dump_json())

    assert restored == state
    assert [type(m) for m in restored.messages] == [HumanMessage, AiMessage, ToolMessage]
    assert restored.messages[1].tool_calls[0].args == {"city": "Paris"}


def test_run_state_rejects_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        RunState.model_validate({"thread_id": "t", "unexpected": 1})


def test_review_request_only_for_suspended_runs() -> None:
    call = ToolCall(id="tc1", name="get_weather", args={"city": "Paris"})
    state = RunState(thread_id="t", node=RunNode.tool_approval, pending_tool_call=call)
    assert state.review_request() is None
    assert state.is_live

    state.node = RunNode.suspended
    request = state.review_request()
    assert isinstance(request, ReviewRequest)
    assert request.question == "Is this correct?"
    assert request.model_dump(by_alias=True)["toolCall"]["id"] == "tc1"

    state.node = RunNode.done
    assert not state.is_live


def test_tool_result_to_message_maps_ok_to_status() -> None:
    ok = ToolResult(tool_call_id="tc1", name="x", content="fine").to_message()
    failed = ToolResult(tool_call_id="tc2", name="x", content="Error: nope", ok=False).to_message()
    assert ok.status == ToolMessageStatus.success
    assert failed.status == ToolMessageStatus.error
    assert failed.tool_call_id == "tc2"
