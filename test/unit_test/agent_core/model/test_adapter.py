from __future__ import annotations

from typing import Any, Dict, List

import pytest
from pydantic_ai import messages as pai
from pydantic_ai.models.function import AgentInfo, FunctionModel

from toolchat_ai.agent_core.errors import ModelInvocationError
from toolchat_ai.agent_core.model import PydanticAIChatModel, to_ai_message, to_model_messages
from toolchat_ai.agent_core.schemas import (
    AiMessage,
    ErrorMessage,
    HumanMessage,
    ToolCall,
    ToolMessage,
    ToolSpec,
)


def _weather_spec() -> ToolSpec:
    return ToolSpec(
        name="get_weather",
        description="Current weather for a city",
        parameters={"type": "object", "properties": {"city": {"type": "string"}}, "required": ["city"]},
    )


def test_to_model_messages_merges_request_side_parts() -> None:
    call = ToolCall(id="tc1", name="get_weather", args={"city": "Paris"})
    history = [
        HumanMessage(content="weather in Paris?"),
        AiMessage(content="", tool_calls=[call]),
        ToolMessage(tool_call_id="tc1", name="get_weather", content="sunny"),
        ErrorMessage(content="should never reach the model"),
        HumanMessage(content="and tomorrow?"),
    ]

    messages = to_model_messages(history, system_prompt="be brief")

    assert [type(m) for m in messages] == [pai.ModelRequest, pai.ModelResponse, pai.ModelRequest]
    first, response, last = messages
    assert [type(p) for p in first.parts] == [pai.SystemPromptPart, pai.UserPromptPart]
    assert [type(p) for p in response.parts] == [pai.ToolCallPart]
    assert response.parts[0].tool_call_id == "tc1"
    assert response.parts[0].args == {"city": "Paris"}
    assert [type(p) for p in last.parts] == [pai.ToolReturnPart, pai.UserPromptPart]
    assert last.parts[0].tool_call_id == "tc1"
    assert last.parts[0].content == "sunny"


def test_to_model_messages_keeps_text_of_plain_ai_messages() -> None:
    messages = to_model_messages([HumanMessage(content="hi"), AiMessage(content="hello")])
    assert isinstance(messages[1], pai.ModelResponse)
    assert messages[1].parts == [pai.TextPart(content="hello")]


def test_to_ai_message_joins_text_and_normalizes_calls() -> None:
    response = pai.ModelResponse(
        parts=[
            pai.TextPart(content="Let me "),
            pai.TextPart(content="check."),
            pai.ToolCallPart(tool_name="get_weather", args='{"city": "Paris"}', tool_call_id="c1"),
        ]
    )

    msg = to_ai_message(response, "openai:gpt-4o")

    assert msg.content == "Let me check."
    assert msg.model == "openai:gpt-4o"
    assert msg.tool_calls == [ToolCall(id="c1", name="get_weather", args={"city": "Paris"})]


def test_to_ai_message_keeps_malformed_arguments_visible() -> None:
    response = pai.ModelResponse(parts=[pai.ToolCallPart(tool_name="search", args="{not json", tool_call_id="c2")])
    msg = to_ai_message(response)
    assert msg.tool_calls[0].args == {"_raw": "{not json"}


@pytest.mark.asyncio
async def test_invoke_binds_tools_only_when_present() -> None:
    seen: List[List[str]] = []

    def respond(messages: List[pai.ModelMessage], info: AgentInfo) -> pai.ModelResponse:
        seen.append([t.name for t in info.function_tools])
        return pai.ModelResponse(parts=[pai.TextPart(content="ok")])

    model = PydanticAIChatModel(FunctionModel(respond))

    await model.invoke([HumanMessage(content="hi")], [])
    await model.invoke([HumanMessage(content="hi")], [_weather_spec()])

    assert seen == [[], ["get_weather"]]


@pytest.mark.asyncio
async def test_invoke_returns_tool_calls_with_model_name() -> None:
    def respond(messages: List[pai.ModelMessage], info: AgentInfo) -> pai.ModelResponse:
        return pai.ModelResponse(
            parts=[pai.ToolCallPart(tool_name="get_weather", args={"city": "Paris"}, tool_call_id="tc1")]
        )

    model = PydanticAIChatModel(FunctionModel(respond))
    reply = await model.invoke([HumanMessage(content="weather?")], [_weather_spec()], system_prompt="sys")

    assert reply.content == ""
    assert reply.tool_calls == [ToolCall(id="tc1", name="get_weather", args={"city": "Paris"})]
    assert reply.model == model.name


@pytest.mark.asyncio
async def test_invoke_passes_system_prompt_first() -> None:
    captured: Dict[str, Any] = {}

    def respond(messages: List[pai.ModelMessage], info: AgentInfo) -> pai.ModelResponse:
        captured["first"] = messages[0].parts[0]
        return pai.ModelResponse(parts=[pai.TextPart(content="ok")])

    await PydanticAIChatModel(FunctionModel(respond)).invoke([HumanMessage(content="hi")], [], system_prompt="sys")

    assert isinstance(captured["first"], pai.SystemPromptPart)
    assert captured["first"].content == "sys"


@pytest.mark.asyncio
async def test_invoke_wraps_provider_failures() -> None:
    def respond(messages: List[pai.ModelMessage], info: AgentInfo) -> pai.ModelResponse:
        raise RuntimeError("provider unavailable")

    model = PydanticAIChatModel(FunctionModel(respond))
    with pytest.raises(ModelInvocationError, match="provider unavailable") as exc:
        await model.invoke([HumanMessage(content="hi")], [])
    assert isinstance(exc.value.__cause__, RuntimeError)


@pytest.mark.asyncio
async def test_invoke_rejects_empty_history_without_prompt() -> None:
    model = PydanticAIChatModel(FunctionModel(lambda m, i: pai.ModelResponse(parts=[])))
    with pytest.raises(ValueError):
        await model.invoke([], [])


def test_name_of_string_model_is_the_identifier() -> None:
    assert PydanticAIChatModel("openai:gpt-4o").name == "openai:gpt-4o"
