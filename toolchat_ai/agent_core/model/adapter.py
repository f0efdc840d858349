"""Chat model adapter built on the pydantic-ai direct model API.

The orchestrator talks to a single ``ChatModelAdapter.invoke`` call. The
pydantic-ai implementation converts the normalized message history into
pydantic-ai request/response parts, binds tools only when there are any, and
turns the provider response back into one ``AiMessage``.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union, runtime_checkable

from pydantic_ai import messages as pai
from pydantic_ai.direct import model_request
from pydantic_ai.models import Model, ModelRequestParameters
from pydantic_ai.settings import ModelSettings
from pydantic_ai.tools import ToolDefinition

from ..errors import ModelInvocationError
from ..schemas import AiMessage, ErrorMessage, HumanMessage, Message, ToolCall, ToolMessage, ToolSpec
from ..schemas.domain import new_id

logger = logging.getLogger(__name__)


@runtime_checkable
class ChatModelAdapter(Protocol):
    """Uniform interface to invoke an LLM once."""

    @property
    def name(self) -> str: ...

    async def invoke(
        self,
        history: Sequence[Message],
        tools: Sequence[ToolSpec],
        *,
        system_prompt: Optional[str] = None,
    ) -> AiMessage: ...


def _tool_definitions(tools: Sequence[ToolSpec]) -> List[ToolDefinition]:
    return [
        ToolDefinition(
            name=spec.name,
            description=spec.description or None,
            parameters_json_schema=spec.parameters,
        )
        for spec in tools
    ]


def to_model_messages(history: Sequence[Message], system_prompt: Optional[str] = None) -> List[pai.ModelMessage]:
    """Convert normalized history to the pydantic-ai message list.

    Consecutive request-side parts (system, user, tool returns) are merged
    into one ``ModelRequest`` so providers that require strict user/assistant
    alternation accept the history. ``error`` messages never reach the model.
    """
    result: List[pai.ModelMessage] = []
    pending: List[Any] = []

    def flush() -> None:
        if pending:
            result.append(pai.ModelRequest(parts=list(pending)))
            pending.clear()

    if system_prompt:
        pending.append(pai.SystemPromptPart(content=system_prompt))

    for message in history:
        if isinstance(message, HumanMessage):
            pending.append(pai.UserPromptPart(content=message.content))
        elif isinstance(message, ToolMessage):
            pending.append(
                pai.ToolReturnPart(
                    tool_name=message.name,
                    content=message.content,
                    tool_call_id=message.tool_call_id,
                )
            )
        elif isinstance(message, AiMessage):
            flush()
            parts: List[Any] = []
            if message.content or not message.tool_calls:
                parts.append(pai.TextPart(content=message.content))
            for call in message.tool_calls:
                parts.append(pai.ToolCallPart(tool_name=call.name, args=dict(call.args), tool_call_id=call.id))
            result.append(pai.ModelResponse(parts=parts))
        elif isinstance(message, ErrorMessage):
            continue
    flush()
    return result


def _call_args(part: pai.ToolCallPart) -> Dict[str, Any]:
    try:
        return part.args_as_dict()
    except (ValueError, AssertionError):
        # Providers occasionally stream malformed JSON; keep it visible to the reviewer.
        raw = part.args if isinstance(part.args, str) else json.dumps(part.args)
        return {"_raw": raw}


def to_ai_message(response: pai.ModelResponse, model_name: Optional[str] = None) -> AiMessage:
    """Normalize a provider response into exactly one ``AiMessage``."""
    texts: List[str] = []
    calls: List[ToolCall] = []
    for part in response.parts:
        if isinstance(part, pai.TextPart):
            texts.append(part.content)
        elif isinstance(part, pai.ToolCallPart):
            calls.append(ToolCall(id=part.tool_call_id or new_id(), name=part.tool_name, args=_call_args(part)))
    return AiMessage(content="".join(texts), tool_calls=calls, model=model_name or response.model_name)


class PydanticAIChatModel:
    """``ChatModelAdapter`` backed by any pydantic-ai ``Model``."""

    def __init__(self, model: Union[Model, str], *, model_settings: Optional[ModelSettings] = None) -> None:
        self._model = model
        self._model_settings = model_settings

    @property
    def name(self) -> str:
        if isinstance(self._model, str):
            return self._model
        return f"{self._model.system}:{self._model.model_name}"

    async def invoke(
        self,
        history: Sequence[Message],
        tools: Sequence[ToolSpec],
        *,
        system_prompt: Optional[str] = None,
    ) -> AiMessage:
        if not history and not system_prompt:
            raise ValueError("history must contain at least one message or a system prompt")

        messages = to_model_messages(history, system_prompt)
        # Some providers reject an empty tool list, so tools are only bound when present.
        params = ModelRequestParameters(function_tools=_tool_definitions(tools)) if tools else None

        logger.debug(f"Invoking chat model {self.name} with {len(messages)} messages and {len(tools)} tools")
        try:
            response = await model_request(
                self._model,
                messages,
                model_settings=self._model_settings,
                model_request_parameters=params,
            )
        except Exception as e:
            logger.error(f"Chat model {self.name} invocation failed: {e}")
            raise ModelInvocationError(self.name, str(e)) from e

        return to_ai_message(response, self.name)
