from __future__ import annotations

"""Domain models shared by the orchestrator, the adapters and the transport.

Messages are a tagged union discriminated on ``type``. Provider specific
shapes (string content vs. content-part lists, provider tool-call formats) are
normalized into these models once, at the chat model adapter boundary.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union
from uuid import uuid4

from pydantic import Field

from .base import BaseSchema


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid4())


class MessageType(str, Enum):
    human = "human"
    ai = "ai"
    tool = "tool"
    error = "error"


class RunNode(str, Enum):
    """Position of a run in the orchestration state machine."""

    agent = "agent"
    tool_approval = "tool_approval"
    tools = "tools"
    done = "done"
    suspended = "suspended"


class ReviewAction(str, Enum):
    continue_ = "continue"
    update = "update"
    feedback = "feedback"


class ToolMessageStatus(str, Enum):
    success = "success"
    error = "error"


class ToolCall(BaseSchema):
    """A tool invocation proposed by the model."""

    id: str
    name: str
    args: Dict[str, Any] = Field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "args": dict(self.args), "type": "tool_call"}


class HumanMessage(BaseSchema):
    type: Literal["human"] = "human"
    id: str = Field(default_factory=new_id)
    content: str


class AiMessage(BaseSchema):
    type: Literal["ai"] = "ai"
    id: str = Field(default_factory=new_id)
    content: str = ""
    tool_calls: List[ToolCall] = Field(default_factory=list)
    model: Optional[str] = None


class ToolMessage(BaseSchema):
    type: Literal["tool"] = "tool"
    id: str = Field(default_factory=new_id)
    tool_call_id: str
    name: str
    content: str
    status: ToolMessageStatus = ToolMessageStatus.success


class ErrorMessage(BaseSchema):
    type: Literal["error"] = "error"
    id: str = Field(default_factory=new_id)
    content: str


Message = Annotated[
    Union[HumanMessage, AiMessage, ToolMessage, ErrorMessage],
    Field(discriminator="type"),
]


class MessageResponse(BaseSchema):
    """Normalized event forwarded to the transport layer."""

    type: MessageType
    data: Dict[str, Any]

    @classmethod
    def from_message(cls, message: Message) -> "MessageResponse":
        if isinstance(message, AiMessage):
            data: Dict[str, Any] = {"id": message.id, "content": message.content}
            if message.tool_calls:
                data["tool_calls"] = [tc.to_dict() for tc in message.tool_calls]
            return cls(type=MessageType.ai, data=data)
        if isinstance(message, ToolMessage):
            return cls(
                type=MessageType.tool,
                data={
                    "id": message.id,
                    "content": message.content,
                    "status": message.status.value,
                    "tool_call_id": message.tool_call_id,
                    "name": message.name,
                },
            )
        return cls(type=MessageType(message.type), data={"id": message.id, "content": message.content})


class ToolSpec(BaseSchema):
    """Description of a callable tool as bound to the chat model."""

    name: str
    description: str = ""
    parameters: Dict[str, Any] = Field(default_factory=lambda: {"type": "object", "properties": {}})


class ToolResult(BaseSchema):
    """Outcome of one tool execution; failures are values, not exceptions."""

    tool_call_id: str
    name: str
    content: str
    ok: bool = True

    def to_message(self) -> ToolMessage:
        return ToolMessage(
            tool_call_id=self.tool_call_id,
            name=self.name,
            content=self.content,
            status=ToolMessageStatus.success if self.ok else ToolMessageStatus.error,
        )


class ReviewDecision(BaseSchema):
    """Human decision about a pending tool call.

    ``action`` is kept as a plain string so that an unknown value reaches the
    orchestrator and is rejected there with ``InvalidReviewAction``.
    """

    action: str
    data: Any = None


class ReviewRequest(BaseSchema):
    question: str = "Is this correct?"
    tool_call: ToolCall = Field(alias="toolCall")


class RunOptions(BaseSchema):
    """Per-invocation options supplied by the caller."""

    model: Optional[str] = None
    tools: Optional[List[str]] = None
    approve_all_tools: bool = False


class RunState(BaseSchema):
    """Persisted unit of the orchestration state machine, keyed by thread id."""

    thread_id: str
    messages: List[Message] = Field(default_factory=list)
    node: RunNode = RunNode.agent
    pending_tool_call: Optional[ToolCall] = None
    version: int = 0
    model: Optional[str] = None

    created_at: datetime = Field(default_factory=_utc_now)
    updated_at: datetime = Field(default_factory=_utc_now)

    @property
    def is_live(self) -> bool:
        return self.node != RunNode.done

    def review_request(self) -> Optional[ReviewRequest]:
        if self.node != RunNode.suspended or self.pending_tool_call is None:
            return None
        return ReviewRequest(tool_call=self.pending_tool_call)
