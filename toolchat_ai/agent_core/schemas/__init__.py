"""Domain schemas for the agent core."""

from .domain import (
    AiMessage,
    ErrorMessage,
    HumanMessage,
    Message,
    MessageResponse,
    MessageType,
    ReviewAction,
    ReviewDecision,
    ReviewRequest,
    RunNode,
    RunOptions,
    RunState,
    ToolCall,
    ToolMessage,
    ToolMessageStatus,
    ToolResult,
    ToolSpec,
)

__all__ = [
    "AiMessage",
    "ErrorMessage",
    "HumanMessage",
    "Message",
    "MessageResponse",
    "MessageType",
    "ReviewAction",
    "ReviewDecision",
    "ReviewRequest",
    "RunNode",
    "RunOptions",
    "RunState",
    "ToolCall",
    "ToolMessage",
    "ToolMessageStatus",
    "ToolResult",
    "ToolSpec",
]
