"""Error types for the agent core.

The hierarchy mirrors how each failure is handled by the orchestrator:

- ``ModelInvocationError``: fatal for the current attempt, surfaced as an
  ``error`` message; the checkpoint keeps its last good state.
- ``ToolExecutionError`` / ``ToolExecutionTimeout``: recovered locally and fed
  back to the model as an error-bearing ``tool`` message.
- ``InvalidReviewAction`` / ``RunNotSuspendedError``: the resume request is
  rejected and the run stays as it was.
- ``ThreadStateConflict``: a second writer tried to advance the same thread.
- ``ToolDiscoveryPartialFailure``: a warning value collected during tool
  resolution. It is an exception type so it can carry a cause, but resolution
  never raises it.
"""

from __future__ import annotations

from typing import Optional


class ToolChatError(Exception):
    """Base error for all agent core exceptions."""


class ModelInvocationError(ToolChatError):
    """Raised when the chat model call fails (network, provider or protocol)."""

    def __init__(self, model: str, message: str) -> None:
        super().__init__(f"Model invocation failed for '{model}': {message}")
        self.model = model


class ToolExecutionError(ToolChatError):
    """Raised for unsuccessful tool executions with additional context."""

    def __init__(self, tool_name: str, message: str) -> None:
        super().__init__(f"Tool execution failed for '{tool_name}': {message}")
        self.tool_name = tool_name


class ToolExecutionTimeout(ToolExecutionError):
    """Raised when a tool does not finish within the configured timeout."""

    def __init__(self, tool_name: str, timeout_seconds: float) -> None:
        super().__init__(tool_name, f"timed out after {timeout_seconds:g}s")
        self.timeout_seconds = timeout_seconds


class InvalidReviewAction(ToolChatError):
    """Raised when a resume decision is not one of continue/update/feedback."""

    def __init__(self, action: object, detail: Optional[str] = None) -> None:
        suffix = f" ({detail})" if detail else ""
        super().__init__(f"Invalid review action: {action!r}{suffix}")
        self.action = action


class RunNotSuspendedError(ToolChatError):
    """Raised when a resume decision is sent for a thread with nothing to review."""

    def __init__(self, thread_id: str, node: Optional[str] = None) -> None:
        detail = f" (current node: {node})" if node else ""
        super().__init__(f"Thread '{thread_id}' has no tool call awaiting review{detail}")
        self.thread_id = thread_id


class ThreadStateConflict(ToolChatError):
    """Raised when a concurrent run tries to advance a thread already in flight."""

    def __init__(self, thread_id: str, message: str = "another run is already in progress") -> None:
        super().__init__(f"Thread '{thread_id}': {message}")
        self.thread_id = thread_id


class ToolDiscoveryPartialFailure(ToolChatError):
    """A tool server could not be reached during tool resolution."""

    def __init__(self, server_name: str, message: str) -> None:
        super().__init__(f"Tool discovery failed for server '{server_name}': {message}")
        self.server_name = server_name
