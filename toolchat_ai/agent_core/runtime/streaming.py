"""Turn streaming adapter.

``TurnStream`` turns the engine's per-node steps into normalized
``MessageResponse`` events for a transport to forward:

- ``ai`` messages are emitted when they carry text or tool calls.
- ``tool`` messages (real results, errors and review feedback) are emitted.
- ``human`` input is never re-emitted.
- A fatal error ends the stream with a single ``error`` event.

A stream corresponds to exactly one run attempt and cannot be iterated twice.
When it ends (finished, suspended, failed, or closed early by the caller) the
``on_close`` callback runs once, and ``outcome`` describes how it ended.
"""

from __future__ import annotations

import logging
from contextlib import aclosing
from dataclasses import dataclass
from enum import Enum
from typing import AsyncGenerator, AsyncIterator, Callable, Optional

from langgraph.errors import GraphRecursionError

from ...core import monitoring
from ..schemas.domain import (
    AiMessage,
    ErrorMessage,
    MessageResponse,
    ReviewDecision,
    ReviewRequest,
    RunNode,
    RunState,
    ToolMessage,
)
from .engine import AgentEngine

logger = logging.getLogger(__name__)


class TurnStatus(str, Enum):
    running = "running"
    done = "done"
    suspended = "suspended"
    failed = "failed"
    interrupted = "interrupted"


@dataclass
class TurnOutcome:
    status: TurnStatus = TurnStatus.running
    state: Optional[RunState] = None
    review_request: Optional[ReviewRequest] = None
    error: Optional[str] = None


class TurnStream:
    """Lazy, finite, single-use sequence of ``MessageResponse`` events."""

    def __init__(
        self,
        engine: AgentEngine,
        state: RunState,
        *,
        decision: Optional[ReviewDecision] = None,
        kind: str = "message",
        max_steps: Optional[int] = None,
        on_close: Optional[Callable[[], None]] = None,
    ) -> None:
        self._engine = engine
        self._state = state
        self._decision = decision
        self._kind = kind
        self._max_steps = max_steps
        self._on_close = on_close
        self._started = False
        self._closed = False
        self._iterator: Optional[AsyncGenerator[MessageResponse, None]] = None
        self.outcome = TurnOutcome(state=state)

    @property
    def thread_id(self) -> str:
        return self._state.thread_id

    def __aiter__(self) -> AsyncIterator[MessageResponse]:
        if self._started:
            raise RuntimeError("TurnStream can only be iterated once; request a new stream to resume")
        self._started = True
        self._iterator = self._events()
        return self._iterator

    async def aclose(self) -> None:
        """Release the stream whether it was never iterated, partly read or exhausted."""
        self._started = True
        if self._iterator is not None:
            await self._iterator.aclose()
        if self.outcome.status == TurnStatus.running:
            self.outcome.status = TurnStatus.interrupted
        self._close()

    def _close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._on_close is not None:
            self._on_close()
        monitoring.log_agent_turn(self.thread_id, self._kind, self.outcome.status.value)

    async def _events(self) -> AsyncIterator[MessageResponse]:
        try:
            async with aclosing(self._engine.astream(self._state, self._decision)) as steps:
                async for step in steps:
                    self.outcome.state = step.run
                    for message in step.emitted:
                        if isinstance(message, AiMessage) and not (message.content or message.tool_calls):
                            continue
                        if isinstance(message, (AiMessage, ToolMessage)):
                            yield MessageResponse.from_message(message)

            final = self.outcome.state
            if final is not None and final.node == RunNode.suspended:
                self.outcome.status = TurnStatus.suspended
                self.outcome.review_request = final.review_request()
            else:
                self.outcome.status = TurnStatus.done
        except GraphRecursionError as e:
            limit = f" ({self._max_steps})" if self._max_steps else ""
            yield self._fail(f"Run exceeded the step limit{limit}", e)
        except Exception as e:
            yield self._fail(str(e) or e.__class__.__name__, e)
        finally:
            if self.outcome.status == TurnStatus.running:
                self.outcome.status = TurnStatus.interrupted
                logger.info(f"Stream for thread {self.thread_id} closed before the run finished")
            self._close()

    def _fail(self, content: str, error: Exception) -> MessageResponse:
        logger.error(f"Run for thread {self.thread_id} failed: {error}", exc_info=error)
        monitoring.log_error(type(error).__name__, str(error), {"thread_id": self.thread_id})
        self.outcome.status = TurnStatus.failed
        self.outcome.error = content
        return MessageResponse.from_message(ErrorMessage(content=content))
