from __future__ import annotations

"""High-level chat agent service.

``ChatAgentService`` is the entry point a transport uses. It prepares the
thread's ``RunState``, builds an ``AgentEngine`` for the invocation and returns
a ``TurnStream`` of normalized events.

Entry points
------------

- ``stream``: new user text. If the thread's state is still live (suspended
  for review, or interrupted mid-run) every unanswered tool call of the latest
  ``ai`` message is answered with a synthetic "skipped" ``tool`` message first,
  then the human message is appended and the run restarts at ``agent`` on the
  same ``RunState``.
- ``resume``: a ``ReviewDecision`` for the pending tool call of a suspended
  thread. The decision is validated before anything is written.
- ``history``: ordered messages of the latest checkpoint.

Model selection
---------------

``RunOptions.model`` selects the chat model for the current invocation and is
recorded in ``RunState.model``. History is always preserved when the model
changes. A ``resume`` without an explicit model continues with the model
recorded on the thread; new user text without one uses the default model.

Concurrency
-----------

Only one stream per thread id may be active in this process; a second one
fails fast with ``ThreadStateConflict``. Across processes the checkpoint
store's version check gives the same guarantee.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Set

from .errors import InvalidReviewAction, RunNotSuspendedError, ThreadStateConflict
from .model import ChatModelAdapter
from .prompt import build_system_prompt
from .repos import CheckpointStore
from .runtime import AgentEngine, EngineDeps, TurnStream, next_pending_call, unanswered_tool_calls, validate_decision
from .schemas.domain import (
    HumanMessage,
    Message,
    ReviewAction,
    ReviewDecision,
    RunNode,
    RunOptions,
    RunState,
    ToolMessage,
    ToolMessageStatus,
)
from .tools import ToolCatalog

logger = logging.getLogger(__name__)

SKIPPED_TOOL_CALL_TEXT = "Tool call was skipped because the user sent a new message instead of reviewing it."
DENIED_TOOL_CALL_TEXT = "User denied the tool call."


def decision_from_transport(value: str) -> ReviewDecision:
    """Map the transport's ``allow`` / ``deny`` shorthand to a review decision.

    ``deny`` answers the call with feedback so the model learns the user
    refused, instead of executing it.
    """
    if value == "allow":
        return ReviewDecision(action=ReviewAction.continue_.value)
    if value == "deny":
        return ReviewDecision(action=ReviewAction.feedback.value, data=DENIED_TOOL_CALL_TEXT)
    raise InvalidReviewAction(value, "expected 'allow' or 'deny'")


class ChatModelResolver(Protocol):
    def get(self, model_id: Optional[str] = None) -> ChatModelAdapter: ...


@dataclass(frozen=True)
class AgentRuntimeConfig:
    """Explicit runtime configuration, owned by the process bootstrap."""

    default_model: str = "openai:gpt-4o"
    system_prompt: Optional[str] = None
    tool_timeout_seconds: float = 30.0
    tool_discovery_timeout_seconds: float = 10.0
    max_steps: int = 50


@dataclass(frozen=True)
class ChatAgentServiceDeps:
    """Dependency bundle for ``ChatAgentService``.

    This allows applications and tests to inject the checkpoint store, the
    chat model resolver and the tool catalog.
    """

    checkpoints: CheckpointStore
    models: ChatModelResolver
    tools: ToolCatalog
    config: AgentRuntimeConfig = field(default_factory=AgentRuntimeConfig)


class ChatAgentService:
    """Start, resume and inspect agent runs per thread."""

    def __init__(self, *, deps: ChatAgentServiceDeps) -> None:
        self._deps = deps
        self._active: Set[str] = set()

    @property
    def deps(self) -> ChatAgentServiceDeps:
        return self._deps

    def is_active(self, thread_id: str) -> bool:
        return thread_id in self._active

    def _acquire(self, thread_id: str) -> None:
        if thread_id in self._active:
            raise ThreadStateConflict(thread_id)
        self._active.add(thread_id)

    def _release(self, thread_id: str) -> None:
        self._active.discard(thread_id)

    def _engine(self, options: RunOptions, model_id: Optional[str]) -> AgentEngine:
        cfg = self._deps.config
        model_id = model_id or cfg.default_model
        deps = EngineDeps(
            checkpoints=self._deps.checkpoints,
            chat_model=self._deps.models.get(model_id),
            model_id=model_id,
            tools=self._deps.tools.registry(allow=options.tools),
            system_prompt=cfg.system_prompt or build_system_prompt(),
            approve_all_tools=options.approve_all_tools,
            max_steps=cfg.max_steps,
        )
        return AgentEngine(deps=deps)

    async def stream(self, thread_id: str, user_text: str, options: Optional[RunOptions] = None) -> TurnStream:
        """Append user text to the thread and start a run attempt.

        Raises:
            ValueError: If ``user_text`` is blank.
            ThreadStateConflict: If a run for the thread is already in flight.
        """
        if not user_text or not user_text.strip():
            raise ValueError("user_text must not be empty")
        options = options or RunOptions()

        self._acquire(thread_id)
        try:
            state = await self._deps.checkpoints.get(thread_id)
            if state is None:
                state = RunState(thread_id=thread_id)
            elif state.is_live:
                skipped = self._skip_unanswered(state)
                if skipped:
                    logger.info(f"Thread {thread_id}: skipped {skipped} unreviewed tool calls for new user input")

            state.messages.append(HumanMessage(content=user_text))
            state.node = RunNode.agent
            state.pending_tool_call = None
            state.version += 1
            await self._deps.checkpoints.put(thread_id, state)

            logger.info(f"Starting run for thread {thread_id} (model={options.model or 'default'})")
            engine = self._engine(options, options.model)
            return TurnStream(
                engine,
                state,
                kind="message",
                max_steps=self._deps.config.max_steps,
                on_close=lambda: self._release(thread_id),
            )
        except BaseException:
            self._release(thread_id)
            raise

    @staticmethod
    def _skip_unanswered(state: RunState) -> int:
        calls = unanswered_tool_calls(state.messages)
        for call in calls:
            state.messages.append(
                ToolMessage(
                    tool_call_id=call.id,
                    name=call.name,
                    content=SKIPPED_TOOL_CALL_TEXT,
                    status=ToolMessageStatus.error,
                )
            )
        return len(calls)

    async def resume(
        self,
        thread_id: str,
        decision: ReviewDecision,
        options: Optional[RunOptions] = None,
    ) -> TurnStream:
        """Apply a review decision to the thread's pending tool call.

        Raises:
            InvalidReviewAction: If the decision cannot be applied.
            RunNotSuspendedError: If nothing is awaiting review.
            ThreadStateConflict: If a run for the thread is already in flight.
        """
        validate_decision(decision)
        options = options or RunOptions()

        self._acquire(thread_id)
        try:
            state = await self._deps.checkpoints.get(thread_id)
            if state is None:
                raise RunNotSuspendedError(thread_id)
            if state.node not in (RunNode.suspended, RunNode.tool_approval) or (
                state.pending_tool_call is None and next_pending_call(state.messages) is None
            ):
                raise RunNotSuspendedError(thread_id, state.node.value)
            if state.node == RunNode.tool_approval:
                # Interrupted before suspension was recorded; review it now.
                state.node = RunNode.suspended

            logger.info(f"Resuming thread {thread_id} with decision {decision.action}")
            engine = self._engine(options, options.model or state.model)
            return TurnStream(
                engine,
                state,
                decision=decision,
                kind="resume",
                max_steps=self._deps.config.max_steps,
                on_close=lambda: self._release(thread_id),
            )
        except BaseException:
            self._release(thread_id)
            raise

    async def history(self, thread_id: str) -> List[Message]:
        """Ordered messages of the thread's latest checkpoint (empty if none)."""
        state = await self._deps.checkpoints.get(thread_id)
        return list(state.messages) if state is not None else []

    async def get_state(self, thread_id: str) -> Optional[RunState]:
        return await self._deps.checkpoints.get(thread_id)
