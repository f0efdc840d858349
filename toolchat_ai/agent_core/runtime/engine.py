from __future__ import annotations

"""LangGraph orchestration engine.

``AgentEngine`` drives one conversational invocation for a thread through the
``agent -> tool_approval -> tools -> agent`` loop.

Execution model
---------------

- The engine runs a LangGraph state machine over ``_GraphState`` whose only
  durable part is the thread's ``RunState``.
- The graph is entered at the node recorded in ``RunState.node``, so a run
  suspended in one process can be resumed from another.
- Every node writes a checkpoint (``RunState.version + 1``) before returning.

Tool review
-----------

Every proposed tool call passes through ``tool_approval``. The call under
review is the last listed call of the latest ``ai`` message that has not been
answered by a ``tool`` message yet; once it is answered, the next unanswered
one (walking backwards) is reviewed. Only when every call of that message is
answered does control return to ``agent``.

Without a decision, ``tool_approval`` either approves the call directly
(``approve_all_tools``) or moves the run to ``suspended`` and ends the
invocation. A later invocation with a ``ReviewDecision`` re-enters at
``tool_approval``:

- ``continue``: execute the call unchanged.
- ``update``: replace the arguments (id and name are kept), then execute.
- ``feedback``: answer the call with the supplied text instead of executing.
"""

import json
import logging
from contextlib import aclosing
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

from langgraph.graph import END, START, StateGraph

from ..errors import InvalidReviewAction
from ..schemas.domain import (
    AiMessage,
    Message,
    ReviewAction,
    ReviewDecision,
    RunNode,
    RunState,
    ToolCall,
    ToolMessage,
)
from .models import EngineDeps, _GraphState

logger = logging.getLogger(__name__)

_REVIEW_ACTIONS = {a.value for a in ReviewAction}


def _latest_ai_index(messages: Sequence[Message]) -> Optional[int]:
    for idx in range(len(messages) - 1, -1, -1):
        if isinstance(messages[idx], AiMessage):
            return idx
    return None


def unanswered_tool_calls(messages: Sequence[Message]) -> List[ToolCall]:
    """Tool calls of the latest ``ai`` message without a ``tool`` answer, in listed order."""
    idx = _latest_ai_index(messages)
    if idx is None:
        return []
    ai = messages[idx]
    assert isinstance(ai, AiMessage)
    answered = {m.tool_call_id for m in messages[idx + 1 :] if isinstance(m, ToolMessage)}
    return [tc for tc in ai.tool_calls if tc.id not in answered]


def next_pending_call(messages: Sequence[Message]) -> Optional[ToolCall]:
    """The call to review next: the last unanswered call of the latest ``ai`` message."""
    pending = unanswered_tool_calls(messages)
    return pending[-1] if pending else None


def validate_decision(decision: ReviewDecision) -> None:
    """Reject decisions the approval node cannot apply.

    Raises:
        InvalidReviewAction: If the action is unknown or ``update`` does not carry
            an argument mapping.
    """
    if decision.action not in _REVIEW_ACTIONS:
        raise InvalidReviewAction(decision.action)
    if decision.action == ReviewAction.update.value and not isinstance(decision.data, dict):
        raise InvalidReviewAction(decision.action, "update data must be an object of tool arguments")


def _feedback_text(data: Any) -> str:
    if data is None:
        return ""
    if isinstance(data, str):
        return data
    return json.dumps(data, ensure_ascii=False, default=str)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _after_pending(run: RunState) -> None:
    """Point the run at the next unanswered call, or back at the model."""
    pending = next_pending_call(run.messages)
    run.pending_tool_call = pending
    run.node = RunNode.tool_approval if pending is not None else RunNode.agent


@dataclass(frozen=True)
class EngineStep:
    """One node execution as observed by a streaming caller."""

    node: str
    emitted: List[Message]
    run: RunState


class AgentEngine:
    """Run the orchestration state machine for one thread.

    The engine is orchestration-only: model calls go to
    ``EngineDeps.chat_model``, tool calls to ``EngineDeps.tools`` and every
    transition is persisted through ``EngineDeps.checkpoints``.
    """

    def __init__(self, *, deps: EngineDeps) -> None:
        """
        Initialize the AgentEngine.

        Args:
            deps: The runtime dependencies (store, chat model, tools, policy).
        """
        self._deps = deps
        self._graph = self._build_graph()

    def _build_graph(self):
        """Build and compile the LangGraph state machine."""
        g: StateGraph = StateGraph(_GraphState)
        g.add_node(RunNode.agent.value, self._node_agent)
        g.add_node(RunNode.tool_approval.value, self._node_tool_approval)
        g.add_node(RunNode.tools.value, self._node_tools)

        routes = {
            "agent": RunNode.agent.value,
            "tool_approval": RunNode.tool_approval.value,
            "tools": RunNode.tools.value,
            "end": END,
        }
        g.add_conditional_edges(START, self._route, routes)
        for node in (RunNode.agent, RunNode.tool_approval, RunNode.tools):
            g.add_conditional_edges(node.value, self._route, routes)
        return g.compile()

    def _config(self) -> Dict[str, Any]:
        return {"recursion_limit": self._deps.max_steps}

    @staticmethod
    def _initial(run: RunState, decision: Optional[ReviewDecision]) -> _GraphState:
        if decision is not None:
            validate_decision(decision)
        return {"run": run.model_copy(deep=True), "decision": decision, "emitted": []}

    async def run(self, run: RunState, decision: Optional[ReviewDecision] = None) -> RunState:
        """Drive the thread until it is done or suspended and return the final state."""
        logger.info(f"Running thread {run.thread_id} from node {run.node.value}")
        final = await self._graph.ainvoke(self._initial(run, decision), config=self._config())
        return final["run"]

    async def astream(self, run: RunState, decision: Optional[ReviewDecision] = None) -> AsyncIterator[EngineStep]:
        """Drive the thread, yielding one ``EngineStep`` per executed node."""
        logger.info(f"Streaming thread {run.thread_id} from node {run.node.value}")
        chunks = self._graph.astream(self._initial(run, decision), config=self._config(), stream_mode="updates")
        async with aclosing(chunks):
            async for chunk in chunks:
                for node, update in chunk.items():
                    if not update:
                        continue
                    yield EngineStep(node=node, emitted=list(update.get("emitted") or []), run=update["run"])

    # ------------------------------------------------------------------
    # routing
    # ------------------------------------------------------------------

    def _route(self, state: _GraphState) -> str:
        node = state["run"].node
        if node == RunNode.suspended:
            # A suspended run only moves again when a decision is supplied.
            return "tool_approval" if state.get("decision") is not None else "end"
        if node == RunNode.done:
            return "end"
        return node.value

    # ------------------------------------------------------------------
    # nodes
    # ------------------------------------------------------------------

    async def _save(self, run: RunState) -> None:
        run.version += 1
        run.updated_at = _utc_now()
        await self._deps.checkpoints.put(run.thread_id, run)
        logger.debug(f"Checkpoint v{run.version} for thread {run.thread_id} at node {run.node.value}")

    async def _node_agent(self, state: _GraphState) -> Dict[str, Any]:
        run = state["run"].model_copy(deep=True)

        tools = await self._deps.tools.resolve_tools()
        reply = await self._deps.chat_model.invoke(run.messages, tools, system_prompt=self._deps.system_prompt)
        run.messages.append(reply)
        run.model = self._deps.model_id or self._deps.chat_model.name

        pending = next_pending_call(run.messages)
        run.pending_tool_call = pending
        run.node = RunNode.tool_approval if pending is not None else RunNode.done
        await self._save(run)

        logger.debug(
            f"Thread {run.thread_id}: model proposed {len(reply.tool_calls)} tool calls, next node {run.node.value}"
        )
        return {"run": run, "emitted": [reply], "decision": None}

    async def _node_tool_approval(self, state: _GraphState) -> Dict[str, Any]:
        run = state["run"].model_copy(deep=True)
        decision = state.get("decision")
        emitted: List[Message] = []

        call = run.pending_tool_call or next_pending_call(run.messages)
        if call is None:
            # Nothing left to review; let the model continue.
            run.pending_tool_call = None
            run.node = RunNode.agent
            await self._save(run)
            return {"run": run, "emitted": emitted, "decision": None}
        run.pending_tool_call = call

        if decision is None:
            if self._deps.approve_all_tools:
                run.node = RunNode.tools
            else:
                run.node = RunNode.suspended
                logger.info(f"Thread {run.thread_id} suspended for review of tool call {call.name} ({call.id})")
            await self._save(run)
            return {"run": run, "emitted": emitted, "decision": None}

        validate_decision(decision)
        action = ReviewAction(decision.action)
        logger.debug(f"Thread {run.thread_id}: applying review decision {action.value} to {call.id}")

        if action == ReviewAction.continue_:
            run.node = RunNode.tools
        elif action == ReviewAction.update:
            updated = ToolCall(id=call.id, name=call.name, args=dict(decision.data))
            self._replace_call(run, updated)
            run.pending_tool_call = updated
            run.node = RunNode.tools
        else:
            feedback = ToolMessage(tool_call_id=call.id, name=call.name, content=_feedback_text(decision.data))
            run.messages.append(feedback)
            emitted.append(feedback)
            _after_pending(run)

        await self._save(run)
        return {"run": run, "emitted": emitted, "decision": None}

    @staticmethod
    def _replace_call(run: RunState, updated: ToolCall) -> None:
        idx = _latest_ai_index(run.messages)
        if idx is None:
            return
        ai = run.messages[idx]
        assert isinstance(ai, AiMessage)
        ai.tool_calls = [updated if tc.id == updated.id else tc for tc in ai.tool_calls]

    async def _node_tools(self, state: _GraphState) -> Dict[str, Any]:
        run = state["run"].model_copy(deep=True)
        call = run.pending_tool_call or next_pending_call(run.messages)
        if call is None:
            run.node = RunNode.agent
            await self._save(run)
            return {"run": run, "emitted": [], "decision": None}

        result = await self._deps.tools.execute(call)
        if not result.ok:
            logger.warning(f"Thread {run.thread_id}: tool {call.name} failed: {result.content}")
        message = result.to_message()
        run.messages.append(message)
        _after_pending(run)
        await self._save(run)
        return {"run": run, "emitted": [message], "decision": None}
