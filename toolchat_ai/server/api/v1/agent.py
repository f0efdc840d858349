"""
Agent API Endpoints.

This module streams agent turns to clients and serves thread history.

Features:
- Server-Sent Events (SSE) stream of normalized messages for one turn
- Resume of a suspended run with an allow/deny shorthand or a full decision
- Message history of a thread reconstructed from its latest checkpoint

SSE events:
- ``message``: one ``MessageResponse`` (``ai`` or ``tool``)
- ``interrupt``: the review request of a suspended run
- ``error``: a single error ``MessageResponse``; the stream ends after it
- ``done``: the turn finished (``done``) or is waiting for review (``suspended``)
"""

import json
from contextlib import aclosing
from typing import Annotated, Any, List, Literal, Optional

from fastapi import APIRouter, HTTPException, Query, Request, status
from sse_starlette.sse import EventSourceResponse
from starlette.background import BackgroundTask

from toolchat_ai.agent_core.runtime import TurnStatus, TurnStream
from toolchat_ai.agent_core.schemas import MessageResponse, MessageType, ReviewDecision, RunOptions
from toolchat_ai.agent_core.service import decision_from_transport
from toolchat_ai.core.logging_config import get_logger
from toolchat_ai.server.services.deps import ChatServiceDep, SessionDep
from toolchat_ai.server.services.threads import ensure_thread

logger = get_logger(__name__)
router = APIRouter()


def _parse_tools(tools: Optional[str]) -> Optional[List[str]]:
    if tools is None:
        return None
    names = [t.strip() for t in tools.split(",") if t.strip()]
    return names or None


def _parse_data(data: Optional[str]) -> Any:
    if data is None:
        return None
    try:
        return json.loads(data)
    except json.JSONDecodeError:
        return data


async def _sse_events(request: Request, turn: TurnStream):
    async with aclosing(aiter(turn)) as events:
        async for event in events:
            if await request.is_disconnected():
                logger.info(f"Client disconnected from stream for thread: {turn.thread_id}")
                return
            name = "error" if event.type == MessageType.error else "message"
            yield {"event": name, "data": event.model_dump_json()}

    outcome = turn.outcome
    if outcome.status == TurnStatus.failed:
        return
    if outcome.status == TurnStatus.suspended and outcome.review_request is not None:
        yield {"event": "interrupt", "data": outcome.review_request.model_dump_json(by_alias=True)}
    yield {"event": "done", "data": json.dumps({"threadId": turn.thread_id, "status": outcome.status.value})}


@router.get(
    "/stream",
    summary="Stream Agent Turn",
    description="Send a message to a thread, or resume its pending tool review, and stream the turn via SSE.",
    response_description="A stream of message events.",
    responses={
        200: {"description": "SSE stream established", "content": {"text/event-stream": {}}},
        400: {"description": "Missing content or invalid review decision"},
        409: {"description": "Another stream for the thread is in progress"},
    },
)
async def stream_agent(
    request: Request,
    chat: ChatServiceDep,
    session: SessionDep,
    thread_id: Annotated[str, Query(alias="threadId", min_length=1, max_length=128)],
    content: Optional[str] = None,
    model: Optional[str] = None,
    tools: Annotated[Optional[str], Query(description="Comma separated tool allow-list")] = None,
    approve_all_tools: Annotated[bool, Query(alias="approveAllTools")] = False,
    allow_tool: Annotated[Optional[Literal["allow", "deny"]], Query(alias="allowTool")] = None,
    action: Annotated[Optional[str], Query(description="Full review action: continue, update or feedback")] = None,
    data: Annotated[Optional[str], Query(description="Review data; JSON arguments for update")] = None,
):
    """
    Stream one agent turn for a thread.

    - With ``allowTool`` (``allow`` / ``deny``) or ``action`` the pending tool
      call of the thread is reviewed and the run resumes.
    - Otherwise ``content`` is appended as a new user message.

    Errors detected before streaming starts (invalid decision, nothing to
    review, concurrent stream) are returned as regular HTTP errors; errors
    during the run arrive as an ``error`` event.
    """
    options = RunOptions(model=model, tools=_parse_tools(tools), approve_all_tools=approve_all_tools)

    if allow_tool is not None or action is not None:
        decision = (
            decision_from_transport(allow_tool)
            if allow_tool is not None
            else ReviewDecision(action=action or "", data=_parse_data(data))
        )
        await ensure_thread(session, thread_id)
        turn = await chat.resume(thread_id, decision, options)
    else:
        if not content or not content.strip():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="content is required")
        await ensure_thread(session, thread_id, first_message=content)
        turn = await chat.stream(thread_id, content, options)

    logger.info(f"Starting event stream for thread: {thread_id}")
    # releases the thread even if the body iterator never starts
    return EventSourceResponse(_sse_events(request, turn), background=BackgroundTask(turn.aclose))


@router.get(
    "/history/{thread_id}",
    response_model=List[MessageResponse],
    summary="Get Thread History",
    description="Retrieve the ordered messages of a thread from its latest checkpoint.",
    response_description="A list of messages (empty when the thread has none).",
)
async def get_history(thread_id: str, chat: ChatServiceDep) -> List[MessageResponse]:
    """
    Get the message history of a thread.

    Messages are returned in conversation order, including the user's own
    messages. Error events are never part of the history.
    """
    messages = await chat.history(thread_id)
    return [MessageResponse.from_message(m) for m in messages]
