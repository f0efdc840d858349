"""
API endpoints for managing conversation threads.

Threads are the conversation identities listed in the UI. The messages of a
thread are served by the agent history endpoint; deleting a thread removes
its metadata only, its checkpoints are retained.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, Response, status
from sqlmodel import select

from toolchat_ai.server.models.thread import (
    DEFAULT_THREAD_TITLE,
    Thread,
    ThreadCreate,
    ThreadRead,
    ThreadUpdate,
)
from toolchat_ai.server.services.deps import SessionDep

router = APIRouter(tags=["threads"])

THREAD_LIST_LIMIT = 50


@router.get(
    "",
    response_model=list[ThreadRead],
    summary="List Threads",
    description="Retrieve the most recently updated threads.",
    response_description="A list of thread objects, newest first.",
)
async def list_threads(session: SessionDep) -> list[ThreadRead]:
    """
    List threads.

    Returns up to 50 threads ordered by last update, newest first.
    """
    stmt = select(Thread).order_by(Thread.updated_at.desc()).limit(THREAD_LIST_LIMIT)
    res = await session.execute(stmt)
    return [ThreadRead.model_validate(t) for t in res.scalars().all()]


@router.post(
    "",
    response_model=ThreadRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Thread",
    description="Create a new, empty thread.",
    responses={409: {"description": "Thread id already exists"}},
)
async def create_thread(session: SessionDep, data: ThreadCreate | None = None) -> ThreadRead:
    """
    Create a thread.

    - **id**: Optional client-chosen id; generated when omitted.
    - **title**: Optional title; defaults to "New thread".
    """
    data = data or ThreadCreate()
    if data.id is not None and await session.get(Thread, data.id) is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Thread {data.id} already exists")
    thread = Thread(title=data.title or DEFAULT_THREAD_TITLE)
    if data.id is not None:
        thread.id = data.id
    session.add(thread)
    await session.commit()
    await session.refresh(thread)
    return ThreadRead.model_validate(thread)


@router.get(
    "/{thread_id}",
    response_model=ThreadRead,
    summary="Get Thread",
    responses={404: {"description": "Thread not found"}},
)
async def get_thread(thread_id: str, session: SessionDep) -> ThreadRead:
    thread = await session.get(Thread, thread_id)
    if thread is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Thread {thread_id} not found")
    return ThreadRead.model_validate(thread)


@router.patch(
    "/{thread_id}",
    response_model=ThreadRead,
    summary="Rename Thread",
    responses={404: {"description": "Thread not found"}},
)
async def update_thread(thread_id: str, data: ThreadUpdate, session: SessionDep) -> ThreadRead:
    """
    Update a thread's title.
    """
    thread = await session.get(Thread, thread_id)
    if thread is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Thread {thread_id} not found")
    thread.title = data.title
    thread.updated_at = datetime.now(timezone.utc)
    session.add(thread)
    await session.commit()
    await session.refresh(thread)
    return ThreadRead.model_validate(thread)


@router.delete(
    "/{thread_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Thread",
    responses={404: {"description": "Thread not found"}},
)
async def delete_thread(thread_id: str, session: SessionDep) -> Response:
    """
    Delete a thread's metadata.

    Agent checkpoints of the thread are kept; they are simply no longer listed.
    """
    thread = await session.get(Thread, thread_id)
    if thread is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Thread {thread_id} not found")
    await session.delete(thread)
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
