"""Thread metadata helpers shared by the agent and thread routes."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from toolchat_ai.server.models.thread import DEFAULT_THREAD_TITLE, Thread, title_from_message


async def ensure_thread(session: AsyncSession, thread_id: str, first_message: Optional[str] = None) -> Thread:
    """Create the thread on first use and bump ``updated_at`` on every turn.

    A new thread, or one still carrying the default title, takes its title
    from ``first_message``.
    """
    thread = await session.get(Thread, thread_id)
    if thread is None:
        thread = Thread(id=thread_id, title=title_from_message(first_message or ""))
        session.add(thread)
    else:
        if first_message and thread.title == DEFAULT_THREAD_TITLE:
            thread.title = title_from_message(first_message)
        thread.updated_at = datetime.now(timezone.utc)
    await session.commit()
    await session.refresh(thread)
    return thread
