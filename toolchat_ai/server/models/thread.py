"""
Database models for conversation threads.

A thread is the conversation identity shown in the thread list. Its messages
live in the agent checkpoints keyed by the same id; this table only holds the
display metadata.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4

from sqlmodel import Column, DateTime, Field, SQLModel

DEFAULT_THREAD_TITLE = "New thread"
TITLE_MAX_LENGTH = 100


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def title_from_message(text: str) -> str:
    """Seed a thread title from the first user message."""
    title = " ".join(text.split())[:TITLE_MAX_LENGTH]
    return title or DEFAULT_THREAD_TITLE


class ThreadBase(SQLModel):
    """Base fields for a thread."""

    title: str = Field(default=DEFAULT_THREAD_TITLE, max_length=255, description="Thread title")


class Thread(ThreadBase, table=True):
    """Persistent conversation thread."""

    __tablename__ = "threads"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True, max_length=128)
    created_at: datetime = Field(
        default_factory=_utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="Creation timestamp",
    )
    updated_at: datetime = Field(
        default_factory=_utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
        description="Last update timestamp",
    )


class ThreadRead(ThreadBase):
    """Schema for reading a thread."""

    id: str
    created_at: datetime
    updated_at: datetime


class ThreadCreate(SQLModel):
    """Schema for creating a thread."""

    id: Optional[str] = Field(default=None, max_length=128)
    title: Optional[str] = Field(default=None, max_length=255)


class ThreadUpdate(SQLModel):
    """Schema for updating a thread."""

    title: str = Field(min_length=1, max_length=255)
