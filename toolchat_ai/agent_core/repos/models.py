from __future__ import annotations

"""SQLAlchemy ORM models for checkpoint persistence.

Checkpoints are append-only: every write of a thread's ``RunState`` inserts a
new row with the next version number. The unique ``(thread_id, version)``
constraint lets the database reject a second writer that raced on the same
version, which is how concurrent runs fail fast across processes.

Table names are prefixed with ``tc_`` to avoid collisions in shared databases.
"""

from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


class CheckpointRow(Base):
    """Row model for ``tc_checkpoints``.

    ``state`` holds the JSON dump of the whole ``RunState`` (history, node,
    pending tool call); ``node`` is duplicated for cheap inspection.
    """

    __tablename__ = "tc_checkpoints"
    __table_args__ = (UniqueConstraint("thread_id", "version", name="uq_tc_checkpoints_thread_version"),)

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    thread_id: Mapped[str] = mapped_column(String(128), index=True)
    version: Mapped[int] = mapped_column(Integer)

    node: Mapped[str] = mapped_column(String(32))
    state: Mapped[Dict[str, Any]] = mapped_column(JSON().with_variant(JSONB(), "postgresql"))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
