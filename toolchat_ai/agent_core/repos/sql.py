from __future__ import annotations

"""SQLAlchemy async checkpoint store.

Usage
-----

Typical wiring (tests or application setup):

- Create an async engine with ``create_engine``.
- Create tables with ``create_all`` (there are no migrations in this project).
- Create a session factory with ``create_sessionmaker``.
- Build the store with ``SqlCheckpointStore(session_factory=...)``.

Transaction model
-----------------

Each method opens an ``AsyncSession``, performs its operation, and commits, so
a checkpoint is durable when ``put`` returns. A failed insert is rolled back as
a whole, which is what makes ``put`` atomic per thread id.
"""

import re
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from ..errors import ThreadStateConflict
from ..schemas.domain import RunState, new_id
from .interfaces import CheckpointStore
from .models import Base, CheckpointRow


def create_engine(db_url: str) -> AsyncEngine:
    """Create an async SQLAlchemy engine.

    The helper normalizes Postgres URLs to ensure the async driver is used.
    For example, it rewrites ``postgresql://`` and other variants to
    ``postgresql+asyncpg://``.
    """
    url = re.sub(r"^postgres(?:ql)?(?:\+[a-z0-9_]+)?://", "postgresql+asyncpg://", db_url, count=1)
    if url.startswith("sqlite"):
        return create_async_engine(url)
    return create_async_engine(url, pool_pre_ping=True)


def create_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an ``async_sessionmaker`` with safe defaults for this project."""
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_all(engine: AsyncEngine) -> None:
    """Create the checkpoint table if it does not exist."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _to_state(row: CheckpointRow) -> RunState:
    return RunState.model_validate(row.state)


@dataclass(frozen=True)
class SqlCheckpointStore(CheckpointStore):
    """SQL implementation of ``CheckpointStore``.

    Checkpoints store the serialized ``RunState`` used by the orchestrator to
    resume a suspended thread, possibly from another process.
    """

    session_factory: async_sessionmaker[AsyncSession]

    async def get(self, thread_id: str) -> Optional[RunState]:
        """
        Fetch the most recent checkpoint for a thread.

        Args:
            thread_id: The thread identifier.

        Returns:
            The latest RunState or None.
        """
        async with self.session_factory() as s:
            stmt = (
                select(CheckpointRow)
                .where(CheckpointRow.thread_id == thread_id)
                .order_by(CheckpointRow.version.desc())
                .limit(1)
            )
            res = await s.execute(stmt)
            row = res.scalar_one_or_none()
            if row is None:
                return None
            return _to_state(row)

    async def put(self, thread_id: str, state: RunState) -> None:
        """
        Append a checkpoint with the next version number.

        Args:
            thread_id: The thread identifier.
            state: The state to persist.

        Raises:
            ThreadStateConflict: If the version is not exactly one past the
                stored version, or another writer inserted it first.
        """
        async with self.session_factory() as s:
            current = await s.scalar(
                select(func.max(CheckpointRow.version)).where(CheckpointRow.thread_id == thread_id)
            )
            expected = (current or 0) + 1
            if state.version != expected:
                raise ThreadStateConflict(thread_id, f"expected checkpoint version {expected}, got {state.version}")
            s.add(
                CheckpointRow(
                    id=new_id(),
                    thread_id=thread_id,
                    version=state.version,
                    node=state.node.value,
                    state=state.model_dump(mode="json"),
                    created_at=_utc_now(),
                )
            )
            try:
                await s.commit()
            except IntegrityError as e:
                await s.rollback()
                raise ThreadStateConflict(thread_id, f"checkpoint version {state.version} already exists") from e

    async def history(self, thread_id: str) -> List[RunState]:
        """
        List all checkpoints of a thread, oldest first.

        Args:
            thread_id: The thread identifier.
        """
        async with self.session_factory() as s:
            stmt = select(CheckpointRow).where(CheckpointRow.thread_id == thread_id).order_by(CheckpointRow.version)
            res = await s.execute(stmt)
            return [_to_state(row) for row in res.scalars().all()]
