from __future__ import annotations

"""Checkpoint store contract.

The orchestrator depends on this Protocol instead of a concrete persistence
implementation.

Contract guidelines
-------------------

- All methods are async.
- ``put`` is atomic per thread id: a reader never observes a partially
  written ``RunState``.
- Writes for one thread id are applied in the order they are issued. Every
  ``put`` carries ``state.version == stored_version + 1`` (``1`` for a new
  thread); any other version means a second writer advanced the thread and
  the store raises ``ThreadStateConflict`` instead of overwriting it.
- Stored states are never mutated in place; ``get`` returns an independent
  copy so two reads without a ``put`` in between are equal.
"""

from typing import List, Optional, Protocol

from ..schemas.domain import RunState


class CheckpointStore(Protocol):
    """Durable, keyed persistence of orchestration state."""

    async def get(self, thread_id: str) -> Optional[RunState]:
        """
        Fetch the latest state of a thread.

        Args:
            thread_id: The conversation thread identifier.

        Returns:
            The latest RunState or None when the thread has no checkpoint.
        """
        ...

    async def put(self, thread_id: str, state: RunState) -> None:
        """
        Persist a new state for a thread.

        Args:
            thread_id: The conversation thread identifier.
            state: The state to store; ``state.version`` must be the next version.

        Raises:
            ThreadStateConflict: If the version does not follow the stored one.
        """
        ...

    async def history(self, thread_id: str) -> List[RunState]:
        """
        List every stored checkpoint of a thread, oldest first.

        Args:
            thread_id: The conversation thread identifier.
        """
        ...
