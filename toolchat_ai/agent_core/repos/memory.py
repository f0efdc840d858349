"""In-memory checkpoint store for tests and single-process development."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from typing import Dict, List, Optional

from ..errors import ThreadStateConflict
from ..schemas.domain import RunState
from .interfaces import CheckpointStore


class InMemoryCheckpointStore(CheckpointStore):
    """Keeps every version of every thread in process memory.

    States are deep-copied on the way in and on the way out, so callers can
    keep mutating their own objects without affecting what is stored.
    """

    def __init__(self) -> None:
        self._versions: Dict[str, List[RunState]] = {}
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def get(self, thread_id: str) -> Optional[RunState]:
        if thread_id not in self._versions:
            return None
        async with self._locks[thread_id]:
            return self._versions[thread_id][-1].model_copy(deep=True)

    async def put(self, thread_id: str, state: RunState) -> None:
        async with self._locks[thread_id]:
            versions = self._versions.get(thread_id, [])
            current = versions[-1].version if versions else 0
            if state.version != current + 1:
                raise ThreadStateConflict(
                    thread_id, f"expected checkpoint version {current + 1}, got {state.version}"
                )
            self._versions[thread_id] = versions + [state.model_copy(deep=True)]

    async def history(self, thread_id: str) -> List[RunState]:
        if thread_id not in self._versions:
            return []
        async with self._locks[thread_id]:
            return [s.model_copy(deep=True) for s in self._versions[thread_id]]
