from __future__ import annotations

import pytest

from toolchat_ai.agent_core.errors import ThreadStateConflict
from toolchat_ai.agent_core.repos import InMemoryCheckpointStore
from toolchat_ai.agent_core.schemas import HumanMessage, RunNode, RunState


@pytest.fixture
def store() -> InMemoryCheckpointStore:
    return InMemoryCheckpointStore()


@pytest.mark.asyncio
async def test_get_unknown_thread_returns_none(store: InMemoryCheckpointStore) -> None:
    assert await store.get("missing") is None
    assert await store.history("missing") == []


@pytest.mark.asyncio
async def test_reads_of_unknown_threads_leave_no_state_behind(store: InMemoryCheckpointStore) -> None:
    for i in range(100):
        await store.get(f"missing-{i}")
        await store.history(f"missing-{i}")

    assert store._locks == {}
    assert store._versions == {}


@pytest.mark.asyncio
async def test_put_then_get_returns_latest_version(store: InMemoryCheckpointStore) -> None:
    state = RunState(thread_id="t", messages=[HumanMessage(content="hi")], version=1)
    await store.put("t", state)
    state.node = RunNode.done
    state.version = 2
    await store.put("t", state)

    latest = await store.get("t")

    assert latest is not None
    assert latest.version == 2
    assert latest.node == RunNode.done
    assert [s.version for s in await store.history("t")] == [1, 2]


@pytest.mark.asyncio
async def test_get_is_idempotent_and_isolated_from_callers(store: InMemoryCheckpointStore) -> None:
    state = RunState(thread_id="t", version=1)
    await store.put("t", state)
    state.messages.append(HumanMessage(content="not persisted"))

    first = await store.get("t")
    assert first is not None
    first.messages.append(HumanMessage(content="also not persisted"))
    second = await store.get("t")

    assert second is not None
    assert second.messages == []


@pytest.mark.asyncio
async def test_put_rejects_stale_and_skipped_versions(store: InMemoryCheckpointStore) -> None:
    await store.put("t", RunState(thread_id="t", version=1))

    with pytest.raises(ThreadStateConflict, match="expected checkpoint version 2, got 1"):
        await store.put("t", RunState(thread_id="t", version=1))
    with pytest.raises(ThreadStateConflict):
        await store.put("t", RunState(thread_id="t", version=3))

    latest = await store.get("t")
    assert latest is not None and latest.version == 1
