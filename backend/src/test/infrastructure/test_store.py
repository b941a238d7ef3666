# tests/infrastructure/test_store.py
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

from infrastructure.kv.memory_client import InMemoryKeyValue
from infrastructure.queue.codec import encode_queue
from infrastructure.queue.errors import QueueConflictError, QueueStoreError
from infrastructure.queue.models import VisitorEntry
from infrastructure.queue.store import BestEffortQueueStore, StrictQueueStore


def entries(*ids):
    ts = datetime(2026, 1, 1, tzinfo=timezone.utc)
    return [VisitorEntry(id=i, enqueued_at=ts) for i in ids]


# ---------- in-memory backend ----------


@pytest.mark.asyncio
async def test_memory_kv_versions_every_write():
    kv = InMemoryKeyValue()
    assert await kv.get_versioned("k") == (None, 0)

    await kv.put("k", "a")
    assert await kv.get_versioned("k") == ("a", 1)

    assert await kv.put_if_version("k", "b", 0) is False
    assert await kv.put_if_version("k", "b", 1) is True
    assert await kv.get_versioned("k") == ("b", 2)


# ---------- best-effort ----------


@pytest.mark.asyncio
async def test_best_effort_load_of_absent_key_is_empty():
    store = BestEffortQueueStore(InMemoryKeyValue(), "queue")
    assert await store.load() == []


@pytest.mark.asyncio
async def test_best_effort_unreadable_record_is_empty(caplog):
    kv = InMemoryKeyValue()
    await kv.put("queue", "{broken")
    store = BestEffortQueueStore(kv, "queue")

    assert await store.load() == []
    assert "Unreadable queue record" in caplog.text


@pytest.mark.asyncio
async def test_best_effort_out_of_range_timestamp_is_unreadable(caplog):
    kv = InMemoryKeyValue()
    await kv.put("queue", '[{"id": "a", "enqueued_at": "0001-01-01T00:00:00+05:00"}]')
    store = BestEffortQueueStore(kv, "queue")

    assert await store.load() == []
    assert "Unreadable queue record" in caplog.text


@pytest.mark.asyncio
async def test_best_effort_update_skips_write_when_mutator_returns_none():
    kv = AsyncMock()
    kv.get.return_value = encode_queue(entries("a"))
    store = BestEffortQueueStore(kv, "queue")

    result = await store.update(lambda q: None)

    assert [e.id for e in result] == ["a"]
    kv.put.assert_not_called()


@pytest.mark.asyncio
async def test_best_effort_update_writes_mutated_queue():
    store = BestEffortQueueStore(InMemoryKeyValue(), "queue")
    await store.save(entries("a"))

    result = await store.update(lambda q: q + entries("b"))

    assert [e.id for e in result] == ["a", "b"]
    assert [e.id for e in await store.load()] == ["a", "b"]


@pytest.mark.asyncio
async def test_backend_failure_propagates():
    kv = AsyncMock()
    kv.get.side_effect = QueueStoreError("redis get 'queue' failed")
    store = BestEffortQueueStore(kv, "queue")

    with pytest.raises(QueueStoreError):
        await store.load()


# ---------- strict ----------


@pytest.mark.asyncio
async def test_strict_update_writes_against_read_version():
    kv = InMemoryKeyValue()
    store = StrictQueueStore(kv, "queue")
    await store.save(entries("a"))

    await store.update(lambda q: q + entries("b"))

    raw, version = await kv.get_versioned("queue")
    assert version == 2
    assert [e.id for e in await store.load()] == ["a", "b"]


@pytest.mark.asyncio
async def test_strict_update_gives_up_after_max_attempts():
    kv = AsyncMock()
    kv.get_versioned.return_value = ("[]", 1)
    kv.put_if_version.return_value = False
    store = StrictQueueStore(kv, "queue", max_attempts=3)

    with pytest.raises(QueueConflictError) as exc:
        await store.update(lambda q: q + entries("a"))

    assert exc.value.attempts == 3
    assert kv.put_if_version.await_count == 3


@pytest.mark.asyncio
async def test_strict_update_without_changes_does_not_write():
    kv = AsyncMock()
    kv.get_versioned.return_value = (encode_queue(entries("a")), 4)
    store = StrictQueueStore(kv, "queue")

    result = await store.update(lambda q: None)

    assert [e.id for e in result] == ["a"]
    kv.put_if_version.assert_not_called()
