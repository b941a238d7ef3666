# src/infrastructure/queue/store.py
import logging
from typing import Callable, List, Optional

from infrastructure.kv.interface import KeyValueClient
from infrastructure.queue.codec import decode_queue, encode_queue
from infrastructure.queue.errors import QueueConflictError
from infrastructure.queue.models import VisitorEntry

logger = logging.getLogger(__name__)

# receives the loaded queue; returns the queue to persist, or None to skip the write
Mutator = Callable[[List[VisitorEntry]], Optional[List[VisitorEntry]]]


class IQueueStore:
    """
    Store port: one key holding the whole ordered queue.
    """

    key: str

    async def load(self) -> List[VisitorEntry]: ...
    async def save(self, entries: List[VisitorEntry]) -> None: ...
    async def update(self, mutator: Mutator) -> List[VisitorEntry]: ...


def _decode_or_empty(key: str, raw: Optional[str]) -> List[VisitorEntry]:
    try:
        return decode_queue(raw)
    except ValueError as e:
        logger.warning("Unreadable queue record under '%s', treating as empty: %s", key, e)
        return []


class BestEffortQueueStore(IQueueStore):
    """
    Plain get/put. Two concurrent updates can both read the same queue and the
    later write wins; a visitor lost that way is re-enqueued on its next request.
    """

    def __init__(self, kv: KeyValueClient, key: str = "queue") -> None:
        self.kv = kv
        self.key = key

    async def load(self) -> List[VisitorEntry]:
        return _decode_or_empty(self.key, await self.kv.get(self.key))

    async def save(self, entries: List[VisitorEntry]) -> None:
        await self.kv.put(self.key, encode_queue(entries))

    async def update(self, mutator: Mutator) -> List[VisitorEntry]:
        entries = await self.load()
        updated = mutator(list(entries))
        if updated is None:
            return entries
        await self.save(updated)
        return updated


class StrictQueueStore(IQueueStore):
    """
    Versioned writes: the mutator is re-run on a fresh read whenever another
    writer changed the queue in between.
    """

    def __init__(self, kv: KeyValueClient, key: str = "queue", *, max_attempts: int = 5) -> None:
        self.kv = kv
        self.key = key
        self.max_attempts = max(1, max_attempts)

    async def load(self) -> List[VisitorEntry]:
        raw, _ = await self.kv.get_versioned(self.key)
        return _decode_or_empty(self.key, raw)

    async def save(self, entries: List[VisitorEntry]) -> None:
        await self.kv.put(self.key, encode_queue(entries))

    async def update(self, mutator: Mutator) -> List[VisitorEntry]:
        for attempt in range(1, self.max_attempts + 1):
            raw, version = await self.kv.get_versioned(self.key)
            entries = _decode_or_empty(self.key, raw)
            updated = mutator(list(entries))
            if updated is None:
                return entries
            if await self.kv.put_if_version(self.key, encode_queue(updated), version):
                return updated
            logger.debug("Queue '%s' changed under us (attempt %d/%d)", self.key, attempt, self.max_attempts)
        raise QueueConflictError(self.key, self.max_attempts)
