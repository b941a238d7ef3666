# src/infrastructure/queue/coordinator.py
import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional

from infrastructure.queue.config import WaitRoomConfig
from infrastructure.queue.metrics import NoopWaitRoomMetrics, WaitRoomMetrics
from infrastructure.queue.models import AdmissionResult, Decision, VisitorEntry, utcnow
from infrastructure.queue.policy import CapacityAdmissionPolicy
from infrastructure.queue.store import IQueueStore

logger = logging.getLogger(__name__)


def _index_of(entries: List[VisitorEntry], visitor_id: str) -> int:
    for i, entry in enumerate(entries):
        if entry.id == visitor_id:
            return i
    return -1


class QueueCoordinator:
    """
    Read-evict-modify-write cycle over the shared queue.

    State per visitor: NEW -> WAITING -> ACTIVE -> GONE.
    Every operation re-reads the queue, so positions are recomputed on each
    request and a lost concurrent write heals on the visitor's next request.
    """

    def __init__(
        self,
        *,
        store: IQueueStore,
        config: Optional[WaitRoomConfig] = None,
        policy: Optional[CapacityAdmissionPolicy] = None,
        metrics: Optional[WaitRoomMetrics] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.config = config or WaitRoomConfig()
        self.policy = policy or CapacityAdmissionPolicy(self.config.max_active)
        self.metrics = metrics or NoopWaitRoomMetrics()
        self._clock = clock

    @property
    def session_timeout(self) -> timedelta:
        return timedelta(seconds=self.config.session_timeout_sec)

    # -------- public API --------

    async def evict_stale(self) -> None:
        now = self._clock()
        ttl = self.session_timeout
        dropped: List[VisitorEntry] = []
        kept: List[int] = []

        def _drop_stale(entries: List[VisitorEntry]) -> Optional[List[VisitorEntry]]:
            fresh = [e for e in entries if (now - e.enqueued_at) < ttl]
            dropped[:] = [e for e in entries if (now - e.enqueued_at) >= ttl]
            kept[:] = [len(fresh)]
            if len(fresh) == len(entries):
                return None
            return fresh

        await self.store.update(_drop_stale)
        if dropped:
            logger.info("Evicted %d stale visitor(s): %s", len(dropped), ", ".join(e.id for e in dropped))
            self.metrics.observe_evict(len(dropped))
            self.metrics.gauge_queue_length(kept[0])

    async def admit_or_enqueue(self, identity: VisitorEntry) -> AdmissionResult:
        await self.evict_stale()
        now = self._clock()
        outcome: Dict[str, Any] = {}

        def _find_or_enqueue(entries: List[VisitorEntry]) -> Optional[List[VisitorEntry]]:
            changed = False
            pos = _index_of(entries, identity.id)
            enqueued = pos < 0
            if enqueued:
                entries.append(identity.restamped(now))
                pos = len(entries) - 1
                changed = True

            decision = self.policy.decide(position=pos, queue_length=len(entries))
            if decision == Decision.admit or self.config.refresh_waiting:
                if entries[pos].enqueued_at != now:
                    entries[pos] = entries[pos].restamped(now)
                    changed = True

            outcome.update(
                decision=decision,
                position=pos,
                queue_length=len(entries),
                entry=entries[pos],
                enqueued=enqueued,
            )
            return entries if changed else None

        await self.store.update(_find_or_enqueue)

        if outcome["enqueued"]:
            logger.info("Enqueued visitor %s at position %d", identity.id, outcome["position"])
            self.metrics.observe_enqueue()
        result = AdmissionResult(
            decision=outcome["decision"],
            position=outcome["position"],
            queue_length=outcome["queue_length"],
            entry=outcome["entry"],
        )
        logger.debug(
            "Visitor %s -> %s (position %d of %d)",
            identity.id,
            result.decision.value,
            result.position,
            result.queue_length,
        )
        self.metrics.observe_decision(result.admitted)
        self.metrics.gauge_queue_length(result.queue_length)
        return result

    async def remove(self, visitor_id: str) -> None:
        removed = 0

        def _without(entries: List[VisitorEntry]) -> List[VisitorEntry]:
            nonlocal removed
            kept = [e for e in entries if e.id != visitor_id]
            removed = len(entries) - len(kept)
            return kept

        remaining = await self.store.update(_without)
        if removed:
            logger.info("Visitor %s left the queue", visitor_id)
            self.metrics.observe_remove()
        self.metrics.gauge_queue_length(len(remaining))

    async def snapshot(self) -> List[VisitorEntry]:
        await self.evict_stale()
        entries = await self.store.load()
        self.metrics.gauge_queue_length(len(entries))
        return entries
