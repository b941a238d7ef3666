# src/service/waitroom.py
"""
Waiting room facade used by the gate routes.

Wires config -> key-value backend -> queue store -> coordinator, plus the
identity resolver and the site content collaborator.

Consistency:
- best_effort: plain get/put on the queue key; concurrent requests may
  overwrite each other's update. Bounded by the short session timeout and by
  recomputing every visitor's position on each request.
- strict: compare-and-swap on a version counter, mutation re-run on conflict.
"""

import logging
from datetime import datetime
from typing import Callable, Optional, Tuple

from infrastructure.content.assets import AssetStore
from infrastructure.kv.factory import make_kv
from infrastructure.kv.interface import KeyValueClient
from infrastructure.kv.redis_client import RedisKeyValue
from infrastructure.queue.config import WaitRoomConfig, load_waitroom_config
from infrastructure.queue.coordinator import QueueCoordinator
from infrastructure.queue.metrics import NoopWaitRoomMetrics, PrometheusWaitRoomMetrics, WaitRoomMetrics
from infrastructure.queue.models import AdmissionResult, QueueSnapshot, ResolvedIdentity, utcnow
from infrastructure.queue.store import BestEffortQueueStore, IQueueStore, StrictQueueStore
from service.identity import IdentityResolver, HasCookies

logger = logging.getLogger(__name__)


def make_store(kv: KeyValueClient, config: WaitRoomConfig) -> IQueueStore:
    if config.consistency == "strict":
        return StrictQueueStore(kv, config.queue_key, max_attempts=config.strict_max_attempts)
    return BestEffortQueueStore(kv, config.queue_key)


class WaitRoomService:
    def __init__(
        self,
        *,
        config: Optional[WaitRoomConfig] = None,
        kv: Optional[KeyValueClient] = None,
        assets: Optional[AssetStore] = None,
        metrics: Optional[WaitRoomMetrics] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.config = config or load_waitroom_config()
        self.kv = kv or make_kv(self.config)
        if metrics is None:
            metrics = PrometheusWaitRoomMetrics() if self.config.metrics_backend == "prom" else NoopWaitRoomMetrics()
        self.metrics = metrics

        self.coordinator = QueueCoordinator(
            store=make_store(self.kv, self.config),
            config=self.config,
            metrics=self.metrics,
            clock=clock,
        )
        self.identity = IdentityResolver(self.config.cookie_name, clock=clock)
        self.assets = assets or AssetStore(self.config.site_dir, prefix=self.config.asset_prefix)

    # ---------- lifecycle ----------

    async def start(self) -> None:
        if isinstance(self.kv, RedisKeyValue):
            await self.kv.ping()
        logger.info(
            "Waiting room ready: max_active=%d timeout=%ss store=%s/%s",
            self.config.max_active,
            self.config.session_timeout_sec,
            self.config.store_backend,
            self.config.consistency,
        )

    async def close(self) -> None:
        await self.kv.close()

    # ---------- gate operations ----------

    async def enter(self, request: HasCookies) -> Tuple[ResolvedIdentity, AdmissionResult]:
        """Protected path: resolve identity, then admit or enqueue it."""
        ident = self.identity.resolve(request)
        result = await self.coordinator.admit_or_enqueue(ident.entry)
        return ident, result

    async def leave(self, request: HasCookies) -> ResolvedIdentity:
        """Exit path: drop the visitor from the queue."""
        ident = self.identity.resolve(request)
        await self.coordinator.remove(ident.entry.id)
        return ident

    def track(self, request: HasCookies) -> ResolvedIdentity:
        """Pass-through paths only carry the identity along."""
        return self.identity.resolve(request)

    async def status(self) -> QueueSnapshot:
        entries = await self.coordinator.snapshot()
        return QueueSnapshot(entries=entries, max_active=self.config.max_active)
