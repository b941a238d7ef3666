# src/infrastructure/queue/metrics.py
from abc import ABC, abstractmethod
from typing import Optional

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Gauge


class WaitRoomMetrics(ABC):
    @abstractmethod
    def observe_enqueue(self) -> None: ...

    @abstractmethod
    def observe_decision(self, admitted: bool) -> None: ...

    @abstractmethod
    def observe_evict(self, n: int) -> None: ...

    @abstractmethod
    def observe_remove(self) -> None: ...

    @abstractmethod
    def gauge_queue_length(self, n: int) -> None: ...


class NoopWaitRoomMetrics(WaitRoomMetrics):
    def observe_enqueue(self) -> None:  # pragma: no cover
        pass

    def observe_decision(self, admitted: bool) -> None:  # pragma: no cover
        pass

    def observe_evict(self, n: int) -> None:  # pragma: no cover
        pass

    def observe_remove(self) -> None:  # pragma: no cover
        pass

    def gauge_queue_length(self, n: int) -> None:  # pragma: no cover
        pass


class PrometheusWaitRoomMetrics(WaitRoomMetrics):
    def __init__(self, registry: Optional[CollectorRegistry] = None) -> None:
        self.registry = registry if registry is not None else REGISTRY
        self.enqueued = Counter("waitroom_enqueued_total", "Visitors appended to the queue", registry=self.registry)
        self.decisions = Counter(
            "waitroom_decisions_total",
            "Admission decisions",
            ["decision"],  # admit|wait
            registry=self.registry,
        )
        self.evicted = Counter("waitroom_evicted_total", "Stale entries evicted", registry=self.registry)
        self.removed = Counter("waitroom_removed_total", "Visitors that reached the exit page", registry=self.registry)
        self.queue_length = Gauge("waitroom_queue_length", "Entries in the queue", registry=self.registry)

    def observe_enqueue(self) -> None:
        self.enqueued.inc()

    def observe_decision(self, admitted: bool) -> None:
        self.decisions.labels(decision="admit" if admitted else "wait").inc()

    def observe_evict(self, n: int) -> None:
        self.evicted.inc(n)

    def observe_remove(self) -> None:
        self.removed.inc()

    def gauge_queue_length(self, n: int) -> None:
        self.queue_length.set(n)
