# src/infrastructure/queue/__init__.py
from infrastructure.queue.codec import decode_identity, decode_queue, encode_identity, encode_queue
from infrastructure.queue.config import WaitRoomConfig, load_waitroom_config
from infrastructure.queue.coordinator import QueueCoordinator
from infrastructure.queue.errors import AssetNotFoundError, QueueConflictError, QueueStoreError, WaitRoomError
from infrastructure.queue.metrics import NoopWaitRoomMetrics, PrometheusWaitRoomMetrics, WaitRoomMetrics
from infrastructure.queue.models import (
    AdmissionResult,
    Decision,
    IdentitySource,
    QueueSnapshot,
    ResolvedIdentity,
    VisitorEntry,
)
from infrastructure.queue.policy import CapacityAdmissionPolicy
from infrastructure.queue.store import BestEffortQueueStore, IQueueStore, StrictQueueStore

__all__ = [
    "WaitRoomConfig",
    "load_waitroom_config",
    "Decision",
    "IdentitySource",
    "VisitorEntry",
    "ResolvedIdentity",
    "AdmissionResult",
    "QueueSnapshot",
    "encode_identity",
    "decode_identity",
    "encode_queue",
    "decode_queue",
    "IQueueStore",
    "BestEffortQueueStore",
    "StrictQueueStore",
    "CapacityAdmissionPolicy",
    "QueueCoordinator",
    "WaitRoomMetrics",
    "NoopWaitRoomMetrics",
    "PrometheusWaitRoomMetrics",
    "WaitRoomError",
    "QueueStoreError",
    "QueueConflictError",
    "AssetNotFoundError",
]
