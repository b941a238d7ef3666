# src/infrastructure/kv/factory.py
from infrastructure.kv.interface import KeyValueClient
from infrastructure.kv.memory_client import InMemoryKeyValue
from infrastructure.kv.redis_client import RedisKeyValue
from infrastructure.queue.config import WaitRoomConfig


def make_kv(config: WaitRoomConfig) -> KeyValueClient:
    """
    store_backend: "memory" (single process) | "redis" (shared by all workers)
    """
    if config.store_backend == "redis":
        return RedisKeyValue(config.redis_url)
    return InMemoryKeyValue()
