import asyncio
from typing import Dict, Optional, Tuple


class InMemoryKeyValue:
    """
    Process-local key-value store.
    Shared only between requests of one worker process; use Redis for more.
    """

    def __init__(self) -> None:
        self._data: Dict[str, Tuple[str, int]] = {}
        self._lock = asyncio.Lock()

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            cur = self._data.get(key)
            return cur[0] if cur else None

    async def put(self, key: str, value: str) -> None:
        async with self._lock:
            _, version = self._data.get(key, (None, 0))
            self._data[key] = (value, version + 1)

    async def get_versioned(self, key: str) -> Tuple[Optional[str], int]:
        async with self._lock:
            value, version = self._data.get(key, (None, 0))
            return value, version

    async def put_if_version(self, key: str, value: str, version: int) -> bool:
        async with self._lock:
            _, current = self._data.get(key, (None, 0))
            if current != version:
                return False
            self._data[key] = (value, current + 1)
            return True

    async def close(self) -> None:
        async with self._lock:
            self._data.clear()
