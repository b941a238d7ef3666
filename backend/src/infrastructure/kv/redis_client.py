import logging
from typing import Optional, Tuple

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from infrastructure.queue.errors import QueueStoreError

logger = logging.getLogger(__name__)

# KEYS[1]=value key, KEYS[2]=version key, ARGV[1]=value
_PUT_SCRIPT = """
redis.call('SET', KEYS[1], ARGV[1])
return redis.call('INCR', KEYS[2])
"""

# KEYS[1]=value key, KEYS[2]=version key, ARGV[1]=value, ARGV[2]=expected version
_CAS_SCRIPT = """
local current = tonumber(redis.call('GET', KEYS[2]) or '0')
if current ~= tonumber(ARGV[2]) then
  return 0
end
redis.call('SET', KEYS[1], ARGV[1])
redis.call('INCR', KEYS[2])
return 1
"""


def _version_key(key: str) -> str:
    return f"{key}:version"


class RedisKeyValue:
    """
    Redis-backed key-value store.
    The value lives under `key`, its write counter under `key:version`; both
    are updated together by a server-side script.
    """

    def __init__(self, url: str = "redis://localhost:6379/0", *, client: Optional[aioredis.Redis] = None) -> None:
        self._redis = client if client is not None else aioredis.from_url(url, decode_responses=True)
        self._url = url

    async def get(self, key: str) -> Optional[str]:
        try:
            return await self._redis.get(key)
        except RedisError as e:
            raise QueueStoreError(f"redis get '{key}' failed: {e}") from e

    async def put(self, key: str, value: str) -> None:
        try:
            await self._redis.eval(_PUT_SCRIPT, 2, key, _version_key(key), value)
        except RedisError as e:
            raise QueueStoreError(f"redis put '{key}' failed: {e}") from e

    async def get_versioned(self, key: str) -> Tuple[Optional[str], int]:
        try:
            value, version = await self._redis.mget(key, _version_key(key))
        except RedisError as e:
            raise QueueStoreError(f"redis get '{key}' failed: {e}") from e
        return value, int(version or 0)

    async def put_if_version(self, key: str, value: str, version: int) -> bool:
        try:
            ok = await self._redis.eval(_CAS_SCRIPT, 2, key, _version_key(key), value, version)
        except RedisError as e:
            raise QueueStoreError(f"redis put '{key}' failed: {e}") from e
        return bool(int(ok))

    async def ping(self) -> None:
        try:
            await self._redis.ping()
        except RedisError as e:
            raise QueueStoreError(f"redis not reachable: {e}") from e
        logger.info("Redis connected (%s)", self._url.split("@")[-1])

    async def close(self) -> None:
        await self._redis.aclose()
