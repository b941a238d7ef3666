from typing import Optional, Protocol, Tuple


class KeyValueClient(Protocol):
    """
    Minimal async key-value primitive the queue store is built on.
    Versions start at 0 for an absent key and increase on every write.
    """

    async def get(self, key: str) -> Optional[str]:
        """Raw value, or None when the key is absent."""

    async def put(self, key: str, value: str) -> None:
        """Unconditional write."""

    async def get_versioned(self, key: str) -> Tuple[Optional[str], int]:
        """(value, version) read as one consistent pair."""

    async def put_if_version(self, key: str, value: str, version: int) -> bool:
        """
        Writes only if the stored version still equals `version`.
        Returns False when another writer got there first.
        """

    async def close(self) -> None: ...
