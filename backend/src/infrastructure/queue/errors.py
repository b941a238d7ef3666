# src/infrastructure/queue/errors.py


class WaitRoomError(Exception):
    """Base error for the waiting room."""


class QueueStoreError(WaitRoomError):
    """The key-value backend could not be read or written."""


class QueueConflictError(QueueStoreError):
    """A versioned write kept losing to concurrent writers."""

    def __init__(self, key: str, attempts: int) -> None:
        super().__init__(f"queue '{key}' update conflicted {attempts} times")
        self.key = key
        self.attempts = attempts


class AssetNotFoundError(WaitRoomError):
    def __init__(self, path: str) -> None:
        super().__init__(f"asset not found: {path}")
        self.path = path
