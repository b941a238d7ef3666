# src/infrastructure/queue/models.py
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_visitor_id() -> str:
    return uuid.uuid4().hex


class Decision(str, Enum):
    admit = "admit"
    wait = "wait"


class IdentitySource(str, Enum):
    existing = "existing"
    minted = "minted"


class VisitorEntry(BaseModel):
    """
    One visitor in the queue. Also the payload of the identity cookie.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str = Field(min_length=1, max_length=128)
    enqueued_at: datetime

    @field_validator("enqueued_at")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        # naive timestamps are taken as UTC so age arithmetic never mixes kinds
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        try:
            return v.astimezone(timezone.utc)
        except OverflowError as e:
            # offset pushes the instant past datetime.min/max
            raise ValueError(f"timestamp out of range: {v.isoformat()}") from e

    def restamped(self, now: datetime) -> "VisitorEntry":
        return self.model_copy(update={"enqueued_at": now})


class ResolvedIdentity(BaseModel):
    """
    Identity taken from the request cookie, or freshly minted when the cookie
    is absent or malformed.
    """

    model_config = ConfigDict(extra="forbid")

    entry: VisitorEntry
    source: IdentitySource

    @property
    def minted(self) -> bool:
        return self.source == IdentitySource.minted


class AdmissionResult(BaseModel):
    model_config = ConfigDict(extra="forbid")

    decision: Decision
    position: int
    queue_length: int
    # the stored entry after this request; its timestamp goes into the cookie
    entry: VisitorEntry

    @property
    def admitted(self) -> bool:
        return self.decision == Decision.admit


class QueueSnapshot(BaseModel):
    model_config = ConfigDict(extra="forbid")

    ts: datetime = Field(default_factory=utcnow)
    entries: List[VisitorEntry] = Field(default_factory=list)
    max_active: int = 1

    @property
    def length(self) -> int:
        return len(self.entries)

    @property
    def active(self) -> int:
        return min(self.length, self.max_active)

    @property
    def waiting(self) -> int:
        return max(0, self.length - self.max_active)
