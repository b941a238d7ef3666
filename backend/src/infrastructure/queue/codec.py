# src/infrastructure/queue/codec.py
"""
Wire format of the identity cookie and of the persisted queue record.

Both are compact JSON of `{id, enqueued_at}` objects. Nothing outside this
module knows the encoding, so the cookie can be swapped for a signed token
without touching the coordinator.
"""

import json
from typing import List, Optional

from pydantic import TypeAdapter

from infrastructure.queue.models import VisitorEntry

_QUEUE_ADAPTER = TypeAdapter(List[VisitorEntry])


def encode_identity(entry: VisitorEntry) -> str:
    return entry.model_dump_json()


def decode_identity(raw: Optional[str]) -> Optional[VisitorEntry]:
    """Returns None for anything that is not a well-formed identity record."""
    if not raw:
        return None
    try:
        return VisitorEntry.model_validate_json(raw)
    except ValueError:
        return None


def encode_queue(entries: List[VisitorEntry]) -> str:
    return _QUEUE_ADAPTER.dump_json(entries).decode("utf-8")


def decode_queue(raw: Optional[str]) -> List[VisitorEntry]:
    """
    Absent record -> empty queue.
    Raises ValueError when the record exists but is not a JSON array of entries.
    """
    if raw is None or raw == "":
        return []
    data = json.loads(raw)
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError("queue record is not a JSON array")
    return _QUEUE_ADAPTER.validate_python(data)
