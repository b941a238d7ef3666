# src/infrastructure/queue/policy.py
from infrastructure.queue.models import Decision


class CapacityAdmissionPolicy:
    """
    Front-of-queue window admission.
    - positions 0..max_active-1 are admitted
    - a queue no longer than max_active admits everyone, since eviction can
      shrink the queue between a visitor's enqueue and their position check
    """

    def __init__(self, max_active: int = 1) -> None:
        if max_active < 1:
            raise ValueError("max_active must be >= 1")
        self.max_active = max_active

    def decide(self, *, position: int, queue_length: int) -> Decision:
        if position < self.max_active or queue_length <= self.max_active:
            return Decision.admit
        return Decision.wait
