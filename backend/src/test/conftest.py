# tests/conftest.py
from datetime import datetime, timedelta, timezone

import pytest

from infrastructure.kv.memory_client import InMemoryKeyValue
from infrastructure.queue.config import WaitRoomConfig
from infrastructure.queue.coordinator import QueueCoordinator
from infrastructure.queue.store import BestEffortQueueStore

T0 = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def kv() -> InMemoryKeyValue:
    return InMemoryKeyValue()


@pytest.fixture
def config() -> WaitRoomConfig:
    return WaitRoomConfig(max_active=1, session_timeout_sec=300)


@pytest.fixture
def store(kv) -> BestEffortQueueStore:
    return BestEffortQueueStore(kv, "queue")


@pytest.fixture
def coordinator(store, config, clock) -> QueueCoordinator:
    return QueueCoordinator(store=store, config=config, clock=clock)


@pytest.fixture
def site_dir(tmp_path):
    root = tmp_path / "site"
    root.mkdir()
    (root / "index.html").write_text("<h1>home</h1>", encoding="utf-8")
    (root / "about.html").write_text("<h1>about</h1>", encoding="utf-8")
    (root / "waitroom.html").write_text("<h1>please wait</h1>", encoding="utf-8")
    (root / "thankyou.html").write_text("<h1>thank you</h1>", encoding="utf-8")
    (root / "404.html").write_text("<h1>missing</h1>", encoding="utf-8")
    (root / "css").mkdir()
    (root / "css" / "site.css").write_text("body {}", encoding="utf-8")
    return root
