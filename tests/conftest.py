"""Shared fixtures: in-memory storages, a manual clock and ready-made stores."""

from __future__ import annotations

import itertools
from collections.abc import Callable

import pytest
from vitrine.content.auth import Authenticator
from vitrine.content.store import ContentStore
from vitrine.persistence.scheduler import SaveScheduler
from vitrine.persistence.storage import MemoryStorage
from vitrine.persistence.timers import TimerHandle, Timers
from vitrine.shared.errors import StorageError, StorageQuotaExceeded


class _ManualHandle(TimerHandle):
    def __init__(self, when: float, seq: int, callback: Callable[[], None]) -> None:
        self.when = when
        self.seq = seq
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimers(Timers):
    """Timers driven by ``advance`` instead of the wall clock."""

    def __init__(self) -> None:
        self.now = 0.0
        self._handles: list[_ManualHandle] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = _ManualHandle(self.now + delay, next(self._seq), callback)
        self._handles.append(handle)
        return handle

    @property
    def pending(self) -> int:
        return sum(1 for h in self._handles if not h.cancelled and not h.fired)

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [
                h for h in self._handles
                if not h.cancelled and not h.fired and h.when <= target + 1e-9
            ]
            if not due:
                break
            handle = min(due, key=lambda h: (h.when, h.seq))
            self.now = max(self.now, handle.when)
            handle.fired = True
            handle.callback()
        self.now = target


class RecordingStorage(MemoryStorage):
    """Durable-looking memory storage that records writes and can fail them."""

    def __init__(self) -> None:
        super().__init__(durable=True)
        self.writes: list[tuple[str, str]] = []
        self.fail_writes = False

    def set(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageQuotaExceeded(key, len(value), 0)
        super().set(key, value)
        self.writes.append((key, value))

    def writes_for(self, key: str) -> list[str]:
        return [value for k, value in self.writes if k == key]


class BrokenStorage(MemoryStorage):
    """Storage whose writes and removes always fail."""

    def set(self, key: str, value: str) -> None:
        raise StorageError("disk full")

    def remove(self, key: str) -> None:
        raise StorageError("read-only")


@pytest.fixture
def timers() -> ManualTimers:
    return ManualTimers()


@pytest.fixture
def storage() -> RecordingStorage:
    return RecordingStorage()


@pytest.fixture
def session_storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def make_store(storage: RecordingStorage, session_storage: MemoryStorage):
    """Factory building a store over the shared storages."""

    def factory(confirm: Callable[[str], bool] | None = None, **kwargs) -> ContentStore:
        return ContentStore(
            kwargs.get("storage", storage),
            kwargs.get("session_storage", session_storage),
            Authenticator("admin"),
            confirm=confirm,
        )

    return factory


@pytest.fixture
def store(make_store) -> ContentStore:
    """Anonymous store that accepts every confirmation prompt."""
    return make_store(confirm=lambda message: True)


@pytest.fixture
def admin_store(store: ContentStore) -> ContentStore:
    assert store.login("admin") is True
    return store


@pytest.fixture
def scheduler(admin_store: ContentStore, storage: RecordingStorage, timers: ManualTimers):
    sched = SaveScheduler(admin_store, storage, timers)
    yield sched
    sched.close(flush=False)


@pytest.fixture
def broken_storage() -> BrokenStorage:
    return BrokenStorage()
