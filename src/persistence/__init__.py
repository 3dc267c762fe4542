"""Storage backends, timers and the debounced save scheduler.

``vitrine.persistence.scheduler`` depends on the content store and is not
re-exported here.
"""

from vitrine.persistence.storage import (
    CART_KEY,
    CONTENT_BACKUP_KEY,
    CONTENT_KEY,
    SESSION_KEY,
    JsonFileStorage,
    KeyValueStorage,
    MemoryStorage,
)
from vitrine.persistence.timers import AsyncioTimers, ThreadingTimers, TimerHandle, Timers

__all__ = [
    "AsyncioTimers",
    "CART_KEY",
    "CONTENT_BACKUP_KEY",
    "CONTENT_KEY",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "SESSION_KEY",
    "ThreadingTimers",
    "TimerHandle",
    "Timers",
]
