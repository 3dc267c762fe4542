"""Composition root: wires storage, store, scheduler and transfer together.

Lifecycle is explicit: ``Site.open`` loads state and starts observing
content changes, ``close`` flushes a pending save and tears everything
down in reverse order.
"""

from __future__ import annotations

import logging
from types import TracebackType

from vitrine.config import VitrineConfig
from vitrine.content.auth import Authenticator
from vitrine.content.store import Confirm, ContentStore
from vitrine.content.transfer import ContentTransfer
from vitrine.persistence.scheduler import SaveScheduler
from vitrine.persistence.storage import JsonFileStorage, KeyValueStorage, MemoryStorage
from vitrine.persistence.timers import ThreadingTimers, Timers

logger = logging.getLogger(__name__)


class Site:
    """A running site store and its collaborators."""

    def __init__(
        self,
        store: ContentStore,
        scheduler: SaveScheduler,
        transfer: ContentTransfer,
        storage: KeyValueStorage,
    ) -> None:
        self.store = store
        self.scheduler = scheduler
        self.transfer = transfer
        self.storage = storage
        self._closed = False

    @classmethod
    def open(
        cls,
        config: VitrineConfig | None = None,
        *,
        storage: KeyValueStorage | None = None,
        session_storage: KeyValueStorage | None = None,
        timers: Timers | None = None,
        confirm: Confirm | None = None,
    ) -> Site:
        config = config or VitrineConfig()
        if storage is None:
            storage = JsonFileStorage(config.storage_path, quota_bytes=config.storage.quota_bytes)
        store = ContentStore(
            storage,
            session_storage if session_storage is not None else MemoryStorage(),
            Authenticator(config.auth.password, config.auth.password_sha256),
            confirm=confirm,
        )
        scheduler = SaveScheduler(
            store,
            storage,
            timers if timers is not None else ThreadingTimers(),
            debounce_seconds=config.persistence.debounce_seconds,
            saving_delay_seconds=config.persistence.saving_delay_seconds,
            saved_display_seconds=config.persistence.saved_display_seconds,
        )
        transfer = ContentTransfer(store, strict=config.transfer.strict)
        logger.debug("Opened site store")
        return cls(store, scheduler, transfer, storage)

    def close(self, flush: bool = True) -> None:
        if self._closed:
            return
        self._closed = True
        self.scheduler.close(flush=flush)
        self.store.close()
        logger.debug("Closed site store")

    def __enter__(self) -> Site:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
