"""Debounced content persistence with an observable save status.

State machine published through ``ContentStore.publish_save_status``::

    change ──debounce──▶ SAVING ──delay──▶ write ─┬─▶ SAVED ──display──▶ IDLE
       ▲  (restarted by                           └─▶ ERROR (until the next
       │   every change)                               successful cycle)

Rapid edits coalesce into one write of the latest content.  The in-memory
store is always ahead of or equal to storage: an edit made less than the
debounce window before a crash is lost.  A reset makes every snapshot taken
before it stale, so a save already in flight never brings old content back.
"""

from __future__ import annotations

import itertools
import logging
import threading

from vitrine.content.defaults import DEFAULT_CONTENT
from vitrine.content.models import SaveStatus, SiteContent
from vitrine.content.store import ChangeKind, ContentStore
from vitrine.persistence.storage import CONTENT_KEY, KeyValueStorage
from vitrine.persistence.timers import TimerHandle, Timers
from vitrine.shared.errors import StorageError

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 1.0
DEFAULT_SAVING_DELAY_SECONDS = 0.6
DEFAULT_SAVED_DISPLAY_SECONDS = 2.5


class SaveScheduler:
    """Writes store content to storage after a quiet period.

    ``saving_delay_seconds`` keeps the SAVING status visible for a moment
    even when the write itself is instant; zero writes right away.
    """

    def __init__(
        self,
        store: ContentStore,
        storage: KeyValueStorage,
        timers: Timers,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        saving_delay_seconds: float = DEFAULT_SAVING_DELAY_SECONDS,
        saved_display_seconds: float = DEFAULT_SAVED_DISPLAY_SECONDS,
    ) -> None:
        self._store = store
        self._storage = storage
        self._timers = timers
        self.debounce_seconds = debounce_seconds
        self.saving_delay_seconds = saving_delay_seconds
        self.saved_display_seconds = saved_display_seconds
        self._lock = threading.RLock()
        self._debounce: TimerHandle | None = None
        self._display: TimerHandle | None = None
        self._in_flight: dict[int, TimerHandle] = {}
        self._tokens = itertools.count()
        self._unsubscribe = store.subscribe(self._on_change)

    @property
    def pending(self) -> bool:
        """True while an edit is waiting for the debounce window to pass."""
        return self._debounce is not None

    def _is_pristine(self) -> bool:
        return self._store.content == DEFAULT_CONTENT and not self._store.has_persisted_content

    def _on_change(self, kind: ChangeKind) -> None:
        if kind is not ChangeKind.CONTENT:
            return
        with self._lock:
            if self._debounce is not None:
                self._debounce.cancel()
                self._debounce = None
            if self._is_pristine():
                logger.debug("Content matches the defaults and nothing is saved yet, skipping")
                return
            self._debounce = self._timers.call_later(self.debounce_seconds, self._begin_save)

    def _begin_save(self) -> None:
        with self._lock:
            self._debounce = None
            snapshot = self._store.content
            generation = self._store.reset_generation
        self._store.publish_save_status(SaveStatus.SAVING)
        if self.saving_delay_seconds <= 0:
            self._write(snapshot, generation)
            return
        with self._lock:
            token = next(self._tokens)
            self._in_flight[token] = self._timers.call_later(
                self.saving_delay_seconds, lambda: self._write(snapshot, generation, token)
            )

    def _write(self, snapshot: SiteContent, generation: int, token: int | None = None) -> None:
        with self._lock:
            if token is not None:
                self._in_flight.pop(token, None)
        if generation != self._store.reset_generation:
            logger.info("Content was reset before the save landed, dropping the stale snapshot")
            if self._store.save_status is SaveStatus.SAVING:
                self._store.publish_save_status(SaveStatus.IDLE)
            return
        try:
            self._storage.set(CONTENT_KEY, snapshot.model_dump_json(by_alias=True, indent=2))
        except StorageError as exc:
            logger.error("Failed to save site content: %s", exc)
            self._store.publish_save_status(SaveStatus.ERROR)
            return
        logger.info("Saved site content")
        self._store.publish_save_status(
            SaveStatus.SAVED if self._storage.durable else SaveStatus.OFFLINE
        )
        with self._lock:
            if self._display is not None:
                self._display.cancel()
            self._display = self._timers.call_later(self.saved_display_seconds, self._clear_saved)

    def _clear_saved(self) -> None:
        with self._lock:
            self._display = None
        if self._store.save_status in (SaveStatus.SAVED, SaveStatus.OFFLINE):
            self._store.publish_save_status(SaveStatus.IDLE)

    def flush(self) -> bool:
        """Write pending or in-flight content now.  Returns False if idle."""
        with self._lock:
            if self._debounce is None and not self._in_flight:
                return False
            if self._debounce is not None:
                self._debounce.cancel()
                self._debounce = None
            for handle in self._in_flight.values():
                handle.cancel()
            self._in_flight.clear()
        if self._is_pristine():
            if self._store.save_status is SaveStatus.SAVING:
                self._store.publish_save_status(SaveStatus.IDLE)
            return True
        self._store.publish_save_status(SaveStatus.SAVING)
        self._write(self._store.content, self._store.reset_generation)
        return True

    def close(self, flush: bool = True) -> None:
        """Stop observing the store, optionally writing what is pending first."""
        self._unsubscribe()
        if flush:
            self.flush()
        with self._lock:
            for handle in (self._debounce, self._display, *self._in_flight.values()):
                if handle is not None:
                    handle.cancel()
            self._debounce = None
            self._display = None
            self._in_flight.clear()
