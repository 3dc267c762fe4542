"""Authoritative in-memory store for site content, cart and admin session.

Loads its state from storage on init.  Every content mutation goes through
a named operation guarded by the session gate, replaces the content with a
new snapshot and notifies subscribers synchronously.  Content persistence
is not done here: a SaveScheduler subscribes to content changes and owns
the debounced writes.  The cart is a sub-state that persists itself on
every change.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable, Iterable, Mapping
from enum import StrEnum
from typing import Any

from pydantic import ValidationError
from vitrine.cart.manager import CartManager
from vitrine.content.auth import Authenticator, requires_session
from vitrine.content.defaults import default_content
from vitrine.content.models import (
    CatalogItem,
    CollectionName,
    ContentModel,
    MutationResult,
    SaveStatus,
    SectionName,
    SessionState,
    SiteContent,
    coerce_item,
)
from vitrine.content.transfer import content_from_document, repair_document
from vitrine.persistence.storage import (
    CONTENT_BACKUP_KEY,
    CONTENT_KEY,
    SESSION_KEY,
    KeyValueStorage,
)
from vitrine.shared.errors import ImportDocumentError, StorageError

logger = logging.getLogger(__name__)

RESET_PROMPT = "This resets every edit back to the default content. Continue?"
IMPORT_PROMPT = "This replaces all current content with the imported document. Continue?"


class ChangeKind(StrEnum):
    """Which part of the store a notification is about."""

    CONTENT = "content"
    SESSION = "session"
    CART = "cart"
    SAVE_STATUS = "save_status"


Listener = Callable[[ChangeKind], None]
Confirm = Callable[[str], bool]


def _decline(message: str) -> bool:
    return False


class ContentStore:
    """Single source of truth for content, session flags and save status.

    Reads return snapshots; mutate only through the operations below.  All
    of them report their outcome as a MutationResult and never raise for
    denied, missing or invalid input.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        session_storage: KeyValueStorage,
        authenticator: Authenticator,
        confirm: Confirm | None = None,
    ) -> None:
        self._storage = storage
        self._session_storage = session_storage
        self._authenticator = authenticator
        self._confirm = confirm or _decline
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()
        self._save_status = SaveStatus.IDLE
        self._reset_generation = 0
        self._content = self._load_content()
        self._session = self._load_session()
        self.cart = CartManager(storage, on_change=lambda: self._notify(ChangeKind.CART))

    # ── Loading ──────────────────────────────────────────────────

    def _load_content(self) -> SiteContent:
        raw = self._storage.get(CONTENT_KEY)
        if raw is None:
            return default_content()
        try:
            content, replaced = repair_document(json.loads(raw))
        except (json.JSONDecodeError, ImportDocumentError) as exc:
            logger.error("Failed to parse saved content, using defaults: %s", exc)
            self._back_up_record(raw)
            return default_content()
        if replaced:
            logger.warning(
                "Saved content had unusable sections, using defaults for: %s",
                ", ".join(replaced),
            )
            self._back_up_record(raw)
        else:
            logger.info("Loaded site content from storage")
        return content

    def _back_up_record(self, raw: str) -> None:
        # The next save overwrites CONTENT_KEY; keep the operator's original.
        try:
            self._storage.set(CONTENT_BACKUP_KEY, raw)
        except StorageError as exc:
            logger.warning("Could not back up the saved content record: %s", exc)
        else:
            logger.warning("Original saved content kept under %r", CONTENT_BACKUP_KEY)

    def _load_session(self) -> SessionState:
        if self._session_storage.get(SESSION_KEY) == "true":
            return SessionState(is_authenticated=True, is_admin_mode=True)
        return SessionState()

    # ── Observers ────────────────────────────────────────────────

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, kind: ChangeKind) -> None:
        for listener in list(self._listeners):
            try:
                listener(kind)
            except Exception:
                logger.exception("Store listener failed on %s change", kind)

    def close(self) -> None:
        self._listeners.clear()

    # ── Reads ────────────────────────────────────────────────────

    @property
    def content(self) -> SiteContent:
        return self._content.model_copy(deep=True)

    @property
    def session(self) -> SessionState:
        return self._session.model_copy()

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    @property
    def is_admin_mode(self) -> bool:
        return self._session.is_admin_mode

    @property
    def save_status(self) -> SaveStatus:
        return self._save_status

    @property
    def has_persisted_content(self) -> bool:
        return self._storage.contains(CONTENT_KEY)

    @property
    def reset_generation(self) -> int:
        """Bumped on every reset; saves started before a reset are stale."""
        return self._reset_generation

    # ── Internal writes ──────────────────────────────────────────

    def _replace_content(self, content: SiteContent) -> MutationResult:
        with self._lock:
            if content == self._content:
                return MutationResult.UNCHANGED
            self._content = content
        self._notify(ChangeKind.CONTENT)
        return MutationResult.APPLIED

    def _replace_section(self, name: SectionName, section: ContentModel) -> MutationResult:
        return self._replace_content(self._content.model_copy(update={name.value: section}))

    def _set_items(self, name: CollectionName, items: list[CatalogItem]) -> MutationResult:
        collection = self._content.collection(name)
        return self._replace_section(
            SectionName(name.value), collection.model_copy(update={"items": items})
        )

    def _set_session(self, session: SessionState) -> None:
        with self._lock:
            if session == self._session:
                return
            self._session = session
        self._notify(ChangeKind.SESSION)

    def publish_save_status(self, status: SaveStatus) -> None:
        """Record the latest persistence outcome (called by the SaveScheduler)."""
        with self._lock:
            if status == self._save_status:
                return
            self._save_status = status
        self._notify(ChangeKind.SAVE_STATUS)

    # ── Content operations ───────────────────────────────────────

    @requires_session
    def update_field(self, section: SectionName | str, key: str, value: Any) -> MutationResult:
        """Replace one field of one section; every other field is untouched."""
        try:
            name = SectionName(section)
        except ValueError:
            logger.debug("Unknown section %r", section)
            return MutationResult.INVALID
        current = self._content.section(name)
        model = type(current)
        field = model.field_name_for(key)
        doc_key = (model.model_fields[field].alias or field) if field else key
        data = current.to_document()
        data[doc_key] = value
        try:
            updated = model.model_validate(data)
        except ValidationError as exc:
            logger.warning("Rejected %s.%s update: %s", name, key, exc)
            return MutationResult.INVALID
        return self._replace_section(name, updated)

    @requires_session
    def update_item_field(
        self,
        section: CollectionName | str,
        item_id: str,
        field: str,
        value: Any,
    ) -> MutationResult:
        """Replace one field of the item with ``item_id``; order never changes."""
        try:
            name = CollectionName(section)
        except ValueError:
            logger.debug("Unknown collection %r", section)
            return MutationResult.INVALID
        collection = self._content.collection(name)
        index = collection.find_item(item_id)
        if index is None:
            logger.debug("No item %r in %s", item_id, name)
            return MutationResult.NOT_FOUND
        field_name = CatalogItem.field_name_for(field)
        if field_name == "id":
            logger.warning("Item ids are immutable, ignoring update of %r", item_id)
            return MutationResult.INVALID
        doc_key = (CatalogItem.model_fields[field_name].alias or field_name) if field_name else field
        data = collection.items[index].to_document()
        data[doc_key] = value
        try:
            updated = CatalogItem.model_validate(data)
        except ValidationError as exc:
            logger.warning("Rejected update of %s item %r: %s", name, item_id, exc)
            return MutationResult.INVALID
        items = list(collection.items)
        items[index] = updated
        return self._set_items(name, items)

    @requires_session
    def reorder_items(
        self,
        section: CollectionName | str,
        items: Iterable[CatalogItem | Mapping[str, Any]],
    ) -> MutationResult:
        """Replace the section's item sequence with ``items`` as given.

        The list is trusted: a list that drops or adds items is stored
        anyway, with a warning naming the ids involved.
        """
        try:
            name = CollectionName(section)
            new_items = [coerce_item(item) for item in items]
        except (ValueError, ValidationError) as exc:
            logger.warning("Rejected reorder of %r: %s", section, exc)
            return MutationResult.INVALID
        current_ids = {item.id for item in self._content.collection(name).items}
        new_ids = {item.id for item in new_items}
        if current_ids != new_ids:
            logger.warning(
                "Reorder of %s is not a permutation (dropped %s, added %s)",
                name,
                sorted(current_ids - new_ids),
                sorted(new_ids - current_ids),
            )
        return self._set_items(name, new_items)

    @requires_session
    def remove_item(self, section: CollectionName | str, item_id: str) -> MutationResult:
        """Drop one item: a reorder that omits it."""
        try:
            name = CollectionName(section)
        except ValueError:
            return MutationResult.INVALID
        items = self._content.collection(name).items
        remaining = [item for item in items if item.id != item_id]
        if len(remaining) == len(items):
            logger.debug("No item %r in %s", item_id, name)
            return MutationResult.NOT_FOUND
        return self._set_items(name, remaining)

    @requires_session
    def add_item(
        self,
        section: CollectionName | str,
        item: CatalogItem | Mapping[str, Any],
    ) -> MutationResult:
        """Append a fully-formed item.  Ids already used in the section are rejected."""
        try:
            name = CollectionName(section)
            new_item = coerce_item(item)
        except (ValueError, ValidationError) as exc:
            logger.warning("Rejected new item for %r: %s", section, exc)
            return MutationResult.INVALID
        collection = self._content.collection(name)
        if collection.find_item(new_item.id) is not None:
            logger.warning("Item id %r already exists in %s", new_item.id, name)
            return MutationResult.DUPLICATE
        return self._set_items(name, [*collection.items, new_item])

    @requires_session
    def import_content(self, document: SiteContent | Mapping[str, Any]) -> MutationResult:
        """Replace all content with ``document`` once the operator confirms."""
        if isinstance(document, SiteContent):
            content = document.model_copy(deep=True)
        else:
            try:
                content = content_from_document(dict(document))
            except ImportDocumentError as exc:
                logger.warning("Import aborted: %s", exc)
                return MutationResult.INVALID
        if not self._confirm(IMPORT_PROMPT):
            return MutationResult.DECLINED
        result = self._replace_content(content)
        logger.info("Imported site content (%s)", result)
        return result

    @requires_session
    def reset_content(self) -> MutationResult:
        """Restore the built-in content and drop the persisted copy.

        Returns FAILED when the persisted copy could not be removed; the
        in-memory content is reset either way.
        """
        if not self._confirm(RESET_PROMPT):
            return MutationResult.DECLINED
        with self._lock:
            self._reset_generation += 1
        had_saved_copy = self.has_persisted_content
        try:
            self._storage.remove(CONTENT_KEY)
        except StorageError as exc:
            logger.error("Failed to clear saved content: %s", exc)
            self.publish_save_status(SaveStatus.ERROR)
            self._replace_content(default_content())
            return MutationResult.FAILED
        result = self._replace_content(default_content())
        if had_saved_copy:
            result = MutationResult.APPLIED
        logger.info("Site content reset to defaults (%s)", result)
        return result

    # ── Session operations ───────────────────────────────────────

    def login(self, password: str) -> bool:
        if not self._authenticator.verify(password):
            logger.info("Rejected admin login")
            return False
        try:
            self._session_storage.set(SESSION_KEY, "true")
        except StorageError as exc:
            logger.warning("Could not mark the admin session: %s", exc)
        self._set_session(SessionState(is_authenticated=True, is_admin_mode=True))
        logger.info("Admin logged in")
        return True

    @requires_session
    def logout(self) -> MutationResult:
        try:
            self._session_storage.remove(SESSION_KEY)
        except StorageError as exc:
            logger.warning("Could not clear the admin session marker: %s", exc)
        self._set_session(SessionState())
        logger.info("Admin logged out")
        return MutationResult.APPLIED

    @requires_session
    def toggle_admin_mode(self) -> MutationResult:
        self._set_session(
            SessionState(is_authenticated=True, is_admin_mode=not self._session.is_admin_mode)
        )
        return MutationResult.APPLIED
