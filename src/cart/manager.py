"""Cart state persisted on every change.

Entries are snapshots, not references: adding the same catalog item twice
yields two independent entries, told apart only by position.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import TypeAdapter, ValidationError
from vitrine.content.models import CatalogItem, MutationResult, coerce_item
from vitrine.persistence.storage import CART_KEY, KeyValueStorage
from vitrine.shared.errors import StorageError

logger = logging.getLogger(__name__)

_CART_ADAPTER = TypeAdapter(list[CatalogItem])


class CartManager:
    """Ordered list of catalog item snapshots plus the cart-open flag.

    Unlike site content, the cart is written through immediately (no
    debounce) and a failed write never rolls back the in-memory cart.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        on_change: Callable[[], None] | None = None,
    ) -> None:
        self._storage = storage
        self._on_change = on_change
        self._items = self._load()
        self._is_open = False

    def _load(self) -> list[CatalogItem]:
        raw = self._storage.get(CART_KEY)
        if raw is None:
            return []
        try:
            return _CART_ADAPTER.validate_json(raw)
        except ValidationError:
            logger.warning("Corrupt cart record in storage, starting with an empty cart")
            return []

    def _persist(self) -> None:
        payload = json.dumps([item.to_document() for item in self._items], ensure_ascii=False)
        try:
            self._storage.set(CART_KEY, payload)
        except StorageError as exc:
            logger.warning("Failed to persist cart: %s", exc)

    def _changed(self) -> None:
        if self._on_change is not None:
            self._on_change()

    @property
    def items(self) -> list[CatalogItem]:
        return [item.model_copy(deep=True) for item in self._items]

    @property
    def is_open(self) -> bool:
        return self._is_open

    def __len__(self) -> int:
        return len(self._items)

    def add(self, item: CatalogItem | Mapping[str, Any]) -> MutationResult:
        """Append a snapshot of ``item`` and surface the cart."""
        try:
            entry = coerce_item(item)
        except ValidationError as exc:
            logger.warning("Rejected cart entry: %s", exc)
            return MutationResult.INVALID
        self._items.append(entry)
        self._persist()
        self._is_open = True
        self._changed()
        return MutationResult.APPLIED

    def remove(self, index: int) -> MutationResult:
        """Remove the entry at ``index``; later entries shift down by one."""
        if not 0 <= index < len(self._items):
            logger.debug("Cart has no entry at index %d", index)
            return MutationResult.NOT_FOUND
        del self._items[index]
        self._persist()
        self._changed()
        return MutationResult.APPLIED

    def clear(self) -> MutationResult:
        was_empty = not self._items
        self._items = []
        self._persist()
        if was_empty:
            return MutationResult.UNCHANGED
        self._changed()
        return MutationResult.APPLIED

    def set_open(self, is_open: bool) -> None:
        if self._is_open != is_open:
            self._is_open = is_open
            self._changed()
