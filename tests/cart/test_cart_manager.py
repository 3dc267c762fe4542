"""Tests for CartManager: positional removal and write-through persistence."""

import json

from vitrine.cart.manager import CartManager
from vitrine.content.models import CatalogItem, MutationResult
from vitrine.persistence.storage import CART_KEY, MemoryStorage


def _item(item_id: str, **extra: object) -> CatalogItem:
    return CatalogItem(id=item_id, title=f"Item {item_id}", **extra)


def _stored_ids(storage: MemoryStorage) -> list[str]:
    return [entry["id"] for entry in json.loads(storage.get(CART_KEY))]


class TestAdd:
    def test_appends_and_persists(self, storage):
        cart = CartManager(storage)
        cart.add(_item("a"))
        cart.add(_item("b"))
        assert [i.id for i in cart.items] == ["a", "b"]
        assert _stored_ids(storage) == ["a", "b"]

    def test_opens_cart(self, storage):
        cart = CartManager(storage)
        assert cart.is_open is False
        cart.add(_item("a"))
        assert cart.is_open is True

    def test_same_item_twice_gives_two_entries(self, storage):
        cart = CartManager(storage)
        item = _item("a")
        cart.add(item)
        cart.add(item)
        assert len(cart) == 2

    def test_entries_are_snapshots(self, storage):
        cart = CartManager(storage)
        item = _item("a")
        cart.add(item)
        item.title = "changed later"
        assert cart.items[0].title == "Item a"

    def test_keeps_passthrough_fields(self, storage):
        cart = CartManager(storage)
        cart.add(_item("a", price="R$ 50"))
        assert json.loads(storage.get(CART_KEY))[0]["price"] == "R$ 50"

    def test_accepts_plain_mapping(self, storage):
        cart = CartManager(storage)
        assert cart.add({"id": "a", "title": "Coat", "price": "R$ 90"}) is MutationResult.APPLIED
        assert cart.items[0].title == "Coat"
        assert _stored_ids(storage) == ["a"]

    def test_rejects_invalid_mapping(self, storage):
        cart = CartManager(storage)
        assert cart.add({"title": "no id"}) is MutationResult.INVALID
        assert len(cart) == 0
        assert storage.get(CART_KEY) is None

    def test_no_debounce(self, storage, timers):
        cart = CartManager(storage)
        cart.add(_item("a"))
        assert storage.writes_for(CART_KEY)
        assert timers.pending == 0


class TestRemove:
    def test_positional_removal_shifts_indices(self, storage):
        cart = CartManager(storage)
        for item_id in "ABC":
            cart.add(_item(item_id))
        assert cart.remove(1) is MutationResult.APPLIED
        assert [i.id for i in cart.items] == ["A", "C"]
        assert cart.remove(1) is MutationResult.APPLIED
        assert [i.id for i in cart.items] == ["A"]
        assert _stored_ids(storage) == ["A"]

    def test_removes_one_of_two_duplicates(self, storage):
        cart = CartManager(storage)
        cart.add(_item("a"))
        cart.add(_item("a"))
        cart.remove(0)
        assert [i.id for i in cart.items] == ["a"]

    def test_out_of_range(self, storage):
        cart = CartManager(storage)
        cart.add(_item("a"))
        assert cart.remove(5) is MutationResult.NOT_FOUND
        assert cart.remove(-1) is MutationResult.NOT_FOUND
        assert len(cart) == 1


class TestClear:
    def test_clear(self, storage):
        cart = CartManager(storage)
        cart.add(_item("a"))
        assert cart.clear() is MutationResult.APPLIED
        assert cart.items == []
        assert json.loads(storage.get(CART_KEY)) == []

    def test_clear_empty_still_persists(self, storage):
        cart = CartManager(storage)
        assert cart.clear() is MutationResult.UNCHANGED
        assert storage.get(CART_KEY) == "[]"


class TestLoadAndFailures:
    def test_reload(self, storage):
        CartManager(storage).add(_item("a"))
        assert [i.id for i in CartManager(storage).items] == ["a"]

    def test_corrupt_record(self, storage):
        storage.set(CART_KEY, '{"not": "a list"}')
        assert CartManager(storage).items == []

    def test_write_failure_keeps_memory(self, broken_storage, caplog):
        cart = CartManager(broken_storage)
        with caplog.at_level("WARNING"):
            cart.add(_item("a"))
        assert [i.id for i in cart.items] == ["a"]
        assert "Failed to persist cart" in caplog.text

    def test_change_callback(self, storage):
        calls = []
        cart = CartManager(storage, on_change=lambda: calls.append(True))
        cart.add(_item("a"))
        cart.set_open(False)
        cart.set_open(False)
        cart.remove(0)
        assert len(calls) == 3
