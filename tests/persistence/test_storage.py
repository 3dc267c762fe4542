"""Tests for the key-value storage backends."""

from pathlib import Path

import pytest
from vitrine.persistence.storage import CONTENT_KEY, JsonFileStorage, MemoryStorage
from vitrine.shared.errors import StorageError, StorageQuotaExceeded


class TestMemoryStorage:
    def test_get_missing(self):
        assert MemoryStorage().get("nope") is None

    def test_set_get_remove(self):
        storage = MemoryStorage()
        storage.set("k", "v")
        assert storage.get("k") == "v"
        assert storage.contains("k")
        storage.remove("k")
        assert storage.get("k") is None

    def test_remove_missing_is_fine(self):
        MemoryStorage().remove("nope")

    def test_not_durable_by_default(self):
        assert MemoryStorage().durable is False

    def test_quota(self):
        storage = MemoryStorage(quota_bytes=10)
        storage.set("a", "12345")
        with pytest.raises(StorageQuotaExceeded):
            storage.set("b", "123456")
        assert storage.get("b") is None

    def test_quota_counts_replaced_value_once(self):
        storage = MemoryStorage(quota_bytes=10)
        storage.set("a", "1234567890")
        storage.set("a", "0987654321")
        assert storage.get("a") == "0987654321"


class TestJsonFileStorage:
    def test_round_trip(self, tmp_path: Path):
        storage = JsonFileStorage(tmp_path / "store")
        storage.set(CONTENT_KEY, '{"a": 1}')
        assert storage.get(CONTENT_KEY) == '{"a": 1}'
        assert (tmp_path / "store" / "site_content.json").exists()

    def test_survives_new_instance(self, tmp_path: Path):
        JsonFileStorage(tmp_path).set("k", "v")
        assert JsonFileStorage(tmp_path).get("k") == "v"

    def test_missing_directory_reads_none(self, tmp_path: Path):
        assert JsonFileStorage(tmp_path / "absent").get("k") is None

    def test_remove(self, tmp_path: Path):
        storage = JsonFileStorage(tmp_path)
        storage.set("k", "v")
        storage.remove("k")
        storage.remove("k")
        assert storage.get("k") is None

    def test_no_temp_files_left(self, tmp_path: Path):
        storage = JsonFileStorage(tmp_path)
        storage.set("k", "v")
        storage.set("k", "w")
        assert sorted(p.name for p in tmp_path.iterdir()) == ["k.json"]

    def test_quota_exceeded(self, tmp_path: Path):
        storage = JsonFileStorage(tmp_path, quota_bytes=8)
        storage.set("a", "1234")
        with pytest.raises(StorageQuotaExceeded) as exc_info:
            storage.set("b", "12345")
        assert exc_info.value.key == "b"
        assert storage.get("b") is None
        assert isinstance(exc_info.value, StorageError)

    def test_no_quota(self, tmp_path: Path):
        storage = JsonFileStorage(tmp_path, quota_bytes=None)
        storage.set("big", "x" * 10_000)
        assert len(storage.get("big")) == 10_000

    @pytest.mark.parametrize("key", ["", "../escape", "a/b", ".hidden"])
    def test_rejects_bad_keys(self, tmp_path: Path, key: str):
        with pytest.raises(ValueError):
            JsonFileStorage(tmp_path).set(key, "v")

    def test_write_failure_raises_storage_error(self, tmp_path: Path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")
        with pytest.raises(StorageError):
            JsonFileStorage(blocker / "sub", quota_bytes=None).set("k", "v")
