"""Tests for key-value storage backends."""

import json
from decimal import Decimal

import pytest

from expense_ai.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    StorageReadError,
    StorageWriteError,
)


class TestJsonFileStorage:
    """Tests for the JSON file backend."""

    def test_missing_key_reads_none(self, tmp_path):
        """Test that a never-written key is absent, not an error."""
        storage = JsonFileStorage(tmp_path)
        assert storage.read("expenses") is None
        assert storage.exists("expenses") is False

    def test_write_then_read(self, tmp_path):
        """Test that written values come back."""
        storage = JsonFileStorage(tmp_path)
        storage.write("budget", {"monthly": "500.00", "categories": {"food": "200.00"}})

        assert storage.read("budget") == {"monthly": "500.00", "categories": {"food": "200.00"}}
        assert (tmp_path / "budget.json").exists()

    def test_creates_data_dir(self, tmp_path):
        """Test that the data directory is created on first write."""
        storage = JsonFileStorage(tmp_path / "nested" / "data")
        storage.write("expenses", [])
        assert storage.read("expenses") == []

    def test_overwrite_leaves_no_temp_files(self, tmp_path):
        """Test that atomic writes clean up after themselves."""
        storage = JsonFileStorage(tmp_path)
        for count in range(3):
            storage.write("expenses", [{"n": i} for i in range(count)])

        assert [p.name for p in tmp_path.iterdir()] == ["expenses.json"]
        assert storage.read("expenses") == [{"n": 0}, {"n": 1}]

    def test_corrupt_file_raises_read_error(self, tmp_path):
        """Test that malformed JSON is reported, not treated as empty."""
        (tmp_path / "expenses.json").write_text("[{not json", encoding="utf-8")
        storage = JsonFileStorage(tmp_path)

        with pytest.raises(StorageReadError) as exc_info:
            storage.read("expenses")
        assert exc_info.value.key == "expenses"

    def test_unserializable_value_raises_write_error(self, tmp_path):
        """Test that values must already be JSON-ready."""
        storage = JsonFileStorage(tmp_path)
        with pytest.raises(StorageWriteError):
            storage.write("budget", {"monthly": Decimal("1.00")})
        assert storage.read("budget") is None

    def test_unwritable_location_raises_write_error(self, tmp_path):
        """Test that OS errors surface as StorageWriteError after retries."""
        blocker = tmp_path / "data"
        blocker.write_text("not a directory", encoding="utf-8")
        storage = JsonFileStorage(blocker)

        with pytest.raises(StorageWriteError) as exc_info:
            storage.write("expenses", [])
        assert exc_info.value.key == "expenses"

    def test_rejects_path_like_keys(self, tmp_path):
        """Test that keys cannot escape the data directory."""
        storage = JsonFileStorage(tmp_path)
        for key in ("../expenses", "a/b", ".hidden", ""):
            with pytest.raises(ValueError):
                storage.read(key)

    def test_delete(self, tmp_path):
        """Test deleting present and absent keys."""
        storage = JsonFileStorage(tmp_path)
        storage.write("budget", {"monthly": "0"})
        assert storage.delete("budget") is True
        assert storage.delete("budget") is False
        assert storage.read("budget") is None

    def test_file_is_plain_json(self, tmp_path):
        """Test that the on-disk format is readable JSON."""
        storage = JsonFileStorage(tmp_path)
        storage.write("expenses", [{"amount": "1.00", "category": "food"}])
        raw = json.loads((tmp_path / "expenses.json").read_text(encoding="utf-8"))
        assert raw == [{"amount": "1.00", "category": "food"}]


class TestInMemoryStorage:
    """Tests for the in-memory backend."""

    def test_initial_values(self):
        """Test seeding the storage at construction."""
        storage = InMemoryStorage({"budget": {"monthly": "100"}})
        assert storage.read("budget") == {"monthly": "100"}
        assert storage.keys == ["budget"]

    def test_reads_are_copies(self):
        """Test that mutating a read value does not change storage."""
        storage = InMemoryStorage()
        storage.write("expenses", [1, 2])
        storage.read("expenses").append(3)
        assert storage.read("expenses") == [1, 2]

    def test_unserializable_value_raises_write_error(self):
        """Test the same serialization contract as the file backend."""
        storage = InMemoryStorage()
        with pytest.raises(StorageWriteError):
            storage.write("expenses", [object()])
        assert storage.read("expenses") is None
