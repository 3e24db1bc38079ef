from __future__ import annotations

import pytest

from salesdesk.exceptions import PermanentPersistenceError, TransientPersistenceError
from salesdesk.storage import JSONStorage


def test_missing_resource_loads_empty(storage):
    assert storage.load("transactions.json") == []


def test_save_then_load(storage):
    storage.save("transactions.json", [{"id": "1", "customerName": "Dinas Pekerjaan Umum"}])
    assert storage.load("transactions.json") == [
        {"id": "1", "customerName": "Dinas Pekerjaan Umum"}
    ]
    assert not (storage.base_path / "transactions.json.tmp").exists()


def test_corrupted_json_is_permanent(storage):
    (storage.base_path / "transactions.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(PermanentPersistenceError):
        storage.load("transactions.json")


def test_non_list_payload_is_permanent(storage):
    (storage.base_path / "transactions.json").write_text('{"id": "1"}', encoding="utf-8")
    with pytest.raises(PermanentPersistenceError):
        storage.load("transactions.json")


def test_write_failure_is_transient(storage):
    # A directory in place of the temp file makes the write fail.
    (storage.base_path / "transactions.json.tmp").mkdir()
    with pytest.raises(TransientPersistenceError) as excinfo:
        storage.save("transactions.json", [])
    assert excinfo.value.retryable
