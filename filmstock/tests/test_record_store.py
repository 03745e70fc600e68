import json

import pytest

from filmstock.infra.Record_Store import FILMS, InMemoryRecordStore, JsonRecordStore, RecordNotFound


def test_update_keeps_insertion_order():
    store = InMemoryRecordStore()
    for rid in ("a", "b", "c"):
        store.create(FILMS, rid, {"id": rid, "quantity": 1})
    store.update(FILMS, "a", {"id": "a", "quantity": 5})
    assert [r["id"] for r in store.all(FILMS)] == ["a", "b", "c"]
    assert store.read(FILMS, "a")["quantity"] == 5


def test_reads_are_copies():
    store = InMemoryRecordStore()
    store.create(FILMS, "a", {"id": "a", "expiry_dates": ["2026"]})
    row = store.read(FILMS, "a")
    row["expiry_dates"].append("2027")
    assert store.read(FILMS, "a")["expiry_dates"] == ["2026"]


def test_delete_missing_removes_nothing():
    store = InMemoryRecordStore()
    store.create(FILMS, "a", {"id": "a"})
    with pytest.raises(RecordNotFound):
        store.delete(FILMS, ["a", "zzz"])
    assert store.count(FILMS) == 1


def test_transaction_rolls_back_on_error():
    store = InMemoryRecordStore()
    store.create(FILMS, "a", {"id": "a"})
    with pytest.raises(RuntimeError):
        with store.transaction():
            store.delete(FILMS, ["a"])
            store.create(FILMS, "b", {"id": "b"})
            raise RuntimeError("boom")
    assert [r["id"] for r in store.all(FILMS)] == ["a"]


def test_json_store_persists(tmp_path):
    path = tmp_path / "inventory.json"
    store = JsonRecordStore(path)
    store.create(FILMS, "a", {"id": "a", "name": "Portra 400"})

    reopened = JsonRecordStore(path)
    assert reopened.read(FILMS, "a") == {"id": "a", "name": "Portra 400"}
    with open(path, encoding="utf-8") as f:
        assert json.load(f)[FILMS] == [{"id": "a", "name": "Portra 400"}]


def test_json_store_writes_once_per_transaction(tmp_path):
    path = tmp_path / "inventory.json"
    store = JsonRecordStore(path)
    with store.transaction():
        store.create(FILMS, "a", {"id": "a"})
        store.create(FILMS, "b", {"id": "b"})
        assert not path.exists()
    assert path.exists()
    assert len(JsonRecordStore(path).all(FILMS)) == 2


def test_json_store_failed_transaction_leaves_file(tmp_path):
    path = tmp_path / "inventory.json"
    store = JsonRecordStore(path)
    store.create(FILMS, "a", {"id": "a"})
    before = path.read_text(encoding="utf-8")
    with pytest.raises(KeyError):
        with store.transaction():
            store.create(FILMS, "b", {"id": "b"})
            store.create(FILMS, "a", {"id": "a"})
    assert path.read_text(encoding="utf-8") == before
    assert store.read(FILMS, "b") is None


def test_json_store_rejects_corrupt_file(tmp_path):
    path = tmp_path / "inventory.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(json.JSONDecodeError):
        JsonRecordStore(path)
