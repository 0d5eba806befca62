from __future__ import annotations

import json

from personnel.services.state_store import JsonFileStore, MemoryStore


def test_memory_store_round_trip():
    store = MemoryStore({"a": "1"})
    assert store.get("a") == "1"
    assert store.get("missing") is None

    store.set("b", "2")
    assert store.values == {"a": "1", "b": "2"}


def test_json_file_store_creates_parent_directories(tmp_path):
    path = tmp_path / "nested" / "state.json"
    store = JsonFileStore(path)

    assert store.get("key") is None
    store.set("key", "value")
    store.set("other", "ü")

    assert json.loads(path.read_text(encoding="utf-8")) == {"key": "value", "other": "ü"}
    assert JsonFileStore(path).get("key") == "value"
    assert not path.with_suffix(".json.tmp").exists()


def test_json_file_store_ignores_corrupt_file(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")
    store = JsonFileStore(path)

    assert store.get("key") is None
    store.set("key", "value")
    assert store.get("key") == "value"


def test_json_file_store_ignores_non_object_and_non_string_values(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("[1, 2]", encoding="utf-8")
    assert JsonFileStore(path).get("0") is None

    path.write_text(json.dumps({"num": 1, "text": "ok"}), encoding="utf-8")
    store = JsonFileStore(path)
    assert store.get("num") is None
    assert store.get("text") == "ok"
