"""Tests for MemoryStore, JsonFileStore and StoreRegistry."""

import json

import pytest

from topic_spine.core.errors import (
    CorruptStoreError,
    DuplicateRecordError,
    RecordIdMismatchError,
    StorageError,
)
from topic_spine.core.protocols import RecordStore
from topic_spine.core.storage import JsonFileStore, MemoryStore, StoreRegistry
from topic_spine.topics.models import Topic


def _topic(topic_id: str, name: str = "Topic", parent: str | None = None) -> Topic:
    return Topic.new(name, f"{name} content", parent, id=topic_id)


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryStore("topic")
    return JsonFileStore("topic", tmp_path, Topic.from_dict)


class TestRecordStoreSemantics:
    """Behaviour shared by every store."""

    def test_satisfies_protocol(self, store):
        assert isinstance(store, RecordStore)

    def test_create_and_find(self, store):
        topic = store.create(_topic("a"))
        assert store.find_by_id("a") == topic
        assert store.find_by_id("missing") is None

    def test_create_duplicate_raises(self, store):
        store.create(_topic("a"))
        with pytest.raises(DuplicateRecordError):
            store.create(_topic("a", name="Other"))
        assert store.find_by_id("a").name == "Topic"

    def test_find_all_preserves_insertion_order(self, store):
        for topic_id in ("c", "a", "b"):
            store.create(_topic(topic_id))
        assert [t.id for t in store.find_all()] == ["c", "a", "b"]

    def test_update_replaces_record(self, store):
        store.create(_topic("a"))
        replacement = _topic("a", name="Renamed")
        assert store.update("a", replacement) == replacement
        assert store.find_by_id("a").name == "Renamed"

    def test_update_missing_returns_none(self, store):
        assert store.update("nope", _topic("nope")) is None

    def test_update_id_mismatch_raises(self, store):
        store.create(_topic("a"))
        with pytest.raises(RecordIdMismatchError):
            store.update("a", _topic("b"))

    def test_delete(self, store):
        store.create(_topic("a"))
        assert store.delete("a") is True
        assert store.delete("a") is False
        assert store.find_all() == []

    def test_query_filters_in_storage_order(self, store):
        store.create(_topic("p"))
        store.create(_topic("c1", parent="p"))
        store.create(_topic("x"))
        store.create(_topic("c2", parent="p"))
        children = store.query(lambda t: t.parent_topic_id == "p")
        assert [t.id for t in children] == ["c1", "c2"]


class TestMemoryStore:
    def test_seed_records(self):
        store = MemoryStore("topic", [_topic("a"), _topic("b")])
        assert len(store) == 2


class TestJsonFileStore:
    """File-specific behaviour."""

    def test_creates_empty_collection_file(self, tmp_path):
        store = JsonFileStore("Topic", tmp_path / "nested", Topic.from_dict)
        assert store.find_all() == []
        assert store.path == tmp_path / "nested" / "topic.json"
        assert json.loads(store.path.read_text()) == []

    def test_writes_camel_case_records(self, tmp_path):
        store = JsonFileStore("topic", tmp_path, Topic.from_dict)
        store.create(_topic("child", parent="root"))
        [record] = json.loads(store.path.read_text())
        assert record["id"] == "child"
        assert record["parentTopicId"] == "root"
        assert record["rootTopicId"] == "child"
        assert record["createdAt"].endswith("Z")

    def test_persists_across_instances(self, tmp_path):
        JsonFileStore("topic", tmp_path, Topic.from_dict).create(_topic("a"))
        reopened = JsonFileStore("topic", tmp_path, Topic.from_dict)
        assert reopened.find_by_id("a").content == "Topic content"

    def test_reload_sees_external_writes(self, tmp_path):
        store = JsonFileStore("topic", tmp_path, Topic.from_dict)
        assert store.find_all() == []
        JsonFileStore("topic", tmp_path, Topic.from_dict).create(_topic("a"))
        assert store.find_all() == []
        store.reload()
        assert [t.id for t in store.find_all()] == ["a"]

    def test_compact_indent(self, tmp_path):
        store = JsonFileStore("topic", tmp_path, Topic.from_dict, indent=0)
        store.create(_topic("a"))
        assert store.path.read_text().count("\n") == 1

    def test_invalid_json_raises(self, tmp_path):
        (tmp_path / "topic.json").write_text("{not json")
        store = JsonFileStore("topic", tmp_path, Topic.from_dict)
        with pytest.raises(CorruptStoreError):
            store.find_all()

    def test_non_array_raises(self, tmp_path):
        (tmp_path / "topic.json").write_text('{"id": "a"}')
        with pytest.raises(CorruptStoreError):
            JsonFileStore("topic", tmp_path, Topic.from_dict).find_all()

    def test_undecodable_record_raises(self, tmp_path):
        (tmp_path / "topic.json").write_text('[{"id": "a"}]')
        with pytest.raises(CorruptStoreError):
            JsonFileStore("topic", tmp_path, Topic.from_dict).find_all()

    def test_failed_write_rolls_back(self, tmp_path, monkeypatch):
        store = JsonFileStore("topic", tmp_path, Topic.from_dict)
        store.create(_topic("a"))

        def fail(payload):
            raise StorageError("disk full")

        monkeypatch.setattr(store, "_write", fail)
        with pytest.raises(StorageError):
            store.create(_topic("b"))
        with pytest.raises(StorageError):
            store.delete("a")
        assert [t.id for t in store.find_all()] == ["a"]


class TestStoreRegistry:
    def test_same_collection_shares_store(self, tmp_path):
        first = StoreRegistry.get_store("topic", tmp_path, Topic.from_dict)
        second = StoreRegistry.get_store("Topic", tmp_path, Topic.from_dict)
        assert first is second

    def test_different_dirs_get_different_stores(self, tmp_path):
        first = StoreRegistry.get_store("topic", tmp_path / "a", Topic.from_dict)
        second = StoreRegistry.get_store("topic", tmp_path / "b", Topic.from_dict)
        assert first is not second

    def test_clear(self, tmp_path):
        first = StoreRegistry.get_store("topic", tmp_path, Topic.from_dict)
        StoreRegistry.clear()
        assert StoreRegistry.get_store("topic", tmp_path, Topic.from_dict) is not first
