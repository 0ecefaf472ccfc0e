"""Tests for tree persistence: storage backends, load fallbacks, save."""

import json

import pytest

from topmarks.layers import Folder, GeoPoint, Layer
from topmarks.layers.folders import default_tree
from topmarks.layers.persistence import (
    STORAGE_KEY,
    JsonFileStorage,
    MemoryStorage,
    TreePersistence,
    dumps_tree,
    loads_tree,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def tree():
    return (
        Folder("f1", "Dives", (Layer("l1", "Reefs", (GeoPoint("A", -38.1, 144.8),)),)),
        Folder("f2", "Empty"),
    )


class TestLoad:
    def test_absent_value_gives_default(self):
        folders, corrupted = TreePersistence(MemoryStorage()).load()
        assert folders == default_tree()
        assert corrupted is False

    def test_malformed_json_gives_default(self):
        storage = MemoryStorage({STORAGE_KEY: "{not json"})
        folders, corrupted = TreePersistence(storage).load()
        assert folders == (Folder("default", "Default Folder", ()),)
        assert corrupted is True

    def test_wrong_shape_gives_default(self):
        storage = MemoryStorage({STORAGE_KEY: json.dumps({"folders": []})})
        folders, corrupted = TreePersistence(storage).load()
        assert folders == default_tree()
        assert corrupted is True

    def test_old_shaped_folder_gives_default(self):
        blob = json.dumps([{"id": "f1", "title": "Dives"}])
        folders, corrupted = TreePersistence(MemoryStorage({STORAGE_KEY: blob})).load()
        assert folders == default_tree()
        assert corrupted is True

    def test_deeply_nested_gives_default(self):
        storage = MemoryStorage({STORAGE_KEY: "[" * 100000})
        folders, corrupted = TreePersistence(storage).load()
        assert folders == default_tree()
        assert corrupted is True

    def test_empty_list_gives_default(self):
        folders, corrupted = TreePersistence(MemoryStorage({STORAGE_KEY: "[]"})).load()
        assert folders == default_tree()
        assert corrupted is False

    def test_custom_key(self, tree):
        storage = MemoryStorage({"other": dumps_tree(tree)})
        assert TreePersistence(storage).load()[0] == default_tree()
        assert TreePersistence(storage, key="other").load()[0] == tree


class TestSave:
    def test_save_then_load(self, tree):
        storage = MemoryStorage()
        p = TreePersistence(storage)
        p.save(tree)
        assert p.load() == (tree, False)

    def test_save_replaces_previous_value(self, tree):
        storage = MemoryStorage()
        p = TreePersistence(storage)
        p.save(tree)
        p.save(tree[:1])
        assert len(json.loads(storage.get(STORAGE_KEY))) == 1

    def test_serialized_layout(self, tree):
        data = json.loads(dumps_tree(tree))
        assert data[0] == {
            "id": "f1",
            "name": "Dives",
            "layers": [
                {"id": "l1", "name": "Reefs", "marks": [{"name": "A", "lat": -38.1, "lng": 144.8}]}
            ],
        }

    def test_loads_tree_rejects_non_list(self):
        with pytest.raises(ValueError):
            loads_tree('"just a string"')


class TestJsonFileStorage:
    def test_missing_key(self, tmp_path):
        assert JsonFileStorage(tmp_path).get("nope") is None

    def test_set_get(self, tmp_path):
        storage = JsonFileStorage(tmp_path / "nested" / "dir")
        storage.set("k", "value")
        assert storage.get("k") == "value"
        assert (tmp_path / "nested" / "dir" / "k.json").read_text() == "value"

    def test_overwrite_leaves_no_temp_files(self, tmp_path):
        storage = JsonFileStorage(tmp_path)
        storage.set("k", "one")
        storage.set("k", "two")
        assert storage.get("k") == "two"
        assert [p.name for p in tmp_path.iterdir()] == ["k.json"]

    def test_persists_across_instances(self, tmp_path, tree):
        TreePersistence(JsonFileStorage(tmp_path)).save(tree)
        assert TreePersistence(JsonFileStorage(tmp_path)).load() == (tree, False)

    def test_corrupt_file_recovers(self, tmp_path):
        (tmp_path / f"{STORAGE_KEY}.json").write_text("{not json")
        folders, corrupted = TreePersistence(JsonFileStorage(tmp_path)).load()
        assert folders == default_tree()
        assert corrupted is True

    def test_undecodable_file_recovers(self, tmp_path):
        (tmp_path / f"{STORAGE_KEY}.json").write_bytes(b"[\xff\xfe garbage")
        folders, corrupted = TreePersistence(JsonFileStorage(tmp_path)).load()
        assert folders == default_tree()
        assert corrupted is True
