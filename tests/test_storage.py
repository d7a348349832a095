import json

import pytest

from ledean.storage import JsonStore, StorageError


def test_write_then_read_round_trip(tmp_path):
    store = JsonStore(tmp_path)
    value = {"brightness": 0.5, "count": 3, "nested": {"rgb": [1, 2, 3]}}
    store.write("ModeGradient", "parameter", value)
    assert store.read("ModeGradient", "parameter") == value


def test_file_layout(tmp_path):
    store = JsonStore(tmp_path)
    store.write("button", "isLocked", True)
    path = tmp_path / "button" / "isLocked.json"
    assert json.loads(path.read_text()) is True


def test_overwrite_replaces_value(tmp_path):
    store = JsonStore(tmp_path)
    store.write("modeController", "modesIndex", 1)
    store.write("modeController", "modesIndex", 4)
    assert store.read("modeController", "modesIndex") == 4


def test_missing_record_raises(tmp_path):
    store = JsonStore(tmp_path)
    with pytest.raises(StorageError):
        store.read("modeController", "isPaused")


def test_empty_names_raise(tmp_path):
    store = JsonStore(tmp_path)
    with pytest.raises(StorageError):
        store.write("", "parameter", 1)
    with pytest.raises(StorageError):
        store.read("ModeSolid", "")


def test_unserialisable_value_raises(tmp_path):
    store = JsonStore(tmp_path)
    with pytest.raises(StorageError):
        store.write("ModeSolid", "parameter", object())
    assert not (tmp_path / "ModeSolid" / "parameter.json").exists()


def test_corrupt_file_raises(tmp_path):
    store = JsonStore(tmp_path)
    (tmp_path / "ModeSolid").mkdir()
    (tmp_path / "ModeSolid" / "parameter.json").write_text("{not json")
    with pytest.raises(StorageError):
        store.read("ModeSolid", "parameter")


def test_creates_directory(tmp_path):
    target = tmp_path / "db" / "inner"
    store = JsonStore(target)
    store.write("a", "b", [1, 2])
    assert target.is_dir()
    assert store.read("a", "b") == [1, 2]