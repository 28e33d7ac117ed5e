from __future__ import annotations

import json
from pathlib import Path

import pytest

from incremental_build.errors import StoreLoadError
from incremental_build.state import ResourceSetStore


def test_add_remove_save_then_fresh_load_round_trips(tmp_path: Path) -> None:
    path = tmp_path / "resources.json"
    store = ResourceSetStore(path)
    store.load()
    store.add("a.properties")
    store.add("conf/b.xml")
    store.add("conf/b.xml")
    store.add("c.txt")
    assert store.remove("c.txt") is True
    assert store.remove("never-added") is False
    before = store.paths()
    store.save()

    reloaded = ResourceSetStore(path)
    reloaded.load()

    assert reloaded.paths() == before == frozenset({"a.properties", "conf/b.xml"})
    assert len(reloaded) == 2
    assert "conf/b.xml" in reloaded


def test_is_empty_after_removing_every_entry(tmp_path: Path) -> None:
    store = ResourceSetStore(tmp_path / "resources.json")
    store.add("x")
    store.add("y")
    store.remove("x")
    assert store.is_empty() is False
    store.remove("y")
    assert store.is_empty() is True


def test_saved_file_is_sorted(tmp_path: Path) -> None:
    path = tmp_path / "resources.json"
    store = ResourceSetStore(path)
    for item in ("z.txt", "a.txt", "m/n.txt"):
        store.add(item)
    store.save()

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["resources"] == ["a.txt", "m/n.txt", "z.txt"]


def test_wrong_shape_is_a_load_failure(tmp_path: Path) -> None:
    path = tmp_path / "resources.json"
    path.write_text(json.dumps({"schema_version": 1, "resources": {"a": 1}}), encoding="utf-8")

    with pytest.raises(StoreLoadError, match="'resources' must be a list"):
        ResourceSetStore(path).load()


def test_discard_ignores_unknown_paths(tmp_path: Path) -> None:
    store = ResourceSetStore(tmp_path / "resources.json")
    store.add("kept.txt")
    store.add("gone.txt")

    store.discard("gone.txt")
    store.discard("never-added.txt")

    assert store.paths() == frozenset({"kept.txt"})
