from __future__ import annotations

import pytest

from recipebook.storage import FileKeyValueStore


def test_missing_key_returns_none(tmp_path):
    store = FileKeyValueStore(tmp_path)

    assert store.get("savedRecipes") is None


def test_set_replaces_value_without_leftovers(tmp_path):
    store = FileKeyValueStore(tmp_path)

    store.set("savedRecipes", b"[1]")
    store.set("savedRecipes", b"[2]")

    assert store.get("savedRecipes") == b"[2]"
    assert [p.name for p in tmp_path.iterdir()] == ["savedRecipes.json"]


@pytest.mark.parametrize("key", ["", "../escape", ".hidden", "a/b"])
def test_rejects_keys_outside_the_directory(tmp_path, key):
    store = FileKeyValueStore(tmp_path)

    with pytest.raises(ValueError):
        store.set(key, b"x")
