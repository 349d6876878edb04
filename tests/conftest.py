from __future__ import annotations

import io
import sys
from pathlib import Path
from typing import Dict, Optional

import pytest
from PIL import Image

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from recipebook.catalog import CategoryCatalog
from recipebook.images import BundledAssets, ImageStore
from recipebook.repository import RecipeRepository


class InMemoryKeyValueStore:
    """Simple key-value slot used for tests."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None) -> None:
        self.values: Dict[str, bytes] = dict(initial or {})
        self.writes = 0

    def get(self, key: str) -> Optional[bytes]:
        return self.values.get(key)

    def set(self, key: str, value: bytes) -> None:
        self.writes += 1
        self.values[key] = value


class FailingKeyValueStore(InMemoryKeyValueStore):
    """Store whose writes fail once ``fail`` is switched on."""

    def __init__(self, initial: Optional[Dict[str, bytes]] = None, fail: bool = False) -> None:
        super().__init__(initial)
        self.fail = fail

    def set(self, key: str, value: bytes) -> None:
        if self.fail:
            raise OSError("disk full")
        super().set(key, value)


def make_image_bytes(fmt: str = "PNG", size=(8, 8), color=(200, 80, 40)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def assets_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "assets"
    directory.mkdir()
    for name in ("Pancakes", "Iced lemon tea", "Spaghetti"):
        (directory / f"{name}.png").write_bytes(make_image_bytes())
    return directory


@pytest.fixture
def images(tmp_path: Path, assets_dir: Path) -> ImageStore:
    return ImageStore(tmp_path / "images", BundledAssets(assets_dir))


@pytest.fixture
def catalog() -> CategoryCatalog:
    return CategoryCatalog.open()


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def repository(store, images, catalog) -> RecipeRepository:
    return RecipeRepository(store, images, catalog)
