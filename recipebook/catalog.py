from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from .models import RecipeCategory

logger = logging.getLogger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "data" / "recipetypes.json"


class CatalogPolicy(str, Enum):
    """What to do when the bundled category resource cannot be loaded."""

    DEGRADE = "degrade"
    FAIL_FAST = "fail-fast"


class CatalogError(RuntimeError):
    """Raised at startup when the catalog is required but unavailable."""


class CategoryCatalog:
    """Read-only list of recipe categories loaded from a bundled JSON file."""

    def __init__(
        self,
        path: Union[str, Path] = DEFAULT_CATALOG_PATH,
        policy: CatalogPolicy = CatalogPolicy.DEGRADE,
    ) -> None:
        self._path = Path(path)
        self._policy = CatalogPolicy(policy)
        self._categories: Tuple[RecipeCategory, ...] = ()

    @classmethod
    def open(
        cls,
        path: Union[str, Path] = DEFAULT_CATALOG_PATH,
        policy: CatalogPolicy = CatalogPolicy.DEGRADE,
    ) -> "CategoryCatalog":
        catalog = cls(path, policy)
        catalog.load()
        return catalog

    def load(self) -> List[RecipeCategory]:
        try:
            raw = json.loads(self._path.read_text(encoding="utf-8"))
            categories = [self._parse(record) for record in raw]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            message = f"Failed to load recipe types from {self._path}: {exc}"
            logger.error(message)
            self._categories = ()
            if self._policy is CatalogPolicy.FAIL_FAST:
                raise CatalogError(message) from exc
            return []

        self._categories = tuple(categories)
        logger.debug("Loaded %d recipe types from %s", len(categories), self._path)
        return categories

    @staticmethod
    def _parse(record: dict) -> RecipeCategory:
        category_id = record["id"]
        name = record["name"]
        if isinstance(category_id, bool) or not isinstance(category_id, int):
            raise TypeError(f"Recipe type id must be an integer, got {category_id!r}")
        if not isinstance(name, str):
            raise TypeError(f"Recipe type name must be a string, got {name!r}")
        return RecipeCategory(id=category_id, name=name)

    @property
    def categories(self) -> Tuple[RecipeCategory, ...]:
        return self._categories

    def name_for(self, category_id: int) -> Optional[str]:
        return next((c.name for c in self._categories if c.id == category_id), None)

    def __iter__(self) -> Iterator[RecipeCategory]:
        return iter(self._categories)

    def __len__(self) -> int:
        return len(self._categories)


__all__ = ["CatalogError", "CatalogPolicy", "CategoryCatalog", "DEFAULT_CATALOG_PATH"]
