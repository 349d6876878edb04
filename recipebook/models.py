from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Union


@dataclass(frozen=True)
class RecipeCategory:
    """A fixed classification tag such as "Breakfast"."""

    id: int
    name: str


@dataclass(frozen=True)
class BundledAsset:
    """Read-only image shipped with the application, addressed by name."""

    name: str


@dataclass(frozen=True)
class StoredFile:
    """Image written to local storage by :class:`~recipebook.images.ImageStore`."""

    filename: str


ImageRef = Union[BundledAsset, StoredFile]


def new_recipe_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Recipe:
    """Domain object representing a stored recipe."""

    title: str
    type_id: int
    ingredients: List[str] = field(default_factory=list)
    steps: List[str] = field(default_factory=list)
    image: Optional[ImageRef] = None
    id: str = field(default_factory=new_recipe_id)
    created_at: datetime = field(default_factory=_utcnow)

    def to_dict(self) -> Dict[str, Any]:
        image_filename = self.image.filename if isinstance(self.image, StoredFile) else None
        image_asset = self.image.name if isinstance(self.image, BundledAsset) else None
        return {
            "id": self.id,
            "title": self.title,
            "typeId": self.type_id,
            "imageFilename": image_filename,
            "imageAssetName": image_asset,
            "ingredients": list(self.ingredients),
            "steps": list(self.steps),
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Recipe":
        """Build a recipe from its durable representation.

        Raises ``KeyError``, ``TypeError`` or ``ValueError`` when a required
        field is missing or has the wrong shape.
        """

        if not isinstance(data, dict):
            raise TypeError(f"Recipe record must be an object, got {type(data).__name__}")

        recipe_id = data["id"]
        title = data["title"]
        type_id = data["typeId"]
        if not isinstance(recipe_id, str) or not isinstance(title, str):
            raise TypeError("Recipe id and title must be strings")
        if isinstance(type_id, bool) or not isinstance(type_id, int):
            raise TypeError("Recipe typeId must be an integer")

        asset_name = data.get("imageAssetName")
        filename = data.get("imageFilename")
        for value in (asset_name, filename):
            if value is not None and not isinstance(value, str):
                raise TypeError("Recipe image references must be strings")

        image: Optional[ImageRef] = None
        if asset_name:
            image = BundledAsset(asset_name)
        elif filename:
            image = StoredFile(filename)

        created_at = datetime.fromisoformat(data["createdAt"])
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        return cls(
            id=recipe_id,
            title=title,
            type_id=type_id,
            image=image,
            ingredients=_string_list(data.get("ingredients", []), "ingredients"),
            steps=_string_list(data.get("steps", []), "steps"),
            created_at=created_at,
        )


def _string_list(value: Any, name: str) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise TypeError(f"Recipe {name} must be a list of strings")
    return list(value)


def encode_recipes(recipes: Iterable[Recipe]) -> bytes:
    """Serialize the full recipe list into the durable JSON blob."""

    payload = [recipe.to_dict() for recipe in recipes]
    return json.dumps(payload, ensure_ascii=False).encode("utf-8")


def decode_recipes(blob: Union[bytes, str]) -> List[Recipe]:
    """Parse a durable blob produced by :func:`encode_recipes`."""

    payload = json.loads(blob)
    if not isinstance(payload, list):
        raise TypeError("Recipe blob must contain a JSON array")
    return [Recipe.from_dict(item) for item in payload]


__all__ = [
    "BundledAsset",
    "ImageRef",
    "Recipe",
    "RecipeCategory",
    "StoredFile",
    "decode_recipes",
    "encode_recipes",
    "new_recipe_id",
]
