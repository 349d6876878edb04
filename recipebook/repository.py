from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Tuple

from .catalog import CategoryCatalog
from .images import ImageStore
from .models import BundledAsset, Recipe, RecipeCategory, StoredFile, decode_recipes, encode_recipes
from .results import Outcome, Reason
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

SAVED_RECIPES_KEY = "savedRecipes"
UNKNOWN_TYPE_NAME = "Unknown Type"


def sample_recipes() -> List[Recipe]:
    """Return fresh copies of the recipes used to seed an empty store."""

    return [
        Recipe(
            title="Pancakes",
            type_id=1,
            image=BundledAsset("Pancakes"),
            ingredients=[
                "1 cup flour",
                "1 egg",
                "1 cup milk",
                "1 tbsp sugar",
                "1 tsp baking powder",
                "Pinch of salt",
            ],
            steps=[
                "Mix dry ingredients",
                "Whisk in egg and milk",
                "Cook on greased pan until bubbles form",
                "Flip and finish",
            ],
        ),
        Recipe(
            title="Iced Lemon Tea",
            type_id=5,
            image=BundledAsset("Iced lemon tea"),
            ingredients=["Black tea bag", "Lemon juice", "Ice", "Sugar"],
            steps=["Brew tea", "Add sugar while hot", "Cool, add lemon and ice"],
        ),
        Recipe(
            title="Spaghetti Aglio e Olio",
            type_id=3,
            image=BundledAsset("Spaghetti"),
            ingredients=["Spaghetti", "Olive oil", "Garlic", "Chilli flakes", "Parsley", "Salt"],
            steps=["Boil pasta", "Sauté garlic & chilli", "Toss pasta with oil", "Season and serve"],
        ),
    ]


def _copy(recipe: Recipe) -> Recipe:
    return replace(recipe, ingredients=list(recipe.ingredients), steps=list(recipe.steps))


class RecipeRepository:
    """In-memory recipe list persisted as one blob after every mutation.

    The repository is constructed once at startup and handed to whoever
    needs it. Construction loads the durable blob (or seeds sample data),
    so there is nothing to flush at shutdown.

    Mutating operations never raise: they return an :class:`Outcome` and log
    failures. A failed write does not roll back the in-memory change, so the
    durable copy may lag until the next successful write.
    """

    def __init__(
        self,
        store: KeyValueStore,
        images: ImageStore,
        catalog: CategoryCatalog,
        *,
        key: str = SAVED_RECIPES_KEY,
    ) -> None:
        self._store = store
        self._images = images
        self._catalog = catalog
        self._key = key
        self._recipes: List[Recipe] = []
        self.load_all()

    def load_all(self) -> Outcome[List[Recipe]]:
        try:
            blob = self._store.get(self._key)
        except OSError as exc:
            logger.error("Failed to read saved recipes: %s", exc)
            blob = None

        if blob is None:
            logger.info("No saved recipes found; seeding sample data")
            return self._seed()

        try:
            self._recipes = decode_recipes(blob)
        except (ValueError, KeyError, TypeError) as exc:
            logger.error("Failed to decode saved recipes: %s", exc)
            return self._seed()

        logger.debug("Loaded %d recipes", len(self._recipes))
        return Outcome.success(self.list_all())

    def _seed(self) -> Outcome[List[Recipe]]:
        self._recipes = sample_recipes()
        saved = self._save()
        if not saved:
            return Outcome.failure(saved.reason, saved.detail)
        return Outcome.success(self.list_all())

    def _save(self) -> Outcome[None]:
        try:
            blob = encode_recipes(self._recipes)
        except (TypeError, ValueError) as exc:
            logger.error("Failed to encode recipes: %s", exc)
            return Outcome.failure(Reason.ENCODE_FAILED, str(exc))

        try:
            self._store.set(self._key, blob)
        except OSError as exc:
            logger.error("Failed to save recipes: %s", exc)
            return Outcome.failure(Reason.WRITE_FAILED, str(exc))
        return Outcome.success()

    def _index_of(self, recipe_id: str) -> Optional[int]:
        return next((i for i, r in enumerate(self._recipes) if r.id == recipe_id), None)

    def create(self, recipe: Recipe) -> Outcome[Recipe]:
        self._recipes.insert(0, _copy(recipe))
        saved = self._save()
        if not saved:
            return Outcome.failure(saved.reason, saved.detail)
        return Outcome.success(_copy(recipe))

    def update(self, recipe: Recipe) -> Outcome[Recipe]:
        index = self._index_of(recipe.id)
        if index is None:
            logger.warning("Recipe %s not found for update", recipe.id)
            return Outcome.failure(Reason.NOT_FOUND, recipe.id)

        self._recipes[index] = _copy(recipe)
        saved = self._save()
        if not saved:
            return Outcome.failure(saved.reason, saved.detail)
        return Outcome.success(_copy(recipe))

    def delete(self, recipe_id: str) -> Outcome[Recipe]:
        index = self._index_of(recipe_id)
        if index is None:
            logger.warning("Recipe %s not found for deletion", recipe_id)
            return Outcome.failure(Reason.NOT_FOUND, recipe_id)

        recipe = self._recipes[index]
        if isinstance(recipe.image, StoredFile):
            # The result is already logged by the image store.
            self._images.remove(recipe.image)

        del self._recipes[index]
        saved = self._save()
        if not saved:
            return Outcome.failure(saved.reason, saved.detail)
        return Outcome.success(recipe)

    def find_by_id(self, recipe_id: str) -> Optional[Recipe]:
        index = self._index_of(recipe_id)
        return None if index is None else _copy(self._recipes[index])

    def list_all(self) -> List[Recipe]:
        return [_copy(recipe) for recipe in self._recipes]

    def list_by_category(self, type_id: Optional[int] = None) -> List[Recipe]:
        if type_id is None:
            return self.list_all()
        return [_copy(recipe) for recipe in self._recipes if recipe.type_id == type_id]

    def category_name(self, type_id: int) -> str:
        name = self._catalog.name_for(type_id)
        return UNKNOWN_TYPE_NAME if name is None else name

    @property
    def categories(self) -> Tuple[RecipeCategory, ...]:
        return self._catalog.categories

    @property
    def images(self) -> ImageStore:
        return self._images

    def __len__(self) -> int:
        return len(self._recipes)


__all__ = ["RecipeRepository", "SAVED_RECIPES_KEY", "UNKNOWN_TYPE_NAME", "sample_recipes"]
