import mimetypes
from typing import List, Optional, Tuple

from flask import Flask, Response, jsonify, request
from werkzeug.datastructures import FileStorage

from .catalog import CategoryCatalog
from .config import Settings
from .images import BundledAssets, ImageStore
from .models import BundledAsset, Recipe, StoredFile
from .repository import RecipeRepository
from .results import Outcome, Reason
from .storage import FileKeyValueStore

ALLOWED_IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp"}


def build_repository(settings: Settings) -> RecipeRepository:
    """Construct the catalog, image store and repository described by ``settings``."""

    catalog = CategoryCatalog.open(settings.catalog_path, settings.catalog_policy)
    images = ImageStore(
        settings.resolved_images_dir,
        BundledAssets(settings.assets_dir),
        quality=settings.image_quality,
    )
    store = FileKeyValueStore(settings.data_dir)
    return RecipeRepository(store, images, catalog)


def create_app(
    repository: Optional[RecipeRepository] = None,
    settings: Optional[Settings] = None,
) -> Flask:
    """Create and configure the Flask application.

    Parameters
    ----------
    repository:
        Optional recipe repository. When ``None`` one is built from
        ``settings`` (or :meth:`Settings.from_env`) backed by local files.
    settings:
        Optional configuration used when ``repository`` is not given.
    """

    app = Flask(__name__)
    app.config.setdefault("MAX_CONTENT_LENGTH", 16 * 1024 * 1024)

    if repository is None:
        repository = build_repository(settings or Settings.from_env())
    app.config["RECIPE_REPOSITORY"] = repository

    @app.get("/categories")
    def list_categories() -> Response:
        repo: RecipeRepository = app.config["RECIPE_REPOSITORY"]
        return jsonify([{"id": c.id, "name": c.name} for c in repo.categories])

    @app.get("/recipes")
    def list_recipes() -> Tuple[Response, int]:
        repo: RecipeRepository = app.config["RECIPE_REPOSITORY"]

        type_arg = request.args.get("type", "").strip()
        type_id: Optional[int] = None
        if type_arg:
            try:
                type_id = int(type_arg)
            except ValueError:
                return _error("Recipe type must be a number.", 400)

        recipes = repo.list_by_category(type_id)
        if request.args.get("sort") == "title":
            recipes = sorted(recipes, key=lambda recipe: recipe.title)

        return jsonify([_serialize(repo, recipe) for recipe in recipes]), 200

    @app.get("/recipes/<recipe_id>")
    def get_recipe(recipe_id: str) -> Tuple[Response, int]:
        repo: RecipeRepository = app.config["RECIPE_REPOSITORY"]

        recipe = repo.find_by_id(recipe_id)
        if recipe is None:
            return _error("Recipe not found.", 404)
        return jsonify(_serialize(repo, recipe)), 200

    @app.get("/recipes/<recipe_id>/image")
    def get_recipe_image(recipe_id: str):
        repo: RecipeRepository = app.config["RECIPE_REPOSITORY"]

        recipe = repo.find_by_id(recipe_id)
        if recipe is None:
            return _error("Recipe not found.", 404)

        data = repo.images.resolve(recipe.image)
        if data is None:
            return _error("Image not found.", 404)
        return Response(data, mimetype=_image_mimetype(recipe, repo))

    @app.post("/recipes")
    def create_recipe() -> Tuple[Response, int]:
        repo: RecipeRepository = app.config["RECIPE_REPOSITORY"]

        form, problem = _read_form()
        if problem:
            return _error(problem, 400)
        title, type_id, ingredients, steps = form

        image = request.files.get("image")
        stored: Optional[StoredFile] = None
        if image and image.filename:
            saved = repo.images.save(image)
            if not saved:
                return _image_error(saved)
            stored = saved.value

        recipe = Recipe(
            title=title,
            type_id=type_id,
            ingredients=ingredients,
            steps=steps,
            image=stored,
        )
        outcome = repo.create(recipe)
        if not outcome:
            return _outcome_error(outcome, "Failed to save recipe.")
        return jsonify(_serialize(repo, recipe)), 201

    @app.post("/recipes/<recipe_id>")
    def update_recipe(recipe_id: str) -> Tuple[Response, int]:
        repo: RecipeRepository = app.config["RECIPE_REPOSITORY"]

        recipe = repo.find_by_id(recipe_id)
        if recipe is None:
            return _error("Recipe not found.", 404)

        form, problem = _read_form()
        if problem:
            return _error(problem, 400)
        recipe.title, recipe.type_id, recipe.ingredients, recipe.steps = form

        image = request.files.get("image")
        remove_image = request.form.get("remove_image") == "1"
        previous = recipe.image

        if image and image.filename:
            saved = repo.images.save(image)
            if not saved:
                return _image_error(saved)
            recipe.image = saved.value
        elif remove_image:
            recipe.image = None

        outcome = repo.update(recipe)
        if not outcome:
            return _outcome_error(outcome, "Failed to update recipe.")

        if previous != recipe.image and isinstance(previous, StoredFile):
            repo.images.remove(previous)

        return jsonify(_serialize(repo, recipe)), 200

    @app.post("/recipes/<recipe_id>/delete")
    def delete_recipe(recipe_id: str) -> Tuple[Response, int]:
        repo: RecipeRepository = app.config["RECIPE_REPOSITORY"]

        outcome = repo.delete(recipe_id)
        if not outcome:
            return _outcome_error(outcome, "Failed to delete recipe.")
        return jsonify({"deleted": recipe_id}), 200

    return app


def _read_form() -> Tuple[Optional[tuple], Optional[str]]:
    """Validate the add/edit form. Returns ``(fields, None)`` or ``(None, message)``."""

    title = request.form.get("title", "").strip()
    if not title:
        return None, "Please provide a recipe title."

    try:
        type_id = int(request.form.get("type_id", "").strip())
    except ValueError:
        return None, "Please choose a recipe type."

    image = request.files.get("image")
    if image and image.filename and not _allowed_image(image):
        return None, "Unsupported image format. Allowed formats: PNG, JPG, JPEG, GIF, WEBP."

    ingredients = _parse_lines(request.form.get("ingredients", ""))
    steps = _parse_lines(request.form.get("steps", ""))
    return (title, type_id, ingredients, steps), None


def _parse_lines(text: str) -> List[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


def _allowed_image(image: FileStorage) -> bool:
    filename = image.filename
    if not filename or "." not in filename:
        return False
    ext = filename.rsplit(".", 1)[1].lower()
    return ext in ALLOWED_IMAGE_EXTENSIONS


def _serialize(repo: RecipeRepository, recipe: Recipe) -> dict:
    data = recipe.to_dict()
    data["typeName"] = repo.category_name(recipe.type_id)
    return data


def _image_mimetype(recipe: Recipe, repo: RecipeRepository) -> str:
    if isinstance(recipe.image, BundledAsset):
        path = repo.images.assets.path_for(recipe.image.name)
        guessed = mimetypes.guess_type(path.name)[0] if path else None
        return guessed or "application/octet-stream"
    return "image/jpeg"


def _error(message: str, status: int) -> Tuple[Response, int]:
    return jsonify({"error": message}), status


def _outcome_error(outcome: Outcome, message: str) -> Tuple[Response, int]:
    if outcome.reason is Reason.NOT_FOUND:
        return _error("Recipe not found.", 404)
    return _error(f"{message} ({outcome.reason.value})", 500)


def _image_error(outcome: Outcome) -> Tuple[Response, int]:
    if outcome.reason is Reason.ENCODE_FAILED:
        return _error("The uploaded file could not be read as an image.", 400)
    return _outcome_error(outcome, "Failed to save image.")


__all__ = ["build_repository", "create_app", "Recipe"]
