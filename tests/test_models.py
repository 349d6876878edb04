from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from recipebook.models import BundledAsset, Recipe, StoredFile, decode_recipes, encode_recipes


def test_round_trip_preserves_every_field():
    recipes = [
        Recipe(
            title="Shakshuka",
            type_id=1,
            ingredients=["eggs", "tomatoes"],
            steps=["Simmer sauce", "Poach eggs"],
            image=StoredFile("img_abc.jpg"),
        ),
        Recipe(title="Toast", type_id=2, image=BundledAsset("Pancakes")),
        Recipe(title="Water", type_id=5, ingredients=[], steps=[], image=None),
    ]

    decoded = decode_recipes(encode_recipes(recipes))

    assert decoded == recipes


def test_encoded_record_uses_durable_field_names():
    created = datetime(2024, 5, 1, 8, 30, tzinfo=timezone.utc)
    recipe = Recipe(
        id="fixed-id",
        title="Porridge",
        type_id=1,
        ingredients=["oats"],
        steps=["Stir"],
        image=StoredFile("img_1.jpg"),
        created_at=created,
    )

    [record] = json.loads(encode_recipes([recipe]))

    assert record == {
        "id": "fixed-id",
        "title": "Porridge",
        "typeId": 1,
        "imageFilename": "img_1.jpg",
        "imageAssetName": None,
        "ingredients": ["oats"],
        "steps": ["Stir"],
        "createdAt": "2024-05-01T08:30:00+00:00",
    }


def test_records_without_asset_field_decode_as_stored_files():
    blob = json.dumps(
        [
            {
                "id": "a",
                "title": "Old",
                "typeId": 3,
                "imageFilename": "img_old.jpg",
                "ingredients": [],
                "steps": [],
                "createdAt": "2023-01-01T00:00:00",
            }
        ]
    )

    [recipe] = decode_recipes(blob)

    assert recipe.image == StoredFile("img_old.jpg")
    assert recipe.created_at.tzinfo is not None


def test_new_recipes_get_distinct_ids():
    first = Recipe(title="A", type_id=1)
    second = Recipe(title="A", type_id=1)

    assert first.id != second.id


@pytest.mark.parametrize(
    "blob",
    [
        b"not json",
        b'{"id": "x"}',
        b'[{"title": "Missing id"}]',
        b'[{"id": "x", "title": "T", "typeId": "one", "ingredients": [], "steps": [], "createdAt": "2024-01-01T00:00:00"}]',
        b'[{"id": "x", "title": "T", "typeId": 1, "ingredients": "eggs", "steps": [], "createdAt": "2024-01-01T00:00:00"}]',
        b'[{"id": "x", "title": "T", "typeId": 1, "ingredients": [], "steps": [], "createdAt": "yesterday"}]',
        b'[{"id": "x", "title": "T", "typeId": 1, "imageFilename": 5, "ingredients": [], "steps": [], "createdAt": "2024-01-01T00:00:00"}]',
        b'[{"id": "x", "title": "T", "typeId": 1, "imageAssetName": ["a"], "ingredients": [], "steps": [], "createdAt": "2024-01-01T00:00:00"}]',
    ],
)
def test_decode_rejects_malformed_blobs(blob):
    with pytest.raises((ValueError, KeyError, TypeError)):
        decode_recipes(blob)
