from __future__ import annotations

import logging
from pathlib import Path

import pytest

from recipebook.catalog import DEFAULT_CATALOG_PATH, CatalogPolicy
from recipebook.config import Settings
from recipebook.logs import setup_logging


def test_defaults(monkeypatch):
    for name in (
        "RECIPEBOOK_DATA_DIR",
        "RECIPEBOOK_IMAGES_DIR",
        "RECIPEBOOK_CATALOG_PATH",
        "RECIPEBOOK_ASSETS_DIR",
        "RECIPEBOOK_CATALOG_POLICY",
        "RECIPEBOOK_IMAGE_QUALITY",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = Settings.from_env()

    assert settings.data_dir == Path("instance")
    assert settings.resolved_images_dir == Path("instance") / "images"
    assert settings.catalog_path == DEFAULT_CATALOG_PATH
    assert settings.catalog_policy is CatalogPolicy.DEGRADE
    assert settings.image_quality == 90


def test_reads_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("RECIPEBOOK_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("RECIPEBOOK_IMAGES_DIR", str(tmp_path / "pictures"))
    monkeypatch.setenv("RECIPEBOOK_CATALOG_POLICY", "Fail-Fast")
    monkeypatch.setenv("RECIPEBOOK_IMAGE_QUALITY", "75")
    monkeypatch.setenv("LOG_LEVEL", "debug")

    settings = Settings.from_env()

    assert settings.data_dir == tmp_path
    assert settings.resolved_images_dir == tmp_path / "pictures"
    assert settings.catalog_policy is CatalogPolicy.FAIL_FAST
    assert settings.image_quality == 75
    assert settings.log_level == "DEBUG"


def test_rejects_out_of_range_quality(monkeypatch):
    monkeypatch.setenv("RECIPEBOOK_IMAGE_QUALITY", "120")

    with pytest.raises(ValueError):
        Settings.from_env()


def test_setup_logging_applies_level():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    try:
        setup_logging("warning")

        assert root.level == logging.WARNING
        assert logging.getLogger("werkzeug").level == logging.WARNING
    finally:
        root.handlers[:] = handlers
        root.setLevel(level)
