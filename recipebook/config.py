from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .catalog import DEFAULT_CATALOG_PATH, CatalogPolicy
from .images import DEFAULT_ASSETS_DIR, IMAGE_QUALITY


@dataclass(frozen=True)
class Settings:
    """Runtime configuration for the recipe book."""

    data_dir: Path = Path("instance")
    images_dir: Optional[Path] = None
    catalog_path: Path = DEFAULT_CATALOG_PATH
    assets_dir: Path = DEFAULT_ASSETS_DIR
    catalog_policy: CatalogPolicy = CatalogPolicy.DEGRADE
    image_quality: int = IMAGE_QUALITY
    log_level: str = "INFO"

    @property
    def resolved_images_dir(self) -> Path:
        return self.images_dir if self.images_dir is not None else self.data_dir / "images"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables."""

        data_dir = Path(os.environ.get("RECIPEBOOK_DATA_DIR", "instance"))
        images_dir = os.environ.get("RECIPEBOOK_IMAGES_DIR")
        catalog_path = os.environ.get("RECIPEBOOK_CATALOG_PATH")
        assets_dir = os.environ.get("RECIPEBOOK_ASSETS_DIR")
        policy = os.environ.get("RECIPEBOOK_CATALOG_POLICY", CatalogPolicy.DEGRADE.value)
        quality = int(os.environ.get("RECIPEBOOK_IMAGE_QUALITY", IMAGE_QUALITY))

        if not 1 <= quality <= 95:
            raise ValueError(f"RECIPEBOOK_IMAGE_QUALITY must be between 1 and 95, got {quality}")

        return cls(
            data_dir=data_dir,
            images_dir=Path(images_dir) if images_dir else None,
            catalog_path=Path(catalog_path) if catalog_path else DEFAULT_CATALOG_PATH,
            assets_dir=Path(assets_dir) if assets_dir else DEFAULT_ASSETS_DIR,
            catalog_policy=CatalogPolicy(policy.strip().lower()),
            image_quality=quality,
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        )


__all__ = ["Settings"]
