from __future__ import annotations

import io
import logging
import uuid
from pathlib import Path
from typing import BinaryIO, Dict, Optional, Union

from PIL import Image
from werkzeug.utils import secure_filename

from .models import BundledAsset, ImageRef, StoredFile
from .results import Outcome, Reason
from .storage import atomic_write

logger = logging.getLogger(__name__)

DEFAULT_ASSETS_DIR = Path(__file__).resolve().parent / "data" / "images"

IMAGE_PREFIX = "img_"
IMAGE_EXTENSION = ".jpg"
IMAGE_QUALITY = 90


class BundledAssets:
    """Read-only images shipped with the application.

    An asset is addressed by its file stem, so ``Pancakes.png`` is the asset
    named ``"Pancakes"``. Lookups are exact matches.
    """

    def __init__(self, directory: Union[str, Path] = DEFAULT_ASSETS_DIR) -> None:
        self._directory = Path(directory)
        self._index: Dict[str, Path] = {}
        if self._directory.is_dir():
            for path in sorted(self._directory.iterdir()):
                if path.is_file() and not path.name.startswith("."):
                    self._index.setdefault(path.stem, path)
        else:
            logger.warning("Bundled image directory %s does not exist", self._directory)

    def path_for(self, name: str) -> Optional[Path]:
        return self._index.get(name)

    def read(self, name: str) -> Optional[bytes]:
        path = self._index.get(name)
        if path is None:
            return None
        try:
            return path.read_bytes()
        except OSError as exc:
            logger.error("Failed to read bundled image %s: %s", path, exc)
            return None


ImageSource = Union[bytes, bytearray, BinaryIO]


class ImageStore:
    """Stores user images as JPEG files in a local directory."""

    def __init__(
        self,
        directory: Union[str, Path],
        assets: Optional[BundledAssets] = None,
        *,
        quality: int = IMAGE_QUALITY,
        prefix: str = IMAGE_PREFIX,
        extension: str = IMAGE_EXTENSION,
    ) -> None:
        self._directory = Path(directory)
        self._directory.mkdir(parents=True, exist_ok=True)
        self._assets = assets if assets is not None else BundledAssets()
        self._quality = quality
        self._prefix = prefix
        self._extension = extension

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def assets(self) -> BundledAssets:
        return self._assets

    def save(self, image: ImageSource) -> Outcome[StoredFile]:
        filename = self._build_filename()

        try:
            data = self._encode(image)
        except (OSError, ValueError, Image.DecompressionBombError) as exc:
            logger.error("Failed to encode image: %s", exc)
            return Outcome.failure(Reason.ENCODE_FAILED, str(exc))

        try:
            atomic_write(self._directory / filename, data)
        except OSError as exc:
            logger.error("Failed to save image %s: %s", filename, exc)
            return Outcome.failure(Reason.WRITE_FAILED, str(exc))

        logger.info("Saved image %s (%d bytes)", filename, len(data))
        return Outcome.success(StoredFile(filename))

    def resolve(self, reference: Union[ImageRef, str, None]) -> Optional[bytes]:
        """Return the bytes behind an image reference, or ``None``.

        Tagged references look only in their own namespace. A plain string
        is tried against the bundled assets first, then local storage.
        """

        if reference is None:
            return None
        if isinstance(reference, BundledAsset):
            return self._assets.read(reference.name) if reference.name else None
        if isinstance(reference, StoredFile):
            return self._read_local(reference.filename)
        if not reference:
            return None

        bundled = self._assets.read(reference)
        if bundled is not None:
            return bundled
        return self._read_local(reference)

    def remove(self, reference: Union[ImageRef, str, None]) -> Outcome[None]:
        if reference is None or isinstance(reference, BundledAsset):
            return Outcome.success()

        filename = reference.filename if isinstance(reference, StoredFile) else reference
        path = self._local_path(filename)
        if path is None:
            return Outcome.success()

        try:
            path.unlink()
        except FileNotFoundError:
            return Outcome.success()
        except OSError as exc:
            logger.error("Failed to remove image file %s: %s", path, exc)
            return Outcome.failure(Reason.REMOVE_FAILED, str(exc))

        logger.info("Removed image %s", filename)
        return Outcome.success()

    def _build_filename(self) -> str:
        return f"{self._prefix}{uuid.uuid4().hex}{self._extension}"

    def _encode(self, image: ImageSource) -> bytes:
        if isinstance(image, (bytes, bytearray)):
            source: BinaryIO = io.BytesIO(image)
        else:
            source = getattr(image, "stream", image)
            if hasattr(source, "seek"):
                source.seek(0)

        with Image.open(source) as opened:
            converted = opened.convert("RGB")

        buffer = io.BytesIO()
        converted.save(buffer, format="JPEG", quality=self._quality)
        return buffer.getvalue()

    def _local_path(self, filename: str) -> Optional[Path]:
        if not filename or secure_filename(filename) != filename:
            return None
        return self._directory / filename

    def _read_local(self, filename: str) -> Optional[bytes]:
        path = self._local_path(filename)
        if path is None:
            return None
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.error("Failed to read image file %s: %s", path, exc)
            return None


__all__ = [
    "BundledAssets",
    "DEFAULT_ASSETS_DIR",
    "IMAGE_EXTENSION",
    "IMAGE_PREFIX",
    "IMAGE_QUALITY",
    "ImageStore",
]
