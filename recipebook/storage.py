from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol, Union

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Protocol describing the durable slot the repository writes into."""

    def get(self, key: str) -> Optional[bytes]:
        """Return the stored value or ``None`` when the key was never written."""

    def set(self, key: str, value: bytes) -> None:
        """Replace the value stored under ``key``. Raises ``OSError`` on failure."""


def atomic_write(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` so readers see either the old or the new file."""

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


class FileKeyValueStore(KeyValueStore):
    """Key-value slot backed by one file per key inside a directory."""

    def __init__(self, directory: Union[str, Path], *, suffix: str = ".json") -> None:
        self._directory = Path(directory)
        self._suffix = suffix
        self._directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._directory / f"{key}{self._suffix}"

    def get(self, key: str) -> Optional[bytes]:
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None

    def set(self, key: str, value: bytes) -> None:
        path = self.path_for(key)
        atomic_write(path, value)
        logger.debug("Wrote %d bytes to %s", len(value), path)


__all__ = ["FileKeyValueStore", "KeyValueStore", "atomic_write"]
