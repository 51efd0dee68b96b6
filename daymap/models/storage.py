# daymap/models/storage.py
"""
Flat key/value blob storage.

Defines the BlobStore interface and two implementations: a file-backed
store (one file per key) and an in-memory store for tests.
"""

import logging
import os
import re
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^[A-Za-z0-9_.-]{1,128}$")


class BlobStore(ABC):
    """
    Abstract base class for key/value blob storage.

    Values are opaque strings. Writes replace the previous value entirely.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        """
        Read the value stored under key.

        Returns:
            Stored string, or None if the key was never written
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove key if present."""
        pass


class InMemoryBlobStore(BlobStore):
    """Dictionary-backed blob store."""

    def __init__(self) -> None:
        self._blobs: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._blobs.get(key)

    def set(self, key: str, value: str) -> None:
        self._blobs[key] = value

    def delete(self, key: str) -> None:
        self._blobs.pop(key, None)


class FileBlobStore(BlobStore):
    """
    Directory-backed blob store.

    Each key maps to `<directory>/<key>.json`. Writes go to a temp file
    first and are moved into place so a crash never leaves a half-written
    blob behind.
    """

    def __init__(self, directory: str | Path) -> None:
        """
        Initialize file blob store.

        Args:
            directory: Directory holding the blob files (created if missing)
        """
        self._directory = Path(directory)
        self._directory.mkdir(parents=True, exist_ok=True)
        logger.info(f"Created FileBlobStore at {self._directory}")

    def _path(self, key: str) -> Path:
        if not _KEY_PATTERN.match(key):
            raise ValueError(f"Invalid storage key '{key}'")
        return self._directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(value, encoding="utf-8")
        os.replace(tmp_path, path)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
