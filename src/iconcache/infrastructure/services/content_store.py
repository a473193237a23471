"""Flat on-disk store mapping content keys to raw image bytes."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from ...config import TEMP_SUFFIX
from ...errors import ContentNotFoundError, StorageError

LOGGER = logging.getLogger(__name__)


def safe_unlink(path: Path) -> None:
    """Remove *path*, ignoring files that are already gone or locked."""

    try:
        path.unlink(missing_ok=True)
    except OSError:
        LOGGER.debug("Could not remove %s", path)


class ContentStore:
    """Durable key → bytes store backed by a single flat directory.

    Entries are never evicted.  Concurrent writers of the same key follow
    last-writer-wins; with ``atomic_writes`` enabled a reader never observes
    a partially written file because data is renamed into place.
    """

    def __init__(self, cache_dir: Path, *, atomic_writes: bool = True) -> None:
        self._cache_dir = Path(cache_dir)
        self._atomic_writes = atomic_writes

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def path_for(self, key: str) -> Path:
        """Return the file that holds *key*."""

        if (
            not key
            or key in {".", ".."}
            or "/" in key
            or "\\" in key
            or key.endswith(TEMP_SUFFIX)
        ):
            raise ValueError(f"Invalid content key: {key!r}")
        return self._cache_dir / key

    def exists(self, key: str) -> bool:
        path = self.path_for(key)
        try:
            return path.is_file() and os.access(path, os.R_OK)
        except OSError:
            return False

    def read(self, key: str) -> bytes:
        path = self.path_for(key)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise ContentNotFoundError(key) from exc
        except OSError as exc:
            raise StorageError(f"Failed to read {path}: {exc}") from exc

    def write(self, key: str, data: bytes) -> None:
        path = self.path_for(key)
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot create cache directory {self._cache_dir}: {exc}") from exc

        if not self._atomic_writes:
            try:
                path.write_bytes(data)
            except OSError as exc:
                raise StorageError(f"Failed to write {path}: {exc}") from exc
            return

        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{key}.", suffix=TEMP_SUFFIX, dir=self._cache_dir
            )
        except OSError as exc:
            raise StorageError(f"Failed to write {path}: {exc}") from exc
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            tmp_path.replace(path)
        except OSError as exc:
            safe_unlink(tmp_path)
            raise StorageError(f"Failed to write {path}: {exc}") from exc

    def keys(self) -> list[str]:
        """Return the sorted keys currently present on disk."""

        try:
            entries = list(self._cache_dir.iterdir())
        except FileNotFoundError:
            return []
        except OSError as exc:
            raise StorageError(f"Failed to list {self._cache_dir}: {exc}") from exc
        return sorted(
            entry.name
            for entry in entries
            if entry.is_file() and not entry.name.endswith(TEMP_SUFFIX)
        )


__all__ = ["ContentStore", "safe_unlink"]
