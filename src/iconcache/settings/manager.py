"""Settings file management with validation and change notifications."""

from __future__ import annotations

import os
import sys
from copy import deepcopy
from pathlib import Path
from typing import Any

from jsonschema import ValidationError
from PySide6.QtCore import QObject, Signal

from ..config import CACHE_DIR_NAME
from ..errors import SettingsLoadError, SettingsValidationError
from ..utils.jsonio import read_json, write_json
from .schema import DEFAULT_SETTINGS, merge_with_defaults


def default_settings_path() -> Path:
    """Return the default settings.json location for the current platform."""

    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "iconcache" / "settings.json"
        return Path.home() / "AppData" / "Roaming" / "iconcache" / "settings.json"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "iconcache" / "settings.json"
    base = os.environ.get("XDG_CONFIG_HOME")
    if base:
        return Path(base) / "iconcache" / "settings.json"
    return Path.home() / ".config" / "iconcache" / "settings.json"


def default_cache_dir() -> Path:
    """Return the platform cache directory used when ``cache_dir`` is unset."""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA")
        if base:
            return Path(base) / CACHE_DIR_NAME / "Cache"
        return Path.home() / "AppData" / "Local" / CACHE_DIR_NAME / "Cache"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Caches" / CACHE_DIR_NAME
    base = os.environ.get("XDG_CACHE_HOME")
    if base:
        return Path(base) / CACHE_DIR_NAME
    return Path.home() / ".cache" / CACHE_DIR_NAME


class SettingsManager(QObject):
    """Load, validate and persist loader settings.

    ``load`` never creates the file; it is only written by :meth:`set`.
    """

    settingsChanged = Signal(str, object)

    def __init__(self, path: Path | None = None) -> None:
        super().__init__()
        self._path = path
        self._data: dict[str, Any] = deepcopy(DEFAULT_SETTINGS)

    @property
    def path(self) -> Path:
        return self._path or default_settings_path()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def load(self) -> None:
        """Load the settings JSON from disk, falling back to defaults if missing."""

        path = self.path
        self._path = path
        payload = None
        if path.exists():
            try:
                payload = read_json(path)
            except (OSError, ValueError) as exc:
                raise SettingsLoadError(f"Cannot read {path}: {exc}") from exc
            if not isinstance(payload, dict):
                raise SettingsLoadError(f"{path} does not contain a JSON object")
        try:
            self._data = merge_with_defaults(payload)
        except ValidationError as exc:
            raise SettingsValidationError(exc.message) from exc

    def get(self, key: str, default: Any | None = None) -> Any:
        """Return the value for *key*, supporting dotted access for nested keys."""

        target = self._data
        parts = key.split(".")
        for index, part in enumerate(parts):
            if not isinstance(target, dict) or part not in target:
                return default
            value = target[part]
            if index == len(parts) - 1:
                return value
            target = value
        return default

    def set(self, key: str, value: Any) -> None:
        """Update *key* with *value* and persist the change."""

        if isinstance(value, Path):
            value = str(value)

        candidate = deepcopy(self._data)
        parts = key.split(".")
        target: dict[str, Any] = candidate
        for part in parts[:-1]:
            branch = target.get(part)
            if not isinstance(branch, dict):
                branch = {}
                target[part] = branch
            target = branch
        target[parts[-1]] = value
        try:
            self._data = merge_with_defaults(candidate)
        except ValidationError as exc:
            raise SettingsValidationError(exc.message) from exc
        write_json(self.path, self._data)
        self.settingsChanged.emit(key, value)

    def cache_dir(self) -> Path:
        configured = self.get("cache_dir")
        if configured:
            return Path(configured).expanduser()
        return default_cache_dir()


__all__ = ["SettingsManager", "default_cache_dir", "default_settings_path"]
