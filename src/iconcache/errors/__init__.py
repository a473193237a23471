"""Custom exception hierarchy for iconcache."""

from __future__ import annotations


class IconCacheError(Exception):
    """Base class for all custom errors raised by iconcache."""


class InfrastructureError(IconCacheError):
    """Base class for disk and network level errors."""


# --- Fetch path errors ---

class ContentNotFoundError(InfrastructureError):
    """Raised when the content store has no entry for the requested key."""


class StorageError(InfrastructureError):
    """Raised when reading or writing a cache entry fails."""


class NetworkError(InfrastructureError):
    """Raised when transferring a resource over the network fails."""


class DecodeError(InfrastructureError):
    """Raised when transferred bytes are not a decodable image."""


# --- Configuration errors ---

class ManifestInvalidError(IconCacheError):
    """Raised when the icon manifest does not have the expected shape."""


class SettingsError(IconCacheError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""


__all__ = [
    "ContentNotFoundError",
    "DecodeError",
    "IconCacheError",
    "InfrastructureError",
    "ManifestInvalidError",
    "NetworkError",
    "SettingsError",
    "SettingsLoadError",
    "SettingsValidationError",
    "StorageError",
]
