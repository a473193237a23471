"""Schema helpers for the loader settings file."""

from __future__ import annotations

import os
from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from ..config import DEFAULT_KEY_STRATEGY, KEY_STRATEGIES, NETWORK_TIMEOUT_SEC, USER_AGENT

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "iconcache/settings.schema.json",
    "type": "object",
    "required": ["schema", "network", "cache", "loader"],
    "properties": {
        "schema": {"const": "iconcache/settings@1"},
        "cache_dir": {"type": ["string", "null"]},
        "network": {
            "type": "object",
            "properties": {
                "timeout": {"type": "number", "exclusiveMinimum": 0},
                "user_agent": {"type": "string", "minLength": 1},
            },
            "additionalProperties": True,
        },
        "cache": {
            "type": "object",
            "properties": {
                "key_strategy": {"type": "string", "enum": list(KEY_STRATEGIES)},
                "atomic_writes": {"type": "boolean"},
            },
            "additionalProperties": True,
        },
        "loader": {
            "type": "object",
            "properties": {
                "max_threads": {"type": ["integer", "null"], "minimum": 1},
            },
            "additionalProperties": True,
        },
    },
    "additionalProperties": True,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": "iconcache/settings@1",
    "cache_dir": None,
    "network": {
        "timeout": NETWORK_TIMEOUT_SEC,
        "user_agent": USER_AGENT,
    },
    "cache": {
        "key_strategy": DEFAULT_KEY_STRATEGY,
        "atomic_writes": True,
    },
    "loader": {
        "max_threads": None,
    },
}

_SECTIONS = ("network", "cache", "loader")

_validator = Draft202012Validator(SETTINGS_SCHEMA)


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_SETTINGS` and validate the result."""

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            if key in _SECTIONS and isinstance(value, dict):
                merged.setdefault(key, {}).update(value)
                continue
            if key == "cache_dir" and value not in {None, ""}:
                try:
                    merged[key] = os.fspath(value)
                except TypeError:
                    continue
                continue
            merged[key] = value
    _validator.validate(merged)
    return merged


def validate_settings(data: dict[str, Any]) -> None:
    """Validate *data* against the settings schema."""

    _validator.validate(data)


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_SCHEMA", "merge_with_defaults", "validate_settings"]
