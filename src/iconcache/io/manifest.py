"""Read the icon manifest that feeds the list view."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable

from jsonschema import Draft202012Validator
from jsonschema.exceptions import best_match

from ..errors import ManifestInvalidError
from ..models.types import ResourceRecord
from ..utils.jsonio import read_json

LOGGER = logging.getLogger(__name__)

ENTRY_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["icon_url", "resource_id"],
    "properties": {
        "icon_url": {"type": "string", "minLength": 1},
        "resource_id": {"type": "string"},
    },
    "additionalProperties": True,
}

# Every entry must be an object whose values are all strings; anything else
# invalidates the whole manifest.
MANIFEST_SCHEMA: dict[str, Any] = {
    "type": "array",
    "items": {"type": "object", "additionalProperties": {"type": "string"}},
}

_entry_validator = Draft202012Validator(ENTRY_SCHEMA)
_manifest_validator = Draft202012Validator(MANIFEST_SCHEMA)


def parse_records(payload: Any) -> list[ResourceRecord]:
    """Map a decoded manifest to records.

    Raises :class:`ManifestInvalidError` when *payload* is not an array of
    string-valued objects.  Entries lacking ``icon_url`` or ``resource_id``
    (or with an empty ``icon_url``) are skipped.
    """

    error = best_match(_manifest_validator.iter_errors(payload))
    if error is not None:
        location = "/".join(str(part) for part in error.absolute_path) or "<root>"
        raise ManifestInvalidError(f"Invalid manifest at {location}: {error.message}")

    records: list[ResourceRecord] = []
    for index, entry in enumerate(payload):
        error = next(iter(_entry_validator.iter_errors(entry)), None)
        if error is not None:
            LOGGER.warning("Skipping manifest entry %d: %s", index, error.message)
            continue
        records.append(
            ResourceRecord(identity=entry["icon_url"], display_label=entry["resource_id"])
        )
    return records


def load_records(path: Path) -> list[ResourceRecord]:
    """Return the records listed in the manifest at *path*.

    A missing, unreadable or malformed manifest yields an empty list so the
    list view simply shows no rows.
    """

    try:
        payload = read_json(path)
    except FileNotFoundError:
        LOGGER.warning("Manifest %s does not exist", path)
        return []
    except (OSError, ValueError) as exc:
        LOGGER.warning("Could not read manifest %s: %s", path, exc)
        return []

    try:
        return parse_records(payload)
    except ManifestInvalidError as exc:
        LOGGER.warning("Ignoring manifest %s: %s", path, exc)
        return []


def distinct_identities(records: Iterable[ResourceRecord]) -> list[str]:
    """Return the distinct identities of *records* in display order."""

    seen: set[str] = set()
    ordered: list[str] = []
    for record in records:
        if record.identity not in seen:
            seen.add(record.identity)
            ordered.append(record.identity)
    return ordered


__all__ = ["ENTRY_SCHEMA", "distinct_identities", "load_records", "parse_records"]
