"""Default configuration values for iconcache."""

from __future__ import annotations

from typing import Final

# Name of the JSON manifest that lists the icons shown by the list view.  The
# manifest is an array of ``{"icon_url": ..., "resource_id": ...}`` objects.
DEFAULT_MANIFEST_NAME: Final[str] = "mask.json"

# Folder created below the platform cache directory when the settings do not
# provide an explicit ``cache_dir``.
CACHE_DIR_NAME: Final[str] = "iconcache"

NETWORK_TIMEOUT_SEC: Final[float] = 10.0
USER_AGENT: Final[str] = "iconcache/0.1"

# ``basename`` keeps the last URL path segment as the file name so existing
# caches stay readable.  ``digest`` hashes the full URL, which avoids two
# resources with the same file name sharing one cache entry.
KEY_STRATEGIES: Final[tuple[str, ...]] = ("basename", "digest")
DEFAULT_KEY_STRATEGY: Final[str] = "basename"

# Suffix appended to in-progress cache writes.  Files carrying it are never
# reported as cache entries.
TEMP_SUFFIX: Final[str] = ".part"
