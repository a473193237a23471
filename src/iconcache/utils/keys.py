"""Derive cache file names from resource URLs."""

from __future__ import annotations

import hashlib
import posixpath
from urllib.parse import unquote, urlsplit

from ..config import DEFAULT_KEY_STRATEGY, KEY_STRATEGIES, TEMP_SUFFIX

_INVALID_SEGMENTS = {"", ".", ".."}
# Most filesystems cap a single name at 255 bytes.
_MAX_NAME_BYTES = 200
# Characters and device names Windows refuses in file names.
_FORBIDDEN_CHARS = frozenset('<>:"|?*') | {chr(code) for code in range(32)}
_RESERVED_NAMES = frozenset(
    {"CON", "PRN", "AUX", "NUL"}
    | {f"COM{n}" for n in range(1, 10)}
    | {f"LPT{n}" for n in range(1, 10)}
)


def url_basename(identity: str) -> str:
    """Return the last path segment of *identity*, or ``""`` when absent.

    Query strings and fragments are ignored, percent escapes are decoded and
    a trailing slash leaves no usable segment.
    """

    path = urlsplit(identity).path
    segment = unquote(path.rsplit("/", 1)[-1])
    # Decoded separators (``%2F``) must not leak into a file name.
    segment = segment.replace("/", "_").replace("\\", "_")
    if segment in _INVALID_SEGMENTS:
        return ""
    return segment


def _digest_key(identity: str, basename: str) -> str:
    digest = hashlib.sha1(identity.encode("utf-8")).hexdigest()
    suffix = posixpath.splitext(basename)[1].lower()
    if suffix == TEMP_SUFFIX or not 1 < len(suffix) <= 16 or _FORBIDDEN_CHARS.intersection(suffix):
        suffix = ""
    return f"{digest}{suffix}"


def _usable_as_key(basename: str) -> bool:
    return (
        bool(basename)
        and not basename.endswith(TEMP_SUFFIX)
        and len(basename.encode("utf-8")) <= _MAX_NAME_BYTES
        and not _FORBIDDEN_CHARS.intersection(basename)
        and not basename.endswith((".", " "))
        and basename.split(".", 1)[0].upper() not in _RESERVED_NAMES
    )


def content_key(identity: str, strategy: str = DEFAULT_KEY_STRATEGY) -> str:
    """Return the cache key for *identity* using *strategy*.

    ``basename`` maps ``http://x/a.png`` to ``a.png``.  Two URLs that share a
    final segment therefore share a cache entry; use ``digest`` when that
    aliasing matters.  Segments that cannot serve as a file name fall back to
    the digest form under either strategy.
    """

    if strategy not in KEY_STRATEGIES:
        raise ValueError(f"Unknown key strategy: {strategy!r}")
    basename = url_basename(identity)
    if strategy == "basename" and _usable_as_key(basename):
        return basename
    return _digest_key(identity, basename)


__all__ = ["content_key", "url_basename"]
