"""Resolve resource identities to image bytes: disk cache first, then network."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from ...config import DEFAULT_KEY_STRATEGY
from ...errors import DecodeError, NetworkError, StorageError
from ...utils.keys import content_key
from .content_store import ContentStore
from .transport import Transport

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchStats:
    """Immutable snapshot of fetcher counters."""

    disk_hits: int = 0
    network_transfers: int = 0
    failures: int = 0

    @property
    def total(self) -> int:
        return self.disk_hits + self.network_transfers


def validate_image(data: bytes) -> None:
    """Raise :class:`DecodeError` unless *data* decodes to a complete image.

    ``verify()`` only checks container structure, so the first frame is
    decoded as well; truncated pixel data raises.
    """

    if not data:
        raise DecodeError("Empty payload")
    try:
        with Image.open(BytesIO(data)) as image:
            image.verify()
        # verify() leaves the image unusable; decode from a fresh handle.
        with Image.open(BytesIO(data)) as image:
            image.load()
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        EOFError,
        SyntaxError,
        ValueError,
    ) as exc:
        raise DecodeError(f"Payload is not a valid image: {exc}") from exc


class Fetcher:
    """Blocking fetch path executed on background threads only.

    The store and transport are injected so that several fetchers (or tests)
    never share hidden global state.
    """

    def __init__(
        self,
        store: ContentStore,
        transport: Transport,
        *,
        key_strategy: str = DEFAULT_KEY_STRATEGY,
        validate: bool = True,
    ) -> None:
        # Fail fast on an unknown strategy instead of on the first fetch.
        content_key("http://localhost/icon.png", key_strategy)
        self._store = store
        self._transport = transport
        self._key_strategy = key_strategy
        self._validate = validate
        self._lock = threading.Lock()
        self._disk_hits = 0
        self._network_transfers = 0
        self._failures = 0

    @property
    def store(self) -> ContentStore:
        return self._store

    @property
    def stats(self) -> FetchStats:
        with self._lock:
            return FetchStats(
                disk_hits=self._disk_hits,
                network_transfers=self._network_transfers,
                failures=self._failures,
            )

    def key_for(self, identity: str) -> str:
        return content_key(identity, self._key_strategy)

    def fetch(self, identity: str) -> bytes:
        """Return the bytes for *identity*, transferring them on a cache miss.

        Raises :class:`NetworkError` or :class:`DecodeError`; neither leaves
        anything behind in the store.
        """

        key = self.key_for(identity)
        if self._store.exists(key):
            data = self._store.read(key)
            self._count("disk")
            LOGGER.debug("Cache hit for %s (%s)", identity, key)
            return data

        try:
            data = self._transport.get(identity)
            if self._validate:
                validate_image(data)
        except (NetworkError, DecodeError):
            self._count("failure")
            raise
        self._count("network")

        try:
            self._store.write(key, data)
        except StorageError as exc:
            LOGGER.warning("Could not cache %s as %s: %s", identity, key, exc)
        return data

    def _count(self, kind: str) -> None:
        with self._lock:
            if kind == "disk":
                self._disk_hits += 1
            elif kind == "network":
                self._network_transfers += 1
            else:
                self._failures += 1


__all__ = ["FetchStats", "Fetcher", "validate_image"]
