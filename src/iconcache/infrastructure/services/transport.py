"""Blocking network transports used by the fetcher."""

from __future__ import annotations

import logging
import threading
from typing import Optional, Protocol

import httpx

from ...config import NETWORK_TIMEOUT_SEC, USER_AGENT
from ...errors import NetworkError

LOGGER = logging.getLogger(__name__)


class Transport(Protocol):
    """Fetch the raw bytes stored at a URL, raising ``NetworkError`` on failure."""

    def get(self, url: str) -> bytes: ...


class HttpTransport:
    """``httpx`` backed transport shared by every background job.

    ``httpx.Client`` is safe to use from several threads; the lock only guards
    lazy creation and ``close``.
    """

    def __init__(
        self,
        *,
        timeout: float = NETWORK_TIMEOUT_SEC,
        user_agent: str = USER_AGENT,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._timeout = timeout
        self._user_agent = user_agent
        self._owns_client = client is None
        self._client = client
        self._lock = threading.Lock()

    def _ensure_client(self) -> httpx.Client:
        with self._lock:
            if self._client is None:
                self._owns_client = True
                self._client = httpx.Client(
                    timeout=httpx.Timeout(self._timeout),
                    follow_redirects=True,
                    headers={"User-Agent": self._user_agent},
                )
            return self._client

    def get(self, url: str) -> bytes:
        client = self._ensure_client()
        try:
            response = client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise NetworkError(
                f"{url} returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Timed out fetching {url}") from exc
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise NetworkError(f"Failed to fetch {url}: {exc}") from exc
        return response.content

    def close(self) -> None:
        """Close the underlying client if this transport created it."""

        with self._lock:
            client, self._client = self._client, None
        if client is not None and self._owns_client:
            client.close()


__all__ = ["HttpTransport", "Transport"]
