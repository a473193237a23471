"""LoadJob QRunnable that fetches and decodes one icon off the UI thread."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Optional

from PySide6.QtCore import QRunnable
from PySide6.QtGui import QImage

from ...errors import InfrastructureError
from ...infrastructure.services.fetcher import Fetcher

if TYPE_CHECKING:
    from ..load_coordinator import LoadCoordinator


LOGGER = logging.getLogger(__name__)


class LoadJob(QRunnable):
    """Background task that resolves ``identity`` to a ``QImage``.

    The result is reported through the coordinator's private signal.  The
    coordinator lives on the delivery thread, so the emission is queued and
    the slot always runs there.
    """

    def __init__(
        self,
        coordinator: "LoadCoordinator",
        fetcher: Fetcher,
        identity: str,
        decoder: Callable[[bytes], Optional[QImage]],
        is_stale: Callable[[], bool],
    ) -> None:
        super().__init__()
        self._coordinator = coordinator
        self._fetcher = fetcher
        self._identity = identity
        self._decoder = decoder
        self._is_stale = is_stale

    @property
    def identity(self) -> str:
        return self._identity

    def run(self) -> None:  # pragma: no cover - executed in worker thread
        # Every waiting request may have been cancelled while this job sat in
        # the pool queue; report back without touching disk or network.
        if self._is_stale():
            self._emit(None, skipped=True)
            return

        image: Optional[QImage] = None
        try:
            data = self._fetcher.fetch(self._identity)
            image = self._decoder(data)
            if image is not None and image.isNull():
                image = None
            if image is None:
                LOGGER.warning("Could not decode icon for %s", self._identity)
        except InfrastructureError as exc:
            LOGGER.warning("Icon load failed for %s: %s", self._identity, exc)
        except Exception:
            LOGGER.exception("Unexpected error while loading %s", self._identity)
        self._emit(image, skipped=False)

    def _emit(self, image: Optional[QImage], *, skipped: bool) -> None:
        try:
            self._coordinator._delivered.emit(self._identity, image, skipped)
        except RuntimeError:  # pragma: no cover - race with QObject deletion
            pass


__all__ = ["LoadJob"]
