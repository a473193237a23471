"""Dispatch icon requests to background jobs and route results back."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional

from PySide6.QtCore import QObject, QThreadPool, Signal
from PySide6.QtGui import QImage

from ..infrastructure.services.fetcher import Fetcher
from ..models.types import LoadRequest
from ..utils.image_loader import qimage_from_bytes
from .tasks.load_job import LoadJob

LOGGER = logging.getLogger(__name__)


class LoadCoordinator(QObject):
    """Run :class:`Fetcher` calls on a thread pool and deliver on this thread.

    The coordinator must be created on the delivery thread and all public
    methods must be called from it.  Each in-flight fetch is associated with
    exactly the requests that asked for its identity, so results are routed
    directly to them; a request that was cancelled in the meantime is skipped.
    Several requests for the same identity share one fetch.
    """

    imageLoaded = Signal(str, object)
    """Emitted once per finished fetch with the identity and image (or ``None``)."""

    _delivered = Signal(str, object, bool)

    def __init__(
        self,
        fetcher: Fetcher,
        *,
        decoder: Callable[[bytes], Optional[QImage]] = qimage_from_bytes,
        thread_pool: Optional[QThreadPool] = None,
        max_threads: Optional[int] = None,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._fetcher = fetcher
        self._decoder = decoder
        self._owns_pool = thread_pool is None
        self._pool = thread_pool if thread_pool is not None else QThreadPool(self)
        if max_threads is not None:
            self._pool.setMaxThreadCount(max(1, int(max_threads)))
        self._inflight: Dict[str, List[LoadRequest]] = {}
        self._is_shutting_down = False
        self._delivered.connect(self._handle_result)

    @property
    def fetcher(self) -> Fetcher:
        return self._fetcher

    @property
    def active_jobs(self) -> int:
        return len(self._inflight)

    def pending_identities(self) -> set[str]:
        """Expose the identities with a fetch in flight for diagnostics/testing."""

        return set(self._inflight)

    def submit(self, request: LoadRequest) -> None:
        """Schedule *request*; its completion runs later on this thread."""

        if self._is_shutting_down:
            request.cancel()
            return
        if not request.is_pending:
            LOGGER.debug("Dropping request %s for %s before dispatch", request.request_id, request.identity)
            return

        waiters = self._inflight.get(request.identity)
        if waiters is not None:
            waiters.append(request)
            return
        self._start_job(request.identity, [request])

    def _start_job(self, identity: str, waiters: List[LoadRequest]) -> None:
        self._inflight[identity] = waiters

        def is_stale() -> bool:
            return not any(waiter.is_pending for waiter in tuple(waiters))

        job = LoadJob(self, self._fetcher, identity, self._decoder, is_stale)
        self._pool.start(job)

    def _handle_result(self, identity: str, image: Optional[QImage], skipped: bool) -> None:
        waiters = self._inflight.pop(identity, None)
        if waiters is None:
            return

        live = [waiter for waiter in waiters if waiter.is_pending]
        if skipped:
            # A request attached after the job decided to skip still needs a fetch.
            if live and not self._is_shutting_down:
                self._start_job(identity, live)
            return

        for waiter in live:
            try:
                waiter.deliver(image)
            except Exception:
                LOGGER.exception("Completion for slot %s failed", waiter.slot_id)
        self.imageLoaded.emit(identity, image)

    def shutdown(self) -> None:
        """Cancel every waiting request and wait for running jobs to finish."""

        self._is_shutting_down = True
        for waiters in self._inflight.values():
            for waiter in waiters:
                waiter.cancel()
        self._inflight.clear()
        if self._owns_pool:
            self._pool.clear()
            self._pool.waitForDone()


__all__ = ["LoadCoordinator"]
