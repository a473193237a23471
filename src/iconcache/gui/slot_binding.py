"""Bind list slots to icon requests, keeping at most one live request per slot."""

from __future__ import annotations

import logging
from typing import Dict, Optional

from PySide6.QtCore import QObject

from ..models.types import ImageCallback, LoadRequest, ResourceRecord
from .load_coordinator import LoadCoordinator

LOGGER = logging.getLogger(__name__)


class SlotBinding(QObject):
    """Track the current :class:`LoadRequest` of every visible slot.

    A slot is a recycled row of the list view, identified by a stable integer.
    Rebinding a slot cancels its previous request before the new one is
    issued.  The callback passed to :meth:`bind` is wrapped so it only fires
    while its request is still the one stored for that slot, compared by
    object identity rather than by slot id or URL.
    """

    def __init__(self, coordinator: LoadCoordinator, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._coordinator = coordinator
        self._requests: Dict[int, LoadRequest] = {}

    def bind(self, slot_id: int, record: ResourceRecord, on_image: ImageCallback) -> LoadRequest:
        """Display *record* in *slot_id* and return the issued request."""

        self.unbind(slot_id)

        request: Optional[LoadRequest] = None

        def _deliver(image) -> None:
            if self._requests.get(slot_id) is not request:
                LOGGER.debug("Discarding stale result for slot %s", slot_id)
                return
            on_image(image)

        request = LoadRequest(identity=record.identity, slot_id=slot_id, completion=_deliver)
        self._requests[slot_id] = request
        self._coordinator.submit(request)
        return request

    def unbind(self, slot_id: int) -> None:
        """Cancel and forget the request for *slot_id*, if any."""

        previous = self._requests.pop(slot_id, None)
        if previous is not None:
            previous.cancel()

    def clear(self) -> None:
        for slot_id in list(self._requests):
            self.unbind(slot_id)

    def current_request(self, slot_id: int) -> Optional[LoadRequest]:
        return self._requests.get(slot_id)

    def bound_slots(self) -> list[int]:
        return sorted(self._requests)


__all__ = ["SlotBinding"]
