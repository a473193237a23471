"""Data models shared by the loader components."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

ImageCallback = Callable[[Optional[Any]], None]

_REQUEST_IDS = itertools.count(1)


@dataclass(frozen=True, slots=True)
class ResourceRecord:
    """One entry of the icon manifest; list order is display order."""

    identity: str
    display_label: str


class RequestState(Enum):
    PENDING = "pending"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


@dataclass(eq=False)
class LoadRequest:
    """An outstanding image request for a single slot.

    Requests are compared by object identity.  A slot that is rebound to the
    same record receives a new request, so a late result for the earlier one
    can never be mistaken for the current binding.

    ``cancel`` and ``deliver`` are only called from the delivery thread.
    """

    identity: str
    slot_id: int
    completion: ImageCallback
    state: RequestState = RequestState.PENDING
    request_id: int = field(default_factory=lambda: next(_REQUEST_IDS))

    @property
    def is_cancelled(self) -> bool:
        return self.state is RequestState.CANCELLED

    @property
    def is_pending(self) -> bool:
        return self.state is RequestState.PENDING

    def cancel(self) -> None:
        """Mark the request stale; terminal states are left untouched."""

        if self.state is RequestState.PENDING:
            self.state = RequestState.CANCELLED

    def deliver(self, image: Optional[Any]) -> bool:
        """Invoke the completion once and return ``True`` if it ran."""

        if self.state is not RequestState.PENDING:
            return False
        self.state = RequestState.DELIVERED
        self.completion(image)
        return True


__all__ = ["ImageCallback", "LoadRequest", "RequestState", "ResourceRecord"]
