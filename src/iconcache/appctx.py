"""Application context wiring the loader components together."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .gui.load_coordinator import LoadCoordinator
from .gui.slot_binding import SlotBinding
from .infrastructure.services.content_store import ContentStore
from .infrastructure.services.fetcher import Fetcher
from .infrastructure.services.transport import HttpTransport, Transport
from .settings.manager import SettingsManager


@dataclass
class AppContext:
    """Container object shared by the list view and the CLI.

    Every collaborator is constructed here and handed to its consumers
    explicitly; nothing is looked up through module level singletons.  Build
    the context on the delivery thread.
    """

    settings: SettingsManager
    store: ContentStore
    transport: Transport
    fetcher: Fetcher
    coordinator: LoadCoordinator
    binding: SlotBinding

    @classmethod
    def create(
        cls,
        settings: Optional[SettingsManager] = None,
        *,
        cache_dir: Optional[Path] = None,
        transport: Optional[Transport] = None,
    ) -> "AppContext":
        if settings is None:
            settings = SettingsManager()
            settings.load()

        store = ContentStore(
            cache_dir or settings.cache_dir(),
            atomic_writes=bool(settings.get("cache.atomic_writes", True)),
        )
        if transport is None:
            transport = HttpTransport(
                timeout=float(settings.get("network.timeout")),
                user_agent=str(settings.get("network.user_agent")),
            )
        fetcher = Fetcher(
            store,
            transport,
            key_strategy=str(settings.get("cache.key_strategy")),
        )
        coordinator = LoadCoordinator(fetcher, max_threads=settings.get("loader.max_threads"))
        binding = SlotBinding(coordinator)
        return cls(
            settings=settings,
            store=store,
            transport=transport,
            fetcher=fetcher,
            coordinator=coordinator,
            binding=binding,
        )

    def close(self) -> None:
        """Cancel outstanding loads and release the network client."""

        self.binding.clear()
        self.coordinator.shutdown()
        close = getattr(self.transport, "close", None)
        if callable(close):
            close()


__all__ = ["AppContext"]
