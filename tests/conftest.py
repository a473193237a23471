import os
import sys
import threading
from io import BytesIO
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PIL import Image

from iconcache.errors import NetworkError
from iconcache.infrastructure.services.content_store import ContentStore
from iconcache.infrastructure.services.fetcher import Fetcher


def make_png(size: tuple[int, int] = (4, 3), color: str = "red") -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeTransport:
    """In-memory stand-in for the network that records every transfer.

    URLs registered in ``gates`` block until the matching event is set, which
    lets tests hold a fetch in flight while they rebind slots.
    """

    def __init__(self, payloads: dict[str, bytes | Exception] | None = None) -> None:
        self.payloads: dict[str, bytes | Exception] = dict(payloads or {})
        self.gates: dict[str, threading.Event] = {}
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def hold(self, url: str) -> threading.Event:
        gate = threading.Event()
        self.gates[url] = gate
        return gate

    def count(self, url: str) -> int:
        with self._lock:
            return self.calls.count(url)

    def get(self, url: str) -> bytes:
        with self._lock:
            self.calls.append(url)
        gate = self.gates.get(url)
        if gate is not None and not gate.wait(timeout=5):
            raise NetworkError(f"gate for {url} never opened")
        payload = self.payloads.get(url)
        if payload is None:
            raise NetworkError(f"no route to {url}")
        if isinstance(payload, Exception):
            raise payload
        return payload


@pytest.fixture
def png_bytes():
    return make_png


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def store(tmp_path: Path) -> ContentStore:
    return ContentStore(tmp_path / "cache")


@pytest.fixture
def fetcher(store: ContentStore, transport: FakeTransport) -> Fetcher:
    return Fetcher(store, transport)


@pytest.fixture
def coordinator(qapp, fetcher, transport):
    from iconcache.gui.load_coordinator import LoadCoordinator

    instance = LoadCoordinator(fetcher, max_threads=4)
    yield instance
    # Open every gate so blocked workers can finish before the pool is joined.
    for gate in transport.gates.values():
        gate.set()
    instance.shutdown()
