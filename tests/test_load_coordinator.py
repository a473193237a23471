"""Tests for LoadCoordinator dispatch, de-duplication and stale-result dropping."""

from __future__ import annotations

import pytest
from PySide6.QtCore import QThreadPool

from iconcache.errors import NetworkError
from iconcache.gui.load_coordinator import LoadCoordinator
from iconcache.models.types import LoadRequest, RequestState

A = "http://x/a.png"
B = "http://x/b.png"


def _request(identity: str, calls: list, slot_id: int = 0) -> LoadRequest:
    return LoadRequest(identity=identity, slot_id=slot_id, completion=calls.append)


def test_delivers_decoded_image(coordinator, transport, png_bytes, qtbot):
    transport.payloads[A] = png_bytes((4, 3))
    calls: list = []
    request = _request(A, calls)

    coordinator.submit(request)
    qtbot.waitUntil(lambda: len(calls) == 1)

    image = calls[0]
    assert image is not None
    assert (image.width(), image.height()) == (4, 3)
    assert request.state is RequestState.DELIVERED
    assert coordinator.active_jobs == 0


def test_fetch_errors_collapse_to_none(coordinator, transport, qtbot):
    transport.payloads[A] = NetworkError("offline")
    calls: list = []

    coordinator.submit(_request(A, calls))
    qtbot.waitUntil(lambda: len(calls) == 1)

    assert calls == [None]


def test_undecodable_payload_delivers_none(coordinator, transport, qtbot):
    transport.payloads[A] = b"definitely not an image"
    calls: list = []

    coordinator.submit(_request(A, calls))
    qtbot.waitUntil(lambda: len(calls) == 1)

    assert calls == [None]


def test_cancelled_request_is_never_dispatched(coordinator, transport):
    calls: list = []
    request = _request(A, calls)
    request.cancel()

    coordinator.submit(request)

    assert coordinator.pending_identities() == set()
    assert transport.calls == []
    assert calls == []


def test_cancel_while_in_flight_suppresses_delivery(coordinator, transport, png_bytes, qtbot):
    transport.payloads[A] = png_bytes()
    gate = transport.hold(A)
    calls: list = []
    request = _request(A, calls)

    coordinator.submit(request)
    qtbot.waitUntil(lambda: transport.count(A) == 1)
    request.cancel()
    with qtbot.waitSignal(coordinator.imageLoaded, timeout=5000):
        gate.set()

    assert calls == []
    assert request.state is RequestState.CANCELLED


def test_same_identity_shares_one_transfer(coordinator, transport, png_bytes, qtbot):
    transport.payloads[A] = png_bytes()
    gate = transport.hold(A)
    first: list = []
    second: list = []

    coordinator.submit(_request(A, first, slot_id=0))
    coordinator.submit(_request(A, second, slot_id=1))
    assert coordinator.pending_identities() == {A}
    gate.set()
    qtbot.waitUntil(lambda: len(first) == 1 and len(second) == 1)

    assert transport.count(A) == 1
    assert first[0] is not None and second[0] is not None


def test_queued_job_with_only_cancelled_requests_skips_transfer(qapp, fetcher, transport, png_bytes, qtbot):
    pool = QThreadPool()
    pool.setMaxThreadCount(1)
    coordinator = LoadCoordinator(fetcher, thread_pool=pool)
    try:
        transport.payloads[A] = png_bytes()
        transport.payloads[B] = png_bytes()
        gate = transport.hold(A)
        blocker: list = []
        stale: list = []
        stale_request = _request(B, stale, slot_id=1)

        coordinator.submit(_request(A, blocker))
        qtbot.waitUntil(lambda: transport.count(A) == 1)
        coordinator.submit(stale_request)
        stale_request.cancel()
        gate.set()

        qtbot.waitUntil(lambda: coordinator.active_jobs == 0)
        assert transport.count(B) == 0
        assert stale == []
        assert len(blocker) == 1
    finally:
        for gate in transport.gates.values():
            gate.set()
        coordinator.shutdown()
        pool.waitForDone()


def test_request_attached_to_queued_job_is_served(qapp, fetcher, transport, png_bytes, qtbot):
    pool = QThreadPool()
    pool.setMaxThreadCount(1)
    coordinator = LoadCoordinator(fetcher, thread_pool=pool)
    try:
        transport.payloads[A] = png_bytes()
        transport.payloads[B] = png_bytes((2, 2))
        gate = transport.hold(A)
        stale: list = []
        fresh: list = []

        coordinator.submit(_request(A, []))
        qtbot.waitUntil(lambda: transport.count(A) == 1)
        stale_request = _request(B, stale, slot_id=1)
        coordinator.submit(stale_request)
        stale_request.cancel()
        coordinator.submit(_request(B, fresh, slot_id=1))
        gate.set()

        qtbot.waitUntil(lambda: len(fresh) == 1)
        assert stale == []
        assert fresh[0] is not None
        assert transport.count(B) == 1
    finally:
        for gate in transport.gates.values():
            gate.set()
        coordinator.shutdown()
        pool.waitForDone()


def test_failing_completion_does_not_block_other_waiters(coordinator, transport, png_bytes, qtbot):
    transport.payloads[A] = png_bytes()
    gate = transport.hold(A)
    received: list = []

    def explode(image) -> None:
        raise RuntimeError("consumer bug")

    coordinator.submit(LoadRequest(identity=A, slot_id=0, completion=explode))
    coordinator.submit(_request(A, received, slot_id=1))
    gate.set()
    qtbot.waitUntil(lambda: len(received) == 1)


def test_shutdown_cancels_waiting_requests(qapp, fetcher, transport, png_bytes):
    coordinator = LoadCoordinator(fetcher)
    transport.payloads[A] = png_bytes()
    gate = transport.hold(A)
    calls: list = []
    request = _request(A, calls)
    coordinator.submit(request)

    gate.set()
    coordinator.shutdown()

    assert request.state is RequestState.CANCELLED
    late = _request(B, calls)
    coordinator.submit(late)
    assert late.state is RequestState.CANCELLED
    assert calls == []


@pytest.mark.parametrize("max_threads", [1, 3])
def test_max_threads_caps_owned_pool(qapp, fetcher, max_threads):
    coordinator = LoadCoordinator(fetcher, max_threads=max_threads)
    try:
        assert coordinator._pool.maxThreadCount() == max_threads
    finally:
        coordinator.shutdown()
