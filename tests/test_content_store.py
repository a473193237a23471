"""Tests for ContentStore (flat disk cache)."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from iconcache.config import TEMP_SUFFIX
from iconcache.errors import ContentNotFoundError, StorageError
from iconcache.infrastructure.services.content_store import ContentStore


class TestContentStore:
    @pytest.mark.parametrize(
        "payload",
        [b"x", b"\x00\xff\x00", bytes(range(256)), os.urandom(64 * 1024)],
    )
    def test_write_then_read_is_bit_identical(self, tmp_path: Path, payload: bytes):
        store = ContentStore(tmp_path / "cache")
        store.write("icon.png", payload)
        assert store.read("icon.png") == payload

    def test_exists_is_false_for_missing_entry(self, tmp_path: Path):
        store = ContentStore(tmp_path / "missing-dir")
        assert store.exists("a.png") is False

    def test_exists_after_write(self, store: ContentStore):
        store.write("a.png", b"data")
        assert store.exists("a.png") is True

    def test_read_missing_raises_not_found(self, store: ContentStore):
        with pytest.raises(ContentNotFoundError):
            store.read("nope.png")

    def test_write_creates_cache_dir(self, tmp_path: Path):
        cache_dir = tmp_path / "deep" / "cache"
        store = ContentStore(cache_dir)
        store.write("a.png", b"data")
        assert (cache_dir / "a.png").read_bytes() == b"data"

    def test_overwrite_keeps_last_write(self, store: ContentStore):
        store.write("a.png", b"old")
        store.write("a.png", b"new")
        assert store.read("a.png") == b"new"

    def test_writes_do_not_touch_other_keys(self, store: ContentStore):
        store.write("a.png", b"a")
        store.write("b.png", b"b")
        store.write("a.png", b"a2")
        assert store.read("b.png") == b"b"
        assert store.keys() == ["a.png", "b.png"]

    def test_no_temp_files_left_behind(self, store: ContentStore):
        store.write("a.png", b"data")
        leftovers = [p for p in store.cache_dir.iterdir() if p.name.endswith(TEMP_SUFFIX)]
        assert leftovers == []

    def test_direct_write_mode(self, tmp_path: Path):
        store = ContentStore(tmp_path / "cache", atomic_writes=False)
        store.write("a.png", b"data")
        assert store.read("a.png") == b"data"

    def test_write_fails_when_directory_cannot_be_created(self, tmp_path: Path):
        blocker = tmp_path / "blocker"
        blocker.write_bytes(b"")
        store = ContentStore(blocker / "cache")
        with pytest.raises(StorageError):
            store.write("a.png", b"data")

    def test_read_failure_is_storage_error(self, store: ContentStore):
        (store.cache_dir / "folder.png").mkdir(parents=True)
        assert store.exists("folder.png") is False
        with pytest.raises(StorageError):
            store.read("folder.png")

    @pytest.mark.parametrize("key", ["", ".", "..", "a/b.png", "a\\b.png", "x" + TEMP_SUFFIX])
    def test_invalid_keys_rejected(self, store: ContentStore, key: str):
        with pytest.raises(ValueError):
            store.path_for(key)

    def test_keys_on_missing_directory(self, tmp_path: Path):
        assert ContentStore(tmp_path / "none").keys() == []
