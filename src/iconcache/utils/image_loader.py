"""Decode cached icon bytes into Qt image primitives."""

from __future__ import annotations

import logging
from io import BytesIO
from typing import Optional

from PIL import Image, ImageOps
from PySide6.QtGui import QImage

_LOGGER = logging.getLogger(__name__)


def qimage_from_bytes(data: bytes) -> Optional[QImage]:
    """Return a :class:`QImage` decoded from *data*, or ``None`` on failure.

    ``QImage`` may be created on worker threads, unlike ``QPixmap``, so this
    runs inside background jobs.  Formats Qt cannot read are decoded with
    Pillow instead.
    """

    if not data:
        return None
    image = QImage()
    if image.loadFromData(data):
        return image
    return _decode_with_pillow(data)


def _decode_with_pillow(data: bytes) -> Optional[QImage]:
    try:
        with Image.open(BytesIO(data)) as img:
            img = ImageOps.exif_transpose(img).convert("RGBA")
            width, height = img.size
            raw = img.tobytes("raw", "RGBA")
    except Exception:
        _LOGGER.exception("Pillow failed to decode image bytes")
        return None
    # The QImage borrows ``raw``; copy so the buffer can be released.
    return QImage(raw, width, height, width * 4, QImage.Format.Format_RGBA8888).copy()


__all__ = ["qimage_from_bytes"]
