"""Asynchronous, disk-backed icon loading for scrolling list views."""

from __future__ import annotations

__version__ = "0.1.0"
