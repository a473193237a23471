"""Background tasks and workers."""

from __future__ import annotations

from .load_job import LoadJob

__all__ = ["LoadJob"]
