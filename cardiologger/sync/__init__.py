from __future__ import annotations

from .scheduler import SyncScheduler

__all__ = ["SyncScheduler"]
