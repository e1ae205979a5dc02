from __future__ import annotations

from typing import Optional

from app.models import RateSnapshot

"""In-process rate cache.

Purpose:
    Hold the single most recent RateSnapshot for fast reads.

Design:
    - One slot, replaced whole on every successful refresh or store load.
    - No TTL: staleness is bounded by the refresh schedule, not by the cache.
    - Owned by a RateAcquisitionService instance (not module state) so each
      app / test gets its own cache.

Readers take the snapshot reference once and work from it, so a concurrent
replacement can never produce a read mixing old and new rates.
"""


class RateCache:
    def __init__(self, snapshot: Optional[RateSnapshot] = None):
        self._snapshot = snapshot

    def get(self) -> Optional[RateSnapshot]:
        return self._snapshot

    def set(self, snapshot: RateSnapshot) -> None:
        self._snapshot = snapshot

    def clear(self) -> None:
        self._snapshot = None
