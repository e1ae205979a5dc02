from __future__ import annotations

"""Rate provider abstraction.

A provider knows how to fetch the full rate mapping for one base currency from
some source of truth; caching and persistence live above it.
"""
from abc import ABC, abstractmethod
from typing import Dict


class ProviderError(Exception):
    """Upstream fetch failed: network, timeout, non-success status or bad payload."""


class RateProvider(ABC):
    name: str = "abstract"

    @abstractmethod
    async def fetch_latest(self, base_currency: str) -> Dict[str, float]:
        """Return units of each currency per 1 unit of base_currency.

        Raises ProviderError on any failure; never returns a partial mapping.
        """
        raise NotImplementedError
