"""Rate acquisition service.

Owns the rate cache, the upstream provider and the backup store, and decides
which of them answers a read:

- refresh(): provider -> cache -> store. On provider failure the cache is kept
  if it holds anything; an empty cache is seeded from the store instead.
- get_snapshot(): cache first, then exactly one store load (the cache is not
  populated by reads).
- convert() / list_currencies(): pure computations over get_snapshot().

Availability moves Cold -> Store-backed -> Live. Live survives failed refreshes
(last good snapshot stays in the cache).

Nothing here raises for ordinary unavailability: reads return None and
refresh() returns a RefreshResult describing what happened.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import ValidationError

from app.db.dal import RateStore
from app.models import CurrencyList, RateSnapshot
from .currency_names import make_name_resolver
from .rates.base import ProviderError, RateProvider
from .rates.cache_service import RateCache
from .rates.conversion import (
    ConversionResult,
    SupportsCurrencyName,
    convert_amount,
    list_currencies,
)

logger = logging.getLogger("app.rates")


class ServiceState(str, Enum):
    COLD = "cold"
    STORE_BACKED = "store_backed"
    LIVE = "live"


class RefreshStatus(str, Enum):
    LIVE = "live"  # fresh upstream snapshot installed
    STALE = "stale"  # fetch failed, previous cached snapshot kept
    STORE_FALLBACK = "store_fallback"  # fetch failed, cache seeded from store
    UNAVAILABLE = "unavailable"  # fetch failed and nothing to fall back on


@dataclass(frozen=True)
class RefreshResult:
    status: RefreshStatus
    snapshot: Optional[RateSnapshot] = None
    error: Optional[str] = None
    store_write_failed: bool = False

    @property
    def fetched(self) -> bool:
        return self.status is RefreshStatus.LIVE


def utc_now_iso() -> str:
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


class RateAcquisitionService:
    def __init__(
        self,
        provider: RateProvider,
        store: RateStore,
        base_currency: str = "USD",
        cache: Optional[RateCache] = None,
        resolve_name: Optional[SupportsCurrencyName] = None,
    ):
        self.base_currency = base_currency
        self._provider = provider
        self._store = store
        self._cache = cache if cache is not None else RateCache()
        self._resolve_name = resolve_name or make_name_resolver("en")
        self._state = ServiceState.COLD

    @property
    def state(self) -> ServiceState:
        return self._state

    @property
    def cache(self) -> RateCache:
        return self._cache

    # Refresh ----------------------------------------------------
    async def refresh(self) -> RefreshResult:
        try:
            rates = await self._provider.fetch_latest(self.base_currency)
            snapshot = RateSnapshot(
                base_currency=self.base_currency,
                rates=rates,
                last_updated=utc_now_iso(),
            )
        except (ProviderError, ValidationError) as e:
            logger.error(
                "error updating exchange rates",
                extra={"provider": self._provider.name, "error": str(e)},
            )
            return await self._fallback(str(e))
        except Exception as e:
            logger.exception(
                "unexpected error updating exchange rates",
                extra={"provider": self._provider.name},
            )
            return await self._fallback(str(e))

        self._cache.set(snapshot)
        self._state = ServiceState.LIVE
        logger.info(
            "exchange rates refreshed",
            extra={"base_currency": self.base_currency, "count": len(snapshot.rates)},
        )
        stored = await self._store.put(self.base_currency, snapshot.rates)
        return RefreshResult(
            RefreshStatus.LIVE,
            snapshot=snapshot,
            store_write_failed=not stored.ok,
        )

    async def _fallback(self, error: str) -> RefreshResult:
        cached = self._cache.get()
        if cached is not None:
            return RefreshResult(RefreshStatus.STALE, snapshot=cached, error=error)
        loaded = await self._store.get(self.base_currency)
        if not loaded.ok:
            return RefreshResult(RefreshStatus.UNAVAILABLE, error=error)
        # A concurrent refresh may have filled the cache while we awaited the store.
        cached = self._cache.get()
        if cached is not None:
            return RefreshResult(RefreshStatus.STALE, snapshot=cached, error=error)
        self._cache.set(loaded.snapshot)
        self._state = ServiceState.STORE_BACKED
        logger.info("loaded rates from database backup")
        return RefreshResult(
            RefreshStatus.STORE_FALLBACK, snapshot=loaded.snapshot, error=error
        )

    # Reads ------------------------------------------------------
    async def get_snapshot(self) -> Optional[RateSnapshot]:
        cached = self._cache.get()
        if cached is not None:
            return cached
        loaded = await self._store.get(self.base_currency)
        if not loaded.ok:
            return None
        if self._state is ServiceState.COLD:
            self._state = ServiceState.STORE_BACKED
        return loaded.snapshot

    async def convert(
        self, from_currency: str, to_currency: str, amount: float
    ) -> Optional[ConversionResult]:
        snapshot = await self.get_snapshot()
        if snapshot is None:
            return None
        return convert_amount(snapshot, from_currency, to_currency, amount)

    async def list_currencies(self) -> Optional[CurrencyList]:
        snapshot = await self.get_snapshot()
        if snapshot is None:
            return None
        return list_currencies(snapshot, self._resolve_name)
