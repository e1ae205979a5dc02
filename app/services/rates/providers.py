from __future__ import annotations

"""Concrete rate providers and factory.

'exchangerate-api' talks to exchangerate-api.com (v6); 'static' serves a fixed
table quoted against USD so the service runs offline (local dev, demos, tests).
"""
import math
from typing import Any, Dict, Optional, TYPE_CHECKING

import httpx

from .base import ProviderError, RateProvider
from app.services.http_client import get_json, HttpError

if TYPE_CHECKING:  # pragma: no cover
    from app.core.config import Settings

_STATIC_RATES: Dict[str, float] = {
    "USD": 1.0,
    "EUR": 0.92,
    "GBP": 0.79,
    "JPY": 149.5,
    "CAD": 1.36,
    "AUD": 1.54,
    "CHF": 0.88,
    "CNY": 7.25,
    "INR": 83.2,
    "SGD": 1.34,
}


def parse_rate_mapping(raw: Any) -> Dict[str, float]:
    """Validate an upstream rate mapping as a whole; reject it on any bad entry."""
    if not isinstance(raw, dict) or not raw:
        raise ProviderError("conversion_rates missing or empty")
    rates: Dict[str, float] = {}
    for code, value in raw.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ProviderError(f"non-numeric rate for {code!r}")
        value = float(value)
        if not math.isfinite(value) or value <= 0:
            raise ProviderError(f"non-positive rate for {code!r}")
        rates[str(code)] = value
    return rates


class StaticRateProvider(RateProvider):
    name = "static"

    async def fetch_latest(self, base_currency: str) -> Dict[str, float]:  # type: ignore[override]
        usd_per_base = _STATIC_RATES.get(base_currency)
        if usd_per_base is None:
            raise ProviderError(f"static provider has no rates for {base_currency}")
        # Re-quote the USD table against the requested base.
        return {code: rate / usd_per_base for code, rate in _STATIC_RATES.items()}


class ExchangeRateApiProvider(RateProvider):
    """exchangerate-api.com v6 ``/latest/{base}`` endpoint.

    The API key travels in the ``Authorization: Bearer`` header, never in the URL,
    so request logs and error messages cannot leak it.

    Success bodies look like ``{"result": "success", "conversion_rates": {...}}``;
    anything else is a fetch failure.
    """

    name = "exchangerate-api"

    def __init__(
        self,
        url: str,
        *,
        api_key: str = "",
        timeout: float = 10.0,
        retries: int = 2,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._url = url
        self._headers = {"Authorization": f"Bearer {api_key}"} if api_key else None
        self._timeout = timeout
        self._retries = retries
        self._transport = transport

    async def fetch_latest(self, base_currency: str) -> Dict[str, float]:  # type: ignore[override]
        try:
            data = await get_json(
                self._url,
                timeout=self._timeout,
                retries=self._retries,
                headers=self._headers,
                transport=self._transport,
            )
        except HttpError as e:
            raise ProviderError(str(e)) from e
        if data.get("result") != "success":
            raise ProviderError(
                f"provider reported {data.get('result')!r}: {data.get('error-type', 'unknown error')}"
            )
        reported_base = data.get("base_code")
        if reported_base is not None and reported_base != base_currency:
            raise ProviderError(
                f"provider returned base {reported_base!r}, expected {base_currency!r}"
            )
        return parse_rate_mapping(data.get("conversion_rates"))


_PROVIDER_REGISTRY = {
    "static": lambda settings: StaticRateProvider(),
    "exchangerate-api": lambda settings: ExchangeRateApiProvider(
        settings.exchange_api_url,
        api_key=settings.exchange_api_key,
        timeout=settings.http_timeout_seconds,
        retries=settings.http_retries,
    ),
}


def make_rate_provider(kind: str, settings: "Settings") -> RateProvider:
    factory = _PROVIDER_REGISTRY.get(kind)
    if not factory:
        raise ValueError(f"Unknown rate provider kind '{kind}'")
    return factory(settings)
