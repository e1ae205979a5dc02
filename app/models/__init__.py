"""Pydantic domain models for the Currency Rates API."""

from .constants import CURRENCY_CODE_RE, MAX_AMOUNT, RATE_DECIMALS  # re-export
from .rates import ConversionOut, CurrencyInfo, CurrencyList, RateSnapshot

__all__ = [
    "CURRENCY_CODE_RE",
    "MAX_AMOUNT",
    "RATE_DECIMALS",
    "ConversionOut",
    "CurrencyInfo",
    "CurrencyList",
    "RateSnapshot",
]
