from __future__ import annotations

import math
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .constants import CURRENCY_CODE_RE


class RateSnapshot(BaseModel):
    """Rates quoted against one base currency at one point in time.

    ``rates[code]`` is how many units of ``code`` one unit of the base buys.
    """

    model_config = ConfigDict(frozen=True)

    base_currency: str
    rates: Dict[str, float]
    last_updated: str

    @field_validator("base_currency")
    @classmethod
    def valid_base(cls, v: str) -> str:
        if not CURRENCY_CODE_RE.fullmatch(v):
            raise ValueError("base currency must be 3 uppercase letters")
        return v

    @field_validator("rates")
    @classmethod
    def positive_rates(cls, v: Dict[str, float]) -> Dict[str, float]:
        for code, rate in v.items():
            if not math.isfinite(rate) or rate <= 0:
                raise ValueError(f"rate for {code} must be a positive number")
        return v


class ConversionOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_currency: str = Field(..., alias="from")
    to_currency: str = Field(..., alias="to")
    amount: float
    result: float
    rate: float
    last_updated: str


class CurrencyInfo(BaseModel):
    code: str
    name: str


class CurrencyList(BaseModel):
    currencies: List[CurrencyInfo]
    last_updated: str
