from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol

from app.models import CURRENCY_CODE_RE, CurrencyInfo, CurrencyList, RateSnapshot
from app.services.money import round6

"""Cross-rate conversion and currency enumeration over a RateSnapshot.

Pure functions: no I/O, no cache access. Every cross-rate is routed through the
snapshot's base currency:

    from == base : amount * rates[to]
    to == base   : amount / rates[from]
    otherwise    : (amount / rates[from]) * rates[to]

The result is rounded to 6 places first and the reported unit rate is derived
from that rounded result, not from the raw rate ratio.
"""


class SupportsCurrencyName(Protocol):
    def __call__(self, code: str) -> Optional[str]: ...


@dataclass(frozen=True)
class ConversionResult:
    from_currency: str
    to_currency: str
    amount: float
    result: float
    rate: float
    last_updated: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_currency,
            "to": self.to_currency,
            "amount": self.amount,
            "result": self.result,
            "rate": self.rate,
            "last_updated": self.last_updated,
        }


def convert_amount(
    snapshot: RateSnapshot, from_currency: str, to_currency: str, amount: float
) -> Optional[ConversionResult]:
    """Convert amount; None when either currency is missing from the snapshot.

    Callers guarantee 3-letter uppercase codes and 0 < amount < 1e9.
    """
    rates = snapshot.rates
    if from_currency not in rates or to_currency not in rates:
        return None

    base = snapshot.base_currency
    if from_currency == base:
        raw = amount * rates[to_currency]
    elif to_currency == base:
        raw = amount / rates[from_currency]
    else:
        raw = (amount / rates[from_currency]) * rates[to_currency]

    result = round6(raw)
    return ConversionResult(
        from_currency=from_currency,
        to_currency=to_currency,
        amount=amount,
        result=result,
        rate=round6(result / amount),
        last_updated=snapshot.last_updated,
    )


def list_currencies(
    snapshot: RateSnapshot, resolve_name: SupportsCurrencyName
) -> CurrencyList:
    codes: List[str] = sorted(c for c in snapshot.rates if CURRENCY_CODE_RE.fullmatch(c))
    return CurrencyList(
        currencies=[CurrencyInfo(code=c, name=resolve_name(c) or c) for c in codes],
        last_updated=snapshot.last_updated,
    )
