"""Money / rounding helpers.

Centralized so conversion results and derived rates use identical rounding
semantics: half-up on the shortest decimal representation of the float.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP, localcontext

from app.models.constants import RATE_DECIMALS

_SIX_PLACES = Decimal(1).scaleb(-RATE_DECIMALS)


def round6(value: float) -> float:
    d = Decimal(str(value))
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the six decimals.
        ctx.prec = max(ctx.prec, d.adjusted() + RATE_DECIMALS + 2)
        return float(d.quantize(_SIX_PLACES, rounding=ROUND_HALF_UP))
