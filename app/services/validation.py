"""Request input validation for conversion queries.

The rate service assumes validated input; route handlers call these helpers
before touching it.
"""

from __future__ import annotations

import math
from typing import Optional

from app.models.constants import CURRENCY_CODE_RE, MAX_AMOUNT


def validate_currency_code(code: Optional[str]) -> bool:
    return bool(code) and CURRENCY_CODE_RE.fullmatch(code) is not None  # type: ignore[arg-type]


def validate_amount(amount: Optional[float]) -> bool:
    return amount is not None and math.isfinite(amount) and 0 < amount < MAX_AMOUNT


def parse_amount(raw: Optional[str]) -> Optional[float]:
    """Parse a query-string amount; None when it is not a number at all."""
    if raw is None or "_" in raw:
        # float() accepts digit separators like "1_000"; query amounts must not.
        return None
    try:
        return float(raw.strip())
    except ValueError:
        return None
