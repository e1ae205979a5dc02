"""Domain constants shared by validation, listing and the HTTP layer."""

import re
from typing import Pattern

CURRENCY_CODE_RE: Pattern[str] = re.compile(r"^[A-Z]{3}$")
MAX_AMOUNT: float = 1_000_000_000
RATE_DECIMALS: int = 6
