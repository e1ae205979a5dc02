"""Currency display names via Babel's CLDR data."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from babel import UnknownLocaleError
from babel.numbers import get_currency_name

logger = logging.getLogger("app.currency_names")


@lru_cache(maxsize=2048)
def currency_display_name(code: str, locale: str = "en") -> Optional[str]:
    """Return the locale's name for code, or None when CLDR has no entry."""
    try:
        name = get_currency_name(code, locale=locale)
    except (UnknownLocaleError, ValueError) as e:
        logger.warning("cannot resolve currency name", extra={"code": code, "error": str(e)})
        return None
    # Babel echoes the code back for currencies it does not know.
    return name if name and name != code else None


def make_name_resolver(locale: str = "en"):
    def resolve(code: str) -> Optional[str]:
        return currency_display_name(code, locale)

    return resolve
