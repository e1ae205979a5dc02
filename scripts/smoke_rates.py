"""Smoke script for the rates API.

Demonstrates:
 1. Startup refresh with the offline 'static' provider fills cache and store.
 2. /rates, /currencies and /convert answer from the cache.
 3. A second app whose provider always fails still serves the stored backup.

NOTE: This is a lightweight diagnostic and not a formal test.
"""

import os
import sys
import tempfile
from pprint import pprint

from fastapi.testclient import TestClient


def run():
    from app.core.config import Settings
    from app.main import create_app
    from app.services.rates.base import ProviderError, RateProvider

    class DownProvider(RateProvider):
        name = "down"

        async def fetch_latest(self, base_currency):
            raise ProviderError("simulated outage")

    out = {}
    with tempfile.TemporaryDirectory() as d:
        db_path = os.path.join(d, "smoke.db")
        live = create_app(
            settings_override=Settings(db_path=db_path, exchange_rate_provider="static")
        )
        with TestClient(live) as c:
            out["health_live"] = c.get("/health").json()
            out["convert"] = c.get(
                "/convert", params={"from": "EUR", "to": "JPY", "amount": 100}
            ).json()
            out["currencies"] = c.get("/currencies").json()["currencies"][:3]

        backup = create_app(
            settings_override=Settings(db_path=db_path, exchange_rate_provider="static"),
            provider_override=DownProvider(),
        )
        with TestClient(backup) as c:
            out["health_backup"] = c.get("/health").json()
            out["rates_backup"] = c.get("/rates").json()["last_updated"]

    pprint(out)


if __name__ == "__main__":
    sys.path.append(os.getcwd())
    run()
