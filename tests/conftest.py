"""Shared pytest fixtures: fake providers, temp stores and app factories."""

from pathlib import Path
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.db.dal import RateStore
from app.main import create_app
from app.services.rate_service import RateAcquisitionService
from app.services.rates.base import ProviderError, RateProvider

SAMPLE_RATES: Dict[str, float] = {"USD": 1.0, "EUR": 0.9, "JPY": 150.0, "GBP": 0.8}


class FakeProvider(RateProvider):
    """Scripted provider: returns `rates` unless `fail` is set."""

    name = "fake"

    def __init__(self, rates: Optional[Dict[str, float]] = None, fail: bool = False):
        self.rates = dict(rates if rates is not None else SAMPLE_RATES)
        self.fail = fail
        self.calls: List[str] = []

    async def fetch_latest(self, base_currency: str) -> Dict[str, float]:
        self.calls.append(base_currency)
        if self.fail:
            raise ProviderError("upstream down")
        return dict(self.rates)


def fixed_names(code: str) -> Optional[str]:
    return {"EUR": "Euro", "GBP": "British Pound", "JPY": "Japanese Yen"}.get(code)


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "rates.sqlite3"


@pytest.fixture
def store(db_path: Path) -> RateStore:
    return RateStore.from_path(db_path)


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def service(provider: FakeProvider, store: RateStore) -> RateAcquisitionService:
    return RateAcquisitionService(
        provider=provider, store=store, base_currency="USD", resolve_name=fixed_names
    )


def make_settings(db_path: Path, **overrides) -> Settings:
    values = dict(
        db_path=db_path,
        exchange_rate_provider="static",
        rate_limit_requests=1000,
        _env_file=None,
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def client(db_path: Path, provider: FakeProvider):
    app = create_app(settings_override=make_settings(db_path), provider_override=provider)
    with TestClient(app) as c:
        yield c
