import asyncio

import pytest

from app.services.rate_service import RefreshStatus
from app.services.scheduler import RefreshScheduler


def test_run_once_returns_refresh_result(service):
    result = asyncio.run(RefreshScheduler(service, 60).run_once())
    assert result.status is RefreshStatus.LIVE


def test_loop_refreshes_on_interval(service, provider):
    async def scenario():
        scheduler = RefreshScheduler(service, 0.01)
        scheduler.start()
        assert scheduler.running
        await asyncio.sleep(0.3)
        await scheduler.stop()
        assert not scheduler.running

    asyncio.run(scenario())
    assert len(provider.calls) >= 2


def test_crashing_refresh_does_not_escape(service, monkeypatch):
    async def boom():
        raise RuntimeError("bug")

    monkeypatch.setattr(service, "refresh", boom)
    assert asyncio.run(RefreshScheduler(service, 60).run_once()) is None


def test_stop_without_start_is_noop(service):
    asyncio.run(RefreshScheduler(service, 60).stop())


def test_interval_must_be_positive(service):
    with pytest.raises(ValueError):
        RefreshScheduler(service, 0)
