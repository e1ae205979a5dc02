from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from app.core.config import Settings
from app.models import ConversionOut, CurrencyList, RateSnapshot
from app.services.rate_service import RateAcquisitionService
from app.services.validation import (
    parse_amount,
    validate_amount,
    validate_currency_code,
)

"""Rates router exposing the rate service over HTTP.

Endpoints:
    - GET /rates            -> current snapshot (404 when no data)
    - GET /currencies       -> supported currencies with display names (404 when no data)
    - GET /convert          -> ?from=EUR&to=JPY&amount=100 (400 on bad input / unknown code)
    - POST /rates/refresh   -> trigger an upstream refresh (guarded by settings.enable_manual_refresh)
"""

router = APIRouter(tags=["rates"])


def get_rate_service(request: Request) -> RateAcquisitionService:
    return request.app.state.rate_service


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_manual_refresh_enabled(settings: Settings = Depends(get_app_settings)):
    if not settings.enable_manual_refresh:
        raise HTTPException(status_code=403, detail="manual refresh disabled")
    return True


@router.get("/rates", response_model=RateSnapshot, summary="Current exchange rates")
async def get_rates(svc: RateAcquisitionService = Depends(get_rate_service)):
    snapshot = await svc.get_snapshot()
    if snapshot is None:
        raise HTTPException(status_code=404, detail="No exchange rates available")
    return snapshot


@router.get(
    "/currencies", response_model=CurrencyList, summary="Supported currencies"
)
async def get_currencies(svc: RateAcquisitionService = Depends(get_rate_service)):
    currencies = await svc.list_currencies()
    if currencies is None:
        raise HTTPException(status_code=404, detail="Currency data not available")
    return currencies


@router.get(
    "/convert",
    response_model=ConversionOut,
    response_model_by_alias=True,
    summary="Convert an amount between two currencies",
)
async def convert(
    from_currency: Optional[str] = Query(None, alias="from", description="Source code, e.g. EUR"),
    to_currency: Optional[str] = Query(None, alias="to", description="Target code, e.g. JPY"),
    amount: Optional[str] = Query(None, description="Positive amount below 1 billion"),
    svc: RateAcquisitionService = Depends(get_rate_service),
):
    src = from_currency.upper() if from_currency else None
    dst = to_currency.upper() if to_currency else None
    if not validate_currency_code(src) or not validate_currency_code(dst):
        raise HTTPException(
            status_code=400,
            detail="Invalid currency code. Must be 3 uppercase letters.",
        )
    value = parse_amount(amount)
    if not validate_amount(value):
        raise HTTPException(
            status_code=400,
            detail="Invalid amount. Must be a positive number less than 1 billion.",
        )

    result = await svc.convert(src, dst, value)  # type: ignore[arg-type]
    if result is None:
        raise HTTPException(
            status_code=400, detail="Invalid currency code or rates not available"
        )
    return result.to_dict()


@router.post("/rates/refresh", summary="Fetch fresh rates from the upstream provider")
async def refresh_rates(
    _: bool = Depends(require_manual_refresh_enabled),
    svc: RateAcquisitionService = Depends(get_rate_service),
):
    outcome = await svc.refresh()
    return {
        "status": outcome.status.value,
        "state": svc.state.value,
        "last_updated": outcome.snapshot.last_updated if outcome.snapshot else None,
        "store_write_failed": outcome.store_write_failed,
        "error": outcome.error,
    }
