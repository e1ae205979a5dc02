from fastapi import APIRouter, Depends

from app.services.rate_service import RateAcquisitionService, ServiceState
from .rates import get_rate_service

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness and rate availability")
async def health(svc: RateAcquisitionService = Depends(get_rate_service)):
    snapshot = await svc.get_snapshot()
    return {
        "status": "ok" if svc.state is not ServiceState.COLD else "degraded",
        "state": svc.state.value,
        "base_currency": svc.base_currency,
        "last_updated": snapshot.last_updated if snapshot else None,
    }
