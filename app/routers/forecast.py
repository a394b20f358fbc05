from __future__ import annotations

from fastapi import APIRouter, HTTPException, status

from app.core.logging import logger
from app.deps import OrchestratorDep
from app.schemas.forecast import ForecastRequest, ForecastResult
from app.services.forecast_errors import LocationNotFound, RouteUnavailable


router = APIRouter()


@router.post("/forecast", response_model=ForecastResult)
async def create_forecast(
    payload: ForecastRequest, orchestrator: OrchestratorDep
) -> ForecastResult:
    """Return weather checkpoints along the route from origin to destination."""
    try:
        return await orchestrator.compute_forecast(
            payload.origin, payload.destination, payload.departure_time
        )
    except LocationNotFound as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    except RouteUnavailable as exc:
        logger.error("Route forecast failed: %s (%s)", exc, exc.technical_detail)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc)
        )
