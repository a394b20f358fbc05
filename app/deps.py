from __future__ import annotations

from typing import Annotated, TypeAlias

from fastapi import Depends

from app.services.forecast_service import ForecastOrchestrator, build_orchestrator
from core.settings import get_settings
from db.session import AsyncSessionLocal


def get_forecast_orchestrator() -> ForecastOrchestrator:
    return build_orchestrator(get_settings(), AsyncSessionLocal)


OrchestratorDep: TypeAlias = Annotated[
    ForecastOrchestrator, Depends(get_forecast_orchestrator)
]
