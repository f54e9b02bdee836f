from __future__ import annotations

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from src.console.schemas.fleet import DatabaseHealth
from src.console.services import fleet as fleet_service

router = APIRouter(tags=["health"])


@router.get("/healthz", summary="Service health probe")
def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/api/health/database", response_model=DatabaseHealth, summary="Database adapter health")
def database_health() -> JSONResponse:
    health = DatabaseHealth.model_validate(fleet_service.database_health())
    status_code = 200 if health.status == "healthy" else 503
    return JSONResponse(status_code=status_code, content=health.model_dump(mode="json"))


__all__ = ["router"]
