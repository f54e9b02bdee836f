from __future__ import annotations

from typing import List, Literal, Optional

from fastapi import APIRouter, HTTPException, Query

from src.console.schemas.fleet import Driver, DriverPage
from src.console.services import fleet as fleet_service
from src.domain.query import QueryTranslationError

router = APIRouter(prefix="/api/drivers", tags=["drivers"])


@router.get("", response_model=DriverPage, summary="List drivers by risk")
def list_drivers(
    status: Optional[List[str]] = Query(None),
    min_risk: Optional[float] = Query(None, ge=0),
    search: Optional[str] = Query(None, min_length=1, max_length=100),
    limit: int = Query(fleet_service.DEFAULT_PAGE_LIMIT, ge=1, le=fleet_service.MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
    sort: Literal["risk_score", "last_name", "total_violations", "id", "created_at"] = Query("risk_score"),
    direction: Literal["asc", "desc"] = Query("desc"),
) -> DriverPage:
    try:
        result = fleet_service.list_drivers(
            statuses=status,
            min_risk=min_risk,
            search=search,
            limit=limit,
            offset=offset,
            sort=sort,
            direction=direction,
        )
    except QueryTranslationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return DriverPage.model_validate(result)


@router.get("/{driver_id}", response_model=Driver, summary="Fetch driver detail")
def get_driver(driver_id: int) -> Driver:
    result = fleet_service.get_driver(driver_id)
    if result is None:
        raise HTTPException(status_code=404, detail="Driver not found")
    return Driver.model_validate(result)


__all__ = ["router"]
