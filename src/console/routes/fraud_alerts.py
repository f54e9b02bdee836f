from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from src.console.schemas.fleet import FraudAlertPage
from src.console.services import fleet as fleet_service
from src.domain.query import QueryTranslationError

router = APIRouter(prefix="/api/fraud-alerts", tags=["fraud"])


@router.get("", response_model=FraudAlertPage, summary="List fraud alerts")
def list_fraud_alerts(
    status: Optional[List[str]] = Query(None),
    severity: Optional[List[str]] = Query(None),
    vehicle_id: Optional[int] = Query(None, ge=1),
    limit: int = Query(fleet_service.DEFAULT_PAGE_LIMIT, ge=1, le=fleet_service.MAX_PAGE_LIMIT),
    offset: int = Query(0, ge=0),
) -> FraudAlertPage:
    try:
        result = fleet_service.list_fraud_alerts(
            statuses=status,
            severities=severity,
            vehicle_id=vehicle_id,
            limit=limit,
            offset=offset,
        )
    except QueryTranslationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return FraudAlertPage.model_validate(result)


__all__ = ["router"]
