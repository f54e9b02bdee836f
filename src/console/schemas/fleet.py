from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Union

from pydantic import BaseModel, Field

RecordId = Union[int, str]


class Driver(BaseModel):
    id: RecordId
    company_id: Optional[RecordId] = None
    driver_license: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[str] = None
    risk_score: float = 0.0
    total_violations: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DriverPage(BaseModel):
    items: List[Driver] = Field(default_factory=list)
    total: int
    limit: int
    offset: int


class FraudAlert(BaseModel):
    id: RecordId
    alert_type: str
    severity: str
    vehicle_id: Optional[RecordId] = None
    driver_id: Optional[RecordId] = None
    alert_message: str
    risk_score: float = 0.0
    status: str
    resolved_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


class FraudAlertPage(BaseModel):
    items: List[FraudAlert] = Field(default_factory=list)
    total: int
    limit: int
    offset: int


class DatabaseHealth(BaseModel):
    status: str
    database: str
    response_time_ms: float
    timestamp: datetime
    error: Optional[str] = None


__all__ = ["DatabaseHealth", "Driver", "DriverPage", "FraudAlert", "FraudAlertPage"]
