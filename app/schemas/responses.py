from pydantic import AfterValidator, BaseModel, ConfigDict
from typing import Annotated, Optional
from datetime import datetime, timezone


def _as_utc(value: datetime) -> datetime:
    # Stored datetimes are naive UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UTCDatetime = Annotated[datetime, AfterValidator(_as_utc)]


class TransactionResponse(BaseModel):
    transaction_id: str
    user_id: str
    amount: float
    timestamp: UTCDatetime
    device_id: str
    risk_flag: Optional[str] = None  # "HIGH_RISK" | "SUSPICIOUS" | null
    rule_triggered: Optional[str] = None  # "Rule1" | "Rule2" | null
    created_at: UTCDatetime

    model_config = ConfigDict(from_attributes=True)


class DashboardStats(BaseModel):
    total_transactions: int = 0
    flagged_transactions: int = 0
    high_risk: int = 0
    suspicious: int = 0


class HealthResponse(BaseModel):
    status: str  # "OK" | "ERROR"
    database: str  # "connected" | "unreachable"
    service: str
    timestamp: UTCDatetime


class ErrorResponse(BaseModel):
    error: str
