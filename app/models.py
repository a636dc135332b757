from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Index, String

from app.database import Base


def utcnow() -> datetime:
    """Current UTC instant as a naive datetime (SQLite drops tzinfo)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Transaction(Base):
    __tablename__ = "transactions"

    transaction_id = Column(String, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    amount = Column(Float, nullable=False)
    timestamp = Column(DateTime, nullable=False)  # server-assigned at ingestion
    device_id = Column(String, nullable=False)
    risk_flag = Column(String, nullable=True)
    rule_triggered = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)

    __table_args__ = (
        Index("ix_transactions_risk_flag_created_at", "risk_flag", "created_at"),
    )
