"""
Ledger store.

Append-only storage of transaction records over a SQLAlchemy session.
The primary key on transaction_id is the only authority on uniqueness:
records are written with a single INSERT and a violation is reported as
DuplicateKeyError, never pre-checked by the application.
"""
from contextlib import contextmanager
from typing import Iterator, List

from sqlalchemy import case, func, insert, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app import models
from app.errors import DuplicateKeyError, StorageError
from app.logging_config import get_logger
from app.schemas.responses import DashboardStats
from app.services.risk_engine import RiskFlag

logger = get_logger(__name__)

UNIQUE_VIOLATION_SQLSTATE = "23505"

RECORD_COLUMNS = (
    "transaction_id",
    "user_id",
    "amount",
    "timestamp",
    "device_id",
    "risk_flag",
    "rule_triggered",
)


def _is_duplicate_key(exc: IntegrityError) -> bool:
    orig = exc.orig
    # psycopg2 exposes pgcode, psycopg 3 exposes sqlstate
    for attr in ("pgcode", "sqlstate"):
        if getattr(orig, attr, None) == UNIQUE_VIOLATION_SQLSTATE:
            return True
    message = str(orig).lower()
    return "unique constraint failed" in message or "duplicate key" in message


class LedgerStore:
    """Narrow operation set over the transactions table."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _storage_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("storage_failure", operation=operation, error=str(exc))
            raise StorageError() from exc

    def count_by_user(self, user_id: str) -> int:
        """Number of committed records for user_id."""
        with self._storage_errors("count_by_user"):
            return self.db.query(models.Transaction).filter(
                models.Transaction.user_id == user_id
            ).count()

    def insert(self, record: models.Transaction) -> models.Transaction:
        """
        Atomically append one record and return it as persisted.

        Raises:
            DuplicateKeyError: transaction_id already exists (nothing written)
            StorageError: any other storage fault
        """
        values = {column: getattr(record, column) for column in RECORD_COLUMNS}
        values["created_at"] = models.utcnow()

        with self._storage_errors("insert"):
            try:
                self.db.execute(insert(models.Transaction).values(**values))
                self.db.commit()
            except IntegrityError as exc:
                if not _is_duplicate_key(exc):
                    raise
                self.db.rollback()
                raise DuplicateKeyError(record.transaction_id) from exc

            return self.db.get(models.Transaction, record.transaction_id)

    def list_all(self) -> List[models.Transaction]:
        """All records, most recently ingested first."""
        with self._storage_errors("list_all"):
            return self.db.query(models.Transaction).order_by(
                models.Transaction.created_at.desc()
            ).all()

    def aggregate_stats(self) -> DashboardStats:
        """Dashboard counters computed in a single SELECT."""
        flag = models.Transaction.risk_flag
        stmt = select(
            func.count().label("total_transactions"),
            func.coalesce(func.sum(case((flag.isnot(None), 1), else_=0)), 0)
                .label("flagged_transactions"),
            func.coalesce(func.sum(case((flag == RiskFlag.HIGH_RISK.value, 1), else_=0)), 0)
                .label("high_risk"),
            func.coalesce(func.sum(case((flag == RiskFlag.SUSPICIOUS.value, 1), else_=0)), 0)
                .label("suspicious"),
        ).select_from(models.Transaction)

        with self._storage_errors("aggregate_stats"):
            row = self.db.execute(stmt).one()

        return DashboardStats(
            total_transactions=int(row.total_transactions),
            flagged_transactions=int(row.flagged_transactions),
            high_risk=int(row.high_risk),
            suspicious=int(row.suspicious),
        )

    def ping(self) -> bool:
        """Trivial storage probe for the health check."""
        try:
            self.db.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.warning("storage_unreachable", error=str(exc))
            return False
