"""
Transaction ingestion pipeline.

Orchestrates one submission end-to-end:
1. Validate the payload shape
2. Assign the server-side timestamp (caller values are ignored)
3. Read the user's committed history count from the ledger
4. Evaluate risk rules
5. Insert the enriched record
6. Return the persisted record

The count read (3) and the insert (5) are not atomic as a pair. Two
concurrent submissions for one user can both see the same stale count
and both pass the frequency rule; the next read reflects both inserts.
The frequency rule is advisory, so this window is accepted.
"""
from datetime import datetime
from typing import Any, Callable, List

from pydantic import ValidationError as PydanticValidationError

from app import models
from app.errors import DuplicateKeyError, ValidationError
from app.logging_config import get_logger
from app.schemas.requests import TransactionSubmission
from app.schemas.responses import DashboardStats
from app.services.ledger import LedgerStore
from app.services.risk_engine import evaluate

logger = get_logger(__name__)

MISSING_FIELDS_MESSAGE = "Missing required fields"


def validate_submission(payload: Any) -> TransactionSubmission:
    """
    Parse the payload into a TransactionSubmission.

    Raises:
        ValidationError: any field is absent, empty or of the wrong type
    """
    try:
        return TransactionSubmission.model_validate(payload)
    except PydanticValidationError as exc:
        fields = [".".join(str(part) for part in error["loc"]) for error in exc.errors()]
        raise ValidationError(MISSING_FIELDS_MESSAGE, {"fields": fields}) from exc


class IngestionPipeline:
    def __init__(self, store: LedgerStore, clock: Callable[[], datetime] = models.utcnow):
        self.store = store
        self.clock = clock

    def submit(self, payload: Any) -> models.Transaction:
        """
        Validate, evaluate and persist one transaction.

        Raises:
            ValidationError: payload failed validation (nothing persisted)
            DuplicateKeyError: transaction_id already in the ledger
            StorageError: any other storage fault
        """
        submission = validate_submission(payload)
        timestamp = self.clock()

        prior_count = self.store.count_by_user(submission.user_id)
        verdict = evaluate(submission.amount, prior_count)

        record = models.Transaction(
            transaction_id=submission.transaction_id,
            user_id=submission.user_id,
            amount=submission.amount,
            timestamp=timestamp,
            device_id=submission.device_id,
            risk_flag=verdict.risk_flag.value if verdict.is_flagged else None,
            rule_triggered=verdict.rule_triggered.value if verdict.is_flagged else None,
        )

        try:
            persisted = self.store.insert(record)
        except DuplicateKeyError:
            logger.warning(
                "duplicate_transaction",
                transaction_id=submission.transaction_id,
                user_id=submission.user_id,
            )
            raise

        logger.info(
            "transaction_ingested",
            transaction_id=persisted.transaction_id,
            user_id=persisted.user_id,
            prior_count=prior_count,
            risk_flag=persisted.risk_flag,
            rule_triggered=persisted.rule_triggered,
        )
        return persisted

    def list(self) -> List[models.Transaction]:
        return self.store.list_all()

    def stats(self) -> DashboardStats:
        return self.store.aggregate_stats()
