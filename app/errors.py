"""
Error taxonomy for the ingestion pipeline.

Every failure originates either in input validation or in the ledger
store; the API layer maps each kind to an HTTP status.
"""
from typing import Any, Dict, Optional


class RiskMonitorError(Exception):
    """Base exception for all pipeline errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(RiskMonitorError):
    """
    Raised when a submission is missing required fields or carries an
    unusable amount. Never retried.

    HTTP Status: 400 Bad Request
    """


class DuplicateKeyError(RiskMonitorError):
    """
    Raised when a transaction_id already exists in the ledger.
    The stored record is left untouched.

    HTTP Status: 409 Conflict
    """

    def __init__(self, transaction_id: str):
        super().__init__("Duplicate transaction_id", {"transaction_id": transaction_id})
        self.transaction_id = transaction_id


class StorageError(RiskMonitorError):
    """
    Raised for any other storage fault. The message is always opaque;
    the underlying exception is chained and logged, not returned.

    HTTP Status: 500 Internal Server Error
    """

    def __init__(self, message: str = "Internal Server Error"):
        super().__init__(message)


ERROR_STATUS_MAP = {
    ValidationError: 400,
    DuplicateKeyError: 409,
    StorageError: 500,
}


def get_status_code(error: Exception) -> int:
    """HTTP status for an exception, 500 for anything unmapped."""
    return ERROR_STATUS_MAP.get(type(error), 500)
