from typing import Any, List

from fastapi import APIRouter, Body, Depends

from app.dependencies import get_pipeline
from app.schemas.responses import DashboardStats, ErrorResponse, TransactionResponse
from app.services.ingestion import IngestionPipeline

router = APIRouter()


@router.post(
    "/transactions",
    response_model=TransactionResponse,
    status_code=201,
    responses={
        400: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def create_transaction(
    payload: Any = Body(default=None),
    pipeline: IngestionPipeline = Depends(get_pipeline),
):
    """
    Screen and store a new transaction.

    - Requires transaction_id, user_id, amount, device_id
    - Any caller-supplied timestamp is replaced with the server clock
    - Rule1 (amount > 20000) → HIGH_RISK; Rule2 (4th+ transaction for the user) → SUSPICIOUS
    - Returns the persisted record with risk_flag / rule_triggered
    """
    record = pipeline.submit(payload)
    return TransactionResponse.model_validate(record)


@router.get("/transactions", response_model=List[TransactionResponse])
def list_transactions(pipeline: IngestionPipeline = Depends(get_pipeline)):
    """All transactions, most recently ingested first."""
    return [TransactionResponse.model_validate(t) for t in pipeline.list()]


@router.get("/dashboard", response_model=DashboardStats)
def dashboard(pipeline: IngestionPipeline = Depends(get_pipeline)):
    """Overall risk statistics, recomputed on every call."""
    return pipeline.stats()
