"""FastAPI dependency providers for the ledger store and the ingestion pipeline."""
from fastapi import Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.services.ingestion import IngestionPipeline
from app.services.ledger import LedgerStore


def get_store(db: Session = Depends(get_db)) -> LedgerStore:
    return LedgerStore(db)


def get_pipeline(store: LedgerStore = Depends(get_store)) -> IngestionPipeline:
    return IngestionPipeline(store)
