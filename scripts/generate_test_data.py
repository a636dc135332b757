"""
Seeds the configured database with demo transactions for the dashboard.

Every payload is submitted through the ingestion pipeline, so the stored
risk flags are exactly what the rules produce. Re-running adds a fresh
batch (transaction ids are random).

Usage:
    DATABASE_URL=sqlite:///./transactions.db python scripts/generate_test_data.py
"""
import sys
import os

# Allow running from project root
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.config import get_settings
from app.database import Base, create_db_engine, create_session_factory
from app.logging_config import setup_logging
from app.seed import seed_demo_transactions
from app.services.ingestion import IngestionPipeline
from app.services.ledger import LedgerStore


def main():
    settings = get_settings()
    setup_logging(settings)

    engine = create_db_engine(settings)
    Base.metadata.create_all(bind=engine)
    db = create_session_factory(engine)()
    try:
        store = LedgerStore(db)
        stored = seed_demo_transactions(IngestionPipeline(store))
        stats = store.aggregate_stats()
    finally:
        db.close()
        engine.dispose()

    print(f"Inserted {stored} transactions into {settings.database_url}")
    print(f"  total:      {stats.total_transactions}")
    print(f"  flagged:    {stats.flagged_transactions}")
    print(f"  high_risk:  {stats.high_risk}")
    print(f"  suspicious: {stats.suspicious}")


if __name__ == "__main__":
    main()
