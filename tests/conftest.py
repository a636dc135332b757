"""
Shared pytest fixtures for all test modules.

Uses an in-memory SQLite database (StaticPool) so every test
function gets a clean, isolated ledger with no disk I/O and no state leakage.
"""
import pytest
from datetime import datetime
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from typing import Optional

from app.database import Base, get_db
from app.services.ledger import LedgerStore
from app import models


# ---------------------------------------------------------------------------
# In-memory database engine shared across all fixtures in a test session.
# StaticPool forces all SQLAlchemy connections to reuse the same underlying
# sqlite3 connection, which is required for in-memory SQLite.
# ---------------------------------------------------------------------------
TEST_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=TEST_ENGINE)


@pytest.fixture(autouse=True)
def reset_db():
    """Drop and recreate all tables before each test for full isolation."""
    Base.metadata.drop_all(bind=TEST_ENGINE)
    Base.metadata.create_all(bind=TEST_ENGINE)
    yield
    Base.metadata.drop_all(bind=TEST_ENGINE)


@pytest.fixture
def db(reset_db):
    """Yield a SQLAlchemy session backed by the in-memory test database."""
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db):
    return LedgerStore(db)


@pytest.fixture
def client(db):
    """
    FastAPI TestClient with the real DB dependency overridden to use
    the in-memory test session.  The TestClient is NOT used as a context
    manager so the lifespan hook (which opens the configured database) is skipped.
    """
    from app.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helper, not a fixture, so any test file can import and call it directly.
# Writes straight to the table, bypassing the rules, with a controlled created_at.
# ---------------------------------------------------------------------------
def make_txn(
    db,
    txn_id: str,
    user_id: str = "U1",
    amount: float = 100.00,
    device_id: str = "D1",
    risk_flag: Optional[str] = None,
    rule_triggered: Optional[str] = None,
    created_at: Optional[datetime] = None,   # defaults to now
) -> models.Transaction:
    now = models.utcnow()
    txn = models.Transaction(
        transaction_id=txn_id,
        user_id=user_id,
        amount=amount,
        timestamp=now,
        device_id=device_id,
        risk_flag=risk_flag,
        rule_triggered=rule_triggered,
        created_at=created_at or now,
    )
    db.add(txn)
    db.commit()
    db.refresh(txn)
    return txn
