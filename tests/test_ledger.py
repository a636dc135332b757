"""
Unit tests for app/services/ledger.py.

Covers: per-user history counts, primary-key uniqueness, ordering of
list_all, dashboard aggregates, storage-fault wrapping and the health probe.
"""
import pytest
from datetime import datetime, timedelta
from unittest.mock import patch

from sqlalchemy.exc import IntegrityError, OperationalError

from app import models
from app.errors import DuplicateKeyError, StorageError
from app.services.ledger import _is_duplicate_key
from tests.conftest import make_txn

BASE_TIME = datetime(2024, 1, 15, 10, 0, 0)


def new_record(txn_id, user_id="U1", amount=100.0, risk_flag=None, rule_triggered=None):
    return models.Transaction(
        transaction_id=txn_id,
        user_id=user_id,
        amount=amount,
        timestamp=BASE_TIME,
        device_id="D1",
        risk_flag=risk_flag,
        rule_triggered=rule_triggered,
    )


# ---------------------------------------------------------------------------
# count_by_user
# ---------------------------------------------------------------------------
class TestCountByUser:
    def test_unknown_user_has_zero(self, store):
        assert store.count_by_user("nobody") == 0

    def test_counts_only_that_user(self, store, db):
        make_txn(db, "TX1", user_id="U1")
        make_txn(db, "TX2", user_id="U1")
        make_txn(db, "TX3", user_id="U2")
        assert store.count_by_user("U1") == 2
        assert store.count_by_user("U2") == 1


# ---------------------------------------------------------------------------
# insert
# ---------------------------------------------------------------------------
class TestInsert:
    def test_returns_persisted_record_with_created_at(self, store):
        persisted = store.insert(new_record("TX1", amount=1234.56))
        assert persisted.transaction_id == "TX1"
        assert persisted.amount == 1234.56
        assert persisted.timestamp == BASE_TIME
        assert persisted.created_at is not None
        assert store.count_by_user("U1") == 1

    def test_amount_round_trips_two_decimals(self, store, db):
        store.insert(new_record("TX1", amount=19999.99))
        db.expire_all()
        assert db.get(models.Transaction, "TX1").amount == 19999.99

    def test_duplicate_id_raises_and_keeps_original(self, store, db):
        store.insert(new_record("TX1", user_id="U1", amount=500.0))

        with pytest.raises(DuplicateKeyError) as exc_info:
            store.insert(new_record("TX1", user_id="U9", amount=99999.0,
                                    risk_flag="HIGH_RISK", rule_triggered="Rule1"))

        assert exc_info.value.transaction_id == "TX1"
        assert exc_info.value.message == "Duplicate transaction_id"
        db.expire_all()
        stored = db.get(models.Transaction, "TX1")
        assert stored.user_id == "U1"
        assert stored.amount == 500.0
        assert stored.risk_flag is None
        assert store.count_by_user("U9") == 0

    def test_store_still_usable_after_duplicate(self, store):
        store.insert(new_record("TX1"))
        with pytest.raises(DuplicateKeyError):
            store.insert(new_record("TX1"))
        store.insert(new_record("TX2"))
        assert store.count_by_user("U1") == 2

    def test_other_integrity_error_is_storage_error(self, store, db):
        error = IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed: transactions.user_id"))
        with patch.object(db, "execute", side_effect=error):
            with pytest.raises(StorageError) as exc_info:
                store.insert(new_record("TX1"))
        assert exc_info.value.message == "Internal Server Error"
        assert exc_info.value.__cause__ is error

    def test_operational_error_is_storage_error(self, store, db):
        error = OperationalError("INSERT", {}, Exception("disk I/O error"))
        with patch.object(db, "execute", side_effect=error):
            with pytest.raises(StorageError):
                store.insert(new_record("TX1"))


class TestDuplicateKeyDetection:
    class _PgError(Exception):
        def __init__(self, message, pgcode=None, sqlstate=None):
            super().__init__(message)
            self.pgcode = pgcode
            self.sqlstate = sqlstate

    def test_sqlite_unique_message(self):
        exc = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: transactions.transaction_id"))
        assert _is_duplicate_key(exc)

    def test_postgres_sqlstate(self):
        assert _is_duplicate_key(IntegrityError("INSERT", {}, self._PgError("x", pgcode="23505")))
        assert _is_duplicate_key(IntegrityError("INSERT", {}, self._PgError("x", sqlstate="23505")))

    def test_not_null_violation_is_not_duplicate(self):
        exc = IntegrityError("INSERT", {}, self._PgError("null value", pgcode="23502"))
        assert not _is_duplicate_key(exc)


# ---------------------------------------------------------------------------
# list_all
# ---------------------------------------------------------------------------
class TestListAll:
    def test_empty(self, store):
        assert store.list_all() == []

    def test_most_recent_first(self, store, db):
        make_txn(db, "TX_old", created_at=BASE_TIME)
        make_txn(db, "TX_new", created_at=BASE_TIME + timedelta(minutes=5))
        make_txn(db, "TX_mid", created_at=BASE_TIME + timedelta(minutes=1))
        ids = [t.transaction_id for t in store.list_all()]
        assert ids == ["TX_new", "TX_mid", "TX_old"]

    def test_storage_fault_is_storage_error(self, store, db):
        with patch.object(db, "query", side_effect=OperationalError("SELECT", {}, Exception("locked"))):
            with pytest.raises(StorageError):
                store.list_all()


# ---------------------------------------------------------------------------
# aggregate_stats
# ---------------------------------------------------------------------------
class TestAggregateStats:
    def test_empty_ledger_is_all_zero(self, store):
        stats = store.aggregate_stats()
        assert stats.model_dump() == {
            "total_transactions": 0,
            "flagged_transactions": 0,
            "high_risk": 0,
            "suspicious": 0,
        }

    def test_counts_each_flag(self, store, db):
        make_txn(db, "TX1")
        make_txn(db, "TX2", risk_flag="HIGH_RISK", rule_triggered="Rule1")
        make_txn(db, "TX3", risk_flag="HIGH_RISK", rule_triggered="Rule1")
        make_txn(db, "TX4", risk_flag="SUSPICIOUS", rule_triggered="Rule2")
        make_txn(db, "TX5")

        stats = store.aggregate_stats()
        assert stats.total_transactions == 5
        assert stats.flagged_transactions == 3
        assert stats.high_risk == 2
        assert stats.suspicious == 1

    def test_invariant_holds_while_growing(self, store, db):
        flags = [None, "HIGH_RISK", "SUSPICIOUS", None, "SUSPICIOUS", "HIGH_RISK", None]
        for i, flag in enumerate(flags):
            rule = {"HIGH_RISK": "Rule1", "SUSPICIOUS": "Rule2"}.get(flag)
            make_txn(db, f"TX{i}", risk_flag=flag, rule_triggered=rule)
            stats = store.aggregate_stats()
            assert stats.flagged_transactions == stats.high_risk + stats.suspicious
            assert stats.flagged_transactions <= stats.total_transactions
            assert stats.total_transactions == i + 1

    def test_storage_fault_is_storage_error(self, store, db):
        with patch.object(db, "execute", side_effect=OperationalError("SELECT", {}, Exception("gone"))):
            with pytest.raises(StorageError):
                store.aggregate_stats()


# ---------------------------------------------------------------------------
# ping
# ---------------------------------------------------------------------------
class TestPing:
    def test_reachable(self, store):
        assert store.ping() is True

    def test_unreachable_returns_false(self, store, db):
        with patch.object(db, "execute", side_effect=OperationalError("SELECT 1", {}, Exception("refused"))):
            assert store.ping() is False
