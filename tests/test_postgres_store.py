from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock

import psycopg2
import pytest

from txn_extractor.config import Settings
from txn_extractor.errors import DuplicateMessage, StoreUnavailable
from txn_extractor.models import Direction, ProcessedMessage, Source, Transaction
from txn_extractor.storage.postgres import PostgresStore


@pytest.fixture
def conn():
    conn = MagicMock()
    conn.closed = 0
    conn.cursor.return_value.closed = False
    return conn


@pytest.fixture
def cursor(conn):
    return conn.cursor.return_value


@pytest.fixture
def pg_store(conn):
    return PostgresStore(settings=Settings(), conn=conn)


ENTRY = ProcessedMessage(
    entry_id="pm-1",
    message_id="msg-1",
    sender="GCB-BANK",
    body="GHS 500.00 debited",
    message_timestamp=datetime(2025, 3, 14, 10, 30),
)

TXN = Transaction(
    txn_id="txn-1",
    amount=Decimal("500.00"),
    description="GHS 500.00 debited",
    category="Shopping",
    direction=Direction.EXPENSE,
    source=Source.SMS,
    occurred_at=datetime(2025, 3, 14, 10, 30),
    currency="GHS",
)


def test_record_message_commits_all_three_statements(pg_store, conn, cursor):
    cursor.fetchone.return_value = {"entry_id": "pm-1"}

    assert pg_store.record_message(ENTRY, TXN) == "txn-1"

    assert cursor.execute.call_count == 3
    conn.commit.assert_called_once()
    conn.rollback.assert_not_called()

    # Values travel as parameters, never inside the SQL text
    sql, params = cursor.execute.call_args_list[0][0]
    assert "msg-1" not in sql
    assert "msg-1" in params


def test_duplicate_rolls_back(pg_store, conn, cursor):
    cursor.fetchone.return_value = None

    with pytest.raises(DuplicateMessage):
        pg_store.record_message(ENTRY, TXN)

    assert cursor.execute.call_count == 1
    conn.rollback.assert_called_once()
    conn.commit.assert_not_called()


def test_connection_loss_becomes_store_unavailable(pg_store, conn, cursor):
    cursor.execute.side_effect = psycopg2.OperationalError("server closed the connection")

    with pytest.raises(StoreUnavailable):
        pg_store.get_categories()

    conn.close.assert_called_once()
    assert pg_store._conn is None


def test_rows_are_decoded(pg_store, cursor):
    cursor.fetchall.return_value = [{
        "category_id": "shopping",
        "name": "Shopping",
        "direction": "expense",
        "keywords": '["Shoprite", "mall"]',
        "color": "#45B7D1",
        "icon": "shopping-bag",
    }]

    [category] = pg_store.get_categories()
    assert category.direction == Direction.EXPENSE
    assert category.keywords == ("shoprite", "mall")


def test_increment_budget_spent_returns_new_total(pg_store, cursor):
    cursor.fetchone.return_value = {"spent": Decimal("1100.00")}
    assert pg_store.increment_budget_spent("b-1", Decimal("600.00")) == Decimal("1100.00")


def test_increment_unknown_budget(pg_store, cursor):
    cursor.fetchone.return_value = None
    with pytest.raises(KeyError):
        pg_store.increment_budget_spent("missing", Decimal("1"))
