"""
PostgreSQL store

psycopg2 with parameterized queries only. Keyword columns hold JSON lists
and are decoded into tuples here. Connection-level failures surface as
StoreUnavailable so the caller can retry on the next ingestion cycle.
"""
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

import psycopg2
import psycopg2.extras

from ..config import Settings
from ..errors import DuplicateMessage, StoreUnavailable
from ..models import (
    Account,
    Budget,
    Category,
    Direction,
    ExtractionRule,
    ProcessedMessage,
    Source,
    Transaction,
    decode_keywords,
    encode_keywords,
)
from ..utils.db_connection import get_db_connection
from .base import Store

CONNECTION_ERRORS = (psycopg2.OperationalError, psycopg2.InterfaceError)


def _category_from_row(row: Dict) -> Category:
    return Category(
        category_id=row['category_id'],
        name=row['name'],
        direction=Direction(row['direction']),
        keywords=decode_keywords(row['keywords']),
        color=row['color'],
        icon=row['icon'],
    )


def _account_from_row(row: Dict) -> Account:
    return Account(
        account_id=row['account_id'],
        name=row['name'],
        keywords=decode_keywords(row['keywords']),
        is_active=row['is_active'],
    )


def _rule_from_row(row: Dict) -> ExtractionRule:
    return ExtractionRule(
        rule_id=row['rule_id'],
        name=row['name'],
        pattern=row['pattern'],
        amount_group=row['amount_group'],
        merchant_group=row['merchant_group'],
        category_id=row['category_id'],
        account_id=row['account_id'],
        priority=row['priority'],
        is_active=row['is_active'],
    )


def _transaction_from_row(row: Dict) -> Transaction:
    return Transaction(
        txn_id=row['txn_id'],
        amount=row['amount'],
        description=row['description'],
        category=row['category'],
        direction=Direction(row['direction']),
        source=Source(row['source']),
        occurred_at=row['occurred_at'],
        currency=row['currency'],
        account=row['account'],
        merchant=row['merchant'],
        original_amount=row['original_amount'],
        original_currency=row['original_currency'],
        exchange_rate=row['exchange_rate'],
        needs_review=row['needs_review'],
        created_at=row['created_at'],
        updated_at=row['updated_at'],
    )


def _budget_from_row(row: Dict) -> Budget:
    return Budget(
        budget_id=row['budget_id'],
        name=row['name'],
        category=row['category'],
        amount=row['amount'],
        start_date=row['start_date'],
        end_date=row['end_date'],
        spent=row['spent'],
        period=row['period'],
        is_active=row['is_active'],
    )


class PostgresStore(Store):
    """
    Store backed by the schema in db/db_schema.sql
    """

    def __init__(self, settings: Optional[Settings] = None, conn=None):
        self.settings = settings or Settings.from_env()
        self._conn = conn

    @property
    def conn(self):
        if self._conn is None or self._conn.closed:
            self._conn = get_db_connection(self.settings)
        return self._conn

    @contextmanager
    def _cursor(self):
        """
        One unit of work: commit on success, roll back on any error
        """
        conn = self.conn
        cursor = conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor)
        try:
            yield cursor
            conn.commit()
        except CONNECTION_ERRORS as e:
            self._discard()
            raise StoreUnavailable(str(e)) from e
        except Exception:
            conn.rollback()
            raise
        finally:
            if not cursor.closed:
                cursor.close()

    def _discard(self):
        if self._conn is not None and not self._conn.closed:
            self._conn.close()
        self._conn = None

    def close(self):
        if self._conn is not None and not self._conn.closed:
            self._conn.close()

    # Vocabulary

    def get_categories(self) -> List[Category]:
        with self._cursor() as cursor:
            cursor.execute("SELECT * FROM categories ORDER BY display_order, category_id")
            return [_category_from_row(row) for row in cursor.fetchall()]

    def get_accounts(self) -> List[Account]:
        with self._cursor() as cursor:
            cursor.execute("SELECT * FROM accounts ORDER BY name")
            return [_account_from_row(row) for row in cursor.fetchall()]

    def get_rules(self) -> List[ExtractionRule]:
        with self._cursor() as cursor:
            cursor.execute("SELECT * FROM extraction_rules ORDER BY priority, rule_id")
            return [_rule_from_row(row) for row in cursor.fetchall()]

    def save_category(self, category: Category) -> str:
        with self._cursor() as cursor:
            cursor.execute("""
                INSERT INTO categories (category_id, name, direction, keywords, color, icon)
                VALUES (%s, %s, %s, %s, %s, %s)
                ON CONFLICT (category_id) DO UPDATE SET
                    name = EXCLUDED.name,
                    direction = EXCLUDED.direction,
                    keywords = EXCLUDED.keywords,
                    color = EXCLUDED.color,
                    icon = EXCLUDED.icon
            """, (category.category_id, category.name, category.direction.value,
                  encode_keywords(category.keywords), category.color, category.icon))
        return category.category_id

    def save_account(self, account: Account) -> str:
        with self._cursor() as cursor:
            cursor.execute("""
                INSERT INTO accounts (account_id, name, keywords, is_active)
                VALUES (%s, %s, %s, %s)
                ON CONFLICT (account_id) DO UPDATE SET
                    name = EXCLUDED.name,
                    keywords = EXCLUDED.keywords,
                    is_active = EXCLUDED.is_active
            """, (account.account_id, account.name,
                  encode_keywords(account.keywords), account.is_active))
        return account.account_id

    def save_rule(self, rule: ExtractionRule) -> str:
        with self._cursor() as cursor:
            cursor.execute("""
                INSERT INTO extraction_rules (
                    rule_id, name, pattern, amount_group, merchant_group,
                    category_id, account_id, priority, is_active
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                ON CONFLICT (rule_id) DO UPDATE SET
                    name = EXCLUDED.name,
                    pattern = EXCLUDED.pattern,
                    amount_group = EXCLUDED.amount_group,
                    merchant_group = EXCLUDED.merchant_group,
                    category_id = EXCLUDED.category_id,
                    account_id = EXCLUDED.account_id,
                    priority = EXCLUDED.priority,
                    is_active = EXCLUDED.is_active
            """, (rule.rule_id, rule.name, rule.pattern, rule.amount_group, rule.merchant_group,
                  rule.category_id, rule.account_id, rule.priority, rule.is_active))
        return rule.rule_id

    # Ledger and transactions

    def get_processed_message(self, message_id: str) -> Optional[ProcessedMessage]:
        with self._cursor() as cursor:
            cursor.execute("""
                SELECT entry_id, message_id, sender, body, message_timestamp,
                       transaction_id, created_at
                FROM processed_messages
                WHERE message_id = %s
            """, (message_id,))
            row = cursor.fetchone()
        return ProcessedMessage(**row) if row else None

    def record_message(self,
                       entry: ProcessedMessage,
                       transaction: Optional[Transaction] = None) -> Optional[str]:
        with self._cursor() as cursor:
            cursor.execute("""
                INSERT INTO processed_messages (
                    entry_id, message_id, sender, body, message_timestamp, created_at
                )
                VALUES (%s, %s, %s, %s, %s, %s)
                ON CONFLICT (message_id) DO NOTHING
                RETURNING entry_id
            """, (entry.entry_id, entry.message_id, entry.sender, entry.body,
                  entry.message_timestamp, entry.created_at))

            if cursor.fetchone() is None:
                raise DuplicateMessage(entry.message_id)

            if transaction is None:
                return None

            cursor.execute("""
                INSERT INTO transactions (
                    txn_id, amount, currency, description, category, direction, source,
                    occurred_at, account, merchant, original_amount, original_currency,
                    exchange_rate, needs_review, created_at, updated_at
                )
                VALUES (
                    %(txn_id)s, %(amount)s, %(currency)s, %(description)s, %(category)s,
                    %(direction)s, %(source)s, %(occurred_at)s, %(account)s, %(merchant)s,
                    %(original_amount)s, %(original_currency)s, %(exchange_rate)s,
                    %(needs_review)s, %(created_at)s, %(updated_at)s
                )
            """, {
                'txn_id': transaction.txn_id,
                'amount': transaction.amount,
                'currency': transaction.currency,
                'description': transaction.description,
                'category': transaction.category,
                'direction': transaction.direction.value,
                'source': transaction.source.value,
                'occurred_at': transaction.occurred_at,
                'account': transaction.account,
                'merchant': transaction.merchant,
                'original_amount': transaction.original_amount,
                'original_currency': transaction.original_currency,
                'exchange_rate': transaction.exchange_rate,
                'needs_review': transaction.needs_review,
                'created_at': transaction.created_at,
                'updated_at': transaction.updated_at,
            })

            cursor.execute("""
                UPDATE processed_messages SET transaction_id = %s
                WHERE message_id = %s
            """, (transaction.txn_id, entry.message_id))

        return transaction.txn_id

    def get_transaction(self, txn_id: str) -> Optional[Transaction]:
        with self._cursor() as cursor:
            cursor.execute("SELECT * FROM transactions WHERE txn_id = %s", (txn_id,))
            row = cursor.fetchone()
        return _transaction_from_row(row) if row else None

    def list_transactions(self) -> List[Transaction]:
        with self._cursor() as cursor:
            cursor.execute("SELECT * FROM transactions ORDER BY occurred_at DESC")
            return [_transaction_from_row(row) for row in cursor.fetchall()]

    def processing_stats(self) -> Dict:
        with self._cursor() as cursor:
            cursor.execute("""
                SELECT COUNT(*) AS total_processed,
                       COUNT(transaction_id) AS with_transactions,
                       MAX(message_timestamp) AS last_processed
                FROM processed_messages
            """)
            return dict(cursor.fetchone())

    # Budgets

    def save_budget(self, budget: Budget) -> str:
        with self._cursor() as cursor:
            cursor.execute("""
                INSERT INTO budgets (
                    budget_id, name, category, amount, spent, period,
                    start_date, end_date, is_active
                )
                VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s)
                ON CONFLICT (budget_id) DO UPDATE SET
                    name = EXCLUDED.name,
                    category = EXCLUDED.category,
                    amount = EXCLUDED.amount,
                    period = EXCLUDED.period,
                    start_date = EXCLUDED.start_date,
                    end_date = EXCLUDED.end_date,
                    is_active = EXCLUDED.is_active,
                    updated_at = NOW()
            """, (budget.budget_id, budget.name, budget.category, budget.amount, budget.spent,
                  budget.period, budget.start_date, budget.end_date, budget.is_active))
        return budget.budget_id

    def get_budget(self, budget_id: str) -> Optional[Budget]:
        with self._cursor() as cursor:
            cursor.execute("SELECT * FROM budgets WHERE budget_id = %s", (budget_id,))
            row = cursor.fetchone()
        return _budget_from_row(row) if row else None

    def get_budgets(self, active_only: bool = True) -> List[Budget]:
        with self._cursor() as cursor:
            if active_only:
                cursor.execute("SELECT * FROM budgets WHERE is_active ORDER BY category")
            else:
                cursor.execute("SELECT * FROM budgets ORDER BY category")
            return [_budget_from_row(row) for row in cursor.fetchall()]

    def get_budgets_for(self, category: str, on: date) -> List[Budget]:
        with self._cursor() as cursor:
            cursor.execute("""
                SELECT * FROM budgets
                WHERE is_active AND category = %s
                  AND %s BETWEEN start_date AND end_date
                ORDER BY budget_id
            """, (category, on))
            return [_budget_from_row(row) for row in cursor.fetchall()]

    def increment_budget_spent(self, budget_id: str, amount: Decimal) -> Decimal:
        with self._cursor() as cursor:
            cursor.execute("""
                UPDATE budgets SET spent = spent + %s, updated_at = NOW()
                WHERE budget_id = %s
                RETURNING spent
            """, (amount, budget_id))
            row = cursor.fetchone()
        if row is None:
            raise KeyError(budget_id)
        return row['spent']

    def set_budget_spent(self, budget_id: str, spent: Decimal):
        with self._cursor() as cursor:
            cursor.execute("""
                UPDATE budgets SET spent = %s, updated_at = NOW()
                WHERE budget_id = %s
            """, (spent, budget_id))

    def sum_expenses(self, category: str, start: date, end: date) -> Decimal:
        with self._cursor() as cursor:
            cursor.execute("""
                SELECT COALESCE(SUM(amount), 0) AS total
                FROM transactions
                WHERE category = %s AND direction = 'expense'
                  AND occurred_at::date BETWEEN %s AND %s
            """, (category, start, end))
            return Decimal(cursor.fetchone()['total'])

    def count_expenses(self, category: str, start: date, end: date) -> int:
        with self._cursor() as cursor:
            cursor.execute("""
                SELECT COUNT(*) AS count
                FROM transactions
                WHERE category = %s AND direction = 'expense'
                  AND occurred_at::date BETWEEN %s AND %s
            """, (category, start, end))
            return cursor.fetchone()['count']
