"""
In-memory store

Same contract as the PostgreSQL store. Used by the tests and by
`txn-import --dry-run`. A lock makes the ledger check-and-record atomic
per message id.
"""
import threading
from dataclasses import replace
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from ..errors import DuplicateMessage
from ..models import (
    Account,
    Budget,
    Category,
    Direction,
    ExtractionRule,
    ProcessedMessage,
    Transaction,
)
from .base import Store


class InMemoryStore(Store):
    """
    Dict-backed store
    """

    def __init__(self,
                 categories: Iterable[Category] = (),
                 accounts: Iterable[Account] = (),
                 rules: Iterable[ExtractionRule] = (),
                 budgets: Iterable[Budget] = ()):
        self._lock = threading.RLock()
        self.categories: List[Category] = list(categories)
        self.accounts: List[Account] = list(accounts)
        self.rules: List[ExtractionRule] = list(rules)
        self.budgets: Dict[str, Budget] = {b.budget_id: b for b in budgets}
        self.transactions: Dict[str, Transaction] = {}
        self.ledger: Dict[str, ProcessedMessage] = {}

    # Vocabulary

    def get_categories(self) -> List[Category]:
        with self._lock:
            return list(self.categories)

    def get_accounts(self) -> List[Account]:
        with self._lock:
            return list(self.accounts)

    def get_rules(self) -> List[ExtractionRule]:
        with self._lock:
            return list(self.rules)

    def save_category(self, category: Category) -> str:
        with self._lock:
            self.categories = [c for c in self.categories if c.category_id != category.category_id]
            self.categories.append(category)
        return category.category_id

    def save_account(self, account: Account) -> str:
        with self._lock:
            self.accounts = [a for a in self.accounts if a.account_id != account.account_id]
            self.accounts.append(account)
        return account.account_id

    def save_rule(self, rule: ExtractionRule) -> str:
        with self._lock:
            self.rules = [r for r in self.rules if r.rule_id != rule.rule_id]
            self.rules.append(rule)
        return rule.rule_id

    # Ledger and transactions

    def get_processed_message(self, message_id: str) -> Optional[ProcessedMessage]:
        with self._lock:
            return self.ledger.get(message_id)

    def record_message(self,
                       entry: ProcessedMessage,
                       transaction: Optional[Transaction] = None) -> Optional[str]:
        with self._lock:
            if entry.message_id in self.ledger:
                raise DuplicateMessage(entry.message_id)

            txn_id = None
            if transaction is not None:
                self.transactions[transaction.txn_id] = transaction
                txn_id = transaction.txn_id

            self.ledger[entry.message_id] = replace(entry, transaction_id=txn_id)
            return txn_id

    def get_transaction(self, txn_id: str) -> Optional[Transaction]:
        with self._lock:
            return self.transactions.get(txn_id)

    def list_transactions(self) -> List[Transaction]:
        with self._lock:
            return sorted(self.transactions.values(), key=lambda t: t.occurred_at, reverse=True)

    def processing_stats(self) -> Dict:
        with self._lock:
            entries = list(self.ledger.values())
        return {
            'total_processed': len(entries),
            'with_transactions': sum(1 for e in entries if e.transaction_id),
            'last_processed': max((e.message_timestamp for e in entries), default=None),
        }

    # Budgets

    def save_budget(self, budget: Budget) -> str:
        with self._lock:
            self.budgets[budget.budget_id] = budget
        return budget.budget_id

    def get_budget(self, budget_id: str) -> Optional[Budget]:
        with self._lock:
            return self.budgets.get(budget_id)

    def get_budgets(self, active_only: bool = True) -> List[Budget]:
        with self._lock:
            budgets = list(self.budgets.values())
        if active_only:
            budgets = [b for b in budgets if b.is_active]
        return sorted(budgets, key=lambda b: b.category)

    def get_budgets_for(self, category: str, on: date) -> List[Budget]:
        return [b for b in self.get_budgets() if b.category == category and b.covers(on)]

    def increment_budget_spent(self, budget_id: str, amount: Decimal) -> Decimal:
        with self._lock:
            budget = self.budgets[budget_id]
            budget.spent = budget.spent + amount
            return budget.spent

    def set_budget_spent(self, budget_id: str, spent: Decimal):
        with self._lock:
            self.budgets[budget_id].spent = spent

    def _expenses(self, category: str, start: date, end: date) -> List[Transaction]:
        with self._lock:
            transactions = list(self.transactions.values())
        return [
            t for t in transactions
            if t.direction == Direction.EXPENSE
            and t.category == category
            and start <= t.occurred_at.date() <= end
        ]

    def sum_expenses(self, category: str, start: date, end: date) -> Decimal:
        return sum((t.amount for t in self._expenses(category, start, end)), Decimal('0'))

    def count_expenses(self, category: str, start: date, end: date) -> int:
        return len(self._expenses(category, start, end))
