"""
Store interface

Everything the engine reads from or writes to persistence goes through
this interface. Implementations decode raw rows into the dataclasses in
txn_extractor.models; the engine never sees rows.
"""
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from ..models import (
    Account,
    Budget,
    Category,
    ExtractionRule,
    ProcessedMessage,
    Transaction,
)


class Store(ABC):
    """
    Persistence collaborator

    Implementations raise StoreUnavailable when the backend cannot be
    reached and DuplicateMessage when the ledger already holds a message id.
    """

    # Vocabulary

    @abstractmethod
    def get_categories(self) -> List[Category]:
        """All categories, in store order"""

    @abstractmethod
    def get_accounts(self) -> List[Account]:
        """All accounts, active or not"""

    @abstractmethod
    def get_rules(self) -> List[ExtractionRule]:
        """All extraction rules, active or not"""

    @abstractmethod
    def save_category(self, category: Category) -> str:
        pass

    @abstractmethod
    def save_account(self, account: Account) -> str:
        pass

    @abstractmethod
    def save_rule(self, rule: ExtractionRule) -> str:
        pass

    # Ledger and transactions

    @abstractmethod
    def get_processed_message(self, message_id: str) -> Optional[ProcessedMessage]:
        pass

    def has_processed(self, message_id: str) -> bool:
        return self.get_processed_message(message_id) is not None

    @abstractmethod
    def record_message(self,
                       entry: ProcessedMessage,
                       transaction: Optional[Transaction] = None) -> Optional[str]:
        """
        Atomically record a ledger entry and (optionally) its transaction

        The ledger insert, transaction insert and link back-fill commit
        together or not at all.

        Returns:
            The transaction id, or None when no transaction was given

        Raises:
            DuplicateMessage: the message id is already in the ledger
        """

    @abstractmethod
    def get_transaction(self, txn_id: str) -> Optional[Transaction]:
        pass

    @abstractmethod
    def list_transactions(self) -> List[Transaction]:
        pass

    @abstractmethod
    def processing_stats(self) -> Dict:
        """
        Ledger statistics

        Returns:
            Dict with total_processed, with_transactions and last_processed
            (latest message timestamp or None)
        """

    # Budgets

    @abstractmethod
    def save_budget(self, budget: Budget) -> str:
        pass

    @abstractmethod
    def get_budget(self, budget_id: str) -> Optional[Budget]:
        pass

    @abstractmethod
    def get_budgets(self, active_only: bool = True) -> List[Budget]:
        pass

    @abstractmethod
    def get_budgets_for(self, category: str, on: date) -> List[Budget]:
        """Active budgets for a category whose period contains `on`"""

    @abstractmethod
    def increment_budget_spent(self, budget_id: str, amount: Decimal) -> Decimal:
        """Add to a budget's spent total and return the new total"""

    @abstractmethod
    def set_budget_spent(self, budget_id: str, spent: Decimal):
        pass

    @abstractmethod
    def sum_expenses(self, category: str, start: date, end: date) -> Decimal:
        """Sum of expense transaction amounts for a category within [start, end]"""

    @abstractmethod
    def count_expenses(self, category: str, start: date, end: date) -> int:
        pass

    def close(self):
        pass
