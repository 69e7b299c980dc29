"""
Transaction Writer

The only place transactions are created. Converts foreign-currency amounts
into the base currency and commits the transaction together with its
ledger entry.
"""
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from ..models import Message, ParsedTransaction, Transaction
from .currency import Converter, identity_convert
from .ledger import new_entry


class TransactionWriter:
    """
    Builds and persists Transaction records
    """

    def __init__(self,
                 store,
                 base_currency: str = 'GHS',
                 convert: Optional[Converter] = None,
                 review_threshold: float = 0.70):
        """
        Args:
            store: Persistence collaborator
            base_currency: Currency transactions are stored in
            convert: convert(amount, from_code, to_code) -> amount
            review_threshold: Confidence below which a transaction needs review
        """
        self.store = store
        self.base_currency = base_currency.upper()
        self.convert = convert or identity_convert
        self.review_threshold = review_threshold

    def build(self, parsed: ParsedTransaction, message: Message) -> Transaction:
        """
        Turn a parsed result into a Transaction (not yet persisted)
        """
        now = datetime.now()
        txn = Transaction(
            txn_id=f"txn_{uuid.uuid4().hex[:16]}",
            amount=parsed.amount,
            description=parsed.description,
            category=parsed.category,
            direction=parsed.direction,
            source=message.source,
            occurred_at=parsed.occurred_at,
            currency=parsed.currency,
            account=parsed.account,
            merchant=parsed.merchant,
            needs_review=parsed.confidence < self.review_threshold,
            created_at=now,
            updated_at=now,
        )

        if parsed.currency.upper() != self.base_currency:
            self._convert(txn)

        return txn

    def _convert(self, txn: Transaction):
        original_amount = txn.amount
        original_currency = txn.currency.upper()
        try:
            converted = Decimal(self.convert(original_amount, original_currency, self.base_currency))
        except KeyError as e:
            # No rate: keep the original currency and flag for review
            print(f"⚠️  No exchange rate for {original_currency} -> {self.base_currency}: {e}")
            txn.needs_review = True
            return

        txn.amount = converted
        txn.currency = self.base_currency
        txn.original_amount = original_amount
        txn.original_currency = original_currency
        txn.exchange_rate = converted / original_amount

    def save(self, parsed: ParsedTransaction, message: Message) -> Transaction:
        """
        Persist a parsed transaction with its ledger entry, atomically

        Raises:
            DuplicateMessage: the message id was already recorded
            StoreUnavailable: the store could not be reached
        """
        txn = self.build(parsed, message)
        self.store.record_message(new_entry(message), txn)
        return txn
