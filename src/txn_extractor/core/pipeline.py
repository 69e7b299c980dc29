"""
Ingestion Pipeline

The engine's entry point: process(message) -> Outcome.

    ledger check -> parse -> write (transaction + ledger, atomically)
    -> budget cascade -> alerts

Not-financial, no-amount and already-processed are outcomes, not errors.
StoreUnavailable propagates so the caller can retry on the next cycle.
"""
import time
from typing import Callable, Iterable, List, Optional

from ..config import Settings
from ..errors import DuplicateMessage
from ..models import AlertEvent, Message, Outcome, OutcomeStatus
from .budget_cascade import BudgetCascade
from .currency import Converter
from .ledger import DuplicateGuard
from .parser import MessageParser
from .vocabulary import VocabularyCache
from .writer import TransactionWriter


class IngestionPipeline:
    """
    Wires parser, ledger, writer and budget cascade around one store
    """

    def __init__(self,
                 store,
                 settings: Optional[Settings] = None,
                 convert: Optional[Converter] = None,
                 on_alert: Optional[Callable[[AlertEvent], None]] = None):
        """
        Args:
            store: Persistence collaborator (see storage.base.Store)
            settings: Engine settings (default: Settings())
            convert: Currency conversion function for non-base amounts
            on_alert: Called once per budget alert (notification delivery)
        """
        self.store = store
        self.settings = settings or Settings()
        self.on_alert = on_alert

        self.vocabulary = VocabularyCache(store)
        self.parser = MessageParser(
            self.vocabulary,
            base_currency=self.settings.base_currency,
            screen_promotions=self.settings.screen_promotions,
        )
        self.guard = DuplicateGuard(store, record_rejected=self.settings.ledger_record_rejected)
        self.writer = TransactionWriter(
            store,
            base_currency=self.settings.base_currency,
            convert=convert,
            review_threshold=self.settings.review_threshold,
        )
        self.cascade = BudgetCascade(store, warning_threshold=self.settings.budget_warning_threshold)

        self.stats = {
            'total': 0,
            'created': 0,
            'not_financial': 0,
            'no_amount': 0,
            'already_processed': 0,
            'needs_review': 0,
            'alerts': 0,
        }

    def reload_vocabulary(self):
        """Pick up category/account/rule edits from the store"""
        self.vocabulary.reload()

    def _finish(self, outcome: Outcome) -> Outcome:
        self.stats[outcome.status.value] += 1
        return outcome

    def process(self, message: Message) -> Outcome:
        """
        Process one message

        Args:
            message: Raw SMS or email

        Returns:
            Outcome with the created transaction and alerts, if any

        Raises:
            StoreUnavailable: the store could not be reached
        """
        self.stats['total'] += 1

        if not self.guard.should_process(message.message_id):
            return self._finish(Outcome(message.message_id, OutcomeStatus.ALREADY_PROCESSED))

        status, parsed = self.parser.parse(message)

        if parsed is None:
            try:
                self.guard.mark_rejected(message)
            except DuplicateMessage:
                return self._finish(Outcome(message.message_id, OutcomeStatus.ALREADY_PROCESSED))
            return self._finish(Outcome(message.message_id, status))

        try:
            txn = self.writer.save(parsed, message)
        except DuplicateMessage:
            # Another run recorded this message between the check and the write
            return self._finish(Outcome(message.message_id, OutcomeStatus.ALREADY_PROCESSED))

        if txn.needs_review:
            self.stats['needs_review'] += 1

        alerts = self.cascade.apply_transaction(txn)
        for alert in alerts:
            self.stats['alerts'] += 1
            if self.on_alert:
                self.on_alert(alert)

        return self._finish(Outcome(message.message_id, OutcomeStatus.CREATED, txn, alerts))

    def process_batch(self,
                      messages: Iterable[Message],
                      batch_size: Optional[int] = None,
                      pause: Optional[float] = None) -> List[Outcome]:
        """
        Process messages in fixed-size chunks with a short pause between them

        Every message is committed on its own, so stopping between chunks
        leaves nothing half-written.

        Args:
            messages: Messages to process, in order
            batch_size: Chunk size (default: settings.batch_size)
            pause: Seconds between chunks (default: settings.batch_pause_seconds)

        Returns:
            One Outcome per message
        """
        messages = list(messages)
        batch_size = batch_size or self.settings.batch_size
        pause = self.settings.batch_pause_seconds if pause is None else pause

        outcomes = []
        total_batches = (len(messages) + batch_size - 1) // batch_size

        for i in range(0, len(messages), batch_size):
            batch = messages[i:i + batch_size]
            batch_num = i // batch_size + 1
            if total_batches > 1:
                print(f"   Batch {batch_num}/{total_batches} ({len(batch)} messages)...")

            outcomes.extend(self.process(message) for message in batch)

            if pause and batch_num < total_batches:
                time.sleep(pause)

        return outcomes

    def print_stats(self):
        """Print processing statistics"""
        total = self.stats['total']
        if total == 0:
            print("No messages processed yet")
            return

        print("\n" + "=" * 80)
        print("📊 INGESTION STATISTICS")
        print("=" * 80)
        print(f"Total messages: {total}")
        print(f"  ✅ Transactions created: {self.stats['created']} ({self.stats['created']/total*100:.1f}%)")
        print(f"  • Not financial: {self.stats['not_financial']}")
        print(f"  • No amount found: {self.stats['no_amount']}")
        print(f"  • Already processed: {self.stats['already_processed']}")
        print(f"\n📋 Review Status:")
        print(f"  • Needs review (<{self.settings.review_threshold*100:.0f}%): {self.stats['needs_review']}")
        if self.stats['alerts']:
            print(f"  ⚠️  Budget alerts: {self.stats['alerts']}")
        print("=" * 80)
