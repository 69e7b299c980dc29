"""
Duplicate Guard

The processed-message ledger keyed by source message id. should_process is
the cheap early check; the store's atomic record_message is what actually
guarantees at most one transaction per message id.
"""
import uuid

from ..models import Message, ProcessedMessage


def new_entry(message: Message) -> ProcessedMessage:
    """Ledger entry for a message (transaction link filled in by the store)"""
    return ProcessedMessage(
        entry_id=f"pm_{uuid.uuid4().hex[:16]}",
        message_id=message.message_id,
        sender=message.sender,
        body=message.body,
        message_timestamp=message.timestamp,
    )


class DuplicateGuard:
    """
    Ledger lookups and rejected-message bookkeeping
    """

    def __init__(self, store, record_rejected: bool = True):
        """
        Args:
            store: Persistence collaborator
            record_rejected: Write ledger entries (without a transaction) for
                messages rejected as not financial or amount-less
        """
        self.store = store
        self.record_rejected = record_rejected

    def should_process(self, message_id: str) -> bool:
        return not self.store.has_processed(message_id)

    def mark_rejected(self, message: Message) -> bool:
        """
        Record a rejected message so later syncs skip it

        Returns:
            True if an entry was written
        """
        if not self.record_rejected:
            return False
        self.store.record_message(new_entry(message))
        return True
