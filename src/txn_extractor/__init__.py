"""
Transaction Extractor

Turns bank/mobile-money SMS and email receipts into categorized
transactions, at most one per source message, and keeps budgets in step.
"""

__version__ = "1.0.0"

# Expose main classes for easy imports
from .config import Settings
from .core.pipeline import IngestionPipeline
from .models import Message, Outcome, OutcomeStatus
from .storage import InMemoryStore, PostgresStore

__all__ = [
    'Settings',
    'IngestionPipeline',
    'Message',
    'Outcome',
    'OutcomeStatus',
    'InMemoryStore',
    'PostgresStore',
]
