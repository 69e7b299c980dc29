"""
Extraction & classification engine

Filter, extractors, classifiers, rule engine, ledger, writer and budget
cascade, wired together by IngestionPipeline.
"""

# Expose main classes for easy imports
from .amount_extractor import extract_amount, extract_amount_and_currency
from .budget_cascade import BudgetCascade
from .category_classifier import classify
from .direction import classify_direction
from .ledger import DuplicateGuard
from .merchant_extractor import extract_merchant
from .message_filter import is_financial
from .pipeline import IngestionPipeline
from .rule_engine import RuleEngine
from .sanitizer import sanitize
from .writer import TransactionWriter

__all__ = [
    'extract_amount',
    'extract_amount_and_currency',
    'BudgetCascade',
    'classify',
    'classify_direction',
    'DuplicateGuard',
    'extract_merchant',
    'is_financial',
    'IngestionPipeline',
    'RuleEngine',
    'sanitize',
    'TransactionWriter',
]
