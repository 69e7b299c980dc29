"""
Heuristic Confidence

Deterministic 0..1 score of how much a heuristically parsed transaction can
be trusted. Low scores flag the transaction for review; they never reject it.
"""
from decimal import Decimal

from ..models import DEFAULT_CATEGORY_NAMES, ParsedTransaction

BASE_CONFIDENCE = 0.3

HIGHLY_TRUSTED_SENDERS = [
    'gtbank', 'gcb-bank', 'uba-ghana', 'absa-bank', 'fidelity-bank',
    'mtn-momo', 'vodafone-cash', 'zprompt', 'hubtel',
]

CONFIDENCE_INDICATORS = [
    'transaction successful', 'payment received', 'payment sent',
    'debited', 'credited', 'current balance', 'available balance',
    'transaction id', 'ref:', 'acct:',
]

# Plausible (min, max) per currency
CURRENCY_BOUNDS = {
    'USD': (Decimal('0.1'), Decimal('50000')),
    'EUR': (Decimal('0.1'), Decimal('45000')),
    'GBP': (Decimal('0.1'), Decimal('40000')),
    'GHS': (Decimal('1'), Decimal('100000')),
    'NGN': (Decimal('50'), Decimal('50000000')),
    'ZAR': (Decimal('1'), Decimal('1000000')),
    'CAD': (Decimal('0.1'), Decimal('70000')),
    'AUD': (Decimal('0.1'), Decimal('75000')),
}

# Round figures typical of promotions
SUSPICIOUS_AMOUNTS = {
    'USD': [1, 5, 10, 20, 25, 50, 100],
    'EUR': [1, 5, 10, 20, 25, 50, 100],
    'GBP': [1, 5, 10, 20, 25, 50, 100],
    'GHS': [10, 20, 50, 100, 200, 500, 1000],
    'NGN': [100, 500, 1000, 2000, 5000, 10000],
    'ZAR': [10, 50, 100, 200, 500, 1000],
    'CAD': [1, 5, 10, 20, 25, 50, 100],
    'AUD': [1, 5, 10, 20, 25, 50, 100],
}

CURRENCY_SYMBOLS = {
    'USD': '$',
    'EUR': '€',
    'GBP': '£',
    'GHS': '₵',
    'NGN': '₦',
}

GENERIC_CATEGORIES = ['Other', *DEFAULT_CATEGORY_NAMES.values()]


def currency_mentioned(text: str, currency: str) -> bool:
    symbol = CURRENCY_SYMBOLS.get(currency)
    return currency.lower() in text or bool(symbol and symbol in text)


def score_confidence(parsed: ParsedTransaction, text: str, sender: str) -> float:
    """
    Score a parsed transaction

    Args:
        parsed: Result of the heuristic path
        text: Message text
        sender: Sender address or short code

    Returns:
        Confidence clamped to [0, 1]
    """
    text = (text or '').lower()
    sender = (sender or '').lower()
    confidence = BASE_CONFIDENCE

    if any(trusted in sender for trusted in HIGHLY_TRUSTED_SENDERS):
        confidence += 0.2

    matches = sum(1 for indicator in CONFIDENCE_INDICATORS if indicator in text)
    confidence += min(matches * 0.1, 0.3)

    low, high = CURRENCY_BOUNDS.get(parsed.currency, CURRENCY_BOUNDS['GHS'])
    if low <= parsed.amount <= high:
        confidence += 0.1
    else:
        confidence -= 0.2

    suspicious = SUSPICIOUS_AMOUNTS.get(parsed.currency, SUSPICIOUS_AMOUNTS['GHS'])
    if parsed.amount in [Decimal(value) for value in suspicious]:
        confidence -= 0.15

    if currency_mentioned(text, parsed.currency):
        confidence += 0.1

    if parsed.merchant:
        confidence += 0.05
    if parsed.account:
        confidence += 0.05

    if parsed.category in GENERIC_CATEGORIES:
        confidence -= 0.1

    if len(parsed.description) > 20 and '*' not in parsed.description:
        confidence += 0.05

    return round(max(0.0, min(1.0, confidence)), 2)
