"""
Direction Classifier

Income vs. expense. Loan context is resolved first, then an ordered list of
high-precision phrases (first hit wins), then a scoring pass over generic
keywords where expense wins ties.
"""
from typing import Dict, List, Tuple

from ..models import Direction

# Checked in order; the first phrase present decides
STRONG_INDICATORS: List[Tuple[str, Direction]] = [
    ('payment received', Direction.INCOME),
    ('money received', Direction.INCOME),
    ('received for', Direction.INCOME),
    ('credited', Direction.INCOME),
    ('has sent you', Direction.INCOME),
    ('sent you', Direction.INCOME),
    ('you received', Direction.INCOME),
    ('received from', Direction.INCOME),
    ('salary', Direction.INCOME),
    ('refund', Direction.INCOME),
    ('cashback', Direction.INCOME),
    ('type: credit', Direction.INCOME),
    ('credit alert', Direction.INCOME),
    ('deposit successful', Direction.INCOME),
    ('transfer received', Direction.INCOME),
    ('cash deposit', Direction.INCOME),
    ('payment sent', Direction.EXPENSE),
    ('money sent', Direction.EXPENSE),
    ('debited', Direction.EXPENSE),
    ('withdraw', Direction.EXPENSE),
    ('spent', Direction.EXPENSE),
    ('charged', Direction.EXPENSE),
    ('purchase', Direction.EXPENSE),
    ('type: debit', Direction.EXPENSE),
    ('debit alert', Direction.EXPENSE),
    ('pos transaction', Direction.EXPENSE),
    ('bill payment', Direction.EXPENSE),
    ('utility payment', Direction.EXPENSE),
    ('subscription fee', Direction.EXPENSE),
    ('transfer sent', Direction.EXPENSE),
    ('payment made', Direction.EXPENSE),
]

GENERAL_KEYWORDS: Dict[Direction, List[str]] = {
    Direction.INCOME: ['credit', 'deposit', 'received', 'transfer for', 'into your account'],
    Direction.EXPENSE: ['debit', 'payment', 'transfer to', 'from your account'],
}

# Weighted phrases that add to the general score
CONTEXT_PHRASES: Dict[Direction, List[Tuple[str, float]]] = {
    Direction.INCOME: [
        ('money into', 2),
        ('received from', 2),
        ('sent to you', 2),
        ('credit to', 1.5),
        ('deposit into', 1.5),
        ('balance increased', 1),
    ],
    Direction.EXPENSE: [
        ('money from', 2),
        ('sent from', 2),
        ('payment to', 2),
        ('debit from', 1.5),
        ('withdrawn from', 1.5),
        ('balance reduced', 1),
    ],
}

LOAN_KEYWORDS = [
    'loan', 'credit facility', 'overdraft', 'advance', 'financing',
    'disbursement', 'disbursed', 'facility', 'credit line',
]

LOAN_RECEIPT_INDICATORS = [
    'loan was paid into', 'loan of', 'loan disbursement', 'loan credited',
    'amount disbursed', 'disbursed to', 'loan facility approved', 'loan proceeds',
    'disbursement successful', 'funded by', 'loan amount credited',
    'advance payment received',
]

LOAN_PAYMENT_INDICATORS = [
    'loan payment', 'loan repayment', 'installment payment', 'emi payment',
    'loan installment', 'monthly payment', 'repay loan', 'loan due',
    'payment towards loan', 'loan settlement', 'principal payment',
    'interest payment', 'loan servicing',
]


def loan_direction(text: str):
    """
    Resolve direction for loan messages

    Returns:
        Direction.INCOME for disbursements, Direction.EXPENSE for
        repayments, None if the text is not about a loan or is ambiguous
    """
    if not any(keyword in text for keyword in LOAN_KEYWORDS):
        return None

    if any(indicator in text for indicator in LOAN_RECEIPT_INDICATORS):
        return Direction.INCOME
    if any(indicator in text for indicator in LOAN_PAYMENT_INDICATORS):
        return Direction.EXPENSE

    if 'credited' in text or 'received' in text:
        return Direction.INCOME
    if 'debited' in text or 'paid' in text:
        return Direction.EXPENSE
    return None


def strong_direction(text: str):
    for phrase, direction in STRONG_INDICATORS:
        if phrase in text:
            return direction
    return None


def direction_scores(text: str) -> Dict[Direction, float]:
    """General keyword counts plus weighted context phrases"""
    scores = {}
    for direction, keywords in GENERAL_KEYWORDS.items():
        score = float(sum(1 for keyword in keywords if keyword in text))
        score += sum(weight for phrase, weight in CONTEXT_PHRASES[direction] if phrase in text)
        scores[direction] = score
    return scores


def classify_direction(text: str) -> Direction:
    """
    Classify a message as income or expense

    Args:
        text: Message text

    Returns:
        Direction; expense when the evidence is tied or absent
    """
    text = (text or '').lower()

    direction = loan_direction(text)
    if direction:
        return direction

    direction = strong_direction(text)
    if direction:
        return direction

    scores = direction_scores(text)
    if scores[Direction.INCOME] > scores[Direction.EXPENSE]:
        return Direction.INCOME
    return Direction.EXPENSE
