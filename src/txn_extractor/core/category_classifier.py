"""
Category Classifier

Keyword scoring against the category vocabulary of one direction.
Mobile-money style transfers are routed straight to a "Transfers"
category before scoring.
"""
from typing import Iterable, List, Optional

from ..models import DEFAULT_CATEGORY_NAMES, Category, Direction, placeholder_category

# Markers of person-to-person / wallet transfers
TRANSFER_SENDER_MARKERS = ['momo']
TRANSFER_TEXT_MARKERS = [
    'mobile money', 'payment received', 'payment sent', 'has sent you',
    'sent you', 'via hbtl.co', 'hubtel',
]

LONG_KEYWORD_LENGTH = 5
LONG_KEYWORD_BONUS = 0.5
PHRASE_BONUS = 1.0


def is_transfer(text: str, sender: Optional[str] = None) -> bool:
    sender = (sender or '').lower()
    if any(marker in sender for marker in TRANSFER_SENDER_MARKERS):
        return True
    return any(marker in text for marker in TRANSFER_TEXT_MARKERS)


def score_category(category: Category, text: str, merchant: str) -> float:
    """
    Score a category's keywords against the message

    Each keyword found in the text or merchant counts 1, keywords longer
    than 5 characters get +0.5, multi-word keywords found verbatim in the
    text get +1.
    """
    score = 0.0
    for keyword in category.keywords:
        keyword = keyword.lower()
        if not keyword:
            continue
        if keyword in text or keyword in merchant:
            score += 1
            if len(keyword) > LONG_KEYWORD_LENGTH:
                score += LONG_KEYWORD_BONUS
            if ' ' in keyword and keyword in text:
                score += PHRASE_BONUS
    return score


def default_category(direction: Direction, categories: Iterable[Category]) -> Category:
    """'Other Income'/'Other Expense' from the store, else an in-memory placeholder"""
    name = DEFAULT_CATEGORY_NAMES[direction]
    for category in categories:
        if category.direction == direction and category.name == name:
            return category
    return placeholder_category(direction)


def classify(text: str,
             merchant: Optional[str],
             direction: Direction,
             categories: Iterable[Category],
             sender: Optional[str] = None) -> Category:
    """
    Pick the category for a transaction

    Args:
        text: Message text
        merchant: Extracted merchant, if any
        direction: Income or expense; only categories of this direction compete
        categories: Category vocabulary in store order
        sender: Sender, used by the transfer override

    Returns:
        Best scoring category; ties keep the first one encountered
    """
    text = (text or '').lower()
    merchant = (merchant or '').lower()
    categories = list(categories)
    candidates: List[Category] = [c for c in categories if c.direction == direction]

    if is_transfer(text, sender):
        for category in candidates:
            if 'transfer' in category.name.lower():
                return category

    best_match = None
    best_score = 0.0
    for category in candidates:
        score = score_category(category, text, merchant)
        if score > best_score:
            best_score = score
            best_match = category

    return best_match or default_category(direction, categories)
