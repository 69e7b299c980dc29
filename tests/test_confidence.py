from datetime import datetime
from decimal import Decimal

import pytest

from txn_extractor.core.confidence import score_confidence
from txn_extractor.models import Direction, ParsedTransaction

SHOPRITE_TEXT = "GHS 500.00 has been debited from your account ending 1234 at SHOPRITE"


def make_parsed(amount="500.00", currency="GHS", merchant="SHOPRITE", account=None,
                category="Shopping", description=SHOPRITE_TEXT):
    return ParsedTransaction(
        amount=Decimal(amount),
        currency=currency,
        description=description,
        direction=Direction.EXPENSE,
        category=category,
        occurred_at=datetime(2025, 3, 14),
        raw_text=description,
        merchant=merchant,
        account=account,
    )


def test_trusted_bank_debit():
    assert score_confidence(make_parsed(), SHOPRITE_TEXT, "GCB-BANK") == pytest.approx(0.75)


def test_unknown_sender_scores_lower():
    trusted = score_confidence(make_parsed(), SHOPRITE_TEXT, "GCB-BANK")
    unknown = score_confidence(make_parsed(), SHOPRITE_TEXT, "+233244000000")
    assert unknown == pytest.approx(trusted - 0.2)


def test_round_amount_is_penalized():
    odd = score_confidence(make_parsed("512.40"), SHOPRITE_TEXT, "GCB-BANK")
    round_ = score_confidence(make_parsed("500.00"), SHOPRITE_TEXT, "GCB-BANK")
    assert odd > round_


def test_generic_category_is_penalized():
    specific = score_confidence(make_parsed(), SHOPRITE_TEXT, "GCB-BANK")
    generic = score_confidence(make_parsed(category="Other Expense"), SHOPRITE_TEXT, "GCB-BANK")
    assert generic == pytest.approx(specific - 0.1)


def test_score_is_clamped():
    weak = make_parsed("9000000", merchant=None, category="Other", description="x")
    assert score_confidence(weak, "x", "") == 0.0


def test_income_fallback_category_is_penalized():
    salary = make_parsed("1234.56", category="Salary")
    other = make_parsed("1234.56", category="Other Income")
    salary.direction = other.direction = Direction.INCOME
    assert score_confidence(other, SHOPRITE_TEXT, "GCB-BANK") == pytest.approx(
        score_confidence(salary, SHOPRITE_TEXT, "GCB-BANK") - 0.1)
