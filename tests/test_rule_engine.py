from decimal import Decimal

import pytest

from txn_extractor.core.rule_engine import RuleEngine, compile_rule
from txn_extractor.errors import RuleCompilationError
from txn_extractor.models import Account, Category, Direction, ExtractionRule

BILLS = Category("bills", "Bills & Utilities", Direction.EXPENSE, ("ecg",))
SALARY = Category("salary", "Salary", Direction.INCOME, ("salary",))
GCB = Account("a1", "GCB Current", ("gcb",))

ECG_RULE = ExtractionRule(
    rule_id="r-ecg",
    name="ECG prepaid",
    pattern=r"ECG.*?GHS\s*([\d,.]+)",
    amount_group="1",
    category_id="bills",
    account_id="a1",
)


def make_engine(*rules):
    engine = RuleEngine(default_currency="GHS")
    engine.load_rules(rules)
    return engine


def test_rule_binds_category_and_account():
    engine = make_engine(ECG_RULE)
    parsed = engine.match("ECG prepaid purchase of GHS 50.00 successful", [BILLS], [GCB])

    assert parsed.amount == Decimal("50.00")
    assert parsed.currency == "GHS"
    assert parsed.category == "Bills & Utilities"
    assert parsed.direction == Direction.EXPENSE
    assert parsed.account == "GCB Current"
    assert parsed.matched_rule_id == "r-ecg"
    assert parsed.confidence == 1.0
    assert engine.stats["matches"] == 1
    assert engine.stats["by_rule"] == {"ECG prepaid": 1}


def test_named_groups():
    rule = ExtractionRule(
        rule_id="r-in",
        name="Incoming",
        pattern=r"received (?P<amt>[\d,.]+) from (?P<who>[A-Z ]+)",
        amount_group="amt",
        merchant_group="who",
        category_id="salary",
    )
    parsed = make_engine(rule).match("You received 2,000.00 from KOFI MENSAH", [SALARY])

    assert parsed.amount == Decimal("2000.00")
    assert parsed.merchant == "KOFI MENSAH"
    assert parsed.direction == Direction.INCOME
    assert parsed.category == "Salary"


def test_amount_group_falls_back_to_named_amount():
    rule = ExtractionRule(
        rule_id="r1",
        name="Fallback",
        pattern=r"paid (?P<amount>[\d.]+)",
        amount_group="9",
        category_id="bills",
    )
    parsed = make_engine(rule).match("You paid 15.00 for data", [BILLS])
    assert parsed.amount == Decimal("15.00")


def test_missing_category_uses_rule_category_id():
    parsed = make_engine(ECG_RULE).match("ECG token GHS 20.00")
    assert parsed.category == "bills"
    assert parsed.direction == Direction.EXPENSE
    assert parsed.account == "a1"


def test_invalid_pattern_is_skipped():
    broken = ExtractionRule("r-bad", "Broken", r"(unclosed", "1", "bills", priority=1)
    engine = make_engine(broken, ECG_RULE)

    parsed = engine.match("ECG prepaid purchase of GHS 50.00", [BILLS])
    assert parsed.matched_rule_id == "r-ecg"
    assert engine.stats["invalid_rules"] == 1

    # Compiled once, reported once
    engine.match("ECG prepaid purchase of GHS 10.00", [BILLS])
    assert engine.stats["invalid_rules"] == 1


def test_compile_rule_raises():
    broken = ExtractionRule("r-bad", "Broken", r"[", "1", "bills")
    with pytest.raises(RuleCompilationError):
        compile_rule(broken)


def test_invalid_amount_is_no_match():
    rule = ExtractionRule("r-bal", "Balance", r"balance (\S+)", "1", "bills")
    engine = make_engine(rule)
    assert engine.match("Your balance n/a", [BILLS]) is None
    assert engine.match("Your balance 0.00", [BILLS]) is None
    assert engine.stats["no_match"] == 2


def test_priority_order():
    low = ExtractionRule("r-b", "Low", r"GHS\s*([\d.]+)", "1", "bills", priority=10)
    high = ExtractionRule("r-a", "High", r"GHS\s*([\d.]+)", "1", "salary", priority=5)
    parsed = make_engine(low, high).match("GHS 10.00", [BILLS, SALARY])
    assert parsed.matched_rule_id == "r-a"


def test_equal_priority_orders_by_rule_id():
    second = ExtractionRule("r-2", "Second", r"GHS\s*([\d.]+)", "1", "bills")
    first = ExtractionRule("r-1", "First", r"GHS\s*([\d.]+)", "1", "bills")
    parsed = make_engine(second, first).match("GHS 10.00", [BILLS])
    assert parsed.matched_rule_id == "r-1"


def test_inactive_rules_are_not_loaded():
    inactive = ExtractionRule("r-x", "Off", r"GHS\s*([\d.]+)", "1", "bills", is_active=False)
    engine = make_engine(inactive)
    assert engine.rules == []
    assert engine.match("GHS 10.00") is None
