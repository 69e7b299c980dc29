from datetime import date, datetime
from decimal import Decimal
from itertools import permutations

from txn_extractor.core.budget_cascade import BudgetCascade, evaluate_budget
from txn_extractor.models import (
    AlertKind,
    Budget,
    Direction,
    ProcessedMessage,
    Source,
    Transaction,
)
from txn_extractor.storage.memory import InMemoryStore


def make_txn(amount, category="Shopping", direction=Direction.EXPENSE,
             occurred_at=datetime(2025, 3, 14, 10, 30), txn_id="txn-1"):
    return Transaction(
        txn_id=txn_id,
        amount=Decimal(amount),
        description="test",
        category=category,
        direction=direction,
        source=Source.SMS,
        occurred_at=occurred_at,
        currency="GHS",
    )


def make_budget(budget_id="b-shopping", category="Shopping", amount="1000", spent="0", **kwargs):
    return Budget(
        budget_id=budget_id,
        name=category,
        category=category,
        amount=Decimal(amount),
        start_date=date(2025, 3, 1),
        end_date=date(2025, 3, 31),
        spent=Decimal(spent),
        **kwargs,
    )


def test_exceeded_alert_carries_overspend():
    store = InMemoryStore(budgets=[make_budget(spent="500")])
    cascade = BudgetCascade(store)

    alerts = cascade.apply_transaction(make_txn("600"))

    assert store.get_budget("b-shopping").spent == Decimal("1100")
    assert len(alerts) == 1
    assert alerts[0].kind == AlertKind.EXCEEDED
    assert alerts[0].value == Decimal("100")
    assert alerts[0].render()[0] == "🚨 Budget Exceeded"


def test_no_alert_below_threshold():
    store = InMemoryStore(budgets=[make_budget()])
    assert BudgetCascade(store).apply_transaction(make_txn("500")) == []
    assert store.get_budget("b-shopping").spent == Decimal("500")


def test_warning_alert_carries_percentage():
    store = InMemoryStore(budgets=[make_budget()])
    alerts = BudgetCascade(store).apply_transaction(make_txn("850"))

    assert [a.kind for a in alerts] == [AlertKind.WARNING]
    assert alerts[0].value == Decimal("85")
    assert "85%" in alerts[0].render()[1]


def test_warning_threshold_is_configurable():
    store = InMemoryStore(budgets=[make_budget()])
    assert BudgetCascade(store, warning_threshold=Decimal("0.90")).apply_transaction(make_txn("850")) == []


def test_spent_exactly_at_amount_is_a_warning():
    alert = evaluate_budget(make_budget(), Decimal("1000"))
    assert alert.kind == AlertKind.WARNING
    assert alert.value == Decimal("100")


def test_percentage_rounds_half_up():
    alert = evaluate_budget(make_budget(amount="200"), Decimal("161"))
    assert alert.value == Decimal("81")


def test_income_does_not_touch_budgets():
    store = InMemoryStore(budgets=[make_budget(category="Salary")])
    alerts = BudgetCascade(store).apply_transaction(make_txn("5000", "Salary", Direction.INCOME))
    assert alerts == []
    assert store.get_budget("b-shopping").spent == Decimal("0")


def test_out_of_period_and_inactive_budgets_are_ignored():
    april = Budget(
        budget_id="b-april",
        name="Shopping April",
        category="Shopping",
        amount=Decimal("1000"),
        start_date=date(2025, 4, 1),
        end_date=date(2025, 4, 30),
    )
    inactive = make_budget(budget_id="b-old", is_active=False)
    other = make_budget(budget_id="b-food", category="Food & Dining")
    store = InMemoryStore(budgets=[april, inactive, other])

    BudgetCascade(store).apply_transaction(make_txn("100"))

    assert store.get_budget("b-april").spent == Decimal("0")
    assert store.get_budget("b-old").spent == Decimal("0")
    assert store.get_budget("b-food").spent == Decimal("0")


def test_period_bounds_are_inclusive():
    store = InMemoryStore(budgets=[make_budget()])
    cascade = BudgetCascade(store)
    cascade.apply_transaction(make_txn("10", occurred_at=datetime(2025, 3, 1, 0, 0)))
    cascade.apply_transaction(make_txn("10", occurred_at=datetime(2025, 3, 31, 23, 59)))
    assert store.get_budget("b-shopping").spent == Decimal("20")


class FlakyStore(InMemoryStore):
    def increment_budget_spent(self, budget_id, amount):
        if budget_id == "b-broken":
            raise RuntimeError("write failed")
        return super().increment_budget_spent(budget_id, amount)


def test_failing_budget_does_not_block_others(capsys):
    store = FlakyStore(budgets=[make_budget(budget_id="b-broken"), make_budget(budget_id="b-ok")])

    BudgetCascade(store).apply_transaction(make_txn("100"))

    assert store.get_budget("b-ok").spent == Decimal("100")
    assert "Budget update failed" in capsys.readouterr().out


def _record(store, txn):
    entry = ProcessedMessage(
        entry_id=f"pm-{txn.txn_id}",
        message_id=f"m-{txn.txn_id}",
        sender="GCB-BANK",
        body="",
        message_timestamp=txn.occurred_at,
    )
    store.record_message(entry, txn)


def test_recalculation_matches_incremental_application():
    txns = [
        make_txn("120.50", txn_id="t1"),
        make_txn("79.50", txn_id="t2", occurred_at=datetime(2025, 3, 2)),
        make_txn("300", txn_id="t3", occurred_at=datetime(2025, 3, 30)),
        make_txn("999", txn_id="t4", occurred_at=datetime(2025, 4, 2)),
        make_txn("50", txn_id="t5", direction=Direction.INCOME),
    ]

    for order in permutations(txns):
        store = InMemoryStore(budgets=[make_budget()])
        cascade = BudgetCascade(store)
        for txn in order:
            _record(store, txn)
            cascade.apply_transaction(txn)

        incremental = store.get_budget("b-shopping").spent
        assert incremental == Decimal("500.00")
        assert cascade.recalculate_budget(store.get_budget("b-shopping")) == incremental


def test_recalculate_all_repairs_drift():
    store = InMemoryStore(budgets=[make_budget(spent="42")])
    _record(store, make_txn("10"))

    assert BudgetCascade(store).recalculate_all() == {"b-shopping": Decimal("10")}
    assert store.get_budget("b-shopping").spent == Decimal("10")


def test_budget_summary():
    store = InMemoryStore(budgets=[
        make_budget(budget_id="b1", amount="1000", spent="1100"),
        make_budget(budget_id="b2", category="Food & Dining", amount="1000", spent="300"),
    ])
    summary = BudgetCascade(store).budget_summary(today=date(2025, 3, 15))

    assert summary["total_budget"] == Decimal("2000")
    assert summary["total_spent"] == Decimal("1400")
    assert summary["remaining_budget"] == Decimal("600")
    assert summary["percentage_used"] == Decimal("70")
    assert summary["active_budgets"] == 2
    assert summary["exceeded_budgets"] == 1


def test_budget_summary_outside_any_period():
    store = InMemoryStore(budgets=[make_budget()])
    summary = BudgetCascade(store).budget_summary(today=date(2025, 6, 1))
    assert summary["active_budgets"] == 0
    assert summary["percentage_used"] == Decimal("0")


def test_category_spending_sorted_by_usage():
    store = InMemoryStore(budgets=[
        make_budget(budget_id="b1", amount="1000", spent="100"),
        make_budget(budget_id="b2", category="Food & Dining", amount="100", spent="90"),
    ])
    rows = BudgetCascade(store).category_spending(today=date(2025, 3, 15))
    assert [r["category"] for r in rows] == ["Food & Dining", "Shopping"]
    assert rows[0]["transaction_count"] == 0
