"""
Budget Cascade

Keeps budget spent totals in step with new expense transactions and raises
threshold alerts. Spent is a cache: recalculate_budget rebuilds it from the
transactions in the budget's period.
"""
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Optional

from ..models import AlertEvent, AlertKind, Budget, Direction, Transaction


def evaluate_budget(budget: Budget,
                    spent: Decimal,
                    warning_threshold: Decimal = Decimal('0.80')) -> Optional[AlertEvent]:
    """
    Alert for a budget at a given spent total

    Args:
        budget: Budget being checked
        spent: Spent total after the transaction
        warning_threshold: Ratio at which a warning fires

    Returns:
        EXCEEDED with the overspend, WARNING with the rounded percentage,
        or None
    """
    if spent > budget.amount:
        return AlertEvent(
            kind=AlertKind.EXCEEDED,
            budget_id=budget.budget_id,
            budget_name=budget.name,
            value=spent - budget.amount,
        )

    if budget.amount > 0 and spent / budget.amount >= warning_threshold:
        percentage = (spent / budget.amount * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
        return AlertEvent(
            kind=AlertKind.WARNING,
            budget_id=budget.budget_id,
            budget_name=budget.name,
            value=percentage,
        )

    return None


class BudgetCascade:
    """
    Applies transactions to budgets
    """

    def __init__(self, store, warning_threshold: Decimal = Decimal('0.80')):
        self.store = store
        self.warning_threshold = Decimal(str(warning_threshold))

    def apply_transaction(self, txn: Transaction) -> List[AlertEvent]:
        """
        Add an expense to every active budget of its category covering its date

        A failure on one budget is reported and skipped; the others are
        still updated. A failed budget lookup is reported and yields no alerts.

        Returns:
            Alerts raised (empty when none)
        """
        if txn.direction != Direction.EXPENSE:
            return []

        try:
            budgets = self.store.get_budgets_for(txn.category, txn.occurred_at.date())
        except Exception as e:
            # The transaction is already committed; recalculate_budget repairs spent later
            print(f"⚠️  Budget lookup failed for {txn.category} ({txn.txn_id}): {e}")
            return []

        alerts = []
        for budget in budgets:
            try:
                spent = self.store.increment_budget_spent(budget.budget_id, txn.amount)
                alert = evaluate_budget(budget, Decimal(spent), self.warning_threshold)
            except Exception as e:
                print(f"⚠️  Budget update failed for {budget.name} ({budget.budget_id}): {e}")
                continue
            if alert:
                alerts.append(alert)

        return alerts

    def recalculate_budget(self, budget: Budget) -> Decimal:
        """
        Rebuild a budget's spent total from its transactions

        Returns:
            The recomputed spent value
        """
        spent = self.store.sum_expenses(budget.category, budget.start_date, budget.end_date)
        self.store.set_budget_spent(budget.budget_id, spent)
        return spent

    def recalculate_all(self) -> Dict[str, Decimal]:
        """Recompute every active budget; returns spent per budget id"""
        results = {}
        for budget in self.store.get_budgets():
            results[budget.budget_id] = self.recalculate_budget(budget)
        print(f"✅ Recalculated {len(results)} budgets")
        return results

    def current_budgets(self, today: Optional[date] = None) -> List[Budget]:
        today = today or date.today()
        return [b for b in self.store.get_budgets() if b.covers(today)]

    def budget_summary(self, today: Optional[date] = None) -> Dict:
        """
        Totals over the budgets whose period contains today

        Returns:
            Dict with total_budget, total_spent, remaining_budget,
            percentage_used, active_budgets and exceeded_budgets
        """
        budgets = self.current_budgets(today)
        total_budget = sum((b.amount for b in budgets), Decimal('0'))
        total_spent = sum((b.spent for b in budgets), Decimal('0'))
        percentage_used = total_spent / total_budget * 100 if total_budget > 0 else Decimal('0')

        return {
            'total_budget': total_budget,
            'total_spent': total_spent,
            'remaining_budget': total_budget - total_spent,
            'percentage_used': percentage_used,
            'active_budgets': len(budgets),
            'exceeded_budgets': sum(1 for b in budgets if b.spent > b.amount),
        }

    def category_spending(self, today: Optional[date] = None) -> List[Dict]:
        """Per-budget spending, most used first"""
        rows = []
        for budget in self.current_budgets(today):
            used = budget.spent / budget.amount * 100 if budget.amount > 0 else Decimal('0')
            rows.append({
                'category': budget.category,
                'budgeted': budget.amount,
                'spent': budget.spent,
                'remaining': budget.amount - budget.spent,
                'percentage_used': used,
                'is_exceeded': budget.spent > budget.amount,
                'transaction_count': self.store.count_expenses(
                    budget.category, budget.start_date, budget.end_date),
            })
        return sorted(rows, key=lambda r: r['percentage_used'], reverse=True)

    def print_summary(self, today: Optional[date] = None):
        summary = self.budget_summary(today)

        print("\n" + "=" * 80)
        print("📊 BUDGET SUMMARY")
        print("=" * 80)
        print(f"Active budgets: {summary['active_budgets']}")
        print(f"Total budget:   {summary['total_budget']:,.2f}")
        print(f"Total spent:    {summary['total_spent']:,.2f} ({summary['percentage_used']:.1f}%)")
        print(f"Remaining:      {summary['remaining_budget']:,.2f}")
        if summary['exceeded_budgets']:
            print(f"  🚨 Exceeded: {summary['exceeded_budgets']}")

        for row in self.category_spending(today):
            status = "🚨" if row['is_exceeded'] else "✅"
            print(f"  {status} {row['category']:<25} {row['spent']:>12,.2f} / {row['budgeted']:>12,.2f} "
                  f"({row['percentage_used']:.0f}%, {row['transaction_count']} txns)")
        print("=" * 80)
