#!/usr/bin/env python3
"""
Budget report CLI

Prints the current budget summary, optionally after rebuilding every
budget's spent total from its transactions.
"""
import argparse
import sys

from txn_extractor.config import Settings
from txn_extractor.core.budget_cascade import BudgetCascade
from txn_extractor.errors import StoreUnavailable
from txn_extractor.storage.postgres import PostgresStore


def main():
    parser = argparse.ArgumentParser(description='Budget summary')
    parser.add_argument('--recalculate', action='store_true',
                        help='Recompute spent totals from transactions first')

    args = parser.parse_args()

    settings = Settings.from_env()
    store = PostgresStore(settings)
    cascade = BudgetCascade(store, warning_threshold=settings.budget_warning_threshold)

    try:
        if args.recalculate:
            print("🔄 Recalculating budgets...")
            cascade.recalculate_all()

        cascade.print_summary()

        stats = store.processing_stats()
        print(f"\nProcessed messages: {stats['total_processed']} "
              f"({stats['with_transactions']} with transactions)")
        if stats['last_processed']:
            print(f"Latest message: {stats['last_processed']:%Y-%m-%d %H:%M}")
    except StoreUnavailable as e:
        print(f"❌ Store unavailable: {e}")
        sys.exit(1)
    finally:
        store.close()


if __name__ == "__main__":
    main()
