#!/usr/bin/env python3
"""
Message import CLI

Runs an exported SMS/email CSV (id,sender,body,subject,timestamp) through
the ingestion pipeline. Re-importing the same file creates nothing new.
"""
import argparse
import sys
from pathlib import Path

from txn_extractor.config import Settings
from txn_extractor.core.currency import StaticRateConverter
from txn_extractor.core.message_reader import read_messages
from txn_extractor.core.pipeline import IngestionPipeline
from txn_extractor.core.vocabulary import load_default_categories
from txn_extractor.errors import ConfigurationError, StoreUnavailable
from txn_extractor.models import AlertEvent, Source
from txn_extractor.storage.memory import InMemoryStore
from txn_extractor.storage.postgres import PostgresStore


def print_alert(alert: AlertEvent):
    title, body = alert.render()
    print(f"   {title}: {body}")


def main():
    """Main import function"""
    parser = argparse.ArgumentParser(description='Import exported SMS/email messages')
    parser.add_argument('csv_file', help='Path to message CSV (id,sender,body,subject,timestamp)')
    parser.add_argument('--source', choices=['sms', 'email', 'auto'], default='auto',
                        help='Message source (default: email if a subject is present)')
    parser.add_argument('--base-currency', help='Override BASE_CURRENCY')
    parser.add_argument('--dry-run', action='store_true',
                        help='Parse against an in-memory store with default categories')

    args = parser.parse_args()

    csv_path = Path(args.csv_file)
    if not csv_path.exists():
        print(f"❌ File not found: {csv_path}")
        sys.exit(1)

    try:
        settings = Settings.from_env(base_currency=args.base_currency)
    except ConfigurationError as e:
        print(f"❌ {e}")
        sys.exit(1)

    print("=" * 80)
    print("📥 MESSAGE IMPORT")
    print("=" * 80)
    print(f"CSV File: {csv_path}")
    print(f"Source: {args.source}")
    print(f"Base Currency: {settings.base_currency}")
    print(f"Dry Run: {args.dry_run}")
    print("=" * 80)

    source = None if args.source == 'auto' else Source(args.source)
    print(f"\n📄 Reading messages...")
    try:
        messages = read_messages(csv_path, source)
    except (KeyError, ValueError) as e:
        print(f"   ❌ Could not read {csv_path}: {e}")
        sys.exit(1)
    print(f"   ✅ Read {len(messages)} messages")

    if args.dry_run:
        store = InMemoryStore(categories=load_default_categories())
    else:
        store = PostgresStore(settings)

    pipeline = IngestionPipeline(
        store,
        settings=settings,
        convert=StaticRateConverter(),
        on_alert=print_alert,
    )

    print(f"\n🏷️  Processing {len(messages)} messages...")
    try:
        outcomes = pipeline.process_batch(messages)
    except StoreUnavailable as e:
        print(f"\n❌ Store unavailable: {e}")
        print("Nothing after the last committed message was written; re-run the import to resume.")
        sys.exit(1)
    finally:
        store.close()

    pipeline.print_stats()
    pipeline.parser.rule_engine.print_stats()

    created = [o for o in outcomes if o.created]
    print(f"\n📋 Sample Results (first 10):")
    for i, outcome in enumerate(created[:10], 1):
        txn = outcome.transaction
        status = "✅" if not txn.needs_review else "⚠️ "
        merchant = txn.merchant or '-'
        print(f"{status} {i:2d}. {merchant:<30} → {txn.category} ({txn.direction.value})")
        print(f"       {txn.currency} {txn.amount:>10,.2f}  {txn.occurred_at:%Y-%m-%d %H:%M}")

    if len(created) > 10:
        print(f"       ... and {len(created) - 10} more")

    if args.dry_run:
        print(f"\n🔍 DRY RUN - Nothing written to the database")

    print("\n" + "=" * 80)
    print("✅ Import complete!")
    print("=" * 80)


if __name__ == "__main__":
    main()
