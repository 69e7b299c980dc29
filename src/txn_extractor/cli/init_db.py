#!/usr/bin/env python3
"""
Database initialization script

Creates the schema and seeds the default categories.
"""
import sys
from pathlib import Path

from txn_extractor.config import Settings
from txn_extractor.core.vocabulary import load_default_categories
from txn_extractor.errors import StoreUnavailable
from txn_extractor.storage.postgres import PostgresStore
from txn_extractor.utils.db_connection import get_db_connection


def run_sql_file(conn, sql_file: Path, description: str):
    """Execute a SQL file"""
    print(f"\n📄 {description}")
    print(f"   File: {sql_file}")

    with open(sql_file, 'r') as f:
        sql = f.read()

    cursor = conn.cursor()
    try:
        cursor.execute(sql)
        conn.commit()
        print(f"   ✅ Success")
    except Exception as e:
        conn.rollback()
        print(f"   ❌ Error: {e}")
        raise
    finally:
        cursor.close()


def seed_categories(store: PostgresStore):
    """Insert the default categories unless categories already exist"""
    print(f"\n📚 Seeding default categories")

    if store.get_categories():
        print(f"   ⚠️  Categories already exist, skipping")
        return

    categories = load_default_categories()
    for category in categories:
        store.save_category(category)

    print(f"   ✅ Loaded {len(categories)} categories")


def print_summary(store: PostgresStore):
    """Print database summary"""
    stats = store.processing_stats()

    print("\n" + "=" * 80)
    print("📊 DATABASE SUMMARY")
    print("=" * 80)
    print(f"Categories: {len(store.get_categories())}")
    print(f"Accounts: {len(store.get_accounts())}")
    print(f"Extraction rules: {len(store.get_rules())}")
    print(f"Budgets: {len(store.get_budgets(active_only=False))}")
    print(f"\nProcessed messages: {stats['total_processed']}")
    print(f"  with transactions: {stats['with_transactions']}")
    print("=" * 80)


def main():
    """Main initialization function"""
    print("=" * 80)
    print("🚀 TRANSACTION DATABASE INITIALIZATION")
    print("=" * 80)

    schema_file = Path(__file__).parent.parent / "db" / "db_schema.sql"
    if not schema_file.exists():
        print(f"\n❌ Missing schema file: {schema_file}")
        sys.exit(1)

    settings = Settings.from_env()

    # Connect to database
    print("\n🔌 Connecting to database...")
    try:
        conn = get_db_connection(settings)
        print("   ✅ Connected")
    except StoreUnavailable as e:
        print(f"   ❌ Connection failed: {e}")
        print("\nCheck DB_HOST / DB_PORT / DB_NAME in your .env")
        sys.exit(1)

    store = PostgresStore(settings, conn=conn)
    try:
        # 1. Create schema
        run_sql_file(conn, schema_file, "Creating database schema")

        # 2. Seed categories
        seed_categories(store)

        # 3. Print summary
        print_summary(store)

        print("\n✅ Database initialization complete!")
        print("\nNext steps:")
        print("  1. Import messages: txn-import /path/to/messages.csv")
        print("  2. Check budgets:   txn-budgets --recalculate")

    except Exception as e:
        print(f"\n❌ Initialization failed: {e}")
        sys.exit(1)
    finally:
        store.close()


if __name__ == "__main__":
    main()
