#!/usr/bin/env python3
"""
Initialize the learned-pattern database.

Run this script to create the database schema before first use.
Usage: python scripts/init_db.py [path/to/learned_patterns.db]
"""
import sys

from expense_classifier.database.connection import DEFAULT_DB_PATH, DatabaseManager


def main():
    """initialize the database."""
    db_path = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_DB_PATH

    with DatabaseManager(db_path) as db:
        print(f"Pattern database: {db.db_path}")

        if db.ensure_schema():
            print("✓ Schema created")
        else:
            print("Schema already present, nothing to do")

        print(f"  Schema version: {db.schema_version()}")


if __name__ == "__main__":
    main()
