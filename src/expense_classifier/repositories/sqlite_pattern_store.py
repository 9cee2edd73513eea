import logging
import sqlite3
from typing import Optional

from expense_classifier.database.connection import DatabaseManager
from expense_classifier.repositories.base import LearnedPatternStore, PatternStoreError

logger = logging.getLogger(__name__)


class SQLitePatternStore(LearnedPatternStore):
    """
    SQLite implementation of the LearnedPatternStore.

    Keeps each value as one row of the key_value_store table.
    """

    def __init__(self, db_manager: DatabaseManager):
        self.db = db_manager

    def ensure_schema(self) -> None:
        """Create the tables if the database is new"""
        try:
            self.db.ensure_schema()
        except sqlite3.Error as e:
            raise PatternStoreError(f"Could not create schema in {self.db.db_path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        """Retrieve a value by key, or None if it doesn't exist"""
        try:
            cursor = self.db.connection.execute(
                "SELECT value FROM key_value_store WHERE key = ?",
                (key,)
            )
            row = cursor.fetchone()
        except sqlite3.Error as e:
            raise PatternStoreError(f"Could not read '{key}': {e}") from e

        if row is None:
            return None
        return row["value"]

    def set(self, key: str, value: str) -> None:
        """Insert or replace a value"""
        try:
            with self.db.transaction() as conn:
                conn.execute(
                    """
                    INSERT INTO key_value_store (key, value, updated_at)
                    VALUES (?, ?, datetime('now'))
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value),
                )
        except sqlite3.Error as e:
            raise PatternStoreError(f"Could not write '{key}': {e}") from e

    def delete(self, key: str) -> bool:
        """Delete a value by key."""
        try:
            with self.db.transaction() as conn:
                cursor = conn.execute(
                    "DELETE FROM key_value_store WHERE key = ?",
                    (key,)
                )
                return cursor.rowcount > 0
        except sqlite3.Error as e:
            raise PatternStoreError(f"Could not delete '{key}': {e}") from e

    def __repr__(self) -> str:
        return f"SQLitePatternStore('{self.db.db_path}')"
