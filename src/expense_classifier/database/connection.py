import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

logger = logging.getLogger(__name__)

DEFAULT_DB_PATH = Path("data/learned_patterns.db")
SCHEMA_PATH = Path(__file__).parent / "schema.sql"
STORE_TABLE = "key_value_store"


class DatabaseManager:
    """
    The SQLite file behind the learned-pattern store.

    The connection is opened on first use and the file's directory is
    created then, so building a manager never touches the disk.

    Usage:
        with DatabaseManager("data/learned_patterns.db") as db:
            db.ensure_schema()
            with db.transaction() as conn:
                conn.execute("INSERT INTO key_value_store ...")
    """

    def __init__(self, db_path: Path | str = DEFAULT_DB_PATH):
        self.db_path = Path(db_path)
        self._connection: Optional[sqlite3.Connection] = None

    @property
    def connection(self) -> sqlite3.Connection:
        if self._connection is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            # the CLI and a background learn() may share one store
            self._connection = sqlite3.connect(str(self.db_path), check_same_thread=False)
            self._connection.row_factory = sqlite3.Row
        return self._connection

    def has_schema(self) -> bool:
        row = self.connection.execute(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?",
            (STORE_TABLE,)
        ).fetchone()
        return row is not None

    def ensure_schema(self) -> bool:
        """
        Create the tables when the file is new.

        Returns:
            True if the schema was created by this call
        """
        if self.has_schema():
            return False

        logger.info("Creating pattern store schema in %s", self.db_path)
        self.connection.executescript(SCHEMA_PATH.read_text(encoding="utf-8"))
        self.connection.commit()
        return True

    def schema_version(self) -> Optional[int]:
        """Latest applied schema version, or None before ensure_schema()"""
        if not self.has_schema():
            return None
        row = self.connection.execute("SELECT MAX(version) FROM schema_version").fetchone()
        return row[0]

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Connection, None, None]:
        """Commit on success, roll back and re-raise on error"""
        conn = self.connection
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def __enter__(self) -> "DatabaseManager":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"DatabaseManager('{self.db_path}')"
