"""
SQLite database connection and initialization.
"""
import logging
import sqlite3
from pathlib import Path
from typing import Optional, List
from contextlib import contextmanager

from .config import DB_PATH, SCHEMA_FILE

logger = logging.getLogger(__name__)


class Database:
    """Database manager for SQLite operations."""

    def __init__(self, db_path: Path = DB_PATH, schema_file: Path = SCHEMA_FILE):
        self.db_path = db_path
        self.schema_file = schema_file
        self.ensure_tables()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self.db_path))
        conn.row_factory = sqlite3.Row
        # SQLite leaves REFERENCES unenforced unless enabled per connection
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def get_connection(self):
        """Context manager for database connections."""
        conn = self._connect()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def get_connection_raw(self):
        """Get a raw connection (for operations that need manual commit)."""
        return self._connect()

    def ensure_tables(self):
        """Create all tables if they don't exist."""
        if not self.schema_file.exists():
            logger.warning(f"Schema file not found at {self.schema_file}, skipping table creation")
            return

        with open(self.schema_file, "r") as f:
            schema = f.read()

        with self.get_connection() as conn:
            conn.executescript(schema)

    def execute(self, query: str, params: Optional[tuple] = None) -> List[sqlite3.Row]:
        """Execute a SELECT query and return results."""
        with self.get_connection() as conn:
            cursor = conn.execute(query, params or ())
            return cursor.fetchall()

    def execute_one(self, query: str, params: Optional[tuple] = None) -> Optional[sqlite3.Row]:
        """Execute a SELECT query and return first result."""
        results = self.execute(query, params)
        return results[0] if results else None

    def execute_write(self, query: str, params: Optional[tuple] = None) -> int:
        """Execute an INSERT/UPDATE/DELETE query and return the affected row count."""
        conn = self.get_connection_raw()
        try:
            cursor = conn.execute(query, params or ())
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()

    def execute_write_in_transaction(
        self,
        conn: sqlite3.Connection,
        query: str,
        params: Optional[tuple] = None,
    ) -> int:
        """Execute a write on an open connection without committing."""
        cursor = conn.execute(query, params or ())
        return cursor.rowcount


# Global database instance
db = Database()
