"""
Database transaction management with rollback support.
"""
import logging
from typing import Optional
from contextlib import contextmanager

from core.database import db, Database

logger = logging.getLogger(__name__)


class TransactionManager:
    """Groups several content-store writes into one SQLite transaction."""

    def __init__(self, database: Optional[Database] = None):
        self.database = database or db

    @contextmanager
    def transaction(self, isolation_level: Optional[str] = None):
        """
        Context manager for database transactions.

        Usage:
            with transaction_manager.transaction() as conn:
                store.insert_unit(..., conn=conn)
                store.insert_lessons(..., conn=conn)
                # If exception raised, all writes rolled back

        Args:
            isolation_level: Optional SQLite isolation level
                - None: Default (DEFERRED)
                - "IMMEDIATE": Lock database immediately
                - "EXCLUSIVE": Exclusive lock

        Yields:
            Connection object to pass to the store's write methods
        """
        conn = self.database.get_connection_raw()

        if isolation_level:
            conn.isolation_level = isolation_level

        try:
            conn.execute("BEGIN")

            yield conn

            conn.commit()

        except Exception:
            conn.rollback()
            logger.warning("Transaction rolled back")
            raise

        finally:
            conn.close()


# Global transaction manager instance
transaction_manager = TransactionManager()
