"""
Database connection management
Per-thread SQLite connections and the transaction state that goes with them
"""

import sqlite3
from contextlib import contextmanager
from typing import Iterator
import threading

from ..config import Settings
from ..logger import get_logger

logger = get_logger(__name__)


class DatabaseConnection:
    """
    Per-thread SQLite connection and transaction tracker

    Each thread gets its own ``sqlite3`` connection. Whether that
    connection is inside a transaction is tracked here, next to the
    connection, so every handle sharing it sees the same state: while a
    transaction is open nothing else on the thread commits.
    """

    def __init__(self, db_path: str = "crudsql.db"):
        """
        Initialize connection manager

        Args:
            db_path: Path to the SQLite database file (":memory:" for a private in-memory database)
        """
        self.db_path = db_path
        self._local = threading.local()

    @classmethod
    def from_settings(cls, settings: Settings) -> "DatabaseConnection":
        return cls(settings.db_path)

    def get_connection(self) -> sqlite3.Connection:
        """
        Get or open the connection for the current thread

        Returns:
            sqlite3.Connection: Connection yielding ``sqlite3.Row`` rows
        """
        if not hasattr(self._local, 'connection'):
            logger.debug(f"Opening SQLite connection to {self.db_path}")
            self._local.connection = sqlite3.connect(
                self.db_path,
                check_same_thread=False
            )
            self._local.connection.row_factory = sqlite3.Row
            self._local.depth = 0
        return self._local.connection

    @property
    def in_transaction(self) -> bool:
        """True while a ``transaction()`` block is open on this thread"""
        return getattr(self._local, 'depth', 0) > 0

    def commit_unless_in_transaction(self) -> None:
        """Commit the current thread's pending statements, unless a transaction owns them"""
        if not self.in_transaction:
            self.get_connection().commit()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        Transaction on the current thread's connection

        The outermost block commits on success and rolls back when the
        block raises. Blocks opened inside it join the outer transaction
        and leave committing to it.

        Yields:
            sqlite3.Connection: Connection for the current thread

        Example:
            with connection.transaction() as conn:
                conn.execute("INSERT INTO users (name) VALUES (?)", ("ada",))
        """
        conn = self.get_connection()
        if self._local.depth > 0:
            self._local.depth += 1
            try:
                yield conn
            finally:
                self._local.depth -= 1
            return

        self._local.depth = 1
        try:
            yield conn
            conn.commit()
        except BaseException:
            logger.debug("Rolling back transaction")
            conn.rollback()
            raise
        finally:
            self._local.depth = 0

    def close(self):
        """Close the connection for the current thread"""
        if hasattr(self._local, 'connection'):
            self._local.connection.close()
            delattr(self._local, 'connection')
            self._local.depth = 0
