"""
SQLite database
DatabaseInterface implementation on top of the standard sqlite3 driver
"""

import sqlite3
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

from ..config import Settings
from ..logger import get_logger
from ..query import SqlQuery, placeholder_for, quote_identifier, raw
from .connection import DatabaseConnection

logger = get_logger(__name__)

# Paramstyles sqlite3 accepts for the placeholders we generate
SUPPORTED_STYLES = ("qmark", "named")

RETURNING_MIN_VERSION = (3, 35, 0)


class SqliteDatabase:
    """
    SQLite implementation of DatabaseInterface

    Statements run synchronously on the calling thread's connection.
    Outside a transaction every statement is committed as soon as it
    has run; while the thread's connection has a transaction open,
    committing is left to that transaction.

    When the SQLite library supports ``RETURNING`` the insert and update
    helpers return the affected rows. Otherwise inserts return the new
    rowid, and updates return an empty list when nothing matched and
    None otherwise, leaving the caller to re-select.
    """

    def __init__(
        self,
        connection: DatabaseConnection,
        placeholder_style: str = "qmark",
        use_returning: Optional[bool] = None,
        quote: Callable[[str], str] = quote_identifier,
    ):
        """
        Initialize database

        Args:
            connection: Thread-local connection manager
            placeholder_style: "qmark" or "named"
            use_returning: Force RETURNING on or off; None detects it
            quote: Identifier quoting function

        Raises:
            ValueError: If the placeholder style is not usable with sqlite3
        """
        if placeholder_style not in SUPPORTED_STYLES:
            raise ValueError(
                f"sqlite3 supports placeholder styles {SUPPORTED_STYLES}, got {placeholder_style!r}"
            )
        if use_returning is None:
            use_returning = sqlite3.sqlite_version_info >= RETURNING_MIN_VERSION

        self.connection = connection
        self.placeholder_style = placeholder_style
        self.use_returning = use_returning
        self.quote = quote
        self._placeholder = placeholder_for(placeholder_style)

    @classmethod
    def from_settings(cls, settings: Settings) -> "SqliteDatabase":
        return cls(
            DatabaseConnection.from_settings(settings),
            placeholder_style=settings.placeholder_style,
            use_returning=settings.use_returning,
        )

    @property
    def in_transaction(self) -> bool:
        return self.connection.in_transaction

    async def query(self, query: SqlQuery) -> List[Dict[str, Any]]:
        cursor = self._execute(query)
        rows = [dict(row) for row in cursor.fetchall()]
        self.connection.commit_unless_in_transaction()
        return rows

    async def insert_and_get(self, query: SqlQuery) -> List[Any]:
        if self.use_returning:
            return await self.query(query + raw(" RETURNING *"))

        cursor = self._execute(query)
        row_id = cursor.lastrowid
        self.connection.commit_unless_in_transaction()
        return [row_id] if row_id is not None else []

    async def update_and_get(self, query: SqlQuery) -> Optional[List[Dict[str, Any]]]:
        if self.use_returning:
            return await self.query(query + raw(" RETURNING *"))

        cursor = self._execute(query)
        self.connection.commit_unless_in_transaction()
        # sqlite3 knows when nothing matched; the rows themselves are not available
        return [] if cursor.rowcount == 0 else None

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator["SqliteDatabase"]:
        """
        Scoped transaction

        Commits when the block exits normally and rolls back when it
        raises. The transaction belongs to the current thread's
        connection, so a transaction opened while another one is active
        on the thread joins it, and statements issued through any handle
        on that connection take part in it.

        Yields:
            SqliteDatabase: This database; its statements are not auto-committed inside the block

        Example:
            async with database.transaction() as tx:
                await tx.query(sql("DELETE FROM {}", Identifier("users")))
        """
        with self.connection.transaction():
            yield self

    def _execute(self, query: SqlQuery) -> sqlite3.Cursor:
        compiled = query.compile(self._placeholder, self.quote)
        logger.debug(f"Executing SQL: {' '.join(compiled.sql.split())} ({len(compiled.params)} params)")
        cursor = self.connection.get_connection().cursor()
        cursor.execute(compiled.sql, compiled.params_for_driver(self.placeholder_style))
        return cursor
