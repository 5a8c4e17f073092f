"""
Shared test helpers
Models and a scripted in-memory stand-in for a database driver
"""

import sqlite3
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, List, Optional

import pytest

from crudsql.query import CompiledQuery, SqlQuery, placeholder_for

requires_returning = pytest.mark.skipif(
    sqlite3.sqlite_version_info < (3, 35, 0),
    reason="SQLite library has no RETURNING support",
)


@dataclass
class User:
    id: int
    name: str
    email: Optional[str] = None
    deleted_at: Optional[str] = None


class StubDatabase:
    """
    Database stand-in returning scripted results

    Each call pops the next result of its kind; every statement is
    recorded compiled with qmark placeholders.
    """

    def __init__(self, query_results=None, insert_results=None, update_results=None):
        self.query_results = list(query_results or [])
        self.insert_results = list(insert_results or [])
        self.update_results = list(update_results or [])
        self.calls: List[tuple] = []
        self.transactions = 0
        self.commits = 0
        self.rollbacks = 0

    def _record(self, kind: str, query: SqlQuery) -> CompiledQuery:
        compiled = query.compile(placeholder_for("qmark"))
        self.calls.append((kind, compiled))
        return compiled

    @property
    def statements(self) -> List[str]:
        return [compiled.sql for _, compiled in self.calls]

    @property
    def params(self) -> List[tuple]:
        return [compiled.params for _, compiled in self.calls]

    async def query(self, query: SqlQuery) -> List[Any]:
        self._record("query", query)
        return self.query_results.pop(0) if self.query_results else []

    async def insert_and_get(self, query: SqlQuery) -> List[Any]:
        self._record("insert", query)
        return self.insert_results.pop(0) if self.insert_results else []

    async def update_and_get(self, query: SqlQuery) -> Optional[List[Any]]:
        self._record("update", query)
        return self.update_results.pop(0) if self.update_results else None

    @asynccontextmanager
    async def transaction(self):
        self.transactions += 1
        try:
            yield self
            self.commits += 1
        except BaseException:
            self.rollbacks += 1
            raise
