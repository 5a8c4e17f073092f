import pytest

from crudsql.database import CrudRepository, DatabaseConnection, SqliteDatabase
from tests.support import User

USERS_TABLE = """
    CREATE TABLE users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL,
        email TEXT,
        deleted_at TEXT
    )
"""


@pytest.fixture()
def connection():
    conn = DatabaseConnection(":memory:")
    with conn.transaction() as raw:
        raw.execute(USERS_TABLE)
    yield conn
    conn.close()


@pytest.fixture()
def database(connection):
    """SQLite database handing rows back through RETURNING"""
    return SqliteDatabase(connection, use_returning=True)


@pytest.fixture()
def legacy_database(connection):
    """SQLite database without RETURNING: inserts give rowids, updates give None"""
    return SqliteDatabase(connection, use_returning=False)


@pytest.fixture()
def seed(connection):
    def _seed(*rows):
        with connection.transaction() as raw:
            raw.executemany(
                "INSERT INTO users (id, name, email, deleted_at) VALUES (?, ?, ?, ?)",
                rows,
            )
    return _seed


@pytest.fixture()
def users(database):
    return CrudRepository(database, table="users", model=User)
