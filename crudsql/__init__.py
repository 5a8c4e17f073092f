"""
crudsql
Composable parameterized SQL fragments and a generic CRUD repository
"""

from .config import Settings
from .errors import HydrationError, NotFoundError, RepositoryError, TooManyResultsError
from .logger import configure_logging, get_logger, logger
from .query import (
    BoundValue,
    CompiledQuery,
    Identifier,
    Literal,
    Nested,
    SqlQuery,
    compile_query,
    identifier,
    join,
    placeholder_for,
    quote_identifier,
    raw,
    sql,
)
from .database import (
    CrudRepository,
    DatabaseConnection,
    DatabaseInterface,
    SqliteDatabase,
    UnitOfWork,
    hydrator_for,
    to_mapping,
)

__version__ = "1.0.0"

__all__ = [
    'Settings',
    'HydrationError',
    'NotFoundError',
    'RepositoryError',
    'TooManyResultsError',
    'configure_logging',
    'get_logger',
    'logger',
    'BoundValue',
    'CompiledQuery',
    'Identifier',
    'Literal',
    'Nested',
    'SqlQuery',
    'compile_query',
    'identifier',
    'join',
    'placeholder_for',
    'quote_identifier',
    'raw',
    'sql',
    'CrudRepository',
    'DatabaseConnection',
    'DatabaseInterface',
    'SqliteDatabase',
    'UnitOfWork',
    'hydrator_for',
    'to_mapping',
]
