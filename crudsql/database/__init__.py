"""
Database module
Provides the database interface, a SQLite implementation, model hydration and the repository pattern
"""

from .connection import DatabaseConnection
from .interface import DatabaseInterface, Row
from .models import hydrator_for, to_mapping
from .repositories import CrudRepository
from .sqlite import SqliteDatabase
from .unit_of_work import UnitOfWork

__all__ = [
    'DatabaseConnection',
    'DatabaseInterface',
    'Row',
    'hydrator_for',
    'to_mapping',
    'CrudRepository',
    'SqliteDatabase',
    'UnitOfWork',
]
