"""
Repository implementations
Provides the data access layer on top of query fragments
"""

from .base import CrudRepository

__all__ = [
    'CrudRepository',
]
