"""
Query building
Composable SQL fragments and their compiler
"""

from .parts import BoundValue, Identifier, Literal, Nested, QueryPart
from .fragment import SqlQuery, identifier, join, raw, sql
from .compiler import (
    PLACEHOLDER_STYLES,
    CompiledQuery,
    compile_query,
    placeholder_for,
    quote_identifier,
)

__all__ = [
    'BoundValue',
    'Identifier',
    'Literal',
    'Nested',
    'QueryPart',
    'SqlQuery',
    'identifier',
    'join',
    'raw',
    'sql',
    'PLACEHOLDER_STYLES',
    'CompiledQuery',
    'compile_query',
    'placeholder_for',
    'quote_identifier',
]
