"""
Query parts
The four kinds of node a query fragment is made of
"""

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING, Union

if TYPE_CHECKING:
    from .fragment import SqlQuery


@dataclass(frozen=True)
class Literal:
    """Raw SQL text, emitted as is"""
    text: str


@dataclass(frozen=True)
class BoundValue:
    """A value sent to the driver as a bound parameter"""
    value: Any


@dataclass(frozen=True)
class Identifier:
    """
    A table or column name

    Rendered inline through the quoting function, never bound as a
    parameter (most engines reject parameters in identifier positions).
    """
    name: str

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name:
            raise ValueError(f"Identifier name must be a non-empty string, got {self.name!r}")


@dataclass(frozen=True)
class Nested:
    """Another fragment spliced in place"""
    query: "SqlQuery"


QueryPart = Union[Literal, BoundValue, Identifier, Nested]
