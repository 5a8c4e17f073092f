"""
Query compiler
Flattens a fragment tree into SQL text plus an ordered parameter list
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Union, TYPE_CHECKING

from .parts import BoundValue, Identifier, Literal, Nested

if TYPE_CHECKING:
    from .fragment import SqlQuery

Placeholder = Callable[[int], str]

# Keyed by DB-API 2.0 paramstyle, plus "dollar" for PostgreSQL's native $1
PLACEHOLDER_STYLES: Dict[str, Placeholder] = {
    "qmark": lambda index: "?",
    "numeric": lambda index: f":{index + 1}",
    "named": lambda index: f":p{index}",
    "format": lambda index: "%s",
    "pyformat": lambda index: f"%(p{index})s",
    "dollar": lambda index: f"${index + 1}",
}

_NAMED_STYLES = ("named", "pyformat")


@dataclass(frozen=True)
class CompiledQuery:
    """SQL text with bound values index-aligned to its placeholders"""
    sql: str
    params: Tuple[Any, ...]

    def params_for_driver(self, style: str = "qmark") -> Union[Tuple[Any, ...], Dict[str, Any]]:
        """Parameters shaped for ``cursor.execute`` under the given paramstyle"""
        if style in _NAMED_STYLES:
            return {f"p{index}": value for index, value in enumerate(self.params)}
        return self.params


def placeholder_for(style: str) -> Placeholder:
    """
    Look up the placeholder function for a paramstyle

    Raises:
        ValueError: If the style is unknown
    """
    try:
        return PLACEHOLDER_STYLES[style]
    except KeyError:
        raise ValueError(
            f"Unknown placeholder style {style!r}, expected one of {sorted(PLACEHOLDER_STYLES)}"
        ) from None


def quote_identifier(name: str) -> str:
    """ANSI SQL identifier quoting: wrap in double quotes, double any embedded ones"""
    return '"' + name.replace('"', '""') + '"'


def compile_query(query: "SqlQuery", placeholder: Placeholder,
                  quote: Optional[Callable[[str], str]] = None) -> CompiledQuery:
    """
    Compile a fragment tree

    Traversal is depth-first and left-to-right, so the n-th placeholder
    in the text always lines up with the n-th parameter.

    Args:
        query: Root fragment
        placeholder: Maps a zero-based parameter index to its token
        quote: Identifier quoting function

    Returns:
        CompiledQuery: Flat SQL text and parameters

    Raises:
        TypeError: If the tree holds an unknown part type
    """
    if quote is None:
        quote = quote_identifier

    chunks: List[str] = []
    params: List[Any] = []
    # Explicit stack of part iterators; nesting depth is not bounded by recursion
    stack = [iter(query.parts)]

    while stack:
        part = next(stack[-1], None)
        if part is None:
            stack.pop()
            continue

        if isinstance(part, Literal):
            chunks.append(part.text)
        elif isinstance(part, BoundValue):
            chunks.append(placeholder(len(params)))
            params.append(part.value)
        elif isinstance(part, Identifier):
            chunks.append(quote(part.name))
        elif isinstance(part, Nested):
            stack.append(iter(part.query.parts))
        else:
            raise TypeError(f"Unknown query part {part!r}")

    return CompiledQuery("".join(chunks), tuple(params))
