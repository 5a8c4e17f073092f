"""
Query fragments
Immutable, composable pieces of SQL with their parameters kept out of the text
"""

from dataclasses import dataclass
from string import Formatter
from typing import Any, Callable, Iterable, List, Optional, Sequence, Tuple, Union

from .parts import BoundValue, Identifier, Literal, Nested, QueryPart

_formatter = Formatter()


@dataclass(frozen=True)
class SqlQuery:
    """
    A SQL fragment

    Parts alternate between literal text and a non-literal part
    (bound value, identifier or nested fragment), always starting and
    ending with a Literal.

    Example:
        query = sql(
            "SELECT * FROM {} WHERE {} = {}",
            Identifier("users"), Identifier("id"), 42,
        )
        compiled = query.compile(placeholder_for("qmark"))
        # compiled.sql == 'SELECT * FROM "users" WHERE "id" = ?'
        # compiled.params == (42,)
    """
    parts: Tuple[QueryPart, ...]

    def __post_init__(self):
        parts = tuple(self.parts)
        object.__setattr__(self, "parts", parts)

        if len(parts) % 2 == 0:
            raise ValueError(f"A query needs an odd number of parts, got {len(parts)}")
        for index, part in enumerate(parts):
            expect_literal = index % 2 == 0
            if expect_literal and not isinstance(part, Literal):
                raise ValueError(f"Part {index} must be a Literal, got {type(part).__name__}")
            if not expect_literal and not isinstance(part, (BoundValue, Identifier, Nested)):
                raise ValueError(
                    f"Part {index} must be a BoundValue, Identifier or Nested, got {type(part).__name__}"
                )

    @classmethod
    def from_template(cls, strings: Sequence[str], params: Sequence[Any]) -> "SqlQuery":
        """
        Build a fragment from alternating literal strings and parameters

        Parameters that are fragments are nested rather than bound, which
        is what makes fragments composable.

        Args:
            strings: Literal pieces, one more than there are parameters
            params: Values, identifiers or fragments to place between them

        Returns:
            SqlQuery: New fragment

        Raises:
            ValueError: If the counts do not line up
        """
        if len(strings) != len(params) + 1:
            raise ValueError(
                f"Expected {len(params) + 1} literal strings for {len(params)} params, got {len(strings)}"
            )

        parts: List[QueryPart] = [Literal(strings[0])]
        for param, text in zip(params, strings[1:]):
            parts.append(_to_part(param))
            parts.append(Literal(text))
        return cls(tuple(parts))

    @classmethod
    def empty(cls) -> "SqlQuery":
        return cls((Literal(""),))

    @classmethod
    def join(cls, fragments: Iterable[Any], separator: Union["SqlQuery", str]) -> "SqlQuery":
        """
        Concatenate fragments with a separator between each

        Items that are not fragments are bound as values, so
        ``join([1, 2, 3], ", ")`` is an IN-list.

        Args:
            fragments: Fragments (or values) to concatenate
            separator: Fragment or raw text placed between items

        Returns:
            SqlQuery: Joined fragment; empty when there are no items
        """
        if isinstance(separator, str):
            separator = raw(separator)

        params: List[Any] = []
        for index, fragment in enumerate(fragments):
            if index:
                params.append(separator)
            params.append(fragment)

        if not params:
            return cls.empty()
        return cls.from_template([""] * (len(params) + 1), params)

    def is_empty(self) -> bool:
        """True when the fragment renders no text and binds nothing"""
        for part in self.parts:
            if isinstance(part, Literal):
                if part.text:
                    return False
            elif isinstance(part, Nested):
                if not part.query.is_empty():
                    return False
            else:
                return False
        return True

    def __bool__(self) -> bool:
        return not self.is_empty()

    def __add__(self, other: "SqlQuery") -> "SqlQuery":
        if not isinstance(other, SqlQuery):
            return NotImplemented
        middle = Literal(self.parts[-1].text + other.parts[0].text)
        return SqlQuery(self.parts[:-1] + (middle,) + other.parts[1:])

    def compile(self, placeholder: Callable[[int], str],
                quote: Optional[Callable[[str], str]] = None):
        """
        Compile into SQL text and ordered parameters

        Args:
            placeholder: Maps a zero-based parameter index to its token
            quote: Identifier quoting function (ANSI double quotes by default)

        Returns:
            CompiledQuery: SQL string plus bound values
        """
        from .compiler import compile_query
        return compile_query(self, placeholder, quote)


def _to_part(param: Any) -> QueryPart:
    if isinstance(param, SqlQuery):
        return Nested(param)
    if isinstance(param, (Identifier, BoundValue)):
        return param
    if isinstance(param, (Literal, Nested)):
        raise TypeError(f"{type(param).__name__} parts cannot be used as parameters")
    return BoundValue(param)


def raw(text: str) -> SqlQuery:
    """Fragment holding literal SQL text, braces included"""
    return SqlQuery((Literal(text),))


def identifier(name: str) -> SqlQuery:
    """Fragment holding a single quoted identifier"""
    return SqlQuery((Literal(""), Identifier(name), Literal("")))


def join(fragments: Iterable[Any], separator: Union[SqlQuery, str]) -> SqlQuery:
    return SqlQuery.join(fragments, separator)


def sql(template: str, *args: Any, **kwargs: Any) -> SqlQuery:
    """
    Build a fragment from a format-style template

    Replacement fields mark parameter positions: ``{}`` takes the next
    positional argument, ``{0}`` a numbered one and ``{name}`` a keyword.
    ``{{`` and ``}}`` are literal braces.

    Args:
        template: SQL text with replacement fields
        *args: Positional parameters
        **kwargs: Keyword parameters

    Returns:
        SqlQuery: New fragment

    Raises:
        ValueError: On malformed fields, missing or unused arguments

    Example:
        active = sql("{} = {}", Identifier("active"), True)
        query = sql("SELECT * FROM {table} WHERE ({filter})",
                    table=Identifier("users"), filter=active)
    """
    strings: List[str] = []
    params: List[Any] = []
    buffer = ""
    auto_index = 0
    numbering = None
    used_positional = set()
    used_keywords = set()

    for literal_text, field_name, format_spec, conversion in _formatter.parse(template):
        buffer += literal_text
        if field_name is None:
            continue
        if format_spec or conversion:
            raise ValueError(f"Format specs and conversions are not supported: {{{field_name}}}")

        if field_name == "" or field_name.isdigit():
            style = "auto" if field_name == "" else "manual"
            if numbering is not None and numbering != style:
                raise ValueError("Cannot mix automatic and manual field numbering")
            numbering = style
            if style == "auto":
                index = auto_index
                auto_index += 1
            else:
                index = int(field_name)
            if index >= len(args):
                raise ValueError(f"Template expects positional argument {index}, got {len(args)}")
            used_positional.add(index)
            params.append(args[index])
        elif field_name.isidentifier():
            if field_name not in kwargs:
                raise ValueError(f"Template expects keyword argument {field_name!r}")
            used_keywords.add(field_name)
            params.append(kwargs[field_name])
        else:
            raise ValueError(f"Unsupported replacement field {{{field_name}}}")

        strings.append(buffer)
        buffer = ""

    strings.append(buffer)

    unused = [str(i) for i in range(len(args)) if i not in used_positional]
    unused += sorted(set(kwargs) - used_keywords)
    if unused:
        raise ValueError(f"Unused template arguments: {', '.join(unused)}")

    return SqlQuery.from_template(strings, params)
