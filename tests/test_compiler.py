"""
Tests for flattening fragment trees into SQL text and parameters
"""

import pytest

from crudsql.query import (
    PLACEHOLDER_STYLES,
    CompiledQuery,
    Identifier,
    Literal,
    SqlQuery,
    compile_query,
    join,
    placeholder_for,
    quote_identifier,
    sql,
)

dollar = placeholder_for("dollar")
qmark = placeholder_for("qmark")


def sample_tree() -> SqlQuery:
    filters = join(
        [
            sql("{} = {}", Identifier("status"), "active"),
            sql("{} > {}", Identifier("age"), 18),
            sql("({})", sql("{} IS NULL", Identifier("deleted_at"))),
        ],
        sql(" AND "),
    )
    return sql("SELECT * FROM {} WHERE {} LIMIT {}", Identifier("users"), filters, 10)


class TestCompileQuery:

    def test_compiles_depth_first_left_to_right(self):
        compiled = compile_query(sample_tree(), dollar)
        assert compiled.sql == (
            'SELECT * FROM "users" WHERE "status" = $1 AND "age" > $2 '
            'AND ("deleted_at" IS NULL) LIMIT $3'
        )
        assert compiled.params == ("active", 18, 10)

    def test_compiling_twice_is_deterministic(self):
        tree = sample_tree()
        assert compile_query(tree, dollar) == compile_query(tree, dollar)

    def test_placeholder_index_follows_flat_position(self):
        query = sql("{} AND {}", sql("a = {}", 1), sql("b = {} OR c = {}", 2, 3))
        compiled = query.compile(dollar)
        assert compiled.sql == "a = $1 AND b = $2 OR c = $3"
        assert compiled.params == (1, 2, 3)

    def test_identifiers_are_not_parameters(self):
        compiled = sql("{} = {}", Identifier("id"), 5).compile(dollar)
        assert compiled.sql == '"id" = $1'
        assert compiled.params == (5,)

    def test_empty_fragment(self):
        assert SqlQuery.empty().compile(qmark) == CompiledQuery("", ())

    def test_join_matches_manual_concatenation(self):
        a, sep, b = sql("a = {}", 1), sql(" | {} | ", "s"), sql("b = {}", 2)
        joined = join([a, b, a], sep).compile(qmark)
        assert joined.sql == "a = ? | ? | b = ? | ? | a = ?"
        assert joined.params == (1, "s", 2, "s", 1)

    def test_deep_nesting_does_not_recurse(self):
        query = sql("{}", 1)
        for _ in range(5000):
            query = sql("({})", query)
        compiled = query.compile(qmark)
        assert compiled.sql == "(" * 5000 + "?" + ")" * 5000
        assert compiled.params == (1,)

    def test_custom_quote_function(self):
        compiled = sql("SELECT {} FROM {}", Identifier("name"), Identifier("users")).compile(
            qmark, lambda name: f"`{name}`"
        )
        assert compiled.sql == "SELECT `name` FROM `users`"

    def test_unknown_part_type_is_rejected(self):
        query = sql("x")
        object.__setattr__(query, "parts", (Literal(""), object(), Literal("")))
        with pytest.raises(TypeError):
            compile_query(query, qmark)


class TestQuoteIdentifier:

    def test_wraps_in_double_quotes(self):
        assert quote_identifier("users") == '"users"'

    def test_doubles_embedded_quotes(self):
        assert quote_identifier('we"ird') == '"we""ird"'

    def test_dotted_names_are_not_split(self):
        assert quote_identifier("public.users") == '"public.users"'


class TestPlaceholders:

    @pytest.mark.parametrize("style, expected", [
        ("qmark", "? ?"),
        ("numeric", ":1 :2"),
        ("named", ":p0 :p1"),
        ("format", "%s %s"),
        ("pyformat", "%(p0)s %(p1)s"),
        ("dollar", "$1 $2"),
    ])
    def test_styles(self, style, expected):
        assert sql("{} {}", "a", "b").compile(placeholder_for(style)).sql == expected

    def test_unknown_style(self):
        with pytest.raises(ValueError):
            placeholder_for("colon")

    def test_all_styles_are_registered(self):
        assert set(PLACEHOLDER_STYLES) == {"qmark", "numeric", "named", "format", "pyformat", "dollar"}

    def test_named_params_for_driver(self):
        compiled = sql("{} {}", "a", "b").compile(placeholder_for("named"))
        assert compiled.params_for_driver("named") == {"p0": "a", "p1": "b"}
        assert compiled.params_for_driver("pyformat") == {"p0": "a", "p1": "b"}
        assert compiled.params_for_driver("qmark") == ("a", "b")
