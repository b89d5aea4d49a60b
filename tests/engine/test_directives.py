# tests/engine/test_directives.py
"""Tests for @key/@requires closure."""

from graphql import parse

from fedshake.engine.directives import (
    KEY_DIRECTIVE,
    REQUIRES_DIRECTIVE,
    collect_directive_coordinates,
    collect_field_set_coordinates,
    directive_field_sets,
)
from fedshake.engine.subgraph_schema import build_subgraph_schema
from tests.fixtures.schemas import REQUIRES_A_SDL


def _schema(sdl: str):
    return build_subgraph_schema(parse(sdl))


class TestKeyClosure:
    """@key fields of retained types are retained."""

    def test_key_fields_added_for_used_type(self) -> None:
        schema = _schema('type Query { user: User } type User @key(fields: "id") { id: ID! name: String }')

        added = collect_directive_coordinates(schema, {"Query", "Query.user", "User", "User.name"})

        assert {"User.id", "ID"} <= added
        assert "User.name" not in added

    def test_unused_type_contributes_nothing(self) -> None:
        schema = _schema('type Query { a: Int } type User @key(fields: "id") { id: ID! }')

        added = collect_directive_coordinates(schema, {"Query", "Query.a"})

        assert "User.id" not in added

    def test_nested_key_fields(self) -> None:
        schema = _schema(REQUIRES_A_SDL)

        added = collect_directive_coordinates(schema, {"Foo"})

        assert {"Foo.bar", "Bar", "Bar.id"} <= added

    def test_every_key_on_extensions_is_read(self) -> None:
        sdl = """
        type Query { user: User }
        type User @key(fields: "id") { id: ID! email: String! name: String }
        extend type User @key(fields: "email")
        """
        schema = _schema(sdl)

        added = collect_directive_coordinates(schema, {"User"})

        assert {"User.id", "User.email"} <= added


class TestRequiresClosure:
    """@requires field sets on fields of retained types are retained."""

    def test_requires_selection_retained(self) -> None:
        schema = _schema(REQUIRES_A_SDL)

        added = collect_directive_coordinates(schema, {"Query", "Query.foo", "Foo", "Foo.baz"})

        assert {"Bar.a", "Bar.b", "Foo.quux"} <= added
        assert "Bar.c" not in added

    def test_input_set_not_modified(self) -> None:
        schema = _schema(REQUIRES_A_SDL)
        used = {"Foo", "Foo.baz"}

        collect_directive_coordinates(schema, used)

        assert used == {"Foo", "Foo.baz"}

    def test_single_pass_does_not_expand_newly_added_types(self) -> None:
        sdl = """
        type Query { a: A }
        type A @key(fields: "b { id }") { b: B }
        type B @key(fields: "id c { id }") { id: ID! c: C }
        type C @key(fields: "id other") { id: ID! other: String }
        """
        schema = _schema(sdl)

        added = collect_directive_coordinates(schema, {"A"})

        # B's key is only expanded when B was already retained
        assert {"A.b", "B", "B.id"} <= added
        assert "B.c" not in added
        assert "C.other" not in added


class TestFieldSets:
    def test_field_set_parsed_as_fragment(self) -> None:
        schema = _schema(REQUIRES_A_SDL)

        coordinates = collect_field_set_coordinates(schema, "Foo", "bar { a b } quux")

        assert {"Foo", "Foo.bar", "Bar", "Bar.a", "Bar.b", "Foo.quux", "String"} <= coordinates

    def test_directive_field_sets_yields_each_application(self) -> None:
        document = parse('type T @key(fields: "id") @key(fields: "sku") @other(fields: "x") { id: ID sku: ID }')

        assert list(directive_field_sets(document.definitions, KEY_DIRECTIVE)) == ["id", "sku"]
        assert list(directive_field_sets(document.definitions, REQUIRES_DIRECTIVE)) == []
