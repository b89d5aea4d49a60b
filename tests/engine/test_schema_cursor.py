# tests/engine/test_schema_cursor.py
"""Tests for SchemaCursor coordinate computation."""

import pytest
from graphql import build_schema, parse

from fedshake.contracts import TraversalInvariantError
from fedshake.engine.schema_cursor import CoordinateKind, SchemaCursor, coordinate_kind


def _walk(sdl: str, cursor: SchemaCursor) -> list[str]:
    """Record coordinates in document order, entering and leaving by hand."""
    coordinates: list[str] = []

    def walk(node) -> None:
        cursor.enter(node)
        coordinate = cursor.coordinate(node)
        if coordinate is not None:
            coordinates.append(coordinate)
        for key in ("fields", "arguments"):
            for child in getattr(node, key, None) or ():
                walk(child)
        cursor.leave(node)

    for definition in parse(sdl).definitions:
        walk(definition)
    return coordinates


class TestCoordinates:
    def test_object_fields_and_arguments(self) -> None:
        coordinates = _walk("type Query { a(x: Int, y: Int): Int }", SchemaCursor())

        assert coordinates == ["Query", "Query.a", "Query.a(x:)", "Query.a(y:)"]

    def test_input_object_fields(self) -> None:
        coordinates = _walk("input I { x: Int y: String }", SchemaCursor())

        assert coordinates == ["I", "I.x", "I.y"]

    def test_context_cleared_between_definitions(self) -> None:
        coordinates = _walk("type T { f(a: Int): Int }\ndirective @d(a: Int) on FIELD", SchemaCursor())

        assert coordinates == ["T", "T.f", "T.f(a:)"]

    def test_interface_fields(self) -> None:
        coordinates = _walk("interface Node { id: ID! }", SchemaCursor())

        assert coordinates == ["Node", "Node.id"]


class TestKinds:
    @pytest.mark.parametrize(
        ("sdl", "expected"),
        [
            ("type T { a: Int }", CoordinateKind.TYPE),
            ("extend type T { a: Int }", CoordinateKind.TYPE),
            ("scalar S", CoordinateKind.TYPE),
            ("enum E { A }", CoordinateKind.TYPE),
            ("union U = T", CoordinateKind.TYPE),
            ("input I { a: Int }", CoordinateKind.TYPE),
            ("directive @d on FIELD", None),
            ("schema { query: Q }", None),
        ],
    )
    def test_definition_kinds(self, sdl: str, expected: CoordinateKind | None) -> None:
        assert coordinate_kind(parse(sdl).definitions[0]) is expected


class TestInvariants:
    def test_field_without_parent_raises(self) -> None:
        field = parse("type T { a: Int }").definitions[0].fields[0]

        with pytest.raises(TraversalInvariantError, match="No enclosing type"):
            SchemaCursor().enter(field)

    def test_field_on_non_object_schema_type_raises(self) -> None:
        schema = build_schema("type Query { a: Int } input T { a: Int }")
        # A type definition that the schema knows as an input object
        definition = parse("type T { a: Int }").definitions[0]
        cursor = SchemaCursor(schema)
        cursor.enter(definition)

        with pytest.raises(TraversalInvariantError, match="expected an object or interface type"):
            cursor.enter(definition.fields[0])
