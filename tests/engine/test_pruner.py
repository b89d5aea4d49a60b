# tests/engine/test_pruner.py
"""Tests for schema pruning."""

from graphql import (
    ObjectTypeDefinitionNode,
    SchemaDefinitionNode,
    SchemaExtensionNode,
    build_ast_schema,
    parse,
    print_ast,
)

from fedshake.engine.coordinates import declared_coordinates
from fedshake.engine.pruner import prune_schema
from fedshake.engine.subgraph_schema import build_subgraph_schema
from tests.fixtures.schemas import ABSTRACT_SDL


def _prune(sdl: str, used: set[str]):
    document = parse(sdl)
    return prune_schema(used, document, build_subgraph_schema(document))


class TestRemoval:
    """Unretained coordinates disappear with everything beneath them."""

    def test_unused_type_and_field_removed(self) -> None:
        pruned = _prune(
            "type Query { foo: Foo bar: Bar } type Foo { used: String unused: String } type Bar { id: ID }",
            {"Query", "Query.foo", "Foo", "Foo.used"},
        )

        assert declared_coordinates(pruned) == {"Query", "Query.foo", "Foo", "Foo.used"}

    def test_unused_argument_removed(self) -> None:
        pruned = _prune(
            "type Query { foo(a: String, b: Int): String }",
            {"Query", "Query.foo", "Query.foo(a:)"},
        )

        assert "Query.foo(b:)" not in declared_coordinates(pruned)
        assert "Query.foo(a:)" in declared_coordinates(pruned)

    def test_scalars_and_enums_follow_their_names(self) -> None:
        pruned = _prune(
            "type Query { a: Used } scalar Used scalar Unused enum E { A } enum F { B }",
            {"Query", "Query.a", "Used", "E"},
        )

        assert declared_coordinates(pruned) == {"Query", "Query.a", "Used", "E"}

    def test_directive_definitions_kept(self) -> None:
        pruned = _prune(
            "directive @tag(name: String!) on FIELD_DEFINITION\ntype Query { a: Int @tag(name: \"x\") b: Int }",
            {"Query", "Query.a"},
        )

        assert "directive @tag(name: String!)" in print_ast(pruned)
        assert '@tag(name: "x")' in print_ast(pruned)

    def test_input_document_not_modified(self) -> None:
        document = parse("type Query { a: Int b: Int }")
        before = print_ast(document)

        prune_schema({"Query", "Query.a"}, document, build_subgraph_schema(document))

        assert print_ast(document) == before


class TestEmptyContainers:
    """Types whose fields were all removed are removed too."""

    def test_type_emptied_by_pruning_removed(self) -> None:
        pruned = _prune(
            "type Query { a: A } type A { x: Int y: Int }",
            {"Query", "Query.a", "A"},
        )

        assert "A" not in declared_coordinates(pruned)

    def test_input_object_emptied_by_pruning_removed(self) -> None:
        pruned = _prune(
            "type Query { a(i: I): Int } input I { x: Int }",
            {"Query", "Query.a", "Query.a(i:)", "I"},
        )

        assert "I" not in declared_coordinates(pruned)

    def test_fieldless_extension_kept(self) -> None:
        sdl = 'type Query { u: User } type User @key(fields: "id") { id: ID! }\nextend type User @key(fields: "sku")'
        pruned = _prune(sdl, {"Query", "Query.u", "User", "User.id"})

        assert 'extend type User @key(fields: "sku")' in print_ast(pruned)


class TestAbstractTypes:
    """implements lists and union members."""

    USED = {
        "Query",
        "Query.animal",
        "Query.result",
        "Animal",
        "Animal.name",
        "Dog",
        "Dog.name",
        "Dog.bark",
        "Cat.name",
        "Result",
        "Success",
        "Success.hooray",
        "Error",
        "Error.reason",
    }

    def test_removed_interface_dropped_from_implements(self) -> None:
        pruned = _prune(ABSTRACT_SDL, self.USED)

        assert "type Dog implements Animal {" in print_ast(pruned)
        assert "Node" not in declared_coordinates(pruned)

    def test_unused_implementor_removed(self) -> None:
        pruned = _prune(ABSTRACT_SDL, self.USED)

        declared = declared_coordinates(pruned)
        assert "Cat" not in declared
        assert "Cat.name" not in declared

    def test_union_members_filtered(self) -> None:
        pruned = _prune(ABSTRACT_SDL, self.USED)

        assert "union Result = Success | Error" in print_ast(pruned)
        assert "Warning" not in declared_coordinates(pruned)

    def test_union_extension_members_filtered(self) -> None:
        pruned = _prune(
            "type Query { r: R } union R = A type A { x: Int } type B { y: Int }\nextend union R = B",
            {"Query", "Query.r", "R", "A", "A.x"},
        )

        assert "extend union R" in print_ast(pruned)
        assert "| B" not in print_ast(pruned)
        assert "= B" not in print_ast(pruned)

    def test_result_still_builds(self) -> None:
        pruned = _prune(ABSTRACT_SDL, self.USED)

        schema = build_ast_schema(pruned)

        assert schema.get_type("Dog") is not None
        assert schema.get_type("Node") is None


class TestRootRepair:
    """schema blocks keep only bindings for surviving root types."""

    def test_binding_for_removed_root_dropped(self) -> None:
        pruned = _prune(
            "schema { query: Q mutation: M } type Q { a: Int } type M { b: Int }",
            {"Q", "Q.a"},
        )

        block = next(d for d in pruned.definitions if isinstance(d, SchemaDefinitionNode))
        assert [binding.type.name.value for binding in block.operation_types] == ["Q"]

    def test_schema_block_before_types_repaired(self) -> None:
        pruned = _prune(
            "schema { query: Q subscription: S } type Q { a: Int } type S { tick: Int }",
            {"Q", "Q.a"},
        )

        assert "subscription" not in print_ast(pruned)
        assert "query: Q" in print_ast(pruned)

    def test_empty_extension_removed(self) -> None:
        pruned = _prune(
            "type Query { a: Int } type M { b: Int }\nextend schema { mutation: M }",
            {"Query", "Query.a"},
        )

        assert not any(isinstance(d, SchemaExtensionNode) for d in pruned.definitions)

    def test_emptied_definition_with_directives_becomes_extension(self) -> None:
        sdl = """
        directive @link(url: String!) on SCHEMA
        schema @link(url: "https://specs.apollo.dev/federation/v2.0") { mutation: M }
        type Query { a: Int }
        type M { b: Int }
        """
        pruned = _prune(sdl, {"Query", "Query.a"})

        assert not any(isinstance(d, SchemaDefinitionNode) for d in pruned.definitions)
        assert 'extend schema @link(url: "https://specs.apollo.dev/federation/v2.0")' in print_ast(pruned)
        assert "mutation" not in print_ast(pruned)

    def test_partially_emptied_definition_keeps_directives(self) -> None:
        sdl = """
        directive @link(url: String!) on SCHEMA
        schema @link(url: "https://specs.apollo.dev/federation/v2.0") { query: Query mutation: M }
        type Query { a: Int }
        type M { b: Int }
        """
        pruned = _prune(sdl, {"Query", "Query.a"})

        block = next(d for d in pruned.definitions if isinstance(d, SchemaDefinitionNode))
        assert [binding.operation.value for binding in block.operation_types] == ["query"]
        assert block.directives[0].name.value == "link"

    def test_untouched_schema_block_kept_as_is(self) -> None:
        document = parse("schema { query: Q } type Q { a: Int }")

        pruned = prune_schema({"Q", "Q.a"}, document, build_subgraph_schema(document))

        assert pruned.definitions[0] is document.definitions[0]


class TestRebuiltNodes:
    """Filtered nodes are rebuilt as new nodes, the originals stay intact."""

    SDL = "type Query { dog: Dog } interface Animal { name: String } type Dog implements Animal { name: String bark: String }"

    def test_implements_filter_rebuilds_node(self) -> None:
        document = parse(self.SDL)

        pruned = prune_schema({"Query", "Query.dog", "Dog", "Dog.bark"}, document, build_subgraph_schema(document))

        dog = next(d for d in pruned.definitions if isinstance(d, ObjectTypeDefinitionNode) and d.name.value == "Dog")
        assert list(dog.interfaces) == []
        assert [field.name.value for field in dog.fields] == ["bark"]
        original = document.definitions[2]
        assert [interface.name.value for interface in original.interfaces] == ["Animal"]

    def test_schema_block_repair_rebuilds_node(self) -> None:
        document = parse("schema { query: Query mutation: Mutation } type Query { a: Int } type Mutation { b: Int }")

        pruned = prune_schema({"Query", "Query.a"}, document, build_subgraph_schema(document))

        assert print_ast(pruned) == "schema {\n  query: Query\n}\n\ntype Query {\n  a: Int\n}"
        assert len(document.definitions[0].operation_types) == 2


class TestCursorRecovery:
    """Context pushed by a removed node never leaks into later siblings."""

    def test_removed_input_object_does_not_claim_directive_arguments(self) -> None:
        pruned = _prune(
            "type Query { a: Int }\ninput Unused { y: Int }\ndirective @d(z: Int) on FIELD_DEFINITION",
            {"Query", "Query.a"},
        )

        assert "directive @d(z: Int) on FIELD_DEFINITION" in print_ast(pruned)
        assert "Unused" not in print_ast(pruned)

    def test_removed_field_with_arguments_does_not_claim_later_arguments(self) -> None:
        pruned = _prune(
            "type Query { gone(x: Int): Int kept(y: Int): Int }",
            {"Query", "Query.kept", "Query.kept(y:)"},
        )

        assert declared_coordinates(pruned) == {"Query", "Query.kept", "Query.kept(y:)"}
