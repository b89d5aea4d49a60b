# src/fedshake/engine/directives.py
"""Federation directive closure.

A retained entity must keep the fields its @key names, and a retained field
with @requires must keep the fields its requirement selects, or the pruned
service would no longer compose. Each directive's field set is turned into a
synthetic fragment on the owning type and fed to the coordinate collector.

The closure runs ONCE per service, seeded from direct selection usage. Fields
it adds that themselves carry @key/@requires are not expanded again.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from graphql import (
    GraphQLNamedType,
    GraphQLSchema,
    Node,
    StringValueNode,
    is_interface_type,
    is_object_type,
    parse,
)

from fedshake.engine.coordinates import collect_used_coordinates

KEY_DIRECTIVE = "key"
REQUIRES_DIRECTIVE = "requires"
FIELDS_ARGUMENT = "fields"


def collect_directive_coordinates(schema: GraphQLSchema, used_coordinates: set[str]) -> set[str]:
    """Collect coordinates required by @key and @requires on used elements.

    Args:
        schema: Standalone schema of one service
        used_coordinates: Coordinates already known to be used (not modified)

    Returns:
        Additional coordinates for the caller to union in
    """
    coordinates: set[str] = set()

    for named_type in schema.type_map.values():
        if named_type.name not in used_coordinates:
            continue

        for field_set in directive_field_sets(_type_ast_nodes(named_type), KEY_DIRECTIVE):
            coordinates |= collect_field_set_coordinates(schema, named_type.name, field_set)

        if is_object_type(named_type) or is_interface_type(named_type):
            for field in named_type.fields.values():
                if field.ast_node is None:
                    continue
                for field_set in directive_field_sets([field.ast_node], REQUIRES_DIRECTIVE):
                    coordinates |= collect_field_set_coordinates(schema, named_type.name, field_set)

    return coordinates


def collect_field_set_coordinates(schema: GraphQLSchema, type_name: str, field_set: str) -> set[str]:
    """Run the collector over ``fragment f on <type_name> { <field_set> }``."""
    document = parse(f"fragment f on {type_name} {{ {field_set} }}")
    return collect_used_coordinates(document, schema)


def directive_field_sets(nodes: Iterable[Node], directive_name: str) -> Iterator[str]:
    """Yield the ``fields`` string of every application of a directive."""
    for node in nodes:
        for directive in node.directives or ():  # type: ignore[attr-defined]
            if directive.name.value != directive_name:
                continue
            for argument in directive.arguments or ():
                if argument.name.value == FIELDS_ARGUMENT and isinstance(argument.value, StringValueNode):
                    yield argument.value.value


def _type_ast_nodes(named_type: GraphQLNamedType) -> list[Node]:
    nodes: list[Node] = []
    if named_type.ast_node is not None:
        nodes.append(named_type.ast_node)
    nodes.extend(named_type.extension_ast_nodes or ())
    return nodes
