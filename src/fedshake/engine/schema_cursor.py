# src/fedshake/engine/schema_cursor.py
"""SchemaCursor: traversal context for walking schema (SDL) documents.

graphql-core's TypeInfo only tracks context for operation documents. Walking
type definitions needs its own cursor to know which type, input type or field
argument list an input value belongs to, so that a coordinate can be computed
for every definition node.

The cursor is pushed on enter and popped on leave. A filtering walker that
removes a container gets no leave callback for it, so it MUST call leave()
itself right after deciding to remove the node.
"""

from __future__ import annotations

from enum import Enum

from graphql import (
    EnumTypeDefinitionNode,
    EnumTypeExtensionNode,
    FieldDefinitionNode,
    GraphQLSchema,
    InputObjectTypeDefinitionNode,
    InputObjectTypeExtensionNode,
    InputValueDefinitionNode,
    InterfaceTypeDefinitionNode,
    InterfaceTypeExtensionNode,
    Node,
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    ScalarTypeDefinitionNode,
    ScalarTypeExtensionNode,
    UnionTypeDefinitionNode,
    UnionTypeExtensionNode,
    is_interface_type,
    is_object_type,
)

from fedshake.contracts.errors import TraversalInvariantError

OBJECT_LIKE_NODES = (
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    InterfaceTypeDefinitionNode,
    InterfaceTypeExtensionNode,
)
INPUT_OBJECT_NODES = (InputObjectTypeDefinitionNode, InputObjectTypeExtensionNode)
UNION_NODES = (UnionTypeDefinitionNode, UnionTypeExtensionNode)

# Nodes whose field list may be emptied by pruning
CONTAINER_NODES = OBJECT_LIKE_NODES + INPUT_OBJECT_NODES


class CoordinateKind(Enum):
    """How a schema definition node maps to a schema coordinate."""

    TYPE = "type"  # Type name
    FIELD = "field"  # Type.field
    INPUT_VALUE = "input_value"  # Type.field(arg:) or InputType.field, or nothing


_COORDINATE_KINDS: dict[str, CoordinateKind] = {
    ObjectTypeDefinitionNode.kind: CoordinateKind.TYPE,
    ObjectTypeExtensionNode.kind: CoordinateKind.TYPE,
    InterfaceTypeDefinitionNode.kind: CoordinateKind.TYPE,
    InterfaceTypeExtensionNode.kind: CoordinateKind.TYPE,
    UnionTypeDefinitionNode.kind: CoordinateKind.TYPE,
    UnionTypeExtensionNode.kind: CoordinateKind.TYPE,
    ScalarTypeDefinitionNode.kind: CoordinateKind.TYPE,
    ScalarTypeExtensionNode.kind: CoordinateKind.TYPE,
    EnumTypeDefinitionNode.kind: CoordinateKind.TYPE,
    EnumTypeExtensionNode.kind: CoordinateKind.TYPE,
    InputObjectTypeDefinitionNode.kind: CoordinateKind.TYPE,
    InputObjectTypeExtensionNode.kind: CoordinateKind.TYPE,
    FieldDefinitionNode.kind: CoordinateKind.FIELD,
    InputValueDefinitionNode.kind: CoordinateKind.INPUT_VALUE,
}


def coordinate_kind(node: Node) -> CoordinateKind | None:
    """Classify a node; None for nodes that never carry a coordinate."""
    return _COORDINATE_KINDS.get(node.kind)


class SchemaCursor:
    """Tracks the enclosing type, input type and field during an SDL walk.

    Args:
        schema: When given, field definitions are checked against it: the
            enclosing type must exist and be an object or interface type.
    """

    def __init__(self, schema: GraphQLSchema | None = None) -> None:
        self._schema = schema
        self._parent_type: str | None = None
        self._parent_input_type: str | None = None
        self._parent_field: str | None = None

    def enter(self, node: Node) -> None:
        if isinstance(node, OBJECT_LIKE_NODES):
            self._parent_type = node.name.value
        elif isinstance(node, INPUT_OBJECT_NODES):
            self._parent_input_type = node.name.value
        elif isinstance(node, FieldDefinitionNode):
            self._check_field_parent(node.name.value)
            self._parent_field = node.name.value

    def leave(self, node: Node) -> None:
        if isinstance(node, OBJECT_LIKE_NODES):
            self._parent_type = None
        elif isinstance(node, INPUT_OBJECT_NODES):
            self._parent_input_type = None
        elif isinstance(node, FieldDefinitionNode):
            self._parent_field = None

    def coordinate(self, node: Node) -> str | None:
        """Schema coordinate of a definition node, None if it has none."""
        kind = coordinate_kind(node)
        if kind is CoordinateKind.TYPE:
            return node.name.value  # type: ignore[attr-defined, no-any-return]
        if kind is CoordinateKind.FIELD:
            return self.field_coordinate(node.name.value)  # type: ignore[attr-defined]
        if kind is CoordinateKind.INPUT_VALUE:
            return self.input_value_coordinate(node.name.value)  # type: ignore[attr-defined]
        return None

    def field_coordinate(self, field_name: str) -> str:
        if self._parent_type is None:
            raise TraversalInvariantError(f"No enclosing type for field definition `{field_name}`")
        return f"{self._parent_type}.{field_name}"

    def input_value_coordinate(self, name: str) -> str | None:
        if self._parent_type is not None and self._parent_field is not None:
            return f"{self._parent_type}.{self._parent_field}({name}:)"
        if self._parent_input_type is not None:
            return f"{self._parent_input_type}.{name}"
        # Directive definition argument: never pruned
        return None

    def _check_field_parent(self, field_name: str) -> None:
        if self._parent_type is None:
            raise TraversalInvariantError(f"No enclosing type for field definition `{field_name}`")
        if self._schema is None:
            return
        parent = self._schema.get_type(self._parent_type)
        if not (is_object_type(parent) or is_interface_type(parent)):
            raise TraversalInvariantError(
                f"Invalid parent type `{self._parent_type}` for field definition `{field_name}`: expected an object or interface type in the schema"
            )
