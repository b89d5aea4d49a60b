# src/fedshake/engine/pruner.py
"""Schema pruning.

Rewrites a service's schema document so it declares only retained
coordinates while staying internally consistent.

Pass 1 (filtering walk):
- every type, field, argument and input field whose coordinate is not
  retained is removed, together with everything beneath it;
- ``implements`` entries naming removed interfaces and union members that
  are no longer retained are dropped;
- object, interface and input object nodes whose fields were all removed
  are removed as well (empty containers are invalid).

Pass 2 (root repair):
- ``schema`` definitions/extensions keep only bindings for root types that
  still exist; an empty block without directives is removed and an empty
  definition with directives becomes a ``schema`` extension.

The input document is never modified. Surviving nodes are carried over
untouched, so printing them reproduces their original layout.
"""

from __future__ import annotations

from typing import Any

from graphql import (
    REMOVE,
    DefinitionNode,
    DocumentNode,
    GraphQLSchema,
    Node,
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    OperationType,
    SchemaDefinitionNode,
    SchemaExtensionNode,
    Visitor,
    visit,
)

from fedshake.core.logging import get_logger
from fedshake.engine.schema_cursor import (
    CONTAINER_NODES,
    OBJECT_LIKE_NODES,
    UNION_NODES,
    SchemaCursor,
)

logger = get_logger(__name__)


def prune_schema(used_coordinates: set[str], document: DocumentNode, schema: GraphQLSchema) -> DocumentNode:
    """Remove every definition whose coordinate is not retained.

    Args:
        used_coordinates: Retained coordinates
        document: The service's schema document
        schema: Standalone schema built from document (root type names,
            parent type checks)

    Returns:
        New pruned document
    """
    pruner = _PruningVisitor(used_coordinates, schema)
    shaken: DocumentNode = visit(document, pruner)
    logger.debug(
        "schema_pruned",
        definitions_before=len(document.definitions),
        definitions_after=len(shaken.definitions),
        removed_nodes=pruner.removed,
    )
    return _repair_root_operations(shaken, schema)


def _replace(node: Node, **changes: Any) -> Node:
    # AST nodes are immutable on newer graphql-core: rebuild, never assign
    fields = {key: getattr(node, key) for key in node.keys}
    fields.update(changes)
    return type(node)(**fields)


class _PruningVisitor(Visitor):
    def __init__(self, used_coordinates: set[str], schema: GraphQLSchema) -> None:
        super().__init__()
        self._used = used_coordinates
        self._cursor = SchemaCursor(schema)
        # One entry per open container: did it declare any fields on entry?
        self._declared_fields: list[bool] = []
        self.removed = 0

    def enter(self, node: Node, *_args: Any) -> Any:
        self._cursor.enter(node)
        original = node

        if isinstance(node, OBJECT_LIKE_NODES) and node.interfaces:
            node = _replace(
                node,
                interfaces=tuple(interface for interface in node.interfaces if interface.name.value in self._used),
            )
        elif isinstance(node, UNION_NODES) and node.types:
            node = _replace(
                node,
                types=tuple(member for member in node.types if member.name.value in self._used),
            )

        coordinate = self._cursor.coordinate(node)
        if coordinate is not None and coordinate not in self._used:
            # leave() is never called for a removed node
            self._cursor.leave(node)
            self.removed += 1
            return REMOVE

        if isinstance(node, CONTAINER_NODES):
            self._declared_fields.append(bool(node.fields))

        return node if node is not original else None

    def leave(self, node: Node, *_args: Any) -> Any:
        self._cursor.leave(node)

        if isinstance(node, CONTAINER_NODES):
            declared_fields = self._declared_fields.pop()
            if declared_fields and not node.fields:
                self.removed += 1
                return REMOVE
        return None


_ROOT_OPERATIONS = (OperationType.QUERY, OperationType.MUTATION, OperationType.SUBSCRIPTION)


def _repair_root_operations(document: DocumentNode, schema: GraphQLSchema) -> DocumentNode:
    root_names = {
        OperationType.QUERY: schema.query_type.name if schema.query_type else None,
        OperationType.MUTATION: schema.mutation_type.name if schema.mutation_type else None,
        OperationType.SUBSCRIPTION: schema.subscription_type.name if schema.subscription_type else None,
    }
    surviving_objects = {
        definition.name.value for definition in document.definitions if isinstance(definition, (ObjectTypeDefinitionNode, ObjectTypeExtensionNode))
    }
    surviving_roots = {operation for operation in _ROOT_OPERATIONS if root_names[operation] in surviving_objects}

    definitions: list[DefinitionNode] = []
    changed = False
    for definition in document.definitions:
        if not isinstance(definition, (SchemaDefinitionNode, SchemaExtensionNode)):
            definitions.append(definition)
            continue

        repaired = _repair_schema_block(definition, surviving_roots)
        if repaired is not definition:
            changed = True
        if repaired is not None:
            definitions.append(repaired)

    if not changed:
        return document
    return _replace(document, definitions=tuple(definitions))  # type: ignore[return-value]


def _repair_schema_block(
    node: SchemaDefinitionNode | SchemaExtensionNode,
    surviving_roots: set[OperationType],
) -> SchemaDefinitionNode | SchemaExtensionNode | None:
    operation_types = tuple(binding for binding in node.operation_types or () if binding.operation in surviving_roots)

    if not operation_types and not node.directives:
        return None
    if len(operation_types) == len(node.operation_types or ()):
        return node
    if not operation_types and isinstance(node, SchemaDefinitionNode):
        # A directive-only extension is meaningful, an empty definition is not
        return SchemaExtensionNode(directives=node.directives, operation_types=(), loc=node.loc)
    return _replace(node, operation_types=operation_types)  # type: ignore[return-value]
