# src/fedshake/engine/subgraph_schema.py
"""Standalone schema for one service.

Builds an executable-shaped GraphQLSchema from a service's SDL so operations
and planner fetches addressed to that service can be walked with TypeInfo:

- ``extend type X`` with no ``type X`` in the same document becomes the
  definition of X (federation services routinely extend types they never
  define locally);
- federation scalars, directives and ``_Service`` are declared;
- ``_Entity`` (all object types carrying @key) and ``Query._entities`` /
  ``Query._service`` are added, because planners fetch entities through
  ``_entities(representations: ...)``.

Only the returned schema carries these additions. The service document that
gets pruned is left as the author wrote it.
"""

from __future__ import annotations

from graphql import (
    DefinitionNode,
    DirectiveDefinitionNode,
    DocumentNode,
    EnumTypeDefinitionNode,
    EnumTypeExtensionNode,
    GraphQLSchema,
    InputObjectTypeDefinitionNode,
    InputObjectTypeExtensionNode,
    InterfaceTypeDefinitionNode,
    InterfaceTypeExtensionNode,
    ObjectTypeDefinitionNode,
    ObjectTypeExtensionNode,
    OperationType,
    ScalarTypeDefinitionNode,
    ScalarTypeExtensionNode,
    SchemaDefinitionNode,
    SchemaExtensionNode,
    TypeDefinitionNode,
    TypeExtensionNode,
    UnionTypeDefinitionNode,
    UnionTypeExtensionNode,
    build_ast_schema,
    parse,
)

from fedshake.engine.directives import KEY_DIRECTIVE

_DEFINITION_FOR_EXTENSION: dict[type[TypeExtensionNode], type[TypeDefinitionNode]] = {
    ObjectTypeExtensionNode: ObjectTypeDefinitionNode,
    InterfaceTypeExtensionNode: InterfaceTypeDefinitionNode,
    UnionTypeExtensionNode: UnionTypeDefinitionNode,
    ScalarTypeExtensionNode: ScalarTypeDefinitionNode,
    EnumTypeExtensionNode: EnumTypeDefinitionNode,
    InputObjectTypeExtensionNode: InputObjectTypeDefinitionNode,
}

# Federation 1 directive set, declared only where the service did not
_FEDERATION_DIRECTIVES: dict[str, str] = {
    "key": "directive @key(fields: _FieldSet!, resolvable: Boolean = true) repeatable on OBJECT | INTERFACE",
    "requires": "directive @requires(fields: _FieldSet!) on FIELD_DEFINITION",
    "provides": "directive @provides(fields: _FieldSet!) on FIELD_DEFINITION",
    "external": "directive @external(reason: String) on OBJECT | FIELD_DEFINITION",
    "extends": "directive @extends on OBJECT | INTERFACE",
}

_FEDERATION_SCALARS = ("_Any", "_FieldSet")

DEFAULT_QUERY_TYPE = "Query"


def build_subgraph_schema(document: DocumentNode) -> GraphQLSchema:
    """Build the standalone schema of one service.

    Args:
        document: The service's schema document

    Returns:
        Schema including federation entity plumbing
    """
    definitions = _promote_orphan_extensions(document.definitions)
    defined_types = {definition.name.value for definition in definitions if isinstance(definition, TypeDefinitionNode)}
    defined_directives = {definition.name.value for definition in definitions if isinstance(definition, DirectiveDefinitionNode)}

    query_type = _query_type_name(definitions)
    entities = _entity_type_names(definitions)

    additions: list[str] = []
    additions.extend(f"scalar {name}" for name in _FEDERATION_SCALARS if name not in defined_types)
    additions.extend(sdl for name, sdl in _FEDERATION_DIRECTIVES.items() if name not in defined_directives)
    additions.append("type _Service { sdl: String }")

    root_fields = ["_service: _Service!"]
    if entities:
        additions.append(f"union _Entity = {' | '.join(entities)}")
        root_fields.insert(0, "_entities(representations: [_Any!]!): [_Entity]!")
    keyword = "extend type" if query_type in defined_types else "type"
    additions.append(f"{keyword} {query_type} {{ {' '.join(root_fields)} }}")

    federation_document = parse("\n".join(additions))
    return build_ast_schema(
        DocumentNode(definitions=(*definitions, *federation_document.definitions)),
        assume_valid_sdl=True,
    )


def _promote_orphan_extensions(definitions: tuple[DefinitionNode, ...] | list[DefinitionNode]) -> list[DefinitionNode]:
    defined = {definition.name.value for definition in definitions if isinstance(definition, TypeDefinitionNode)}
    promoted: list[DefinitionNode] = []
    for definition in definitions:
        if isinstance(definition, TypeExtensionNode) and definition.name.value not in defined:
            definition_class = _DEFINITION_FOR_EXTENSION[type(definition)]
            definition = definition_class(**{key: getattr(definition, key) for key in definition.keys}, description=None)
            defined.add(definition.name.value)
        promoted.append(definition)
    return promoted


def _query_type_name(definitions: list[DefinitionNode]) -> str:
    for definition in definitions:
        if isinstance(definition, (SchemaDefinitionNode, SchemaExtensionNode)):
            for binding in definition.operation_types or ():
                if binding.operation == OperationType.QUERY:
                    return binding.type.name.value
    return DEFAULT_QUERY_TYPE


def _entity_type_names(definitions: list[DefinitionNode]) -> list[str]:
    # Object types only: @key on an interface (federation 2 entity interfaces)
    # is not added to _Entity, since a union cannot contain interfaces.
    entities: list[str] = []
    for definition in definitions:
        if not isinstance(definition, (ObjectTypeDefinitionNode, ObjectTypeExtensionNode)):
            continue
        name = definition.name.value
        has_key = any(directive.name.value == KEY_DIRECTIVE for directive in definition.directives or ())
        if has_key and name not in entities:
            entities.append(name)
    return entities
