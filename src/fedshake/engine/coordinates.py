# src/fedshake/engine/coordinates.py
"""Used schema coordinate collection.

Walks an operation-shaped document (a client operation, a fetch operation
emitted by the planner, or a synthetic one-fragment document built from a
federation directive's field set) against one schema and returns the
coordinates it references:

    Type                      a named type
    Type.field                an output field
    Type.field(arg:)          a field argument
    InputType.field           an input object field

The result is a seed set. It is NOT closed over @key/@requires; see
fedshake.engine.directives for that.
"""

from __future__ import annotations

from typing import Any

from graphql import (
    ArgumentNode,
    DocumentNode,
    FieldNode,
    GraphQLInputObjectType,
    GraphQLInterfaceType,
    GraphQLSchema,
    TypeInfo,
    TypeInfoVisitor,
    Visitor,
    get_named_type,
    is_input_object_type,
    is_interface_type,
    is_introspection_type,
    is_object_type,
    visit,
)

from fedshake.contracts.errors import TraversalInvariantError
from fedshake.engine.schema_cursor import SchemaCursor

# Reserved prefix of introspection fields (__typename, __schema, __type)
INTROSPECTION_PREFIX = "__"


def collect_used_coordinates(document: DocumentNode, schema: GraphQLSchema) -> set[str]:
    """Collect the schema coordinates a document references.

    Args:
        document: Operation or fragment document, valid against schema
        schema: The schema the document is walked against

    Returns:
        Set of coordinate strings

    Raises:
        TraversalInvariantError: If the document selects a field or passes
            an argument the schema does not define
    """
    type_info = TypeInfo(schema)
    collector = _UsageCollector(schema, type_info)
    visit(document, TypeInfoVisitor(type_info, collector))
    coordinates = collector.coordinates
    _close_interface_contracts(schema, coordinates)
    return coordinates


def declared_coordinates(document: DocumentNode) -> set[str]:
    """List every coordinate a schema document declares.

    Directive definition arguments carry no coordinate and are not listed.
    """
    lister = _DeclarationLister()
    visit(document, lister)
    return lister.coordinates


class _UsageCollector(Visitor):
    """Depth-first, pre-order usage walk driven by TypeInfoVisitor."""

    def __init__(self, schema: GraphQLSchema, type_info: TypeInfo) -> None:
        super().__init__()
        self._schema = schema
        self._type_info = type_info
        self._interfaces: list[GraphQLInterfaceType] = [
            named_type for named_type in schema.type_map.values() if is_interface_type(named_type) and not is_introspection_type(named_type)
        ]
        # TypeInfo exposes field definitions but not their names
        self._field_names: list[str] = []
        self.coordinates: set[str] = set()

    def enter_field(self, node: FieldNode, *_args: Any) -> None:
        field_name = node.name.value
        self._field_names.append(field_name)

        parent_type = self._type_info.get_parent_type()
        if parent_type is None:
            raise TraversalInvariantError(f"Parent type missing for selection `{field_name}`")
        field_def = self._type_info.get_field_def()
        if field_def is None:
            raise TraversalInvariantError(f"Field definition missing for `{parent_type.name}.{field_name}`")
        return_type = self._type_info.get_type()
        if return_type is None:
            raise TraversalInvariantError(f"Return type missing for `{parent_type.name}.{field_name}`")

        named_return_type = get_named_type(return_type)
        if is_introspection_type(parent_type) or is_introspection_type(named_return_type):
            return

        if not field_name.startswith(INTROSPECTION_PREFIX):
            self.coordinates.add(f"{parent_type.name}.{field_name}")
        self.coordinates.add(parent_type.name)
        self.coordinates.add(named_return_type.name)

        # A field an interface declares must stay declared on the interface
        # and the implementor, whichever of the two was selected through.
        if is_object_type(parent_type) or is_interface_type(parent_type):
            for interface in self._interfaces:
                if field_name in interface.fields and self._schema.is_sub_type(interface, parent_type):
                    self.coordinates.add(f"{interface.name}.{field_name}")
                    self.coordinates.add(f"{parent_type.name}.{field_name}")

    def leave_field(self, _node: FieldNode, *_args: Any) -> None:
        self._field_names.pop()

    def enter_argument(self, node: ArgumentNode, *_args: Any) -> None:
        arg_name = node.name.value
        arg_def = self._type_info.get_argument()
        if arg_def is None:
            raise TraversalInvariantError(f"Argument definition missing for `{arg_name}`")

        input_type = get_named_type(arg_def.type)
        self.coordinates.add(input_type.name)
        # Variables can supply any part of an input object, and their values
        # are invisible here, so every field of it counts as used.
        if is_input_object_type(input_type):
            self._mark_input_object(input_type, seen=set())

        if self._type_info.get_directive() is not None:
            return

        parent_type = self._type_info.get_parent_type()
        if parent_type is None or not self._field_names:
            raise TraversalInvariantError(f"No enclosing field for argument `{arg_name}`")
        self.coordinates.add(f"{parent_type.name}.{self._field_names[-1]}({arg_name}:)")

    def _mark_input_object(self, input_type: GraphQLInputObjectType, seen: set[str]) -> None:
        seen.add(input_type.name)
        for field_name, input_field in input_type.fields.items():
            field_type = get_named_type(input_field.type)
            self.coordinates.add(f"{input_type.name}.{field_name}")
            self.coordinates.add(field_type.name)
            if is_input_object_type(field_type) and field_type.name not in seen:
                self._mark_input_object(field_type, seen)


def _close_interface_contracts(schema: GraphQLSchema, coordinates: set[str]) -> None:
    """Propagate fields selected through an interface down to its implementors.

    Implementor type names are deliberately not added: an implementor that is
    never used still disappears, its field coordinates then match nothing.
    """
    interfaces = [named_type for named_type in schema.type_map.values() if is_interface_type(named_type) and not is_introspection_type(named_type)]
    changed = True
    while changed:
        changed = False
        for interface in interfaces:
            implementations = schema.get_implementations(interface)
            implementors = [*implementations.objects, *implementations.interfaces]
            for field_name in interface.fields:
                if f"{interface.name}.{field_name}" not in coordinates:
                    continue
                for implementor in implementors:
                    coordinate = f"{implementor.name}.{field_name}"
                    if coordinate not in coordinates:
                        coordinates.add(coordinate)
                        changed = True


class _DeclarationLister(Visitor):
    def __init__(self) -> None:
        super().__init__()
        self._cursor = SchemaCursor()
        self.coordinates: set[str] = set()

    def enter(self, node: Any, *_args: Any) -> None:
        self._cursor.enter(node)
        coordinate = self._cursor.coordinate(node)
        if coordinate is not None:
            self.coordinates.add(coordinate)

    def leave(self, node: Any, *_args: Any) -> None:
        self._cursor.leave(node)
