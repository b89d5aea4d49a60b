# src/fedshake/plugins/protocols.py
"""Protocols for the external collaborators of the tree-shaking engine.

These protocols define what backends and validators must implement. They
are used for type checking, not runtime enforcement (that's pluggy's job).

Collaborators:
- Backend: one composer + query planner pair for one federation version
- Validator: checks an operation against the recomposed API schema
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from graphql import DocumentNode, GraphQLError, GraphQLSchema

from fedshake.contracts import CompositionResult, FederationVersion, QueryPlan, ServiceDefinition


@runtime_checkable
class FederationBackendProtocol(Protocol):
    """Protocol for federation backends.

    Composition and query planning are not implemented by fedshake. A
    backend wraps a real composer/planner and normalises its output to
    CompositionResult and QueryPlan (see fedshake.engine.fetch_plan.plan_from_json
    for planners that emit JSON).

    Example:
        class GatewayBackend:
            name = "gateway-v2"
            federation_version = FederationVersion.V2

            def compose(self, services):
                output = run_composer([s.sdl for s in services])
                if output.errors:
                    return CompositionResult.failure(output.errors)
                return CompositionResult.success(output.supergraph, api_schema=output.api_schema)

            def plan(self, composition, operation):
                return plan_from_json(run_planner(composition.schema, print_ast(operation)))
    """

    name: str
    federation_version: FederationVersion

    def compose(self, services: Sequence[ServiceDefinition]) -> CompositionResult:
        """Compose services into a supergraph.

        Returns:
            CompositionResult.success(...) or CompositionResult.failure(errors).
            A successful result MUST carry api_schema (or a GraphQLSchema
            as schema) so operations can be validated against it.
        """
        ...

    def plan(self, composition: CompositionResult, operation: DocumentNode) -> QueryPlan:
        """Build the query plan for one operation against a composed supergraph."""
        ...


@runtime_checkable
class ValidatorProtocol(Protocol):
    """Protocol for operation validators."""

    def validate(self, api_schema: GraphQLSchema, operation: DocumentNode) -> Sequence[GraphQLError]:
        """Return validation errors (empty when the operation is valid)."""
        ...
