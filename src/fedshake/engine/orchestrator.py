# src/fedshake/engine/orchestrator.py
"""TreeShakeOrchestrator: drives tree shaking for a set of services.

Pipeline:
1. Compose the input services (failure aborts: CompositionError)
2. Plan every operation and flatten the plans into fetches
3. Per service: collect used coordinates from the fetches addressed to it
   (operation text and requires selections), close over @key/@requires once,
   prune the schema; a service with nothing used is dropped
4. Recompose the pruned services (failure is a COMPOSITION_FAILURE result)
5. Validate every operation against the recomposed API schema (failures are
   an OPERATION_VALIDATION_FAILURE result)
"""

from __future__ import annotations

from collections.abc import Sequence

from graphql import DocumentNode, GraphQLError, GraphQLSchema, OperationDefinitionNode, parse, print_ast, validate

from fedshake.contracts import (
    CompositionError,
    CompositionResult,
    FetchNode,
    ServiceDefinition,
    ShakeResult,
)
from fedshake.core.logging import get_logger
from fedshake.engine.coordinates import collect_used_coordinates
from fedshake.engine.directives import collect_directive_coordinates
from fedshake.engine.fetch_plan import collect_fetch_nodes, requires_to_fragment
from fedshake.engine.pruner import prune_schema
from fedshake.engine.subgraph_schema import build_subgraph_schema
from fedshake.plugins.protocols import FederationBackendProtocol, ValidatorProtocol

logger = get_logger(__name__)


class GraphQLValidator:
    """Default validator: graphql-core's standard validation rules.

    Also rejects operations whose root type the schema no longer has. Not
    every graphql-core release checks this during validation, and pruning
    routinely removes an unused Mutation or Subscription root.
    """

    def validate(self, api_schema: GraphQLSchema, operation: DocumentNode) -> list[GraphQLError]:
        errors = list(validate(api_schema, operation))
        reported = {error.message for error in errors}
        for definition in operation.definitions:
            if not isinstance(definition, OperationDefinitionNode):
                continue
            if api_schema.get_root_type(definition.operation) is not None:
                continue
            message = f"The {definition.operation.value} operation is not supported by the schema."
            if message not in reported:
                errors.append(GraphQLError(message, definition))
                reported.add(message)
        return errors


class TreeShakeOrchestrator:
    """Runs the tree-shaking pipeline against one backend.

    Holds no per-run state: run() can be called repeatedly, and separate
    orchestrators share nothing.

    Args:
        backend: Composer/planner pair for the services' federation version
        validator: Operation validator (defaults to graphql-core validation)
    """

    def __init__(
        self,
        backend: FederationBackendProtocol,
        *,
        validator: ValidatorProtocol | None = None,
    ) -> None:
        self._backend = backend
        self._validator = validator if validator is not None else GraphQLValidator()

    def run(self, services: Sequence[ServiceDefinition], operations: Sequence[DocumentNode]) -> ShakeResult:
        """Tree-shake services down to what operations need.

        Raises:
            CompositionError: If the input services do not compose
        """
        log = logger.bind(backend=self._backend.name, services=len(services), operations=len(operations))
        log.info("tree_shake_started")

        composition = self._backend.compose(services)
        if not composition.succeeded:
            log.error("input_composition_failed", errors=composition.errors)
            raise CompositionError(composition.errors)

        fetch_nodes: list[FetchNode] = []
        for operation in operations:
            fetch_nodes.extend(collect_fetch_nodes(self._backend.plan(composition, operation)))
        log.debug("fetches_collected", fetches=len(fetch_nodes))

        pruned: list[ServiceDefinition] = []
        for service in services:
            relevant = [node for node in fetch_nodes if node.service_name == service.name]
            shaken = shake_service(service, relevant)
            if shaken is None:
                log.info("service_eliminated", service=service.name)
                continue
            pruned.append(shaken)

        recomposition = self._backend.compose(pruned)
        if not recomposition.succeeded:
            log.warning("recomposition_failed", errors=recomposition.errors)
            return ShakeResult.composition_failure(pruned, recomposition.errors)

        api_schema = _api_schema(recomposition)
        errors_by_operation: dict[str, list[GraphQLError]] = {}
        for operation in operations:
            errors = list(self._validator.validate(api_schema, operation))
            if errors:
                errors_by_operation[print_ast(operation)] = errors

        if errors_by_operation:
            log.warning("operation_validation_failed", invalid_operations=len(errors_by_operation))
            return ShakeResult.operation_validation_failure(pruned, errors_by_operation)

        log.info("tree_shake_completed", retained_services=[service.name for service in pruned])
        return ShakeResult.success(pruned)


def shake_service(service: ServiceDefinition, fetch_nodes: Sequence[FetchNode]) -> ServiceDefinition | None:
    """Prune one service to what its fetches use.

    Args:
        service: The service to prune
        fetch_nodes: Fetches addressed to this service

    Returns:
        New service definition, or None if nothing in the service is used
    """
    schema = build_subgraph_schema(service.type_defs)

    used: set[str] = set()
    for node in fetch_nodes:
        used |= collect_used_coordinates(parse(node.operation), schema)
    for node in fetch_nodes:
        for selection in node.requires or ():
            used |= collect_used_coordinates(requires_to_fragment(selection), schema)

    from_directives = collect_directive_coordinates(schema, used)
    used |= from_directives

    if not used:
        return None

    logger.debug(
        "service_coordinates_collected",
        service=service.name,
        fetches=len(fetch_nodes),
        coordinates=len(used),
        from_directives=len(from_directives),
    )
    return service.with_type_defs(prune_schema(used, service.type_defs, schema))


def tree_shake_supergraph(
    services: Sequence[ServiceDefinition],
    operations: Sequence[DocumentNode],
    backend: FederationBackendProtocol,
    *,
    validator: ValidatorProtocol | None = None,
) -> ShakeResult:
    """Convenience wrapper: TreeShakeOrchestrator(backend, ...).run(...)."""
    return TreeShakeOrchestrator(backend, validator=validator).run(services, operations)


def _api_schema(composition: CompositionResult) -> GraphQLSchema:
    if composition.api_schema is not None:
        return composition.api_schema
    if isinstance(composition.schema, GraphQLSchema):
        return composition.schema
    raise TypeError(
        "Backend composition result carries no API schema. Backends MUST set CompositionResult.api_schema "
        "(or return a GraphQLSchema as schema) so operations can be validated."
    )
