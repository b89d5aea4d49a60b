# src/fedshake/contracts/results.py
"""Operation outcomes and results.

These types answer: "What did composition / tree shaking produce?"

IMPORTANT:
- ShakeResult is one class with a status discriminator, NOT three classes.
  Use the factory methods; __post_init__ rejects payloads that do not match
  the status.
- operation_errors is keyed by the printed operation text.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from graphql import GraphQLError, GraphQLSchema

from fedshake.contracts.enums import ShakeStatus
from fedshake.contracts.services import ServiceDefinition


@dataclass(frozen=True)
class CompositionResult:
    """Backend composition output, normalised across federation versions.

    Fields:
        schema: Backend-specific supergraph handle, passed back to the planner
        api_schema: Client-facing schema used for operation validation
        supergraph_sdl: Printed supergraph, when the backend provides one
        errors: Composition errors; non-empty means composition failed
    """

    schema: Any = None
    api_schema: GraphQLSchema | None = None
    supergraph_sdl: str | None = None
    errors: tuple[GraphQLError, ...] = ()

    def __post_init__(self) -> None:
        if not self.errors and self.schema is None:
            raise ValueError("CompositionResult without errors MUST carry a supergraph schema. Use CompositionResult.failure() for failed compositions.")

    @property
    def succeeded(self) -> bool:
        return not self.errors

    @classmethod
    def success(
        cls,
        schema: Any,
        *,
        api_schema: GraphQLSchema | None = None,
        supergraph_sdl: str | None = None,
    ) -> CompositionResult:
        return cls(schema=schema, api_schema=api_schema, supergraph_sdl=supergraph_sdl)

    @classmethod
    def failure(cls, errors: Sequence[GraphQLError]) -> CompositionResult:
        if not errors:
            raise ValueError("CompositionResult.failure() requires at least one error")
        return cls(errors=tuple(errors))


@dataclass(frozen=True)
class ShakeResult:
    """Result of a tree-shaking run.

    services always holds the pruned service definitions (only services with
    at least one retained coordinate), whatever the status, so callers can
    inspect what broke or fall back to the unpruned schemas.
    """

    status: ShakeStatus
    services: tuple[ServiceDefinition, ...]
    composition_errors: tuple[GraphQLError, ...] = ()
    operation_errors: Mapping[str, tuple[GraphQLError, ...]] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        if self.status == ShakeStatus.COMPOSITION_FAILURE and not self.composition_errors:
            raise ValueError("ShakeResult with status=COMPOSITION_FAILURE MUST carry composition_errors")
        if self.status == ShakeStatus.OPERATION_VALIDATION_FAILURE and not self.operation_errors:
            raise ValueError("ShakeResult with status=OPERATION_VALIDATION_FAILURE MUST carry operation_errors")
        if self.status == ShakeStatus.SUCCESS and (self.composition_errors or self.operation_errors):
            raise ValueError("ShakeResult with status=SUCCESS cannot carry errors")

    @property
    def succeeded(self) -> bool:
        return self.status == ShakeStatus.SUCCESS

    @property
    def service_names(self) -> list[str]:
        return [service.name for service in self.services]

    def service(self, name: str) -> ServiceDefinition | None:
        """Look up a pruned service by name (None if it was eliminated)."""
        for service in self.services:
            if service.name == name:
                return service
        return None

    @classmethod
    def success(cls, services: Sequence[ServiceDefinition]) -> ShakeResult:
        return cls(status=ShakeStatus.SUCCESS, services=tuple(services))

    @classmethod
    def composition_failure(
        cls,
        services: Sequence[ServiceDefinition],
        errors: Sequence[GraphQLError],
    ) -> ShakeResult:
        return cls(
            status=ShakeStatus.COMPOSITION_FAILURE,
            services=tuple(services),
            composition_errors=tuple(errors),
        )

    @classmethod
    def operation_validation_failure(
        cls,
        services: Sequence[ServiceDefinition],
        errors: Mapping[str, Sequence[GraphQLError]],
    ) -> ShakeResult:
        return cls(
            status=ShakeStatus.OPERATION_VALIDATION_FAILURE,
            services=tuple(services),
            operation_errors=MappingProxyType({operation: tuple(errs) for operation, errs in errors.items()}),
        )
