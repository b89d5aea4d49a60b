# src/fedshake/contracts/services.py
"""Service (subgraph) definitions."""

from __future__ import annotations

from dataclasses import dataclass, replace

from graphql import DocumentNode, parse, print_ast


@dataclass(frozen=True)
class ServiceDefinition:
    """One service's contribution to the supergraph.

    Frozen: pruning produces a new definition via with_type_defs(), the
    input list handed to the orchestrator is never modified.
    """

    name: str
    type_defs: DocumentNode
    routing_url: str | None = None

    @classmethod
    def from_sdl(cls, name: str, sdl: str, routing_url: str | None = None) -> ServiceDefinition:
        """Parse SDL text into a service definition."""
        return cls(name=name, type_defs=parse(sdl), routing_url=routing_url)

    @property
    def sdl(self) -> str:
        """Printed schema document."""
        return print_ast(self.type_defs)

    def with_type_defs(self, type_defs: DocumentNode) -> ServiceDefinition:
        return replace(self, type_defs=type_defs)
