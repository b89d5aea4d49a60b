# src/fedshake/contracts/__init__.py
"""Shared contracts for cross-boundary data types.

All dataclasses, enums and exceptions that cross subsystem boundaries are
defined here. This package is a LEAF MODULE: it depends on graphql-core
but never on fedshake.core, fedshake.engine or fedshake.plugins.

Import patterns:
    from fedshake.contracts import ServiceDefinition, ShakeResult, FetchNode

    # Settings classes pull in pydantic/dynaconf; import them from core
    from fedshake.core.config import SupergraphConfig
"""

from fedshake.contracts.enums import (
    FederationVersion,
    PlanNodeKind,
    SelectionKind,
    ShakeStatus,
)
from fedshake.contracts.errors import (
    BackendNotFoundError,
    CompositionError,
    TraversalInvariantError,
    UnsupportedSelectionError,
)
from fedshake.contracts.plan import (
    FetchNode,
    FlattenNode,
    OpaquePlanNode,
    ParallelNode,
    PlanNode,
    QueryPlan,
    QueryPlanFieldNode,
    QueryPlanInlineFragmentNode,
    QueryPlanSelectionNode,
    SequenceNode,
    SubscriptionNode,
)
from fedshake.contracts.results import CompositionResult, ShakeResult
from fedshake.contracts.services import ServiceDefinition

__all__ = [
    "BackendNotFoundError",
    "CompositionError",
    "CompositionResult",
    "FederationVersion",
    "FetchNode",
    "FlattenNode",
    "OpaquePlanNode",
    "ParallelNode",
    "PlanNode",
    "PlanNodeKind",
    "QueryPlan",
    "QueryPlanFieldNode",
    "QueryPlanInlineFragmentNode",
    "QueryPlanSelectionNode",
    "SelectionKind",
    "SequenceNode",
    "ServiceDefinition",
    "ShakeResult",
    "ShakeStatus",
    "SubscriptionNode",
    "TraversalInvariantError",
    "UnsupportedSelectionError",
]
