# src/fedshake/contracts/plan.py
"""Query plan contracts.

Only the shape of a plan is consumed: which service each fetch goes to, the
operation text it sends and the ``requires`` selections it depends on. The
planner's internals (paths, variable wiring) stay opaque.

These types are the single internal shape every backend normalises to.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar, Union

from fedshake.contracts.enums import PlanNodeKind, SelectionKind


@dataclass(frozen=True)
class QueryPlanFieldNode:
    """A field inside a ``requires`` selection."""

    kind: ClassVar[SelectionKind] = SelectionKind.FIELD

    name: str
    alias: str | None = None
    selections: tuple[QueryPlanSelectionNode, ...] | None = None


@dataclass(frozen=True)
class QueryPlanInlineFragmentNode:
    """An inline fragment inside a ``requires`` selection."""

    kind: ClassVar[SelectionKind] = SelectionKind.INLINE_FRAGMENT

    type_condition: str | None
    selections: tuple[QueryPlanSelectionNode, ...] = ()


# Fragment spreads never appear here: planners inline that information into
# FetchNode.operation instead.
QueryPlanSelectionNode = Union[QueryPlanFieldNode, QueryPlanInlineFragmentNode]


@dataclass(frozen=True)
class FetchNode:
    """One sub-request a plan issues to a single service."""

    kind: ClassVar[PlanNodeKind] = PlanNodeKind.FETCH

    service_name: str
    operation: str
    requires: tuple[QueryPlanSelectionNode, ...] | None = None
    variable_usages: tuple[str, ...] = ()


@dataclass(frozen=True)
class FlattenNode:
    kind: ClassVar[PlanNodeKind] = PlanNodeKind.FLATTEN

    node: PlanNode
    path: tuple[str | int, ...] = ()


@dataclass(frozen=True)
class SequenceNode:
    kind: ClassVar[PlanNodeKind] = PlanNodeKind.SEQUENCE

    nodes: tuple[PlanNode, ...] = ()


@dataclass(frozen=True)
class ParallelNode:
    kind: ClassVar[PlanNodeKind] = PlanNodeKind.PARALLEL

    nodes: tuple[PlanNode, ...] = ()


@dataclass(frozen=True)
class SubscriptionNode:
    """Root of a subscription plan.

    The primary fetch and the per-event rest are kept as received; fetch
    collection does not descend into them.
    """

    kind: ClassVar[PlanNodeKind] = PlanNodeKind.SUBSCRIPTION

    primary: FetchNode
    rest: PlanNode | None = None


@dataclass(frozen=True)
class OpaquePlanNode:
    """A plan node kind this package does not traverse (e.g. Condition, Defer).

    Kept so that normalisation never loses information silently; fetch
    collection skips it and logs the kind.
    """

    kind_name: str
    data: object = None


PlanNode = Union[FetchNode, FlattenNode, SequenceNode, ParallelNode, SubscriptionNode, OpaquePlanNode]


@dataclass(frozen=True)
class QueryPlan:
    """A planner's output for one operation. ``node`` is None for empty plans."""

    node: PlanNode | None = None
