# src/fedshake/engine/fetch_plan.py
"""Query plan adapter.

Three jobs:
- flatten a plan tree into the ordered list of fetches it issues;
- turn a fetch's ``requires`` selection into a synthetic fragment document
  that the coordinate collector can walk;
- normalise planner JSON (as printed by federation gateways) into the typed
  plan contract, so every backend feeds the engine the same shape.

Subscription plans contribute no fetches. This is a known limitation: a
subscription-only field is pruned and the operation then fails validation.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from graphql import (
    DocumentNode,
    FieldNode,
    FragmentDefinitionNode,
    InlineFragmentNode,
    NamedTypeNode,
    NameNode,
    SelectionSetNode,
)

from fedshake.contracts.enums import PlanNodeKind, SelectionKind
from fedshake.contracts.errors import UnsupportedSelectionError
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
from fedshake.core.logging import get_logger

logger = get_logger(__name__)

# Name of the synthetic fragment built from a requires selection
REQUIRES_FRAGMENT_NAME = "f"


def collect_fetch_nodes(plan: QueryPlan) -> list[FetchNode]:
    """Collect every fetch of a plan, depth-first, in plan order.

    A Subscription root yields nothing and is not descended into.
    """
    nodes: list[FetchNode] = []
    if plan.node is None:
        return nodes
    if isinstance(plan.node, SubscriptionNode):
        logger.info("subscription_plan_skipped", service=plan.node.primary.service_name)
        return nodes
    _collect(plan.node, nodes)
    return nodes


def _collect(node: PlanNode, nodes: list[FetchNode]) -> None:
    if isinstance(node, FetchNode):
        nodes.append(node)
    elif isinstance(node, FlattenNode):
        _collect(node.node, nodes)
    elif isinstance(node, (ParallelNode, SequenceNode)):
        for child in node.nodes:
            _collect(child, nodes)
    else:
        logger.warning("plan_node_not_traversed", kind=_kind_name(node))


def requires_to_fragment(selection: QueryPlanSelectionNode) -> DocumentNode:
    """Build ``fragment f on <Type> { ... }`` from a requires selection.

    Args:
        selection: Root of the requires selection; must be an inline fragment
            with a type condition

    Raises:
        UnsupportedSelectionError: For any other root shape, or for nested
            shapes other than fields and inline fragments
    """
    if not isinstance(selection, QueryPlanInlineFragmentNode):
        raise UnsupportedSelectionError(_kind_name(selection), selection)
    if not selection.type_condition:
        raise UnsupportedSelectionError("InlineFragment without type condition", selection)

    fragment = FragmentDefinitionNode(
        name=NameNode(value=REQUIRES_FRAGMENT_NAME),
        type_condition=_named_type(selection.type_condition),
        variable_definitions=(),
        directives=(),
        selection_set=_selection_set(selection.selections),
    )
    return DocumentNode(definitions=(fragment,))


def _selection_set(selections: tuple[QueryPlanSelectionNode, ...]) -> SelectionSetNode:
    return SelectionSetNode(selections=tuple(_selection(selection) for selection in selections))


def _selection(selection: QueryPlanSelectionNode) -> FieldNode | InlineFragmentNode:
    if isinstance(selection, QueryPlanFieldNode):
        return FieldNode(
            alias=NameNode(value=selection.alias) if selection.alias else None,
            name=NameNode(value=selection.name),
            arguments=(),
            directives=(),
            selection_set=_selection_set(selection.selections) if selection.selections else None,
        )
    if isinstance(selection, QueryPlanInlineFragmentNode):
        return InlineFragmentNode(
            type_condition=_named_type(selection.type_condition) if selection.type_condition else None,
            directives=(),
            selection_set=_selection_set(selection.selections),
        )
    raise UnsupportedSelectionError(_kind_name(selection), selection)


def _named_type(name: str) -> NamedTypeNode:
    return NamedTypeNode(name=NameNode(value=name))


def _kind_name(value: Any) -> str:
    if isinstance(value, OpaquePlanNode):
        return value.kind_name
    kind = getattr(value, "kind", None)
    return str(kind) if kind is not None else type(value).__name__


# =============================================================================
# Planner JSON normalisation
# =============================================================================


def plan_from_json(data: Mapping[str, Any]) -> QueryPlan:
    """Convert planner JSON into a QueryPlan.

    Accepts either ``{"kind": "QueryPlan", "node": {...}}`` or a bare plan node.
    Unknown plan node kinds become OpaquePlanNode; unknown selection kinds in
    ``requires`` raise UnsupportedSelectionError.
    """
    if data.get("kind") == "QueryPlan":
        node = data.get("node")
        return QueryPlan(node=plan_node_from_json(node) if node else None)
    return QueryPlan(node=plan_node_from_json(data))


def plan_node_from_json(data: Mapping[str, Any]) -> PlanNode:
    kind = data.get("kind")
    if kind == PlanNodeKind.FETCH:
        return _fetch_from_json(data)
    if kind == PlanNodeKind.FLATTEN:
        return FlattenNode(node=plan_node_from_json(data["node"]), path=tuple(data.get("path") or ()))
    if kind == PlanNodeKind.SEQUENCE:
        return SequenceNode(nodes=tuple(plan_node_from_json(child) for child in data["nodes"]))
    if kind == PlanNodeKind.PARALLEL:
        return ParallelNode(nodes=tuple(plan_node_from_json(child) for child in data["nodes"]))
    if kind == PlanNodeKind.SUBSCRIPTION:
        rest = data.get("rest")
        return SubscriptionNode(
            primary=_fetch_from_json(data["primary"]),
            rest=plan_node_from_json(rest) if rest else None,
        )
    return OpaquePlanNode(kind_name=str(kind), data=dict(data))


def _fetch_from_json(data: Mapping[str, Any]) -> FetchNode:
    requires = data.get("requires")
    return FetchNode(
        service_name=data["serviceName"],
        operation=data["operation"],
        requires=tuple(selection_from_json(selection) for selection in requires) if requires else None,
        variable_usages=tuple(data.get("variableUsages") or ()),
    )


def selection_from_json(data: Mapping[str, Any]) -> QueryPlanSelectionNode:
    kind = data.get("kind")
    if kind == SelectionKind.FIELD:
        selections = data.get("selections")
        return QueryPlanFieldNode(
            name=data["name"],
            alias=data.get("alias"),
            selections=tuple(selection_from_json(child) for child in selections) if selections else None,
        )
    if kind == SelectionKind.INLINE_FRAGMENT:
        return QueryPlanInlineFragmentNode(
            type_condition=data.get("typeCondition"),
            selections=tuple(selection_from_json(child) for child in data.get("selections") or ()),
        )
    raise UnsupportedSelectionError(str(kind), dict(data))
