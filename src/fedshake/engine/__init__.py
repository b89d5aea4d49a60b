# src/fedshake/engine/__init__.py
"""Tree-shaking engine: usage analysis and schema pruning.

Leaves first:
- fetch_plan: plan flattening, requires -> fragment, planner JSON normalisation
- coordinates: used-coordinate collection over operation documents
- directives: @key/@requires closure
- schema_cursor / pruner: schema document rewriting
- subgraph_schema: standalone schema of one service
- orchestrator: the per-service pipeline and result assembly
"""

from fedshake.engine.coordinates import collect_used_coordinates, declared_coordinates
from fedshake.engine.directives import collect_directive_coordinates
from fedshake.engine.fetch_plan import collect_fetch_nodes, plan_from_json, requires_to_fragment
from fedshake.engine.orchestrator import (
    GraphQLValidator,
    TreeShakeOrchestrator,
    shake_service,
    tree_shake_supergraph,
)
from fedshake.engine.pruner import prune_schema
from fedshake.engine.subgraph_schema import build_subgraph_schema

__all__ = [
    "GraphQLValidator",
    "TreeShakeOrchestrator",
    "build_subgraph_schema",
    "collect_directive_coordinates",
    "collect_fetch_nodes",
    "collect_used_coordinates",
    "declared_coordinates",
    "plan_from_json",
    "prune_schema",
    "requires_to_fragment",
    "shake_service",
    "tree_shake_supergraph",
]
