"""Status codes and modes used across subsystem boundaries."""

from enum import StrEnum


class ShakeStatus(StrEnum):
    """Outcome of a tree-shaking run.

    SUCCESS: pruned services recompose and every operation still validates.
    COMPOSITION_FAILURE: pruning broke cross-service consistency.
    OPERATION_VALIDATION_FAILURE: recomposed API schema rejects an operation.
    """

    SUCCESS = "SUCCESS"
    COMPOSITION_FAILURE = "COMPOSITION_FAILURE"
    OPERATION_VALIDATION_FAILURE = "OPERATION_VALIDATION_FAILURE"


class FederationVersion(StrEnum):
    """Federation composition mode.

    Selects between mutually exclusive composer/planner backends.
    """

    V1 = "1"
    V2 = "2"


class PlanNodeKind(StrEnum):
    """Kinds of query plan nodes, as emitted by federation planners."""

    FETCH = "Fetch"
    FLATTEN = "Flatten"
    PARALLEL = "Parallel"
    SEQUENCE = "Sequence"
    SUBSCRIPTION = "Subscription"


class SelectionKind(StrEnum):
    """Selection shapes a planner may emit in a fetch's ``requires`` clause."""

    FIELD = "Field"
    INLINE_FRAGMENT = "InlineFragment"
