# src/fedshake/contracts/errors.py
"""Exceptions raised across subsystem boundaries.

Recoverable outcomes (recomposition or validation failing after pruning) are
NOT exceptions - they are ShakeResult variants. Everything here aborts a run.
"""

from collections.abc import Sequence
from typing import Any

from graphql import GraphQLError


class CompositionError(Exception):
    """Raised when the unmodified input services do not compose.

    Without a supergraph there is no query plan and therefore no basis for
    usage analysis, so the run aborts before any pruning happens.

    Attributes:
        errors: Composition errors reported by the backend
    """

    def __init__(self, errors: Sequence[GraphQLError]) -> None:
        self.errors = tuple(errors)
        details = "; ".join(error.message for error in self.errors)
        super().__init__(f"Could not compose input services ({len(self.errors)} errors): {details}")


class TraversalInvariantError(AssertionError):
    """Raised when a schema or operation walk loses required context.

    Examples: a field definition with no enclosing type, or an operation
    selecting a field the schema does not define. These are programming or
    contract errors, never data to be recovered from.
    """


class UnsupportedSelectionError(ValueError):
    """Raised when a ``requires`` selection falls outside the planner's subset.

    Planners emit only fields and inline fragments in ``requires``. Anything
    else is a planner contract violation.

    Attributes:
        kind: Name of the offending selection shape
        selection: The offending selection as received
    """

    def __init__(self, kind: str, selection: Any) -> None:
        self.kind = kind
        self.selection = selection
        super().__init__(f"Unsupported requires selection shape {kind!r}: {selection!r}")


class BackendNotFoundError(LookupError):
    """Raised when no federation backend is registered for a version."""
