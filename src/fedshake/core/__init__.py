"""Core infrastructure: Configuration, Logging."""

from fedshake.core.config import (
    SchemaSource,
    SchemaSourceError,
    SubgraphConfig,
    SupergraphConfig,
    dump_supergraph_config,
    load_config,
    load_service_definitions,
)
from fedshake.core.logging import configure_logging, get_logger

__all__ = [
    "SchemaSource",
    "SchemaSourceError",
    "SubgraphConfig",
    "SupergraphConfig",
    "configure_logging",
    "dump_supergraph_config",
    "get_logger",
    "load_config",
    "load_service_definitions",
]
