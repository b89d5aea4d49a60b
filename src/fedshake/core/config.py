# src/fedshake/core/config.py
"""
Supergraph configuration schema and loading.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.

The file format is the supergraph YAML used by federation tooling:

    federation_version: 2
    subgraphs:
      products:
        routing_url: http://products/graphql
        schema:
          file: ./products.graphql
"""

import os
import re
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from graphql import GraphQLSyntaxError
from pydantic import BaseModel, Field, field_validator, model_validator

from fedshake.contracts import FederationVersion, ServiceDefinition


class SchemaSourceError(Exception):
    """Raised when a subgraph's schema source cannot be turned into SDL.

    This occurs when:
    - The source is a live endpoint (subgraph_url) or a registry graphref
    - The referenced schema file does not exist
    - The SDL does not parse
    """


class SchemaSource(BaseModel):
    """Where a subgraph's schema comes from. Exactly one field is set."""

    model_config = {"frozen": True, "extra": "forbid"}

    sdl: str | None = Field(default=None, description="Inline SDL")
    file: str | None = Field(default=None, description="SDL file, relative to the config file")
    subgraph_url: str | None = Field(default=None, description="Introspection endpoint (not loadable)")
    graphref: str | None = Field(default=None, description="Registry graph reference (not loadable)")

    @model_validator(mode="after")
    def validate_exactly_one_source(self) -> "SchemaSource":
        provided = [name for name in ("sdl", "file", "subgraph_url", "graphref") if getattr(self, name) is not None]
        if len(provided) != 1:
            raise ValueError(f"Exactly one schema source is required, got {provided or 'none'}")
        return self


class SubgraphConfig(BaseModel):
    """One subgraph entry."""

    model_config = {"frozen": True, "extra": "forbid"}

    routing_url: str | None = Field(default=None, description="URL the router sends fetches to")
    schema_source: SchemaSource = Field(alias="schema", description="Schema source")


class SupergraphConfig(BaseModel):
    """Top-level supergraph configuration."""

    model_config = {"frozen": True, "extra": "forbid"}

    federation_version: FederationVersion = Field(
        default=FederationVersion.V1,
        description="Composition/planning version selecting the backend",
    )
    subgraphs: dict[str, SubgraphConfig] = Field(description="Subgraphs by service name")

    @field_validator("federation_version", mode="before")
    @classmethod
    def coerce_version(cls, v: Any) -> Any:
        """YAML reads `federation_version: 2` as an int."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        if isinstance(v, str):
            # Rover-style "=2.3.1" pins collapse to their major version
            return v.lstrip("=").split(".", 1)[0]
        return v

    @field_validator("subgraphs")
    @classmethod
    def validate_subgraphs_not_empty(cls, v: dict[str, SubgraphConfig]) -> dict[str, SubgraphConfig]:
        """At least one subgraph is required."""
        if not v:
            raise ValueError("At least one subgraph is required")
        return v


# Regex pattern for ${VAR} or ${VAR:-default} syntax
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")


def _expand_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """Recursively expand ${VAR} and ${VAR:-default} patterns in config values."""

    def replacer(match: re.Match[str]) -> str:
        env_value = os.environ.get(match.group(1))
        if env_value is not None:
            return env_value
        default = match.group(2)
        if default is not None:
            return default
        # Unset with no default: keep the reference so validation shows it
        return match.group(0)

    def _expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _ENV_VAR_PATTERN.sub(replacer, value)
        elif isinstance(value, dict):
            return {k: _expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [_expand_value(item) for item in value]
        else:
            return value

    return {k: _expand_value(v) for k, v in config.items()}


def load_config(config_path: Path) -> SupergraphConfig:
    """Load supergraph config from YAML with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (FEDSHAKE_*) - highest priority
    2. Config file (supergraph.yaml)
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: FEDSHAKE_FEDERATION_VERSION=2,
    FEDSHAKE_SUBGRAPHS__products__ROUTING_URL=... for nested keys.

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="FEDSHAKE",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf upper-cases top-level keys and injects its own settings
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): v for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}
    raw_config = _expand_env_vars(raw_config)

    return SupergraphConfig(**raw_config)


def load_service_definitions(config: SupergraphConfig, base_dir: Path) -> list[ServiceDefinition]:
    """Resolve every subgraph's schema source into a ServiceDefinition.

    Args:
        config: Validated supergraph config
        base_dir: Directory that relative schema files resolve against

    Raises:
        SchemaSourceError: On an unloadable source, missing file or bad SDL
    """
    definitions = []
    for name, subgraph in config.subgraphs.items():
        sdl = _read_sdl(name, subgraph.schema_source, base_dir)
        try:
            definitions.append(ServiceDefinition.from_sdl(name, sdl, routing_url=subgraph.routing_url))
        except GraphQLSyntaxError as e:
            raise SchemaSourceError(f"Subgraph '{name}': invalid SDL: {e.message}") from e
    return definitions


def _read_sdl(name: str, source: SchemaSource, base_dir: Path) -> str:
    if source.sdl is not None:
        return source.sdl
    if source.file is not None:
        path = base_dir / source.file
        if not path.is_file():
            raise SchemaSourceError(f"Subgraph '{name}': schema file not found: {path}")
        return path.read_text(encoding="utf-8")
    kind = "subgraph_url" if source.subgraph_url is not None else "graphref"
    raise SchemaSourceError(
        f"Subgraph '{name}': '{kind}' schema sources need live introspection, which is not supported. "
        "Export the SDL and reference it with 'file' or 'sdl'."
    )


def dump_supergraph_config(
    services: Sequence[ServiceDefinition],
    federation_version: FederationVersion | str,
    *,
    files: bool,
) -> dict[str, Any]:
    """Render services back into supergraph config shape.

    Args:
        services: Service definitions to emit, in order
        federation_version: Version to record
        files: Reference ./<name>.graphql files instead of inlining SDL
    """
    subgraphs: dict[str, Mapping[str, Any]] = {}
    for service in services:
        schema = {"file": f"./{service.name}.graphql"} if files else {"sdl": service.sdl}
        subgraphs[service.name] = {"routing_url": service.routing_url, "schema": schema}
    return {
        "subgraphs": subgraphs,
        "federation_version": FederationVersion(federation_version).value,
    }
