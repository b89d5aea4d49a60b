# src/fedshake/cli.py
"""fedshake Command Line Interface.

Entry point for the fedshake CLI tool.
"""

from __future__ import annotations

import glob
from pathlib import Path
from typing import TYPE_CHECKING

import typer
import yaml
from dynaconf.vendor.ruamel.yaml.parser import ParserError as YamlParserError
from dynaconf.vendor.ruamel.yaml.scanner import ScannerError as YamlScannerError
from graphql import DocumentNode, GraphQLSyntaxError, parse
from pydantic import ValidationError

from fedshake import __version__
from fedshake.contracts import BackendNotFoundError, CompositionError, ServiceDefinition, ShakeResult, ShakeStatus
from fedshake.core.config import SchemaSourceError, dump_supergraph_config, load_config, load_service_definitions

if TYPE_CHECKING:
    from fedshake.plugins.manager import BackendManager

__all__ = ["app"]

# Module-level singleton for backend manager
_backend_manager_cache: BackendManager | None = None


def _get_backend_manager() -> BackendManager:
    """Get backend manager with entry-point backends registered (singleton)."""
    global _backend_manager_cache

    from fedshake.plugins.manager import BackendManager

    if _backend_manager_cache is None:
        manager = BackendManager()
        manager.register_entrypoint_backends()
        _backend_manager_cache = manager
    return _backend_manager_cache


app = typer.Typer(
    name="fedshake",
    help="fedshake: tree-shake federated GraphQL schemas down to what operations use.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"fedshake version {__version__}")
        raise typer.Exit()


def _load_dotenv(env_file: Path | None = None) -> bool:
    """Load environment variables from .env file.

    Args:
        env_file: Explicit path to .env file. If None, searches for .env
                 in current directory and parent directories.

    Returns:
        True if .env was found and loaded, False otherwise.

    Raises:
        typer.Exit: If explicit env_file path doesn't exist.
    """
    from dotenv import load_dotenv

    if env_file is not None:
        if not env_file.exists():
            typer.secho(
                f"Error: .env file not found: {env_file}",
                fg=typer.colors.RED,
                err=True,
            )
            raise typer.Exit(1)
        return load_dotenv(env_file, override=False)

    return load_dotenv(override=False)


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_dotenv: bool = typer.Option(
        False,
        "--no-dotenv",
        help="Skip loading .env file.",
    ),
    env_file: Path | None = typer.Option(
        None,
        "--env-file",
        help="Path to .env file (skips automatic search).",
        exists=False,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose/debug logging.",
    ),
    json_logs: bool = typer.Option(
        False,
        "--json-logs",
        help="Output structured JSON logs (for machine processing).",
    ),
) -> None:
    """fedshake: tree-shake federated GraphQL schemas."""
    from fedshake.core.logging import configure_logging

    configure_logging(json_output=json_logs, level="DEBUG" if verbose else "WARNING")

    if not no_dotenv:
        _load_dotenv(env_file=env_file)
    elif env_file is not None:
        typer.secho(
            "Warning: --env-file ignored because --no-dotenv is set.",
            fg=typer.colors.YELLOW,
            err=True,
        )


def _load_operations(pattern: str) -> list[DocumentNode]:
    """Parse every operation file matching a glob pattern.

    Raises:
        typer.Exit: If nothing matches or a file does not parse
    """
    paths = sorted(Path(match) for match in glob.glob(pattern, recursive=True) if Path(match).is_file())
    if not paths:
        typer.echo(f"Error: No operation files match: {pattern}", err=True)
        raise typer.Exit(1)

    operations = []
    for path in paths:
        try:
            operations.append(parse(path.read_text(encoding="utf-8")))
        except GraphQLSyntaxError as e:
            typer.echo(f"Syntax error in operation {path}: {e.message}", err=True)
            raise typer.Exit(1) from None
    return operations


def _log_summary(services: list[ServiceDefinition], result: ShakeResult) -> None:
    from fedshake.core.logging import get_logger
    from fedshake.engine.coordinates import declared_coordinates

    logger = get_logger(__name__)
    for service in services:
        shaken = result.service(service.name)
        logger.info(
            "service_shaken",
            service=service.name,
            declared_before=len(declared_coordinates(service.type_defs)),
            declared_after=0 if shaken is None else len(declared_coordinates(shaken.type_defs)),
        )


def _report_failure(result: ShakeResult) -> None:
    if result.status == ShakeStatus.COMPOSITION_FAILURE:
        typer.secho("Composition failed after tree shaking", fg=typer.colors.RED, err=True)
        typer.echo(f"Error count: {len(result.composition_errors)} errors", err=True)
        for error in result.composition_errors:
            typer.echo(f"  - {error.message}", err=True)
    elif result.status == ShakeStatus.OPERATION_VALIDATION_FAILURE:
        typer.secho("Operations are no longer valid against the new supergraph", fg=typer.colors.RED, err=True)
        for operation, errors in result.operation_errors.items():
            typer.echo(operation, err=True)
            typer.echo(f"Error count: {len(errors)} errors", err=True)
            for error in errors:
                typer.echo(f"  - {error.message}", err=True)
            typer.echo("-" * 32, err=True)


def _write_output(result: ShakeResult, federation_version: str, out: Path | None) -> None:
    if out is None:
        config = dump_supergraph_config(result.services, federation_version, files=False)
        typer.echo(yaml.safe_dump(config, sort_keys=False))
        return

    out.mkdir(parents=True, exist_ok=True)
    config = dump_supergraph_config(result.services, federation_version, files=True)
    (out / "supergraph.yaml").write_text(yaml.safe_dump(config, sort_keys=False), encoding="utf-8")
    for service in result.services:
        (out / f"{service.name}.graphql").write_text(service.sdl, encoding="utf-8")


@app.command()
def shake(
    config: str = typer.Option(
        ...,
        "--config",
        "-c",
        help="Path to supergraph YAML config.",
    ),
    operations: str = typer.Option(
        ...,
        "--operations",
        "-o",
        help="Glob pattern matching operation files.",
    ),
    out: Path | None = typer.Option(
        None,
        "--out",
        help="Directory for supergraph.yaml and <service>.graphql files (default: print config to stdout).",
    ),
) -> None:
    """Tree-shake the configured subgraphs down to what the operations use.

    The pruned output is written even when recomposition or validation
    fails; the failure is reported on stderr and the exit code is 1.
    """
    from fedshake.engine.orchestrator import TreeShakeOrchestrator

    config_path = Path(config).expanduser()

    try:
        supergraph = load_config(config_path)
    except (YamlParserError, YamlScannerError) as e:
        typer.echo(f"YAML syntax error in {config}: {e.problem}", err=True)
        raise typer.Exit(1) from None
    except FileNotFoundError:
        typer.echo(f"Error: Config file not found: {config}", err=True)
        raise typer.Exit(1) from None
    except ValidationError as e:
        typer.echo("Configuration errors:", err=True)
        for error in e.errors():
            loc = ".".join(str(x) for x in error["loc"])
            typer.echo(f"  - {loc}: {error['msg']}", err=True)
        raise typer.Exit(1) from None

    try:
        services = load_service_definitions(supergraph, config_path.parent)
    except SchemaSourceError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    documents = _load_operations(operations)

    try:
        backend = _get_backend_manager().get_backend(supergraph.federation_version)
    except BackendNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None

    try:
        result = TreeShakeOrchestrator(backend).run(services, documents)
    except CompositionError as e:
        typer.echo("Input services do not compose:", err=True)
        for error in e.errors:
            typer.echo(f"  - {error.message}", err=True)
        raise typer.Exit(1) from None

    _log_summary(services, result)
    _report_failure(result)
    _write_output(result, supergraph.federation_version.value, out)

    if not result.succeeded:
        raise typer.Exit(1)


@app.command()
def backends() -> None:
    """List registered federation backends."""
    specs = _get_backend_manager().get_backend_specs()
    if not specs:
        typer.echo("No backends registered.")
        return
    for spec in sorted(specs, key=lambda s: s.federation_version.value):
        typer.echo(f"  {spec.name:<24} federation {spec.federation_version.value}  ({spec.class_name})")


if __name__ == "__main__":
    app()
