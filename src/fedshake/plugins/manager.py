# src/fedshake/plugins/manager.py
"""Backend manager for discovery, registration, and lookup.

Uses pluggy for hook-based backend registration.
"""

from dataclasses import dataclass
from typing import Any

import pluggy

from fedshake.contracts import BackendNotFoundError, FederationVersion
from fedshake.core.logging import get_logger
from fedshake.plugins.hookspecs import PROJECT_NAME, FedshakeBackendSpec
from fedshake.plugins.protocols import FederationBackendProtocol

logger = get_logger(__name__)


@dataclass(frozen=True)
class BackendSpec:
    """Registration record for a backend, for listings."""

    name: str
    federation_version: FederationVersion
    class_name: str

    @classmethod
    def from_backend(cls, backend_cls: type[FederationBackendProtocol]) -> "BackendSpec":
        return cls(
            name=backend_cls.name,
            federation_version=FederationVersion(backend_cls.federation_version),
            class_name=f"{backend_cls.__module__}.{backend_cls.__qualname__}",
        )


class BackendManager:
    """Manages backend discovery, registration, and lookup.

    At most one backend may serve each federation version: the version
    selector in the supergraph config has to resolve unambiguously.

    Usage:
        manager = BackendManager()
        manager.register_entrypoint_backends()

        backend = manager.get_backend(FederationVersion.V2)
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(FedshakeBackendSpec)

        self._backends: dict[str, type[FederationBackendProtocol]] = {}
        self._by_version: dict[FederationVersion, type[FederationBackendProtocol]] = {}

    def register_entrypoint_backends(self) -> int:
        """Load backends advertised through the ``fedshake`` entry-point group.

        Returns:
            Number of plugins loaded
        """
        loaded = self._pm.load_setuptools_entrypoints(PROJECT_NAME)
        logger.debug("backend_entrypoints_loaded", count=loaded)
        self._refresh_caches()
        return loaded

    def register(self, plugin: Any) -> None:
        """Register a plugin.

        Args:
            plugin: Plugin object implementing fedshake_get_backends
        """
        self._pm.register(plugin)
        self._refresh_caches()

    def _refresh_caches(self) -> None:
        """Refresh backend caches from hooks.

        Raises:
            ValueError: If two backends share a name or a federation version
        """
        new_backends: dict[str, type[FederationBackendProtocol]] = {}
        new_by_version: dict[FederationVersion, type[FederationBackendProtocol]] = {}

        for backends in self._pm.hook.fedshake_get_backends():
            for cls in backends:
                name = cls.name
                if name in new_backends:
                    raise ValueError(f"Duplicate backend name: '{name}'. Already registered by {new_backends[name].__name__}")
                version = FederationVersion(cls.federation_version)
                if version in new_by_version:
                    raise ValueError(
                        f"Backends '{new_by_version[version].name}' and '{name}' both serve federation version {version.value}. "
                        "Federation versions must resolve to exactly one backend."
                    )
                new_backends[name] = cls
                new_by_version[version] = cls

        self._backends = new_backends
        self._by_version = new_by_version

    # === Getters ===

    def get_backends(self) -> list[type[FederationBackendProtocol]]:
        """Get all registered backend classes."""
        return list(self._backends.values())

    def get_backend_specs(self) -> list[BackendSpec]:
        return [BackendSpec.from_backend(cls) for cls in self._backends.values()]

    def get_backend_by_name(self, name: str) -> type[FederationBackendProtocol] | None:
        return self._backends.get(name)

    def get_backend(self, version: FederationVersion | str) -> FederationBackendProtocol:
        """Instantiate the backend serving a federation version.

        Raises:
            BackendNotFoundError: If no backend serves the version
        """
        federation_version = FederationVersion(version)
        backend_cls = self._by_version.get(federation_version)
        if backend_cls is None:
            available = sorted(version.value for version in self._by_version)
            raise BackendNotFoundError(
                f"No backend registered for federation version {federation_version.value}. "
                f"Available versions: {available or 'none'}. Install a package that provides a '{PROJECT_NAME}' backend entry point."
            )
        return backend_cls()
