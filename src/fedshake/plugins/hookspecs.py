# src/fedshake/plugins/hookspecs.py
"""pluggy hook specifications for federation backends.

Backends implement these hooks to register themselves. The backend manager
calls them during discovery.

Usage (implementing a backend package):
    # my_package/fedshake_plugin.py
    from fedshake.plugins.hookspecs import hookimpl

    @hookimpl  # NOT @hookspec - that's for defining specs
    def fedshake_get_backends():
        return [MyFederation2Backend]

    # my_package/pyproject.toml
    [project.entry-points.fedshake]
    my_backend = "my_package.fedshake_plugin"

Note: @hookspec defines the hook interface (done here).
      @hookimpl marks plugin implementations of those hooks.
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from fedshake.plugins.protocols import FederationBackendProtocol

# Project name for pluggy, also the setuptools entry-point group
PROJECT_NAME = "fedshake"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)

hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class FedshakeBackendSpec:
    """Hook specifications for federation backends."""

    @hookspec
    def fedshake_get_backends(self) -> list[type["FederationBackendProtocol"]]:  # type: ignore[empty-body]
        """Return backend classes.

        Returns:
            List of backend classes (not instances)
        """
