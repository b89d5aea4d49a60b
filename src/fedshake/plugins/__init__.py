# src/fedshake/plugins/__init__.py
"""Backend plugin system via pluggy.

- Protocols: contracts for federation backends and validators
- Hookspecs: pluggy hook definitions
- Manager: backend discovery, registration and lookup by federation version
"""

from fedshake.plugins.hookspecs import hookimpl
from fedshake.plugins.manager import BackendManager, BackendSpec
from fedshake.plugins.protocols import FederationBackendProtocol, ValidatorProtocol

__all__ = [
    "BackendManager",
    "BackendSpec",
    "FederationBackendProtocol",
    "ValidatorProtocol",
    "hookimpl",
]
