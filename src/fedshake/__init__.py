# src/fedshake/__init__.py
"""
fedshake: tree shaking for federated GraphQL supergraphs.

Reduces each subgraph schema to the types, fields and arguments that a fixed
set of client operations actually needs, while keeping entity keys and
field requirements valid across services.
"""

__version__ = "0.3.0"
