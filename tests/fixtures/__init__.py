# tests/fixtures/__init__.py
"""Shared test fixtures for fedshake tests.

- federation: stub composer/planner backend
- schemas: service SDL used across test modules
"""
