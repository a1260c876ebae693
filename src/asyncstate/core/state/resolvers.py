"""Registry of dynamic target resolvers.

Resolvers are zero-argument callables, sync or async, returning a
``DynamicState``.
"""
from __future__ import annotations

from .handlers.registries import DomainRegistry


class ResolverRegistry(DomainRegistry):
    """Registry of dynamic target resolvers keyed by name."""

    KIND = "resolver"


# Global registry instance
registry = ResolverRegistry()

__all__ = ["ResolverRegistry", "registry"]
