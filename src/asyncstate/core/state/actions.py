"""Action registry for state machine transitions.

Actions run when a trigger fires. They take either no argument or exactly
one argument whose type is declared in the machine definition.
"""
from __future__ import annotations

from .handlers.registries import DomainRegistry


class ActionRegistry(DomainRegistry):
    """Registry of transition actions keyed by name."""

    KIND = "action"


# Global registry instance
registry = ActionRegistry()

__all__ = ["ActionRegistry", "registry"]
