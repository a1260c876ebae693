"""Guard registry for state machine transitions.

Guards are zero-argument predicates, sync or async, that decide whether a
trigger is currently accepted. A guard that raises is reported as
``GuardEvaluationError``; it is never treated as a rejection.
"""
from __future__ import annotations

from .handlers.registries import DomainRegistry


class GuardRegistry(DomainRegistry):
    """Registry of guard predicates keyed by name."""

    KIND = "guard"


# Global registry instance
registry = GuardRegistry()

__all__ = ["GuardRegistry", "registry"]
