"""Handler registry base classes."""
from .registries import (
    DomainRegistry,
    register_action,
    register_guard,
    register_resolver,
)

__all__ = ["DomainRegistry", "register_guard", "register_resolver", "register_action"]
