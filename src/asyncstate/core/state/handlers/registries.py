"""Generic domain-aware registries for state machine handlers.

Machine definition documents refer to guards, dynamic target resolvers
and actions by name. These registries map those names to callables, with
optional per-machine ("domain") overrides.

Example usage:
    registry.register("is_ready", ready_fn, domain="pump")
    registry.register("is_ready", other_fn, domain="valve")

    registry.get("is_ready", domain="pump")  # Returns ready_fn
    registry.get("is_ready", domain="valve")  # Returns other_fn

    # Fallback to shared handler if domain-specific not found
    registry.register("always", shared_fn)  # No domain = shared
    registry.get("always", domain="pump")  # Falls back to shared
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, Optional

from ...exceptions import ConfigurationError

Handler = Callable[..., Any]


class DomainRegistry:
    """Registry with domain-aware handler lookups.

    Handlers can be registered with an optional domain prefix. When looking up
    a handler, the registry first tries the domain-specific key, then falls
    back to the shared (non-prefixed) handler if not found.

    Attributes:
        SHARED_DOMAIN: Constant for handlers that apply to all domains
        KIND: Human-readable handler kind used in error messages
    """

    SHARED_DOMAIN: ClassVar[str] = "shared"
    KIND: ClassVar[str] = "handler"

    def __init__(self) -> None:
        self._handlers: Dict[str, Handler] = {}

    def _make_key(self, name: str, domain: str = SHARED_DOMAIN) -> str:
        """Create registry key from name and domain."""
        if domain == self.SHARED_DOMAIN:
            return name
        return f"{domain}:{name}"

    def register(self, name: str, handler: Handler, domain: str = SHARED_DOMAIN) -> None:
        """Register a handler function."""
        if not callable(handler):
            raise TypeError("handler must be callable")
        key = self._make_key(name, domain)
        self._handlers[key] = handler

    def get(self, name: str, domain: str = SHARED_DOMAIN) -> Optional[Handler]:
        """Get a handler by name, with domain fallback."""
        # Try domain-specific first
        if domain != self.SHARED_DOMAIN:
            key = self._make_key(name, domain)
            if key in self._handlers:
                return self._handlers[key]

        # Fall back to shared
        return self._handlers.get(name)

    def require(self, name: str, domain: str = SHARED_DOMAIN) -> Handler:
        """Get a handler by name or raise ``ConfigurationError``."""
        handler = self.get(name, domain)
        if handler is None:
            raise ConfigurationError(
                f"Unknown {self.KIND}: {name} (domain: {domain})",
                context={"kind": self.KIND, "name": name, "domain": domain},
            )
        return handler

    def reset(self) -> None:
        """Clear all handlers."""
        self._handlers.clear()


def _get_guard_registry() -> DomainRegistry:
    """Lazy import to avoid circular dependencies."""
    from ..guards import registry

    return registry


def _get_resolver_registry() -> DomainRegistry:
    """Lazy import to avoid circular dependencies."""
    from ..resolvers import registry

    return registry


def _get_action_registry() -> DomainRegistry:
    """Lazy import to avoid circular dependencies."""
    from ..actions import registry

    return registry


def register_guard(name: str, domain: str = DomainRegistry.SHARED_DOMAIN):
    """Decorator to register a guard function."""

    def decorator(fn):
        _get_guard_registry().register(name, fn, domain)
        return fn

    return decorator


def register_resolver(name: str, domain: str = DomainRegistry.SHARED_DOMAIN):
    """Decorator to register a dynamic target resolver."""

    def decorator(fn):
        _get_resolver_registry().register(name, fn, domain)
        return fn

    return decorator


def register_action(name: str, domain: str = DomainRegistry.SHARED_DOMAIN):
    """Decorator to register a transition action."""

    def decorator(fn):
        _get_action_registry().register(name, fn, domain)
        return fn

    return decorator


__all__ = [
    "DomainRegistry",
    "register_guard",
    "register_resolver",
    "register_action",
]
