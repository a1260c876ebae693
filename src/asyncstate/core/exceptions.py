from __future__ import annotations

from typing import Any, Dict, Mapping


class AsyncStateError(Exception):
    """Base exception for asyncstate."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": {k: _jsonable(v) for k, v in self.context.items()},
        }


def _jsonable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return repr(value)


class ConfigurationError(AsyncStateError, ValueError):
    """Raised when a state graph or settings document is malformed."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        AsyncStateError.__init__(self, message, context=context)
        ValueError.__init__(self, message)


class InvalidTriggerError(AsyncStateError, ValueError):
    """Raised by machines configured to escalate invalid triggers."""

    def __init__(
        self,
        message: str = "",
        *,
        trigger: Any = None,
        state: Any = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        ctx.setdefault("trigger", trigger)
        ctx.setdefault("state", state)
        AsyncStateError.__init__(self, message, context=ctx)
        ValueError.__init__(self, message)
        self.trigger = trigger
        self.state = state


class ActionShapeMismatchError(AsyncStateError, TypeError):
    """Raised when a caller fires a trigger with the wrong argument shape.

    This is a programming-contract violation, not a runtime rejection: the
    configured action expects a different argument (or none at all).
    """

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        AsyncStateError.__init__(self, message, context=context)
        TypeError.__init__(self, message)


class GuardEvaluationError(AsyncStateError, RuntimeError):
    """Raised when a guard itself fails while being evaluated."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        AsyncStateError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)


class DynamicStateError(AsyncStateError, RuntimeError):
    """Raised when a dynamic target resolver fails or breaks its contract."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        AsyncStateError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)


class ReentrantTransitionError(AsyncStateError, RuntimeError):
    """Raised when a transition action fires a trigger on its own machine."""

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        AsyncStateError.__init__(self, message, context=context)
        RuntimeError.__init__(self, message)


__all__ = [
    "AsyncStateError",
    "ConfigurationError",
    "InvalidTriggerError",
    "ActionShapeMismatchError",
    "GuardEvaluationError",
    "DynamicStateError",
    "ReentrantTransitionError",
]
