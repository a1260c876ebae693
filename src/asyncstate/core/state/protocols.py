"""Protocols consumed by the transition-resolution core."""
from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from .representations import StateRepresentation


@runtime_checkable
class MachineHandle(Protocol):
    """Live machine as seen by the evaluator.

    The evaluator reads ``current_state_representation`` without locking;
    callers must not let a transition executor replace it while an
    evaluation against the same handle is in flight.
    """

    @property
    def current_state_representation(self) -> StateRepresentation:
        """Representation of the state the machine is currently in."""
        ...

    def notify_invalid_trigger(self, trigger: Any) -> None:
        """Called when a trigger is absent or rejected by its guard.

        Implementations decide whether to log, raise or ignore.
        """
        ...


__all__ = ["MachineHandle"]
