"""Trigger resolution against a live machine.

``TriggerEvaluator.resolve`` answers one question: may ``trigger`` fire from
the machine's current state right now? It runs three steps in fixed order
and stops at the first negative answer:

1. Lookup: the trigger must be in the current state's table.
2. Guard: if present, it must pass (awaited when asynchronous).
3. Ignored check: explicitly ignored triggers never resolve.

Not-found and guard-rejected triggers are reported through the machine's
``notify_invalid_trigger`` hook (when ``raise_invalid`` is set). Ignored
triggers are never reported, even though they do not resolve.

Dynamic targets are not evaluated here; see ``DynamicStateResolver``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from ..exceptions import GuardEvaluationError
from .dynamic import DynamicStateResolver
from .protocols import MachineHandle
from .representations import Guard, TriggerRepresentation

logger = logging.getLogger(__name__)


class TriggerOutcome(Enum):
    ACCEPTED = "accepted"
    NOT_FOUND = "not_found"
    GUARD_REJECTED = "guard_rejected"
    IGNORED = "ignored"

    @property
    def is_invalid(self) -> bool:
        return self in (TriggerOutcome.NOT_FOUND, TriggerOutcome.GUARD_REJECTED)


@dataclass(frozen=True)
class TriggerEvaluation:
    outcome: TriggerOutcome
    representation: Optional[TriggerRepresentation] = None

    @property
    def accepted(self) -> bool:
        return self.outcome is TriggerOutcome.ACCEPTED


class TriggerEvaluator:
    """Resolves triggers against a ``MachineHandle``."""

    def __init__(self, dynamic_resolver: Optional[DynamicStateResolver] = None) -> None:
        self.dynamic_resolver = dynamic_resolver or DynamicStateResolver()

    async def _check_guard(self, guard: Guard, trigger: Any) -> bool:
        try:
            return await guard.check()
        except Exception as exc:
            raise GuardEvaluationError(
                f"Guard '{guard.name}' failed for trigger {trigger!r}: {exc}",
                context={"guard": guard.name, "trigger": trigger},
            ) from exc

    async def evaluate(
        self,
        trigger: Any,
        machine: MachineHandle,
        raise_invalid: bool = True,
    ) -> TriggerEvaluation:
        """Run lookup, guard and ignored check; report which step decided."""
        current = machine.current_state_representation
        rep = current.find(trigger)

        if rep is None:
            outcome = TriggerOutcome.NOT_FOUND
        elif rep.guard is not None and not await self._check_guard(rep.guard, trigger):
            outcome = TriggerOutcome.GUARD_REJECTED
        elif rep.is_ignored:
            outcome = TriggerOutcome.IGNORED
        else:
            logger.debug("Trigger %r accepted in state %r", trigger, current.state)
            return TriggerEvaluation(TriggerOutcome.ACCEPTED, rep)

        logger.debug("Trigger %r in state %r: %s", trigger, current.state, outcome.value)
        if outcome.is_invalid and raise_invalid:
            machine.notify_invalid_trigger(trigger)
        return TriggerEvaluation(outcome)

    async def resolve(
        self,
        trigger: Any,
        machine: MachineHandle,
        raise_invalid: bool = True,
    ) -> Optional[TriggerRepresentation]:
        """Return the trigger's representation if it may fire now, else None."""
        evaluation = await self.evaluate(trigger, machine, raise_invalid)
        return evaluation.representation


__all__ = ["TriggerOutcome", "TriggerEvaluation", "TriggerEvaluator"]
