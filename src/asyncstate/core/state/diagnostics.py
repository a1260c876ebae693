"""Read-only capability probes.

These answer "could this trigger fire right now?" without committing to a
transition. They evaluate triggers with ``raise_invalid=False`` so the
machine's invalid-trigger hook never fires, and they never move the machine.
"""
from __future__ import annotations

from typing import Any, Iterator, Optional

from .evaluator import TriggerEvaluator
from .protocols import MachineHandle
from .representations import DynamicTarget, TriggerRepresentation

_default_evaluator = TriggerEvaluator()


class PermittedTriggers:
    """Restartable view over the triggers of a machine's current state.

    Each iteration re-reads the machine's current representation, so a view
    created before a transition reflects the new state when iterated again.
    Triggers are yielded in configuration order, including ignored ones and
    those whose guards would currently reject them.
    """

    def __init__(self, machine: MachineHandle) -> None:
        self._machine = machine

    def __iter__(self) -> Iterator[Any]:
        for trigger in self._machine.current_state_representation.triggers:
            yield trigger

    def __repr__(self) -> str:
        return f"PermittedTriggers({list(self)!r})"


def permitted_triggers(machine: MachineHandle) -> PermittedTriggers:
    return PermittedTriggers(machine)


async def _dynamic_target_allows(rep: TriggerRepresentation, evaluator: TriggerEvaluator) -> bool:
    if not isinstance(rep.target, DynamicTarget):
        return True
    return await evaluator.dynamic_resolver.evaluate(rep.target) is not None


async def can_handle(
    trigger: Any,
    machine: MachineHandle,
    *,
    exact_match: bool = False,
    evaluator: Optional[TriggerEvaluator] = None,
) -> bool:
    """Return True if ``trigger`` would currently resolve.

    With ``exact_match`` the probe also runs a dynamic target's resolver
    (once) and requires the configured action to take no argument.
    """
    evaluator = evaluator or _default_evaluator
    rep = await evaluator.resolve(trigger, machine, raise_invalid=False)
    if rep is None:
        return False
    if not exact_match:
        return True
    if not await _dynamic_target_allows(rep, evaluator):
        return False
    return rep.action.matches_no_argument()


async def can_handle_with(
    trigger: Any,
    machine: MachineHandle,
    argument_type: type,
    *,
    evaluator: Optional[TriggerEvaluator] = None,
) -> bool:
    """Return True if ``trigger`` would currently fire with an ``argument_type`` argument.

    The configured action must declare exactly ``argument_type``; a subclass
    or base class of it does not match. Dynamic targets are resolved.
    """
    evaluator = evaluator or _default_evaluator
    rep = await evaluator.resolve(trigger, machine, raise_invalid=False)
    if rep is None:
        return False
    if not await _dynamic_target_allows(rep, evaluator):
        return False
    return rep.action.matches_argument(argument_type)


__all__ = ["PermittedTriggers", "permitted_triggers", "can_handle", "can_handle_with"]
