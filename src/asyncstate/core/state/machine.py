"""Reference awaitable state machine.

``AwaitableStateMachine`` is a minimal transition executor built on the
evaluator: it holds the current state pointer, decides what to do with
invalid triggers, and runs transition actions. It has no entry/exit
actions and keeps no history.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, Mapping, Optional

from ..config import InvalidTriggerPolicy, MachineSettings
from ..exceptions import (
    ActionShapeMismatchError,
    ConfigurationError,
    InvalidTriggerError,
    ReentrantTransitionError,
)
from . import diagnostics
from .evaluator import TriggerEvaluator
from .representations import DynamicTarget, FixedTarget, StateRepresentation, TriggerRepresentation

logger = logging.getLogger(__name__)

InvalidTriggerCallback = Callable[[Any, Any], None]

_NO_ARGUMENT = object()


def validate_graph(states: Mapping[Any, StateRepresentation], initial: Any, *, name: str = "machine") -> None:
    """Check that the initial state and every fixed target are configured."""
    if initial not in states:
        raise ConfigurationError(
            f"Initial state {initial!r} is not configured",
            context={"machine": name, "state": initial},
        )
    for rep in states.values():
        for trig in rep.triggers.values():
            if isinstance(trig.target, FixedTarget) and trig.target.state not in states:
                raise ConfigurationError(
                    f"Trigger {trig.trigger!r} in state {rep.state!r} targets "
                    f"unknown state {trig.target.state!r}",
                    context={"machine": name, "state": rep.state, "trigger": trig.trigger},
                )


class AwaitableStateMachine:
    """Machine handle over a fully built state graph.

    Args:
        states: ``{state: StateRepresentation}`` graph.
        initial: State the machine starts in.
        settings: Runtime settings; defaults apply when omitted.
        on_invalid_trigger: Optional ``callback(trigger, state)`` invoked
            before the configured policy is applied.
        evaluator: Evaluator to use (a fresh one by default).
        name: Name used in logs and error context.
    """

    def __init__(
        self,
        states: Mapping[Any, StateRepresentation],
        initial: Any,
        *,
        settings: Optional[MachineSettings] = None,
        on_invalid_trigger: Optional[InvalidTriggerCallback] = None,
        evaluator: Optional[TriggerEvaluator] = None,
        name: str = "machine",
    ) -> None:
        self.name = name
        self._states = dict(states)
        validate_graph(self._states, initial, name=name)
        self._current = self._states[initial]
        self.settings = settings or MachineSettings()
        self.settings.configure_logging()
        self._on_invalid_trigger = on_invalid_trigger
        self.evaluator = evaluator or TriggerEvaluator()
        self._lock = asyncio.Lock()
        self._owner: Optional[asyncio.Task] = None

    @property
    def state(self) -> Any:
        return self._current.state

    @property
    def current_state_representation(self) -> StateRepresentation:
        return self._current

    def notify_invalid_trigger(self, trigger: Any) -> None:
        if self._on_invalid_trigger is not None:
            self._on_invalid_trigger(trigger, self.state)

        policy = self.settings.invalid_trigger_policy
        if policy is InvalidTriggerPolicy.RAISE:
            raise InvalidTriggerError(
                f"Trigger {trigger!r} is not valid in state {self.state!r}",
                trigger=trigger,
                state=self.state,
                context={"machine": self.name},
            )
        if policy is InvalidTriggerPolicy.LOG:
            logger.warning("%s: trigger %r is not valid in state %r", self.name, trigger, self.state)

    def permitted_triggers(self) -> diagnostics.PermittedTriggers:
        return diagnostics.permitted_triggers(self)

    async def can_handle(self, trigger: Any, *, exact_match: bool = False) -> bool:
        return await diagnostics.can_handle(
            trigger, self, exact_match=exact_match, evaluator=self.evaluator
        )

    async def can_handle_with(self, trigger: Any, argument_type: type) -> bool:
        return await diagnostics.can_handle_with(
            trigger, self, argument_type, evaluator=self.evaluator
        )

    async def fire(self, trigger: Any) -> bool:
        """Fire a trigger whose action takes no argument.

        Returns:
            True if the machine transitioned, False if the trigger was
            invalid, ignored or declined by its dynamic target.

        Raises:
            ActionShapeMismatchError: If the trigger's action expects an argument.
            ReentrantTransitionError: If called from an action of this machine.
        """
        return await self._serialised(trigger, _NO_ARGUMENT, None)

    async def fire_with(self, trigger: Any, argument: Any, argument_type: Optional[type] = None) -> bool:
        """Fire a trigger whose action takes one argument.

        ``argument_type`` defaults to ``type(argument)`` and must be exactly
        the type declared for the action.

        Raises:
            ActionShapeMismatchError: If the action takes no argument or
                declares a different argument type.
            ReentrantTransitionError: If called from an action of this machine.
        """
        if argument_type is None:
            argument_type = type(argument)
        return await self._serialised(trigger, argument, argument_type)

    async def _serialised(self, trigger: Any, argument: Any, argument_type: Optional[type]) -> bool:
        # The lock is not reentrant; a nested fire from the running action never acquires it.
        current = asyncio.current_task()
        if current is not None and self._owner is current:
            raise ReentrantTransitionError(
                f"Trigger {trigger!r} fired from inside a transition of {self.name!r}",
                context={"machine": self.name, "trigger": trigger, "state": self.state},
            )
        async with self._lock:
            self._owner = current
            try:
                return await self._fire(trigger, argument, argument_type)
            finally:
                self._owner = None

    def _check_shape(self, rep: TriggerRepresentation, argument_type: Optional[type]) -> None:
        if argument_type is None:
            if rep.action.matches_no_argument():
                return
        elif rep.action.matches_argument(argument_type):
            return
        supplied = "no argument" if argument_type is None else argument_type.__qualname__
        raise ActionShapeMismatchError(
            f"Trigger {rep.trigger!r} expects {rep.action.describe()}, got {supplied}",
            context={"machine": self.name, "trigger": rep.trigger, "state": self.state},
        )

    async def _fire(self, trigger: Any, argument: Any, argument_type: Optional[type]) -> bool:
        rep = await self.evaluator.resolve(trigger, self)
        if rep is None:
            return False

        self._check_shape(rep, argument_type)

        if isinstance(rep.target, DynamicTarget):
            decision = await self.evaluator.dynamic_resolver.evaluate(rep.target)
            if decision is None:
                self.notify_invalid_trigger(trigger)
                return False
            destination = decision.target_state
        else:
            destination = rep.target.state  # type: ignore[union-attr]

        next_rep = self._states.get(destination)
        if next_rep is None:
            raise ConfigurationError(
                f"Trigger {trigger!r} resolved to unknown state {destination!r}",
                context={"machine": self.name, "trigger": trigger, "state": destination},
            )

        if rep.handler is not None:
            if argument is _NO_ARGUMENT:
                await rep.handler()
            else:
                await rep.handler(argument)

        previous = self.state
        self._current = next_rep
        logger.info("%s: %r --%r--> %r", self.name, previous, trigger, destination)
        return True


__all__ = ["AwaitableStateMachine", "InvalidTriggerCallback", "validate_graph"]
