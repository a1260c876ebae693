"""Immutable descriptors of a configured state graph.

A machine is configured once into a graph of ``StateRepresentation``
objects, each holding a read-only table of ``TriggerRepresentation``
entries. Nothing here is mutated after construction; a running machine
only moves its pointer from one representation to another.

Usage:
    idle = StateRepresentation.build("idle", [
        TriggerRepresentation.transition("start", "running", action=on_start),
        TriggerRepresentation.ignore("pause"),
    ])
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, ClassVar, Dict, Hashable, Iterable, Mapping, Optional, Union

from ..exceptions import ConfigurationError
from .awaitables import AsyncCallable, as_async, describe, is_async_callable

State = Hashable
Trigger = Hashable


class ActionMode(Enum):
    """Whether a callable completes immediately or must be awaited."""

    SYNC = "sync"
    ASYNC = "async"

    @classmethod
    def of(cls, fn: Any) -> "ActionMode":
        return cls.ASYNC if is_async_callable(fn) else cls.SYNC


class ActionKind(Enum):
    IGNORED = "ignored"
    NO_ARG = "no_arg"
    TYPED_ARG = "typed_arg"


@dataclass(frozen=True)
class ActionShape:
    """Tag describing the callable attached to a transition.

    ``TYPED_ARG`` shapes carry the exact argument type the action accepts.
    Matching compares that type by identity, so neither subclasses nor
    base classes of the declared type are accepted.
    """

    kind: ActionKind
    mode: ActionMode = ActionMode.SYNC
    argument_type: Optional[type] = None

    def __post_init__(self) -> None:
        if self.kind is ActionKind.TYPED_ARG:
            if not isinstance(self.argument_type, type):
                raise ConfigurationError(
                    "Typed actions require an argument type",
                    context={"argument_type": self.argument_type},
                )
        elif self.argument_type is not None:
            raise ConfigurationError(
                f"'{self.kind.value}' actions do not take an argument type",
                context={"argument_type": self.argument_type},
            )

    @classmethod
    def ignored(cls) -> "ActionShape":
        return cls(ActionKind.IGNORED)

    @classmethod
    def no_arg(cls, mode: ActionMode = ActionMode.SYNC) -> "ActionShape":
        return cls(ActionKind.NO_ARG, mode)

    @classmethod
    def typed_arg(cls, argument_type: type, mode: ActionMode = ActionMode.SYNC) -> "ActionShape":
        return cls(ActionKind.TYPED_ARG, mode, argument_type)

    @property
    def is_ignored(self) -> bool:
        return self.kind is ActionKind.IGNORED

    def matches_no_argument(self) -> bool:
        return self.kind is ActionKind.NO_ARG

    def matches_argument(self, argument_type: type) -> bool:
        return self.kind is ActionKind.TYPED_ARG and self.argument_type is argument_type

    def describe(self) -> str:
        if self.kind is ActionKind.IGNORED:
            return "ignored"
        if self.kind is ActionKind.NO_ARG:
            return f"no-arg ({self.mode.value})"
        return f"{self.argument_type.__qualname__} ({self.mode.value})"  # type: ignore[union-attr]


@dataclass(frozen=True)
class DynamicState:
    """Destination computed at evaluation time by a dynamic resolver."""

    target_state: Any
    can_transition: bool = True


@dataclass(frozen=True)
class FixedTarget:
    state: Any

    is_dynamic: ClassVar[bool] = False


@dataclass(frozen=True, eq=False)
class DynamicTarget:
    """Target computed by ``resolver``, a zero-argument sync or async callable."""

    resolver: AsyncCallable
    mode: ActionMode = field(init=False)
    name: str = field(init=False)

    is_dynamic: ClassVar[bool] = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", ActionMode.of(self.resolver))
        object.__setattr__(self, "name", describe(self.resolver))
        object.__setattr__(self, "resolver", as_async(self.resolver))


TargetSpec = Union[FixedTarget, DynamicTarget]


@dataclass(frozen=True, eq=False)
class Guard:
    """Zero-argument predicate gating a trigger."""

    predicate: AsyncCallable
    mode: ActionMode = field(init=False)
    name: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "mode", ActionMode.of(self.predicate))
        object.__setattr__(self, "name", describe(self.predicate))
        object.__setattr__(self, "predicate", as_async(self.predicate))

    async def check(self) -> bool:
        return bool(await self.predicate())


def _shape_for(action: Optional[Callable[..., Any]], argument_type: Optional[type]) -> ActionShape:
    if argument_type is not None:
        if action is None:
            raise ConfigurationError(
                "A typed trigger requires an action to receive its argument",
                context={"argument_type": argument_type},
            )
        return ActionShape.typed_arg(argument_type, ActionMode.of(action))
    if action is None:
        return ActionShape.no_arg()
    return ActionShape.no_arg(ActionMode.of(action))


@dataclass(frozen=True, eq=False)
class TriggerRepresentation:
    """Everything known about one (state, trigger) pair.

    Ignored triggers carry neither a target nor a handler. Every other
    trigger must carry a target; its handler is optional for ``NO_ARG``
    shapes and required for ``TYPED_ARG`` shapes.
    """

    trigger: Any
    action: ActionShape
    target: Optional[TargetSpec] = None
    guard: Optional[Guard] = None
    handler: Optional[AsyncCallable] = None

    def __post_init__(self) -> None:
        ctx = {"trigger": self.trigger}
        if self.guard is not None and not isinstance(self.guard, Guard):
            object.__setattr__(self, "guard", Guard(self.guard))

        if self.action.is_ignored:
            if self.target is not None or self.handler is not None:
                raise ConfigurationError(
                    f"Ignored trigger {self.trigger!r} cannot have a target or action",
                    context=ctx,
                )
            return

        if not isinstance(self.target, (FixedTarget, DynamicTarget)):
            raise ConfigurationError(
                f"Trigger {self.trigger!r} requires a fixed or dynamic target",
                context=ctx,
            )

        if self.handler is None:
            if self.action.argument_type is not None:
                raise ConfigurationError(
                    f"Typed trigger {self.trigger!r} requires an action",
                    context=ctx,
                )
            return

        if ActionMode.of(self.handler) is not self.action.mode:
            raise ConfigurationError(
                f"Action for trigger {self.trigger!r} is declared {self.action.mode.value} "
                f"but is {ActionMode.of(self.handler).value}",
                context=ctx,
            )
        object.__setattr__(self, "handler", as_async(self.handler))

    @classmethod
    def transition(
        cls,
        trigger: Trigger,
        to: State,
        *,
        guard: Optional[Callable[[], Any]] = None,
        action: Optional[Callable[..., Any]] = None,
        argument_type: Optional[type] = None,
    ) -> "TriggerRepresentation":
        """Trigger moving to a fixed state."""
        return cls(trigger, _shape_for(action, argument_type), FixedTarget(to), guard, action)

    @classmethod
    def dynamic(
        cls,
        trigger: Trigger,
        resolver: Callable[[], Any],
        *,
        guard: Optional[Callable[[], Any]] = None,
        action: Optional[Callable[..., Any]] = None,
        argument_type: Optional[type] = None,
    ) -> "TriggerRepresentation":
        """Trigger whose destination is computed by ``resolver`` when fired."""
        return cls(trigger, _shape_for(action, argument_type), DynamicTarget(resolver), guard, action)

    @classmethod
    def ignore(cls, trigger: Trigger, *, guard: Optional[Callable[[], Any]] = None) -> "TriggerRepresentation":
        """Trigger accepted by the state but producing no transition."""
        return cls(trigger, ActionShape.ignored(), None, guard)

    @property
    def is_ignored(self) -> bool:
        return self.action.is_ignored

    @property
    def is_dynamic(self) -> bool:
        return self.target is not None and self.target.is_dynamic


@dataclass(frozen=True, eq=False)
class StateRepresentation:
    """A state and its trigger table, in configuration order."""

    state: Any
    triggers: Mapping[Any, TriggerRepresentation] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for key, rep in self.triggers.items():
            if rep.trigger != key:
                raise ConfigurationError(
                    f"Trigger table key {key!r} does not match representation {rep.trigger!r}",
                    context={"state": self.state, "trigger": key},
                )
        object.__setattr__(self, "triggers", MappingProxyType(dict(self.triggers)))

    @classmethod
    def build(cls, state: State, representations: Iterable[TriggerRepresentation]) -> "StateRepresentation":
        table: Dict[Any, TriggerRepresentation] = {}
        for rep in representations:
            if rep.trigger in table:
                raise ConfigurationError(
                    f"Duplicate trigger {rep.trigger!r} in state {state!r}",
                    context={"state": state, "trigger": rep.trigger},
                )
            table[rep.trigger] = rep
        return cls(state, table)

    def find(self, trigger: Trigger) -> Optional[TriggerRepresentation]:
        return self.triggers.get(trigger)


def index_states(representations: Iterable[StateRepresentation]) -> Mapping[Any, StateRepresentation]:
    """Return a read-only ``{state: representation}`` graph, rejecting duplicates."""
    graph: Dict[Any, StateRepresentation] = {}
    for rep in representations:
        if rep.state in graph:
            raise ConfigurationError(
                f"State {rep.state!r} is configured more than once",
                context={"state": rep.state},
            )
        graph[rep.state] = rep
    return MappingProxyType(graph)


__all__ = [
    "State",
    "Trigger",
    "ActionMode",
    "ActionKind",
    "ActionShape",
    "DynamicState",
    "FixedTarget",
    "DynamicTarget",
    "TargetSpec",
    "Guard",
    "TriggerRepresentation",
    "StateRepresentation",
    "index_states",
]
