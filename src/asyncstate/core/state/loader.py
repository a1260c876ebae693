"""Build state graphs from declarative machine definitions.

A definition names its guards, resolvers and actions; the callables are
looked up in the handler registries at load time, which is also when each
callable is classified as sync or async:

    name: pump
    initial: idle
    states:
      idle:
        triggers:
          start: {to: running, guard: is_primed, action: open_valve}
      running:
        triggers:
          pause: {ignore: true}
          finish: {resolver: pick_drain_state, action: log_volume, argument: int}
"""
from __future__ import annotations

import importlib
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from ..config import MachineSettings
from ..exceptions import ConfigurationError
from ..schemas import SchemaValidationError, validate_payload
from ..utils.io import read_yaml
from .actions import ActionRegistry
from .actions import registry as action_registry
from .guards import GuardRegistry
from .guards import registry as guard_registry
from .handlers.registries import DomainRegistry
from .machine import AwaitableStateMachine, InvalidTriggerCallback, validate_graph
from .representations import StateRepresentation, TriggerRepresentation, index_states
from .resolvers import ResolverRegistry
from .resolvers import registry as resolver_registry

logger = logging.getLogger(__name__)

_BUILTIN_ARGUMENT_TYPES: dict[str, type] = {
    "int": int,
    "str": str,
    "float": float,
    "bool": bool,
    "bytes": bytes,
    "dict": dict,
    "list": list,
}


def resolve_argument_type(name: str) -> type:
    """Map a builtin type name or ``package.module.Type`` path to a type."""
    if name in _BUILTIN_ARGUMENT_TYPES:
        return _BUILTIN_ARGUMENT_TYPES[name]

    module_name, _, attr = name.rpartition(".")
    if not module_name:
        raise ConfigurationError(
            f"Unknown argument type '{name}'",
            context={"argument": name},
        )
    try:
        obj = getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as exc:
        raise ConfigurationError(
            f"Cannot import argument type '{name}': {exc}",
            context={"argument": name},
        ) from exc
    if not isinstance(obj, type):
        raise ConfigurationError(
            f"Argument type '{name}' is not a class",
            context={"argument": name},
        )
    return obj


@dataclass(frozen=True)
class MachineDefinition:
    name: str
    initial: Any
    states: Mapping[Any, StateRepresentation]

    def create(
        self,
        *,
        settings: Optional[MachineSettings] = None,
        on_invalid_trigger: Optional[InvalidTriggerCallback] = None,
    ) -> AwaitableStateMachine:
        """Start a new machine in the initial state."""
        return AwaitableStateMachine(
            self.states,
            self.initial,
            settings=settings,
            on_invalid_trigger=on_invalid_trigger,
            name=self.name,
        )


def _build_trigger(
    trigger: str,
    spec: Mapping[str, Any],
    *,
    guards: DomainRegistry,
    resolvers: DomainRegistry,
    actions: DomainRegistry,
    domain: str,
) -> TriggerRepresentation:
    guard = guards.require(spec["guard"], domain) if "guard" in spec else None
    if spec.get("ignore"):
        return TriggerRepresentation.ignore(trigger, guard=guard)

    action = actions.require(spec["action"], domain) if "action" in spec else None
    argument_type = resolve_argument_type(spec["argument"]) if "argument" in spec else None

    if "to" in spec:
        return TriggerRepresentation.transition(
            trigger, spec["to"], guard=guard, action=action, argument_type=argument_type
        )
    return TriggerRepresentation.dynamic(
        trigger,
        resolvers.require(spec["resolver"], domain),
        guard=guard,
        action=action,
        argument_type=argument_type,
    )


def load_machine_definition(
    document: Mapping[str, Any],
    *,
    guards: Optional[GuardRegistry] = None,
    resolvers: Optional[ResolverRegistry] = None,
    actions: Optional[ActionRegistry] = None,
) -> MachineDefinition:
    """Validate ``document`` and build its state graph.

    Handlers are looked up first under the machine's name as domain, then
    as shared handlers. The global registries are used when none are given.

    Raises:
        ConfigurationError: On schema violations, unknown handler names,
            unknown argument types or unknown target states.
    """
    try:
        validate_payload(document, "machine")
    except SchemaValidationError as exc:
        raise ConfigurationError(
            f"Invalid machine definition: {exc}",
            context={"errors": "; ".join(exc.errors)},
        ) from exc

    name = str(document.get("name") or "machine")
    guards = guards if guards is not None else guard_registry
    resolvers = resolvers if resolvers is not None else resolver_registry
    actions = actions if actions is not None else action_registry

    states = []
    for state, state_spec in document["states"].items():
        triggers = (state_spec or {}).get("triggers") or {}
        states.append(
            StateRepresentation.build(
                state,
                (
                    _build_trigger(
                        trigger,
                        spec,
                        guards=guards,
                        resolvers=resolvers,
                        actions=actions,
                        domain=name,
                    )
                    for trigger, spec in triggers.items()
                ),
            )
        )

    graph = index_states(states)
    validate_graph(graph, document["initial"], name=name)

    logger.debug("Loaded machine %s with %d states", name, len(graph))
    return MachineDefinition(name=name, initial=document["initial"], states=graph)


def load_machine_file(path: Path, **registries: Any) -> MachineDefinition:
    """Read a YAML machine definition from ``path`` and load it."""
    try:
        document = read_yaml(Path(path), default=None, raise_on_error=True)
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigurationError(
            f"Cannot read machine definition {path}: {exc}",
            context={"path": str(path)},
        ) from exc
    if not isinstance(document, Mapping):
        raise ConfigurationError(
            f"Machine definition {path} must contain a mapping",
            context={"path": str(path)},
        )
    return load_machine_definition(document, **registries)


__all__ = [
    "MachineDefinition",
    "load_machine_definition",
    "load_machine_file",
    "resolve_argument_type",
]
