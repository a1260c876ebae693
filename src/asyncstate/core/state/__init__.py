from .representations import (
    ActionKind,
    ActionMode,
    ActionShape,
    DynamicState,
    DynamicTarget,
    FixedTarget,
    Guard,
    StateRepresentation,
    TargetSpec,
    TriggerRepresentation,
    index_states,
)
from .protocols import MachineHandle
from .dynamic import DynamicStateResolver
from .evaluator import TriggerEvaluation, TriggerEvaluator, TriggerOutcome
from .diagnostics import PermittedTriggers, can_handle, can_handle_with, permitted_triggers
from .handlers.registries import (
    DomainRegistry,
    # Registration decorators
    register_guard,
    register_resolver,
    register_action,
)
from .guards import GuardRegistry, registry as guard_registry
from .resolvers import ResolverRegistry, registry as resolver_registry
from .actions import ActionRegistry, registry as action_registry
from .machine import AwaitableStateMachine, validate_graph
from .loader import MachineDefinition, load_machine_definition, load_machine_file


__all__ = [
    # Representations
    "ActionKind",
    "ActionMode",
    "ActionShape",
    "DynamicState",
    "DynamicTarget",
    "FixedTarget",
    "Guard",
    "StateRepresentation",
    "TargetSpec",
    "TriggerRepresentation",
    "index_states",
    # Resolution core
    "MachineHandle",
    "DynamicStateResolver",
    "TriggerEvaluation",
    "TriggerEvaluator",
    "TriggerOutcome",
    # Capability probes
    "PermittedTriggers",
    "can_handle",
    "can_handle_with",
    "permitted_triggers",
    # Registries
    "DomainRegistry",
    "GuardRegistry",
    "ResolverRegistry",
    "ActionRegistry",
    "guard_registry",
    "resolver_registry",
    "action_registry",
    "register_guard",
    "register_resolver",
    "register_action",
    # Reference machine and loader
    "AwaitableStateMachine",
    "validate_graph",
    "MachineDefinition",
    "load_machine_definition",
    "load_machine_file",
]
