"""Tests for the reference AwaitableStateMachine."""
from __future__ import annotations

import asyncio
import logging

import pytest

from asyncstate.core.config import MachineSettings
from asyncstate.core.exceptions import (
    ActionShapeMismatchError,
    ConfigurationError,
    InvalidTriggerError,
    ReentrantTransitionError,
)
from asyncstate.core.state import (
    AwaitableStateMachine,
    DynamicState,
    MachineHandle,
    StateRepresentation,
    TriggerRepresentation,
)

from helpers.machines import resolver_to


def _machine(calls, *, resolver=None, settings=None, on_invalid=None) -> AwaitableStateMachine:
    async def on_finish(volume: int) -> None:
        calls.append(("finish", volume))

    states = {
        "idle": StateRepresentation.build(
            "idle",
            [
                TriggerRepresentation.transition("start", "processing", action=lambda: calls.append("start")),
                TriggerRepresentation.transition("blocked", "processing", guard=lambda: False),
            ],
        ),
        "processing": StateRepresentation.build(
            "processing",
            [
                TriggerRepresentation.dynamic(
                    "finish",
                    resolver or (lambda: DynamicState("done")),
                    action=on_finish,
                    argument_type=int,
                ),
                TriggerRepresentation.ignore("start"),
            ],
        ),
        "done": StateRepresentation.build("done", []),
    }
    return AwaitableStateMachine(
        states,
        "idle",
        settings=settings,
        on_invalid_trigger=on_invalid,
        name="pump",
    )


def test_machine_satisfies_handle_protocol() -> None:
    assert isinstance(_machine([]), MachineHandle)


def test_unknown_initial_state_is_rejected() -> None:
    with pytest.raises(ConfigurationError, match="Initial state 'nowhere'"):
        AwaitableStateMachine({"idle": StateRepresentation.build("idle", [])}, "nowhere")


def test_unknown_fixed_target_is_rejected() -> None:
    states = {"idle": StateRepresentation.build("idle", [TriggerRepresentation.transition("go", "away")])}

    with pytest.raises(ConfigurationError, match="unknown state 'away'"):
        AwaitableStateMachine(states, "idle")


@pytest.mark.asyncio
async def test_fire_runs_action_and_moves_pointer() -> None:
    calls: list = []
    machine = _machine(calls)

    assert await machine.fire("start") is True
    assert machine.state == "processing"
    assert calls == ["start"]
    assert list(machine.permitted_triggers()) == ["finish", "start"]


@pytest.mark.asyncio
async def test_fire_with_typed_argument_and_dynamic_target() -> None:
    calls: list = []
    resolver = resolver_to("done")
    machine = _machine(calls, resolver=resolver.async_())
    await machine.fire("start")

    assert await machine.fire_with("finish", 250) is True
    assert machine.state == "done"
    assert calls == ["start", ("finish", 250)]
    assert resolver.calls == 1


@pytest.mark.asyncio
async def test_ignored_trigger_is_a_silent_no_op() -> None:
    invalid: list = []
    machine = _machine([], on_invalid=lambda t, s: invalid.append((t, s)))
    await machine.fire("start")

    assert await machine.fire("start") is False
    assert machine.state == "processing"
    assert invalid == []


@pytest.mark.asyncio
async def test_invalid_trigger_invokes_callback_and_logs(caplog) -> None:
    invalid: list = []
    machine = _machine([], on_invalid=lambda t, s: invalid.append((t, s)))

    with caplog.at_level(logging.WARNING, logger="asyncstate"):
        assert await machine.fire("blocked") is False
        assert await machine.fire("missing") is False

    assert invalid == [("blocked", "idle"), ("missing", "idle")]
    assert "trigger 'missing' is not valid in state 'idle'" in caplog.text


@pytest.mark.asyncio
async def test_raise_policy_escalates_invalid_triggers() -> None:
    machine = _machine([], settings=MachineSettings({"invalid_trigger_policy": "raise"}))

    with pytest.raises(InvalidTriggerError) as excinfo:
        await machine.fire("missing")

    assert excinfo.value.trigger == "missing"
    assert excinfo.value.state == "idle"
    assert excinfo.value.context["machine"] == "pump"


@pytest.mark.asyncio
async def test_raise_policy_does_not_affect_probes() -> None:
    machine = _machine([], settings=MachineSettings({"invalid_trigger_policy": "raise"}))

    assert await machine.can_handle("missing") is False
    assert await machine.can_handle("blocked") is False


@pytest.mark.asyncio
async def test_declined_dynamic_target_notifies_and_stays() -> None:
    invalid: list = []
    calls: list = []
    machine = _machine(
        calls,
        resolver=resolver_to("done", can_transition=False).sync(),
        on_invalid=lambda t, s: invalid.append(t),
    )
    await machine.fire("start")

    assert await machine.fire_with("finish", 10) is False
    assert machine.state == "processing"
    assert invalid == ["finish"]
    assert calls == ["start"]


@pytest.mark.asyncio
async def test_fire_without_argument_on_typed_trigger_is_a_mismatch() -> None:
    calls: list = []
    resolver = resolver_to("done")
    machine = _machine(calls, resolver=resolver.sync())
    await machine.fire("start")

    with pytest.raises(ActionShapeMismatchError, match="expects int"):
        await machine.fire("finish")
    assert machine.state == "processing"
    assert resolver.calls == 0


@pytest.mark.asyncio
async def test_fire_with_wrong_type_is_a_mismatch() -> None:
    machine = _machine([])
    await machine.fire("start")

    with pytest.raises(ActionShapeMismatchError):
        await machine.fire_with("finish", True)
    with pytest.raises(ActionShapeMismatchError):
        await machine.fire_with("finish", 1.5)


@pytest.mark.asyncio
async def test_fire_with_argument_on_no_arg_trigger_is_a_mismatch() -> None:
    machine = _machine([])

    with pytest.raises(ActionShapeMismatchError, match="expects no-arg"):
        await machine.fire_with("start", 1)


@pytest.mark.asyncio
async def test_explicit_argument_type_overrides_inference() -> None:
    calls: list = []
    machine = _machine(calls)
    await machine.fire("start")

    assert await machine.fire_with("finish", True, argument_type=int) is True
    assert calls[-1] == ("finish", True)


@pytest.mark.asyncio
async def test_dynamic_target_to_unknown_state_is_configuration_error() -> None:
    machine = _machine([], resolver=lambda: DynamicState("limbo"))
    await machine.fire("start")

    with pytest.raises(ConfigurationError, match="unknown state 'limbo'"):
        await machine.fire_with("finish", 1)
    assert machine.state == "processing"


@pytest.mark.asyncio
async def test_concurrent_fires_are_serialised() -> None:
    order: list = []
    gate = asyncio.Event()

    async def slow_action() -> None:
        order.append("enter")
        await gate.wait()
        order.append("leave")

    states = {
        "a": StateRepresentation.build("a", [TriggerRepresentation.transition("go", "b", action=slow_action)]),
        "b": StateRepresentation.build("b", [TriggerRepresentation.transition("go", "a", action=slow_action)]),
    }
    machine = AwaitableStateMachine(states, "a")

    first = asyncio.create_task(machine.fire("go"))
    second = asyncio.create_task(machine.fire("go"))
    await asyncio.sleep(0)
    await asyncio.sleep(0)
    assert order == ["enter"]

    gate.set()
    assert await asyncio.gather(first, second) == [True, True]
    assert order == ["enter", "leave", "enter", "leave"]
    assert machine.state == "a"


@pytest.mark.asyncio
async def test_machine_probes_delegate_to_diagnostics() -> None:
    machine = _machine([])

    assert await machine.can_handle("start", exact_match=True) is True
    await machine.fire("start")
    assert await machine.can_handle_with("finish", int) is True
    assert await machine.can_handle_with("finish", str) is False


def _chain_machine(action) -> AwaitableStateMachine:
    states = {
        "a": StateRepresentation.build("a", [TriggerRepresentation.transition("go", "b", action=action)]),
        "b": StateRepresentation.build("b", [TriggerRepresentation.transition("next", "c")]),
        "c": StateRepresentation.build("c", []),
    }
    return AwaitableStateMachine(states, "a", name="chain")


@pytest.mark.asyncio
async def test_fire_from_own_action_raises_instead_of_hanging() -> None:
    async def chain() -> None:
        await machine.fire("next")

    machine = _chain_machine(chain)

    with pytest.raises(ReentrantTransitionError) as excinfo:
        await asyncio.wait_for(machine.fire("go"), timeout=1)

    assert excinfo.value.context == {"machine": "chain", "trigger": "next", "state": "a"}
    assert machine.state == "a"
    assert not machine._lock.locked()


@pytest.mark.asyncio
async def test_action_may_schedule_follow_up_trigger_in_new_task() -> None:
    follow_ups: list = []

    def chain() -> None:
        follow_ups.append(asyncio.create_task(machine.fire("next")))

    machine = _chain_machine(chain)

    assert await asyncio.wait_for(machine.fire("go"), timeout=1) is True
    assert await asyncio.wait_for(follow_ups[0], timeout=1) is True
    assert machine.state == "c"


@pytest.mark.asyncio
async def test_settings_logging_section_is_applied(tmp_path) -> None:
    log_file = tmp_path / "logs" / "pump.log"
    machine = _machine([], settings=MachineSettings({"logging": {"level": "INFO", "path": str(log_file)}}))

    await machine.fire("start")

    assert "pump: 'idle' --'start'--> 'processing'" in log_file.read_text(encoding="utf-8")
