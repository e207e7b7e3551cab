"""Tests for gripper position control"""

import pytest

from motion_control.config import GripperConfig
from motion_control.faults import FaultKind, FaultLog
from motion_control.gripper import GripperController
from motion_control.sim import SimActuator


@pytest.fixture
def actuator():
    return SimActuator()


@pytest.fixture
def gripper_log():
    return FaultLog()


@pytest.fixture
def gripper(actuator, gripper_log):
    controller = GripperController(GripperConfig(), actuator, gripper_log)
    controller.refresh(0.0)
    return controller


def test_idle_before_first_command(gripper, actuator):
    """The gripper does nothing until it is first commanded"""
    assert gripper.setpoint is None
    assert gripper.update(0.0) == 0.0
    assert actuator.voltage == 0.0


def test_named_position_clamped(gripper, gripper_log):
    """'open' lies past the reverse soft limit and is clamped to it"""
    assert gripper.set_position("open") == pytest.approx(-40.0)
    assert gripper.setpoint_name == "open"
    events = gripper_log.drain()
    assert [e.kind for e in events] == [FaultKind.LIMIT_VIOLATION]


def test_named_position_within_limits(gripper, gripper_log):
    """Positions inside the limits are used as-is without a fault"""
    assert gripper.set_position("close_cube") == pytest.approx(-8.0)
    assert len(gripper_log) == 0


def test_unknown_name_keeps_setpoint(gripper):
    """An unknown position name leaves the set point alone"""
    gripper.set_position("safe")
    assert gripper.set_position("squeeze") is None
    assert gripper.setpoint == pytest.approx(-29.0)


def test_numeric_position_feedback(gripper, actuator):
    """Output is proportional to the position error"""
    gripper.set_position(-8.0)
    volts = gripper.update(0.0)

    assert volts == pytest.approx(GripperConfig().gains.kp * -8.0)
    assert actuator.voltage == pytest.approx(volts)


def test_holds_last_setpoint(gripper, actuator):
    """The last set point is held until replaced"""
    gripper.set_position("close_cube")
    now = 0.0
    for _ in range(200):
        actuator.step(0.02)
        now += 0.02
        gripper.refresh(now)
        gripper.update(now)

    assert gripper.setpoint == pytest.approx(-8.0)
    assert gripper.position == pytest.approx(-8.0, abs=0.5)


def test_encoder_fault_degrades(actuator, gripper_log):
    """A missing encoder reading marks the gripper degraded"""
    actuator.faulted = True
    gripper = GripperController(GripperConfig(), actuator, gripper_log)
    gripper.refresh(0.0)

    assert gripper.degraded
