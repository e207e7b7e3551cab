"""Tests for the arm state machine"""

import math

import pytest

from motion_control.arm import ArmController, ArmMode
from motion_control.config import ArmConfig
from motion_control.faults import FaultKind, FaultLog
from motion_control.sim import SimActuator

PERIOD = 0.02


@pytest.fixture
def actuator():
    return SimActuator()


@pytest.fixture
def arm_log():
    return FaultLog()


@pytest.fixture
def arm(actuator, arm_log):
    controller = ArmController(ArmConfig(), actuator, fault_log=arm_log)
    controller.refresh(0.0)
    return controller


def run(arm, actuator, start, cycles, manual=0.0):
    """Step the actuator and the arm together; return the time of the last cycle."""
    now = start
    for _ in range(cycles):
        actuator.step(PERIOD)
        now += PERIOD
        arm.refresh(now)
        arm.update(now, manual)
    return now


def test_idle_until_first_target(arm, actuator):
    """With no target the arm output is off"""
    assert arm.mode == ArmMode.IDLE
    assert arm.update(0.0) == 0.0
    assert actuator.voltage == 0.0


def test_target_clamped_and_never_exceeded(arm, actuator, arm_log):
    """A target past the soft limit is clamped, and the set point never passes it"""
    limit = ArmConfig().soft_limit_forward
    assert arm.set_target(20.0) == pytest.approx(limit)
    assert FaultKind.LIMIT_VIOLATION in [e.kind for e in arm_log.drain()]

    arm.update(0.0)
    now = 0.0
    for _ in range(400):
        now = run(arm, actuator, now, 1)
        assert arm.setpoint.position <= limit

    assert arm.mode == ArmMode.HOLDING
    assert arm.target == pytest.approx(limit)
    assert arm.setpoint.position == pytest.approx(limit)


def test_same_target_does_not_restart(arm, actuator):
    """Re-requesting the active target keeps the running profile"""
    arm.set_target(2.0)
    profile = arm.profile
    arm.update(0.0)
    run(arm, actuator, 0.0, 10)

    arm.set_target(2.0)
    assert arm.profile is profile
    assert arm.mode == ArmMode.PROFILING


def test_same_target_while_holding_is_continuous(arm, actuator):
    """Re-requesting the held target keeps the set point still"""
    arm.set_target(1.0)
    arm.update(0.0)
    now = run(arm, actuator, 0.0, int(arm.profile.total_time() / PERIOD) + 2)
    assert arm.mode == ArmMode.HOLDING

    arm.set_target(1.0)
    assert arm.mode == ArmMode.HOLDING
    for _ in range(5):
        now = run(arm, actuator, now, 1)
        assert arm.mode == ArmMode.HOLDING
        assert arm.setpoint.velocity == 0.0
        assert arm.setpoint.position == pytest.approx(1.0)


def test_new_target_starts_from_setpoint(arm, actuator):
    """A new target mid-profile starts from the current set point"""
    arm.set_target(4.0)
    arm.update(0.0)
    run(arm, actuator, 0.0, 25)
    setpoint = arm.setpoint

    arm.set_target(-2.0)
    assert arm.profile.initial == setpoint
    assert arm.target == -2.0


def test_profile_reaches_holding(arm, actuator):
    """After the profile duration the arm holds its target"""
    arm.set_preset("intake")
    arm.update(0.0)
    duration = arm.profile.total_time()
    assert duration == pytest.approx(3.32)

    run(arm, actuator, 0.0, int(duration / PERIOD) + 2)
    assert arm.mode == ArmMode.HOLDING
    assert arm.setpoint.position == pytest.approx(4.64)
    assert arm.setpoint.velocity == 0.0


def test_holding_applies_gravity_feedforward(arm):
    """Holding still needs the gravity term"""
    arm.set_target(0.0)
    output = arm.update(0.0)

    config = ArmConfig()
    assert arm.mode == ArmMode.HOLDING
    assert output == pytest.approx(config.kg * math.cos(config.zero_cosine_offset))


def test_feedforward_disabled(actuator):
    """Without feedforward a held arm on target outputs nothing"""
    arm = ArmController(ArmConfig(), actuator, use_feedforward=False)
    arm.refresh(0.0)
    arm.set_target(0.0)

    assert arm.update(0.0) == 0.0


def test_manual_preempts_profile(arm, actuator, arm_log):
    """Operator input takes over a running profile and records the conflict"""
    arm.set_target(4.0)
    arm.update(0.0)
    run(arm, actuator, 0.0, 5)
    arm_log.drain()

    run(arm, actuator, 0.1, 1, manual=0.5)
    assert arm.mode == ArmMode.MANUAL
    assert arm.profile is None
    assert FaultKind.MODE_CONFLICT in [e.kind for e in arm_log.drain()]


def test_manual_without_feedforward_still_drives(actuator):
    """With feedforward off the operator axis is still a direct velocity command"""
    config = ArmConfig()
    arm = ArmController(config, actuator, use_feedforward=False)
    arm.refresh(0.0)
    volts = arm.update(0.0, manual_input=1.0)

    assert arm.mode == ArmMode.MANUAL
    assert volts > 0.0
    assert volts == pytest.approx(config.kv * config.manual_scale * config.constraint.max_velocity)
    assert actuator.voltage == pytest.approx(volts)


def test_manual_inside_deadband_ignored(arm, actuator):
    """Axis noise inside the manual deadband is not an override"""
    arm.set_target(4.0)
    arm.update(0.0)
    run(arm, actuator, 0.0, 3, manual=0.01)

    assert arm.mode == ArmMode.PROFILING


def test_manual_release_holds_position(arm, actuator):
    """Releasing the override holds wherever the arm is"""
    run(arm, actuator, 0.0, 20, manual=1.0)
    assert arm.mode == ArmMode.MANUAL
    assert arm.position > 0.0

    run(arm, actuator, 0.4, 1)
    assert arm.mode == ArmMode.HOLDING
    assert arm.target == pytest.approx(arm.position)
    assert arm.setpoint.velocity == 0.0


def test_target_during_manual_applied_on_release(arm, actuator):
    """A target requested during an override starts when the operator lets go"""
    run(arm, actuator, 0.0, 5, manual=0.5)
    arm.set_target(2.0)
    assert arm.mode == ArmMode.MANUAL

    run(arm, actuator, 0.1, 1)
    assert arm.mode == ArmMode.PROFILING
    assert arm.target == 2.0


def test_segment_targets(arm, arm_log):
    """Segment targets are clamped, and segments with no target keep the set point"""
    assert arm.set_segment(2, "cone") == pytest.approx(ArmConfig().soft_limit_forward)
    assert FaultKind.LIMIT_VIOLATION in [e.kind for e in arm_log.drain()]

    profile = arm.profile
    assert arm.set_segment(4, "cone") is None
    assert arm.set_special("double_substation") is None
    assert arm.profile is profile


def test_unknown_preset(arm):
    """Unknown preset names are ignored"""
    assert arm.set_preset("moon") is None
    assert arm.mode == ArmMode.IDLE


def test_output_within_nominal_voltage(arm, actuator):
    """Output voltage is always clamped to the nominal supply"""
    arm.set_target(-7.0)
    arm.update(0.0)
    for now in (0.02, 0.04, 0.06):
        actuator.step(PERIOD)
        arm.refresh(now)
        assert abs(arm.update(now)) <= ArmConfig().nominal_voltage


def test_encoder_fault_degrades(actuator, arm_log):
    """A missing encoder reading marks the arm degraded"""
    actuator.faulted = True
    arm = ArmController(ArmConfig(), actuator, fault_log=arm_log)
    arm.refresh(0.0)

    assert arm.degraded
    assert FaultKind.SENSOR_FAULT in [e.kind for e in arm_log.drain()]
