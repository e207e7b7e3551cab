"""Tests for single swerve module control"""

import math

import pytest

from motion_control.faults import FaultKind, FaultLog
from motion_control.geometry import ModuleState
from motion_control.hardware import ModuleHardware
from motion_control.sim import SimActuator, SimAngleSensor
from motion_control.swerve_module import SwerveModule, optimize


@pytest.fixture
def drive_config(config):
    return config.drive


@pytest.fixture
def devices(drive_config):
    """Simulated drive motor, steering motor and absolute encoder for module 0"""
    factors = drive_config.conversion_factors()
    drive = SimActuator()
    steer = SimActuator()
    encoder = SimAngleSensor(steer, factors.angle_position, drive_config.modules[0].angle_offset)
    return drive, steer, encoder


@pytest.fixture
def module_log():
    return FaultLog()


@pytest.fixture
def module(drive_config, devices, module_log):
    drive, steer, encoder = devices
    return SwerveModule(
        0, drive_config.modules[0], drive_config, ModuleHardware(drive, steer, encoder), module_log
    )


def test_optimize_flips_large_turn():
    """A turn of more than 90 degrees is replaced by reversing the wheel"""
    assert optimize(ModuleState(2.0, 170.0), 0.0) == ModuleState(-2.0, -10.0)


def test_optimize_keeps_small_turn():
    """Turns up to 90 degrees are left alone"""
    assert optimize(ModuleState(2.0, 60.0), 0.0) == ModuleState(2.0, 60.0)
    assert optimize(ModuleState(2.0, 90.0), 0.0) == ModuleState(2.0, 90.0)


def test_optimize_across_wrap():
    """Angles on either side of +/-180 are close together"""
    assert optimize(ModuleState(1.0, -170.0), 170.0) == ModuleState(1.0, -170.0)


def test_seeded_from_absolute_encoder(module, devices):
    """The calibration offset is removed once, so the module starts at 0 degrees"""
    _, steer, _ = devices

    assert module.angle == pytest.approx(0.0)
    assert steer.position == pytest.approx(0.0)


def test_actuators_configured_once(module, devices, drive_config):
    """Current limits and steering gains are applied at construction"""
    drive, steer, _ = devices
    gains = drive_config.angle_gains

    assert drive.current_limit == drive_config.drive_current_limit
    assert steer.current_limit == drive_config.angle_current_limit
    assert steer.position_gains == (gains.kp, gains.ki, gains.kd)
    assert drive.position_gains is None


def test_steering_and_cosine_compensation(module, devices, drive_config):
    """Speed is scaled by the cosine of the remaining steering error"""
    _, steer, _ = devices
    module.refresh(0.0)
    commanded = module.set_desired_state(ModuleState(2.0, 45.0))

    assert commanded.angle == pytest.approx(45.0)
    assert commanded.speed == pytest.approx(2.0 * math.cos(math.radians(45.0)))
    factors = drive_config.conversion_factors()
    assert steer.position_target == pytest.approx(45.0 / factors.angle_position)


def test_cosine_compensation_disabled(drive_config, devices):
    """Without compensation the full speed is sent while steering"""
    drive, steer, encoder = devices
    module = SwerveModule(
        0,
        drive_config.modules[0],
        drive_config,
        ModuleHardware(drive, steer, encoder),
        cosine_compensation=False,
    )
    module.refresh(0.0)
    commanded = module.set_desired_state(ModuleState(2.0, 45.0))

    assert commanded.speed == pytest.approx(2.0)


def test_anti_jitter_keeps_angle(module):
    """Near-zero speed commands do not move the steering"""
    module.refresh(0.0)
    module.set_desired_state(ModuleState(1.0, 30.0))
    commanded = module.set_desired_state(ModuleState(0.01, 90.0))

    assert commanded.angle == pytest.approx(30.0)


def test_open_loop_voltage_and_ramp(module, devices, drive_config):
    """Open-loop voltage is proportional to speed and slew-limited by the ramp"""
    drive, _, _ = devices
    module.refresh(0.0)
    module.set_desired_state(ModuleState(drive_config.max_speed / 2.0, 0.0))
    assert drive.voltage == pytest.approx(6.0)

    module.refresh(0.02)
    module.set_desired_state(ModuleState(-drive_config.max_speed, 0.0))
    max_change = drive_config.nominal_voltage / drive_config.open_loop_ramp * 0.02
    assert drive.voltage == pytest.approx(6.0 - max_change)


def test_closed_loop_feedforward(module, devices, drive_config):
    """Closed-loop drive applies the characterised feedforward voltage"""
    drive, _, _ = devices
    module.refresh(0.0)
    module.set_desired_state(ModuleState(1.0, 0.0), closed_loop=True)

    expected = drive_config.drive_ks + drive_config.drive_kv * 1.0
    assert drive.voltage == pytest.approx(expected)


def test_stop_zeroes_drive(module, devices):
    """Stop cuts drive output and keeps the wheel angle"""
    drive, _, _ = devices
    module.refresh(0.0)
    module.set_desired_state(ModuleState(2.0, 20.0))
    module.stop()

    assert drive.voltage == 0.0
    assert module.desired_state == ModuleState(0.0, 20.0)


def test_stale_encoder_holds_angle(module, devices, module_log):
    """A timed-out absolute encoder holds the last angle and marks the module degraded"""
    _, _, encoder = devices
    module.refresh(0.0)
    module_log.drain()

    encoder.timed_out = True
    module.refresh(0.02)
    assert module.degraded
    assert module.angle_degraded
    assert module.get_diagnostics()["angle_stale"] == 0.0
    events = module_log.drain()
    assert [e.kind for e in events] == [FaultKind.SENSOR_FAULT]

    module.refresh(0.2)
    assert module.get_diagnostics()["angle_stale"] == 1.0
    assert module_log.drain() == []

    commanded = module.set_desired_state(ModuleState(1.0, 90.0))
    assert commanded.angle == pytest.approx(0.0)
    assert commanded.speed == pytest.approx(0.0, abs=1e-9)


def test_encoder_recovery_clears_degraded(module, devices, module_log):
    """The degraded flag clears on the next good reading"""
    _, _, encoder = devices
    encoder.timed_out = True
    module.refresh(0.5)
    assert module.degraded

    encoder.timed_out = False
    module.refresh(0.52)
    assert not module.degraded
    kinds = [e.kind for e in module_log.drain()]
    assert kinds.count(FaultKind.SENSOR_FAULT) == 2


def test_actuator_fault_reported(module, devices, module_log):
    """A faulted drive motor is surfaced once, not every cycle"""
    drive, _, _ = devices
    module.refresh(0.0)
    drive.faulted = True
    module.refresh(0.02)
    module.refresh(0.04)

    assert module.degraded
    events = [e for e in module_log.drain() if "actuator" in e.detail]
    assert len(events) == 1
