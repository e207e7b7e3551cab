"""Tests for the per-cycle motion core"""

import json

import pytest

from motion_control.autonomous import TrajectorySample
from motion_control.component_modes import ComponentMode
from motion_control.faults import FaultKind
from motion_control.geometry import ChassisSpeeds, RobotPose
from motion_control.robot import CycleInputs, RobotCore, VisionMeasurement


def test_idle_cycle(run_cycles):
    """A cycle with no input reports a healthy, stationary robot"""
    report = run_cycles()

    assert report.pose == RobotPose(0.0, 0.0, 0.0)
    assert not any(report.faults.values())
    assert set(report.faults) == {"front_left", "front_right", "back_left", "back_right", "gyro", "arm", "gripper"}
    assert report.arm_mode == "idle"
    assert report.gripper_setpoint is None
    assert report.events == []


def test_operator_drive_moves_robot(run_cycles):
    """Forward operator input moves the estimated pose forward"""
    report = run_cycles(CycleInputs(x=0.5, field_relative=False), cycles=50)

    assert report.pose.x > 1.0
    assert abs(report.pose.y) < 1e-6


def test_auto_sample_closed_loop(run_cycles):
    """Autonomous samples override operator axes"""
    sample = TrajectorySample(ChassisSpeeds(1.0, 0.0, 0.0))
    report = run_cycles(CycleInputs(x=-1.0, auto_sample=sample))

    for state in report.desired_states:
        assert state.speed == pytest.approx(1.0)
        assert state.angle == pytest.approx(0.0)


def test_balance_request(run_cycles, sim):
    """Balance mode drives toward level, ignoring operator axes"""
    sim.gyro.pitch = 10.0
    report = run_cycles(CycleInputs(x=-1.0, balance=True))

    assert report.balance is not None
    assert report.balance.output > 0.0
    assert all(s.speed > 0.0 for s in report.desired_states)


def test_arm_preset_request(run_cycles, core):
    """A preset request starts an arm profile"""
    report = run_cycles(CycleInputs(arm_preset="intake"))

    assert report.arm_mode == "profiling"
    assert core.arm.target == pytest.approx(4.64)


def test_arm_segment_request_clamped(run_cycles):
    """Segment targets outside the arm's travel are clamped and reported"""
    report = run_cycles(CycleInputs(arm_segment=(2, "cone")))

    assert FaultKind.LIMIT_VIOLATION in [e.kind for e in report.events]


def test_gripper_request(run_cycles):
    """Named gripper requests are clamped to the soft limits"""
    report = run_cycles(CycleInputs(gripper="open"))

    assert report.gripper_setpoint == pytest.approx(-40.0)
    assert FaultKind.LIMIT_VIOLATION in [e.kind for e in report.events]


def test_vision_correction(run_cycles):
    """Vision measurements correct the pose"""
    vision = VisionMeasurement(RobotPose(0.5, 0.0, 0.0), timestamp=0.0)
    report = run_cycles(CycleInputs(vision=vision))

    assert report.pose.x > 0.0


def test_vision_disabled(config, sim):
    """Vision corrections are ignored when vision is switched off"""
    core = RobotCore(config, sim.hardware, ComponentMode(use_vision=False))
    vision = VisionMeasurement(RobotPose(0.5, 0.0, 0.0), timestamp=0.0)
    report = core.step(0.0, CycleInputs(vision=vision))

    assert report.pose.x == 0.0


def test_encoder_timeout_flags_module(core, sim):
    """A timed-out module encoder flags only that module"""
    sim.encoders[2].timed_out = True
    core.step(0.0)
    report = core.step(0.2)

    assert report.faults["back_left"]
    assert not report.faults["front_left"]
    assert any(e.kind == FaultKind.SENSOR_FAULT and "back_left" in e.source for e in report.events)


def test_report_serializable(run_cycles, sim):
    """The cycle report converts to a JSON state message"""
    sim.gyro.pitch = 5.0
    report = run_cycles(CycleInputs(balance=True, gripper="open"))
    message = json.loads(json.dumps(report.to_dict()))

    assert len(message["modules"]) == 4
    assert message["balance"]["pitch"] == pytest.approx(5.0)
    assert message["events"][0]["kind"] == "limit_violation"
