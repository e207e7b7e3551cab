"""Tests for pose estimation and vision fusion"""

import math

import pytest

from motion_control.config import VisionConfig
from motion_control.geometry import ModulePosition, RobotPose
from motion_control.kinematics import SwerveKinematics
from motion_control.odometry import SwerveOdometry


@pytest.fixture
def kinematics(config):
    return SwerveKinematics(m.location for m in config.drive.modules)


def positions(distance, angle=0.0):
    return [ModulePosition(distance, angle)] * 4


@pytest.fixture
def odometry(kinematics):
    """Blend-policy estimator that has taken its first reading at t=0"""
    estimator = SwerveOdometry(kinematics, VisionConfig(fusion_policy="blend"))
    estimator.update(positions(0.0), gyro_yaw=0.0, now=0.0)
    return estimator


def test_first_update_sets_baseline(kinematics):
    """The first reading is a baseline, not a displacement"""
    estimator = SwerveOdometry(kinematics)
    pose = estimator.update(positions(5.0), gyro_yaw=0.0, now=0.0)

    assert pose == RobotPose(0.0, 0.0, 0.0)


def test_straight_line(odometry):
    """Forward wheel travel moves the pose along the heading"""
    odometry.update(positions(0.5), gyro_yaw=0.0, now=0.02)

    assert odometry.pose.x == pytest.approx(0.5)
    assert odometry.pose.y == pytest.approx(0.0, abs=1e-12)


def test_displacement_rotated_into_field(odometry):
    """Robot-frame travel is rotated by the heading"""
    odometry.reset(RobotPose(0.0, 0.0, math.pi / 2.0))
    odometry.update(positions(1.0), gyro_yaw=0.0, now=0.02)

    assert odometry.pose.x == pytest.approx(0.0, abs=1e-9)
    assert odometry.pose.y == pytest.approx(1.0)
    assert odometry.pose.heading == pytest.approx(math.pi / 2.0)


def test_translation_uses_previous_heading(odometry):
    """A heading change within one update does not rotate that update's travel"""
    odometry.update(positions(1.0), gyro_yaw=math.pi / 2.0, now=0.02)

    assert odometry.pose.x == pytest.approx(1.0)
    assert odometry.pose.y == pytest.approx(0.0, abs=1e-9)
    assert odometry.pose.heading == pytest.approx(math.pi / 2.0)

    # The next update travels along the new heading
    odometry.update(positions(2.0), gyro_yaw=math.pi / 2.0, now=0.04)
    assert odometry.pose.x == pytest.approx(1.0)
    assert odometry.pose.y == pytest.approx(1.0)


def test_heading_follows_gyro(odometry):
    """Heading changes by exactly the gyro's change while it is healthy"""
    odometry.update(positions(0.0), gyro_yaw=0.3, now=0.02)

    assert odometry.pose.heading == pytest.approx(0.3)
    assert odometry.gyro_available


def test_heading_from_wheels_without_gyro(kinematics):
    """Without a gyro the heading integrates the wheels' rotation"""
    estimator = SwerveOdometry(kinematics)
    start = [ModulePosition(0.0, 0.0)] * 4
    estimator.update(start, gyro_yaw=None, now=0.0)

    # Each wheel tangent to the rotation, travelling radius * dtheta
    dtheta = 0.1
    end = [
        ModulePosition(loc.norm * dtheta, math.degrees(math.atan2(loc.x, -loc.y)))
        for loc in kinematics.locations
    ]
    estimator.update(end, gyro_yaw=None, now=0.02)

    assert estimator.pose.heading == pytest.approx(dtheta)
    assert not estimator.gyro_available


def test_vision_reset_policy(kinematics):
    """The reset policy replaces the pose, however far away"""
    estimator = SwerveOdometry(kinematics, VisionConfig(fusion_policy="reset"))
    estimator.update(positions(0.0), gyro_yaw=0.0, now=0.0)

    assert estimator.add_vision_measurement(RobotPose(3.0, 4.0, 1.0), timestamp=0.0)
    assert (estimator.pose.x, estimator.pose.y) == (3.0, 4.0)
    assert estimator.pose.heading == pytest.approx(1.0)

    # The gyro is re-aligned, so the next update keeps the corrected heading
    estimator.update(positions(0.0), gyro_yaw=0.0, now=0.02)
    assert estimator.pose.heading == pytest.approx(1.0)


def test_vision_blend_policy(odometry):
    """The blend policy moves a fraction of the way toward the measurement"""
    gain = odometry.vision.blend_gain
    assert odometry.add_vision_measurement(RobotPose(0.5, 0.0, 0.0), timestamp=0.0)

    assert odometry.pose.x == pytest.approx(gain * 0.5)
    assert odometry.vision_accepted == 1


def test_vision_confidence_scales_blend(odometry):
    """Lower confidence blends less"""
    gain = odometry.vision.blend_gain
    odometry.add_vision_measurement(RobotPose(0.5, 0.0, 0.0), timestamp=0.0, confidence=0.5)

    assert odometry.pose.x == pytest.approx(gain * 0.5 * 0.5)


def test_vision_outlier_rejected(odometry):
    """Blend measurements beyond the outlier distance are ignored"""
    assert not odometry.add_vision_measurement(RobotPose(5.0, 0.0, 0.0), timestamp=0.0)

    assert odometry.pose == RobotPose(0.0, 0.0, 0.0)
    assert odometry.vision_outliers_rejected == 1
    assert odometry.last_vision_innovation == pytest.approx(5.0)


def test_vision_stale_rejected(odometry):
    """Measurements older than the latency limit are ignored"""
    odometry.update(positions(0.0), gyro_yaw=0.0, now=1.0)

    assert not odometry.add_vision_measurement(RobotPose(0.1, 0.0, 0.0), timestamp=0.2)
    assert odometry.vision_stale_rejected == 1
    assert odometry.pose.x == 0.0


def test_diagnostics(odometry):
    """Diagnostics expose fusion counters"""
    odometry.add_vision_measurement(RobotPose(5.0, 0.0, 0.0), timestamp=0.0)
    diagnostics = odometry.get_diagnostics()

    assert diagnostics["outliers_rejected"] == 1
    assert diagnostics["vision_accepted"] == 0
    assert diagnostics["gyro_available"] == 1.0
