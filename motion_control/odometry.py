"""Odometry module for swerve drivetrain pose estimation.

This module estimates the robot's field pose by dead reckoning:
- Module position deltas are turned into a chassis twist through the
  least-squares forward kinematics every cycle
- Heading comes from the gyro while it is healthy, and from the twist's
  rotation while it is not
- Vision pose measurements correct accumulated drift, either by replacing
  the pose outright or by blending toward it with outlier rejection
"""

import logging
import math
from typing import Dict, List, Optional, Sequence

from .config import VisionConfig
from .geometry import ModulePosition, RobotPose, rotate, wrap_radians
from .kinematics import SwerveKinematics


class SwerveOdometry:
    """Pose estimator integrating wheel odometry, gyro heading and vision.

    Pose:
        - x, y: Position (meters) in the field frame
        - heading: Robot heading (radians), counter-clockwise positive

    The gyro's yaw is mapped to field heading through ``heading_offset``,
    which is set whenever the pose is seeded and moved whenever a vision
    correction changes the heading, so the gyro and the pose never disagree.
    """

    def __init__(
        self,
        kinematics: SwerveKinematics,
        vision: Optional[VisionConfig] = None,
        initial_positions: Optional[Sequence[ModulePosition]] = None,
        initial_pose: RobotPose = RobotPose(),
    ):
        """Initialize the estimator.

        Args:
            kinematics: Drivetrain kinematic model.
            vision: Vision fusion policy. Defaults to VisionConfig().
            initial_positions: Module positions at construction. If None, the
                first update only sets the baseline.
            initial_pose: Starting field pose.
        """
        self.kinematics = kinematics
        self.vision = vision if vision is not None else VisionConfig()

        self._previous_positions: Optional[List[ModulePosition]] = (
            None if initial_positions is None else list(initial_positions)
        )
        self._pose = initial_pose

        # Field heading = gyro yaw + heading_offset (radians)
        self.heading_offset: Optional[float] = None
        self._last_gyro_yaw: Optional[float] = None
        self.last_update_time: Optional[float] = None

        # Diagnostics
        self.gyro_available = False
        self.vision_accepted = 0
        self.vision_outliers_rejected = 0
        self.vision_stale_rejected = 0
        self.last_vision_innovation = 0.0

    @property
    def pose(self) -> RobotPose:
        return self._pose

    def update(
        self,
        positions: Sequence[ModulePosition],
        gyro_yaw: Optional[float] = None,
        now: Optional[float] = None,
    ) -> RobotPose:
        """Advance the pose estimate by one cycle.

        Args:
            positions: Current module positions, in module order.
            gyro_yaw: Gyro yaw (radians), or None if the gyro is unavailable.
            now: Cycle timestamp (seconds), used to age vision measurements.

        Returns:
            Updated field pose.
        """
        if self._previous_positions is None:
            dx, dy, dtheta = 0.0, 0.0, 0.0
        else:
            dx, dy, dtheta = self.kinematics.to_twist(self._previous_positions, positions)
        self._previous_positions = list(positions)
        if now is not None:
            self.last_update_time = now

        previous_heading = self._pose.heading
        if gyro_yaw is not None:
            if self.heading_offset is None:
                # First gyro reading: align it with the current pose heading
                self.heading_offset = previous_heading - gyro_yaw
            heading = wrap_radians(gyro_yaw + self.heading_offset)
            self._last_gyro_yaw = gyro_yaw
            self.gyro_available = True
        else:
            heading = wrap_radians(previous_heading + dtheta)
            self.gyro_available = False

        # Robot-frame displacement is rotated by the heading at the start of the cycle
        field_dx, field_dy = rotate(dx, dy, previous_heading)
        self._pose = RobotPose(self._pose.x + field_dx, self._pose.y + field_dy, heading)
        return self._pose

    def reset(
        self,
        pose: RobotPose,
        positions: Optional[Sequence[ModulePosition]] = None,
        gyro_yaw: Optional[float] = None,
    ) -> None:
        """Seed the estimator with a known pose.

        Args:
            pose: New field pose.
            positions: Module positions at the moment of the reset. If None,
                the positions from the last update are kept as the baseline.
            gyro_yaw: Gyro yaw (radians) at the moment of the reset, if the
                gyro itself was just re-zeroed. Defaults to the last reading.
        """
        if positions is not None:
            self._previous_positions = list(positions)
        if gyro_yaw is not None:
            self._last_gyro_yaw = gyro_yaw
        self._set_pose(pose)
        logging.info(
            f"Odometry reset to ({pose.x:.3f}, {pose.y:.3f}, {pose.heading_degrees:.1f} deg)"
        )

    def add_vision_measurement(
        self, pose: RobotPose, timestamp: float, confidence: float = 1.0
    ) -> bool:
        """Correct the estimate with a vision pose measurement.

        Args:
            pose: Measured field pose.
            timestamp: Capture time of the measurement (seconds).
            confidence: Measurement confidence in [0, 1]. Scales the blend
                fraction; ignored by the reset policy.

        Returns:
            True if the measurement was applied.
        """
        if self.last_update_time is not None:
            latency = self.last_update_time - timestamp
            if latency > self.vision.max_latency:
                self.vision_stale_rejected += 1
                logging.debug(f"Vision measurement rejected: {latency:.3f}s old")
                return False

        confidence = max(0.0, min(1.0, confidence))
        innovation = self._pose.distance_to(pose)
        self.last_vision_innovation = innovation

        if self.vision.fusion_policy == "reset":
            self._set_pose(pose)
            self.vision_accepted += 1
            return True

        if innovation > self.vision.outlier_distance:
            self.vision_outliers_rejected += 1
            logging.info(
                f"Vision outlier rejected: innovation {innovation:.2f}m "
                f"(threshold {self.vision.outlier_distance:.2f}m)"
            )
            return False

        gain = self.vision.blend_gain * confidence
        heading_error = wrap_radians(pose.heading - self._pose.heading)
        self._set_pose(
            RobotPose(
                self._pose.x + gain * (pose.x - self._pose.x),
                self._pose.y + gain * (pose.y - self._pose.y),
                wrap_radians(self._pose.heading + gain * heading_error),
            )
        )
        self.vision_accepted += 1
        return True

    def _set_pose(self, pose: RobotPose) -> None:
        self._pose = RobotPose(pose.x, pose.y, wrap_radians(pose.heading))
        if self._last_gyro_yaw is not None:
            self.heading_offset = self._pose.heading - self._last_gyro_yaw

    def get_diagnostics(self) -> Dict[str, float]:
        """Get odometry diagnostic information for tuning and monitoring.

        Returns:
            Dictionary containing:
                - heading_offset: Gyro-to-field heading offset (rad)
                - gyro_available: 1.0 if the last update used the gyro
                - vision_accepted: Count of applied vision measurements
                - outliers_rejected: Count of vision outliers rejected
                - stale_rejected: Count of vision measurements too old to use
                - innovation: Distance to the last vision measurement (m)
        """
        return {
            "heading_offset": float(self.heading_offset or 0.0),
            "gyro_available": float(self.gyro_available),
            "vision_accepted": self.vision_accepted,
            "outliers_rejected": self.vision_outliers_rejected,
            "stale_rejected": self.vision_stale_rejected,
            "innovation": self.last_vision_innovation,
        }
