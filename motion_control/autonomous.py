"""Holonomic sample follower for autonomous driving.

An external planner supplies one trajectory sample per cycle: the chassis
velocity to apply and, optionally, the pose the robot should be at. This
module turns a sample into the chassis speeds to command:
- The sampled velocity is used as feedforward
- If a desired pose is given, the position and heading errors are corrected
  with independent proportional gains on x, y and theta
"""

from dataclasses import dataclass
from typing import Optional

from .config import AutoConfig
from .geometry import ChassisSpeeds, RobotPose, rotate, wrap_radians


@dataclass(frozen=True)
class TrajectorySample:
    """One autonomous trajectory sample.

    Attributes:
        speeds: Robot-relative chassis velocity to apply.
        pose: Field pose the robot should be at for this sample, or None for
            pure velocity following.
    """

    speeds: ChassisSpeeds
    pose: Optional[RobotPose] = None


class HolonomicFollower:
    """Velocity feedforward plus per-axis proportional pose correction."""

    def __init__(self, config: Optional[AutoConfig] = None):
        self.config = config if config is not None else AutoConfig()
        self.last_error = (0.0, 0.0, 0.0)

    def calculate(self, sample: TrajectorySample, current: RobotPose) -> ChassisSpeeds:
        """Compute robot-relative chassis speeds for one sample.

        Args:
            sample: Trajectory sample for this cycle.
            current: Current estimated field pose.

        Returns:
            Robot-relative chassis speeds.
        """
        if sample.pose is None:
            self.last_error = (0.0, 0.0, 0.0)
            return sample.speeds

        ex = sample.pose.x - current.x
        ey = sample.pose.y - current.y
        etheta = wrap_radians(sample.pose.heading - current.heading)
        self.last_error = (ex, ey, etheta)

        # Field-frame correction rotated into the robot frame
        cx, cy = rotate(self.config.kp_x * ex, self.config.kp_y * ey, -current.heading)
        return ChassisSpeeds(
            sample.speeds.vx + cx,
            sample.speeds.vy + cy,
            sample.speeds.omega + self.config.kp_theta * etheta,
        )
