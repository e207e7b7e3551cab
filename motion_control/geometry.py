"""Planar geometry and drivetrain data types.

Conventions:
    - +x points toward the front of the robot, +y toward its left.
    - Rotation is counter-clockwise positive.
    - Module angles are in degrees, wrapped to (-180, 180].
    - Robot heading is in radians, wrapped to (-pi, pi].
"""

import math
from dataclasses import dataclass


def wrap_degrees(angle: float) -> float:
    """Wrap an angle in degrees to (-180, 180]."""
    wrapped = math.fmod(angle, 360.0)
    if wrapped <= -180.0:
        wrapped += 360.0
    elif wrapped > 180.0:
        wrapped -= 360.0
    return wrapped


def wrap_radians(angle: float) -> float:
    """Wrap an angle in radians to (-pi, pi]."""
    wrapped = math.atan2(math.sin(angle), math.cos(angle))
    if wrapped == -math.pi:
        return math.pi
    return wrapped


def rotate(x: float, y: float, angle: float) -> tuple[float, float]:
    """Rotate the vector (x, y) counter-clockwise by ``angle`` radians."""
    cos_a = math.cos(angle)
    sin_a = math.sin(angle)
    return x * cos_a - y * sin_a, x * sin_a + y * cos_a


@dataclass(frozen=True)
class Translation:
    """Offset of a wheel from the chassis centre (meters)."""

    x: float
    y: float

    @property
    def norm(self) -> float:
        return math.hypot(self.x, self.y)


@dataclass(frozen=True)
class ChassisSpeeds:
    """Commanded chassis velocity.

    Attributes:
        vx: Forward velocity (m/s).
        vy: Leftward velocity (m/s).
        omega: Rotation rate (rad/s), counter-clockwise positive.
    """

    vx: float = 0.0
    vy: float = 0.0
    omega: float = 0.0

    @property
    def is_zero(self) -> bool:
        return self.vx == 0.0 and self.vy == 0.0 and self.omega == 0.0

    @classmethod
    def from_field_relative(
        cls, vx: float, vy: float, omega: float, heading: float
    ) -> "ChassisSpeeds":
        """Convert field-frame velocities into the robot frame.

        Args:
            vx: Field x velocity (m/s).
            vy: Field y velocity (m/s).
            omega: Rotation rate (rad/s).
            heading: Current robot heading (radians).
        """
        robot_vx, robot_vy = rotate(vx, vy, -heading)
        return cls(robot_vx, robot_vy, omega)


@dataclass(frozen=True)
class ModuleState:
    """Desired (or measured) wheel speed (m/s) and steering angle (degrees)."""

    speed: float = 0.0
    angle: float = 0.0


@dataclass(frozen=True)
class ModulePosition:
    """Cumulative wheel travel (meters) and absolute steering angle (degrees)."""

    distance: float = 0.0
    angle: float = 0.0


@dataclass(frozen=True)
class RobotPose:
    """Field pose of the robot: position in meters, heading in radians."""

    x: float = 0.0
    y: float = 0.0
    heading: float = 0.0

    @property
    def heading_degrees(self) -> float:
        return math.degrees(self.heading)

    def distance_to(self, other: "RobotPose") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def to_dict(self):
        return {"x": self.x, "y": self.y, "heading": self.heading}
