"""
Swerve drive kinematic model.

This module converts between chassis velocity and per-module wheel states for
a four-module independently steered drivetrain.

For a module at offset (x_i, y_i) from the chassis centre, the wheel velocity
vector is the chassis translation plus the rotational contribution:
    v_xi = vx - omega * y_i
    v_yi = vy + omega * x_i

Stacking all modules gives a linear map A @ [vx, vy, omega] = wheel vectors.
Forward kinematics (odometry) applies the least-squares pseudo-inverse of A to
measured wheel vectors, which averages the modules.
"""

import math
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .geometry import ChassisSpeeds, ModulePosition, ModuleState, Translation


def desaturate(
    states: Sequence[ModuleState], max_speed: float
) -> Tuple[List[ModuleState], float]:
    """Scale all module speeds so none exceeds ``max_speed``.

    Every speed is multiplied by the same factor, so ratios between modules
    and each module's direction are preserved.

    Args:
        states: Module states from inverse kinematics.
        max_speed: Maximum attainable module speed (m/s).

    Returns:
        Tuple of (scaled states, scale factor applied). The factor is 1.0 when
        no module exceeded the limit.
    """
    peak = max((abs(s.speed) for s in states), default=0.0)
    if peak <= max_speed or peak == 0.0:
        return list(states), 1.0
    scale = max_speed / peak
    return [ModuleState(s.speed * scale, s.angle) for s in states], scale


class SwerveKinematics:
    """Inverse and forward kinematics for a swerve drivetrain.

    The geometry matrices are built once from the module offsets and never
    change afterwards.

    Attributes:
        locations: Module offsets from the chassis centre.
    """

    def __init__(self, locations: Iterable[Translation]):
        self.locations: Tuple[Translation, ...] = tuple(locations)
        rows = []
        for loc in self.locations:
            rows.append([1.0, 0.0, -loc.y])
            rows.append([0.0, 1.0, loc.x])
        self._inverse = np.array(rows, dtype=float)
        self._forward = np.linalg.pinv(self._inverse)

    @property
    def num_modules(self) -> int:
        return len(self.locations)

    def to_module_states(
        self,
        speeds: ChassisSpeeds,
        previous: Optional[Sequence[ModuleState]] = None,
    ) -> List[ModuleState]:
        """Compute each module's speed and angle for a chassis velocity.

        With an all-zero command, every module keeps the angle from
        ``previous`` (0 degrees if none) so wheels do not needlessly rotate.

        Args:
            speeds: Robot-relative chassis velocity.
            previous: Last commanded module states.

        Returns:
            Module states in module order, angles in (-180, 180] degrees.
        """
        if speeds.is_zero:
            if previous is None:
                return [ModuleState(0.0, 0.0) for _ in self.locations]
            return [ModuleState(0.0, s.angle) for s in previous]

        chassis = np.array([speeds.vx, speeds.vy, speeds.omega])
        wheel_vectors = (self._inverse @ chassis).reshape(-1, 2)

        states = []
        for i, (vx_i, vy_i) in enumerate(wheel_vectors):
            speed = math.hypot(vx_i, vy_i)
            if speed < 1e-12 and previous is not None:
                # Module on the instantaneous centre of rotation
                angle = previous[i].angle
            else:
                angle = math.degrees(math.atan2(vy_i, vx_i))
                if angle == -180.0:
                    angle = 180.0
            states.append(ModuleState(float(speed), float(angle)))
        return states

    def to_chassis_speeds(self, states: Sequence[ModuleState]) -> ChassisSpeeds:
        """Least-squares chassis velocity from measured module states."""
        vx, vy, omega = self._forward @ self._wheel_vector(
            (s.speed, s.angle) for s in states
        )
        return ChassisSpeeds(float(vx), float(vy), float(omega))

    def to_twist(
        self, start: Sequence[ModulePosition], end: Sequence[ModulePosition]
    ) -> Tuple[float, float, float]:
        """Planar displacement of the chassis between two module snapshots.

        Args:
            start: Module positions at the previous cycle.
            end: Module positions at the current cycle.

        Returns:
            (dx, dy, dtheta) in the robot frame of the previous cycle
            (meters, meters, radians).
        """
        deltas = (
            (e.distance - s.distance, e.angle) for s, e in zip(start, end)
        )
        dx, dy, dtheta = self._forward @ self._wheel_vector(deltas)
        return float(dx), float(dy), float(dtheta)

    @staticmethod
    def _wheel_vector(magnitudes_and_angles: Iterable[Tuple[float, float]]) -> np.ndarray:
        components = []
        for magnitude, angle in magnitudes_and_angles:
            rad = math.radians(angle)
            components.append(magnitude * math.cos(rad))
            components.append(magnitude * math.sin(rad))
        return np.array(components, dtype=float)
