"""Trapezoidal motion profile.

Closed-form accelerate / cruise / decelerate curve between two states under a
velocity and acceleration constraint. The profile is sampled at elapsed time
since its start, never integrated step by step, so sampling error does not
accumulate across cycles.

For a rest-to-rest move of distance d with cruise velocity v and acceleration
a, the acceleration phase lasts v / a and covers v^2 / (2a). If d < v^2 / a the
cruise velocity is never reached and the curve is triangular with peak
velocity sqrt(d * a). Otherwise the total duration is d / v + v / a.
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .config import MotionConstraint


@dataclass(frozen=True)
class ProfileState:
    """Position and velocity at one instant of a profile."""

    position: float = 0.0
    velocity: float = 0.0


class TrapezoidProfile:
    """One trapezoidal move from an initial state to a goal state.

    The curve is computed once, in the direction of travel, at construction.
    Moves toward a lower position are computed mirrored and flipped back
    when sampled.

    Attributes:
        constraint: Cruise velocity and acceleration limits.
        initial: Start state.
        goal: Goal state.
        end_accel: Time the acceleration phase ends (s).
        end_full_speed: Time the cruise phase ends (s).
        end_deccel: Time the deceleration phase ends, the total duration (s).
    """

    def __init__(
        self,
        constraint: MotionConstraint,
        goal: ProfileState,
        initial: ProfileState = ProfileState(),
        bounds: Optional[Tuple[float, float]] = None,
    ):
        """Compute the profile.

        Args:
            constraint: Cruise velocity and acceleration limits.
            goal: Goal state. Goal velocity is usually zero.
            initial: Start state.
            bounds: Optional (low, high) range every sampled position is
                clamped to.
        """
        self.constraint = constraint
        self.goal = goal
        self.initial = initial
        self.bounds = bounds

        self._direction = -1.0 if initial.position > goal.position else 1.0
        start = self._direct(initial)
        end = self._direct(goal)
        max_velocity = constraint.max_velocity
        max_acceleration = constraint.max_acceleration

        if start.velocity > max_velocity:
            start = ProfileState(start.position, max_velocity)
        self._start = start
        self._end = end

        # Parts of a full rest-to-rest trapezoid already covered by the
        # initial velocity and still to be covered by the goal velocity
        cutoff_begin = start.velocity / max_acceleration
        cutoff_dist_begin = cutoff_begin**2 * max_acceleration / 2.0
        cutoff_end = end.velocity / max_acceleration
        cutoff_dist_end = cutoff_end**2 * max_acceleration / 2.0

        full_trapezoid_dist = cutoff_dist_begin + (end.position - start.position) + cutoff_dist_end
        accel_time = max_velocity / max_acceleration
        full_speed_dist = full_trapezoid_dist - accel_time**2 * max_acceleration

        # Triangular profile: cruise velocity never reached
        if full_speed_dist < 0.0:
            accel_time = math.sqrt(max(0.0, full_trapezoid_dist) / max_acceleration)
            full_speed_dist = 0.0

        self.end_accel = accel_time - cutoff_begin
        self.end_full_speed = self.end_accel + full_speed_dist / max_velocity
        self.end_deccel = self.end_full_speed + accel_time - cutoff_end

    def _direct(self, state: ProfileState) -> ProfileState:
        return ProfileState(state.position * self._direction, state.velocity * self._direction)

    def total_time(self) -> float:
        """Duration of the whole move (seconds)."""
        return self.end_deccel

    def is_finished(self, t: float) -> bool:
        return t >= self.total_time()

    def sample(self, t: float) -> ProfileState:
        """Position and velocity at ``t`` seconds after the profile start.

        Times before zero return the initial state and times past the end
        return the goal.
        """
        start = self._start
        end = self._end
        a = self.constraint.max_acceleration

        if t <= 0.0:
            result = start
        elif t < self.end_accel:
            result = ProfileState(
                start.position + (start.velocity + t * a / 2.0) * t,
                start.velocity + t * a,
            )
        elif t < self.end_full_speed:
            cruise = self.constraint.max_velocity
            accel_dist = (start.velocity + self.end_accel * a / 2.0) * self.end_accel
            result = ProfileState(
                start.position + accel_dist + cruise * (t - self.end_accel),
                cruise,
            )
        elif t <= self.end_deccel:
            time_left = self.end_deccel - t
            result = ProfileState(
                end.position - (end.velocity + time_left * a / 2.0) * time_left,
                end.velocity + time_left * a,
            )
        else:
            result = end

        result = self._direct(result)
        if self.bounds is not None:
            low, high = self.bounds
            result = ProfileState(max(low, min(high, result.position)), result.velocity)
        return result
