"""PID feedback and feedforward models used by every closed-loop mechanism.

This module provides the feedback controller shared by the drive wheels, the
arm, the gripper and the balance loop, plus the two characterization-based
feedforward models:
- SimpleMotorFeedforward: kS * sign(v) + kV * v + kA * a
- ArmFeedforward: kS * sign(v) + kG * cos(angle) + kV * v + kA * a
"""

import math
from typing import Dict, Optional, Tuple

from .config import PIDGains


class PIDController:
    """PID feedback controller with set-point feedforward and anti-windup.

    Control law:
        output = kP * e + kI * integral(e) + kD * d(e)/dt + kFF * setpoint

    where e = setpoint - measurement. The integral is clamped to
    ``integral_limit`` and the final output to ``output_limits``.

    Attributes:
        gains: Immutable controller gains.
        integral_limit: Anti-windup clamp on the accumulated error.
        output_limits: (min, max) clamp on the output, or None.
    """

    def __init__(
        self,
        gains: PIDGains,
        integral_limit: float = 0.5,
        output_limits: Optional[Tuple[float, float]] = None,
    ):
        """Initialize the controller.

        Args:
            gains: Proportional, integral, derivative and feedforward gains.
                Validated non-negative by PIDGains.
            integral_limit: Clamp on the integral state (error units * seconds).
            output_limits: Optional (min, max) clamp on the output.
        """
        self.gains = gains
        self.integral_limit = integral_limit
        self.output_limits = output_limits

        # Integral state (accumulated error)
        self.integral: float = 0.0

        # Previous error for derivative computation
        self.prev_error: Optional[float] = None

        self.last_error: float = 0.0
        self.last_output: float = 0.0

    def calculate(self, measurement: float, setpoint: float, dt: float) -> float:
        """Compute the controller output for one cycle.

        Args:
            measurement: Measured process value.
            setpoint: Desired process value.
            dt: Time step since last update (seconds).

        Returns:
            Controller output, clamped to output_limits if set.
        """
        error = setpoint - measurement

        # First sample has no derivative history
        if dt > 0 and self.prev_error is not None:
            derivative = (error - self.prev_error) / dt
        else:
            derivative = 0.0
        self.prev_error = error

        if dt > 0:
            self.integral += error * dt
            self.integral = max(-self.integral_limit, min(self.integral_limit, self.integral))

        output = (
            self.gains.kp * error
            + self.gains.ki * self.integral
            + self.gains.kd * derivative
            + self.gains.kff * setpoint
        )

        if self.output_limits is not None:
            low, high = self.output_limits
            output = max(low, min(high, output))

        self.last_error = error
        self.last_output = output
        return output

    def reset(self) -> None:
        """Reset integral and derivative states.

        Call this when the set point jumps or the mechanism changes mode so
        accumulated error from the previous goal is not carried over.
        """
        self.integral = 0.0
        self.prev_error = None
        self.last_error = 0.0
        self.last_output = 0.0

    def get_diagnostics(self) -> Dict[str, float]:
        """Get diagnostic information for logging and debugging."""
        return {
            "error": self.last_error,
            "integral": self.integral,
            "output": self.last_output,
        }


def _sign(value: float) -> float:
    if value > 0.0:
        return 1.0
    if value < 0.0:
        return -1.0
    return 0.0


class SimpleMotorFeedforward:
    """Voltage needed to hold a velocity and acceleration on a flywheel-like load."""

    def __init__(self, ks: float, kv: float, ka: float = 0.0):
        self.ks = ks
        self.kv = kv
        self.ka = ka

    def calculate(self, velocity: float, acceleration: float = 0.0) -> float:
        return self.ks * _sign(velocity) + self.kv * velocity + self.ka * acceleration


class ArmFeedforward:
    """Voltage needed to move a single-jointed arm against gravity.

    ``angle`` is measured from horizontal, so the gravity term peaks with the
    arm held level and vanishes with it vertical.
    """

    def __init__(self, ks: float, kg: float, kv: float, ka: float = 0.0):
        self.ks = ks
        self.kg = kg
        self.kv = kv
        self.ka = ka

    def gravity(self, angle: float) -> float:
        return self.kg * math.cos(angle)

    def calculate(self, angle: float, velocity: float, acceleration: float = 0.0) -> float:
        return (
            self.ks * _sign(velocity)
            + self.gravity(angle)
            + self.kv * velocity
            + self.ka * acceleration
        )
