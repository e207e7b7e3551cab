"""Swerve module controller.

One instance per wheel. Converts a desired (speed, angle) into commands for
the module's drive and steering actuators, and reports the wheel's measured
position for odometry.
"""

import logging
import math
from typing import Dict, Optional

from .config import DriveConfig, ModuleConfig, SENSOR_TIMEOUT
from .faults import FaultKind, FaultLog
from .geometry import ModulePosition, ModuleState, wrap_degrees
from .hardware import CachedSignal, ModuleHardware
from .pid import PIDController, SimpleMotorFeedforward

ANTI_JITTER_FRACTION = 0.01
"""Below this fraction of max speed the steering angle is left where it is."""


def optimize(desired: ModuleState, current_angle: float) -> ModuleState:
    """Minimise steering travel for a desired module state.

    If reaching ``desired.angle`` needs more than 90 degrees of rotation, the
    wheel is pointed the opposite way and driven backwards instead.

    Args:
        desired: Requested module state.
        current_angle: Current module angle (degrees).

    Returns:
        Equivalent state needing at most 90 degrees of steering travel.
    """
    delta = wrap_degrees(desired.angle - current_angle)
    if abs(delta) > 90.0:
        return ModuleState(-desired.speed, wrap_degrees(desired.angle + 180.0))
    return desired


class SwerveModule:
    """Drive and steering control for one swerve module.

    The absolute encoder's calibration offset is applied once: at
    construction the steering actuator's integrated encoder is seeded from
    the absolute reading, and every later reading has the same fixed offset
    removed.

    Attributes:
        index: Position of the module in module order.
        name: Human-readable module name.
        factors: Native-unit conversion factors, derived once.
    """

    def __init__(
        self,
        index: int,
        module_config: ModuleConfig,
        drive_config: DriveConfig,
        hardware: ModuleHardware,
        fault_log: Optional[FaultLog] = None,
        sensor_timeout: float = SENSOR_TIMEOUT,
        cosine_compensation: bool = True,
    ):
        self.index = index
        self.name = module_config.name
        self.source = f"module[{index}] {self.name}"
        self.angle_offset = module_config.angle_offset
        self.factors = drive_config.conversion_factors()
        self.max_speed = drive_config.max_speed
        self.nominal_voltage = drive_config.nominal_voltage
        self.open_loop_ramp = drive_config.open_loop_ramp
        self.closed_loop_ramp = drive_config.closed_loop_ramp
        self.cosine_compensation = cosine_compensation

        self.drive = hardware.drive
        self.steer = hardware.steer
        self.encoder = hardware.encoder
        self.drive.set_current_limit(drive_config.drive_current_limit)
        self.steer.set_current_limit(drive_config.angle_current_limit)
        angle_gains = drive_config.angle_gains
        self.steer.set_position_gains(angle_gains.kp, angle_gains.ki, angle_gains.kd)

        self.feedforward = SimpleMotorFeedforward(
            drive_config.drive_ks, drive_config.drive_kv, drive_config.drive_ka
        )
        self.drive_pid = PIDController(
            drive_config.drive_gains,
            output_limits=(-self.nominal_voltage, self.nominal_voltage),
        )

        self.fault_log = fault_log if fault_log is not None else FaultLog()
        self._angle = CachedSignal(
            f"{self.source} absolute encoder", self.fault_log, sensor_timeout, low=-180.0, high=180.0
        )
        self._distance = CachedSignal(f"{self.source} drive encoder", self.fault_log, sensor_timeout)
        self._velocity = CachedSignal(f"{self.source} drive velocity", self.fault_log, sensor_timeout)
        self._actuator_faulted = False

        self._dt = 0.0
        self._last_refresh: Optional[float] = None
        self._desired = ModuleState()  # Last state written to the actuators
        self._last_speed_command = 0.0
        self._last_output = 0.0

        self.reset_to_absolute()

    # ------------------------------------------------------------------
    # Sensor reads
    # ------------------------------------------------------------------

    def reset_to_absolute(self) -> None:
        """Seed the steering encoder from the absolute encoder.

        Called once at construction. If the absolute encoder cannot be read
        the steering encoder keeps its reading and the module starts degraded.
        """
        raw = self.encoder.get_absolute_degrees()
        angle = self._angle.update(
            None if raw is None else wrap_degrees(raw - self.angle_offset), 0.0
        )
        self.steer.reset_position(angle / self.factors.angle_position)
        self._desired = ModuleState(0.0, angle)
        logging.debug(f"{self.source}: steering seeded at {angle:.2f} deg")

    def refresh(self, now: float) -> None:
        """Read every sensor of the module once for this cycle.

        Args:
            now: Cycle timestamp (seconds).
        """
        self._dt = 0.0 if self._last_refresh is None else max(0.0, now - self._last_refresh)
        self._last_refresh = now

        raw = self.encoder.get_absolute_degrees()
        self._angle.update(None if raw is None else wrap_degrees(raw - self.angle_offset), now)

        position = self.drive.get_measured_position()
        velocity = self.drive.get_measured_velocity()
        self._distance.update(
            None if position is None else position * self.factors.drive_position, now
        )
        self._velocity.update(
            None if velocity is None else velocity * self.factors.drive_velocity, now
        )

        faulted = self.drive.get_fault_status() or self.steer.get_fault_status()
        if faulted != self._actuator_faulted:
            self._actuator_faulted = faulted
            self.fault_log.record(
                FaultKind.SENSOR_FAULT,
                self.source,
                "actuator fault reported" if faulted else "actuator fault cleared",
                level=logging.WARNING if faulted else logging.INFO,
            )

    @property
    def angle(self) -> float:
        """Module angle (degrees); the last known good value while degraded."""
        return self._angle.value

    @property
    def angle_degraded(self) -> bool:
        return self._angle.degraded

    @property
    def degraded(self) -> bool:
        """True while any of the module's sensors or actuators is faulted."""
        return (
            self._angle.degraded
            or self._distance.degraded
            or self._velocity.degraded
            or self._actuator_faulted
        )

    def get_position(self) -> ModulePosition:
        """Cumulative wheel distance (m) and absolute angle (deg) for odometry."""
        return ModulePosition(self._distance.value, self._angle.value)

    def get_state(self) -> ModuleState:
        """Measured wheel speed (m/s) and angle (deg)."""
        return ModuleState(self._velocity.value, self._angle.value)

    @property
    def desired_state(self) -> ModuleState:
        """Last state commanded to the actuators."""
        return self._desired

    # ------------------------------------------------------------------
    # Actuator writes
    # ------------------------------------------------------------------

    def set_desired_state(self, desired: ModuleState, closed_loop: bool = False) -> ModuleState:
        """Command the module toward a desired state.

        Args:
            desired: Requested wheel speed (m/s) and angle (degrees).
            closed_loop: If True, track speed with feedforward plus velocity
                feedback. Otherwise apply voltage proportional to speed.

        Returns:
            The state actually commanded after optimization and scaling.
        """
        if self._angle.fresh:
            state = optimize(desired, self.angle)
            if abs(state.speed) <= self.max_speed * ANTI_JITTER_FRACTION:
                target_angle = self._desired.angle
            else:
                target_angle = state.angle
            residual = wrap_degrees(target_angle - self.angle)
        else:
            # No trustworthy angle: keep steering where it was last sent and
            # drive only the component of the request along that direction.
            target_angle = self._desired.angle
            state = optimize(desired, target_angle)
            residual = wrap_degrees(state.angle - target_angle)

        speed = state.speed
        if self.cosine_compensation:
            speed *= math.cos(math.radians(residual))

        self._write_steering(target_angle)
        self._write_drive(speed, closed_loop)

        self._desired = ModuleState(speed, target_angle)
        return self._desired

    def stop(self) -> None:
        """Zero drive output, leaving the wheel angle where it is."""
        self.drive.set_voltage(0.0)
        self.drive_pid.reset()
        self._last_output = 0.0
        self._last_speed_command = 0.0
        self._desired = ModuleState(0.0, self._desired.angle)

    def _write_steering(self, target_angle: float) -> None:
        steer_position = self.steer.get_measured_position()
        if steer_position is None:
            return
        # Shortest way round from the steering encoder's continuous position
        steer_angle = steer_position * self.factors.angle_position
        travel = wrap_degrees(target_angle - steer_angle)
        self.steer.set_position(steer_position + travel / self.factors.angle_position)

    def _write_drive(self, speed: float, closed_loop: bool) -> None:
        if closed_loop:
            acceleration = (
                (speed - self._last_speed_command) / self._dt if self._dt > 0 else 0.0
            )
            volts = self.feedforward.calculate(speed, acceleration) + self.drive_pid.calculate(
                self._velocity.value, speed, self._dt
            )
            ramp = self.closed_loop_ramp
        else:
            volts = speed / self.max_speed * self.nominal_voltage
            ramp = self.open_loop_ramp

        if ramp > 0 and self._dt > 0:
            max_change = self.nominal_voltage / ramp * self._dt
            volts = max(self._last_output - max_change, min(self._last_output + max_change, volts))
        volts = max(-self.nominal_voltage, min(self.nominal_voltage, volts))

        self.drive.set_voltage(volts)
        self._last_output = volts
        self._last_speed_command = speed

    def get_diagnostics(self) -> Dict[str, float]:
        """Get diagnostic information for logging and debugging."""
        return {
            "angle": self.angle,
            "distance": self._distance.value,
            "velocity": self._velocity.value,
            "desired_speed": self._desired.speed,
            "desired_angle": self._desired.angle,
            "output_volts": self._last_output,
            "degraded": float(self.degraded),
            "angle_stale": float(self._angle.stale),
        }
