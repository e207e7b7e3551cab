"""
Capability interfaces (protocols) for actuators and sensors.

The control logic only ever talks to these protocols, so a simulated actuator
can stand in for a vendor motor controller without touching any controller
code. All reads are non-blocking: implementations return their latest cached
value, or ``None`` when nothing usable is available.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Protocol

from .faults import FaultKind, FaultLog


class Actuator(Protocol):
    """
    Interface for a motor with an integrated encoder.

    Positions and velocities are in actuator-native units (motor rotations
    and RPM). Controllers convert to physical units.
    """

    def set_voltage(self, volts: float) -> None:
        """Apply an open-loop output, in volts against nominal battery voltage."""
        ...

    def set_position(self, position: float) -> None:
        """Run the actuator's onboard position loop to ``position`` (rotations)."""
        ...

    def reset_position(self, position: float) -> None:
        """Overwrite the integrated encoder reading (rotations)."""
        ...

    def set_current_limit(self, amps: float) -> None:
        """Bound the actuator's continuous current draw."""
        ...

    def set_position_gains(self, kp: float, ki: float, kd: float) -> None:
        """Configure the onboard position loop used by ``set_position``."""
        ...

    def get_measured_position(self) -> Optional[float]:
        """Latest integrated encoder position (rotations), or None if unavailable."""
        ...

    def get_measured_velocity(self) -> Optional[float]:
        """Latest encoder velocity (RPM), or None if unavailable."""
        ...

    def get_fault_status(self) -> bool:
        """True if the actuator reports a fault."""
        ...


class AngleSensor(Protocol):
    """Interface for an absolute steering angle encoder."""

    def get_absolute_degrees(self) -> Optional[float]:
        """
        Latest raw absolute angle in degrees, before calibration offset.

        Returns None on a read failure or timeout.
        """
        ...


class HeadingSensor(Protocol):
    """Interface for the chassis IMU (yaw and pitch)."""

    def get_yaw_degrees(self) -> Optional[float]:
        """Latest yaw (degrees, counter-clockwise positive), or None on fault."""
        ...

    def get_pitch_degrees(self) -> Optional[float]:
        """Latest pitch (degrees, nose up positive), or None on fault."""
        ...

    def reset_yaw(self) -> None:
        """Zero the yaw reading."""
        ...


@dataclass
class ModuleHardware:
    """Devices owned by one swerve module."""

    drive: Actuator
    steer: Actuator
    encoder: AngleSensor


@dataclass
class RobotHardware:
    """Every device the motion core commands or reads."""

    modules: List[ModuleHardware]
    gyro: HeadingSensor
    arm: Actuator
    gripper: Actuator


class CachedSignal:
    """Latest good value of a sensor reading, with a staleness timeout.

    A missing or implausible reading is replaced by the last good value and
    flags the signal degraded straight away; the flag clears on the next good
    reading. Once no good reading has arrived for ``timeout`` seconds the held
    value is also marked stale. Transitions are recorded once on the fault
    log, not every cycle.
    """

    def __init__(
        self,
        source: str,
        fault_log: FaultLog,
        timeout: float,
        initial: float = 0.0,
        low: float = -math.inf,
        high: float = math.inf,
    ):
        self.source = source
        self.fault_log = fault_log
        self.timeout = timeout
        self.low = low
        self.high = high
        self.value = initial
        self.last_good_time: Optional[float] = None
        self.fresh = False  # Last update carried a good reading
        self.degraded = False
        self.stale = False  # Held value older than the timeout

    def update(self, reading: Optional[float], now: float) -> float:
        """Accept a new reading and return the value to use this cycle."""
        plausible = (
            reading is not None and math.isfinite(reading) and self.low <= reading <= self.high
        )
        self.fresh = plausible
        if plausible:
            self.value = reading
            self.last_good_time = now
            self.stale = False
            if self.degraded:
                self.degraded = False
                self.fault_log.record(
                    FaultKind.SENSOR_FAULT, self.source, "recovered", level=logging.INFO
                )
            return self.value

        self.stale = self.last_good_time is None or now - self.last_good_time > self.timeout
        if not self.degraded:
            self.degraded = True
            reason = "no reading" if reading is None else f"implausible reading {reading}"
            self.fault_log.record(
                FaultKind.SENSOR_FAULT, self.source, f"{reason}, holding {self.value:.3f}"
            )
        return self.value
