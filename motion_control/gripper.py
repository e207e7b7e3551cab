"""Gripper position controller.

Plain position PID over a few named set points, no profiling. The gripper
stays idle until the first command and then holds the last commanded set
point indefinitely.
"""

import logging
from typing import Dict, Optional, Union

from .config import GripperConfig, SENSOR_TIMEOUT
from .faults import FaultKind, FaultLog
from .hardware import Actuator, CachedSignal
from .pid import PIDController


class GripperController:
    """Position control for the gripper (motor rotations).

    Attributes:
        setpoint: Clamped set point, or None before the first command.
    """

    def __init__(
        self,
        config: GripperConfig,
        actuator: Actuator,
        fault_log: Optional[FaultLog] = None,
        sensor_timeout: float = SENSOR_TIMEOUT,
    ):
        self.config = config
        self.actuator = actuator
        self.fault_log = fault_log if fault_log is not None else FaultLog()
        self.actuator.set_current_limit(config.current_limit)
        self.pid = PIDController(
            config.gains, output_limits=(-config.nominal_voltage, config.nominal_voltage)
        )
        self._position = CachedSignal("gripper encoder", self.fault_log, sensor_timeout)

        self.setpoint: Optional[float] = None
        self.setpoint_name: Optional[str] = None
        self._dt = 0.0
        self._last_refresh: Optional[float] = None
        self.last_output = 0.0

    def refresh(self, now: float) -> None:
        """Read the gripper encoder for this cycle."""
        self._dt = 0.0 if self._last_refresh is None else max(0.0, now - self._last_refresh)
        self._last_refresh = now
        self._position.update(self.actuator.get_measured_position(), now)

    @property
    def position(self) -> float:
        return self._position.value

    @property
    def degraded(self) -> bool:
        return self._position.degraded

    def set_position(self, position: Union[str, float]) -> Optional[float]:
        """Command a named or numeric set point.

        Args:
            position: Name from the configured positions (e.g. "open",
                "close_cone") or a raw position in motor rotations.

        Returns:
            The clamped set point, or None for an unknown name (the previous
            set point is kept).
        """
        if isinstance(position, str):
            if position not in self.config.positions:
                logging.warning(f"Gripper: unknown position '{position}', keeping set point")
                return None
            name, value = position, self.config.positions[position]
        else:
            name, value = None, float(position)

        low, high = self.config.soft_limit_reverse, self.config.soft_limit_forward
        clamped = max(low, min(high, value))
        if clamped != value:
            self.fault_log.record(
                FaultKind.LIMIT_VIOLATION,
                "gripper",
                f"{name or 'target'} {value:.3f} clamped to {clamped:.3f}",
            )
        if clamped != self.setpoint:
            self.pid.reset()
        self.setpoint = clamped
        self.setpoint_name = name
        return clamped

    def update(self, now: float) -> float:
        """Compute and apply the gripper output for this cycle.

        Args:
            now: Cycle timestamp (seconds).

        Returns:
            Voltage applied to the gripper actuator.
        """
        if self.setpoint is None:
            volts = 0.0
        else:
            volts = self.pid.calculate(self.position, self.setpoint, self._dt)
        self.actuator.set_voltage(volts)
        self.last_output = volts
        return volts

    def get_diagnostics(self) -> Dict[str, float]:
        """Get diagnostic information for logging and debugging."""
        return {
            "position": self.position,
            "setpoint": self.setpoint if self.setpoint is not None else float("nan"),
            "output_volts": self.last_output,
            "degraded": float(self.degraded),
        }
