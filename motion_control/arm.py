"""Arm position controller.

A single-jointed arm driven through a trapezoidal profile, with position
feedback plus gravity and velocity feedforward.

State machine:
    IDLE       no target yet, output off
    PROFILING  following a profile toward the target
    HOLDING    profile complete, holding the target
    MANUAL     operator override, velocity from the operator axis

A new target (from IDLE, PROFILING or HOLDING) starts a fresh profile from the
current set point. Operator input takes over from any mode and hands back to
HOLDING at the measured position when released, or to PROFILING if a target
was requested meanwhile.
"""

import logging
import math
from enum import Enum
from typing import Dict, Optional

from .config import ArmConfig, SENSOR_TIMEOUT
from .faults import FaultKind, FaultLog
from .hardware import Actuator, CachedSignal
from .motion_profile import ProfileState, TrapezoidProfile
from .pid import ArmFeedforward, PIDController
from .segments import SegmentSelector


class ArmMode(Enum):
    IDLE = "idle"
    PROFILING = "profiling"
    HOLDING = "holding"
    MANUAL = "manual"


class ArmController:
    """Profiled position control for the arm.

    Time is supplied by the caller on every ``refresh`` and ``update`` so
    profiles are sampled at exact elapsed time.

    Attributes:
        mode: Current state machine mode.
        target: Active clamped target (radians), or None before the first one.
        setpoint: Profile state commanded this cycle.
    """

    def __init__(
        self,
        config: ArmConfig,
        actuator: Actuator,
        selector: Optional[SegmentSelector] = None,
        fault_log: Optional[FaultLog] = None,
        sensor_timeout: float = SENSOR_TIMEOUT,
        use_feedforward: bool = True,
    ):
        self.config = config
        self.actuator = actuator
        self.selector = selector if selector is not None else SegmentSelector()
        self.fault_log = fault_log if fault_log is not None else FaultLog()
        self.use_feedforward = use_feedforward

        self.actuator.set_current_limit(config.current_limit)
        self.feedforward = ArmFeedforward(config.ks, config.kg, config.kv)
        self.pid = PIDController(config.gains)

        self._position = CachedSignal("arm encoder", self.fault_log, sensor_timeout)
        self._velocity = CachedSignal("arm velocity", self.fault_log, sensor_timeout)

        self.mode = ArmMode.IDLE
        self.target: Optional[float] = None
        self.setpoint = ProfileState()
        self.profile: Optional[TrapezoidProfile] = None
        self._slow = False
        self._profile_start = 0.0
        self._pending_target: Optional[float] = None

        self._now = 0.0
        self._dt = 0.0
        self._last_refresh: Optional[float] = None
        self.last_output = 0.0

    @property
    def limits(self):
        return self.config.soft_limit_reverse, self.config.soft_limit_forward

    # ------------------------------------------------------------------
    # Sensor reads
    # ------------------------------------------------------------------

    def refresh(self, now: float) -> None:
        """Read the arm encoder for this cycle."""
        self._dt = 0.0 if self._last_refresh is None else max(0.0, now - self._last_refresh)
        self._last_refresh = now
        self._now = now

        position = self.actuator.get_measured_position()
        velocity = self.actuator.get_measured_velocity()
        self._position.update(
            None if position is None else position * self.config.position_factor, now
        )
        self._velocity.update(
            None if velocity is None else velocity * self.config.velocity_factor, now
        )

    @property
    def position(self) -> float:
        """Measured arm position (radians from the zero mark)."""
        return self._position.value

    @property
    def velocity(self) -> float:
        return self._velocity.value

    @property
    def degraded(self) -> bool:
        return self._position.degraded or self._velocity.degraded

    # ------------------------------------------------------------------
    # Target requests
    # ------------------------------------------------------------------

    def clamp(self, position: float, source: str = "target") -> float:
        """Clamp a position to the soft limits, recording a limit violation."""
        low, high = self.limits
        clamped = max(low, min(high, position))
        if clamped != position:
            self.fault_log.record(
                FaultKind.LIMIT_VIOLATION,
                "arm",
                f"{source} {position:.3f} clamped to {clamped:.3f}",
            )
        return clamped

    def set_target(self, position: float, slow: bool = False) -> float:
        """Request a new arm target.

        The target is clamped to the soft limits before the profile is built.
        Re-requesting the active target is a no-op, so an unchanged target
        never restarts the profile.

        Args:
            position: Requested target (radians).
            slow: Use the slow motion constraint.

        Returns:
            The clamped target.
        """
        target = self.clamp(position)

        if self.mode == ArmMode.MANUAL:
            # Applied once the operator lets go
            self._pending_target = target
            self._slow = slow
            return target

        if (
            self.mode in (ArmMode.PROFILING, ArmMode.HOLDING)
            and self.target is not None
            and abs(target - self.target) <= self.config.target_tolerance
            and slow == self._slow
        ):
            return self.target

        if self.mode in (ArmMode.PROFILING, ArmMode.HOLDING):
            start = self.setpoint
        else:
            start = ProfileState(self.position, self.velocity)
        self._start_profile(start, target, slow)
        return target

    def _start_profile(self, start: ProfileState, target: float, slow: bool) -> None:
        constraint = self.config.slow_constraint if slow else self.config.constraint
        low, high = self.limits
        start = ProfileState(max(low, min(high, start.position)), start.velocity)
        self.profile = TrapezoidProfile(
            constraint, ProfileState(target, 0.0), start, bounds=(low, high)
        )
        self.target = target
        self._slow = slow
        self._profile_start = self._now
        self.setpoint = start
        self.mode = ArmMode.PROFILING
        logging.info(
            f"Arm: {start.position:.3f} -> {target:.3f} rad "
            f"({self.profile.total_time():.2f}s{', slow' if slow else ''})"
        )

    def set_preset(self, name: str, slow: bool = False) -> Optional[float]:
        """Move to a named preset. Unknown names keep the current set point."""
        if name not in self.config.presets:
            logging.warning(f"Arm: unknown preset '{name}', keeping set point")
            return None
        return self.set_target(self.config.presets[name], slow)

    def set_segment(self, level: int, piece: str, slow: bool = False) -> Optional[float]:
        """Move to a scoring segment. Segments with no target keep the set point."""
        target = self.selector.resolve(level, piece)
        if target is None:
            logging.info(f"Arm: no target for level {level} {piece}, keeping set point")
            return None
        return self.set_target(target, slow)

    def set_special(self, case: str, slow: bool = False) -> Optional[float]:
        """Move to a loading station. Stations with no target keep the set point."""
        target = self.selector.resolve_special(case)
        if target is None:
            logging.info(f"Arm: no target for {case}, keeping set point")
            return None
        return self.set_target(target, slow)

    # ------------------------------------------------------------------
    # Cycle
    # ------------------------------------------------------------------

    def update(self, now: float, manual_input: float = 0.0) -> float:
        """Compute and apply the arm output for this cycle.

        Args:
            now: Cycle timestamp (seconds).
            manual_input: Operator arm axis in [-1, 1].

        Returns:
            Voltage applied to the arm actuator.
        """
        self._now = now
        manual = max(-1.0, min(1.0, manual_input))
        if abs(manual) < self.config.manual_deadband:
            manual = 0.0

        if manual != 0.0:
            return self._apply(self._manual_output(manual))
        if self.mode == ArmMode.MANUAL:
            self._release_manual()

        if self.mode == ArmMode.IDLE:
            return self._apply(0.0)

        if self.mode == ArmMode.PROFILING:
            elapsed = now - self._profile_start
            self.setpoint = self.profile.sample(elapsed)
            if self.profile.is_finished(elapsed):
                self.mode = ArmMode.HOLDING
                self.setpoint = ProfileState(self.target, 0.0)
                logging.debug(f"Arm: holding at {self.target:.3f} rad")

        velocity = self.setpoint.velocity if self.mode == ArmMode.PROFILING else 0.0
        feedback = self.pid.calculate(self.position, self.setpoint.position, self._dt)
        return self._apply(feedback + self._feedforward(velocity))

    def _manual_output(self, manual: float) -> float:
        if self.mode != ArmMode.MANUAL:
            if self.mode == ArmMode.PROFILING:
                self.fault_log.record(
                    FaultKind.MODE_CONFLICT,
                    "arm",
                    "manual override preempted profile",
                    level=logging.INFO,
                )
            self.mode = ArmMode.MANUAL
            self.profile = None
            self._pending_target = None
            self.pid.reset()

        velocity = manual * self.config.manual_scale * self.config.constraint.max_velocity
        low, high = self.limits
        if (velocity > 0.0 and self.position >= high) or (velocity < 0.0 and self.position <= low):
            velocity = 0.0
        self.setpoint = ProfileState(max(low, min(high, self.position)), velocity)
        if not self.use_feedforward:
            # Operator velocity still drives the arm, only the model terms are off
            return self.config.kv * velocity
        return self._feedforward(velocity)

    def _release_manual(self) -> None:
        self.pid.reset()
        hold = ProfileState(self.clamp(self.position, "release position"), 0.0)
        if self._pending_target is not None:
            target = self._pending_target
            self._pending_target = None
            self._start_profile(hold, target, self._slow)
            return
        self.mode = ArmMode.HOLDING
        self.target = hold.position
        self.setpoint = hold
        self.profile = None
        logging.debug(f"Arm: manual released, holding at {hold.position:.3f} rad")

    def _feedforward(self, velocity: float) -> float:
        if not self.use_feedforward:
            return 0.0
        return self.feedforward.calculate(self.position + self.config.zero_cosine_offset, velocity)

    def _apply(self, volts: float) -> float:
        limit = self.config.nominal_voltage
        volts = max(-limit, min(limit, volts))
        self.actuator.set_voltage(volts)
        self.last_output = volts
        return volts

    def get_diagnostics(self) -> Dict[str, float]:
        """Get diagnostic information for logging and debugging."""
        return {
            "position": self.position,
            "velocity": self.velocity,
            "setpoint_position": self.setpoint.position,
            "setpoint_velocity": self.setpoint.velocity,
            "target": self.target if self.target is not None else math.nan,
            "output_volts": self.last_output,
            "degraded": float(self.degraded),
        }
