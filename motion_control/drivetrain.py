"""Drivetrain coordinator for the swerve drive.

This module owns the four swerve module controllers, the heading sensor and
the kinematic model. Each cycle it:
- Reads every module sensor and the gyro, then updates the pose estimate
  (pose tracking runs whether or not a drive command arrives)
- Turns operator axes, chassis speeds or an autonomous sample into module
  states and dispatches them
- Runs the charge station balance loop on request
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .autonomous import HolonomicFollower, TrajectorySample
from .config import BalanceConfig, RobotConfig
from .faults import FaultKind, FaultLog
from .geometry import ChassisSpeeds, ModulePosition, ModuleState, RobotPose
from .hardware import CachedSignal, HeadingSensor, ModuleHardware
from .kinematics import SwerveKinematics, desaturate
from .odometry import SwerveOdometry
from .pid import PIDController
from .swerve_module import SwerveModule


def apply_deadband(value: float, deadband: float) -> float:
    """Clamp an axis to [-1, 1], zero it inside the deadband and rescale the rest.

    The rescale keeps the output continuous at the deadband edge and still
    reaches full scale at full deflection.
    """
    value = max(-1.0, min(1.0, value))
    if abs(value) < deadband:
        return 0.0
    return math.copysign((abs(value) - deadband) / (1.0 - deadband), value)


@dataclass(frozen=True)
class BalanceStatus:
    """Result of one balance cycle.

    Attributes:
        balanced: True once pitch has stayed inside the tolerance band for
            the configured number of consecutive cycles.
        pitch: Pitch used this cycle (degrees).
        output: Normalized forward command sent to the drive.
        in_band_cycles: Consecutive cycles inside the tolerance band so far.
        sensor_ok: False if the pitch reading is degraded.
    """

    balanced: bool
    pitch: float
    output: float
    in_band_cycles: int
    sensor_ok: bool = True


class BalanceController:
    """PID loop driving chassis pitch to level.

    Nose-up pitch produces a forward command, moving the robot uphill
    toward the station's pivot.
    """

    def __init__(self, config: Optional[BalanceConfig] = None):
        self.config = config if config is not None else BalanceConfig()
        self.pid = PIDController(
            self.config.gains,
            output_limits=(-self.config.max_output, self.config.max_output),
        )
        self.in_band_cycles = 0

    def calculate(self, pitch: float, dt: float) -> BalanceStatus:
        error = pitch - self.config.setpoint
        if abs(error) <= self.config.tolerance:
            self.in_band_cycles += 1
            output = 0.0
        else:
            self.in_band_cycles = 0
            output = -self.pid.calculate(pitch, self.config.setpoint, dt)
        return BalanceStatus(
            balanced=self.in_band_cycles >= self.config.settle_cycles,
            pitch=pitch,
            output=output,
            in_band_cycles=self.in_band_cycles,
        )

    def reset(self) -> None:
        self.pid.reset()
        self.in_band_cycles = 0


class Drivetrain:
    """Coordinates the four swerve modules, odometry and balance mode.

    The pose estimate is owned here. Callers can read it through ``pose`` and
    change it only through ``seed_pose``, ``add_vision_measurement`` and
    ``zero_heading``.

    Attributes:
        modules: Module controllers in module order.
        kinematics: Kinematic model built from the module offsets.
        odometry: Pose estimator.
        tier: Name of the active speed tier.
    """

    def __init__(
        self,
        config: RobotConfig,
        module_hardware: Sequence[ModuleHardware],
        gyro: HeadingSensor,
        fault_log: Optional[FaultLog] = None,
        cosine_compensation: bool = True,
    ):
        """Initialize the drivetrain.

        Args:
            config: Robot configuration aggregate.
            module_hardware: Devices for each module, in module order.
            gyro: Chassis heading sensor.
            fault_log: Shared fault log. A private one is created if None.
            cosine_compensation: Scale wheel speed by the cosine of the
                remaining steering error.
        """
        self.config = config.drive
        self.fault_log = fault_log if fault_log is not None else FaultLog()
        self.modules: List[SwerveModule] = [
            SwerveModule(
                index,
                module_cfg,
                self.config,
                hardware,
                self.fault_log,
                config.sensor_timeout,
                cosine_compensation,
            )
            for index, (module_cfg, hardware) in enumerate(
                zip(self.config.modules, module_hardware)
            )
        ]
        self.kinematics = SwerveKinematics(m.location for m in self.config.modules)

        self.gyro = gyro
        self._yaw = CachedSignal("gyro yaw", self.fault_log, config.sensor_timeout)
        self._pitch = CachedSignal(
            "gyro pitch", self.fault_log, config.sensor_timeout, low=-90.0, high=90.0
        )
        self._gyro_sign = -1.0 if self.config.invert_gyro else 1.0

        self.odometry = SwerveOdometry(self.kinematics, config.vision)
        self.follower = HolonomicFollower(config.auto)
        self.balancer = BalanceController(config.balance)

        self.tier = self.config.default_tier
        self._dt = 0.0
        self._last_refresh: Optional[float] = None
        self._last_states: List[ModuleState] = [m.desired_state for m in self.modules]
        self.last_balance: Optional[BalanceStatus] = None

    # ------------------------------------------------------------------
    # Sensor reads and pose tracking
    # ------------------------------------------------------------------

    def refresh(self, now: float) -> RobotPose:
        """Read all drivetrain sensors and update the pose estimate.

        Called once at the start of every cycle.

        Args:
            now: Cycle timestamp (seconds).

        Returns:
            Updated field pose.
        """
        self._dt = 0.0 if self._last_refresh is None else max(0.0, now - self._last_refresh)
        self._last_refresh = now

        for module in self.modules:
            module.refresh(now)

        yaw = self.gyro.get_yaw_degrees()
        pitch = self.gyro.get_pitch_degrees()
        self._yaw.update(None if yaw is None else yaw * self._gyro_sign, now)
        self._pitch.update(pitch, now)

        gyro_yaw = math.radians(self._yaw.value) if self._yaw.fresh else None
        return self.odometry.update(self.get_positions(), gyro_yaw, now)

    @property
    def pose(self) -> RobotPose:
        return self.odometry.pose

    @property
    def heading(self) -> float:
        """Current robot heading (radians)."""
        return self.odometry.pose.heading

    @property
    def pitch(self) -> float:
        """Chassis pitch (degrees), last good reading."""
        return self._pitch.value

    def get_positions(self) -> List[ModulePosition]:
        return [m.get_position() for m in self.modules]

    def get_module_states(self) -> List[ModuleState]:
        """Measured module states."""
        return [m.get_state() for m in self.modules]

    def get_desired_states(self) -> List[ModuleState]:
        """Module states commanded this cycle, after module-level scaling."""
        return [m.desired_state for m in self.modules]

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def drive(
        self,
        x_speed: float,
        y_speed: float,
        rotation: float,
        field_relative: bool = True,
        open_loop: bool = True,
    ) -> List[ModuleState]:
        """Drive from normalized operator axes.

        Args:
            x_speed: Forward axis in [-1, 1].
            y_speed: Leftward axis in [-1, 1].
            rotation: Counter-clockwise rotation axis in [-1, 1].
            field_relative: Interpret translation in the field frame.
            open_loop: Use open-loop voltage instead of velocity control.

        Returns:
            Module states dispatched to the modules.
        """
        deadband = self.config.deadband
        return self._drive_normalized(
            apply_deadband(x_speed, deadband),
            apply_deadband(y_speed, deadband),
            apply_deadband(rotation, deadband),
            field_relative,
            open_loop,
        )

    def _drive_normalized(
        self, x: float, y: float, rotation: float, field_relative: bool, open_loop: bool
    ) -> List[ModuleState]:
        tier = self.config.speed_tiers[self.tier]
        vx = x * tier.speed
        vy = y * tier.speed
        omega = rotation * tier.angular_velocity
        if field_relative:
            speeds = ChassisSpeeds.from_field_relative(vx, vy, omega, self.heading)
        else:
            speeds = ChassisSpeeds(vx, vy, omega)
        return self.drive_chassis_speeds(speeds, open_loop)

    def drive_chassis_speeds(
        self, speeds: ChassisSpeeds, open_loop: bool = False
    ) -> List[ModuleState]:
        """Drive at a robot-relative chassis velocity.

        Args:
            speeds: Robot-relative chassis velocity.
            open_loop: Use open-loop voltage instead of velocity control.

        Returns:
            Module states dispatched to the modules.
        """
        states = self.kinematics.to_module_states(speeds, self._last_states)
        states, scale = desaturate(states, self.config.max_speed)
        if scale < 1.0:
            self.fault_log.record(
                FaultKind.KINEMATICS_OVERSPEED,
                "drivetrain",
                f"module speeds scaled by {scale:.3f}",
                level=logging.DEBUG,
            )
        self.set_module_states(states, open_loop)
        return states

    def set_module_states(self, states: Sequence[ModuleState], open_loop: bool = False) -> None:
        """Dispatch one state to each module, in module order."""
        for module, state in zip(self.modules, states):
            module.set_desired_state(state, closed_loop=not open_loop)
        self._last_states = list(states)

    def follow_sample(self, sample: TrajectorySample) -> List[ModuleState]:
        """Consume one autonomous trajectory sample (closed-loop)."""
        return self.drive_chassis_speeds(self.follower.calculate(sample, self.pose), open_loop=False)

    def set_speed_tier(self, tier: str) -> bool:
        """Select the speed tier used by ``drive``.

        Returns:
            False if the tier name is unknown, in which case the active tier
            is kept.
        """
        if tier not in self.config.speed_tiers:
            logging.warning(f"Unknown speed tier '{tier}', keeping '{self.tier}'")
            return False
        if tier != self.tier:
            logging.info(f"Speed tier: {self.tier} -> {tier}")
            self.tier = tier
        return True

    def stop(self) -> None:
        """Zero every drive output and leave the wheels where they point."""
        for module in self.modules:
            module.stop()
        self.balancer.reset()

    def balance(self, now: float) -> BalanceStatus:
        """Run one cycle of charge station balancing.

        Drives forward or back (robot-relative, open-loop) until pitch is
        level. With a degraded pitch reading the robot holds still.

        Args:
            now: Cycle timestamp (seconds).

        Returns:
            Balance status for this cycle.
        """
        if self._pitch.degraded:
            self.balancer.reset()
            self._drive_normalized(0.0, 0.0, 0.0, field_relative=False, open_loop=True)
            status = BalanceStatus(False, self._pitch.value, 0.0, 0, sensor_ok=False)
        else:
            status = self.balancer.calculate(self._pitch.value, self._dt)
            self._drive_normalized(status.output, 0.0, 0.0, field_relative=False, open_loop=True)
            if status.balanced and not (self.last_balance and self.last_balance.balanced):
                logging.info(f"Balanced at {status.pitch:.2f} deg (t={now:.2f}s)")
        self.last_balance = status
        return status

    # ------------------------------------------------------------------
    # Pose corrections
    # ------------------------------------------------------------------

    def seed_pose(self, pose: RobotPose) -> None:
        """Replace the pose estimate with a known pose."""
        self.odometry.reset(pose, self._baseline_positions())

    def add_vision_measurement(
        self, pose: RobotPose, timestamp: float, confidence: float = 1.0
    ) -> bool:
        """Apply a vision pose correction under the configured fusion policy."""
        return self.odometry.add_vision_measurement(pose, timestamp, confidence)

    def zero_heading(self) -> None:
        """Re-zero the gyro and make the current direction the field's +x."""
        self.gyro.reset_yaw()
        pose = self.pose
        self.odometry.reset(
            RobotPose(pose.x, pose.y, 0.0), self._baseline_positions(), gyro_yaw=0.0
        )

    def _baseline_positions(self) -> Optional[List[ModulePosition]]:
        # Before the first refresh the module readings are placeholders
        return None if self._last_refresh is None else self.get_positions()

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    @property
    def faults(self) -> Dict[str, bool]:
        """Degraded flag per module name, plus the gyro."""
        flags = {m.name: m.degraded for m in self.modules}
        flags["gyro"] = self._yaw.degraded or self._pitch.degraded
        return flags

    @property
    def degraded(self) -> bool:
        return any(self.faults.values())

    def get_diagnostics(self) -> Dict[str, float]:
        """Get diagnostic information for logging and debugging."""
        diagnostics: Dict[str, float] = {
            "x": self.pose.x,
            "y": self.pose.y,
            "heading": self.pose.heading,
            "pitch": self.pitch,
            "tier_speed": self.config.speed_tiers[self.tier].speed,
        }
        for module in self.modules:
            for key, value in module.get_diagnostics().items():
                diagnostics[f"{module.name}_{key}"] = value
        for key, value in self.odometry.get_diagnostics().items():
            diagnostics[f"odometry_{key}"] = value
        return diagnostics
