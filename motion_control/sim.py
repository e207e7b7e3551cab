"""Simulated actuators and sensors.

Stand-ins for the vendor devices behind the capability interfaces in
``hardware.py``. Each device can have a fault injected so the controllers'
degraded-mode handling can be exercised without hardware:
- SimActuator: first-order motor model with onboard position mode
- SimAngleSensor: absolute encoder linked to a steering actuator
- SimHeadingSensor: IMU with settable pitch and integrated yaw
- SimulatedRobot: every device for one robot plus the physics step
"""

import math
from typing import List, Optional, Tuple

from .config import RobotConfig
from .geometry import ModuleState, wrap_degrees
from .hardware import ModuleHardware, RobotHardware
from .kinematics import SwerveKinematics

NEO_FREE_SPEED = 5676.0
"""Free speed of the brushless motors used on every mechanism (RPM)."""


class SimActuator:
    """Motor with an integrated encoder, simulated as a first-order system.

    Voltage mode drives the velocity toward ``volts / nominal * free_speed``
    with time constant ``time_constant``. Position mode moves toward the
    target at free speed, like a well-tuned onboard position loop. Current limits
    and position gains are recorded, not modelled.
    """

    def __init__(
        self,
        free_speed: float = NEO_FREE_SPEED,
        time_constant: float = 0.04,
        nominal_voltage: float = 12.0,
        position: float = 0.0,
    ):
        self.free_speed = free_speed
        self.time_constant = time_constant
        self.nominal_voltage = nominal_voltage
        self.position = position  # rotations
        self.velocity = 0.0  # RPM
        self.voltage = 0.0
        self.position_target: Optional[float] = None
        self.current_limit: Optional[float] = None
        self.position_gains: Optional[Tuple[float, float, float]] = None
        self.faulted = False

    def set_voltage(self, volts: float) -> None:
        self.position_target = None
        self.voltage = max(-self.nominal_voltage, min(self.nominal_voltage, volts))

    def set_position(self, position: float) -> None:
        self.position_target = position

    def reset_position(self, position: float) -> None:
        self.position = position

    def set_current_limit(self, amps: float) -> None:
        self.current_limit = amps

    def set_position_gains(self, kp: float, ki: float, kd: float) -> None:
        self.position_gains = (kp, ki, kd)

    def get_measured_position(self) -> Optional[float]:
        return None if self.faulted else self.position

    def get_measured_velocity(self) -> Optional[float]:
        return None if self.faulted else self.velocity

    def get_fault_status(self) -> bool:
        return self.faulted

    def step(self, dt: float) -> None:
        """Advance the motor model by ``dt`` seconds."""
        if dt <= 0:
            return
        if self.position_target is not None:
            max_move = self.free_speed / 60.0 * dt
            move = max(-max_move, min(max_move, self.position_target - self.position))
            self.position += move
            self.velocity = move / dt * 60.0
            return
        target_rpm = self.voltage / self.nominal_voltage * self.free_speed
        alpha = min(1.0, dt / self.time_constant) if self.time_constant > 0 else 1.0
        self.velocity += (target_rpm - self.velocity) * alpha
        self.position += self.velocity / 60.0 * dt


class SimAngleSensor:
    """Absolute encoder reporting a steering actuator's angle plus a mounting offset."""

    def __init__(self, steer: SimActuator, degrees_per_rotation: float, offset: float = 0.0):
        self.steer = steer
        self.degrees_per_rotation = degrees_per_rotation
        self.offset = offset
        self.timed_out = False

    def get_absolute_degrees(self) -> Optional[float]:
        if self.timed_out:
            return None
        return wrap_degrees(self.steer.position * self.degrees_per_rotation + self.offset)


class SimHeadingSensor:
    """IMU with a yaw integrated by the simulation and a settable pitch."""

    def __init__(self, yaw: float = 0.0, pitch: float = 0.0):
        self.yaw = yaw
        self.pitch = pitch
        self.faulted = False

    def get_yaw_degrees(self) -> Optional[float]:
        return None if self.faulted else self.yaw

    def get_pitch_degrees(self) -> Optional[float]:
        return None if self.faulted else self.pitch

    def reset_yaw(self) -> None:
        self.yaw = 0.0


class SimulatedRobot:
    """All simulated devices of one robot.

    ``step`` advances every motor model and integrates the gyro yaw from the
    chassis rotation implied by the wheel states.

    Attributes:
        hardware: Device bundle handed to ``RobotCore``.
    """

    def __init__(self, config: RobotConfig):
        drive_cfg = config.drive
        self.factors = drive_cfg.conversion_factors()
        self.kinematics = SwerveKinematics(m.location for m in drive_cfg.modules)

        modules: List[ModuleHardware] = []
        self.drive_motors: List[SimActuator] = []
        self.steer_motors: List[SimActuator] = []
        self.encoders: List[SimAngleSensor] = []
        for module_cfg in drive_cfg.modules:
            drive = SimActuator(nominal_voltage=drive_cfg.nominal_voltage)
            steer = SimActuator(nominal_voltage=drive_cfg.nominal_voltage)
            encoder = SimAngleSensor(steer, self.factors.angle_position, module_cfg.angle_offset)
            self.drive_motors.append(drive)
            self.steer_motors.append(steer)
            self.encoders.append(encoder)
            modules.append(ModuleHardware(drive=drive, steer=steer, encoder=encoder))

        self.gyro = SimHeadingSensor()
        self.arm = SimActuator(nominal_voltage=config.arm.nominal_voltage)
        self.gripper = SimActuator(nominal_voltage=config.gripper.nominal_voltage)
        self.hardware = RobotHardware(
            modules=modules, gyro=self.gyro, arm=self.arm, gripper=self.gripper
        )
        self.invert_gyro = drive_cfg.invert_gyro

    def module_states(self) -> List[ModuleState]:
        """True wheel states in physical units."""
        return [
            ModuleState(
                drive.velocity * self.factors.drive_velocity,
                wrap_degrees(steer.position * self.factors.angle_position),
            )
            for drive, steer in zip(self.drive_motors, self.steer_motors)
        ]

    def step(self, dt: float) -> None:
        """Advance the whole robot by ``dt`` seconds."""
        for motor in self.drive_motors + self.steer_motors + [self.arm, self.gripper]:
            motor.step(dt)
        omega = self.kinematics.to_chassis_speeds(self.module_states()).omega
        yaw_rate = math.degrees(omega) * (-1.0 if self.invert_gyro else 1.0)
        self.gyro.yaw += yaw_rate * dt
