"""Robot motion core.

``RobotCore`` builds every controller from one configuration aggregate and
runs one control cycle at a time, always in the same order:

1. Sensor reads: drivetrain (modules and gyro, then odometry), arm, gripper
2. Requests: vision correction, speed tier, arm and gripper targets
3. Compute and write: drive (balance, autonomous sample or operator axes),
   then arm and gripper outputs

Nothing in a cycle blocks and nothing raises; faults are collected and
returned with the cycle report.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from .arm import ArmController
from .autonomous import TrajectorySample
from .component_modes import ComponentMode
from .config import RobotConfig
from .drivetrain import BalanceStatus, Drivetrain
from .faults import FaultEvent, FaultLog
from .geometry import ModuleState, RobotPose
from .gripper import GripperController
from .hardware import RobotHardware
from .segments import SegmentSelector


@dataclass(frozen=True)
class VisionMeasurement:
    """Pose estimate from the vision coprocessor."""

    pose: RobotPose
    timestamp: float
    confidence: float = 1.0


@dataclass
class CycleInputs:
    """Everything the collaborators ask for in one cycle.

    Operator axes are normalized to [-1, 1]. Mechanism requests left as None
    keep the current target.
    """

    # Operator driving
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0
    field_relative: bool = True
    open_loop: bool = True
    speed_tier: Optional[str] = None

    # Arm
    arm_manual: float = 0.0
    arm_target: Optional[float] = None
    arm_preset: Optional[str] = None
    arm_segment: Optional[Tuple[int, str]] = None
    arm_special: Optional[str] = None
    arm_slow: bool = False

    # Gripper
    gripper: Optional[Union[str, float]] = None

    # Autonomous, balance and vision
    auto_sample: Optional[TrajectorySample] = None
    balance: bool = False
    vision: Optional[VisionMeasurement] = None


@dataclass
class CycleReport:
    """Outputs of one cycle for telemetry and the diagnostics collaborator."""

    time: float
    pose: RobotPose
    desired_states: List[ModuleState]
    measured_states: List[ModuleState]
    faults: Dict[str, bool]
    arm_mode: str
    arm_position: float
    arm_setpoint: float
    arm_output: float
    gripper_position: float
    gripper_setpoint: Optional[float]
    balance: Optional[BalanceStatus] = None
    events: List[FaultEvent] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for the bridge's state message."""
        return {
            "time": self.time,
            "pose": self.pose.to_dict(),
            "modules": [
                {"speed": s.speed, "angle": s.angle} for s in self.desired_states
            ],
            "faults": self.faults,
            "arm": {
                "mode": self.arm_mode,
                "position": self.arm_position,
                "setpoint": self.arm_setpoint,
            },
            "gripper": {
                "position": self.gripper_position,
                "setpoint": self.gripper_setpoint,
            },
            "balance": None
            if self.balance is None
            else {"balanced": self.balance.balanced, "pitch": self.balance.pitch},
            "events": [e.to_dict() for e in self.events],
        }


class RobotCore:
    """Owns every motion controller and runs the fixed-order control cycle.

    Attributes:
        drivetrain: Swerve drive coordinator (owns the pose).
        arm: Arm position controller.
        gripper: Gripper position controller.
        selector: Scoring segment lookup shared with the arm.
        fault_log: Fault events recorded during the current cycle.
    """

    def __init__(
        self,
        config: RobotConfig,
        hardware: RobotHardware,
        component_mode: Optional[ComponentMode] = None,
        fault_log: Optional[FaultLog] = None,
    ):
        if component_mode is None:
            component_mode = ComponentMode()
        self.config = config
        self.component_mode = component_mode
        self.fault_log = fault_log if fault_log is not None else FaultLog()

        self.drivetrain = Drivetrain(
            config,
            hardware.modules,
            hardware.gyro,
            self.fault_log,
            cosine_compensation=component_mode.use_cosine_compensation,
        )
        self.selector = SegmentSelector(config.scoring)
        self.arm = ArmController(
            config.arm,
            hardware.arm,
            self.selector,
            self.fault_log,
            config.sensor_timeout,
            use_feedforward=component_mode.use_arm_feedforward,
        )
        self.gripper = GripperController(
            config.gripper, hardware.gripper, self.fault_log, config.sensor_timeout
        )
        self._balancing = False

    def step(self, now: float, inputs: Optional[CycleInputs] = None) -> CycleReport:
        """Run one control cycle.

        Args:
            now: Cycle timestamp (seconds).
            inputs: Collaborator requests for this cycle. None means no input.

        Returns:
            Report of the state after this cycle's writes.
        """
        if inputs is None:
            inputs = CycleInputs()

        # 1. Sensor reads
        self.drivetrain.refresh(now)
        self.arm.refresh(now)
        self.gripper.refresh(now)

        # 2. Requests
        if inputs.vision is not None and self.component_mode.use_vision:
            self.drivetrain.add_vision_measurement(
                inputs.vision.pose, inputs.vision.timestamp, inputs.vision.confidence
            )
        if inputs.speed_tier is not None:
            self.drivetrain.set_speed_tier(inputs.speed_tier)
        self._apply_arm_request(inputs)
        if inputs.gripper is not None:
            self.gripper.set_position(inputs.gripper)

        # 3. Compute and write
        balance_status = None
        if inputs.balance:
            if not self._balancing:
                logging.info("Balance mode engaged")
                self._balancing = True
            balance_status = self.drivetrain.balance(now)
        else:
            if self._balancing:
                logging.info("Balance mode released")
                self.drivetrain.balancer.reset()
                self._balancing = False
            if inputs.auto_sample is not None:
                self.drivetrain.follow_sample(inputs.auto_sample)
            else:
                self.drivetrain.drive(
                    inputs.x,
                    inputs.y,
                    inputs.rotation,
                    field_relative=inputs.field_relative
                    and self.component_mode.use_field_relative,
                    open_loop=inputs.open_loop
                    and not self.component_mode.use_closed_loop_drive,
                )
        self.arm.update(now, inputs.arm_manual)
        self.gripper.update(now)

        return CycleReport(
            time=now,
            pose=self.drivetrain.pose,
            desired_states=self.drivetrain.get_desired_states(),
            measured_states=self.drivetrain.get_module_states(),
            faults=self.faults,
            arm_mode=self.arm.mode.value,
            arm_position=self.arm.position,
            arm_setpoint=self.arm.setpoint.position,
            arm_output=self.arm.last_output,
            gripper_position=self.gripper.position,
            gripper_setpoint=self.gripper.setpoint,
            balance=balance_status,
            events=self.fault_log.drain(),
        )

    def _apply_arm_request(self, inputs: CycleInputs) -> None:
        slow = inputs.arm_slow
        if inputs.arm_target is not None:
            self.arm.set_target(inputs.arm_target, slow)
        elif inputs.arm_preset is not None:
            self.arm.set_preset(inputs.arm_preset, slow)
        elif inputs.arm_segment is not None:
            level, piece = inputs.arm_segment
            self.arm.set_segment(level, piece, slow)
        elif inputs.arm_special is not None:
            self.arm.set_special(inputs.arm_special, slow)

    @property
    def faults(self) -> Dict[str, bool]:
        """Degraded flag per module, gyro, arm and gripper."""
        flags = dict(self.drivetrain.faults)
        flags["arm"] = self.arm.degraded
        flags["gripper"] = self.gripper.degraded
        return flags
