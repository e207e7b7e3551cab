"""Configuration parameters for the robot motion control system.

This module centralizes all configuration parameters including:
- Drivetrain geometry, gear ratios and module calibration
- Actuator gains, feedforward characterization and current limits
- Arm and gripper soft limits, presets and motion constraints
- Scoring segment table
- Vision fusion and autonomous follower parameters
- WebSocket connection parameters

The module-level constants document where each value comes from. The frozen
dataclasses at the bottom group them into one immutable ``RobotConfig``
aggregate that every component receives at construction. Validation happens
once, in ``__post_init__``, and raises ``ConfigurationError``.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from .faults import ConfigurationError
from .geometry import Translation

INCH = 0.0254
"""Meters per inch."""

# ============================================================================
# Control Loop Timing
# ============================================================================

LOOP_PERIOD = 0.02
"""Fixed control cycle period (seconds). 50 Hz, matching the robot controller."""

SENSOR_TIMEOUT = 0.1
"""Age of the last good sensor reading after which a held value is marked stale (seconds).

Five missed cycles. Any failed read is replaced by the last good value and
flags the sensor degraded at once; the timeout only marks how long that held
value has been in use.
"""

NOMINAL_VOLTAGE = 12.0
"""Voltage compensation reference (volts). All actuator outputs are expressed
against this nominal battery voltage."""


# ============================================================================
# Swerve Drivetrain Geometry
# ============================================================================

TRACK_WIDTH = 17.25 * INCH
"""Distance between left and right wheel centres (meters)."""

WHEEL_BASE = 31.7 * INCH
"""Distance between front and back wheel centres (meters)."""

WHEEL_DIAMETER = 3.95 * INCH
"""Drive wheel diameter (meters). Measured on worn tread."""

DRIVE_GEAR_RATIO = 6.75
"""Drive motor rotations per wheel rotation (L2 module)."""

ANGLE_GEAR_RATIO = 150.0 / 7.0
"""Steering motor rotations per module rotation."""

MODULE_NAMES = ("front_left", "front_right", "back_left", "back_right")
"""Module order used everywhere (kinematics, odometry, diagnostics)."""

MODULE_LOCATIONS = (
    (WHEEL_BASE / 2.0, TRACK_WIDTH / 2.0),
    (WHEEL_BASE / 2.0, -TRACK_WIDTH / 2.0),
    (-WHEEL_BASE / 2.0, TRACK_WIDTH / 2.0),
    (-WHEEL_BASE / 2.0, -TRACK_WIDTH / 2.0),
)
"""Wheel offsets from chassis centre (meters), +x forward, +y left."""

MODULE_ANGLE_OFFSETS = (1.413, 141.328, 142.466, -126.211)
"""Absolute encoder reading (degrees) when each wheel points straight forward.

Measured with all wheels aligned against a straight edge. Subtracted from the
raw encoder reading to obtain the module angle.
"""

INVERT_GYRO = False
"""True if the heading sensor reports clockwise-positive yaw."""


# ============================================================================
# Swerve Actuator Parameters
# ============================================================================

DRIVE_CURRENT_LIMIT = 80
"""Drive motor continuous current limit (amps)."""

ANGLE_CURRENT_LIMIT = 20
"""Steering motor continuous current limit (amps)."""

OPEN_LOOP_RAMP = 0.25
"""Seconds for open-loop drive output to go from zero to full scale.

Softens driver input to prevent wheel slip on hard acceleration.
"""

CLOSED_LOOP_RAMP = 0.0
"""Seconds for closed-loop drive output ramp (0 disables ramping)."""

ANGLE_KP = 0.01
"""Steering position gain (output fraction per degree of error)."""

ANGLE_KI = 0.0
"""Steering integral gain."""

ANGLE_KD = 0.005
"""Steering derivative gain."""

DRIVE_KP = 0.0
"""Drive velocity feedback gain (volts per m/s of error).

Zero: characterization feedforward alone tracks velocity well enough.
"""

DRIVE_KI = 0.0
"""Drive velocity integral gain."""

DRIVE_KD = 0.0
"""Drive velocity derivative gain."""

DRIVE_KS = 0.11979
"""Static friction feedforward (volts). From drivetrain characterization."""

DRIVE_KV = 2.3823
"""Velocity feedforward (volts per m/s). From drivetrain characterization."""

DRIVE_KA = 0.30034
"""Acceleration feedforward (volts per m/s^2). From drivetrain characterization."""


# ============================================================================
# Driving Speeds
# ============================================================================

MAX_SPEED = 4.4196
"""Maximum module speed (m/s). Free speed of the L2 module at 12 V."""

MAX_ANGULAR_VELOCITY = 4.4196
"""Maximum chassis rotation rate in the fast tier (rad/s)."""

MEDIUM_SPEED = 2.8
"""Translation speed of the medium tier (m/s)."""

MEDIUM_ANGULAR_VELOCITY = 2.8
"""Rotation rate of the medium tier (rad/s)."""

SLOW_SPEED = 1.0
"""Translation speed of the slow tier (m/s). Used for fine alignment."""

SLOW_ANGULAR_VELOCITY = 1.0
"""Rotation rate of the slow tier (rad/s)."""

STICK_DEADBAND = 0.1
"""Operator axis deadband for driving (normalized units, range [0, 1))."""


# ============================================================================
# Charge Station Balancing
# ============================================================================

BALANCE_PITCH_SETPOINT = 0.0
"""Target chassis pitch (degrees). Level."""

BALANCE_KP = 0.04
"""Pitch balance proportional gain (normalized drive output per degree)."""

BALANCE_KI = 0.00005
"""Pitch balance integral gain."""

BALANCE_KD = 0.0
"""Pitch balance derivative gain.

Left at zero. The previous robot code carried 1e-15 here, which is an
untuned placeholder rather than a meaningful gain.
"""

BALANCE_KFF = 0.0
"""Pitch balance feedforward gain. Untuned placeholder, see BALANCE_KD."""

BALANCE_TOLERANCE = 2.5
"""Pitch band (degrees) counted as level."""

BALANCE_SETTLE_CYCLES = 25
"""Consecutive in-band cycles before balancing reports done (0.5 s at 50 Hz)."""

BALANCE_MAX_OUTPUT = 0.35
"""Clamp on the normalized forward command while balancing."""


# ============================================================================
# Vision Pose Correction
# ============================================================================

VISION_FUSION_POLICY = "blend"
"""How vision poses are applied: "reset" replaces the pose, "blend" moves the
pose toward the measurement by a confidence-weighted fraction."""

VISION_BLEND_GAIN = 0.2
"""Fraction of the innovation applied at confidence 1.0 (range [0, 1])."""

VISION_OUTLIER_DISTANCE = 1.0
"""Vision measurements farther than this from the current pose are rejected
(meters). Only applied by the blend policy."""

VISION_MAX_LATENCY = 0.5
"""Vision measurements older than this are discarded (seconds)."""


# ============================================================================
# Autonomous Sample Follower
# ============================================================================

AUTO_KP_X = 1.0
"""Field x position correction gain ((m/s) per meter)."""

AUTO_KP_Y = 1.0
"""Field y position correction gain ((m/s) per meter)."""

AUTO_KP_THETA = 0.8
"""Heading correction gain ((rad/s) per radian). Lower if oscillating."""


# ============================================================================
# Arm
# ============================================================================

ARM_CURRENT_LIMIT = 40
"""Arm motor current limit (amps)."""

ARM_SOFT_LIMIT_REVERSE = -7.0
"""Lowest commandable arm position (radians from the zero mark)."""

ARM_SOFT_LIMIT_FORWARD = 8.6
"""Highest commandable arm position (radians from the zero mark)."""

ARM_GEAR_RATIO = 1.0 / (48.0 * 4.0)
"""Arm rotations per motor rotation (48:1 gearbox, 4:1 chain)."""

ARM_POSITION_FACTOR = ARM_GEAR_RATIO * 2.0 * math.pi
"""Radians of arm travel per motor rotation."""

ARM_VELOCITY_FACTOR = ARM_POSITION_FACTOR / 60.0
"""Radians per second of arm travel per motor RPM."""

ARM_FREE_SPEED = 5676.0 * ARM_VELOCITY_FACTOR
"""Arm free speed (rad/s) at 12 V, from the NEO free speed of 5676 RPM."""

ARM_ZERO_COSINE_OFFSET = -math.pi / 6.0
"""Radians added to the measured position to get the angle from horizontal.
The arm rests at roughly 30 degrees below horizontal at its zero mark."""

ARM_KS = 0.0
"""Arm static friction feedforward (volts)."""

ARM_KG = 0.4
"""Arm gravity feedforward (volts at horizontal)."""

ARM_KV = NOMINAL_VOLTAGE / ARM_FREE_SPEED
"""Arm velocity feedforward (volts per rad/s)."""

ARM_KP = 0.6
"""Arm position gain (volts per radian)."""

ARM_KI = 0.0
"""Arm integral gain."""

ARM_KD = 0.0
"""Arm derivative gain."""

ARM_MAX_VELOCITY = 2.0
"""Normal profile cruise velocity (rad/s)."""

ARM_MAX_ACCELERATION = 2.0
"""Normal profile acceleration (rad/s^2)."""

ARM_SLOW_MAX_VELOCITY = 1.0
"""Slow profile cruise velocity (rad/s). Used when carrying a game piece."""

ARM_SLOW_MAX_ACCELERATION = 1.0
"""Slow profile acceleration (rad/s^2)."""

ARM_MANUAL_DEADBAND = 0.05
"""Operator arm axis deadband (normalized)."""

ARM_MANUAL_SCALE = 0.5
"""Fraction of the normal cruise velocity reached at full manual deflection."""

ARM_TARGET_TOLERANCE = 1e-6
"""Targets closer than this to the active target are treated as identical."""

ARM_PRESETS = {
    "home": 0.0,
    "scoring": -3.05,
    "intake": 4.64,
    "feeder": 2.95,
    "l2_cone": 3.38321,
    "l2_cube": 3.45332,
    "item_hold": 4.44819,
    "double_substation": 2.95,
}
"""Named arm positions (radians)."""


# ============================================================================
# Gripper
# ============================================================================

GRIPPER_CURRENT_LIMIT = 10
"""Gripper motor current limit (amps). Low to avoid crushing cones."""

GRIPPER_SOFT_LIMIT_REVERSE = -40.0
"""Most open commandable gripper position (motor rotations)."""

GRIPPER_SOFT_LIMIT_FORWARD = 5.0
"""Most closed commandable gripper position (motor rotations)."""

GRIPPER_KP = 0.2
"""Gripper position gain (volts per rotation)."""

GRIPPER_KI = 0.0
"""Gripper integral gain."""

GRIPPER_KD = 0.0
"""Gripper derivative gain."""

GRIPPER_POSITIONS = {
    "close": 0.0,
    "close_cone": 0.0,
    "close_cube": -8.0,
    "open": -50.0,
    "safe": -29.0,
}
"""Named gripper set points (motor rotations). "open" lies past the reverse
soft limit and is clamped to it."""


# ============================================================================
# Scoring Segments
# ============================================================================

SEGMENT_UNDEFINED = -1.0
"""Table value marking a registered segment with no calibrated target."""

SEGMENT_LEVELS = {
    (1, "cone"): 0.0,
    (2, "cone"): 31.8,
    (3, "cone"): 35.2,
    (4, "cone"): SEGMENT_UNDEFINED,
    (5, "cone"): SEGMENT_UNDEFINED,
    (6, "cone"): SEGMENT_UNDEFINED,
    (1, "cube"): 0.0,
    (2, "cube"): 20.6,
    (3, "cube"): 35.2,
}
"""Target position per (level, piece type), left to right from the driver
station."""

SEGMENT_SPECIAL_CASES = {
    "human_player": SEGMENT_UNDEFINED,
    "double_substation": SEGMENT_UNDEFINED,
    "pre_substation": SEGMENT_UNDEFINED,
}
"""Target position for the named loading stations."""

SEGMENT_POLARITY = 1.0
"""Sign applied to every resolved segment target (+1 or -1).

The sign of scoring positions has flipped between mechanism revisions; it is
a calibration input, not a property of the table.
"""


# ============================================================================
# Terminal Colors
# ============================================================================

TERM_BLUE = "\033[38;2;35;116;247m"
"""Terminal color code for status highlights."""

TERM_ORANGE = "\033[38;2;247;72;35m"
"""Terminal color code for warnings."""

TERM_RESET = "\033[0m"
"""Terminal color reset code."""


# ============================================================================
# WebSocket Configuration
# ============================================================================

WS_URI = "ws://localhost:8765"
"""WebSocket URI of the field/simulation bridge."""

WS_RETRY_DELAY_SECONDS = 1
"""Initial retry delay for failed WebSocket connections (seconds)."""

WS_MAX_RETRY_DELAY_SECONDS = 60
"""Maximum retry delay with exponential backoff (seconds)."""

WS_TIMEOUT_SECONDS = 5.0
"""Timeout for WebSocket message reception (seconds)."""


# ============================================================================
# Configuration Aggregate
# ============================================================================


def _require_non_negative(name: str, value: float) -> None:
    if not math.isfinite(value) or value < 0.0:
        raise ConfigurationError(f"{name} must be a finite non-negative number, got {value}")


def _require_positive(name: str, value: float) -> None:
    if not math.isfinite(value) or value <= 0.0:
        raise ConfigurationError(f"{name} must be a finite positive number, got {value}")


def _require_limits(name: str, reverse: float, forward: float) -> None:
    if not (math.isfinite(reverse) and math.isfinite(forward)) or reverse >= forward:
        raise ConfigurationError(
            f"{name} soft limits must satisfy reverse < forward, got [{reverse}, {forward}]"
        )


def _freeze(config, name: str) -> None:
    """Replace a table field of a frozen dataclass with a read-only view of a copy."""
    object.__setattr__(config, name, MappingProxyType(dict(getattr(config, name))))


@dataclass(frozen=True)
class PIDGains:
    """Proportional, integral, derivative and feedforward gains."""

    kp: float = 0.0
    ki: float = 0.0
    kd: float = 0.0
    kff: float = 0.0

    def __post_init__(self) -> None:
        for name in ("kp", "ki", "kd", "kff"):
            _require_non_negative(name, getattr(self, name))


@dataclass(frozen=True)
class MotionConstraint:
    """Trapezoidal profile limits: cruise velocity and acceleration."""

    max_velocity: float
    max_acceleration: float

    def __post_init__(self) -> None:
        _require_positive("max_velocity", self.max_velocity)
        _require_positive("max_acceleration", self.max_acceleration)


@dataclass(frozen=True)
class SpeedTier:
    """Translation (m/s) and rotation (rad/s) scale for operator driving."""

    speed: float
    angular_velocity: float

    def __post_init__(self) -> None:
        _require_positive("speed", self.speed)
        _require_positive("angular_velocity", self.angular_velocity)


@dataclass(frozen=True)
class ConversionFactors:
    """Actuator-native to physical unit conversions for one swerve module."""

    drive_position: float  # meters per drive motor rotation
    drive_velocity: float  # m/s per drive motor RPM
    angle_position: float  # degrees per steering motor rotation


@dataclass(frozen=True)
class ModuleConfig:
    """Per-module calibration."""

    name: str
    location: Translation
    angle_offset: float  # degrees

    def __post_init__(self) -> None:
        if not math.isfinite(self.angle_offset):
            raise ConfigurationError(f"{self.name}: angle offset must be finite")


@dataclass(frozen=True)
class DriveConfig:
    """Swerve drivetrain configuration."""

    modules: Tuple[ModuleConfig, ...]
    wheel_diameter: float = WHEEL_DIAMETER
    drive_gear_ratio: float = DRIVE_GEAR_RATIO
    angle_gear_ratio: float = ANGLE_GEAR_RATIO
    max_speed: float = MAX_SPEED
    speed_tiers: Mapping[str, SpeedTier] = field(
        default_factory=lambda: {
            "slow": SpeedTier(SLOW_SPEED, SLOW_ANGULAR_VELOCITY),
            "medium": SpeedTier(MEDIUM_SPEED, MEDIUM_ANGULAR_VELOCITY),
            "fast": SpeedTier(MAX_SPEED, MAX_ANGULAR_VELOCITY),
        }
    )
    default_tier: str = "fast"
    deadband: float = STICK_DEADBAND
    drive_gains: PIDGains = PIDGains(DRIVE_KP, DRIVE_KI, DRIVE_KD)
    angle_gains: PIDGains = PIDGains(ANGLE_KP, ANGLE_KI, ANGLE_KD)
    drive_ks: float = DRIVE_KS
    drive_kv: float = DRIVE_KV
    drive_ka: float = DRIVE_KA
    drive_current_limit: float = DRIVE_CURRENT_LIMIT
    angle_current_limit: float = ANGLE_CURRENT_LIMIT
    open_loop_ramp: float = OPEN_LOOP_RAMP
    closed_loop_ramp: float = CLOSED_LOOP_RAMP
    nominal_voltage: float = NOMINAL_VOLTAGE
    invert_gyro: bool = INVERT_GYRO

    def __post_init__(self) -> None:
        if len(self.modules) != 4:
            raise ConfigurationError(f"Swerve drive needs exactly 4 modules, got {len(self.modules)}")
        _require_positive("wheel_diameter", self.wheel_diameter)
        _require_positive("drive_gear_ratio", self.drive_gear_ratio)
        _require_positive("angle_gear_ratio", self.angle_gear_ratio)
        _require_positive("max_speed", self.max_speed)
        _require_positive("nominal_voltage", self.nominal_voltage)
        for name in (
            "drive_ks", "drive_kv", "drive_ka", "drive_current_limit",
            "angle_current_limit", "open_loop_ramp", "closed_loop_ramp",
        ):
            _require_non_negative(name, getattr(self, name))
        if not 0.0 <= self.deadband < 1.0:
            raise ConfigurationError(f"deadband must lie in [0, 1), got {self.deadband}")
        if self.default_tier not in self.speed_tiers:
            raise ConfigurationError(f"Unknown default speed tier: {self.default_tier}")
        _freeze(self, "speed_tiers")

    @property
    def wheel_circumference(self) -> float:
        return self.wheel_diameter * math.pi

    def conversion_factors(self) -> ConversionFactors:
        """Derive native-unit conversion factors from the base geometry."""
        drive_position = self.wheel_circumference / self.drive_gear_ratio
        return ConversionFactors(
            drive_position=drive_position,
            drive_velocity=drive_position / 60.0,
            angle_position=360.0 / self.angle_gear_ratio,
        )


@dataclass(frozen=True)
class BalanceConfig:
    """Charge station balance loop configuration."""

    gains: PIDGains = PIDGains(BALANCE_KP, BALANCE_KI, BALANCE_KD, BALANCE_KFF)
    setpoint: float = BALANCE_PITCH_SETPOINT
    tolerance: float = BALANCE_TOLERANCE
    settle_cycles: int = BALANCE_SETTLE_CYCLES
    max_output: float = BALANCE_MAX_OUTPUT

    def __post_init__(self) -> None:
        _require_positive("balance tolerance", self.tolerance)
        _require_positive("balance max_output", self.max_output)
        if self.settle_cycles < 1:
            raise ConfigurationError(f"settle_cycles must be >= 1, got {self.settle_cycles}")


@dataclass(frozen=True)
class VisionConfig:
    """Vision pose correction policy."""

    fusion_policy: str = VISION_FUSION_POLICY
    blend_gain: float = VISION_BLEND_GAIN
    outlier_distance: float = VISION_OUTLIER_DISTANCE
    max_latency: float = VISION_MAX_LATENCY

    def __post_init__(self) -> None:
        if self.fusion_policy not in ("reset", "blend"):
            raise ConfigurationError(f"Unknown vision fusion policy: {self.fusion_policy}")
        if not 0.0 <= self.blend_gain <= 1.0:
            raise ConfigurationError(f"blend_gain must lie in [0, 1], got {self.blend_gain}")
        _require_positive("outlier_distance", self.outlier_distance)
        _require_positive("max_latency", self.max_latency)


@dataclass(frozen=True)
class AutoConfig:
    """Autonomous sample follower gains."""

    kp_x: float = AUTO_KP_X
    kp_y: float = AUTO_KP_Y
    kp_theta: float = AUTO_KP_THETA

    def __post_init__(self) -> None:
        for name in ("kp_x", "kp_y", "kp_theta"):
            _require_non_negative(name, getattr(self, name))


@dataclass(frozen=True)
class ArmConfig:
    """Single-jointed arm configuration."""

    soft_limit_reverse: float = ARM_SOFT_LIMIT_REVERSE
    soft_limit_forward: float = ARM_SOFT_LIMIT_FORWARD
    position_factor: float = ARM_POSITION_FACTOR
    zero_cosine_offset: float = ARM_ZERO_COSINE_OFFSET
    ks: float = ARM_KS
    kg: float = ARM_KG
    kv: float = ARM_KV
    gains: PIDGains = PIDGains(ARM_KP, ARM_KI, ARM_KD)
    constraint: MotionConstraint = MotionConstraint(ARM_MAX_VELOCITY, ARM_MAX_ACCELERATION)
    slow_constraint: MotionConstraint = MotionConstraint(
        ARM_SLOW_MAX_VELOCITY, ARM_SLOW_MAX_ACCELERATION
    )
    manual_deadband: float = ARM_MANUAL_DEADBAND
    manual_scale: float = ARM_MANUAL_SCALE
    target_tolerance: float = ARM_TARGET_TOLERANCE
    current_limit: float = ARM_CURRENT_LIMIT
    nominal_voltage: float = NOMINAL_VOLTAGE
    presets: Mapping[str, float] = field(default_factory=lambda: dict(ARM_PRESETS))

    def __post_init__(self) -> None:
        _require_limits("arm", self.soft_limit_reverse, self.soft_limit_forward)
        _require_positive("arm position_factor", self.position_factor)
        _require_positive("arm nominal_voltage", self.nominal_voltage)
        for name in ("ks", "kg", "kv", "manual_scale", "target_tolerance", "current_limit"):
            _require_non_negative(f"arm {name}", getattr(self, name))
        if not 0.0 <= self.manual_deadband < 1.0:
            raise ConfigurationError(f"arm manual_deadband must lie in [0, 1), got {self.manual_deadband}")
        _freeze(self, "presets")

    @property
    def velocity_factor(self) -> float:
        """Radians per second per motor RPM."""
        return self.position_factor / 60.0


@dataclass(frozen=True)
class GripperConfig:
    """Gripper configuration."""

    soft_limit_reverse: float = GRIPPER_SOFT_LIMIT_REVERSE
    soft_limit_forward: float = GRIPPER_SOFT_LIMIT_FORWARD
    gains: PIDGains = PIDGains(GRIPPER_KP, GRIPPER_KI, GRIPPER_KD)
    positions: Mapping[str, float] = field(default_factory=lambda: dict(GRIPPER_POSITIONS))
    current_limit: float = GRIPPER_CURRENT_LIMIT
    nominal_voltage: float = NOMINAL_VOLTAGE

    def __post_init__(self) -> None:
        _require_limits("gripper", self.soft_limit_reverse, self.soft_limit_forward)
        _require_non_negative("gripper current_limit", self.current_limit)
        _require_positive("gripper nominal_voltage", self.nominal_voltage)
        _freeze(self, "positions")


@dataclass(frozen=True)
class ScoringConfig:
    """Segment table and polarity."""

    levels: Mapping[Tuple[int, str], float] = field(default_factory=lambda: dict(SEGMENT_LEVELS))
    special_cases: Mapping[str, float] = field(default_factory=lambda: dict(SEGMENT_SPECIAL_CASES))
    undefined: Optional[float] = SEGMENT_UNDEFINED
    polarity: float = SEGMENT_POLARITY

    def __post_init__(self) -> None:
        if self.polarity not in (1.0, -1.0):
            raise ConfigurationError(f"Segment polarity must be +1 or -1, got {self.polarity}")
        _freeze(self, "levels")
        _freeze(self, "special_cases")


@dataclass(frozen=True)
class RobotConfig:
    """Immutable configuration aggregate handed to every component."""

    drive: DriveConfig
    balance: BalanceConfig = BalanceConfig()
    vision: VisionConfig = VisionConfig()
    auto: AutoConfig = AutoConfig()
    arm: ArmConfig = ArmConfig()
    gripper: GripperConfig = GripperConfig()
    scoring: ScoringConfig = ScoringConfig()
    loop_period: float = LOOP_PERIOD
    sensor_timeout: float = SENSOR_TIMEOUT

    def __post_init__(self) -> None:
        _require_positive("loop_period", self.loop_period)
        _require_positive("sensor_timeout", self.sensor_timeout)


def default_modules() -> Tuple[ModuleConfig, ...]:
    """Module calibration for the competition robot."""
    return tuple(
        ModuleConfig(name=name, location=Translation(x, y), angle_offset=offset)
        for name, (x, y), offset in zip(MODULE_NAMES, MODULE_LOCATIONS, MODULE_ANGLE_OFFSETS)
    )


def default_config() -> RobotConfig:
    """Build the configuration aggregate from the constants in this module."""
    return RobotConfig(drive=DriveConfig(modules=default_modules()))
