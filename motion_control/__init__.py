"""Motion Control - Swerve Drivetrain and Scoring Mechanism Control

A cycle-driven control core for a robot with a four-module swerve drivetrain,
a motion-profiled arm and a position-controlled gripper.

## Architecture Overview

Each control cycle (20 ms) runs the same pipeline in `RobotCore.step`:

### Layer 1: Sensing (hardware.py, odometry.py)
Refreshes every sensor through a staleness-aware cache and updates the pose.
- Missing or out-of-range readings mark the owning component degraded
- Odometry integrates module position deltas with the gyro heading
- Vision measurements reset or blend the pose, with outlier rejection

### Layer 2: Drive Commands (drivetrain.py, kinematics.py, autonomous.py)
Converts operator axes, trajectory samples or balance output into module states.
- Deadband and speed tiers for operator input
- Field-relative rotation by the current heading
- Inverse kinematics with wheel speed desaturation

### Layer 3: Module Control (swerve_module.py)
Drives each module toward its desired state.
- Angle optimization (never turn more than 90 degrees)
- Anti-jitter and cosine compensation
- Open-loop voltage or feedforward plus PID velocity control

### Layer 4: Mechanisms (arm.py, motion_profile.py, gripper.py, segments.py)
Moves the scoring mechanisms between set points.
- Trapezoidal arm profiles with gravity feedforward and manual override
- Soft limit clamping on every target
- Scoring segment lookup by level and piece type

## Modules

### Core Control Modules
- `config.py` - Centralized configuration parameters with validation
- `geometry.py` - Poses, chassis speeds and module states
- `kinematics.py` - Swerve inverse and forward kinematics
- `swerve_module.py` - Single module control
- `odometry.py` - Pose estimation and vision fusion
- `drivetrain.py` - Drivetrain, speed tiers and balance controller
- `autonomous.py` - Holonomic trajectory follower
- `motion_profile.py` - Trapezoidal motion profile
- `arm.py` - Arm state machine
- `gripper.py` - Gripper position control
- `segments.py` - Scoring segment lookup
- `robot.py` - Per-cycle orchestration

### Communication & Data
- `client.py` - WebSocket client and main control loop
- `sim.py` - Simulated hardware
- `data_collector.py` - CSV data logging for all system signals
- `faults.py` - Fault events and configuration errors

### Visualization
- `plot_styles.py` - Shared plotting utilities and color scheme
- `visualization.py` - Post-run visualization
- `plot_results.py` - CLI for visualization tools

## Quick Start

```python
from motion_control import RobotCore, default_config
from motion_control.sim import SimulatedRobot

config = default_config()
sim = SimulatedRobot(config)
core = RobotCore(config, sim.hardware)
report = core.step(0.02)
```

Or use the command-line interface:
```bash
python -m motion_control --uri ws://localhost:8765
```
"""

__version__ = "0.1.0"

# Export key classes for convenience
from .arm import ArmController, ArmMode
from .config import RobotConfig, default_config
from .data_collector import DataCollector
from .drivetrain import BalanceController, Drivetrain
from .faults import ConfigurationError, FaultKind, FaultLog
from .gripper import GripperController
from .kinematics import SwerveKinematics
from .motion_profile import TrapezoidProfile
from .odometry import SwerveOdometry
from .robot import CycleInputs, CycleReport, RobotCore
from .segments import SegmentSelector
from .swerve_module import SwerveModule

__all__ = [
    "ArmController",
    "ArmMode",
    "BalanceController",
    "ConfigurationError",
    "CycleInputs",
    "CycleReport",
    "DataCollector",
    "Drivetrain",
    "FaultKind",
    "FaultLog",
    "GripperController",
    "RobotConfig",
    "RobotCore",
    "SegmentSelector",
    "SwerveKinematics",
    "SwerveModule",
    "SwerveOdometry",
    "TrapezoidProfile",
    "default_config",
]
