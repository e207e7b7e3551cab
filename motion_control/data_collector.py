"""Data collection and CSV logging for robot motion data.

This module provides CSV data logging for:
- Pose estimates (position, heading)
- Swerve module states (commanded and measured speed and angle)
- Arm state (mode, measured position, profile set point, output)
- Gripper state (measured position, set point)
- Fault events (sensor faults, limit clamps, overspeed, mode conflicts)
"""

import csv
import os
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Sequence, TextIO, Tuple

from .config import MODULE_NAMES, TERM_BLUE, TERM_RESET
from .faults import FaultEvent
from .robot import CycleReport


class DataCollector:
    """Manages CSV file creation and logging for robot cycle data.

    This class handles all data logging responsibilities:
    - Creates timestamped output directories
    - Initializes CSV files with headers
    - Writes one row per cycle for every mechanism, plus fault events
    - Ensures proper cleanup on shutdown

    Attributes:
        run_dir: Directory path for this run's output files.
        pose_csv_file: File handle for pose estimates CSV.
        modules_csv_file: File handle for module states CSV.
        arm_csv_file: File handle for arm state CSV.
        gripper_csv_file: File handle for gripper state CSV.
        faults_csv_file: File handle for fault events CSV.
    """

    def __init__(
        self,
        output_dir: str = ".",
        run_dir: Optional[str] = None,
        module_names: Sequence[str] = MODULE_NAMES,
    ) -> None:
        """Initialize the data collector.

        Args:
            output_dir: Base directory for output files (default: current directory).
            run_dir: Optional specific run directory. If None, creates timestamped
                directory. Can also be set via RUN_DIR environment variable.
            module_names: Module names, in module order, for the module CSV columns.

        Raises:
            ValueError: If output_dir is not a valid directory.
        """
        self.module_names = tuple(module_names)
        output_path = Path(output_dir)
        if output_path.exists() and not output_path.is_dir():
            raise ValueError(f"Output path exists but is not a directory: {output_dir}")

        # CSV file handles
        self.pose_csv_file: Optional[TextIO] = None
        self.pose_csv_writer: Any = None
        self.modules_csv_file: Optional[TextIO] = None
        self.modules_csv_writer: Any = None
        self.arm_csv_file: Optional[TextIO] = None
        self.arm_csv_writer: Any = None
        self.gripper_csv_file: Optional[TextIO] = None
        self.gripper_csv_writer: Any = None
        self.faults_csv_file: Optional[TextIO] = None
        self.faults_csv_writer: Any = None

        # Determine run directory
        if run_dir:
            self.run_dir: Path = Path(run_dir)
        elif env_run_dir := os.environ.get("RUN_DIR"):
            self.run_dir = Path(env_run_dir)
        else:
            # Create timestamped directory: results/run_YYYYMMDD_HHMMSS/
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            self.run_dir = output_path / "results" / f"run_{timestamp}"

        self.run_dir.mkdir(parents=True, exist_ok=True)

        # Define output file paths
        self.pose_output_path: Path = self.run_dir / "pose.csv"
        self.modules_output_path: Path = self.run_dir / "modules.csv"
        self.arm_output_path: Path = self.run_dir / "arm.csv"
        self.gripper_output_path: Path = self.run_dir / "gripper.csv"
        self.faults_output_path: Path = self.run_dir / "faults.csv"

    @staticmethod
    def _open_csv(path: Path, header: List[str]) -> Tuple[TextIO, Any]:
        csv_file = open(path, "w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(header)
        csv_file.flush()
        return csv_file, writer

    def setup(self) -> None:
        """Initialize CSV files with headers.

        Creates and opens all CSV files with appropriate column headers.
        Must be called before writing data.
        """
        self.pose_csv_file, self.pose_csv_writer = self._open_csv(
            self.pose_output_path, ["timestamp", "x", "y", "heading"]
        )

        module_header = ["timestamp"]
        for name in self.module_names:
            module_header += [
                f"{name}_speed_cmd",
                f"{name}_angle_cmd",
                f"{name}_speed",
                f"{name}_angle",
                f"{name}_degraded",
            ]
        self.modules_csv_file, self.modules_csv_writer = self._open_csv(
            self.modules_output_path, module_header
        )

        self.arm_csv_file, self.arm_csv_writer = self._open_csv(
            self.arm_output_path, ["timestamp", "mode", "position", "setpoint", "output_volts"]
        )
        self.gripper_csv_file, self.gripper_csv_writer = self._open_csv(
            self.gripper_output_path, ["timestamp", "position", "setpoint"]
        )
        self.faults_csv_file, self.faults_csv_writer = self._open_csv(
            self.faults_output_path, ["timestamp", "cycle_time", "kind", "source", "detail"]
        )

        print(
            f"{TERM_BLUE}✓ Initialized data collection to results/{self.run_dir.name}/{TERM_RESET}"
        )

    def log_cycle(self, report: CycleReport) -> None:
        """Log every CSV row for one control cycle.

        Args:
            report: Cycle report returned by RobotCore.step.
        """
        t = report.time

        self.pose_csv_writer.writerow([t, report.pose.x, report.pose.y, report.pose.heading])

        row: List[Any] = [t]
        degraded = [report.faults.get(name, False) for name in self.module_names]
        for desired, measured, flag in zip(
            report.desired_states, report.measured_states, degraded
        ):
            row += [desired.speed, desired.angle, measured.speed, measured.angle, int(flag)]
        self.modules_csv_writer.writerow(row)

        self.arm_csv_writer.writerow(
            [t, report.arm_mode, report.arm_position, report.arm_setpoint, report.arm_output]
        )
        self.gripper_csv_writer.writerow(
            [
                t,
                report.gripper_position,
                report.gripper_setpoint if report.gripper_setpoint is not None else "",
            ]
        )
        self.log_faults(t, report.events)

        for csv_file in (
            self.pose_csv_file,
            self.modules_csv_file,
            self.arm_csv_file,
            self.gripper_csv_file,
        ):
            if csv_file:
                csv_file.flush()

    def log_faults(self, cycle_time: float, events: List[FaultEvent]) -> None:
        """Log fault events to CSV.

        Args:
            cycle_time: Control cycle timestamp (seconds).
            events: Events drained from the fault log this cycle.
        """
        for event in events:
            self.faults_csv_writer.writerow(
                [event.timestamp, cycle_time, event.kind.value, event.source, event.detail]
            )
        if events and self.faults_csv_file:
            self.faults_csv_file.flush()

    def cleanup(self) -> None:
        """Close all CSV files and log final output location."""
        for csv_file in (
            self.pose_csv_file,
            self.modules_csv_file,
            self.arm_csv_file,
            self.gripper_csv_file,
            self.faults_csv_file,
        ):
            if csv_file:
                csv_file.close()

        print(f"{TERM_BLUE}✓ Saved run data to results/{self.run_dir.name}/{TERM_RESET}")

    def __enter__(self) -> "DataCollector":
        """Context manager entry point.

        Returns:
            Self reference for use in with statement.
        """
        self.setup()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit point - ensures cleanup is called.

        Args:
            exc_type: Exception type if an exception occurred.
            exc_val: Exception value if an exception occurred.
            exc_tb: Exception traceback if an exception occurred.
        """
        self.cleanup()
