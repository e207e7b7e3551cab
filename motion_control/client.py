#!/usr/bin/env python3
"""
WebSocket Bridge for the Robot Motion Core

This module connects the motion core to the field/simulation bridge over a
WebSocket. Collaborator messages (operator axes, autonomous samples, vision
corrections, mechanism requests) are cached as they arrive; a fixed-period
loop then steps the simulated robot and the motion core, logs the cycle to
CSV and sends back a state message with the pose and fault flags.
"""

import argparse
import asyncio
import json
import logging
import signal
import sys
import time
from typing import Any, Dict, Optional, Union

import websockets

from motion_control.autonomous import TrajectorySample
from motion_control.component_modes import ComponentMode, parse_component_flags
from motion_control.config import (
    TERM_BLUE,
    TERM_ORANGE,
    TERM_RESET,
    WS_MAX_RETRY_DELAY_SECONDS,
    WS_RETRY_DELAY_SECONDS,
    WS_TIMEOUT_SECONDS,
    WS_URI,
    RobotConfig,
    default_config,
)
from motion_control.data_collector import DataCollector
from motion_control.geometry import ChassisSpeeds, RobotPose
from motion_control.robot import CycleInputs, CycleReport, RobotCore, VisionMeasurement
from motion_control.sim import SimulatedRobot


class CustomFormatter(logging.Formatter):
    """Custom logging formatter that removes timestamps from INFO messages.

    This formatter provides clean console output by showing INFO messages without
    timestamps while preserving full context for WARNING, ERROR, and DEBUG messages.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format a log record based on its level.

        Args:
            record: The log record to format.

        Returns:
            Formatted log message string.
        """
        if record.levelno == logging.INFO:
            return record.getMessage()
        return f"{self.formatTime(record, self.datefmt)} - {record.levelname} - {record.getMessage()}"


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity level.

    Args:
        verbose: If True, show all levels with timestamps. If False, show INFO
                 without timestamps and WARNING/ERROR with timestamps.
    """
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(CustomFormatter(datefmt="%Y-%m-%d %H:%M:%S"))
        logger = logging.getLogger()
        logger.setLevel(logging.INFO)
        logger.addHandler(handler)


def _parse_pose(data: Dict[str, Any]) -> RobotPose:
    return RobotPose(float(data["x"]), float(data["y"]), float(data.get("heading", 0.0)))


class RobotClient:
    """Fixed-period control loop bridged to a WebSocket server.

    Incoming messages only update caches; all control happens in ``step``,
    once per period. Operator axes persist until the next operator message.
    Autonomous samples, vision corrections and mechanism requests are
    consumed by the next cycle and then cleared.

    Attributes:
        uri: WebSocket URI to connect to.
        simulation: Simulated robot the core drives.
        core: Motion core.
        data_collector: Handles CSV file logging.
        should_stop: Flag indicating whether to stop the control loop.
    """

    def __init__(
        self,
        uri: str,
        output_dir: str = ".",
        component_mode: Optional[ComponentMode] = None,
        config: Optional[RobotConfig] = None,
    ) -> None:
        """Initialize the client.

        Args:
            uri: WebSocket URI to connect to (must start with ws:// or wss://).
            output_dir: Base directory for output files (default: current directory).
            component_mode: ComponentMode configuration for component isolation testing.
            config: Robot configuration. Defaults to default_config().

        Raises:
            ValueError: If URI format is invalid.
        """
        if not uri or not uri.startswith(("ws://", "wss://")):
            raise ValueError(f"Invalid WebSocket URI: {uri}. Must start with 'ws://' or 'wss://'")

        self.uri: str = uri
        self.should_stop: bool = False

        if component_mode is None:
            component_mode = ComponentMode()
        self.component_mode = component_mode
        logging.info(f"{TERM_BLUE}Component Configuration: {component_mode}{TERM_RESET}")

        self.config = config if config is not None else default_config()
        self.period = self.config.loop_period
        self.simulation = SimulatedRobot(self.config)
        self.core = RobotCore(self.config, self.simulation.hardware, component_mode)
        names = [m.name for m in self.config.drive.modules]
        self.data_collector = DataCollector(output_dir=output_dir, module_names=names)

        # Latest collaborator requests
        self.inputs = CycleInputs()
        self.last_time: Optional[float] = None
        self.cycle_count: int = 0

    # ------------------------------------------------------------------
    # Message handling
    # ------------------------------------------------------------------

    def process_operator_message(self, data: Dict[str, Any]) -> None:
        """Cache operator axes and drive options (persist until replaced)."""
        self.inputs.x = float(data.get("x", 0.0))
        self.inputs.y = float(data.get("y", 0.0))
        self.inputs.rotation = float(data.get("rotation", 0.0))
        self.inputs.arm_manual = float(data.get("arm", 0.0))
        if "field_relative" in data:
            self.inputs.field_relative = bool(data["field_relative"])
        if "open_loop" in data:
            self.inputs.open_loop = bool(data["open_loop"])
        if "speed_tier" in data:
            self.inputs.speed_tier = str(data["speed_tier"])

    def process_auto_message(self, data: Dict[str, Any]) -> None:
        """Cache one autonomous trajectory sample."""
        speeds = ChassisSpeeds(
            float(data.get("vx", 0.0)), float(data.get("vy", 0.0)), float(data.get("omega", 0.0))
        )
        pose = _parse_pose(data["pose"]) if data.get("pose") else None
        self.inputs.auto_sample = TrajectorySample(speeds, pose)

    def process_vision_message(self, data: Dict[str, Any]) -> None:
        """Cache one vision pose measurement."""
        self.inputs.vision = VisionMeasurement(
            pose=_parse_pose(data["pose"]),
            timestamp=float(data["timestamp"]),
            confidence=float(data.get("confidence", 1.0)),
        )

    def process_arm_message(self, data: Dict[str, Any]) -> None:
        """Cache one arm target request."""
        self.inputs.arm_slow = bool(data.get("slow", False))
        if "target" in data:
            self.inputs.arm_target = float(data["target"])
        elif "segment" in data:
            segment = data["segment"]
            self.inputs.arm_segment = (int(segment["level"]), str(segment["piece"]))
        elif "special" in data:
            self.inputs.arm_special = str(data["special"])
        elif "preset" in data:
            self.inputs.arm_preset = str(data["preset"])
        else:
            logging.warning(f"Arm message without a target: {data}")

    def process_gripper_message(self, data: Dict[str, Any]) -> None:
        """Cache one gripper request (named or numeric position)."""
        position = data["position"]
        self.inputs.gripper = position if isinstance(position, str) else float(position)

    def process_balance_message(self, data: Dict[str, Any]) -> None:
        self.inputs.balance = bool(data.get("enabled", False))

    def parse_and_route_message(self, message: Union[str, bytes]) -> None:
        """Parse incoming message and route to appropriate handler.

        Args:
            message: Raw JSON message string or bytes from WebSocket.
        """
        try:
            if isinstance(message, bytes):
                message = message.decode("utf-8")
            data = json.loads(message)

            message_type = data.get("message_type")

            if message_type == "operator":
                self.process_operator_message(data)
            elif message_type == "auto":
                self.process_auto_message(data)
            elif message_type == "vision":
                self.process_vision_message(data)
            elif message_type == "arm":
                self.process_arm_message(data)
            elif message_type == "gripper":
                self.process_gripper_message(data)
            elif message_type == "balance":
                self.process_balance_message(data)
            elif message_type == "end":
                logging.info(f"{TERM_BLUE}\033[1m→ End of match received{TERM_RESET}")
                self.should_stop = True
            else:
                logging.debug(f"\nReceived unknown message: {json.dumps(data, indent=2)}\n")

        except json.JSONDecodeError as e:
            logging.error(f"Error parsing JSON: {e}")
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logging.error(f"Error processing message data: {e}")

    # ------------------------------------------------------------------
    # Control cycle
    # ------------------------------------------------------------------

    def _consume_inputs(self) -> CycleInputs:
        inputs = self.inputs
        # Operator axes and the balance flag carry over; one-shot requests do not
        self.inputs = CycleInputs(
            x=inputs.x,
            y=inputs.y,
            rotation=inputs.rotation,
            field_relative=inputs.field_relative,
            open_loop=inputs.open_loop,
            arm_manual=inputs.arm_manual,
            balance=inputs.balance,
        )
        return inputs

    def step(self, now: float) -> CycleReport:
        """Advance the simulation to ``now`` and run one control cycle.

        Args:
            now: Cycle time since the loop started (seconds).

        Returns:
            The cycle report.
        """
        if self.last_time is not None:
            self.simulation.step(now - self.last_time)
        self.last_time = now

        report = self.core.step(now, self._consume_inputs())
        self.data_collector.log_cycle(report)

        degraded = [name for name, flag in report.faults.items() if flag]
        if degraded and self.cycle_count % 50 == 0:
            logging.info(f"{TERM_ORANGE}Degraded: {', '.join(degraded)}{TERM_RESET}")
        self.cycle_count += 1
        return report

    async def send_state(self, websocket: Any, report: CycleReport) -> None:
        """Send the cycle's state message to the bridge."""
        message = {"message_type": "state"}
        message.update(report.to_dict())
        await websocket.send(json.dumps(message))

    async def receive_until(self, websocket: Any, deadline: float) -> None:
        """Route every message that arrives before ``deadline`` (monotonic seconds)."""
        while not self.should_stop:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return
            try:
                message = await asyncio.wait_for(websocket.recv(), timeout=remaining)
            except asyncio.TimeoutError:
                return
            self.parse_and_route_message(message)

    async def run_control_loop(self) -> None:
        """Connect to WebSocket and run the control loop.

        Maintains a connection to the WebSocket server with automatic retry logic
        and exponential backoff. Continues running until should_stop flag is set
        (typically by receiving an end message).
        """
        retry_delay = WS_RETRY_DELAY_SECONDS
        max_retry_delay = WS_MAX_RETRY_DELAY_SECONDS

        while not self.should_stop:
            try:
                async with websockets.connect(
                    self.uri, open_timeout=WS_TIMEOUT_SECONDS
                ) as websocket:
                    logging.info(f"{TERM_BLUE}✓ Connected to server{TERM_RESET}")
                    retry_delay = WS_RETRY_DELAY_SECONDS

                    start = time.monotonic()
                    next_cycle = start
                    logging.info(
                        f"{TERM_BLUE}✓ Running motion core at {1.0 / self.period:.0f} Hz{TERM_RESET}"
                    )
                    while not self.should_stop:
                        report = self.step(next_cycle - start)
                        await self.send_state(websocket, report)

                        next_cycle += self.period
                        if next_cycle < time.monotonic():
                            # Overran; skip missed cycles instead of bursting
                            logging.debug("Control cycle overrun")
                            next_cycle = time.monotonic()
                        await self.receive_until(websocket, next_cycle)

            except websockets.exceptions.ConnectionClosed:
                if self.should_stop:
                    break
                logging.warning("Connection closed by server")
            except (OSError, asyncio.TimeoutError, websockets.exceptions.WebSocketException) as e:
                if self.should_stop:
                    break
                logging.error(f"Connection error: {e}")
                logging.info(f"Retrying in {retry_delay} seconds...")
                await asyncio.sleep(retry_delay)
                retry_delay = min(retry_delay * 2, max_retry_delay)

        self.core.drivetrain.stop()

    def stop(self) -> None:
        """Signal the client to stop."""
        self.should_stop = True

    def __enter__(self) -> "RobotClient":
        """Context manager entry point.

        Returns:
            Self reference for use in with statement.
        """
        self.data_collector.setup()
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit point - ensures cleanup is called.

        Args:
            exc_type: Exception type if an exception occurred.
            exc_val: Exception value if an exception occurred.
            exc_tb: Exception traceback if an exception occurred.
        """
        self.data_collector.cleanup()


async def main(component_mode: Optional[ComponentMode] = None, uri: str = WS_URI) -> None:
    """Main entry point for the WebSocket bridge.

    Creates a RobotClient instance, sets up signal handlers for graceful
    shutdown, and starts the control loop.

    Args:
        component_mode: ComponentMode configuration for component isolation testing.
        uri: WebSocket URI of the bridge.
    """
    with RobotClient(uri, component_mode=component_mode) as client:
        loop = asyncio.get_running_loop()

        def signal_handler() -> None:
            """Handle shutdown signals (SIGINT, SIGTERM)."""
            logging.info("\nShutdown signal received...")
            client.stop()

        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, signal_handler)

        await client.run_control_loop()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="WebSocket bridge for the robot motion core"
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable verbose logging with timestamps"
    )
    parser.add_argument("--uri", default=WS_URI, help=f"Bridge WebSocket URI (default: {WS_URI})")
    return parser


def run(argv=None) -> None:
    """Parse flags, configure logging and run the bridge until stopped."""
    component_mode, remaining_args = parse_component_flags(argv)
    args = build_parser().parse_args(remaining_args)

    setup_logging(args.verbose)

    try:
        asyncio.run(main(component_mode=component_mode, uri=args.uri))
    except KeyboardInterrupt:
        logging.info("\nExiting...")
        sys.exit(0)


if __name__ == "__main__":
    run()
