"""
Component isolation modes for modular testing.

This module defines which control features are active or bypassed so each
one's contribution can be evaluated on its own against the simulated robot.
"""

from dataclasses import dataclass
import argparse
import sys


@dataclass
class ComponentMode:
    """Configuration for which control components are active."""

    # Drive Layer
    use_field_relative: bool = True  # If False, operator axes are robot-relative
    use_closed_loop_drive: bool = False  # If True, operator driving uses velocity control
    use_cosine_compensation: bool = True  # If False, no speed scaling while steering

    # Pose Estimation Layer
    use_vision: bool = True  # If False, vision corrections are ignored

    # Mechanism Layer
    use_arm_feedforward: bool = True  # If False, arm runs on position PID alone

    def __str__(self):
        """Human-readable description of active components."""
        components = []

        drive = "Field-relative" if self.use_field_relative else "Robot-relative"
        drive += " closed-loop" if self.use_closed_loop_drive else " open-loop"
        if self.use_cosine_compensation:
            drive += " + cosine"
        components.append(drive)

        components.append("Odometry + Vision" if self.use_vision else "Odometry")
        components.append("Arm(PID+FF)" if self.use_arm_feedforward else "Arm(PID)")

        return " → ".join(components)

    def to_dict(self):
        """Convert to dictionary for logging."""
        return {
            'use_field_relative': self.use_field_relative,
            'use_closed_loop_drive': self.use_closed_loop_drive,
            'use_cosine_compensation': self.use_cosine_compensation,
            'use_vision': self.use_vision,
            'use_arm_feedforward': self.use_arm_feedforward,
        }


def parse_component_flags(args=None):
    """
    Parse command-line flags to determine which components are active.

    Args:
        args: List of command-line arguments (default: sys.argv[1:])

    Returns:
        tuple: (ComponentMode, remaining_args)
            - ComponentMode with appropriate settings
            - List of remaining arguments not consumed
    """
    parser = argparse.ArgumentParser(add_help=False)

    parser.add_argument('--robot-relative', action='store_true',
                        help='Interpret operator translation in the robot frame')
    parser.add_argument('--closed-loop', action='store_true',
                        help='Drive operator commands with velocity feedback and feedforward')
    parser.add_argument('--no-cosine-compensation', action='store_true',
                        help='Disable wheel speed scaling by steering error')
    parser.add_argument('--no-vision', action='store_true',
                        help='Ignore vision pose corrections')
    parser.add_argument('--no-feedforward', action='store_true',
                        help='Disable arm gravity and velocity feedforward')

    # Parse known args, keep the rest
    if args is None:
        args = sys.argv[1:]

    known_args, remaining_args = parser.parse_known_args(args)

    mode = ComponentMode(
        use_field_relative=not known_args.robot_relative,
        use_closed_loop_drive=known_args.closed_loop,
        use_cosine_compensation=not known_args.no_cosine_compensation,
        use_vision=not known_args.no_vision,
        use_arm_feedforward=not known_args.no_feedforward,
    )

    return mode, remaining_args
