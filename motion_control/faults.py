"""Error and fault categories for the motion control core.

Only configuration problems are raised as exceptions, and only while a
component is being constructed. Everything that can go wrong inside a control
cycle is reported as a non-fatal ``FaultEvent`` and handled locally.
"""

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
import logging
import time
from typing import Deque, List


class ConfigurationError(ValueError):
    """Invalid configuration detected at construction time (fatal)."""


class FaultKind(Enum):
    """Non-fatal per-cycle fault categories."""

    SENSOR_FAULT = "sensor_fault"  # Reading unavailable, stale or implausible
    LIMIT_VIOLATION = "limit_violation"  # Target clamped to soft limits
    KINEMATICS_OVERSPEED = "kinematics_overspeed"  # Module speeds normalised
    MODE_CONFLICT = "mode_conflict"  # Operator override preempted a profile


@dataclass(frozen=True)
class FaultEvent:
    """A single diagnostic event surfaced to the diagnostics collaborator.

    Attributes:
        kind: Fault category.
        source: Component that raised it (e.g. "module[2]", "arm", "gyro").
        detail: Human-readable description.
        timestamp: Wall-clock time the event was recorded (seconds).
    """

    kind: FaultKind
    source: str
    detail: str = ""
    timestamp: float = field(default_factory=time.time)

    def to_dict(self):
        """Convert to dictionary for logging."""
        return {
            "kind": self.kind.value,
            "source": self.source,
            "detail": self.detail,
            "timestamp": self.timestamp,
        }


class FaultLog:
    """Collects fault events for the diagnostics collaborator and logs them.

    Components call ``record`` when a fault starts or clears; the robot loop
    drains the events once per cycle.
    """

    def __init__(self, max_events: int = 1000) -> None:
        self._events: Deque[FaultEvent] = deque(maxlen=max_events)

    def record(
        self, kind: FaultKind, source: str, detail: str = "", level: int = logging.WARNING
    ) -> FaultEvent:
        event = FaultEvent(kind=kind, source=source, detail=detail)
        self._events.append(event)
        logging.log(level, f"[{kind.value}] {source}: {detail}")
        return event

    def drain(self) -> List[FaultEvent]:
        """Return and clear the events recorded since the last drain."""
        events = list(self._events)
        self._events.clear()
        return events

    def __len__(self) -> int:
        return len(self._events)
