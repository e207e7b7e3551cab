"""Scoring segment lookup.

Maps a scoring level and game piece, or a named loading station, to a
mechanism target position. The table lives in configuration; this module
only looks values up. A lookup that has no calibrated target returns
``NO_TARGET`` (None), and the caller keeps its current set point.
"""

from typing import Optional

from .config import ScoringConfig

NO_TARGET = None
"""Returned for any unregistered or uncalibrated segment."""

PIECE_TYPES = ("cone", "cube")


class SegmentSelector:
    """Stateless lookup over the configured segment table."""

    def __init__(self, config: Optional[ScoringConfig] = None):
        self.config = config if config is not None else ScoringConfig()

    def resolve(self, level: int, piece: str) -> Optional[float]:
        """Target for a scoring level and piece type ("cone" or "cube")."""
        return self._lookup(self.config.levels.get((level, piece.lower())))

    def resolve_special(self, case: str) -> Optional[float]:
        """Target for a named loading station (e.g. "double_substation")."""
        return self._lookup(self.config.special_cases.get(case))

    def _lookup(self, value: Optional[float]) -> Optional[float]:
        if value is None or value == self.config.undefined:
            return NO_TARGET
        return value * self.config.polarity
