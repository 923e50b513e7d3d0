"""Segment data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from fleet_segmenter.fusion.models import Tick
from fleet_segmenter.telemetry.models import Timestamp


class Phase(Enum):
    """Longitudinal motion phase of the primary vehicle."""

    ACCELERATING = "accelerating"
    DECELERATING = "decelerating"

    def flipped(self) -> Phase:
        return Phase.DECELERATING if self is Phase.ACCELERATING else Phase.ACCELERATING


@dataclass(eq=False)
class Segment:
    """A contiguous run of ticks analysed as one unit for one primary vehicle.

    Segments of one primary vehicle form a ring through ``previous`` / ``next``
    (the last segment's ``next`` is the first) so scenario queries can wrap
    around the lap.
    """

    segment_id: int
    """Sequential number within the primary vehicle's segment list (0-based)."""

    primary_vehicle_id: int

    ticks: list[Tick]
    """Ticks in time order.  Each tick's ``segment`` points back here."""

    phase: Phase | None = None
    """Motion phase for acceleration-based slicing; ``None`` for other slicers."""

    source: str = ""
    """Free-form origin label (e.g. the recording directory)."""

    previous: Segment | None = field(default=None, repr=False)
    next: Segment | None = field(default=None, repr=False)

    def __len__(self) -> int:
        return len(self.ticks)

    @property
    def tick_times(self) -> list[Timestamp]:
        return [t.time for t in self.ticks]

    @property
    def ticks_by_time(self) -> dict[Timestamp, Tick]:
        """Ticks indexed by timestamp (later ticks win on equal stamps)."""
        return {t.time: t for t in self.ticks}

    @property
    def first_time(self) -> Timestamp:
        return self.ticks[0].time

    @property
    def last_time(self) -> Timestamp:
        return self.ticks[-1].time

    def __repr__(self) -> str:
        return (
            f"Segment(id={self.segment_id}, primary={self.primary_vehicle_id}, "
            f"phase={self.phase.value if self.phase else None}, ticks={len(self.ticks)})"
        )
