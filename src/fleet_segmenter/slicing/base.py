"""Shared slicing machinery: tick filtering, per-primary isolation, ring linking."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from fleet_segmenter.fusion.models import Tick
from fleet_segmenter.slicing.models import Phase, Segment

_logger = logging.getLogger(__name__)


class SlicingError(ValueError):
    """Raised when a tick sequence violates a slicing precondition."""


@dataclass
class Run:
    """A candidate segment: consecutive ticks plus the phase they were cut as."""

    ticks: list[Tick]
    phase: Phase | None = None


class Slicer(ABC):
    """Base class for tick → segment slicers.

    Subclasses implement :meth:`split`; this class handles everything around
    it: dropping incomplete ticks, checking the start condition, running one
    isolated pass per primary vehicle and materialising the ring of segments.

    Args:
        min_ticks_per_segment: Runs shorter than this are dropped entirely.
        fleet_size: Entity count of a complete tick.  ``None`` infers it as the
            largest entity count in the input.
        source: Label copied into every produced :class:`Segment`.
    """

    def __init__(
        self,
        min_ticks_per_segment: int = 10,
        fleet_size: int | None = None,
        source: str = "",
    ) -> None:
        if min_ticks_per_segment < 1:
            raise ValueError("min_ticks_per_segment must be >= 1")
        self.min_ticks_per_segment = min_ticks_per_segment
        self.fleet_size = fleet_size
        self.source = source

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def slice(
        self,
        ticks: Sequence[Tick],
        primary_ids: Iterable[int] | None = None,
    ) -> list[Segment]:
        """Slice *ticks* for every (or each selected) primary vehicle.

        Returns the segments of all primary vehicles, grouped by vehicle in
        ascending id order.
        """
        by_vehicle = self.slice_by_vehicle(ticks, primary_ids)
        return [seg for segments in by_vehicle.values() for seg in segments]

    def slice_by_vehicle(
        self,
        ticks: Sequence[Tick],
        primary_ids: Iterable[int] | None = None,
    ) -> dict[int, list[Segment]]:
        """Return ``{vehicle_id: segments}`` with one isolated pass per vehicle.

        Raises:
            SlicingError: If no complete tick exists, the vehicles do not start
                in the same path section, a requested vehicle is unknown, or a
                pass yields no segment.
        """
        complete = self.complete_ticks(ticks)
        self._check_start(complete)

        first = complete[0]
        ids = sorted(primary_ids if primary_ids is not None else first.vehicle_ids)
        result: dict[int, list[Segment]] = {}
        for vehicle_id in ids:
            if vehicle_id not in first:
                raise SlicingError(f"Vehicle {vehicle_id} is not part of the tick data")
            isolated = [tick.with_primary(vehicle_id) for tick in complete]
            runs = self.split(isolated, vehicle_id)
            result[vehicle_id] = self.build_segments(runs, vehicle_id)
        return result

    def complete_ticks(self, ticks: Sequence[Tick]) -> list[Tick]:
        """Keep ticks holding every vehicle, each already placed on the path."""
        if not ticks:
            raise SlicingError("There is no tick data provided!")
        fleet_size = self.fleet_size or max(len(t) for t in ticks)
        complete = [
            t for t in ticks
            if len(t) == fleet_size
            and all(e.section is not None for e in t.entities.values())
        ]
        dropped = len(ticks) - len(complete)
        if dropped:
            _logger.info("Dropped %d incomplete ticks before slicing", dropped)
        if not complete:
            raise SlicingError(f"No tick contains all {fleet_size} vehicles")
        return complete

    def build_segments(self, runs: list[Run], vehicle_id: int) -> list[Segment]:
        """Materialise runs of sufficient length as ring-linked segments.

        Raises:
            SlicingError: If no run reaches ``min_ticks_per_segment``.
        """
        segments: list[Segment] = []
        for run in runs:
            if len(run.ticks) < self.min_ticks_per_segment:
                _logger.debug(
                    "Vehicle %d: dropped run of %d ticks (< %d)",
                    vehicle_id, len(run.ticks), self.min_ticks_per_segment,
                )
                continue
            segment = Segment(
                segment_id=len(segments),
                primary_vehicle_id=vehicle_id,
                ticks=list(run.ticks),
                phase=run.phase,
                source=self.source,
            )
            for tick in segment.ticks:
                tick.segment = segment
            if segments:
                segment.previous = segments[-1]
                segments[-1].next = segment
            segments.append(segment)

        if not segments:
            raise SlicingError(
                f"No slice point found for vehicle {vehicle_id}: "
                f"no run reaches {self.min_ticks_per_segment} ticks"
            )

        segments[-1].next = segments[0]
        segments[0].previous = segments[-1]

        _logger.info(
            "Vehicle %d: %d segments from %d runs",
            vehicle_id, len(segments), len(runs),
        )
        return segments

    @abstractmethod
    def split(self, ticks: list[Tick], vehicle_id: int) -> list[Run]:
        """Partition *ticks* (already flagged for *vehicle_id*) into runs."""

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _check_start(self, ticks: list[Tick]) -> None:
        sections = {id(e.section) for e in ticks[0].entities.values()}
        if len(sections) != 1:
            raise SlicingError("The vehicles do not start in the same path section!")
