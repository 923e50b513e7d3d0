"""Reference path data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class CurvatureClass(Enum):
    """Coarse shape of one lane of the reference path."""

    STRAIGHT = "straight"
    WIDE_CURVE = "wide_curve"
    TIGHT_CURVE = "tight_curve"


class SectionPosition(Enum):
    """Where a section sits inside its lane."""

    ENTERING = "entering"
    MIDDLE = "middle"
    LEAVING = "leaving"


@dataclass(eq=False)
class PathSection:
    """A labelled sub-segment of the reference path.

    Sections partition the waypoint sequence without copying it: a section only
    records the half-open index range ``[start_index, end_index)`` it covers.
    ``previous`` / ``next`` form a ring over all sections of the path.
    """

    section_id: int
    """Sequential section number (0-based, in path order)."""

    lane_id: int
    """Identifier of the lane this section was cut from."""

    curvature: CurvatureClass

    position: SectionPosition

    start_index: int
    """Index of the first waypoint in this section."""

    end_index: int
    """One past the index of the last waypoint in this section."""

    previous: PathSection | None = field(default=None, repr=False)
    next: PathSection | None = field(default=None, repr=False)

    def __contains__(self, index: int) -> bool:
        return self.start_index <= index < self.end_index

    def __len__(self) -> int:
        return self.end_index - self.start_index


@dataclass(frozen=True)
class Waypoint:
    """A single point on the reference centerline.

    Coordinates are in metres in the motion-capture frame.
    """

    index: int
    """Position of this waypoint in the path sequence."""

    x: float
    """X coordinate."""

    y: float
    """Y coordinate."""

    distance_to_start: float
    """Cumulative path length from the first waypoint, metres."""

    section: PathSection | None = field(default=None, compare=False, repr=False)
    """The section this waypoint belongs to (``None`` for unlabelled paths)."""


@dataclass
class ReferencePath:
    """The discretised closed-loop centerline the vehicles drive on.

    Built once at startup (see :func:`~fleet_segmenter.track.builder.build_reference_path`)
    and treated as immutable afterwards.
    """

    waypoints: list[Waypoint]
    """Ordered waypoints; ``distance_to_start`` is non-decreasing."""

    sections: list[PathSection] = field(default_factory=list)
    """Labelled sections covering the waypoints, in path order."""

    width: float = 1.4
    """Drivable width in metres."""

    def __len__(self) -> int:
        return len(self.waypoints)

    @property
    def length(self) -> float:
        """Total path length including the closing edge back to the start."""
        if len(self.waypoints) < 2:
            return 0.0
        first, last = self.waypoints[0], self.waypoints[-1]
        closing = ((first.x - last.x) ** 2 + (first.y - last.y) ** 2) ** 0.5
        return last.distance_to_start + closing

    def section_of(self, index: int) -> PathSection | None:
        """Return the section containing waypoint *index*, if any."""
        return self.waypoints[index].section


@dataclass
class LaneGeometry:
    """Decoded geometry of one lane of the track file, before path assembly."""

    lane_id: int
    points: list[tuple[float, float]]
    """Ordered ``(x, y)`` centerline points of the lane."""

    width: float = 1.4
