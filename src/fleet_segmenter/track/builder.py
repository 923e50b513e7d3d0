"""Reference path assembly from decoded track geometry.

Lanes are concatenated into one closed path with a cumulative distance from the
path start.  Every lane is cut into equally sized sections labelled
entering / middle / leaving and classified by its mean curvature.
"""

from __future__ import annotations

import math

from fleet_segmenter.track.models import (
    CurvatureClass,
    LaneGeometry,
    PathSection,
    ReferencePath,
    SectionPosition,
    Waypoint,
)

# ---------------------------------------------------------------------------
# Geometry primitives
# ---------------------------------------------------------------------------

def _menger_curvature(
    p1: tuple[float, float], p2: tuple[float, float], p3: tuple[float, float]
) -> float:
    """Unsigned Menger curvature κ = 1/R at *p2* given three consecutive points.

    Returns 0.0 if any two points are coincident (degenerate triangle).
    """
    ax, ay = p2[0] - p1[0], p2[1] - p1[1]
    bx, by = p3[0] - p2[0], p3[1] - p2[1]
    cx, cy = p3[0] - p1[0], p3[1] - p1[1]

    denom = math.hypot(ax, ay) * math.hypot(bx, by) * math.hypot(cx, cy)
    if denom < 1e-12:
        return 0.0
    return abs(2.0 * (ax * by - ay * bx) / denom)


def _chunk_bounds(n: int, chunks: int) -> list[tuple[int, int]]:
    """Split ``range(n)`` into *chunks* contiguous, non-empty ``(start, end)`` ranges."""
    bounds = [round(j * n / chunks) for j in range(chunks + 1)]
    return [(s, e) for s, e in zip(bounds, bounds[1:]) if e > s]


def _same_point(a: tuple[float, float], b: tuple[float, float]) -> bool:
    return math.hypot(a[0] - b[0], a[1] - b[1]) < 1e-9


def _drop_repeated_points(lanes: list[LaneGeometry]) -> list[LaneGeometry]:
    """Remove points coinciding with their predecessor, across lane junctions.

    A closing point equal to the path start is dropped as well; the closing
    edge is implicit.
    """
    result: list[LaneGeometry] = []
    prev: tuple[float, float] | None = None
    for lane in lanes:
        kept: list[tuple[float, float]] = []
        for point in lane.points:
            if prev is not None and _same_point(point, prev):
                continue
            kept.append(point)
            prev = point
        result.append(LaneGeometry(lane_id=lane.lane_id, points=kept, width=lane.width))

    filled = [lane for lane in result if lane.points]
    if sum(len(lane.points) for lane in filled) > 2:
        last = filled[-1].points
        if _same_point(last[-1], filled[0].points[0]):
            last.pop()
    return result


# ---------------------------------------------------------------------------
# Path builder
# ---------------------------------------------------------------------------

class PathBuilder:
    """Assemble a :class:`ReferencePath` from per-lane geometry.

    Args:
        sections_per_lane: Number of sections each lane is cut into.  With the
            default of 3 the chunks are labelled entering / middle / leaving.
        straight_curvature: Lanes whose mean |κ| (1/m) stays below this value
            are classified as straights.
        tight_curvature: Curved lanes whose mean |κ| exceeds this value are
            tight curves; the remaining curved lanes are wide curves.
    """

    def __init__(
        self,
        sections_per_lane: int = 3,
        straight_curvature: float = 0.1,
        tight_curvature: float = 1.0,
    ) -> None:
        if sections_per_lane < 1:
            raise ValueError("sections_per_lane must be >= 1")
        self.sections_per_lane = sections_per_lane
        self.straight_curvature = straight_curvature
        self.tight_curvature = tight_curvature

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build(self, lanes: list[LaneGeometry]) -> ReferencePath:
        """Concatenate *lanes* in order and label their sections.

        Raises:
            ValueError: If the lanes hold fewer than two distinct waypoints in total.
        """
        lanes = _drop_repeated_points(lanes)
        total = sum(len(lane.points) for lane in lanes)
        if total < 2:
            raise ValueError("There have to be at least two waypoints provided.")

        sections: list[PathSection] = []
        waypoints: list[Waypoint] = []
        distance = 0.0
        prev: tuple[float, float] | None = None

        for lane in lanes:
            if not lane.points:
                continue
            curvature = self.classify(lane.points)
            offset = len(waypoints)
            lane_sections = self._cut_sections(lane, curvature, offset, len(sections))
            sections.extend(lane_sections)

            for sec in lane_sections:
                for i in range(sec.start_index, sec.end_index):
                    x, y = lane.points[i - offset]
                    if prev is not None:
                        distance += math.hypot(x - prev[0], y - prev[1])
                    waypoints.append(
                        Waypoint(index=i, x=x, y=y, distance_to_start=distance, section=sec)
                    )
                    prev = (x, y)

        for i, sec in enumerate(sections):
            sec.previous = sections[i - 1]
            sec.next = sections[(i + 1) % len(sections)]

        width = min(lane.width for lane in lanes if lane.points)
        return ReferencePath(waypoints=waypoints, sections=sections, width=width)

    def classify(self, points: list[tuple[float, float]]) -> CurvatureClass:
        """Return the :class:`CurvatureClass` of an open polyline."""
        if len(points) < 3:
            return CurvatureClass.STRAIGHT
        kappas = [
            _menger_curvature(points[i - 1], points[i], points[i + 1])
            for i in range(1, len(points) - 1)
        ]
        mean_k = sum(kappas) / len(kappas)
        if mean_k < self.straight_curvature:
            return CurvatureClass.STRAIGHT
        if mean_k > self.tight_curvature:
            return CurvatureClass.TIGHT_CURVE
        return CurvatureClass.WIDE_CURVE

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _cut_sections(
        self,
        lane: LaneGeometry,
        curvature: CurvatureClass,
        offset: int,
        first_id: int,
    ) -> list[PathSection]:
        chunks = _chunk_bounds(len(lane.points), self.sections_per_lane)
        result: list[PathSection] = []
        for j, (start, end) in enumerate(chunks):
            if len(chunks) == 1:
                position = SectionPosition.MIDDLE
            elif j == 0:
                position = SectionPosition.ENTERING
            elif j == len(chunks) - 1:
                position = SectionPosition.LEAVING
            else:
                position = SectionPosition.MIDDLE
            result.append(PathSection(
                section_id=first_id + j,
                lane_id=lane.lane_id,
                curvature=curvature,
                position=position,
                start_index=offset + start,
                end_index=offset + end,
            ))
        return result


def build_reference_path(lanes: list[LaneGeometry], sections_per_lane: int = 3) -> ReferencePath:
    """Shortcut for ``PathBuilder(sections_per_lane).build(lanes)``."""
    return PathBuilder(sections_per_lane=sections_per_lane).build(lanes)
