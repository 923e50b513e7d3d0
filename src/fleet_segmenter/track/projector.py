"""Track-relative projection of planar positions onto the reference path.

The nearest waypoint is found with a static 2-D k-d tree; the lateral offset is
measured against the path edge between that waypoint and whichever of its two
path neighbours is closer to the query point.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
from scipy.spatial import cKDTree

from fleet_segmenter.track.models import PathSection, ReferencePath, Waypoint


@dataclass(frozen=True)
class Projection:
    """Result of projecting one position onto the reference path."""

    waypoint: Waypoint
    """Nearest waypoint by Euclidean distance."""

    lateral_offset: float
    """Signed distance to the path in metres.  Positive = right of the driving
    direction, negative = left."""

    foot: tuple[float, float]
    """Closest point on the edge between the nearest and second nearest waypoint."""

    @property
    def distance_along_path(self) -> float:
        """Cumulative distance of the nearest waypoint (not of :attr:`foot`)."""
        return self.waypoint.distance_to_start

    @property
    def section(self) -> PathSection | None:
        return self.waypoint.section


def nearest_point_on_interval(
    a: tuple[float, float],
    b: tuple[float, float],
    p: tuple[float, float],
) -> tuple[float, float]:
    """Return the point of the closed interval ``[a, b]`` closest to *p*.

    The projection parameter is clamped to [0, 1], so a foot of the
    perpendicular outside the interval snaps to the nearer bound.
    """
    abx, aby = b[0] - a[0], b[1] - a[1]
    ab_sq = abx * abx + aby * aby
    if ab_sq < 1e-18:
        return a
    t = ((p[0] - a[0]) * abx + (p[1] - a[1]) * aby) / ab_sq
    t = min(1.0, max(0.0, t))
    return a[0] + t * abx, a[1] + t * aby


class GeometryProjector:
    """Project positions onto a :class:`ReferencePath`.

    The k-d tree over all waypoints is built once in the constructor; every
    :meth:`project` call is then a single O(log n) nearest-neighbour lookup
    plus constant work.

    Args:
        path: The reference path.  Must hold at least two waypoints.

    Raises:
        ValueError: If *path* has fewer than two waypoints.
    """

    def __init__(self, path: ReferencePath) -> None:
        if len(path.waypoints) < 2:
            raise ValueError("There have to be at least two waypoints provided.")
        self.path = path
        self._points = np.array([(wp.x, wp.y) for wp in path.waypoints], dtype=np.float64)
        self._tree = cKDTree(self._points)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def nearest_index(self, x: float, y: float) -> int:
        """Index of the waypoint closest to ``(x, y)``."""
        _, idx = self._tree.query((x, y), k=1)
        return int(idx)

    def project(self, x: float, y: float) -> Projection:
        """Project ``(x, y)`` onto the path."""
        waypoints = self.path.waypoints
        n = len(waypoints)
        idx = self.nearest_index(x, y)
        nearest = waypoints[idx]

        # Neighbours wrap around at both path ends (closed loop).
        prev_wp = waypoints[self._distinct_neighbour(idx, -1)]
        next_wp = waypoints[self._distinct_neighbour(idx, 1)]
        d_prev = math.hypot(prev_wp.x - x, prev_wp.y - y)
        d_next = math.hypot(next_wp.x - x, next_wp.y - y)
        second, forward = (prev_wp, False) if d_prev <= d_next else (next_wp, True)

        a = (nearest.x, nearest.y)
        b = (second.x, second.y)
        foot = nearest_point_on_interval(a, b, (x, y))
        distance = math.hypot(x - foot[0], y - foot[1])

        # Driving direction runs from lower to higher index.
        dx, dy = (b[0] - a[0], b[1] - a[1]) if forward else (a[0] - b[0], a[1] - b[1])
        cross = dx * (y - a[1]) - dy * (x - a[0])
        lateral = -distance if cross > 0 else distance

        return Projection(waypoint=nearest, lateral_offset=lateral, foot=foot)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _distinct_neighbour(self, index: int, step: int) -> int:
        """First waypoint from *index* in direction *step* at a different position.

        Repeated coordinates would otherwise yield a zero-length edge.
        """
        n = len(self._points)
        origin = self._points[index]
        j = (index + step) % n
        for _ in range(n - 1):
            if not np.array_equal(self._points[j], origin):
                return j
            j = (j + step) % n
        return (index + step) % n
