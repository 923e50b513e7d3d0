"""Fused world-state data structures."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from fleet_segmenter.telemetry.models import MessageKind, Quaternion, Timestamp, Vector3
from fleet_segmenter.track.models import PathSection

if TYPE_CHECKING:
    from fleet_segmenter.slicing.models import Segment


@dataclass(frozen=True)
class EntityState:
    """One vehicle's full state at one :class:`Tick`.

    Every optional field stays ``None`` until the first message of the kind
    that owns it arrives.  States are never mutated; carrying a state into a
    later tick produces a copy via :meth:`retarget`.
    """

    vehicle_id: int

    tick_time: Timestamp
    """Timestamp of the tick this state belongs to."""

    source: MessageKind | None = None
    """Kind of the message that last updated this vehicle."""

    # -- local fusion (pose fixes / odometry) -----------------------------
    distance_along_path: float | None = None
    """Cumulative path distance of the nearest waypoint, metres."""

    lateral_offset: float | None = None
    """Signed offset from the centerline, metres (positive = right)."""

    section: PathSection | None = None
    """Path section of the nearest waypoint."""

    velocity: float | None = None
    """Speed from odometry, m/s."""

    acceleration: float | None = None
    """Windowed acceleration, m/s².  Only set by the acceleration estimator."""

    position: Vector3 | None = None
    rotation: Quaternion | None = None

    steering_angle: float | None = None
    """Commanded steering angle in degrees."""

    # -- cooperative broadcast -------------------------------------------
    cam_distance_along_path: float | None = None
    cam_lateral_offset: float | None = None
    cam_section: PathSection | None = None
    cam_velocity: float | None = None
    cam_acceleration: float | None = None
    cam_heading: float | None = None

    is_primary: bool = False
    """Whether this vehicle is the subject of the current slicing pass."""

    def retarget(self, tick_time: Timestamp) -> EntityState:
        """Return a copy of this state belonging to the tick at *tick_time*."""
        return dataclasses.replace(self, tick_time=tick_time)

    def with_acceleration(self, acceleration: float | None) -> EntityState:
        return dataclasses.replace(self, acceleration=acceleration)

    def as_primary(self, primary: bool = True) -> EntityState:
        return dataclasses.replace(self, is_primary=primary)


@dataclass(eq=False)
class Tick:
    """A fused world snapshot: one :class:`EntityState` per known vehicle.

    ``entities`` is keyed and ordered by vehicle id.  ``segment`` is assigned
    by the slicer once the tick has been placed into a
    :class:`~fleet_segmenter.slicing.models.Segment`.
    """

    time: Timestamp
    entities: dict[int, EntityState] = field(default_factory=dict)
    segment: Segment | None = field(default=None, repr=False)

    def __len__(self) -> int:
        return len(self.entities)

    def __contains__(self, vehicle_id: int) -> bool:
        return vehicle_id in self.entities

    def __getitem__(self, vehicle_id: int) -> EntityState:
        return self.entities[vehicle_id]

    def get(self, vehicle_id: int) -> EntityState | None:
        return self.entities.get(vehicle_id)

    @property
    def vehicle_ids(self) -> list[int]:
        return list(self.entities)

    @property
    def primary(self) -> EntityState | None:
        """The entity flagged as primary, if any."""
        return next((e for e in self.entities.values() if e.is_primary), None)

    def replace_entities(self, entities: dict[int, EntityState]) -> Tick:
        """Return a new tick at the same time holding *entities* (no segment link)."""
        return Tick(time=self.time, entities=dict(sorted(entities.items())))

    def with_primary(self, vehicle_id: int) -> Tick:
        """Return an isolated copy where only *vehicle_id* is flagged primary.

        Raises:
            KeyError: If *vehicle_id* is not part of this tick.
        """
        if vehicle_id not in self.entities:
            raise KeyError(vehicle_id)
        return self.replace_entities({
            vid: state.as_primary(vid == vehicle_id)
            for vid, state in self.entities.items()
        })
