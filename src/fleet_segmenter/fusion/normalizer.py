"""MessageNormalizer: turns one raw message into the sender's next EntityState."""

from __future__ import annotations

import dataclasses
import math

from fleet_segmenter.fusion.models import EntityState
from fleet_segmenter.telemetry.identity import SenderRegistry
from fleet_segmenter.telemetry.models import (
    CooperativeBroadcast,
    DriveCommandEcho,
    MessageKind,
    OdometryFix,
    PoseFix,
    RawMessage,
    Timestamp,
)
from fleet_segmenter.track.projector import GeometryProjector

# EntityState fields each message kind is allowed to change.  Everything else
# is carried over from the previous state unchanged.
OWNED_FIELDS: dict[MessageKind, frozenset[str]] = {
    MessageKind.POSE_FIX: frozenset({
        "distance_along_path", "lateral_offset", "section",
        "position", "rotation", "acceleration",
    }),
    MessageKind.ODOMETRY: frozenset({"velocity", "acceleration"}),
    MessageKind.COOPERATIVE_BROADCAST: frozenset({
        "cam_distance_along_path", "cam_lateral_offset", "cam_section",
        "cam_velocity", "cam_acceleration", "cam_heading",
    }),
    MessageKind.DRIVE_COMMAND: frozenset({"steering_angle"}),
}

# Bookkeeping fields rewritten on every update regardless of kind.
BOOKKEEPING_FIELDS = frozenset({"tick_time", "source", "is_primary"})


class MessageNormalizer:
    """Derive per-vehicle state updates from raw messages.

    Position-bearing messages (pose fixes and cooperative broadcasts) are
    projected onto the reference path.  Local acceleration is never derived
    here: pose and odometry updates clear it so the windowed estimator owns
    the field exclusively.

    Args:
        projector: Projector over the reference path.
        registry: Sender name → vehicle id mapping.
    """

    def __init__(self, projector: GeometryProjector, registry: SenderRegistry) -> None:
        self.projector = projector
        self.registry = registry

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def vehicle_id(self, message: RawMessage) -> int:
        """Vehicle id of the sender of *message* (raises ``UnknownSenderError``)."""
        return self.registry.vehicle_of(message)

    def normalize(
        self,
        message: RawMessage,
        previous: EntityState | None,
        tick_time: Timestamp,
        vehicle_id: int | None = None,
    ) -> EntityState:
        """Return the sender's state at *tick_time* after applying *message*.

        Args:
            message: The triggering message.
            previous: The sender's latest state, or ``None`` for a vehicle seen
                for the first time (all fields then start unset).
            tick_time: Timestamp of the destination tick.
            vehicle_id: Pre-resolved sender id; resolved from *message* if omitted.
        """
        if vehicle_id is None:
            vehicle_id = self.vehicle_id(message)
        base = previous if previous is not None else EntityState(vehicle_id, tick_time)

        if isinstance(message, PoseFix):
            updates = self._from_pose(message)
        elif isinstance(message, OdometryFix):
            updates = self._from_odometry(message)
        elif isinstance(message, CooperativeBroadcast):
            updates = self._from_broadcast(message)
        elif isinstance(message, DriveCommandEcho):
            updates = self._from_drive_command(message)
        else:
            raise TypeError(f"Unsupported message type: {type(message).__name__}")

        return dataclasses.replace(
            base,
            vehicle_id=vehicle_id,
            tick_time=tick_time,
            source=message.kind,
            is_primary=False,
            **updates,
        )

    # ------------------------------------------------------------------
    # Per-kind updates
    # ------------------------------------------------------------------

    def _from_pose(self, message: PoseFix) -> dict:
        pos = message.translation
        proj = self.projector.project(pos.x, pos.y)
        return {
            "distance_along_path": proj.distance_along_path,
            "lateral_offset": proj.lateral_offset,
            "section": proj.section,
            "position": pos,
            "rotation": message.rotation,
            "acceleration": None,
        }

    def _from_odometry(self, message: OdometryFix) -> dict:
        return {"velocity": message.speed, "acceleration": None}

    def _from_broadcast(self, message: CooperativeBroadcast) -> dict:
        proj = self.projector.project(message.x, message.y)
        return {
            "cam_distance_along_path": proj.distance_along_path,
            "cam_lateral_offset": proj.lateral_offset,
            "cam_section": proj.section,
            "cam_velocity": message.velocity,
            "cam_acceleration": message.acceleration,
            "cam_heading": message.heading,
        }

    def _from_drive_command(self, message: DriveCommandEcho) -> dict:
        return {"steering_angle": math.degrees(message.steering_angle)}
