"""Tests for per-message entity state updates."""

from __future__ import annotations

import dataclasses
import math

import pytest

from fleet_segmenter.fusion.models import EntityState
from fleet_segmenter.fusion.normalizer import BOOKKEEPING_FIELDS, OWNED_FIELDS, MessageNormalizer
from fleet_segmenter.telemetry.identity import SenderRegistry, UnknownSenderError
from fleet_segmenter.telemetry.models import (
    CooperativeBroadcast,
    DriveCommandEcho,
    MessageKind,
    OdometryFix,
    PoseFix,
    Quaternion,
    Timestamp,
    Vector3,
)
from fleet_segmenter.track.builder import build_reference_path
from fleet_segmenter.track.models import LaneGeometry
from fleet_segmenter.track.projector import GeometryProjector

IDENTITY = Quaternion(0.0, 0.0, 0.0, 1.0)

# ---------------------------------------------------------------------------
# Test-data helpers
# ---------------------------------------------------------------------------

def make_normalizer() -> MessageNormalizer:
    path = build_reference_path([LaneGeometry(0, [(float(i), 0.0) for i in range(21)])])
    return MessageNormalizer(GeometryProjector(path), SenderRegistry({"robot1": 1, "robot2": 2}))


def pose(x: float, y: float = 0.0, t: float = 0.0, sender: str = "robot1") -> PoseFix:
    return PoseFix(sender, Timestamp.from_seconds(t), Vector3(x, y), IDENTITY)


def odom(speed: float, t: float = 0.0, sender: str = "robot1") -> OdometryFix:
    return OdometryFix(
        sender, Timestamp.from_seconds(t), Vector3(0.0, 0.0), IDENTITY,
        Vector3(speed, 0.0), Vector3(0.0, 0.0),
    )


def cam(x: float, v: float = 1.0, t: float = 0.0, sender: str = "robot1") -> CooperativeBroadcast:
    return CooperativeBroadcast(
        sender=sender, timestamp=Timestamp.from_seconds(t), x=x, y=0.0, z=0.0,
        heading=0.3, yaw_rate=0.0, velocity=v, acceleration=0.4,
    )


def drive(angle_rad: float, t: float = 0.0, sender: str = "robot1") -> DriveCommandEcho:
    return DriveCommandEcho(sender, Timestamp.from_seconds(t), angle_rad)


def make_full_state(normalizer: MessageNormalizer) -> EntityState:
    """A state with every field set, built from one message of each kind."""
    state = None
    for i, msg in enumerate([pose(4.0, 0.2), odom(1.5), cam(7.0), drive(0.1)]):
        state = normalizer.normalize(msg, state, Timestamp(i))
    return dataclasses.replace(state, acceleration=0.25, is_primary=True)


MESSAGES = {
    MessageKind.POSE_FIX: lambda: pose(12.0, -0.3, t=10.0),
    MessageKind.ODOMETRY: lambda: odom(2.5, t=10.0),
    MessageKind.COOPERATIVE_BROADCAST: lambda: cam(15.0, v=3.0, t=10.0),
    MessageKind.DRIVE_COMMAND: lambda: drive(-0.2, t=10.0),
}


# ---------------------------------------------------------------------------
# Field ownership
# ---------------------------------------------------------------------------

class TestFieldCarry:
    @pytest.mark.parametrize("kind", list(MessageKind))
    def test_only_owned_fields_change(self, kind):
        """Fields outside the message kind's ownership are carried unchanged."""
        normalizer = make_normalizer()
        previous = make_full_state(normalizer)
        updated = normalizer.normalize(MESSAGES[kind](), previous, Timestamp(10))

        allowed = OWNED_FIELDS[kind] | BOOKKEEPING_FIELDS
        for f in dataclasses.fields(EntityState):
            if f.name not in allowed:
                assert getattr(updated, f.name) == getattr(previous, f.name), f.name

    def test_previous_state_is_not_mutated(self):
        normalizer = make_normalizer()
        previous = make_full_state(normalizer)
        before = {f.name: getattr(previous, f.name) for f in dataclasses.fields(EntityState)}
        normalizer.normalize(pose(1.0), previous, Timestamp(11))
        for name, value in before.items():
            assert getattr(previous, name) is value, name

    def test_bookkeeping_is_rewritten(self):
        normalizer = make_normalizer()
        previous = make_full_state(normalizer)
        updated = normalizer.normalize(odom(1.0), previous, Timestamp(12))

        assert updated.tick_time == Timestamp(12)
        assert updated.source is MessageKind.ODOMETRY
        assert updated.is_primary is False


# ---------------------------------------------------------------------------
# Per-kind values
# ---------------------------------------------------------------------------

class TestPerKindUpdates:
    def test_first_state_starts_unset(self):
        state = make_normalizer().normalize(odom(2.0), None, Timestamp(1))

        assert state.vehicle_id == 1
        assert state.velocity == pytest.approx(2.0)
        assert state.distance_along_path is None
        assert state.section is None
        assert state.acceleration is None

    def test_pose_is_projected_onto_path(self):
        state = make_normalizer().normalize(pose(6.1, -0.4), None, Timestamp(1))

        assert state.distance_along_path == pytest.approx(6.0)
        assert state.lateral_offset == pytest.approx(0.4)
        assert state.section is not None
        assert state.position == Vector3(6.1, -0.4)

    def test_pose_and_odometry_clear_acceleration(self):
        normalizer = make_normalizer()
        previous = make_full_state(normalizer)
        assert normalizer.normalize(pose(3.0), previous, Timestamp(20)).acceleration is None
        assert normalizer.normalize(odom(3.0), previous, Timestamp(20)).acceleration is None

    def test_broadcast_fills_cam_fields_only(self):
        state = make_normalizer().normalize(cam(9.2, v=1.7), None, Timestamp(1))

        assert state.cam_distance_along_path == pytest.approx(9.0)
        assert state.cam_velocity == pytest.approx(1.7)
        assert state.cam_acceleration == pytest.approx(0.4)
        assert state.cam_heading == pytest.approx(0.3)
        assert state.distance_along_path is None
        assert state.velocity is None

    def test_steering_angle_is_converted_to_degrees(self):
        state = make_normalizer().normalize(drive(math.pi / 2), None, Timestamp(1))
        assert state.steering_angle == pytest.approx(90.0)

    def test_explicit_vehicle_id_skips_lookup(self):
        state = make_normalizer().normalize(odom(1.0, sender="ghost"), None, Timestamp(1), vehicle_id=5)
        assert state.vehicle_id == 5


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class TestErrors:
    def test_unknown_sender_raises(self):
        with pytest.raises(UnknownSenderError):
            make_normalizer().normalize(odom(1.0, sender="robot9"), None, Timestamp(1))

    def test_unsupported_message_type_raises(self):
        with pytest.raises(TypeError, match="Unsupported message type"):
            make_normalizer().normalize(object(), None, Timestamp(1), vehicle_id=1)
