"""Tests for folding messages into ticks."""

from __future__ import annotations

import pytest

from fleet_segmenter.fusion.fuser import FusionState, TickFuser
from fleet_segmenter.fusion.normalizer import MessageNormalizer
from fleet_segmenter.telemetry.identity import SenderRegistry, UnknownSenderError
from fleet_segmenter.telemetry.models import (
    CooperativeBroadcast,
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

def make_fuser() -> TickFuser:
    path = build_reference_path([LaneGeometry(0, [(float(i), 0.0) for i in range(21)])])
    registry = SenderRegistry({"robot1": 1, "robot2": 2, "robot3": 3})
    return TickFuser(MessageNormalizer(GeometryProjector(path), registry))


def pose(sender: str, t: float, x: float) -> PoseFix:
    return PoseFix(sender, Timestamp.from_seconds(t), Vector3(x, 0.0), IDENTITY)


def odom(sender: str, t: float, speed: float) -> OdometryFix:
    return OdometryFix(
        sender, Timestamp.from_seconds(t), Vector3(0.0, 0.0), IDENTITY,
        Vector3(speed, 0.0), Vector3(0.0, 0.0),
    )


def cam(sender: str, t: float, x: float) -> CooperativeBroadcast:
    return CooperativeBroadcast(
        sender=sender, timestamp=Timestamp.from_seconds(t), x=x, y=0.0, z=0.0,
        heading=0.0, yaw_rate=0.0, velocity=1.0, acceleration=0.0,
    )


# ---------------------------------------------------------------------------
# fuse()
# ---------------------------------------------------------------------------

class TestFuse:
    def test_one_tick_per_message_in_input_order(self):
        msgs = [pose("robot2", 0.1, 1.0), odom("robot1", 0.2, 1.0), cam("robot3", 0.3, 2.0)]
        ticks = make_fuser().fuse(msgs)

        assert len(ticks) == 3
        assert [t.time for t in ticks] == [m.timestamp for m in msgs]

    def test_tick_holds_every_vehicle_seen_so_far(self):
        msgs = [pose("robot2", 0.1, 1.0), odom("robot1", 0.2, 1.0), pose("robot2", 0.3, 2.0)]
        ticks = make_fuser().fuse(msgs)

        assert [t.vehicle_ids for t in ticks] == [[2], [1, 2], [1, 2]]

    def test_entities_are_ordered_by_vehicle_id(self):
        msgs = [pose("robot3", 0.1, 1.0), pose("robot1", 0.2, 1.0), pose("robot2", 0.3, 1.0)]
        assert make_fuser().fuse(msgs)[-1].vehicle_ids == [1, 2, 3]

    def test_non_senders_are_carried_with_new_tick_time(self):
        msgs = [pose("robot1", 0.1, 4.0), odom("robot2", 0.5, 1.0)]
        first, second = make_fuser().fuse(msgs)

        carried = second[1]
        assert carried.tick_time == second.time
        assert carried.distance_along_path == first[1].distance_along_path
        assert carried.section is first[1].section
        assert first[1].tick_time == first.time

    def test_sender_state_accumulates_across_messages(self):
        msgs = [pose("robot1", 0.1, 4.0), odom("robot1", 0.2, 2.0)]
        tick = make_fuser().fuse(msgs)[-1]

        assert tick[1].distance_along_path == pytest.approx(4.0)
        assert tick[1].velocity == pytest.approx(2.0)

    def test_acceleration_is_left_unset(self):
        msgs = [odom("robot1", 0.1 * i, 0.5 * i) for i in range(1, 6)]
        assert all(t[1].acceleration is None for t in make_fuser().fuse(msgs))

    def test_no_primary_is_flagged(self):
        ticks = make_fuser().fuse([pose("robot1", 0.1, 1.0)])
        assert ticks[0].primary is None

    def test_empty_input_raises(self):
        with pytest.raises(ValueError, match="At least one message"):
            make_fuser().fuse([])

    def test_unknown_sender_raises(self):
        with pytest.raises(UnknownSenderError):
            make_fuser().fuse([pose("robot7", 0.1, 1.0)])

    def test_initial_state_seeds_the_fold(self):
        fuser = make_fuser()
        state, _ = fuser.step(FusionState(), pose("robot3", 0.0, 1.0))
        ticks = fuser.fuse([pose("robot1", 0.1, 1.0)], initial=state)
        assert ticks[0].vehicle_ids == [1, 3]

    def test_logs_summary(self, caplog):
        with caplog.at_level("INFO", logger="fleet_segmenter.fusion.fuser"):
            make_fuser().fuse([pose("robot1", 0.1, 1.0), pose("robot2", 0.2, 1.0)])
        assert "Fused 2 ticks for 2 vehicles" in caplog.text


# ---------------------------------------------------------------------------
# step() / FusionState
# ---------------------------------------------------------------------------

class TestStep:
    def test_step_leaves_previous_state_untouched(self):
        fuser = make_fuser()
        empty = FusionState()
        s1, _ = fuser.step(empty, pose("robot1", 0.1, 1.0))
        s2, _ = fuser.step(s1, pose("robot2", 0.2, 1.0))

        assert empty.vehicle_ids == []
        assert s1.vehicle_ids == [1]
        assert s2.vehicle_ids == [1, 2]

    def test_accumulator_is_read_only(self):
        state, _ = make_fuser().step(FusionState(), pose("robot1", 0.1, 1.0))
        with pytest.raises(TypeError):
            state.latest[2] = state.latest[1]  # type: ignore[index]

    def test_earlier_ticks_are_not_changed_by_later_messages(self):
        fuser = make_fuser()
        state, first = fuser.step(FusionState(), pose("robot1", 0.1, 1.0))
        fuser.step(state, pose("robot1", 0.2, 8.0))
        assert first[1].distance_along_path == pytest.approx(1.0)
