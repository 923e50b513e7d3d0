"""Pydantic wire schemas for recorded message and track files."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from fleet_segmenter.telemetry.models import (
    CooperativeBroadcast,
    DriveCommandEcho,
    OdometryFix,
    PoseFix,
    Quaternion,
    Timestamp,
    Vector3,
)
from fleet_segmenter.track.models import LaneGeometry


class _Wire(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


# ---------------------------------------------------------------------------
# Shared building blocks
# ---------------------------------------------------------------------------

class TimeSchema(_Wire):
    seconds: float
    nanoseconds: float = 0.0

    def to_timestamp(self) -> Timestamp:
        return Timestamp.from_parts(self.seconds, self.nanoseconds)


class HeaderSchema(_Wire):
    stamp: TimeSchema
    frame_id: str = ""


class VectorSchema(_Wire):
    x: float
    y: float
    z: float = 0.0

    def to_vector(self) -> Vector3:
        return Vector3(self.x, self.y, self.z)


class QuaternionSchema(_Wire):
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    def to_quaternion(self) -> Quaternion:
        return Quaternion(self.x, self.y, self.z, self.w)


# ---------------------------------------------------------------------------
# Streams
# ---------------------------------------------------------------------------

class CAMSchema(_Wire):
    header: HeaderSchema = Field(alias="msg")
    robot_name: str
    x: float
    y: float
    z: float = 0.0
    drive_direction: int = 1
    theta: float = 0.0
    thetadot: float = 0.0
    v: float
    vdot: float = 0.0
    curv: float = 0.0
    vehicle_length: float = 0.0
    vehicle_width: float = 0.0

    def to_message(self) -> CooperativeBroadcast:
        return CooperativeBroadcast(
            sender=self.robot_name,
            timestamp=self.header.stamp.to_timestamp(),
            x=self.x,
            y=self.y,
            z=self.z,
            heading=self.theta,
            yaw_rate=self.thetadot,
            velocity=self.v,
            acceleration=self.vdot,
            curvature=self.curv,
            drive_direction=self.drive_direction,
            vehicle_length=self.vehicle_length,
            vehicle_width=self.vehicle_width,
        )


class PoseSchema(_Wire):
    position: VectorSchema
    orientation: QuaternionSchema = QuaternionSchema()


class PoseWithCovarianceSchema(_Wire):
    pose: PoseSchema
    covariance: list[float] = []


class TwistSchema(_Wire):
    linear: VectorSchema
    angular: VectorSchema = VectorSchema(x=0.0, y=0.0)


class TwistWithCovarianceSchema(_Wire):
    twist: TwistSchema
    covariance: list[float] = []


class OdometrySchema(_Wire):
    header: HeaderSchema = Field(alias="msg")
    pose: PoseWithCovarianceSchema
    twist: TwistWithCovarianceSchema

    def to_message(self) -> OdometryFix:
        return OdometryFix(
            sender=self.header.frame_id,
            timestamp=self.header.stamp.to_timestamp(),
            position=self.pose.pose.position.to_vector(),
            orientation=self.pose.pose.orientation.to_quaternion(),
            linear_velocity=self.twist.twist.linear.to_vector(),
            angular_velocity=self.twist.twist.angular.to_vector(),
        )


class TransformSchema(_Wire):
    translation: VectorSchema
    rotation: QuaternionSchema = QuaternionSchema()


class ViconPoseSchema(_Wire):
    header: HeaderSchema = Field(alias="msg")
    child_frame_id: str
    transform: TransformSchema

    def to_message(self) -> PoseFix:
        return PoseFix(
            sender=self.child_frame_id,
            timestamp=self.header.stamp.to_timestamp(),
            translation=self.transform.translation.to_vector(),
            rotation=self.transform.rotation.to_quaternion(),
        )


class AckermannDriveSchema(_Wire):
    steering_angle: float
    steering_angle_velocity: float = 0.0
    speed: float = 0.0
    acceleration: float = 0.0
    jerk: float = 0.0


class AckermannDriveStampedSchema(_Wire):
    header: HeaderSchema = Field(alias="msg")
    drive: AckermannDriveSchema

    def to_message(self) -> DriveCommandEcho:
        return DriveCommandEcho(
            sender=self.header.frame_id,
            timestamp=self.header.stamp.to_timestamp(),
            steering_angle=self.drive.steering_angle,
            steering_angle_velocity=self.drive.steering_angle_velocity,
            speed=self.drive.speed,
            acceleration=self.drive.acceleration,
            jerk=self.drive.jerk,
        )


# ---------------------------------------------------------------------------
# Track geometry
# ---------------------------------------------------------------------------

class WaypointSchema(_Wire):
    x: float
    y: float


class LaneSchema(_Wire):
    id: int
    waypoints: list[WaypointSchema]
    length: float = 0.0
    width: float = 1.4

    def to_geometry(self) -> LaneGeometry:
        return LaneGeometry(
            lane_id=self.id,
            points=[(wp.x, wp.y) for wp in self.waypoints],
            width=self.width,
        )


class TrackSchema(_Wire):
    lanes: list[LaneSchema]

    def to_geometry(self) -> list[LaneGeometry]:
        return [lane.to_geometry() for lane in self.lanes]
