"""Decoded telemetry message models.

One class per recorded stream.  Instances are immutable and carry the raw
sender name; mapping that name to a vehicle id is the job of
:class:`~fleet_segmenter.telemetry.identity.SenderRegistry`.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Union

_NANOS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True, order=True)
class Timestamp:
    """A ROS-style stamp compared by seconds, then nanoseconds."""

    seconds: int
    nanoseconds: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.nanoseconds < _NANOS_PER_SECOND:
            raise ValueError(f"nanoseconds out of range: {self.nanoseconds}")

    @classmethod
    def from_nanos(cls, total: int) -> Timestamp:
        return cls(*divmod(int(total), _NANOS_PER_SECOND))

    @classmethod
    def from_parts(cls, seconds: float, nanoseconds: float = 0.0) -> Timestamp:
        """Build a normalised stamp from possibly fractional or overflowing parts."""
        whole = math.floor(seconds)
        frac_nanos = round((seconds - whole) * _NANOS_PER_SECOND)
        return cls.from_nanos(whole * _NANOS_PER_SECOND + frac_nanos + round(nanoseconds))

    @classmethod
    def from_seconds(cls, value: float) -> Timestamp:
        return cls.from_parts(value)

    @property
    def total_nanos(self) -> int:
        return self.seconds * _NANOS_PER_SECOND + self.nanoseconds

    def to_seconds(self) -> float:
        return self.total_nanos / _NANOS_PER_SECOND

    def to_millis(self) -> float:
        return self.total_nanos / 1_000_000

    def __sub__(self, other: Timestamp) -> float:
        """Difference in seconds."""
        return (self.total_nanos - other.total_nanos) / _NANOS_PER_SECOND

    def __str__(self) -> str:
        return f"{self.seconds}.{self.nanoseconds:09d}s"


@dataclass(frozen=True)
class Vector3:
    x: float
    y: float
    z: float = 0.0

    def norm(self) -> float:
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)


@dataclass(frozen=True)
class Quaternion:
    x: float
    y: float
    z: float
    w: float

    def yaw(self) -> float:
        """Rotation about the z axis in radians."""
        siny = 2.0 * (self.w * self.z + self.x * self.y)
        cosy = 1.0 - 2.0 * (self.y * self.y + self.z * self.z)
        return math.atan2(siny, cosy)


class MessageKind(Enum):
    """Which stream a message (and hence an entity update) came from."""

    POSE_FIX = "vicon_pose"
    ODOMETRY = "odom"
    COOPERATIVE_BROADCAST = "cam"
    DRIVE_COMMAND = "ackermann_cmd"


# ---------------------------------------------------------------------------
# Message kinds
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PoseFix:
    """Absolute pose from the motion-capture system."""

    kind: ClassVar[MessageKind] = MessageKind.POSE_FIX

    sender: str
    """``child_frame_id`` of the tracked body."""

    timestamp: Timestamp
    translation: Vector3
    rotation: Quaternion


@dataclass(frozen=True)
class OdometryFix:
    """On-board odometry estimate."""

    kind: ClassVar[MessageKind] = MessageKind.ODOMETRY

    sender: str
    timestamp: Timestamp
    position: Vector3
    orientation: Quaternion
    linear_velocity: Vector3
    angular_velocity: Vector3

    @property
    def speed(self) -> float:
        """Euclidean norm of the linear velocity, m/s."""
        return self.linear_velocity.norm()


@dataclass(frozen=True)
class CooperativeBroadcast:
    """Cooperative awareness message (CAM) a vehicle broadcasts about itself."""

    kind: ClassVar[MessageKind] = MessageKind.COOPERATIVE_BROADCAST

    sender: str
    """``robot_name`` advertised in the message."""

    timestamp: Timestamp
    x: float
    y: float
    z: float
    heading: float
    """``theta``, radians."""

    yaw_rate: float
    """``thetadot``, rad/s."""

    velocity: float
    """``v``, m/s."""

    acceleration: float
    """``vdot``, m/s²."""

    curvature: float = 0.0
    drive_direction: int = 1
    vehicle_length: float = 0.0
    vehicle_width: float = 0.0


@dataclass(frozen=True)
class DriveCommandEcho:
    """Echo of the locally commanded Ackermann drive."""

    kind: ClassVar[MessageKind] = MessageKind.DRIVE_COMMAND

    sender: str
    timestamp: Timestamp
    steering_angle: float
    """Commanded steering angle, radians."""

    steering_angle_velocity: float = 0.0
    speed: float = 0.0
    acceleration: float = 0.0
    jerk: float = 0.0


RawMessage = Union[PoseFix, OdometryFix, CooperativeBroadcast, DriveCommandEcho]
