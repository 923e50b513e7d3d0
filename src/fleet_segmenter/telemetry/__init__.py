"""Telemetry message models, wire decoding and sender identification.

Public API
----------
Timestamp           - ordered (seconds, nanoseconds) stamp
PoseFix, OdometryFix, CooperativeBroadcast, DriveCommandEcho - message kinds
SenderRegistry      - explicit frame name → vehicle id mapping
UnknownSenderError  - raised for unregistered sender names
MessageImporter     - reads recorded JSON stream files
MessageImportError  - raised on unreadable recordings
"""

from fleet_segmenter.telemetry.identity import SenderRegistry, UnknownSenderError
from fleet_segmenter.telemetry.importer import MessageImporter, MessageImportError
from fleet_segmenter.telemetry.models import (
    CooperativeBroadcast,
    DriveCommandEcho,
    MessageKind,
    OdometryFix,
    PoseFix,
    Quaternion,
    RawMessage,
    Timestamp,
    Vector3,
)

__all__ = [
    "CooperativeBroadcast",
    "DriveCommandEcho",
    "MessageImportError",
    "MessageImporter",
    "MessageKind",
    "OdometryFix",
    "PoseFix",
    "Quaternion",
    "RawMessage",
    "SenderRegistry",
    "Timestamp",
    "UnknownSenderError",
    "Vector3",
]
