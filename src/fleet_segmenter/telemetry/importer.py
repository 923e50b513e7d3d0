"""MessageImporter: reads recorded JSON stream files into time-sorted messages."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, TypeAdapter, ValidationError

from fleet_segmenter.telemetry.models import MessageKind, RawMessage
from fleet_segmenter.telemetry.schemas import (
    AckermannDriveStampedSchema,
    CAMSchema,
    OdometrySchema,
    TrackSchema,
    ViconPoseSchema,
)
from fleet_segmenter.track.models import LaneGeometry

_logger = logging.getLogger(__name__)

# File-name marker → (stream kind, wire schema).  Checked in order.
_STREAMS: tuple[tuple[str, MessageKind, type[BaseModel]], ...] = (
    ("cam",            MessageKind.COOPERATIVE_BROADCAST, CAMSchema),
    ("odom",           MessageKind.ODOMETRY,              OdometrySchema),
    ("vicon_pose",     MessageKind.POSE_FIX,              ViconPoseSchema),
    ("ackermann_cmd",  MessageKind.DRIVE_COMMAND,         AckermannDriveStampedSchema),
)


class MessageImportError(Exception):
    """Raised when a recording file cannot be read or decoded."""


def stream_kind(path: Path) -> MessageKind:
    """Return the stream kind encoded in the file name of *path*.

    Raises
    ------
    MessageImportError
        If the name matches none of the known streams.
    """
    return _match_stream(path)[0]


def _match_stream(path: Path) -> tuple[MessageKind, type[BaseModel]]:
    stem = path.stem
    for marker, kind, schema in _STREAMS:
        if marker in stem:
            return kind, schema
    raise MessageImportError(f"Unknown file contents: {str(path)!r}")


def _read_json(path: Path):
    if not path.exists():
        raise MessageImportError(f"File not found: {str(path)!r}")
    if path.is_dir():
        raise MessageImportError(f"Expected a file, got directory: {str(path)!r}")
    try:
        with path.open(encoding="utf-8") as fh:
            return json.load(fh)
    except json.JSONDecodeError as exc:
        raise MessageImportError(f"Invalid JSON in {str(path)!r}: {exc}") from exc


class MessageImporter:
    """Decode a directory of recorded stream files.

    Every file holds a JSON list of messages of one stream; the stream is
    recognised from the file name (``cam``, ``odom``, ``vicon_pose`` or
    ``ackermann_cmd``).
    """

    def load_file(self, path: str | Path) -> list[RawMessage]:
        """Decode one stream file into messages, in file order."""
        path = Path(path)
        _, schema = _match_stream(path)
        data = _read_json(path)
        try:
            records = TypeAdapter(list[schema]).validate_python(data)
        except ValidationError as exc:
            raise MessageImportError(f"Malformed records in {str(path)!r}: {exc}") from exc
        return [record.to_message() for record in records]

    def load_directory(self, folder: str | Path) -> list[RawMessage]:
        """Decode every file below *folder* and merge them in time order.

        Messages with equal stamps keep their relative file order.

        Raises
        ------
        MessageImportError
            If the folder holds no files, or any file fails to decode.
        """
        folder = Path(folder)
        files = sorted(p for p in folder.rglob("*") if p.is_file())
        if not files:
            raise MessageImportError(f"There is no content in the folder {str(folder)!r}")

        messages: list[RawMessage] = []
        for path in files:
            decoded = self.load_file(path)
            _logger.info("Loaded %d messages from %s", len(decoded), path.name)
            messages.extend(decoded)

        messages.sort(key=lambda m: m.timestamp)
        return messages

    def load_track(self, path: str | Path) -> list[LaneGeometry]:
        """Decode the static track geometry file."""
        path = Path(path)
        data = _read_json(path)
        try:
            track = TrackSchema.model_validate(data)
        except ValidationError as exc:
            raise MessageImportError(f"Malformed track file {str(path)!r}: {exc}") from exc
        return track.to_geometry()
