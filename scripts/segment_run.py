"""Segment a recorded multi-vehicle run into acceleration/deceleration phases.

Reads the JSON stream files of one recording (``*cam*.json``, ``*odom*.json``,
``*vicon_pose*.json``, ``*ackermann_cmd*.json``), fuses them into ticks on the
reference path from the track file and prints the segments per vehicle.

Usage:
    uv run python scripts/segment_run.py --track track.json --messages recordings/run1 \\
        --sender robot1=1 --sender robot2=2 --sender robot3=3
    uv run python scripts/segment_run.py --track track.json --messages run1 --min-ticks 5 -v

Defaults can also come from ``FLEET_SEGMENTER_*`` variables in a ``.env`` file.
"""

from __future__ import annotations

import argparse
import logging
import sys

from dotenv import load_dotenv

load_dotenv()

from pydantic import ValidationError  # noqa: E402

from fleet_segmenter.config import PipelineConfig, parse_senders  # noqa: E402
from fleet_segmenter.pipeline import SegmentationPipeline  # noqa: E402
from fleet_segmenter.telemetry.importer import MessageImporter, MessageImportError  # noqa: E402


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Segment fleet telemetry by motion phase")
    ap.add_argument("--track", required=True, help="Track geometry JSON file")
    ap.add_argument("--messages", required=True, help="Directory of recorded stream files")
    ap.add_argument(
        "--sender",
        action="append",
        default=[],
        metavar="NAME=ID",
        help="Map a sender name to a vehicle id (repeatable)",
    )
    ap.add_argument("--window", type=float, default=None, help="Acceleration window in seconds")
    ap.add_argument("--weak-acc", type=float, default=None, help="Weak acceleration threshold (m/s²)")
    ap.add_argument("--weak-dec", type=float, default=None, help="Weak deceleration threshold (m/s²)")
    ap.add_argument("--min-ticks", type=int, default=None, help="Minimum ticks per segment")
    ap.add_argument("--fleet-size", type=int, default=None, help="Vehicles in a complete tick")
    ap.add_argument("--vehicle", type=int, action="append", default=None, help="Only slice for this vehicle")
    ap.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return ap.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        senders = parse_senders(",".join(args.sender)) if args.sender else None
        config = PipelineConfig.from_env(
            acceleration_window_s=args.window,
            weak_acceleration=args.weak_acc,
            weak_deceleration=args.weak_dec,
            min_ticks_per_segment=args.min_ticks,
            fleet_size=args.fleet_size,
            senders=senders,
        )
    except (ValueError, ValidationError) as exc:
        print(f"  [!] Invalid configuration: {exc}", file=sys.stderr)
        sys.exit(1)

    if not config.senders:
        print("  [!] No senders configured (use --sender or FLEET_SEGMENTER_SENDERS)", file=sys.stderr)
        sys.exit(1)

    print(f"Track     : {args.track}")
    print(f"Messages  : {args.messages}")
    print(f"Senders   : {config.senders}")
    print()

    importer = MessageImporter()

    # ------------------------------------------------------------------
    # 1. Reference path
    # ------------------------------------------------------------------
    print("1/3  Building reference path...")
    try:
        pipeline = SegmentationPipeline.from_files(
            args.track, config, importer=importer, source=args.messages
        )
    except (MessageImportError, ValueError) as exc:
        print(f"  [!] {exc}", file=sys.stderr)
        sys.exit(1)
    print(f"     {len(pipeline.path)} waypoints, {len(pipeline.path.sections)} sections")

    # ------------------------------------------------------------------
    # 2. Load messages
    # ------------------------------------------------------------------
    print("2/3  Loading messages...")
    try:
        messages = importer.load_directory(args.messages)
    except MessageImportError as exc:
        print(f"  [!] {exc}", file=sys.stderr)
        sys.exit(1)
    print(f"     {len(messages)} messages")

    # ------------------------------------------------------------------
    # 3. Fuse and slice
    # ------------------------------------------------------------------
    print("3/3  Fusing and slicing...")
    try:
        result = pipeline.run(messages, primary_ids=args.vehicle)
    except ValueError as exc:
        print(f"  [!] {exc}", file=sys.stderr)
        sys.exit(1)

    print(f"     {len(result.ticks)} ticks")
    for vehicle_id, segments in result.segments.items():
        print(f"\nVehicle {vehicle_id}: {len(segments)} segments")
        for seg in segments:
            phase = seg.phase.value if seg.phase else "-"
            print(
                f"  #{seg.segment_id:<3d} {phase:<13s} {len(seg):>5d} ticks  "
                f"{seg.first_time} → {seg.last_time}"
            )
    print("\n[OK] Done")


if __name__ == "__main__":
    main()
