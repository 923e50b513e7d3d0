"""SegmentationPipeline: raw messages to ring-linked segments in one call."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from fleet_segmenter.config import PipelineConfig
from fleet_segmenter.fusion.acceleration import AccelerationEstimator
from fleet_segmenter.fusion.fuser import TickFuser
from fleet_segmenter.fusion.models import Tick
from fleet_segmenter.fusion.normalizer import MessageNormalizer
from fleet_segmenter.slicing.acceleration import AccelerationSlicer
from fleet_segmenter.slicing.base import Slicer
from fleet_segmenter.slicing.models import Segment
from fleet_segmenter.telemetry.identity import SenderRegistry
from fleet_segmenter.telemetry.importer import MessageImporter
from fleet_segmenter.telemetry.models import RawMessage
from fleet_segmenter.track.builder import PathBuilder
from fleet_segmenter.track.models import ReferencePath
from fleet_segmenter.track.projector import GeometryProjector

_logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    ticks: list[Tick]
    """Fused ticks with windowed acceleration."""

    segments: dict[int, list[Segment]] = field(default_factory=dict)
    """Segments per primary vehicle id."""

    @property
    def all_segments(self) -> list[Segment]:
        return [seg for segs in self.segments.values() for seg in segs]


class SegmentationPipeline:
    """Wire the fusion and slicing stages together.

    Parameters
    ----------
    path:
        The reference path vehicles are projected onto.
    config:
        Thresholds, window and sender mapping.
    slicer:
        Optional slicer for testing injection or section-based slicing.  If
        None an :class:`AccelerationSlicer` is built from *config*.
    source:
        Label copied into every produced segment.  A non-empty value also
        replaces the label of an injected *slicer*.
    """

    def __init__(
        self,
        path: ReferencePath,
        config: PipelineConfig,
        slicer: Slicer | None = None,
        source: str = "",
    ) -> None:
        self.path = path
        self.config = config
        registry = SenderRegistry(config.senders)
        self.fuser = TickFuser(MessageNormalizer(GeometryProjector(path), registry))
        self.estimator = AccelerationEstimator(
            window_s=config.acceleration_window_s, fleet_size=config.fleet_size
        )
        if slicer is not None and source:
            slicer.source = source
        self.slicer = slicer or AccelerationSlicer(
            weak_acceleration=config.weak_acceleration,
            weak_deceleration=config.weak_deceleration,
            min_ticks_per_segment=config.min_ticks_per_segment,
            fleet_size=config.fleet_size,
            source=source,
        )

    @classmethod
    def from_files(
        cls,
        track_file: str | Path,
        config: PipelineConfig,
        importer: MessageImporter | None = None,
        source: str = "",
    ) -> SegmentationPipeline:
        """Build the reference path from a track geometry file."""
        importer = importer or MessageImporter()
        lanes = importer.load_track(track_file)
        path = PathBuilder(sections_per_lane=config.sections_per_lane).build(lanes)
        _logger.info(
            "Reference path: %d waypoints, %d sections, %.2f m",
            len(path), len(path.sections), path.length,
        )
        return cls(path, config, source=source)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def fuse(self, messages: Sequence[RawMessage]) -> list[Tick]:
        """Fuse *messages* and annotate the ticks with windowed acceleration."""
        return self.estimator.estimate(self.fuser.fuse(messages))

    def run(
        self,
        messages: Sequence[RawMessage],
        primary_ids: Iterable[int] | None = None,
    ) -> PipelineResult:
        """Execute fusion, acceleration estimation and slicing.

        Raises
        ------
        ValueError
            For an empty message list or fewer than two waypoints.
        UnknownSenderError
            If a message names an unregistered sender.
        SlicingError
            If a slicing precondition fails.
        """
        ticks = self.fuse(messages)
        segments = self.slicer.slice_by_vehicle(ticks, primary_ids)
        _logger.info(
            "Sliced %d ticks into %d segments for %d vehicles",
            len(ticks), sum(len(s) for s in segments.values()), len(segments),
        )
        return PipelineResult(ticks=ticks, segments=segments)
