"""Tick sequence segmentation."""

from fleet_segmenter.slicing.acceleration import AccelerationSlicer
from fleet_segmenter.slicing.base import Run, Slicer, SlicingError
from fleet_segmenter.slicing.models import Phase, Segment
from fleet_segmenter.slicing.sections import SectionSlicer

__all__ = [
    "AccelerationSlicer",
    "Phase",
    "Run",
    "SectionSlicer",
    "Segment",
    "Slicer",
    "SlicingError",
]
