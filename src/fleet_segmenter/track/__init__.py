"""Reference path modelling and track-relative projection."""

from fleet_segmenter.track.builder import PathBuilder, build_reference_path
from fleet_segmenter.track.models import (
    CurvatureClass,
    LaneGeometry,
    PathSection,
    ReferencePath,
    SectionPosition,
    Waypoint,
)
from fleet_segmenter.track.projector import GeometryProjector, Projection

__all__ = [
    "CurvatureClass",
    "GeometryProjector",
    "LaneGeometry",
    "PathBuilder",
    "PathSection",
    "Projection",
    "ReferencePath",
    "SectionPosition",
    "Waypoint",
    "build_reference_path",
]
