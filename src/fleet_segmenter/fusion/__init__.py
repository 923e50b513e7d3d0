"""Message normalisation, tick fusion and acceleration estimation."""

from fleet_segmenter.fusion.acceleration import AccelerationEstimator
from fleet_segmenter.fusion.fuser import FusionState, TickFuser
from fleet_segmenter.fusion.models import EntityState, Tick
from fleet_segmenter.fusion.normalizer import OWNED_FIELDS, MessageNormalizer

__all__ = [
    "OWNED_FIELDS",
    "AccelerationEstimator",
    "EntityState",
    "FusionState",
    "MessageNormalizer",
    "Tick",
    "TickFuser",
]
