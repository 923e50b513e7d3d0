"""TickFuser: folds a time-sorted message stream into complete world snapshots.

Each message yields exactly one :class:`Tick`.  The sender's state is
recomputed from the message; every other vehicle seen so far is carried into
the tick with its last known state.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from fleet_segmenter.fusion.models import EntityState, Tick
from fleet_segmenter.fusion.normalizer import MessageNormalizer
from fleet_segmenter.telemetry.models import RawMessage

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FusionState:
    """Accumulator threaded through the fold: latest state per vehicle id."""

    latest: Mapping[int, EntityState] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def vehicle_ids(self) -> list[int]:
        return sorted(self.latest)

    def updated(self, state: EntityState) -> FusionState:
        return FusionState(MappingProxyType({**self.latest, state.vehicle_id: state}))


class TickFuser:
    """Merge per-message updates into one :class:`Tick` per message.

    The fuser performs no reordering: ticks come out in the order the
    messages go in.  Ticks emitted before every vehicle has reported once hold
    fewer entities than the fleet; consumers filter those themselves.

    Args:
        normalizer: Converts a message plus the sender's previous state into
            the sender's new state.
    """

    def __init__(self, normalizer: MessageNormalizer) -> None:
        self.normalizer = normalizer

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def step(self, state: FusionState, message: RawMessage) -> tuple[FusionState, Tick]:
        """Apply one message to *state*; return the new accumulator and the tick.

        *state* itself is left untouched.
        """
        time = message.timestamp
        vehicle_id = self.normalizer.vehicle_id(message)

        entities = {
            vid: latest.retarget(time)
            for vid, latest in state.latest.items()
            if vid != vehicle_id
        }
        current = self.normalizer.normalize(
            message, state.latest.get(vehicle_id), time, vehicle_id=vehicle_id
        )
        entities[vehicle_id] = current

        tick = Tick(time=time, entities=dict(sorted(entities.items())))
        return state.updated(current), tick

    def fuse(
        self,
        messages: Iterable[RawMessage],
        initial: FusionState | None = None,
    ) -> list[Tick]:
        """Fold *messages* into ticks.

        Raises:
            ValueError: If *messages* is empty.
        """
        state = initial if initial is not None else FusionState()
        ticks: list[Tick] = []
        for message in messages:
            state, tick = self.step(state, message)
            ticks.append(tick)

        if not ticks:
            raise ValueError("At least one message is required")

        _logger.info(
            "Fused %d ticks for %d vehicles", len(ticks), len(state.latest)
        )
        return ticks
