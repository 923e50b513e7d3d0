"""AccelerationSlicer: hysteresis segmentation into accelerating/decelerating phases.

A phase only ends once the primary vehicle's acceleration clearly crosses the
*opposite* weak threshold, so readings oscillating between the two thresholds
never split a segment.  On every transition the slicer rewinds to the last
tick that still clearly belonged to the closing phase:

::

    ... [closing phase ... r] (r+1 ... i-1 dropped) [i ... new phase ...

``r`` closes the old run, the ambiguous ticks between ``r`` and the
transition tick ``i`` are discarded, and the new run starts at ``i``.
"""

from __future__ import annotations

import logging

from fleet_segmenter.fusion.models import Tick
from fleet_segmenter.slicing.base import Run, Slicer
from fleet_segmenter.slicing.models import Phase

_logger = logging.getLogger(__name__)


class AccelerationSlicer(Slicer):
    """Slice ticks at changes between acceleration and deceleration.

    Args:
        weak_acceleration: Acceleration (m/s², > 0) at or above which a
            decelerating phase switches to accelerating.
        weak_deceleration: Acceleration (m/s², < 0) at or below which an
            accelerating phase switches to decelerating.
        **kwargs: Passed on to :class:`~fleet_segmenter.slicing.base.Slicer`.
    """

    def __init__(
        self,
        weak_acceleration: float = 0.1,
        weak_deceleration: float = -0.1,
        **kwargs,
    ) -> None:
        super().__init__(**kwargs)
        if weak_acceleration <= 0:
            raise ValueError("weak_acceleration must be > 0")
        if weak_deceleration >= 0:
            raise ValueError("weak_deceleration must be < 0")
        self.weak_acceleration = weak_acceleration
        self.weak_deceleration = weak_deceleration

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def leaves(self, phase: Phase, acceleration: float | None) -> bool:
        """True if *acceleration* ends *phase*.  Unset readings never do."""
        if acceleration is None:
            return False
        if phase is Phase.ACCELERATING:
            return acceleration <= self.weak_deceleration
        return acceleration >= self.weak_acceleration

    def initial_phase(self, ticks: list[Tick], vehicle_id: int) -> Phase:
        """Phase given by the first reading beyond either weak threshold.

        A sequence without any decisive reading never transitions, so it is
        reported as a single decelerating (non-accelerating) run.
        """
        for tick in ticks:
            acc = tick[vehicle_id].acceleration
            if acc is None:
                continue
            if acc >= self.weak_acceleration:
                return Phase.ACCELERATING
            if acc <= self.weak_deceleration:
                return Phase.DECELERATING
        _logger.debug("Vehicle %d: no decisive acceleration reading", vehicle_id)
        return Phase.DECELERATING

    def split(self, ticks: list[Tick], vehicle_id: int) -> list[Run]:
        phase = self.initial_phase(ticks, vehicle_id)
        runs: list[Run] = []
        run_start = 0

        for i, tick in enumerate(ticks):
            if not self.leaves(phase, tick[vehicle_id].acceleration):
                continue

            new_phase = phase.flipped()
            rewind = self._rewind(ticks, vehicle_id, new_phase, run_start, i)
            closed = ticks[run_start:rewind + 1] if rewind is not None else []
            runs.append(Run(ticks=closed, phase=phase))

            _logger.debug(
                "Vehicle %d: %s -> %s at tick %d (%s), rewound to %s",
                vehicle_id, phase.value, new_phase.value, i, tick.time,
                rewind if rewind is not None else "start",
            )
            phase = new_phase
            run_start = i

        runs.append(Run(ticks=ticks[run_start:], phase=phase))
        return runs

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _rewind(
        self,
        ticks: list[Tick],
        vehicle_id: int,
        new_phase: Phase,
        run_start: int,
        index: int,
    ) -> int | None:
        """Latest index in ``[run_start, index)`` whose reading would end *new_phase*.

        Such a tick is a decisive reading of the phase being closed.  One always
        exists once a transition fires: a later run starts at the tick that
        triggered it, and the first run's phase comes from its first decisive
        reading (a run without any never transitions).  ``None`` is therefore
        only returned for inconsistent input, and the closed run is left empty.
        """
        for j in range(index - 1, run_start - 1, -1):
            if self.leaves(new_phase, ticks[j][vehicle_id].acceleration):
                return j
        return None
