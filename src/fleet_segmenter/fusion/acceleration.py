"""Windowed acceleration estimation over a fused tick sequence.

For every tick the velocity change across a centred time window is divided by
the window's actual time span.  This trades responsiveness for noise
rejection compared with differencing consecutive odometry samples.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from fleet_segmenter.fusion.models import Tick

_logger = logging.getLogger(__name__)


class AccelerationEstimator:
    """Derive smoothed acceleration for every entity of every tick.

    Ticks closer than half a window to either end of the sequence, and ticks
    whose window start holds fewer than *fleet_size* entities, keep their
    acceleration unset.

    Args:
        window_s: Full window length in seconds.
        fleet_size: Number of vehicles a complete tick holds.  ``None`` infers
            it as the largest entity count in the sequence.
    """

    def __init__(self, window_s: float = 0.1, fleet_size: int | None = None) -> None:
        if window_s <= 0:
            raise ValueError("window_s must be > 0")
        self.window_s = window_s
        self.fleet_size = fleet_size

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def estimate(self, ticks: Sequence[Tick]) -> list[Tick]:
        """Return a new tick sequence with ``acceleration`` filled in.

        *ticks* must be in time order; they are not modified.
        """
        if not ticks:
            return []

        fleet_size = self.fleet_size or max(len(t) for t in ticks)
        half_ns = round(self.window_s * 1e9 / 2)
        first_ns = ticks[0].time.total_nanos
        last_ns = ticks[-1].time.total_nanos

        result: list[Tick] = []
        estimated = 0
        for i, tick in enumerate(ticks):
            accelerations = self._window_accelerations(
                ticks, i, half_ns, first_ns, last_ns, fleet_size
            )
            if accelerations:
                estimated += 1
            result.append(tick.replace_entities({
                vid: state.with_acceleration(accelerations.get(vid))
                for vid, state in tick.entities.items()
            }))

        _logger.info(
            "Estimated accelerations for %d/%d ticks (window %.3f s)",
            estimated, len(ticks), self.window_s,
        )
        return result

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _window_accelerations(
        self,
        ticks: Sequence[Tick],
        index: int,
        half_ns: int,
        first_ns: int,
        last_ns: int,
        fleet_size: int,
    ) -> dict[int, float]:
        """Return ``{vehicle_id: acceleration}`` for tick *index* (empty = skipped)."""
        t_ns = ticks[index].time.total_nanos
        if t_ns - half_ns <= first_ns or t_ns + half_ns >= last_ns:
            return {}

        start = next(
            ticks[j] for j in range(index - 1, -1, -1)
            if ticks[j].time.total_nanos <= t_ns - half_ns
        )
        if len(start) < fleet_size:
            return {}
        end = next(
            ticks[j] for j in range(index + 1, len(ticks))
            if ticks[j].time.total_nanos >= t_ns + half_ns
        )

        span = end.time - start.time
        result: dict[int, float] = {}
        for vid in ticks[index].entities:
            s, e = start.get(vid), end.get(vid)
            if s is None or e is None or s.velocity is None or e.velocity is None:
                continue
            result[vid] = (e.velocity - s.velocity) / span
        return result
