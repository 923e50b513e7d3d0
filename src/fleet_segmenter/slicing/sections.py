"""SectionSlicer: one candidate segment per stay of the primary vehicle in a path section."""

from __future__ import annotations

from fleet_segmenter.fusion.models import Tick
from fleet_segmenter.slicing.base import Run, Slicer


class SectionSlicer(Slicer):
    """Cut the tick sequence wherever the primary vehicle enters a new section."""

    def split(self, ticks: list[Tick], vehicle_id: int) -> list[Run]:
        runs: list[Run] = []
        current: list[Tick] = []
        current_section = ticks[0][vehicle_id].section if ticks else None

        for tick in ticks:
            section = tick[vehicle_id].section
            if section is not current_section:
                runs.append(Run(ticks=current))
                current = []
                current_section = section
            current.append(tick)

        runs.append(Run(ticks=current))
        return runs
