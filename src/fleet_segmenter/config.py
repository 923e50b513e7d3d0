"""Pipeline configuration.

Values come from keyword arguments or from ``FLEET_SEGMENTER_*`` environment
variables (see :meth:`PipelineConfig.from_env`).  Scripts call
``dotenv.load_dotenv()`` first so a project-root ``.env`` file is honoured.
"""

from __future__ import annotations

import os
from collections.abc import Mapping

from pydantic import BaseModel, Field

ENV_PREFIX = "FLEET_SEGMENTER_"


def parse_senders(raw: str) -> dict[str, int]:
    """Parse ``"robot1=1, robot2=2"`` into ``{"robot1": 1, "robot2": 2}``.

    Raises:
        ValueError: On an entry without ``=`` or with a non-integer id.
    """
    result: dict[str, int] = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        name, sep, vehicle_id = item.rpartition("=")
        if not sep or not name.strip():
            raise ValueError(f"Expected name=id, got {item!r}")
        result[name.strip()] = int(vehicle_id)
    return result


class PipelineConfig(BaseModel):
    acceleration_window_s: float = Field(0.1, gt=0)
    weak_acceleration: float = Field(0.1, gt=0)
    weak_deceleration: float = Field(-0.1, lt=0)
    min_ticks_per_segment: int = Field(10, ge=1)
    sections_per_lane: int = Field(3, ge=1)
    fleet_size: int | None = Field(None, ge=1)
    senders: dict[str, int] = Field(default_factory=dict)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        prefix: str = ENV_PREFIX,
        **overrides,
    ) -> PipelineConfig:
        """Build a config from environment variables; *overrides* take precedence."""
        env = os.environ if environ is None else environ
        values: dict = {}
        for name in cls.model_fields:
            raw = env.get(prefix + name.upper())
            if raw is None or raw == "":
                continue
            values[name] = parse_senders(raw) if name == "senders" else raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)
