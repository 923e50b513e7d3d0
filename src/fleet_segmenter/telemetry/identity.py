"""Sender name → vehicle id resolution."""

from __future__ import annotations

from collections.abc import Iterable, Mapping

from fleet_segmenter.telemetry.models import RawMessage


class UnknownSenderError(ValueError):
    """Raised when a message names a sender that is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown sender {name!r}; register it in the sender mapping")
        self.name = name


def _normalize(name: str) -> str:
    """Frame names are compared without surrounding slashes or whitespace."""
    return name.strip().strip("/")


class SenderRegistry:
    """Explicit, validated mapping from frame/robot names to vehicle ids.

    Every stream names its sender slightly differently (``robot_name`` for
    broadcasts, ``frame_id`` / ``child_frame_id`` elsewhere), so one vehicle
    usually has several registered names.

    Args:
        mapping: ``{name: vehicle_id}``.  Names are normalised by stripping
            surrounding slashes and whitespace.

    Raises:
        ValueError: If a name is empty or a vehicle id is negative.
    """

    def __init__(self, mapping: Mapping[str, int]) -> None:
        self._ids: dict[str, int] = {}
        for name, vehicle_id in mapping.items():
            key = _normalize(name)
            if not key:
                raise ValueError("Sender names must not be empty")
            if vehicle_id < 0:
                raise ValueError(f"Vehicle id for {name!r} must be >= 0, got {vehicle_id}")
            self._ids[key] = int(vehicle_id)

    @classmethod
    def from_aliases(cls, aliases: Mapping[int, Iterable[str]]) -> SenderRegistry:
        """Build from ``{vehicle_id: [name, ...]}``."""
        return cls({name: vid for vid, names in aliases.items() for name in names})

    def __contains__(self, name: str) -> bool:
        return _normalize(name) in self._ids

    def __len__(self) -> int:
        return len(self._ids)

    @property
    def vehicle_ids(self) -> set[int]:
        return set(self._ids.values())

    def resolve(self, name: str) -> int:
        """Return the vehicle id registered for *name*.

        Raises:
            UnknownSenderError: If *name* is not registered.
        """
        try:
            return self._ids[_normalize(name)]
        except KeyError:
            raise UnknownSenderError(name) from None

    def vehicle_of(self, message: RawMessage) -> int:
        """Return the vehicle id of the sender of *message*."""
        return self.resolve(message.sender)
