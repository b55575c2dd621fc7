"""Read-only snapshot of a character's needs."""

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from survival_needs.adapters.protocols import LAST_UPDATE_KEY
from survival_needs.schemas.trackers import TrackerDefinition

logger = logging.getLogger(__name__)


def _as_number(raw: Any) -> float | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        number = float(raw)
    elif isinstance(raw, str):
        try:
            number = float(raw)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


@dataclass
class TrackerReading:
    """Stored value of one tracker, with defaults filled in."""

    value: float
    sub_values: dict[str, float] = field(default_factory=dict)
    present: bool = True


@dataclass
class NeedsState:
    """Values of every configured tracker at one point in time.

    Absent or unreadable values fall back to the tracker's default_value and
    are marked as not present, which is what initialization looks for.
    """

    character_id: int
    readings: dict[str, TrackerReading]
    last_update_time: float | None = None

    @classmethod
    def from_flags(
        cls,
        character_id: int,
        flags: dict[str, Any],
        trackers: Iterable[TrackerDefinition],
    ) -> "NeedsState":
        readings: dict[str, TrackerReading] = {}
        for tracker in trackers:
            raw = flags.get(tracker.id)
            subs = dict(tracker.sub_properties)
            value: float | None
            if isinstance(raw, dict):
                value = _as_number(raw.get("value"))
                for name, sub_raw in raw.items():
                    if name == "value":
                        continue
                    number = _as_number(sub_raw)
                    if number is not None:
                        subs[name] = number
            else:
                value = _as_number(raw)
                if raw is not None and value is None:
                    logger.warning(
                        f"Character {character_id}: unreadable value {raw!r} for '{tracker.id}'"
                    )
            readings[tracker.id] = TrackerReading(
                value=tracker.default_value if value is None else value,
                sub_values=subs,
                present=value is not None,
            )
        return cls(
            character_id=character_id,
            readings=readings,
            last_update_time=_as_number(flags.get(LAST_UPDATE_KEY)),
        )

    def value(self, tracker_id: str) -> float:
        reading = self.readings.get(tracker_id)
        return reading.value if reading else 0.0

    def sub_values(self, tracker_id: str) -> dict[str, float]:
        reading = self.readings.get(tracker_id)
        return dict(reading.sub_values) if reading else {}

    def effective_max(self, tracker: TrackerDefinition) -> float:
        return tracker.effective_max(self.sub_values(tracker.id))

    def is_present(self, tracker_id: str) -> bool:
        reading = self.readings.get(tracker_id)
        return bool(reading and reading.present)

    def as_dict(self) -> dict[str, float]:
        """Plain tracker id -> value mapping."""
        return {tracker_id: reading.value for tracker_id, reading in self.readings.items()}
