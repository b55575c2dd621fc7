"""Base manager class with common patterns."""

import logging
from decimal import ROUND_HALF_UP, Decimal

from survival_needs.adapters.protocols import NeedsStore, flag_path
from survival_needs.managers.needs_state import NeedsState
from survival_needs.schemas.loader import ConfigSnapshot
from survival_needs.schemas.trackers import TrackerDefinition

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class BaseManager:
    """Base class for all needs managers.

    Provides common patterns:
    - Needs store access
    - The configuration snapshot the manager was built with
    - Snapshot reading and value clamping
    """

    def __init__(self, store: NeedsStore, config: ConfigSnapshot) -> None:
        """Initialize manager with a needs store and configuration.

        Args:
            store: Per-character flag storage
            config: Immutable configuration snapshot
        """
        self.store = store
        self.config = config

    async def read_needs(self, character_id: int) -> NeedsState:
        """Read the current needs snapshot for a character."""
        flags = await self.store.get_flags(character_id)
        return NeedsState.from_flags(character_id, flags, self.config.trackers)

    def _clamp(self, value: float, min_val: float = 0.0, max_val: float = 100.0) -> float:
        """Clamp a value between min and max bounds."""
        return max(min_val, min(max_val, value))

    def _value_path(self, tracker: TrackerDefinition) -> str:
        """Store path of the main value (nested for sub-property trackers)."""
        if tracker.has_sub_properties:
            return flag_path(tracker.id, "value")
        return flag_path(tracker.id)
