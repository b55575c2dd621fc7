"""Interval accrual: passive need growth as world time passes."""

import logging
import math
from typing import Any

from survival_needs.adapters.protocols import LAST_UPDATE_PATH, CharacterRef
from survival_needs.exceptions import PersistenceError
from survival_needs.managers.base import BaseManager
from survival_needs.managers.lifecycle import NeedsLifecycle
from survival_needs.managers.needs_state import NeedsState
from survival_needs.managers.reconciler import EffectReconciler

logger = logging.getLogger(__name__)


class IntervalAccrualEngine(BaseManager):
    """Applies per-interval deltas for every whole interval elapsed.

    The update marker only ever moves by whole intervals, so partial
    intervals carry over to the next advance instead of being lost.
    """

    def __init__(self, lifecycle: NeedsLifecycle, reconciler: EffectReconciler) -> None:
        super().__init__(lifecycle.store, lifecycle.config)
        self.lifecycle = lifecycle
        self.reconciler = reconciler

    def intervals_between(self, last_update: float, now_seconds: float) -> int:
        """Whole intervals elapsed since the marker (0 when disabled)."""
        interval = self.config.interval_seconds
        if interval <= 0:
            return 0
        return max(0, math.floor((now_seconds - last_update) / interval))

    async def advance(self, character: CharacterRef, now_seconds: float) -> NeedsState | None:
        """Bring a character's needs up to `now_seconds`.

        Args:
            character: Character to update
            now_seconds: Current world time

        Returns:
            Needs after the update, or None if writing them failed.
        """
        needs = await self.read_needs(character.id)
        if needs.last_update_time is None:
            return await self.lifecycle.initialize(character, now_seconds)

        if self.config.interval_seconds <= 0 or not self.config.enabled_trackers:
            return needs

        intervals = self.intervals_between(needs.last_update_time, now_seconds)
        if intervals <= 0:
            return needs

        updates: dict[str, Any] = {}
        for tracker in self.config.enabled_trackers:
            subs = needs.sub_values(tracker.id)
            rate = tracker.rate_per_interval(subs)
            if rate == 0:
                continue
            current = needs.value(tracker.id)
            new_value = self._clamp(
                current + rate * intervals,
                max_val=tracker.effective_max(subs),
            )
            if new_value != current:
                updates[self._value_path(tracker)] = new_value
                logger.debug(
                    f"{character.name}: '{tracker.id}' {current} -> {new_value} "
                    f"({intervals} x {rate})"
                )

        new_marker = needs.last_update_time + intervals * self.config.interval_seconds
        updates[LAST_UPDATE_PATH] = new_marker
        try:
            await self.store.batch_update(character.id, updates)
        except PersistenceError as e:
            logger.error(f"{character.name}: failed to advance needs: {e}")
            return None

        logger.info(
            f"{character.name}: advanced {intervals} interval(s), "
            f"{len(updates) - 1} tracker(s) changed"
        )
        needs = await self.read_needs(character.id)
        await self.reconciler.reconcile(character, needs, self.config.trackers)
        return needs
