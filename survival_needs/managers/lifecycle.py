"""Needs initialization and long-rest handling."""

import logging
from typing import Any

from survival_needs.adapters.protocols import (
    LAST_UPDATE_PATH,
    CharacterRef,
    NeedsStore,
    WorldClock,
    flag_path,
)
from survival_needs.exceptions import PersistenceError
from survival_needs.managers.base import BaseManager
from survival_needs.managers.needs_state import NeedsState
from survival_needs.managers.reconciler import EffectReconciler
from survival_needs.schemas.loader import ConfigSnapshot

logger = logging.getLogger(__name__)


class NeedsLifecycle(BaseManager):
    """Creates default needs for new characters and applies long rests."""

    def __init__(
        self,
        store: NeedsStore,
        config: ConfigSnapshot,
        reconciler: EffectReconciler,
        clock: WorldClock,
    ) -> None:
        super().__init__(store, config)
        self.reconciler = reconciler
        self.clock = clock

    def needs_initialization(self, needs: NeedsState) -> bool:
        """True if any enabled tracker or the update marker is missing."""
        if needs.last_update_time is None:
            return True
        return any(not needs.is_present(t.id) for t in self.config.enabled_trackers)

    def initialization_updates(self, now_seconds: float) -> dict[str, Any]:
        """Default values for every enabled tracker plus the update marker."""
        updates: dict[str, Any] = {}
        for tracker in self.config.enabled_trackers:
            if tracker.has_sub_properties:
                updates[flag_path(tracker.id)] = {
                    "value": tracker.default_value,
                    **tracker.sub_properties,
                }
            else:
                updates[flag_path(tracker.id)] = tracker.default_value
        updates[LAST_UPDATE_PATH] = now_seconds
        return updates

    async def initialize(
        self, character: CharacterRef, now_seconds: float | None = None
    ) -> NeedsState | None:
        """Write defaults for all enabled trackers, then reconcile once."""
        if now_seconds is None:
            now_seconds = await self.clock.now()
        updates = self.initialization_updates(now_seconds)
        try:
            await self.store.batch_update(character.id, updates)
        except PersistenceError as e:
            logger.error(f"{character.name}: failed to initialize needs: {e}")
            return None

        logger.info(f"{character.name}: initialized {len(updates) - 1} tracker(s) at t={now_seconds}")
        needs = await self.read_needs(character.id)
        await self.reconciler.reconcile(character, needs, self.config.trackers)
        return needs

    async def ensure_initialized(self, character: CharacterRef) -> NeedsState | None:
        """Initialize the character if needed, otherwise just reconcile.

        Returns:
            The current needs snapshot, or None if initialization failed.
        """
        needs = await self.read_needs(character.id)
        if self.needs_initialization(needs):
            return await self.initialize(character)
        await self.reconciler.reconcile(character, needs, self.config.trackers)
        return needs

    async def apply_long_rest(self, character: CharacterRef) -> NeedsState | None:
        """Reduce every rest-regenerating tracker by its long-rest amount.

        When nothing changes nothing is written and effects are not
        re-derived.
        """
        needs = await self.read_needs(character.id)
        updates: dict[str, Any] = {}
        for tracker in self.config.enabled_trackers:
            if not tracker.regeneration.by_long_rest:
                continue
            current = needs.value(tracker.id)
            new_value = self._clamp(
                current - tracker.regeneration.long_rest_amount,
                max_val=needs.effective_max(tracker),
            )
            if new_value != current:
                updates[self._value_path(tracker)] = new_value
                logger.debug(f"{character.name}: '{tracker.id}' {current} -> {new_value} after rest")

        if not updates:
            logger.info(f"{character.name}: no needs affected by long rest")
            return needs

        updates[LAST_UPDATE_PATH] = await self.clock.now()
        try:
            await self.store.batch_update(character.id, updates)
        except PersistenceError as e:
            logger.error(f"{character.name}: failed to apply long rest: {e}")
            return None

        logger.info(f"{character.name} rested: {len(updates) - 1} tracker(s) reduced")
        needs = await self.read_needs(character.id)
        await self.reconciler.reconcile(character, needs, self.config.trackers)
        return needs
