"""Needs service: the entry point hosts and the CLI talk to.

Owns the configuration snapshot and the engines built on it, serializes
work per character, and debounces reconciles triggered by outside writes.
"""

import asyncio
import logging
from typing import Any

from sqlalchemy.orm import Session

from survival_needs.adapters.protocols import (
    CharacterRef,
    ConditionRegistry,
    ConsumableItem,
    EffectCollaborator,
    ItemSource,
    NeedsStore,
    WorldClock,
)
from survival_needs.adapters.sql import (
    SqlEffectCollaborator,
    SqlItemSource,
    SqlNeedsStore,
    SqlWorldClock,
)
from survival_needs.config import Settings, get_settings
from survival_needs.effects.conditions import ConditionCatalog
from survival_needs.managers.accrual import IntervalAccrualEngine
from survival_needs.managers.adjuster import ActionOutcome, NeedsAdjuster
from survival_needs.managers.consumption import (
    ConsumptionCalculator,
    ConsumptionResult,
    ItemPortion,
)
from survival_needs.managers.lifecycle import NeedsLifecycle
from survival_needs.managers.needs_state import NeedsState
from survival_needs.managers.reconciler import EffectReconciler, ReconcileResult
from survival_needs.schemas.consumption import ConsumptionChoice
from survival_needs.schemas.loader import ConfigSnapshot, load_config_snapshot

logger = logging.getLogger(__name__)


class NeedsService:
    """Facade over the needs engines.

    Every public operation on a character runs under that character's lock,
    so a time advance and a manual action never interleave their
    read-modify-write cycles.
    """

    def __init__(
        self,
        store: NeedsStore,
        effects: EffectCollaborator,
        items: ItemSource,
        clock: WorldClock,
        conditions: ConditionRegistry | None = None,
        config: ConfigSnapshot | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            store: Needs store
            effects: Effect collaborator
            items: Inventory source for consumption
            clock: World clock
            conditions: Condition registry (defaults to the built-in catalog)
            config: Configuration snapshot (defaults to one loaded from settings)
            settings: Application settings (defaults to the cached settings)
        """
        self.settings = settings or get_settings()
        self.store = store
        self.effects = effects
        self.items = items
        self.clock = clock
        self.conditions = conditions or ConditionCatalog()
        self._locks: dict[int, asyncio.Lock] = {}
        self._pending: dict[int, asyncio.Task] = {}
        self._build(config or load_config_snapshot(self.settings))

    @classmethod
    def from_session(cls, db: Session, **kwargs: Any) -> "NeedsService":
        """Build a service wired to the SQL adapters on one session."""
        return cls(
            store=SqlNeedsStore(db),
            effects=SqlEffectCollaborator(db),
            items=SqlItemSource(db),
            clock=SqlWorldClock(db),
            **kwargs,
        )

    def _build(self, config: ConfigSnapshot) -> None:
        self._config = config
        self.reconciler = EffectReconciler(self.effects, self.conditions)
        self.lifecycle = NeedsLifecycle(self.store, config, self.reconciler, self.clock)
        self.accrual = IntervalAccrualEngine(self.lifecycle, self.reconciler)
        self.adjuster = NeedsAdjuster(self.lifecycle, self.reconciler)
        self.consumption = ConsumptionCalculator(self.store, config, self.reconciler, self.items)

    @property
    def config(self) -> ConfigSnapshot:
        return self._config

    def reload_config(self, config: ConfigSnapshot | None = None) -> ConfigSnapshot:
        """Swap in a new configuration snapshot.

        Operations already running keep the snapshot they started with.
        """
        self._build(config or load_config_snapshot(self.settings))
        logger.info(f"Configuration reloaded: {[t.id for t in self._config.enabled_trackers]}")
        return self._config

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _lock(self, character_id: int) -> asyncio.Lock:
        lock = self._locks.get(character_id)
        if lock is None:
            lock = self._locks[character_id] = asyncio.Lock()
        return lock

    async def _character(self, character_id: int) -> CharacterRef | None:
        character = await self.store.get_character(character_id)
        if character is None:
            logger.warning(f"Unknown character {character_id}, ignoring")
        return character

    def affects(self, character: CharacterRef) -> bool:
        """Whether the engines manage this character at all."""
        return not character.is_npc or self._config.affects_npcs

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    async def read_needs(self, character_id: int) -> NeedsState | None:
        character = await self._character(character_id)
        if character is None:
            return None
        return await self.lifecycle.read_needs(character.id)

    async def find_suitable_items(self, character_id: int, tracker_id: str) -> list[ConsumableItem]:
        character = await self._character(character_id)
        if character is None:
            return []
        return await self.consumption.find_suitable_items(character, tracker_id)

    # ------------------------------------------------------------------
    # Time and rest
    # ------------------------------------------------------------------

    async def ensure_initialized(self, character_id: int) -> NeedsState | None:
        character = await self._character(character_id)
        if character is None or not self.affects(character):
            return None
        async with self._lock(character.id):
            return await self.lifecycle.ensure_initialized(character)

    async def advance(self, character_id: int, now_seconds: float | None = None) -> NeedsState | None:
        """Advance one character to the given (or current) world time."""
        character = await self._character(character_id)
        if character is None or not self.affects(character):
            return None
        if now_seconds is None:
            now_seconds = await self.clock.now()
        async with self._lock(character.id):
            return await self.accrual.advance(character, now_seconds)

    async def advance_all(self, now_seconds: float) -> dict[int, NeedsState | None]:
        """Advance every managed character, one at a time.

        A failure on one character is logged and does not stop the others.

        Returns:
            Character id -> needs after the advance (None if it failed).
        """
        config = self._config
        if config.interval_seconds <= 0 or not config.enabled_trackers:
            return {}

        results: dict[int, NeedsState | None] = {}
        characters = [c for c in await self.store.list_characters() if self.affects(c)]
        for index, character in enumerate(characters):
            if index and self.settings.inter_character_delay_seconds:
                await asyncio.sleep(self.settings.inter_character_delay_seconds)
            try:
                async with self._lock(character.id):
                    results[character.id] = await self.accrual.advance(character, now_seconds)
            except Exception as e:
                logger.exception(f"Failed to advance needs for {character.name}: {e}")
                results[character.id] = None
        logger.info(f"World time {now_seconds}: processed {len(characters)} character(s)")
        return results

    async def apply_long_rest(self, character_id: int) -> NeedsState | None:
        character = await self._character(character_id)
        if character is None:
            return None
        async with self._lock(character.id):
            return await self.lifecycle.apply_long_rest(character)

    # ------------------------------------------------------------------
    # Manual changes
    # ------------------------------------------------------------------

    async def set_value(
        self,
        character_id: int,
        tracker_id: str,
        value: Any,
        triggered_by_consumption: bool = False,
        force_effect_update: bool = False,
    ) -> NeedsState | None:
        character = await self._character(character_id)
        if character is None:
            return None
        async with self._lock(character.id):
            return await self.adjuster.set_value(
                character,
                tracker_id,
                value,
                triggered_by_consumption=triggered_by_consumption,
                force_effect_update=force_effect_update,
            )

    async def perform_action(
        self,
        character_id: int,
        tracker_id: str,
        action_id: str,
        choice_id: str | None = None,
    ) -> ActionOutcome | None:
        character = await self._character(character_id)
        if character is None:
            return None
        async with self._lock(character.id):
            return await self.adjuster.perform_action(character, tracker_id, action_id, choice_id)

    async def consume(
        self, character_id: int, portion: ItemPortion, choice: ConsumptionChoice
    ) -> ConsumptionResult | None:
        character = await self._character(character_id)
        if character is None:
            return None
        async with self._lock(character.id):
            return await self.consumption.consume(character, portion, choice)

    async def consume_item(
        self, character_id: int, item_id: int, choice: ConsumptionChoice
    ) -> ConsumptionResult | None:
        character = await self._character(character_id)
        if character is None:
            return None
        async with self._lock(character.id):
            return await self.consumption.consume_item(character, item_id, choice)

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    async def reconcile(self, character_id: int) -> ReconcileResult:
        """Re-derive effects from the currently stored needs."""
        character = await self._character(character_id)
        if character is None or not self.affects(character):
            return ReconcileResult()
        async with self._lock(character.id):
            needs = await self.lifecycle.read_needs(character.id)
            return await self.reconciler.reconcile(character, needs, self._config.trackers)

    def on_character_updated(self, character_id: int) -> asyncio.Task:
        """Schedule a trailing-edge debounced reconcile.

        Calls within the debounce window collapse into one reconcile that
        runs after the last of them. Must be called from a running loop.
        """
        pending = self._pending.get(character_id)
        if pending is not None and not pending.done():
            pending.cancel()
        task = asyncio.get_running_loop().create_task(self._debounced_reconcile(character_id))
        self._pending[character_id] = task
        return task

    async def _debounced_reconcile(self, character_id: int) -> ReconcileResult:
        await asyncio.sleep(self.settings.reconcile_debounce_seconds)
        # Past the window: later updates schedule a new pass instead of cancelling this one
        if self._pending.get(character_id) is asyncio.current_task():
            del self._pending[character_id]
        return await self.reconcile(character_id)

    async def flush_pending(self) -> None:
        """Wait for every scheduled debounced reconcile to finish."""
        tasks = list(self._pending.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
