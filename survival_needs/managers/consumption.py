"""Consumption calculator: turning a meal or a drink into need deltas.

One consumption cycle reads a single "before" snapshot, computes every
delta from it (primary reduction, derived bladder/bowel fill, boredom and
stress shifts), writes them in one batch and reconciles once.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from survival_needs.adapters.protocols import CharacterRef, ConsumableItem, ItemSource, NeedsStore
from survival_needs.exceptions import InvalidInputError, PersistenceError
from survival_needs.managers.base import BaseManager, round_half_up
from survival_needs.managers.needs_state import NeedsState
from survival_needs.managers.reconciler import EffectReconciler
from survival_needs.schemas.consumption import ConsumptionChoice, DrinkCaloric
from survival_needs.schemas.loader import ConfigSnapshot
from survival_needs.schemas.trackers import TrackerDefinition

logger = logging.getLogger(__name__)

# Total bulk assumed for a consumable without bulk data (light)
DEFAULT_CONSUMABLE_BULK = 0.1
MIN_BULK_PER_USE = 0.01


@dataclass
class ItemPortion:
    """One use of an item, as far as the calculator cares."""

    name: str
    effective_bulk: float
    is_standard: bool = False


@dataclass
class TrackerDelta:
    """Before/after values of one tracker touched by a consumption."""

    tracker_id: str
    name: str
    before: float
    after: float

    @property
    def delta(self) -> float:
        return self.after - self.before


@dataclass
class ConsumptionResult:
    """Outcome of one consumption cycle."""

    character_name: str
    item_name: str
    tracker_id: str
    is_standard: bool
    deltas: list[TrackerDelta] = field(default_factory=list)
    choices: list[str] = field(default_factory=list)
    needs: NeedsState | None = None

    def delta_for(self, tracker_id: str) -> float:
        return next((d.delta for d in self.deltas if d.tracker_id == tracker_id), 0.0)

    @property
    def narrative(self) -> str:
        """Human readable summary of what changed."""
        lines = [f"{self.character_name} consumed {self.item_name}."]
        for d in self.deltas:
            if d.delta < 0:
                lines.append(f"{d.name} reduced by {-d.delta:g} (to {d.after:g}).")
            elif d.delta > 0:
                lines.append(f"{d.name} increased by {d.delta:g} (to {d.after:g}).")
        if self.choices and not self.is_standard:
            lines.append(f"Choices: {', '.join(self.choices)}")
        elif self.choices:
            lines.append(f"Type: {self.choices[0]}")
        return "\n".join(lines)


class ConsumptionCalculator(BaseManager):
    """Computes and applies the effects of eating and drinking."""

    def __init__(
        self,
        store: NeedsStore,
        config: ConfigSnapshot,
        reconciler: EffectReconciler,
        items: ItemSource,
    ) -> None:
        super().__init__(store, config)
        self.reconciler = reconciler
        self.items = items

    # ------------------------------------------------------------------
    # Item helpers
    # ------------------------------------------------------------------

    def effective_bulk_per_use(self, item: ConsumableItem) -> float:
        """Bulk of a single use: total bulk split across max uses."""
        total = item.bulk
        if total is None:
            total = DEFAULT_CONSUMABLE_BULK if item.is_consumable else 0.0
        per_use = total
        if item.has_uses and item.uses_max and item.uses_max > 0:
            per_use = total / item.uses_max
        return max(MIN_BULK_PER_USE, round(per_use, 3))

    def is_standard_item(self, item: ConsumableItem, tracker_id: str) -> bool:
        """Recognize standard rations (food) and waterskins (drink)."""
        calc = self.config.calc
        name = item.name.lower()
        slug = (item.slug or "").lower()
        if tracker_id == calc.food_tracker_id:
            if slug in calc.standard_food_slugs:
                return True
            return any(k in name for k in calc.standard_food_keywords) and not any(
                x in name for x in calc.standard_food_excluded_keywords
            )
        if tracker_id == calc.drink_tracker_id:
            return slug in calc.standard_drink_slugs or any(
                k in name for k in calc.standard_drink_keywords
            )
        return False

    def matches_filter(self, item: ConsumableItem, tracker: TrackerDefinition) -> bool:
        item_filter = tracker.regeneration.item_filter
        types = item_filter.types or ["consumable"]
        if item.item_type.lower() not in types:
            return False
        if not item.is_usable:
            return False
        name = item.name.lower()
        if item_filter.name_keywords and not any(k in name for k in item_filter.name_keywords):
            return False
        return True

    async def find_suitable_items(
        self, character: CharacterRef, tracker_id: str
    ) -> list[ConsumableItem]:
        """Inventory items that can regenerate the given tracker."""
        tracker = self.config.tracker(tracker_id)
        if tracker is None or not tracker.enabled or not tracker.regeneration.by_item:
            return []
        items = await self.items.list_items(character.id)
        suitable = [item for item in items if self.matches_filter(item, tracker)]
        logger.debug(
            f"{character.name}: {len(suitable)} suitable item(s) for '{tracker_id}': "
            f"{[i.name for i in suitable]}"
        )
        return suitable

    # ------------------------------------------------------------------
    # Calculation
    # ------------------------------------------------------------------

    def _restore_amount(self, tracker: TrackerDefinition | None, fallback: float) -> float:
        if tracker is None:
            return fallback
        return tracker.regeneration.item_restore_amount or fallback

    def _enabled(self, tracker_id: str) -> TrackerDefinition | None:
        tracker = self.config.tracker(tracker_id)
        return tracker if tracker is not None and tracker.enabled else None

    def _validate(self, portion: ItemPortion, choice: ConsumptionChoice) -> None:
        """Reject requests that must not touch the needs or the inventory."""
        calc = self.config.calc
        if choice.tracker_id not in (calc.food_tracker_id, calc.drink_tracker_id):
            raise InvalidInputError(f"'{choice.tracker_id}' is not a food or drink tracker")
        if self._enabled(choice.tracker_id) is None:
            raise InvalidInputError(f"Tracker '{choice.tracker_id}' is disabled")
        if portion.effective_bulk <= 0 and not portion.is_standard:
            raise InvalidInputError(f"Invalid bulk {portion.effective_bulk} for {portion.name}")

    def _calculate(
        self,
        character: CharacterRef,
        needs: NeedsState,
        portion: ItemPortion,
        choice: ConsumptionChoice,
    ) -> tuple[ConsumptionResult, dict[str, Any]]:
        """Work out every delta of one portion from a single snapshot.

        Returns:
            The result (without the post-write needs) and the store updates.
        """
        calc = self.config.calc
        food = self._enabled(calc.food_tracker_id)
        drink = self._enabled(calc.drink_tracker_id)
        food_restore = self._restore_amount(food, calc.default_food_restore_amount)
        drink_restore = self._restore_amount(drink, calc.default_drink_restore_amount)
        is_food = choice.tracker_id == calc.food_tracker_id

        reductions: dict[str, float] = {}
        mood: dict[str, float] = {calc.boredom_tracker_id: 0.0, calc.stress_tracker_id: 0.0}
        options: list[str] = []

        if portion.is_standard:
            if is_food:
                reductions[calc.food_tracker_id] = food_restore
                mood[calc.boredom_tracker_id] += calc.taste_boredom_change[calc.standard_food_taste]
                options.append("Standard Ration (Medium Caloric, Boring)")
            else:
                reductions[calc.drink_tracker_id] = drink_restore
                options.append("Standard Water")
        else:
            if is_food or choice.drink_caloric != DrinkCaloric.NONE:
                factor = portion.effective_bulk / calc.standard_food_use_bulk
                if is_food:
                    modifier = calc.food_caloric_modifiers[choice.caloric_type]
                    options.append(f"Caloric: {choice.caloric_type.value}")
                else:
                    modifier = calc.drink_caloric_modifiers[choice.drink_caloric]
                    options.append(f"Drink Caloric: {choice.drink_caloric.value}")
                reductions[calc.food_tracker_id] = round_half_up(factor * food_restore * modifier)
                if choice.taste is not None:
                    mood[calc.boredom_tracker_id] += calc.taste_boredom_change[choice.taste]
                    options.append(f"Taste: {choice.taste.value}")
            if not is_food:
                factor = portion.effective_bulk / calc.standard_drink_use_bulk
                reductions[calc.drink_tracker_id] = round_half_up(factor * drink_restore)
                if choice.drink_quality is not None:
                    mood[calc.stress_tracker_id] += calc.drink_quality_stress_change[
                        choice.drink_quality
                    ]
                    options.append(f"Quality: {choice.drink_quality.value}")
                if choice.is_alcoholic:
                    mood[calc.stress_tracker_id] += calc.alcoholic.stress_change
                    mood[calc.boredom_tracker_id] += calc.alcoholic.boredom_change
                    options.append("Alcoholic")
                if choice.is_potion:
                    mood[calc.stress_tracker_id] += calc.potion.stress_change
                    mood[calc.boredom_tracker_id] += calc.potion.boredom_change
                    options.append("Potion")

        after: dict[str, float] = {}

        # Primary reductions, then fills derived from what was actually removed
        increases: dict[str, float] = {}
        for tracker_id, reduction in reductions.items():
            tracker = self._enabled(tracker_id)
            if tracker is None or reduction <= 0:
                continue
            before = needs.value(tracker_id)
            after[tracker_id] = self._clamp(before - reduction, max_val=needs.effective_max(tracker))
            actual = before - after[tracker_id]
            if actual <= 0:
                continue
            for rule in calc.rules_triggered_by(tracker_id):
                fill = round_half_up(actual * rule.multiplier)
                if fill > 0:
                    increases[rule.target_tracker_id] = increases.get(rule.target_tracker_id, 0) + fill

        for tracker_id, change in mood.items():
            if change:
                increases[tracker_id] = increases.get(tracker_id, 0) + change

        for tracker_id, change in increases.items():
            tracker = self._enabled(tracker_id)
            if tracker is None:
                continue
            base = after.get(tracker_id, needs.value(tracker_id))
            after[tracker_id] = self._clamp(base + change, max_val=needs.effective_max(tracker))

        result = ConsumptionResult(
            character_name=character.name,
            item_name=portion.name,
            tracker_id=choice.tracker_id,
            is_standard=portion.is_standard,
            choices=options,
        )
        updates: dict[str, Any] = {}
        for tracker_id, new_value in after.items():
            tracker = self.config.tracker(tracker_id)
            before = needs.value(tracker_id)
            result.deltas.append(
                TrackerDelta(tracker_id=tracker_id, name=tracker.display_name, before=before, after=new_value)
            )
            if new_value != before:
                updates[self._value_path(tracker)] = new_value
        return result, updates

    async def _finish(
        self, character: CharacterRef, portion: ItemPortion, result: ConsumptionResult
    ) -> ConsumptionResult:
        needs = await self.read_needs(character.id)
        await self.reconciler.reconcile(character, needs, self.config.trackers)
        result.needs = needs
        summary = {d.tracker_id: round(d.delta, 3) for d in result.deltas}
        logger.info(f"{character.name} consumed {portion.name}: {summary}")
        return result

    async def consume(
        self,
        character: CharacterRef,
        portion: ItemPortion,
        choice: ConsumptionChoice,
    ) -> ConsumptionResult | None:
        """Apply one portion of food or drink.

        Args:
            character: Who eats or drinks
            portion: Item name, effective bulk and whether it is standard
            choice: Targeted tracker and qualitative answers

        Returns:
            The result with per-tracker deltas, or None on invalid input.
        """
        try:
            self._validate(portion, choice)
        except InvalidInputError as e:
            logger.warning(f"{character.name}: consumption ignored: {e}")
            return None

        needs = await self.read_needs(character.id)
        result, updates = self._calculate(character, needs, portion, choice)
        if not updates:
            result.needs = needs
            return result

        try:
            await self.store.batch_update(character.id, updates)
        except PersistenceError as e:
            logger.error(f"{character.name}: failed to apply consumption of {portion.name}: {e}")
            return None
        return await self._finish(character, portion, result)

    async def consume_item(
        self,
        character: CharacterRef,
        item_id: int,
        choice: ConsumptionChoice,
    ) -> ConsumptionResult | None:
        """Spend one use of an inventory item and apply it.

        Standard rations and waterskins ignore the qualitative choice fields.
        The item is only spent once the needs are written; if spending fails
        the needs are put back. Returns None (with a warning) if the item
        cannot be consumed.
        """
        items = await self.items.list_items(character.id)
        item = next((i for i in items if i.id == item_id), None)
        if item is None or not item.is_usable:
            logger.warning(f"{character.name}: item {item_id} not found or used up")
            return None

        portion = ItemPortion(
            name=item.name,
            effective_bulk=self.effective_bulk_per_use(item),
            is_standard=self.is_standard_item(item, choice.tracker_id),
        )
        try:
            self._validate(portion, choice)
        except InvalidInputError as e:
            logger.warning(f"{character.name}: consumption of {item.name} ignored: {e}")
            return None

        needs = await self.read_needs(character.id)
        result, updates = self._calculate(character, needs, portion, choice)
        if updates:
            try:
                await self.store.batch_update(character.id, updates)
            except PersistenceError as e:
                logger.error(f"{character.name}: failed to apply consumption of {item.name}: {e}")
                return None

        try:
            spent = await self.items.consume_one(character.id, item.id)
        except PersistenceError as e:
            logger.error(f"{character.name}: could not consume {item.name}: {e}")
            spent = False
        if not spent:
            logger.warning(f"{character.name}: could not consume {item.name}")
            await self._restore(character, result)
            return None
        return await self._finish(character, portion, result)

    async def _restore(self, character: CharacterRef, result: ConsumptionResult) -> None:
        """Write back the before values of a consumption whose item was not spent."""
        restore = {
            self._value_path(self.config.tracker(d.tracker_id)): d.before
            for d in result.deltas
            if d.after != d.before
        }
        if not restore:
            return
        try:
            await self.store.batch_update(character.id, restore)
        except PersistenceError as e:
            logger.error(f"{character.name}: failed to restore needs after {result.item_name}: {e}")
