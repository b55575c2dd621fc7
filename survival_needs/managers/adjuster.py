"""Manual and choice-driven tracker adjustments."""

import logging
import math
from dataclasses import dataclass
from typing import Any

from survival_needs.adapters.protocols import CharacterRef
from survival_needs.exceptions import InvalidInputError, PersistenceError
from survival_needs.managers.base import BaseManager, round_half_up
from survival_needs.managers.lifecycle import NeedsLifecycle
from survival_needs.managers.needs_state import NeedsState
from survival_needs.managers.reconciler import EffectReconciler
from survival_needs.schemas.trackers import ActionChoice, SpecialAction, TrackerDefinition

logger = logging.getLogger(__name__)

SLEEP_TRACKER_ID = "sleep"
WETNESS_TRACKER_ID = "wetness"


@dataclass
class ActionOutcome:
    """Result of a special action."""

    tracker_id: str
    message: str | None
    needs: NeedsState | None


def render_message(
    template: str | None,
    actor_name: str,
    time_minutes: int | None = None,
    in_hours: bool = False,
) -> str | None:
    """Fill {actorName} and append how long the action took."""
    if not template:
        return None
    message = template.replace("{actorName}", actor_name)
    if time_minutes:
        hours = round(time_minutes / 60, 1)
        if in_hours and hours:
            message += f" (Takes approx. {hours:g} hours)."
        else:
            message += f" (Takes {time_minutes} minutes)."
    return message


class NeedsAdjuster(BaseManager):
    """Sets single tracker values and runs special actions."""

    def __init__(self, lifecycle: NeedsLifecycle, reconciler: EffectReconciler) -> None:
        super().__init__(lifecycle.store, lifecycle.config)
        self.lifecycle = lifecycle
        self.reconciler = reconciler

    def _enabled_tracker(self, tracker_id: str) -> TrackerDefinition:
        tracker = self.config.tracker(tracker_id)
        if tracker is None or not tracker.enabled:
            raise InvalidInputError(f"Unknown or disabled tracker '{tracker_id}'")
        return tracker

    async def set_value(
        self,
        character: CharacterRef,
        tracker_id: str,
        requested_value: Any,
        triggered_by_consumption: bool = False,
        force_effect_update: bool = False,
    ) -> NeedsState | None:
        """Set one tracker to a new value, clamped to its range.

        Args:
            character: Character to update
            tracker_id: Tracker to set
            requested_value: New raw value
            triggered_by_consumption: Apply coupling rules on a decrease
            force_effect_update: Reconcile even if the value did not move

        Returns:
            Needs after the update, or None on invalid input or write failure.
        """
        try:
            tracker = self._enabled_tracker(tracker_id)
            if isinstance(requested_value, bool):
                raise InvalidInputError(f"Non-numeric value {requested_value!r}")
            try:
                requested = float(requested_value)
            except (TypeError, ValueError) as e:
                raise InvalidInputError(f"Non-numeric value {requested_value!r}") from e
            if not math.isfinite(requested):
                raise InvalidInputError(f"Non-finite value {requested_value!r}")
        except InvalidInputError as e:
            logger.warning(f"{character.name}: set_value ignored: {e}")
            return None

        needs = await self.read_needs(character.id)
        current = needs.value(tracker.id)
        new_value = self._clamp(requested, max_val=needs.effective_max(tracker))

        if new_value == current:
            if force_effect_update:
                logger.debug(f"{character.name}: forcing effect update for '{tracker.id}'")
                await self.reconciler.reconcile(character, needs, self.config.trackers)
            return needs

        updates: dict[str, Any] = {self._value_path(tracker): new_value}
        logger.info(f"{character.name}: '{tracker.id}' {current} -> {new_value}")

        if new_value < current and triggered_by_consumption:
            decrease = current - new_value
            for linked, rule in self.config.coupling_rules_from(tracker.id):
                increase = round_half_up(
                    decrease * rule.increase_this_tracker_by_percentage_of_other / 100
                )
                if increase <= 0:
                    continue
                linked_current = needs.value(linked.id)
                linked_new = self._clamp(
                    linked_current + increase, max_val=needs.effective_max(linked)
                )
                if linked_new != linked_current:
                    updates[self._value_path(linked)] = linked_new
                    logger.info(
                        f"{character.name}: linked '{linked.id}' +{increase} -> {linked_new}"
                    )

        try:
            await self.store.batch_update(character.id, updates)
        except PersistenceError as e:
            logger.error(f"{character.name}: failed to set '{tracker.id}': {e}")
            return None

        needs = await self.read_needs(character.id)
        await self.reconciler.reconcile(character, needs, self.config.trackers)
        return needs

    async def relieve_waste(
        self, character: CharacterRef, tracker_id: str, action: SpecialAction
    ) -> ActionOutcome | None:
        """Empty a bladder or bowels tracker down to the action's floor."""
        target = action.reduces_to if action.reduces_to is not None else 0
        needs = await self.set_value(character, tracker_id, target, force_effect_update=True)
        if needs is None:
            return None
        return ActionOutcome(
            tracker_id=tracker_id,
            message=render_message(action.chat_message, character.name, action.time_minutes),
            needs=needs,
        )

    async def dry_off(self, character: CharacterRef, action: SpecialAction) -> ActionOutcome | None:
        target = action.reduces_to if action.reduces_to is not None else 0
        needs = await self.set_value(
            character, WETNESS_TRACKER_ID, target, force_effect_update=True
        )
        if needs is None:
            return None
        return ActionOutcome(
            tracker_id=WETNESS_TRACKER_ID,
            message=render_message(action.chat_message, character.name, action.time_minutes),
            needs=needs,
        )

    async def relieve_boredom_or_stress(
        self, character: CharacterRef, tracker_id: str, choice: ActionChoice
    ) -> ActionOutcome | None:
        """Apply a relief choice, then its side effect on the sibling tracker."""
        current = (await self.read_needs(character.id)).value(tracker_id)
        needs = await self.set_value(
            character,
            tracker_id,
            max(0.0, current - (choice.reduces_by or 0)),
            force_effect_update=True,
        )
        if needs is None:
            return None

        calc = self.config.calc
        side_effects = {
            calc.stress_tracker_id: choice.stress_change,
            calc.boredom_tracker_id: choice.boredom_change,
        }
        for other_id, change in side_effects.items():
            if other_id == tracker_id or not change:
                continue
            other = self.config.tracker(other_id)
            if other is None or not other.enabled:
                continue
            other_current = (await self.read_needs(character.id)).value(other_id)
            needs = await self.set_value(character, other_id, other_current + change) or needs

        return ActionOutcome(
            tracker_id=tracker_id,
            message=render_message(choice.chat_message, character.name, choice.time_minutes),
            needs=needs,
        )

    async def handle_rest_choice(
        self, character: CharacterRef, choice: ActionChoice
    ) -> ActionOutcome | None:
        """A nap reduces sleep deprivation; a full night triggers a long rest."""
        message = render_message(
            choice.chat_message, character.name, choice.time_minutes, in_hours=True
        )
        if choice.triggers_long_rest:
            needs = await self.lifecycle.apply_long_rest(character)
        elif choice.reduces_by is not None:
            current = (await self.read_needs(character.id)).value(SLEEP_TRACKER_ID)
            needs = await self.set_value(
                character,
                SLEEP_TRACKER_ID,
                max(0.0, current - choice.reduces_by),
                force_effect_update=True,
            )
        else:
            logger.warning(f"Sleep choice '{choice.id}' neither reduces nor rests, ignoring")
            needs = await self.read_needs(character.id)
        if needs is None:
            return None
        return ActionOutcome(tracker_id=SLEEP_TRACKER_ID, message=message, needs=needs)

    async def perform_action(
        self,
        character: CharacterRef,
        tracker_id: str,
        action_id: str,
        choice_id: str | None = None,
    ) -> ActionOutcome | None:
        """Run a configured special action by id.

        Returns:
            The outcome, or None if the tracker, action or choice is unknown.
        """
        try:
            tracker = self._enabled_tracker(tracker_id)
            action = tracker.special_action(action_id)
            if action is None:
                raise InvalidInputError(f"Tracker '{tracker_id}' has no action '{action_id}'")
            choice = None
            if action.opens_choices_dialog:
                choice = action.choice(choice_id) if choice_id else None
                if choice is None:
                    raise InvalidInputError(
                        f"Action '{action_id}' needs a valid choice, got {choice_id!r}"
                    )
        except InvalidInputError as e:
            logger.warning(f"{character.name}: action ignored: {e}")
            return None

        if choice is not None:
            if tracker.id == SLEEP_TRACKER_ID or choice.triggers_long_rest:
                return await self.handle_rest_choice(character, choice)
            return await self.relieve_boredom_or_stress(character, tracker.id, choice)
        if tracker.id == WETNESS_TRACKER_ID:
            return await self.dry_off(character, action)
        return await self.relieve_waste(character, tracker.id, action)
