"""Threshold resolution and effect reconciliation.

Converges the engine-managed effects on a character to exactly one effect
per tracker, matching the band its current value falls in. Safe to call
any number of times: with unchanged needs the second pass does nothing.
"""

import logging
import re
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field

from survival_needs.adapters.protocols import (
    CharacterRef,
    ConditionRegistry,
    EffectCollaborator,
    EffectDescriptor,
    EffectKey,
    GrantedCondition,
    ManagedEffect,
)
from survival_needs.exceptions import EffectResolutionError, PersistenceError
from survival_needs.managers.needs_state import NeedsState
from survival_needs.schemas.trackers import Symptom, ThresholdEffect, TrackerDefinition

logger = logging.getLogger(__name__)

_SLUG_UNSAFE = re.compile(r"[^a-zA-Z0-9\-_]")


def effect_slug(tracker_id: str, threshold_name: str) -> str:
    """Storage slug for an effect, e.g. ("hunger", "Peckish") -> "sn-hunger-peckish"."""
    safe_tracker = _SLUG_UNSAFE.sub("", tracker_id).lower()
    safe_threshold = _SLUG_UNSAFE.sub("", threshold_name).lower()
    return f"sn-{safe_tracker}-{safe_threshold}"


def resolve_threshold(bands: Iterable[ThresholdEffect], value: float) -> ThresholdEffect | None:
    """Pick the most severe satisfied band.

    Among bands with threshold <= value the highest threshold wins; on equal
    thresholds the band defined last wins. None if no band is satisfied.
    """
    best: ThresholdEffect | None = None
    for band in bands:
        if band.threshold <= value and (best is None or band.threshold >= best.threshold):
            best = band
    return best


@dataclass
class ReconcileResult:
    """Effect keys added and removed by one reconciliation pass."""

    added: list[EffectKey] = field(default_factory=list)
    removed: list[EffectKey] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed)


class EffectReconciler:
    """Diffs desired threshold effects against applied ones."""

    def __init__(self, effects: EffectCollaborator, conditions: ConditionRegistry) -> None:
        self.effects = effects
        self.conditions = conditions

    def _grant(self, symptom: Symptom) -> GrantedCondition:
        if not symptom.slug:
            raise EffectResolutionError("Symptom has an empty slug", slug=symptom.slug)
        uuid = self.conditions.resolve(symptom.slug)
        if uuid is None:
            raise EffectResolutionError(
                f"No condition found for '{symptom.slug}'", slug=symptom.slug
            )

        badge = None
        if symptom.value is not None and symptom.value > 0:
            if self.conditions.has_badge(symptom.slug):
                badge = symptom.value
            else:
                logger.warning(
                    f"Condition '{symptom.slug}' has no badge, granting it without value "
                    f"{symptom.value}"
                )
        return GrantedCondition(slug=symptom.slug, uuid=uuid, badge=badge)

    def build_descriptor(
        self, tracker: TrackerDefinition, band: ThresholdEffect
    ) -> EffectDescriptor:
        """Build the effect for a band, skipping symptoms that don't resolve."""
        effect_name = f"{tracker.display_name}: {band.name}"
        grants: list[GrantedCondition] = []
        for symptom in band.symptoms:
            try:
                grants.append(self._grant(symptom))
            except EffectResolutionError as e:
                logger.warning(f"{effect_name}: skipping symptom ({e})")

        if band.symptoms and not grants:
            logger.warning(f"Effect '{effect_name}' built with no valid symptoms")

        intended = ", ".join(
            f"{s.slug} {s.value}" if s.value else s.slug for s in band.symptoms
        )
        description = f"Effect from {tracker.display_name} reaching the '{band.name}' state."
        if intended:
            description += f" Intended to grant: {intended}."

        return EffectDescriptor(
            name=effect_name,
            slug=effect_slug(tracker.id, band.name),
            source_tracker_id=tracker.id,
            threshold_name=band.name,
            icon=band.icon,
            description=description,
            grants=grants,
        )

    def _plan(
        self,
        present: list[ManagedEffect],
        needs: NeedsState,
        trackers: Iterable[TrackerDefinition],
    ) -> tuple[list[ManagedEffect], list[EffectDescriptor]]:
        by_tracker: dict[str, list[ManagedEffect]] = defaultdict(list)
        for effect in present:
            by_tracker[effect.source_tracker_id].append(effect)

        to_remove: list[ManagedEffect] = []
        to_add: list[EffectDescriptor] = []
        for tracker in trackers:
            current = by_tracker.pop(tracker.id, [])
            if not tracker.enabled or not tracker.threshold_effects:
                to_remove.extend(current)
                continue

            band = resolve_threshold(tracker.threshold_effects, needs.value(tracker.id))
            if band is None:
                to_remove.extend(current)
                continue

            target: EffectKey = (tracker.id, band.name)
            matching = [e for e in current if e.key == target]
            # Keep one matching effect; everything else from this tracker goes
            to_remove.extend(e for e in current if e.key != target)
            to_remove.extend(matching[1:])
            if not matching:
                to_add.append(self.build_descriptor(tracker, band))

        # Effects from trackers that are no longer configured
        for orphans in by_tracker.values():
            to_remove.extend(orphans)
        return to_remove, to_add

    async def reconcile(
        self,
        character: CharacterRef,
        needs: NeedsState,
        trackers: Iterable[TrackerDefinition],
    ) -> ReconcileResult:
        """Converge applied effects to the currently satisfied bands.

        Collaborator failures are logged and yield a partial result.
        """
        result = ReconcileResult()
        try:
            present = await self.effects.list_managed_effects(character.id)
            to_remove, to_add = self._plan(present, needs, trackers)

            if to_remove:
                # Another process may have removed some already
                still_there = {e.id for e in await self.effects.list_managed_effects(character.id)}
                doomed = [e for e in to_remove if e.id in still_there]
                if doomed:
                    await self.effects.delete_effects(character.id, [e.id for e in doomed])
                    result.removed = [e.key for e in doomed]
                    logger.info(
                        f"{character.name}: removed {[e.slug for e in doomed]}"
                    )

            if to_add:
                existing = {e.key for e in await self.effects.list_managed_effects(character.id)}
                fresh = [d for d in to_add if d.key not in existing]
                if fresh:
                    await self.effects.create_effects(character.id, fresh)
                    result.added = [d.key for d in fresh]
                    logger.info(f"{character.name}: added {[d.slug for d in fresh]}")
        except PersistenceError as e:
            logger.error(f"{character.name}: effect reconciliation failed: {e}")

        return result
