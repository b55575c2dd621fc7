"""Tests for threshold resolution and effect reconciliation."""

import logging

import pytest
from sqlalchemy.orm import Session

from survival_needs.adapters.protocols import CharacterRef, ManagedEffect
from survival_needs.adapters.sql import SqlEffectCollaborator
from survival_needs.database.models import AppliedEffect, Character
from survival_needs.effects.conditions import ConditionCatalog
from survival_needs.exceptions import PersistenceError
from survival_needs.managers.needs_state import NeedsState
from survival_needs.managers.reconciler import (
    EffectReconciler,
    effect_slug,
    resolve_threshold,
)
from survival_needs.schemas.loader import ConfigSnapshot, load_tracker_definitions
from survival_needs.schemas.trackers import ThresholdEffect, TrackerDefinition
from tests.factories import create_applied_effect

BANDS = [
    ThresholdEffect(threshold=40, name="A"),
    ThresholdEffect(threshold=70, name="B"),
    ThresholdEffect(threshold=90, name="C"),
]


def _needs(character_id: int, config: ConfigSnapshot, **values) -> NeedsState:
    return NeedsState.from_flags(character_id, values, config.trackers)


async def _keys(effects: SqlEffectCollaborator, character_id: int) -> list[tuple[str, str]]:
    return sorted(e.key for e in await effects.list_managed_effects(character_id))


class FailingEffects:
    """Effect collaborator whose writes always fail."""

    async def list_managed_effects(self, character_id: int) -> list[ManagedEffect]:
        return []

    async def create_effects(self, character_id, descriptors):
        raise PersistenceError("effects table is locked", character_id=character_id)

    async def delete_effects(self, character_id, effect_ids):
        raise PersistenceError("effects table is locked", character_id=character_id)


class TestResolveThreshold:
    """Tests for resolve_threshold."""

    @pytest.mark.parametrize(
        "value,expected",
        [(0, None), (39, None), (39.99, None), (40, "A"), (69.9, "A"), (85, "B"), (90, "C"), (100, "C")],
    )
    def test_picks_most_severe_satisfied_band(self, value, expected):
        band = resolve_threshold(BANDS, value)
        assert (band.name if band else None) == expected

    def test_band_order_does_not_matter(self):
        assert resolve_threshold(list(reversed(BANDS)), 85).name == "B"

    def test_equal_thresholds_latest_wins(self):
        """Verify the band defined last wins a tie."""
        bands = [ThresholdEffect(threshold=50, name="First"), ThresholdEffect(threshold=50, name="Second")]
        assert resolve_threshold(bands, 60).name == "Second"

    def test_no_bands(self):
        assert resolve_threshold([], 100) is None


class TestEffectSlug:
    """Tests for effect_slug."""

    def test_slug_strips_unsafe_characters(self):
        assert effect_slug("piss", "Need to Urinate") == "sn-piss-needtourinate"
        assert effect_slug("hunger", "Peckish") == "sn-hunger-peckish"


class TestBuildDescriptor:
    """Tests for EffectReconciler.build_descriptor."""

    def test_badged_conditions_keep_value(self, db_session: Session, config: ConfigSnapshot):
        reconciler = EffectReconciler(SqlEffectCollaborator(db_session), ConditionCatalog())
        hunger = config.tracker("hunger")

        descriptor = reconciler.build_descriptor(hunger, hunger.threshold_effects[2])

        assert descriptor.name == "Hunger: Starving"
        assert descriptor.slug == "sn-hunger-starving"
        grants = {g.slug: g.badge for g in descriptor.grants}
        assert grants == {"drained": 2, "enfeebled": 2, "fatigued": None}
        assert "Intended to grant" in descriptor.description

    def test_value_on_unbadged_condition_dropped(self, db_session: Session, caplog):
        tracker = TrackerDefinition.model_validate({
            "id": "x",
            "thresholdEffects": [{"threshold": 1, "name": "Odd", "symptoms": [{"slug": "fatigued", "value": 2}]}],
        })
        reconciler = EffectReconciler(SqlEffectCollaborator(db_session), ConditionCatalog())

        with caplog.at_level(logging.WARNING):
            descriptor = reconciler.build_descriptor(tracker, tracker.threshold_effects[0])

        assert descriptor.grants[0].badge is None
        assert "has no badge" in caplog.text

    def test_unknown_condition_skipped(self, db_session: Session, caplog):
        """Verify unresolvable symptoms are skipped but the effect is still built."""
        tracker = TrackerDefinition.model_validate({
            "id": "x",
            "thresholdEffects": [{"threshold": 1, "name": "Odd", "symptoms": [{"slug": "glowing"}, {"slug": ""}]}],
        })
        reconciler = EffectReconciler(SqlEffectCollaborator(db_session), ConditionCatalog())

        with caplog.at_level(logging.WARNING):
            descriptor = reconciler.build_descriptor(tracker, tracker.threshold_effects[0])

        assert descriptor.grants == []
        assert "no valid symptoms" in caplog.text

    def test_malformed_uuid_rejected(self):
        catalog = ConditionCatalog(conditions={"fatigued": "Compendium.pf2e.conditionitems.Item."})
        assert catalog.resolve("fatigued") is None
        assert "fatigued" not in catalog


class TestReconcile:
    """Tests for EffectReconciler.reconcile."""

    @pytest.mark.asyncio
    async def test_adds_one_effect_per_tracker(
        self, db_session: Session, config: ConfigSnapshot, character: Character, character_ref: CharacterRef
    ):
        effects = SqlEffectCollaborator(db_session)
        reconciler = EffectReconciler(effects, ConditionCatalog())

        result = await reconciler.reconcile(
            character_ref, _needs(character.id, config, hunger=85, thirst=10, sleep=95), config.trackers
        )

        assert sorted(result.added) == [("hunger", "Famished"), ("sleep", "Exhausted")]
        assert await _keys(effects, character.id) == [("hunger", "Famished"), ("sleep", "Exhausted")]

    @pytest.mark.asyncio
    async def test_reconcile_is_idempotent(
        self, db_session: Session, config: ConfigSnapshot, character: Character, character_ref: CharacterRef
    ):
        """Verify a second pass with unchanged needs does nothing."""
        effects = SqlEffectCollaborator(db_session)
        reconciler = EffectReconciler(effects, ConditionCatalog())
        needs = _needs(character.id, config, hunger=95)

        await reconciler.reconcile(character_ref, needs, config.trackers)
        second = await reconciler.reconcile(character_ref, needs, config.trackers)

        assert second.changed is False
        assert await _keys(effects, character.id) == [("hunger", "Starving")]

    @pytest.mark.asyncio
    async def test_band_change_replaces_effect(
        self, db_session: Session, config: ConfigSnapshot, character: Character, character_ref: CharacterRef
    ):
        effects = SqlEffectCollaborator(db_session)
        reconciler = EffectReconciler(effects, ConditionCatalog())
        await reconciler.reconcile(character_ref, _needs(character.id, config, hunger=45), config.trackers)

        result = await reconciler.reconcile(character_ref, _needs(character.id, config, hunger=75), config.trackers)

        assert result.removed == [("hunger", "Peckish")]
        assert result.added == [("hunger", "Famished")]
        assert await _keys(effects, character.id) == [("hunger", "Famished")]

    @pytest.mark.asyncio
    async def test_below_all_bands_removes_effect(
        self, db_session: Session, config: ConfigSnapshot, character: Character, character_ref: CharacterRef
    ):
        effects = SqlEffectCollaborator(db_session)
        create_applied_effect(db_session, character, "hunger", "Peckish")
        reconciler = EffectReconciler(effects, ConditionCatalog())

        result = await reconciler.reconcile(character_ref, _needs(character.id, config, hunger=10), config.trackers)

        assert result.removed == [("hunger", "Peckish")]
        assert await _keys(effects, character.id) == []

    @pytest.mark.asyncio
    async def test_duplicates_collapse_to_one(
        self, db_session: Session, config: ConfigSnapshot, character: Character, character_ref: CharacterRef
    ):
        """Verify at most one effect per tracker survives."""
        effects = SqlEffectCollaborator(db_session)
        keep = create_applied_effect(db_session, character, "hunger", "Famished")
        create_applied_effect(db_session, character, "hunger", "Famished")
        create_applied_effect(db_session, character, "hunger", "Peckish")
        reconciler = EffectReconciler(effects, ConditionCatalog())

        result = await reconciler.reconcile(character_ref, _needs(character.id, config, hunger=75), config.trackers)

        remaining = await effects.list_managed_effects(character.id)
        assert [e.id for e in remaining] == [keep.id]
        assert result.added == []
        assert len(result.removed) == 2

    @pytest.mark.asyncio
    async def test_disabled_and_orphaned_trackers_cleared(
        self, db_session: Session, character: Character, character_ref: CharacterRef
    ):
        trackers = load_tracker_definitions([{"id": "sleep", "enabled": False}])
        config = ConfigSnapshot(trackers=tuple(trackers))
        effects = SqlEffectCollaborator(db_session)
        create_applied_effect(db_session, character, "sleep", "Tired")
        create_applied_effect(db_session, character, "hygiene", "Grimy")
        reconciler = EffectReconciler(effects, ConditionCatalog())

        result = await reconciler.reconcile(character_ref, _needs(character.id, config, sleep=50), config.trackers)

        assert sorted(result.removed) == [("hygiene", "Grimy"), ("sleep", "Tired")]
        assert await _keys(effects, character.id) == []

    @pytest.mark.asyncio
    async def test_foreign_effects_untouched(
        self, db_session: Session, config: ConfigSnapshot, character: Character, character_ref: CharacterRef
    ):
        foreign = create_applied_effect(
            db_session, character, "hunger", "Peckish", is_survival_need_effect=False, slug="feast"
        )
        reconciler = EffectReconciler(SqlEffectCollaborator(db_session), ConditionCatalog())

        await reconciler.reconcile(character_ref, _needs(character.id, config, hunger=0), config.trackers)

        assert db_session.get(AppliedEffect, foreign.id) is not None

    @pytest.mark.asyncio
    async def test_collaborator_failure_is_logged(self, config: ConfigSnapshot, caplog):
        """Verify write failures are downgraded to a log record."""
        reconciler = EffectReconciler(FailingEffects(), ConditionCatalog())
        ref = CharacterRef(id=1, name="Valeros")

        with caplog.at_level(logging.ERROR):
            result = await reconciler.reconcile(ref, _needs(1, config, hunger=95), config.trackers)

        assert result.changed is False
        assert "effect reconciliation failed" in caplog.text
