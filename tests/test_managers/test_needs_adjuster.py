"""Tests for manual adjustments and special actions."""

import pytest
from sqlalchemy.orm import Session

from survival_needs.adapters.protocols import CharacterRef
from survival_needs.exceptions import PersistenceError
from survival_needs.managers.adjuster import render_message
from survival_needs.schemas.loader import ConfigSnapshot, load_tracker_definitions
from survival_needs.service import NeedsService
from tests.factories import create_character, stored_needs


def _ref(character) -> CharacterRef:
    return CharacterRef(id=character.id, name=character.name)


def _coupled_config(percentage: float = 50) -> ConfigSnapshot:
    trackers = load_tracker_definitions([
        {
            "id": "piss",
            "decreaseWhenOtherTrackerDecreases": {
                "sourceTrackerId": "thirst",
                "increaseThisTrackerByPercentageOfOther": percentage,
            },
        }
    ])
    return ConfigSnapshot(trackers=tuple(trackers))


async def _effect_keys(service: NeedsService, character_id: int):
    return sorted(e.key for e in await service.effects.list_managed_effects(character_id))


class TestRenderMessage:
    """Tests for render_message."""

    def test_minutes(self):
        message = render_message("{actorName} dries off.", "Valeros", 30)
        assert message == "Valeros dries off. (Takes 30 minutes)."

    def test_hours(self):
        message = render_message("{actorName} sleeps.", "Valeros", 240, in_hours=True)
        assert message == "Valeros sleeps. (Takes approx. 4 hours)."

    def test_no_time(self):
        assert render_message("{actorName} waits.", "Ezren") == "Ezren waits."

    def test_no_template(self):
        assert render_message(None, "Ezren", 5) is None


class TestSetValue:
    """Tests for NeedsAdjuster.set_value."""

    @pytest.mark.asyncio
    async def test_sets_and_reconciles(self, db_session: Session, service: NeedsService):
        character = create_character(db_session, needs={"hunger": 10})

        needs = await service.adjuster.set_value(_ref(character), "hunger", 72)

        assert needs.value("hunger") == 72
        assert stored_needs(character)["hunger"] == 72
        assert await _effect_keys(service, character.id) == [("hunger", "Famished")]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("requested,expected", [(150, 100), (-5, 0), ("42", 42), (33.3, 33.3)])
    async def test_clamps_and_coerces(self, db_session: Session, service: NeedsService, requested, expected):
        character = create_character(db_session, needs={"hunger": 10})

        needs = await service.adjuster.set_value(_ref(character), "hunger", requested)

        assert needs.value("hunger") == expected

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad", ["lots", None, True, [1]])
    async def test_non_numeric_rejected(self, db_session: Session, service: NeedsService, bad, caplog):
        character = create_character(db_session, needs={"hunger": 10})

        assert await service.adjuster.set_value(_ref(character), "hunger", bad) is None
        assert stored_needs(character)["hunger"] == 10
        assert "set_value ignored" in caplog.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("bad", ["nan", float("nan"), "inf", float("-inf")])
    async def test_non_finite_rejected(self, db_session: Session, service: NeedsService, bad, caplog):
        """Verify NaN and infinities never reach the clamp."""
        character = create_character(db_session, needs={"hunger": 20})

        assert await service.adjuster.set_value(_ref(character), "hunger", bad) is None
        assert stored_needs(character)["hunger"] == 20
        assert await _effect_keys(service, character.id) == []
        assert "Non-finite value" in caplog.text

    @pytest.mark.asyncio
    async def test_unknown_tracker_rejected(self, db_session: Session, service: NeedsService):
        character = create_character(db_session)
        assert await service.adjuster.set_value(_ref(character), "mana", 5) is None
        assert await service.adjuster.set_value(_ref(character), "divine_favor", 1) is None

    @pytest.mark.asyncio
    async def test_unchanged_value_skips_reconcile(self, db_session: Session, service: NeedsService):
        """Verify a no-op set leaves effects alone unless forced."""
        character = create_character(db_session, needs={"hunger": 75})

        await service.adjuster.set_value(_ref(character), "hunger", 75)
        assert await _effect_keys(service, character.id) == []

        await service.adjuster.set_value(_ref(character), "hunger", 75, force_effect_update=True)
        assert await _effect_keys(service, character.id) == [("hunger", "Famished")]

    @pytest.mark.asyncio
    async def test_coupling_applies_on_consumption(self, db_session: Session, service: NeedsService):
        """Verify a linked tracker rises by a percentage of the decrease."""
        service.reload_config(_coupled_config(50))
        character = create_character(db_session, needs={"thirst": 60, "piss": 20})

        needs = await service.adjuster.set_value(
            _ref(character), "thirst", 40, triggered_by_consumption=True
        )

        assert needs.value("thirst") == 40
        assert needs.value("piss") == 30

    @pytest.mark.asyncio
    async def test_coupling_rounds_half_up(self, db_session: Session, service: NeedsService):
        service.reload_config(_coupled_config(50))
        character = create_character(db_session, needs={"thirst": 60, "piss": 0})

        needs = await service.adjuster.set_value(
            _ref(character), "thirst", 55, triggered_by_consumption=True
        )

        assert needs.value("piss") == 3

    @pytest.mark.asyncio
    async def test_no_coupling_without_consumption(self, db_session: Session, service: NeedsService):
        service.reload_config(_coupled_config(50))
        character = create_character(db_session, needs={"thirst": 60, "piss": 20})

        needs = await service.adjuster.set_value(_ref(character), "thirst", 40)

        assert needs.value("piss") == 20

    @pytest.mark.asyncio
    async def test_no_coupling_on_increase(self, db_session: Session, service: NeedsService):
        service.reload_config(_coupled_config(50))
        character = create_character(db_session, needs={"thirst": 40, "piss": 20})

        needs = await service.adjuster.set_value(
            _ref(character), "thirst", 60, triggered_by_consumption=True
        )

        assert needs.value("piss") == 20


class TestSpecialActions:
    """Tests for NeedsAdjuster.perform_action."""

    @pytest.mark.asyncio
    async def test_relieve_bladder(self, db_session: Session, service: NeedsService):
        character = create_character(db_session, name="Valeros", needs={"piss": 95})

        outcome = await service.adjuster.perform_action(_ref(character), "piss", "relieve_piss")

        assert outcome.needs.value("piss") == 0
        assert outcome.message == "Valeros finds a moment to relieve their bladder. (Takes 2 minutes)."

    @pytest.mark.asyncio
    async def test_relieve_bowels_clears_effect(self, db_session: Session, service: NeedsService):
        character = create_character(db_session, needs={"poop": 96})
        await service.reconcile(character.id)
        assert await _effect_keys(service, character.id) == [("poop", "Bowel Emergency")]

        await service.adjuster.perform_action(_ref(character), "poop", "relieve_poop")

        assert await _effect_keys(service, character.id) == []

    @pytest.mark.asyncio
    async def test_dry_off(self, db_session: Session, service: NeedsService):
        character = create_character(db_session, needs={"wetness": 80})

        outcome = await service.adjuster.perform_action(_ref(character), "wetness", "dry_off")

        assert outcome.tracker_id == "wetness"
        assert outcome.needs.value("wetness") == 0

    @pytest.mark.asyncio
    async def test_boredom_relief_changes_stress(self, db_session: Session, service: NeedsService):
        """Verify reading reduces boredom by 40 and stress by 5."""
        character = create_character(db_session, needs={"boredom": 80, "stress": 20})

        outcome = await service.adjuster.perform_action(
            _ref(character), "boredom", "relieve_boredom", "read"
        )

        assert outcome.needs.value("boredom") == 40
        assert outcome.needs.value("stress") == 15
        assert outcome.message.endswith("(Takes 60 minutes).")

    @pytest.mark.asyncio
    async def test_stress_relief_changes_boredom(self, db_session: Session, service: NeedsService):
        character = create_character(db_session, needs={"stress": 50, "boredom": 10})

        outcome = await service.adjuster.perform_action(
            _ref(character), "stress", "relieve_stress", "meditate"
        )

        assert outcome.needs.value("stress") == 20
        assert outcome.needs.value("boredom") == 15

    @pytest.mark.asyncio
    async def test_relief_floors_at_zero(self, db_session: Session, service: NeedsService):
        character = create_character(db_session, needs={"boredom": 10, "stress": 0})

        outcome = await service.adjuster.perform_action(
            _ref(character), "boredom", "relieve_boredom", "read"
        )

        assert outcome.needs.value("boredom") == 0
        assert outcome.needs.value("stress") == 0

    @pytest.mark.asyncio
    async def test_short_nap(self, db_session: Session, service: NeedsService):
        character = create_character(db_session, needs={"sleep": 50})

        outcome = await service.adjuster.perform_action(
            _ref(character), "sleep", "manage_sleep", "short_nap"
        )

        assert outcome.needs.value("sleep") == 35
        assert outcome.message.endswith("(Takes approx. 0.5 hours).")

    @pytest.mark.asyncio
    async def test_full_rest_triggers_long_rest(self, db_session: Session, service: NeedsService):
        """Verify the full-night choice runs the long-rest handler."""
        character = create_character(db_session, needs={"sleep": 90, "stress": 70, "lastUpdateTime": 0})

        outcome = await service.adjuster.perform_action(
            _ref(character), "sleep", "manage_sleep", "full_long_rest"
        )

        assert outcome.needs.value("sleep") == 10
        assert outcome.needs.value("stress") == 20

    @pytest.mark.asyncio
    async def test_choice_required(self, db_session: Session, service: NeedsService):
        character = create_character(db_session, needs={"boredom": 80})

        assert await service.adjuster.perform_action(_ref(character), "boredom", "relieve_boredom") is None
        assert (
            await service.adjuster.perform_action(_ref(character), "boredom", "relieve_boredom", "nap")
            is None
        )
        assert stored_needs(character)["boredom"] == 80

    @pytest.mark.asyncio
    async def test_unknown_action(self, db_session: Session, service: NeedsService):
        character = create_character(db_session)
        assert await service.adjuster.perform_action(_ref(character), "hunger", "relieve_piss") is None


class TestFailedActions:
    """Tests for special actions whose write fails."""

    @pytest.fixture
    def broken_store(self, service: NeedsService):
        async def failing(character_id, updates):
            raise PersistenceError("flags are locked", character_id=character_id)

        service.store.batch_update = failing
        return service.store

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "tracker_id,action_id,choice_id",
        [
            ("piss", "relieve_piss", None),
            ("wetness", "dry_off", None),
            ("boredom", "relieve_boredom", "read"),
            ("sleep", "manage_sleep", "short_nap"),
            ("sleep", "manage_sleep", "full_long_rest"),
        ],
    )
    async def test_no_outcome_when_write_fails(
        self, db_session: Session, service: NeedsService, broken_store, tracker_id, action_id, choice_id
    ):
        """Verify a failed write reports no outcome instead of the success message."""
        character = create_character(
            db_session, needs={"piss": 90, "wetness": 80, "boredom": 80, "sleep": 90}
        )
        before = stored_needs(character)[tracker_id]

        outcome = await service.adjuster.perform_action(_ref(character), tracker_id, action_id, choice_id)

        assert outcome is None
        assert stored_needs(character)[tracker_id] == before
