"""Tests for configuration loading and merging."""

import json
import logging

import pytest

from survival_needs.config import Settings
from survival_needs.schemas.consumption import ConsumptionCalcSettings
from survival_needs.schemas.loader import (
    ConfigSnapshot,
    load_config_snapshot,
    load_consumption_settings,
    load_tracker_definitions,
)

DEFAULT_IDS = [
    "hunger",
    "thirst",
    "sleep",
    "piss",
    "poop",
    "boredom",
    "stress",
    "wetness",
    "divine_favor",
]


def _by_id(trackers):
    return {t.id: t for t in trackers}


class TestLoadTrackerDefinitions:
    """Tests for merging user trackers over defaults."""

    def test_no_config_gives_defaults(self):
        """Verify the built-in trackers load in order."""
        trackers = load_tracker_definitions(None)
        assert [t.id for t in trackers] == DEFAULT_IDS

    def test_divine_favor_disabled_by_default(self):
        trackers = _by_id(load_tracker_definitions(None))
        assert trackers["divine_favor"].enabled is False
        assert trackers["hunger"].enabled is True

    def test_blank_string_gives_defaults(self):
        assert [t.id for t in load_tracker_definitions("   ")] == DEFAULT_IDS

    def test_malformed_json_falls_back(self, caplog):
        """Verify broken JSON is logged and replaced by defaults."""
        with caplog.at_level(logging.WARNING):
            trackers = load_tracker_definitions("[{not json")

        assert [t.id for t in trackers] == DEFAULT_IDS
        assert "Falling back" in caplog.text

    def test_non_list_falls_back(self):
        assert [t.id for t in load_tracker_definitions({"id": "hunger"})] == DEFAULT_IDS

    def test_override_merges_over_default(self):
        """Verify an override changes only the fields it names."""
        trackers = _by_id(load_tracker_definitions([{"id": "hunger", "increasePerInterval": 1.0}]))

        hunger = trackers["hunger"]
        assert hunger.increase_per_interval == 1.0
        assert [b.name for b in hunger.threshold_effects] == ["Peckish", "Famished", "Starving"]

    def test_regeneration_merged_one_level(self):
        """Verify a partial regeneration block keeps the other defaults."""
        raw = json.dumps([{"id": "hunger", "regeneration": {"itemRestoreAmount": 5}}])
        hunger = _by_id(load_tracker_definitions(raw))["hunger"]

        assert hunger.regeneration.item_restore_amount == 5
        assert hunger.regeneration.by_item is True
        assert "ration" in hunger.regeneration.item_filter.name_keywords

    def test_item_filter_merged(self):
        raw = [{"id": "thirst", "regeneration": {"itemFilter": {"types": ["consumable"]}}}]
        thirst = _by_id(load_tracker_definitions(raw))["thirst"]

        assert thirst.regeneration.item_filter.types == ["consumable"]
        assert "waterskin" in thirst.regeneration.item_filter.name_keywords

    def test_new_tracker_appended(self):
        """Verify user trackers with new ids follow the defaults."""
        trackers = load_tracker_definitions([{"id": "hygiene", "name": "Grime", "increasePerInterval": 5}])

        assert [t.id for t in trackers] == [*DEFAULT_IDS, "hygiene"]
        assert trackers[-1].display_name == "Grime"

    def test_entry_without_id_ignored(self, caplog):
        with caplog.at_level(logging.WARNING):
            trackers = load_tracker_definitions([{"name": "Nameless"}, "junk"])

        assert [t.id for t in trackers] == DEFAULT_IDS
        assert "missing id" in caplog.text

    def test_invalid_override_keeps_default(self):
        """Verify a broken override falls back to that tracker's default."""
        trackers = _by_id(load_tracker_definitions([{"id": "hunger", "maxValue": -5}]))
        assert trackers["hunger"].max_value == 100

    def test_invalid_new_tracker_dropped(self):
        raw = [{"id": "hygiene", "thresholdEffects": [{"threshold": 10, "name": ""}]}]
        assert "hygiene" not in _by_id(load_tracker_definitions(raw))

    def test_enable_divine_favor(self):
        trackers = _by_id(load_tracker_definitions([{"id": "divine_favor", "enabled": True}]))
        assert trackers["divine_favor"].enabled is True
        assert trackers["divine_favor"].is_dynamic_max is True


class TestLoadConsumptionSettings:
    """Tests for consumption settings loading."""

    def test_none_gives_defaults(self):
        assert load_consumption_settings(None) == ConsumptionCalcSettings()

    def test_partial_settings(self):
        calc = load_consumption_settings('{"defaultDrinkRestoreAmount": 10}')
        assert calc.default_drink_restore_amount == 10
        assert calc.default_food_restore_amount == 3.33

    def test_invalid_values_fall_back(self, caplog):
        with caplog.at_level(logging.WARNING):
            calc = load_consumption_settings('{"standardFoodUseBulk": 0}')
        assert calc.standard_food_use_bulk == 0.02
        assert "Falling back" in caplog.text

    def test_non_object_falls_back(self):
        assert load_consumption_settings("[1, 2]") == ConsumptionCalcSettings()


class TestConfigSnapshot:
    """Tests for ConfigSnapshot."""

    def test_defaults_snapshot(self):
        snapshot = ConfigSnapshot.defaults()

        assert snapshot.interval_seconds == 14400
        assert "divine_favor" not in [t.id for t in snapshot.enabled_trackers]
        assert snapshot.tracker("divine_favor") is not None
        assert snapshot.tracker("nope") is None

    def test_coupling_rules_from(self):
        """Verify coupling rules are found by their source tracker."""
        trackers = load_tracker_definitions([
            {
                "id": "piss",
                "decreaseWhenOtherTrackerDecreases": {
                    "sourceTrackerId": "thirst",
                    "increaseThisTrackerByPercentageOfOther": 50,
                },
            }
        ])
        snapshot = ConfigSnapshot(trackers=tuple(trackers))

        [(tracker, rule)] = snapshot.coupling_rules_from("thirst")
        assert tracker.id == "piss"
        assert rule.increase_this_tracker_by_percentage_of_other == 50
        assert snapshot.coupling_rules_from("hunger") == []

    def test_load_from_files(self, tmp_path):
        """Verify settings paths are read into the snapshot."""
        trackers_file = tmp_path / "trackers.json"
        trackers_file.write_text(json.dumps([{"id": "sleep", "enabled": False}]))
        calc_file = tmp_path / "consumption.json"
        calc_file.write_text(json.dumps({"thirstToPissMultiplier": 1}))
        settings = Settings(
            _env_file=None,
            tracker_config_path=str(trackers_file),
            consumption_config_path=str(calc_file),
            update_interval_hours=2,
            affects_npcs=True,
        )

        snapshot = load_config_snapshot(settings)

        assert "sleep" not in [t.id for t in snapshot.enabled_trackers]
        assert snapshot.calc.rules_triggered_by("thirst")[0].multiplier == 1
        assert snapshot.interval_seconds == 7200
        assert snapshot.affects_npcs is True

    def test_missing_file_uses_defaults(self, tmp_path, caplog):
        settings = Settings(_env_file=None, tracker_config_path=str(tmp_path / "missing.json"))

        with caplog.at_level(logging.WARNING):
            snapshot = load_config_snapshot(settings)

        assert [t.id for t in snapshot.trackers] == DEFAULT_IDS
        assert "Could not read" in caplog.text
