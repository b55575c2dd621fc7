"""Tracker and consumption configuration schemas."""

from survival_needs.schemas.consumption import (
    CaloricType,
    ConsumptionCalcSettings,
    ConsumptionChoice,
    DerivedTrackerRule,
    DrinkCaloric,
    DrinkQuality,
    MoodShift,
    Taste,
)
from survival_needs.schemas.defaults import DEFAULT_TRACKER_CONFIGS
from survival_needs.schemas.loader import (
    ConfigSnapshot,
    load_config_snapshot,
    load_consumption_settings,
    load_tracker_definitions,
)
from survival_needs.schemas.trackers import (
    ActionChoice,
    CouplingRule,
    ItemFilter,
    Regeneration,
    SpecialAction,
    Symptom,
    ThresholdEffect,
    TrackerDefinition,
)

__all__ = [
    "ActionChoice",
    "CaloricType",
    "ConfigSnapshot",
    "ConsumptionCalcSettings",
    "ConsumptionChoice",
    "CouplingRule",
    "DEFAULT_TRACKER_CONFIGS",
    "DerivedTrackerRule",
    "DrinkCaloric",
    "DrinkQuality",
    "ItemFilter",
    "MoodShift",
    "Regeneration",
    "SpecialAction",
    "Symptom",
    "Taste",
    "ThresholdEffect",
    "TrackerDefinition",
    "load_config_snapshot",
    "load_consumption_settings",
    "load_tracker_definitions",
]
