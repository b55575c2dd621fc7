"""Consumption calculation settings and player choices.

The lookup tables here turn the qualitative answers a player gives when
eating or drinking (caloric density, taste, water quality, ...) into
numeric modifiers.
"""

from enum import Enum

from pydantic import Field, field_validator, model_validator

from survival_needs.schemas.trackers import ConfigModel


class CaloricType(str, Enum):
    """Caloric density of food."""

    LOW = "low"
    MEDIUM = "medium"  # Neutral
    HIGH = "high"


class DrinkCaloric(str, Enum):
    """How filling a drink is."""

    NONE = "none"  # Neutral: drinks don't feed by default
    SLIGHT = "slight"
    HIGH = "high"


class Taste(str, Enum):
    """How interesting food tastes."""

    BORING = "boring"
    AVERAGE = "average"  # Neutral
    INTERESTING = "interesting"


class DrinkQuality(str, Enum):
    """Cleanliness of a drink."""

    DIRTY = "dirty"
    AVERAGE = "average"  # Neutral
    PURIFIED = "purified"


DEFAULT_FOOD_CALORIC_MODIFIERS: dict[CaloricType, float] = {
    CaloricType.LOW: 0.5,
    CaloricType.MEDIUM: 1.0,
    CaloricType.HIGH: 1.5,
}

DEFAULT_DRINK_CALORIC_MODIFIERS: dict[DrinkCaloric, float] = {
    DrinkCaloric.NONE: 0.0,
    DrinkCaloric.SLIGHT: 0.25,
    DrinkCaloric.HIGH: 1.0,
}

DEFAULT_TASTE_BOREDOM_CHANGE: dict[Taste, float] = {
    Taste.BORING: 20,
    Taste.AVERAGE: 0,
    Taste.INTERESTING: -30,
}

DEFAULT_DRINK_QUALITY_STRESS_CHANGE: dict[DrinkQuality, float] = {
    DrinkQuality.DIRTY: 25,
    DrinkQuality.AVERAGE: 0,
    DrinkQuality.PURIFIED: -15,
}


class MoodShift(ConfigModel):
    """Boredom / stress deltas caused by a drink flag."""

    stress_change: float = 0
    boredom_change: float = 0


class DerivedTrackerRule(ConfigModel):
    """Fill a target tracker when a trigger tracker is reduced by eating/drinking."""

    trigger_tracker_id: str
    target_tracker_id: str
    multiplier: float = Field(ge=0)


class ConsumptionCalcSettings(ConfigModel):
    """Constants and lookup tables used by the consumption calculator."""

    food_tracker_id: str = "hunger"
    drink_tracker_id: str = "thirst"
    boredom_tracker_id: str = "boredom"
    stress_tracker_id: str = "stress"

    # Effective bulk of one standard use (a ration meal, a waterskin swig)
    standard_food_use_bulk: float = Field(default=0.02, gt=0)
    standard_drink_use_bulk: float = Field(default=0.02, gt=0)
    # Fallbacks when the tracker itself has no item_restore_amount
    default_food_restore_amount: float = 3.33
    default_drink_restore_amount: float = 20

    food_caloric_modifiers: dict[CaloricType, float] = Field(
        default_factory=lambda: dict(DEFAULT_FOOD_CALORIC_MODIFIERS)
    )
    drink_caloric_modifiers: dict[DrinkCaloric, float] = Field(
        default_factory=lambda: dict(DEFAULT_DRINK_CALORIC_MODIFIERS)
    )
    taste_boredom_change: dict[Taste, float] = Field(
        default_factory=lambda: dict(DEFAULT_TASTE_BOREDOM_CHANGE)
    )
    drink_quality_stress_change: dict[DrinkQuality, float] = Field(
        default_factory=lambda: dict(DEFAULT_DRINK_QUALITY_STRESS_CHANGE)
    )
    alcoholic: MoodShift = Field(default_factory=lambda: MoodShift(stress_change=10, boredom_change=-40))
    potion: MoodShift = Field(default_factory=lambda: MoodShift(stress_change=15, boredom_change=-10))
    standard_food_taste: Taste = Taste.BORING

    hunger_to_poop_multiplier: float = Field(default=6.0, ge=0)
    thirst_to_piss_multiplier: float = Field(default=2.0, ge=0)
    derived_rules: list[DerivedTrackerRule] | None = None

    # Standard item recognition
    standard_food_slugs: list[str] = Field(
        default_factory=lambda: ["rations", "ration", "standard-ration"]
    )
    standard_food_keywords: list[str] = Field(default_factory=lambda: ["ration"])
    standard_food_excluded_keywords: list[str] = Field(
        default_factory=lambda: ["emergency", "field", "traveler's any-tool"]
    )
    standard_drink_slugs: list[str] = Field(
        default_factory=lambda: ["waterskin", "standard-waterskin", "canteen"]
    )
    standard_drink_keywords: list[str] = Field(default_factory=lambda: ["waterskin", "canteen"])

    @field_validator("food_caloric_modifiers", mode="after")
    @classmethod
    def complete_food_caloric(cls, value: dict) -> dict:
        return {**DEFAULT_FOOD_CALORIC_MODIFIERS, **value}

    @field_validator("drink_caloric_modifiers", mode="after")
    @classmethod
    def complete_drink_caloric(cls, value: dict) -> dict:
        return {**DEFAULT_DRINK_CALORIC_MODIFIERS, **value}

    @field_validator("taste_boredom_change", mode="after")
    @classmethod
    def complete_taste(cls, value: dict) -> dict:
        return {**DEFAULT_TASTE_BOREDOM_CHANGE, **value}

    @field_validator("drink_quality_stress_change", mode="after")
    @classmethod
    def complete_drink_quality(cls, value: dict) -> dict:
        return {**DEFAULT_DRINK_QUALITY_STRESS_CHANGE, **value}

    @model_validator(mode="after")
    def build_derived_rules(self) -> "ConsumptionCalcSettings":
        # Explicit rules win; otherwise derive them from the two multipliers.
        if self.derived_rules is None:
            rules = [
                DerivedTrackerRule(
                    trigger_tracker_id=self.food_tracker_id,
                    target_tracker_id="poop",
                    multiplier=self.hunger_to_poop_multiplier,
                ),
                DerivedTrackerRule(
                    trigger_tracker_id=self.drink_tracker_id,
                    target_tracker_id="piss",
                    multiplier=self.thirst_to_piss_multiplier,
                ),
            ]
            object.__setattr__(self, "derived_rules", rules)
        return self

    def rules_triggered_by(self, tracker_id: str) -> list[DerivedTrackerRule]:
        """Derived-fill rules whose trigger is the given tracker."""
        return [r for r in self.derived_rules or [] if r.trigger_tracker_id == tracker_id]


class ConsumptionChoice(ConfigModel):
    """What the player eats or drinks and how they describe it.

    `tracker_id` selects food (hunger) or drink (thirst). The qualitative
    fields are ignored for standard items.
    """

    tracker_id: str
    caloric_type: CaloricType = CaloricType.MEDIUM
    drink_caloric: DrinkCaloric = DrinkCaloric.NONE
    taste: Taste | None = None
    drink_quality: DrinkQuality | None = None
    is_alcoholic: bool = False
    is_potion: bool = False
