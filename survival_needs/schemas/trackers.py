"""Tracker definition schemas.

A tracker is one numeric need counter (hunger, thirst, stress, ...). These
models are the typed form of the tracker JSON that game masters edit; they
accept the original camelCase keys as well as snake_case.
"""

import math
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ConfigModel(BaseModel):
    """Base for all configuration models: immutable, camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class Symptom(ConfigModel):
    """One condition granted by a threshold band."""

    slug: str = ""
    value: int | None = None  # Severity badge, None for plain conditions
    note: str | None = None

    @field_validator("slug", mode="before")
    @classmethod
    def normalize_slug(cls, value: object) -> str:
        if value is None:
            return ""
        return str(value).strip().lower()


class ThresholdEffect(ConfigModel):
    """A named severity band: active while value >= threshold."""

    threshold: float
    name: str = Field(min_length=1)
    icon: str | None = None
    symptoms: list[Symptom] = Field(default_factory=list)


class ItemFilter(ConfigModel):
    """Selects inventory items that can regenerate a tracker."""

    types: list[str] = Field(default_factory=list)
    name_keywords: list[str] = Field(default_factory=list)

    @field_validator("types", "name_keywords", mode="after")
    @classmethod
    def normalize_words(cls, value: list[str]) -> list[str]:
        return [word.strip().lower() for word in value if word and word.strip()]


class Regeneration(ConfigModel):
    """How a tracker recovers: by long rest and/or by consuming items."""

    by_long_rest: bool = False
    long_rest_amount: float = 0
    by_item: bool = False
    item_restore_amount: float = 0
    item_filter: ItemFilter = Field(default_factory=ItemFilter)
    item_button_label: str | None = None


class CouplingRule(ConfigModel):
    """Raise this tracker by a percentage of another tracker's decrease."""

    source_tracker_id: str
    increase_this_tracker_by_percentage_of_other: float = 0


class ActionChoice(ConfigModel):
    """One option in a choices dialog (e.g. 'Read a Book')."""

    id: str
    label: str = ""
    time_minutes: int | None = None
    reduces_by: float | None = None
    triggers_long_rest: bool = False
    stress_change: float = 0
    boredom_change: float = 0
    chat_message: str | None = None


class SpecialAction(ConfigModel):
    """An interactive action offered for a tracker (urinate, dry off, ...)."""

    action_id: str
    label: str = ""
    icon: str | None = None
    time_minutes: int | None = None
    reduces_to: float | None = None
    opens_choices_dialog: bool = False
    choices: list[ActionChoice] = Field(default_factory=list)
    chat_message: str | None = None

    def choice(self, choice_id: str) -> ActionChoice | None:
        """Look up a choice by id."""
        return next((c for c in self.choices if c.id == choice_id), None)


class TrackerDefinition(ConfigModel):
    """Full definition of one tracker."""

    id: str = Field(min_length=1)
    name: str = ""
    enabled: bool = True
    icon_class: str | None = None
    icon_color: str | None = None

    default_value: float = 0
    max_value: float = Field(default=100, ge=0)

    # Accrual. base_increase_per_interval supersedes the legacy field when set.
    increase_per_interval: float = 0
    base_increase_per_interval: float | None = None
    increase_per_shrine_per_interval: float = 0

    # Dynamic ceiling (divine favor style trackers)
    is_dynamic_max: bool = False
    default_max_value: float | None = None
    shrines_per_extra_point: float | None = None
    followers_per_max_point: float | None = None
    # Sub-property name -> default value, stored beside the main value
    sub_properties: dict[str, float] = Field(default_factory=dict)

    threshold_effects: list[ThresholdEffect] = Field(default_factory=list)
    regeneration: Regeneration = Field(default_factory=Regeneration)
    decrease_when_other_tracker_decreases: CouplingRule | None = None
    special_actions: list[SpecialAction] = Field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.name or self.id

    @property
    def has_sub_properties(self) -> bool:
        return bool(self.sub_properties)

    def effective_max(self, sub_values: Mapping[str, float] | None = None) -> float:
        """Compute the tracker's ceiling.

        Static trackers use max_value. Dynamic trackers start from
        default_max_value and gain one point per `shrines_per_extra_point`
        shrines and per `followers_per_max_point` followers.
        """
        if not self.is_dynamic_max:
            return self.max_value

        subs = sub_values or {}
        ceiling = self.default_max_value if self.default_max_value is not None else self.max_value
        if self.shrines_per_extra_point:
            shrines = subs.get("shrines", self.sub_properties.get("shrines", 0)) or 0
            ceiling += math.floor(shrines / self.shrines_per_extra_point)
        if self.followers_per_max_point:
            followers = subs.get("followers", self.sub_properties.get("followers", 0)) or 0
            ceiling += math.floor(followers / self.followers_per_max_point)
        return max(0.0, float(ceiling))

    def rate_per_interval(self, sub_values: Mapping[str, float] | None = None) -> float:
        """Passive change per elapsed interval, including per-shrine accrual."""
        base = (
            self.base_increase_per_interval
            if self.base_increase_per_interval is not None
            else self.increase_per_interval
        )
        if self.increase_per_shrine_per_interval:
            subs = sub_values or {}
            shrines = subs.get("shrines", self.sub_properties.get("shrines", 0)) or 0
            base += self.increase_per_shrine_per_interval * shrines
        return base

    def special_action(self, action_id: str) -> SpecialAction | None:
        """Look up a special action by id."""
        return next((a for a in self.special_actions if a.action_id == action_id), None)
