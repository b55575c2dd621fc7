"""Storage, effect, inventory and clock collaborators."""

from survival_needs.adapters.protocols import (
    LAST_UPDATE_KEY,
    LAST_UPDATE_PATH,
    CharacterRef,
    ConditionRegistry,
    ConsumableItem,
    EffectCollaborator,
    EffectDescriptor,
    EffectKey,
    GrantedCondition,
    ItemSource,
    ManagedEffect,
    NeedsStore,
    WorldClock,
    flag_path,
)
from survival_needs.adapters.sql import (
    SqlEffectCollaborator,
    SqlItemSource,
    SqlNeedsStore,
    SqlWorldClock,
)

__all__ = [
    "LAST_UPDATE_KEY",
    "LAST_UPDATE_PATH",
    "CharacterRef",
    "ConditionRegistry",
    "ConsumableItem",
    "EffectCollaborator",
    "EffectDescriptor",
    "EffectKey",
    "GrantedCondition",
    "ItemSource",
    "ManagedEffect",
    "NeedsStore",
    "SqlEffectCollaborator",
    "SqlItemSource",
    "SqlNeedsStore",
    "SqlWorldClock",
    "WorldClock",
    "flag_path",
]
