"""Database models package."""

from survival_needs.database.models.base import Base, TimestampMixin
from survival_needs.database.models.characters import AppliedEffect, Character, InventoryItem
from survival_needs.database.models.enums import CharacterType, ItemType
from survival_needs.database.models.world import WorldClockState

__all__ = [
    "AppliedEffect",
    "Base",
    "Character",
    "CharacterType",
    "InventoryItem",
    "ItemType",
    "TimestampMixin",
    "WorldClockState",
]
