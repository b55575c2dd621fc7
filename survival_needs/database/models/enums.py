"""Enumeration types for database models."""

from enum import Enum


class CharacterType(str, Enum):
    """Whether a character is player-controlled or an NPC."""

    CHARACTER = "character"
    NPC = "npc"


class ItemType(str, Enum):
    """Inventory item categories relevant to consumption filters."""

    CONSUMABLE = "consumable"
    EQUIPMENT = "equipment"
    WEAPON = "weapon"
    ARMOR = "armor"
    TREASURE = "treasure"
    BACKPACK = "backpack"
