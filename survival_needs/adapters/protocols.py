"""Collaborator protocols consumed by the needs engines.

The engines never touch storage directly. They talk to these protocols,
which the SQL adapters implement; tests and other hosts can provide their
own implementations.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from survival_needs.config import MODULE_ID

# Flag key holding the last processed world time, in seconds
LAST_UPDATE_KEY = "lastUpdateTime"


def flag_path(tracker_id: str, sub_property: str | None = None) -> str:
    """Dotted store path for a tracker value or one of its sub-properties."""
    if sub_property:
        return f"{MODULE_ID}.{tracker_id}.{sub_property}"
    return f"{MODULE_ID}.{tracker_id}"


LAST_UPDATE_PATH = flag_path(LAST_UPDATE_KEY)


# Identity of an engine-managed effect: (tracker id, threshold name)
EffectKey = tuple[str, str]


@dataclass(frozen=True)
class CharacterRef:
    """Minimal handle on a character."""

    id: int
    name: str
    is_npc: bool = False


@dataclass(frozen=True)
class ManagedEffect:
    """An engine-managed effect currently present on a character."""

    id: int
    source_tracker_id: str
    threshold_name: str
    slug: str

    @property
    def key(self) -> EffectKey:
        return (self.source_tracker_id, self.threshold_name)


@dataclass(frozen=True)
class GrantedCondition:
    """One condition granted by an effect, with its optional badge value."""

    slug: str
    uuid: str
    badge: int | None = None


@dataclass
class EffectDescriptor:
    """Everything needed to create one engine-managed effect."""

    name: str
    slug: str
    source_tracker_id: str
    threshold_name: str
    icon: str | None = None
    description: str | None = None
    grants: list[GrantedCondition] = field(default_factory=list)

    @property
    def key(self) -> EffectKey:
        return (self.source_tracker_id, self.threshold_name)


@dataclass
class ConsumableItem:
    """An inventory item as seen by the consumption flow."""

    id: int
    name: str
    item_type: str
    slug: str | None = None
    quantity: int = 1
    uses_value: int | None = None
    uses_max: int | None = None
    bulk: float | None = None

    @property
    def has_uses(self) -> bool:
        return self.uses_value is not None and self.uses_max is not None

    @property
    def is_consumable(self) -> bool:
        return self.item_type.lower() == "consumable"

    @property
    def is_usable(self) -> bool:
        """Charges left, or stock left for consumables without charges.

        Equipment without charges (a waterskin) is always usable unless its
        quantity is zero.
        """
        if self.has_uses:
            return self.uses_value > 0
        return self.quantity > 0


@runtime_checkable
class NeedsStore(Protocol):
    """Per-character flag storage."""

    async def get_character(self, character_id: int) -> CharacterRef | None:
        """Look up a character, None if it does not exist."""
        ...

    async def list_characters(self) -> list[CharacterRef]:
        """All known characters, in a stable order."""
        ...

    async def get_flag(self, character_id: int, path: str) -> Any | None:
        """Read one dotted path, None when absent."""
        ...

    async def get_flags(self, character_id: int) -> dict[str, Any]:
        """Copy of the whole module namespace for a character."""
        ...

    async def batch_update(self, character_id: int, updates: dict[str, Any]) -> None:
        """Write several dotted paths atomically. Raises PersistenceError."""
        ...


@runtime_checkable
class EffectCollaborator(Protocol):
    """Applies and removes effects on characters."""

    async def list_managed_effects(self, character_id: int) -> list[ManagedEffect]:
        ...

    async def create_effects(
        self, character_id: int, descriptors: list[EffectDescriptor]
    ) -> list[ManagedEffect]:
        ...

    async def delete_effects(self, character_id: int, effect_ids: list[int]) -> None:
        ...


@runtime_checkable
class ItemSource(Protocol):
    """Read and spend a character's inventory."""

    async def list_items(self, character_id: int) -> list[ConsumableItem]:
        ...

    async def consume_one(self, character_id: int, item_id: int) -> bool:
        """Spend one use (or one of the stack). False if nothing was spent."""
        ...


@runtime_checkable
class WorldClock(Protocol):
    """Source of the current world time."""

    async def now(self) -> float:
        ...

    async def set_time(self, seconds: float) -> None:
        ...


@runtime_checkable
class ConditionRegistry(Protocol):
    """Resolves condition slugs to game-system identifiers."""

    def resolve(self, slug: str) -> str | None:
        """Identifier (uuid) for a condition slug, None if unknown."""
        ...

    def has_badge(self, slug: str) -> bool:
        """Whether the condition carries a numeric severity badge."""
        ...
