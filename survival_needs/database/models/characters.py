"""Character, inventory and applied effect models."""

from typing import Any

from sqlalchemy import (
    Boolean,
    Enum,
    Float,
    ForeignKey,
    Integer,
    JSON,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from survival_needs.database.models.base import Base, TimestampMixin
from survival_needs.database.models.enums import CharacterType, ItemType


class Character(Base, TimestampMixin):
    """A character whose needs are tracked.

    Needs live in the JSON `flags` column under the module namespace, e.g.
    {"survival-needs": {"hunger": 12.5, "lastUpdateTime": 86400}}.
    """

    __tablename__ = "characters"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    character_type: Mapped[CharacterType] = mapped_column(
        Enum(CharacterType, values_callable=lambda obj: [e.value for e in obj]),
        default=CharacterType.CHARACTER,
        nullable=False,
    )

    # Namespaced key-value storage
    flags: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        default=dict,
        nullable=False,
        comment="Namespaced flag storage (needs values, last update marker)",
    )

    # Relationships
    items: Mapped[list["InventoryItem"]] = relationship(
        back_populates="character",
        cascade="all, delete-orphan",
    )
    effects: Mapped[list["AppliedEffect"]] = relationship(
        back_populates="character",
        cascade="all, delete-orphan",
    )

    @property
    def is_npc(self) -> bool:
        return self.character_type == CharacterType.NPC

    def __repr__(self) -> str:
        return f"<Character {self.id}: {self.name} ({self.character_type.value})>"


class InventoryItem(Base, TimestampMixin):
    """An item carried by a character."""

    __tablename__ = "inventory_items"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    character_id: Mapped[int] = mapped_column(
        ForeignKey("characters.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
        comment="Game-system slug (e.g., 'rations')",
    )
    item_type: Mapped[str] = mapped_column(
        String(50),
        default=ItemType.CONSUMABLE.value,
        nullable=False,
    )

    quantity: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    # Charges; None for items without uses
    uses_value: Mapped[int | None] = mapped_column(Integer, nullable=True)
    uses_max: Mapped[int | None] = mapped_column(Integer, nullable=True)
    bulk: Mapped[float | None] = mapped_column(
        Float,
        nullable=True,
        comment="Total bulk of the stack (L = 0.1)",
    )

    character: Mapped["Character"] = relationship(back_populates="items")

    def __repr__(self) -> str:
        return f"<InventoryItem {self.name} x{self.quantity}>"


class AppliedEffect(Base, TimestampMixin):
    """An effect currently applied to a character."""

    __tablename__ = "applied_effects"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    character_id: Mapped[int] = mapped_column(
        ForeignKey("characters.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    icon: Mapped[str | None] = mapped_column(String(300), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Provenance tags
    is_survival_need_effect: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        comment="Owned by the needs engine",
    )
    source_tracker_id: Mapped[str | None] = mapped_column(String(50), nullable=True)
    threshold_name: Mapped[str | None] = mapped_column(String(100), nullable=True)

    # Granted condition rules
    rules: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON,
        default=list,
        nullable=False,
    )

    character: Mapped["Character"] = relationship(back_populates="effects")

    def __repr__(self) -> str:
        return f"<AppliedEffect {self.slug} on character {self.character_id}>"
