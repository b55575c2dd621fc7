"""SQLAlchemy implementations of the collaborator protocols."""

import copy
import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from survival_needs.adapters.protocols import (
    CharacterRef,
    ConsumableItem,
    EffectDescriptor,
    ManagedEffect,
)
from survival_needs.config import MODULE_ID
from survival_needs.database.models import (
    AppliedEffect,
    Character,
    InventoryItem,
    WorldClockState,
)
from survival_needs.effects.conditions import BADGED_CONDITIONS
from survival_needs.exceptions import PersistenceError

logger = logging.getLogger(__name__)


def _to_ref(character: Character) -> CharacterRef:
    return CharacterRef(id=character.id, name=character.name, is_npc=character.is_npc)


class SqlNeedsStore:
    """Needs store backed by the Character.flags JSON column."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _character(self, character_id: int) -> Character | None:
        return self.db.get(Character, character_id)

    async def get_character(self, character_id: int) -> CharacterRef | None:
        character = self._character(character_id)
        return _to_ref(character) if character else None

    async def list_characters(self) -> list[CharacterRef]:
        characters = self.db.query(Character).order_by(Character.id).all()
        return [_to_ref(c) for c in characters]

    async def get_flag(self, character_id: int, path: str) -> Any | None:
        character = self._character(character_id)
        if character is None:
            return None
        node: Any = character.flags or {}
        for part in path.split("."):
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return copy.deepcopy(node)

    async def get_flags(self, character_id: int) -> dict[str, Any]:
        character = self._character(character_id)
        if character is None:
            return {}
        return copy.deepcopy((character.flags or {}).get(MODULE_ID, {}))

    async def batch_update(self, character_id: int, updates: dict[str, Any]) -> None:
        if not updates:
            return
        character = self._character(character_id)
        if character is None:
            raise PersistenceError(f"Character {character_id} not found", character_id=character_id)

        # Work on a copy so the JSON column sees a new value
        flags = copy.deepcopy(character.flags or {})
        for path, value in updates.items():
            *parents, leaf = path.split(".")
            node = flags
            for part in parents:
                child = node.get(part)
                if not isinstance(child, dict):
                    # A scalar tracker gaining sub-properties keeps its value
                    child = {"value": child} if isinstance(child, (int, float)) else {}
                    node[part] = child
                node = child
            node[leaf] = value

        try:
            with self.db.begin_nested():
                character.flags = flags
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to write {len(updates)} flag(s) for character {character_id}: {e}",
                character_id=character_id,
            ) from e
        logger.debug(f"Character {character_id}: wrote {sorted(updates)}")


def _grant_rules(descriptor: EffectDescriptor) -> list[dict[str, Any]]:
    rules = []
    for grant in descriptor.grants:
        rule: dict[str, Any] = {"key": "GrantItem", "uuid": grant.uuid, "inMemoryOnly": True}
        if grant.badge is not None and grant.slug in BADGED_CONDITIONS:
            rule["alterations"] = [
                {"mode": "override", "property": "badge-value", "value": grant.badge}
            ]
        rules.append(rule)
    return rules


class SqlEffectCollaborator:
    """Effect collaborator backed by the applied_effects table."""

    def __init__(self, db: Session) -> None:
        self.db = db

    async def list_managed_effects(self, character_id: int) -> list[ManagedEffect]:
        rows = (
            self.db.query(AppliedEffect)
            .filter(
                AppliedEffect.character_id == character_id,
                AppliedEffect.is_survival_need_effect.is_(True),
            )
            .order_by(AppliedEffect.id)
            .all()
        )
        return [
            ManagedEffect(
                id=row.id,
                source_tracker_id=row.source_tracker_id or "",
                threshold_name=row.threshold_name or "",
                slug=row.slug,
            )
            for row in rows
        ]

    async def create_effects(
        self, character_id: int, descriptors: list[EffectDescriptor]
    ) -> list[ManagedEffect]:
        if not descriptors:
            return []
        rows = [
            AppliedEffect(
                character_id=character_id,
                name=d.name,
                slug=d.slug,
                icon=d.icon,
                description=d.description,
                is_survival_need_effect=True,
                source_tracker_id=d.source_tracker_id,
                threshold_name=d.threshold_name,
                rules=_grant_rules(d),
            )
            for d in descriptors
        ]
        try:
            with self.db.begin_nested():
                self.db.add_all(rows)
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to create {len(rows)} effect(s) for character {character_id}: {e}",
                character_id=character_id,
            ) from e
        return [
            ManagedEffect(
                id=row.id,
                source_tracker_id=row.source_tracker_id,
                threshold_name=row.threshold_name,
                slug=row.slug,
            )
            for row in rows
        ]

    async def delete_effects(self, character_id: int, effect_ids: list[int]) -> None:
        if not effect_ids:
            return
        try:
            with self.db.begin_nested():
                (
                    self.db.query(AppliedEffect)
                    .filter(
                        AppliedEffect.character_id == character_id,
                        AppliedEffect.id.in_(effect_ids),
                    )
                    .delete(synchronize_session="fetch")
                )
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to delete effects {effect_ids} for character {character_id}: {e}",
                character_id=character_id,
            ) from e


def _to_consumable(item: InventoryItem) -> ConsumableItem:
    return ConsumableItem(
        id=item.id,
        name=item.name,
        item_type=item.item_type,
        slug=item.slug,
        quantity=item.quantity,
        uses_value=item.uses_value,
        uses_max=item.uses_max,
        bulk=item.bulk,
    )


class SqlItemSource:
    """Item source backed by the inventory_items table."""

    def __init__(self, db: Session) -> None:
        self.db = db

    async def list_items(self, character_id: int) -> list[ConsumableItem]:
        items = (
            self.db.query(InventoryItem)
            .filter(InventoryItem.character_id == character_id)
            .order_by(InventoryItem.id)
            .all()
        )
        return [_to_consumable(item) for item in items]

    async def consume_one(self, character_id: int, item_id: int) -> bool:
        item = self.db.get(InventoryItem, item_id)
        if item is None or item.character_id != character_id:
            return False

        view = _to_consumable(item)
        try:
            with self.db.begin_nested():
                if view.has_uses:
                    if item.uses_value <= 0:
                        return False
                    item.uses_value -= 1
                    if item.uses_value == 0:
                        logger.info(f"{item.name} is now empty")
                elif view.is_consumable:
                    if item.quantity > 1:
                        item.quantity -= 1
                    else:
                        self.db.delete(item)
                else:
                    # Equipment without charges: conceptual use, nothing to spend
                    logger.debug(f"{item.name} has no uses or stack, conceptual use")
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to consume {item.name} for character {character_id}: {e}",
                character_id=character_id,
            ) from e
        return True


class SqlWorldClock:
    """World clock stored in a single-row table."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def _state(self) -> WorldClockState | None:
        return self.db.get(WorldClockState, 1)

    async def now(self) -> float:
        state = self._state()
        return state.world_time_seconds if state else 0.0

    async def set_time(self, seconds: float) -> None:
        state = self._state()
        try:
            with self.db.begin_nested():
                if state is None:
                    self.db.add(WorldClockState(id=1, world_time_seconds=seconds))
                else:
                    state.world_time_seconds = seconds
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to set world time: {e}") from e
