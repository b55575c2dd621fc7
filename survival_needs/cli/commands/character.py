"""Character commands: creating characters and items, showing needs."""

import asyncio
from typing import Optional

import typer
from rich.console import Console

from survival_needs.cli.display import (
    display_error,
    display_info,
    display_items,
    display_needs,
    display_success,
)
from survival_needs.database.connection import get_db_session
from survival_needs.database.models import Character, CharacterType, InventoryItem, ItemType
from survival_needs.service import NeedsService

app = typer.Typer(help="Character commands")
console = Console()


@app.command("add")
def add_character(
    name: str = typer.Argument(..., help="Character name"),
    npc: bool = typer.Option(False, "--npc", help="Create the character as an NPC"),
) -> None:
    """Create a character and initialize its needs."""
    with get_db_session() as db:
        character = Character(
            name=name,
            character_type=CharacterType.NPC if npc else CharacterType.CHARACTER,
            flags={},
        )
        db.add(character)
        db.flush()

        service = NeedsService.from_session(db)
        needs = asyncio.run(service.ensure_initialized(character.id))

        display_success(f"Created {character.name} (ID: {character.id})")
        if needs is None:
            display_info("Needs are not tracked for this character")


@app.command("add-item")
def add_item(
    character_id: int = typer.Argument(..., help="Character ID"),
    name: str = typer.Argument(..., help="Item name"),
    item_type: ItemType = typer.Option(ItemType.CONSUMABLE, "--type", "-t", help="Item type"),
    slug: Optional[str] = typer.Option(None, "--slug", help="Game-system slug (e.g. rations)"),
    quantity: int = typer.Option(1, "--quantity", "-q", min=1, help="Stack size"),
    uses: Optional[int] = typer.Option(None, "--uses", "-u", min=1, help="Charges (full)"),
    bulk: Optional[float] = typer.Option(None, "--bulk", "-b", min=0, help="Total bulk (L = 0.1)"),
) -> None:
    """Give a character an item they can later consume."""
    with get_db_session() as db:
        character = db.get(Character, character_id)
        if character is None:
            display_error(f"Character {character_id} not found")
            raise typer.Exit(1)

        item = InventoryItem(
            character_id=character.id,
            name=name,
            slug=slug,
            item_type=item_type.value,
            quantity=quantity,
            uses_value=uses,
            uses_max=uses,
            bulk=bulk,
        )
        db.add(item)
        db.flush()
        display_success(f"Gave {name} to {character.name} (item ID: {item.id})")


async def _load_view(service: NeedsService, character_id: int):
    needs = await service.read_needs(character_id)
    effects = await service.effects.list_managed_effects(character_id)
    return needs, effects


@app.command("show")
def show(
    character_id: int = typer.Argument(..., help="Character ID"),
) -> None:
    """Show a character's needs and active effects."""
    with get_db_session() as db:
        character = db.get(Character, character_id)
        if character is None:
            display_error(f"Character {character_id} not found")
            raise typer.Exit(1)

        service = NeedsService.from_session(db)
        needs, effects = asyncio.run(_load_view(service, character.id))
        display_needs(character.name, needs, service.config.enabled_trackers, effects)


@app.command("items")
def items(
    character_id: int = typer.Argument(..., help="Character ID"),
    tracker_id: str = typer.Option("hunger", "--tracker", "-t", help="Tracker to regenerate"),
) -> None:
    """List inventory items that can regenerate a tracker."""
    with get_db_session() as db:
        service = NeedsService.from_session(db)
        suitable = asyncio.run(service.find_suitable_items(character_id, tracker_id))
        if not suitable:
            display_info(f"No suitable items for '{tracker_id}'")
            return
        display_items(suitable)
