"""Needs commands: manual values, rest, eating and drinking, actions."""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from sqlalchemy.orm import Session

from survival_needs.cli.display import (
    display_error,
    display_info,
    display_narrative,
    display_success,
)
from survival_needs.database.connection import get_db_session
from survival_needs.database.models import Character
from survival_needs.schemas.consumption import (
    CaloricType,
    ConsumptionChoice,
    DrinkCaloric,
    DrinkQuality,
    Taste,
)
from survival_needs.service import NeedsService

app = typer.Typer(help="Needs commands")
console = Console()


def _require_character(db: Session, character_id: int) -> Character:
    character = db.get(Character, character_id)
    if character is None:
        display_error(f"Character {character_id} not found")
        raise typer.Exit(1)
    return character


@app.command("set")
def set_value(
    character_id: int = typer.Argument(..., help="Character ID"),
    tracker_id: str = typer.Argument(..., help="Tracker ID (e.g. hunger)"),
    value: float = typer.Argument(..., help="New value (clamped to the tracker range)"),
    consumption: bool = typer.Option(
        False, "--consumption", help="Treat a decrease as eating/drinking (applies linked trackers)"
    ),
) -> None:
    """Set one tracker to a value."""
    with get_db_session() as db:
        character = _require_character(db, character_id)
        service = NeedsService.from_session(db)
        needs = asyncio.run(
            service.set_value(
                character.id, tracker_id, value, triggered_by_consumption=consumption
            )
        )
        if needs is None:
            display_error(f"Could not set '{tracker_id}' for {character.name}")
            raise typer.Exit(1)
        display_success(f"{character.name}: {tracker_id} = {needs.value(tracker_id):g}")


@app.command("rest")
def rest(
    character_id: int = typer.Argument(..., help="Character ID"),
) -> None:
    """Apply a long rest."""
    with get_db_session() as db:
        character = _require_character(db, character_id)
        service = NeedsService.from_session(db)
        needs = asyncio.run(service.apply_long_rest(character.id))
        if needs is None:
            display_error(f"Long rest failed for {character.name}")
            raise typer.Exit(1)
        display_success(f"{character.name} completed a long rest")


@app.command("consume")
def consume(
    character_id: int = typer.Argument(..., help="Character ID"),
    item_id: int = typer.Argument(..., help="Inventory item ID"),
    drink: bool = typer.Option(False, "--drink", "-d", help="Drink instead of eat"),
    caloric: CaloricType = typer.Option(CaloricType.MEDIUM, "--caloric", help="Food caloric density"),
    drink_caloric: DrinkCaloric = typer.Option(
        DrinkCaloric.NONE, "--drink-caloric", help="How filling the drink is"
    ),
    taste: Optional[Taste] = typer.Option(None, "--taste", help="How the food tastes"),
    quality: Optional[DrinkQuality] = typer.Option(None, "--quality", help="Drink cleanliness"),
    alcoholic: bool = typer.Option(False, "--alcoholic", help="The drink is alcoholic"),
    potion: bool = typer.Option(False, "--potion", help="The drink is a potion"),
) -> None:
    """Eat or drink one use of an inventory item."""
    with get_db_session() as db:
        character = _require_character(db, character_id)
        service = NeedsService.from_session(db)
        calc = service.config.calc
        choice = ConsumptionChoice(
            tracker_id=calc.drink_tracker_id if drink else calc.food_tracker_id,
            caloric_type=caloric,
            drink_caloric=drink_caloric,
            taste=taste,
            drink_quality=quality,
            is_alcoholic=alcoholic,
            is_potion=potion,
        )
        result = asyncio.run(service.consume_item(character.id, item_id, choice))
        if result is None:
            display_error(f"{character.name} could not consume item {item_id}")
            raise typer.Exit(1)
        display_narrative(result.narrative, title="Consumption")


@app.command("action")
def action(
    character_id: int = typer.Argument(..., help="Character ID"),
    tracker_id: str = typer.Argument(..., help="Tracker ID (e.g. piss)"),
    action_id: str = typer.Argument(..., help="Special action ID (e.g. relieve_piss)"),
    choice_id: Optional[str] = typer.Option(None, "--choice", "-c", help="Choice ID for dialog actions"),
) -> None:
    """Run a tracker's special action."""
    with get_db_session() as db:
        character = _require_character(db, character_id)
        service = NeedsService.from_session(db)

        tracker = service.config.tracker(tracker_id)
        special = tracker.special_action(action_id) if tracker else None
        if special is not None and special.opens_choices_dialog and choice_id is None:
            display_info("This action needs --choice, one of:")
            for option in special.choices:
                console.print(f"  [cyan]{option.id}[/cyan]  {option.label}")
            raise typer.Exit(1)

        outcome = asyncio.run(service.perform_action(character.id, tracker_id, action_id, choice_id))
        if outcome is None:
            display_error(f"Action '{action_id}' on '{tracker_id}' failed")
            raise typer.Exit(1)
        if outcome.message:
            display_narrative(outcome.message)
        else:
            display_success(f"{character.name}: {action_id} done")
