"""World commands: database setup, time, configuration."""

import asyncio
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from survival_needs.cli.display import (
    display_error,
    display_info,
    display_success,
    display_tracker_config,
)
from survival_needs.config import get_settings
from survival_needs.database.connection import get_db_session, init_db
from survival_needs.schemas.loader import load_config_snapshot
from survival_needs.service import NeedsService

app = typer.Typer(help="World commands")
console = Console()


@app.command("init-db")
def init_database() -> None:
    """Create the database tables."""
    init_db()
    display_success("Database initialized")


async def _advance(service: NeedsService, hours: Optional[float], to: Optional[float]):
    now = await service.clock.now()
    if to is not None:
        target = to
    else:
        step = hours if hours is not None else service.config.update_interval_hours
        target = now + step * 3600
    if target < now:
        return now, None, []
    await service.clock.set_time(target)
    results = await service.advance_all(target)
    characters = await service.store.list_characters()
    return target, results, characters


@app.command("advance")
def advance(
    hours: Optional[float] = typer.Option(None, "--hours", "-H", min=0, help="In-game hours to pass"),
    to: Optional[float] = typer.Option(None, "--to", help="Absolute world time in seconds"),
) -> None:
    """Move world time forward and update every character's needs."""
    with get_db_session() as db:
        service = NeedsService.from_session(db)
        target, results, characters = asyncio.run(_advance(service, hours, to))
        if results is None:
            display_error(f"World time can only move forward (now t={target:g}s)")
            raise typer.Exit(1)

        display_success(f"World time is now t={target:g}s")
        if not results:
            display_info("No characters updated")
            return

        table = Table(title="Advanced")
        table.add_column("Character", style="cyan")
        table.add_column("Status")
        names = {c.id: c.name for c in characters}
        for character_id, needs in results.items():
            status = "[green]ok[/green]" if needs is not None else "[red]failed[/red]"
            table.add_row(names.get(character_id, str(character_id)), status)
        console.print(table)


@app.command("config")
def show_config(
    show_all: bool = typer.Option(False, "--all", "-a", help="Include disabled trackers"),
) -> None:
    """Show the loaded tracker configuration."""
    snapshot = load_config_snapshot(get_settings())
    trackers = list(snapshot.trackers) if show_all else snapshot.enabled_trackers
    display_tracker_config(trackers, snapshot.update_interval_hours)
    if snapshot.affects_npcs:
        display_info("NPCs are affected")
