"""Rich display helpers for CLI output."""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from survival_needs.adapters.protocols import ConsumableItem, ManagedEffect
from survival_needs.managers.needs_state import NeedsState
from survival_needs.managers.reconciler import resolve_threshold
from survival_needs.schemas.trackers import TrackerDefinition


# Shared console instance
console = Console()


def display_error(message: str) -> None:
    """Display error message.

    Args:
        message: Error message.
    """
    console.print(f"[bold red]Error:[/bold red] {message}")


def display_success(message: str) -> None:
    """Display success message.

    Args:
        message: Success message.
    """
    console.print(f"[bold green]{message}[/bold green]")


def display_info(message: str) -> None:
    """Display info message.

    Args:
        message: Info message.
    """
    console.print(f"[dim]{message}[/dim]")


def display_narrative(text: str, title: str | None = None) -> None:
    """Display a chat-style message in a soft panel."""
    console.print(Panel(text, title=title, border_style="dim", padding=(1, 2)))


def _create_pressure_bar(value: float, max_value: float, width: int = 20) -> Text:
    """Progress bar where fuller means worse.

    Args:
        value: Current value.
        max_value: Maximum value.
        width: Bar width in characters.

    Returns:
        Rich Text object with styled bar.
    """
    ratio = (value / max_value) if max_value > 0 else 0
    filled = int(ratio * width)
    empty = width - filled

    if ratio >= 0.7:
        color = "red"
    elif ratio >= 0.4:
        color = "yellow"
    else:
        color = "green"

    bar_text = Text()
    bar_text.append("[", style="dim")
    bar_text.append("=" * filled, style=color)
    bar_text.append(" " * empty, style="dim")
    bar_text.append("]", style="dim")
    return bar_text


def display_needs(
    name: str,
    needs: NeedsState,
    trackers: list[TrackerDefinition],
    effects: list[ManagedEffect] | None = None,
) -> None:
    """Display a character's needs and the effects they produce.

    Args:
        name: Character name.
        needs: Current needs snapshot.
        trackers: Enabled tracker definitions, in display order.
        effects: Engine-managed effects currently applied.
    """
    console.print()
    console.print(f"[bold cyan]{name}[/bold cyan]")
    if needs.last_update_time is not None:
        console.print(f"[dim]Last update: t={needs.last_update_time:g}s[/dim]")
    console.print()

    table = Table(title="Needs", box=box.ROUNDED)
    table.add_column("Need", style="white")
    table.add_column("Level", width=22)
    table.add_column("", justify="right", width=9)
    table.add_column("State", style="yellow")

    for tracker in trackers:
        value = needs.value(tracker.id)
        ceiling = needs.effective_max(tracker)
        band = resolve_threshold(tracker.threshold_effects, value)
        table.add_row(
            tracker.display_name,
            _create_pressure_bar(value, ceiling),
            f"{value:g}/{ceiling:g}",
            band.name if band else "",
        )
    console.print(table)

    if effects:
        effect_table = Table(title="Effects", box=box.ROUNDED)
        effect_table.add_column("Effect", style="yellow")
        effect_table.add_column("Slug", style="dim")
        for effect in effects:
            effect_table.add_row(f"{effect.source_tracker_id}: {effect.threshold_name}", effect.slug)
        console.print(effect_table)


def display_items(items: list[ConsumableItem]) -> None:
    """Display candidate items for consumption."""
    table = Table(title="Suitable Items", box=box.ROUNDED)
    table.add_column("ID", justify="right", style="cyan")
    table.add_column("Item", style="white")
    table.add_column("Uses / Qty", justify="center")
    table.add_column("Bulk", justify="right", style="dim")
    for item in items:
        remaining = f"{item.uses_value}/{item.uses_max}" if item.has_uses else f"x{item.quantity}"
        bulk = "-" if item.bulk is None else f"{item.bulk:g}"
        table.add_row(str(item.id), item.name, remaining, bulk)
    console.print(table)


def display_tracker_config(trackers: list[TrackerDefinition], interval_hours: float) -> None:
    """Display the loaded tracker configuration."""
    table = Table(title=f"Trackers (interval {interval_hours:g}h)", box=box.ROUNDED)
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="white")
    table.add_column("On", justify="center")
    table.add_column("Rate", justify="right")
    table.add_column("Max", justify="right")
    table.add_column("Bands")
    for tracker in trackers:
        bands = ", ".join(f"{b.threshold:g} {b.name}" for b in tracker.threshold_effects)
        max_label = "dynamic" if tracker.is_dynamic_max else f"{tracker.max_value:g}"
        table.add_row(
            tracker.id,
            tracker.display_name,
            "[green]yes[/green]" if tracker.enabled else "[dim]no[/dim]",
            f"{tracker.rate_per_interval():g}",
            max_label,
            bands,
        )
    console.print(table)
