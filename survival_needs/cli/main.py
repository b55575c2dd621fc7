"""Main CLI application for the survival needs engine."""

import logging

import typer
from rich.logging import RichHandler

from survival_needs.cli.commands import character, needs, world
from survival_needs.cli.display import console
from survival_needs.config import get_settings

# Create main app
app = typer.Typer(
    name="survival-needs",
    help="Survival needs tracking for tabletop RPG characters",
    add_completion=True,
)

# Add sub-commands
app.add_typer(character.app, name="character")
app.add_typer(needs.app, name="needs")
app.add_typer(world.app, name="world")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show engine log output"),
) -> None:
    """Survival Needs - hunger, thirst, sleep and friends.

    Use 'survival-needs world init-db' once, then 'survival-needs character add'.
    """
    level = logging.DEBUG if get_settings().debug else (logging.INFO if verbose else logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


if __name__ == "__main__":
    app()
