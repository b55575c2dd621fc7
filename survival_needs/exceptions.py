"""Survival needs exception definitions.

Custom exception hierarchy for needs operations. Every component catches
these at its own boundary and downgrades them to log records, so callers
only ever see advisory results.
"""


class SurvivalNeedsError(Exception):
    """Base exception for survival needs operations."""

    pass


class ConfigurationError(SurvivalNeedsError):
    """Tracker or consumption configuration is missing or malformed.

    Always recovered by falling back to built-in defaults.

    Attributes:
        source: Where the bad configuration came from (setting name or path).
    """

    def __init__(self, message: str, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source


class InvalidInputError(SurvivalNeedsError):
    """Operation received a bad character reference, tracker id or value."""

    pass


class PersistenceError(SurvivalNeedsError):
    """A write to the needs store or effect collaborator failed.

    Attributes:
        character_id: Character whose write failed, if known.
    """

    def __init__(self, message: str, character_id: int | None = None) -> None:
        super().__init__(message)
        self.character_id = character_id


class EffectResolutionError(SurvivalNeedsError):
    """A symptom's condition identifier could not be resolved.

    Attributes:
        slug: The condition slug that failed to resolve.
    """

    def __init__(self, message: str, slug: str | None = None) -> None:
        super().__init__(message)
        self.slug = slug
