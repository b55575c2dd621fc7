"""Game-system condition catalog.

Maps condition slugs to the compendium identifiers used when an effect
grants them, and records which conditions carry a numeric badge.
"""

from collections.abc import Iterable, Mapping

CONDITION_COMPENDIUM = "Compendium.pf2e.conditionitems.Item"

CORE_CONDITIONS: tuple[str, ...] = (
    "blinded",
    "broken",
    "clumsy",
    "concealed",
    "confused",
    "controlled",
    "dazzled",
    "deafened",
    "doomed",
    "drained",
    "dying",
    "encumbered",
    "enfeebled",
    "fascinated",
    "fatigued",
    "fleeing",
    "frightened",
    "grabbed",
    "hidden",
    "immobilized",
    "invisible",
    "off-guard",
    "paralyzed",
    "petrified",
    "prone",
    "quickened",
    "restrained",
    "sickened",
    "slowed",
    "stunned",
    "stupefied",
    "unconscious",
    "undetected",
    "wounded",
)

# Conditions whose severity is set through a badge override
BADGED_CONDITIONS: frozenset[str] = frozenset(
    {"enfeebled", "drained", "stupefied", "clumsy", "frightened", "sickened", "slowed"}
)


def _default_uuid(slug: str) -> str:
    return f"{CONDITION_COMPENDIUM}.{slug}"


class ConditionCatalog:
    """In-process ConditionRegistry backed by a slug -> uuid table."""

    def __init__(
        self,
        conditions: Mapping[str, str] | None = None,
        badged: Iterable[str] | None = None,
    ) -> None:
        """Initialize the catalog.

        Args:
            conditions: Slug to uuid overrides. Defaults to the core conditions.
            badged: Slugs that accept a badge value.
        """
        if conditions is None:
            conditions = {slug: _default_uuid(slug) for slug in CORE_CONDITIONS}
        self._conditions = {slug.lower(): uuid for slug, uuid in conditions.items()}
        self._badged = frozenset(s.lower() for s in (BADGED_CONDITIONS if badged is None else badged))

    def resolve(self, slug: str) -> str | None:
        uuid = self._conditions.get(slug.strip().lower())
        # Reject malformed identifiers such as "Compendium.pf2e.conditionitems.Item."
        if not uuid or not uuid.startswith("Compendium.") or uuid.endswith(".") or uuid.count(".") < 3:
            return None
        return uuid

    def has_badge(self, slug: str) -> bool:
        return slug.strip().lower() in self._badged
