"""Configuration loading and merging.

All defaulting happens here, once, at load time. Every other component
receives a fully populated, immutable ConfigSnapshot and never falls back
to defaults on its own.
"""

import copy
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from pydantic.alias_generators import to_snake

from survival_needs.config import Settings
from survival_needs.exceptions import ConfigurationError
from survival_needs.schemas.consumption import ConsumptionCalcSettings
from survival_needs.schemas.defaults import DEFAULT_TRACKER_CONFIGS
from survival_needs.schemas.trackers import CouplingRule, TrackerDefinition

logger = logging.getLogger(__name__)

# Nested objects merged one level deep instead of replaced wholesale
_NESTED_MERGE_KEYS = ("regeneration",)


def _snake_keys(data: dict[str, Any]) -> dict[str, Any]:
    return {to_snake(key): value for key, value in data.items()}


def _normalize_tracker(raw: dict[str, Any]) -> dict[str, Any]:
    """Convert one tracker mapping to snake_case keys at the merge levels."""
    data = _snake_keys(raw)
    regen = data.get("regeneration")
    if isinstance(regen, dict):
        regen = _snake_keys(regen)
        if isinstance(regen.get("item_filter"), dict):
            regen["item_filter"] = _snake_keys(regen["item_filter"])
        data["regeneration"] = regen
    return data


def _merge_tracker(default: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(default)
    for key, value in override.items():
        if key in _NESTED_MERGE_KEYS and isinstance(value, dict) and isinstance(merged.get(key), dict):
            nested = dict(merged[key])
            for sub_key, sub_value in value.items():
                if sub_key == "item_filter" and isinstance(sub_value, dict) and isinstance(
                    nested.get("item_filter"), dict
                ):
                    nested["item_filter"] = {**nested["item_filter"], **sub_value}
                else:
                    nested[sub_key] = sub_value
            merged[key] = nested
        else:
            merged[key] = value
    return merged


def _parse_raw(raw: Any, source: str) -> Any:
    if isinstance(raw, str):
        if not raw.strip():
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON: {e}", source=source) from e
    return raw


def _default_trackers() -> list[TrackerDefinition]:
    return [TrackerDefinition.model_validate(entry) for entry in DEFAULT_TRACKER_CONFIGS]


def load_tracker_definitions(raw: Any = None, source: str = "trackers") -> list[TrackerDefinition]:
    """Merge user tracker configuration over the built-in defaults.

    Args:
        raw: None, a JSON string, or an already parsed list of tracker dicts.
        source: Label used in log messages.

    Returns:
        Validated tracker definitions, defaults first in their original order,
        followed by any user trackers with new ids. Never raises.
    """
    try:
        parsed = _parse_raw(raw, source)
        if parsed is None:
            return _default_trackers()
        if not isinstance(parsed, list):
            raise ConfigurationError(
                f"Tracker configuration must be a list, got {type(parsed).__name__}",
                source=source,
            )
    except ConfigurationError as e:
        logger.warning(f"Falling back to default trackers ({e.source}): {e}")
        return _default_trackers()

    defaults = {entry["id"]: entry for entry in DEFAULT_TRACKER_CONFIGS}
    overrides: dict[str, dict[str, Any]] = {}
    extra_order: list[str] = []
    for index, entry in enumerate(parsed):
        if not isinstance(entry, dict) or not entry.get("id"):
            logger.warning(f"Ignoring tracker entry {index} in {source}: missing id")
            continue
        normalized = _normalize_tracker(entry)
        tracker_id = str(normalized["id"])
        if tracker_id not in defaults and tracker_id not in overrides:
            extra_order.append(tracker_id)
        overrides[tracker_id] = normalized

    trackers: list[TrackerDefinition] = []
    for tracker_id in [*defaults.keys(), *extra_order]:
        base = defaults.get(tracker_id, {})
        override = overrides.get(tracker_id)
        merged = _merge_tracker(base, override) if override else base
        try:
            trackers.append(TrackerDefinition.model_validate(merged))
        except ValidationError as e:
            if tracker_id in defaults:
                logger.warning(
                    f"Invalid override for tracker '{tracker_id}' in {source}, using default: "
                    f"{e.error_count()} error(s)"
                )
                trackers.append(TrackerDefinition.model_validate(base))
            else:
                logger.warning(
                    f"Dropping invalid tracker '{tracker_id}' from {source}: {e.error_count()} error(s)"
                )
    return trackers


def load_consumption_settings(raw: Any = None, source: str = "consumption") -> ConsumptionCalcSettings:
    """Build consumption settings, filling unspecified fields with defaults.

    Never raises; malformed input yields the default settings.
    """
    try:
        parsed = _parse_raw(raw, source)
        if parsed is None:
            return ConsumptionCalcSettings()
        if not isinstance(parsed, dict):
            raise ConfigurationError(
                f"Consumption settings must be an object, got {type(parsed).__name__}",
                source=source,
            )
        return ConsumptionCalcSettings.model_validate(parsed)
    except ValidationError as e:
        logger.warning(
            f"Falling back to default consumption settings ({source}): {e.error_count()} error(s)"
        )
    except ConfigurationError as e:
        logger.warning(f"Falling back to default consumption settings ({e.source}): {e}")
    return ConsumptionCalcSettings()


def _read_file(path: str | None) -> str | None:
    if not path:
        return None
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError as e:
        logger.warning(f"Could not read configuration file {path}: {e}")
        return None


@dataclass(frozen=True)
class ConfigSnapshot:
    """Immutable bundle of everything the engines need to know."""

    trackers: tuple[TrackerDefinition, ...]
    calc: ConsumptionCalcSettings = field(default_factory=ConsumptionCalcSettings)
    update_interval_hours: float = 4.0
    affects_npcs: bool = False

    @property
    def interval_seconds(self) -> float:
        return self.update_interval_hours * 3600

    @property
    def enabled_trackers(self) -> list[TrackerDefinition]:
        return [t for t in self.trackers if t.enabled]

    def tracker(self, tracker_id: str) -> TrackerDefinition | None:
        """Look up a tracker definition by id, enabled or not."""
        return next((t for t in self.trackers if t.id == tracker_id), None)

    def coupling_rules_from(self, source_id: str) -> list[tuple[TrackerDefinition, CouplingRule]]:
        """Enabled trackers that rise when `source_id` decreases."""
        return [
            (t, t.decrease_when_other_tracker_decreases)
            for t in self.enabled_trackers
            if t.decrease_when_other_tracker_decreases is not None
            and t.decrease_when_other_tracker_decreases.source_tracker_id == source_id
        ]

    @classmethod
    def defaults(cls, **kwargs: Any) -> "ConfigSnapshot":
        """Snapshot built purely from the built-in defaults."""
        return cls(trackers=tuple(_default_trackers()), **kwargs)


def load_config_snapshot(settings: Settings) -> ConfigSnapshot:
    """Build a snapshot from the files referenced by settings."""
    trackers = load_tracker_definitions(
        _read_file(settings.tracker_config_path),
        source=settings.tracker_config_path or "defaults",
    )
    calc = load_consumption_settings(
        _read_file(settings.consumption_config_path),
        source=settings.consumption_config_path or "defaults",
    )
    snapshot = ConfigSnapshot(
        trackers=tuple(trackers),
        calc=calc,
        update_interval_hours=settings.update_interval_hours,
        affects_npcs=settings.affects_npcs,
    )
    logger.debug(
        f"Loaded config snapshot: {len(snapshot.enabled_trackers)} enabled tracker(s), "
        f"interval {snapshot.update_interval_hours}h"
    )
    return snapshot
