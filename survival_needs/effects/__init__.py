"""Condition catalog and effect building."""

from survival_needs.effects.conditions import BADGED_CONDITIONS, ConditionCatalog

__all__ = ["BADGED_CONDITIONS", "ConditionCatalog"]
