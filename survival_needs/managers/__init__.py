"""Needs engines: accrual, consumption, adjustment, lifecycle and reconciliation."""

from survival_needs.managers.accrual import IntervalAccrualEngine
from survival_needs.managers.adjuster import ActionOutcome, NeedsAdjuster
from survival_needs.managers.base import BaseManager, round_half_up
from survival_needs.managers.consumption import (
    ConsumptionCalculator,
    ConsumptionResult,
    ItemPortion,
    TrackerDelta,
)
from survival_needs.managers.lifecycle import NeedsLifecycle
from survival_needs.managers.needs_state import NeedsState, TrackerReading
from survival_needs.managers.reconciler import (
    EffectReconciler,
    ReconcileResult,
    effect_slug,
    resolve_threshold,
)

__all__ = [
    "ActionOutcome",
    "BaseManager",
    "ConsumptionCalculator",
    "ConsumptionResult",
    "EffectReconciler",
    "IntervalAccrualEngine",
    "ItemPortion",
    "NeedsAdjuster",
    "NeedsLifecycle",
    "NeedsState",
    "ReconcileResult",
    "TrackerDelta",
    "TrackerReading",
    "effect_slug",
    "resolve_threshold",
    "round_half_up",
]
