"""Conversion of base weights into final draw weights."""

from __future__ import annotations

import logging
from typing import Sequence

from ..models import CandidateSnapshot, HistoricalPickRecord, SelectionPolicy, SelectionTrace
from ..models.trace import (
    REASON_BALANCE_TARGET_BOOST,
    REASON_FALLBACK_RANDOM,
    REASON_STAGE_FAIRNESS_BOOST,
    REASON_STRATEGY_ADJUSTED,
    REASON_WEIGHTED,
)
from .history import recent_pick_counts, recent_records
from .strategies import CLASSIC_STRATEGY_ID, StrategyRegistry

logger = logging.getLogger(__name__)

MIN_DRAW_WEIGHT = 0.1
BALANCE_DECAY = 0.25
STAGE_FAIRNESS_DECAY = 0.4


def balance_factor(pick_count: int) -> float:
    """Damping applied by ``balance_by_term`` for a cumulative pick count."""
    return 1 / (1 + max(0, pick_count or 0) * BALANCE_DECAY)


def stage_fairness_factor(recent_count: int) -> float:
    """Damping applied by ``stage_fairness_rounds`` for a recent pick count."""
    return 1 / (1 + recent_count * STAGE_FAIRNESS_DECAY)


def assign_weights(
    eligible: Sequence[CandidateSnapshot],
    policy: SelectionPolicy,
    history: Sequence[HistoricalPickRecord],
    class_id: str,
    registry: StrategyRegistry,
    traces: dict[str, SelectionTrace],
) -> dict[str, float]:
    """Compute the final draw weight of every eligible candidate.

    The resolved strategy adjusts the base weight, then the optional
    term-balance and stage-fairness dampers apply. The result is floored at
    :data:`MIN_DRAW_WEIGHT` so no eligible candidate becomes unselectable.
    Traces are updated with both weights and the matching reason codes.

    Returns
    -------
    dict[str, float]
        Final weight keyed by candidate id.
    """
    strategy = registry.resolve(policy.strategy_preset)
    recent_counts = recent_pick_counts(
        recent_records(history, class_id, policy.stage_fairness_rounds)
    )

    weights: dict[str, float] = {}
    for candidate in eligible:
        trace = traces[candidate.id]
        base_weight = candidate.base_weight
        final_weight = strategy.adjust(candidate, base_weight)

        if policy.balance_by_term:
            final_weight *= balance_factor(candidate.pick_count)
            trace.add_reason(REASON_BALANCE_TARGET_BOOST)

        recent_count = recent_counts.get(candidate.id, 0)
        if recent_count > 0:
            final_weight *= stage_fairness_factor(recent_count)
            trace.add_reason(REASON_STAGE_FAIRNESS_BOOST)

        final_weight = max(MIN_DRAW_WEIGHT, final_weight)

        if policy.weighted_random:
            trace.add_reason(REASON_WEIGHTED)
            if strategy.id != CLASSIC_STRATEGY_ID:
                trace.add_reason(REASON_STRATEGY_ADJUSTED)
        else:
            trace.add_reason(REASON_FALLBACK_RANDOM)

        trace.base_weight = base_weight
        trace.final_weight = final_weight
        weights[candidate.id] = final_weight

    logger.debug(
        f"Weighted {len(weights)} candidates with strategy '{strategy.id}'"
    )
    return weights


__all__ = [
    "BALANCE_DECAY",
    "MIN_DRAW_WEIGHT",
    "STAGE_FAIRNESS_DECAY",
    "assign_weights",
    "balance_factor",
    "stage_fairness_factor",
]
