"""Weighted and uniform sampling without replacement."""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Sequence

from ..models import CandidateSnapshot, SelectionTrace
from ..models.trace import REASON_PRIORITY_UNPICKED

logger = logging.getLogger(__name__)


def weighted_choice(
    candidates: Sequence[CandidateSnapshot],
    weights: Mapping[str, float],
    rng: Callable[[], float],
) -> CandidateSnapshot:
    """Pick one candidate with probability proportional to its weight.

    A uniform value in ``[0, total)`` is reduced by each weight in list order;
    the first candidate driving it below zero wins. The last candidate is
    returned if floating-point drift prevents an earlier match.
    """
    total = sum(weights[candidate.id] for candidate in candidates)
    remainder = rng() * total
    for candidate in candidates:
        remainder -= weights[candidate.id]
        if remainder < 0:
            return candidate
    return candidates[-1]


def uniform_choice(
    candidates: Sequence[CandidateSnapshot],
    rng: Callable[[], float],
) -> CandidateSnapshot:
    index = min(int(rng() * len(candidates)), len(candidates) - 1)
    return candidates[index]


def draw_winners(
    eligible: Sequence[CandidateSnapshot],
    weights: Mapping[str, float],
    count: int,
    *,
    weighted: bool,
    prioritize_unpicked: int,
    rng: Callable[[], float],
    traces: dict[str, SelectionTrace],
) -> list[CandidateSnapshot]:
    """Draw up to ``count`` distinct winners from ``eligible``.

    Up to ``prioritize_unpicked`` winners are first drawn only from candidates
    with ``pick_count == 0``; the rest come from the whole remaining pool.
    Every winner is removed from the pool as soon as it is picked.

    Parameters
    ----------
    eligible : Sequence[CandidateSnapshot]
        Candidates that survived the eligibility pipeline.
    weights : Mapping[str, float]
        Final weights keyed by candidate id; ignored when ``weighted`` is false.
    count : int
        Requested winners; clamped to ``[0, len(eligible)]``.
    weighted : bool
        Draw proportionally to weight instead of uniformly.
    prioritize_unpicked : int
        Number of winners reserved for never-picked candidates.
    rng : Callable[[], float]
        Randomness source returning floats in ``[0, 1)``.
    traces : dict[str, SelectionTrace]
        Traces keyed by candidate id; priority winners are tagged.

    Returns
    -------
    list[CandidateSnapshot]
        Winners in selection order.
    """
    target = max(0, min(count, len(eligible)))
    remaining = list(eligible)
    winners: list[CandidateSnapshot] = []

    def pick_from(pool: Sequence[CandidateSnapshot]) -> CandidateSnapshot:
        if weighted:
            return weighted_choice(pool, weights, rng)
        return uniform_choice(pool, rng)

    def take(winner: CandidateSnapshot) -> None:
        winners.append(winner)
        remaining.remove(winner)

    reserved = min(max(0, prioritize_unpicked), target)
    for _ in range(reserved):
        never_picked = [c for c in remaining if (c.pick_count or 0) == 0]
        if not never_picked:
            break
        winner = pick_from(never_picked)
        traces[winner.id].add_reason(REASON_PRIORITY_UNPICKED)
        take(winner)

    while len(winners) < target and remaining:
        take(pick_from(remaining))

    logger.debug(
        f"Drew {len(winners)} of {len(eligible)} eligible candidates "
        f"({'weighted' if weighted else 'uniform'})"
    )
    return winners


__all__ = ["draw_winners", "uniform_choice", "weighted_choice"]
