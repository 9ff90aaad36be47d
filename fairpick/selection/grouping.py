"""Partitioning of candidates into groups."""

from __future__ import annotations

from collections import Counter
import logging
from typing import Callable, Sequence, TypeVar

from ..models import CandidateSnapshot
from .history import PairKey, pair_key

logger = logging.getLogger(__name__)

PAIR_PENALTY = 100
SIZE_PENALTY = 10

T = TypeVar("T")


def fisher_yates(items: Sequence[T], rng: Callable[[], float]) -> list[T]:
    """Return a shuffled copy of ``items`` driven by ``rng``."""
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = min(int(rng() * (i + 1)), i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def random_groups(
    candidates: Sequence[CandidateSnapshot],
    group_count: int,
    rng: Callable[[], float],
) -> list[list[CandidateSnapshot]]:
    """Shuffle ``candidates`` and deal them round-robin into ``group_count`` groups."""
    groups: list[list[CandidateSnapshot]] = [[] for _ in range(group_count)]
    for index, candidate in enumerate(fisher_yates(candidates, rng)):
        groups[index % group_count].append(candidate)
    return groups


def order_by_score(
    candidates: Sequence[CandidateSnapshot],
    rng: Callable[[], float],
) -> list[CandidateSnapshot]:
    """Sort by score descending, then randomly swap adjacent equal-score pairs.

    The swap pass keeps tie order from being fixed by input order.
    """
    ordered = sorted(candidates, key=lambda candidate: candidate.score or 0, reverse=True)
    for i in range(len(ordered) - 1):
        if (ordered[i].score or 0) == (ordered[i + 1].score or 0) and rng() < 0.5:
            ordered[i], ordered[i + 1] = ordered[i + 1], ordered[i]
    return ordered


def group_cost(
    candidate: CandidateSnapshot,
    group: Sequence[CandidateSnapshot],
    pairs: Counter[PairKey],
) -> float:
    """Cost of adding ``candidate`` to ``group``.

    Sum of member scores, plus a heavy penalty for every recent pairing with a
    member, plus a light penalty per member.
    """
    score_total = sum(member.score or 0 for member in group)
    pair_penalty = sum(pairs.get(pair_key(candidate.id, member.id), 0) for member in group)
    return score_total + PAIR_PENALTY * pair_penalty + SIZE_PENALTY * len(group)


def balanced_score_groups(
    candidates: Sequence[CandidateSnapshot],
    group_count: int,
    pairs: Counter[PairKey],
    rng: Callable[[], float],
) -> list[list[CandidateSnapshot]]:
    """Greedily place each candidate, highest score first, into the cheapest group.

    Ties between groups go to the lowest group index.
    """
    groups: list[list[CandidateSnapshot]] = [[] for _ in range(group_count)]
    for candidate in order_by_score(candidates, rng):
        costs = [group_cost(candidate, group, pairs) for group in groups]
        target = costs.index(min(costs))
        groups[target].append(candidate)
    logger.debug(
        f"Balanced {len(candidates)} candidates into {group_count} groups; "
        f"score totals {[sum(m.score or 0 for m in g) for g in groups]}"
    )
    return groups


__all__ = [
    "PAIR_PENALTY",
    "SIZE_PENALTY",
    "balanced_score_groups",
    "fisher_yates",
    "group_cost",
    "order_by_score",
    "random_groups",
]
