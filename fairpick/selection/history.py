"""Lookback windows over a class's draw history."""

from __future__ import annotations

from collections import Counter
from itertools import combinations
from typing import Iterable, Sequence

from ..models import HistoricalPickRecord

PairKey = tuple[str, str]


def recent_records(
    history: Iterable[HistoricalPickRecord],
    class_id: str,
    rounds: int,
) -> list[HistoricalPickRecord]:
    """Return the ``rounds`` most recent records of ``class_id``, newest first.

    Records are ordered by their ISO 8601 ``timestamp`` string; ties keep the
    input order.
    """
    if rounds <= 0:
        return []
    scoped = [record for record in history if record.class_id == class_id]
    scoped.sort(key=lambda record: record.timestamp, reverse=True)
    return scoped[:rounds]


def recently_picked_ids(records: Sequence[HistoricalPickRecord]) -> set[str]:
    return {ref.id for record in records for ref in record.picked}


def recent_pick_counts(records: Sequence[HistoricalPickRecord]) -> Counter[str]:
    """Count, per candidate id, the records in ``records`` that picked it."""
    counts: Counter[str] = Counter()
    for record in records:
        counts.update(set(record.picked_ids))
    return counts


def pair_key(left: str, right: str) -> PairKey:
    return (left, right) if left <= right else (right, left)


def pair_counts(records: Sequence[HistoricalPickRecord]) -> Counter[PairKey]:
    """Count how often each unordered pair of ids appeared together.

    A record describing a group event contributes the pairs inside each of its
    groups; any other record contributes the pairs of its picked list.
    """
    counts: Counter[PairKey] = Counter()
    for record in records:
        clusters = record.groups or (tuple(record.picked_ids),)
        for cluster in clusters:
            members = sorted(set(cluster))
            for left, right in combinations(members, 2):
                counts[(left, right)] += 1
    return counts


__all__ = [
    "pair_counts",
    "pair_key",
    "recent_pick_counts",
    "recent_records",
    "recently_picked_ids",
]
