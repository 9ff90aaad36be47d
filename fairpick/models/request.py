"""Request value objects accepted by :class:`~fairpick.selection.engine.SelectionEngine`."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from .candidate import CandidateSnapshot, HistoricalPickRecord
from .policy import SelectionPolicy

RandomSource = Callable[[], float]
"""Callable returning a float in ``[0, 1)``."""


def _require_unique_ids(candidates: Sequence[CandidateSnapshot]) -> None:
    """Raise :class:`ValueError` if two candidates share an id.

    Traces are keyed by candidate id, so duplicates cannot be audited.
    """
    seen: set[str] = set()
    for candidate in candidates:
        if candidate.id in seen:
            raise ValueError(f"Duplicate candidate id '{candidate.id}' in request")
        seen.add(candidate.id)


@dataclass(frozen=True)
class PickRequest:
    """Ask the engine to select ``count`` winners from ``candidates``.

    ``now`` overrides the generation timestamp and ``rng`` the randomness
    source; both exist so that results can be reproduced exactly.
    """

    class_id: str
    class_name: str
    candidates: Sequence[CandidateSnapshot]
    count: int
    policy: SelectionPolicy = field(default_factory=SelectionPolicy)
    history: Sequence[HistoricalPickRecord] = ()
    now: Optional[str] = None
    rng: Optional[RandomSource] = None

    mode = "pick"

    def __post_init__(self) -> None:
        _require_unique_ids(self.candidates)


@dataclass(frozen=True)
class GroupRequest:
    """Ask the engine to partition active candidates into ``group_count`` groups."""

    class_id: str
    class_name: str
    candidates: Sequence[CandidateSnapshot]
    group_count: int
    policy: SelectionPolicy = field(default_factory=SelectionPolicy)
    history: Sequence[HistoricalPickRecord] = ()
    now: Optional[str] = None
    rng: Optional[RandomSource] = None

    mode = "group"

    def __post_init__(self) -> None:
        _require_unique_ids(self.candidates)


__all__ = ["GroupRequest", "PickRequest", "RandomSource"]
