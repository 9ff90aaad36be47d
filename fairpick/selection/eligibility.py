"""Filter stages deciding which candidates may take part in a draw."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Sequence

from ..models import CandidateSnapshot, HistoricalPickRecord, SelectionPolicy, SelectionTrace
from ..models.trace import (
    REASON_EXCLUDED_BY_COOLDOWN,
    REASON_EXCLUDED_BY_MANUAL,
    REASON_EXCLUDED_BY_STATUS,
    REASON_FALLBACK_RELAXED,
)
from .history import recent_records, recently_picked_ids

logger = logging.getLogger(__name__)


@dataclass
class EligibilityOutcome:
    """Result of running the eligibility pipeline.

    Attributes
    ----------
    eligible : list[CandidateSnapshot]
        Candidates that may be drawn, in input order.
    cooldown_excluded_ids : list[str]
        Ids removed by the cooldown stage; empty when the stage was a no-op.
    fallback_notes : list[str]
        Human-readable notes for each relaxation applied.
    """

    eligible: list[CandidateSnapshot]
    cooldown_excluded_ids: list[str] = field(default_factory=list)
    fallback_notes: list[str] = field(default_factory=list)


def filter_by_status(
    candidates: Sequence[CandidateSnapshot],
    traces: dict[str, SelectionTrace],
) -> list[CandidateSnapshot]:
    """Keep active candidates; mark the others ``excluded_by_status``."""
    active = []
    for candidate in candidates:
        if candidate.is_active:
            active.append(candidate)
        else:
            traces[candidate.id].exclude(REASON_EXCLUDED_BY_STATUS)
    return active


def filter_by_manual_exclusion(
    candidates: Sequence[CandidateSnapshot],
    excluded_ids: Sequence[str],
    traces: dict[str, SelectionTrace],
) -> list[CandidateSnapshot]:
    """Drop candidates temporarily barred for this draw."""
    if not excluded_ids:
        return list(candidates)
    barred = set(excluded_ids)
    kept = []
    for candidate in candidates:
        if candidate.id in barred:
            traces[candidate.id].exclude(REASON_EXCLUDED_BY_MANUAL)
        else:
            kept.append(candidate)
    return kept


def filter_by_cooldown(
    candidates: Sequence[CandidateSnapshot],
    policy: SelectionPolicy,
    history: Sequence[HistoricalPickRecord],
    class_id: str,
    traces: dict[str, SelectionTrace],
) -> tuple[list[CandidateSnapshot], list[str]]:
    """Bar candidates picked in the last ``cooldown_rounds`` draws of the class.

    The stage is skipped entirely when it would leave nobody eligible, so
    cooldown can never starve the pool.

    Returns
    -------
    tuple[list[CandidateSnapshot], list[str]]
        The surviving candidates and the ids excluded by this stage.
    """
    if not policy.cooldown_active:
        return list(candidates), []

    records = recent_records(history, class_id, policy.cooldown_rounds)
    recently_picked = recently_picked_ids(records)
    available = [c for c in candidates if c.id not in recently_picked]
    excluded_ids = [c.id for c in candidates if c.id in recently_picked]

    if not available:
        logger.debug(
            f"Cooldown would exclude all {len(candidates)} candidates; stage skipped"
        )
        return list(candidates), []

    for candidate_id in excluded_ids:
        traces[candidate_id].exclude(REASON_EXCLUDED_BY_COOLDOWN)
    return available, excluded_ids


def run_eligibility_pipeline(
    candidates: Sequence[CandidateSnapshot],
    policy: SelectionPolicy,
    history: Sequence[HistoricalPickRecord],
    class_id: str,
    traces: dict[str, SelectionTrace],
) -> EligibilityOutcome:
    """Run the status, manual-exclusion and cooldown stages in order.

    When the manual-exclusion stage empties the pool and
    ``auto_relax_on_conflict`` is set, the exclusions are relaxed back to
    every active candidate and a fallback note is recorded. The pipeline
    therefore returns an empty set only if no active candidate exists, or if
    relaxation is disabled and manual exclusions bar everyone.

    Parameters
    ----------
    candidates : Sequence[CandidateSnapshot]
        All candidates of the request.
    policy : SelectionPolicy
        Policy supplying manual exclusions, cooldown and relaxation options.
    history : Sequence[HistoricalPickRecord]
        Past draws, in any order.
    class_id : str
        Class whose history is consulted.
    traces : dict[str, SelectionTrace]
        Traces keyed by candidate id; annotated in place.
    """
    notes: list[str] = []
    active = filter_by_status(candidates, traces)
    eligible = filter_by_manual_exclusion(active, policy.manual_excluded_ids, traces)

    if not eligible and active and policy.auto_relax_on_conflict:
        for candidate in active:
            traces[candidate.id].restore(REASON_FALLBACK_RELAXED)
        note = (
            f"Manual exclusions removed all {len(active)} active candidates; "
            "relaxed to every active candidate."
        )
        notes.append(note)
        logger.info(note)
        eligible = list(active)

    eligible, cooldown_excluded_ids = filter_by_cooldown(
        eligible, policy, history, class_id, traces
    )
    logger.debug(
        f"Eligibility: {len(candidates)} candidates, {len(active)} active, "
        f"{len(eligible)} eligible, {len(cooldown_excluded_ids)} in cooldown"
    )
    return EligibilityOutcome(
        eligible=eligible,
        cooldown_excluded_ids=cooldown_excluded_ids,
        fallback_notes=notes,
    )


__all__ = [
    "EligibilityOutcome",
    "filter_by_cooldown",
    "filter_by_manual_exclusion",
    "filter_by_status",
    "run_eligibility_pipeline",
]
