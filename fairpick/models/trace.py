"""Per-candidate audit records."""

from __future__ import annotations

from dataclasses import dataclass, field

from .candidate import CandidateSnapshot

REASON_ELIGIBLE = "eligible"
REASON_EXCLUDED_BY_STATUS = "excluded_by_status"
REASON_EXCLUDED_BY_MANUAL = "excluded_by_manual"
REASON_EXCLUDED_BY_COOLDOWN = "excluded_by_cooldown"
REASON_WEIGHTED = "weighted"
REASON_STRATEGY_ADJUSTED = "strategy_adjusted"
REASON_FALLBACK_RANDOM = "fallback_random"
REASON_BALANCE_TARGET_BOOST = "balance_target_boost"
REASON_STAGE_FAIRNESS_BOOST = "stage_fairness_boost"
REASON_PRIORITY_UNPICKED = "priority_unpicked"
REASON_FALLBACK_RELAXED = "fallback_relaxed_constraints"

REASON_CODES = frozenset(
    {
        REASON_ELIGIBLE,
        REASON_EXCLUDED_BY_STATUS,
        REASON_EXCLUDED_BY_MANUAL,
        REASON_EXCLUDED_BY_COOLDOWN,
        REASON_WEIGHTED,
        REASON_STRATEGY_ADJUSTED,
        REASON_FALLBACK_RANDOM,
        REASON_BALANCE_TARGET_BOOST,
        REASON_STAGE_FAIRNESS_BOOST,
        REASON_PRIORITY_UNPICKED,
        REASON_FALLBACK_RELAXED,
    }
)


@dataclass
class SelectionTrace:
    """Explains why a candidate was included, excluded or weighted.

    ``reasons`` keeps insertion order and never holds a code twice. An
    ineligible trace always carries ``final_weight == 0``.
    """

    candidate_id: str
    base_weight: float
    final_weight: float
    eligible: bool = True
    reasons: list[str] = field(default_factory=lambda: [REASON_ELIGIBLE])

    @classmethod
    def for_candidate(cls, candidate: CandidateSnapshot) -> "SelectionTrace":
        base = candidate.base_weight
        return cls(candidate_id=candidate.id, base_weight=base, final_weight=base)

    def add_reason(self, reason: str) -> None:
        if reason not in REASON_CODES:
            raise ValueError(f"Unknown selection reason code '{reason}'")
        if reason not in self.reasons:
            self.reasons.append(reason)

    def exclude(self, reason: str) -> None:
        """Mark the candidate ineligible and record ``reason``."""
        self.add_reason(reason)
        self.eligible = False
        self.final_weight = 0.0

    def restore(self, reason: str) -> None:
        """Make a previously excluded candidate eligible again."""
        self.add_reason(reason)
        self.eligible = True
        self.final_weight = self.base_weight

    def to_json(self) -> dict:
        return {
            "studentId": self.candidate_id,
            "baseWeight": self.base_weight,
            "finalWeight": self.final_weight,
            "eligible": self.eligible,
            "reasons": list(self.reasons),
        }


__all__ = [
    "REASON_BALANCE_TARGET_BOOST",
    "REASON_CODES",
    "REASON_ELIGIBLE",
    "REASON_EXCLUDED_BY_COOLDOWN",
    "REASON_EXCLUDED_BY_MANUAL",
    "REASON_EXCLUDED_BY_STATUS",
    "REASON_FALLBACK_RANDOM",
    "REASON_FALLBACK_RELAXED",
    "REASON_PRIORITY_UNPICKED",
    "REASON_STAGE_FAIRNESS_BOOST",
    "REASON_STRATEGY_ADJUSTED",
    "REASON_WEIGHTED",
    "SelectionTrace",
]
