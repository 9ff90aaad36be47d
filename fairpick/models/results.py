"""Result value objects returned by the selection engine."""

from __future__ import annotations

from dataclasses import dataclass, field

from .candidate import CandidateSnapshot
from .policy import SelectionPolicy
from .trace import SelectionTrace


@dataclass(frozen=True)
class PickMeta:
    """Metadata describing how a pick result was produced.

    Attributes
    ----------
    engine_version : str
        Version of the engine that produced the result.
    policy_snapshot : SelectionPolicy
        Policy in effect for the draw.
    requested_count : int
        Requested winner count, clamped at zero.
    actual_count : int
        Number of winners returned; never exceeds the eligible pool.
    generated_at : str
        ISO 8601 generation timestamp.
    fallback_notes : list[str]
        Human-readable notes for every relaxation applied; empty otherwise.
    """

    engine_version: str
    policy_snapshot: SelectionPolicy
    requested_count: int
    actual_count: int
    generated_at: str
    fallback_notes: list[str] = field(default_factory=list)

    def to_json(self) -> dict:
        return {
            "engineVersion": self.engine_version,
            "policySnapshot": self.policy_snapshot.to_json(),
            "requestedCount": self.requested_count,
            "actualCount": self.actual_count,
            "generatedAt": self.generated_at,
            "fallbackNotes": list(self.fallback_notes),
        }


@dataclass(frozen=True)
class PickResult:
    """Winners in selection order plus one trace per input candidate."""

    winners: list[CandidateSnapshot]
    traces: list[SelectionTrace]
    cooldown_excluded_ids: list[str]
    meta: PickMeta

    def to_json(self) -> dict:
        return {
            "winners": [winner.to_json() for winner in self.winners],
            "traces": [trace.to_json() for trace in self.traces],
            "cooldownExcludedIds": list(self.cooldown_excluded_ids),
            "meta": self.meta.to_json(),
        }


@dataclass(frozen=True)
class GroupMeta:
    engine_version: str
    group_count: int
    generated_at: str

    def to_json(self) -> dict:
        return {
            "engineVersion": self.engine_version,
            "groupCount": self.group_count,
            "generatedAt": self.generated_at,
        }


@dataclass(frozen=True)
class GroupResult:
    """Groups of candidates (some possibly empty) and per-candidate traces."""

    groups: list[list[CandidateSnapshot]]
    traces: list[SelectionTrace]
    meta: GroupMeta

    @property
    def member_count(self) -> int:
        return sum(len(group) for group in self.groups)

    def to_json(self) -> dict:
        return {
            "groups": [[member.to_json() for member in group] for group in self.groups],
            "traces": [trace.to_json() for trace in self.traces],
            "meta": self.meta.to_json(),
        }


__all__ = ["GroupMeta", "GroupResult", "PickMeta", "PickResult"]
