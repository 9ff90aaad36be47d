"""Point-in-time participant and history snapshots consumed by the engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from .utils import non_negative_int, optional_str

CANDIDATE_STATUSES = ("active", "absent", "excluded")


@dataclass(frozen=True)
class CandidateSnapshot:
    """Immutable view of a participant captured when a request is built.

    Attributes
    ----------
    id : str
        Identifier unique within the roster.
    name : str
        Display name.
    status : str
        One of ``"active"``, ``"absent"`` or ``"excluded"``. Only active
        candidates can be selected or grouped.
    weight : float
        Base draw weight. Falsy values are treated as ``1`` by the engine.
    pick_count : int
        Cumulative number of historical draws that picked this candidate.
    score : int
        Accumulated score; may be negative.
    student_id : Optional[str]
        Optional external identifier (e.g. a school roll number).
    class_id : str
        Identifier of the class the candidate belongs to.
    class_name : str
        Display name of that class.
    """

    id: str
    name: str
    status: str = "active"
    weight: float = 1.0
    pick_count: int = 0
    score: int = 0
    student_id: Optional[str] = None
    class_id: str = ""
    class_name: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id:
            raise TypeError("candidate id must be a non-empty string")
        if self.status not in CANDIDATE_STATUSES:
            raise ValueError(
                f"Unknown candidate status '{self.status}'; "
                f"expected one of {', '.join(CANDIDATE_STATUSES)}"
            )

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @property
    def base_weight(self) -> float:
        """Weight used before any strategy adjustment (``weight or 1``)."""
        return float(self.weight or 1)

    @classmethod
    def from_mapping(
        cls,
        data: Mapping[str, Any],
        *,
        class_id: str = "",
        class_name: str = "",
    ) -> "CandidateSnapshot":
        """Build a snapshot from a camelCase roster entry.

        ``classId``/``className`` inside ``data`` take precedence over the
        keyword arguments, which describe the roster the entry came from.
        """
        weight = data.get("weight")
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            status=str(data.get("status") or "active"),
            weight=float(weight) if weight is not None else 1.0,
            pick_count=non_negative_int(data.get("pickCount")),
            score=int(data.get("score") or 0),
            student_id=optional_str(data, "studentId"),
            class_id=str(data.get("classId") or class_id),
            class_name=str(data.get("className") or class_name),
        )

    def to_ref(self) -> "PickedCandidateRef":
        return PickedCandidateRef(id=self.id, name=self.name, student_id=self.student_id)

    def to_json(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "studentId": self.student_id,
            "status": self.status,
            "weight": self.weight,
            "pickCount": self.pick_count,
            "score": self.score,
            "classId": self.class_id,
            "className": self.class_name,
        }


@dataclass(frozen=True)
class PickedCandidateRef:
    """Reference to a participant as it was recorded in a past draw."""

    id: str
    name: str = ""
    student_id: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "PickedCandidateRef":
        return cls(
            id=str(data["id"]),
            name=str(data.get("name", "")),
            student_id=optional_str(data, "studentId"),
        )

    def to_json(self) -> dict:
        payload: dict = {"id": self.id, "name": self.name}
        if self.student_id is not None:
            payload["studentId"] = self.student_id
        return payload


@dataclass(frozen=True)
class HistoricalPickRecord:
    """One past draw event for a class.

    Attributes
    ----------
    id : str
        Identifier of the history record.
    timestamp : str
        ISO 8601 timestamp. Records are ordered by this string, so all
        timestamps must share one sortable format.
    class_id : str
        Class the draw belonged to.
    picked : tuple[PickedCandidateRef, ...]
        Participants picked in that draw.
    groups : tuple[tuple[str, ...], ...]
        Member ids per group when the record describes a group event. Empty
        for plain picks.
    """

    id: str
    timestamp: str
    class_id: str
    picked: tuple[PickedCandidateRef, ...] = ()
    groups: tuple[tuple[str, ...], ...] = field(default=())

    @property
    def picked_ids(self) -> list[str]:
        return [ref.id for ref in self.picked]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "HistoricalPickRecord":
        """Build a record from a stored camelCase history entry.

        ``groupSummary.groups[*].studentIds`` is carried over when present so
        grouping can avoid repeating past pairings.
        """
        picked = tuple(
            PickedCandidateRef.from_mapping(item)
            for item in data.get("pickedStudents") or ()
        )
        groups: tuple[tuple[str, ...], ...] = ()
        summary = data.get("groupSummary")
        if isinstance(summary, Mapping):
            groups = tuple(
                tuple(str(member) for member in group.get("studentIds") or ())
                for group in summary.get("groups") or ()
            )
        return cls(
            id=str(data.get("id", "")),
            timestamp=str(data.get("timestamp", "")),
            class_id=str(data.get("classId", "")),
            picked=picked,
            groups=groups,
        )


def snapshots_from_roster(
    students: Iterable[Mapping[str, Any]],
    *,
    class_id: str,
    class_name: str,
) -> list[CandidateSnapshot]:
    """Convert roster entries into snapshots tagged with their class."""
    return [
        CandidateSnapshot.from_mapping(student, class_id=class_id, class_name=class_name)
        for student in students
    ]


__all__ = [
    "CANDIDATE_STATUSES",
    "CandidateSnapshot",
    "HistoricalPickRecord",
    "PickedCandidateRef",
    "snapshots_from_roster",
]
