from .candidate import (
    CANDIDATE_STATUSES,
    CandidateSnapshot,
    HistoricalPickRecord,
    PickedCandidateRef,
    snapshots_from_roster,
)
from .policy import ACTIVITY_PRESETS, GROUP_STRATEGIES, SelectionPolicy
from .request import GroupRequest, PickRequest, RandomSource
from .results import GroupMeta, GroupResult, PickMeta, PickResult
from .trace import REASON_CODES, SelectionTrace
from .utils import utc_now_iso

__all__ = [
    "ACTIVITY_PRESETS",
    "CANDIDATE_STATUSES",
    "CandidateSnapshot",
    "GROUP_STRATEGIES",
    "GroupMeta",
    "GroupRequest",
    "GroupResult",
    "HistoricalPickRecord",
    "PickMeta",
    "PickRequest",
    "PickResult",
    "PickedCandidateRef",
    "REASON_CODES",
    "RandomSource",
    "SelectionPolicy",
    "SelectionTrace",
    "snapshots_from_roster",
    "utc_now_iso",
]
