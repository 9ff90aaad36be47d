"""Workflows bridging stored roster/history data and the selection engine."""

from typing import Any, Iterable, Mapping, Optional, Union

from .models import (
    GroupRequest,
    GroupResult,
    HistoricalPickRecord,
    PickRequest,
    PickResult,
    RandomSource,
    SelectionPolicy,
    snapshots_from_roster,
)
from .selection.engine import SelectionEngine

PolicyInput = Union[SelectionPolicy, Mapping[str, Any]]


def _coerce_policy(policy: PolicyInput) -> SelectionPolicy:
    if isinstance(policy, SelectionPolicy):
        return policy
    return SelectionPolicy.from_mapping(policy)


def _coerce_history(
    history: Iterable[Union[HistoricalPickRecord, Mapping[str, Any]]],
) -> list[HistoricalPickRecord]:
    return [
        record
        if isinstance(record, HistoricalPickRecord)
        else HistoricalPickRecord.from_mapping(record)
        for record in history
    ]


def build_pick_request(
    class_group: Mapping[str, Any],
    history: Iterable[Union[HistoricalPickRecord, Mapping[str, Any]]],
    policy: PolicyInput,
    count: int,
    *,
    manual_excluded_ids: Optional[Iterable[str]] = None,
    now: Optional[str] = None,
    rng: Optional[RandomSource] = None,
) -> PickRequest:
    """Build a :class:`PickRequest` from a stored class and its history.

    Parameters
    ----------
    class_group : Mapping[str, Any]
        Stored class with ``id``, ``name`` and a ``students`` list of
        camelCase roster entries.
    history : Iterable[HistoricalPickRecord | Mapping[str, Any]]
        Past draws, either as records or as stored camelCase mappings.
    policy : SelectionPolicy | Mapping[str, Any]
        Policy, or a partial ``fairness`` settings mapping merged over the
        defaults.
    count : int
        Number of winners requested.
    manual_excluded_ids : Optional[Iterable[str]], default: None
        Ids to bar for this draw only. Overrides the policy's own list.
    now : Optional[str], default: None
        Generation timestamp override.
    rng : Optional[RandomSource], default: None
        Randomness source override.
    """
    class_id = str(class_group["id"])
    class_name = str(class_group.get("name", ""))
    resolved_policy = _coerce_policy(policy)
    if manual_excluded_ids is not None:
        resolved_policy = resolved_policy.with_manual_exclusions(manual_excluded_ids)
    return PickRequest(
        class_id=class_id,
        class_name=class_name,
        candidates=snapshots_from_roster(
            class_group.get("students") or (), class_id=class_id, class_name=class_name
        ),
        history=_coerce_history(history),
        count=count,
        policy=resolved_policy,
        now=now,
        rng=rng,
    )


def build_group_request(
    class_group: Mapping[str, Any],
    history: Iterable[Union[HistoricalPickRecord, Mapping[str, Any]]],
    policy: PolicyInput,
    group_count: int,
    *,
    now: Optional[str] = None,
    rng: Optional[RandomSource] = None,
) -> GroupRequest:
    """Build a :class:`GroupRequest` from a stored class and its history."""
    class_id = str(class_group["id"])
    class_name = str(class_group.get("name", ""))
    return GroupRequest(
        class_id=class_id,
        class_name=class_name,
        candidates=snapshots_from_roster(
            class_group.get("students") or (), class_id=class_id, class_name=class_name
        ),
        history=_coerce_history(history),
        group_count=group_count,
        policy=_coerce_policy(policy),
        now=now,
        rng=rng,
    )


def run_pick(
    engine: SelectionEngine,
    class_group: Mapping[str, Any],
    history: Iterable[Union[HistoricalPickRecord, Mapping[str, Any]]],
    policy: PolicyInput,
    count: int,
    **options: Any,
) -> PickResult:
    """Build a pick request and run it through ``engine``.

    Keyword ``options`` are forwarded to :func:`build_pick_request`.
    """
    return engine.pick(build_pick_request(class_group, history, policy, count, **options))


def run_group(
    engine: SelectionEngine,
    class_group: Mapping[str, Any],
    history: Iterable[Union[HistoricalPickRecord, Mapping[str, Any]]],
    policy: PolicyInput,
    group_count: int,
    **options: Any,
) -> GroupResult:
    return engine.group(
        build_group_request(class_group, history, policy, group_count, **options)
    )


def build_winner_explanations(result: PickResult) -> list[dict]:
    """Explain each winner of ``result`` in selection order.

    ``estimatedProbability`` is the winner's final weight over the summed final
    weights of every eligible candidate, i.e. its chance on the first draw.
    """
    traces = {trace.candidate_id: trace for trace in result.traces}
    total_weight = sum(
        trace.final_weight or 1 for trace in result.traces if trace.eligible
    )
    explanations = []
    for winner in result.winners:
        trace = traces[winner.id]
        final_weight = trace.final_weight or winner.base_weight
        explanations.append(
            {
                "id": winner.id,
                "name": winner.name,
                "baseWeight": trace.base_weight or winner.base_weight,
                "finalWeight": final_weight,
                "estimatedProbability": (
                    final_weight / total_weight if total_weight > 0 else 0
                ),
                "reasons": list(trace.reasons),
            }
        )
    return explanations


def build_history_selection_meta(result: PickResult) -> dict:
    """Return the ``selectionMeta`` mapping stored with a pick history record."""
    meta = result.meta.to_json()
    meta["cooldownExcludedIds"] = list(result.cooldown_excluded_ids)
    meta["winnerExplanations"] = build_winner_explanations(result)
    return meta


def build_pick_history_record(
    result: PickResult,
    *,
    record_id: str,
    class_id: str,
    class_name: str,
) -> dict:
    """Return a camelCase history record describing ``result``.

    The record can be persisted as-is and later fed back through
    :meth:`HistoricalPickRecord.from_mapping`.
    """
    return {
        "id": record_id,
        "timestamp": result.meta.generated_at,
        "eventType": "pick",
        "classId": class_id,
        "className": class_name,
        "pickedStudents": [winner.to_ref().to_json() for winner in result.winners],
        "selectionMeta": build_history_selection_meta(result),
    }


def build_group_summary(result: GroupResult) -> dict:
    """Return the ``groupSummary`` mapping stored with a group history record."""
    return {
        "groupCount": result.meta.group_count,
        "groups": [
            {
                "groupIndex": index,
                "studentIds": [member.id for member in group],
                "studentNames": [member.name for member in group],
            }
            for index, group in enumerate(result.groups)
        ],
    }


def build_group_history_record(
    result: GroupResult,
    *,
    record_id: str,
    class_id: str,
    class_name: str,
) -> dict:
    """Return a camelCase history record for a group event.

    Every grouped member is listed in ``pickedStudents``; the per-group split
    lives in ``groupSummary`` so later groupings can avoid repeated pairs.
    """
    return {
        "id": record_id,
        "timestamp": result.meta.generated_at,
        "eventType": "group",
        "classId": class_id,
        "className": class_name,
        "pickedStudents": [
            member.to_ref().to_json() for group in result.groups for member in group
        ],
        "groupSummary": build_group_summary(result),
    }


__all__ = [
    "build_group_history_record",
    "build_group_request",
    "build_group_summary",
    "build_history_selection_meta",
    "build_pick_history_record",
    "build_pick_request",
    "build_winner_explanations",
    "run_group",
    "run_pick",
]
