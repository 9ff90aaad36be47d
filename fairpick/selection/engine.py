"""Engine orchestrating eligibility, weighting, drawing and grouping."""

from __future__ import annotations

import logging
import random
import threading
from typing import Callable, Optional

from ..config import make_default_random
from ..models import (
    GroupMeta,
    GroupRequest,
    GroupResult,
    PickMeta,
    PickRequest,
    PickResult,
    SelectionTrace,
    utc_now_iso,
)
from .draw import draw_winners
from .eligibility import filter_by_status, run_eligibility_pipeline
from .grouping import balanced_score_groups, random_groups
from .history import pair_counts, recent_records
from .strategies import StrategyRegistry
from .weighting import assign_weights

logger = logging.getLogger(__name__)

ENGINE_VERSION = "1.0.0"

_shared_random: Optional[random.Random] = None
_shared_random_lock = threading.Lock()


def _default_rng() -> Callable[[], float]:
    global _shared_random
    with _shared_random_lock:
        if _shared_random is None:
            _shared_random = make_default_random()
        return _shared_random.random


class SelectionEngine:
    """Engine that picks winners and builds groups from candidate snapshots."""

    def __init__(
        self,
        registry: Optional[StrategyRegistry] = None,
        *,
        rng: Optional[Callable[[], float]] = None,
    ) -> None:
        """Create a selection engine.

        Parameters
        ----------
        registry : Optional[StrategyRegistry], default: None
            Registry resolving strategy presets. Pass the registry plugins
            were loaded into; when omitted a registry holding only the
            built-in strategies is created.
        rng : Optional[Callable[[], float]], default: None
            Randomness source used when a request does not carry one. Defaults
            to a shared pseudo-random generator, seeded from
            ``FAIRPICK_RANDOM_SEED`` when that is set.
        """
        self._registry = registry if registry is not None else StrategyRegistry()
        self._rng = rng or _default_rng()

    @property
    def registry(self) -> StrategyRegistry:
        return self._registry

    def pick(self, request: PickRequest) -> PickResult:
        """Select winners for ``request``.

        Notes
        -----
        The pick runs the following steps:

        1. Filter candidates by status, manual exclusion and cooldown,
           relaxing constraints when the policy allows and the pool is empty.
        2. Assign each eligible candidate its final draw weight.
        3. Draw winners without replacement, reserving slots for never-picked
           candidates when configured.

        Out-of-range counts are clamped and empty pools yield empty results;
        nothing in this path raises for data-shape problems.
        """
        rng = request.rng or self._rng
        policy = request.policy
        traces = [SelectionTrace.for_candidate(c) for c in request.candidates]
        by_id = {trace.candidate_id: trace for trace in traces}

        outcome = run_eligibility_pipeline(
            request.candidates, policy, request.history, request.class_id, by_id
        )
        weights = assign_weights(
            outcome.eligible,
            policy,
            request.history,
            request.class_id,
            self._registry,
            by_id,
        )

        requested_count = max(0, request.count)
        winners = draw_winners(
            outcome.eligible,
            weights,
            requested_count,
            weighted=policy.weighted_random,
            prioritize_unpicked=policy.prioritize_unpicked_count,
            rng=rng,
            traces=by_id,
        )

        logger.debug(
            f"Pick for class '{request.class_id}': requested {requested_count}, "
            f"returned {len(winners)}"
        )
        return PickResult(
            winners=winners,
            traces=traces,
            cooldown_excluded_ids=outcome.cooldown_excluded_ids,
            meta=PickMeta(
                engine_version=ENGINE_VERSION,
                policy_snapshot=policy,
                requested_count=requested_count,
                actual_count=len(winners),
                generated_at=request.now or utc_now_iso(),
                fallback_notes=outcome.fallback_notes,
            ),
        )

    def group(self, request: GroupRequest) -> GroupResult:
        """Partition the active candidates of ``request`` into groups.

        Only the status filter applies; cooldown and manual exclusions are
        pick-only constraints. The group count is clamped to at least one and
        surplus groups stay empty.
        """
        rng = request.rng or self._rng
        policy = request.policy
        traces = [SelectionTrace.for_candidate(c) for c in request.candidates]
        by_id = {trace.candidate_id: trace for trace in traces}

        active = filter_by_status(request.candidates, by_id)
        group_count = max(1, request.group_count)

        if policy.group_strategy == "balanced-score":
            pairs = pair_counts(
                recent_records(request.history, request.class_id, policy.pair_avoid_rounds)
            )
            groups = balanced_score_groups(active, group_count, pairs, rng)
        else:
            groups = random_groups(active, group_count, rng)

        return GroupResult(
            groups=groups,
            traces=traces,
            meta=GroupMeta(
                engine_version=ENGINE_VERSION,
                group_count=group_count,
                generated_at=request.now or utc_now_iso(),
            ),
        )


__all__ = ["ENGINE_VERSION", "SelectionEngine"]
